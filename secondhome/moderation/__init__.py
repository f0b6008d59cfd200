"""
Admin moderation of pending mess listings.

The AI review only suggests a decision; approving or rejecting is always
an explicit admin action.
"""
