"""
Community reviews.

Responsibilities:
- Turn a place name and address into a search context (tokens, locality,
  city, category keywords).
- Search Reddit with several query variations and score every post for
  relevance locally, keeping only posts above a threshold.
- Fall back to neighbourhood-level discussions when nothing mentions the
  specific place.
- Summarize the surviving posts with the LLM.
"""
