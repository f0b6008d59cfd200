from __future__ import annotations


class ModerationError(Exception):
    """Base class for moderation failures the API maps to HTTP errors."""


class MessNotFound(ModerationError):
    def __init__(self, mess_id: str) -> None:
        super().__init__(f"Mess not found: {mess_id}")
        self.mess_id = mess_id


class AIServiceUnavailable(ModerationError):
    """No LLM credentials are configured."""


class AIReviewFailed(ModerationError):
    """The LLM call itself failed."""
