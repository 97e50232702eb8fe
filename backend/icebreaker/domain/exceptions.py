"""Domain-level exceptions shared by the position, profile and matching stores."""

from __future__ import annotations


class MatchingError(Exception):
    """Base class for matching core errors."""

    reason: str = "unknown"

    def __init__(self, reason: str | None = None) -> None:
        super().__init__(reason or self.reason)
        if reason:
            self.reason = reason


class InvalidRadius(MatchingError):
    reason = "invalid_radius"

    def __init__(self, radius: float) -> None:
        super().__init__("invalid_radius")
        self.radius = radius

    def __str__(self) -> str:
        return f"invalid_radius: {self.radius!r}"


class UnknownQuestion(MatchingError):
    reason = "unknown_question"

    def __init__(self, question_id: str) -> None:
        super().__init__("unknown_question")
        self.question_id = question_id

    def __str__(self) -> str:
        return f"unknown_question: {self.question_id}"


class InvalidAnswer(MatchingError):
    reason = "invalid_answer"


class NotDiscoverable(MatchingError):
    reason = "not_discoverable"


class UserNotFound(MatchingError):
    reason = "user_not_found"

    def __init__(self, user_id: str) -> None:
        super().__init__("user_not_found")
        self.user_id = user_id

    def __str__(self) -> str:
        return f"user_not_found: {self.user_id}"


class StoreContention(MatchingError):
    """Raised when a per-key lock stays busy past the retry budget."""

    reason = "store_contention"

    def __init__(self, key: object) -> None:
        super().__init__("store_contention")
        self.key = key


__all__ = [
    "MatchingError",
    "InvalidRadius",
    "UnknownQuestion",
    "InvalidAnswer",
    "NotDiscoverable",
    "UserNotFound",
    "StoreContention",
]
