"""Typed failures raised by the board store and query projection."""

from __future__ import annotations

from typing import Any, Optional


class BoardError(Exception):
    """Base class for every rejected board command or query."""

    pass


class UnknownStageError(BoardError, ValueError):
    def __init__(self, stage: Any) -> None:
        self.stage = stage
        super().__init__(f"Unknown stage: {stage!r}")


class ActivityNotFoundError(BoardError, LookupError):
    def __init__(self, activity_id: Any, stage: str) -> None:
        self.activity_id = activity_id
        self.stage = stage
        super().__init__(f"Activity {activity_id} not found in {stage}")


class IndexOutOfRangeError(BoardError, IndexError):
    def __init__(self, stage: str, index: Any, length: int, *, insertion: bool = False) -> None:
        self.stage = stage
        self.index = index
        self.length = length
        upper = length if insertion else length - 1
        super().__init__(f"Index {index} out of range for {stage} (valid: 0..{upper})")


class ActivityValidationError(BoardError, ValueError):
    """Raised when an add/edit payload is missing or has malformed fields."""

    def __init__(self, errors: list[str], activity_id: Optional[Any] = None) -> None:
        self.errors = list(errors)
        self.activity_id = activity_id
        super().__init__("; ".join(self.errors) or "Invalid activity")


class SnapshotError(BoardError, ValueError):
    pass


class QueryError(BoardError, ValueError):
    pass
