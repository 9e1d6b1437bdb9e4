"""Read-only filter/sort/search views over a board snapshot.

Nothing here mutates its input.  :func:`project_board` accepts a
:class:`~activity_board.board.model.Board` or any plain mapping of stage ->
sequence of activities (handy in tests), and always returns fresh lists.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable, Optional, Sequence

from ..constants import STAGES
from ..utils import _timestamp, format_search_time
from .errors import QueryError
from .model import Activity, Priority, stage_key


class SortKey(str, Enum):
    NONE = "none"
    DATE = "date"
    PRIORITY = "priority"


class SortDirection(str, Enum):
    ASC = "asc"
    DESC = "desc"


def _coerce_enum(enum_cls: Any, value: Any, label: str) -> Any:
    if value is None or value == "":
        return None
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(str(value).strip().lower())
    except ValueError:
        allowed = [m.value for m in enum_cls]
        raise QueryError(f"Invalid {label} {value!r}; expected one of {allowed}") from None


@dataclass(frozen=True)
class QueryConfig:
    """Display query: search text, assignee filter and sort order.

    ``QueryConfig()`` is the "clear all" configuration.
    """

    search_text: str = ""
    assignee: str = ""
    sort_key: SortKey = SortKey.NONE
    sort_direction: SortDirection = SortDirection.ASC

    def __post_init__(self) -> None:
        key = _coerce_enum(SortKey, self.sort_key, "sort key") or SortKey.NONE
        direction = _coerce_enum(SortDirection, self.sort_direction, "sort direction") or SortDirection.ASC
        object.__setattr__(self, "sort_key", key)
        object.__setattr__(self, "sort_direction", direction)
        object.__setattr__(self, "search_text", self.search_text or "")
        object.__setattr__(self, "assignee", self.assignee or "")

    @classmethod
    def from_params(
        cls,
        search: Optional[str] = None,
        assignee: Optional[str] = None,
        sort_key: Optional[str] = None,
        sort_direction: Optional[str] = None,
    ) -> "QueryConfig":
        """Build a config from loosely typed request/CLI parameters."""
        return cls(
            search_text=search or "",
            assignee=assignee or "",
            sort_key=sort_key or SortKey.NONE,
            sort_direction=sort_direction or SortDirection.ASC,
        )

    @property
    def is_active(self) -> bool:
        return bool(self.search_text or self.assignee or self.sort_key is not SortKey.NONE)

    def to_dict(self) -> dict[str, str]:
        return {
            "search_text": self.search_text,
            "assignee": self.assignee,
            "sort_key": self.sort_key.value,
            "sort_direction": self.sort_direction.value,
        }


def _priority_value(activity: Activity) -> str:
    priority = activity.priority
    return priority.value if isinstance(priority, Priority) else str(priority)


def matches_search(activity: Activity, text: str) -> bool:
    """Case-insensitive substring match on title, assignee, priority or dates."""
    needle = (text or "").lower()
    if not needle:
        return True
    fields = [
        activity.title,
        activity.assignee,
        _priority_value(activity),
        format_search_time(activity.start_date),
        format_search_time(activity.end_date),
    ]
    return any(needle in str(f).lower() for f in fields)


def _sort_value(activity: Activity, key: SortKey) -> Any:
    if key is SortKey.DATE:
        return _timestamp(activity.start_date)
    return Priority(_priority_value(activity)).rank


def project_column(activities: Iterable[Activity], config: QueryConfig) -> list[Activity]:
    """Filter then sort one column according to *config*."""
    items = list(activities)
    if config.search_text:
        items = [a for a in items if matches_search(a, config.search_text)]
    if config.assignee:
        items = [a for a in items if a.assignee == config.assignee]
    if config.sort_key is not SortKey.NONE:
        # sorted() stays stable with reverse=True, so ties keep column order.
        items = sorted(
            items,
            key=lambda a: _sort_value(a, config.sort_key),
            reverse=config.sort_direction is SortDirection.DESC,
        )
    return items


def project_board(
    board: Mapping[Any, Sequence[Activity]],
    config: Optional[QueryConfig] = None,
) -> dict[str, list[Activity]]:
    """Return the projected view of every stage, in display order.

    Stages absent from a plain mapping project to an empty list.
    """
    config = config or QueryConfig()
    columns = {stage_key(k): v for k, v in board.items()}
    return {stage: project_column(columns.get(stage, ()), config) for stage in STAGES}


# ---------------------------------------------------------------------------
# Assignee views
# ---------------------------------------------------------------------------

def list_assignees(board: Mapping[Any, Sequence[Activity]]) -> list[str]:
    """Sorted unique assignee names across every column."""
    names = {a.assignee for activities in board.values() for a in activities if a.assignee}
    return sorted(names)


def activities_for_assignee(
    board: Mapping[Any, Sequence[Activity]],
    name: str,
) -> dict[str, list[Activity]]:
    """Per-stage activities owned by *name* (the "my space" view)."""
    return project_board(board, QueryConfig(assignee=name))


def column_counts(columns: Mapping[Any, Sequence[Any]]) -> dict[str, int]:
    counts = {stage_key(k): len(v) for k, v in columns.items()}
    return {stage: counts.get(stage, 0) for stage in STAGES}
