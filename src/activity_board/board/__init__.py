"""Board state engine: snapshot model, command store and query projection."""

from .errors import (
    ActivityNotFoundError,
    ActivityValidationError,
    BoardError,
    IndexOutOfRangeError,
    QueryError,
    SnapshotError,
    UnknownStageError,
)
from .fixtures import demo_board
from .model import Activity, Board, Priority, Stage, from_legacy_activity
from .projection import (
    QueryConfig,
    SortDirection,
    SortKey,
    activities_for_assignee,
    column_counts,
    list_assignees,
    matches_search,
    project_board,
    project_column,
)
from .snapshot import load_snapshot
from .store import BoardStore

__all__ = [
    "Activity",
    "ActivityNotFoundError",
    "ActivityValidationError",
    "Board",
    "BoardError",
    "BoardStore",
    "IndexOutOfRangeError",
    "Priority",
    "QueryConfig",
    "QueryError",
    "SnapshotError",
    "SortDirection",
    "SortKey",
    "Stage",
    "UnknownStageError",
    "activities_for_assignee",
    "column_counts",
    "demo_board",
    "from_legacy_activity",
    "list_assignees",
    "load_snapshot",
    "matches_search",
    "project_board",
    "project_column",
]
