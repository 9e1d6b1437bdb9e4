"""Activity and board snapshot model.

The board is a fixed set of four stages (``todo``, ``inProgress``, ``review``,
``done``), each holding an ordered tuple of :class:`Activity` objects.  Both
activities and boards are immutable: every store command builds a new
:class:`Board` and leaves older snapshots intact, so readers never observe a
half-applied mutation.

Payloads from the outside world (fixtures, HTTP bodies, YAML files) come in
as plain dicts.  :meth:`Activity.from_dict` accepts both ``start_date`` and
the camelCase ``startDate`` spelling, and
:func:`from_legacy_activity` migrates the older ``time``/``duration`` shape.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import Any, Iterable, Iterator, Optional

from ..constants import DEFAULT_PRIORITY, PRIORITY_RANKS, STAGE_TITLES, STAGES
from ..utils import _parse_iso
from .errors import ActivityValidationError, SnapshotError, UnknownStageError


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class Stage(str, Enum):
    """Board column identifiers, in display order."""

    TODO = "todo"
    IN_PROGRESS = "inProgress"
    REVIEW = "review"
    DONE = "done"

    @property
    def title(self) -> str:
        return STAGE_TITLES[self.value]

    @classmethod
    def coerce(cls, value: Any) -> "Stage":
        """Return the stage for *value* or raise :class:`UnknownStageError`."""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except (ValueError, TypeError):
            raise UnknownStageError(value) from None


class Priority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @property
    def rank(self) -> int:
        return PRIORITY_RANKS[self.value]


def stage_key(value: Any) -> str:
    """Normalize a stage reference to its plain string key."""
    return Stage.coerce(value).value


# ---------------------------------------------------------------------------
# Activity
# ---------------------------------------------------------------------------

_ALIASES = {
    "start_date": ("start_date", "startDate"),
    "end_date": ("end_date", "endDate"),
}


def _pick(data: Mapping[str, Any], key: str) -> Any:
    for name in _ALIASES.get(key, (key,)):
        if name in data:
            return data[name]
    return None


def _blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


@dataclass(frozen=True)
class Activity:
    """A single unit of work on the board."""

    id: int
    title: str
    assignee: str
    start_date: datetime
    end_date: datetime
    priority: Priority = Priority.MEDIUM
    # Free-text annotation such as "45 min"; independent of the dates.
    duration: Optional[str] = None

    def __post_init__(self) -> None:
        for name in ("start_date", "end_date"):
            value = getattr(self, name)
            if isinstance(value, datetime) and value.tzinfo is None:
                object.__setattr__(self, name, _parse_iso(value))
        if not isinstance(self.priority, Priority):
            object.__setattr__(self, "priority", Priority(self.priority))

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    @classmethod
    def validate_dict(cls, data: Mapping[str, Any], *, require_id: bool = False) -> list[str]:
        """Check an activity payload and return a list of error strings.

        An empty list means the payload can be turned into an
        :class:`Activity`.
        """
        errors: list[str] = []
        if not isinstance(data, Mapping):
            return ["Expected a mapping"]
        raw_id = data.get("id")
        if require_id and raw_id is None:
            errors.append("'id' is required")
        elif raw_id is not None and _coerce_id(raw_id) is None:
            errors.append(f"'id' must be an integer, got {raw_id!r}")
        for key in ("title", "assignee"):
            value = data.get(key)
            if _blank(value):
                errors.append(f"'{key}' is required and must be non-empty")
            elif not isinstance(value, str):
                errors.append(f"'{key}' must be a string")
        for key in ("start_date", "end_date"):
            value = _pick(data, key)
            if _blank(value):
                errors.append(f"'{key}' is required")
            elif _parse_iso(value) is None:
                errors.append(f"'{key}' must be an ISO-8601 timestamp, got {value!r}")
        priority = data.get("priority")
        if priority is not None and priority not in [p.value for p in Priority]:
            errors.append(
                f"'priority' must be one of {sorted(p.value for p in Priority)}, got {priority!r}"
            )
        duration = data.get("duration")
        if duration is not None and not isinstance(duration, str):
            errors.append("'duration' must be a string")
        return errors

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "priority": self.priority.value,
            "assignee": self.assignee,
            "start_date": self.start_date.isoformat(),
            "end_date": self.end_date.isoformat(),
            "duration": self.duration,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], *, activity_id: Optional[int] = None) -> "Activity":
        """Build an activity from a payload, raising on invalid input.

        When *activity_id* is given it wins over any ``id`` in the payload;
        the store uses this to assign fresh ids on ``add``.
        """
        errors = cls.validate_dict(data, require_id=activity_id is None)
        if errors:
            raise ActivityValidationError(errors, activity_id=data.get("id") if isinstance(data, Mapping) else None)
        duration = data.get("duration")
        return cls(
            id=activity_id if activity_id is not None else _coerce_id(data["id"]),
            title=str(data["title"]).strip(),
            assignee=str(data["assignee"]).strip(),
            start_date=_parse_iso(_pick(data, "start_date")),
            end_date=_parse_iso(_pick(data, "end_date")),
            priority=Priority(data.get("priority") or DEFAULT_PRIORITY),
            duration=duration if duration else None,
        )

    def with_changes(self, **changes: Any) -> "Activity":
        return replace(self, **changes)


def _coerce_id(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return None
    return None


def from_legacy_activity(data: Mapping[str, Any]) -> dict[str, Any]:
    """Convert the older ``time``/``duration`` card shape to the canonical one.

    Intermediate revisions of the board stored a single ``time`` instead of a
    start/end pair.  The single point becomes both ``start_date`` and
    ``end_date``; ``duration`` is kept as the free-text annotation.  Payloads
    already in the canonical shape are returned unchanged (as a copy).
    """
    d = dict(data)
    if "time" not in d:
        return d
    time_value = d.pop("time")
    if _pick(d, "start_date") is None:
        d["start_date"] = time_value
    if _pick(d, "end_date") is None:
        d["end_date"] = time_value
    return d


# ---------------------------------------------------------------------------
# Board snapshot
# ---------------------------------------------------------------------------

@dataclass(frozen=True, eq=False)
class Board(Mapping):
    """Immutable mapping of stage key -> ordered tuple of activities.

    Lookups accept either the plain string key or a :class:`Stage`.  Every
    stage is always present; iteration follows display order.
    """

    _columns: dict[str, tuple[Activity, ...]] = field(default_factory=dict, repr=False)

    def __post_init__(self) -> None:
        columns: dict[str, tuple[Activity, ...]] = {}
        for key, activities in self._columns.items():
            columns[stage_key(key)] = tuple(activities)
        missing = [s for s in STAGES if s not in columns]
        if missing:
            raise SnapshotError(f"Board snapshot is missing stages: {missing}")
        seen: set[int] = set()
        for stage in STAGES:
            for activity in columns[stage]:
                if activity.id in seen:
                    raise SnapshotError(f"Duplicate activity id {activity.id} on board")
                seen.add(activity.id)
        object.__setattr__(self, "_columns", {s: columns[s] for s in STAGES})

    # -- Mapping protocol ---------------------------------------------------

    def __getitem__(self, stage: Any) -> tuple[Activity, ...]:
        return self._columns[stage_key(stage)]

    def __iter__(self) -> Iterator[str]:
        return iter(STAGES)

    def __len__(self) -> int:
        return len(STAGES)

    def __contains__(self, stage: object) -> bool:
        try:
            return stage_key(stage) in self._columns
        except UnknownStageError:
            return False

    def get(self, stage: Any, default: Any = None) -> Any:
        return self[stage] if stage in self else default

    def __repr__(self) -> str:
        counts = ", ".join(f"{s}={len(self._columns[s])}" for s in STAGES)
        return f"Board({counts})"

    # -- construction -------------------------------------------------------

    @classmethod
    def empty(cls) -> "Board":
        return cls({s: () for s in STAGES})

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Board":
        """Build a board from ``{stage: [activity dict, ...]}``.

        Every stage must be present.  Activities may use the legacy
        ``time`` shape; they are migrated on the way in.
        """
        if not isinstance(data, Mapping):
            raise SnapshotError("Board snapshot must be a mapping of stage -> activities")
        columns: dict[str, list[Activity]] = {}
        for key, raw_activities in data.items():
            try:
                stage = stage_key(key)
            except UnknownStageError as exc:
                raise SnapshotError(f"Board snapshot has an unknown stage: {key!r}") from exc
            if raw_activities is None:
                raw_activities = []
            if not isinstance(raw_activities, (list, tuple)):
                raise SnapshotError(f"Stage {stage} must hold a list of activities")
            items: list[Activity] = []
            for raw in raw_activities:
                if isinstance(raw, Activity):
                    items.append(raw)
                    continue
                try:
                    items.append(Activity.from_dict(from_legacy_activity(raw)))
                except ActivityValidationError as exc:
                    raise SnapshotError(f"Invalid activity in {stage}: {exc}") from exc
            columns[stage] = items
        return cls(columns)

    def to_dict(self) -> dict[str, list[dict[str, Any]]]:
        return {s: [a.to_dict() for a in self._columns[s]] for s in STAGES}

    def with_columns(self, changes: Mapping[str, Iterable[Activity]]) -> "Board":
        """Return a new board with the given columns replaced."""
        columns = dict(self._columns)
        for key, activities in changes.items():
            columns[stage_key(key)] = tuple(activities)
        return Board(columns)

    # -- queries ------------------------------------------------------------

    def all_activities(self) -> list[Activity]:
        return [a for s in STAGES for a in self._columns[s]]

    def ids(self) -> list[int]:
        return [a.id for a in self.all_activities()]

    @property
    def activity_count(self) -> int:
        return sum(len(col) for col in self._columns.values())

    def locate(self, activity_id: int) -> Optional[tuple[str, int]]:
        """Return ``(stage, index)`` of *activity_id*, or None."""
        for stage in STAGES:
            for idx, activity in enumerate(self._columns[stage]):
                if activity.id == activity_id:
                    return stage, idx
        return None
