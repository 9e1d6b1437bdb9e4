"""In-memory board store with all-or-nothing commands.

The store owns one canonical :class:`Board` snapshot.  Every command goes
through :meth:`BoardStore.transaction`, which hands out a mutable working
copy of the columns and swaps in a freshly built snapshot only when the
command body completes.  A command that raises leaves the previous snapshot
in place, so a failed ``reorder`` can never drop an activity half way.
"""

from __future__ import annotations

from collections import deque
from contextlib import contextmanager
from typing import Any, Callable, Iterator, Mapping, Optional, Union

from loguru import logger

from ..constants import MAX_RECENT_EVENTS, STAGES
from ..utils import _now_iso
from .errors import ActivityNotFoundError, ActivityValidationError, BoardError, IndexOutOfRangeError
from .model import Activity, Board, stage_key

Subscriber = Callable[[str, Board], None]
ActivityPayload = Union[Activity, Mapping[str, Any]]


def _index_of(column: list[Activity], activity_id: Any) -> Optional[int]:
    for idx, activity in enumerate(column):
        if activity.id == activity_id:
            return idx
    return None


def _as_payload(activity: ActivityPayload) -> dict[str, Any]:
    if isinstance(activity, Activity):
        return activity.to_dict()
    if isinstance(activity, Mapping):
        return dict(activity)
    raise ActivityValidationError([f"Expected an activity mapping, got {type(activity).__name__}"])


class _BoardTx:
    """Working copy of the board for a single command.

    Mutations touch plain lists; :meth:`commit` freezes them into a new
    :class:`Board`.
    """

    def __init__(self, board: Board, next_id: int) -> None:
        self.columns: dict[str, list[Activity]] = {s: list(board[s]) for s in STAGES}
        self.next_id = next_id
        self.dirty = False

    def column(self, stage: Any) -> list[Activity]:
        return self.columns[stage_key(stage)]

    def allocate_id(self) -> int:
        nid = self.next_id
        self.next_id += 1
        return nid

    def commit(self) -> Board:
        return Board(self.columns)


class BoardStore:
    """Single-writer owner of the canonical board snapshot.

    Parameters
    ----------
    initial:
        Initial snapshot, either a :class:`Board` or a ``{stage: [...]}``
        mapping accepted by :meth:`Board.from_dict`.  ``None`` starts empty.
    """

    def __init__(
        self,
        initial: Union[Board, Mapping[str, Any], None] = None,
        *,
        max_events: int = MAX_RECENT_EVENTS,
    ) -> None:
        if initial is None:
            board = Board.empty()
        elif isinstance(initial, Board):
            board = initial
        else:
            board = Board.from_dict(initial)
        self._board = board
        self._next_id = max(board.ids(), default=0) + 1
        self._last_added_id: Optional[int] = None
        self._subscribers: list[Subscriber] = []
        self._events: deque[dict[str, Any]] = deque(maxlen=max_events)
        logger.debug("Board store initialised: {}", board)

    # ------------------------------------------------------------------
    # Snapshot access
    # ------------------------------------------------------------------

    @property
    def snapshot(self) -> Board:
        return self._board

    def get(self, activity_id: Any) -> Optional[tuple[str, Activity]]:
        """Return ``(stage, activity)`` for *activity_id* anywhere on the board."""
        found = self._board.locate(activity_id)
        if found is None:
            return None
        stage, idx = found
        return stage, self._board[stage][idx]

    def find_column(self, activity_id: Any) -> Optional[str]:
        found = self._board.locate(activity_id)
        return found[0] if found else None

    # ------------------------------------------------------------------
    # Transactions, events and subscribers
    # ------------------------------------------------------------------

    @contextmanager
    def transaction(self) -> Iterator[_BoardTx]:
        """Yield a working copy and publish it on clean exit if it changed.

        Usage::

            with store.transaction() as tx:
                tx.column("todo").reverse()
                tx.dirty = True
        """
        tx = _BoardTx(self._board, self._next_id)
        yield tx
        if tx.dirty:
            self._board = tx.commit()
            self._next_id = tx.next_id

    @contextmanager
    def _command(self, name: str, **details: Any) -> Iterator[_BoardTx]:
        try:
            with self.transaction() as tx:
                yield tx
        except BoardError as exc:
            logger.warning("Rejected {} {}: {}", name, details, exc)
            raise
        if tx.dirty:
            self._record(name, details)
            logger.debug("Applied {} {} -> {}", name, details, self._board)
            self._notify(name)
        else:
            logger.debug("No-op {} {}", name, details)

    def _record(self, name: str, details: dict[str, Any]) -> None:
        self._events.append({"ts": _now_iso(), "type": name, "details": details})

    def _notify(self, name: str) -> None:
        board = self._board
        for callback in list(self._subscribers):
            try:
                callback(name, board)
            except Exception:
                logger.exception("Board subscriber failed after {}", name)

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Call *callback(command, board)* after every state-changing command.

        Returns a function that removes the subscription.
        """
        self._subscribers.append(callback)

        def _unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return _unsubscribe

    def recent_events(self, limit: int = 100) -> list[dict[str, Any]]:
        if limit < 1:
            return []
        return list(self._events)[-limit:]

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def move(self, activity_id: Any, from_column: Any, to_column: Any) -> Board:
        """Move an activity to the tail of another column.

        Moving within the same column is a no-op, even for unknown ids.
        """
        with self._command("move", activity_id=activity_id, from_column=from_column, to_column=to_column) as tx:
            src = stage_key(from_column)
            dst = stage_key(to_column)
            if src != dst:
                source = tx.column(src)
                idx = _index_of(source, activity_id)
                if idx is None:
                    raise ActivityNotFoundError(activity_id, src)
                tx.column(dst).append(source.pop(idx))
                tx.dirty = True
        return self._board

    def reorder(self, column: Any, from_index: int, to_index: int) -> Board:
        """Move the item at *from_index* to *to_index* within one column."""
        with self._command("reorder", column=column, from_index=from_index, to_index=to_index) as tx:
            items = tx.column(column)
            stage = stage_key(column)
            length = len(items)
            if not isinstance(from_index, int) or isinstance(from_index, bool) or not 0 <= from_index < length:
                raise IndexOutOfRangeError(stage, from_index, length)
            if not isinstance(to_index, int) or isinstance(to_index, bool) or not 0 <= to_index <= length:
                raise IndexOutOfRangeError(stage, to_index, length, insertion=True)
            if from_index != to_index:
                moved = items.pop(from_index)
                items.insert(to_index, moved)
                tx.dirty = True
        return self._board

    def add(self, column: Any, activity: ActivityPayload) -> Board:
        """Append a new activity; the store assigns its id."""
        with self._command("add", column=column) as tx:
            items = tx.column(column)
            payload = _as_payload(activity)
            payload.pop("id", None)
            created = Activity.from_dict(payload, activity_id=tx.next_id)
            tx.allocate_id()
            items.append(created)
            tx.dirty = True
        self._last_added_id = created.id
        return self._board

    def edit(self, column: Any, updated_activity: ActivityPayload) -> Board:
        """Replace the activity with the same id in *column*, keeping its position."""
        with self._command("edit", column=column) as tx:
            items = tx.column(column)
            updated = Activity.from_dict(_as_payload(updated_activity))
            idx = _index_of(items, updated.id)
            if idx is None:
                raise ActivityNotFoundError(updated.id, stage_key(column))
            if items[idx] != updated:
                items[idx] = updated
                tx.dirty = True
        return self._board

    def delete(self, column: Any, activity_id: Any) -> Board:
        """Remove an activity; deleting an absent id is a no-op."""
        with self._command("delete", column=column, activity_id=activity_id) as tx:
            items = tx.column(column)
            idx = _index_of(items, activity_id)
            if idx is not None:
                del items[idx]
                tx.dirty = True
        return self._board

    def last_added(self) -> Optional[Activity]:
        """Return the activity created by the most recent ``add``."""
        if self._last_added_id is None:
            return None
        found = self.get(self._last_added_id)
        return found[1] if found else None
