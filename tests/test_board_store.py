"""Tests for the board store commands (board/store.py)."""

from __future__ import annotations

from collections import Counter
from typing import Any

import pytest
from loguru import logger

from activity_board.board.errors import (
    ActivityNotFoundError,
    ActivityValidationError,
    IndexOutOfRangeError,
    UnknownStageError,
)
from activity_board.board.fixtures import demo_board
from activity_board.board.model import Activity, Board
from activity_board.board.store import BoardStore


def _activity(aid: int, title: str, priority: str = "medium", assignee: str = "Sarah") -> dict[str, Any]:
    return {
        "id": aid,
        "title": title,
        "priority": priority,
        "assignee": assignee,
        "start_date": "2026-01-12T09:00:00",
        "end_date": "2026-01-12T10:00:00",
    }


def _new(title: str = "New card", **overrides: Any) -> dict[str, Any]:
    data = _activity(0, title)
    del data["id"]
    data.update(overrides)
    return data


def _ids(board: Board, stage: str) -> list[int]:
    return [a.id for a in board[stage]]


@pytest.fixture
def store() -> BoardStore:
    return BoardStore({
        "todo": [_activity(1, "A"), _activity(2, "B"), _activity(3, "C")],
        "inProgress": [],
        "review": [_activity(4, "D")],
        "done": [],
    })


@pytest.fixture
def rejections() -> list[str]:
    messages: list[str] = []
    handler_id = logger.add(lambda m: messages.append(str(m)), level="WARNING", format="{message}")
    yield messages
    logger.remove(handler_id)


def _id_counts(board: Board) -> Counter:
    return Counter(board.ids())


class TestConstruction:
    def test_empty_store(self) -> None:
        s = BoardStore()
        assert s.snapshot.activity_count == 0
        s.add("todo", _new())
        assert _ids(s.snapshot, "todo") == [1]

    def test_accepts_board_instance(self, store: BoardStore) -> None:
        copy = BoardStore(store.snapshot)
        assert copy.snapshot is store.snapshot

    def test_get_and_find_column(self, store: BoardStore) -> None:
        stage, activity = store.get(4)
        assert stage == "review"
        assert activity.title == "D"
        assert store.find_column(2) == "todo"
        assert store.get(99) is None
        assert store.find_column(99) is None


class TestMove:
    def test_move_to_empty_column(self, store: BoardStore) -> None:
        board = store.move(1, "todo", "inProgress")
        assert _ids(board, "todo") == [2, 3]
        assert _ids(board, "inProgress") == [1]
        assert board is store.snapshot

    def test_move_appends_to_tail(self, store: BoardStore) -> None:
        board = store.move(2, "todo", "review")
        assert _ids(board, "review") == [4, 2]

    def test_same_column_is_noop(self, store: BoardStore) -> None:
        before = store.snapshot
        assert store.move(2, "todo", "todo") is before
        assert store.move(999, "todo", "todo") is before
        assert store.recent_events() == []

    def test_missing_id_raises(self, store: BoardStore, rejections: list[str]) -> None:
        before = store.snapshot
        with pytest.raises(ActivityNotFoundError):
            store.move(4, "todo", "done")
        assert store.snapshot is before
        assert any("Rejected move" in m for m in rejections)

    def test_unknown_stage_raises(self, store: BoardStore) -> None:
        with pytest.raises(UnknownStageError):
            store.move(1, "todo", "blocked")
        with pytest.raises(UnknownStageError):
            store.move(1, "blocked", "blocked")

    def test_move_keeps_id_exclusive(self, store: BoardStore) -> None:
        board = store.move(3, "todo", "done")
        assert [s for s in board if 3 in _ids(board, s)] == ["done"]


class TestReorder:
    def test_forward(self, store: BoardStore) -> None:
        assert _ids(store.reorder("todo", 0, 2), "todo") == [2, 3, 1]

    def test_backward(self, store: BoardStore) -> None:
        assert _ids(store.reorder("todo", 2, 0), "todo") == [3, 1, 2]

    def test_to_length_inserts_at_tail(self, store: BoardStore) -> None:
        assert _ids(store.reorder("todo", 0, 3), "todo") == [2, 3, 1]

    def test_same_index_is_noop(self, store: BoardStore) -> None:
        before = store.snapshot
        assert store.reorder("todo", 1, 1) is before

    @pytest.mark.parametrize("from_index,to_index", [(3, 0), (-1, 0), (0, 4), (0, -1)])
    def test_out_of_range(self, store: BoardStore, from_index: int, to_index: int) -> None:
        before = store.snapshot
        with pytest.raises(IndexOutOfRangeError):
            store.reorder("todo", from_index, to_index)
        assert store.snapshot is before
        assert _ids(store.snapshot, "todo") == [1, 2, 3]

    def test_empty_column(self, store: BoardStore) -> None:
        with pytest.raises(IndexOutOfRangeError):
            store.reorder("done", 0, 0)

    def test_preserves_membership(self, store: BoardStore) -> None:
        board = store.reorder("todo", 2, 1)
        assert sorted(_ids(board, "todo")) == [1, 2, 3]


class TestAdd:
    def test_last_added_is_none_before_any_add(self, store: BoardStore) -> None:
        assert store.last_added() is None
        with pytest.raises(ActivityValidationError):
            store.add("todo", _new(""))
        assert store.last_added() is None

    def test_last_added_ignores_seed_activities(self) -> None:
        seeded = BoardStore(demo_board())
        assert seeded.last_added() is None
        seeded.add("done", _new("Retro"))
        assert seeded.last_added().id == 22

    def test_assigns_fresh_id(self, store: BoardStore) -> None:
        board = store.add("todo", _new("Write tests"))
        assert _ids(board, "todo") == [1, 2, 3, 5]
        added = store.last_added()
        assert added.id == 5
        assert added.title == "Write tests"

    def test_caller_id_ignored(self, store: BoardStore) -> None:
        store.add("review", dict(_new(), id=1))
        assert _ids(store.snapshot, "review") == [4, 5]
        assert _ids(store.snapshot, "todo") == [1, 2, 3]

    def test_ids_not_reused_after_delete(self, store: BoardStore) -> None:
        store.add("done", _new())
        store.delete("done", 5)
        store.add("done", _new())
        assert _ids(store.snapshot, "done") == [6]

    def test_empty_title_rejected(self, store: BoardStore) -> None:
        before = store.snapshot
        with pytest.raises(ActivityValidationError) as exc_info:
            store.add("todo", _new(""))
        assert "'title' is required and must be non-empty" in exc_info.value.errors
        assert store.snapshot is before

    def test_rejection_does_not_consume_id(self, store: BoardStore) -> None:
        with pytest.raises(ActivityValidationError):
            store.add("todo", _new(assignee=""))
        store.add("todo", _new())
        assert store.last_added().id == 5

    def test_priority_defaults(self, store: BoardStore) -> None:
        payload = _new()
        del payload["priority"]
        store.add("todo", payload)
        assert store.last_added().priority.value == "medium"

    def test_accepts_activity_instance(self, store: BoardStore) -> None:
        template = Activity.from_dict(_activity(77, "From object"))
        store.add("inProgress", template)
        assert _ids(store.snapshot, "inProgress") == [5]

    def test_non_mapping_rejected(self, store: BoardStore) -> None:
        with pytest.raises(ActivityValidationError):
            store.add("todo", ["not", "a", "mapping"])


class TestEdit:
    def test_replaces_in_place(self, store: BoardStore) -> None:
        board = store.edit("todo", _activity(2, "B renamed", priority="high"))
        assert _ids(board, "todo") == [1, 2, 3]
        assert board["todo"][1].title == "B renamed"
        assert board["todo"][1].priority.value == "high"

    def test_unchanged_payload_is_noop(self, store: BoardStore) -> None:
        before = store.snapshot
        assert store.edit("todo", before["todo"][0]) is before

    def test_wrong_column_raises(self, store: BoardStore) -> None:
        with pytest.raises(ActivityNotFoundError):
            store.edit("review", _activity(2, "B"))

    def test_malformed_id_is_validation_error(self, store: BoardStore) -> None:
        before = store.snapshot
        with pytest.raises(ActivityValidationError):
            store.edit("todo", dict(_activity(1, "A"), id="--5"))
        assert store.snapshot is before

    def test_missing_id_is_validation_error(self, store: BoardStore) -> None:
        with pytest.raises(ActivityValidationError):
            store.edit("todo", _new())

    def test_blank_assignee_rejected(self, store: BoardStore) -> None:
        payload = _activity(1, "A")
        payload["assignee"] = " "
        with pytest.raises(ActivityValidationError):
            store.edit("todo", payload)

    def test_with_changes(self, store: BoardStore) -> None:
        current = store.snapshot["review"][0]
        store.edit("review", current.with_changes(duration="2h"))
        assert store.snapshot["review"][0].duration == "2h"


class TestDelete:
    def test_removes(self, store: BoardStore) -> None:
        assert _ids(store.delete("todo", 2), "todo") == [1, 3]

    def test_absent_id_is_noop(self, store: BoardStore) -> None:
        before = store.snapshot
        assert store.delete("todo", 999) is before
        assert store.delete("todo", 4) is before

    def test_unknown_column_raises(self, store: BoardStore) -> None:
        with pytest.raises(UnknownStageError):
            store.delete("archive", 1)


class TestInvariants:
    def test_conservation_across_commands(self, store: BoardStore) -> None:
        start = _id_counts(store.snapshot)
        store.move(1, "todo", "done")
        store.reorder("todo", 0, 2)
        store.edit("review", _activity(4, "D2"))
        assert _id_counts(store.snapshot) == start
        store.add("todo", _new())
        assert sum(_id_counts(store.snapshot).values()) == sum(start.values()) + 1
        store.delete("todo", 5)
        assert _id_counts(store.snapshot) == start

    def test_ids_unique_board_wide(self, store: BoardStore) -> None:
        store.move(1, "todo", "review")
        store.move(1, "review", "done")
        store.add("done", _new())
        ids = store.snapshot.ids()
        assert len(ids) == len(set(ids))

    def test_old_snapshots_are_untouched(self, store: BoardStore) -> None:
        before = store.snapshot
        store.move(1, "todo", "done")
        store.delete("review", 4)
        assert _ids(before, "todo") == [1, 2, 3]
        assert _ids(before, "review") == [4]


class TestTransaction:
    def test_clean_commit(self, store: BoardStore) -> None:
        with store.transaction() as tx:
            tx.column("todo").reverse()
            tx.dirty = True
        assert _ids(store.snapshot, "todo") == [3, 2, 1]

    def test_error_discards_working_copy(self, store: BoardStore) -> None:
        before = store.snapshot
        with pytest.raises(RuntimeError):
            with store.transaction() as tx:
                tx.column("todo").clear()
                tx.dirty = True
                raise RuntimeError("boom")
        assert store.snapshot is before


class TestSubscribersAndEvents:
    def test_subscriber_notified(self, store: BoardStore) -> None:
        seen: list[tuple[str, Board]] = []
        unsubscribe = store.subscribe(lambda name, board: seen.append((name, board)))
        board = store.move(1, "todo", "done")
        assert seen == [("move", board)]
        unsubscribe()
        store.delete("done", 1)
        assert len(seen) == 1

    def test_noop_does_not_notify(self, store: BoardStore) -> None:
        seen: list[str] = []
        store.subscribe(lambda name, board: seen.append(name))
        store.delete("todo", 999)
        store.move(1, "todo", "todo")
        assert seen == []

    def test_failing_subscriber_does_not_abort(self, store: BoardStore) -> None:
        def _boom(name: str, board: Board) -> None:
            raise RuntimeError("subscriber broke")

        store.subscribe(_boom)
        board = store.move(1, "todo", "done")
        assert _ids(board, "done") == [1]
        assert store.snapshot is board

    def test_recent_events(self, store: BoardStore) -> None:
        store.move(1, "todo", "done")
        store.add("todo", _new())
        events = store.recent_events()
        assert [e["type"] for e in events] == ["move", "add"]
        assert events[0]["details"]["activity_id"] == 1
        assert store.recent_events(limit=1)[0]["type"] == "add"
        assert store.recent_events(limit=0) == []

    def test_event_history_is_bounded(self) -> None:
        s = BoardStore(max_events=3)
        for _ in range(5):
            s.add("todo", _new())
        assert len(s.recent_events()) == 3
