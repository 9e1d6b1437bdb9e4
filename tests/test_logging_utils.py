"""Tests for logging_utils module."""

from __future__ import annotations

import json
from datetime import datetime, timezone

from loguru import logger

from activity_board.board.fixtures import demo_board
from activity_board.board.model import Board
from activity_board.logging_utils import configure_logging, pretty, summarize_board


class TestSummarizeBoard:
    def test_none(self):
        assert summarize_board(None) == {"board": None}

    def test_demo_board(self):
        result = summarize_board(demo_board())
        assert result["counts"] == {"todo": 5, "inProgress": 4, "review": 4, "done": 8}
        assert result["total"] == 21

    def test_empty_board(self):
        assert summarize_board(Board.empty())["total"] == 0

    def test_plain_mapping_with_missing_stages(self):
        result = summarize_board({"todo": [1, 2]})
        assert result["counts"]["todo"] == 2
        assert result["counts"]["done"] == 0

    def test_non_mapping(self):
        assert summarize_board(["todo"]) == {"board": "list"}

    def test_is_json_serializable(self):
        json.dumps(summarize_board(demo_board()))


class TestPretty:
    def test_dict(self):
        assert pretty({"a": 1}) == '{\n  "a": 1\n}'

    def test_falls_back_to_str_for_unknown_types(self):
        stamp = datetime(2026, 1, 12, 9, 0, tzinfo=timezone.utc)
        assert "2026-01-12 09:00:00+00:00" in pretty({"at": stamp})

    def test_custom_indent(self):
        assert pretty([1], indent=0) == "[\n1\n]"


class TestConfigureLogging:
    def test_level_applies(self, capsys):
        configure_logging("warning")
        logger.info("hidden message")
        logger.warning("visible message")
        err = capsys.readouterr().err
        assert "visible message" in err
        assert "hidden message" not in err
        logger.remove()
