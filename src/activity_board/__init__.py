"""Provide the public `activity_board` package exports."""

from __future__ import annotations

from .board import (
    Activity,
    Board,
    BoardError,
    BoardStore,
    QueryConfig,
    Stage,
    demo_board,
    project_board,
)
from .server import create_app

__all__ = [
    "Activity",
    "Board",
    "BoardError",
    "BoardStore",
    "QueryConfig",
    "Stage",
    "create_app",
    "demo_board",
    "project_board",
]
