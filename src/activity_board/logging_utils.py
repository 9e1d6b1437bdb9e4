"""Configure loguru and format board state for readable logs."""

from __future__ import annotations

import json
import sys
from collections.abc import Mapping
from typing import Any

from loguru import logger

from .constants import DEFAULT_LOG_LEVEL, STAGES


def configure_logging(level: str = DEFAULT_LOG_LEVEL) -> None:
    """Configure loguru logger with the specified level."""
    logger.remove()
    logger.add(
        sys.stderr,
        level=level.upper(),
        format=(
            "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
            "<level>{level: <8}</level> | "
            "<cyan>{module}</cyan>:<cyan>{line}</cyan>\n"
            "{message}"
        ),
    )


def summarize_board(board: Any) -> dict[str, Any]:
    """Render a compact, JSON-friendly summary of a board snapshot.

    Args:
        board: A board snapshot or any mapping of stage -> activities (or None).

    Returns:
        A dictionary with per-stage counts and the total, suitable for logging.
    """
    if board is None:
        return {"board": None}
    if not isinstance(board, Mapping):
        return {"board": type(board).__name__}
    counts = {stage: len(board.get(stage) or ()) for stage in STAGES}
    return {"counts": counts, "total": sum(counts.values())}


def pretty(obj: Any, *, indent: int = 2) -> str:
    """Serialize an object as JSON for readable logs.

    Args:
        obj: Object to serialize.
        indent: Indentation level for JSON output.

    Returns:
        A JSON string when possible; otherwise `str(obj)`.
    """
    try:
        return json.dumps(obj, indent=indent, default=str)
    except (TypeError, ValueError):
        return str(obj)
