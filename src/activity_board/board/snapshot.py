"""Load an initial board snapshot from a YAML or JSON file."""

from __future__ import annotations

from pathlib import Path

from loguru import logger

from ..io_utils import _load_data_with_error
from .errors import SnapshotError
from .model import Board


def load_snapshot(path: Path) -> Board:
    """Read ``{stage: [activity, ...]}`` from *path* and build a :class:`Board`.

    Raises:
        SnapshotError: If the file is missing, unreadable, or does not
            describe a complete, valid board.
    """
    path = Path(path)
    if not path.exists():
        raise SnapshotError(f"Snapshot file not found: {path}")
    data, err = _load_data_with_error(path, {})
    if err:
        raise SnapshotError(f"Could not read snapshot: {err}")
    board = Board.from_dict(data)
    logger.info("Loaded board snapshot from {} ({} activities)", path, board.activity_count)
    return board
