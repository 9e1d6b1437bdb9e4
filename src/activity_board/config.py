"""Load optional board configuration from `.activity_board/config.yaml`."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Optional

from loguru import logger

from .board.errors import QueryError
from .board.projection import QueryConfig
from .constants import (
    CONFIG_FILE,
    CONFIG_FILE_JSON,
    DEFAULT_LOG_LEVEL,
    LOG_LEVEL_ENV_VAR,
    STATE_DIR_NAME,
)
from .io_utils import _load_data_with_error

VALID_LOG_LEVELS = {"TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"}


def _config_path(project_dir: Path) -> Path:
    state_dir = project_dir / STATE_DIR_NAME
    yaml_path = state_dir / CONFIG_FILE
    if yaml_path.exists():
        return yaml_path
    return state_dir / CONFIG_FILE_JSON


def load_board_config(project_dir: Path) -> tuple[dict[str, Any], str | None]:
    """Load the optional board config file.

    Args:
        project_dir: Directory holding the `.activity_board` folder.

    Returns:
        A tuple of `(config, error_message)`. If the file is missing, returns `({}, None)`.
    """
    project_dir = Path(project_dir).resolve()
    path = _config_path(project_dir)
    if not path.exists():
        return {}, None
    data, err = _load_data_with_error(path, {})
    if err:
        return {}, err
    return data, None


def _get_nested(config: dict[str, Any], *keys: str) -> Any:
    cur: Any = config
    for key in keys:
        if not isinstance(cur, dict):
            return None
        cur = cur.get(key)
    return cur


def get_log_level(config: dict[str, Any]) -> str:
    """Resolve the log level.

    The `ACTIVITY_BOARD_LOG_LEVEL` environment variable wins over the config
    file's `log_level`. Unknown values fall back to `INFO`.
    """
    for raw in (os.environ.get(LOG_LEVEL_ENV_VAR), config.get("log_level")):
        if isinstance(raw, str) and raw.strip():
            level = raw.strip().upper()
            if level in VALID_LOG_LEVELS:
                return level
            logger.warning("Ignoring unknown log level {!r}", raw)
    return DEFAULT_LOG_LEVEL


def get_snapshot_path(config: dict[str, Any], project_dir: Path) -> Optional[Path]:
    """Return the configured snapshot file, resolved against *project_dir*."""
    raw = config.get("snapshot")
    if not isinstance(raw, str) or not raw.strip():
        return None
    path = Path(raw.strip())
    if not path.is_absolute():
        path = Path(project_dir) / path
    return path


def get_query_defaults(config: dict[str, Any]) -> QueryConfig:
    """Extract the default display query from the `query` block.

    Invalid sort settings are dropped with a warning rather than failing
    startup.
    """
    raw = _get_nested(config, "query")
    if not isinstance(raw, dict):
        return QueryConfig()
    search = raw.get("search") if isinstance(raw.get("search"), str) else ""
    assignee = raw.get("assignee") if isinstance(raw.get("assignee"), str) else ""
    try:
        return QueryConfig.from_params(
            search=search,
            assignee=assignee,
            sort_key=raw.get("sort_key"),
            sort_direction=raw.get("sort_direction"),
        )
    except QueryError as exc:
        logger.warning("Ignoring invalid query sort settings in config: {}", exc)
        return QueryConfig(search_text=search, assignee=assignee)
