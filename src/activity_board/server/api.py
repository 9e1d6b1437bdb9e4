"""FastAPI web server for the activity board."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger

from ..board.fixtures import demo_board
from ..board.model import Board
from ..board.projection import QueryConfig
from ..board.snapshot import load_snapshot
from ..board.store import BoardStore
from ..config import get_query_defaults, get_snapshot_path, load_board_config
from ..logging_utils import summarize_board
from .board_api import create_board_router


def _initial_board(config: dict, project_dir: Path) -> Board:
    snapshot_path = get_snapshot_path(config, project_dir)
    if snapshot_path is None:
        logger.info("No snapshot configured; starting from the demo board")
        return demo_board()
    return load_snapshot(snapshot_path)


def create_app(
    store: Optional[BoardStore] = None,
    project_dir: Optional[Path] = None,
    enable_cors: bool = True,
) -> FastAPI:
    """Create and configure FastAPI application.

    Args:
        store: Board store to serve. When omitted, one is built from the
            project's configured snapshot, or the demo board.
        project_dir: Directory holding `.activity_board/config.yaml`.
        enable_cors: Whether to enable CORS.

    Returns:
        Configured FastAPI app.
    """
    project_dir = Path(project_dir).resolve() if project_dir else Path.cwd().resolve()
    config, err = load_board_config(project_dir)
    if err:
        logger.warning("Ignoring unreadable board config: {}", err)

    if store is None:
        store = BoardStore(_initial_board(config, project_dir))
    query_defaults: QueryConfig = get_query_defaults(config)

    app = FastAPI(
        title="Activity Board",
        description="Task board with stage moves, reordering and filtered views",
        version="1.0.0",
    )

    if enable_cors:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=["*"],
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    app.state.store = store
    app.state.project_dir = project_dir
    app.state.query_defaults = query_defaults

    store.subscribe(lambda command, board: logger.debug("Board after {}: {}", command, summarize_board(board)))

    def _get_store() -> BoardStore:
        return app.state.store

    def _get_query_defaults() -> QueryConfig:
        return app.state.query_defaults

    app.include_router(create_board_router(_get_store, _get_query_defaults))

    @app.get("/")
    async def root() -> dict[str, str]:
        return {"name": "Activity Board API", "version": "1.0.0"}

    @app.get("/api/health")
    async def health() -> dict[str, object]:
        return {"status": "ok", "activities": app.state.store.snapshot.activity_count}

    @app.get("/api/events")
    async def recent_events(limit: int = 100) -> dict[str, object]:
        return {"events": app.state.store.recent_events(limit)}

    return app
