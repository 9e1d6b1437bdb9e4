"""Command-line entry point for viewing and serving the activity board."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Optional

from loguru import logger

from .board.errors import BoardError
from .board.fixtures import demo_board
from .board.model import Board
from .board.projection import (
    QueryConfig,
    SortDirection,
    SortKey,
    activities_for_assignee,
    column_counts,
    list_assignees,
    project_board,
)
from .board.snapshot import load_snapshot
from .config import VALID_LOG_LEVELS, get_log_level, get_query_defaults, get_snapshot_path, load_board_config
from .logging_utils import configure_logging
from .render import format_assignees, format_board


def _resolve_project_dir(project_dir: Optional[str]) -> Path:
    return Path(project_dir).expanduser().resolve() if project_dir else Path.cwd().resolve()


def _load_config(args: argparse.Namespace) -> dict:
    config, err = load_board_config(_resolve_project_dir(args.project_dir))
    if err:
        logger.warning("Ignoring unreadable board config: {}", err)
    return config


def _load_board(args: argparse.Namespace, config: dict) -> Board:
    project_dir = _resolve_project_dir(args.project_dir)
    path = Path(args.snapshot).expanduser() if args.snapshot else get_snapshot_path(config, project_dir)
    if path is None:
        return demo_board()
    return load_snapshot(path)


def _columns_json(columns: dict) -> dict:
    return {stage: [a.to_dict() for a in activities] for stage, activities in columns.items()}


def _show(args: argparse.Namespace) -> int:
    config = _load_config(args)
    board = _load_board(args, config)
    defaults = get_query_defaults(config)
    query = QueryConfig.from_params(
        search=args.search if args.search is not None else defaults.search_text,
        assignee=args.assignee if args.assignee is not None else defaults.assignee,
        sort_key=args.sort_key or defaults.sort_key,
        sort_direction=args.sort_direction or defaults.sort_direction,
    )
    columns = project_board(board, query)
    if args.json:
        payload = {"columns": _columns_json(columns), "counts": column_counts(columns), "query": query.to_dict()}
        sys.stdout.write(json.dumps(payload, indent=2) + "\n")
    else:
        sys.stdout.write(format_board(columns))
    return 0


def _assignees(args: argparse.Namespace) -> int:
    board = _load_board(args, _load_config(args))
    names = list_assignees(board)
    if args.json:
        sys.stdout.write(json.dumps({"assignees": names}, indent=2) + "\n")
    else:
        sys.stdout.write(format_assignees(names))
    return 0


def _mine(args: argparse.Namespace) -> int:
    board = _load_board(args, _load_config(args))
    if args.name not in list_assignees(board):
        sys.stderr.write(f"No activities assigned to {args.name}\n")
        return 1
    columns = activities_for_assignee(board, args.name)
    if args.json:
        payload = {"assignee": args.name, "columns": _columns_json(columns), "counts": column_counts(columns)}
        sys.stdout.write(json.dumps(payload, indent=2) + "\n")
    else:
        sys.stdout.write(format_board(columns, heading=f"My Space: {args.name}"))
    return 0


def _server(args: argparse.Namespace) -> int:
    try:
        import uvicorn
    except ImportError:
        sys.stderr.write("Install server extras: pip install 'activity-board[server]'\n")
        return 1
    from .board.store import BoardStore
    from .server import create_app

    project_dir = _resolve_project_dir(args.project_dir)
    store = BoardStore(_load_board(args, _load_config(args)))
    app = create_app(store=store, project_dir=project_dir)
    uvicorn.run(app, host=args.host, port=args.port)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Activity board: view and serve a stage-based task board")
    parser.add_argument("--project-dir", default=None, help="Directory holding .activity_board/config.yaml (default: current working directory)")
    parser.add_argument("--snapshot", default=None, help="YAML/JSON board snapshot to load (default: configured snapshot or the demo board)")
    parser.add_argument("--log-level", default=None, type=str.upper, choices=sorted(VALID_LOG_LEVELS), help="Log level (default: config log_level or INFO)")
    subparsers = parser.add_subparsers(dest="command", required=True)

    show = subparsers.add_parser("show", help="Show the board, optionally filtered and sorted")
    show.add_argument("--search", default=None, help="Case-insensitive text to match")
    show.add_argument("--assignee", default=None, help="Only show activities for this assignee")
    show.add_argument("--sort-key", default=None, choices=[k.value for k in SortKey])
    show.add_argument("--sort-direction", default=None, choices=[d.value for d in SortDirection])
    show.add_argument("--json", action="store_true", help="Emit JSON instead of tables")
    show.set_defaults(func=_show)

    assignees = subparsers.add_parser("assignees", help="List everyone with activities on the board")
    assignees.add_argument("--json", action="store_true")
    assignees.set_defaults(func=_assignees)

    mine = subparsers.add_parser("mine", help="Show one assignee's activities per stage")
    mine.add_argument("name")
    mine.add_argument("--json", action="store_true")
    mine.set_defaults(func=_mine)

    server = subparsers.add_parser("server", help="Serve the board HTTP API")
    server.add_argument("--host", default="127.0.0.1")
    server.add_argument("--port", type=int, default=8000)
    server.set_defaults(func=_server)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    level = args.log_level or get_log_level(_load_config(args))
    configure_logging(level)
    handler = getattr(args, "func", None)
    if handler is None:
        parser.print_help()
        return 1
    try:
        return int(handler(args) or 0)
    except BoardError as exc:
        sys.stderr.write(f"Error: {exc}\n")
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
