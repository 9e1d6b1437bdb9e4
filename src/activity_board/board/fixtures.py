"""Built-in demo board used by the CLI and server when no snapshot is given."""

from __future__ import annotations

from typing import Any

from .model import Board

# (id, title, priority, assignee, start, end)
_SEED: dict[str, list[tuple[int, str, str, str, str, str]]] = {
    "todo": [
        (1, "Create wireframes", "high", "Sarah", "2026-01-12T09:00:00", "2026-01-12T11:00:00"),
        (2, "Team standup meeting", "medium", "John", "2026-01-12T10:00:00", "2026-01-12T10:30:00"),
        (6, "Database schema design", "high", "Mike", "2026-01-12T13:00:00", "2026-01-12T15:00:00"),
        (7, "API documentation", "low", "Lisa", "2026-01-13T09:00:00", "2026-01-13T10:00:00"),
        (8, "User onboarding flow", "medium", "Alex", "2026-01-12T16:00:00", "2026-01-12T17:00:00"),
    ],
    "inProgress": [
        (3, "Build dashboard UI", "high", "Alex", "2026-01-12T11:00:00", "2026-01-12T15:00:00"),
        (9, "Backend API endpoints", "high", "John", "2026-01-12T12:00:00", "2026-01-13T12:00:00"),
        (10, "Mobile responsiveness", "medium", "Sarah", "2026-01-12T14:00:00", "2026-01-12T18:00:00"),
        (11, "Unit tests for auth", "medium", "Mike", "2026-01-12T15:00:00", "2026-01-12T16:30:00"),
    ],
    "review": [
        (4, "Code review PR #234", "medium", "Mike", "2026-01-12T14:00:00", "2026-01-12T14:30:00"),
        (12, "UI component library", "high", "Lisa", "2026-01-11T16:00:00", "2026-01-12T09:00:00"),
        (13, "Database migrations", "low", "John", "2026-01-12T09:30:00", "2026-01-12T10:00:00"),
        (14, "Performance optimization", "medium", "Alex", "2026-01-12T13:30:00", "2026-01-12T14:30:00"),
    ],
    "done": [
        (5, "Daily report", "low", "Sarah", "2026-01-12T08:00:00", "2026-01-12T08:15:00"),
        (15, "Environment setup", "low", "Mike", "2026-01-11T09:00:00", "2026-01-11T09:30:00"),
        (16, "Project kickoff meeting", "medium", "John", "2026-01-11T14:00:00", "2026-01-11T15:00:00"),
        (17, "Initial requirements doc", "high", "Sarah", "2026-01-11T10:00:00", "2026-01-11T12:00:00"),
        (18, "Bug fix #123", "high", "Alex", "2026-01-12T08:30:00", "2026-01-12T09:00:00"),
        (19, "Deployment pipeline", "medium", "Lisa", "2026-01-11T15:30:00", "2026-01-11T17:00:00"),
        (20, "Email templates", "low", "Mike", "2026-01-12T07:30:00", "2026-01-12T08:00:00"),
        (21, "README update", "low", "John", "2026-01-12T07:00:00", "2026-01-12T07:20:00"),
    ],
}


def demo_board_dict() -> dict[str, list[dict[str, Any]]]:
    return {
        stage: [
            {
                "id": aid,
                "title": title,
                "priority": priority,
                "assignee": assignee,
                "start_date": start,
                "end_date": end,
            }
            for aid, title, priority, assignee, start, end in rows
        ]
        for stage, rows in _SEED.items()
    }


def demo_board() -> Board:
    """Return the 21-activity sample board."""
    return Board.from_dict(demo_board_dict())
