"""Board API endpoints.

This module provides a FastAPI router exposing the board store commands and
the read-only query projection.  It is mounted under ``/api/board`` by the
main ``create_app`` factory.
"""

from __future__ import annotations

from typing import Any, Callable, Optional

from fastapi import APIRouter, HTTPException, Query
from loguru import logger
from pydantic import BaseModel

from ..board.errors import (
    ActivityNotFoundError,
    ActivityValidationError,
    BoardError,
    IndexOutOfRangeError,
    QueryError,
    UnknownStageError,
)
from ..board.projection import (
    QueryConfig,
    activities_for_assignee,
    column_counts,
    list_assignees,
    project_board,
)
from ..board.model import Stage
from ..board.store import BoardStore


# ---------------------------------------------------------------------------
# Pydantic request / response models
# ---------------------------------------------------------------------------

class ActivityRequest(BaseModel):
    title: Optional[str] = None
    assignee: Optional[str] = None
    priority: Optional[str] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    duration: Optional[str] = None


class MoveRequest(BaseModel):
    activity_id: int
    from_column: str
    to_column: str


class ReorderRequest(BaseModel):
    from_index: int
    to_index: int


class BoardResponse(BaseModel):
    board: dict[str, list[dict[str, Any]]]


class ActivityResponse(BaseModel):
    activity: dict[str, Any]
    board: dict[str, list[dict[str, Any]]]


class ProjectionResponse(BaseModel):
    columns: dict[str, list[dict[str, Any]]]
    counts: dict[str, int]
    query: dict[str, str]


class AssigneeListResponse(BaseModel):
    assignees: list[str]


class AssigneeSpaceResponse(BaseModel):
    assignee: str
    columns: dict[str, list[dict[str, Any]]]
    counts: dict[str, int]


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _status_for(exc: BoardError) -> int:
    if isinstance(exc, ActivityNotFoundError):
        return 404
    if isinstance(exc, UnknownStageError):
        return 400
    if isinstance(exc, (ActivityValidationError, IndexOutOfRangeError, QueryError)):
        return 422
    return 400


def _http_error(exc: BoardError) -> HTTPException:
    if isinstance(exc, ActivityValidationError):
        detail: Any = {"message": str(exc), "errors": exc.errors}
    else:
        detail = str(exc)
    return HTTPException(status_code=_status_for(exc), detail=detail)


def _serialize(columns: dict[str, list[Any]]) -> dict[str, list[dict[str, Any]]]:
    return {stage: [a.to_dict() for a in activities] for stage, activities in columns.items()}


# ---------------------------------------------------------------------------
# Router factory
# ---------------------------------------------------------------------------

def create_board_router(
    get_store: Callable[[], BoardStore],
    get_query_defaults: Optional[Callable[[], QueryConfig]] = None,
) -> APIRouter:
    """Create the board API router.

    Parameters
    ----------
    get_store:
        A callable returning the :class:`BoardStore` that owns the board.
    get_query_defaults:
        Optional callable returning the :class:`QueryConfig` used for query
        parameters the request leaves out.
    """
    router = APIRouter(prefix="/api/board", tags=["board"])

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    @router.get("", response_model=ProjectionResponse)
    async def get_projection(
        search: Optional[str] = Query(None),
        assignee: Optional[str] = Query(None),
        sort_key: Optional[str] = Query(None),
        sort_direction: Optional[str] = Query(None),
    ) -> ProjectionResponse:
        defaults = get_query_defaults() if get_query_defaults else QueryConfig()
        try:
            config = QueryConfig.from_params(
                search=search if search is not None else defaults.search_text,
                assignee=assignee if assignee is not None else defaults.assignee,
                sort_key=sort_key if sort_key is not None else defaults.sort_key,
                sort_direction=sort_direction if sort_direction is not None else defaults.sort_direction,
            )
        except QueryError as e:
            logger.warning("Rejected board query: {}", e)
            raise _http_error(e)
        columns = project_board(get_store().snapshot, config)
        return ProjectionResponse(
            columns=_serialize(columns),
            counts=column_counts(columns),
            query=config.to_dict(),
        )

    @router.get("/snapshot", response_model=BoardResponse)
    async def get_snapshot() -> BoardResponse:
        return BoardResponse(board=get_store().snapshot.to_dict())

    @router.get("/assignees", response_model=AssigneeListResponse)
    async def get_assignees() -> AssigneeListResponse:
        return AssigneeListResponse(assignees=list_assignees(get_store().snapshot))

    @router.get("/assignees/{name}", response_model=AssigneeSpaceResponse)
    async def get_assignee_space(name: str) -> AssigneeSpaceResponse:
        columns = activities_for_assignee(get_store().snapshot, name)
        return AssigneeSpaceResponse(
            assignee=name,
            columns=_serialize(columns),
            counts=column_counts(columns),
        )

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    @router.post("/move", response_model=BoardResponse)
    async def move_activity(body: MoveRequest) -> BoardResponse:
        try:
            board = get_store().move(body.activity_id, body.from_column, body.to_column)
        except BoardError as e:
            raise _http_error(e)
        return BoardResponse(board=board.to_dict())

    @router.post("/{column}/reorder", response_model=BoardResponse)
    async def reorder_column(column: str, body: ReorderRequest) -> BoardResponse:
        try:
            board = get_store().reorder(column, body.from_index, body.to_index)
        except BoardError as e:
            raise _http_error(e)
        return BoardResponse(board=board.to_dict())

    @router.post("/{column}/activities", response_model=ActivityResponse, status_code=201)
    async def add_activity(column: str, body: ActivityRequest) -> ActivityResponse:
        store = get_store()
        payload = {k: v for k, v in body.model_dump().items() if v is not None}
        try:
            board = store.add(column, payload)
        except BoardError as e:
            raise _http_error(e)
        created = store.last_added()
        return ActivityResponse(activity=created.to_dict(), board=board.to_dict())

    @router.put("/{column}/activities/{activity_id}", response_model=ActivityResponse)
    async def edit_activity(column: str, activity_id: int, body: ActivityRequest) -> ActivityResponse:
        store = get_store()
        changes = {k: v for k, v in body.model_dump().items() if v is not None}
        try:
            stage = Stage.coerce(column)
        except UnknownStageError as e:
            raise _http_error(e)
        found = store.get(activity_id)
        if found is None:
            e = ActivityNotFoundError(activity_id, stage.value)
            logger.warning("Rejected edit {}: {}", {"column": column, "activity_id": activity_id}, e)
            raise _http_error(e)
        # Fields left out of the body keep their current values.
        payload: dict[str, Any] = found[1].to_dict()
        payload.update(changes)
        payload["id"] = activity_id
        try:
            board = store.edit(column, payload)
        except BoardError as e:
            raise _http_error(e)
        _, updated = store.get(activity_id)
        return ActivityResponse(activity=updated.to_dict(), board=board.to_dict())

    @router.delete("/{column}/activities/{activity_id}", response_model=BoardResponse)
    async def delete_activity(column: str, activity_id: int) -> BoardResponse:
        try:
            board = get_store().delete(column, activity_id)
        except BoardError as e:
            raise _http_error(e)
        return BoardResponse(board=board.to_dict())

    return router
