"""Event API routes, including the per-event season listing."""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.season_status import SeasonStatus
from app.models.seasons import EventCreate, EventRead, SeasonRead
from app.routes.helpers import error_response, pagination_dict, success_response
from app.services.admin_event_service import (
    EventNotFoundError,
    create_event as svc_create_event,
    delete_event as svc_delete_event,
    get_event,
    list_events,
)
from app.services.admin_season_service import list_seasons
from app.services.media_storage import MediaStorage, get_media_storage
from app.utils.db_async import get_session

router = APIRouter(prefix="/api/events", tags=["events"])

EVENT_NOT_FOUND = "Event not found"


@router.get("")
async def list_all_events(db: AsyncSession = Depends(get_session)) -> JSONResponse:
    events = await list_events(db)
    return success_response([EventRead.model_validate(event) for event in events])


@router.post("")
async def create_event(
    event_data: EventCreate,
    db: AsyncSession = Depends(get_session),
) -> JSONResponse:
    """Create an event."""
    if not event_data.name.strip():
        return error_response(
            "Validation failed",
            status_code=400,
            issues=[{"path": "name", "message": "Event name is required"}],
        )

    async with db.begin():
        event = await svc_create_event(db, event_data)
    return success_response(EventRead.model_validate(event), status_code=201)


@router.get("/{event_id}")
async def get_event_by_id(
    event_id: int,
    db: AsyncSession = Depends(get_session),
) -> JSONResponse:
    try:
        event = await get_event(db, event_id)
    except EventNotFoundError:
        return error_response(EVENT_NOT_FOUND, status_code=404)
    return success_response(EventRead.model_validate(event))


@router.delete("/{event_id}")
async def delete_event(
    event_id: int,
    db: AsyncSession = Depends(get_session),
    storage: MediaStorage = Depends(get_media_storage),
) -> JSONResponse:
    """Delete an event and all of its seasons."""
    try:
        async with db.begin():
            event = await get_event(db, event_id)
            orphans = await svc_delete_event(db, event)
    except EventNotFoundError:
        return error_response(EVENT_NOT_FOUND, status_code=404)

    storage.delete_many(orphans)
    return success_response(message="Event deleted successfully")


@router.get("/{event_id}/seasons")
async def list_event_seasons(
    event_id: int,
    status: Optional[SeasonStatus] = Query(default=None),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=50, ge=1, le=100),
    db: AsyncSession = Depends(get_session),
) -> JSONResponse:
    """Seasons of one event, newest year first."""
    try:
        await get_event(db, event_id)
    except EventNotFoundError:
        return error_response(EVENT_NOT_FOUND, status_code=404)

    result = await list_seasons(db, event_id=event_id, status=status, page=page, limit=limit)
    return success_response(
        [SeasonRead.model_validate(season) for season in result.seasons],
        pagination=pagination_dict(result.page, result.limit, result.total, result.pages),
    )
