"""Season API routes.

Create and update accept multipart bodies (text fields plus image files) so
the admin wizard can send media alongside the season fields.
"""

from typing import Literal, Optional

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.season_status import SeasonStatus
from app.models.seasons import SeasonRead
from app.routes.helpers import (
    error_response,
    pagination_dict,
    success_response,
    validation_error_response,
)
from app.services.admin_event_service import EventNotFoundError
from app.services.admin_season_service import (
    SORTABLE_FIELDS,
    DuplicateSeasonError,
    SeasonNotFoundError,
    SeasonValidationError,
    UploadRejectedError,
    create_season as svc_create_season,
    delete_season as svc_delete_season,
    get_season,
    get_season_detail,
    list_seasons,
    list_upcoming_seasons,
    read_season_form,
    update_season as svc_update_season,
)
from app.services.media_storage import MediaStorage, get_media_storage
from app.utils.db_async import get_session

router = APIRouter(prefix="/api/season", tags=["seasons"])

SEASON_NOT_FOUND = "Season not found"


def _rejection_response(exc: Exception) -> JSONResponse:
    """Map a season service exception onto its error envelope."""
    if isinstance(exc, UploadRejectedError):
        return error_response(exc.message, status_code=400, code=exc.code)
    if isinstance(exc, SeasonValidationError):
        return validation_error_response(exc.errors)
    if isinstance(exc, EventNotFoundError):
        return error_response("Event not found", status_code=404)
    if isinstance(exc, SeasonNotFoundError):
        return error_response(SEASON_NOT_FOUND, status_code=404)
    if isinstance(exc, DuplicateSeasonError):
        return error_response(
            str(exc), status_code=409, code="DUPLICATE_KEY", key_value=exc.key_value
        )
    raise exc


@router.post("")
async def create_season(
    request: Request,
    db: AsyncSession = Depends(get_session),
    storage: MediaStorage = Depends(get_media_storage),
) -> JSONResponse:
    """Create a season from a multipart submission."""
    form = await read_season_form(await request.form())
    try:
        async with db.begin():
            season = await svc_create_season(db, form, storage)
    except (
        UploadRejectedError,
        SeasonValidationError,
        EventNotFoundError,
        DuplicateSeasonError,
    ) as exc:
        return _rejection_response(exc)

    return success_response(SeasonRead.model_validate(season), status_code=201)


@router.get("")
async def list_all_seasons(
    status: Optional[SeasonStatus] = Query(default=None),
    event_id: Optional[int] = Query(default=None),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=100),
    sort: str = Query(default="year"),
    order: Literal["asc", "desc"] = Query(default="desc"),
    db: AsyncSession = Depends(get_session),
) -> JSONResponse:
    """List seasons with optional status and event filters."""
    if sort not in SORTABLE_FIELDS:
        return error_response(f"Cannot sort by {sort}", status_code=400)

    result = await list_seasons(
        db,
        event_id=event_id,
        status=status,
        page=page,
        limit=limit,
        sort=sort,
        order=order,
    )
    return success_response(
        [SeasonRead.model_validate(season) for season in result.seasons],
        pagination=pagination_dict(result.page, result.limit, result.total, result.pages),
    )


@router.get("/upcoming")
async def upcoming_seasons(
    limit: int = Query(default=10, ge=1, le=100),
    db: AsyncSession = Depends(get_session),
) -> JSONResponse:
    """Upcoming seasons ordered by start date."""
    return success_response(await list_upcoming_seasons(db, limit=limit))


@router.get("/{season_id}")
async def get_season_by_id(
    season_id: int,
    db: AsyncSession = Depends(get_session),
) -> JSONResponse:
    """Fetch one season with its contestants, jury and winners."""
    try:
        detail = await get_season_detail(db, season_id)
    except SeasonNotFoundError:
        return error_response(SEASON_NOT_FOUND, status_code=404)
    return success_response(detail)


@router.patch("/{season_id}")
async def update_season(
    season_id: int,
    request: Request,
    db: AsyncSession = Depends(get_session),
    storage: MediaStorage = Depends(get_media_storage),
) -> JSONResponse:
    """Partially update a season; omitted fields keep their stored values."""
    form = await read_season_form(await request.form())
    try:
        async with db.begin():
            season = await get_season(db, season_id)
            season, orphans = await svc_update_season(db, season, form, storage)
    except (
        UploadRejectedError,
        SeasonValidationError,
        EventNotFoundError,
        SeasonNotFoundError,
        DuplicateSeasonError,
    ) as exc:
        return _rejection_response(exc)

    storage.delete_many(orphans)
    return success_response(SeasonRead.model_validate(season))


@router.delete("/{season_id}")
async def delete_season(
    season_id: int,
    db: AsyncSession = Depends(get_session),
    storage: MediaStorage = Depends(get_media_storage),
) -> JSONResponse:
    """Delete a season, its contestants, jury and winners, and their media."""
    try:
        async with db.begin():
            season = await get_season(db, season_id)
            orphans = await svc_delete_season(db, season)
    except SeasonNotFoundError:
        return error_response(SEASON_NOT_FOUND, status_code=404)

    storage.delete_many(orphans)
    return success_response(message="Season deleted successfully")
