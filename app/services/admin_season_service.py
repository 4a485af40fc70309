"""Admin season service: multipart parsing, validation, persistence and media.

Handles business logic for season management. Routes should be thin wrappers
around these functions and translate the exceptions below into responses.
Stored media are only deleted by the caller, after the transaction commits.
"""

from __future__ import annotations

import json
import logging
import math
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Optional

from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.datastructures import FormData, UploadFile as StarletteUploadFile

from app.config import settings
from app.models.media import MediaSlot, SlotState, UploadedFile, plan_gallery_update
from app.models.season_draft import (
    IMAGE_SLOTS,
    TIMELINE_ICON_FIELD,
    SeasonDraft,
    TimelineEntryDraft,
    apply_status,
    payload_from_draft,
    refresh_derived_slug,
)
from app.models.season_status import SeasonStatus
from app.models.seasons import (
    ContestantRead,
    JuryMemberRead,
    SeasonDetailRead,
    UpcomingSeasonRead,
    WinnerRead,
)
from app.schemas.base import utcnow
from app.schemas.events import Event
from app.schemas.payments import Payment
from app.schemas.season_members import Contestant, JuryMember, Winner
from app.schemas.seasons import Season
from app.services.admin_event_service import get_event
from app.services.media_storage import MediaStorage
from app.services.season_validation import find_upload_violation, validate_season_draft
from app.utils.slug import generate_unique_season_slug

logger = logging.getLogger(__name__)

MEDIA_PREFIX = "seasons"
MAX_FILES_PER_REQUEST = 30

SORTABLE_FIELDS = frozenset({"year", "start_date", "end_date", "status", "slug", "created_at"})

_DATE_FIELDS = ("start_date", "end_date", "audition_form_deadline", "voting_end_date")


class SeasonNotFoundError(Exception):
    def __init__(self, season_id: int) -> None:
        super().__init__(f"Season {season_id} not found")
        self.season_id = season_id


class SeasonValidationError(Exception):
    """The submitted season failed validation; errors maps field -> message."""

    def __init__(self, errors: dict[str, str]) -> None:
        super().__init__("Validation failed")
        self.errors = errors


class DuplicateSeasonError(Exception):
    """A season with the same slug, or the same event and year, exists."""

    def __init__(self, key_value: dict[str, Any]) -> None:
        described = ", ".join(f"{k} '{v}'" for k, v in key_value.items())
        super().__init__(
            f"A season with {described} already exists" if described else "Duplicate season"
        )
        self.key_value = key_value


def duplicate_key_value(exc: IntegrityError, draft: SeasonDraft) -> dict[str, Any]:
    """Name the unique key an insert or update collided with."""
    detail = str(exc.orig)
    event_year = {"event_id": draft.event_id, "year": draft.year}
    # sqlite names the columns, postgres names the constraint
    if "uq_seasons_event_year" in detail or "seasons.event_id" in detail:
        return event_year
    if "slug" in detail:
        return {"slug": draft.slug}
    return {**event_year, "slug": draft.slug}


class UploadRejectedError(Exception):
    """An upload broke the size, type or count limits."""

    def __init__(self, code: str, message: str) -> None:
        super().__init__(message)
        self.code = code
        self.message = message


@dataclass
class SeasonForm:
    """Text fields and uploaded files of a season multipart request."""

    fields: dict[str, str] = field(default_factory=dict)
    files: dict[str, list[UploadedFile]] = field(default_factory=dict)

    def file(self, name: str) -> Optional[UploadedFile]:
        uploads = self.files.get(name)
        return uploads[0] if uploads else None

    @property
    def file_count(self) -> int:
        return sum(len(uploads) for uploads in self.files.values())


@dataclass
class SeasonListResult:
    """Result of a paginated season list query."""

    seasons: list[Season]
    total: int
    page: int
    limit: int

    @property
    def pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.limit else 0


async def read_season_form(form: FormData) -> SeasonForm:
    """Split a parsed multipart body into text fields and in-memory files."""
    parsed = SeasonForm()
    for key, value in form.multi_items():
        if isinstance(value, StarletteUploadFile):
            content = await value.read()
            if not value.filename and not content:
                # Empty file inputs are sent by browsers with no filename
                continue
            parsed.files.setdefault(key, []).append(
                UploadedFile(
                    filename=value.filename or key,
                    content=content,
                    content_type=value.content_type or "application/octet-stream",
                )
            )
        else:
            parsed.fields[key] = value
    return parsed


def _parse_bool(value: str) -> bool:
    return value.strip().lower() in {"true", "1", "on", "yes"}


def _parse_json_list(value: str) -> Optional[list[Any]]:
    """Decode a JSON array field; None if it is not one."""
    if not value.strip():
        return []
    try:
        decoded = json.loads(value)
    except ValueError:
        return None
    return decoded if isinstance(decoded, list) else None


def _apply_timeline(draft: SeasonDraft, items: list[Any]) -> bool:
    """Replace the draft timeline with submitted rows. False if malformed."""
    stored_icons = {entry.icon.existing for entry in draft.timeline if entry.icon.existing}
    timeline: list[TimelineEntryDraft] = []
    for item in items:
        if not isinstance(item, dict):
            return False
        icon_ref = str(item.get("icon") or "")
        timeline.append(
            TimelineEntryDraft(
                label=str(item.get("label") or ""),
                datespan=str(item.get("datespan") or ""),
                icon=MediaSlot(existing=icon_ref if icon_ref in stored_icons else None),
            )
        )
    draft.timeline = timeline
    return True


def apply_season_form(draft: SeasonDraft, form: SeasonForm) -> dict[str, str]:
    """Overlay submitted fields and files onto a draft.

    Fields absent from the form keep their draft values, so the same function
    serves create (default draft) and partial update (draft seeded from the
    stored season). The status is applied last so the values it forces win.

    Returns:
        Field -> message map of values that could not be parsed
    """
    errors: dict[str, str] = {}
    fields = form.fields

    if "event_id" in fields:
        try:
            draft.event_id = int(fields["event_id"])
        except ValueError:
            errors["event_id"] = "Event ID must be a number"

    if "year" in fields:
        try:
            draft.year = int(fields["year"])
        except ValueError:
            errors["year"] = "Year must be a number"

    for name in _DATE_FIELDS:
        if name not in fields:
            continue
        raw = fields[name].strip()
        if not raw:
            setattr(draft, name, None)
            continue
        try:
            setattr(draft, name, date.fromisoformat(raw[:10]))
        except ValueError:
            errors[name] = "Invalid date format. Use YYYY-MM-DD."

    if "voting_opened" in fields:
        draft.voting_opened = _parse_bool(fields["voting_opened"])

    if "slug" in fields:
        draft.slug = fields["slug"].strip()
    if "slug" in fields or "slug_auto" in fields:
        draft.slug_overridden = not _parse_bool(fields.get("slug_auto", ""))

    if "get_ticket_link" in fields:
        draft.get_ticket_link = fields["get_ticket_link"].strip()

    if "price_per_vote" in fields:
        raw_price = fields["price_per_vote"].strip() or "0"
        try:
            draft.price_per_vote = float(raw_price)
        except ValueError:
            errors["price_per_vote"] = "Price per vote must be a number"

    if "notice" in fields:
        notice = _parse_json_list(fields["notice"])
        if notice is None:
            errors["notice"] = "Invalid notice format"
        else:
            draft.notice = [str(line).strip() for line in notice if str(line).strip()]

    if "timeline" in fields:
        items = _parse_json_list(fields["timeline"])
        if items is None or not _apply_timeline(draft, items):
            errors["timeline"] = "Invalid timeline format"
    for index, entry in enumerate(draft.timeline):
        icon = form.file(TIMELINE_ICON_FIELD.format(index=index))
        if icon is not None:
            entry.icon.replace(icon)

    if "remove_images" in fields:
        removed = _parse_json_list(fields["remove_images"])
        if removed is None:
            errors["remove_images"] = "Invalid remove_images format"
        else:
            for name in removed:
                if name in IMAGE_SLOTS:
                    getattr(draft, name).remove_existing()
    for name in IMAGE_SLOTS:
        upload = form.file(name)
        if upload is not None:
            getattr(draft, name).replace(upload)

    if "retain_gallery" in fields:
        retained = _parse_json_list(fields["retain_gallery"])
        if retained is None:
            errors["gallery"] = "Invalid gallery format"
        else:
            kept, _ = plan_gallery_update(
                draft.gallery.existing, [str(ref) for ref in retained]
            )
            draft.gallery.retained = kept
    for upload in form.files.get("gallery", []):
        draft.gallery.add(upload)

    status = draft.status
    if "status" in fields:
        try:
            status = SeasonStatus(fields["status"].strip().lower())
        except ValueError:
            errors["status"] = "Invalid status"
    if status is not None:
        apply_status(draft, status)

    return errors


def _check_uploads(form: SeasonForm) -> None:
    if form.file_count > MAX_FILES_PER_REQUEST:
        raise UploadRejectedError("LIMIT_FILE_COUNT", "Too many files uploaded")
    uploads = [upload for files in form.files.values() for upload in files]
    violation = find_upload_violation(
        uploads,
        max_bytes=settings.max_upload_bytes,
        allowed_types=settings.allowed_image_types,
    )
    if violation is not None:
        raise UploadRejectedError(violation.code, violation.message)


def _validate(draft: SeasonDraft, parse_errors: dict[str, str], *, is_editing: bool) -> None:
    errors = validate_season_draft(
        draft,
        is_editing=is_editing,
        max_upload_bytes=settings.max_upload_bytes,
        allowed_image_types=settings.allowed_image_types,
    )
    errors.update(parse_errors)
    if errors:
        raise SeasonValidationError(errors)


async def _ensure_unique(
    db: AsyncSession,
    draft: SeasonDraft,
    exclude_id: Optional[int] = None,
) -> None:
    """Reject duplicates; derived slugs get a numeric suffix instead."""
    same_year = select(Season.id).where(
        Season.event_id == draft.event_id,  # type: ignore[arg-type]
        Season.year == draft.year,  # type: ignore[arg-type]
    )
    if exclude_id is not None:
        same_year = same_year.where(Season.id != exclude_id)  # type: ignore[arg-type]
    if (await db.execute(same_year)).first() is not None:
        raise DuplicateSeasonError({"event_id": draft.event_id, "year": draft.year})

    same_slug = select(Season.id).where(Season.slug == draft.slug)  # type: ignore[arg-type]
    if exclude_id is not None:
        same_slug = same_slug.where(Season.id != exclude_id)  # type: ignore[arg-type]
    if (await db.execute(same_slug)).first() is None:
        return

    if draft.slug_overridden:
        raise DuplicateSeasonError({"slug": draft.slug})
    unique = await generate_unique_season_slug(draft.slug, db, exclude_id=exclude_id)
    logger.info(f"Slug {draft.slug} taken; using {unique}")
    draft.slug = unique


def _store_media(
    draft: SeasonDraft,
    storage: MediaStorage,
    saved: list[str],
) -> dict[str, Any]:
    """Persist pending uploads and return the media column values.

    Every stored key is appended to saved so a failed insert can clean up.
    """
    values: dict[str, Any] = {}
    for name, slot in draft.media_slots().items():
        if slot.state is SlotState.REPLACED and slot.upload is not None:
            key = storage.save(MEDIA_PREFIX, slot.upload)
            saved.append(key)
            values[name] = key
        else:
            values[name] = slot.kept_reference

    gallery = draft.gallery.retained_references()
    for upload in draft.gallery.uploads:
        key = storage.save(f"{MEDIA_PREFIX}/gallery", upload)
        saved.append(key)
        gallery.append(key)
    values["gallery"] = gallery

    timeline: list[dict[str, str]] = []
    for entry in draft.filled_timeline():
        icon = entry.icon.kept_reference or ""
        if entry.icon.state is SlotState.REPLACED and entry.icon.upload is not None:
            icon = storage.save(f"{MEDIA_PREFIX}/timeline", entry.icon.upload)
            saved.append(icon)
        timeline.append({"label": entry.label, "datespan": entry.datespan, "icon": icon})
    values["timeline"] = timeline

    return values


def _column_values(draft: SeasonDraft, media: dict[str, Any]) -> dict[str, Any]:
    values = payload_from_draft(draft).column_values()
    values.update(media)
    return values


async def create_season(
    db: AsyncSession,
    form: SeasonForm,
    storage: MediaStorage,
) -> Season:
    """Validate a create request, store its media and insert the season.

    Raises:
        UploadRejectedError, SeasonValidationError, EventNotFoundError,
        DuplicateSeasonError
    """
    _check_uploads(form)
    draft = SeasonDraft()
    parse_errors = apply_season_form(draft, form)

    if draft.event_id is not None and "event_id" not in parse_errors:
        event = await get_event(db, draft.event_id)
        if not draft.slug:
            draft.slug_overridden = False
            refresh_derived_slug(draft, event.name)

    _validate(draft, parse_errors, is_editing=False)
    await _ensure_unique(db, draft)

    saved: list[str] = []
    try:
        values = _column_values(draft, _store_media(draft, storage, saved))
        season = Season(**values)
        db.add(season)
        await db.flush()
    except IntegrityError as exc:
        storage.delete_many(saved)
        logger.warning(f"Season insert hit a constraint: {exc.orig}")
        raise DuplicateSeasonError(duplicate_key_value(exc, draft)) from exc
    except Exception:
        storage.delete_many(saved)
        raise

    logger.info(f"Created season {season.id} ({season.slug})")
    return season


async def update_season(
    db: AsyncSession,
    season: Season,
    form: SeasonForm,
    storage: MediaStorage,
) -> tuple[Season, list[str]]:
    """Apply a partial update on top of the stored season.

    Returns:
        Tuple of (season, orphaned media references to delete after commit)
    """
    _check_uploads(form)
    draft = SeasonDraft.from_season(season)
    parse_errors = apply_season_form(draft, form)

    if draft.event_id != season.event_id and draft.event_id is not None:
        await get_event(db, draft.event_id)

    _validate(draft, parse_errors, is_editing=True)
    await _ensure_unique(db, draft, exclude_id=season.id)

    previous = set(season.media_references())
    saved: list[str] = []
    try:
        values = _column_values(draft, _store_media(draft, storage, saved))
        for name, value in values.items():
            setattr(season, name, value)
        season.updated_at = utcnow()
        await db.flush()
    except IntegrityError as exc:
        storage.delete_many(saved)
        raise DuplicateSeasonError(duplicate_key_value(exc, draft)) from exc
    except Exception:
        storage.delete_many(saved)
        raise

    orphans = sorted(previous - set(season.media_references()))
    logger.info(f"Updated season {season.id}; {len(orphans)} orphaned media")
    return season, orphans


async def delete_season(db: AsyncSession, season: Season) -> list[str]:
    """Delete a season and everything it owns.

    Payments keep their contestant name but lose the contestant link.

    Returns:
        Orphaned media references to delete after commit
    """
    orphans = season.media_references()
    for model in (Contestant, JuryMember, Winner):
        result = await db.execute(
            select(model.image).where(model.season_id == season.id)  # type: ignore[attr-defined]
        )
        orphans.extend(image for image in result.scalars().all() if image)

    contestant_ids = select(Contestant.id).where(
        Contestant.season_id == season.id  # type: ignore[arg-type]
    )
    await db.execute(
        update(Payment)
        .where(Payment.contestant_id.in_(contestant_ids))  # type: ignore[union-attr]
        .values(contestant_id=None)
    )
    for model in (Contestant, JuryMember, Winner):
        await db.execute(
            delete(model).where(model.season_id == season.id)  # type: ignore[attr-defined]
        )

    await db.delete(season)
    await db.flush()
    logger.info(f"Deleted season {season.id} ({season.slug})")
    return orphans


async def get_season(db: AsyncSession, season_id: int) -> Season:
    season = await db.get(Season, season_id)
    if season is None:
        raise SeasonNotFoundError(season_id)
    return season


async def get_season_detail(db: AsyncSession, season_id: int) -> SeasonDetailRead:
    """Fetch a season with its contestants, jury and winners."""
    season = await get_season(db, season_id)

    async def _owned(model):
        result = await db.execute(
            select(model).where(model.season_id == season_id).order_by(model.id)
        )
        return result.scalars().all()

    detail = SeasonDetailRead.model_validate(season)
    detail.contestants = [ContestantRead.model_validate(c) for c in await _owned(Contestant)]
    detail.jury = [JuryMemberRead.model_validate(j) for j in await _owned(JuryMember)]
    detail.winners = [WinnerRead.model_validate(w) for w in await _owned(Winner)]
    return detail


async def list_seasons(
    db: AsyncSession,
    *,
    event_id: Optional[int] = None,
    status: Optional[SeasonStatus] = None,
    page: int = 1,
    limit: int = 10,
    sort: str = "year",
    order: str = "desc",
) -> SeasonListResult:
    """Paginated season listing with optional event and status filters."""
    query = select(Season)
    count_query = select(func.count()).select_from(Season)
    if event_id is not None:
        query = query.where(Season.event_id == event_id)  # type: ignore[arg-type]
        count_query = count_query.where(Season.event_id == event_id)  # type: ignore[arg-type]
    if status is not None:
        query = query.where(Season.status == status)  # type: ignore[arg-type]
        count_query = count_query.where(Season.status == status)  # type: ignore[arg-type]

    column = getattr(Season, sort if sort in SORTABLE_FIELDS else "year")
    query = query.order_by(column.asc() if order == "asc" else column.desc(), Season.id)
    query = query.offset((page - 1) * limit).limit(limit)

    total = (await db.execute(count_query)).scalar_one()
    seasons = list((await db.execute(query)).scalars().all())
    return SeasonListResult(seasons=seasons, total=total, page=page, limit=limit)


async def list_upcoming_seasons(db: AsyncSession, *, limit: int = 10) -> list[UpcomingSeasonRead]:
    """Upcoming seasons by start date, with each event's latest ended season."""
    result = await db.execute(
        select(Season, Event.name)
        .join(Event, Event.id == Season.event_id)  # type: ignore[arg-type]
        .where(Season.status == SeasonStatus.UPCOMING)  # type: ignore[arg-type]
        .order_by(Season.start_date.asc())  # type: ignore[attr-defined]
        .limit(limit)
    )

    upcoming: list[UpcomingSeasonRead] = []
    for season, event_name in result.all():
        latest_ended = await db.execute(
            select(Season.slug)
            .where(
                Season.event_id == season.event_id,  # type: ignore[arg-type]
                Season.status == SeasonStatus.ENDED,  # type: ignore[arg-type]
            )
            .order_by(Season.year.desc())  # type: ignore[attr-defined]
            .limit(1)
        )
        item = UpcomingSeasonRead.model_validate(season)
        item.event_name = event_name
        item.latest_ended_season_slug = latest_ended.scalar_one_or_none()
        upcoming.append(item)
    return upcoming

