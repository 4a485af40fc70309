"""In-progress season form state and its conversion to a submission.

The same draft backs the admin wizard (client side) and the multipart parser
of the season routes (server side), so both validate identical state.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Optional

from app.models.media import Gallery, MediaSlot, SlotState, UploadedFile
from app.models.season_status import SeasonStatus, forced_values
from app.models.seasons import (
    PAYLOAD_TYPES,
    SeasonPayload,
    TimelineItem,
    season_payload_adapter,
)
from app.utils.slug import derive_season_slug

# Single-image slots, in the order they are sent
IMAGE_SLOTS: tuple[str, ...] = ("image", "title_image", "poster_image")
# Slots that may be cleared without a replacement
OPTIONAL_IMAGE_SLOTS: frozenset[str] = frozenset({"title_image", "poster_image"})

TIMELINE_ICON_FIELD = "timeline_icon_{index}"


def _current_year() -> int:
    return date.today().year


@dataclass
class TimelineEntryDraft:
    """One editable timeline row; its icon is an index-addressed upload slot."""

    label: str = ""
    datespan: str = ""
    icon: MediaSlot = field(default_factory=MediaSlot)

    def is_blank(self) -> bool:
        return (
            not self.label.strip()
            and not self.datespan.strip()
            and not self.icon.has_image
        )


@dataclass
class SeasonDraft:
    """Editable season state, owned by a single wizard or request."""

    event_id: Optional[int] = None
    year: int = field(default_factory=_current_year)
    status: Optional[SeasonStatus] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    audition_form_deadline: Optional[date] = None
    voting_opened: bool = False
    voting_end_date: Optional[date] = None
    slug: str = ""
    slug_overridden: bool = False
    get_ticket_link: str = ""
    price_per_vote: float = 0
    notice: list[str] = field(default_factory=list)
    timeline: list[TimelineEntryDraft] = field(default_factory=list)
    image: MediaSlot = field(default_factory=MediaSlot)
    title_image: MediaSlot = field(default_factory=MediaSlot)
    poster_image: MediaSlot = field(default_factory=MediaSlot)
    gallery: Gallery = field(default_factory=Gallery)

    @classmethod
    def from_season(cls, season: Any) -> "SeasonDraft":
        """Seed a draft from a stored season (table row or SeasonRead)."""
        timeline = [
            TimelineEntryDraft(
                label=_item_value(item, "label"),
                datespan=_item_value(item, "datespan"),
                icon=MediaSlot(existing=_item_value(item, "icon") or None),
            )
            for item in (season.timeline or [])
        ]
        return cls(
            event_id=season.event_id,
            year=season.year,
            status=SeasonStatus(season.status),
            start_date=season.start_date,
            end_date=season.end_date,
            audition_form_deadline=season.audition_form_deadline,
            voting_opened=bool(season.voting_opened),
            voting_end_date=season.voting_end_date,
            slug=season.slug,
            slug_overridden=True,
            get_ticket_link=season.get_ticket_link or "",
            price_per_vote=season.price_per_vote or 0,
            notice=list(season.notice or []),
            timeline=timeline,
            image=MediaSlot(existing=season.image or None),
            title_image=MediaSlot(existing=season.title_image),
            poster_image=MediaSlot(existing=season.poster_image),
            gallery=Gallery.from_existing(list(season.gallery or [])),
        )

    def media_slots(self) -> dict[str, MediaSlot]:
        return {name: getattr(self, name) for name in IMAGE_SLOTS}

    def uploads(self) -> list[UploadedFile]:
        """Every pending upload in the draft."""
        files = [slot.upload for slot in self.media_slots().values() if slot.upload]
        files.extend(self.gallery.uploads)
        files.extend(entry.icon.upload for entry in self.timeline if entry.icon.upload)
        return files

    def filled_timeline(self) -> list[TimelineEntryDraft]:
        return [entry for entry in self.timeline if not entry.is_blank()]


def _item_value(item: Any, key: str) -> str:
    if isinstance(item, dict):
        return str(item.get(key) or "")
    return str(getattr(item, key, "") or "")


def apply_status(draft: SeasonDraft, status: SeasonStatus | str) -> None:
    """Select a status and write the values it forces into the draft.

    Moving to ENDED zeroes the vote price and clears notices immediately,
    regardless of their prior values.
    """
    draft.status = SeasonStatus(status)
    for name, value in forced_values(draft.status).items():
        setattr(draft, name, list(value) if isinstance(value, list) else value)


def refresh_derived_slug(draft: SeasonDraft, event_name: str) -> bool:
    """Re-derive the slug from event name and year unless typed manually.

    Returns:
        True if the slug was updated
    """
    if draft.slug_overridden or not event_name.strip() or not draft.year:
        return False
    draft.slug = derive_season_slug(event_name, draft.year)
    return True


def payload_from_draft(draft: SeasonDraft) -> SeasonPayload:
    """Build the status-tagged payload carrying only the legal fields.

    Call only after the draft has passed validation; pydantic raises
    ValidationError otherwise.
    """
    if draft.status is None:
        raise ValueError("Season status is not set")

    payload_type = PAYLOAD_TYPES[draft.status]
    timeline = [
        TimelineItem(
            label=entry.label,
            datespan=entry.datespan,
            icon=entry.icon.kept_reference or "",
        )
        for entry in draft.filled_timeline()
    ]
    values: dict[str, Any] = {
        "status": draft.status,
        "timeline": timeline,
        "get_ticket_link": draft.get_ticket_link.strip() or None,
        "slug": draft.slug.strip(),
    }
    for name in payload_type.model_fields:
        if name not in values:
            values[name] = getattr(draft, name)
    return season_payload_adapter.validate_python(values)


@dataclass
class SeasonSubmission:
    """Multipart body for a season create/update request."""

    data: dict[str, str]
    files: list[tuple[str, tuple[str, bytes, str]]]


def build_season_submission(draft: SeasonDraft, *, is_editing: bool) -> SeasonSubmission:
    """Serialize a validated draft into multipart fields and files."""
    payload = payload_from_draft(draft)
    data = payload.to_form_fields()
    if not draft.slug_overridden:
        # Derived slugs may be suffixed server-side on collision
        data["slug_auto"] = "true"
    files: list[tuple[str, tuple[str, bytes, str]]] = []

    removed: list[str] = []
    for name, slot in draft.media_slots().items():
        if slot.state is SlotState.REPLACED and slot.upload is not None:
            files.append((name, slot.upload.as_multipart()))
        elif slot.state is SlotState.REMOVED:
            removed.append(name)
    if removed:
        data["remove_images"] = json.dumps(removed)

    for upload in draft.gallery.uploads:
        files.append(("gallery", upload.as_multipart()))
    if is_editing:
        data["retain_gallery"] = json.dumps(draft.gallery.retained_references())

    for index, entry in enumerate(draft.filled_timeline()):
        if entry.icon.upload is not None:
            files.append(
                (TIMELINE_ICON_FIELD.format(index=index), entry.icon.upload.as_multipart())
            )

    return SeasonSubmission(data=data, files=files)
