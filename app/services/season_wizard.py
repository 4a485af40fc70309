"""View-models for the admin season wizard and the event seasons panel.

The wizard walks a season through two steps (pick a status, then fill in the
details) and owns a SeasonDraft for its whole lifetime. Closing the wizard,
whether by cancel or a successful submit, resets the draft.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Optional

from pydantic import ValidationError

from app.config import settings
from app.models.media import UploadedFile
from app.models.season_draft import (
    IMAGE_SLOTS,
    SeasonDraft,
    TimelineEntryDraft,
    apply_status,
    build_season_submission,
    refresh_derived_slug,
)
from app.models.season_status import FieldRequirement, SeasonStatus, resolve_field_requirements
from app.models.seasons import SeasonRead
from app.services.agency_api_client import AgencyApiClient
from app.services.api_errors import ApiBusinessError, ApiError, ApiTransportError
from app.services.season_validation import validate_season_draft
from app.utils.images import normalize_image_path, strip_base_url

logger = logging.getLogger(__name__)

SELECT_STATUS_ERROR = "Please select a status"

# Plain draft fields the details step may edit through update()
_EDITABLE_FIELDS = frozenset(
    {
        "start_date",
        "end_date",
        "audition_form_deadline",
        "voting_opened",
        "voting_end_date",
        "get_ticket_link",
        "price_per_vote",
        "notice",
    }
)


class WizardStep(str, Enum):
    SELECT_STATUS = "select_status"
    SEASON_DETAILS = "season_details"
    CLOSED = "closed"


class NotificationLevel(str, Enum):
    SUCCESS = "success"
    ERROR = "error"


@dataclass(frozen=True)
class Notification:
    """A toast message for the user."""

    level: NotificationLevel
    message: str


class WizardError(Exception):
    """An action that is not allowed in the wizard's current state."""


SavedCallback = Callable[[SeasonRead], Awaitable[Any]]


class SeasonWizard:
    """Two-step create/edit flow for a single season.

    Create mode starts on SELECT_STATUS; edit mode (a stored season was
    given) goes straight to SEASON_DETAILS.
    """

    def __init__(
        self,
        event_id: int,
        event_name: str = "",
        season: Optional[SeasonRead] = None,
        *,
        client: AgencyApiClient,
        status_locked_on_edit: bool = True,
        on_success: Optional[SavedCallback] = None,
        media_base_url: str = "",
    ) -> None:
        self.event_id = event_id
        self.event_name = event_name
        self.season = season
        self.client = client
        self.status_locked_on_edit = status_locked_on_edit
        self.on_success = on_success
        self.media_base_url = media_base_url

        self.step = WizardStep.CLOSED
        self.draft = SeasonDraft(event_id=event_id)
        self.errors: dict[str, str] = {}
        self.notifications: list[Notification] = []
        self.submitting = False
        self.saved: Optional[SeasonRead] = None

    @property
    def is_editing(self) -> bool:
        return self.season is not None

    @property
    def is_open(self) -> bool:
        return self.step is not WizardStep.CLOSED

    async def open(self) -> None:
        """Seed the draft and enter the first step."""
        if not self.event_name:
            await self._load_event_name()

        self.errors = {}
        self.saved = None
        if self.season is not None:
            self.draft = SeasonDraft.from_season(self.season)
            self._enter_details()
        else:
            self.draft = SeasonDraft(event_id=self.event_id)
            self.step = WizardStep.SELECT_STATUS

    async def _load_event_name(self) -> None:
        try:
            event = await self.client.get_event(self.event_id)
        except ApiError as exc:
            # Without a name the slug is simply not derived
            logger.warning(f"Could not load event {self.event_id}: {exc.message}")
            return
        self.event_name = event.name

    def _require_step(self, step: WizardStep) -> None:
        if self.step is not step:
            raise WizardError(f"Not allowed on step {self.step.value}")

    def _enter_details(self) -> None:
        self.step = WizardStep.SEASON_DETAILS
        if not self.is_editing:
            refresh_derived_slug(self.draft, self.event_name)

    # Step transitions

    def select_status(self, status: SeasonStatus | str) -> None:
        """Choose the season status, writing the values it forces."""
        if not self.is_open:
            raise WizardError("Wizard is closed")
        if self.is_editing and self.status_locked_on_edit:
            raise WizardError("Status cannot be changed while editing")
        apply_status(self.draft, status)
        self.errors.pop("status", None)

    def continue_to_details(self) -> bool:
        """Advance to the details step if a status has been chosen."""
        self._require_step(WizardStep.SELECT_STATUS)
        if self.draft.status is None:
            self.errors = {"status": SELECT_STATUS_ERROR}
            return False
        self.errors = {}
        self._enter_details()
        return True

    def back(self) -> None:
        """Return to status selection (create mode only)."""
        if self.is_editing:
            raise WizardError("Status selection is not available while editing")
        self._require_step(WizardStep.SEASON_DETAILS)
        self.step = WizardStep.SELECT_STATUS

    def cancel(self) -> None:
        """Discard every in-progress edit and close."""
        self._close()

    def _close(self) -> None:
        self.step = WizardStep.CLOSED
        self.draft = SeasonDraft(event_id=self.event_id)
        self.errors = {}
        self.submitting = False

    # Field edits

    def update(self, **fields: Any) -> None:
        """Set plain draft fields (dates, price, notices, ticket link)."""
        self._require_step(WizardStep.SEASON_DETAILS)
        requirements = (
            resolve_field_requirements(self.draft.status) if self.draft.status else {}
        )
        for name, value in fields.items():
            if name not in _EDITABLE_FIELDS:
                raise WizardError(f"{name} cannot be set directly")
            if requirements.get(name) in (
                FieldRequirement.FORCED_ZERO,
                FieldRequirement.FORCED_EMPTY,
            ):
                raise WizardError(f"{name} is fixed for {self.draft.status.value} seasons")
            setattr(self.draft, name, value)

    def set_year(self, year: int) -> None:
        self.draft.year = year
        if not self.is_editing:
            refresh_derived_slug(self.draft, self.event_name)

    def set_event_name(self, event_name: str) -> None:
        self.event_name = event_name
        if not self.is_editing:
            refresh_derived_slug(self.draft, event_name)

    def set_slug(self, slug: str) -> None:
        """Type a slug by hand; clearing it turns auto-derivation back on."""
        self.draft.slug = slug
        self.draft.slug_overridden = bool(slug.strip())
        if not self.draft.slug_overridden and not self.is_editing:
            refresh_derived_slug(self.draft, self.event_name)

    # Media

    def replace_image(self, slot: str, upload: UploadedFile) -> None:
        self._slot(slot).replace(upload)

    def remove_image(self, slot: str) -> None:
        """Drop the slot's pending upload or mark its stored image for deletion."""
        media_slot = self._slot(slot)
        if media_slot.upload is not None:
            media_slot.discard_upload()
        else:
            media_slot.remove_existing()

    def _slot(self, slot: str):
        if slot not in IMAGE_SLOTS:
            raise WizardError(f"Unknown image slot: {slot}")
        return self.draft.media_slots()[slot]

    def image_url(self, slot: str) -> Optional[str]:
        """Display URL of the slot's stored image, if it survives."""
        reference = self._slot(slot).kept_reference
        return normalize_image_path(reference, self.media_base_url) if reference else None

    def add_gallery_image(self, upload: UploadedFile) -> None:
        self.draft.gallery.add(upload)

    def remove_gallery_upload(self, index: int) -> None:
        self.draft.gallery.remove_upload(index)

    def remove_gallery_image(self, url: str) -> None:
        """Drop a stored gallery image given its display URL or reference."""
        self.draft.gallery.remove_existing(strip_base_url(url, self.media_base_url))

    def gallery_urls(self) -> list[str]:
        return [
            normalize_image_path(ref, self.media_base_url)
            for ref in self.draft.gallery.retained_references()
        ]

    # Timeline

    def add_timeline_entry(self, label: str = "", datespan: str = "") -> None:
        self.draft.timeline.append(TimelineEntryDraft(label=label, datespan=datespan))

    def remove_timeline_entry(self, index: int) -> None:
        del self.draft.timeline[index]

    def set_timeline_icon(self, index: int, upload: UploadedFile) -> None:
        self.draft.timeline[index].icon.replace(upload)

    def remove_timeline_icon(self, index: int) -> None:
        icon = self.draft.timeline[index].icon
        if icon.upload is not None:
            icon.discard_upload()
        else:
            icon.remove_existing()

    # Submission

    def validate(self) -> dict[str, str]:
        self.errors = validate_season_draft(
            self.draft,
            is_editing=self.is_editing,
            max_upload_bytes=settings.max_upload_bytes,
            allowed_image_types=settings.allowed_image_types,
        )
        return self.errors

    def _notify(self, level: NotificationLevel, message: str) -> None:
        self.notifications.append(Notification(level=level, message=message))

    async def submit(self) -> bool:
        """Validate, send the draft and close on success.

        Returns:
            True if the season was saved. Validation failures, transport errors
            and server rejections leave the wizard open with a notification.
        """
        if self.submitting:
            return False
        self._require_step(WizardStep.SEASON_DETAILS)

        if self.validate():
            self._notify(NotificationLevel.ERROR, "Please fix the validation errors")
            return False

        verb = "update" if self.is_editing else "create"
        self.submitting = True
        try:
            submission = build_season_submission(self.draft, is_editing=self.is_editing)
            if self.season is not None:
                saved = await self.client.update_season(self.season.id, submission)
            else:
                saved = await self.client.create_season(submission)
        except ApiTransportError:
            self._notify(NotificationLevel.ERROR, f"Failed to {verb} season")
            return False
        except ApiBusinessError as exc:
            self._notify(NotificationLevel.ERROR, exc.message)
            return False
        except ValidationError as exc:
            logger.warning(f"Season draft could not be serialized: {exc}")
            self._notify(NotificationLevel.ERROR, "Please fix the validation errors")
            return False
        finally:
            self.submitting = False

        self.saved = saved
        self._notify(NotificationLevel.SUCCESS, f"Season {verb}d successfully!")
        self._close()
        if self.on_success is not None:
            await self.on_success(saved)
        return True


class EventSeasonsPanel:
    """The list of an event's seasons, plus the wizard opened from it."""

    def __init__(
        self,
        client: AgencyApiClient,
        event_id: int,
        event_name: str = "",
        *,
        status_locked_on_edit: bool = True,
        media_base_url: str = "",
    ) -> None:
        self.client = client
        self.event_id = event_id
        self.event_name = event_name
        self.status_locked_on_edit = status_locked_on_edit
        self.media_base_url = media_base_url
        self.seasons: list[SeasonRead] = []
        self.notifications: list[Notification] = []
        self.wizard: Optional[SeasonWizard] = None

    async def refresh(self) -> list[SeasonRead]:
        """Refetch the event's seasons."""
        try:
            self.seasons = await self.client.list_event_seasons(self.event_id)
        except ApiError as exc:
            self.notifications.append(Notification(NotificationLevel.ERROR, exc.message))
        return self.seasons

    async def _on_saved(self, season: SeasonRead) -> None:
        await self.refresh()

    def _make_wizard(self, season: Optional[SeasonRead]) -> SeasonWizard:
        return SeasonWizard(
            self.event_id,
            self.event_name,
            season,
            client=self.client,
            status_locked_on_edit=self.status_locked_on_edit,
            on_success=self._on_saved,
            media_base_url=self.media_base_url,
        )

    async def open_create(self) -> SeasonWizard:
        self.wizard = self._make_wizard(None)
        await self.wizard.open()
        return self.wizard

    async def open_edit(self, season_id: int) -> Optional[SeasonWizard]:
        """Load the stored season and open the wizard on it."""
        try:
            season = await self.client.get_season(season_id)
        except ApiError as exc:
            self.notifications.append(Notification(NotificationLevel.ERROR, exc.message))
            return None
        self.wizard = self._make_wizard(season)
        await self.wizard.open()
        return self.wizard

    async def delete(self, season_id: int) -> bool:
        try:
            await self.client.delete_season(season_id)
        except ApiError as exc:
            self.notifications.append(Notification(NotificationLevel.ERROR, exc.message))
            return False
        self.notifications.append(
            Notification(NotificationLevel.SUCCESS, "Season deleted successfully!")
        )
        await self.refresh()
        return True
