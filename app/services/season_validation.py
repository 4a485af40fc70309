"""Submit-time validation for season drafts.

Every check runs and the result is a field -> message map, so a form can
highlight all offending fields at once. Nothing here touches the network or
mutates the draft.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable, Optional

from app.models.media import SlotState, UploadedFile
from app.models.season_draft import SeasonDraft
from app.models.season_status import SeasonStatus, required_fields

MIN_YEAR = 1900
MAX_YEAR = 2100

DEFAULT_ALLOWED_IMAGE_TYPES: frozenset[str] = frozenset(
    {"image/png", "image/jpeg", "image/jpg", "image/webp", "image/svg+xml"}
)
DEFAULT_MAX_UPLOAD_BYTES = 10 * 1024 * 1024

_REQUIRED_MESSAGES = {
    "audition_form_deadline": "Audition form deadline is required for {status} seasons",
    "voting_end_date": "Voting end date is required for {status} seasons",
}


def validate_season_dates(draft: SeasonDraft) -> dict[str, str]:
    """Check every cross-field date rule of a draft in one pass.

    Args:
        draft: The full draft record

    Returns:
        Field -> message map; empty when all present dates are consistent.
        Rules involving a missing date are skipped.
    """
    errors: dict[str, str] = {}

    if draft.start_date and draft.end_date and draft.start_date >= draft.end_date:
        errors["end_date"] = "End date must be after start date"

    if (
        draft.audition_form_deadline
        and draft.start_date
        and draft.audition_form_deadline >= draft.start_date
    ):
        errors["audition_form_deadline"] = "Audition deadline must be before start date"

    if draft.voting_end_date and draft.end_date and draft.voting_end_date > draft.end_date:
        errors["voting_end_date"] = (
            "Voting end date must be before or equal to season end date"
        )

    return errors


@dataclass(frozen=True)
class UploadViolation:
    """An upload that breaks the size or type limits."""

    code: str  # LIMIT_FILE_SIZE | INVALID_FILE_TYPE
    message: str


def find_upload_violation(
    uploads: Iterable[UploadedFile],
    *,
    max_bytes: int = DEFAULT_MAX_UPLOAD_BYTES,
    allowed_types: Optional[frozenset[str]] = None,
) -> Optional[UploadViolation]:
    """Return the first upload breaking the limits, if any."""
    allowed = allowed_types if allowed_types is not None else DEFAULT_ALLOWED_IMAGE_TYPES
    for upload in uploads:
        if upload.size > max_bytes:
            limit_mb = max_bytes // (1024 * 1024)
            return UploadViolation(
                code="LIMIT_FILE_SIZE",
                message=f"{upload.filename}: File size must be less than {limit_mb}MB",
            )
        if upload.content_type not in allowed:
            return UploadViolation(
                code="INVALID_FILE_TYPE",
                message=f"{upload.filename}: File must be an image (PNG, JPEG, WebP, or SVG)",
            )
    return None


def validate_season_draft(
    draft: SeasonDraft,
    *,
    is_editing: bool,
    max_upload_bytes: int = DEFAULT_MAX_UPLOAD_BYTES,
    allowed_image_types: Optional[frozenset[str]] = None,
) -> dict[str, str]:
    """Run the full submit-time validation batch.

    Args:
        draft: Draft to validate
        is_editing: True when updating a stored season; a new season needs a
            freshly uploaded main image
        max_upload_bytes: Per-file size limit
        allowed_image_types: Accepted MIME types (defaults to common images)

    Returns:
        Field -> message map; empty when the draft can be submitted
    """
    errors: dict[str, str] = {}

    if draft.event_id is None:
        errors["event_id"] = "Event ID is required"

    if draft.status is None:
        errors["status"] = "Please select a status"

    if draft.year < MIN_YEAR or draft.year > MAX_YEAR:
        errors["year"] = f"Year must be between {MIN_YEAR} and {MAX_YEAR}"
    if draft.start_date is None:
        errors["start_date"] = "Start date is required"
    if draft.end_date is None:
        errors["end_date"] = "End date is required"
    if not draft.slug.strip():
        errors["slug"] = "Slug is required"
    if draft.status is not SeasonStatus.ENDED:
        if not math.isfinite(draft.price_per_vote):
            errors["price_per_vote"] = "Price per vote must be a number"
        elif draft.price_per_vote < 0:
            errors["price_per_vote"] = "Price per vote must be positive"

    if not is_editing and draft.image.state is not SlotState.REPLACED:
        errors["image"] = "Main image is required"
    elif not draft.image.has_image:
        errors["image"] = "Main image is required"

    if draft.status is not None:
        for name in sorted(required_fields(draft.status)):
            if getattr(draft, name) is None:
                errors[name] = _REQUIRED_MESSAGES[name].format(status=draft.status.value)

    violation = find_upload_violation(
        draft.uploads(),
        max_bytes=max_upload_bytes,
        allowed_types=allowed_image_types,
    )
    if violation:
        errors["uploads"] = violation.message

    errors.update(validate_season_dates(draft))
    return errors
