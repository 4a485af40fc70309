"""Builders shared by the unit tests."""

from __future__ import annotations

from datetime import date
from typing import Any, Optional

from app.models.media import UploadedFile
from app.models.season_draft import SeasonDraft, apply_status
from app.models.season_status import SeasonStatus
from app.models.seasons import SeasonRead

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 32


def png(name: str = "image.png", content: bytes = PNG_BYTES) -> UploadedFile:
    return UploadedFile(filename=name, content=content, content_type="image/png")


def make_draft(
    status: Optional[SeasonStatus] = SeasonStatus.UPCOMING, **overrides: Any
) -> SeasonDraft:
    """A draft that passes create-mode validation unless overridden."""
    draft = SeasonDraft(
        event_id=1,
        year=2025,
        start_date=date(2025, 3, 1),
        end_date=date(2025, 6, 1),
        audition_form_deadline=date(2025, 2, 1),
        voting_end_date=date(2025, 5, 30),
        slug="miss-nepal-2025",
        price_per_vote=10,
        notice=["Auditions open"],
    )
    if status is not None:
        apply_status(draft, status)
    draft.image.replace(png("main.png"))
    for name, value in overrides.items():
        setattr(draft, name, value)
    return draft


def make_season_read(**overrides: Any) -> SeasonRead:
    values: dict[str, Any] = {
        "id": 7,
        "event_id": 1,
        "year": 2025,
        "status": SeasonStatus.UPCOMING,
        "slug": "miss-nepal-2025",
        "start_date": date(2025, 3, 1),
        "end_date": date(2025, 6, 1),
        "audition_form_deadline": date(2025, 2, 1),
        "voting_end_date": date(2025, 5, 30),
        "price_per_vote": 10,
        "notice": ["Auditions open"],
        "image": "seasons/main.png",
        "title_image": "seasons/title.png",
        "poster_image": None,
        "gallery": ["seasons/gallery/a.png", "seasons/gallery/b.png"],
        "timeline": [
            {"label": "Auditions", "datespan": "Feb 1 - Feb 10", "icon": "seasons/timeline/1.png"}
        ],
    }
    values.update(overrides)
    return SeasonRead.model_validate(values)
