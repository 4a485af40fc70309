"""Pydantic request/response models for seasons and their owned entities.

Season payloads are a tagged union keyed by status: each variant carries only
the fields that are legal for that status.
"""

from __future__ import annotations

import json
from datetime import date, datetime
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter
from sqlmodel import SQLModel

from app.models.season_status import SeasonStatus, forced_values


class TimelineItem(BaseModel):
    """A labeled date span shown on the season timeline."""

    label: str = ""
    datespan: str = ""
    icon: str = ""


class _SeasonPayloadBase(BaseModel):
    model_config = ConfigDict(frozen=True)

    event_id: int
    year: int
    slug: str
    start_date: date
    end_date: date
    voting_opened: bool = False
    get_ticket_link: Optional[str] = None
    timeline: list[TimelineItem] = Field(default_factory=list)

    def column_values(self) -> dict[str, Any]:
        """Return the values to persist on the seasons table."""
        values = self.model_dump()
        values["timeline"] = [item.model_dump() for item in self.timeline]
        values.update(forced_values(self.status))  # type: ignore[attr-defined]
        return values

    def to_form_fields(self) -> dict[str, str]:
        """Serialize to multipart text fields (files are sent separately)."""
        fields: dict[str, str] = {}
        for name, value in self.model_dump(mode="json").items():
            if value is None:
                continue
            if isinstance(value, bool):
                fields[name] = "true" if value else "false"
            elif isinstance(value, (list, dict)):
                fields[name] = json.dumps(value)
            else:
                fields[name] = str(value)
        return fields


class UpcomingSeasonPayload(_SeasonPayloadBase):
    status: Literal[SeasonStatus.UPCOMING] = SeasonStatus.UPCOMING
    audition_form_deadline: date
    voting_end_date: date
    price_per_vote: float = Field(default=0, ge=0)
    notice: list[str] = Field(default_factory=list)


class OngoingSeasonPayload(_SeasonPayloadBase):
    status: Literal[SeasonStatus.ONGOING] = SeasonStatus.ONGOING
    voting_end_date: date
    audition_form_deadline: Optional[date] = None
    price_per_vote: float = Field(default=0, ge=0)
    notice: list[str] = Field(default_factory=list)


class EndedSeasonPayload(_SeasonPayloadBase):
    # price_per_vote and notice are not legal here; column_values() pins them
    status: Literal[SeasonStatus.ENDED] = SeasonStatus.ENDED
    voting_end_date: Optional[date] = None
    audition_form_deadline: Optional[date] = None


SeasonPayload = Annotated[
    Union[UpcomingSeasonPayload, OngoingSeasonPayload, EndedSeasonPayload],
    Field(discriminator="status"),
]

season_payload_adapter: TypeAdapter[SeasonPayload] = TypeAdapter(SeasonPayload)

PAYLOAD_TYPES: dict[SeasonStatus, type[_SeasonPayloadBase]] = {
    SeasonStatus.UPCOMING: UpcomingSeasonPayload,
    SeasonStatus.ONGOING: OngoingSeasonPayload,
    SeasonStatus.ENDED: EndedSeasonPayload,
}


class ContestantRead(SQLModel):
    id: int
    season_id: int
    name: str
    intro: str
    gender: str
    address: str
    image: str
    votes: int = 0


class JuryMemberRead(SQLModel):
    id: int
    season_id: int
    name: str
    designation: Optional[str] = None
    image: str


class WinnerRead(SQLModel):
    id: int
    season_id: int
    rank: str
    name: str
    image: str
    slug: Optional[str] = None


class SeasonRead(SQLModel):
    """Response model for a season."""

    id: int
    event_id: int
    year: int
    status: SeasonStatus
    slug: str
    start_date: date
    end_date: date
    audition_form_deadline: Optional[date] = None
    voting_opened: bool = False
    voting_end_date: Optional[date] = None
    get_ticket_link: Optional[str] = None
    price_per_vote: float = 0
    notice: list[str] = []
    image: str
    title_image: Optional[str] = None
    poster_image: Optional[str] = None
    gallery: list[str] = []
    timeline: list[TimelineItem] = []
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class SeasonDetailRead(SeasonRead):
    """Season with its owned contestants, jury and winners."""

    contestants: list[ContestantRead] = []
    jury: list[JuryMemberRead] = []
    winners: list[WinnerRead] = []


class EventRead(SQLModel):
    id: int
    name: str
    overview: str = ""
    managed_by: str = "self"
    created_at: Optional[datetime] = None


class EventCreate(SQLModel):
    """Request model for creating an event."""

    name: str
    overview: str = ""
    managed_by: Literal["self", "partner"] = "self"


class Pagination(SQLModel):
    page: int
    limit: int
    total: int
    pages: int


class UpcomingSeasonRead(SeasonRead):
    """Upcoming season with its event name and the event's last finished season."""

    event_name: str = ""
    latest_ended_season_slug: Optional[str] = None
