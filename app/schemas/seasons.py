from datetime import date
from typing import Any, Optional

from sqlalchemy import JSON, Column, UniqueConstraint
from sqlmodel import Field

from app.models.season_status import SeasonStatus
from app.schemas.base import TimestampMixin


class Season(TimestampMixin, table=True):  # type: ignore[call-arg]
    __tablename__ = "seasons"
    __table_args__ = (
        UniqueConstraint("event_id", "year", name="uq_seasons_event_year"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    event_id: int = Field(foreign_key="events.id", index=True)
    year: int
    status: SeasonStatus = Field(index=True)
    slug: str = Field(index=True, unique=True, description="Public URL slug like 'miss-nepal-2025'")
    start_date: date
    end_date: date
    audition_form_deadline: Optional[date] = None
    voting_opened: bool = Field(default=False)
    voting_end_date: Optional[date] = None
    get_ticket_link: Optional[str] = None
    price_per_vote: float = Field(default=0)
    image: str
    title_image: Optional[str] = None
    poster_image: Optional[str] = None
    notice: list[str] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    gallery: list[str] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    # [{"label": ..., "datespan": ..., "icon": ...}]
    timeline: list[dict[str, Any]] = Field(
        default_factory=list, sa_column=Column(JSON, nullable=False)
    )

    def media_references(self) -> list[str]:
        """Every stored asset this season points at."""
        refs = [self.image, self.title_image, self.poster_image, *self.gallery]
        refs.extend(item.get("icon") for item in self.timeline)
        return [ref for ref in refs if ref]
