"""Events: the long-running competitions that own seasons."""

from enum import Enum
from typing import Optional

from sqlmodel import Field

from app.schemas.base import TimestampMixin


class ManagedBy(str, Enum):
    """Who runs the event."""

    SELF = "self"
    PARTNER = "partner"


class Event(TimestampMixin, table=True):  # type: ignore[call-arg]
    __tablename__ = "events"

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(index=True)
    overview: str = Field(default="")
    managed_by: ManagedBy = Field(default=ManagedBy.SELF)
