"""Vote payments. Gateway request/response fields live with the gateway
integration, not here."""

from typing import Optional

from sqlmodel import Field

from app.schemas.base import TimestampMixin

PRN_PREFIX = "prn_"


class Payment(TimestampMixin, table=True):  # type: ignore[call-arg]
    __tablename__ = "payments"

    id: Optional[int] = Field(default=None, primary_key=True)
    prn: str = Field(index=True, unique=True)
    # Cleared when the contestant is deleted with its season
    contestant_id: Optional[int] = Field(default=None, foreign_key="contestants.id", index=True)
    contestant_name: str
    vote: int
    amount: float
    currency: str = Field(default="NPR")
    # created | sent | pending | success | failed | error
    status: str = Field(default="created", index=True)
    api_verification_status: str = Field(default="pending")
