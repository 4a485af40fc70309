"""Response models for vote payment status lookups."""

from typing import Optional

from sqlmodel import SQLModel

# Statuses that mean the gateway has not settled the payment yet
PENDING_PAYMENT_STATUSES: frozenset[str] = frozenset({"pending", "created", "sent"})


class ContestantVotes(SQLModel):
    id: int
    name: str
    votes: int


class PaymentReceipt(SQLModel):
    """Receipt data returned once a payment has succeeded."""

    prn: str
    amount: float
    currency: str = "NPR"
    status: str
    vote: int = 0
    event: Optional[str] = None
    contestants: list[ContestantVotes] = []


class PaymentStatusRead(SQLModel):
    status: str
    payment: Optional[PaymentReceipt] = None
