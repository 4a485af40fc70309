"""Vote payment status lookups."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.payments import ContestantVotes, PaymentReceipt, PaymentStatusRead
from app.schemas.payments import PRN_PREFIX, Payment
from app.schemas.season_members import Contestant
from app.schemas.seasons import Season


class PaymentNotFoundError(Exception):
    def __init__(self, prn: str) -> None:
        super().__init__(f"Payment {prn} not found")
        self.prn = prn


def normalize_prn(prn: str) -> str:
    """Return the stored form of a PRN (always carrying the prn_ prefix)."""
    prn = prn.strip()
    return prn if prn.startswith(PRN_PREFIX) else f"{PRN_PREFIX}{prn}"


async def _build_receipt(db: AsyncSession, payment: Payment) -> PaymentReceipt:
    event_slug = None
    contestants: list[ContestantVotes] = []
    if payment.contestant_id is not None:
        row = (
            await db.execute(
                select(Contestant, Season.slug)
                .join(Season, Season.id == Contestant.season_id)  # type: ignore[arg-type]
                .where(Contestant.id == payment.contestant_id)  # type: ignore[arg-type]
            )
        ).first()
        if row is not None:
            contestant, event_slug = row
            contestants.append(
                ContestantVotes(id=contestant.id, name=contestant.name, votes=contestant.votes)
            )

    return PaymentReceipt(
        prn=payment.prn,
        amount=payment.amount,
        currency=payment.currency,
        status=payment.status,
        vote=payment.vote,
        event=event_slug,
        contestants=contestants,
    )


async def get_payment_status(db: AsyncSession, prn: str) -> PaymentStatusRead:
    """Look up a payment's status; the receipt is attached only on success.

    Raises:
        PaymentNotFoundError: If no payment has this PRN
    """
    result = await db.execute(
        select(Payment).where(Payment.prn == normalize_prn(prn))  # type: ignore[arg-type]
    )
    payment = result.scalar_one_or_none()
    if payment is None:
        raise PaymentNotFoundError(prn)

    receipt = await _build_receipt(db, payment) if payment.status == "success" else None
    return PaymentStatusRead(status=payment.status, payment=receipt)
