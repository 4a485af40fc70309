"""Polls the payment status endpoint until a vote payment settles.

Polling is bounded by a PollPolicy and can be stopped early through a
cancellation event owned by whoever started it (typically the status view).
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from app.config import settings
from app.models.payments import PENDING_PAYMENT_STATUSES, PaymentReceipt
from app.services.agency_api_client import AgencyApiClient
from app.services.api_errors import ApiError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PollPolicy:
    """Interval, attempt cap and optional exponential backoff for polling."""

    interval: float = 3.0
    max_attempts: int = 40
    backoff: float = 1.0
    max_interval: float = 30.0

    def __post_init__(self) -> None:
        if self.interval < 0:
            raise ValueError("interval must be >= 0")
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        if self.backoff < 1.0:
            raise ValueError("backoff must be >= 1.0")

    @classmethod
    def from_settings(cls) -> "PollPolicy":
        return cls(
            interval=settings.payment_poll_interval_seconds,
            max_attempts=settings.payment_poll_max_attempts,
            backoff=settings.payment_poll_backoff,
            max_interval=settings.payment_poll_max_interval_seconds,
        )

    def delay_for(self, attempt: int) -> float:
        """Seconds to wait after the given (1-based) attempt."""
        delay = self.interval * (self.backoff ** (attempt - 1))
        return min(delay, self.max_interval)


class PollOutcome(str, Enum):
    RESOLVED = "resolved"  # a non-pending status was observed
    EXHAUSTED = "exhausted"  # still pending after max_attempts
    CANCELLED = "cancelled"
    FAILED = "failed"  # the status lookup itself failed
    MISSING_PRN = "missing_prn"


@dataclass
class PaymentPollResult:
    outcome: PollOutcome
    status: Optional[str] = None
    receipt: Optional[PaymentReceipt] = None
    attempts: int = 0
    error: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.outcome is PollOutcome.RESOLVED and self.status == "success"


class PaymentStatusPoller:
    """Repeatedly asks the API for a payment's status while it is pending."""

    def __init__(self, client: AgencyApiClient, policy: Optional[PollPolicy] = None) -> None:
        self.client = client
        self.policy = policy or PollPolicy.from_settings()

    async def poll(
        self,
        prn: Optional[str],
        cancel_event: Optional[asyncio.Event] = None,
    ) -> PaymentPollResult:
        """Poll until the payment leaves the pending states.

        Stops as soon as the status is anything other than pending, created
        or sent. The receipt is only returned for a successful payment.

        Args:
            prn: Payment reference number
            cancel_event: Set it to stop polling (e.g. when the view closes)

        Returns:
            PaymentPollResult describing why polling stopped
        """
        if not prn:
            return PaymentPollResult(outcome=PollOutcome.MISSING_PRN)

        status: Optional[str] = None
        attempts = 0
        while attempts < self.policy.max_attempts:
            if cancel_event is not None and cancel_event.is_set():
                return PaymentPollResult(
                    outcome=PollOutcome.CANCELLED, status=status, attempts=attempts
                )

            attempts += 1
            try:
                result = await self.client.get_payment_status(prn)
            except ApiError as exc:
                logger.warning(f"Payment status lookup for {prn} failed: {exc.message}")
                return PaymentPollResult(
                    outcome=PollOutcome.FAILED,
                    status="error",
                    attempts=attempts,
                    error=exc.message,
                )

            status = result.status
            if status not in PENDING_PAYMENT_STATUSES:
                logger.info(f"Payment {prn} settled as {status} after {attempts} attempt(s)")
                return PaymentPollResult(
                    outcome=PollOutcome.RESOLVED,
                    status=status,
                    receipt=result.payment if status == "success" else None,
                    attempts=attempts,
                )

            if attempts >= self.policy.max_attempts:
                break

            if await self._wait(self.policy.delay_for(attempts), cancel_event):
                return PaymentPollResult(
                    outcome=PollOutcome.CANCELLED, status=status, attempts=attempts
                )

        logger.info(f"Payment {prn} still {status} after {attempts} attempt(s)")
        return PaymentPollResult(outcome=PollOutcome.EXHAUSTED, status=status, attempts=attempts)

    @staticmethod
    async def _wait(delay: float, cancel_event: Optional[asyncio.Event]) -> bool:
        """Sleep for delay seconds; return True if cancelled meanwhile."""
        if cancel_event is None:
            await asyncio.sleep(delay)
            return False
        try:
            await asyncio.wait_for(cancel_event.wait(), timeout=delay)
        except asyncio.TimeoutError:
            return False
        return True
