"""Date-driven season status transitions (upcoming -> ongoing -> ended)."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.season_status import SeasonStatus, forced_values
from app.schemas.base import utcnow
from app.schemas.seasons import Season

logger = logging.getLogger(__name__)


@dataclass
class StatusUpdateResult:
    started: int = 0
    ended: int = 0


async def advance_season_statuses(
    db: AsyncSession,
    today: Optional[date] = None,
) -> StatusUpdateResult:
    """Move seasons along their lifecycle based on their dates.

    Upcoming seasons whose start date has arrived become ongoing; ongoing
    seasons whose end date has passed become ended (a season can take both
    steps in one run). Ended seasons get their forced values applied.
    """
    today = today or date.today()
    result = StatusUpdateResult()
    now = utcnow()

    upcoming = await db.execute(
        select(Season).where(
            Season.status == SeasonStatus.UPCOMING,  # type: ignore[arg-type]
            Season.start_date <= today,  # type: ignore[operator]
        )
    )
    for season in upcoming.scalars().all():
        season.status = SeasonStatus.ONGOING
        season.updated_at = now
        result.started += 1
    await db.flush()

    ongoing = await db.execute(
        select(Season).where(
            Season.status == SeasonStatus.ONGOING,  # type: ignore[arg-type]
            Season.end_date < today,  # type: ignore[operator]
        )
    )
    for season in ongoing.scalars().all():
        season.status = SeasonStatus.ENDED
        for name, value in forced_values(SeasonStatus.ENDED).items():
            setattr(season, name, value)
        season.updated_at = now
        result.ended += 1
    await db.flush()

    logger.info(f"Season statuses advanced on {today}: {result.started} started, {result.ended} ended")
    return result
