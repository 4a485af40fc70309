"""Admin event service: queries and mutations for events.

Routes should be thin wrappers around these functions.
"""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.seasons import EventCreate
from app.schemas.events import Event, ManagedBy
from app.schemas.seasons import Season


class EventNotFoundError(Exception):
    """Raised when an event id does not exist."""

    def __init__(self, event_id: int) -> None:
        super().__init__(f"Event {event_id} not found")
        self.event_id = event_id


async def list_events(db: AsyncSession) -> list[Event]:
    result = await db.execute(select(Event).order_by(Event.name))
    return list(result.scalars().all())


async def get_event(db: AsyncSession, event_id: int) -> Event:
    """Fetch an event or raise EventNotFoundError."""
    event = await db.get(Event, event_id)
    if event is None:
        raise EventNotFoundError(event_id)
    return event


async def create_event(db: AsyncSession, data: EventCreate) -> Event:
    event = Event(
        name=data.name.strip(),
        overview=data.overview.strip(),
        managed_by=ManagedBy(data.managed_by),
    )
    db.add(event)
    await db.flush()
    return event


async def delete_event(db: AsyncSession, event: Event) -> list[str]:
    """Delete an event together with all of its seasons.

    Returns:
        Stored media references that are now orphaned; delete them after
        the transaction commits.
    """
    # Lazy import to avoid circular dependency
    from app.services.admin_season_service import delete_season

    result = await db.execute(
        select(Season).where(Season.event_id == event.id)  # type: ignore[arg-type]
    )
    orphans: list[str] = []
    for season in result.scalars().all():
        orphans.extend(await delete_season(db, season))

    await db.delete(event)
    await db.flush()
    return orphans
