"""Unit tests for the shared UTC timestamp helper."""

from datetime import UTC, datetime, timedelta

from app.schemas.base import utcnow
from app.schemas.events import Event


def test_utcnow_is_naive_utc():
    now = utcnow()

    assert now.tzinfo is None
    assert abs(datetime.now(UTC).replace(tzinfo=None) - now) < timedelta(seconds=5)


def test_timestamp_columns_default_to_utcnow():
    before = utcnow()
    event = Event(name="Miss Nepal")

    assert before <= event.created_at <= utcnow()
    assert before <= event.updated_at <= utcnow()
