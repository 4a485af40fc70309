"""Slug generation utilities for season URLs."""

import re
import unicodedata
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession


def generate_slug(name: str) -> str:
    """Convert a display name to a URL-safe slug.

    Args:
        name: The display name to convert (e.g., "Miss Himalaya Nepal")

    Returns:
        URL-safe slug (e.g., "miss-himalaya-nepal")
    """
    if not name:
        return ""

    # Normalize unicode characters (é -> e, etc.)
    normalized = unicodedata.normalize("NFKD", name)
    ascii_text = normalized.encode("ascii", "ignore").decode("ascii")

    lower = ascii_text.lower()

    # Replace spaces and underscores with hyphens
    hyphenated = re.sub(r"[\s_]+", "-", lower)

    # Remove any character that isn't alphanumeric or hyphen
    cleaned = re.sub(r"[^a-z0-9-]", "", hyphenated)

    collapsed = re.sub(r"-+", "-", cleaned)

    return collapsed.strip("-")


def derive_season_slug(event_name: str, year: int | str) -> str:
    """Derive a season slug from its event name and year.

    Args:
        event_name: Parent event display name
        year: Season year

    Returns:
        Slug such as "miss-himalaya-nepal-2025", or "season-2025" when the
        event name has no usable characters
    """
    base = generate_slug(event_name) or "season"
    year_part = generate_slug(str(year))
    return f"{base}-{year_part}" if year_part else base


def next_available_slug(base_slug: str, taken: set[str]) -> str:
    """Return base_slug, or the first base_slug-N (N >= 2) not in taken."""
    candidate = base_slug
    suffix = 1

    while candidate in taken:
        suffix += 1
        candidate = f"{base_slug}-{suffix}"

    return candidate


async def generate_unique_season_slug(
    base_slug: str,
    db: AsyncSession,
    exclude_id: Optional[int] = None,
) -> str:
    """Generate a unique season slug, appending a numeric suffix if needed.

    Args:
        base_slug: The derived slug to start from
        db: Database session for checking uniqueness
        exclude_id: Season ID to exclude from the collision check (for updates)

    Returns:
        Unique slug (e.g., "miss-nepal-2025" or "miss-nepal-2025-2")
    """
    # Lazy import to avoid circular dependency
    from app.schemas.seasons import Season

    query = select(Season.slug).where(
        Season.slug.like(f"{base_slug}%")  # type: ignore[attr-defined]
    )
    if exclude_id is not None:
        query = query.where(Season.id != exclude_id)  # type: ignore[arg-type]

    result = await db.execute(query)
    taken = set(result.scalars().all())
    return next_available_slug(base_slug, taken)
