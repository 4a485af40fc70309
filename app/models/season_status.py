"""Season lifecycle status and the per-status field requirement table."""

from __future__ import annotations

from enum import Enum
from typing import Any


class SeasonStatus(str, Enum):
    """Lifecycle status of a season."""

    UPCOMING = "upcoming"
    ONGOING = "ongoing"
    ENDED = "ended"

    @property
    def label(self) -> str:
        return self.value.capitalize()


class FieldRequirement(str, Enum):
    """How a status-dependent field must be treated for a given status."""

    REQUIRED = "required"
    EDITABLE = "editable"
    FORCED_ZERO = "forced-zero"
    FORCED_EMPTY = "forced-empty"


_REQUIREMENTS: dict[SeasonStatus, dict[str, FieldRequirement]] = {
    SeasonStatus.UPCOMING: {
        "audition_form_deadline": FieldRequirement.REQUIRED,
        "voting_end_date": FieldRequirement.REQUIRED,
        "price_per_vote": FieldRequirement.EDITABLE,
    },
    SeasonStatus.ONGOING: {
        "voting_end_date": FieldRequirement.REQUIRED,
        "price_per_vote": FieldRequirement.EDITABLE,
    },
    # Ended seasons take no votes and show no notices
    SeasonStatus.ENDED: {
        "price_per_vote": FieldRequirement.FORCED_ZERO,
        "notice": FieldRequirement.FORCED_EMPTY,
    },
}


def resolve_field_requirements(status: SeasonStatus | str) -> dict[str, FieldRequirement]:
    """Return the field requirement table for a status.

    Args:
        status: A SeasonStatus or its string value

    Returns:
        A fresh mapping of field name to FieldRequirement. Fields absent from
        the mapping are optional for that status.
    """
    return dict(_REQUIREMENTS[SeasonStatus(status)])


def required_fields(status: SeasonStatus | str) -> frozenset[str]:
    """Return the names of the fields a status makes mandatory."""
    return frozenset(
        name
        for name, requirement in resolve_field_requirements(status).items()
        if requirement is FieldRequirement.REQUIRED
    )


def forced_values(status: SeasonStatus | str) -> dict[str, Any]:
    """Return the value every forced field must hold for a status."""
    values: dict[str, Any] = {}
    for name, requirement in resolve_field_requirements(status).items():
        if requirement is FieldRequirement.FORCED_ZERO:
            values[name] = 0
        elif requirement is FieldRequirement.FORCED_EMPTY:
            values[name] = []
    return values
