"""Initial schema: events, seasons and season-owned tables, payments.

Revision ID: 20251019_000001
Revises:
Create Date: 2025-10-19 00:00:01
"""

from alembic import op  # type: ignore[attr-defined]
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

revision = "20251019_000001"
down_revision = None
branch_labels = None
depends_on = None


# Enum members are stored by name, matching SQLModel's SAEnum defaults.
MANAGED_BY_VALUES = ("SELF", "PARTNER")
SEASON_STATUS_VALUES = ("UPCOMING", "ONGOING", "ENDED")
GENDER_VALUES = ("MALE", "FEMALE", "OTHER")


def _enum(name: str, values: tuple[str, ...]) -> postgresql.ENUM:
    return postgresql.ENUM(*values, name=name, create_type=False)


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    ]


def upgrade() -> None:
    bind = op.get_bind()
    managed_by = _enum("managedby", MANAGED_BY_VALUES)
    season_status = _enum("seasonstatus", SEASON_STATUS_VALUES)
    gender = _enum("gender", GENDER_VALUES)
    for enum in (managed_by, season_status, gender):
        enum.create(bind, checkfirst=True)

    op.create_table(
        "events",
        sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("overview", sa.String(), nullable=False),
        sa.Column("managed_by", managed_by, nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_events_name", "events", ["name"], unique=False)

    op.create_table(
        "seasons",
        sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
        sa.Column("event_id", sa.Integer(), sa.ForeignKey("events.id"), nullable=False),
        sa.Column("year", sa.Integer(), nullable=False),
        sa.Column("status", season_status, nullable=False),
        sa.Column("slug", sa.String(), nullable=False),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=False),
        sa.Column("audition_form_deadline", sa.Date(), nullable=True),
        sa.Column("voting_opened", sa.Boolean(), nullable=False),
        sa.Column("voting_end_date", sa.Date(), nullable=True),
        sa.Column("get_ticket_link", sa.String(), nullable=True),
        sa.Column("price_per_vote", sa.Float(), nullable=False),
        sa.Column("image", sa.String(), nullable=False),
        sa.Column("title_image", sa.String(), nullable=True),
        sa.Column("poster_image", sa.String(), nullable=True),
        sa.Column("notice", sa.JSON(), nullable=False),
        sa.Column("gallery", sa.JSON(), nullable=False),
        sa.Column("timeline", sa.JSON(), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint("event_id", "year", name="uq_seasons_event_year"),
    )
    op.create_index("ix_seasons_event_id", "seasons", ["event_id"], unique=False)
    op.create_index("ix_seasons_status", "seasons", ["status"], unique=False)
    op.create_index("ix_seasons_slug", "seasons", ["slug"], unique=True)

    op.create_table(
        "contestants",
        sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
        sa.Column("season_id", sa.Integer(), sa.ForeignKey("seasons.id"), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("intro", sa.String(), nullable=False),
        sa.Column("gender", gender, nullable=False),
        sa.Column("address", sa.String(), nullable=False),
        sa.Column("image", sa.String(), nullable=False),
        sa.Column("votes", sa.Integer(), nullable=False),
    )
    op.create_index("ix_contestants_season_id", "contestants", ["season_id"], unique=False)

    op.create_table(
        "jury_members",
        sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
        sa.Column("season_id", sa.Integer(), sa.ForeignKey("seasons.id"), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("designation", sa.String(), nullable=True),
        sa.Column("image", sa.String(), nullable=False),
    )
    op.create_index("ix_jury_members_season_id", "jury_members", ["season_id"], unique=False)

    op.create_table(
        "winners",
        sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
        sa.Column("season_id", sa.Integer(), sa.ForeignKey("seasons.id"), nullable=False),
        sa.Column("rank", sa.String(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("image", sa.String(), nullable=False),
        sa.Column("slug", sa.String(), nullable=True),
    )
    op.create_index("ix_winners_season_id", "winners", ["season_id"], unique=False)

    op.create_table(
        "payments",
        sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
        sa.Column("prn", sa.String(), nullable=False),
        sa.Column(
            "contestant_id", sa.Integer(), sa.ForeignKey("contestants.id"), nullable=True
        ),
        sa.Column("contestant_name", sa.String(), nullable=False),
        sa.Column("vote", sa.Integer(), nullable=False),
        sa.Column("amount", sa.Float(), nullable=False),
        sa.Column("currency", sa.String(), nullable=False),
        sa.Column("status", sa.String(), nullable=False),
        sa.Column("api_verification_status", sa.String(), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_payments_prn", "payments", ["prn"], unique=True)
    op.create_index("ix_payments_contestant_id", "payments", ["contestant_id"], unique=False)
    op.create_index("ix_payments_status", "payments", ["status"], unique=False)


def downgrade() -> None:
    op.drop_table("payments")
    op.drop_table("winners")
    op.drop_table("jury_members")
    op.drop_table("contestants")
    op.drop_table("seasons")
    op.drop_table("events")

    bind = op.get_bind()
    for name, values in (
        ("gender", GENDER_VALUES),
        ("seasonstatus", SEASON_STATUS_VALUES),
        ("managedby", MANAGED_BY_VALUES),
    ):
        _enum(name, values).drop(bind, checkfirst=True)
