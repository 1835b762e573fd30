"""voting schema: profiles, resolutions, minutes, ballots, completion outbox

Revision ID: 0001_voting_schema
Revises:
Create Date: 2025-09-02 00:00:00

"""
from __future__ import annotations

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

from boardroom.db.base import GUID

# revision identifiers, used by Alembic.
revision: str = "0001_voting_schema"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

STATUSES = "'draft', 'voting', 'passed', 'failed'"


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    ]


def _voting_state(table: str) -> list:
    return [
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("status", sa.String(16), nullable=False, server_default="draft"),
        sa.Column("voting_deadline", sa.DateTime(timezone=True)),
        sa.Column("approval_threshold", sa.Integer(), nullable=False, server_default="75"),
        sa.Column("minimum_quorum", sa.Integer(), nullable=False, server_default="50"),
        sa.Column("total_eligible_voters", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("total_votes", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("votes_abstain", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("completed_at", sa.DateTime(timezone=True)),
        sa.CheckConstraint(f"status IN ({STATUSES})", name=f"ck_{table}_status"),
        sa.CheckConstraint("approval_threshold BETWEEN 0 AND 100", name=f"ck_{table}_approval_threshold"),
        sa.CheckConstraint("minimum_quorum BETWEEN 0 AND 100", name=f"ck_{table}_minimum_quorum"),
    ]


def _ballot(table: str, fk: str, parent: str, choices: tuple[str, ...]) -> None:
    values = ", ".join(f"'{c}'" for c in choices)
    op.create_table(
        table,
        sa.Column("id", GUID(), nullable=False),
        sa.Column(fk, GUID(), nullable=False),
        sa.Column("voter_id", GUID(), nullable=False),
        sa.Column("choice", sa.String(16), nullable=False),
        sa.Column("reason", sa.Text()),
        sa.Column("cast_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint([fk], [f"{parent}.id"], ondelete="CASCADE", name=f"fk_{table}_{fk}_{parent}"),
        sa.ForeignKeyConstraint(["voter_id"], ["profiles.id"], ondelete="CASCADE", name=f"fk_{table}_voter_id_profiles"),
        sa.UniqueConstraint(fk, "voter_id", name=f"uq_{table}_item_voter"),
        sa.CheckConstraint(f"choice IN ({values})", name=f"ck_{table}_choice"),
        sa.PrimaryKeyConstraint("id", name=f"pk_{table}"),
    )
    op.create_index(f"ix_{table}_{fk}", table, [fk])
    op.create_index(f"ix_{table}_voter_id", table, ["voter_id"])


def upgrade() -> None:
    op.create_table(
        "profiles",
        sa.Column("id", GUID(), nullable=False),
        sa.Column("email", sa.String(254), nullable=False),
        sa.Column("full_name", sa.String(255)),
        sa.Column("role", sa.String(32), nullable=False, server_default="board_member"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name="pk_profiles"),
        sa.UniqueConstraint("email", name="uq_profiles_email"),
        sa.CheckConstraint(
            "role IN ('admin', 'board_member', 'secretary', 'viewer')", name="ck_profiles_role"
        ),
    )

    op.create_table(
        "resolutions",
        sa.Column("id", GUID(), nullable=False),
        sa.Column("resolution_number", sa.String(32)),
        sa.Column("description", sa.Text()),
        sa.Column("votes_for", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("votes_against", sa.Integer(), nullable=False, server_default="0"),
        *_voting_state("resolutions"),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name="pk_resolutions"),
        sa.UniqueConstraint("resolution_number", name="uq_resolutions_resolution_number"),
    )

    op.create_table(
        "minutes",
        sa.Column("id", GUID(), nullable=False),
        sa.Column("meeting_date", sa.Date()),
        sa.Column("content", sa.Text()),
        sa.Column("approve_votes", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("reject_votes", sa.Integer(), nullable=False, server_default="0"),
        *_voting_state("minutes"),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name="pk_minutes"),
    )

    for table in ("resolutions", "minutes"):
        op.create_index(f"ix_{table}_status", table, ["status"])
        op.create_index(f"ix_{table}_voting_deadline", table, ["voting_deadline"])

    _ballot("resolution_votes", "resolution_id", "resolutions", ("for", "against", "abstain"))
    _ballot("minutes_votes", "minutes_id", "minutes", ("approve", "reject", "abstain"))

    op.create_table(
        "voting_completion_events",
        sa.Column("id", GUID(), nullable=False),
        sa.Column("item_type", sa.String(16), nullable=False),
        sa.Column("item_id", GUID(), nullable=False),
        sa.Column("final_status", sa.String(16), nullable=False),
        sa.Column("completion_reason", sa.String(32), nullable=False),
        sa.Column("votes_affirmative", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("votes_negative", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("votes_abstain", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("total_votes", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("total_eligible_voters", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("participation_rate", sa.Float(), nullable=False, server_default="0"),
        sa.Column("approval_rate", sa.Float(), nullable=False, server_default="0"),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("notified_at", sa.DateTime(timezone=True)),
        sa.Column("delivery_attempts", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("last_error", sa.Text()),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name="pk_voting_completion_events"),
        sa.UniqueConstraint("item_type", "item_id", name="uq_voting_completion_events_item"),
        sa.CheckConstraint("item_type IN ('resolution', 'minutes')", name="ck_voting_completion_events_item_type"),
        sa.CheckConstraint("final_status IN ('passed', 'failed')", name="ck_voting_completion_events_final_status"),
    )
    op.create_index(
        "ix_voting_completion_events_notified_at", "voting_completion_events", ["notified_at"]
    )


def downgrade() -> None:
    op.drop_table("voting_completion_events")
    op.drop_table("minutes_votes")
    op.drop_table("resolution_votes")
    op.drop_table("minutes")
    op.drop_table("resolutions")
    op.drop_table("profiles")
