from __future__ import annotations

import uuid
from datetime import datetime
from typing import Optional

import sqlalchemy as sa
from sqlalchemy import ForeignKey
from sqlalchemy.orm import Mapped, mapped_column

from boardroom.db.base import GUID, utcnow

ITEM_STATUSES = ("draft", "voting", "passed", "failed")


def item_check_constraints() -> tuple[sa.CheckConstraint, ...]:
    statuses = ", ".join(f"'{s}'" for s in ITEM_STATUSES)
    return (
        sa.CheckConstraint(f"status IN ({statuses})", name="status"),
        sa.CheckConstraint("approval_threshold BETWEEN 0 AND 100", name="approval_threshold"),
        sa.CheckConstraint("minimum_quorum BETWEEN 0 AND 100", name="minimum_quorum"),
    )


def choice_check_constraint(choices: tuple[str, ...]) -> sa.CheckConstraint:
    values = ", ".join(f"'{c}'" for c in choices)
    return sa.CheckConstraint(f"choice IN ({values})", name="choice")


class VotingStateMixin:
    """Lifecycle, thresholds and the cached tally shared by every votable item."""

    title: Mapped[str] = mapped_column(sa.Text, nullable=False)
    status: Mapped[str] = mapped_column(sa.String(16), nullable=False, default="draft", index=True)
    voting_deadline: Mapped[Optional[datetime]] = mapped_column(sa.DateTime(timezone=True), index=True)

    # percentages, 0-100
    approval_threshold: Mapped[int] = mapped_column(sa.Integer, nullable=False, default=75)
    minimum_quorum: Mapped[int] = mapped_column(sa.Integer, nullable=False, default=50)
    total_eligible_voters: Mapped[int] = mapped_column(sa.Integer, nullable=False, default=0)

    # derived from the vote ledger; only ever written by the tally recompute
    total_votes: Mapped[int] = mapped_column(sa.Integer, nullable=False, default=0)
    votes_abstain: Mapped[int] = mapped_column(sa.Integer, nullable=False, default=0)

    completed_at: Mapped[Optional[datetime]] = mapped_column(sa.DateTime(timezone=True))


class VoteLedgerMixin:
    voter_id: Mapped[uuid.UUID] = mapped_column(
        GUID(), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True
    )
    choice: Mapped[str] = mapped_column(sa.String(16), nullable=False)
    reason: Mapped[Optional[str]] = mapped_column(sa.Text)
    cast_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), nullable=False, default=utcnow
    )
