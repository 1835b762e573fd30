from __future__ import annotations

import uuid
from datetime import datetime
from typing import ClassVar, Optional

import sqlalchemy as sa
from sqlalchemy import UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from boardroom.db.base import Base, UUIDMixin, TimestampMixin, GUID


class VotingCompletionEvent(UUIDMixin, TimestampMixin, Base):
    """Outbox row written in the same transaction as a terminal status change."""

    __tablename__ = "voting_completion_events"

    NOTE: ClassVar[str] = (
        "description=Exactly one row per votable item that reached passed/failed. "
        "notified_at is set once the completion notifier accepted the event."
    )

    __table_args__ = (
        UniqueConstraint("item_type", "item_id", name="uq_voting_completion_events_item"),
        sa.CheckConstraint("item_type IN ('resolution', 'minutes')", name="item_type"),
        sa.CheckConstraint("final_status IN ('passed', 'failed')", name="final_status"),
        {"comment": NOTE},
    )

    item_type: Mapped[str] = mapped_column(sa.String(16), nullable=False)
    item_id: Mapped[uuid.UUID] = mapped_column(GUID(), nullable=False)
    final_status: Mapped[str] = mapped_column(sa.String(16), nullable=False)
    completion_reason: Mapped[str] = mapped_column(sa.String(32), nullable=False)

    votes_affirmative: Mapped[int] = mapped_column(sa.Integer, nullable=False, default=0)
    votes_negative: Mapped[int] = mapped_column(sa.Integer, nullable=False, default=0)
    votes_abstain: Mapped[int] = mapped_column(sa.Integer, nullable=False, default=0)
    total_votes: Mapped[int] = mapped_column(sa.Integer, nullable=False, default=0)
    total_eligible_voters: Mapped[int] = mapped_column(sa.Integer, nullable=False, default=0)
    participation_rate: Mapped[float] = mapped_column(sa.Float, nullable=False, default=0.0)
    approval_rate: Mapped[float] = mapped_column(sa.Float, nullable=False, default=0.0)

    completed_at: Mapped[datetime] = mapped_column(sa.DateTime(timezone=True), nullable=False)
    notified_at: Mapped[Optional[datetime]] = mapped_column(sa.DateTime(timezone=True), index=True)
    delivery_attempts: Mapped[int] = mapped_column(sa.Integer, nullable=False, default=0)
    last_error: Mapped[Optional[str]] = mapped_column(sa.Text)

    def __repr__(self) -> str:
        return f"<VotingCompletionEvent {self.item_type}:{self.item_id} {self.final_status}>"
