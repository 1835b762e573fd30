from __future__ import annotations

import uuid
from typing import ClassVar

import sqlalchemy as sa
from sqlalchemy import ForeignKey, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from boardroom.db.base import Base, UUIDMixin, TimestampMixin, GUID
from ._helpers import VoteLedgerMixin, choice_check_constraint

RESOLUTION_CHOICES = ("for", "against", "abstain")
MINUTES_CHOICES = ("approve", "reject", "abstain")


class ResolutionVote(UUIDMixin, TimestampMixin, VoteLedgerMixin, Base):
    __tablename__ = "resolution_votes"

    NOTE: ClassVar[str] = "description=One row per voter per resolution (upserted on re-cast)."

    __table_args__ = (
        UniqueConstraint("resolution_id", "voter_id", name="uq_resolution_votes_item_voter"),
        choice_check_constraint(RESOLUTION_CHOICES),
        {"comment": NOTE},
    )

    resolution_id: Mapped[uuid.UUID] = mapped_column(
        GUID(), ForeignKey("resolutions.id", ondelete="CASCADE"), nullable=False, index=True
    )

    @property
    def item_id(self) -> uuid.UUID:
        return self.resolution_id


class MinutesVote(UUIDMixin, TimestampMixin, VoteLedgerMixin, Base):
    __tablename__ = "minutes_votes"

    NOTE: ClassVar[str] = "description=One row per voter per minutes record (upserted on re-cast)."

    __table_args__ = (
        UniqueConstraint("minutes_id", "voter_id", name="uq_minutes_votes_item_voter"),
        choice_check_constraint(MINUTES_CHOICES),
        {"comment": NOTE},
    )

    minutes_id: Mapped[uuid.UUID] = mapped_column(
        GUID(), ForeignKey("minutes.id", ondelete="CASCADE"), nullable=False, index=True
    )

    @property
    def item_id(self) -> uuid.UUID:
        return self.minutes_id
