from __future__ import annotations

from typing import ClassVar, Optional

import sqlalchemy as sa
from sqlalchemy.orm import Mapped, mapped_column

from boardroom.db.base import Base, UUIDMixin, TimestampMixin
from ._helpers import VotingStateMixin, item_check_constraints


class Resolution(UUIDMixin, TimestampMixin, VotingStateMixin, Base):
    __tablename__ = "resolutions"

    # Constant (not mapped).
    NOTE: ClassVar[str] = (
        "description=Board resolutions put to a vote. "
        "votes_for/votes_against/votes_abstain/total_votes mirror resolution_votes "
        "and are recomputed on every ledger change."
    )

    __table_args__ = (
        *item_check_constraints(),
        {"comment": NOTE},
    )

    resolution_number: Mapped[Optional[str]] = mapped_column(sa.String(32), unique=True)
    description: Mapped[Optional[str]] = mapped_column(sa.Text)

    votes_for: Mapped[int] = mapped_column(sa.Integer, nullable=False, default=0)
    votes_against: Mapped[int] = mapped_column(sa.Integer, nullable=False, default=0)

    def __repr__(self) -> str:
        return f"<Resolution {self.id} status={self.status}>"
