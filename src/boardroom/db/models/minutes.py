from __future__ import annotations

from datetime import date
from typing import ClassVar, Optional

import sqlalchemy as sa
from sqlalchemy.orm import Mapped, mapped_column

from boardroom.db.base import Base, UUIDMixin, TimestampMixin
from ._helpers import VotingStateMixin, item_check_constraints


class Minutes(UUIDMixin, TimestampMixin, VotingStateMixin, Base):
    __tablename__ = "minutes"

    NOTE: ClassVar[str] = (
        "description=Meeting minutes submitted for approval. "
        "approve_votes/reject_votes/votes_abstain/total_votes mirror minutes_votes."
    )

    __table_args__ = (
        *item_check_constraints(),
        {"comment": NOTE},
    )

    meeting_date: Mapped[Optional[date]] = mapped_column(sa.Date)
    content: Mapped[Optional[str]] = mapped_column(sa.Text)

    approve_votes: Mapped[int] = mapped_column(sa.Integer, nullable=False, default=0)
    reject_votes: Mapped[int] = mapped_column(sa.Integer, nullable=False, default=0)

    def __repr__(self) -> str:
        return f"<Minutes {self.id} status={self.status}>"
