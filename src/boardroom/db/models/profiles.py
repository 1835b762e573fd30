from __future__ import annotations

from typing import ClassVar, Optional

import sqlalchemy as sa
from sqlalchemy.orm import Mapped, mapped_column

from boardroom.db.base import Base, UUIDMixin, TimestampMixin

PROFILE_ROLES = ("admin", "board_member", "secretary", "viewer")


class Profile(UUIDMixin, TimestampMixin, Base):
    __tablename__ = "profiles"

    NOTE: ClassVar[str] = (
        "description=Board accounts. Active accounts holding a voting-eligible role "
        "make up the eligible-voter count used by quorum checks."
    )

    __table_args__ = (
        sa.CheckConstraint(
            "role IN (" + ", ".join(f"'{r}'" for r in PROFILE_ROLES) + ")", name="role"
        ),
        {"comment": NOTE},
    )

    email: Mapped[str] = mapped_column(sa.String(254), nullable=False, unique=True)
    full_name: Mapped[Optional[str]] = mapped_column(sa.String(255))
    role: Mapped[str] = mapped_column(sa.String(32), nullable=False, default="board_member")
    is_active: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, default=True)

    def __repr__(self) -> str:
        return f"<Profile {self.email} role={self.role} active={self.is_active}>"
