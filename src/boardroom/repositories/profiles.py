"""Profile store: voter lookup and the eligible-voter snapshot."""

from __future__ import annotations

from typing import Iterable, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from boardroom.db.models import Profile
from .base import BaseRepository


class ProfileRepository(BaseRepository[Profile]):
    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Profile)

    async def get_by_email(self, email: str) -> Optional[Profile]:
        result = await self.session.execute(select(Profile).where(Profile.email == email))
        return result.scalar_one_or_none()

    async def list(self, *, role: Optional[str] = None, active: Optional[bool] = None) -> list[Profile]:
        criteria = []
        if role is not None:
            criteria.append(Profile.role == role)
        if active is not None:
            criteria.append(Profile.is_active.is_(active))
        return await self.get_all(*criteria, order_by=Profile.email)

    def _eligible(self, roles: Iterable[str]) -> list:
        return [Profile.is_active.is_(True), Profile.role.in_(list(roles))]

    async def count_eligible(self, roles: Iterable[str]) -> int:
        """Active accounts whose role may vote."""
        return await self.count(*self._eligible(roles))

    async def list_eligible_ids(self, roles: Iterable[str]) -> list[UUID]:
        result = await self.session.execute(
            select(Profile.id).where(*self._eligible(roles)).order_by(Profile.email)
        )
        return list(result.scalars().all())
