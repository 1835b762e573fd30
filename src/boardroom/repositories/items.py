"""Item store for resolutions and minutes, parameterised by ``ItemKind``."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession

from boardroom.voting.kinds import ItemKind, ItemStatus
from .base import BaseRepository


class VotableItemRepository(BaseRepository[Any]):
    def __init__(self, session: AsyncSession, kind: ItemKind) -> None:
        super().__init__(session, kind.item_model)
        self.kind = kind

    async def list(self, *, status: Optional[str] = None) -> list[Any]:
        model = self.model_class
        criteria = [model.status == status] if status else []
        return await self.get_all(*criteria, order_by=model.created_at.desc())

    async def list_expired(self, now: datetime) -> list[Any]:
        """Items still open whose deadline is at or before ``now``."""
        model = self.model_class
        return await self.get_all(
            model.status == ItemStatus.VOTING.value,
            model.voting_deadline.is_not(None),
            model.voting_deadline <= now,
            order_by=model.voting_deadline,
        )

    async def list_upcoming(self, now: datetime, until: datetime) -> list[Any]:
        model = self.model_class
        return await self.get_all(
            model.status == ItemStatus.VOTING.value,
            model.voting_deadline > now,
            model.voting_deadline <= until,
            order_by=model.voting_deadline,
        )

    async def delete(self, instance: Any) -> None:
        # ledger rows first; SQLite only cascades with PRAGMA foreign_keys on
        await self.session.execute(
            delete(self.kind.vote_model).where(self.kind.vote_item_column == instance.id)
        )
        await super().delete(instance)
