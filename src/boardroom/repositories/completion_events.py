"""Completion outbox: record once, claim for delivery, release on failure."""

from __future__ import annotations

from datetime import datetime
from typing import Optional
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from boardroom.db.models import VotingCompletionEvent
from .base import BaseRepository


class CompletionEventRepository(BaseRepository[VotingCompletionEvent]):
    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, VotingCompletionEvent)

    async def get_for_item(self, item_type: str, item_id: UUID) -> Optional[VotingCompletionEvent]:
        result = await self.session.execute(
            select(VotingCompletionEvent).where(
                VotingCompletionEvent.item_type == item_type,
                VotingCompletionEvent.item_id == item_id,
            ).execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def list(self, *, pending: Optional[bool] = None) -> list[VotingCompletionEvent]:
        criteria = []
        if pending is True:
            criteria.append(VotingCompletionEvent.notified_at.is_(None))
        elif pending is False:
            criteria.append(VotingCompletionEvent.notified_at.is_not(None))
        return await self.get_all(*criteria, order_by=VotingCompletionEvent.completed_at)

    async def claim(self, event_id: UUID, now: datetime) -> bool:
        """
        Mark an event delivered if nobody else has. Returns False when another
        dispatcher already holds it.
        """
        result = await self.session.execute(
            update(VotingCompletionEvent)
            .where(VotingCompletionEvent.id == event_id, VotingCompletionEvent.notified_at.is_(None))
            .values(notified_at=now, delivery_attempts=VotingCompletionEvent.delivery_attempts + 1)
            .execution_options(synchronize_session=False)
        )
        return (result.rowcount or 0) == 1

    async def release(self, event_id: UUID, error: str) -> None:
        await self.session.execute(
            update(VotingCompletionEvent)
            .where(VotingCompletionEvent.id == event_id)
            .values(notified_at=None, last_error=error[:2000])
            .execution_options(synchronize_session=False)
        )
