"""
Vote ledger: one row per (item, voter), upserted on re-cast.

All queries take the item id explicitly; nothing here aggregates across items.
"""

from datetime import datetime
from typing import Any, Optional
from uuid import UUID

from sqlalchemy import delete, func, select
from sqlalchemy.dialects import postgresql as psql
from sqlalchemy.dialects import sqlite as sqlite_dialect
from sqlalchemy.ext.asyncio import AsyncSession

from boardroom.app_logger import get_logger
from boardroom.voting.kinds import ItemKind
from .base import BaseRepository

logger = get_logger("repositories.votes")

_UPSERT_INSERTS = {
    "postgresql": psql.insert,
    "sqlite": sqlite_dialect.insert,
}


class VoteLedgerRepository(BaseRepository[Any]):
    def __init__(self, session: AsyncSession, kind: ItemKind) -> None:
        super().__init__(session, kind.vote_model)
        self.kind = kind

    def _scope(self, item_id: UUID, voter_id: Optional[UUID] = None) -> list:
        criteria = [self.kind.vote_item_column == item_id]
        if voter_id is not None:
            criteria.append(self.model_class.voter_id == voter_id)
        return criteria

    async def get(self, item_id: UUID, voter_id: UUID) -> Optional[Any]:
        stmt = (
            select(self.model_class)
            .where(*self._scope(item_id, voter_id))
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_for_item(self, item_id: UUID) -> list[Any]:
        return await self.get_all(*self._scope(item_id), order_by=self.model_class.cast_at)

    async def upsert(
        self,
        item_id: UUID,
        voter_id: UUID,
        choice: str,
        reason: Optional[str],
        cast_at: datetime,
    ) -> Any:
        """
        Insert the voter's ballot, or overwrite their previous one.

        Uses ``INSERT .. ON CONFLICT (item, voter) DO UPDATE`` where the dialect
        supports it; elsewhere falls back to select-then-write inside the
        caller's transaction (the item row lock serialises writers).
        """
        table = self.model_class.__table__
        fk = self.kind.item_fk
        dialect = self.session.get_bind().dialect.name
        make_insert = _UPSERT_INSERTS.get(dialect)

        if make_insert is not None:
            ins = make_insert(table).values(
                {fk: item_id, "voter_id": voter_id, "choice": choice, "reason": reason, "cast_at": cast_at}
            )
            upsert = ins.on_conflict_do_update(
                index_elements=[table.c[fk], table.c.voter_id],
                set_={
                    "choice": ins.excluded.choice,
                    "reason": ins.excluded.reason,
                    "cast_at": ins.excluded.cast_at,
                    "updated_at": cast_at,
                },
            )
            await self.session.execute(upsert)
            vote = await self.get(item_id, voter_id)
        else:
            vote = await self.get(item_id, voter_id)
            if vote is None:
                vote = await self.create(**{fk: item_id}, voter_id=voter_id, choice=choice, reason=reason, cast_at=cast_at)
            else:
                await self.update(vote, choice=choice, reason=reason, cast_at=cast_at)

        logger.debug(f"{self.kind.name} {item_id}: voter {voter_id} -> {choice}")
        return vote

    async def remove(self, item_id: UUID, voter_id: UUID) -> bool:
        result = await self.session.execute(
            delete(self.model_class).where(*self._scope(item_id, voter_id))
        )
        return (result.rowcount or 0) > 0

    async def count_by_choice(self, item_id: UUID) -> dict[str, int]:
        stmt = (
            select(self.model_class.choice, func.count())
            .where(*self._scope(item_id))
            .group_by(self.model_class.choice)
        )
        result = await self.session.execute(stmt)
        return {choice: int(n) for choice, n in result.all()}
