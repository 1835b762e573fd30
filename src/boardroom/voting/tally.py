"""
Tally recomputation.

The cached counts on an item are always rebuilt from the ledger with one
``GROUP BY choice`` scoped to that item, never incremented, so the result
does not depend on the order in which votes arrived.
"""
from __future__ import annotations

from datetime import datetime
from typing import Any, Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from boardroom.app_logger import get_logger
from boardroom.db.base import utcnow
from boardroom.repositories.items import VotableItemRepository
from boardroom.repositories.votes import VoteLedgerRepository
from .kinds import ItemKind, Tally

log = get_logger("voting.tally")


async def apply_tally(session: AsyncSession, kind: ItemKind, item: Any, now: datetime) -> Tally:
    """Recount ``item``'s ledger and write the four tally fields onto it."""
    counts = await VoteLedgerRepository(session, kind).count_by_choice(item.id)
    tally = kind.tally_from_counts(counts)
    kind.write_tally(item, tally)
    item.updated_at = now
    await session.flush()
    return tally


async def recompute_tally(
    session: AsyncSession,
    kind: ItemKind,
    item_id: UUID,
    now: Optional[datetime] = None,
) -> Optional[Tally]:
    """
    Rebuild the tally of one item. Returns ``None`` (and does nothing) when
    the item no longer exists. Does not commit.
    """
    item = await VotableItemRepository(session, kind).get_by_id(item_id, for_update=True)
    if item is None:
        log.debug("recompute skipped: %s %s no longer exists", kind.name, item_id)
        return None
    return await apply_tally(session, kind, item, now or utcnow())
