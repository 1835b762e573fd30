# src/boardroom/api/routers/voting.py
"""Cross-kind operations: deadline sweep, tally resync and the completion outbox."""
from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from boardroom.api.deps import get_voting_service
from boardroom.schemas import (
    CloseExpiredOut,
    CompletionEventOut,
    DispatchOut,
    ResyncEntryOut,
    TallyOut,
    UpcomingDeadlineOut,
)
from boardroom.voting.service import VotingService

router = APIRouter(prefix="/voting", tags=["voting"])


@router.post("/deadlines/close-expired", response_model=CloseExpiredOut)
async def close_expired(svc: VotingService = Depends(get_voting_service)):
    """Settle every open item whose deadline has passed (meant for a cron job)."""
    return CloseExpiredOut(closed=await svc.close_expired())


@router.get("/deadlines/upcoming", response_model=list[UpcomingDeadlineOut])
async def upcoming_deadlines(
    hours_ahead: int = Query(24, ge=1, le=24 * 30),
    svc: VotingService = Depends(get_voting_service),
):
    return [UpcomingDeadlineOut.model_validate(u) for u in await svc.upcoming_deadlines(hours_ahead)]


@router.post("/tallies/resync", response_model=list[ResyncEntryOut])
async def resync_tallies(svc: VotingService = Depends(get_voting_service)):
    """Recount every item from its ballots and report the ones whose cached tally had drifted."""
    entries = await svc.resync_tallies()
    return [
        ResyncEntryOut(
            kind=e.kind,
            item_id=e.item_id,
            before=TallyOut.model_validate(e.before),
            after=TallyOut.model_validate(e.after),
        )
        for e in entries
    ]


@router.get("/completions", response_model=list[CompletionEventOut])
async def list_completions(svc: VotingService = Depends(get_voting_service)):
    return [CompletionEventOut.model_validate(e) for e in await svc.list_completion_events()]


@router.post("/notifications/dispatch", response_model=DispatchOut)
async def dispatch_pending(svc: VotingService = Depends(get_voting_service)):
    """Retry delivery of completion events the notifier has not accepted yet."""
    return DispatchOut.model_validate(await svc.dispatch_pending())
