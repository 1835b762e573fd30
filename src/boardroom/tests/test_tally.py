# src/boardroom/tests/test_tally.py
from __future__ import annotations

import uuid

import pytest

from boardroom.repositories import VoteLedgerRepository
from boardroom.voting.kinds import MINUTES, RESOLUTION, Tally
from boardroom.voting.tally import recompute_tally


async def _open(service, kind=RESOLUTION, **kw):
    item = await service.create_item(kind, title="Adopt budget", approval_threshold=100, minimum_quorum=100, **kw)
    return await service.open_voting(kind, item.id)


@pytest.mark.anyio
async def test_recompute_missing_item_is_noop(session):
    assert await recompute_tally(session, RESOLUTION, uuid.uuid4()) is None


@pytest.mark.anyio
async def test_recompute_is_idempotent(session, service, board):
    item = await _open(service)
    await service.cast_vote(RESOLUTION, item.id, board[0], "for")
    await service.cast_vote(RESOLUTION, item.id, board[1], "against")

    first = await recompute_tally(session, RESOLUTION, item.id)
    second = await recompute_tally(session, RESOLUTION, item.id)
    assert first == second == Tally(affirmative=1, negative=1)
    assert item.total_votes == item.votes_for + item.votes_against + item.votes_abstain == 2


@pytest.mark.anyio
async def test_counts_never_leak_across_items(session, service, board):
    a = await _open(service)
    b = await _open(service)
    await service.cast_vote(RESOLUTION, a.id, board[0], "for")
    await service.cast_vote(RESOLUTION, b.id, board[0], "against")
    await service.cast_vote(RESOLUTION, b.id, board[1], "abstain")

    assert await recompute_tally(session, RESOLUTION, a.id) == Tally(affirmative=1)
    assert await recompute_tally(session, RESOLUTION, b.id) == Tally(negative=1, abstain=1)


@pytest.mark.anyio
async def test_minutes_vocabulary(session, service, board):
    item = await _open(service, kind=MINUTES)
    await service.cast_vote(MINUTES, item.id, board[0], "approve")
    await service.cast_vote(MINUTES, item.id, board[1], "against")  # stored as reject

    counts = await VoteLedgerRepository(session, MINUTES).count_by_choice(item.id)
    assert counts == {"approve": 1, "reject": 1}
    assert (item.approve_votes, item.reject_votes, item.total_votes) == (1, 1, 2)


@pytest.mark.anyio
async def test_resync_repairs_drifted_tally(session, service, board):
    item = await _open(service)
    await service.cast_vote(RESOLUTION, item.id, board[0], "for")

    item.votes_for = 7
    item.total_votes = 7
    await session.commit()

    drifted = await service.resync_tallies(RESOLUTION)
    assert [(d.item_id, d.before.affirmative, d.after.affirmative) for d in drifted] == [(item.id, 7, 1)]
    assert item.votes_for == 1

    # second pass finds nothing
    assert await service.resync_tallies() == []
