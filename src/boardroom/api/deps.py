# src/boardroom/api/deps.py
from __future__ import annotations

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from boardroom.db.session import get_db
from boardroom.voting.notifier import CompletionNotifier, LoggingCompletionNotifier
from boardroom.voting.service import VotingService


def get_notifier(request: Request) -> CompletionNotifier:
    # set in the app lifespan; fall back to logging when running without it
    notifier = getattr(request.app.state, "completion_notifier", None)
    return notifier or LoggingCompletionNotifier()


def get_voting_service(
    session: AsyncSession = Depends(get_db),
    notifier: CompletionNotifier = Depends(get_notifier),
) -> VotingService:
    return VotingService(session, notifier)
