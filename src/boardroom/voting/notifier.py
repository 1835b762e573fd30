"""
Completion notifiers.

A notifier receives the "voting completed" payload once per terminal
transition, after the transaction that recorded it has committed. Raising
from ``notify`` leaves the outbox row undelivered so ``dispatch_pending``
can retry it.
"""
from __future__ import annotations

from typing import Any, Optional, Protocol, runtime_checkable

import httpx

from boardroom.app_logger import get_logger
from boardroom.db.base import as_utc
from boardroom.db.models import VotingCompletionEvent

log = get_logger("voting.notifier")


def event_payload(event: VotingCompletionEvent) -> dict[str, Any]:
    completed_at = as_utc(event.completed_at)
    return {
        "event": "voting.completed",
        "event_id": str(event.id),
        "item_type": event.item_type,
        "item_id": str(event.item_id),
        "final_status": event.final_status,
        "completion_reason": event.completion_reason,
        "tally": {
            "affirmative": event.votes_affirmative,
            "negative": event.votes_negative,
            "abstain": event.votes_abstain,
            "total": event.total_votes,
        },
        "total_eligible_voters": event.total_eligible_voters,
        "participation_rate": event.participation_rate,
        "approval_rate": event.approval_rate,
        "completed_at": completed_at.isoformat() if completed_at else None,
    }


@runtime_checkable
class CompletionNotifier(Protocol):
    async def notify(self, payload: dict[str, Any]) -> None: ...


class LoggingCompletionNotifier:
    """Default notifier: writes the completion to the application log."""

    async def notify(self, payload: dict[str, Any]) -> None:
        log.info(
            "voting completed: %s %s -> %s (%s)",
            payload["item_type"],
            payload["item_id"],
            payload["final_status"],
            payload["completion_reason"],
            extra={"completion": payload},
        )


class WebhookCompletionNotifier:
    """POSTs the completion payload as JSON; any non-2xx response raises."""

    def __init__(self, url: str, timeout: float = 10.0, headers: Optional[dict[str, str]] = None):
        self.url = url
        self.timeout = timeout
        self.headers = headers or {}

    async def notify(self, payload: dict[str, Any]) -> None:
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            r = await client.post(self.url, json=payload, headers=self.headers)
            r.raise_for_status()
        log.debug("webhook accepted completion %s (%s)", payload["event_id"], r.status_code)


def build_notifier(settings) -> CompletionNotifier:
    url = getattr(settings, "COMPLETION_WEBHOOK_URL", None)
    if url:
        log.info("completion notifications -> webhook %s", url)
        return WebhookCompletionNotifier(url, timeout=float(getattr(settings, "COMPLETION_WEBHOOK_TIMEOUT", 10.0)))
    return LoggingCompletionNotifier()


__all__ = [
    "CompletionNotifier",
    "LoggingCompletionNotifier",
    "WebhookCompletionNotifier",
    "build_notifier",
    "event_payload",
]
