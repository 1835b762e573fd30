# src/boardroom/voting/__init__.py
# Pure pieces only; the service (which needs the repositories) is imported
# explicitly from boardroom.voting.service.
from .kinds import KINDS, MINUTES, RESOLUTION, CompletionReason, ItemKind, ItemStatus, Tally, get_kind
from .notifier import (
    CompletionNotifier,
    LoggingCompletionNotifier,
    WebhookCompletionNotifier,
    build_notifier,
)
from .rules import Decision, evaluate
from .statistics import VotingStatistics, compute_statistics

__all__ = [
    "KINDS",
    "MINUTES",
    "RESOLUTION",
    "CompletionReason",
    "ItemKind",
    "ItemStatus",
    "Tally",
    "get_kind",
    "CompletionNotifier",
    "LoggingCompletionNotifier",
    "WebhookCompletionNotifier",
    "build_notifier",
    "Decision",
    "evaluate",
    "VotingStatistics",
    "compute_statistics",
]
