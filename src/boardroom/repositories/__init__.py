from .base import BaseRepository
from .completion_events import CompletionEventRepository
from .items import VotableItemRepository
from .profiles import ProfileRepository
from .votes import VoteLedgerRepository

__all__ = [
    "BaseRepository",
    "CompletionEventRepository",
    "VotableItemRepository",
    "ProfileRepository",
    "VoteLedgerRepository",
]
