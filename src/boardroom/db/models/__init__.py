from boardroom.db.base import Base

from .profiles import Profile, PROFILE_ROLES
from .resolutions import Resolution
from .minutes import Minutes
from .votes import ResolutionVote, MinutesVote, RESOLUTION_CHOICES, MINUTES_CHOICES
from .completion_events import VotingCompletionEvent

__all__ = [
    "Base",
    "Profile",
    "PROFILE_ROLES",
    "Resolution",
    "Minutes",
    "ResolutionVote",
    "MinutesVote",
    "RESOLUTION_CHOICES",
    "MINUTES_CHOICES",
    "VotingCompletionEvent",
]
