from .base import APIModel
from .items import (
    MinutesCreate,
    MinutesOut,
    OpenVotingIn,
    ResolutionCreate,
    ResolutionOut,
    VotableItemOut,
)
from .profiles import ProfileCreate, ProfileOut, ProfileUpdate
from .votes import VoteIn, VoteOut
from .voting import (
    CloseExpiredOut,
    CompletionEventOut,
    DecisionOut,
    DispatchOut,
    ResyncEntryOut,
    StatisticsOut,
    TallyOut,
    UpcomingDeadlineOut,
    VoteOutcomeOut,
)

__all__ = [
    "APIModel",
    "MinutesCreate",
    "MinutesOut",
    "OpenVotingIn",
    "ResolutionCreate",
    "ResolutionOut",
    "VotableItemOut",
    "ProfileCreate",
    "ProfileOut",
    "ProfileUpdate",
    "VoteIn",
    "VoteOut",
    "CloseExpiredOut",
    "CompletionEventOut",
    "DecisionOut",
    "DispatchOut",
    "ResyncEntryOut",
    "StatisticsOut",
    "TallyOut",
    "UpcomingDeadlineOut",
    "VoteOutcomeOut",
]
