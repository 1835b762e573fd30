# schemas/voting.py
from __future__ import annotations

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel

from .base import APIModel
from .votes import VoteOut


class TallyOut(APIModel):
    affirmative: int
    negative: int
    abstain: int
    total: int


class DecisionOut(BaseModel):
    status: str
    reason: Optional[str] = None
    approval_rate: float
    participation_rate: float
    approval_met: bool
    quorum_met: bool
    deadline_passed: bool
    total_eligible_voters: int


class CompletionEventOut(APIModel):
    id: uuid.UUID
    item_type: str
    item_id: uuid.UUID
    final_status: str
    completion_reason: str
    votes_affirmative: int
    votes_negative: int
    votes_abstain: int
    total_votes: int
    total_eligible_voters: int
    participation_rate: float
    approval_rate: float
    completed_at: datetime
    notified_at: Optional[datetime] = None
    delivery_attempts: int
    last_error: Optional[str] = None


class VoteOutcomeOut(BaseModel):
    item_type: str
    item_id: uuid.UUID
    status: str
    changed: bool = True
    tally: TallyOut
    decision: Optional[DecisionOut] = None
    vote: Optional[VoteOut] = None
    event: Optional[CompletionEventOut] = None


class QuorumStatusOut(APIModel):
    met: bool
    required: int
    actual: int
    percentage: float
    shortfall: Optional[int] = None


class VotingMarginOut(APIModel):
    absolute_margin: int
    percentage_margin: float
    margin_type: str
    description: str


class CommentAnalysisOut(APIModel):
    total_comments: int
    comments_by_side: dict[str, int]
    average_comment_length: int
    has_significant_concerns: bool
    concern_keywords: list[str]
    participation_with_comments: float


class StatisticsOut(APIModel):
    total_votes: int
    total_eligible_voters: int
    affirmative_votes: int
    negative_votes: int
    abstain_votes: int
    participation_rate: float
    approval_percentage: float
    rejection_percentage: float
    abstention_percentage: float
    is_unanimous: bool
    unanimous_type: Optional[str] = None
    quorum_status: QuorumStatusOut
    voting_margin: VotingMarginOut
    comment_analysis: CommentAnalysisOut
    passed: bool
    passed_reason: str
    engagement_score: int
    consensus_level: str
    non_voters: list[uuid.UUID] = []


class CloseExpiredOut(BaseModel):
    closed: dict[str, list[uuid.UUID]]


class UpcomingDeadlineOut(APIModel):
    kind: str
    item_id: uuid.UUID
    title: str
    voting_deadline: datetime
    hours_remaining: float
    total_votes: int
    total_eligible_voters: int


class ResyncEntryOut(BaseModel):
    kind: str
    item_id: uuid.UUID
    before: TallyOut
    after: TallyOut


class DispatchOut(APIModel):
    delivered: list[uuid.UUID]
    failed: list[uuid.UUID]
