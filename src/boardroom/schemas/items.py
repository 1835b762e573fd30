# schemas/items.py
from __future__ import annotations

import uuid
from datetime import date, datetime
from typing import Annotated, Optional

from pydantic import BaseModel, Field

from .base import APIModel

Percent = Annotated[int, Field(ge=0, le=100)]


class VotingFields(BaseModel):
    voting_deadline: Optional[datetime] = None
    approval_threshold: Optional[Percent] = None
    minimum_quorum: Optional[Percent] = None


class ResolutionCreate(VotingFields):
    title: str = Field(min_length=1)
    resolution_number: Optional[str] = None
    description: Optional[str] = None


class MinutesCreate(VotingFields):
    title: str = Field(min_length=1)
    meeting_date: Optional[date] = None
    content: Optional[str] = None


class OpenVotingIn(VotingFields):
    pass


class VotableItemOut(APIModel):
    id: uuid.UUID
    title: str
    status: str
    voting_deadline: Optional[datetime] = None
    approval_threshold: int
    minimum_quorum: int
    total_eligible_voters: int
    total_votes: int
    votes_abstain: int
    completed_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime


class ResolutionOut(VotableItemOut):
    resolution_number: Optional[str] = None
    description: Optional[str] = None
    votes_for: int
    votes_against: int


class MinutesOut(VotableItemOut):
    meeting_date: Optional[date] = None
    content: Optional[str] = None
    approve_votes: int
    reject_votes: int
