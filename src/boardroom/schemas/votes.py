# schemas/votes.py
from __future__ import annotations

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel

from .base import APIModel


class VoteIn(BaseModel):
    voter_id: uuid.UUID
    choice: str  # "for" | "against" | "abstain" (resolutions), "approve" | "reject" | "abstain" (minutes)
    reason: Optional[str] = None


class VoteOut(APIModel):
    id: uuid.UUID
    item_id: uuid.UUID
    voter_id: uuid.UUID
    choice: str
    reason: Optional[str] = None
    cast_at: datetime
    updated_at: datetime
