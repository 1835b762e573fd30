from __future__ import annotations

import uuid
from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field

from .base import APIModel

Role = Literal["admin", "board_member", "secretary", "viewer"]


class ProfileCreate(BaseModel):
    email: str = Field(min_length=3, max_length=254)
    full_name: Optional[str] = None
    role: Role = "board_member"
    is_active: bool = True


class ProfileUpdate(BaseModel):
    full_name: Optional[str] = None
    role: Optional[Role] = None
    is_active: Optional[bool] = None


class ProfileOut(APIModel):
    id: uuid.UUID
    email: str
    full_name: Optional[str] = None
    role: str
    is_active: bool
    created_at: datetime
    updated_at: datetime
