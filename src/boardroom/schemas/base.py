from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class APIModel(BaseModel):
    # read straight off ORM rows
    model_config = ConfigDict(
        from_attributes=True,
        extra="ignore",
        populate_by_name=True,
    )
