# src/boardroom/api/routers/profiles.py
from __future__ import annotations

import uuid
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from boardroom.db.session import get_db
from boardroom.exceptions import ProfileNotFoundError
from boardroom.repositories import ProfileRepository
from boardroom.schemas import ProfileCreate, ProfileOut, ProfileUpdate

router = APIRouter(prefix="/profiles", tags=["profiles"])


@router.post("", response_model=ProfileOut, status_code=status.HTTP_201_CREATED)
async def create_profile(payload: ProfileCreate, session: AsyncSession = Depends(get_db)):
    profile = await ProfileRepository(session).create(**payload.model_dump())
    await session.commit()
    return ProfileOut.model_validate(profile)


@router.get("", response_model=list[ProfileOut])
async def list_profiles(session: AsyncSession = Depends(get_db)):
    profiles = await ProfileRepository(session).list()
    return [ProfileOut.model_validate(p) for p in profiles]


@router.patch("/{profile_id}", response_model=ProfileOut)
async def update_profile(
    profile_id: uuid.UUID,
    payload: ProfileUpdate,
    session: AsyncSession = Depends(get_db),
):
    repo = ProfileRepository(session)
    profile = await repo.get_by_id(profile_id)
    if profile is None:
        raise ProfileNotFoundError(profile_id)
    await repo.update(profile, **payload.model_dump(exclude_unset=True))
    await session.commit()
    return ProfileOut.model_validate(profile)
