"""User profile routes"""
import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from rankriot.core.auth import get_current_user
from rankriot.core.database import get_db
from rankriot.db.models import Profile
from rankriot.schemas.profiles import ProfileResponse, ProfileUpdate
from rankriot.services.projects import user_uuid

router = APIRouter(prefix="/profile", tags=["profile"])
logger = logging.getLogger(__name__)


async def _get_or_create_profile(db: AsyncSession, current_user: dict) -> Profile:
    """Profiles are normally created by the auth service on sign-up"""
    profile_id = user_uuid(current_user)
    profile = await db.get(Profile, profile_id)
    if profile is None:
        logger.warning(f"No profile for user {profile_id}; creating one")
        profile = Profile(id=profile_id, email=current_user.get("email"))
        db.add(profile)
        await db.commit()
        await db.refresh(profile)
    return profile


@router.get("", response_model=ProfileResponse)
async def get_profile(
    db: AsyncSession = Depends(get_db),
    current_user: dict = Depends(get_current_user),
):
    return await _get_or_create_profile(db, current_user)


@router.patch("", response_model=ProfileResponse)
async def update_profile(
    profile_data: ProfileUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: dict = Depends(get_current_user),
):
    """Update the display name"""
    profile = await _get_or_create_profile(db, current_user)
    changes = profile_data.model_dump(exclude_unset=True)
    if "full_name" in changes:
        profile.full_name = changes["full_name"].strip() if changes["full_name"] else None
    profile.updated_at = datetime.now(timezone.utc)
    await db.commit()
    await db.refresh(profile)
    return profile
