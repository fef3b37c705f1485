"""Signed-in user's dashboard"""
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from rankriot.core.auth import get_current_user
from rankriot.core.database import get_db
from rankriot.services import dashboard
from rankriot.services.projects import user_uuid

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


@router.get("")
async def get_dashboard(
    db: AsyncSession = Depends(get_db),
    current_user: dict = Depends(get_current_user),
):
    """Recent projects and scans with issue and page totals"""
    return await dashboard.get_user_dashboard(db, user_uuid(current_user))
