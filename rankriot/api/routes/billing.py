"""Billing routes: current subscription and available plans"""
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from rankriot.core.auth import get_current_user
from rankriot.core.billing.plans import list_plans
from rankriot.core.database import get_db
from rankriot.schemas.billing import SubscriptionOverview
from rankriot.services.projects import user_uuid
from rankriot.services.subscriptions import get_subscription_overview

router = APIRouter(prefix="/billing", tags=["billing"])


@router.get("/subscription", response_model=SubscriptionOverview)
async def get_subscription(
    db: AsyncSession = Depends(get_db),
    current_user: dict = Depends(get_current_user),
):
    """
    Get the signed-in user's plan and usage.

    Returns:
        Plan, status, limits, usage this month and remaining projects
    """
    return await get_subscription_overview(db, user_uuid(current_user))


@router.get("/plans")
async def get_plans():
    """Plans with display info and limits, lowest tier first"""
    return {"plans": list_plans()}
