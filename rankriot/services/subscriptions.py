"""Subscription state: Paddle webhook processing and plan/usage overview"""
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from rankriot.core.billing.paddle import map_price_id_to_plan, map_subscription_status
from rankriot.core.billing.plans import (
    can_create_project,
    get_plan_limits,
    get_remaining_projects,
)
from rankriot.db.enums import PlanId, SubscriptionStatus
from rankriot.db.models import PaddleWebhook, Profile, Project, Scan
from rankriot.schemas.billing import PaddleEventData, PaddleWebhookPayload
from rankriot.utils.database import count_rows

logger = logging.getLogger(__name__)

SUBSCRIPTION_UPDATE_EVENTS = (
    "subscription.created",
    "subscription.updated",
    "subscription.resumed",
)

STATUS_ONLY_EVENTS = {
    "subscription.past_due": SubscriptionStatus.PAST_DUE.value,
    "subscription.paused": SubscriptionStatus.PAUSED.value,
}


def _parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


def _to_uuid(value: Any) -> Optional[UUID]:
    try:
        return value if isinstance(value, UUID) else UUID(str(value))
    except (TypeError, ValueError):
        return None


async def _get_profile(db: AsyncSession, user_id: Optional[str]) -> Optional[Profile]:
    profile_id = _to_uuid(user_id)
    if profile_id is None:
        return None
    return await db.get(Profile, profile_id)


async def _apply_subscription_update(db: AsyncSession, data: PaddleEventData) -> None:
    if not data.user_id:
        logger.error("No userId in webhook custom_data")
        return

    profile = await _get_profile(db, data.user_id)
    if profile is None:
        logger.error(f"No profile for user {data.user_id}; subscription {data.id} not applied")
        return

    plan = map_price_id_to_plan(data.price_id) if data.price_id else PlanId.FREE.value
    status = map_subscription_status(data.status)
    period_end = data.current_billing_period.ends_at if data.current_billing_period else None

    profile.paddle_customer_id = data.customer_id
    profile.paddle_subscription_id = data.id
    profile.subscription_tier = plan
    profile.subscription_status = status
    profile.subscription_period_end = _parse_timestamp(period_end)
    logger.info(f"Updated subscription for user {profile.id}: plan={plan}, status={status}")


async def _apply_cancellation(db: AsyncSession, data: PaddleEventData) -> None:
    profile = None
    if data.user_id:
        profile = await _get_profile(db, data.user_id)
    elif data.id:
        result = await db.execute(
            select(Profile).where(Profile.paddle_subscription_id == data.id)
        )
        profile = result.scalars().first()

    if profile is None:
        logger.error(f"Could not find user for canceled subscription: {data.id}")
        return

    profile.subscription_status = SubscriptionStatus.CANCELED.value
    logger.info(f"Canceled subscription for user {profile.id}")


async def _apply_status(db: AsyncSession, data: PaddleEventData, status: str) -> None:
    if not data.user_id:
        return
    profile = await _get_profile(db, data.user_id)
    if profile is not None:
        profile.subscription_status = status
        logger.info(f"Subscription for user {profile.id} is now {status}")


async def _already_processed(db: AsyncSession, event_id: str) -> bool:
    result = await db.execute(
        select(PaddleWebhook.id).where(PaddleWebhook.event_id == event_id)
    )
    return result.scalar_one_or_none() is not None


async def process_paddle_event(db: AsyncSession, event: PaddleWebhookPayload, raw_payload: Optional[Dict[str, Any]] = None) -> bool:
    """
    Apply a verified Paddle event to the subscriber's profile.

    Events are processed at most once: the event row and the profile update
    are committed together, and any failure rolls both back so a provider
    retry reprocesses the event.

    Args:
        db: Database session
        event: Parsed webhook body
        raw_payload: Body as received, stored on the event row

    Returns:
        False if the event was already processed, True otherwise
    """
    if await _already_processed(db, event.event_id):
        logger.info(f"Event {event.event_id} already processed")
        return False

    try:
        db.add(PaddleWebhook(
            event_id=event.event_id,
            event_type=event.event_type,
            payload=raw_payload if raw_payload is not None else event.model_dump(by_alias=True),
        ))

        if event.event_type in SUBSCRIPTION_UPDATE_EVENTS:
            await _apply_subscription_update(db, event.data)
        elif event.event_type == "subscription.canceled":
            await _apply_cancellation(db, event.data)
        elif event.event_type in STATUS_ONLY_EVENTS:
            await _apply_status(db, event.data, STATUS_ONLY_EVENTS[event.event_type])
        elif event.event_type == "transaction.completed":
            # Tier changes arrive as subscription.updated
            logger.info(f"Transaction completed: {event.data.id}")
        else:
            logger.info(f"Unhandled event type: {event.event_type}")

        await db.commit()
    except IntegrityError:
        await db.rollback()
        # A concurrent delivery of the same event committed first
        if await _already_processed(db, event.event_id):
            logger.info(f"Event {event.event_id} already processed")
            return False
        raise
    except Exception:
        await db.rollback()
        raise

    return True


async def get_user_plan(db: AsyncSession, user_id: UUID) -> str:
    """Plan tier stored on the profile (free when unset)"""
    profile = await db.get(Profile, user_id)
    tier = profile.subscription_tier if profile else None
    return tier or PlanId.FREE.value


def _month_start(now: Optional[datetime] = None) -> datetime:
    now = now or datetime.now(timezone.utc)
    return now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)


async def get_usage(db: AsyncSession, user_id: UUID, now: Optional[datetime] = None) -> Dict[str, int]:
    """Projects owned, plus scans started and pages scanned since the start of the month"""
    projects_count = await count_rows(db, Project, Project.user_id == user_id)

    result = await db.execute(
        select(func.count(Scan.id), func.coalesce(func.sum(Scan.pages_scanned), 0))
        .join(Project, Project.id == Scan.project_id)
        .where(Project.user_id == user_id, Scan.started_at >= _month_start(now))
    )
    scans_this_month, pages_this_month = result.one()

    return {
        "projects_count": projects_count,
        "scans_this_month": int(scans_this_month or 0),
        "pages_this_month": int(pages_this_month or 0),
    }


async def get_subscription_overview(db: AsyncSession, user_id: UUID) -> Dict[str, Any]:
    """Plan, status, limits and usage for the billing page"""
    profile = await db.get(Profile, user_id)
    plan = (profile.subscription_tier if profile else None) or PlanId.FREE.value
    usage = await get_usage(db, user_id)
    period_end = profile.subscription_period_end if profile else None

    return {
        "plan": plan,
        "status": profile.subscription_status if profile else None,
        "limits": get_plan_limits(plan),
        "usage": usage,
        "period_end": period_end.isoformat() if period_end else None,
        "can_create_project": can_create_project(plan, usage["projects_count"]),
        "remaining_projects": get_remaining_projects(plan, usage["projects_count"]),
    }
