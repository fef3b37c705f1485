"""Unit tests for subscription processing and usage"""
import pytest
from datetime import datetime, timezone
from sqlalchemy import select

from rankriot.db.models import PaddleWebhook, Profile, Project, Scan
from rankriot.schemas.billing import PaddleWebhookPayload
from rankriot.services import subscriptions
from rankriot.services.subscriptions import (
    get_subscription_overview,
    get_usage,
    get_user_plan,
    process_paddle_event,
)
from rankriot.utils.database import count_rows


def _event(event_type, user_id=None, event_id="evt_001", **data):
    body = {
        "event_id": event_id,
        "event_type": event_type,
        "occurred_at": "2026-03-01T10:00:00Z",
        "data": {
            "id": "sub_001",
            "customer_id": "ctm_001",
            "status": "active",
            "items": [{"price": {"id": "pri_pro_monthly"}, "quantity": 1}],
            "current_billing_period": {
                "starts_at": "2026-03-01T10:00:00Z",
                "ends_at": "2026-04-01T10:00:00Z",
            },
            "custom_data": {"userId": str(user_id)} if user_id else None,
            **data,
        },
    }
    return PaddleWebhookPayload.model_validate(body), body


class TestProcessPaddleEvent:
    """Tests for applying Paddle events"""

    async def test_subscription_created(self, test_db_session, profile):
        """Test a new subscription sets plan, status and billing ids"""
        event, raw = _event("subscription.created", profile.id)

        assert await process_paddle_event(test_db_session, event, raw) is True

        assert profile.subscription_tier == "pro"
        assert profile.subscription_status == "active"
        assert profile.paddle_customer_id == "ctm_001"
        assert profile.paddle_subscription_id == "sub_001"
        assert profile.subscription_period_end.replace(tzinfo=None) == datetime(2026, 4, 1, 10, 0)

        stored = (await test_db_session.execute(select(PaddleWebhook))).scalar_one()
        assert stored.event_type == "subscription.created"
        assert stored.payload["data"]["id"] == "sub_001"

    async def test_duplicate_event(self, test_db_session, profile):
        """Test a redelivered event is acknowledged without changes"""
        event, raw = _event("subscription.created", profile.id)
        await process_paddle_event(test_db_session, event, raw)

        profile.subscription_tier = "starter"
        await test_db_session.commit()

        assert await process_paddle_event(test_db_session, event, raw) is False
        assert profile.subscription_tier == "starter"
        assert await count_rows(test_db_session, PaddleWebhook) == 1

    async def test_concurrent_delivery(self, test_db_session, profile, monkeypatch):
        """Test a delivery that loses the race on the event id is acknowledged"""
        test_db_session.add(PaddleWebhook(event_id="evt_001", event_type="subscription.created"))
        await test_db_session.commit()

        real_check = subscriptions._already_processed
        calls = []

        async def check_before_commit_of_other_delivery(db, event_id):
            calls.append(event_id)
            if len(calls) == 1:
                return False
            return await real_check(db, event_id)

        monkeypatch.setattr(subscriptions, "_already_processed", check_before_commit_of_other_delivery)
        event, raw = _event("subscription.created", profile.id)

        assert await process_paddle_event(test_db_session, event, raw) is False

        assert len(calls) == 2
        assert await count_rows(test_db_session, PaddleWebhook) == 1
        await test_db_session.refresh(profile)
        assert profile.subscription_tier is None

    async def test_cancel_by_subscription_id(self, test_db_session, profile):
        """Test cancellations without custom data find the user by subscription id"""
        profile.paddle_subscription_id = "sub_001"
        profile.subscription_status = "active"
        await test_db_session.commit()

        event, raw = _event("subscription.canceled", status="canceled")
        await process_paddle_event(test_db_session, event, raw)

        assert profile.subscription_status == "canceled"

    async def test_past_due(self, test_db_session, profile):
        """Test past_due only changes the status"""
        profile.subscription_tier = "pro"
        await test_db_session.commit()

        event, raw = _event("subscription.past_due", profile.id, status="past_due")
        await process_paddle_event(test_db_session, event, raw)

        assert profile.subscription_status == "past_due"
        assert profile.subscription_tier == "pro"

    async def test_unknown_user_is_recorded(self, test_db_session, profile):
        """Test events for unknown users are logged and recorded, not retried"""
        event, raw = _event("subscription.updated", "00000000-0000-0000-0000-000000000000")

        assert await process_paddle_event(test_db_session, event, raw) is True
        assert profile.subscription_tier is None
        assert await count_rows(test_db_session, PaddleWebhook) == 1

    async def test_unhandled_event_type(self, test_db_session, profile):
        """Test unknown event types are recorded only"""
        event, raw = _event("customer.updated", profile.id)
        assert await process_paddle_event(test_db_session, event, raw) is True
        assert profile.subscription_tier is None

    async def test_failure_rolls_back(self, test_db_session, profile):
        """Test a failing event leaves no trace so a retry reprocesses it"""
        event, raw = _event(
            "subscription.created", profile.id,
            current_billing_period={"ends_at": "not-a-date"},
        )

        with pytest.raises(ValueError):
            await process_paddle_event(test_db_session, event, raw)

        assert await count_rows(test_db_session, PaddleWebhook) == 0


class TestUsage:
    """Tests for plan and usage lookups"""

    async def test_default_plan(self, test_db_session, profile):
        """Test users without a subscription are on the free plan"""
        assert await get_user_plan(test_db_session, profile.id) == "free"

    async def test_usage_this_month(self, test_db_session, profile):
        """Test only scans started this month are counted"""
        project = Project(user_id=profile.id, name="Site", url="https://example.com")
        test_db_session.add(project)
        await test_db_session.flush()
        test_db_session.add_all([
            Scan(project_id=project.id, status="completed", pages_scanned=120,
                 started_at=datetime(2026, 3, 2, tzinfo=timezone.utc)),
            Scan(project_id=project.id, status="completed", pages_scanned=30,
                 started_at=datetime(2026, 3, 10, tzinfo=timezone.utc)),
            Scan(project_id=project.id, status="completed", pages_scanned=500,
                 started_at=datetime(2026, 2, 20, tzinfo=timezone.utc)),
        ])
        await test_db_session.commit()

        usage = await get_usage(test_db_session, profile.id, now=datetime(2026, 3, 15, tzinfo=timezone.utc))

        assert usage == {"projects_count": 1, "scans_this_month": 2, "pages_this_month": 150}

    async def test_overview(self, test_db_session, profile):
        """Test the billing overview combines plan, limits and usage"""
        profile.subscription_tier = "business"
        profile.subscription_status = "active"
        await test_db_session.commit()

        overview = await get_subscription_overview(test_db_session, profile.id)

        assert overview["plan"] == "business"
        assert overview["limits"]["max_projects"] == -1
        assert overview["can_create_project"] is True
        assert overview["remaining_projects"] == "unlimited"
        assert overview["usage"]["projects_count"] == 0
