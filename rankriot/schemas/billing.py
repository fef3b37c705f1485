"""Pydantic schemas for Paddle webhooks and billing views"""
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class PaddlePrice(BaseModel):
    id: Optional[str] = None
    product_id: Optional[str] = None


class PaddleItem(BaseModel):
    price: Optional[PaddlePrice] = None
    quantity: Optional[int] = None


class PaddleBillingPeriod(BaseModel):
    starts_at: Optional[str] = None
    ends_at: Optional[str] = None


class PaddleCustomData(BaseModel):
    """custom_data attached at checkout"""
    model_config = ConfigDict(populate_by_name=True)

    user_id: Optional[str] = Field(None, alias="userId")
    user_email: Optional[str] = Field(None, alias="userEmail")


class PaddleEventData(BaseModel):
    """Subscription (or transaction) entity carried by the event"""
    id: Optional[str] = None
    customer_id: Optional[str] = None
    status: Optional[str] = None
    items: List[PaddleItem] = Field(default_factory=list)
    current_billing_period: Optional[PaddleBillingPeriod] = None
    custom_data: Optional[PaddleCustomData] = None

    @property
    def user_id(self) -> Optional[str]:
        return self.custom_data.user_id if self.custom_data else None

    @property
    def price_id(self) -> Optional[str]:
        """Price of the first item"""
        if self.items and self.items[0].price:
            return self.items[0].price.id
        return None


class PaddleWebhookPayload(BaseModel):
    """Paddle notification body"""
    event_id: str
    event_type: str
    occurred_at: Optional[str] = None
    data: PaddleEventData = Field(default_factory=PaddleEventData)


class SubscriptionOverview(BaseModel):
    """Current plan, limits and usage for the signed-in user"""
    plan: str
    status: Optional[str] = None
    limits: Dict[str, Any]
    usage: Dict[str, int]
    period_end: Optional[str] = None
    can_create_project: bool
    remaining_projects: Any
