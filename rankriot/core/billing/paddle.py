"""Paddle webhook primitives: signature verification and status/plan mapping"""
import hashlib
import hmac
import logging
from typing import Optional, Union

from rankriot.core.config import settings
from rankriot.db.enums import PlanId, SubscriptionStatus

logger = logging.getLogger(__name__)

# Header sent by Paddle on every notification
SIGNATURE_HEADER = "Paddle-Signature"


def parse_signature_header(header: str) -> Optional[tuple]:
    """
    Split a ``ts=<timestamp>;h1=<hex digest>`` header.

    Returns:
        (timestamp, digest) or None when either part is missing
    """
    timestamp = None
    digest = None
    for part in header.split(";"):
        part = part.strip()
        if part.startswith("ts="):
            timestamp = part[3:]
        elif part.startswith("h1="):
            digest = part[3:]
    if not timestamp or not digest:
        return None
    return timestamp, digest


def _digest(payload: Union[str, bytes], secret: str, timestamp: str) -> str:
    if isinstance(payload, str):
        payload = payload.encode("utf-8")
    return hmac.new(
        secret.encode("utf-8"),
        timestamp.encode("utf-8") + b":" + payload,
        hashlib.sha256,
    ).hexdigest()


def verify_paddle_signature(payload: Union[str, bytes], header: Optional[str], secret: Optional[str]) -> bool:
    """
    Verify a Paddle webhook signature.

    The signed string is ``"{ts}:{raw body}"`` and the digest is
    HMAC-SHA256 with the notification secret, hex encoded.

    Args:
        payload: Raw request body, exactly as received (bytes or UTF-8 text)
        header: Value of the Paddle-Signature header
        secret: Webhook secret key

    Returns:
        True only when the digest matches; any malformed input is False
    """
    if not header or not secret:
        return False

    parsed = parse_signature_header(header)
    if parsed is None:
        return False
    timestamp, provided = parsed

    expected = _digest(payload, secret, timestamp)
    return hmac.compare_digest(provided.encode("utf-8"), expected.encode("utf-8"))


def sign_payload(payload: Union[str, bytes], secret: str, timestamp: str) -> str:
    """Build a Paddle-Signature header value for a payload (tests and tooling)"""
    return f"ts={timestamp};h1={_digest(payload, secret, timestamp)}"


def map_price_id_to_plan(price_id: Optional[str]) -> str:
    """Map a Paddle price id (monthly or yearly) to a plan tier"""
    price_map = {
        settings.paddle_starter_monthly_price_id: PlanId.STARTER.value,
        settings.paddle_starter_yearly_price_id: PlanId.STARTER.value,
        settings.paddle_pro_monthly_price_id: PlanId.PRO.value,
        settings.paddle_pro_yearly_price_id: PlanId.PRO.value,
        settings.paddle_business_monthly_price_id: PlanId.BUSINESS.value,
        settings.paddle_business_yearly_price_id: PlanId.BUSINESS.value,
    }
    # Unset price ids must never match
    price_map.pop(None, None)
    price_map.pop("", None)

    if price_id and price_id in price_map:
        return price_map[price_id]

    logger.warning(f"Unknown price ID: {price_id}, defaulting to free")
    return PlanId.FREE.value


def map_subscription_status(status: Optional[str]) -> str:
    """Map a Paddle subscription status to the value stored on the profile"""
    if status in ("canceled", "cancelled"):
        return SubscriptionStatus.CANCELED.value
    if status in (
        SubscriptionStatus.ACTIVE.value,
        SubscriptionStatus.PAST_DUE.value,
        SubscriptionStatus.PAUSED.value,
        SubscriptionStatus.TRIALING.value,
    ):
        return status
    return SubscriptionStatus.ACTIVE.value
