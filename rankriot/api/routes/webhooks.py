"""Paddle webhook receiver"""
import json
import logging

from fastapi import APIRouter, Depends, Request, Response, status
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from rankriot.core.billing.paddle import SIGNATURE_HEADER, verify_paddle_signature
from rankriot.core.config import settings
from rankriot.core.database import get_db
from rankriot.exceptions import WebhookSignatureError
from rankriot.schemas.billing import PaddleWebhookPayload
from rankriot.services.subscriptions import process_paddle_event
from rankriot.utils.responses import format_error_response

router = APIRouter(prefix="/webhooks", tags=["webhooks"])
logger = logging.getLogger(__name__)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "POST, OPTIONS",
    "Access-Control-Allow-Headers": f"Content-Type, {SIGNATURE_HEADER}",
}


def _check_signature(raw_body: bytes, header: str) -> None:
    secret = settings.paddle_webhook_secret
    if not secret:
        if settings.is_production:
            logger.error("PADDLE_WEBHOOK_SECRET is not set; rejecting webhook")
            raise WebhookSignatureError(message="Webhook secret not configured")
        logger.warning("PADDLE_WEBHOOK_SECRET is not set; skipping signature verification")
        return

    if not verify_paddle_signature(raw_body, header, secret):
        logger.error("Invalid Paddle webhook signature")
        raise WebhookSignatureError()


@router.options("/paddle")
async def paddle_webhook_preflight():
    return Response(status_code=status.HTTP_200_OK, headers=CORS_HEADERS)


@router.post("/paddle")
async def paddle_webhook(
    request: Request,
    db: AsyncSession = Depends(get_db),
):
    """
    Receive a Paddle notification.

    The body is verified against the Paddle-Signature header before it is
    parsed. Each event id is applied once; redeliveries are acknowledged
    without changes.
    """
    raw_body = await request.body()
    _check_signature(raw_body, request.headers.get(SIGNATURE_HEADER, ""))

    try:
        raw_payload = json.loads(raw_body.decode("utf-8"))
        event = PaddleWebhookPayload.model_validate(raw_payload)
    except (ValueError, ValidationError) as e:
        logger.error(f"Malformed Paddle webhook body: {e}")
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=format_error_response("Invalid webhook payload"),
        )

    logger.info(f"Received Paddle webhook: {event.event_type} ({event.event_id})")

    try:
        processed = await process_paddle_event(db, event, raw_payload)
    except Exception as e:
        logger.error(f"Webhook processing error for {event.event_id}: {e}", exc_info=True)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=format_error_response("Webhook processing failed"),
        )

    if not processed:
        return {"message": "Already processed"}
    return {"received": True}
