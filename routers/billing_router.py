"""
Billing Router - LemonSqueezy checkout and webhook endpoints
"""

import json
import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from auth import get_current_user
from backend.utils.responses import error_response
from config.settings import settings
from database import get_db
from services.billing_service import BillingService, verify_webhook_signature

logger = logging.getLogger(__name__)

# Create billing router
billing_router = APIRouter(prefix="/api", tags=["billing"])


def get_billing_service(db: AsyncSession = Depends(get_db)) -> BillingService:
    return BillingService(db)


def _webhook_reply(ok: bool, **extra) -> JSONResponse:
    # Always 200 so LemonSqueezy does not retry
    return JSONResponse(status_code=200, content={"received": True, "ok": ok, **extra})


@billing_router.post("/webhooks/lemonsqueezy")
async def lemonsqueezy_webhook(
    request: Request,
    billing_service: BillingService = Depends(get_billing_service),
):
    """
    Handle LemonSqueezy subscription webhooks.

    When LEMONSQUEEZY_WEBHOOK_SECRET is configured the X-Signature header
    must match the raw body; otherwise events are accepted unsigned.
    """
    try:
        payload = await request.body()

        secret = settings.lemonsqueezy_webhook_secret
        if secret and not verify_webhook_signature(payload, request.headers.get("x-signature"), secret):
            logger.error("LemonSqueezy webhook signature verification failed")
            return _webhook_reply(False, error="Invalid webhook signature")

        try:
            event = json.loads(payload)
        except ValueError as e:
            logger.error(f"Invalid webhook payload: {e}")
            return _webhook_reply(False, error="Invalid payload format")
        if not isinstance(event, dict):
            return _webhook_reply(False, error="Invalid payload format")

        result = await billing_service.process_webhook(event)
        return _webhook_reply(
            not result.get("is_error", True),
            event_name=(event.get("meta") or {}).get("event_name"),
        )
    except Exception as e:
        logger.error(f"Webhook error: {e}", exc_info=True)
        return _webhook_reply(False, error=str(e))


@billing_router.post("/subscription/create-checkout")
async def create_checkout(
    user: dict = Depends(get_current_user),
    billing_service: BillingService = Depends(get_billing_service),
):
    """Start a LemonSqueezy checkout for the signed-in user."""
    result = await billing_service.create_checkout_session(str(user["id"]), user.get("email"))
    if result.get("is_error"):
        return error_response("Failed to create checkout", status=500)
    return {"checkoutUrl": result["data"]}
