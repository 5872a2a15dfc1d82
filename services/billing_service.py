"""
Billing Service - LemonSqueezy checkout creation and subscription webhooks
"""

import hashlib
import hmac
import logging
from typing import Optional

import httpx
from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from crud.user import UserRepository
from services.subscription_service import SubscriptionService

logger = logging.getLogger(__name__)

JSON_API_HEADERS = {
    "Accept": "application/vnd.api+json",
    "Content-Type": "application/vnd.api+json",
}


def verify_webhook_signature(payload: bytes, signature: Optional[str], secret: str) -> bool:
    """Check LemonSqueezy's X-Signature header (hex HMAC-SHA256 of the raw body)."""
    if not signature:
        return False
    digest = hmac.new(secret.encode("utf-8"), payload, hashlib.sha256).hexdigest()
    return hmac.compare_digest(digest, signature)


class BillingService:
    """
    Service class for handling billing-related business logic.
    """

    def __init__(self, db: AsyncSession, transport: Optional[httpx.AsyncBaseTransport] = None):
        """
        Initialize the billing service.

        Args:
            db: AsyncSession instance for database operations
            transport: Optional httpx transport (used to stub LemonSqueezy in tests)
        """
        self.db = db
        self.transport = transport

    def _checkout_body(self, user_id: str, email: Optional[str]) -> dict:
        return {
            "data": {
                "type": "checkouts",
                "attributes": {
                    "checkout_data": {
                        "email": email,
                        "custom": {"user_id": user_id},
                    }
                },
                "relationships": {
                    "store": {"data": {"type": "stores", "id": settings.lemonsqueezy_store_id}},
                    "variant": {"data": {"type": "variants", "id": settings.lemonsqueezy_product_id}},
                },
            }
        }

    async def create_checkout_session(self, user_id: str, email: Optional[str] = None):
        """
        Create a LemonSqueezy checkout tagged with the user's id.

        Args:
            user_id: Local/auth-provider user id, echoed back in webhooks
            email: Prefilled checkout email

        Returns:
            Normalized response: {"data": url, "is_error": False} or {"error": str(e), "is_error": True}
        """
        if not settings.lemonsqueezy_api_key:
            logger.error("LEMONSQUEEZY_API_KEY is not set. Cannot create checkout.")
            return {"error": "LEMONSQUEEZY_API_KEY is not set. Cannot create checkout.", "is_error": True}

        headers = dict(JSON_API_HEADERS, Authorization=f"Bearer {settings.lemonsqueezy_api_key}")
        try:
            async with httpx.AsyncClient(transport=self.transport, timeout=30) as client:
                response = await client.post(
                    f"{settings.lemonsqueezy_api_url}/checkouts",
                    headers=headers,
                    json=self._checkout_body(user_id, email),
                )

            if not response.is_success:
                logger.error(f"LemonSqueezy error {response.status_code}: {response.text}")
                return {"error": f"LemonSqueezy returned {response.status_code}", "is_error": True}

            url = response.json()["data"]["attributes"]["url"]
            return {"data": url, "is_error": False}
        except Exception as e:
            logger.error(f"Checkout creation error: {e}", exc_info=True)
            return {"error": str(e), "is_error": True}

    async def process_webhook(self, payload: dict):
        """
        Apply a verified LemonSqueezy webhook payload to the users table.

        Returns:
            Normalized response: {"data": updated, "is_error": False} or {"error": str(e), "is_error": True}
        """
        try:
            event_name = (payload.get("meta") or {}).get("event_name")
            logger.info(f"Processing LemonSqueezy webhook event: {event_name}")

            subscription_service = SubscriptionService(self.db, UserRepository(self.db))
            user = await subscription_service.apply_subscription_event(payload)
            return {"data": user is not None, "is_error": False}
        except Exception as e:
            logger.error(f"Error processing webhook: {e}", exc_info=True)
            await self.db.rollback()
            return {"error": str(e), "is_error": True}
