"""
Subscription Service for the 14-day trial and paid subscription lifecycle
"""
import logging
import math
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import TRIAL_DAYS, STATUS_ACTIVE, STATUS_EXPIRED, STATUS_TRIAL
from crud.user import UserRepository
from database_models import User

logger = logging.getLogger(__name__)

SUBSCRIPTION_EVENTS = ("subscription_created", "subscription_updated")

_ONE_DAY = timedelta(days=1)


@dataclass(frozen=True)
class SubscriptionState:
    status: str
    days_left: int = 0

    @property
    def has_access(self) -> bool:
        return self.status in (STATUS_ACTIVE, STATUS_TRIAL)


def _as_utc(value: datetime) -> datetime:
    # SQLite drops tzinfo on the way back out
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def derive_subscription_state(
    now: datetime,
    subscription_status: Optional[str],
    trial_expires_at: Optional[datetime],
) -> SubscriptionState:
    """
    Derive the effective subscription state.

    Rules:
    - subscription_status == "active": status "active", 0 days left
    - else trial_expires_at in the future: status "trial", whole days left rounded up
    - else: status "expired", 0 days left
    """
    if subscription_status == STATUS_ACTIVE:
        return SubscriptionState(STATUS_ACTIVE, 0)

    if trial_expires_at is not None:
        now = _as_utc(now)
        expires = _as_utc(trial_expires_at)
        if now < expires:
            return SubscriptionState(STATUS_TRIAL, math.ceil((expires - now) / _ONE_DAY))

    return SubscriptionState(STATUS_EXPIRED, 0)


def state_for_user(user: Optional[User], now: Optional[datetime] = None) -> SubscriptionState:
    """Derive the state for a stored user; a missing record counts as expired."""
    if user is None:
        return SubscriptionState(STATUS_EXPIRED, 0)
    now = now or datetime.now(timezone.utc)
    return derive_subscription_state(now, user.subscription_status, user.trial_expires_at)


def _isoformat(value: Optional[datetime]) -> Optional[str]:
    if value is None:
        return None
    return _as_utc(value).isoformat().replace("+00:00", "Z")


def describe_subscription(user: Optional[User], now: Optional[datetime] = None) -> dict:
    """Subscription block returned alongside the current user."""
    state = state_for_user(user, now)
    return {
        "status": state.status,
        "daysLeft": state.days_left,
        "trialStarted": _isoformat(user.trial_started_at) if user else None,
        "trialExpires": _isoformat(user.trial_expires_at) if user else None,
    }


def _extract_user_id(payload: dict) -> Optional[str]:
    meta = payload.get("meta") or {}
    custom = meta.get("custom_data") or {}
    user_id = custom.get("user_id")
    if user_id:
        return str(user_id)

    attributes = (payload.get("data") or {}).get("attributes") or {}
    custom = (attributes.get("checkout_data") or {}).get("custom") or {}
    user_id = custom.get("user_id")
    return str(user_id) if user_id else None


class SubscriptionService:
    """
    Service for provisioning trial users and applying payment-provider events.
    """

    def __init__(self, db: AsyncSession, user_repo: UserRepository):
        """
        Initialize the subscription service with database session and user repository.

        Args:
            db: AsyncSession instance for database operations
            user_repo: UserRepository instance for user operations
        """
        self.db = db
        self.user_repo = user_repo

    async def provision_user(self, user_id: str, email: Optional[str], now: Optional[datetime] = None) -> User:
        """
        Create the local record on first login and start the trial.
        Repeated logins return the existing record unchanged.

        Args:
            user_id: Auth provider's user id
            email: User's email address
            now: Reference time (defaults to current UTC time)

        Returns:
            The existing or newly created User
        """
        existing = await self.user_repo.get_user_by_id(user_id)
        if existing:
            return existing

        now = now or datetime.now(timezone.utc)
        user = await self.user_repo.create_user({
            "id": user_id,
            "email": email,
            "trial_started_at": now,
            "trial_expires_at": now + timedelta(days=TRIAL_DAYS),
            "subscription_status": STATUS_TRIAL,
        })
        logger.info(f"Provisioned user {user_id} with a {TRIAL_DAYS}-day trial")
        return user

    async def apply_subscription_event(self, payload: dict, now: Optional[datetime] = None) -> Optional[User]:
        """
        Apply a LemonSqueezy subscription webhook payload.

        Args:
            payload: Parsed webhook JSON body
            now: Reference time for updated_at

        Returns:
            The updated User, or None when the event was ignored
        """
        event_name = (payload.get("meta") or {}).get("event_name")
        if event_name not in SUBSCRIPTION_EVENTS:
            logger.info(f"Ignoring webhook event: {event_name}")
            return None

        user_id = _extract_user_id(payload)
        if not user_id:
            logger.warning(f"Webhook event {event_name} carries no user id")
            return None

        user = await self.user_repo.get_user_by_id(user_id)
        if not user:
            logger.warning(f"Webhook event {event_name} for unknown user {user_id}")
            return None

        subscription = payload.get("data") or {}
        provider_status = (subscription.get("attributes") or {}).get("status")
        new_status = STATUS_ACTIVE if provider_status == STATUS_ACTIVE else STATUS_EXPIRED
        subscription_id = subscription.get("id")

        user = await self.user_repo.update_user(user, {
            "subscription_status": new_status,
            "lemonsqueezy_subscription_id": str(subscription_id) if subscription_id is not None else None,
            "updated_at": now or datetime.now(timezone.utc),
        })
        logger.info(f"User {user_id} subscription set to {new_status} ({event_name})")
        return user
