from sqlalchemy import Column, String, DateTime
from datetime import datetime, timezone
from database import Base

from config.settings import STATUS_TRIAL


def _utcnow():
    return datetime.now(timezone.utc)


class User(Base):
    """
    Local user record keyed by the auth provider's user id.
    Holds trial timestamps and the subscription flag; the effective
    status is always derived per request.
    """
    __tablename__ = "users"

    id = Column(String, primary_key=True, index=True)
    email = Column(String, nullable=True, index=True)
    trial_started_at = Column(DateTime(timezone=True), nullable=True)
    trial_expires_at = Column(DateTime(timezone=True), nullable=True)
    subscription_status = Column(String, nullable=False, default=STATUS_TRIAL)
    lemonsqueezy_subscription_id = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow, nullable=True)
