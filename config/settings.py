"""
Configuration settings for the application
"""
from datetime import timedelta
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Subscription constants
TRIAL_DAYS = 14
SESSION_MAX_AGE = int(timedelta(days=60).total_seconds())

# Subscription statuses stored on the users table
STATUS_TRIAL = "trial"
STATUS_ACTIVE = "active"
STATUS_EXPIRED = "expired"


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        populate_by_name=True,
    )

    # Auth-as-a-service provider (OAuth + session tokens)
    users_service_api_url: Optional[str] = Field(default=None, alias="USERS_SERVICE_API_URL")
    users_service_api_key: Optional[str] = Field(default=None, alias="USERS_SERVICE_API_KEY")
    session_cookie_name: str = Field(default="session_token", alias="SESSION_COOKIE_NAME")

    # LemonSqueezy billing configuration
    lemonsqueezy_api_key: Optional[str] = Field(default=None, alias="LEMONSQUEEZY_API_KEY")
    lemonsqueezy_store_id: Optional[str] = Field(default=None, alias="LEMONSQUEEZY_STORE_ID")
    lemonsqueezy_product_id: Optional[str] = Field(default=None, alias="LEMONSQUEEZY_PRODUCT_ID")
    lemonsqueezy_webhook_secret: Optional[str] = Field(default=None, alias="LEMONSQUEEZY_WEBHOOK_SECRET")
    lemonsqueezy_api_url: str = Field(default="https://api.lemonsqueezy.com/v1", alias="LEMONSQUEEZY_API_URL")

    # Infrastructure configuration
    database_url: Optional[str] = Field(default="sqlite+aiosqlite:///./flexohub.db", alias="DATABASE_URL")

    # Frontend configuration
    frontend_url: Optional[str] = Field(default="http://localhost:5173", alias="FRONTEND_URL")

    # Render.com deployment configuration
    render: Optional[str] = Field(default=None, alias="RENDER")
    render_external_url: Optional[str] = Field(default=None, alias="RENDER_EXTERNAL_URL")
    render_service_name: Optional[str] = Field(default=None, alias="RENDER_SERVICE_NAME")

    # Environment configuration
    env: Optional[str] = Field(default=None, alias="ENV")


# Instantiate settings object
settings = Settings()

# Determine if we're in production mode
IS_PRODUCTION = bool(settings.render) or bool(settings.env and settings.env.lower() == "production")
