"""
Authentication routes and dependencies.

Sign-in is delegated to the hosted users service: the browser is sent to its
Google OAuth URL, comes back with a code, and POST /api/sessions trades that
code for a session token stored in an http-only cookie.
"""

import logging
from typing import Any, Optional

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from backend.utils.responses import error_response, success_response
from config.settings import settings, SESSION_MAX_AGE
from crud.user import UserRepository
from database import get_db
from services.subscription_service import SubscriptionService, describe_subscription, state_for_user
from services.users_service import UsersServiceClient, UsersServiceError, get_users_service

logger = logging.getLogger(__name__)

# Create auth router
auth_router = APIRouter(prefix="/api", tags=["auth"])


class SessionRequest(BaseModel):
    # any JSON type; only a non-empty string is a usable code
    code: Any = None


def _set_session_cookie(response: JSONResponse, value: str, max_age: int):
    response.set_cookie(
        key=settings.session_cookie_name,
        value=value,
        httponly=True,
        secure=True,
        samesite="none",
        path="/",
        max_age=max_age,
    )


def get_session_token(request: Request) -> Optional[str]:
    return request.cookies.get(settings.session_cookie_name) or None


async def get_current_user(
    request: Request,
    users_service: UsersServiceClient = Depends(get_users_service),
) -> dict:
    """
    Dependency function to get the current authenticated user from the
    session cookie. Raises 401 when the cookie is missing or rejected.
    """
    token = get_session_token(request)
    if not token:
        raise HTTPException(status_code=401, detail="Missing session")

    try:
        user = await users_service.get_current_user(token)
    except UsersServiceError as e:
        raise HTTPException(status_code=401, detail=f"Authentication failed: {e}")

    if not user or not user.get("id"):
        raise HTTPException(status_code=401, detail="Invalid or expired session")
    return user


async def require_subscription_access(
    user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> dict:
    """Dependency for calculator routes: trial or active subscription required."""
    record = await UserRepository(db).get_user_by_id(user["id"])
    state = state_for_user(record)
    if not state.has_access:
        raise HTTPException(status_code=402, detail="Subscription expired")
    return user


@auth_router.get("/oauth/google/redirect_url")
async def google_redirect_url(users_service: UsersServiceClient = Depends(get_users_service)):
    """Return the users service URL that starts Google sign-in."""
    try:
        redirect_url = await users_service.get_oauth_redirect_url("google")
    except UsersServiceError as e:
        logger.error(f"Failed to get OAuth redirect URL: {e}")
        return error_response("Failed to get OAuth redirect URL", status=500)
    return {"redirectUrl": redirect_url}


@auth_router.post("/sessions")
async def create_session(
    body: SessionRequest,
    db: AsyncSession = Depends(get_db),
    users_service: UsersServiceClient = Depends(get_users_service),
):
    """Exchange an OAuth code for a session cookie and provision the local user."""
    if not isinstance(body.code, str) or not body.code:
        return error_response("No authorization code provided", status=400)

    try:
        session_token = await users_service.exchange_code_for_session_token(body.code)
        user = await users_service.get_current_user(session_token)
    except UsersServiceError as e:
        return error_response(str(e), status=400)

    if user and user.get("id"):
        subscription_service = SubscriptionService(db, UserRepository(db))
        await subscription_service.provision_user(str(user["id"]), user.get("email"))

    response = success_response()
    _set_session_cookie(response, session_token, SESSION_MAX_AGE)
    return response


@auth_router.get("/users/me")
async def get_current_user_info(
    user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Current user merged with their freshly derived subscription state."""
    record = await UserRepository(db).get_user_by_id(user["id"])
    return {**user, "subscription": describe_subscription(record)}


@auth_router.get("/logout")
async def logout(
    request: Request,
    users_service: UsersServiceClient = Depends(get_users_service),
):
    """End the remote session (if any) and clear the session cookie."""
    token = get_session_token(request)
    if token:
        try:
            await users_service.delete_session(token)
        except UsersServiceError as e:
            logger.warning(f"Failed to delete remote session: {e}")

    response = success_response()
    _set_session_cookie(response, "", 0)
    return response
