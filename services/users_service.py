"""
Client for the hosted users service that owns OAuth and session tokens.
"""

import logging
from typing import Optional

import httpx

from config.settings import settings

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30


class UsersServiceError(Exception):
    """Raised when the users service rejects a request or is unreachable."""


class UsersServiceClient:
    """
    Thin async wrapper around the users service HTTP API.

    Endpoints used:
        GET    {api_url}/oauth/{provider}/redirect_url
        POST   {api_url}/sessions            {"code": ...} -> {"session_token": ...}
        GET    {api_url}/users/me            Bearer session token
        DELETE {api_url}/sessions            Bearer session token
    """

    def __init__(
        self,
        api_url: Optional[str] = None,
        api_key: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_url = (api_url or settings.users_service_api_url or "").rstrip("/")
        self.api_key = api_key or settings.users_service_api_key
        self.transport = transport

    def _headers(self, session_token: Optional[str] = None) -> dict:
        headers = {"x-api-key": self.api_key or ""}
        if session_token:
            headers["Authorization"] = f"Bearer {session_token}"
        return headers

    async def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        if not self.api_url or not self.api_key:
            raise UsersServiceError("Users service is not configured")

        try:
            async with httpx.AsyncClient(transport=self.transport, timeout=DEFAULT_TIMEOUT) as client:
                return await client.request(method, f"{self.api_url}{path}", **kwargs)
        except httpx.RequestError as e:
            logger.error(f"Users service request failed: {e}")
            raise UsersServiceError(f"Users service unreachable: {e}")

    async def get_oauth_redirect_url(self, provider: str = "google") -> str:
        response = await self._request("GET", f"/oauth/{provider}/redirect_url", headers=self._headers())
        if not response.is_success:
            logger.error(f"Users service redirect_url returned {response.status_code}: {response.text}")
            raise UsersServiceError("Failed to get OAuth redirect URL")
        data = response.json()
        return data.get("redirect_url") or data.get("redirectUrl")

    async def exchange_code_for_session_token(self, code: str) -> str:
        response = await self._request("POST", "/sessions", headers=self._headers(), json={"code": code})
        if not response.is_success:
            logger.warning(f"Users service rejected authorization code ({response.status_code})")
            raise UsersServiceError("Invalid authorization code")
        token = response.json().get("session_token")
        if not token:
            raise UsersServiceError("Users service returned no session token")
        return token

    async def get_current_user(self, session_token: str) -> Optional[dict]:
        """Return the user for a session token, or None when the session is invalid."""
        response = await self._request("GET", "/users/me", headers=self._headers(session_token))
        if response.status_code in (401, 403, 404):
            return None
        if not response.is_success:
            logger.error(f"Users service /users/me returned {response.status_code}: {response.text}")
            raise UsersServiceError("Failed to fetch current user")
        payload = response.json()
        user = payload.get("data", payload) if isinstance(payload, dict) else None
        return user or None

    async def delete_session(self, session_token: str) -> None:
        response = await self._request("DELETE", "/sessions", headers=self._headers(session_token))
        if not response.is_success:
            logger.warning(f"Users service session delete returned {response.status_code}")


def get_users_service() -> UsersServiceClient:
    """FastAPI dependency returning the users service client."""
    return UsersServiceClient()
