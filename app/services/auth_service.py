"""
Session service backed by Supabase Auth.

Talks to the GoTrue REST API directly with httpx:
- sign up / password sign in / refresh / sign out / current user
- provider errors converted to HTTPException with the provider's message
- listeners notified of session changes (SIGNED_IN, TOKEN_REFRESHED, SIGNED_OUT)
"""

import logging
import time
from typing import Any, Callable, Dict, List, Optional

import httpx
from fastapi import HTTPException

from app.configs.config import get_settings

logger = logging.getLogger(__name__)
settings = get_settings()

SIGNED_IN = "SIGNED_IN"
SIGNED_OUT = "SIGNED_OUT"
TOKEN_REFRESHED = "TOKEN_REFRESHED"

SessionListener = Callable[[str, Optional[Dict[str, Any]]], None]


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text or "An error occurred during authentication."
    if not isinstance(body, dict):
        return "An error occurred during authentication."
    return (
        body.get("msg")
        or body.get("error_description")
        or body.get("message")
        or body.get("error")
        or "An error occurred during authentication."
    )


class SessionService:
    """
    Client for the hosted identity provider.

    Args:
        url: Supabase project URL (e.g., "https://xyz.supabase.co")
        anon_key: Public anon key sent as the ``apikey`` header
        timeout: Request timeout in seconds
        transport: Optional httpx transport, used to stub the provider
    """

    def __init__(
        self,
        url: Optional[str] = None,
        anon_key: Optional[str] = None,
        timeout: int = 30,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.url = (url if url is not None else settings.SUPABASE_URL or "").rstrip("/")
        self.anon_key = anon_key if anon_key is not None else settings.SUPABASE_ANON_KEY
        self.client = httpx.AsyncClient(timeout=timeout, transport=transport)
        self._listeners: List[SessionListener] = []

    @property
    def configured(self) -> bool:
        return bool(self.url and self.anon_key)

    def subscribe(self, listener: SessionListener) -> Callable[[], None]:
        """Register a session-change listener. Returns a callable that removes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self, event: str, user: Optional[Dict[str, Any]]) -> None:
        for listener in list(self._listeners):
            try:
                listener(event, user)
            except Exception:
                logger.exception(f"Session listener failed for {event}")

    async def _request(
        self,
        method: str,
        path: str,
        json: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, str]] = None,
        access_token: Optional[str] = None,
    ) -> httpx.Response:
        if not self.configured:
            raise HTTPException(
                status_code=503, detail="Authentication service is not configured"
            )

        headers = {
            "apikey": self.anon_key,
            "Authorization": f"Bearer {access_token or self.anon_key}",
        }
        try:
            response = await self.client.request(
                method, f"{self.url}{path}", json=json, params=params, headers=headers
            )
        except httpx.RequestError as e:
            logger.error(f"Auth provider unreachable: {str(e)}")
            raise HTTPException(
                status_code=503,
                detail="Network error. Please check your internet connection and try again.",
            )

        if response.status_code >= 400:
            message = _error_message(response)
            logger.warning(f"Auth provider rejected {path}: {response.status_code} {message}")
            raise HTTPException(status_code=response.status_code, detail=message)
        return response

    @staticmethod
    def _session_from(body: Dict[str, Any]) -> Dict[str, Any]:
        expires_at = body.get("expires_at")
        if expires_at is None and body.get("expires_in") is not None:
            expires_at = int(time.time()) + int(body["expires_in"])
        return {
            "access_token": body.get("access_token"),
            "refresh_token": body.get("refresh_token"),
            "expires_at": expires_at,
            "user": body.get("user"),
        }

    async def sign_up(self, email: str, password: str, full_name: str) -> Dict[str, Any]:
        """
        Create an account. The provider sends a confirmation email; no session
        is started until the user confirms and logs in.
        """
        response = await self._request(
            "POST",
            "/auth/v1/signup",
            json={"email": email, "password": password, "data": {"full_name": full_name}},
        )
        body = response.json()
        logger.info("Sign-up accepted, awaiting email confirmation")
        return body.get("user") or body

    async def sign_in(self, email: str, password: str) -> Dict[str, Any]:
        response = await self._request(
            "POST",
            "/auth/v1/token",
            params={"grant_type": "password"},
            json={"email": email, "password": password},
        )
        session = self._session_from(response.json())
        self._notify(SIGNED_IN, session["user"])
        return session

    async def refresh(self, refresh_token: str) -> Dict[str, Any]:
        response = await self._request(
            "POST",
            "/auth/v1/token",
            params={"grant_type": "refresh_token"},
            json={"refresh_token": refresh_token},
        )
        session = self._session_from(response.json())
        self._notify(TOKEN_REFRESHED, session["user"])
        return session

    async def get_user(self, access_token: str) -> Dict[str, Any]:
        response = await self._request("GET", "/auth/v1/user", access_token=access_token)
        return response.json()

    async def sign_out(self, access_token: Optional[str]) -> None:
        """Revoke the session at the provider. Local sign-out always completes."""
        if access_token:
            try:
                await self._request("POST", "/auth/v1/logout", access_token=access_token)
            except HTTPException as e:
                if e.status_code not in (401, 403, 404):
                    raise
                logger.info("Provider session already gone; completing local sign-out")
        self._notify(SIGNED_OUT, None)

    async def aclose(self) -> None:
        await self.client.aclose()


_session_service: Optional[SessionService] = None


def get_session_service() -> SessionService:
    """FastAPI dependency returning the process-wide session service."""
    global _session_service
    if _session_service is None:
        _session_service = SessionService()
    return _session_service
