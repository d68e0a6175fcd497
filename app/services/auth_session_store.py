import logging
from typing import Any, Dict, Optional

from app.configs.config import get_settings
from app.services.redis_service import RedisClient

logger = logging.getLogger(__name__)
settings = get_settings()


class AuthSessionStore:
    """
    Persists identity-provider tokens for a browser session.

    The remember-me preference is fixed at construction time: remembered
    sessions outlive a browser restart (persistent cookie, long TTL), the
    others only last as long as the browser session cookie.
    """

    def __init__(self, remember_me: bool, redis_client: Optional[RedisClient] = None):
        self.remember_me = remember_me
        self.redis_client = redis_client if redis_client is not None else RedisClient()

    @property
    def ttl_seconds(self) -> int:
        if self.remember_me:
            return settings.REMEMBER_ME_TTL_SECONDS
        return settings.SESSION_TTL_SECONDS

    @property
    def cookie_max_age(self) -> Optional[int]:
        # None leaves the cookie without Max-Age, so the browser drops it on exit.
        return self.ttl_seconds if self.remember_me else None

    def save(self, session_id: str, tokens: Dict[str, Any]) -> None:
        record = dict(tokens)
        record["remember_me"] = self.remember_me
        self.redis_client.save_tokens(session_id, record, ttl_in_seconds=self.ttl_seconds)
        logger.debug(f"Stored auth session {session_id} (remember_me={self.remember_me})")

    def load(self, session_id: str) -> Optional[Dict[str, Any]]:
        return self.redis_client.load_tokens(session_id)

    def remove(self, session_id: str) -> None:
        self.redis_client.delete_tokens(session_id)


def get_auth_session_store() -> AuthSessionStore:
    """Store used for reads and for logins that do not state a preference."""
    return AuthSessionStore(remember_me=settings.REMEMBER_ME_DEFAULT)
