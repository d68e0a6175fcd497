from typing import Any, Dict, Optional
from fastapi import HTTPException
from app.configs.config import get_settings
import logging
import redis
import json

logger = logging.getLogger(__name__)
settings = get_settings()

AUTH_KEY_PREFIX = "auth:"


class RedisClient:
    """
    Redis-backed storage for identity-provider token records.

    Records are JSON documents stored under ``auth:<session id>`` and expire
    with the lifetime chosen by the caller (remember-me or browser session).
    """

    _instance = None

    def __new__(cls, client: Optional[redis.Redis] = None):
        """Share one connection pool unless a client is handed in explicitly."""
        if client is not None:
            return super(RedisClient, cls).__new__(cls)
        if cls._instance is None:
            cls._instance = super(RedisClient, cls).__new__(cls)
        return cls._instance

    def __init__(self, client: Optional[redis.Redis] = None):
        if client is not None:
            self.client = client
        elif not hasattr(self, "client"):
            self.client = redis.Redis(
                host=settings.REDIS_HOST or "localhost",
                port=settings.REDIS_PORT or 6379,
                decode_responses=True,
                username=settings.REDIS_USERNAME,
                password=settings.REDIS_PASSWORD,
            )

    @staticmethod
    def key_for(session_id: str) -> str:
        return AUTH_KEY_PREFIX + session_id

    def save_tokens(
        self, session_id: str, record: Dict[str, Any], ttl_in_seconds: int
    ) -> None:
        """
        Store a token record, replacing any previous one and resetting its expiry.
        """
        try:
            self.client.set(
                name=self.key_for(session_id), value=json.dumps(record), ex=ttl_in_seconds
            )
        except redis.RedisError as e:
            logger.error(f"Failed to store auth session: {str(e)}")
            raise HTTPException(status_code=500, detail=str(e))

    def load_tokens(self, session_id: str) -> Optional[Dict[str, Any]]:
        """
        Retrieve a token record. Returns None if it expired or never existed.
        """
        try:
            raw = self.client.get(self.key_for(session_id))
        except redis.RedisError as e:
            logger.error(f"Failed to read auth session: {str(e)}")
            raise HTTPException(status_code=500, detail=str(e))
        if raw is None:
            return None
        return json.loads(raw)

    def delete_tokens(self, session_id: str) -> None:
        try:
            self.client.delete(self.key_for(session_id))
        except redis.RedisError as e:
            logger.error(f"Failed to delete auth session: {str(e)}")
            raise HTTPException(status_code=500, detail=str(e))
