# storefront/services/session_store.py
import json

import redis

from storefront.utils.retry import redis_retry
from storefront.utils.settings import REDIS_URL
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class RedisSessionStore:
    """
    Server-side session data keyed by the opaque id held in the session cookie.
    Values are JSON documents that expire on their own after the cookie's max age.
    """

    key_prefix = "session:"

    def __init__(self, url: str | None = None, client: redis.Redis | None = None):
        self.redis = client or redis.Redis.from_url(url or REDIS_URL, decode_responses=True)

    def _key(self, session_id: str) -> str:
        return f"{self.key_prefix}{session_id}"

    @redis_retry()
    def load(self, session_id: str) -> dict | None:
        raw = self.redis.get(self._key(session_id))
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except ValueError:
            logger.warning(f"Discarding unreadable session {session_id[:8]}...")
            return None

    @redis_retry()
    def save(self, session_id: str, data: dict, ttl: int) -> None:
        self.redis.setex(self._key(session_id), ttl, json.dumps(data))

    @redis_retry()
    def delete(self, session_id: str) -> None:
        self.redis.delete(self._key(session_id))
