"""
Redis access shared by the quiz catalog cache and the event publisher

When Redis is disabled or unreachable the service keeps working: cache reads
miss, cache writes are dropped, and events stay pending in the outbox.
"""
import redis
import json
import logging
from typing import Optional, Any
from quizattempts.config import settings

logger = logging.getLogger(__name__)


class CacheService:
    """Namespaced JSON cache on top of a single Redis connection"""

    def __init__(
        self,
        redis_url: Optional[str] = None,
        enabled: Optional[bool] = None,
        namespace: Optional[str] = None
    ):
        self.namespace = namespace or settings.CACHE_NAMESPACE
        self.redis_client = None

        if enabled is None:
            enabled = settings.CACHE_ENABLED
        if not enabled:
            logger.info("Redis disabled by configuration; quiz cache and event transport are off")
            return

        url = redis_url or settings.REDIS_URL
        try:
            client = redis.from_url(url, decode_responses=True, socket_connect_timeout=5)
            client.ping()
        except (redis.RedisError, ValueError) as e:
            logger.warning(f"Redis unavailable at startup ({str(e)}); continuing without it")
            return

        self.redis_client = client
        logger.info("Redis connection established")

    @property
    def is_available(self) -> bool:
        return self.redis_client is not None

    def ping(self) -> bool:
        """Live connectivity check, used by the health endpoint"""
        if not self.redis_client:
            return False
        try:
            return bool(self.redis_client.ping())
        except redis.RedisError:
            return False

    def key(self, *parts: str) -> str:
        return ":".join([self.namespace, *[str(p) for p in parts]])

    def quiz_cache_key(self, quiz_id: str) -> str:
        return self.key("quiz", quiz_id)

    def get(self, key: str) -> Optional[Any]:
        """
        Read a JSON value

        Returns:
            Decoded value, or None on a miss, a Redis error or a corrupt entry
        """
        if not self.redis_client:
            return None

        try:
            raw = self.redis_client.get(key)
        except redis.RedisError as e:
            logger.error(f"Cache read failed for {key}: {str(e)}")
            return None

        if raw is None:
            logger.debug(f"Cache miss: {key}")
            return None

        try:
            return json.loads(raw)
        except ValueError:
            logger.warning(f"Discarding undecodable cache entry {key}")
            self.delete(key)
            return None

    def set(self, key: str, value: Any, ttl: Optional[int] = None) -> bool:
        """Write a JSON value with a TTL (settings.QUIZ_CACHE_TTL by default)"""
        if not self.redis_client:
            return False

        ttl = ttl or settings.QUIZ_CACHE_TTL
        try:
            self.redis_client.setex(key, ttl, json.dumps(value))
        except redis.RedisError as e:
            logger.error(f"Cache write failed for {key}: {str(e)}")
            return False

        logger.debug(f"Cached {key} for {ttl}s")
        return True

    def delete(self, key: str) -> bool:
        if not self.redis_client:
            return False

        try:
            self.redis_client.delete(key)
        except redis.RedisError as e:
            logger.error(f"Cache delete failed for {key}: {str(e)}")
            return False
        return True


# Global instance
cache_service = CacheService()
