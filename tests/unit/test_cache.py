"""
Tests for the Redis cache wrapper and the catalog cache path.
"""
import json

import redis

from quizattempts.services.quiz_catalog import QuizCatalog
from quizattempts.utils.cache import CacheService


class DictRedis:
    """Minimal stand-in for the redis commands the cache uses"""

    def __init__(self, broken=False):
        self.store = {}
        self.ttls = {}
        self.broken = broken

    def _check(self):
        if self.broken:
            raise redis.ConnectionError("connection reset")

    def ping(self):
        self._check()
        return True

    def get(self, key):
        self._check()
        return self.store.get(key)

    def setex(self, key, ttl, value):
        self._check()
        self.store[key] = value
        self.ttls[key] = ttl

    def delete(self, key):
        self._check()
        self.store.pop(key, None)


def make_cache(client):
    cache = CacheService(enabled=False, namespace="test")
    cache.redis_client = client
    return cache


class TestCacheService:
    def test_disabled_cache_is_a_no_op(self):
        cache = CacheService(enabled=False)
        assert not cache.is_available
        assert cache.get("anything") is None
        assert cache.set("anything", {"a": 1}) is False
        assert cache.ping() is False

    def test_keys_are_namespaced(self):
        assert make_cache(None).quiz_cache_key("abc") == "test:quiz:abc"

    def test_round_trip_with_default_ttl(self):
        client = DictRedis()
        cache = make_cache(client)

        assert cache.set("test:k", {"a": [1, 2]}) is True
        assert cache.get("test:k") == {"a": [1, 2]}
        assert client.ttls["test:k"] == 3600

    def test_corrupt_entry_is_discarded(self):
        client = DictRedis()
        client.store["test:k"] = "{not json"
        cache = make_cache(client)

        assert cache.get("test:k") is None
        assert "test:k" not in client.store

    def test_redis_errors_degrade_to_misses(self):
        cache = make_cache(DictRedis(broken=True))

        assert cache.get("test:k") is None
        assert cache.set("test:k", 1) is False
        assert cache.delete("test:k") is False
        assert cache.ping() is False


class TestCatalogCache:
    def test_quiz_is_served_from_cache_after_first_lookup(self, db, quiz):
        client = DictRedis()
        catalog = QuizCatalog(cache=make_cache(client))

        first = catalog.get_quiz(db, quiz.id)
        cached = json.loads(client.store[f"test:quiz:{quiz.id}"])
        assert cached["id"] == str(quiz.id)

        # A cache hit never touches the database session
        db.close()
        second = catalog.get_quiz(None, quiz.id)
        assert second == first
