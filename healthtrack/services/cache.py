import logging
import threading
from collections import defaultdict

from cachetools import TTLCache

from healthtrack.config import settings

logger = logging.getLogger(__name__)


class QueryCache:
    """
    Read-through cache for list queries, keyed by (entity, user_id, *extra).

    Mutations call invalidate(entity, user_id), which drops every key for that
    pair, so the next read goes back to the database and sees the write.
    Values are serialized response models, never ORM objects.
    """

    def __init__(self, maxsize: int, ttl: int):
        self._store = TTLCache(maxsize=maxsize, ttl=ttl)
        # bumped on every invalidation; a load that raced one is not stored
        self._generation = defaultdict(int)
        # handlers run in FastAPI's threadpool
        self._lock = threading.RLock()

    def get_or_load(self, entity: str, user_id: int, loader, *extra):
        key = (entity, user_id) + tuple(extra)
        with self._lock:
            if key in self._store:
                logger.debug("Cache hit for %s", key)
                return self._store[key]
            generation = self._generation[(entity, user_id)]
        logger.debug("Cache miss for %s", key)
        value = loader()
        with self._lock:
            if self._generation[(entity, user_id)] == generation:
                self._store[key] = value
        return value

    def invalidate(self, entity: str, user_id: int):
        with self._lock:
            self._generation[(entity, user_id)] += 1
            stale = [key for key in list(self._store.keys()) if key[:2] == (entity, user_id)]
            for key in stale:
                self._store.pop(key, None)
        if stale:
            logger.info("Invalidated %d cached %s result(s) for user %s", len(stale), entity, user_id)

    def clear(self):
        with self._lock:
            self._store.clear()
            self._generation.clear()

    def __contains__(self, key):
        with self._lock:
            return key in self._store

    def __len__(self):
        return len(self._store)


query_cache = QueryCache(maxsize=settings.cache_maxsize, ttl=settings.cache_ttl_seconds)
