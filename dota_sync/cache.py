"""
cache.py — Ephemeral key-value cache for the live-match snapshot.

Two backends with the same four methods (exists / read / write / write_many):

  MemoryCache  — process-local dict.  Lives as long as the updater process,
                 which is enough when the worker runs in --loop mode.
  RedisCache   — shared across processes / one-shot cron runs.  Values are
                 JSON-encoded; write_many wraps all SETs in MULTI/EXEC.

No TTLs are set: the live reconciler overwrites its keys every cycle.
"""

import json
import logging
import os
from typing import Any, Optional

import redis

logger = logging.getLogger(__name__)

REDIS_URL = os.getenv("REDIS_URL")


class MemoryCache:
    def __init__(self) -> None:
        self._data: dict[str, Any] = {}

    def exists(self, key: str) -> bool:
        return key in self._data

    def read(self, key: str) -> Optional[Any]:
        return self._data.get(key)

    def write(self, key: str, value: Any) -> None:
        self._data[key] = value

    def write_many(self, values: dict[str, Any]) -> None:
        self._data.update(values)


class RedisCache:
    def __init__(self, client: redis.Redis) -> None:
        self._client = client

    @classmethod
    def from_url(cls, url: str) -> "RedisCache":
        return cls(redis.Redis.from_url(url, decode_responses=True))

    def exists(self, key: str) -> bool:
        return bool(self._client.exists(key))

    def read(self, key: str) -> Optional[Any]:
        raw = self._client.get(key)
        if raw is None:
            return None
        return json.loads(raw)

    def write(self, key: str, value: Any) -> None:
        self._client.set(key, json.dumps(value))

    def write_many(self, values: dict[str, Any]) -> None:
        with self._client.pipeline(transaction=True) as pipe:
            for key, value in values.items():
                pipe.set(key, json.dumps(value))
            pipe.execute()


def get_cache():
    """RedisCache when REDIS_URL is set, otherwise a fresh MemoryCache."""
    if REDIS_URL:
        logger.info("[cache] using Redis at %s", REDIS_URL.rsplit("@", 1)[-1])
        return RedisCache.from_url(REDIS_URL)
    logger.info("[cache] REDIS_URL not set, using in-process cache")
    return MemoryCache()
