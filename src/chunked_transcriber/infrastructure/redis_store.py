"""Redis implementation of the KeyValueStore interface."""

import redis

from chunked_transcriber.exceptions import KeyValueStoreError
from chunked_transcriber.logging import setup_logging

from .interfaces import KeyValueStore

logger = setup_logging()


class RedisKeyValueStore(KeyValueStore):
    """Key-value store backed by Redis, with every key expiring after a TTL."""

    def __init__(self, client: redis.Redis, ttl_seconds: int):
        self._client = client
        self._ttl_seconds = ttl_seconds

    def get(self, key: str) -> str | None:
        try:
            value = self._client.get(key)
            if isinstance(value, bytes):
                value = value.decode("utf-8")
            return value
        except redis.RedisError as e:
            logger.exception("Redis get failed", extra={"key": key})
            raise KeyValueStoreError(key, "get", cause=e) from e

    def set(self, key: str, value: str) -> None:
        try:
            self._client.set(key, value, ex=self._ttl_seconds)
            logger.info("Redis key set", extra={"key": key, "ttl": self._ttl_seconds})
        except redis.RedisError as e:
            logger.exception("Redis set failed", extra={"key": key})
            raise KeyValueStoreError(key, "set", cause=e) from e

    def delete(self, key: str) -> None:
        try:
            self._client.delete(key)
        except redis.RedisError as e:
            logger.exception("Redis delete failed", extra={"key": key})
            raise KeyValueStoreError(key, "delete", cause=e) from e
