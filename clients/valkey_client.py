"""
Valkey (Redis-compatible) client for account records.

Simple wrapper around redis-py. Connection URL from Vault.
Fail-fast: raises on connection failure, never returns fallback values.
"""

import json
import logging
from typing import Any

import redis

logger = logging.getLogger(__name__)


class ValkeyClient:
    """
    Redis-compatible client for Valkey.

    Usage:
        client = ValkeyClient("redis://localhost:6379/0")
        created = client.set_json_if_absent("user:a@x.com", {"verified": False})
        record = client.get_json("user:a@x.com")  # Returns None if missing
    """

    # Optimistic transactions give up after this many concurrent-write retries
    MAX_WATCH_RETRIES = 5

    def __init__(self, url: str):
        """
        Initialize Valkey connection.

        Args:
            url: Redis-compatible connection URL (e.g., redis://localhost:6379/0)

        Raises:
            redis.ConnectionError: If connection fails
        """
        self._client = redis.from_url(url, decode_responses=True)
        # Verify connectivity immediately (fail-fast)
        self._client.ping()
        logger.info("ValkeyClient connected")

    def ping(self) -> bool:
        """
        Health check.

        Returns True if Valkey responds.
        Raises redis.ConnectionError if unreachable.
        """
        self._client.ping()
        return True

    def get(self, key: str) -> str | None:
        """
        Get value by key.

        Returns None if key doesn't exist (not an error).
        Raises on connection failure.
        """
        return self._client.get(key)

    def set_if_absent(self, key: str, value: str) -> bool:
        """
        Set key to value only if the key does not exist (SET NX).

        Atomic on the server: of two concurrent callers, exactly one wins.

        Returns:
            True if the key was created, False if it already existed.
        """
        return bool(self._client.set(key, value, nx=True))

    def set_json_if_absent(self, key: str, value: dict) -> bool:
        """JSON-serialize value and store it only if key is absent."""
        return self.set_if_absent(key, json.dumps(value))

    def get_json(self, key: str) -> dict | list | None:
        """
        Get and deserialize JSON value.

        Returns None if key doesn't exist.
        Raises ValueError if value is not valid JSON.
        """
        value = self.get(key)
        if value is None:
            return None
        try:
            return json.loads(value)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON in key '{key}': {e}")

    def update_json(self, key: str, changes: dict[str, Any]) -> bool:
        """
        Merge changes into the JSON object stored at key.

        Uses WATCH/MULTI so a concurrent writer forces a re-read instead of
        being overwritten.

        Returns:
            True if the key existed and was updated, False if it was absent.

        Raises:
            redis.WatchError: If the key kept changing across all retries.
        """
        for _ in range(self.MAX_WATCH_RETRIES):
            with self._client.pipeline() as pipe:
                try:
                    pipe.watch(key)
                    raw = pipe.get(key)
                    if raw is None:
                        pipe.unwatch()
                        return False
                    current = json.loads(raw)
                    current.update(changes)
                    pipe.multi()
                    pipe.set(key, json.dumps(current))
                    pipe.execute()
                    return True
                except redis.WatchError:
                    logger.debug(f"Concurrent write on '{key}', retrying")
                    continue
        raise redis.WatchError(f"Gave up updating '{key}' after {self.MAX_WATCH_RETRIES} attempts")

    def close(self) -> None:
        """Close the connection."""
        self._client.close()
        logger.info("ValkeyClient closed")
