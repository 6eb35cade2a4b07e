"""Redis implementation of HistoryStore.

Key layout (per user):
- ``{prefix}:search:{user}``: hash folder_id -> JSON search record
- ``{prefix}:search:{user}:order``: sorted set folder_id scored by search time
- ``{prefix}:notes:{user}``: hash folder_id -> JSON note record
- ``{prefix}:reports:{user}``: list of JSON report records, newest first
"""

import json
import time
import uuid
from collections.abc import Callable
from datetime import datetime, timezone
from typing import Any

import redis

from digitization_finder.config import get_redis_client, settings

MAX_REPORTS = 100


def _isoformat(timestamp: float) -> str:
    return datetime.fromtimestamp(timestamp, tz=timezone.utc).isoformat()


class RedisHistoryRepository:
    """Redis-backed search history, client notes and report history.

    This class satisfies the HistoryStore protocol through structural
    typing - no explicit inheritance needed.
    """

    def __init__(
        self,
        redis_client: redis.Redis | None = None,
        key_prefix: str = "finder",
        search_limit: int | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """Initialize the history repository.

        Args:
            redis_client: Redis client instance (decoding responses). If None, creates default.
            key_prefix: Prefix for every key this repository writes.
            search_limit: Searches kept per user. Defaults to settings.
            clock: Source of Unix timestamps.
        """
        self._client = redis_client or get_redis_client()
        self._prefix = key_prefix
        self._search_limit = search_limit or settings.search_history_limit
        self._clock = clock

    @classmethod
    def create(cls, key_prefix: str = "finder") -> "RedisHistoryRepository":
        """Factory method to create RedisHistoryRepository with defaults."""
        return cls(key_prefix=key_prefix)

    def _search_key(self, user_id: str) -> str:
        return f"{self._prefix}:search:{user_id}"

    def _notes_key(self, user_id: str) -> str:
        return f"{self._prefix}:notes:{user_id}"

    def _reports_key(self, user_id: str) -> str:
        return f"{self._prefix}:reports:{user_id}"

    def add_search(self, user_id: str, folder_id: str, client_name: str) -> dict[str, Any]:
        """Record a search; re-searching a client moves it to the top.

        Only the newest ``search_limit`` clients are kept.
        """
        now = self._clock()
        record = {
            "user_id": user_id,
            "client_folder_id": folder_id,
            "client_name": client_name,
            "searched_at": _isoformat(now),
        }
        key = self._search_key(user_id)
        order_key = f"{key}:order"

        pipe = self._client.pipeline()
        pipe.hset(key, folder_id, json.dumps(record))
        pipe.zadd(order_key, {folder_id: now})
        pipe.execute()

        stale: list[str] = self._client.zrange(order_key, 0, -(self._search_limit + 1))  # type: ignore[assignment]
        if stale:
            pipe = self._client.pipeline()
            pipe.zrem(order_key, *stale)
            pipe.hdel(key, *stale)
            pipe.execute()

        return record

    def get_searches(self, user_id: str) -> list[dict[str, Any]]:
        key = self._search_key(user_id)
        folder_ids: list[str] = self._client.zrevrange(f"{key}:order", 0, self._search_limit - 1)  # type: ignore[assignment]
        if not folder_ids:
            return []
        raw: list[str | None] = self._client.hmget(key, folder_ids)  # type: ignore[assignment]
        return [json.loads(item) for item in raw if item]

    def get_note(self, user_id: str, folder_id: str) -> dict[str, Any] | None:
        raw = self._client.hget(self._notes_key(user_id), folder_id)
        return json.loads(raw) if raw else None  # type: ignore[arg-type]

    def save_note(self, user_id: str, folder_id: str, note: str) -> dict[str, Any]:
        """Insert or replace the note, keeping its original creation time."""
        now = _isoformat(self._clock())
        existing = self.get_note(user_id, folder_id)
        record = {
            "user_id": user_id,
            "client_folder_id": folder_id,
            "note": note,
            "created_at": existing["created_at"] if existing else now,
            "updated_at": now,
        }
        self._client.hset(self._notes_key(user_id), folder_id, json.dumps(record))
        return record

    def add_report(self, user_id: str, report: dict[str, Any]) -> dict[str, Any]:
        record = {
            **report,
            "id": str(uuid.uuid4()),
            "user_id": user_id,
            "created_at": _isoformat(self._clock()),
        }
        key = self._reports_key(user_id)
        pipe = self._client.pipeline()
        pipe.lpush(key, json.dumps(record))
        pipe.ltrim(key, 0, MAX_REPORTS - 1)
        pipe.execute()
        return record

    def get_reports(self, user_id: str, limit: int = 20) -> list[dict[str, Any]]:
        raw: list[str] = self._client.lrange(self._reports_key(user_id), 0, limit - 1)  # type: ignore[assignment]
        return [json.loads(item) for item in raw]

    def health_check(self) -> bool:
        """Check if Redis is accessible.

        Returns:
            True if healthy, False otherwise
        """
        try:
            return bool(self._client.ping())
        except redis.RedisError:
            return False

    def close(self) -> None:
        """Release the Redis connection pool.

        Should be called when shutting down the application.
        """
        self._client.close()

    @property
    def client(self) -> redis.Redis:
        """Get the Redis client."""
        return self._client
