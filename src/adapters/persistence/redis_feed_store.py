from __future__ import annotations

import os
from dataclasses import dataclass, field

import redis

from src.app.ports.output import IFeedStore
from src.domain.exceptions import FeedStoreError


@dataclass(slots=True)
class RedisFeedStore(IFeedStore):
    """Key-value feed store on Redis, the layout existing feed consumers read.

    Env vars:
      - REDIS_URL (default: redis://127.0.0.1:6379/0)
    """

    url: str | None = None
    client: redis.Redis | None = field(default=None, repr=False)

    def __post_init__(self) -> None:
        if self.url is None:
            self.url = os.getenv("REDIS_URL", "redis://127.0.0.1:6379/0")
        if self.client is None:
            self.client = redis.Redis.from_url(self.url)

    def set(self, key: str, value: bytes | str) -> None:
        try:
            self.client.set(key, value)
        except redis.RedisError as exc:
            raise FeedStoreError(f"Redis SET failed for {key}: {exc}") from exc

    def get(self, key: str) -> bytes | None:
        try:
            value = self.client.get(key)
        except redis.RedisError as exc:
            raise FeedStoreError(f"Redis GET failed for {key}: {exc}") from exc
        if value is None:
            return None
        return bytes(value)
