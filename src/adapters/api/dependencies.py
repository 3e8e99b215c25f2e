from __future__ import annotations

import os
from functools import lru_cache

from src.adapters.gtfs_rt.protobuf_feed_encoder import ProtobufFeedEncoder
from src.adapters.persistence.dynamodb_feed_store import DynamoDbFeedStore
from src.adapters.persistence.local_gtfs_repository import LocalGtfsRepository
from src.adapters.persistence.redis_feed_store import RedisFeedStore
from src.adapters.realtime.http_transloc_telemetry_provider import (
    HttpTranslocTelemetryProvider,
)
from src.app.config import FeedConfig
from src.app.ports.output import IFeedStore
from src.app.services.feed_emitter import FeedEmitter
from src.app.services.realtime_feed_service import RealtimeFeedService


def get_feed_config() -> FeedConfig:
    return FeedConfig.from_env()


@lru_cache(maxsize=1)
def get_feed_store() -> IFeedStore:
    """One store (and Redis connection pool) per process, shared by requests."""

    backend = (os.getenv("FEED_STORE") or "redis").strip().lower()
    if backend == "dynamodb":
        return DynamoDbFeedStore()
    if backend == "redis":
        return RedisFeedStore()
    raise RuntimeError(f"Unknown FEED_STORE backend: {backend}")


def get_realtime_feed_service() -> RealtimeFeedService:
    config = get_feed_config()
    emitter = FeedEmitter(
        feed_id=config.feed_id,
        encoder=ProtobufFeedEncoder(),
        store=get_feed_store(),
    )
    return RealtimeFeedService(
        gtfs_repository=LocalGtfsRepository(),
        telemetry_provider=HttpTranslocTelemetryProvider(agency_id=config.agency_id),
        emitter=emitter,
        config=config,
    )
