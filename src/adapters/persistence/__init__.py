from .dynamodb_feed_store import DynamoDbFeedStore
from .local_gtfs_repository import LocalGtfsRepository
from .redis_feed_store import RedisFeedStore

__all__ = [
    "DynamoDbFeedStore",
    "LocalGtfsRepository",
    "RedisFeedStore",
]
