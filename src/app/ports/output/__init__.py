from .credential_provider import ICredentialProvider
from .feed_encoder import IFeedEncoder
from .feed_store import IFeedStore
from .gtfs_repository import IGtfsRepository
from .telemetry_provider import ITelemetryProvider

__all__ = [
    "ICredentialProvider",
    "IFeedEncoder",
    "IFeedStore",
    "IGtfsRepository",
    "ITelemetryProvider",
]
