from .feed import (
    FeedError,
    FeedStoreError,
    MalformedTelemetry,
    TelemetryError,
    TelemetryUnavailable,
)

__all__ = [
    "FeedError",
    "FeedStoreError",
    "MalformedTelemetry",
    "TelemetryError",
    "TelemetryUnavailable",
]
