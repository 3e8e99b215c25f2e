class FeedError(Exception):
    """Base exception for realtime feed generation failures."""


class TelemetryError(FeedError):
    """Raised when a telemetry batch cannot be obtained; the cycle is aborted."""


class TelemetryUnavailable(TelemetryError):
    """Raised when the telemetry provider cannot be reached or answers non-2xx."""


class MalformedTelemetry(TelemetryError):
    """Raised when the telemetry payload cannot be decoded."""


class FeedStoreError(FeedError):
    """Raised when writing to or reading from the feed store fails."""
