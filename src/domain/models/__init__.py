from .feed import (
    FeedKind,
    FeedMessage,
    StopTimeUpdate,
    TripDescriptor,
    TripUpdateEntity,
    VehicleDescriptor,
    VehiclePositionEntity,
)
from .geo import GeoPoint
from .gtfs import GtfsCalendar, GtfsFeed, GtfsRoute, GtfsStopTime, GtfsTrip
from .realtime import ArrivalEstimate, TelemetryBatch, VehicleReport

__all__ = [
    "ArrivalEstimate",
    "FeedKind",
    "FeedMessage",
    "GeoPoint",
    "GtfsCalendar",
    "GtfsFeed",
    "GtfsRoute",
    "GtfsStopTime",
    "GtfsTrip",
    "StopTimeUpdate",
    "TelemetryBatch",
    "TripDescriptor",
    "TripUpdateEntity",
    "VehicleDescriptor",
    "VehiclePositionEntity",
    "VehicleReport",
]
