from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from .geo import GeoPoint

GTFS_REALTIME_VERSION = "2.0"

# GTFS-RT VehicleDescriptor.WheelchairAccessible value written for every vehicle.
WHEELCHAIR_ACCESSIBLE_PLACEHOLDER = 2


class FeedKind(str, Enum):
    VEHICLES = "vehicles"
    TRIPS = "trips"


@dataclass(frozen=True, slots=True)
class TripDescriptor:
    trip_id: str
    route_id: str
    start_date: str  # YYYYMMDD, local service date
    direction_id: int = 0


@dataclass(frozen=True, slots=True)
class VehicleDescriptor:
    vehicle_id: str
    label: str | None = None
    wheelchair_accessible: int = WHEELCHAIR_ACCESSIBLE_PLACEHOLDER


@dataclass(frozen=True, slots=True)
class VehiclePositionEntity:
    entity_id: str
    trip: TripDescriptor
    vehicle: VehicleDescriptor
    position: GeoPoint
    bearing: float | None = None
    speed_mps: float | None = None
    timestamp: int | None = None


@dataclass(frozen=True, slots=True)
class StopTimeUpdate:
    """Arrival-only stop time update (no departure event is ever emitted)."""

    stop_id: str | None
    arrival_time: int | None = None


@dataclass(frozen=True, slots=True)
class TripUpdateEntity:
    entity_id: str
    trip: TripDescriptor
    vehicle: VehicleDescriptor
    stop_time_updates: tuple[StopTimeUpdate, ...] = ()
    delay_s: int | None = None
    timestamp: int | None = None


@dataclass(frozen=True, slots=True)
class FeedMessage:
    timestamp: int
    entities: tuple[VehiclePositionEntity | TripUpdateEntity, ...] = field(
        default_factory=tuple
    )
    gtfs_realtime_version: str = GTFS_REALTIME_VERSION
