from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Iterable

from src.domain.models.feed import (
    StopTimeUpdate,
    TripDescriptor,
    TripUpdateEntity,
    VehicleDescriptor,
    VehiclePositionEntity,
)
from src.domain.models.realtime import VehicleReport

from .assignment import CycleAssignment, remaining_estimates_on_trip

KMH_TO_MPS = 1000.0 / 3600.0

# Estimates kept past the detected trip boundary, in case the boundary is wrong.
BOUNDARY_BUFFER = 2


@dataclass(frozen=True, slots=True)
class SynthesizedFeeds:
    positions: tuple[VehiclePositionEntity, ...] = ()
    trip_updates: tuple[TripUpdateEntity, ...] = ()


def kmh_to_mps(speed_kmh: float | None) -> float | None:
    if speed_kmh is None:
        return None
    return float(speed_kmh) * KMH_TO_MPS


def _epoch_s(dt: datetime | None) -> int | None:
    if dt is None:
        return None
    return int(dt.timestamp())


def stop_time_updates(vehicle: VehicleReport) -> tuple[StopTimeUpdate, ...]:
    """Arrival-only updates for the current trip plus a small boundary buffer."""

    count = min(
        remaining_estimates_on_trip(vehicle) + BOUNDARY_BUFFER,
        len(vehicle.arrival_estimates),
    )
    return tuple(
        StopTimeUpdate(stop_id=e.stop_id, arrival_time=_epoch_s(e.arrival_at))
        for e in vehicle.arrival_estimates[:count]
    )


def synthesize_vehicle(
    vehicle: VehicleReport,
    *,
    trip_id: str,
    delay_s: int | None,
    service_date: str,
) -> tuple[VehiclePositionEntity, TripUpdateEntity]:
    trip = TripDescriptor(
        trip_id=trip_id,
        route_id=vehicle.route_id or "",
        start_date=service_date,
    )
    descriptor = VehicleDescriptor(vehicle_id=vehicle.vehicle_id, label=vehicle.label)
    timestamp = _epoch_s(vehicle.last_updated)

    position = VehiclePositionEntity(
        entity_id=vehicle.vehicle_id,
        trip=trip,
        vehicle=descriptor,
        position=vehicle.location,
        bearing=vehicle.heading,
        speed_mps=kmh_to_mps(vehicle.speed_kmh),
        timestamp=timestamp,
    )
    update = TripUpdateEntity(
        entity_id=vehicle.vehicle_id,
        trip=trip,
        vehicle=descriptor,
        stop_time_updates=stop_time_updates(vehicle),
        delay_s=delay_s,
        timestamp=timestamp,
    )
    return position, update


def synthesize_feeds(
    vehicles: Iterable[VehicleReport],
    assignment: CycleAssignment,
    *,
    service_date: str,
) -> SynthesizedFeeds:
    """Build position and trip-update entities for every assigned vehicle.

    Vehicles without an assignment (no route id) are left out. Output keeps
    the order of `vehicles`.
    """

    positions: list[VehiclePositionEntity] = []
    updates: list[TripUpdateEntity] = []

    for vehicle in vehicles:
        trip_id = assignment.trip_by_vehicle.get(vehicle.vehicle_id)
        if trip_id is None:
            continue
        position, update = synthesize_vehicle(
            vehicle,
            trip_id=trip_id,
            delay_s=assignment.delay_by_vehicle.get(vehicle.vehicle_id),
            service_date=service_date,
        )
        positions.append(position)
        updates.append(update)

    return SynthesizedFeeds(positions=tuple(positions), trip_updates=tuple(updates))
