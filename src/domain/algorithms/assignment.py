from __future__ import annotations

import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Iterable, Mapping, Sequence

from src.domain.models.gtfs import GtfsTrip
from src.domain.models.realtime import ArrivalEstimate, VehicleReport

logger = logging.getLogger(__name__)

FALLBACK_TRIP_ID = "GoAnteaters!"


@dataclass(frozen=True, slots=True)
class RouteAssignment:
    """Trip and delay resolution for the vehicles of one route in one cycle.

    delay_by_vehicle holds scheduled minus observed seconds at the reference
    stop: positive means the vehicle is early, negative means late.
    """

    route_id: str
    trip_by_vehicle: Mapping[str, str] = field(default_factory=dict)
    delay_by_vehicle: Mapping[str, int] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class CycleAssignment:
    trip_by_vehicle: Mapping[str, str] = field(default_factory=dict)
    delay_by_vehicle: Mapping[str, int] = field(default_factory=dict)
    routes: tuple[RouteAssignment, ...] = ()


def group_by_route(
    vehicles: Iterable[VehicleReport],
) -> dict[str, tuple[VehicleReport, ...]]:
    """Partition reports by route id, dropping reports without one."""

    grouped: dict[str, list[VehicleReport]] = {}
    for vehicle in vehicles:
        if not vehicle.route_id:
            continue
        grouped.setdefault(vehicle.route_id, []).append(vehicle)
    return {route_id: tuple(vs) for route_id, vs in grouped.items()}


def remaining_estimates_on_trip(vehicle: VehicleReport) -> int:
    """Number of timed arrival estimates before the vehicle's trip boundary.

    The boundary is the first estimate tagged with a different route id;
    everything from there on belongs to the vehicle's next trip.
    """

    count = 0
    for estimate in vehicle.arrival_estimates:
        if estimate.route_id is not None and estimate.route_id != vehicle.route_id:
            break
        if estimate.arrival_at is not None:
            count += 1
    return count


def order_by_progress(vehicles: Iterable[VehicleReport]) -> tuple[VehicleReport, ...]:
    """Queue vehicles from "about to finish" to "just started" (stable)."""

    return tuple(sorted(vehicles, key=remaining_estimates_on_trip))


def _timed_estimates(vehicle: VehicleReport) -> tuple[ArrivalEstimate, ...]:
    return tuple(
        e
        for e in vehicle.arrival_estimates
        if e.arrival_at is not None and e.stop_id is not None
    )


def schedule_difference_s(
    trip: GtfsTrip,
    estimates: Sequence[ArrivalEstimate],
    *,
    midnight_ts: int,
) -> int | None:
    """Trip start offset minus the vehicle's arrival offset at the first shared stop.

    Returns None when the trip and the estimates have no stop in common.
    """

    first = trip.first_departure()
    if first is None or first.departure_time_s is None:
        return None

    stop_ids = trip.timed_stop_ids()
    for estimate in estimates:
        if estimate.stop_id in stop_ids and estimate.arrival_at is not None:
            observed_s = int(estimate.arrival_at.timestamp()) - midnight_ts
            return first.departure_time_s - observed_s
    return None


def closest_candidate(
    vehicle: VehicleReport,
    candidates: Sequence[GtfsTrip],
    *,
    midnight_ts: int,
    exhaustive: bool = False,
) -> tuple[int, int] | None:
    """Pick the candidate whose start best matches the vehicle's estimates.

    Scans from the end of `candidates` toward the front. Without `exhaustive`
    the scan stops at the first candidate scoring strictly worse than the best
    seen so far, assuming scores only degrade further back. Candidates with no
    shared stop are skipped.

    Returns (candidate index, signed difference) or None if nothing overlapped.
    """

    estimates = _timed_estimates(vehicle)
    best: tuple[int, int] | None = None

    for index in range(len(candidates) - 1, -1, -1):
        diff = schedule_difference_s(
            candidates[index], estimates, midnight_ts=midnight_ts
        )
        if diff is None:
            logger.debug(
                "No shared stop between vehicle %s and trip %s",
                vehicle.vehicle_id,
                candidates[index].trip_id,
            )
            continue

        if best is None or abs(diff) < abs(best[1]):
            best = (index, diff)
        elif abs(diff) > abs(best[1]) and not exhaustive:
            break

    return best


def assign_route(
    route_id: str,
    vehicles: Iterable[VehicleReport],
    trips: Sequence[GtfsTrip],
    *,
    midnight_ts: int,
    fallback_trip_id: str = FALLBACK_TRIP_ID,
    exhaustive: bool = False,
    route_label: str | None = None,
) -> RouteAssignment:
    """Match every vehicle of a route to one of its eligible trips.

    `trips` must already be in schedule order. Each resolved match consumes
    the winning trip and every candidate before it, so vehicles further back
    in the progress queue can only receive later trips.

    `route_label` (e.g. the GTFS short name) is only used in log lines.
    """

    candidates = list(trips)
    queue = order_by_progress(vehicles)
    label = route_label or route_id

    logger.debug(
        "order of completion [%s]: %s",
        label,
        [remaining_estimates_on_trip(v) for v in queue],
    )
    logger.debug(
        "possible trips on Route %s: %s", label, [t.trip_id for t in candidates]
    )

    trip_by_vehicle: dict[str, str] = {}
    delay_by_vehicle: dict[str, int] = {}

    for i, vehicle in enumerate(queue):
        if not candidates:
            trip_by_vehicle[vehicle.vehicle_id] = f"extra-{route_id}-{i}"
            continue

        if len(candidates) == 1:
            trip_by_vehicle[vehicle.vehicle_id] = candidates[0].trip_id
            continue

        picked = closest_candidate(
            vehicle, candidates, midnight_ts=midnight_ts, exhaustive=exhaustive
        )
        if picked is None:
            logger.info(
                "No trips left to search for vehicle %s on route %s",
                vehicle.vehicle_id,
                label,
            )
            trip_by_vehicle[vehicle.vehicle_id] = fallback_trip_id
            continue

        index, diff = picked
        trip_id = candidates[index].trip_id
        trip_by_vehicle[vehicle.vehicle_id] = trip_id
        delay_by_vehicle[vehicle.vehicle_id] = diff
        del candidates[: index + 1]

        logger.info(
            "Route: %s, vehicle: %s assigned to %s (delay %ss)",
            label,
            vehicle.label or vehicle.vehicle_id,
            trip_id,
            diff,
        )

    return RouteAssignment(
        route_id=route_id,
        trip_by_vehicle=MappingProxyType(trip_by_vehicle),
        delay_by_vehicle=MappingProxyType(delay_by_vehicle),
    )


def assign_cycle(
    groups: Mapping[str, Sequence[VehicleReport]],
    trips_by_route: Mapping[str, Sequence[GtfsTrip]],
    *,
    midnight_ts: int,
    fallback_trip_id: str = FALLBACK_TRIP_ID,
    exhaustive: bool = False,
    route_labels: Mapping[str, str] | None = None,
) -> CycleAssignment:
    """Run `assign_route` for every route group and merge the results.

    Routes never share candidates, so they are resolved independently.
    """

    routes: list[RouteAssignment] = []
    trip_by_vehicle: dict[str, str] = {}
    delay_by_vehicle: dict[str, int] = {}

    for route_id in sorted(groups):
        result = assign_route(
            route_id,
            groups[route_id],
            trips_by_route.get(route_id, ()),
            midnight_ts=midnight_ts,
            fallback_trip_id=fallback_trip_id,
            exhaustive=exhaustive,
            route_label=(route_labels or {}).get(route_id),
        )
        routes.append(result)
        trip_by_vehicle.update(result.trip_by_vehicle)
        delay_by_vehicle.update(result.delay_by_vehicle)

    return CycleAssignment(
        trip_by_vehicle=MappingProxyType(trip_by_vehicle),
        delay_by_vehicle=MappingProxyType(delay_by_vehicle),
        routes=tuple(routes),
    )
