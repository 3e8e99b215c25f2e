from __future__ import annotations

from dataclasses import dataclass, field

WEEKDAY_NAMES = (
    "monday",
    "tuesday",
    "wednesday",
    "thursday",
    "friday",
    "saturday",
    "sunday",
)


@dataclass(frozen=True, slots=True)
class GtfsStopTime:
    """One scheduled call of a trip at a stop.

    Times are seconds since service day midnight (GTFS time semantics; may exceed 24h).
    """

    stop_id: str
    stop_sequence: int
    departure_time_s: int | None = None


@dataclass(frozen=True, slots=True)
class GtfsRoute:
    route_id: str
    short_name: str | None = None
    long_name: str | None = None


@dataclass(frozen=True, slots=True)
class GtfsCalendar:
    service_id: str
    monday: bool = False
    tuesday: bool = False
    wednesday: bool = False
    thursday: bool = False
    friday: bool = False
    saturday: bool = False
    sunday: bool = False

    def runs_on(self, weekday: int) -> bool:
        """weekday follows datetime.weekday(): Monday == 0."""

        return bool(getattr(self, WEEKDAY_NAMES[weekday]))


@dataclass(frozen=True, slots=True)
class GtfsTrip:
    trip_id: str
    route_id: str
    service_id: str
    stop_times: tuple[GtfsStopTime, ...] = ()

    def first_departure(self) -> GtfsStopTime | None:
        return next(
            (st for st in self.stop_times if st.departure_time_s is not None), None
        )

    def timed_stop_ids(self) -> frozenset[str]:
        return frozenset(
            st.stop_id for st in self.stop_times if st.departure_time_s is not None
        )


@dataclass(frozen=True, slots=True)
class GtfsFeed:
    """In-memory, read-only timetable for one service area."""

    trips_by_id: dict[str, GtfsTrip]
    routes_by_id: dict[str, GtfsRoute] = field(default_factory=dict)
    calendars_by_service_id: dict[str, GtfsCalendar] = field(default_factory=dict)
    trip_ids_by_route: dict[str, tuple[str, ...]] = field(default_factory=dict)

    def trips_for_route(self, route_id: str) -> tuple[GtfsTrip, ...]:
        if not self.trip_ids_by_route:
            return tuple(t for t in self.trips_by_id.values() if t.route_id == route_id)
        return tuple(
            self.trips_by_id[tid] for tid in self.trip_ids_by_route.get(route_id, ())
        )

    def route_label(self, route_id: str) -> str:
        route = self.routes_by_id.get(route_id)
        if route is None:
            return route_id
        return route.short_name or route.long_name or route_id
