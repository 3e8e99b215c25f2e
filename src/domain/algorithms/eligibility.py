from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Literal

from src.domain.models.gtfs import GtfsFeed, GtfsTrip

from .service_day import seconds_since_midnight

CalendarMode = Literal["friday_monday", "weekday"]
TripOrder = Literal["trip_id", "first_departure"]

FRIDAY = 4
MONDAY = 0


@dataclass(frozen=True, slots=True)
class EligibilityPolicy:
    """Tuning knobs for which scheduled trips count as live candidates.

    A trip is time-eligible when its first scheduled departure lies within
    [now - past_s, now + future_s].

    calendar_mode:
      - friday_monday: Fridays use the calendar's friday flag, every other day
        uses the monday flag (two-bucket service model).
      - weekday: the calendar flag of the actual weekday is used.
    """

    past_s: int = 3600
    future_s: int = 1500
    calendar_mode: CalendarMode = "friday_monday"
    trip_order: TripOrder = "trip_id"


DEFAULT_POLICY = EligibilityPolicy()


def service_weekday(now: datetime, mode: CalendarMode) -> int:
    """Weekday whose calendar flag decides eligibility on `now`."""

    if mode == "weekday":
        return now.weekday()
    return FRIDAY if now.weekday() == FRIDAY else MONDAY


def is_trip_eligible(
    trip: GtfsTrip,
    route_id: str,
    now: datetime,
    *,
    feed: GtfsFeed,
    policy: EligibilityPolicy = DEFAULT_POLICY,
) -> bool:
    """Whether `trip` is a live candidate for vehicles of `route_id` at `now`.

    `now` must already be expressed in the agency's local timezone.
    """

    if trip.route_id != route_id:
        return False

    first = trip.first_departure()
    if first is not None and first.departure_time_s is not None:
        diff = first.departure_time_s - seconds_since_midnight(now)
        # Positive: trip has not started yet. Negative: already running.
        if diff > policy.future_s or diff < -policy.past_s:
            return False

    calendar = feed.calendars_by_service_id.get(trip.service_id)
    if calendar is None:
        return False

    return calendar.runs_on(service_weekday(now, policy.calendar_mode))


def _trip_sort_key(trip: GtfsTrip, order: TripOrder) -> tuple:
    if order == "first_departure":
        first = trip.first_departure()
        dep = first.departure_time_s if first is not None else None
        # Untimed trips go last; trip_id keeps ties deterministic.
        return (dep is None, dep or 0, trip.trip_id)
    return (trip.trip_id,)


def eligible_trips(
    feed: GtfsFeed,
    route_id: str,
    now: datetime,
    *,
    policy: EligibilityPolicy = DEFAULT_POLICY,
) -> tuple[GtfsTrip, ...]:
    """Eligible trips for a route, in candidate (schedule) order."""

    trips = [
        t
        for t in feed.trips_for_route(route_id)
        if is_trip_eligible(t, route_id, now, feed=feed, policy=policy)
    ]
    trips.sort(key=lambda t: _trip_sort_key(t, policy.trip_order))
    return tuple(trips)
