from __future__ import annotations

from datetime import datetime
from zoneinfo import ZoneInfo

import pytest

from src.domain.algorithms.eligibility import (
    EligibilityPolicy,
    eligible_trips,
    is_trip_eligible,
)
from src.domain.models.gtfs import GtfsCalendar, GtfsFeed, GtfsStopTime, GtfsTrip

LA = ZoneInfo("America/Los_Angeles")

# 2026-01-08 is a Thursday; 10:00 local is 36000 s after midnight.
THURSDAY_10AM = datetime(2026, 1, 8, 10, 0, 0, tzinfo=LA)
FRIDAY_10AM = datetime(2026, 1, 9, 10, 0, 0, tzinfo=LA)
NOW_S = 36000


def _trip(
    trip_id: str,
    first_dep_s: int | None,
    *,
    route_id: str = "R1",
    service_id: str = "WK",
) -> GtfsTrip:
    if first_dep_s is None:
        stop_times = (
            GtfsStopTime(stop_id="A", stop_sequence=1),
            GtfsStopTime(stop_id="B", stop_sequence=2),
        )
    else:
        stop_times = (
            GtfsStopTime(stop_id="A", stop_sequence=1, departure_time_s=first_dep_s),
            GtfsStopTime(
                stop_id="B", stop_sequence=2, departure_time_s=first_dep_s + 300
            ),
        )
    return GtfsTrip(
        trip_id=trip_id, route_id=route_id, service_id=service_id, stop_times=stop_times
    )


def _feed(*trips: GtfsTrip) -> GtfsFeed:
    weekdays = dict(monday=True, tuesday=True, wednesday=True, thursday=True, friday=True)
    return GtfsFeed(
        trips_by_id={t.trip_id: t for t in trips},
        calendars_by_service_id={
            "WK": GtfsCalendar(service_id="WK", **weekdays),
            "FRI": GtfsCalendar(service_id="FRI", friday=True),
            "MON": GtfsCalendar(service_id="MON", monday=True),
            "THU": GtfsCalendar(service_id="THU", thursday=True),
        },
    )


@pytest.mark.parametrize(
    ("offset_s", "expected"),
    [
        (2000, False),
        (1000, True),
        (1500, True),
        (1501, False),
        (-3000, True),
        (-3600, True),
        (-3700, False),
    ],
)
def test_time_window_around_first_departure(offset_s: int, expected: bool) -> None:
    trip = _trip("T1", NOW_S + offset_s)
    feed = _feed(trip)

    assert is_trip_eligible(trip, "R1", THURSDAY_10AM, feed=feed) is expected


def test_rejects_other_route() -> None:
    trip = _trip("T1", NOW_S, route_id="R2")
    assert not is_trip_eligible(trip, "R1", THURSDAY_10AM, feed=_feed(trip))


def test_window_is_configurable() -> None:
    trip = _trip("T1", NOW_S - 1200)
    feed = _feed(trip)
    narrow = EligibilityPolicy(past_s=600, future_s=600)

    assert is_trip_eligible(trip, "R1", THURSDAY_10AM, feed=feed)
    assert not is_trip_eligible(trip, "R1", THURSDAY_10AM, feed=feed, policy=narrow)


def test_first_timed_stop_is_used_when_first_stop_is_untimed() -> None:
    trip = GtfsTrip(
        trip_id="T1",
        route_id="R1",
        service_id="WK",
        stop_times=(
            GtfsStopTime(stop_id="A", stop_sequence=1),
            GtfsStopTime(stop_id="B", stop_sequence=2, departure_time_s=NOW_S + 5000),
        ),
    )
    assert not is_trip_eligible(trip, "R1", THURSDAY_10AM, feed=_feed(trip))


def test_untimed_trip_only_checks_route_and_calendar() -> None:
    trip = _trip("T1", None)
    feed = _feed(trip)

    assert is_trip_eligible(trip, "R1", THURSDAY_10AM, feed=feed)
    assert not is_trip_eligible(trip, "R2", THURSDAY_10AM, feed=feed)


def test_two_bucket_calendar_uses_monday_flag_except_on_friday() -> None:
    monday_only = _trip("T1", NOW_S, service_id="MON")
    friday_only = _trip("T2", NOW_S, service_id="FRI")
    thursday_only = _trip("T3", NOW_S, service_id="THU")
    feed = _feed(monday_only, friday_only, thursday_only)

    # Thursday falls in the Monday bucket.
    assert is_trip_eligible(monday_only, "R1", THURSDAY_10AM, feed=feed)
    assert not is_trip_eligible(friday_only, "R1", THURSDAY_10AM, feed=feed)
    assert not is_trip_eligible(thursday_only, "R1", THURSDAY_10AM, feed=feed)

    assert is_trip_eligible(friday_only, "R1", FRIDAY_10AM, feed=feed)
    assert not is_trip_eligible(monday_only, "R1", FRIDAY_10AM, feed=feed)


def test_weekday_calendar_mode_uses_actual_weekday() -> None:
    thursday_only = _trip("T1", NOW_S, service_id="THU")
    monday_only = _trip("T2", NOW_S, service_id="MON")
    feed = _feed(thursday_only, monday_only)
    policy = EligibilityPolicy(calendar_mode="weekday")

    assert is_trip_eligible(thursday_only, "R1", THURSDAY_10AM, feed=feed, policy=policy)
    assert not is_trip_eligible(monday_only, "R1", THURSDAY_10AM, feed=feed, policy=policy)


def test_trip_without_calendar_row_is_not_eligible() -> None:
    trip = _trip("T1", NOW_S, service_id="UNKNOWN")
    assert not is_trip_eligible(trip, "R1", THURSDAY_10AM, feed=_feed(trip))


def test_eligible_trips_sorted_by_trip_id_by_default() -> None:
    feed = _feed(
        _trip("T3", NOW_S - 100),
        _trip("T1", NOW_S + 100),
        _trip("T2", NOW_S),
        _trip("T9", NOW_S + 9000),
        _trip("X1", NOW_S, route_id="R2"),
    )

    trips = eligible_trips(feed, "R1", THURSDAY_10AM)

    assert [t.trip_id for t in trips] == ["T1", "T2", "T3"]


def test_eligible_trips_can_sort_by_first_departure() -> None:
    feed = _feed(
        _trip("T3", NOW_S - 100),
        _trip("T1", NOW_S + 100),
        _trip("T2", NOW_S),
        _trip("T0", None),
    )
    policy = EligibilityPolicy(trip_order="first_departure")

    trips = eligible_trips(feed, "R1", THURSDAY_10AM, policy=policy)

    assert [t.trip_id for t in trips] == ["T3", "T2", "T1", "T0"]
