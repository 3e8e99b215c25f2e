from __future__ import annotations

import csv
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

from src.app.ports.output import IGtfsRepository
from src.domain.models.gtfs import (
    WEEKDAY_NAMES,
    GtfsCalendar,
    GtfsFeed,
    GtfsRoute,
    GtfsStopTime,
    GtfsTrip,
)

logger = logging.getLogger(__name__)


def _parse_gtfs_time_to_seconds(raw: str | None) -> int | None:
    # GTFS time can be HH:MM:SS with HH possibly > 24. Blank means untimed stop.
    value = (raw or "").strip()
    if not value:
        return None
    hh, mm, ss = value.split(":")
    return int(hh) * 3600 + int(mm) * 60 + int(ss)


def _read_rows(path: Path):
    with path.open("r", encoding="utf-8-sig", newline="") as fp:
        yield from csv.DictReader(fp)


@dataclass(slots=True)
class LocalGtfsRepository(IGtfsRepository):
    """Loads a GTFS timetable from a directory of .txt files.

    Env vars:
      - GTFS_PATH: path to directory containing trips.txt, stop_times.txt,
        calendar.txt (routes.txt optional)

    The feed is parsed on first use and reused for the process lifetime.
    """

    base_path: str | Path | None = None
    _feed: GtfsFeed | None = field(default=None, init=False, repr=False)

    def _base(self) -> Path:
        value = self.base_path or os.getenv("GTFS_PATH") or "data/gtfs"
        return Path(value)

    def load_feed(self) -> GtfsFeed:
        if self._feed is None:
            self._feed = self._read_feed(self._base())
        return self._feed

    def _read_feed(self, base: Path) -> GtfsFeed:
        # Optional metadata.
        routes_by_id: dict[str, GtfsRoute] = {}
        routes_path = base / "routes.txt"
        if routes_path.exists():
            for row in _read_rows(routes_path):
                route_id = (row.get("route_id") or "").strip()
                if not route_id:
                    continue
                routes_by_id[route_id] = GtfsRoute(
                    route_id=route_id,
                    short_name=(row.get("route_short_name") or "").strip() or None,
                    long_name=(row.get("route_long_name") or "").strip() or None,
                )

        calendars: dict[str, GtfsCalendar] = {}
        for row in _read_rows(base / "calendar.txt"):
            service_id = (row.get("service_id") or "").strip()
            if not service_id:
                continue
            flags = {
                day: (row.get(day) or "0").strip() == "1" for day in WEEKDAY_NAMES
            }
            calendars[service_id] = GtfsCalendar(service_id=service_id, **flags)

        # Build stop_times per trip with ordering.
        stop_times_by_trip: dict[str, list[GtfsStopTime]] = {}
        for row in _read_rows(base / "stop_times.txt"):
            trip_id = (row.get("trip_id") or "").strip()
            stop_id = (row.get("stop_id") or "").strip()
            if not trip_id or not stop_id:
                continue
            try:
                seq = int(row.get("stop_sequence") or 0)
                dep_s = _parse_gtfs_time_to_seconds(row.get("departure_time"))
            except ValueError:
                logger.warning("Skipping malformed stop_time row for trip %s", trip_id)
                continue
            stop_times_by_trip.setdefault(trip_id, []).append(
                GtfsStopTime(stop_id=stop_id, stop_sequence=seq, departure_time_s=dep_s)
            )

        trips_by_id: dict[str, GtfsTrip] = {}
        trip_ids_by_route: dict[str, list[str]] = {}
        for row in _read_rows(base / "trips.txt"):
            trip_id = (row.get("trip_id") or "").strip()
            route_id = (row.get("route_id") or "").strip()
            if not trip_id or not route_id:
                continue
            entries = stop_times_by_trip.get(trip_id, [])
            entries.sort(key=lambda st: st.stop_sequence)
            trips_by_id[trip_id] = GtfsTrip(
                trip_id=trip_id,
                route_id=route_id,
                service_id=(row.get("service_id") or "").strip(),
                stop_times=tuple(entries),
            )
            trip_ids_by_route.setdefault(route_id, []).append(trip_id)

        logger.info(
            "Loaded GTFS from %s: %d routes, %d trips, %d calendars",
            base,
            len(routes_by_id),
            len(trips_by_id),
            len(calendars),
        )

        return GtfsFeed(
            trips_by_id=trips_by_id,
            routes_by_id=routes_by_id,
            calendars_by_service_id=calendars,
            trip_ids_by_route={k: tuple(v) for k, v in trip_ids_by_route.items()},
        )
