from __future__ import annotations

import os
from dataclasses import dataclass
from zoneinfo import ZoneInfo

from src.domain.algorithms.assignment import FALLBACK_TRIP_ID
from src.domain.algorithms.eligibility import (
    CalendarMode,
    EligibilityPolicy,
    TripOrder,
)

_CALENDAR_MODES = {"friday_monday", "weekday"}
_TRIP_ORDERS = {"trip_id", "first_departure"}


def env_bool(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def env_int(name: str, default: int) -> int:
    raw = (os.getenv(name) or "").strip()
    return int(raw) if raw else default


def env_float(name: str, default: float) -> float:
    raw = (os.getenv(name) or "").strip()
    return float(raw) if raw else default


def _env_choice(name: str, default: str, allowed: set[str]) -> str:
    value = (os.getenv(name) or default).strip().lower()
    if value not in allowed:
        raise ValueError(f"Invalid {name}: {value!r} (expected one of {sorted(allowed)})")
    return value


@dataclass(frozen=True, slots=True)
class FeedConfig:
    """Per-agency settings for one feed generation pass.

    Env vars:
      - AGENCY_ID: telemetry agency to consume (default 1039)
      - FEED_ID: public feed id used in store keys
      - AGENCY_TIMEZONE: IANA timezone of the service area
      - ELIGIBILITY_PAST_S / ELIGIBILITY_FUTURE_S: trip start window
      - CALENDAR_MODE: friday_monday | weekday
      - TRIP_ORDER: trip_id | first_departure
      - EXHAUSTIVE_TRIP_SCAN: scan every candidate instead of stopping early
      - FALLBACK_TRIP_ID: trip id for vehicles matching no candidate
    """

    agency_id: str = "1039"
    feed_id: str = "f-anteaterexpress~rt"
    timezone: str = "America/Los_Angeles"
    eligibility: EligibilityPolicy = EligibilityPolicy()
    exhaustive_scan: bool = False
    fallback_trip_id: str = FALLBACK_TRIP_ID

    @property
    def tz(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)

    @staticmethod
    def from_env() -> "FeedConfig":
        calendar_mode: CalendarMode = _env_choice(  # type: ignore[assignment]
            "CALENDAR_MODE", "friday_monday", _CALENDAR_MODES
        )
        trip_order: TripOrder = _env_choice(  # type: ignore[assignment]
            "TRIP_ORDER", "trip_id", _TRIP_ORDERS
        )

        return FeedConfig(
            agency_id=os.getenv("AGENCY_ID", "1039"),
            feed_id=os.getenv("FEED_ID", "f-anteaterexpress~rt"),
            timezone=os.getenv("AGENCY_TIMEZONE", "America/Los_Angeles"),
            eligibility=EligibilityPolicy(
                past_s=env_int("ELIGIBILITY_PAST_S", 3600),
                future_s=env_int("ELIGIBILITY_FUTURE_S", 1500),
                calendar_mode=calendar_mode,
                trip_order=trip_order,
            ),
            exhaustive_scan=env_bool("EXHAUSTIVE_TRIP_SCAN", False),
            fallback_trip_id=os.getenv("FALLBACK_TRIP_ID") or FALLBACK_TRIP_ID,
        )


@dataclass(frozen=True, slots=True)
class WorkerConfig:
    """Operating cadence of the polling worker.

    Env vars:
      - CYCLE_BUDGET_S: target wall-clock length of one cycle (default 1.0)
      - FAILURE_BACKOFF_S: wait after a failed telemetry fetch (default 10)
      - OFF_HOURS_SLEEP_S: wait while outside business hours (default 600)
      - BUSINESS_HOURS_START: first local hour of service (default 6)
      - RUN_ON_WEEKENDS: keep polling on Saturday/Sunday (default false)
      - WORKER_LOOP: set to 0 to run a single cycle and exit
    """

    cycle_budget_s: float = 1.0
    failure_backoff_s: float = 10.0
    off_hours_sleep_s: float = 600.0
    business_hours_start: int = 6
    run_on_weekends: bool = False
    loop: bool = True

    @staticmethod
    def from_env() -> "WorkerConfig":
        return WorkerConfig(
            cycle_budget_s=env_float("CYCLE_BUDGET_S", 1.0),
            failure_backoff_s=env_float("FAILURE_BACKOFF_S", 10.0),
            off_hours_sleep_s=env_float("OFF_HOURS_SLEEP_S", 600.0),
            business_hours_start=env_int("BUSINESS_HOURS_START", 6),
            run_on_weekends=env_bool("RUN_ON_WEEKENDS", False),
            loop=env_bool("WORKER_LOOP", True),
        )
