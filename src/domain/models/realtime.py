from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from .geo import GeoPoint


@dataclass(frozen=True, slots=True)
class ArrivalEstimate:
    """Provider-projected arrival of a vehicle at an upcoming stop."""

    stop_id: str | None = None
    arrival_at: datetime | None = None
    route_id: str | None = None


@dataclass(frozen=True, slots=True)
class VehicleReport:
    vehicle_id: str
    route_id: str | None
    location: GeoPoint
    heading: float | None = None
    speed_kmh: float | None = None
    label: str | None = None
    last_updated: datetime | None = None
    arrival_estimates: tuple[ArrivalEstimate, ...] = ()


@dataclass(frozen=True, slots=True)
class TelemetryBatch:
    """One poll of the telemetry provider, keyed by agency id."""

    vehicles_by_agency: dict[str, tuple[VehicleReport, ...]] = field(
        default_factory=dict
    )
    generated_on: datetime | None = None

    def vehicles_for(self, agency_id: str) -> tuple[VehicleReport, ...]:
        return self.vehicles_by_agency.get(agency_id, ())
