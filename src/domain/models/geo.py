from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping


@dataclass(frozen=True, slots=True)
class GeoPoint:
    """WGS84 position of a vehicle, as published in VehiclePosition.position."""

    lat: float
    lon: float

    def __post_init__(self) -> None:
        if not (-90.0 <= self.lat <= 90.0):
            raise ValueError(f"Latitude out of range: {self.lat}")
        if not (-180.0 <= self.lon <= 180.0):
            raise ValueError(f"Longitude out of range: {self.lon}")

    @staticmethod
    def from_lat_lng(raw: Mapping[str, Any] | None) -> "GeoPoint":
        """Build from a `{"lat": .., "lng": ..}` mapping (telemetry wire shape)."""

        if not raw:
            raise ValueError("Missing location")
        try:
            lat = float(raw["lat"])
            lon = float(raw["lng"])
        except (KeyError, TypeError) as exc:
            raise ValueError(f"Incomplete location: {raw!r}") from exc
        return GeoPoint(lat=lat, lon=lon)
