from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Mapping

import httpx

from src.adapters.realtime.credentials import RandomKeyPoolCredentialProvider
from src.app.ports.output import ICredentialProvider, ITelemetryProvider
from src.domain.exceptions import MalformedTelemetry, TelemetryUnavailable
from src.domain.models.geo import GeoPoint
from src.domain.models.realtime import ArrivalEstimate, TelemetryBatch, VehicleReport

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class HttpTranslocTelemetryProvider(ITelemetryProvider):
    """Polls the TransLoc `vehicles.json` endpoint for one agency.

    Env vars:
      - TRANSLOC_BASE_URL: API root (default: RapidAPI TransLoc 1.2 host)
      - TRANSLOC_KEY_HEADER: header carrying the API key (default X-Mashape-Key)
      - TRANSLOC_TIMEOUT_S: request timeout (default 10)
      - AGENCY_ID: agency requested from the API (default 1039)

    Notes:
      - One key is requested from the credential provider per fetch.
      - Transport errors and non-2xx answers raise TelemetryUnavailable;
        undecodable payloads raise MalformedTelemetry.
    """

    agency_id: str | None = None
    base_url: str | None = None
    key_header: str | None = None
    timeout_s: float = 10.0
    credentials: ICredentialProvider | None = None
    transport: httpx.AsyncBaseTransport | None = field(default=None, repr=False)

    def __post_init__(self) -> None:
        if self.agency_id is None:
            self.agency_id = os.getenv("AGENCY_ID", "1039")
        if self.base_url is None:
            self.base_url = os.getenv(
                "TRANSLOC_BASE_URL", "https://transloc-api-1-2.p.rapidapi.com"
            )
        if self.key_header is None:
            self.key_header = os.getenv("TRANSLOC_KEY_HEADER", "X-Mashape-Key")
        if os.getenv("TRANSLOC_TIMEOUT_S"):
            self.timeout_s = float(os.environ["TRANSLOC_TIMEOUT_S"])
        if self.credentials is None:
            self.credentials = RandomKeyPoolCredentialProvider()

    def _url(self) -> str:
        return (self.base_url or "").rstrip("/") + "/vehicles.json"

    async def fetch_batch(self) -> TelemetryBatch:
        headers = {self.key_header: self.credentials.api_key()}
        params = {"agencies": self.agency_id}

        try:
            async with httpx.AsyncClient(
                timeout=self.timeout_s, transport=self.transport
            ) as client:
                resp = await client.get(self._url(), params=params, headers=headers)
                resp.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise TelemetryUnavailable(
                f"Telemetry request failed with status {exc.response.status_code}"
            ) from exc
        except httpx.HTTPError as exc:
            raise TelemetryUnavailable(f"Telemetry request failed: {exc}") from exc

        logger.debug("Downloaded %d bytes of telemetry", len(resp.content))

        try:
            payload = resp.json()
        except ValueError as exc:
            raise MalformedTelemetry("Telemetry payload is not valid JSON") from exc

        return parse_vehicles_payload(payload)


def _parse_timestamp(raw: Any) -> datetime | None:
    if not isinstance(raw, str) or not raw.strip():
        return None
    value = raw.strip()
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    try:
        dt = datetime.fromisoformat(value)
    except ValueError:
        logger.debug("Unparsable timestamp %r", raw)
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def _opt_str(raw: Any) -> str | None:
    if raw is None:
        return None
    value = str(raw).strip()
    return value or None


def _opt_float(raw: Any) -> float | None:
    if raw is None:
        return None
    try:
        return float(raw)
    except (TypeError, ValueError):
        return None


def _parse_estimate(raw: Any) -> ArrivalEstimate | None:
    if not isinstance(raw, Mapping):
        return None
    return ArrivalEstimate(
        stop_id=_opt_str(raw.get("stop_id")),
        arrival_at=_parse_timestamp(raw.get("arrival_at")),
        route_id=_opt_str(raw.get("route_id")),
    )


def parse_vehicle(raw: Mapping[str, Any]) -> VehicleReport | None:
    """Parse one TransLoc vehicle; returns None when it cannot be used at all."""

    vehicle_id = _opt_str(raw.get("vehicle_id"))
    if vehicle_id is None:
        return None

    try:
        point = GeoPoint.from_lat_lng(raw.get("location"))
    except ValueError as exc:
        logger.warning("Dropping vehicle %s: bad location (%s)", vehicle_id, exc)
        return None

    estimates = tuple(
        e
        for e in (_parse_estimate(x) for x in raw.get("arrival_estimates") or ())
        if e is not None
    )

    return VehicleReport(
        vehicle_id=vehicle_id,
        route_id=_opt_str(raw.get("route_id")),
        location=point,
        heading=_opt_float(raw.get("heading")),
        speed_kmh=_opt_float(raw.get("speed")),
        label=_opt_str(raw.get("call_name")),
        last_updated=_parse_timestamp(raw.get("last_updated_on")),
        arrival_estimates=estimates,
    )


def parse_vehicles_payload(payload: Any) -> TelemetryBatch:
    if not isinstance(payload, Mapping):
        raise MalformedTelemetry("Telemetry payload is not a JSON object")

    data = payload.get("data")
    if not isinstance(data, Mapping):
        raise MalformedTelemetry("Telemetry payload has no 'data' mapping")

    vehicles_by_agency: dict[str, tuple[VehicleReport, ...]] = {}
    for agency_id, buses in data.items():
        if not isinstance(buses, list):
            raise MalformedTelemetry(f"Vehicles for agency {agency_id} is not a list")
        out: list[VehicleReport] = []
        for raw in buses:
            if not isinstance(raw, Mapping):
                continue
            vehicle = parse_vehicle(raw)
            if vehicle is not None:
                out.append(vehicle)
        vehicles_by_agency[str(agency_id)] = tuple(out)

    return TelemetryBatch(
        vehicles_by_agency=vehicles_by_agency,
        generated_on=_parse_timestamp(payload.get("generated_on")),
    )
