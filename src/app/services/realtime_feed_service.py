from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Mapping

from src.app.config import FeedConfig
from src.app.ports.output import IGtfsRepository, ITelemetryProvider
from src.app.services.feed_emitter import EmittedFeeds, FeedEmitter
from src.domain.algorithms.assignment import assign_cycle, group_by_route
from src.domain.algorithms.eligibility import eligible_trips
from src.domain.algorithms.feed_synthesis import synthesize_feeds
from src.domain.algorithms.service_day import (
    local_midnight_timestamp,
    local_now,
    service_date,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class CycleResult:
    vehicle_count: int
    trip_by_vehicle: Mapping[str, str] = field(default_factory=dict)
    delay_by_vehicle: Mapping[str, int] = field(default_factory=dict)
    emitted: EmittedFeeds | None = None


@dataclass(slots=True)
class RealtimeFeedService:
    """One polling cycle: fetch, assign trips, synthesize and store both feeds.

    Nothing is carried between cycles; every call rebuilds its maps from the
    latest telemetry batch and the (immutable) timetable.
    """

    gtfs_repository: IGtfsRepository
    telemetry_provider: ITelemetryProvider
    emitter: FeedEmitter
    config: FeedConfig = field(default_factory=FeedConfig)

    async def run_cycle(self, *, now: datetime | None = None) -> CycleResult:
        # TelemetryError propagates from here, before anything is assigned or written.
        batch = await self.telemetry_provider.fetch_batch()
        vehicles = batch.vehicles_for(self.config.agency_id)
        logger.info(
            "Telemetry batch generated_on=%s: %d vehicles for agency %s",
            batch.generated_on.isoformat() if batch.generated_on else "unknown",
            len(vehicles),
            self.config.agency_id,
        )

        feed = self.gtfs_repository.load_feed()
        now_local = local_now(self.config.tz, now)

        groups = group_by_route(vehicles)
        trips_by_route = {
            route_id: eligible_trips(
                feed, route_id, now_local, policy=self.config.eligibility
            )
            for route_id in groups
        }

        assignment = assign_cycle(
            groups,
            trips_by_route,
            midnight_ts=local_midnight_timestamp(now_local),
            fallback_trip_id=self.config.fallback_trip_id,
            exhaustive=self.config.exhaustive_scan,
            route_labels={route_id: feed.route_label(route_id) for route_id in groups},
        )
        logger.debug("vehicle_id_to_trip_id: %s", dict(assignment.trip_by_vehicle))
        logger.debug("delays: %s", dict(assignment.delay_by_vehicle))

        feeds = synthesize_feeds(
            vehicles, assignment, service_date=service_date(now_local)
        )
        emitted = self.emitter.emit(feeds.positions, feeds.trip_updates)

        return CycleResult(
            vehicle_count=len(vehicles),
            trip_by_vehicle=assignment.trip_by_vehicle,
            delay_by_vehicle=assignment.delay_by_vehicle,
            emitted=emitted,
        )
