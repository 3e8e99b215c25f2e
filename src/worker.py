from __future__ import annotations

import asyncio
import logging
import os
import time
from datetime import datetime
from typing import Callable

from src.adapters.api.dependencies import get_realtime_feed_service
from src.app.config import WorkerConfig
from src.app.services.realtime_feed_service import RealtimeFeedService
from src.domain.algorithms.service_day import local_now
from src.domain.exceptions import TelemetryError

logger = logging.getLogger("src.worker")


def is_off_hours(now_local: datetime, config: WorkerConfig) -> bool:
    """Outside local business hours, or on a weekend unless enabled."""

    is_weekend = now_local.weekday() >= 5
    if is_weekend and not config.run_on_weekends:
        return True
    return now_local.hour < config.business_hours_start


async def run(
    service: RealtimeFeedService,
    config: WorkerConfig,
    *,
    clock: Callable[[], datetime] | None = None,
) -> None:
    # Timetable is loaded once up front; later cycles reuse the cached feed.
    service.gtfs_repository.load_feed()

    while True:
        now_local = local_now(service.config.tz, clock() if clock else None)
        if is_off_hours(now_local, config):
            if not config.loop:
                return
            logger.info("Outside business hours; sleeping %ss", config.off_hours_sleep_s)
            await asyncio.sleep(config.off_hours_sleep_s)
            continue

        beginning = time.monotonic()
        try:
            result = await service.run_cycle()
        except TelemetryError as exc:
            logger.warning("Telemetry unavailable: %s", exc)
            if not config.loop:
                return
            await asyncio.sleep(config.failure_backoff_s)
            continue

        logger.info(
            "Cycle done: %d vehicles, %d assigned",
            result.vehicle_count,
            len(result.trip_by_vehicle),
        )

        if not config.loop:
            return

        time_left = config.cycle_budget_s - (time.monotonic() - beginning)
        if time_left > 0:
            await asyncio.sleep(time_left)


def main() -> None:
    logging.basicConfig(
        level=os.getenv("LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    asyncio.run(run(get_realtime_feed_service(), WorkerConfig.from_env()))


if __name__ == "__main__":
    main()
