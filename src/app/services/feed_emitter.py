from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable, Sequence

from src.app.ports.output import IFeedEncoder, IFeedStore
from src.domain.models.feed import (
    FeedKind,
    FeedMessage,
    TripUpdateEntity,
    VehiclePositionEntity,
)

logger = logging.getLogger(__name__)


def feed_key(feed_id: str, kind: FeedKind) -> str:
    return f"gtfsrt|{feed_id}|{kind.value}"


def feed_time_key(feed_id: str, kind: FeedKind) -> str:
    return f"gtfsrttime|{feed_id}|{kind.value}"


def feed_exists_key(feed_id: str) -> str:
    return f"gtfsrtexists|{feed_id}"


def _now_ms() -> int:
    return int(time.time() * 1000)


@dataclass(frozen=True, slots=True)
class EmittedFeeds:
    vehicles: bytes
    trips: bytes
    written_at_ms: int


@dataclass(slots=True)
class FeedEmitter:
    """Wraps entity collections into feed messages and writes them to the store.

    Both messages are encoded before the first write, so an encoding failure
    never leaves a half-written cycle behind. Store failures propagate.
    """

    feed_id: str
    encoder: IFeedEncoder
    store: IFeedStore
    clock_ms: Callable[[], int] = _now_ms

    def build_message(
        self,
        entities: Sequence[VehiclePositionEntity | TripUpdateEntity],
        *,
        now_ms: int,
    ) -> FeedMessage:
        return FeedMessage(timestamp=now_ms // 1000, entities=tuple(entities))

    def emit(
        self,
        positions: Sequence[VehiclePositionEntity],
        trip_updates: Sequence[TripUpdateEntity],
    ) -> EmittedFeeds:
        generated_ms = self.clock_ms()
        vehicles_buf = self.encoder.encode(
            self.build_message(positions, now_ms=generated_ms)
        )
        trips_buf = self.encoder.encode(
            self.build_message(trip_updates, now_ms=generated_ms)
        )

        self.store.set(feed_key(self.feed_id, FeedKind.VEHICLES), vehicles_buf)
        self.store.set(feed_key(self.feed_id, FeedKind.TRIPS), trips_buf)

        written_ms = self.clock_ms()
        stamp = str(written_ms)
        self.store.set(feed_time_key(self.feed_id, FeedKind.VEHICLES), stamp)
        self.store.set(feed_time_key(self.feed_id, FeedKind.TRIPS), stamp)
        self.store.set(feed_exists_key(self.feed_id), stamp)

        logger.info(
            "Stored feeds for %s: %d vehicles, %d trip updates (%d + %d bytes)",
            self.feed_id,
            len(positions),
            len(trip_updates),
            len(vehicles_buf),
            len(trips_buf),
        )
        return EmittedFeeds(
            vehicles=vehicles_buf, trips=trips_buf, written_at_ms=written_ms
        )
