from __future__ import annotations

from abc import ABC, abstractmethod

from src.domain.models.gtfs import GtfsFeed


class IGtfsRepository(ABC):
    """Source of the static timetable that live vehicles are matched against."""

    @abstractmethod
    def load_feed(self) -> GtfsFeed:
        """Return trips with their stop times, calendars and routes.

        Implementations may cache; the worker calls this once at startup and
        every cycle afterwards expects the same feed back.
        """

        raise NotImplementedError
