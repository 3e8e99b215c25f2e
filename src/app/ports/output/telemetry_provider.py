from __future__ import annotations

from abc import ABC, abstractmethod

from src.domain.models.realtime import TelemetryBatch


class ITelemetryProvider(ABC):
    """Port for polling live vehicle reports (e.g., TransLoc vehicles.json).

    Implementations raise TelemetryError when no usable batch is available.
    """

    @abstractmethod
    async def fetch_batch(self) -> TelemetryBatch:
        raise NotImplementedError
