from __future__ import annotations

from abc import ABC, abstractmethod


class ICredentialProvider(ABC):
    """Port supplying one API key per telemetry request."""

    @abstractmethod
    def api_key(self) -> str:
        raise NotImplementedError
