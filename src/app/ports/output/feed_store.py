from __future__ import annotations

from abc import ABC, abstractmethod


class IFeedStore(ABC):
    """Port for the key-value store holding encoded feeds and freshness markers."""

    @abstractmethod
    def set(self, key: str, value: bytes | str) -> None:
        raise NotImplementedError

    @abstractmethod
    def get(self, key: str) -> bytes | None:
        raise NotImplementedError
