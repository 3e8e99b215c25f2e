from __future__ import annotations

from abc import ABC, abstractmethod

from src.domain.models.feed import FeedMessage


class IFeedEncoder(ABC):
    """Port for serializing a feed message to its binary wire form."""

    @abstractmethod
    def encode(self, message: FeedMessage) -> bytes:
        raise NotImplementedError
