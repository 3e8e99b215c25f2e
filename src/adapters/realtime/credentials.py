from __future__ import annotations

import os
import random
from dataclasses import dataclass, field

from src.app.ports.output import ICredentialProvider


@dataclass(slots=True)
class RandomKeyPoolCredentialProvider(ICredentialProvider):
    """Hands out a randomly chosen API key from a fixed pool on every call.

    Env vars:
      - TRANSLOC_API_KEYS: comma separated keys
    """

    keys: tuple[str, ...] = ()
    rng: random.Random = field(default_factory=random.Random, repr=False)

    def __post_init__(self) -> None:
        if not self.keys:
            raw = os.getenv("TRANSLOC_API_KEYS") or ""
            self.keys = tuple(k.strip() for k in raw.split(",") if k.strip())

    def api_key(self) -> str:
        if not self.keys:
            raise RuntimeError("Missing TRANSLOC_API_KEYS")
        return self.rng.choice(self.keys)
