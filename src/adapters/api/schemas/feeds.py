from __future__ import annotations

from pydantic import BaseModel


class FeedStatusSchema(BaseModel):
    feed_id: str
    vehicles_updated_at_ms: int | None = None
    trips_updated_at_ms: int | None = None
    heartbeat_at_ms: int | None = None
