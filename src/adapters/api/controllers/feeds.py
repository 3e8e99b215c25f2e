from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Response

from src.adapters.api.dependencies import get_feed_config, get_feed_store
from src.adapters.api.schemas.feeds import FeedStatusSchema
from src.app.config import FeedConfig
from src.app.ports.output import IFeedStore
from src.app.services.feed_emitter import feed_exists_key, feed_key, feed_time_key
from src.domain.models.feed import FeedKind

router = APIRouter(prefix="/gtfs-rt", tags=["gtfs-rt"])

PROTOBUF_MEDIA_TYPE = "application/x-protobuf"


def _as_ms(raw: bytes | None) -> int | None:
    if raw is None:
        return None
    try:
        return int(raw.decode("utf-8"))
    except (UnicodeDecodeError, ValueError):
        return None


@router.get("/status", response_model=FeedStatusSchema)
def feed_status(
    config: FeedConfig = Depends(get_feed_config),
    store: IFeedStore = Depends(get_feed_store),
) -> FeedStatusSchema:
    return FeedStatusSchema(
        feed_id=config.feed_id,
        vehicles_updated_at_ms=_as_ms(
            store.get(feed_time_key(config.feed_id, FeedKind.VEHICLES))
        ),
        trips_updated_at_ms=_as_ms(
            store.get(feed_time_key(config.feed_id, FeedKind.TRIPS))
        ),
        heartbeat_at_ms=_as_ms(store.get(feed_exists_key(config.feed_id))),
    )


@router.get("/{kind}")
def get_feed(
    kind: FeedKind,
    config: FeedConfig = Depends(get_feed_config),
    store: IFeedStore = Depends(get_feed_store),
) -> Response:
    content = store.get(feed_key(config.feed_id, kind))
    if content is None:
        raise HTTPException(status_code=404, detail=f"No {kind.value} feed stored yet")
    return Response(content=content, media_type=PROTOBUF_MEDIA_TYPE)
