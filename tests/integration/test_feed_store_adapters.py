from __future__ import annotations

import os
from uuid import uuid4

import pytest

from src.adapters.aws import dynamodb_client
from src.adapters.gtfs_rt.protobuf_feed_encoder import ProtobufFeedEncoder
from src.adapters.persistence.dynamodb_feed_store import DynamoDbFeedStore
from src.adapters.persistence.redis_feed_store import RedisFeedStore
from src.app.services.feed_emitter import FeedEmitter


def _ensure_table(table: str) -> None:
    ddb = dynamodb_client()
    existing = ddb.list_tables().get("TableNames", [])
    if table in existing:
        return
    ddb.create_table(
        TableName=table,
        BillingMode="PAY_PER_REQUEST",
        AttributeDefinitions=[{"AttributeName": "key", "AttributeType": "S"}],
        KeySchema=[{"AttributeName": "key", "KeyType": "HASH"}],
    )
    ddb.get_waiter("table_exists").wait(TableName=table)


@pytest.mark.integration
def test_dynamodb_feed_store_put_and_get(require_localstack: str) -> None:
    table = "gtfsrt-feeds-test"
    os.environ["FEED_STORE_TABLE"] = table
    _ensure_table(table)

    store = DynamoDbFeedStore()
    key = f"gtfsrt|f-{uuid4()}~rt|vehicles"

    assert store.get(key) is None
    store.set(key, b"\x0a\x03\x32\x2e\x30")
    assert store.get(key) == b"\x0a\x03\x32\x2e\x30"

    store.set(key, "1767891600123")
    assert store.get(key) == b"1767891600123"


@pytest.mark.integration
def test_emitter_writes_full_key_set_to_redis(require_redis: str) -> None:
    store = RedisFeedStore(url=require_redis)
    feed_id = f"f-{uuid4()}~rt"

    emitter = FeedEmitter(feed_id=feed_id, encoder=ProtobufFeedEncoder(), store=store)
    emitted = emitter.emit([], [])

    assert store.get(f"gtfsrt|{feed_id}|vehicles") == emitted.vehicles
    assert store.get(f"gtfsrt|{feed_id}|trips") == emitted.trips
    assert store.get(f"gtfsrtexists|{feed_id}") == str(emitted.written_at_ms).encode()

    for template in (
        "gtfsrt|{}|vehicles",
        "gtfsrt|{}|trips",
        "gtfsrttime|{}|vehicles",
        "gtfsrttime|{}|trips",
        "gtfsrtexists|{}",
    ):
        store.client.delete(template.format(feed_id))
