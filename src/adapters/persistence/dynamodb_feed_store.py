from __future__ import annotations

import os
from dataclasses import dataclass

from botocore.exceptions import BotoCoreError, ClientError

from src.adapters.aws import dynamodb_client
from src.app.ports.output import IFeedStore
from src.domain.exceptions import FeedStoreError


@dataclass(slots=True)
class DynamoDbFeedStore(IFeedStore):
    """Key-value feed store on a DynamoDB table (hash key `key`, binary `value`).

    Env vars:
      - FEED_STORE_TABLE (default: gtfsrt-feeds)
      - ENDPOINT_URL (preferred for LocalStack)
      - AWS_REGION
    """

    table_name: str | None = None

    def _table(self) -> str:
        return self.table_name or os.getenv("FEED_STORE_TABLE") or "gtfsrt-feeds"

    def set(self, key: str, value: bytes | str) -> None:
        data = value.encode("utf-8") if isinstance(value, str) else bytes(value)
        ddb = dynamodb_client()
        try:
            ddb.put_item(
                TableName=self._table(),
                Item={"key": {"S": key}, "value": {"B": data}},
            )
        except (BotoCoreError, ClientError) as exc:
            raise FeedStoreError(f"DynamoDB put failed for {key}: {exc}") from exc

    def get(self, key: str) -> bytes | None:
        ddb = dynamodb_client()
        try:
            resp = ddb.get_item(
                TableName=self._table(),
                Key={"key": {"S": key}},
                ConsistentRead=True,
            )
        except (BotoCoreError, ClientError) as exc:
            raise FeedStoreError(f"DynamoDB get failed for {key}: {exc}") from exc

        item = resp.get("Item")
        if not item or "B" not in item.get("value", {}):
            return None
        return bytes(item["value"]["B"])
