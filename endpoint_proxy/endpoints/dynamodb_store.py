"""DynamoDB-backed endpoint store."""

import asyncio

from endpoint_proxy.endpoints.models import EndpointConfig
from endpoint_proxy.endpoints.store import EndpointStore, ProxyIdConflict
from endpoint_proxy.security.secrets import KeyCipher

# Reservation items share the table; they carry no proxy_id so the GSI skips them
PROXY_ID_CLAIM_PREFIX = "proxy_id#"


class DynamoDBEndpointStore(EndpointStore):
    """Endpoint records in a DynamoDB table keyed on id, with a GSI on proxy_id.

    The GSI cannot enforce uniqueness, so create writes the record and a
    ``proxy_id#<proxy id>`` claim item in one transaction.
    """

    PROXY_ID_INDEX = "proxy_id_index"

    def __init__(self, table_name: str, region: str = "us-east-1", cipher: KeyCipher | None = None):
        super().__init__(cipher)
        self._table_name = table_name
        self._region = region
        self._table = None

    def _get_table(self):
        """Lazy-init boto3 Table resource."""
        if self._table is None:
            import boto3

            dynamodb = boto3.resource("dynamodb", region_name=self._region)
            self._table = dynamodb.Table(self._table_name)
        return self._table

    def _scan_all(self) -> list[dict]:
        table = self._get_table()
        resp = table.scan()
        items = resp.get("Items", [])
        while "LastEvaluatedKey" in resp:
            resp = table.scan(ExclusiveStartKey=resp["LastEvaluatedKey"])
            items.extend(resp.get("Items", []))
        return [item for item in items if not item["id"].startswith(PROXY_ID_CLAIM_PREFIX)]

    def _get_item(self, endpoint_id: str) -> dict | None:
        resp = self._get_table().get_item(Key={"id": endpoint_id})
        return resp.get("Item")

    def _query_by_proxy_id(self, proxy_id: str) -> dict | None:
        from boto3.dynamodb.conditions import Key

        resp = self._get_table().query(
            IndexName=self.PROXY_ID_INDEX,
            KeyConditionExpression=Key("proxy_id").eq(proxy_id),
            Limit=1,
        )
        items = resp.get("Items", [])
        return items[0] if items else None

    def _put_new(self, record: dict) -> None:
        from boto3.dynamodb.types import TypeSerializer
        from botocore.exceptions import ClientError

        serializer = TypeSerializer()
        item = {key: serializer.serialize(value) for key, value in record.items()}
        claim = {"id": {"S": PROXY_ID_CLAIM_PREFIX + record["proxy_id"]}}
        try:
            self._get_table().meta.client.transact_write_items(TransactItems=[
                {"Put": {
                    "TableName": self._table_name,
                    "Item": item,
                    "ConditionExpression": "attribute_not_exists(#id)",
                    "ExpressionAttributeNames": {"#id": "id"},
                }},
                {"Put": {
                    "TableName": self._table_name,
                    "Item": claim,
                    "ConditionExpression": "attribute_not_exists(#id)",
                    "ExpressionAttributeNames": {"#id": "id"},
                }},
            ])
        except ClientError as e:
            if e.response["Error"]["Code"] != "TransactionCanceledException":
                raise
            reasons = [r.get("Code") for r in e.response.get("CancellationReasons", [])]
            if reasons[1:2] == ["ConditionalCheckFailed"]:
                raise ProxyIdConflict(record["proxy_id"]) from e
            raise ValueError(f"Endpoint {record['id']} already exists") from e

    def _update_item(self, endpoint_id: str, values: dict) -> dict | None:
        from botocore.exceptions import ClientError

        # name and status are reserved words, so every attribute goes through #placeholders
        names = {f"#{key}": key for key in values}
        names["#id"] = "id"
        expression = "SET " + ", ".join(f"#{key} = :{key}" for key in values)
        try:
            resp = self._get_table().update_item(
                Key={"id": endpoint_id},
                UpdateExpression=expression,
                ExpressionAttributeNames=names,
                ExpressionAttributeValues={f":{key}": value for key, value in values.items()},
                ConditionExpression="attribute_exists(#id)",
                ReturnValues="ALL_NEW",
            )
        except ClientError as e:
            if e.response["Error"]["Code"] == "ConditionalCheckFailedException":
                return None
            raise
        return resp["Attributes"]

    def _delete_item(self, endpoint_id: str) -> bool:
        table = self._get_table()
        resp = table.delete_item(Key={"id": endpoint_id}, ReturnValues="ALL_OLD")
        old = resp.get("Attributes")
        if not old:
            return False
        if old.get("proxy_id"):
            table.delete_item(Key={"id": PROXY_ID_CLAIM_PREFIX + old["proxy_id"]})
        return True

    async def list_all(self) -> list[EndpointConfig]:
        items = await asyncio.to_thread(self._scan_all)
        configs = [self._unseal(item) for item in items]
        return sorted(configs, key=lambda c: c.created_at, reverse=True)

    async def get(self, endpoint_id: str) -> EndpointConfig | None:
        item = await asyncio.to_thread(self._get_item, endpoint_id)
        return self._unseal(item) if item is not None else None

    async def get_by_proxy_id(self, proxy_id: str) -> EndpointConfig | None:
        item = await asyncio.to_thread(self._query_by_proxy_id, proxy_id)
        return self._unseal(item) if item is not None else None

    async def create(self, config: EndpointConfig) -> EndpointConfig:
        await asyncio.to_thread(self._put_new, self._seal(config))
        return config

    async def update(self, endpoint_id: str, changes: dict) -> EndpointConfig | None:
        self._check_fields(changes)
        if not changes:
            return await self.get(endpoint_id)
        item = await asyncio.to_thread(self._update_item, endpoint_id, self._encode_changes(changes))
        return self._unseal(item) if item is not None else None

    async def delete(self, endpoint_id: str) -> bool:
        return await asyncio.to_thread(self._delete_item, endpoint_id)
