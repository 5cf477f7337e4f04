"""Async DynamoDB client for table lifecycle, item CRUD, queries and scans.

DynamoDb is a thin pass-through over an aioboto3 DynamoDB service resource:
each operation builds one request, sends it, and returns the result in the
toolkit's types (Item, Page). Requests optionally go through the retry
executor when a RetryPolicy is given.

Example:
    import aioboto3
    from dynaflex import DynamoDb, RetryPolicy

    async def main():
        session = aioboto3.Session()
        async with session.resource("dynamodb") as resource:
            ddb = DynamoDb(resource, retry_policy=RetryPolicy(0.5, 3))
            await ddb.put_item("products", {"category": "Books", "product_name": "Dune"})
            item = await ddb.get_item("products", {"category": "Books", "product_name": "Dune"})

"""

from collections.abc import AsyncIterator, Awaitable, Callable
from typing import TYPE_CHECKING, Any, TypeVar

from botocore.exceptions import BotoCoreError, ClientError

from dynaflex.base import (
    Page,
    QueryParams,
    ScanParams,
    build_query_kwargs,
    build_scan_kwargs,
    page_from_response,
)
from dynaflex.exceptions import AuthenticationError
from dynaflex.expressions import (
    SortKeyCondition,
    build_key_condition,
    build_update_expression,
    merge_placeholders,
)
from dynaflex.keys import DynamoDBKey, Item, KeyValue, LastEvaluatedKey
from dynaflex.observability import EventSink, StructlogSink
from dynaflex.pagination import collect_items, iter_pages
from dynaflex.retry import RetryPolicy, retry_with_backoff
from dynaflex.schema import TableDescriptor

if TYPE_CHECKING:
    from types_aiobotocore_dynamodb.service_resource import (
        DynamoDBServiceResource,
        Table as AsyncTable,
    )
else:
    DynamoDBServiceResource = Any
    AsyncTable = Any

T = TypeVar("T")


class DynamoDb:
    """High-level async wrapper around an aioboto3 DynamoDB resource.

    Args:
        resource: An open aioboto3 DynamoDB service resource.
        sink: Receives one event per completed write or lifecycle change, and
            the retry events. Defaults to a structlog sink.
        retry_policy: When set, every request is retried with Fibonacci
            backoff. Local validation errors are raised before any request
            and are never retried.

    """

    def __init__(
        self,
        resource: DynamoDBServiceResource,
        *,
        sink: EventSink | None = None,
        retry_policy: RetryPolicy | None = None,
    ) -> None:
        self._resource = resource
        self._sink: EventSink = sink if sink is not None else StructlogSink()
        self._retry_policy = retry_policy

    @property
    def _client(self) -> Any:
        return self._resource.meta.client

    async def _table(self, table_name: str) -> AsyncTable:
        return await self._resource.Table(table_name)

    async def _send(self, request: Callable[[], Awaitable[T]]) -> T:
        if self._retry_policy is None:
            return await request()
        return await retry_with_backoff(
            request,
            self._retry_policy.initial_delay,
            self._retry_policy.max_retries,
            sink=self._sink,
        )

    # --- Table operations ---

    async def check_auth(self) -> None:
        """Verify the credentials by listing tables.

        Raises:
            AuthenticationError: If the request is rejected or cannot be sent
                (e.g. no credentials, unreachable endpoint).

        """
        try:
            await self._send(lambda: self._client.list_tables(Limit=1))
        except (ClientError, BotoCoreError) as e:
            self._sink("authentication_failed", error=str(e))
            raise AuthenticationError() from e
        self._sink("authenticated")

    async def table_exists(self, table_name: str) -> bool:
        request: dict[str, Any] = {}
        while True:
            response = await self._send(lambda: self._client.list_tables(**request))
            if table_name in response.get("TableNames", []):
                return True
            last_table_name = response.get("LastEvaluatedTableName")
            if last_table_name is None:
                return False
            request = {"ExclusiveStartTableName": last_table_name}

    async def create_table_if_not_exists(self, table: TableDescriptor) -> dict[str, Any] | None:
        """Create the table unless it already exists.

        A table created concurrently by another caller between the existence
        check and the create request counts as already existing.

        Returns:
            The create_table response if a new table was created, or None if
            the table already exists.

        """
        if await self.table_exists(table.name):
            self._sink("table_exists", table_name=table.name)
            return None

        async def create() -> dict[str, Any] | None:
            try:
                response: dict[str, Any] = await self._client.create_table(
                    TableName=table.name,
                    KeySchema=table.key_schema(),
                    AttributeDefinitions=table.attribute_definitions(),
                    BillingMode="PAY_PER_REQUEST",
                )
            except ClientError as e:
                if e.response.get("Error", {}).get("Code") == "ResourceInUseException":
                    return None
                raise
            return response

        response = await self._send(create)
        if response is None:
            self._sink("table_exists", table_name=table.name)
            return None

        waiter = self._client.get_waiter("table_exists")
        await waiter.wait(TableName=table.name)
        self._sink("table_created", table_name=table.name)
        return response

    async def describe_table(self, table_name: str) -> dict[str, Any]:
        response: dict[str, Any] = await self._send(
            lambda: self._client.describe_table(TableName=table_name)
        )
        return response

    async def delete_table(self, table_name: str) -> None:
        await self._send(lambda: self._client.delete_table(TableName=table_name))
        self._sink("table_deleted", table_name=table_name)

    # --- Item operations ---

    async def put_item(self, table_name: str, item: Item) -> None:
        table = await self._table(table_name)
        await self._send(lambda: table.put_item(Item=item))
        self._sink("item_put", table_name=table_name)

    async def get_item(self, table_name: str, key: DynamoDBKey) -> Item | None:
        """Get an item by its full primary key.

        Returns:
            The item if found, None otherwise.

        """
        table = await self._table(table_name)
        response = await self._send(lambda: table.get_item(Key=key))
        item: Item | None = response.get("Item")
        return item

    async def update_item(self, table_name: str, key: DynamoDBKey, updates: Item) -> None:
        """Set the given attributes on an existing item.

        Raises:
            EmptyUpdateError: If ``updates`` is empty.

        """
        update = build_update_expression(updates)
        table = await self._table(table_name)
        await self._send(
            lambda: table.update_item(
                Key=key,
                UpdateExpression=update.expression,
                ExpressionAttributeNames=update.names,
                ExpressionAttributeValues=update.values,
            )
        )
        self._sink("item_updated", table_name=table_name)

    async def delete_item(self, table_name: str, key: DynamoDBKey) -> None:
        table = await self._table(table_name)
        await self._send(lambda: table.delete_item(Key=key))
        self._sink("item_deleted", table_name=table_name)

    # --- Query operations ---

    async def query_flexible(self, params: QueryParams) -> Page:
        """Run one page of a query with full control over every parameter.

        Example:
            page = await ddb.query_flexible(
                QueryParams(
                    table_name="products",
                    key_condition_expression="#pk = :pk",
                    expression_attribute_names={"#pk": "category"},
                    expression_attribute_values={":pk": "Books"},
                    limit=10,
                )
            )
            if page.has_more:
                next_page = await ddb.query_flexible(
                    params.with_cursor(page.last_evaluated_key)
                )

        """
        query_kwargs = build_query_kwargs(params)
        table = await self._table(params.table_name)
        response = await self._send(lambda: table.query(**query_kwargs))
        return page_from_response(response)

    def query_pages(self, params: QueryParams) -> AsyncIterator[Page]:
        """Lazily yield every page of a query, starting at its cursor."""

        async def fetch(cursor: LastEvaluatedKey | None) -> Page:
            return await self.query_flexible(params.with_cursor(cursor))

        return iter_pages(fetch, params.exclusive_start_key)

    async def query_simple(
        self,
        table_name: str,
        partition_key: tuple[str, KeyValue],
        sort_key_condition: SortKeyCondition | None = None,
        *,
        filter_expression: str | None = None,
        limit: int | None = None,
        expression_attribute_names: dict[str, str] | None = None,
        expression_attribute_values: dict[str, Any] | None = None,
        exclusive_start_key: LastEvaluatedKey | None = None,
    ) -> Page:
        """Run one page of a query built from a partition key and sort key test.

        Raises:
            UnsupportedConditionError: If the sort key operator is unknown. No
                request is issued.

        """
        key_condition = merge_placeholders(
            build_key_condition(partition_key, sort_key_condition),
            expression_attribute_names,
            expression_attribute_values,
        )
        params = QueryParams(
            table_name=table_name,
            key_condition_expression=key_condition.expression,
            expression_attribute_names=key_condition.names,
            expression_attribute_values=key_condition.values,
            filter_expression=filter_expression,
            limit=limit,
            exclusive_start_key=exclusive_start_key,
        )
        return await self.query_flexible(params)

    async def query_items(
        self,
        table_name: str,
        partition_key: tuple[str, KeyValue],
        sort_key_condition: SortKeyCondition | None = None,
    ) -> list[Item]:
        """Query every item of a partition, optionally narrowed on the sort key."""
        key_condition = build_key_condition(partition_key, sort_key_condition)
        return await self.query(
            table_name,
            key_condition.expression,
            key_condition.names,
            key_condition.values,
        )

    async def query(
        self,
        table_name: str,
        key_condition_expression: str,
        expression_attribute_names: dict[str, str],
        expression_attribute_values: dict[str, Any],
    ) -> list[Item]:
        """Query every item matching a raw key condition expression."""
        params = QueryParams(
            table_name=table_name,
            key_condition_expression=key_condition_expression,
            expression_attribute_names=expression_attribute_names,
            expression_attribute_values=expression_attribute_values,
        )
        return await collect_items(self.query_pages(params))

    # --- Scan operations ---

    async def scan_paginated(self, params: ScanParams) -> Page:
        """Scan one page of the table.

        Pass ``page.last_evaluated_key`` back through ``params.with_cursor`` to
        read the next page; a None cursor means the scan is complete.
        """
        scan_kwargs = build_scan_kwargs(params)
        table = await self._table(params.table_name)
        response = await self._send(lambda: table.scan(**scan_kwargs))
        return page_from_response(response)

    def scan_pages(self, params: ScanParams) -> AsyncIterator[Page]:
        """Lazily yield every page of a scan, starting at its cursor."""

        async def fetch(cursor: LastEvaluatedKey | None) -> Page:
            return await self.scan_paginated(params.with_cursor(cursor))

        return iter_pages(fetch, params.exclusive_start_key)

    async def scan(
        self,
        table_name: str,
        filter_expression: str | None = None,
        expression_attribute_names: dict[str, str] | None = None,
        expression_attribute_values: dict[str, Any] | None = None,
    ) -> list[Item]:
        """Scan the whole table, keeping only items matching the filter."""
        params = ScanParams(
            table_name=table_name,
            filter_expression=filter_expression,
            expression_attribute_names=expression_attribute_names or {},
            expression_attribute_values=expression_attribute_values or {},
        )
        return await collect_items(self.scan_pages(params))

    async def scan_table(self, table_name: str) -> list[Item]:
        """Read every item of the table."""
        return await self.scan(table_name)


__all__ = [
    "DynamoDb",
]
