"""Parameter models and request kwargs builders for query and scan.

This module contains the structural part of every read: it takes a parameter
model and assembles the keyword arguments for the aioboto3 ``Table.query`` or
``Table.scan`` call. It does not check expression syntax; a malformed
expression is reported by DynamoDB itself.
"""

from typing import Any, NamedTuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

from dynaflex.keys import Item, LastEvaluatedKey


class Page(NamedTuple):
    """One page of a query or scan.

    Attributes:
        items: The items returned by this page.
        last_evaluated_key: Cursor for the next page, or None once the result
            set is exhausted.

    """

    items: list[Item]
    last_evaluated_key: LastEvaluatedKey | None

    @property
    def has_more(self) -> bool:
        return self.last_evaluated_key is not None


class _ReadParams(BaseModel):
    """Parameters shared by query and scan."""

    model_config = ConfigDict(frozen=True)

    table_name: str = Field(min_length=1)
    filter_expression: str | None = None
    projection_expression: str | None = None
    expression_attribute_names: dict[str, str] = Field(default_factory=dict)
    expression_attribute_values: dict[str, Any] = Field(default_factory=dict)
    limit: int | None = None
    index_name: str | None = None
    exclusive_start_key: LastEvaluatedKey | None = None

    @field_validator("filter_expression", "projection_expression", "index_name")
    @classmethod
    def _blank_is_absent(cls, value: str | None) -> str | None:
        if value is None or not value.strip():
            return None
        return value

    @field_validator("exclusive_start_key")
    @classmethod
    def _empty_cursor_is_absent(cls, value: LastEvaluatedKey | None) -> LastEvaluatedKey | None:
        return value or None


class QueryParams(_ReadParams):
    """Full parameter set of a flexible query.

    Attributes:
        table_name: The table to query.
        key_condition_expression: Key condition using ``#name``/``:value``
            placeholders.
        filter_expression: Optional filter applied after the key condition.
        projection_expression: Optional comma separated attributes to return.
        expression_attribute_names: Placeholder to attribute name map.
        expression_attribute_values: Placeholder to value map.
        limit: Maximum items evaluated per page; values <= 0 mean no limit.
        scan_index_forward: False for descending sort key order.
        index_name: Optional secondary index to query.
        exclusive_start_key: Cursor returned by the previous page.

    """

    key_condition_expression: str = Field(min_length=1)
    scan_index_forward: bool | None = None

    def with_cursor(self, cursor: LastEvaluatedKey | None) -> "QueryParams":
        return self.model_copy(update={"exclusive_start_key": cursor or None})


class ScanParams(_ReadParams):
    """Parameters of a (possibly filtered) paginated scan."""

    def with_cursor(self, cursor: LastEvaluatedKey | None) -> "ScanParams":
        return self.model_copy(update={"exclusive_start_key": cursor or None})


def _build_read_kwargs(params: _ReadParams) -> dict[str, Any]:
    kwargs: dict[str, Any] = {}

    if params.filter_expression is not None:
        kwargs["FilterExpression"] = params.filter_expression

    if params.projection_expression is not None:
        kwargs["ProjectionExpression"] = params.projection_expression

    if params.expression_attribute_names:
        kwargs["ExpressionAttributeNames"] = dict(params.expression_attribute_names)

    if params.expression_attribute_values:
        kwargs["ExpressionAttributeValues"] = dict(params.expression_attribute_values)

    if params.limit is not None and params.limit > 0:
        kwargs["Limit"] = params.limit

    if params.index_name is not None:
        kwargs["IndexName"] = params.index_name

    if params.exclusive_start_key is not None:
        kwargs["ExclusiveStartKey"] = params.exclusive_start_key

    return kwargs


def build_query_kwargs(params: QueryParams) -> dict[str, Any]:
    """Build kwargs dictionary for ``Table.query``.

    Optional parameters are attached only when set, and placeholder maps only
    when non-empty, since DynamoDB rejects empty maps.
    """
    query_kwargs: dict[str, Any] = {
        "KeyConditionExpression": params.key_condition_expression,
    }
    query_kwargs |= _build_read_kwargs(params)

    if params.scan_index_forward is not None:
        query_kwargs["ScanIndexForward"] = params.scan_index_forward

    return query_kwargs


def build_scan_kwargs(params: ScanParams) -> dict[str, Any]:
    """Build kwargs dictionary for ``Table.scan``."""
    return _build_read_kwargs(params)


def page_from_response(response: dict[str, Any]) -> Page:
    """Normalise a query or scan response into a Page.

    A missing or empty ``LastEvaluatedKey`` both mean the result set is
    exhausted.
    """
    return Page(
        items=list(response.get("Items", [])),
        last_evaluated_key=response.get("LastEvaluatedKey") or None,
    )


__all__ = [
    "Page",
    "QueryParams",
    "ScanParams",
    "build_query_kwargs",
    "build_scan_kwargs",
    "page_from_response",
]
