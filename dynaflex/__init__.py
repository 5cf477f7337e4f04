"""dynaflex: resilient, paginated DynamoDB requests on top of aioboto3."""

from dynaflex.base import Page, QueryParams, ScanParams, build_query_kwargs, build_scan_kwargs
from dynaflex.client import DynamoDb
from dynaflex.exceptions import (
    AuthenticationError,
    DynaflexError,
    EmptyUpdateError,
    InvalidConditionError,
    InvalidFieldValueError,
    InvalidRetryPolicyError,
    MissingSchemaError,
    RequestValidationError,
    UnsupportedConditionError,
    UnsupportedValueTypeError,
)
from dynaflex.expressions import (
    KeyCondition,
    SortKeyCondition,
    SortKeyOperator,
    build_key_condition,
    build_update_expression,
)
from dynaflex.keys import Item, LastEvaluatedKey, get_number, get_string, set_number, set_string
from dynaflex.observability import EventSink, StructlogSink, null_sink
from dynaflex.pagination import collect_items, iter_pages
from dynaflex.retry import RetryPolicy, fibonacci_delays, retry_with_backoff
from dynaflex.schema import FieldType, TableDescriptor

__all__ = [
    "AuthenticationError",
    "DynaflexError",
    "DynamoDb",
    "EmptyUpdateError",
    "EventSink",
    "FieldType",
    "InvalidConditionError",
    "InvalidFieldValueError",
    "InvalidRetryPolicyError",
    "Item",
    "KeyCondition",
    "LastEvaluatedKey",
    "MissingSchemaError",
    "Page",
    "QueryParams",
    "RequestValidationError",
    "RetryPolicy",
    "ScanParams",
    "SortKeyCondition",
    "SortKeyOperator",
    "StructlogSink",
    "TableDescriptor",
    "UnsupportedConditionError",
    "UnsupportedValueTypeError",
    "build_key_condition",
    "build_query_kwargs",
    "build_scan_kwargs",
    "build_update_expression",
    "collect_items",
    "fibonacci_delays",
    "get_number",
    "get_string",
    "iter_pages",
    "null_sink",
    "retry_with_backoff",
    "set_number",
    "set_string",
]
