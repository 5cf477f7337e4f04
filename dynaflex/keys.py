"""Type aliases and helpers for DynamoDB items, keys and cursors.

Type aliases:
    AttributeValue: The attribute values this toolkit reads and writes.
        Strings map to DynamoDB ``S`` and Decimals to ``N``; the aioboto3
        table resource marshals both directly.

    Item: A mapping from attribute name to value. Items are treated as
        immutable: the ``set_*`` helpers return a new mapping.

    KeyValue: The types allowed as partition key or sort key values.

    DynamoDBKey: A mapping from key attribute name to key value, the format
        required by get_item, update_item and delete_item.

    LastEvaluatedKey: The pagination cursor returned by query() and scan().
        Pass it back unchanged as the start key of the next page.
"""

from decimal import Decimal
from typing import Any, TypeAlias

from typing_extensions import TypeAliasType

AttributeValue: TypeAlias = str | Decimal
Item: TypeAlias = dict[str, AttributeValue]
KeyValue: TypeAlias = str | bytes | bytearray | int | Decimal
DynamoDBKey: TypeAlias = dict[str, KeyValue]
LastEvaluatedKey = TypeAliasType("LastEvaluatedKey", dict[str, Any])


def to_decimal(value: int | float | Decimal) -> Decimal:
    """Convert a number to the Decimal form DynamoDB expects.

    Floats go through their shortest string form so that ``599.99`` is stored
    as ``Decimal("599.99")`` rather than its binary expansion.
    """
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def set_attribute(item: Item, name: str, value: AttributeValue) -> Item:
    """Return a copy of ``item`` with ``name`` set to ``value``."""
    return {**item, name: value}


def set_string(item: Item, name: str, value: str) -> Item:
    return set_attribute(item, name, value)


def set_number(item: Item, name: str, value: int | float | Decimal) -> Item:
    return set_attribute(item, name, to_decimal(value))


def get_string(item: Item, name: str) -> str | None:
    value = item.get(name)
    return value if isinstance(value, str) else None


def get_number(item: Item, name: str) -> Decimal | None:
    """Read a numeric attribute as an exact Decimal."""
    value = item.get(name)
    if isinstance(value, (Decimal, int, float)) and not isinstance(value, bool):
        return to_decimal(value)
    return None


__all__ = [
    "AttributeValue",
    "DynamoDBKey",
    "Item",
    "KeyValue",
    "LastEvaluatedKey",
    "get_number",
    "get_string",
    "set_attribute",
    "set_number",
    "set_string",
    "to_decimal",
]
