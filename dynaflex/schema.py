"""Table descriptors and declared field types.

A TableDescriptor names a table, its key attributes and, optionally, the
declared type of each field. It is only used to shape requests (key schema,
attribute definitions, prompts for field values) and is never persisted.

Field types are a tagged variant: every declared field carries a FieldType
tag, and converting raw text into an attribute value dispatches on that tag.
"""

from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict, Field

from dynaflex.exceptions import (
    InvalidFieldValueError,
    MissingSchemaError,
    UnsupportedValueTypeError,
)
from dynaflex.keys import AttributeValue, DynamoDBKey, Item

if TYPE_CHECKING:
    from types_aiobotocore_dynamodb.type_defs import (
        AttributeDefinitionTypeDef,
        KeySchemaElementTypeDef,
    )
else:
    AttributeDefinitionTypeDef = Any
    KeySchemaElementTypeDef = Any


class FieldType(str, Enum):
    """Declared type of a table field, tagged with its DynamoDB type code."""

    STRING = "S"
    NUMBER = "N"


def parse_field_value(
    field_type: FieldType, raw: str, *, field: str | None = None
) -> AttributeValue:
    """Convert raw text into an attribute value of the declared type.

    Raises:
        InvalidFieldValueError: If the text is not a valid number for a
            NUMBER field.

    """
    match field_type:
        case FieldType.STRING:
            return raw
        case FieldType.NUMBER:
            try:
                number = Decimal(raw.strip())
            except InvalidOperation:
                raise InvalidFieldValueError(value=raw, field=field) from None
            if not number.is_finite():
                raise InvalidFieldValueError(value=raw, field=field)
            return number


def parse_attribute_value(type_tag: str, raw: str) -> AttributeValue:
    """Convert raw text tagged with a DynamoDB type code ("S" or "N").

    Raises:
        UnsupportedValueTypeError: If the tag is not a supported type code.
        InvalidFieldValueError: If the tag is "N" and the text is not a number.

    """
    try:
        field_type = FieldType(type_tag.strip().upper())
    except ValueError:
        raise UnsupportedValueTypeError(type_tag) from None
    return parse_field_value(field_type, raw)


class TableDescriptor(BaseModel):
    """Immutable description of a DynamoDB table.

    Attributes:
        name: The table name.
        partition_key: Name of the partition (HASH) key attribute.
        sort_key: Name of the sort (RANGE) key attribute, if any.
        field_types: Declared type of each known field, if a schema is set.

    Example:
        products = TableDescriptor(
            name="products",
            partition_key="category",
            sort_key="product_name",
            field_types={
                "category": FieldType.STRING,
                "product_name": FieldType.STRING,
                "price": FieldType.NUMBER,
            },
        )

    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1)
    partition_key: str = Field(min_length=1)
    sort_key: str | None = None
    field_types: dict[str, FieldType] | None = None

    def key_attributes(self) -> tuple[str, ...]:
        if self.sort_key is None:
            return (self.partition_key,)
        return (self.partition_key, self.sort_key)

    def require_field_types(self) -> dict[str, FieldType]:
        """Return the declared field types.

        Raises:
            MissingSchemaError: If the descriptor has no field types.

        """
        if self.field_types is None:
            raise MissingSchemaError(table_name=self.name)
        return self.field_types

    def updatable_fields(self) -> dict[str, FieldType]:
        """Declared fields that are not part of the primary key."""
        keys = self.key_attributes()
        return {
            name: field_type
            for name, field_type in self.require_field_types().items()
            if name not in keys
        }

    def key_of(self, item: Item) -> DynamoDBKey:
        """Extract the primary key attributes from an item."""
        return {name: item[name] for name in self.key_attributes()}

    def key_schema(self) -> list[KeySchemaElementTypeDef]:
        key_schema: list[KeySchemaElementTypeDef] = [
            {"AttributeName": self.partition_key, "KeyType": "HASH"},
        ]
        if self.sort_key is not None:
            key_schema.append({"AttributeName": self.sort_key, "KeyType": "RANGE"})
        return key_schema

    def attribute_definitions(self) -> list[AttributeDefinitionTypeDef]:
        """Attribute definitions for the key attributes.

        Key types come from the declared field types and default to string.
        """
        field_types = self.field_types or {}
        return [
            {
                "AttributeName": name,
                "AttributeType": field_types.get(name, FieldType.STRING).value,
            }
            for name in self.key_attributes()
        ]


__all__ = [
    "FieldType",
    "TableDescriptor",
    "parse_attribute_value",
    "parse_field_value",
]
