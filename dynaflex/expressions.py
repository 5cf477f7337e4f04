"""Key condition and update expression synthesis.

These helpers write DynamoDB expression syntax for the common cases so that
callers do not have to: a partition key equality with at most one sort key
comparison, and a ``SET`` update over a mapping of changed attributes. All
attribute names go through ``#`` placeholders and all values through ``:``
placeholders, which keeps reserved words such as ``name`` or ``status`` safe.
"""

from enum import Enum
from typing import Any, NamedTuple

from dynaflex.exceptions import EmptyUpdateError, InvalidConditionError, UnsupportedConditionError
from dynaflex.keys import Item, KeyValue

PARTITION_KEY_NAME = "#pk"
PARTITION_KEY_VALUE = ":pkval"
SORT_KEY_NAME = "#sk"
SORT_KEY_VALUE = ":skval"
SORT_KEY_UPPER_VALUE = ":skval2"


class SortKeyOperator(str, Enum):
    """Comparison operators allowed on a sort key in a key condition."""

    EQ = "="
    LT = "<"
    LTE = "<="
    GT = ">"
    GTE = ">="
    BETWEEN = "BETWEEN"
    BEGINS_WITH = "begins_with"

    @classmethod
    def parse(cls, text: "str | SortKeyOperator") -> "SortKeyOperator":
        """Resolve operator text such as ``">="`` or ``"between"``.

        Raises:
            UnsupportedConditionError: If the text names no known operator.

        """
        if isinstance(text, SortKeyOperator):
            return text
        normalized = text.strip().upper()
        for operator in cls:
            if operator.value.upper() == normalized:
                return operator
        raise UnsupportedConditionError(text)


class SortKeyCondition(NamedTuple):
    """A single comparison against the sort key.

    Attributes:
        attribute: The sort key attribute name.
        operator: A SortKeyOperator or its text form.
        value: The compared value (the lower bound for BETWEEN).
        upper: The upper bound; required for BETWEEN, forbidden otherwise.

    """

    attribute: str
    operator: SortKeyOperator | str
    value: KeyValue
    upper: KeyValue | None = None


class KeyCondition(NamedTuple):
    """A key condition expression with its placeholder maps."""

    expression: str
    names: dict[str, str]
    values: dict[str, Any]


class UpdateExpression(NamedTuple):
    """A ``SET`` update expression with its placeholder maps."""

    expression: str
    names: dict[str, str]
    values: dict[str, Any]


def _sort_key_clause(condition: SortKeyCondition) -> tuple[str, dict[str, Any]]:
    operator = SortKeyOperator.parse(condition.operator)

    if operator is SortKeyOperator.BETWEEN:
        if condition.upper is None:
            raise InvalidConditionError("BETWEEN requires both a lower and an upper value")
        clause = f"{SORT_KEY_NAME} BETWEEN {SORT_KEY_VALUE} AND {SORT_KEY_UPPER_VALUE}"
        return clause, {SORT_KEY_VALUE: condition.value, SORT_KEY_UPPER_VALUE: condition.upper}

    if condition.upper is not None:
        raise InvalidConditionError(f"{operator.value} takes a single value")

    if operator is SortKeyOperator.BEGINS_WITH:
        clause = f"begins_with({SORT_KEY_NAME}, {SORT_KEY_VALUE})"
    else:
        clause = f"{SORT_KEY_NAME} {operator.value} {SORT_KEY_VALUE}"
    return clause, {SORT_KEY_VALUE: condition.value}


def build_key_condition(
    partition_key: tuple[str, KeyValue],
    sort_key_condition: SortKeyCondition | None = None,
) -> KeyCondition:
    """Synthesize a key condition for a partition key and optional sort key test.

    Args:
        partition_key: The partition key attribute name and the value it must
            equal.
        sort_key_condition: Optional comparison against the sort key.

    Returns:
        The expression plus its name and value placeholder maps.

    Raises:
        UnsupportedConditionError: If the sort key operator is unknown.
        InvalidConditionError: If the number of sort key values does not match
            the operator.

    Example:
        build_key_condition(
            ("category", "Electronics"),
            SortKeyCondition("product_name", "BETWEEN", "A", "M"),
        )
        Returns KeyCondition(
            "#pk = :pkval AND #sk BETWEEN :skval AND :skval2",
            {"#pk": "category", "#sk": "product_name"},
            {":pkval": "Electronics", ":skval": "A", ":skval2": "M"},
        )

    """
    partition_key_name, partition_key_value = partition_key
    expression = f"{PARTITION_KEY_NAME} = {PARTITION_KEY_VALUE}"
    names = {PARTITION_KEY_NAME: partition_key_name}
    values: dict[str, Any] = {PARTITION_KEY_VALUE: partition_key_value}

    if sort_key_condition is not None:
        clause, sort_values = _sort_key_clause(sort_key_condition)
        expression = f"{expression} AND {clause}"
        names[SORT_KEY_NAME] = sort_key_condition.attribute
        values |= sort_values

    return KeyCondition(expression=expression, names=names, values=values)


def merge_placeholders(
    key_condition: KeyCondition,
    names: dict[str, str] | None = None,
    values: dict[str, Any] | None = None,
) -> KeyCondition:
    """Add caller supplied placeholders (e.g. for a filter) to a key condition.

    Raises:
        InvalidConditionError: If a caller placeholder reuses one already bound
            by the key condition.

    """
    names = names or {}
    values = values or {}
    collisions = sorted(
        (key_condition.names.keys() & names.keys()) | (key_condition.values.keys() & values.keys())
    )
    if collisions:
        raise InvalidConditionError(
            f"Placeholders reserved by the key condition: {', '.join(collisions)}"
        )
    return KeyCondition(
        expression=key_condition.expression,
        names={**key_condition.names, **names},
        values={**key_condition.values, **values},
    )


def build_update_expression(updates: Item) -> UpdateExpression:
    """Build a ``SET`` update expression for the changed attributes.

    Raises:
        EmptyUpdateError: If ``updates`` is empty.

    Example:
        build_update_expression({"price": Decimal("649.99")})
        Returns UpdateExpression(
            "SET #attr0 = :val0", {"#attr0": "price"}, {":val0": Decimal("649.99")}
        )

    """
    if not updates:
        raise EmptyUpdateError()

    assignments: list[str] = []
    names: dict[str, str] = {}
    values: dict[str, Any] = {}

    for index, (attribute, value) in enumerate(updates.items()):
        name_placeholder = f"#attr{index}"
        value_placeholder = f":val{index}"
        assignments.append(f"{name_placeholder} = {value_placeholder}")
        names[name_placeholder] = attribute
        values[value_placeholder] = value

    return UpdateExpression(
        expression=f"SET {', '.join(assignments)}",
        names=names,
        values=values,
    )


__all__ = [
    "KeyCondition",
    "SortKeyCondition",
    "SortKeyOperator",
    "UpdateExpression",
    "build_key_condition",
    "build_update_expression",
    "merge_placeholders",
]
