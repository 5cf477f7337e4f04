"""dynaflex exceptions.

This module defines the exception hierarchy for the dynaflex toolkit.
All custom exceptions inherit from DynaflexError, allowing callers to catch
every toolkit-specific error with a single except clause.

Exception categories:
- DynaflexError: Base exception for all dynaflex errors
- RequestValidationError: A request was rejected locally, before being sent
- AuthenticationError: The credentials check against DynamoDB failed

Note: DynamoDB API errors (e.g. ValidationException for a malformed expression,
ProvisionedThroughputExceededException) are intentionally not wrapped and come
directly from botocore. Pydantic validation errors raised while building
parameter models bubble up as pydantic.ValidationError.
"""


class DynaflexError(Exception):
    """Base exception for all dynaflex errors.

    Example:
        try:
            await ddb.query_simple(...)
        except DynaflexError as e:
            pass

    """


class RequestValidationError(DynaflexError):
    """Base class for local precondition failures.

    These are raised before any request is issued and are never retried:
    retrying a request that cannot be built will not make it buildable.
    """


class UnsupportedConditionError(RequestValidationError):
    """Raised when a sort key condition uses an unknown operator.

    Attributes:
        operator: The operator text that could not be recognised.

    Example:
        SortKeyOperator.parse("~=")
        Raises UnsupportedConditionError: Unsupported condition: '~='

    """

    def __init__(self, operator: str) -> None:
        self.operator = operator
        super().__init__(f"Unsupported condition: {operator!r}")


class InvalidConditionError(RequestValidationError):
    """Raised when a sort key condition has the wrong number of values.

    BETWEEN needs both a lower and an upper bound; every other operator takes
    exactly one value.
    """


class UnsupportedValueTypeError(RequestValidationError):
    """Raised when an attribute value type tag is not supported.

    Only "S" (string) and "N" (number) are understood.

    Attributes:
        type_tag: The rejected tag.

    """

    def __init__(self, type_tag: str) -> None:
        self.type_tag = type_tag
        super().__init__(f"Unsupported value type: {type_tag!r}")


class InvalidFieldValueError(RequestValidationError):
    """Raised when raw text cannot be converted to a field's declared type.

    Attributes:
        field: Name of the field being parsed, if known.
        value: The raw text.

    """

    def __init__(self, *, value: str, field: str | None = None) -> None:
        self.field = field
        self.value = value
        if field:
            message = f"Invalid value for {field}: {value!r}"
        else:
            message = f"Invalid value: {value!r}"
        super().__init__(message)


class MissingSchemaError(RequestValidationError):
    """Raised when an operation needs declared field types but none exist.

    Attributes:
        table_name: The table whose descriptor lacks field types.

    """

    def __init__(self, *, table_name: str) -> None:
        self.table_name = table_name
        super().__init__(f"Table schema not defined for '{table_name}'")


class EmptyUpdateError(RequestValidationError):
    """Raised when an update operation has no attributes to set.

    Example:
        await ddb.update_item("products", key, {})

    """

    def __init__(self) -> None:
        super().__init__("No updates provided")


class InvalidRetryPolicyError(RequestValidationError):
    """Raised when a retry budget or initial delay is negative."""


class AuthenticationError(DynaflexError):
    """Raised when listing tables with the configured credentials fails.

    The original botocore error is kept as ``__cause__``.
    """

    def __init__(self, message: str = "Authentication failed") -> None:
        super().__init__(message)


__all__ = [
    "AuthenticationError",
    "DynaflexError",
    "EmptyUpdateError",
    "InvalidConditionError",
    "InvalidFieldValueError",
    "InvalidRetryPolicyError",
    "MissingSchemaError",
    "RequestValidationError",
    "UnsupportedConditionError",
    "UnsupportedValueTypeError",
]
