"""Tests for dynaflex exceptions."""

import pytest

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


class TestExceptionHierarchy:
    """Test that exception hierarchy is correctly structured."""

    def test_request_validation_errors(self) -> None:
        assert issubclass(RequestValidationError, DynaflexError)
        assert issubclass(UnsupportedConditionError, RequestValidationError)
        assert issubclass(InvalidConditionError, RequestValidationError)
        assert issubclass(UnsupportedValueTypeError, RequestValidationError)
        assert issubclass(InvalidFieldValueError, RequestValidationError)
        assert issubclass(MissingSchemaError, RequestValidationError)
        assert issubclass(EmptyUpdateError, RequestValidationError)
        assert issubclass(InvalidRetryPolicyError, RequestValidationError)

    def test_authentication_error_is_not_a_validation_error(self) -> None:
        assert issubclass(AuthenticationError, DynaflexError)
        assert not issubclass(AuthenticationError, RequestValidationError)

    def test_can_catch_all_with_dynaflex_error(self) -> None:
        exceptions_to_test = [
            UnsupportedConditionError("~="),
            InvalidConditionError("BETWEEN needs two values"),
            UnsupportedValueTypeError("B"),
            InvalidFieldValueError(value="abc", field="price"),
            MissingSchemaError(table_name="products"),
            EmptyUpdateError(),
            InvalidRetryPolicyError("negative"),
            AuthenticationError(),
        ]

        for exc in exceptions_to_test:
            with pytest.raises(DynaflexError):
                raise exc


class TestExceptionMessages:
    def test_unsupported_condition(self) -> None:
        exc = UnsupportedConditionError("~=")

        assert exc.operator == "~="
        assert str(exc) == "Unsupported condition: '~='"

    def test_unsupported_value_type(self) -> None:
        exc = UnsupportedValueTypeError("BOOL")

        assert exc.type_tag == "BOOL"
        assert str(exc) == "Unsupported value type: 'BOOL'"

    def test_invalid_field_value_with_field(self) -> None:
        exc = InvalidFieldValueError(value="abc", field="price")

        assert exc.field == "price"
        assert exc.value == "abc"
        assert str(exc) == "Invalid value for price: 'abc'"

    def test_invalid_field_value_without_field(self) -> None:
        assert str(InvalidFieldValueError(value="abc")) == "Invalid value: 'abc'"

    def test_missing_schema(self) -> None:
        exc = MissingSchemaError(table_name="products")

        assert exc.table_name == "products"
        assert str(exc) == "Table schema not defined for 'products'"

    def test_empty_update(self) -> None:
        assert str(EmptyUpdateError()) == "No updates provided"

    def test_authentication_default_message(self) -> None:
        assert str(AuthenticationError()) == "Authentication failed"
        assert str(AuthenticationError("token expired")) == "token expired"
