"""Tests for key condition and update expression synthesis."""

import re
from decimal import Decimal

import pytest

from dynaflex.exceptions import EmptyUpdateError, InvalidConditionError, UnsupportedConditionError
from dynaflex.expressions import (
    KeyCondition,
    SortKeyCondition,
    SortKeyOperator,
    build_key_condition,
    build_update_expression,
    merge_placeholders,
)


class TestSortKeyOperatorParse:
    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("=", SortKeyOperator.EQ),
            ("<", SortKeyOperator.LT),
            ("<=", SortKeyOperator.LTE),
            (">", SortKeyOperator.GT),
            (">=", SortKeyOperator.GTE),
            ("BETWEEN", SortKeyOperator.BETWEEN),
            ("between", SortKeyOperator.BETWEEN),
            ("begins_with", SortKeyOperator.BEGINS_WITH),
            ("  >=  ", SortKeyOperator.GTE),
        ],
    )
    def test_known_operators(self, text: str, expected: SortKeyOperator) -> None:
        assert SortKeyOperator.parse(text) is expected

    def test_operator_instance_passes_through(self) -> None:
        assert SortKeyOperator.parse(SortKeyOperator.LT) is SortKeyOperator.LT

    @pytest.mark.parametrize("text", ["~=", "!=", "<>", "LIKE", ""])
    def test_unknown_operator_raises(self, text: str) -> None:
        with pytest.raises(UnsupportedConditionError) as exc_info:
            SortKeyOperator.parse(text)

        assert exc_info.value.operator == text


class TestBuildKeyCondition:
    def test_partition_key_only(self) -> None:
        result = build_key_condition(("category", "Electronics"))

        assert result == KeyCondition(
            expression="#pk = :pkval",
            names={"#pk": "category"},
            values={":pkval": "Electronics"},
        )

    @pytest.mark.parametrize("operator", ["=", "<", "<=", ">", ">="])
    def test_single_comparison_operators(self, operator: str) -> None:
        result = build_key_condition(
            ("category", "Electronics"),
            SortKeyCondition("product_name", operator, "Phone"),
        )

        assert result.expression == f"#pk = :pkval AND #sk {operator} :skval"
        assert result.expression.count("#sk") == 1
        assert result.names == {"#pk": "category", "#sk": "product_name"}
        assert result.values == {":pkval": "Electronics", ":skval": "Phone"}

    def test_between_uses_two_bound_placeholders(self) -> None:
        result = build_key_condition(
            ("category", "Electronics"),
            SortKeyCondition("product_name", "BETWEEN", "A", "M"),
        )

        assert result.expression == "#pk = :pkval AND #sk BETWEEN :skval AND :skval2"
        assert result.values == {":pkval": "Electronics", ":skval": "A", ":skval2": "M"}
        sort_key_placeholders = set(re.findall(r":skval\d?", result.expression))
        assert sort_key_placeholders == {":skval", ":skval2"}

    def test_begins_with(self) -> None:
        result = build_key_condition(
            ("category", "Electronics"),
            SortKeyCondition("product_name", SortKeyOperator.BEGINS_WITH, "Pro"),
        )

        assert result.expression == "#pk = :pkval AND begins_with(#sk, :skval)"
        assert result.values[":skval"] == "Pro"

    def test_numeric_sort_key_value_is_kept(self) -> None:
        result = build_key_condition(
            ("user_id", "u-1"),
            SortKeyCondition("created_at", ">", Decimal("1700000000")),
        )

        assert result.values[":skval"] == Decimal("1700000000")

    def test_unsupported_operator_raises(self) -> None:
        with pytest.raises(UnsupportedConditionError):
            build_key_condition(
                ("category", "Electronics"),
                SortKeyCondition("product_name", "~=", "Phone"),
            )

    def test_between_without_upper_raises(self) -> None:
        with pytest.raises(InvalidConditionError):
            build_key_condition(
                ("category", "Electronics"),
                SortKeyCondition("product_name", "BETWEEN", "A"),
            )

    def test_upper_with_single_value_operator_raises(self) -> None:
        with pytest.raises(InvalidConditionError):
            build_key_condition(
                ("category", "Electronics"),
                SortKeyCondition("product_name", ">", "A", "M"),
            )


class TestMergePlaceholders:
    def test_adds_filter_placeholders(self) -> None:
        key_condition = build_key_condition(("category", "Books"))

        merged = merge_placeholders(
            key_condition, {"#price": "price"}, {":min_price": Decimal("25")}
        )

        assert merged.expression == key_condition.expression
        assert merged.names == {"#pk": "category", "#price": "price"}
        assert merged.values == {":pkval": "Books", ":min_price": Decimal("25")}

    def test_none_maps_leave_condition_unchanged(self) -> None:
        key_condition = build_key_condition(("category", "Books"))

        assert merge_placeholders(key_condition) == key_condition

    @pytest.mark.parametrize(
        ("names", "values"),
        [
            ({"#pk": "price"}, None),
            ({"#sk": "price"}, None),
            (None, {":pkval": "Books"}),
            (None, {":skval": "Dune"}),
        ],
    )
    def test_reusing_key_condition_placeholder_raises(
        self, names: dict[str, str] | None, values: dict[str, str] | None
    ) -> None:
        key_condition = build_key_condition(
            ("category", "Books"), SortKeyCondition("product_name", ">=", "D")
        )

        with pytest.raises(InvalidConditionError):
            merge_placeholders(key_condition, names, values)

    def test_does_not_mutate_input(self) -> None:
        key_condition = build_key_condition(("category", "Books"))

        merge_placeholders(key_condition, {"#n": "name"}, {":v": "x"})

        assert key_condition.names == {"#pk": "category"}
        assert key_condition.values == {":pkval": "Books"}


class TestBuildUpdateExpression:
    def test_single_attribute(self) -> None:
        result = build_update_expression({"price": Decimal("649.99")})

        assert result.expression == "SET #attr0 = :val0"
        assert result.names == {"#attr0": "price"}
        assert result.values == {":val0": Decimal("649.99")}

    def test_multiple_attributes(self) -> None:
        result = build_update_expression({"price": Decimal("10"), "name": "Widget"})

        assert result.expression == "SET #attr0 = :val0, #attr1 = :val1"
        assert result.names == {"#attr0": "price", "#attr1": "name"}
        assert result.values == {":val0": Decimal("10"), ":val1": "Widget"}

    def test_empty_updates_raise(self) -> None:
        with pytest.raises(EmptyUpdateError):
            build_update_expression({})
