"""Unit tests for Decimal money helpers."""

from decimal import Decimal

import pytest

from src.lm_common.money import MAX_AMOUNT, ZERO, amount_to_json, to_amount


class TestToAmount:
    def test_int(self) -> None:
        assert to_amount(500) == Decimal("500.00")

    def test_float_keeps_decimal_digits(self) -> None:
        assert to_amount(729.98) == Decimal("729.98")

    def test_string(self) -> None:
        assert to_amount("12.5") == Decimal("12.50")

    def test_rounds_half_up(self) -> None:
        assert to_amount(Decimal("0.005")) == Decimal("0.01")

    def test_zero(self) -> None:
        assert to_amount(0) == ZERO

    @pytest.mark.parametrize("value", ["NaN", "Infinity", "abc", float("inf")])
    def test_rejects_non_finite_and_garbage(self, value: object) -> None:
        with pytest.raises(ValueError):
            to_amount(value)  # type: ignore[arg-type]


def test_amount_to_json_returns_float() -> None:
    result = amount_to_json(Decimal("729.98"))
    assert isinstance(result, float)
    assert result == 729.98


class TestAmountRange:
    def test_largest_column_value_accepted(self) -> None:
        assert to_amount("9999999999999.99") == MAX_AMOUNT

    @pytest.mark.parametrize("value", ["1e14", "1e40", "-1e14", 1e40])
    def test_values_beyond_column_rejected(self, value: object) -> None:
        with pytest.raises(ValueError):
            to_amount(value)  # type: ignore[arg-type]
