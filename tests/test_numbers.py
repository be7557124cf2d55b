from __future__ import annotations

import math

import pytest

from metrics_chart.formatting.numbers import (
    TOOLTIP_SIGNIFICANT_DIGITS,
    EngineeringFormatter,
    format_number,
)


def test_axis_labels_use_three_significant_digits_with_si_suffix() -> None:
    assert format_number(0.88888) == "889m"
    assert format_number(1234.5) == "1.23k"
    assert format_number(2_000_000) == "2M"
    assert format_number(-0.0025) == "-2.5m"


def test_tooltip_values_use_four_significant_digits() -> None:
    assert format_number(5.55555, TOOLTIP_SIGNIFICANT_DIGITS) == "5.556"
    assert format_number(5, TOOLTIP_SIGNIFICANT_DIGITS) == "5"


def test_rounding_overflow_moves_to_next_suffix() -> None:
    assert format_number(999.96) == "1k"


def test_zero_and_absent_values() -> None:
    assert format_number(0) == "0"
    assert format_number(None) == ""
    assert format_number(math.nan) == ""


def test_engineering_formatter_is_callable_and_comparable() -> None:
    formatter = EngineeringFormatter()

    assert formatter(0.88888) == "889m"
    assert formatter == EngineeringFormatter(3)
    assert EngineeringFormatter(4)(5.55555) == "5.556"


def test_significant_digits_must_be_positive() -> None:
    with pytest.raises(ValueError, match="significant_digits"):
        format_number(1.0, 0)
