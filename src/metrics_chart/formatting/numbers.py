from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any

from metrics_chart.contracts import is_absent

AXIS_SIGNIFICANT_DIGITS = 3
TOOLTIP_SIGNIFICANT_DIGITS = 4

SI_PREFIXES = {
    -24: "y",
    -21: "z",
    -18: "a",
    -15: "f",
    -12: "p",
    -9: "n",
    -6: "µ",
    -3: "m",
    0: "",
    3: "k",
    6: "M",
    9: "G",
    12: "T",
    15: "P",
    18: "E",
    21: "Z",
    24: "Y",
}
_MIN_EXPONENT = min(SI_PREFIXES)
_MAX_EXPONENT = max(SI_PREFIXES)


def _engineering_exponent(magnitude: float) -> int:
    exponent = 3 * math.floor(math.floor(math.log10(magnitude)) / 3)
    return max(_MIN_EXPONENT, min(_MAX_EXPONENT, exponent))


def _scale(value: float, exponent: int) -> float:
    if exponent >= 0:
        return value / 10**exponent
    return value * 10 ** (-exponent)


def _round_significant(value: float, digits: int) -> tuple[float, int]:
    if value == 0:
        return 0.0, 0
    magnitude = math.floor(math.log10(abs(value)))
    decimals = max(digits - 1 - magnitude, 0)
    return round(value, decimals), decimals


def _strip_fraction(text: str) -> str:
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return "0" if text == "-0" else text


def format_number(value: Any, significant_digits: int = AXIS_SIGNIFICANT_DIGITS) -> str:
    """Render ``value`` in engineering notation, e.g. ``0.88888`` -> ``889m``."""
    if significant_digits < 1:
        raise ValueError("significant_digits must be >= 1")
    if is_absent(value):
        return ""
    number = float(value)
    if not math.isfinite(number):
        return str(number)
    if number == 0:
        return "0"

    exponent = _engineering_exponent(abs(number))
    rounded, decimals = _round_significant(_scale(number, exponent), significant_digits)
    # Rounding can push the mantissa into the next band (999.96 -> 1000).
    if abs(rounded) >= 1000 and exponent < _MAX_EXPONENT:
        exponent += 3
        rounded, decimals = _round_significant(_scale(number, exponent), significant_digits)
    return f"{_strip_fraction(f'{rounded:.{decimals}f}')}{SI_PREFIXES[exponent]}"


@dataclass(frozen=True)
class EngineeringFormatter:
    significant_digits: int = AXIS_SIGNIFICANT_DIGITS

    def __call__(self, value: Any) -> str:
        return format_number(value, self.significant_digits)
