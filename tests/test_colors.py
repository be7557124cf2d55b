from __future__ import annotations

import pytest

from metrics_chart.contracts import categorical_palette
from metrics_chart.series.colors import SeriesColorAssigner


def test_assign_cycles_palette_by_position() -> None:
    assigner = SeriesColorAssigner(palette=("#a", "#b", "#c"))

    colors = assigner.assign(["one", "two", "three", "four", "five"])

    assert colors == {"one": "#a", "two": "#b", "three": "#c", "four": "#a", "five": "#b"}


def test_adjacent_series_never_share_a_color() -> None:
    assigner = SeriesColorAssigner.for_theme("light")
    names = [f"series {index}" for index in range(20)]

    colors = [assigner.assign(names)[name] for name in names]

    assert all(left != right for left, right in zip(colors, colors[1:]))


def test_for_theme_uses_categorical_palette() -> None:
    assert SeriesColorAssigner.for_theme("dark").palette == categorical_palette("dark")


def test_single_color_palette_is_allowed() -> None:
    assigner = SeriesColorAssigner(palette=("#a",))

    assert set(assigner.assign(["x", "y"]).values()) == {"#a"}


def test_empty_palette_is_rejected() -> None:
    with pytest.raises(ValueError, match="at least one color"):
        SeriesColorAssigner(palette=())
