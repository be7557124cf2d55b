from __future__ import annotations

import logging
import math
from datetime import datetime, timedelta, timezone

import pytest

from metrics_chart.contracts import MetricQueryResult
from metrics_chart.series.colors import SeriesColorAssigner
from metrics_chart.series.metrics import (
    MetricSeriesBuilder,
    series_statistics,
    unique_series_names,
)

START = datetime(2019, 7, 16, 10, 0, tzinfo=timezone.utc)
ASSIGNER = SeriesColorAssigner(palette=("#1F78D1", "#1AAA55", "#FC9403"))


def _result(label: str, values: list[float | None], *, step_minutes: int = 1) -> MetricQueryResult:
    return MetricQueryResult(
        label=label,
        unit="req/s",
        values=tuple(
            (START + timedelta(minutes=index * step_minutes), value)
            for index, value in enumerate(values)
        ),
    )


def test_build_preserves_point_count_order_and_gaps() -> None:
    result = _result("Status Code", [1.0, None, 3.5, 2.0])

    (series,) = MetricSeriesBuilder().build([result], ASSIGNER)

    assert series.name == "Status Code"
    assert series.kind == "line"
    assert series.axis_index == 0
    assert series.style_width == 2
    assert series.points == result.values
    assert series.values == (1.0, None, 3.5, 2.0)


def test_build_assigns_positional_colors() -> None:
    results = [_result(label, [1.0]) for label in ("a", "b", "c", "d")]

    series = MetricSeriesBuilder().build(results, ASSIGNER)

    assert [item.color for item in series] == ["#1F78D1", "#1AAA55", "#FC9403", "#1F78D1"]


def test_build_without_results_returns_empty_tuple() -> None:
    assert MetricSeriesBuilder().build([], ASSIGNER) == ()


def test_duplicate_labels_are_suffixed(caplog: pytest.LogCaptureFixture) -> None:
    results = [_result("Status Code", [1.0]), _result("Status Code", [2.0])]

    with caplog.at_level(logging.WARNING):
        series = MetricSeriesBuilder().build(results, ASSIGNER)

    assert [item.name for item in series] == ["Status Code", "Status Code (2)"]
    assert "Duplicate series labels" in caplog.text
    assert unique_series_names(["a", "a", "a", "b"]) == ["a", "a (2)", "a (3)", "b"]


def test_unordered_timestamps_are_drawn_as_given(caplog: pytest.LogCaptureFixture) -> None:
    result = MetricQueryResult(
        label="Latency",
        values=((START + timedelta(minutes=5), 1.0), (START, 2.0)),
    )

    with caplog.at_level(logging.WARNING):
        (series,) = MetricSeriesBuilder().build([result], ASSIGNER)

    assert series.values == (1.0, 2.0)
    assert "not ascending" in caplog.text


def test_line_width_is_configurable_and_validated() -> None:
    (series,) = MetricSeriesBuilder(line_width=3).build([_result("a", [1.0])], ASSIGNER)

    assert series.style_width == 3
    with pytest.raises(ValueError, match="line_width"):
        MetricSeriesBuilder(line_width=0)


def test_series_statistics_skip_missing_values() -> None:
    (series,) = MetricSeriesBuilder().build([_result("a", [1.0, None, 3.0])], ASSIGNER)
    (empty,) = MetricSeriesBuilder().build([_result("b", [None, None])], ASSIGNER)

    assert series_statistics(series) == (3.0, 2.0)
    assert series_statistics(empty) == (None, None)


def test_infinite_values_are_drawn_but_left_out_of_statistics(
    caplog: pytest.LogCaptureFixture,
) -> None:
    with caplog.at_level(logging.WARNING):
        (series,) = MetricSeriesBuilder().build([_result("a", [1.0, math.inf, 3.0])], ASSIGNER)
        (only_infinite,) = MetricSeriesBuilder().build([_result("b", [-math.inf])], ASSIGNER)

    assert series.values == (1.0, math.inf, 3.0)
    assert series_statistics(series) == (3.0, 2.0)
    assert series_statistics(only_infinite) == (None, None)
    assert "infinite values" in caplog.text
