from __future__ import annotations

import logging
import math
from collections.abc import Sequence

import numpy as np
import pandas as pd

from metrics_chart.contracts import DATA_AXIS_INDEX, DrawableSeries, MetricQueryResult, is_absent
from metrics_chart.series.colors import SeriesColorAssigner

LOGGER = logging.getLogger(__name__)

DEFAULT_LINE_WIDTH = 2


def unique_series_names(labels: Sequence[str]) -> list[str]:
    used: set[str] = set()
    names: list[str] = []
    for label in labels:
        candidate = label
        suffix = 1
        while candidate in used:
            suffix += 1
            candidate = f"{label} ({suffix})"
        used.add(candidate)
        names.append(candidate)
    return names


def _log_malformed_samples(result: MetricQueryResult) -> None:
    if not result.values:
        return
    timestamps = pd.to_datetime(pd.Series([timestamp for timestamp, _ in result.values]), utc=True)
    if timestamps.duplicated().any():
        LOGGER.warning(
            "Series %r has %d duplicate timestamps; drawing as given",
            result.label,
            int(timestamps.duplicated().sum()),
        )
    if not timestamps.is_monotonic_increasing:
        LOGGER.warning("Series %r timestamps are not ascending; drawing as given", result.label)
    nan_count = sum(1 for _, value in result.values if value is not None and is_absent(value))
    if nan_count:
        LOGGER.warning("Series %r has %d NaN values; drawing as given", result.label, nan_count)
    infinite_count = sum(1 for _, value in result.values if value is not None and math.isinf(value))
    if infinite_count:
        LOGGER.warning(
            "Series %r has %d infinite values; left out of axis range and legend stats",
            result.label,
            infinite_count,
        )


def series_statistics(series: DrawableSeries) -> tuple[float | None, float | None]:
    """Return (max, average) over finite values, or (None, None) when there are none."""
    values = np.array(
        [np.nan if is_absent(value) else value for value in series.values],
        dtype=float,
    )
    values = values[np.isfinite(values)]
    if values.size == 0:
        return None, None
    return float(values.max()), float(values.mean())


class MetricSeriesBuilder:
    def __init__(self, line_width: float = DEFAULT_LINE_WIDTH) -> None:
        if line_width <= 0:
            raise ValueError("line_width must be > 0")
        self.line_width = line_width

    def build(
        self,
        results: Sequence[MetricQueryResult],
        color_assigner: SeriesColorAssigner,
    ) -> tuple[DrawableSeries, ...]:
        if not results:
            return ()

        names = unique_series_names([result.label for result in results])
        if names != [result.label for result in results]:
            LOGGER.warning("Duplicate series labels were suffixed: %s", names)
        colors = color_assigner.assign(names)

        series: list[DrawableSeries] = []
        for name, result in zip(names, results):
            _log_malformed_samples(result)
            series.append(
                DrawableSeries(
                    name=name,
                    kind="line",
                    points=result.values,
                    color=colors[name],
                    axis_index=DATA_AXIS_INDEX,
                    style_width=self.line_width,
                )
            )
        return tuple(series)
