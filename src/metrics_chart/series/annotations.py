from __future__ import annotations

import logging
import math
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from metrics_chart.contracts import (
    OVERLAY_AXIS_INDEX,
    AnnotationNote,
    DeploymentEvent,
    DrawableSeries,
    OverlayKind,
    OverlayPoint,
    is_absent,
    overlay_color,
)

LOGGER = logging.getLogger(__name__)

OVERLAY_SERIES_NAME = "annotations"
DEFAULT_SYMBOL_SIZE = 14
DEFAULT_OVERLAY_MIN = 0.0
DEFAULT_OVERLAY_MAX = 100.0
# Fraction of the overlay axis height where markers are drawn.
MARKER_POSITION = 0.03
DEFAULT_BOUNDARY_GAP = (0.1, 0.1)


@dataclass(frozen=True)
class AxisRange:
    min: float
    max: float

    def __post_init__(self) -> None:
        if not self.min < self.max:
            raise ValueError(f"axis range min must be < max, got {self.min!r} >= {self.max!r}.")

    def marker_value(self, position: float = MARKER_POSITION) -> float:
        return self.min + (self.max - self.min) * position


DEFAULT_OVERLAY_RANGE = AxisRange(min=DEFAULT_OVERLAY_MIN, max=DEFAULT_OVERLAY_MAX)


def overlay_axis_range(
    series: Sequence[DrawableSeries],
    boundary_gap: tuple[float, float] = DEFAULT_BOUNDARY_GAP,
) -> AxisRange:
    """Derive the hidden overlay axis range from the data values.

    The range mirrors the padded data axis so markers sit inside the visible
    band. Without data the fixed 0-100 band is used.
    """
    values = [
        float(value)
        for item in series
        if item.kind == "line"
        for value in item.values
        if not is_absent(value)
    ]
    finite = [value for value in values if math.isfinite(value)]
    if len(finite) != len(values):
        LOGGER.warning(
            "Ignoring %d infinite values when sizing the overlay axis",
            len(values) - len(finite),
        )
    if not finite:
        return DEFAULT_OVERLAY_RANGE
    low = min(finite)
    high = max(finite)
    if low == high:
        low -= 0.5
        high += 0.5
    span = high - low
    return AxisRange(min=low - span * boundary_gap[0], max=high + span * boundary_gap[1])


class AnnotationOverlayBuilder:
    def __init__(
        self,
        symbol: str = "pin",
        symbol_size: int = DEFAULT_SYMBOL_SIZE,
        color: str | None = None,
    ) -> None:
        if symbol_size <= 0:
            raise ValueError("symbol_size must be > 0")
        self.symbol = symbol
        self.symbol_size = symbol_size
        self.color = color or overlay_color("deployments")

    def build(
        self,
        deployments: Sequence[DeploymentEvent],
        annotations: Sequence[AnnotationNote],
        axis_range: AxisRange | None = None,
    ) -> DrawableSeries:
        marker_value = (axis_range or DEFAULT_OVERLAY_RANGE).marker_value()

        entries: list[tuple[datetime, int, int, OverlayKind, Any]] = []
        for index, deployment in enumerate(deployments):
            if not isinstance(deployment, DeploymentEvent):
                raise TypeError(f"deployments[{index}] must be a DeploymentEvent")
            entries.append((deployment.timestamp, 0, index, "deployments", deployment.metadata))
        for index, note in enumerate(annotations):
            if not isinstance(note, AnnotationNote):
                raise TypeError(f"annotations[{index}] must be an AnnotationNote")
            entries.append((note.timestamp, 1, index, "annotations", note.metadata))
        entries.sort(key=lambda entry: (entry[0], entry[1], entry[2]))

        points = tuple(
            OverlayPoint(
                timestamp=timestamp,
                synthetic_value=marker_value,
                kind=kind,
                metadata=metadata,
                symbol=self.symbol,
                symbol_size=self.symbol_size,
            )
            for timestamp, _, _, kind, metadata in entries
        )
        LOGGER.debug(
            "Built overlay with %d deployments and %d annotations",
            len(deployments),
            len(annotations),
        )
        return DrawableSeries(
            name=OVERLAY_SERIES_NAME,
            kind="scatter",
            points=points,
            color=self.color,
            axis_index=OVERLAY_AXIS_INDEX,
            style_width=0,
        )
