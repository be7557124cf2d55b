"""Compose the rendering options handed to the chart library.

``compose`` is pure: the formatters it installs are frozen, value-comparable
callables, so composing twice from equal inputs yields equal options.

Caller overrides are applied by ``merge_options`` with a fixed per-key policy:

- ``series``: caller series are appended after the computed ones.
- ``xAxis``: the caller dict is shallow-merged onto the computed x-axis.
- ``yAxis``: a dict is shallow-merged onto the data axis; a list is merged
  positionally onto the data and overlay axes.
- anything else replaces the computed value.

Nested axis fields such as ``axisLabel`` are replaced wholesale, never deep
merged. Overrides of the wrong shape raise ``ValueError``.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Literal

from metrics_chart.contracts import DrawableSeries, PanelType, TimezonePolicy
from metrics_chart.formatting.numbers import (
    AXIS_SIGNIFICANT_DIGITS,
    TOOLTIP_SIGNIFICANT_DIGITS,
    EngineeringFormatter,
    format_number,
)
from metrics_chart.formatting.time_axis import AxisTickFormatter, TimeAxisFormatter
from metrics_chart.interaction.tooltip import TooltipFormatter
from metrics_chart.series.annotations import DEFAULT_BOUNDARY_GAP, AxisRange, overlay_axis_range
from metrics_chart.series.metrics import series_statistics

MergeStrategy = Literal["replace", "concat", "merge_axis", "merge_axes"]

OPTION_MERGE_STRATEGIES: dict[str, MergeStrategy] = {
    "series": "concat",
    "xAxis": "merge_axis",
    "yAxis": "merge_axes",
}

X_AXIS_NAME = "Time"
AREA_OPACITY = 0.2
DEFAULT_LEGEND_MAX_TEXT = "Max"
DEFAULT_LEGEND_AVERAGE_TEXT = "Avg"


@dataclass(frozen=True)
class HiddenAxisFormatter:
    """Blank label formatter; the overlay axis needs one for marker tooltips to fire."""

    def __call__(self, value: Any) -> str:
        return ""


@dataclass(frozen=True)
class AxisConfig:
    y_label: str = ""
    timezone: TimezonePolicy = TimezonePolicy.DEFAULT_LOCAL
    panel_type: PanelType = "line-chart"
    boundary_gap: tuple[float, float] = DEFAULT_BOUNDARY_GAP
    overlay_range: AxisRange | None = None


def _merge_axes(base_axes: Sequence[Mapping[str, Any]], patch: Any) -> list[dict[str, Any]]:
    if isinstance(patch, Mapping):
        patches: list[Any] = [patch]
    elif isinstance(patch, (list, tuple)):
        patches = list(patch)
    else:
        raise ValueError("option override 'yAxis' must be a dict or a list of dicts")
    if len(patches) > len(base_axes):
        raise ValueError(
            f"option override 'yAxis' has {len(patches)} axes; at most {len(base_axes)} allowed"
        )

    axes = [dict(axis) for axis in base_axes]
    for index, axis_patch in enumerate(patches):
        if not isinstance(axis_patch, Mapping):
            raise ValueError(f"option override 'yAxis[{index}]' must be a dict")
        axes[index] = {**axes[index], **axis_patch}
    return axes


def merge_options(
    base: Mapping[str, Any],
    overrides: Mapping[str, Any] | None = None,
) -> dict[str, Any]:
    merged = dict(base)
    for key, patch in (overrides or {}).items():
        strategy = OPTION_MERGE_STRATEGIES.get(key, "replace")
        if strategy == "concat":
            if not isinstance(patch, (list, tuple)):
                raise ValueError(f"option override '{key}' must be a list")
            merged[key] = [*base.get(key, []), *patch]
        elif strategy == "merge_axis":
            if not isinstance(patch, Mapping):
                raise ValueError(f"option override '{key}' must be a dict")
            merged[key] = {**base.get(key, {}), **patch}
        elif strategy == "merge_axes":
            merged[key] = _merge_axes(base.get(key, []), patch)
        else:
            merged[key] = patch
    return merged


class ChartOptionsComposer:
    def __init__(
        self,
        time_formatter: TimeAxisFormatter,
        *,
        scroll_handle_icon: str,
        legend_max_text: str = DEFAULT_LEGEND_MAX_TEXT,
        legend_average_text: str = DEFAULT_LEGEND_AVERAGE_TEXT,
        axis_significant_digits: int = AXIS_SIGNIFICANT_DIGITS,
        tooltip_significant_digits: int = TOOLTIP_SIGNIFICANT_DIGITS,
    ) -> None:
        self.time_formatter = time_formatter
        self.scroll_handle_icon = scroll_handle_icon
        self.legend_max_text = legend_max_text
        self.legend_average_text = legend_average_text
        self.axis_significant_digits = axis_significant_digits
        self.tooltip_significant_digits = tooltip_significant_digits

    def _x_axis(self, axis_config: AxisConfig) -> dict[str, Any]:
        return {
            "name": X_AXIS_NAME,
            "type": "time",
            "axisLabel": {
                "formatter": AxisTickFormatter(self.time_formatter, axis_config.timezone),
            },
            "axisPointer": {"snap": True},
        }

    def _y_axes(
        self,
        series: Sequence[DrawableSeries],
        axis_config: AxisConfig,
    ) -> list[dict[str, Any]]:
        overlay_range = axis_config.overlay_range or overlay_axis_range(
            series, axis_config.boundary_gap
        )
        data_axis = {
            "name": axis_config.y_label,
            "type": "value",
            "scale": True,
            "boundaryGap": list(axis_config.boundary_gap),
            "axisLabel": {"formatter": EngineeringFormatter(self.axis_significant_digits)},
        }
        overlay_axis = {
            "show": False,
            "type": "value",
            "min": overlay_range.min,
            "max": overlay_range.max,
            "axisLabel": {"formatter": HiddenAxisFormatter()},
        }
        return [data_axis, overlay_axis]

    def _series_option(self, series: DrawableSeries, panel_type: PanelType) -> dict[str, Any]:
        option = series.to_dict()
        if series.kind == "line" and panel_type == "area-chart":
            option["areaStyle"] = {"opacity": AREA_OPACITY, "color": series.color}
        return option

    def _legend(self, series: Sequence[DrawableSeries]) -> dict[str, Any]:
        series_info = []
        for item in series:
            maximum, average = series_statistics(item)
            series_info.append(
                {
                    "name": item.name,
                    "color": item.color,
                    "type": "solid",
                    "max": format_number(maximum, self.axis_significant_digits),
                    "average": format_number(average, self.axis_significant_digits),
                }
            )
        return {
            "show": False,
            "maxText": self.legend_max_text,
            "averageText": self.legend_average_text,
            "seriesInfo": series_info,
        }

    def tooltip_formatter(
        self,
        series: Sequence[DrawableSeries],
        axis_config: AxisConfig,
    ) -> TooltipFormatter:
        return TooltipFormatter(
            time_formatter=self.time_formatter,
            colors={item.name: item.color for item in series},
            policy=axis_config.timezone,
            significant_digits=self.tooltip_significant_digits,
        )

    def compose(
        self,
        series: Sequence[DrawableSeries],
        overlay: DrawableSeries | None,
        axis_config: AxisConfig,
        overrides: Mapping[str, Any] | None = None,
    ) -> dict[str, Any]:
        for item in series:
            if item.kind != "line":
                raise ValueError(f"data series {item.name!r} must be a line series")
        series_options = [self._series_option(item, axis_config.panel_type) for item in series]
        if overlay is not None:
            series_options.append(overlay.to_dict())

        base = {
            "xAxis": self._x_axis(axis_config),
            "yAxis": self._y_axes(series, axis_config),
            "series": series_options,
            "dataZoom": [{"handleIcon": self.scroll_handle_icon}],
            "legend": self._legend(series),
            "tooltip": {
                "trigger": "axis",
                "formatter": self.tooltip_formatter(series, axis_config),
            },
        }
        return merge_options(base, overrides)
