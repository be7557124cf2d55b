"""Time-series chart component facing the rendering collaborator.

The component holds the caller's props and a small ``RenderState`` (last
tooltip and measured width). Derived data is rebuilt from props on every
access; callbacks replace the render state instead of mutating it.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping, Sequence
from typing import Any, Protocol

from metrics_chart.chart.icons import (
    ROCKET_ICON,
    SCROLL_HANDLE_ICON,
    IconResolver,
    bundled_icon_path,
    icon_symbol,
)
from metrics_chart.chart.options import AxisConfig, ChartOptionsComposer
from metrics_chart.config import ChartSettings
from metrics_chart.contracts import (
    AnnotationNote,
    DeploymentEvent,
    DrawableSeries,
    MetricPanel,
    RenderState,
    TooltipModel,
    ZoomRange,
    overlay_color,
)
from metrics_chart.formatting.time_axis import TimeAxisFormatter
from metrics_chart.interaction.tooltip import TooltipFormatter, parse_hover_params
from metrics_chart.interaction.zoom import ZoomEventTranslator
from metrics_chart.series.annotations import AnnotationOverlayBuilder, overlay_axis_range
from metrics_chart.series.colors import SeriesColorAssigner
from metrics_chart.series.metrics import MetricSeriesBuilder

LOGGER = logging.getLogger(__name__)

DATAZOOM_EVENT = "datazoom"
_PROP_NAMES = frozenset({"panel", "deployments", "annotations", "settings", "option"})


class ChartInstance(Protocol):
    def on(self, event: str, handler: Callable[..., Any]) -> None: ...

    def off(self, event: str) -> None: ...

    def get_option(self) -> Mapping[str, Any]: ...


class TimeSeriesChart:
    def __init__(
        self,
        panel: MetricPanel,
        *,
        deployments: Sequence[DeploymentEvent] = (),
        annotations: Sequence[AnnotationNote] = (),
        settings: ChartSettings | None = None,
        option: Mapping[str, Any] | None = None,
        icon_resolver: IconResolver = bundled_icon_path,
    ) -> None:
        self.panel = panel
        self.deployments = tuple(deployments)
        self.annotations = tuple(annotations)
        self.settings = settings or ChartSettings()
        self.option = option
        self.icon_resolver = icon_resolver
        self.state = RenderState()
        self.emitted: dict[str, list[Any]] = {}
        self._listeners: dict[str, list[Callable[[Any], None]]] = {}
        self._chart: ChartInstance | None = None
        self._zoom_translator = ZoomEventTranslator()

    def set_props(self, **props: Any) -> None:
        unknown = set(props) - _PROP_NAMES
        if unknown:
            raise ValueError(f"Unknown chart props: {', '.join(sorted(unknown))}")
        for name, value in props.items():
            if name in ("deployments", "annotations"):
                value = tuple(value)
            setattr(self, name, value)

    @property
    def height(self) -> int:
        return self.settings.height

    @property
    def width(self) -> int:
        return self.state.width

    @property
    def tooltip(self) -> TooltipModel | None:
        return self.state.tooltip

    @property
    def time_formatter(self) -> TimeAxisFormatter:
        return TimeAxisFormatter(local_timezone=self.settings.resolved_local_timezone())

    @property
    def color_assigner(self) -> SeriesColorAssigner:
        return SeriesColorAssigner.for_theme(self.settings.series.palette)

    @property
    def chart_data(self) -> tuple[DrawableSeries, ...]:
        builder = MetricSeriesBuilder(line_width=self.settings.series.line_width)
        return builder.build(self.panel.metrics, self.color_assigner)

    @property
    def axis_config(self) -> AxisConfig:
        return AxisConfig(
            y_label=self.panel.y_label,
            timezone=self.settings.timezone,
            panel_type=self.panel.panel_type,
            overlay_range=overlay_axis_range(self.chart_data),
        )

    @property
    def annotation_series(self) -> DrawableSeries:
        builder = AnnotationOverlayBuilder(
            symbol=icon_symbol(ROCKET_ICON, self.icon_resolver),
            symbol_size=self.settings.series.overlay_symbol_size,
            color=overlay_color("deployments", self.settings.series.palette),
        )
        return builder.build(
            self.deployments,
            self.annotations,
            axis_range=self.axis_config.overlay_range,
        )

    def _composer(self) -> ChartOptionsComposer:
        return ChartOptionsComposer(
            self.time_formatter,
            scroll_handle_icon=icon_symbol(SCROLL_HANDLE_ICON, self.icon_resolver),
            legend_max_text=self.settings.legend.max_text,
            legend_average_text=self.settings.legend.average_text,
            axis_significant_digits=self.settings.numbers.axis_significant_digits,
            tooltip_significant_digits=self.settings.numbers.tooltip_significant_digits,
        )

    @property
    def chart_options(self) -> dict[str, Any]:
        overrides = self.option if self.option is not None else self.settings.option_overrides
        return self._composer().compose(
            self.chart_data,
            self.annotation_series,
            self.axis_config,
            overrides,
        )

    def _tooltip_formatter(self) -> TooltipFormatter:
        return self._composer().tooltip_formatter(self.chart_data, self.axis_config)

    def format_tooltip_text(self, params: Mapping[str, Any]) -> TooltipModel | None:
        tooltip = self._tooltip_formatter().format(parse_hover_params(params))
        self.state = RenderState(tooltip=tooltip, width=self.state.width)
        return tooltip

    def format_annotations_tooltip_text(self, params: Mapping[str, Any]) -> TooltipModel | None:
        return self._tooltip_formatter().format(parse_hover_params(params))

    def on_mouse_leave(self) -> None:
        self.state = RenderState(tooltip=None, width=self.state.width)

    def on_resize(self, width: float) -> None:
        self.state = RenderState(tooltip=self.state.tooltip, width=max(int(width), 0))

    def on(self, event: str, listener: Callable[[Any], None]) -> None:
        self._listeners.setdefault(event, []).append(listener)

    def _emit(self, event: str, payload: Any) -> None:
        self.emitted.setdefault(event, []).append(payload)
        for listener in self._listeners.get(event, []):
            listener(payload)

    def on_chart_created(self, chart: ChartInstance) -> None:
        self._chart = chart
        chart.on(DATAZOOM_EVENT, self.on_datazoom)

    def on_datazoom(self, *_args: Any) -> ZoomRange | None:
        if self._chart is None:
            LOGGER.debug("datazoom received before the chart was created")
            return None
        data_zoom = self._chart.get_option().get("dataZoom") or []
        if not data_zoom:
            return None
        zoom = self._zoom_translator.translate(data_zoom[0])
        if zoom is not None:
            self._emit(DATAZOOM_EVENT, zoom.to_dict())
        return zoom

    def destroy(self) -> None:
        if self._chart is not None:
            self._chart.off(DATAZOOM_EVENT)
            self._chart = None
