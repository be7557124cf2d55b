from __future__ import annotations

import math
from copy import deepcopy
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Literal, Union

SeriesKind = Literal["line", "scatter"]
OverlayKind = Literal["deployments", "annotations"]
TooltipType = Literal["data", "deployments", "annotations"]
PanelType = Literal["area-chart", "line-chart"]
PaletteTheme = Literal["light", "dark"]

ALLOWED_SERIES_KINDS = frozenset({"line", "scatter"})
ALLOWED_OVERLAY_KINDS = frozenset({"deployments", "annotations"})
ALLOWED_TOOLTIP_TYPES = frozenset({"data", "deployments", "annotations"})
ALLOWED_PANEL_TYPES = frozenset({"area-chart", "line-chart"})

DATA_AXIS_INDEX = 0
OVERLAY_AXIS_INDEX = 1

_COLOR_SEMANTICS: dict[str, dict[str, Any]] = {
    "light": {
        "overlay": {
            "deployments": "#1F78D1",
            "annotations": "#1F78D1",
        },
        "categorical_palette": [
            "#1F78D1",
            "#1AAA55",
            "#FC9403",
            "#6666C4",
            "#DB3B21",
            "#2F9E9E",
            "#D10069",
            "#8B99A8",
        ],
    },
    "dark": {
        "overlay": {
            "deployments": "#5AB0FF",
            "annotations": "#5AB0FF",
        },
        "categorical_palette": [
            "#5AB0FF",
            "#2FC79A",
            "#F2C14E",
            "#A8A8F0",
            "#FF8A3D",
            "#7CC7FF",
            "#F2A7D4",
            "#A8B5C5",
        ],
    },
}

Sample = tuple[datetime, Union[float, None]]


def default_color_semantics() -> dict[str, dict[str, Any]]:
    return deepcopy(_COLOR_SEMANTICS)


def categorical_palette(theme: PaletteTheme = "light") -> tuple[str, ...]:
    if theme not in _COLOR_SEMANTICS:
        raise ValueError(f"Unsupported palette theme: {theme!r}.")
    return tuple(_COLOR_SEMANTICS[theme]["categorical_palette"])


def overlay_color(kind: OverlayKind, theme: PaletteTheme = "light") -> str:
    if theme not in _COLOR_SEMANTICS:
        raise ValueError(f"Unsupported palette theme: {theme!r}.")
    return str(_COLOR_SEMANTICS[theme]["overlay"][kind])


class TimezonePolicy(str, Enum):
    DEFAULT_LOCAL = "DEFAULT_LOCAL"
    LOCAL = "LOCAL"
    UTC = "UTC"

    @classmethod
    def parse(cls, value: "TimezonePolicy | str | None") -> "TimezonePolicy":
        if value is None:
            return cls.DEFAULT_LOCAL
        if isinstance(value, cls):
            return value
        normalized = str(value).strip().upper()
        try:
            return cls(normalized)
        except ValueError as exc:
            raise ValueError(f"Unsupported timezone policy: {value!r}.") from exc

    @property
    def is_utc(self) -> bool:
        return self is TimezonePolicy.UTC


def ensure_aware(instant: datetime) -> datetime:
    """Return ``instant`` as a timezone-aware datetime, reading naive values as UTC."""
    if instant.tzinfo is None:
        return instant.replace(tzinfo=timezone.utc)
    return instant


def isoformat_utc(instant: datetime) -> str:
    """Render an instant as ``YYYY-MM-DDTHH:MM:SS.mmmZ``."""
    as_utc = ensure_aware(instant).astimezone(timezone.utc)
    return as_utc.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_isoformat(value: str) -> datetime:
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    return ensure_aware(datetime.fromisoformat(text))


def is_absent(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, float) and math.isnan(value):
        return True
    return False


def _require_text(value: Any, *, field_name: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"{field_name} must be a non-empty string.")
    return value


def _require_datetime(value: Any, *, field_name: str) -> datetime:
    if not isinstance(value, datetime):
        raise ValueError(f"{field_name} must be a datetime, got {type(value).__name__}.")
    return ensure_aware(value)


@dataclass(slots=True, frozen=True)
class MetricQueryResult:
    label: str
    unit: str = ""
    values: tuple[Sample, ...] = ()

    def __post_init__(self) -> None:
        _require_text(self.label, field_name="label")
        normalized: list[Sample] = []
        for index, sample in enumerate(self.values):
            timestamp, value = sample
            timestamp = _require_datetime(timestamp, field_name=f"values[{index}] timestamp")
            if value is not None and not isinstance(value, (int, float)):
                raise ValueError(f"values[{index}] value must be numeric or None.")
            normalized.append((timestamp, None if value is None else float(value)))
        object.__setattr__(self, "values", tuple(normalized))

    def to_dict(self) -> dict[str, Any]:
        return {
            "label": self.label,
            "unit": self.unit,
            "values": [[isoformat_utc(timestamp), value] for timestamp, value in self.values],
        }


@dataclass(slots=True, frozen=True)
class MetricPanel:
    title: str
    metrics: tuple[MetricQueryResult, ...] = ()
    panel_type: PanelType = "line-chart"
    y_label: str = ""

    def __post_init__(self) -> None:
        if self.panel_type not in ALLOWED_PANEL_TYPES:
            raise ValueError(f"Unsupported panel_type: {self.panel_type!r}.")
        object.__setattr__(self, "metrics", tuple(self.metrics))


@dataclass(slots=True, frozen=True)
class DeploymentMetadata:
    sha: str | None = None
    commit_url: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {"sha": self.sha, "commitUrl": self.commit_url}


@dataclass(slots=True, frozen=True)
class AnnotationMetadata:
    title: str | None = None
    description: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {"title": self.title, "content": self.description}


@dataclass(slots=True, frozen=True)
class DeploymentEvent:
    timestamp: datetime
    sha: str | None = None
    commit_url: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "timestamp", _require_datetime(self.timestamp, field_name="timestamp")
        )

    @property
    def metadata(self) -> DeploymentMetadata:
        return DeploymentMetadata(sha=self.sha, commit_url=self.commit_url)


@dataclass(slots=True, frozen=True)
class AnnotationNote:
    timestamp: datetime
    title: str | None = None
    description: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "timestamp", _require_datetime(self.timestamp, field_name="timestamp")
        )

    @property
    def metadata(self) -> AnnotationMetadata:
        return AnnotationMetadata(title=self.title, description=self.description)


OverlayMetadata = Union[DeploymentMetadata, AnnotationMetadata]


@dataclass(slots=True, frozen=True)
class OverlayPoint:
    timestamp: datetime
    synthetic_value: float
    kind: OverlayKind
    metadata: OverlayMetadata
    symbol: str
    symbol_size: int = 14

    def __post_init__(self) -> None:
        if self.kind not in ALLOWED_OVERLAY_KINDS:
            raise ValueError(f"Unsupported overlay kind: {self.kind!r}.")
        if not math.isfinite(self.synthetic_value):
            raise ValueError("synthetic_value must be finite.")
        if self.symbol_size <= 0:
            raise ValueError("symbol_size must be > 0.")

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.kind,
            "value": [isoformat_utc(self.timestamp), self.synthetic_value],
            "symbol": self.symbol,
            "symbolSize": self.symbol_size,
            "tooltipData": self.metadata.to_dict(),
        }


@dataclass(slots=True, frozen=True)
class DrawableSeries:
    name: str
    kind: SeriesKind
    points: tuple[Any, ...]
    color: str
    axis_index: int = DATA_AXIS_INDEX
    style_width: float = 2

    def __post_init__(self) -> None:
        _require_text(self.name, field_name="name")
        if self.kind not in ALLOWED_SERIES_KINDS:
            raise ValueError(f"Unsupported series kind: {self.kind!r}.")
        if self.axis_index not in (DATA_AXIS_INDEX, OVERLAY_AXIS_INDEX):
            raise ValueError(f"axis_index must be 0 or 1, got {self.axis_index!r}.")
        if self.kind == "scatter" and self.axis_index != OVERLAY_AXIS_INDEX:
            raise ValueError("scatter overlays must live on the overlay axis.")
        if self.style_width < 0:
            raise ValueError("style_width must be >= 0.")
        object.__setattr__(self, "points", tuple(self.points))

    @property
    def values(self) -> tuple[float | None, ...]:
        if self.kind == "scatter":
            return tuple(point.synthetic_value for point in self.points)
        return tuple(value for _, value in self.points)

    def to_dict(self) -> dict[str, Any]:
        if self.kind == "scatter":
            return {
                "name": self.name,
                "type": "scatter",
                "yAxisIndex": self.axis_index,
                "data": [point.to_dict() for point in self.points],
                "itemStyle": {"color": self.color},
            }
        return {
            "name": self.name,
            "type": "line",
            "yAxisIndex": self.axis_index,
            "data": [[isoformat_utc(timestamp), value] for timestamp, value in self.points],
            "lineStyle": {"color": self.color, "width": self.style_width},
            "itemStyle": {"color": self.color},
            "showSymbol": False,
        }


@dataclass(slots=True, frozen=True)
class TooltipContentItem:
    name: str
    value: str
    color: str | None = None
    data_index: int | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "value": self.value,
            "color": self.color,
            "dataIndex": self.data_index,
        }


@dataclass(slots=True, frozen=True)
class TooltipModel:
    title: str
    type: TooltipType
    content: tuple[TooltipContentItem, ...] = ()
    sha: str | None = None
    commit_url: str | None = None

    def __post_init__(self) -> None:
        if self.type not in ALLOWED_TOOLTIP_TYPES:
            raise ValueError(f"Unsupported tooltip type: {self.type!r}.")
        object.__setattr__(self, "content", tuple(self.content))

    def to_dict(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "type": self.type,
            "content": [item.to_dict() for item in self.content],
            "sha": self.sha,
            "commitUrl": self.commit_url,
        }


@dataclass(slots=True, frozen=True)
class ZoomRange:
    start: str
    end: str

    def __post_init__(self) -> None:
        if parse_isoformat(self.start) >= parse_isoformat(self.end):
            raise ValueError(f"start must be < end, got {self.start!r} >= {self.end!r}.")

    def to_dict(self) -> dict[str, str]:
        return {"start": self.start, "end": self.end}


@dataclass(slots=True, frozen=True)
class RenderState:
    tooltip: TooltipModel | None = None
    width: int = 0

    def __post_init__(self) -> None:
        if self.width < 0:
            raise ValueError("width must be >= 0.")
