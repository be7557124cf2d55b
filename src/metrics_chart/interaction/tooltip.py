"""Hover payloads and the tooltip model built from them.

The rendering collaborator reports hovered points as loosely shaped dicts.
``parse_hover_params`` converts those into the closed ``SeriesHit`` variant and
``TooltipFormatter`` handles each variant explicitly; anything else is a
programming error and raises ``TypeError``.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Union

from metrics_chart.contracts import (
    AnnotationMetadata,
    DeploymentMetadata,
    TimezonePolicy,
    TooltipContentItem,
    TooltipModel,
    is_absent,
)
from metrics_chart.formatting.numbers import TOOLTIP_SIGNIFICANT_DIGITS, format_number
from metrics_chart.formatting.time_axis import TimeAxisFormatter, coerce_instant

LOGGER = logging.getLogger(__name__)

LINE_SUB_TYPES = frozenset({"line", "area"})
SCATTER_SUB_TYPE = "scatter"
MARK_POINT_COMPONENT = "markPoint"
ANNOTATIONS_NAME = "annotations"


@dataclass(frozen=True)
class LineHit:
    series_name: str
    value: float | None
    timestamp: datetime | None = None
    data_index: int | None = None


@dataclass(frozen=True)
class DeploymentHit:
    timestamp: datetime | None
    metadata: DeploymentMetadata | None = None


@dataclass(frozen=True)
class AnnotationHit:
    timestamp: datetime | None
    metadata: AnnotationMetadata | None = None


SeriesHit = Union[LineHit, DeploymentHit, AnnotationHit]


@dataclass(frozen=True)
class HoverPayload:
    value: datetime | None
    hits: tuple[SeriesHit, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "hits", tuple(self.hits))


def _optional_instant(value: Any) -> datetime | None:
    if value is None or value == "":
        return None
    return coerce_instant(value)


def _optional_text(value: Any) -> str | None:
    if value is None:
        return None
    return str(value)


def _mark_point_hit(raw: Mapping[str, Any]) -> AnnotationHit:
    data = raw.get("data")
    if not isinstance(data, Mapping):
        return AnnotationHit(timestamp=None)
    tooltip_data = data.get("tooltipData")
    metadata = None
    if isinstance(tooltip_data, Mapping):
        metadata = AnnotationMetadata(
            title=_optional_text(tooltip_data.get("title")),
            description=_optional_text(tooltip_data.get("content")),
        )
    return AnnotationHit(timestamp=_optional_instant(data.get("xAxis")), metadata=metadata)


def _scatter_hit(item: Mapping[str, Any]) -> SeriesHit:
    value = item.get("value")
    timestamp = _optional_instant(value[0]) if isinstance(value, (list, tuple)) and value else None
    data = item.get("data")
    tooltip_data = data.get("tooltipData") if isinstance(data, Mapping) else None
    name = (data.get("name") if isinstance(data, Mapping) else None) or item.get("name")

    if name == ANNOTATIONS_NAME:
        metadata = None
        if isinstance(tooltip_data, Mapping):
            metadata = AnnotationMetadata(
                title=_optional_text(tooltip_data.get("title")),
                description=_optional_text(tooltip_data.get("content")),
            )
        return AnnotationHit(timestamp=timestamp, metadata=metadata)

    deployment_metadata = None
    if isinstance(tooltip_data, Mapping):
        deployment_metadata = DeploymentMetadata(
            sha=_optional_text(tooltip_data.get("sha")),
            commit_url=_optional_text(tooltip_data.get("commitUrl")),
        )
    return DeploymentHit(timestamp=timestamp, metadata=deployment_metadata)


def _line_hit(item: Mapping[str, Any]) -> LineHit:
    value = item.get("value")
    timestamp: datetime | None = None
    number: float | None = None
    if isinstance(value, (list, tuple)) and len(value) >= 2:
        timestamp = _optional_instant(value[0])
        number = None if is_absent(value[1]) else float(value[1])
    data_index = item.get("dataIndex")
    return LineHit(
        series_name=str(item.get("seriesName") or ""),
        value=number,
        timestamp=timestamp,
        data_index=int(data_index) if data_index is not None else None,
    )


def parse_hover_params(raw: Mapping[str, Any]) -> HoverPayload:
    """Convert raw hover params from the chart library into a ``HoverPayload``."""
    if raw.get("componentType") == MARK_POINT_COMPONENT:
        hit = _mark_point_hit(raw)
        return HoverPayload(value=hit.timestamp, hits=(hit,))

    hits: list[SeriesHit] = []
    for item in raw.get("seriesData") or ():
        sub_type = item.get("componentSubType")
        if sub_type in LINE_SUB_TYPES:
            hits.append(_line_hit(item))
        elif sub_type == SCATTER_SUB_TYPE:
            hits.append(_scatter_hit(item))
        else:
            LOGGER.warning("Ignoring hover hit with unsupported series type %r", sub_type)
    return HoverPayload(value=_optional_instant(raw.get("value")), hits=tuple(hits))


def _is_absent_hit(hit: SeriesHit) -> bool:
    if isinstance(hit, LineHit):
        return is_absent(hit.value)
    if isinstance(hit, (DeploymentHit, AnnotationHit)):
        return hit.timestamp is None
    raise TypeError(f"Unsupported hover hit: {type(hit).__name__}")


@dataclass(frozen=True)
class TooltipFormatter:
    time_formatter: TimeAxisFormatter
    colors: Mapping[str, str] = field(default_factory=dict, hash=False)
    policy: TimezonePolicy = TimezonePolicy.DEFAULT_LOCAL
    significant_digits: int = TOOLTIP_SIGNIFICANT_DIGITS

    def _title(self, instant: datetime | None, policy: TimezonePolicy) -> str:
        if instant is None:
            return ""
        return self.time_formatter.title_label(instant, policy)

    def format(
        self,
        payload: HoverPayload,
        policy: TimezonePolicy | str | None = None,
    ) -> TooltipModel | None:
        resolved_policy = self.policy if policy is None else TimezonePolicy.parse(policy)
        present = [hit for hit in payload.hits if not _is_absent_hit(hit)]
        if not present:
            return None

        deployment = next((hit for hit in present if isinstance(hit, DeploymentHit)), None)
        if deployment is not None:
            metadata = deployment.metadata
            return TooltipModel(
                title=self._title(deployment.timestamp, resolved_policy),
                type="deployments",
                sha=metadata.sha if metadata else None,
                commit_url=metadata.commit_url if metadata else None,
            )

        annotation = next((hit for hit in present if isinstance(hit, AnnotationHit)), None)
        if annotation is not None:
            content: tuple[TooltipContentItem, ...] = ()
            if annotation.metadata is not None:
                content = (
                    TooltipContentItem(
                        name=annotation.metadata.title or "",
                        value=annotation.metadata.description or "",
                    ),
                )
            return TooltipModel(
                title=self._title(annotation.timestamp, resolved_policy),
                type="annotations",
                content=content,
            )

        line_hits = [hit for hit in present if isinstance(hit, LineHit)]
        hovered_at = payload.value if payload.value is not None else line_hits[0].timestamp
        return TooltipModel(
            title=self._title(hovered_at, resolved_policy),
            type="data",
            content=tuple(
                TooltipContentItem(
                    name=hit.series_name,
                    value=format_number(hit.value, self.significant_digits),
                    color=self.colors.get(hit.series_name),
                    data_index=hit.data_index,
                )
                for hit in line_hits
            ),
        )

    def __call__(self, raw: Mapping[str, Any]) -> TooltipModel | None:
        return self.format(parse_hover_params(raw))
