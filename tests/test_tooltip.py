from __future__ import annotations

from datetime import datetime, timezone
from zoneinfo import ZoneInfo

import pytest

from metrics_chart.contracts import (
    AnnotationMetadata,
    DeploymentMetadata,
    OverlayPoint,
    TimezonePolicy,
    TooltipContentItem,
)
from metrics_chart.formatting.time_axis import TimeAxisFormatter
from metrics_chart.interaction.tooltip import (
    AnnotationHit,
    DeploymentHit,
    HoverPayload,
    LineHit,
    TooltipFormatter,
    parse_hover_params,
)

HOVERED_AT = "2019-07-16T10:14:25.589Z"
COLORS = {"Status Code": "#1F78D1", "Latency": "#1AAA55"}


def _formatter(local_timezone=timezone.utc, policy=TimezonePolicy.DEFAULT_LOCAL) -> TooltipFormatter:
    return TooltipFormatter(
        time_formatter=TimeAxisFormatter(local_timezone=local_timezone),
        colors=COLORS,
        policy=policy,
    )


def _line_item(name: str, value: float | None, data_index: int = 0) -> dict[str, object]:
    return {
        "seriesName": name,
        "componentSubType": "line",
        "value": [HOVERED_AT, value],
        "dataIndex": data_index,
    }


def _deployment_item(with_metadata: bool = True) -> dict[str, object]:
    data: dict[str, object] = {"name": "deployments"}
    if with_metadata:
        data["tooltipData"] = {
            "sha": "f5bcd1d9",
            "commitUrl": "https://example.com/-/commit/f5bcd1d9",
        }
    return {
        "seriesName": "annotations",
        "componentSubType": "scatter",
        "value": [HOVERED_AT, 3.0],
        "data": data,
    }


def test_data_tooltip_formats_values_and_shares_series_colors() -> None:
    tooltip = _formatter()(
        {"value": HOVERED_AT, "seriesData": [_line_item("Status Code", 5.55555)]}
    )

    assert tooltip is not None
    assert tooltip.type == "data"
    assert tooltip.title == "16 Jul 2019, 10:14AM (GMT+0000)"
    assert tooltip.content == (
        TooltipContentItem(name="Status Code", value="5.556", color="#1F78D1", data_index=0),
    )


def test_title_follows_timezone_policy() -> None:
    formatter = _formatter(local_timezone=ZoneInfo("America/Los_Angeles"))
    payload = parse_hover_params({"value": HOVERED_AT, "seriesData": [_line_item("Latency", 1.0)]})

    local = formatter.format(payload)
    utc = formatter.format(payload, TimezonePolicy.UTC)

    assert local is not None and local.title == "16 Jul 2019, 3:14AM (GMT-0700)"
    assert utc is not None and utc.title == "16 Jul 2019, 10:14AM (GMT+0000)"


def test_absent_hover_values_produce_no_tooltip() -> None:
    formatter = _formatter()

    assert formatter({"value": HOVERED_AT, "seriesData": [_line_item("Status Code", None)]}) is None
    assert formatter({"value": HOVERED_AT, "seriesData": []}) is None
    assert formatter.format(HoverPayload(value=None)) is None


def test_absent_line_values_are_left_out_of_content() -> None:
    tooltip = _formatter()(
        {
            "value": HOVERED_AT,
            "seriesData": [_line_item("Status Code", None), _line_item("Latency", 0.88888, 3)],
        }
    )

    assert tooltip is not None
    assert [item.name for item in tooltip.content] == ["Latency"]
    assert tooltip.content[0].value == "888.9m"
    assert tooltip.content[0].data_index == 3


def test_deployment_hit_yields_deployment_tooltip() -> None:
    tooltip = _formatter()(
        {"value": HOVERED_AT, "seriesData": [_line_item("Status Code", 1.0), _deployment_item()]}
    )

    assert tooltip is not None
    assert tooltip.type == "deployments"
    assert tooltip.title == "16 Jul 2019, 10:14AM (GMT+0000)"
    assert tooltip.sha == "f5bcd1d9"
    assert tooltip.commit_url == "https://example.com/-/commit/f5bcd1d9"


def test_deployment_without_metadata_has_no_sha() -> None:
    tooltip = _formatter()({"value": HOVERED_AT, "seriesData": [_deployment_item(False)]})

    assert tooltip is not None
    assert tooltip.type == "deployments"
    assert tooltip.sha is None
    assert tooltip.commit_url is None


def test_mark_point_hover_yields_annotation_tooltip() -> None:
    tooltip = _formatter()(
        {
            "componentType": "markPoint",
            "name": "annotations",
            "value": "Annotation title",
            "data": {
                "xAxis": "2020-02-19T10:01:41.000Z",
                "tooltipData": {"title": "Annotation title", "content": "Annotation description"},
            },
        }
    )

    assert tooltip is not None
    assert tooltip.type == "annotations"
    assert tooltip.title == "19 Feb 2020, 10:01AM (GMT+0000)"
    assert tooltip.content[0].value == "Annotation description"


def test_annotation_overlay_point_round_trips_through_hover() -> None:
    point = OverlayPoint(
        timestamp=datetime(2020, 2, 19, 10, 1, 41, tzinfo=timezone.utc),
        synthetic_value=3.0,
        kind="annotations",
        metadata=AnnotationMetadata(title="Release", description="Shipped v2"),
        symbol="path://rocket",
    )
    raw = {
        "seriesData": [
            {
                "seriesName": "annotations",
                "componentSubType": "scatter",
                "value": point.to_dict()["value"],
                "data": point.to_dict(),
            }
        ]
    }

    payload = parse_hover_params(raw)
    tooltip = _formatter().format(payload)

    assert payload.hits == (
        AnnotationHit(
            timestamp=point.timestamp,
            metadata=AnnotationMetadata(title="Release", description="Shipped v2"),
        ),
    )
    assert tooltip is not None
    assert tooltip.type == "annotations"
    assert tooltip.content == (TooltipContentItem(name="Release", value="Shipped v2"),)


def test_unknown_series_types_are_ignored() -> None:
    payload = parse_hover_params(
        {"value": HOVERED_AT, "seriesData": [{"seriesName": "x", "componentSubType": "bar"}]}
    )

    assert payload.hits == ()
    assert _formatter().format(payload) is None


def test_parse_hover_params_builds_closed_hit_variants() -> None:
    payload = parse_hover_params(
        {"value": HOVERED_AT, "seriesData": [_line_item("Status Code", 2.0), _deployment_item()]}
    )
    hovered = datetime(2019, 7, 16, 10, 14, 25, 589000, tzinfo=timezone.utc)

    assert payload.value == hovered
    assert payload.hits == (
        LineHit(series_name="Status Code", value=2.0, timestamp=hovered, data_index=0),
        DeploymentHit(
            timestamp=hovered,
            metadata=DeploymentMetadata(
                sha="f5bcd1d9", commit_url="https://example.com/-/commit/f5bcd1d9"
            ),
        ),
    )


def test_unsupported_hit_objects_raise_type_error() -> None:
    with pytest.raises(TypeError, match="Unsupported hover hit"):
        _formatter().format(HoverPayload(value=None, hits=(object(),)))  # type: ignore[arg-type]
