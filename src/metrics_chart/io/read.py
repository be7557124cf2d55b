"""Load dashboard-store snapshots (JSON or YAML) into chart input models.

A snapshot holds one panel plus the deployment and annotation events shown
on it::

    panel:
      title: Throughput
      type: area-chart
      y_label: Requests / Sec
      metrics:
        - label: Status Code
          unit: req/s
          values: [[1563272065.589, "5.55555"], ...]
    deployments:
      - created_at: 2019-07-16T10:14:25.589Z
        sha: f5bcd1d9
        commitUrl: https://example.com/-/commit/f5bcd1d9
    annotations:
      - starting_at: 2020-02-19T10:01:41Z
        title: Release
        description: Annotation description

Numeric timestamps are epoch seconds, as returned by Prometheus query ranges.
"""

from __future__ import annotations

import json
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any

import pandas as pd
import yaml

from metrics_chart.contracts import (
    ALLOWED_PANEL_TYPES,
    AnnotationNote,
    DeploymentEvent,
    MetricPanel,
    MetricQueryResult,
)

DEPLOYMENT_TIME_KEYS = ("created_at", "createdAt", "timestamp")
ANNOTATION_TIME_KEYS = ("starting_at", "startingAt", "from", "timestamp")


@dataclass(frozen=True)
class PanelSnapshot:
    panel: MetricPanel
    deployments: tuple[DeploymentEvent, ...] = ()
    annotations: tuple[AnnotationNote, ...] = ()


def parse_timestamp(raw_value: Any, *, field_name: str) -> datetime:
    if raw_value is None or isinstance(raw_value, bool):
        raise ValueError(f"{field_name} must be a timestamp, got {raw_value!r}")
    try:
        if isinstance(raw_value, (int, float)):
            # Round to whole milliseconds; float seconds can land just under the intended ms.
            parsed = pd.Timestamp(round(raw_value * 1000), unit="ms", tz="UTC")
        else:
            parsed = pd.Timestamp(raw_value)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"invalid timestamp for {field_name}: {raw_value!r}") from exc
    if pd.isna(parsed):
        raise ValueError(f"invalid timestamp for {field_name}: {raw_value!r}")
    if parsed.tzinfo is None:
        parsed = parsed.tz_localize("UTC")
    else:
        parsed = parsed.tz_convert("UTC")
    return parsed.to_pydatetime()


def parse_value(raw_value: Any, *, field_name: str) -> float | None:
    if raw_value is None:
        return None
    if isinstance(raw_value, bool):
        raise ValueError(f"{field_name} must be numeric, got {raw_value!r}")
    try:
        return float(raw_value)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"{field_name} must be numeric, got {raw_value!r}") from exc


def _first_key(payload: Mapping[str, Any], keys: Sequence[str]) -> Any:
    for key in keys:
        if payload.get(key) is not None:
            return payload[key]
    return None


def _parse_sample(raw_sample: Any, *, field_name: str) -> tuple[datetime, float | None]:
    if isinstance(raw_sample, Mapping):
        raw_timestamp = raw_sample.get("timestamp")
        raw_value = raw_sample.get("value")
    elif isinstance(raw_sample, (list, tuple)) and len(raw_sample) == 2:
        raw_timestamp, raw_value = raw_sample
    else:
        raise ValueError(f"{field_name} must be a [timestamp, value] pair")
    return (
        parse_timestamp(raw_timestamp, field_name=f"{field_name} timestamp"),
        parse_value(raw_value, field_name=f"{field_name} value"),
    )


def parse_metric_result(payload: Mapping[str, Any], *, index: int = 0) -> MetricQueryResult:
    label = payload.get("label") or payload.get("metric_id")
    if not isinstance(label, str) or not label.strip():
        raise ValueError(f"metrics[{index}] requires a non-empty label")
    samples = tuple(
        _parse_sample(sample, field_name=f"metrics[{index}].values[{position}]")
        for position, sample in enumerate(payload.get("values") or ())
    )
    return MetricQueryResult(label=label, unit=str(payload.get("unit") or ""), values=samples)


def parse_panel(payload: Mapping[str, Any]) -> MetricPanel:
    panel_type = str(payload.get("type") or "line-chart")
    if panel_type not in ALLOWED_PANEL_TYPES:
        raise ValueError(f"unsupported panel type: {panel_type}")
    metrics = tuple(
        parse_metric_result(metric, index=index)
        for index, metric in enumerate(payload.get("metrics") or ())
    )
    return MetricPanel(
        title=str(payload.get("title") or ""),
        metrics=metrics,
        panel_type=panel_type,  # type: ignore[arg-type]
        y_label=str(payload.get("y_label") or ""),
    )


def parse_deployments(items: Sequence[Mapping[str, Any]]) -> tuple[DeploymentEvent, ...]:
    deployments = []
    for index, item in enumerate(items):
        deployments.append(
            DeploymentEvent(
                timestamp=parse_timestamp(
                    _first_key(item, DEPLOYMENT_TIME_KEYS),
                    field_name=f"deployments[{index}].created_at",
                ),
                sha=item.get("sha"),
                commit_url=item.get("commitUrl") or item.get("commit_url"),
            )
        )
    return tuple(deployments)


def parse_annotations(items: Sequence[Mapping[str, Any]]) -> tuple[AnnotationNote, ...]:
    annotations = []
    for index, item in enumerate(items):
        annotations.append(
            AnnotationNote(
                timestamp=parse_timestamp(
                    _first_key(item, ANNOTATION_TIME_KEYS),
                    field_name=f"annotations[{index}].starting_at",
                ),
                title=item.get("title"),
                description=item.get("description"),
            )
        )
    return tuple(annotations)


def parse_panel_snapshot(payload: Mapping[str, Any]) -> PanelSnapshot:
    panel_payload = payload.get("panel")
    if not isinstance(panel_payload, Mapping):
        raise ValueError("snapshot requires a 'panel' mapping")
    return PanelSnapshot(
        panel=parse_panel(panel_payload),
        deployments=parse_deployments(payload.get("deployments") or ()),
        annotations=parse_annotations(payload.get("annotations") or ()),
    )


def load_panel_snapshot(path: Path) -> PanelSnapshot:
    with path.open("r", encoding="utf-8") as handle:
        if path.suffix == ".json":
            payload = json.load(handle)
        elif path.suffix in (".yaml", ".yml"):
            payload = yaml.safe_load(handle)
        else:
            raise ValueError(f"Unsupported snapshot file type: {path.suffix}")
    if not isinstance(payload, Mapping):
        raise ValueError("snapshot must be a mapping")
    return parse_panel_snapshot(payload)
