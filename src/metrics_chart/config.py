from __future__ import annotations

import os
from datetime import tzinfo
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, field_validator

from metrics_chart.contracts import TimezonePolicy
from metrics_chart.formatting.time_axis import resolve_local_timezone

DEFAULT_CHART_HEIGHT = 300
LOCAL_TIMEZONE_ENV = "METRICS_CHART_LOCAL_TIMEZONE"


class LegendSettings(BaseModel):
    max_text: str = "Max"
    average_text: str = "Avg"


class SeriesSettings(BaseModel):
    line_width: float = Field(default=2, gt=0)
    overlay_symbol_size: int = Field(default=14, ge=1)
    palette: Literal["light", "dark"] = "light"


class NumberFormatSettings(BaseModel):
    axis_significant_digits: int = Field(default=3, ge=1, le=12)
    tooltip_significant_digits: int = Field(default=4, ge=1, le=12)


class ChartSettings(BaseModel):
    model_config = ConfigDict(extra="forbid")

    timezone: TimezonePolicy = TimezonePolicy.DEFAULT_LOCAL
    local_timezone: str | None = None
    height: int = Field(default=DEFAULT_CHART_HEIGHT, ge=1)
    legend: LegendSettings = Field(default_factory=LegendSettings)
    series: SeriesSettings = Field(default_factory=SeriesSettings)
    numbers: NumberFormatSettings = Field(default_factory=NumberFormatSettings)
    option_overrides: dict[str, Any] = Field(default_factory=dict)
    _resolved_zone: tuple[str | None, tzinfo] | None = PrivateAttr(default=None)

    @field_validator("timezone", mode="before")
    @classmethod
    def _parse_timezone(cls, value: Any) -> TimezonePolicy:
        return TimezonePolicy.parse(value)

    @field_validator("local_timezone")
    @classmethod
    def _validate_local_timezone(cls, value: str | None) -> str | None:
        if value is None:
            return None
        resolve_local_timezone(value)
        return value

    def resolved_local_timezone(self) -> tzinfo:
        """Resolve the local zone once; re-resolved only if ``local_timezone`` changes."""
        cached = self._resolved_zone
        if cached is None or cached[0] != self.local_timezone:
            cached = (self.local_timezone, resolve_local_timezone(self.local_timezone))
            self._resolved_zone = cached
        return cached[1]


def load_settings(path: Path | None = None) -> ChartSettings:
    data: dict[str, Any] = {}
    if path is not None:
        with path.open("r", encoding="utf-8") as handle:
            data = yaml.safe_load(handle) or {}
    if not isinstance(data, dict):
        raise ValueError(f"chart settings must be a mapping, got {type(data).__name__}")

    settings = ChartSettings.model_validate(data)
    if settings.local_timezone is None:
        env_timezone = os.getenv(LOCAL_TIMEZONE_ENV)
        if env_timezone:
            resolve_local_timezone(env_timezone)
            settings.local_timezone = env_timezone
    return settings
