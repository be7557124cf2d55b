from __future__ import annotations

from pathlib import Path
from zoneinfo import ZoneInfo

import pytest

from metrics_chart.config import LOCAL_TIMEZONE_ENV, ChartSettings, load_settings
from metrics_chart.contracts import TimezonePolicy


def test_load_settings_defaults_without_path(monkeypatch) -> None:
    monkeypatch.delenv(LOCAL_TIMEZONE_ENV, raising=False)

    settings = load_settings(None)

    assert settings.timezone is TimezonePolicy.DEFAULT_LOCAL
    assert settings.local_timezone is None
    assert settings.height == 300
    assert settings.series.line_width == 2
    assert settings.series.overlay_symbol_size == 14
    assert settings.numbers.axis_significant_digits == 3
    assert settings.numbers.tooltip_significant_digits == 4


def test_load_settings_reads_yaml(tmp_path: Path) -> None:
    config_path = tmp_path / "chart.yaml"
    config_path.write_text(
        "\n".join(
            [
                "timezone: utc",
                "local_timezone: America/Los_Angeles",
                "height: 420",
                "legend:",
                "  max_text: Maximum",
                "series:",
                "  palette: dark",
                "option_overrides:",
                "  animation: false",
            ]
        ),
        encoding="utf-8",
    )

    settings = load_settings(config_path)

    assert settings.timezone is TimezonePolicy.UTC
    assert settings.resolved_local_timezone() == ZoneInfo("America/Los_Angeles")
    assert settings.height == 420
    assert settings.legend.max_text == "Maximum"
    assert settings.legend.average_text == "Avg"
    assert settings.series.palette == "dark"
    assert settings.option_overrides == {"animation": False}


def test_local_timezone_falls_back_to_environment(monkeypatch, tmp_path: Path) -> None:
    config_path = tmp_path / "chart.yaml"
    config_path.write_text("{}", encoding="utf-8")
    monkeypatch.setenv(LOCAL_TIMEZONE_ENV, "Europe/Berlin")

    settings = load_settings(config_path)

    assert settings.local_timezone == "Europe/Berlin"


def test_invalid_environment_timezone_is_rejected(monkeypatch) -> None:
    monkeypatch.setenv(LOCAL_TIMEZONE_ENV, "Nowhere/Special")

    with pytest.raises(ValueError, match="invalid local timezone"):
        load_settings(None)


def test_invalid_values_are_rejected(tmp_path: Path) -> None:
    with pytest.raises(ValueError, match="Unsupported timezone policy"):
        ChartSettings(timezone="MARS")
    with pytest.raises(ValueError, match="invalid local timezone"):
        ChartSettings(local_timezone="Nowhere/Special")
    with pytest.raises(ValueError):
        ChartSettings(height=0)
    with pytest.raises(ValueError):
        ChartSettings(colour="red")

    config_path = tmp_path / "chart.yaml"
    config_path.write_text("- not\n- a mapping\n", encoding="utf-8")
    with pytest.raises(ValueError, match="must be a mapping"):
        load_settings(config_path)


def test_local_timezone_is_resolved_once_per_value(monkeypatch) -> None:
    calls: list[str | None] = []

    def _fake_resolve(name: str | None = None) -> ZoneInfo:
        calls.append(name)
        return ZoneInfo(name or "UTC")

    settings = ChartSettings(local_timezone="America/Los_Angeles")
    monkeypatch.setattr("metrics_chart.config.resolve_local_timezone", _fake_resolve)

    first = settings.resolved_local_timezone()
    second = settings.resolved_local_timezone()
    settings.local_timezone = "Europe/Berlin"
    third = settings.resolved_local_timezone()

    assert first is second
    assert third == ZoneInfo("Europe/Berlin")
    assert calls == ["America/Los_Angeles", "Europe/Berlin"]
