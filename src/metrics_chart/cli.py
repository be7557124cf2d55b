from __future__ import annotations

import json
from pathlib import Path
from typing import Literal

import typer

from metrics_chart.chart.component import TimeSeriesChart
from metrics_chart.chart.serialize import json_safe
from metrics_chart.config import ChartSettings, load_settings
from metrics_chart.contracts import TimezonePolicy
from metrics_chart.formatting.time_axis import TimeAxisFormatter, coerce_instant
from metrics_chart.interaction.zoom import ZoomEventTranslator
from metrics_chart.io.read import load_panel_snapshot
from metrics_chart.logging import configure_logging

app = typer.Typer(no_args_is_help=True, add_completion=False)


def _load_chart_settings(config_path: Path | None) -> ChartSettings:
    try:
        return load_settings(config_path)
    except ValueError as exc:
        raise typer.BadParameter(f"Invalid chart settings: {exc}") from exc


def _parse_instant_argument(instant: str) -> object:
    text = instant.strip()
    if text.lstrip("-").isdigit():
        return int(text)
    return text


@app.command()
def compose(
    snapshot: Path = typer.Option(..., exists=True, readable=True, resolve_path=True),
    out: Path | None = typer.Option(None, resolve_path=True),
    config: Path | None = typer.Option(None, exists=True, readable=True, resolve_path=True),
    timezone: TimezonePolicy | None = typer.Option(
        None,
        help="Override the configured timezone policy for axis labels and tooltips.",
    ),
    log_level: str | None = typer.Option(
        None,
        help="Logging level; defaults to METRICS_CHART_LOG_LEVEL or INFO.",
    ),
) -> None:
    """Compose rendering options for a panel snapshot and emit them as JSON."""
    try:
        configure_logging(log_level)
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc
    settings = _load_chart_settings(config)
    if timezone is not None:
        settings.timezone = timezone
    try:
        loaded = load_panel_snapshot(snapshot)
    except ValueError as exc:
        raise typer.BadParameter(f"Invalid snapshot: {exc}") from exc

    chart = TimeSeriesChart(
        loaded.panel,
        deployments=loaded.deployments,
        annotations=loaded.annotations,
        settings=settings,
    )
    payload = json_safe(
        {
            "title": loaded.panel.title,
            "height": chart.height,
            "option": chart.chart_options,
        }
    )
    text = json.dumps(payload, indent=2, ensure_ascii=False)
    if out is None:
        typer.echo(text)
        return
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_text(text + "\n", encoding="utf-8")
    typer.echo(f"Chart options written to: {out}")


@app.command("format-time")
def format_time(
    instant: str = typer.Argument(..., help="ISO-8601 instant or epoch milliseconds."),
    timezone: TimezonePolicy = typer.Option(TimezonePolicy.DEFAULT_LOCAL),
    local_timezone: str | None = typer.Option(None, help="IANA zone used for LOCAL rendering."),
    tick: bool = typer.Option(False, help="Render an axis tick label instead of a title."),
) -> None:
    """Format an instant the way the chart renders axis ticks and tooltip titles."""
    granularity: Literal["tick", "title"] = "tick" if tick else "title"
    try:
        settings = ChartSettings(timezone=timezone, local_timezone=local_timezone)
        formatter = TimeAxisFormatter(local_timezone=settings.resolved_local_timezone())
        value = coerce_instant(_parse_instant_argument(instant))
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc
    typer.echo(formatter.format(value, settings.timezone, granularity))


@app.command()
def zoom(
    start: int = typer.Argument(..., help="Zoom window start in epoch milliseconds."),
    end: int = typer.Argument(..., help="Zoom window end in epoch milliseconds."),
) -> None:
    """Translate a raw zoom window into the emitted datazoom payload."""
    zoom_range = ZoomEventTranslator().translate({"startValue": start, "endValue": end})
    if zoom_range is None:
        typer.echo("Empty zoom range; no event emitted.")
        raise typer.Exit(code=1)
    typer.echo(json.dumps(zoom_range.to_dict()))
