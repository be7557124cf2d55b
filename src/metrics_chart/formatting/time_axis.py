"""Timezone-aware timestamp labels for the chart x-axis and tooltip titles.

Every call takes the timezone policy explicitly. The "local" zone is a
constructor argument resolved once at configuration time, so formatting never
reads process-wide timezone or locale state.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone, tzinfo
from pathlib import Path
from typing import Any, Literal
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from metrics_chart.contracts import TimezonePolicy, ensure_aware, parse_isoformat

LOGGER = logging.getLogger(__name__)

Granularity = Literal["tick", "title"]

MONTH_ABBREVIATIONS = (
    "Jan",
    "Feb",
    "Mar",
    "Apr",
    "May",
    "Jun",
    "Jul",
    "Aug",
    "Sep",
    "Oct",
    "Nov",
    "Dec",
)
EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
HOST_LOCALTIME_PATH = Path("/etc/localtime")


def host_timezone(localtime_path: Path = HOST_LOCALTIME_PATH) -> tzinfo:
    """Return the host's DST-aware zone.

    ``TZ`` wins when it names an IANA zone, then the system ``localtime`` file.
    The fixed offset in force right now is only used when neither is usable.
    """
    tz_name = os.getenv("TZ", "").lstrip(":")
    if tz_name:
        try:
            return ZoneInfo(tz_name)
        except (ZoneInfoNotFoundError, ValueError):
            LOGGER.warning("TZ=%r is not an IANA zone; trying the system zone", tz_name)
    if localtime_path.is_file():
        try:
            with localtime_path.open("rb") as handle:
                return ZoneInfo.from_file(handle, key="localtime")
        except (OSError, ValueError):
            LOGGER.warning("Could not read %s; using the current UTC offset", localtime_path)
    LOGGER.warning("Host timezone is unknown; using a fixed offset that ignores DST changes")
    current = datetime.now().astimezone().tzinfo
    return current if current is not None else timezone.utc


def resolve_local_timezone(timezone_name: str | None = None) -> tzinfo:
    """Resolve the viewer's zone: an IANA name when given, else the host's zone."""
    if timezone_name:
        try:
            return ZoneInfo(timezone_name)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise ValueError(f"invalid local timezone: {timezone_name}") from exc
    return host_timezone()


def coerce_instant(value: Any) -> datetime:
    """Accept a datetime, epoch milliseconds or an ISO-8601 string."""
    if isinstance(value, datetime):
        return ensure_aware(value)
    if isinstance(value, bool):
        raise ValueError(f"Unsupported instant value: {value!r}")
    if isinstance(value, int):
        return EPOCH + timedelta(milliseconds=value)
    if isinstance(value, float):
        return EPOCH + timedelta(milliseconds=round(value))
    if isinstance(value, str) and value.strip():
        return parse_isoformat(value)
    raise ValueError(f"Unsupported instant value: {value!r}")


def _hour12(hour: int) -> int:
    remainder = hour % 12
    return 12 if remainder == 0 else remainder


def _meridiem(hour: int) -> str:
    return "AM" if hour < 12 else "PM"


def gmt_offset_label(rendered: datetime) -> str:
    offset = rendered.utcoffset() or timedelta(0)
    total_minutes = int(offset.total_seconds() // 60)
    sign = "-" if total_minutes < 0 else "+"
    hours, minutes = divmod(abs(total_minutes), 60)
    return f"GMT{sign}{hours:02d}{minutes:02d}"


@dataclass(frozen=True)
class TimeAxisFormatter:
    local_timezone: tzinfo = timezone.utc

    def zone_for(self, policy: TimezonePolicy | str | None) -> tzinfo:
        if TimezonePolicy.parse(policy).is_utc:
            return timezone.utc
        return self.local_timezone

    def render(self, instant: Any, policy: TimezonePolicy | str | None) -> datetime:
        return coerce_instant(instant).astimezone(self.zone_for(policy))

    def tick_label(self, instant: Any, policy: TimezonePolicy | str | None) -> str:
        rendered = self.render(instant, policy)
        return f"{_hour12(rendered.hour)}:{rendered.minute:02d} {_meridiem(rendered.hour)}"

    def title_label(self, instant: Any, policy: TimezonePolicy | str | None) -> str:
        rendered = self.render(instant, policy)
        month = MONTH_ABBREVIATIONS[rendered.month - 1]
        return (
            f"{rendered.day} {month} {rendered.year}, "
            f"{_hour12(rendered.hour)}:{rendered.minute:02d}{_meridiem(rendered.hour)} "
            f"({gmt_offset_label(rendered)})"
        )

    def format(
        self,
        instant: Any,
        policy: TimezonePolicy | str | None = TimezonePolicy.DEFAULT_LOCAL,
        granularity: Granularity = "title",
    ) -> str:
        if granularity == "tick":
            return self.tick_label(instant, policy)
        if granularity == "title":
            return self.title_label(instant, policy)
        raise ValueError(f"Unsupported granularity: {granularity!r}")


@dataclass(frozen=True)
class AxisTickFormatter:
    """x-axis label callback bound to one formatter and policy."""

    formatter: TimeAxisFormatter
    policy: TimezonePolicy = TimezonePolicy.DEFAULT_LOCAL

    def __call__(self, value: Any) -> str:
        return self.formatter.tick_label(value, self.policy)
