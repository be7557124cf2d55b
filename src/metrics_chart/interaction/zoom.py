from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from metrics_chart.contracts import ZoomRange, is_absent, isoformat_utc
from metrics_chart.formatting.time_axis import coerce_instant

LOGGER = logging.getLogger(__name__)

_START_KEYS = ("startValue", "start_value")
_END_KEYS = ("endValue", "end_value")


def _first_present(raw: Mapping[str, Any], keys: tuple[str, ...]) -> Any:
    for key in keys:
        value = raw.get(key)
        if not is_absent(value):
            return value
    return None


class ZoomEventTranslator:
    """Turn the chart's native zoom state into a ``ZoomRange``."""

    def translate(self, raw: Mapping[str, Any]) -> ZoomRange | None:
        start_raw = _first_present(raw, _START_KEYS)
        end_raw = _first_present(raw, _END_KEYS)
        if start_raw is None or end_raw is None:
            LOGGER.debug("Zoom state without start/end values: %s", dict(raw))
            return None

        start = coerce_instant(start_raw)
        end = coerce_instant(end_raw)
        if start > end:
            start, end = end, start
        start_text = isoformat_utc(start)
        end_text = isoformat_utc(end)
        if start_text == end_text:
            LOGGER.debug("Ignoring empty zoom range at %s", start_text)
            return None
        return ZoomRange(start=start_text, end=end_text)
