from __future__ import annotations

import math
from collections.abc import Mapping
from datetime import datetime
from enum import Enum
from typing import Any

from metrics_chart.contracts import isoformat_utc


def json_safe(value: Any) -> Any:
    """Convert composed options to plain JSON values.

    Formatter callables only exist for the in-process chart library and are
    dropped; datetimes become ISO-8601 UTC strings and non-finite floats null.
    """
    if isinstance(value, Mapping):
        return {str(key): json_safe(item) for key, item in value.items() if not callable(item)}
    if isinstance(value, (list, tuple)):
        return [json_safe(item) for item in value if not callable(item)]
    if isinstance(value, datetime):
        return isoformat_utc(value)
    if isinstance(value, Enum):
        return value.value
    if hasattr(value, "to_dict"):
        return json_safe(value.to_dict())
    if hasattr(value, "item"):
        try:
            value = value.item()
        except (TypeError, ValueError):
            pass
    if isinstance(value, float):
        return value if math.isfinite(value) else None
    if isinstance(value, (int, str, bool)) or value is None:
        return value
    return str(value)
