from __future__ import annotations

from typing import Callable

IconResolver = Callable[[str], str]

ROCKET_ICON = "rocket"
SCROLL_HANDLE_ICON = "scroll-handle"

# 16x16 SVG path data for the icons used as chart glyphs.
ICON_PATHS: dict[str, str] = {
    ROCKET_ICON: (
        "M8 0c2.5 1.7 4 4.6 4 7.6V11l2 2v2h-3l-1-2H6l-1 2H2v-2l2-2V7.6C4 4.6 5.5 1.7 8 0z"
        "m0 5a1.5 1.5 0 1 0 0 3 1.5 1.5 0 0 0 0-3z"
    ),
    SCROLL_HANDLE_ICON: "M4 0h3v16H4zM9 0h3v16H9z",
}


def bundled_icon_path(name: str) -> str:
    try:
        return ICON_PATHS[name]
    except KeyError as exc:
        raise ValueError(f"Unknown icon: {name!r}") from exc


def icon_symbol(name: str, resolver: IconResolver = bundled_icon_path) -> str:
    """Return the ``path://`` symbol string the chart library expects for an icon."""
    return f"path://{resolver(name)}"
