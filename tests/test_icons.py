from __future__ import annotations

import pytest

from metrics_chart.chart.icons import ICON_PATHS, ROCKET_ICON, bundled_icon_path, icon_symbol


def test_icon_symbol_uses_bundled_paths_by_default() -> None:
    assert icon_symbol(ROCKET_ICON) == f"path://{ICON_PATHS[ROCKET_ICON]}"


def test_icon_symbol_accepts_custom_resolver() -> None:
    assert icon_symbol("scroll-handle", lambda name: f"{name}-content") == "path://scroll-handle-content"


def test_unknown_bundled_icon_is_rejected() -> None:
    with pytest.raises(ValueError, match="Unknown icon"):
        bundled_icon_path("anchor")
