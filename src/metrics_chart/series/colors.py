from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from metrics_chart.contracts import PaletteTheme, categorical_palette


@dataclass(frozen=True)
class SeriesColorAssigner:
    """Positional palette assignment shared by the series, legend and tooltip.

    The i-th name receives ``palette[i % len(palette)]``, so neighbours differ
    whenever the palette holds more than one color.
    """

    palette: tuple[str, ...]

    def __post_init__(self) -> None:
        if not self.palette:
            raise ValueError("palette must contain at least one color.")
        object.__setattr__(self, "palette", tuple(self.palette))

    @classmethod
    def for_theme(cls, theme: PaletteTheme = "light") -> "SeriesColorAssigner":
        return cls(palette=categorical_palette(theme))

    def color_at(self, index: int) -> str:
        return self.palette[index % len(self.palette)]

    def assign(self, names: Sequence[str]) -> dict[str, str]:
        return {name: self.color_at(index) for index, name in enumerate(names)}
