from __future__ import annotations

from dataclasses import dataclass
from typing import Literal


RGBA = tuple[int, int, int, int]
Glyph = Literal["circle", "ring", "square", "box", "plus", "cross", "triangle"]
FontWeight = Literal["normal", "bold"]
FontSlant = Literal["normal", "italic"]

BLACK: RGBA = (0, 0, 0, 255)
WHITE: RGBA = (255, 255, 255, 255)
GRAY: RGBA = (128, 128, 128, 255)
LIGHT_GRAY: RGBA = (179, 179, 179, 255)

DEFAULT_FONT_FAMILY = "DejaVu Sans"


@dataclass(frozen=True)
class TextStyle:
    font_family: str = DEFAULT_FONT_FAMILY
    size_px: float = 12.0
    color: RGBA = BLACK
    weight: FontWeight = "normal"
    slant: FontSlant = "normal"

    def __post_init__(self) -> None:
        if self.size_px <= 0:
            raise ValueError("TextStyle size_px must be > 0")


@dataclass(frozen=True)
class LineStyle:
    color: RGBA = BLACK
    width: float = 1.0
    dashes: tuple[float, ...] = ()

    def __post_init__(self) -> None:
        if self.width < 0:
            raise ValueError("LineStyle width must be >= 0")
        if any(d <= 0 for d in self.dashes):
            raise ValueError("LineStyle dash lengths must be > 0")


@dataclass(frozen=True)
class FillStyle:
    color: RGBA = GRAY


DEFAULT_TICK_STYLE = TextStyle(size_px=12.0)
DEFAULT_LEGEND_STYLE = TextStyle(size_px=12.0)
DEFAULT_LABEL_STYLE = TextStyle(size_px=16.0)
DEFAULT_AXIS_STYLE = LineStyle(color=BLACK, width=1.0)

# Cycled by the *_datasets factories when several datasets are built at once.
COLOR_CYCLE: tuple[RGBA, ...] = (
    (31, 119, 180, 255),
    (214, 39, 40, 255),
    (44, 160, 44, 255),
    (148, 103, 189, 255),
    (255, 127, 14, 255),
    (140, 86, 75, 255),
    (227, 119, 194, 255),
    (23, 190, 207, 255),
)
GLYPH_CYCLE: tuple[Glyph, ...] = ("circle", "ring", "plus", "square", "box", "triangle", "cross")
DASH_CYCLE: tuple[tuple[float, ...], ...] = (
    (),
    (6.0, 3.0),
    (2.0, 2.0),
    (8.0, 3.0, 2.0, 3.0),
    (12.0, 4.0),
)


def cycle_color(index: int, uses_color: bool) -> RGBA:
    if not uses_color:
        return BLACK
    return COLOR_CYCLE[index % len(COLOR_CYCLE)]


def cycle_glyph(index: int) -> Glyph:
    return GLYPH_CYCLE[index % len(GLYPH_CYCLE)]


def cycle_dashes(index: int) -> tuple[float, ...]:
    return DASH_CYCLE[index % len(DASH_CYCLE)]


def with_alpha(color: RGBA, alpha: float) -> RGBA:
    r, g, b, a = color
    return (r, g, b, int(max(0.0, min(1.0, alpha)) * a))
