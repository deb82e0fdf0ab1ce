from __future__ import annotations

from dataclasses import dataclass


DEFAULT_PADDING_RATIO = 0.01
DEFAULT_AXIS_PADDING_PX = 5.0
DEFAULT_TEXT_PADDING_PX = 4.0
DEFAULT_TICK_LENGTH_PX = 5.0
DEFAULT_MINOR_TICK_LENGTH_PX = 3.0
DEFAULT_TICK_LABEL_EXTENT_PX = 50.0
DEFAULT_TICK_SPACING_PX = 30.0
DEFAULT_LEGEND_PADDING_PX = 3.0
DEFAULT_LEGEND_INSET_PX = 0.0
DEFAULT_DEGENERATE_SPAN_RATIO = 0.05


@dataclass(frozen=True)
class LayoutConfig:
    """Spacing and density knobs for one layout pass. All lengths are device pixels."""

    padding_ratio: float = DEFAULT_PADDING_RATIO
    axis_padding_px: float = DEFAULT_AXIS_PADDING_PX
    text_padding_px: float = DEFAULT_TEXT_PADDING_PX
    tick_length_px: float = DEFAULT_TICK_LENGTH_PX
    minor_tick_length_px: float = DEFAULT_MINOR_TICK_LENGTH_PX
    tick_label_extent_px: float = DEFAULT_TICK_LABEL_EXTENT_PX
    tick_spacing_px: float = DEFAULT_TICK_SPACING_PX
    minor_ticks: bool = True
    legend_padding_px: float = DEFAULT_LEGEND_PADDING_PX
    legend_inset_px: float = DEFAULT_LEGEND_INSET_PX
    degenerate_span_ratio: float = DEFAULT_DEGENERATE_SPAN_RATIO

    def __post_init__(self) -> None:
        if self.padding_ratio < 0:
            raise ValueError("padding_ratio must be >= 0")
        for key in (
            "axis_padding_px",
            "text_padding_px",
            "tick_length_px",
            "minor_tick_length_px",
            "tick_spacing_px",
            "legend_padding_px",
            "legend_inset_px",
            "degenerate_span_ratio",
        ):
            if getattr(self, key) < 0:
                raise ValueError(f"{key} must be >= 0")
        if self.tick_label_extent_px + self.tick_spacing_px <= 0:
            raise ValueError("tick_label_extent_px + tick_spacing_px must be > 0")


DEFAULT_CONFIG = LayoutConfig()
