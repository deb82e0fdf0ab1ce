from __future__ import annotations

from statplot.metrics import DrawingContext, TextMetrics
from statplot.styles import TextStyle


HYPHEN = "-"


def wrap_text(metrics: TextMetrics, text: str, style: TextStyle, width: float) -> list[str]:
    """Greedily pack the words of `text` into lines no wider than `width`.

    A word that cannot fit on a line of its own is split with a hyphen. A line always
    keeps at least one character, so very narrow widths still make progress.
    """
    lines: list[str] = []
    current = ""
    for word in text.split():
        candidate = f"{current} {word}" if current else word
        if metrics.measure_text(candidate, style)[0] <= width:
            current = candidate
            continue
        if current:
            lines.append(current)
            current = ""
        while metrics.measure_text(word, style)[0] > width and len(word) > 1:
            cut = _hyphen_cut(metrics, word, style, width)
            lines.append(word[:cut] + HYPHEN)
            word = word[cut:]
        current = word
    if current:
        lines.append(current)
    return lines


def _hyphen_cut(metrics: TextMetrics, word: str, style: TextStyle, width: float) -> int:
    cut = 1
    for end in range(2, len(word)):
        if metrics.measure_text(word[:end] + HYPHEN, style)[0] > width:
            break
        cut = end
    return cut


def fixed_width_text_height(metrics: TextMetrics, text: str, style: TextStyle, width: float) -> float:
    return len(wrap_text(metrics, text, style, width)) * metrics.line_height(style)


def draw_fixed_width_text(
    ctx: DrawingContext,
    x: float,
    y: float,
    text: str,
    style: TextStyle,
    width: float,
) -> None:
    """Draw `text` wrapped to `width`, with (x, y) at the top centre of the block."""
    lh = ctx.line_height(style)
    for k, line in enumerate(wrap_text(ctx, text, style, width)):
        ctx.draw_text(x, y + lh * (k + 0.5), line, style)
