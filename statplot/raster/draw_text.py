from __future__ import annotations

from functools import lru_cache
import logging
from pathlib import Path

import numpy as np
from PIL import Image, ImageDraw, ImageFont

from statplot.styles import DEFAULT_FONT_FAMILY, TextStyle


LOGGER = logging.getLogger(__name__)

ITALIC_SHEAR = 0.2
FONT_FALLBACK_PATTERNS = (
    "dejavusans",
    "dejavu sans",
    "liberationsans",
    "helvetica",
    "arial",
    "freesans",
)
FONT_DIRS = (
    Path.home() / "Library" / "Fonts",
    Path("/Library/Fonts"),
    Path("/System/Library/Fonts"),
    Path("/System/Library/Fonts/Supplemental"),
    Path("/usr/share/fonts"),
    Path("/usr/local/share/fonts"),
    Path.home() / ".fonts",
)

Font = ImageFont.FreeTypeFont | ImageFont.ImageFont


def text_mask(text: str, style: TextStyle, *, rotate_deg: int = 0) -> np.ndarray:
    font = load_font(style.font_family, style.size_px)
    mask = _render_mask(text, font)
    if style.weight == "bold":
        mask = _embolden(mask, 2)
    if style.slant == "italic":
        mask = _shear(mask, ITALIC_SHEAR)
    return _rotate_mask(mask, rotate_deg=rotate_deg)


def text_size(text: str, style: TextStyle, *, rotate_deg: int = 0) -> tuple[int, int]:
    font = load_font(style.font_family, style.size_px)
    if not text:
        return (0, line_height(style))
    left, top, right, bottom = font.getbbox(text)
    w = max(0, int(right - left))
    h = max(1, int(bottom - top))
    if style.weight == "bold":
        w += 1
    if style.slant == "italic":
        w += int(np.ceil(h * ITALIC_SHEAR))
    if _normalize_quarter_turns(rotate_deg) % 2 == 1:
        return (h, w)
    return (w, h)


def line_height(style: TextStyle) -> int:
    font = load_font(style.font_family, style.size_px)
    if isinstance(font, ImageFont.FreeTypeFont):
        ascent, descent = font.getmetrics()
        return max(1, int(ascent + descent))
    left, top, right, bottom = font.getbbox("Ag")
    return max(1, int(bottom - top))


@lru_cache(maxsize=64)
def load_font(font_family: str, font_size_px: float) -> Font:
    size = max(1, int(round(font_size_px)))
    font_path, exact = _resolve_font_path(font_family)
    if font_path is None:
        LOGGER.warning("font family %r not found; using Pillow's default font", font_family)
        return ImageFont.load_default(size=size)
    if not exact:
        LOGGER.warning("font family %r not found; falling back to %s", font_family, font_path.name)
    return ImageFont.truetype(str(font_path), size=size)


@lru_cache(maxsize=256)
def _render_mask(text: str, font: Font) -> np.ndarray:
    left, top, right, bottom = font.getbbox(text)
    width = max(1, int(right - left))
    height = max(1, int(bottom - top))
    image = Image.new("L", (width, height), 0)
    draw = ImageDraw.Draw(image)
    draw.text((-left, -top), text, fill=255, font=font)
    return np.asarray(image, dtype=np.uint8)


@lru_cache(maxsize=32)
def _resolve_font_path(font_family: str) -> tuple[Path | None, bool]:
    """Font file for `font_family`, and whether it matched the family itself rather than a fallback."""
    wanted = font_family.strip().lower() if font_family.strip() else DEFAULT_FONT_FAMILY.lower()

    candidates: list[Path] = []
    for base in FONT_DIRS:
        if not base.exists():
            continue
        for ext in ("*.ttf", "*.otf", "*.ttc"):
            candidates.extend(sorted(base.rglob(ext)))

    for pattern in (wanted,) + FONT_FALLBACK_PATTERNS:
        path = _match_font(pattern, candidates)
        if path is not None:
            return path, pattern == wanted
    return None, False


def _match_font(pattern: str, candidates: list[Path]) -> Path | None:
    p = pattern.replace(" ", "")
    for path in candidates:
        stem = path.stem.lower().replace(" ", "").replace("-", "")
        if stem == p:
            return path
    for path in candidates:
        stem = path.stem.lower().replace(" ", "")
        if p in stem:
            return path
    return None


def _embolden(mask: np.ndarray, embolden_px: int) -> np.ndarray:
    out = np.zeros((mask.shape[0], mask.shape[1] + embolden_px - 1), dtype=np.uint8)
    for shift in range(embolden_px):
        np.maximum(out[:, shift : shift + mask.shape[1]], mask, out=out[:, shift : shift + mask.shape[1]])
    return out


def _shear(mask: np.ndarray, factor: float) -> np.ndarray:
    h, w = mask.shape
    extra = int(np.ceil(h * factor))
    image = Image.fromarray(mask)
    sheared = image.transform(
        (w + extra, h),
        Image.Transform.AFFINE,
        (1.0, factor, -factor * h, 0.0, 1.0, 0.0),
        resample=Image.Resampling.BILINEAR,
    )
    return np.asarray(sheared, dtype=np.uint8)


def _normalize_quarter_turns(rotate_deg: int) -> int:
    if rotate_deg % 90 != 0:
        raise ValueError("rotate_deg must be a multiple of 90")
    return (rotate_deg // 90) % 4


def _rotate_mask(mask: np.ndarray, *, rotate_deg: int) -> np.ndarray:
    turns = _normalize_quarter_turns(rotate_deg)
    if turns == 0:
        return mask
    return np.rot90(mask, k=turns)
