from .canvas import blend_mask, fill_rect, new_canvas
from .context import RasterContext
from .draw_lines import clip_segment, draw_polyline
from .draw_markers import draw_glyph, draw_markers
from .draw_text import line_height, load_font, text_mask, text_size

__all__ = [
    "RasterContext",
    "blend_mask",
    "clip_segment",
    "draw_glyph",
    "draw_markers",
    "draw_polyline",
    "fill_rect",
    "line_height",
    "load_font",
    "new_canvas",
    "text_mask",
    "text_size",
]
