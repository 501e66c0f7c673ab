"""
Graphics: coordinate mapping, fades, frame canvas, primitives, text and math glyphs.
"""
from .canvas import Canvas, clear, frame_bytes, new_canvas
from .coords import CoordinateMapper
from .fade import fade_in_alpha, fade_out_alpha, item_opacity, resolve_fades
from .glyphs import GlyphCache, GlyphEntry, GlyphKey, MathTextRasterizer, glyph_key_for
from .text import draw_glyph, draw_text, draw_text_box

__all__ = [
    "Canvas",
    "CoordinateMapper",
    "GlyphCache",
    "GlyphEntry",
    "GlyphKey",
    "MathTextRasterizer",
    "clear",
    "draw_glyph",
    "draw_text",
    "draw_text_box",
    "fade_in_alpha",
    "fade_out_alpha",
    "frame_bytes",
    "glyph_key_for",
    "item_opacity",
    "new_canvas",
    "resolve_fades",
]
