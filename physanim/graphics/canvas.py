"""
Frame buffer and the drawing context handed to every draw call.
One RGB Pillow image per run, cleared at the top of each frame. Draws go through an
"RGBA" ImageDraw so colours with partial alpha (item opacity) blend onto the frame.
"""
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING

from PIL import Image, ImageDraw

from .colors import Color, parse_color, with_opacity
from .coords import CoordinateMapper

if TYPE_CHECKING:
    from .glyphs import GlyphCache


@dataclass(frozen=True)
class Canvas:
    """Frame image + its draw handle, coordinate mapper, current item opacity and glyph cache."""
    image: Image.Image
    draw: ImageDraw.ImageDraw
    mapper: CoordinateMapper
    opacity: float = 1.0
    glyphs: "GlyphCache | None" = None

    def color(self, value: str | None, default: str = "#ffffff") -> Color:
        """Parse a colour and apply the current opacity."""
        return with_opacity(parse_color(value, default), self.opacity)

    def with_opacity(self, opacity: float) -> "Canvas":
        return replace(self, opacity=opacity)


def new_canvas(
    mapper: CoordinateMapper,
    background: str = "#000000",
    *,
    glyphs: "GlyphCache | None" = None,
) -> Canvas:
    """Allocate the frame buffer for a run."""
    image = Image.new("RGB", (mapper.width, mapper.height), parse_color(background)[:3])
    return Canvas(image=image, draw=ImageDraw.Draw(image, "RGBA"), mapper=mapper, glyphs=glyphs)


def clear(canvas: Canvas, background: str) -> None:
    """Fill the whole frame with the background colour, in place."""
    canvas.image.paste(parse_color(background)[:3], (0, 0, canvas.image.width, canvas.image.height))


def frame_bytes(canvas: Canvas) -> bytes:
    """Raw RGBA bytes of the current frame. A copy, so the buffer can be reused right away."""
    return canvas.image.convert("RGBA").tobytes()
