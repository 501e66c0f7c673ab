"""
Text rendering: captions, labelled boxes, and cached math glyphs.
Uses Pillow for fonts and drawing.
"""
import logging
from functools import lru_cache
from typing import TYPE_CHECKING

from PIL import ImageFont

from .canvas import Canvas

if TYPE_CHECKING:
    from .glyphs import GlyphEntry

logger = logging.getLogger(__name__)

_FONT_CANDIDATES = (
    "Inter-Regular.ttf",
    "arial.ttf",
    "Arial.ttf",
    "/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf",
    "DejaVuSans.ttf",
)
_BOLD_FONT_CANDIDATES = (
    "arialbd.ttf",
    "Arial Bold.ttf",
    "/usr/share/fonts/truetype/dejavu/DejaVuSans-Bold.ttf",
    "DejaVuSans-Bold.ttf",
)

# textAlign → Pillow anchor (vertical middle, like a canvas textBaseline="middle")
_ANCHORS = {"center": "mm", "left": "lm", "right": "rm", "start": "lm", "end": "rm"}


@lru_cache(maxsize=64)
def get_font(size: int, bold: bool = False) -> ImageFont.FreeTypeFont | ImageFont.ImageFont:
    """First available TrueType font at size; Pillow's built-in font otherwise."""
    candidates = (_BOLD_FONT_CANDIDATES + _FONT_CANDIDATES) if bold else _FONT_CANDIDATES
    for name in candidates:
        try:
            return ImageFont.truetype(name, size)
        except (OSError, IOError):
            continue
    logger.debug("No TrueType font found; using Pillow default at %spx", size)
    return ImageFont.load_default(size=size)


def draw_text_px(
    canvas: Canvas,
    value: str,
    px: float,
    py: float,
    *,
    size: float = 24,
    color: str = "#fff",
    anchor: str = "mm",
    bold: bool = False,
) -> None:
    """Text at a pixel position with a Pillow anchor."""
    if value is None or str(value) == "":
        return
    font = get_font(max(1, int(round(size))), bold)
    canvas.draw.text((px, py), str(value), font=font, fill=canvas.color(color), anchor=anchor)


def draw_text(
    canvas: Canvas,
    value: str,
    x: float,
    y: float,
    *,
    size: float = 24,
    color: str = "#fff",
    align: str = "center",
) -> None:
    """Single-line text vertically centred on a world position."""
    px, py = canvas.mapper.to_px(x, y)
    draw_text_px(canvas, value, px, py, size=size, color=color, anchor=_ANCHORS.get(align, "mm"))


def draw_text_box(
    canvas: Canvas,
    text: str,
    x: float,
    y: float,
    *,
    size: float = 24,
    color: str = "#fff",
    bg_color: str = "rgba(0,0,0,0.5)",
    padding: float = 8,
) -> None:
    """Centred text over a padded background box."""
    font = get_font(max(1, int(round(size))))
    left, _, right, _ = canvas.draw.textbbox((0, 0), str(text), font=font)
    width = (right - left) + padding * 2
    height = size + padding * 2
    px, py = canvas.mapper.to_px(x, y)
    canvas.draw.rectangle(
        (px - width / 2, py - height / 2, px + width / 2, py + height / 2),
        fill=canvas.color(bg_color),
    )
    canvas.draw.text((px, py), str(text), font=font, fill=canvas.color(color), anchor="mm")


def draw_glyph(canvas: Canvas, entry: "GlyphEntry", x: float, y: float) -> bool:
    """
    Paste a cached math bitmap centred on a world position at the canvas opacity.
    Returns False (nothing drawn) for failed entries.
    """
    if not entry.ok or entry.image is None:
        return False
    img = entry.image
    px, py = canvas.mapper.to_px(x, y)
    left = int(round(px - img.width / 2))
    top = int(round(py - img.height / 2))
    mask = img.getchannel("A")
    if canvas.opacity < 1.0:
        factor = max(0.0, canvas.opacity)
        mask = mask.point(lambda v: int(v * factor))
    canvas.image.paste(img.convert("RGB"), (left, top), mask)
    return True

