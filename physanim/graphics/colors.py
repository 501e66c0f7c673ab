"""
Colour parsing for scene values: "#rgb", "#rrggbb", "#rrggbbaa", CSS names,
"rgb(r,g,b)" and "rgba(r,g,b,a)" with a fractional alpha.
"""
import re
from functools import lru_cache

from PIL import ImageColor

_RGBA_FLOAT = re.compile(
    r"^rgba\(\s*(\d+)\s*,\s*(\d+)\s*,\s*(\d+)\s*,\s*([0-9]*\.?[0-9]+)\s*\)$", re.IGNORECASE
)

Color = tuple[int, int, int, int]


@lru_cache(maxsize=512)
def parse_color(value: str | None, default: str = "#ffffff") -> Color:
    """Parse a colour string to (r, g, b, a) 0–255. Unparseable values fall back to default."""
    if value is None:
        value = default
    value = str(value)
    m = _RGBA_FLOAT.match(value.strip())
    if m:
        r, g, b = (max(0, min(255, int(c))) for c in m.groups()[:3])
        a = float(m.group(4))
        alpha = int(round(a * 255)) if a <= 1 else int(a)
        return r, g, b, max(0, min(255, alpha))
    try:
        rgb = ImageColor.getrgb(value.strip())
    except ValueError:
        if value == default:
            raise
        return parse_color(default, default)
    if len(rgb) == 4:
        return rgb  # type: ignore[return-value]
    return rgb[0], rgb[1], rgb[2], 255


def with_opacity(color: Color, opacity: float) -> Color:
    """Scale a colour's alpha by opacity (0–1)."""
    r, g, b, a = color
    return r, g, b, int(round(a * max(0.0, min(1.0, opacity))))


def to_hex(color: Color) -> str:
    """#rrggbb for libraries that take hex strings (alpha dropped)."""
    return "#{:02x}{:02x}{:02x}".format(*color[:3])
