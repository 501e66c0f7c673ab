"""
Glyph cache: math expression → rasterized bitmap at a target pixel height, memoized per
(expression, color, target height). Each distinct key is rasterized at most once, even when
several threads ask for it at the same time. Failures are cached too, so a bad expression is
tried once and then skipped on every frame.

Typesetting uses matplotlib's mathtext (no TeX install needed).
"""
import io
import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Callable, Iterable

from ..errors import GlyphRenderError
from .colors import parse_color, to_hex

if TYPE_CHECKING:
    from PIL import Image

logger = logging.getLogger(__name__)

DEFAULT_GLYPH_COLOR = "#fff"
DEFAULT_GLYPH_HEIGHT = 28.0

# mathtext measures in points; at 72 dpi one point is one pixel
MATHTEXT_NATIVE_DPI = 72.0

# matplotlib is not thread-safe; parse + savefig run one at a time
_MPL_LOCK = threading.Lock()

Rasterizer = Callable[[str, str, float], "Image.Image"]


@dataclass(frozen=True)
class GlyphKey:
    expression: str
    color: str
    target_height: float


@dataclass(frozen=True)
class GlyphEntry:
    """Rasterized glyph (RGBA) or a failed marker."""
    key: GlyphKey
    image: "Image.Image | None" = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.image is not None

    @property
    def width(self) -> int:
        return self.image.width if self.image is not None else 0

    @property
    def height(self) -> int:
        return self.image.height if self.image is not None else 0


@dataclass
class GlyphStats:
    hits: int = 0
    misses: int = 0
    renders: int = 0
    failures: int = 0

    def to_dict(self) -> dict[str, int]:
        return {"hits": self.hits, "misses": self.misses, "renders": self.renders, "failures": self.failures}


def glyph_key_for(
    params: dict[str, Any],
    *,
    default_color: str = DEFAULT_GLYPH_COLOR,
    default_height: float = DEFAULT_GLYPH_HEIGHT,
) -> GlyphKey:
    """Cache key for a math item. Falsy color/targetHeight fall back to defaults."""
    height = params.get("targetHeight") or default_height
    return GlyphKey(
        expression=str(params.get("latex", "")),
        color=str(params.get("color") or default_color),
        target_height=float(height),
    )


def _delimit(expression: str) -> str:
    s = expression.strip()
    if s.startswith("$") and s.endswith("$") and len(s) > 1:
        return s
    return f"${s}$"


class MathTextRasterizer:
    """
    Typesets with matplotlib mathtext and scales to the target height.
    Natural size is measured in points at 72 dpi; render dpi = 72 × target / natural × calibration.
    calibration stays 1.0 unless a font setup renders consistently off-size.
    """

    def __init__(self, *, fontsize: float = 12.0, calibration: float = 1.0):
        self.fontsize = fontsize
        self.calibration = calibration

    def __call__(self, expression: str, color: str, target_height: float) -> "Image.Image":
        from matplotlib.figure import Figure
        from matplotlib.font_manager import FontProperties
        from matplotlib.mathtext import MathTextParser
        from PIL import Image

        if not expression or not expression.strip():
            raise GlyphRenderError("Empty expression", expression=expression)
        text = _delimit(expression)
        prop = FontProperties(size=self.fontsize)
        hex_color = to_hex(parse_color(color, DEFAULT_GLYPH_COLOR))

        buf = io.BytesIO()
        with _MPL_LOCK:
            try:
                width, height, depth, _, _ = MathTextParser("path").parse(
                    text, dpi=MATHTEXT_NATIVE_DPI, prop=prop
                )
            except ValueError as e:
                raise GlyphRenderError(f"mathtext could not parse: {e}", expression=expression) from e
            if width <= 0 or height <= 0:
                raise GlyphRenderError("Typeset output is empty", expression=expression)
            dpi = MATHTEXT_NATIVE_DPI * float(target_height) / height * self.calibration
            fig = Figure(figsize=(width / MATHTEXT_NATIVE_DPI, height / MATHTEXT_NATIVE_DPI))
            fig.text(0, depth / height, text, fontproperties=prop, color=hex_color)
            fig.savefig(buf, dpi=dpi, format="png", transparent=True)

        buf.seek(0)
        img = Image.open(buf)
        img.load()
        img = img.convert("RGBA")
        if img.getbbox() is None:
            raise GlyphRenderError("Rasterized glyph is blank", expression=expression)
        return img


class GlyphCache:
    """Memoized glyph rasterization. Construct one per render run and inject it."""

    def __init__(self, rasterizer: Rasterizer | None = None, *, calibration: float = 1.0):
        self._rasterizer: Rasterizer = rasterizer or MathTextRasterizer(calibration=calibration)
        self._entries: dict[GlyphKey, GlyphEntry] = {}
        self._inflight: dict[GlyphKey, Future] = {}
        self._lock = threading.Lock()
        self.stats = GlyphStats()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def get(self, key: GlyphKey) -> GlyphEntry | None:
        """Cached entry without rendering (frame-time lookup)."""
        return self._entries.get(key)

    def get_or_render(self, expression: str, color: str, target_height: float) -> GlyphEntry:
        return self.resolve(GlyphKey(expression, color, float(target_height)))

    def resolve(self, key: GlyphKey) -> GlyphEntry:
        with self._lock:
            entry = self._entries.get(key)
            if entry is not None:
                self.stats.hits += 1
                return entry
            future = self._inflight.get(key)
            owner = future is None
            if owner:
                future = Future()
                self._inflight[key] = future
                self.stats.misses += 1
            else:
                self.stats.hits += 1
        if not owner:
            return future.result()

        entry = self._render(key)
        with self._lock:
            self._entries[key] = entry
            del self._inflight[key]
        future.set_result(entry)
        return entry

    def prerender(self, keys: Iterable[GlyphKey], max_workers: int = 4) -> list[GlyphEntry]:
        """Resolve every key, in parallel; returns once all are cached."""
        unique = list(dict.fromkeys(keys))
        if not unique:
            return []
        logger.info("Pre-rendering %d math expressions", len(unique))
        workers = max(1, min(max_workers, len(unique)))
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="glyph") as pool:
            entries = list(pool.map(self.resolve, unique))
        failed = sum(1 for e in entries if not e.ok)
        logger.info("Math expressions cached (%d ok, %d failed)", len(entries) - failed, failed)
        return entries

    def _render(self, key: GlyphKey) -> GlyphEntry:
        logger.debug("Rendering %r with target height %s", key.expression[:30], key.target_height)
        try:
            image = self._rasterizer(key.expression, key.color, key.target_height)
        except GlyphRenderError as e:
            return self._failed(key, str(e))
        except Exception as e:  # rasterizer backends raise a wide variety of errors
            return self._failed(key, f"{type(e).__name__}: {e}")
        if image is None or image.width == 0 or image.height == 0:
            return self._failed(key, "Empty output")
        with self._lock:
            self.stats.renders += 1
        logger.debug("Glyph %r → %dx%d px", key.expression[:30], image.width, image.height)
        return GlyphEntry(key=key, image=image)

    def _failed(self, key: GlyphKey, message: str) -> GlyphEntry:
        logger.warning("Math rendering failed for %r: %s", key.expression, message)
        with self._lock:
            self.stats.renders += 1
            self.stats.failures += 1
        return GlyphEntry(key=key, error=message)
