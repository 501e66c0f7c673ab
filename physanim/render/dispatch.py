"""
Item dispatch: one render call per RenderItem, returning a RenderResult instead of raising.
Object kinds map to renderers through a table keyed by the closed ObjectKind catalog;
unknown tags take the explicit fallback arm (SKIPPED_UNKNOWN).
"""
import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable

from ..errors import ObjectRenderError
from ..graphics.canvas import Canvas
from ..graphics.fade import item_opacity
from ..graphics.glyphs import DEFAULT_GLYPH_COLOR, DEFAULT_GLYPH_HEIGHT, glyph_key_for
from ..graphics.primitives import (
    draw_arc,
    draw_arrow,
    draw_bezier,
    draw_circle,
    draw_line,
    draw_point,
    draw_polygon,
    draw_rectangle,
)
from ..graphics.text import draw_glyph, draw_text, draw_text_box
from ..physics import diagrams, renderers
from ..physics.params import flag, number, points, text
from ..scene.schema import Category, ObjectKind, RenderItem

logger = logging.getLogger(__name__)

Renderer = Callable[[Canvas, dict[str, Any], float], Any]


class RenderStatus(str, Enum):
    DRAWN = "drawn"
    SKIPPED_INVISIBLE = "skipped_invisible"
    SKIPPED_UNKNOWN = "skipped_unknown"
    SKIPPED_GLYPH = "skipped_glyph"
    FAILED = "failed"


@dataclass(frozen=True)
class RenderResult:
    """Outcome of one item's draw call in one frame."""
    status: RenderStatus
    category: Category
    type_tag: str
    opacity: float = 0.0
    state: Any = None
    error: ObjectRenderError | None = None

    @property
    def drawn(self) -> bool:
        return self.status is RenderStatus.DRAWN


# ---------------------------------------------------------------------------
# Primitive shape adapters: scene params → primitive calls
# ---------------------------------------------------------------------------


def _line(canvas: Canvas, p: dict[str, Any], t: float) -> None:
    draw_line(
        canvas,
        number(p, "x1"), number(p, "y1"), number(p, "x2"), number(p, "y2"),
        color=text(p, "color", "#fff"),
        line_width=number(p, "lineWidth", 2),
        dash=p.get("dash") or None,
    )


def _arrow(canvas: Canvas, p: dict[str, Any], t: float) -> None:
    draw_arrow(
        canvas,
        number(p, "x1"), number(p, "y1"), number(p, "x2"), number(p, "y2"),
        color=text(p, "color", "#fff"),
        line_width=number(p, "lineWidth", 2),
        head_length=number(p, "headLength", 15),
    )


def _circle(canvas: Canvas, p: dict[str, Any], t: float) -> None:
    draw_circle(
        canvas,
        number(p, "x"), number(p, "y"), number(p, "radius"),
        color=text(p, "color", "#fff"),
        fill=flag(p, "fill", True),
        line_width=number(p, "lineWidth", 2),
    )


def _polygon(canvas: Canvas, p: dict[str, Any], t: float) -> None:
    draw_polygon(
        canvas,
        points(p),
        color=text(p, "color", "#fff"),
        fill=flag(p, "fill", True),
        line_width=number(p, "lineWidth", 2),
    )


def _rectangle(canvas: Canvas, p: dict[str, Any], t: float) -> None:
    draw_rectangle(
        canvas,
        number(p, "x"), number(p, "y"), number(p, "width"), number(p, "height"),
        color=text(p, "color", "#fff"),
        fill=flag(p, "fill", True),
        line_width=number(p, "lineWidth", 2),
        angle=number(p, "angle", 0.0),
    )


def _arc(canvas: Canvas, p: dict[str, Any], t: float) -> None:
    draw_arc(
        canvas,
        number(p, "x"), number(p, "y"), number(p, "radius"),
        start_angle=number(p, "startAngle", 0.0),
        end_angle=number(p, "endAngle", 2 * math.pi),
        color=text(p, "color", "#fff"),
        line_width=number(p, "lineWidth", 2),
    )


def _bezier(canvas: Canvas, p: dict[str, Any], t: float) -> None:
    draw_bezier(
        canvas,
        number(p, "x1"), number(p, "y1"), number(p, "x2"), number(p, "y2"),
        number(p, "cpx1"), number(p, "cpy1"),
        number(p, "cpx2", None), number(p, "cpy2", None),
        color=text(p, "color", "#fff"),
        line_width=number(p, "lineWidth", 2),
    )


def _text_box(canvas: Canvas, p: dict[str, Any], t: float) -> None:
    draw_text_box(
        canvas,
        text(p, "text"),
        number(p, "x"), number(p, "y"),
        size=number(p, "size", 24),
        color=text(p, "color", "#fff"),
        bg_color=text(p, "bgColor", "rgba(0,0,0,0.5)"),
        padding=number(p, "padding", 8),
    )


def _point(canvas: Canvas, p: dict[str, Any], t: float) -> None:
    draw_point(
        canvas,
        number(p, "x"), number(p, "y"),
        color=text(p, "color", "#fff"),
        size=number(p, "size", 5),
        glow=flag(p, "glow", True),
    )


RENDERERS: dict[ObjectKind, Renderer] = {
    ObjectKind.LINE: _line,
    ObjectKind.ARROW: _arrow,
    ObjectKind.CIRCLE: _circle,
    ObjectKind.POLYGON: _polygon,
    ObjectKind.RECTANGLE: _rectangle,
    ObjectKind.ARC: _arc,
    ObjectKind.BEZIER: _bezier,
    ObjectKind.TEXT_BOX: _text_box,
    ObjectKind.POINT: _point,
    ObjectKind.PROJECTILE: renderers.render_projectile,
    ObjectKind.CIRCULAR: renderers.render_circular,
    ObjectKind.SHM: renderers.render_shm,
    ObjectKind.PENDULUM: renderers.render_pendulum,
    ObjectKind.SPRING_MASS: renderers.render_spring_mass,
    ObjectKind.WAVE: renderers.render_wave,
    ObjectKind.DECELERATION: renderers.render_deceleration,
    ObjectKind.RADIOACTIVE_DECAY: renderers.render_radioactive_decay,
    ObjectKind.IDEAL_GAS: renderers.render_ideal_gas,
    ObjectKind.COULOMB: diagrams.render_coulomb,
    ObjectKind.COLLISION: diagrams.render_collision,
    ObjectKind.REFRACTION: diagrams.render_refraction,
    ObjectKind.LENS: diagrams.render_lens,
    ObjectKind.FBD: diagrams.render_fbd,
    ObjectKind.GRAVITATION: diagrams.render_gravitation,
    ObjectKind.COORDINATE_SYSTEM: diagrams.render_coordinate_system,
    ObjectKind.INCLINED_PLANE: diagrams.render_inclined_plane,
    ObjectKind.ELECTRIC_FIELD: diagrams.render_electric_field,
    ObjectKind.DOPPLER: diagrams.render_doppler,
    ObjectKind.ELECTRIC_POTENTIAL: diagrams.render_electric_potential,
    ObjectKind.MAGNETIC_FORCE: diagrams.render_magnetic_force,
    ObjectKind.VECTOR: diagrams.render_vector,
    ObjectKind.GRAPH: diagrams.render_graph,
}


def render_item(
    canvas: Canvas,
    item: RenderItem,
    local_t: float,
    phase_duration: float,
    *,
    phase_name: str = "",
    glyph_color: str = DEFAULT_GLYPH_COLOR,
    glyph_height: float = DEFAULT_GLYPH_HEIGHT,
) -> RenderResult:
    """
    Draw one item at local phase time. Invisible items issue no draw call. Renderer errors
    from bad params become a FAILED result; the caller moves on to the next item.
    """
    opacity = item_opacity(item, local_t, phase_duration)
    if opacity <= 0:
        return RenderResult(RenderStatus.SKIPPED_INVISIBLE, item.category, item.type_tag, opacity)
    if item.category is Category.OBJECT and item.kind is None:
        return RenderResult(RenderStatus.SKIPPED_UNKNOWN, item.category, item.type_tag, opacity)

    layer = canvas.with_opacity(opacity)
    try:
        if item.category is Category.TEXT:
            _draw_text_item(layer, item.params)
            state = None
        elif item.category is Category.MATH:
            if not _draw_math_item(layer, item.params, glyph_color, glyph_height):
                return RenderResult(RenderStatus.SKIPPED_GLYPH, item.category, item.type_tag, opacity)
            state = None
        else:
            state = RENDERERS[item.kind](layer, item.params, local_t)
    except Exception as e:
        # One bad item (bad params, Pillow font errors, ...) fails alone; the frame goes on
        err = ObjectRenderError(f"{type(e).__name__}: {e}", type_tag=item.type_tag, phase=phase_name)
        return RenderResult(RenderStatus.FAILED, item.category, item.type_tag, opacity, error=err)
    return RenderResult(RenderStatus.DRAWN, item.category, item.type_tag, opacity, state=state)


def _draw_text_item(canvas: Canvas, p: dict[str, Any]) -> None:
    draw_text(
        canvas,
        text(p, "value"),
        number(p, "x", 0.0),
        number(p, "y", 0.0),
        size=number(p, "size", 24),
        color=text(p, "color", "#fff"),
        align=text(p, "align", "center"),
    )


def _draw_math_item(canvas: Canvas, p: dict[str, Any], default_color: str, default_height: float) -> bool:
    if canvas.glyphs is None:
        return False
    key = glyph_key_for(p, default_color=default_color, default_height=default_height)
    entry = canvas.glyphs.get(key)
    if entry is None:
        # not pre-rendered (e.g. single-frame preview); resolve now, still at most once per key
        entry = canvas.glyphs.resolve(key)
    return draw_glyph(canvas, entry, number(p, "x", 0.0), number(p, "y", 0.0))
