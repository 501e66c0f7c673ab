"""
Static physics diagrams: force vectors, field sketches, optics and plots. No time dependence;
t is accepted so every object renderer shares one signature.
"""
import math
from typing import Any

from ..graphics.canvas import Canvas
from ..graphics.primitives import (
    draw_arrow,
    draw_dot,
    draw_line,
    draw_rectangle,
    px_arrow,
    px_circle,
    px_line,
    px_polyline,
    px_rect,
)
from ..graphics.text import draw_text_px
from . import motion
from .params import flag, number, points, text, xy

FBD_FORCE_SCALE = 0.9
GRAVITATION_FORCE_SCALE = 1.2


def render_coulomb(canvas: Canvas, params: dict[str, Any], t: float = 0.0) -> motion.CoulombState:
    del t
    state = motion.coulomb(
        number(params, "q1"),
        number(params, "q2"),
        number(params, "r"),
        k=number(params, "k", motion.COULOMB_K),
    )
    draw_dot(canvas, -2, 0, 12, color="#ff0000")
    draw_dot(canvas, 2, 0, 10, color="#0000ff")
    if flag(params, "showForces", False):
        # like charges repel, unlike attract
        sign = 1 if number(params, "q1") * number(params, "q2") > 0 else -1
        draw_arrow(canvas, -2, 0, -2 - sign * 1.0, 0, color="#ffd700", line_width=3)
        draw_arrow(canvas, 2, 0, 2 + sign * 1.0, 0, color="#ffd700", line_width=3)
    return state


def render_collision(canvas: Canvas, params: dict[str, Any], t: float = 0.0) -> None:
    """Two spheres side by side (pre-collision snapshot)."""
    del t
    draw_dot(canvas, number(params, "x1", -2.0), 0, 12, color=text(params, "color1", "#ff0000"))
    draw_dot(canvas, number(params, "x2", 2.0), 0, 10, color=text(params, "color2", "#0000ff"))


def render_refraction(canvas: Canvas, params: dict[str, Any], t: float = 0.0) -> motion.RefractionState:
    """Interface along y = 0, normal along x = 0; incident ray arrives from the upper left."""
    del t
    state = motion.refraction(number(params, "angle1"), number(params, "n1"), number(params, "n2"))
    length = number(params, "rayLength", 2.0 * math.sqrt(2))
    draw_line(canvas, -4, 0, 4, 0, color="#666666", line_width=2)
    draw_line(canvas, 0, -3, 0, 3, color="#444444", line_width=1, dash=[6, 4])

    a1 = math.radians(state.incident)
    draw_line(canvas, -length * math.sin(a1), length * math.cos(a1), 0, 0, color="#ffff00", line_width=2)
    if state.refracted is None:
        draw_line(canvas, 0, 0, length * math.sin(a1), length * math.cos(a1), color="#ffff00", line_width=2)
    else:
        a2 = math.radians(state.refracted)
        draw_line(canvas, 0, 0, length * math.sin(a2), -length * math.cos(a2), color="#ffff00", line_width=2)
    return state


def render_lens(canvas: Canvas, params: dict[str, Any], t: float = 0.0) -> motion.LensState:
    del t
    u = number(params, "u")
    state = motion.lens(number(params, "f"), u)
    draw_line(canvas, 0, -3, 0, 3, color="#00ffff", line_width=3)
    draw_dot(canvas, u, 0, 6, color="#ff0000")
    if math.isfinite(state.image_distance):
        draw_dot(canvas, state.image_distance, 0, 6, color="#00ff00")
    return state


def render_fbd(canvas: Canvas, params: dict[str, Any], t: float = 0.0) -> None:
    """Block with labelled force arrows; forces are [{fx, fy, label, color}]."""
    del t
    x = number(params, "x", 0.0)
    y = number(params, "y", 0.0)
    draw_rectangle(canvas, x, y, 0.8, 0.8, color=text(params, "color", "#4ecdc4"))
    for force in params.get("forces") or []:
        dx = float(force["fx"]) * FBD_FORCE_SCALE
        dy = float(force["fy"]) * FBD_FORCE_SCALE
        draw_arrow(canvas, x, y, x + dx, y + dy, color=force.get("color") or "#ffcc00", line_width=3, head_length=14)
        label = force.get("label")
        if label:
            px, py = canvas.mapper.to_px(x + dx * 1.15, y + dy * 1.15)
            draw_text_px(canvas, label, px, py, size=18, color="#ffffff")


_DEFAULT_BODY1 = {"x": -2, "y": 0, "m": 5, "label": "m₁", "color": "#ff6b6b"}
_DEFAULT_BODY2 = {"x": 2, "y": 0, "m": 10, "label": "m₂", "color": "#4ecdc4"}


def render_gravitation(canvas: Canvas, params: dict[str, Any], t: float = 0.0) -> None:
    """Two masses, the line joining them, equal and opposite attraction arrows, and r."""
    del t
    m = canvas.mapper
    body1 = {**_DEFAULT_BODY1, **(params.get("body1") or {})}
    body2 = {**_DEFAULT_BODY2, **(params.get("body2") or {})}
    x1, y1 = float(body1["x"]), float(body1["y"])
    x2, y2 = float(body2["x"]), float(body2["y"])

    if flag(params, "showLine", True):
        draw_line(canvas, x1, y1, x2, y2, color="#888", line_width=2, dash=[6, 4])

    for body, bx, by in ((body1, x1, y1), (body2, x2, y2)):
        px, py = m.to_px(bx, by)
        px_circle(canvas, (px, py), m.px_per_unit * 0.35, color=str(body["color"]))
        draw_text_px(canvas, str(body["label"]), px - 10, py - 15, size=18, color="#fff", anchor="ls")

    if flag(params, "showForces", True):
        r = math.hypot(x2 - x1, y2 - y1)
        if r == 0:
            raise ValueError("gravitation bodies coincide")
        ux, uy = (x2 - x1) / r, (y2 - y1) / r
        s = GRAVITATION_FORCE_SCALE
        draw_arrow(canvas, x1, y1, x1 + ux * s, y1 + uy * s, color="#ffd700", line_width=3)
        draw_arrow(canvas, x2, y2, x2 - ux * s, y2 - uy * s, color="#ffd700", line_width=3)
        for fx, fy in ((x1 + ux * 1.3, y1 + uy * 1.3), (x2 - ux * 1.3, y2 - uy * 1.3)):
            px, py = m.to_px(fx, fy)
            draw_text_px(canvas, "F", px, py, size=16, color="#ffd700", anchor="ls")

    if flag(params, "showDistance", True):
        px, py = m.to_px((x1 + x2) / 2, (y1 + y2) / 2)
        draw_text_px(canvas, "r", px, py - 8, size=16, color="#aaa", anchor="ls")


def render_coordinate_system(canvas: Canvas, params: dict[str, Any], t: float = 0.0) -> None:
    """
    Grid, axes, labelled points, displacement P→Q and an optional force vector, fitted into a
    pixel box (boxX, boxY, boxWidth, boxHeight) with its own local scale.
    """
    del t
    pts_raw = params.get("points") or []
    pts = [(xy(p), p if isinstance(p, dict) else {}) for p in pts_raw]
    force = params.get("force") or None
    box_w = number(params, "boxWidth", 600.0)
    box_h = number(params, "boxHeight", 600.0)
    box_x = number(params, "boxX", 60.0)
    box_y = number(params, "boxY", 100.0)

    px_rect(canvas, (box_x, box_y, box_x + box_w, box_y + box_h), color="rgba(255,255,255,0.5)", fill=False)

    world = [p for p, _ in pts]
    if force and force.get("origin"):
        ox, oy = xy(force["origin"])
        world.append((ox, oy))
        if force.get("components"):
            fx, fy = xy(force["components"])
            world.append((ox + fx, oy + fy))
    if not world:
        return

    pad = 1.0
    min_x = min(p[0] for p in world) - pad
    max_x = max(p[0] for p in world) + pad
    min_y = min(p[1] for p in world) - pad
    max_y = max(p[1] for p in world) + pad
    scale = min(box_w * 0.9 / max(max_x - min_x, 0.1), box_h * 0.9 / max(max_y - min_y, 0.1))
    cx, cy = box_x + box_w / 2, box_y + box_h / 2
    mid_x, mid_y = (min_x + max_x) / 2, (min_y + max_y) / 2

    def bx(wx: float) -> float:
        return cx + (wx - mid_x) * scale

    def by(wy: float) -> float:
        return cy - (wy - mid_y) * scale

    if flag(params, "showGrid", True):
        for i in range(math.ceil(min_x), math.floor(max_x) + 1):
            px_line(canvas, (bx(i), box_y), (bx(i), box_y + box_h), color="rgba(120,120,120,0.6)", line_width=1)
        for i in range(math.ceil(min_y), math.floor(max_y) + 1):
            px_line(canvas, (box_x, by(i)), (box_x + box_w, by(i)), color="rgba(120,120,120,0.6)", line_width=1)

    if flag(params, "showAxes", True):
        labels = flag(params, "showLabels", True)
        ax, ay = bx(0), by(0)
        if box_y <= ay <= box_y + box_h:
            px_line(canvas, (box_x, ay), (box_x + box_w, ay), color="#666666", line_width=2)
            if labels:
                for i in range(math.ceil(min_x), math.floor(max_x) + 1):
                    x = bx(i)
                    if box_x + 5 < x < box_x + box_w - 5:
                        px_line(canvas, (x, ay - 4), (x, ay + 4), color="#666666", line_width=2)
                        draw_text_px(canvas, str(i), x, ay + 8, size=11, color="#888888", anchor="mt")
        if box_x <= ax <= box_x + box_w:
            px_line(canvas, (ax, box_y), (ax, box_y + box_h), color="#666666", line_width=2)
            if labels:
                for i in range(math.ceil(min_y), math.floor(max_y) + 1):
                    y = by(i)
                    if box_y + 5 < y < box_y + box_h - 5:
                        px_line(canvas, (ax - 4, y), (ax + 4, y), color="#666666", line_width=2)
                        draw_text_px(canvas, str(i), ax - 10, y, size=14, color="#888888", anchor="rm")

    if len(pts) >= 2:
        (x1, y1), (x2, y2) = pts[0][0], pts[1][0]
        px_arrow(canvas, (bx(x1), by(y1)), (bx(x2), by(y2)), color="#ffd166", line_width=3, head_length=12)

    if force and force.get("origin") and force.get("components"):
        ox, oy = xy(force["origin"])
        fx, fy = xy(force["components"])
        px_arrow(
            canvas,
            (bx(ox), by(oy)),
            (bx(ox + fx), by(oy + fy)),
            color=force.get("color") or "#45b7d1",
            line_width=3,
            head_length=12,
        )

    for (x, y), raw in pts:
        color = raw.get("color") or "#ffffff"
        center = (bx(x), by(y))
        px_circle(canvas, center, 8, color=color, outline="#ffffff", line_width=2)
        label = raw.get("label")
        if label:
            draw_text_px(
                canvas,
                f"{label}({_fmt(x)},{_fmt(y)})",
                center[0] + 12,
                center[1] - 10,
                size=24,
                color=color,
                anchor="ld",
                bold=True,
            )


def _fmt(v: float) -> str:
    return str(int(v)) if float(v).is_integer() else f"{v:g}"


def render_inclined_plane(canvas: Canvas, params: dict[str, Any], t: float = 0.0) -> None:
    """Incline from x = −5, block at x = 0 with weight, normal and (if mu > 0) friction arrows."""
    del t
    angle = number(params, "angle", 30.0)
    mu = number(params, "mu", 0.0)
    rad = math.radians(angle)
    draw_line(canvas, -5, -2, 5, -2 + math.tan(rad) * 10, color="#888", line_width=4)
    x = 0.0
    y = -2 + math.tan(rad) * (x + 5)
    draw_rectangle(canvas, x, y, 0.8, 0.8, color=text(params, "color", "#ff6b6b"), angle=-angle)
    draw_arrow(canvas, x, y, x, y - 2, color="#ff0000", head_length=12)
    draw_arrow(canvas, x, y, x - math.sin(rad), y + math.cos(rad), color="#00ff00", head_length=12)
    if mu > 0:
        draw_arrow(canvas, x, y, x - math.cos(rad), y - math.sin(rad), color="#ffff00", head_length=12)


def render_electric_field(canvas: Canvas, params: dict[str, Any], t: float = 0.0) -> None:
    """Sixteen radial field arrows per charge; outward for positive, inward for negative."""
    del t
    for charge in params.get("charges") or []:
        cx, cy = float(charge["x"]), float(charge["y"])
        q = float(charge["q"])
        draw_dot(canvas, cx, cy, 14, color="#ff0000" if q > 0 else "#0000ff")
        reach = 1.5 if q > 0 else -1.5
        for i in range(16):
            a = i * math.pi / 8
            draw_arrow(
                canvas,
                cx,
                cy,
                cx + math.cos(a) * reach,
                cy + math.sin(a) * reach,
                color="#ffff00",
                line_width=2,
                head_length=10,
            )


def _readout(canvas: Canvas, params: dict[str, Any], value: str, size: float, color: str) -> None:
    px, py = canvas.mapper.to_px(number(params, "x", 0.0), number(params, "y", 0.0))
    draw_text_px(canvas, value, px, py, size=size, color=color)


def render_doppler(canvas: Canvas, params: dict[str, Any], t: float = 0.0) -> motion.DopplerState:
    del t
    state = motion.doppler(
        number(params, "f0"),
        number(params, "vSource"),
        number(params, "vObserver"),
        v_sound=number(params, "vSound", motion.SPEED_OF_SOUND),
    )
    _readout(canvas, params, f"f_observed = {state.frequency:.1f} Hz", 20, "#ffff00")
    return state


def render_electric_potential(canvas: Canvas, params: dict[str, Any], t: float = 0.0) -> motion.PotentialState:
    del t
    state = motion.electric_potential(number(params, "q"), number(params, "r"), k=number(params, "k", motion.COULOMB_K))
    _readout(canvas, params, f"V = {state.potential:.1f} V", 20, "#ffff00")
    return state


def render_magnetic_force(canvas: Canvas, params: dict[str, Any], t: float = 0.0) -> motion.MagneticState:
    del t
    state = motion.magnetic_force(
        number(params, "q"), number(params, "v"), number(params, "B"), angle=number(params, "angle", 90.0)
    )
    draw_dot(canvas, number(params, "x", 0.0), number(params, "y", 0.0), 8, color="#00ff00")
    return state


def render_vector(canvas: Canvas, params: dict[str, Any], t: float = 0.0) -> None:
    """Arrow from (x, y) by components (dx, dy), with optional component arrows and label."""
    del t
    x = number(params, "x", 0.0)
    y = number(params, "y", 0.0)
    dx = number(params, "dx")
    dy = number(params, "dy")
    color = text(params, "color", "#ffd166")
    if flag(params, "showComponents", False):
        draw_arrow(canvas, x, y, x + dx, y, color="#ff6b6b", line_width=2, head_length=10)
        draw_arrow(canvas, x + dx, y, x + dx, y + dy, color="#4ecdc4", line_width=2, head_length=10)
    draw_arrow(canvas, x, y, x + dx, y + dy, color=color, line_width=3)
    label = params.get("label")
    if label:
        px, py = canvas.mapper.to_px(x + dx * 1.1, y + dy * 1.1)
        draw_text_px(canvas, str(label), px, py, size=20, color=color)


def render_graph(canvas: Canvas, params: dict[str, Any], t: float = 0.0) -> None:
    """
    Axes plus a data series. Points are in data units and are mapped into a world box
    (x, y = lower-left corner, width, height). With reveal=true the curve is drawn up to the
    data x reached after t seconds at revealRate units per second.
    """
    data = points(params, "points")
    ox = number(params, "x", -4.0)
    oy = number(params, "y", -3.0)
    width = number(params, "width", 8.0)
    height = number(params, "height", 6.0)
    axis_color = text(params, "axisColor", "#888")
    draw_line(canvas, ox, oy, ox + width, oy, color=axis_color)
    draw_line(canvas, ox, oy, ox, oy + height, color=axis_color)
    if len(data) < 2:
        return
    xs = [p[0] for p in data]
    ys = [p[1] for p in data]
    x_lo, x_hi = min(xs), max(xs)
    y_lo, y_hi = min(min(ys), 0.0), max(ys)
    sx = width / max(x_hi - x_lo, 1e-9)
    sy = height / max(y_hi - y_lo, 1e-9)
    if flag(params, "reveal", False):
        limit = x_lo + number(params, "revealRate", 1.0) * t
        data = [p for p in data if p[0] <= limit]
    m = canvas.mapper
    curve = [m.to_px(ox + (px - x_lo) * sx, oy + (py - y_lo) * sy) for px, py in data]
    px_polyline(canvas, curve, color=text(params, "color", "#4ecdc4"), line_width=3)
    for key, (lx, ly, anchor) in (
        ("xLabel", (ox + width, oy - 0.3, "rt")),
        ("yLabel", (ox - 0.2, oy + height, "rm")),
    ):
        label = params.get(key)
        if label:
            px, py = m.to_px(lx, ly)
            draw_text_px(canvas, str(label), px, py, size=18, color="#cccccc", anchor=anchor)
