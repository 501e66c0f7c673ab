"""
Time-dependent physics objects: compute the closed-form state at local time t, then paint it.
Each renderer returns the state it drew so callers (and tests) can inspect the numbers.
"""
import math
from typing import Any

from ..graphics.canvas import Canvas
from ..graphics.primitives import draw_circle, draw_dot, draw_line, draw_rectangle, px_polyline
from ..graphics.text import draw_text_px
from . import motion
from .params import flag, number, text


def render_projectile(canvas: Canvas, params: dict[str, Any], t: float) -> motion.ProjectileState:
    state = motion.projectile(
        number(params, "x0"),
        number(params, "y0"),
        number(params, "v0"),
        number(params, "angle"),
        t,
        g=number(params, "g", 10.0),
    )
    draw_dot(canvas, state.x, state.y, 8, color=text(params, "color", "#ff6b6b"))
    return state


def render_circular(canvas: Canvas, params: dict[str, Any], t: float) -> motion.CircularState:
    cx = number(params, "cx")
    cy = number(params, "cy")
    radius = number(params, "radius")
    state = motion.circular(cx, cy, radius, number(params, "omega"), t, phase=number(params, "phase", 0.0))
    draw_circle(canvas, cx, cy, radius, color="#555", fill=False, line_width=2)
    if flag(params, "drawRadius", True):
        draw_line(canvas, cx, cy, state.x, state.y, color="#888", line_width=1)
    draw_dot(canvas, state.x, state.y, 8, color=text(params, "color", "#a8edea"))
    return state


def render_shm(canvas: Canvas, params: dict[str, Any], t: float) -> motion.SHMState:
    state = motion.shm(
        number(params, "x0"),
        number(params, "amplitude"),
        number(params, "omega"),
        t,
        phase=number(params, "phase", 0.0),
    )
    draw_dot(canvas, state.x, number(params, "y", 0.0), 8, color=text(params, "color", "#4ecdc4"))
    return state


def render_pendulum(canvas: Canvas, params: dict[str, Any], t: float) -> motion.PendulumState:
    x0 = number(params, "x0")
    y0 = number(params, "y0")
    state = motion.pendulum(
        x0,
        y0,
        number(params, "length"),
        number(params, "maxAngle"),
        number(params, "omega"),
        t,
        phase=number(params, "phase", 0.0),
    )
    color = text(params, "color", "#ffd93d")
    draw_line(canvas, x0, y0, state.x, state.y, color=color, line_width=2)
    draw_dot(canvas, state.x, state.y, 10, color=color)
    return state


def render_spring_mass(canvas: Canvas, params: dict[str, Any], t: float) -> motion.SpringState:
    x0 = number(params, "x0")
    state = motion.spring_mass(
        x0,
        number(params, "k"),
        number(params, "m"),
        number(params, "amplitude"),
        t,
        phase=number(params, "phase", 0.0),
    )
    y = number(params, "y", 0.0)
    if "anchorX" in params:
        _draw_spring(canvas, number(params, "anchorX"), state.x - 0.25, y)
    draw_rectangle(canvas, state.x, y, 0.5, 0.5, color=text(params, "color", "#ff6b6b"))
    return state


def _draw_spring(canvas: Canvas, x_from: float, x_to: float, y: float, coils: int = 10) -> None:
    """Zig-zag coil between a wall anchor and the mass."""
    m = canvas.mapper
    amp = m.length(0.15)
    pts = [m.to_px(x_from, y)]
    for i in range(1, coils * 2):
        px, py = m.to_px(x_from + (x_to - x_from) * i / (coils * 2), y)
        pts.append((px, py + (amp if i % 2 else -amp)))
    pts.append(m.to_px(x_to, y))
    px_polyline(canvas, pts, color="#bbbbbb", line_width=2)


def render_wave(canvas: Canvas, params: dict[str, Any], t: float) -> motion.WaveState:
    state = motion.wave(
        number(params, "amplitude"),
        number(params, "wavelength"),
        number(params, "frequency"),
        number(params, "xStart"),
        number(params, "xEnd"),
        t,
    )
    m = canvas.mapper
    px_polyline(
        canvas,
        [m.to_px(x, y) for x, y in state.points],
        color=text(params, "color", "#5f9ea0"),
        line_width=3,
    )
    return state


def render_deceleration(canvas: Canvas, params: dict[str, Any], t: float) -> motion.DecelerationState:
    state = motion.deceleration(
        number(params, "x0"),
        number(params, "v0"),
        number(params, "a"),
        t,
        max_dist=number(params, "maxDist", math.inf),
    )
    draw_rectangle(canvas, state.x, number(params, "y", 0.0), 0.6, 0.6, color=text(params, "color", "#ff6b6b"))
    return state


def render_radioactive_decay(canvas: Canvas, params: dict[str, Any], t: float) -> motion.DecayState:
    n0 = number(params, "N0")
    state = motion.radioactive_decay(n0, number(params, "lambda"), t)
    pct = state.fraction_of(n0) * 100
    px, py = canvas.mapper.to_px(number(params, "x", 0.0), number(params, "y", 0.0))
    draw_text_px(canvas, f"Nuclei: {state.nuclei:.0f} ({pct:.1f}%)", px, py, size=24, color="#00ff00")
    return state


def render_ideal_gas(canvas: Canvas, params: dict[str, Any], t: float) -> motion.GasState:
    t0 = number(params, "T0")
    # Temperature is either fixed (T) or ramps linearly from T0 at rate dTdt
    if "T" in params:
        temperature = number(params, "T")
    else:
        temperature = t0 + number(params, "dTdt", 0.0) * t
    state = motion.ideal_gas(number(params, "P0"), number(params, "V0"), t0, temperature)
    px, py = canvas.mapper.to_px(number(params, "x", 0.0), number(params, "y", 0.0))
    draw_text_px(
        canvas,
        f"P = {state.pressure:.2f} Pa, V = {state.volume:.2f} m³",
        px,
        py,
        size=20,
        color="#ff6b6b",
    )
    return state
