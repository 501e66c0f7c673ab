"""
Graphics primitives: lines, arrows, circles, polygons, rectangles, arcs, bezier curves, points.
Positions and sizes are in world units unless the name says px. Colours are scene colour
strings; the canvas applies the current item opacity.
"""
import math
from typing import Sequence

from .canvas import Canvas

PxPoint = tuple[float, float]


def _width(line_width: float) -> int:
    return max(1, int(round(line_width)))


# ---------------------------------------------------------------------------
# Pixel-space helpers
# ---------------------------------------------------------------------------


def px_line(
    canvas: Canvas,
    start: PxPoint,
    end: PxPoint,
    *,
    color: str = "#fff",
    line_width: float = 2,
    dash: Sequence[float] | None = None,
) -> None:
    """Straight segment in pixel space, optionally dashed (on/off lengths in px)."""
    fill = canvas.color(color)
    if not dash or sum(dash) <= 0:
        canvas.draw.line([start, end], fill=fill, width=_width(line_width))
        return
    x0, y0 = start
    x1, y1 = end
    total = math.hypot(x1 - x0, y1 - y0)
    if total == 0:
        return
    ux, uy = (x1 - x0) / total, (y1 - y0) / total
    pattern = list(dash) if len(dash) % 2 == 0 else list(dash) * 2
    pos, i = 0.0, 0
    while pos < total:
        seg = max(0.0, float(pattern[i % len(pattern)]))
        seg_end = min(pos + seg, total)
        if i % 2 == 0 and seg_end > pos:
            canvas.draw.line(
                [(x0 + ux * pos, y0 + uy * pos), (x0 + ux * seg_end, y0 + uy * seg_end)],
                fill=fill,
                width=_width(line_width),
            )
        pos = seg_end if seg > 0 else pos + 1
        i += 1


def px_polyline(canvas: Canvas, points: Sequence[PxPoint], *, color: str = "#fff", line_width: float = 2) -> None:
    if len(points) < 2:
        return
    canvas.draw.line(list(points), fill=canvas.color(color), width=_width(line_width), joint="curve")


def px_arrowhead(
    canvas: Canvas,
    tail: PxPoint,
    tip: PxPoint,
    *,
    color: str = "#fff",
    head_length: float = 15,
    spread: float = math.pi / 6,
) -> None:
    """Filled triangular head at tip, sides at ±spread from the shaft."""
    angle = math.atan2(tip[1] - tail[1], tip[0] - tail[0])
    a1 = (tip[0] - head_length * math.cos(angle - spread), tip[1] - head_length * math.sin(angle - spread))
    a2 = (tip[0] - head_length * math.cos(angle + spread), tip[1] - head_length * math.sin(angle + spread))
    fill = canvas.color(color)
    canvas.draw.polygon([tip, a1, a2], fill=fill, outline=fill)


def px_arrow(
    canvas: Canvas,
    start: PxPoint,
    end: PxPoint,
    *,
    color: str = "#fff",
    line_width: float = 2,
    head_length: float = 15,
) -> None:
    px_line(canvas, start, end, color=color, line_width=line_width)
    if start != end:
        px_arrowhead(canvas, start, end, color=color, head_length=head_length)


def px_circle(
    canvas: Canvas,
    center: PxPoint,
    radius: float,
    *,
    color: str = "#fff",
    fill: bool = True,
    line_width: float = 2,
    outline: str | None = None,
) -> None:
    if radius < 0:
        raise ValueError(f"radius must be non-negative, got {radius}")
    cx, cy = center
    box = [cx - radius, cy - radius, cx + radius, cy + radius]
    if fill:
        canvas.draw.ellipse(
            box,
            fill=canvas.color(color),
            outline=canvas.color(outline) if outline else None,
            width=_width(line_width) if outline else 0,
        )
    else:
        canvas.draw.ellipse(box, outline=canvas.color(color), width=_width(line_width))


def px_rect(
    canvas: Canvas,
    box: tuple[float, float, float, float],
    *,
    color: str = "#fff",
    fill: bool = True,
    line_width: float = 2,
) -> None:
    """Axis-aligned rectangle given (left, top, right, bottom) in px."""
    if fill:
        canvas.draw.rectangle(box, fill=canvas.color(color))
    else:
        canvas.draw.rectangle(box, outline=canvas.color(color), width=_width(line_width))


# ---------------------------------------------------------------------------
# World-space primitives
# ---------------------------------------------------------------------------


def draw_line(
    canvas: Canvas,
    x1: float,
    y1: float,
    x2: float,
    y2: float,
    *,
    color: str = "#fff",
    line_width: float = 2,
    dash: Sequence[float] | None = None,
) -> None:
    m = canvas.mapper
    px_line(canvas, m.to_px(x1, y1), m.to_px(x2, y2), color=color, line_width=line_width, dash=dash)


def draw_arrow(
    canvas: Canvas,
    x1: float,
    y1: float,
    x2: float,
    y2: float,
    *,
    color: str = "#fff",
    line_width: float = 2,
    head_length: float = 15,
) -> None:
    """Arrow from (x1, y1) to (x2, y2); head length in px."""
    m = canvas.mapper
    px_arrow(canvas, m.to_px(x1, y1), m.to_px(x2, y2), color=color, line_width=line_width, head_length=head_length)


def draw_circle(
    canvas: Canvas,
    x: float,
    y: float,
    radius: float,
    *,
    color: str = "#fff",
    fill: bool = True,
    line_width: float = 2,
) -> None:
    """Circle with a world-unit radius."""
    m = canvas.mapper
    px_circle(canvas, m.to_px(x, y), m.length(radius), color=color, fill=fill, line_width=line_width)


def draw_dot(
    canvas: Canvas,
    x: float,
    y: float,
    radius_px: float,
    *,
    color: str = "#fff",
    fill: bool = True,
    line_width: float = 2,
) -> None:
    """Circle at a world position with a pixel radius (bobs, particles, charges)."""
    px_circle(canvas, canvas.mapper.to_px(x, y), radius_px, color=color, fill=fill, line_width=line_width)


def draw_polygon(
    canvas: Canvas,
    points: Sequence[tuple[float, float]],
    *,
    color: str = "#fff",
    fill: bool = True,
    line_width: float = 2,
) -> None:
    """Closed polygon through world points. Fewer than two points draws nothing."""
    if len(points) < 2:
        return
    m = canvas.mapper
    px = [m.to_px(x, y) for x, y in points]
    if fill:
        canvas.draw.polygon(px, fill=canvas.color(color))
    else:
        canvas.draw.line(px + [px[0]], fill=canvas.color(color), width=_width(line_width), joint="curve")


def draw_rectangle(
    canvas: Canvas,
    x: float,
    y: float,
    width: float,
    height: float,
    *,
    color: str = "#fff",
    fill: bool = True,
    line_width: float = 2,
    angle: float = 0.0,
) -> None:
    """Rectangle centred on (x, y), world size, rotated clockwise on screen by angle degrees."""
    m = canvas.mapper
    cx, cy = m.to_px(x, y)
    hw, hh = m.length(width) / 2, m.length(height) / 2
    if not angle:
        px_rect(canvas, (cx - hw, cy - hh, cx + hw, cy + hh), color=color, fill=fill, line_width=line_width)
        return
    rad = math.radians(angle)
    c, s = math.cos(rad), math.sin(rad)
    corners = [
        (cx + dx * c - dy * s, cy + dx * s + dy * c)
        for dx, dy in ((-hw, -hh), (hw, -hh), (hw, hh), (-hw, hh))
    ]
    if fill:
        canvas.draw.polygon(corners, fill=canvas.color(color))
    else:
        canvas.draw.line(corners + [corners[0]], fill=canvas.color(color), width=_width(line_width), joint="curve")


def draw_arc(
    canvas: Canvas,
    x: float,
    y: float,
    radius: float,
    *,
    start_angle: float = 0.0,
    end_angle: float = 2 * math.pi,
    color: str = "#fff",
    line_width: float = 2,
) -> None:
    """Arc stroke; angles in radians, measured clockwise on screen from 3 o'clock."""
    m = canvas.mapper
    cx, cy = m.to_px(x, y)
    r = m.length(radius)
    if r < 0:
        raise ValueError(f"radius must be non-negative, got {radius}")
    box = [cx - r, cy - r, cx + r, cy + r]
    if end_angle - start_angle >= 2 * math.pi:
        canvas.draw.ellipse(box, outline=canvas.color(color), width=_width(line_width))
        return
    canvas.draw.arc(
        box,
        math.degrees(start_angle),
        math.degrees(end_angle),
        fill=canvas.color(color),
        width=_width(line_width),
    )


def bezier_points(
    p0: PxPoint, c1: PxPoint, c2: PxPoint, p1: PxPoint, steps: int = 48
) -> list[PxPoint]:
    """Sample a cubic bezier curve."""
    out: list[PxPoint] = []
    for i in range(steps + 1):
        t = i / steps
        u = 1 - t
        bx = u**3 * p0[0] + 3 * u * u * t * c1[0] + 3 * u * t * t * c2[0] + t**3 * p1[0]
        by = u**3 * p0[1] + 3 * u * u * t * c1[1] + 3 * u * t * t * c2[1] + t**3 * p1[1]
        out.append((bx, by))
    return out


def draw_bezier(
    canvas: Canvas,
    x1: float,
    y1: float,
    x2: float,
    y2: float,
    cpx1: float,
    cpy1: float,
    cpx2: float | None = None,
    cpy2: float | None = None,
    *,
    color: str = "#fff",
    line_width: float = 2,
) -> None:
    """Cubic bezier; the second control point defaults to the first."""
    m = canvas.mapper
    if cpx2 is None:
        cpx2 = cpx1
    if cpy2 is None:
        cpy2 = cpy1
    pts = bezier_points(m.to_px(x1, y1), m.to_px(cpx1, cpy1), m.to_px(cpx2, cpy2), m.to_px(x2, y2))
    px_polyline(canvas, pts, color=color, line_width=line_width)


def draw_point(
    canvas: Canvas,
    x: float,
    y: float,
    *,
    color: str = "#fff",
    size: float = 5,
    glow: bool = True,
) -> None:
    """Small filled circle (pixel radius) with an optional soft halo."""
    center = canvas.mapper.to_px(x, y)
    if glow:
        halo = canvas.with_opacity(canvas.opacity * 0.18)
        for k in (3, 2, 1):
            px_circle(halo, center, size + k * 4, color=color)
    px_circle(canvas, center, size, color=color)
