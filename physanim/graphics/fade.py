"""
Fade compositor: per-item opacity from local phase time and fade-in/fade-out ramps.
Ramps are linear and combine multiplicatively; opacity always lies in [0, 1].
"""
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..scene.schema import FadeSpec, RenderItem

DEFAULT_FADE_DURATION = 0.5


def fade_in_alpha(t: float, start: float, duration: float) -> float:
    """0 before start, linear ramp to 1 over duration. duration <= 0 is a step at start."""
    if duration <= 0:
        return 1.0 if t >= start else 0.0
    return max(0.0, min((t - start) / duration, 1.0))


def fade_out_alpha(t: float, start: float, duration: float) -> float:
    """1 before start, linear ramp to 0 over duration, 0 after."""
    if t < start:
        return 1.0
    if t > start + duration:
        return 0.0
    if duration <= 0:
        return 0.0
    return 1.0 - (t - start) / duration


def resolve_fades(item: "RenderItem", phase_duration: float) -> tuple["FadeSpec", "FadeSpec"]:
    """
    Fill fade defaults: fade-in starts at 0 over 0.5s; fade-out starts at
    max(phase_duration - 0.5, fade-in end) over 0.5s.
    """
    from ..scene.schema import FadeSpec

    fi_start = item.fade_in.start if item.fade_in and item.fade_in.start is not None else 0.0
    fi_dur = (
        item.fade_in.duration
        if item.fade_in and item.fade_in.duration is not None
        else DEFAULT_FADE_DURATION
    )
    if item.fade_out and item.fade_out.start is not None:
        fo_start = item.fade_out.start
    else:
        fo_start = max(phase_duration - DEFAULT_FADE_DURATION, fi_start + fi_dur)
    fo_dur = (
        item.fade_out.duration
        if item.fade_out and item.fade_out.duration is not None
        else DEFAULT_FADE_DURATION
    )
    return FadeSpec(fi_start, fi_dur), FadeSpec(fo_start, fo_dur)


def item_opacity(item: "RenderItem", local_t: float, phase_duration: float) -> float:
    """Composited opacity of one item at local phase time."""
    fade_in, fade_out = resolve_fades(item, phase_duration)
    a_in = fade_in_alpha(local_t, fade_in.start, fade_in.duration)
    a_out = fade_out_alpha(local_t, fade_out.start, fade_out.duration)
    return max(0.0, min(a_in * a_out, 1.0))
