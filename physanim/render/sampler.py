"""
Scene sampler: frame index → global time, and global time → active phases.
Also collects every glyph key the scene references, for the pre-render pass.
"""
from dataclasses import dataclass

from ..config import total_frames as _total_frames
from ..graphics.glyphs import DEFAULT_GLYPH_COLOR, DEFAULT_GLYPH_HEIGHT, GlyphKey, glyph_key_for
from ..scene.schema import Phase, Scene


@dataclass(frozen=True)
class ActivePhase:
    phase: Phase
    local_t: float


class SceneSampler:
    """Clock for one run: frame i ↦ t = i / total_frames × duration."""

    def __init__(self, scene: Scene, duration: float, fps: float):
        self.scene = scene
        self.duration = float(duration)
        self.fps = fps
        self.total_frames = _total_frames(fps, duration)

    def time_at(self, index: int) -> float:
        if self.total_frames == 0:
            return 0.0
        return index / self.total_frames * self.duration

    def active_phases(self, t: float) -> list[ActivePhase]:
        """Phases whose closed [start, end] contains t, in scene order. Overlaps all draw."""
        return [ActivePhase(p, t - p.start) for p in self.scene.phases if p.contains(t)]

    def glyph_keys(
        self,
        *,
        default_color: str = DEFAULT_GLYPH_COLOR,
        default_height: float = DEFAULT_GLYPH_HEIGHT,
    ) -> list[GlyphKey]:
        """Distinct glyph keys across all phases, first-seen order."""
        keys = (
            glyph_key_for(m.params, default_color=default_color, default_height=default_height)
            for m in self.scene.math_items()
        )
        return list(dict.fromkeys(keys))
