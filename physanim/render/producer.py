"""
Frame producer: owns the frame buffer and the run clock, draws every frame in order and
hands it to the encoder sink.

States: INITIALIZING → PRERENDERING_GLYPHS → PRODUCING → DRAINING → FINISHED, or FAILED
from any of them (stop requested, encoder died). Per frame: clear to background, then for
each active phase draw text, math, objects, in that order and in scene order within each.
"""
import logging
import threading
import time
from collections import Counter
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from ..config import RenderSettings
from ..errors import EncoderProcessError, RenderCancelled
from ..graphics.canvas import Canvas, clear, frame_bytes, new_canvas
from ..graphics.coords import CoordinateMapper
from ..graphics.glyphs import GlyphCache
from ..scene.schema import Scene
from .dispatch import RenderResult, RenderStatus, render_item
from .encoder import EncoderSink
from .sampler import SceneSampler

logger = logging.getLogger(__name__)


class ProducerState(str, Enum):
    INITIALIZING = "initializing"
    PRERENDERING_GLYPHS = "prerendering_glyphs"
    PRODUCING = "producing"
    DRAINING = "draining"
    FINISHED = "finished"
    FAILED = "failed"


@dataclass
class FrameReport:
    """Every draw-call outcome for one frame, in draw order."""
    t: float
    results: list[RenderResult] = field(default_factory=list)

    def count(self, status: RenderStatus) -> int:
        return sum(1 for r in self.results if r.status is status)

    @property
    def drawn(self) -> int:
        return self.count(RenderStatus.DRAWN)

    @property
    def failures(self) -> list[RenderResult]:
        return [r for r in self.results if r.status is RenderStatus.FAILED]


@dataclass
class RenderReport:
    frames_written: int = 0
    total_frames: int = 0
    item_failures: int = 0
    failed_types: Counter = field(default_factory=Counter)
    unknown_types: Counter = field(default_factory=Counter)
    glyph_stats: dict[str, int] = field(default_factory=dict)
    elapsed_seconds: float = 0.0
    state: ProducerState = ProducerState.INITIALIZING

    def to_dict(self) -> dict[str, Any]:
        return {
            "state": self.state.value,
            "frames_written": self.frames_written,
            "total_frames": self.total_frames,
            "item_failures": self.item_failures,
            "failed_types": dict(self.failed_types),
            "unknown_types": dict(self.unknown_types),
            "glyphs": self.glyph_stats,
            "elapsed_seconds": round(self.elapsed_seconds, 2),
        }


class FrameProducer:
    """One render run. Not reusable: build a new producer per video."""

    def __init__(
        self,
        scene: Scene,
        settings: RenderSettings,
        glyph_cache: GlyphCache | None = None,
        sink: EncoderSink | None = None,
        stop_event: threading.Event | None = None,
    ):
        self.scene = scene
        self.settings = settings
        self.glyphs = glyph_cache if glyph_cache is not None else GlyphCache(calibration=settings.glyph_calibration)
        self.sink = sink
        self.stop_event = stop_event or threading.Event()
        self.sampler = SceneSampler(scene, settings.duration, settings.fps)
        self.mapper = CoordinateMapper(
            settings.width, settings.height, settings.world_width, settings.world_height
        )
        self._canvas = new_canvas(self.mapper, settings.background, glyphs=self.glyphs)
        self.state = ProducerState.INITIALIZING
        self.report = RenderReport(total_frames=self.sampler.total_frames)

    @property
    def frame(self) -> Canvas:
        """The frame buffer (valid until the next render_frame call)."""
        return self._canvas

    def prerender_glyphs(self) -> None:
        self.state = ProducerState.PRERENDERING_GLYPHS
        keys = self.sampler.glyph_keys(
            default_color=self.settings.glyph_default_color,
            default_height=self.settings.glyph_default_height,
        )
        self.glyphs.prerender(keys, max_workers=self.settings.glyph_workers)

    def render_frame(self, t: float) -> FrameReport:
        """Draw the scene at global time t into the frame buffer."""
        canvas = self._canvas
        clear(canvas, self.settings.background)
        report = FrameReport(t=t)
        for active in self.sampler.active_phases(t):
            phase = active.phase
            for item in phase.items_in_draw_order():
                result = render_item(
                    canvas,
                    item,
                    active.local_t,
                    phase.duration,
                    phase_name=phase.name,
                    glyph_color=self.settings.glyph_default_color,
                    glyph_height=self.settings.glyph_default_height,
                )
                self._note(result)
                report.results.append(result)
        return report

    def run(self) -> RenderReport:
        """Produce every frame into the sink, then drain and close it."""
        if self.sink is None:
            raise ValueError("FrameProducer.run() needs a sink")
        started = time.monotonic()
        total = self.sampler.total_frames
        logger.info(
            "Rendering %d frames (%dx%d @ %s fps, %.2fs)",
            total, self.settings.width, self.settings.height, self.settings.fps, self.settings.duration,
        )
        try:
            self.prerender_glyphs()
            self._check_stop()
            self.sink.start()
            self.state = ProducerState.PRODUCING
            for i in range(total):
                self._check_stop()
                self.render_frame(self.sampler.time_at(i))
                if not self.sink.write(frame_bytes(self._canvas)):
                    self.sink.wait_for_drain()
                self.report.frames_written += 1
                if (i + 1) % max(1, int(self.settings.fps)) == 0 or i + 1 == total:
                    self._log_progress(i + 1, total, started)
            self.state = ProducerState.DRAINING
            self.sink.close()
        except RenderCancelled:
            self._fail(started)
            logger.warning("Render cancelled after %d/%d frames", self.report.frames_written, total)
            raise
        except EncoderProcessError:
            self._fail(started)
            logger.error("Encoder failed after %d/%d frames", self.report.frames_written, total, exc_info=True)
            raise
        except BaseException:
            self._fail(started)
            logger.error("Render aborted after %d/%d frames", self.report.frames_written, total, exc_info=True)
            raise
        self.state = ProducerState.FINISHED
        self._finish(started)
        return self.report

    def _check_stop(self) -> None:
        if self.stop_event.is_set():
            raise RenderCancelled("Stop requested")

    def _fail(self, started: float) -> None:
        self.state = ProducerState.FAILED
        if self.sink is not None:
            self.sink.abort()
        self._finish(started)

    def _finish(self, started: float) -> None:
        self.report.state = self.state
        self.report.glyph_stats = self.glyphs.stats.to_dict()
        self.report.elapsed_seconds = time.monotonic() - started

    def _note(self, result: RenderResult) -> None:
        """Count failures and unknown kinds; log each type tag once per run."""
        if result.status is RenderStatus.SKIPPED_UNKNOWN:
            first = result.type_tag not in self.report.unknown_types
            self.report.unknown_types[result.type_tag] += 1
            if first:
                logger.warning("Unknown object type %r: skipped", result.type_tag)
        elif result.status is RenderStatus.FAILED:
            first = result.type_tag not in self.report.failed_types
            self.report.item_failures += 1
            self.report.failed_types[result.type_tag] += 1
            if first:
                err = result.error
                logger.warning(
                    "Render failed for %s in phase %r: %s",
                    result.type_tag or result.category.value,
                    err.phase if err else "",
                    err,
                )

    def _log_progress(self, done: int, total: int, started: float) -> None:
        elapsed = time.monotonic() - started
        logger.info("Frame %d/%d (%d%%, %.1fs)", done, total, done * 100 // max(1, total), elapsed)
