"""
Frame producer against an in-memory sink: frame count, z-order, determinism, unknown and
failing items, cancellation and encoder failure.
Run from project root: python -m pytest tests/ -v
"""
import sys
import threading
import unittest
import warnings
from pathlib import Path

ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from PIL import Image

from physanim.config import RenderSettings
from physanim.errors import EncoderProcessError, RenderCancelled
from physanim.graphics.glyphs import GlyphCache
from physanim.render.dispatch import RenderStatus
from physanim.render.encoder import MemorySink
from physanim.render.producer import FrameProducer, ProducerState
from physanim.render.sampler import SceneSampler
from physanim.scene import parse_scene

SETTINGS = RenderSettings(fps=10, duration=1.0, width=160, height=90, world_width=16.0, world_height=9.0)
BACKGROUND_RGB = (14, 16, 32)
CENTRE = (80, 45)

RED_SQUARE = {"type": "rectangle", "params": {"x": 0, "y": 0, "width": 2, "height": 2, "color": "#ff0000"}}


def solid_glyphs():
    """Green square glyphs, counted."""
    calls = []

    def raster(expression, color, target_height):
        calls.append(expression)
        return Image.new("RGBA", (40, 40), (0, 255, 0, 255))

    return GlyphCache(raster), calls


def quiet_parse(data):
    with warnings.catch_warnings():
        warnings.simplefilter("ignore")
        return parse_scene(data)


class TestSceneSampler(unittest.TestCase):

    def test_total_frames_for_default_run(self):
        sampler = SceneSampler(quiet_parse({"phases": []}), 62, 30)
        self.assertEqual(sampler.total_frames, 1860)
        self.assertAlmostEqual(sampler.time_at(30), 1.0)

    def test_overlapping_phases_are_all_active(self):
        scene = quiet_parse({"phases": [
            {"name": "a", "time": [0, 5]},
            {"name": "b", "time": [4, 8]},
        ]})
        active = SceneSampler(scene, 8, 10).active_phases(4.5)
        self.assertEqual([a.phase.name for a in active], ["a", "b"])
        self.assertAlmostEqual(active[1].local_t, 0.5)

    def test_boundary_frame_belongs_to_both_phases(self):
        scene = quiet_parse({"phases": [{"name": "a", "time": [0, 5]}, {"name": "b", "time": [5, 8]}]})
        self.assertEqual(len(SceneSampler(scene, 8, 10).active_phases(5.0)), 2)

    def test_glyph_keys_are_distinct(self):
        scene = quiet_parse({"phases": [
            {"time": [0, 1], "math": [{"latex": "x"}, {"latex": "x"}, {"latex": "x", "color": "#f00"}]},
            {"time": [1, 2], "math": [{"latex": "x"}]},
        ]})
        self.assertEqual(len(SceneSampler(scene, 2, 10).glyph_keys()), 2)


class TestRenderFrame(unittest.TestCase):

    def test_background_only_when_nothing_is_active(self):
        producer = FrameProducer(quiet_parse({"phases": [{"time": [5, 6], "objects": [RED_SQUARE]}]}), SETTINGS)
        report = producer.render_frame(0.5)
        self.assertEqual(report.results, [])
        self.assertEqual(producer.frame.image.getpixel(CENTRE), BACKGROUND_RGB)

    def test_objects_draw_over_math(self):
        glyphs, _ = solid_glyphs()
        scene = quiet_parse({"phases": [{
            "time": [0, 10],
            "math": [{"latex": "x", "x": 0, "y": 0}],
            "objects": [RED_SQUARE],
        }]})
        producer = FrameProducer(scene, SETTINGS, glyph_cache=glyphs)
        producer.prerender_glyphs()
        report = producer.render_frame(5.0)
        self.assertEqual(producer.frame.image.getpixel(CENTRE), (255, 0, 0))
        # glyph is wider than the square; its edge is still visible
        self.assertEqual(producer.frame.image.getpixel((62, 45)), (0, 255, 0))
        self.assertEqual([r.category.value for r in report.results], ["math", "object"])

    def test_same_time_gives_identical_frames(self):
        scene = quiet_parse({"phases": [{"time": [0, 10], "objects": [
            RED_SQUARE,
            {"type": "pendulum", "params": {"x0": 0, "y0": 3, "length": 2, "maxAngle": 0.5, "omega": 2}},
            {"type": "wave", "params": {"amplitude": 1, "wavelength": 2, "frequency": 1, "xStart": -6, "xEnd": 6}},
        ]}]})
        producer = FrameProducer(scene, SETTINGS)
        producer.render_frame(3.3)
        first = producer.frame.image.tobytes()
        producer.render_frame(7.1)
        producer.render_frame(3.3)
        self.assertEqual(producer.frame.image.tobytes(), first)

    def test_unknown_and_failing_objects_do_not_stop_the_frame(self):
        scene = quiet_parse({"phases": [{"time": [0, 10], "objects": [
            {"type": "warp-drive", "params": {}},
            {"type": "projectile", "params": {"x0": 0}},
            RED_SQUARE,
        ]}]})
        producer = FrameProducer(scene, SETTINGS)
        report = producer.render_frame(5.0)
        self.assertEqual(
            [r.status for r in report.results],
            [RenderStatus.SKIPPED_UNKNOWN, RenderStatus.FAILED, RenderStatus.DRAWN],
        )
        self.assertEqual(producer.frame.image.getpixel(CENTRE), (255, 0, 0))
        self.assertEqual(producer.report.unknown_types["warp-drive"], 1)
        self.assertEqual(producer.report.failed_types["projectile"], 1)

    def test_oversized_text_fails_alone(self):
        scene = quiet_parse({"phases": [{
            "time": [0, 10],
            "text": [{"value": "hi", "size": 1e7}],
            "objects": [RED_SQUARE],
        }]})
        producer = FrameProducer(scene, SETTINGS)
        report = producer.render_frame(5.0)
        self.assertEqual(
            [r.status for r in report.results],
            [RenderStatus.FAILED, RenderStatus.DRAWN],
        )
        self.assertEqual(producer.frame.image.getpixel(CENTRE), (255, 0, 0))
        self.assertEqual(producer.report.failed_types["text"], 1)

    def test_failed_glyph_is_skipped(self):
        def raster(expression, color, target_height):
            raise ValueError("nope")

        scene = quiet_parse({"phases": [{"time": [0, 10], "math": [{"latex": "\\bad"}], "objects": [RED_SQUARE]}]})
        producer = FrameProducer(scene, SETTINGS, glyph_cache=GlyphCache(raster))
        producer.prerender_glyphs()
        report = producer.render_frame(5.0)
        self.assertEqual(report.results[0].status, RenderStatus.SKIPPED_GLYPH)
        self.assertEqual(report.results[1].status, RenderStatus.DRAWN)


class TestRun(unittest.TestCase):

    def _scene(self):
        return quiet_parse({"phases": [{
            "time": [0, 1],
            "text": [{"value": "Hello", "x": 0, "y": 3}],
            "math": [{"latex": "x^2", "x": 0, "y": 1}],
            "objects": [RED_SQUARE, {"type": "warp-drive", "params": {}}],
        }]})

    def test_writes_every_frame_in_order(self):
        glyphs, calls = solid_glyphs()
        sink = MemorySink(keep_frames=True)
        producer = FrameProducer(self._scene(), SETTINGS, glyph_cache=glyphs, sink=sink)
        report = producer.run()
        self.assertEqual(producer.state, ProducerState.FINISHED)
        self.assertEqual(sink.frames_written, 10)
        self.assertEqual(report.frames_written, 10)
        self.assertTrue(sink.started and sink.closed)
        self.assertTrue(all(len(f) == 160 * 90 * 4 for f in sink.frames))
        # frame 0 is at t=0: everything still faded out
        self.assertEqual(sink.frames[0][:4], bytes((*BACKGROUND_RGB, 255)))
        self.assertEqual(calls, ["x^2"])
        # invisible at t=0, so skipped before the kind is looked at
        self.assertEqual(report.unknown_types["warp-drive"], 9)
        self.assertEqual(report.glyph_stats["renders"], 1)

    def test_stop_event_cancels_and_aborts_sink(self):
        stop = threading.Event()
        stop.set()
        sink = MemorySink()
        producer = FrameProducer(self._scene(), SETTINGS, glyph_cache=solid_glyphs()[0], sink=sink, stop_event=stop)
        with self.assertRaises(RenderCancelled):
            producer.run()
        self.assertEqual(producer.state, ProducerState.FAILED)
        self.assertTrue(sink.aborted)
        self.assertEqual(sink.frames_written, 0)

    def test_encoder_failure_stops_production(self):
        sink = MemorySink(fail_after=3)
        producer = FrameProducer(self._scene(), SETTINGS, glyph_cache=solid_glyphs()[0], sink=sink)
        with self.assertRaises(EncoderProcessError):
            producer.run()
        self.assertEqual(producer.state, ProducerState.FAILED)
        self.assertEqual(producer.report.frames_written, 3)
        self.assertTrue(sink.aborted)

    def test_run_needs_a_sink(self):
        with self.assertRaises(ValueError):
            FrameProducer(self._scene(), SETTINGS).run()


if __name__ == "__main__":
    unittest.main()
