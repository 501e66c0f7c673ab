"""
Config resolution and the scene → video pipeline (encoder replaced by in-process sinks).
Run from project root: python -m pytest tests/ -v
"""
import json
import sys
import tempfile
import unittest
from pathlib import Path
from unittest import mock

ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from physanim.config import load_config, resolve_render_settings, total_frames
from physanim.errors import EncoderProcessError, SceneParseError
from physanim.pipeline import partial_path_for, render_video
from physanim.render.encoder import MemorySink

SCENE = {"phases": [{
    "name": "only",
    "time": [0, 1],
    "text": [{"value": "v = at", "x": 0, "y": 2}],
    "objects": [{"type": "shm", "params": {"x0": 0, "amplitude": 2, "omega": 3}}],
}]}


class TestConfig(unittest.TestCase):

    def test_defaults(self):
        s = resolve_render_settings()
        self.assertEqual((s.fps, s.duration, s.width, s.height), (30, 62.0, 1920, 1080))
        self.assertEqual(s.background, "#0e1020")
        self.assertEqual((s.preset, s.crf), ("fast", 18))
        self.assertEqual(s.total_frames, 1860)

    def test_total_frames_rounds(self):
        self.assertEqual(total_frames(30, 62), 1860)
        self.assertEqual(total_frames(30, 0.1), 3)

    def test_yaml_merges_over_defaults(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "c.yaml"
            path.write_text("render:\n  fps: 24\nencoder:\n  crf: 23\n", encoding="utf-8")
            config = load_config(path)
        self.assertEqual(config["render"]["fps"], 24)
        self.assertEqual(config["render"]["width"], 1920)
        self.assertEqual(config["encoder"]["crf"], 23)
        self.assertEqual(config["encoder"]["preset"], "fast")

    def test_missing_file_gives_defaults(self):
        config = load_config(Path("/nonexistent/config.yaml"))
        self.assertEqual(config["render"]["duration"], 62)

    def test_quality_preset_and_overrides(self):
        config = load_config(Path("/nonexistent/config.yaml"))
        config["render"]["quality"] = "draft"
        s = resolve_render_settings(config, duration=5.0, fps=None)
        self.assertEqual((s.width, s.height, s.fps, s.duration), (854, 480, 24, 5.0))

    def test_non_positive_values_rejected(self):
        with self.assertRaises(ValueError):
            resolve_render_settings(fps=0)
        with self.assertRaises(ValueError):
            resolve_render_settings(duration=-1.0)


class FileSink(MemorySink):
    """Writes a placeholder output on start, like ffmpeg does; can fail on close."""

    def __init__(self, output_path, fail_on_close=False, **_):
        super().__init__()
        self.output_path = Path(output_path)
        self.fail_on_close = fail_on_close

    def start(self):
        super().start()
        self.output_path.write_bytes(b"mp4")

    def close(self):
        super().close()
        if self.fail_on_close:
            raise EncoderProcessError("ffmpeg failed with exit code 1", returncode=1)
        return 0


class TestRenderVideo(unittest.TestCase):

    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.tmp = Path(self._tmp.name)
        self.settings = resolve_render_settings(width=64, height=36, fps=10, duration=1.0)

    def tearDown(self):
        self._tmp.cleanup()

    def test_partial_path(self):
        self.assertEqual(partial_path_for(Path("out/lesson.mp4")), Path("out/lesson.partial.mp4"))

    def test_dry_run_with_memory_sink(self):
        sink = MemorySink()
        path, report = render_video(
            _parse(SCENE), self.tmp / "v.mp4", settings=self.settings, config={}, sink=sink
        )
        self.assertEqual(sink.frames_written, 10)
        self.assertEqual(report.frames_written, 10)
        self.assertFalse(path.exists())

    def test_partial_file_is_renamed_on_success(self):
        scene_path = self.tmp / "scene.json"
        scene_path.write_text(json.dumps(SCENE), encoding="utf-8")
        with mock.patch("physanim.pipeline.FFmpegEncoderSink", FileSink):
            path, _ = render_video(scene_path, self.tmp / "v.mp4", settings=self.settings, config={})
        self.assertEqual(path, self.tmp / "v.mp4")
        self.assertTrue(path.exists())
        self.assertFalse((self.tmp / "v.partial.mp4").exists())

    def test_partial_file_is_removed_on_failure(self):
        def failing(output_path, **kwargs):
            return FileSink(output_path, fail_on_close=True)

        with mock.patch("physanim.pipeline.FFmpegEncoderSink", failing):
            with self.assertRaises(EncoderProcessError):
                render_video(_parse(SCENE), self.tmp / "v.mp4", settings=self.settings, config={})
        self.assertEqual(list(self.tmp.iterdir()), [])

    def test_bad_scene_fails_before_encoding(self):
        scene_path = self.tmp / "scene.json"
        scene_path.write_text('{"phases": "nope"}', encoding="utf-8")
        with mock.patch("physanim.pipeline.FFmpegEncoderSink") as sink_cls:
            with self.assertRaises(SceneParseError):
                render_video(scene_path, self.tmp / "v.mp4", settings=self.settings, config={})
        sink_cls.assert_not_called()

    def test_missing_audio_fails_before_encoding(self):
        with mock.patch("physanim.pipeline.FFmpegEncoderSink") as sink_cls:
            with self.assertRaises(FileNotFoundError):
                render_video(
                    _parse(SCENE),
                    self.tmp / "v.mp4",
                    settings=self.settings,
                    config={},
                    audio_path=self.tmp / "voice.mp3",
                )
        sink_cls.assert_not_called()
        self.assertEqual(list(self.tmp.iterdir()), [])


def _parse(data):
    from physanim.scene import parse_scene

    return parse_scene(data)


if __name__ == "__main__":
    unittest.main()
