"""
Stills: one frame at a chosen time, as numpy pixels and as a PNG.
Run from project root: python -m pytest tests/ -v
"""
import sys
import tempfile
import unittest
from pathlib import Path

ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import numpy as np

from physanim.config import resolve_render_settings
from physanim.preview import frame_array, probe_video, render_still
from physanim.render.producer import FrameProducer
from physanim.scene import parse_scene

SCENE = parse_scene({"phases": [{
    "time": [0, 4],
    "objects": [{"type": "circle", "params": {"x": 0, "y": 0, "radius": 1, "color": "#00ff00"}}],
}]})


class TestRenderStill(unittest.TestCase):

    def setUp(self):
        self.settings = resolve_render_settings(width=64, height=36, world_width=16.0, world_height=9.0)

    def test_pixels_shape_and_content(self):
        pixels, report = render_still(SCENE, 2.0, settings=self.settings)
        self.assertEqual(pixels.shape, (36, 64, 3))
        self.assertEqual(pixels.dtype, np.uint8)
        self.assertEqual(tuple(pixels[18, 32]), (0, 255, 0))
        self.assertEqual(tuple(pixels[0, 0]), (14, 16, 32))
        self.assertEqual(report.drawn, 1)

    def test_writes_png(self):
        import imageio

        with tempfile.TemporaryDirectory() as tmp:
            out = Path(tmp) / "still.png"
            pixels, _ = render_still(SCENE, 2.0, out, settings=self.settings)
            back = imageio.imread(str(out))
        self.assertTrue(np.array_equal(np.asarray(back)[:, :, :3], pixels))

    def test_frame_array_is_a_copy(self):
        producer = FrameProducer(SCENE, self.settings)
        producer.render_frame(2.0)
        arr = frame_array(producer.frame)
        producer.render_frame(10.0)
        self.assertEqual(tuple(arr[18, 32]), (0, 255, 0))

    def test_probe_missing_file(self):
        with self.assertRaises(FileNotFoundError):
            probe_video(Path("/nonexistent/video.mp4"))


if __name__ == "__main__":
    unittest.main()
