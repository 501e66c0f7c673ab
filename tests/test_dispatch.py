"""
Item dispatch: every catalog kind has a renderer, bad params become FAILED results,
invisible and unknown items issue no draw call.
Run from project root: python -m pytest tests/ -v
"""
import sys
import unittest
from unittest import mock
from pathlib import Path

ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from physanim.graphics.canvas import new_canvas
from physanim.graphics.coords import CoordinateMapper
from physanim.render.dispatch import RENDERERS, RenderStatus, render_item
from physanim.scene.schema import Category, ObjectKind, RenderItem

BACKGROUND = "#0e1020"

# Minimal working params for every kind
SAMPLE_PARAMS = {
    ObjectKind.LINE: {"x1": -1, "y1": 0, "x2": 1, "y2": 0, "dash": [4, 2]},
    ObjectKind.ARROW: {"x1": -1, "y1": 0, "x2": 1, "y2": 1},
    ObjectKind.CIRCLE: {"x": 0, "y": 0, "radius": 1, "fill": False},
    ObjectKind.POLYGON: {"points": [{"x": 0, "y": 0}, [1, 0], [0, 1]]},
    ObjectKind.RECTANGLE: {"x": 0, "y": 0, "width": 2, "height": 1, "angle": 30},
    ObjectKind.ARC: {"x": 0, "y": 0, "radius": 1, "startAngle": 0, "endAngle": 3.14},
    ObjectKind.BEZIER: {"x1": -2, "y1": 0, "x2": 2, "y2": 0, "cpx1": 0, "cpy1": 2},
    ObjectKind.TEXT_BOX: {"text": "F = ma", "x": 0, "y": 0},
    ObjectKind.POINT: {"x": 1, "y": 1},
    ObjectKind.PROJECTILE: {"x0": -3, "y0": 0, "v0": 5, "angle": 45},
    ObjectKind.CIRCULAR: {"cx": 0, "cy": 0, "radius": 2, "omega": 1},
    ObjectKind.SHM: {"x0": 0, "amplitude": 1, "omega": 2},
    ObjectKind.PENDULUM: {"x0": 0, "y0": 3, "length": 2, "maxAngle": 0.4, "omega": 2},
    ObjectKind.SPRING_MASS: {"x0": 0, "k": 4, "m": 1, "amplitude": 1, "anchorX": -4},
    ObjectKind.WAVE: {"amplitude": 1, "wavelength": 2, "frequency": 0.5, "xStart": -5, "xEnd": 5},
    ObjectKind.DECELERATION: {"x0": -4, "v0": 3, "a": -1, "maxDist": 4},
    ObjectKind.COULOMB: {"q1": 1e-6, "q2": -1e-6, "r": 0.5, "showForces": True},
    ObjectKind.COLLISION: {},
    ObjectKind.RADIOACTIVE_DECAY: {"N0": 1000, "lambda": 0.1},
    ObjectKind.IDEAL_GAS: {"P0": 100, "V0": 1, "T0": 300, "dTdt": 10},
    ObjectKind.REFRACTION: {"angle1": 30, "n1": 1.0, "n2": 1.5},
    ObjectKind.LENS: {"f": 1, "u": 3},
    ObjectKind.FBD: {"forces": [{"fx": 0, "fy": -2, "label": "mg"}, {"fx": 0, "fy": 2, "label": "N"}]},
    ObjectKind.GRAVITATION: {},
    ObjectKind.COORDINATE_SYSTEM: {
        "points": [{"x": 1, "y": 2, "label": "P"}, {"x": 4, "y": -1, "label": "Q"}],
        "force": {"origin": [1, 2], "components": [2, 1]},
        "boxX": 10, "boxY": 10, "boxWidth": 100, "boxHeight": 60,
    },
    ObjectKind.INCLINED_PLANE: {"angle": 25, "mu": 0.3},
    ObjectKind.ELECTRIC_FIELD: {"charges": [{"x": -2, "y": 0, "q": 1}, {"x": 2, "y": 0, "q": -1}]},
    ObjectKind.DOPPLER: {"f0": 440, "vSource": 30, "vObserver": 0},
    ObjectKind.ELECTRIC_POTENTIAL: {"q": 1e-9, "r": 0.5},
    ObjectKind.MAGNETIC_FORCE: {"q": 1, "v": 2, "B": 3},
    ObjectKind.VECTOR: {"dx": 2, "dy": 1, "showComponents": True, "label": "v"},
    ObjectKind.GRAPH: {"points": [[0, 0], [1, 1], [2, 4], [3, 9]], "reveal": True, "xLabel": "t"},
}


def _canvas():
    return new_canvas(CoordinateMapper(160, 90, 16.0, 9.0), BACKGROUND)


def _object(kind_tag, params):
    return RenderItem(
        category=Category.OBJECT,
        params=params,
        kind=ObjectKind.from_tag(kind_tag),
        type_tag=kind_tag,
    )


class TestRendererTable(unittest.TestCase):

    def test_every_kind_has_a_renderer(self):
        self.assertEqual(set(RENDERERS), set(ObjectKind))

    def test_from_tag(self):
        self.assertIs(ObjectKind.from_tag("spring-mass"), ObjectKind.SPRING_MASS)
        self.assertIsNone(ObjectKind.from_tag("Spring-Mass"))
        self.assertIsNone(ObjectKind.from_tag(None))
        self.assertIsNone(ObjectKind.from_tag(42))

    def test_every_kind_draws_with_sample_params(self):
        self.assertEqual(set(SAMPLE_PARAMS), set(ObjectKind))
        for kind, params in SAMPLE_PARAMS.items():
            with self.subTest(kind=kind.value):
                result = render_item(_canvas(), _object(kind.value, params), 2.0, 10.0)
                self.assertEqual(result.status, RenderStatus.DRAWN, result.error)


class TestRenderItem(unittest.TestCase):

    def test_projectile_state_is_returned(self):
        item = _object("projectile", {"x0": 0, "y0": 0, "v0": 10, "angle": 45})
        result = render_item(_canvas(), item, 1.0, 10.0)
        self.assertTrue(result.drawn)
        self.assertAlmostEqual(result.state.x, 7.0711, places=4)
        self.assertAlmostEqual(result.state.y, 2.0711, places=4)

    def test_missing_params_fail_without_raising(self):
        result = render_item(_canvas(), _object("projectile", {"x0": 0}), 1.0, 10.0, phase_name="throw")
        self.assertEqual(result.status, RenderStatus.FAILED)
        self.assertEqual(result.error.type_tag, "projectile")
        self.assertEqual(result.error.phase, "throw")
        self.assertIn("KeyError", str(result.error))

    def test_wrong_param_type_fails_without_raising(self):
        result = render_item(_canvas(), _object("circle", {"x": "left", "y": 0, "radius": 1}), 1.0, 10.0)
        self.assertEqual(result.status, RenderStatus.FAILED)

    def test_unknown_kind_is_skipped(self):
        canvas = _canvas()
        before = canvas.image.tobytes()
        result = render_item(canvas, _object("warp-drive", {}), 1.0, 10.0)
        self.assertEqual(result.status, RenderStatus.SKIPPED_UNKNOWN)
        self.assertEqual(canvas.image.tobytes(), before)

    def test_invisible_item_issues_no_draw(self):
        canvas = _canvas()
        before = canvas.image.tobytes()
        item = _object("rectangle", {"x": 0, "y": 0, "width": 4, "height": 4, "color": "#ff0000"})
        result = render_item(canvas, item, 0.0, 10.0)
        self.assertEqual(result.status, RenderStatus.SKIPPED_INVISIBLE)
        self.assertEqual(canvas.image.tobytes(), before)

    def test_opacity_blends_with_background(self):
        canvas = _canvas()
        item = _object("rectangle", {"x": 0, "y": 0, "width": 4, "height": 4, "color": "#ff0000"})
        result = render_item(canvas, item, 0.25, 10.0)
        self.assertAlmostEqual(result.opacity, 0.5)
        r, g, b = canvas.image.getpixel((80, 45))
        self.assertTrue(120 <= r <= 140, r)
        self.assertTrue(b < 32)

    def test_unexpected_renderer_error_fails_without_raising(self):
        def broken(canvas, params, t):
            raise OSError("invalid pixel size")

        with mock.patch.dict(RENDERERS, {ObjectKind.CIRCLE: broken}):
            result = render_item(_canvas(), _object("circle", {"x": 0, "y": 0, "radius": 1}), 1.0, 10.0)
        self.assertEqual(result.status, RenderStatus.FAILED)
        self.assertIn("OSError", str(result.error))

    def test_math_without_cache_is_skipped(self):
        item = RenderItem(category=Category.MATH, params={"latex": "x"}, type_tag="math")
        result = render_item(_canvas(), item, 2.0, 10.0)
        self.assertEqual(result.status, RenderStatus.SKIPPED_GLYPH)


if __name__ == "__main__":
    unittest.main()
