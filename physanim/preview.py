"""
Stills and checks outside the encode loop: render one frame at time t to a PNG, view the
frame buffer as a numpy array, and probe an encoded video (size, fps, frame count).
Requires: numpy, imageio (imageio-ffmpeg for reading MP4).
"""
import logging
from pathlib import Path
from typing import Any

import numpy as np

from .config import RenderSettings, load_config, resolve_render_settings
from .graphics.canvas import Canvas
from .graphics.glyphs import GlyphCache
from .render.producer import FrameProducer, FrameReport
from .scene.loader import load_scene
from .scene.schema import Scene

logger = logging.getLogger(__name__)


def frame_array(canvas: Canvas) -> np.ndarray:
    """Frame buffer as an (H, W, 3) uint8 array (a copy)."""
    return np.array(canvas.image, dtype=np.uint8)


def render_still(
    scene: Scene | Path | str,
    t: float,
    output_path: Path | None = None,
    *,
    settings: RenderSettings | None = None,
    glyph_cache: GlyphCache | None = None,
) -> tuple[np.ndarray, FrameReport]:
    """
    Draw the scene at global time t. Writes a PNG when output_path is given.
    Returns the frame pixels and the per-item report.
    """
    if settings is None:
        settings = resolve_render_settings(load_config())
    if not isinstance(scene, Scene):
        scene = load_scene(scene)
    producer = FrameProducer(scene, settings, glyph_cache=glyph_cache)
    producer.prerender_glyphs()
    report = producer.render_frame(float(t))
    pixels = frame_array(producer.frame)
    if output_path is not None:
        import imageio

        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        imageio.imwrite(str(output_path), pixels)
        logger.info("Still at t=%.2fs written: %s", t, output_path)
    return pixels, report


def probe_video(video_path: Path, *, count_frames: bool = True) -> dict[str, Any]:
    """Read back an encoded video: fps, (width, height), duration and, optionally, frame count."""
    import imageio

    path = Path(video_path)
    if not path.exists():
        raise FileNotFoundError(f"Video not found: {path}")
    reader = imageio.get_reader(str(path), format="ffmpeg")
    try:
        meta = reader.get_meta_data()
        info: dict[str, Any] = {
            "fps": meta.get("fps"),
            "size": tuple(meta.get("size") or ()),
            "duration": meta.get("duration"),
        }
        if count_frames:
            info["frames"] = reader.count_frames()
    finally:
        reader.close()
    return info
