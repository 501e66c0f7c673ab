"""
Pipeline: one scene description → one MP4 file.
The video is encoded into <name>.partial.mp4 and renamed over the final path only after
the encoder exits cleanly; a failed or cancelled run leaves no file behind.
"""
import logging
import threading
from datetime import datetime
from pathlib import Path
from typing import Any

from .config import RenderSettings, get_output_dir, load_config, resolve_render_settings
from .graphics.glyphs import GlyphCache
from .render.encoder import EncoderSink, FFmpegEncoderSink
from .render.producer import FrameProducer, RenderReport
from .scene.loader import load_scene
from .scene.schema import Scene
from .workflow_utils import log_structured

logger = logging.getLogger(__name__)


def render_video(
    scene: Scene | Path | str,
    output_path: Path | None = None,
    *,
    config: dict[str, Any] | None = None,
    settings: RenderSettings | None = None,
    audio_path: Path | None = None,
    stop_event: threading.Event | None = None,
    sink: EncoderSink | None = None,
    glyph_cache: GlyphCache | None = None,
) -> tuple[Path, RenderReport]:
    """
    Render a scene (a Scene, or a path to its JSON) to output_path. Returns (path, report).
    With a custom sink nothing is written to disk and the returned path is only nominal.
    Raises SceneParseError, EncoderProcessError or RenderCancelled; FileNotFoundError for a
    missing audio file.
    """
    if config is None:
        config = load_config()
    if settings is None:
        settings = resolve_render_settings(config)
    if not isinstance(scene, Scene):
        scene = load_scene(scene)

    if output_path is None:
        out_dir = get_output_dir(config)
        out_dir.mkdir(parents=True, exist_ok=True)
        output_path = out_dir / _next_filename(config, "physics")
    output_path = Path(output_path)
    if output_path.suffix == "":
        output_path = output_path.with_suffix(".mp4")
    partial_path = partial_path_for(output_path)

    if audio_path is not None and not Path(audio_path).exists():
        raise FileNotFoundError(f"Audio file not found: {audio_path}")

    owns_file = sink is None
    if sink is None:
        sink = FFmpegEncoderSink(
            partial_path,
            width=settings.width,
            height=settings.height,
            fps=settings.fps,
            preset=settings.preset,
            crf=settings.crf,
            audio_path=audio_path,
            ffmpeg_bin=settings.ffmpeg_bin,
            max_pending_frames=settings.max_pending_frames,
        )
    producer = FrameProducer(scene, settings, glyph_cache=glyph_cache, sink=sink, stop_event=stop_event)

    try:
        report = producer.run()
    except BaseException:
        if owns_file:
            partial_path.unlink(missing_ok=True)
        log_structured("error", event="render_failed", output=str(output_path), **producer.report.to_dict())
        raise

    if owns_file:
        partial_path.replace(output_path)
        logger.info("Video written: %s", output_path)
    log_structured("info", event="render_finished", output=str(output_path), **report.to_dict())
    return output_path, report


def partial_path_for(output_path: Path) -> Path:
    """video.mp4 → video.partial.mp4"""
    output_path = Path(output_path)
    return output_path.with_name(f"{output_path.stem}.partial{output_path.suffix or '.mp4'}")


def _next_filename(config: dict[str, Any], default_prefix: str) -> str:
    """prefix + timestamp to avoid overwrites."""
    prefix = config.get("output", {}).get("filename_prefix", default_prefix)
    return f"{prefix}_{datetime.now().strftime('%Y%m%d_%H%M%S')}.mp4"
