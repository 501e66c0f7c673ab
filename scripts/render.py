#!/usr/bin/env python3
"""
CLI: Render one scene description (JSON) to one MP4 file.
Usage:
  python scripts/render.py scene.json
  python scripts/render.py scene.json --output out/lesson.mp4 --quality draft
  python scripts/render.py scene.json --audio voiceover.mp3 --duration 30
  python scripts/render.py scene.json --dry-run
  python scripts/render.py scene.json --still 12.5 --output frame.png
"""
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

import argparse
import logging

from physanim.config import load_config, resolve_render_settings
from physanim.errors import EncoderProcessError, RenderCancelled, SceneParseError
from physanim.pipeline import render_video
from physanim.preview import render_still
from physanim.render.encoder import MemorySink
from physanim.scene import load_scene
from physanim.workflow_utils import configure_logging, setup_graceful_shutdown

logger = logging.getLogger("physanim.cli")


def main() -> int:
    parser = argparse.ArgumentParser(
        description="Render a physics scene description to an MP4 video (Pillow + ffmpeg)."
    )
    parser.add_argument("scene", type=Path, help="Path to the scene JSON file.")
    parser.add_argument(
        "--output",
        "-o",
        type=Path,
        default=None,
        help="Output video path (default: output/physics_<timestamp>.mp4).",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to config YAML (default: config/default.yaml).",
    )
    parser.add_argument("--fps", type=int, default=None, help="Frames per second (default from config: 30).")
    parser.add_argument(
        "--duration",
        "-d",
        type=float,
        default=None,
        help="Video duration in seconds (default from config: 62).",
    )
    parser.add_argument(
        "--quality",
        choices=["draft", "standard", "high"],
        default=None,
        help="Resolution/fps preset; overrides config width/height/fps.",
    )
    parser.add_argument("--audio", type=Path, default=None, help="Optional audio track to mux in.")
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Produce every frame but discard it (no ffmpeg, no file).",
    )
    parser.add_argument(
        "--still",
        type=float,
        default=None,
        metavar="SECONDS",
        help="Write a single PNG frame at this time instead of a video.",
    )
    parser.add_argument("--log-level", default="INFO", help="Logging level (default: INFO).")
    args = parser.parse_args()

    configure_logging(args.log_level)
    config = load_config(args.config)
    if args.quality:
        config.setdefault("render", {})["quality"] = args.quality
    try:
        settings = resolve_render_settings(config, fps=args.fps, duration=args.duration)
    except ValueError as e:
        parser.error(str(e))

    stop_event = setup_graceful_shutdown()
    sink = MemorySink() if args.dry_run else None

    try:
        scene = load_scene(args.scene)
        print(f"Scene: {args.scene} ({len(scene.phases)} phases)")
        if args.still is not None:
            still_path = args.output or args.scene.with_suffix(".png")
            _, frame_report = render_still(scene, args.still, still_path, settings=settings)
            print(f"Done. Still: {still_path} ({frame_report.drawn} items drawn)")
            return 0
        print(f"Video: {settings.width}x{settings.height} @ {settings.fps} fps, {settings.duration}s")
        path, report = render_video(
            scene,
            args.output,
            config=config,
            settings=settings,
            audio_path=args.audio,
            stop_event=stop_event,
            sink=sink,
        )
    except SceneParseError as e:
        logger.error("Scene could not be loaded: %s", e)
        return 2
    except FileNotFoundError as e:
        logger.error("%s", e)
        return 2
    except RenderCancelled:
        logger.warning("Render cancelled; no video written")
        return 130
    except EncoderProcessError as e:
        logger.error("Encoding failed: %s", e)
        if e.stderr:
            print(e.stderr, file=sys.stderr)
        return 1

    if args.dry_run:
        print(f"Dry run: {report.frames_written} frames produced, {report.item_failures} item failures")
    else:
        print(f"Done. Video: {path}")
    if report.unknown_types:
        print(f"Skipped unknown object types: {', '.join(sorted(report.unknown_types))}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
