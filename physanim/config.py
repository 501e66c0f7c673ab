"""
Load and expose render config (YAML). Used by the pipeline and CLI to get fps, duration,
resolution, world extent, encoder settings and glyph settings.
"""
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml


def _project_root() -> Path:
    return Path(__file__).resolve().parent.parent


def load_config(config_path: Path | None = None) -> dict[str, Any]:
    """Load config from YAML. Path is optional; defaults to config/default.yaml."""
    if config_path is None:
        config_path = _project_root() / "config" / "default.yaml"
    path = Path(config_path)
    if not path.exists():
        return _defaults()
    with open(path, encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    return _merge(_defaults(), data)


_QUALITY_PRESETS: dict[str, tuple[int, int, int]] = {
    "draft": (854, 480, 24),
    "standard": (1280, 720, 30),
    "high": (1920, 1080, 30),
}


def _defaults() -> dict[str, Any]:
    return {
        "render": {
            "fps": 30,
            "duration": 62,
            "width": 1920,
            "height": 1080,
            "world_width": 14.22,
            "world_height": 8,
            "background": "#0e1020",
            "quality": None,
        },
        "encoder": {
            "ffmpeg_bin": None,
            "preset": "fast",
            "crf": 18,
            "max_pending_frames": 8,
        },
        "glyphs": {
            "workers": 4,
            "calibration": 1.0,
            "default_height": 28,
            "default_color": "#fff",
        },
        "output": {
            "dir": "output",
            "filename_prefix": "physics",
        },
    }


def _merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Nested merge: override wins, sections are merged key by key."""
    out = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(out.get(key), dict):
            out[key] = _merge(out[key], value)
        else:
            out[key] = value
    return out


@dataclass(frozen=True)
class RenderSettings:
    """Fixed inputs to one render run."""
    fps: int = 30
    duration: float = 62.0
    width: int = 1920
    height: int = 1080
    world_width: float = 14.22
    world_height: float = 8.0
    background: str = "#0e1020"
    ffmpeg_bin: str | None = None
    preset: str = "fast"
    crf: int = 18
    max_pending_frames: int = 8
    glyph_workers: int = 4
    glyph_calibration: float = 1.0
    glyph_default_height: int = 28
    glyph_default_color: str = "#fff"

    @property
    def total_frames(self) -> int:
        return total_frames(self.fps, self.duration)


def total_frames(fps: float, duration: float) -> int:
    """Frame count for a run: fps × duration (rounded to absorb float noise)."""
    return int(round(fps * duration))


def resolve_render_config(config: dict[str, Any]) -> dict[str, Any]:
    """Resolve render config: quality preset overrides width/height/fps if set."""
    out = dict(config.get("render", {}))
    quality = out.get("quality")
    if quality and quality in _QUALITY_PRESETS:
        w, h, fps = _QUALITY_PRESETS[quality]
        out["width"] = w
        out["height"] = h
        out["fps"] = fps
    return out


def resolve_render_settings(
    config: dict[str, Any] | None = None,
    **overrides: Any,
) -> RenderSettings:
    """
    Build RenderSettings from a config dict. Keyword overrides (e.g. from CLI flags)
    win over config values when not None.
    """
    if config is None:
        config = _defaults()
    render = resolve_render_config(config)
    encoder = config.get("encoder", {})
    glyphs = config.get("glyphs", {})
    values: dict[str, Any] = {
        "fps": int(render.get("fps", 30)),
        "duration": float(render.get("duration", 62)),
        "width": int(render.get("width", 1920)),
        "height": int(render.get("height", 1080)),
        "world_width": float(render.get("world_width", 14.22)),
        "world_height": float(render.get("world_height", 8)),
        "background": str(render.get("background", "#0e1020")),
        "ffmpeg_bin": encoder.get("ffmpeg_bin"),
        "preset": str(encoder.get("preset", "fast")),
        "crf": int(encoder.get("crf", 18)),
        "max_pending_frames": max(1, int(encoder.get("max_pending_frames", 8))),
        "glyph_workers": max(1, int(glyphs.get("workers", 4))),
        "glyph_calibration": float(glyphs.get("calibration", 1.0)),
        "glyph_default_height": int(glyphs.get("default_height", 28)),
        "glyph_default_color": str(glyphs.get("default_color", "#fff")),
    }
    for key, value in overrides.items():
        if value is not None:
            values[key] = value
    if values["fps"] <= 0:
        raise ValueError(f"fps must be positive, got {values['fps']}")
    if values["duration"] <= 0:
        raise ValueError(f"duration must be positive, got {values['duration']}")
    return RenderSettings(**values)


def get_output_dir(config: dict[str, Any]) -> Path:
    """Resolve output directory (relative to project root if needed)."""
    out = config.get("output", {})
    d = out.get("dir", "output")
    p = Path(d)
    if not p.is_absolute():
        p = _project_root() / p
    return p
