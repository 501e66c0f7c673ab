"""
physanim: deterministic scene-to-video renderer for physics explainers.
A scene (phases of text, math and physics objects) is sampled at a fixed frame rate,
drawn with Pillow and piped into ffmpeg as raw RGBA frames.
"""
from .config import RenderSettings, load_config, resolve_render_settings
from .errors import (
    EncoderProcessError,
    GlyphRenderError,
    ObjectRenderError,
    PhysanimError,
    RenderCancelled,
    SceneParseError,
    UnknownKindWarning,
)
from .pipeline import render_video
from .scene import Scene, load_scene, load_scene_text

__version__ = "0.1.0"

__all__ = [
    "EncoderProcessError",
    "GlyphRenderError",
    "ObjectRenderError",
    "PhysanimError",
    "RenderCancelled",
    "RenderSettings",
    "Scene",
    "SceneParseError",
    "UnknownKindWarning",
    "load_config",
    "load_scene",
    "load_scene_text",
    "render_video",
    "resolve_render_settings",
]
