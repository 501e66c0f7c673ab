"""
Scene model: phases, render items, object kind catalog, and the loader.
"""
from .schema import Category, FadeSpec, ObjectKind, Phase, RenderItem, Scene
from .loader import extract_json, load_scene, load_scene_text, parse_scene

__all__ = [
    "Category",
    "FadeSpec",
    "ObjectKind",
    "Phase",
    "RenderItem",
    "Scene",
    "extract_json",
    "load_scene",
    "load_scene_text",
    "parse_scene",
]
