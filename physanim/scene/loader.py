"""
Scene description → Scene. JSON file, JSON string, or raw LLM output with code fences.
Any structural problem fails fast with SceneParseError; unknown object types are kept
(kind=None) so the frame loop can log and skip them.
"""
import json
import logging
import math
import warnings
from pathlib import Path
from typing import Any

from ..errors import SceneParseError, UnknownKindWarning
from .schema import Category, FadeSpec, ObjectKind, Phase, RenderItem, Scene

logger = logging.getLogger(__name__)


def extract_json(text: str) -> str:
    """Strip markdown fences and return the outermost {...} block."""
    if not isinstance(text, str):
        raise SceneParseError("Scene text is not a string")
    cleaned = text.replace("```json", "").replace("```JSON", "").replace("```", "").strip()
    start = cleaned.find("{")
    end = cleaned.rfind("}")
    if start == -1 or end == -1 or end < start:
        raise SceneParseError("No JSON object found in scene text")
    return cleaned[start : end + 1]


def load_scene(path: Path | str) -> Scene:
    """Read and parse a scene file."""
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise SceneParseError(f"Cannot read scene file: {e}", source=str(path)) from e
    scene = load_scene_text(text, source=str(path))
    logger.info("Loaded scene %s (%d phases)", path, len(scene.phases))
    return scene


def load_scene_text(text: str, *, source: str = "<text>") -> Scene:
    """Parse a scene from JSON text (code fences and surrounding prose are tolerated)."""
    raw = extract_json(text)
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise SceneParseError(f"Invalid scene JSON: {e}", source=source, detail=raw[:500]) from e
    return parse_scene(data, source=source)


def parse_scene(data: Any, *, source: str = "<dict>") -> Scene:
    """Build a Scene from an already-decoded mapping."""
    if not isinstance(data, dict):
        raise SceneParseError("Scene root must be an object", source=source)
    phases_raw = data.get("phases")
    if not isinstance(phases_raw, list):
        raise SceneParseError("Scene must have a 'phases' list", source=source)
    phases = tuple(_parse_phase(p, i, source) for i, p in enumerate(phases_raw))
    _warn_on_overlaps(phases)
    _warn_on_unknown_kinds(phases, source)
    return Scene(phases=phases)


def _parse_phase(raw: Any, index: int, source: str) -> Phase:
    if not isinstance(raw, dict):
        raise SceneParseError(f"Phase {index} must be an object", source=source)
    name = str(raw.get("name") or f"phase_{index}")
    time = raw.get("time")
    if not isinstance(time, (list, tuple)) or len(time) != 2:
        raise SceneParseError(f"Phase '{name}' needs time: [start, end]", source=source)
    start = _finite(time[0], f"phase '{name}' start", source)
    end = _finite(time[1], f"phase '{name}' end", source)
    if end < start:
        raise SceneParseError(f"Phase '{name}' ends before it starts ({start} > {end})", source=source)

    text = tuple(_parse_item(t, Category.TEXT, name, source) for t in _list_field(raw, "text", name, source))
    math_items = tuple(_parse_item(m, Category.MATH, name, source) for m in _list_field(raw, "math", name, source))
    objects = tuple(_parse_object(o, name, source) for o in _list_field(raw, "objects", name, source))
    voiceover = raw.get("voiceover")
    return Phase(
        name=name,
        start=start,
        end=end,
        text=text,
        math=math_items,
        objects=objects,
        voiceover=str(voiceover) if voiceover else None,
    )


def _list_field(raw: dict, key: str, phase: str, source: str) -> list:
    value = raw.get(key)
    if value is None:
        return []
    if not isinstance(value, list):
        raise SceneParseError(f"Phase '{phase}': '{key}' must be a list", source=source)
    return value


def _parse_item(raw: Any, category: Category, phase: str, source: str) -> RenderItem:
    if not isinstance(raw, dict):
        raise SceneParseError(f"Phase '{phase}': {category.value} item must be an object", source=source)
    params = {k: v for k, v in raw.items() if k not in ("fadeIn", "fadeOut")}
    if category is Category.MATH and not isinstance(params.get("latex"), str):
        raise SceneParseError(f"Phase '{phase}': math item needs a 'latex' string", source=source)
    if category is Category.MATH:
        if params.get("targetHeight") is not None:
            params["targetHeight"] = _finite(params["targetHeight"], f"phase '{phase}' math targetHeight", source)
        color = params.get("color")
        if color is not None and not isinstance(color, str):
            raise SceneParseError(f"Phase '{phase}': math color must be a string, got {color!r}", source=source)
    return RenderItem(
        category=category,
        params=params,
        type_tag=category.value,
        fade_in=_parse_fade(raw.get("fadeIn"), phase, source),
        fade_out=_parse_fade(raw.get("fadeOut"), phase, source),
    )


def _parse_object(raw: Any, phase: str, source: str) -> RenderItem:
    if not isinstance(raw, dict):
        raise SceneParseError(f"Phase '{phase}': object must be an object", source=source)
    tag = raw.get("type")
    params = raw.get("params") or {}
    if not isinstance(params, dict):
        raise SceneParseError(f"Phase '{phase}': params of '{tag}' must be an object", source=source)
    return RenderItem(
        category=Category.OBJECT,
        params=params,
        kind=ObjectKind.from_tag(tag),
        type_tag=str(tag),
        fade_in=_parse_fade(raw.get("fadeIn"), phase, source),
        fade_out=_parse_fade(raw.get("fadeOut"), phase, source),
    )


def _parse_fade(raw: Any, phase: str, source: str) -> FadeSpec | None:
    if raw is None:
        return None
    if not isinstance(raw, dict):
        raise SceneParseError(f"Phase '{phase}': fade must be an object", source=source)
    start = raw.get("start")
    duration = raw.get("duration")
    return FadeSpec(
        start=None if start is None else _finite(start, f"phase '{phase}' fade start", source),
        duration=None if duration is None else _finite(duration, f"phase '{phase}' fade duration", source),
    )


def _finite(value: Any, what: str, source: str) -> float:
    try:
        f = float(value)
    except (TypeError, ValueError) as e:
        raise SceneParseError(f"{what} must be a number, got {value!r}", source=source) from e
    if not math.isfinite(f):
        raise SceneParseError(f"{what} must be finite, got {value!r}", source=source)
    return f


def _warn_on_overlaps(phases: tuple[Phase, ...]) -> None:
    """Overlapping or unordered phases are allowed (draws accumulate) but worth a log line."""
    for prev, cur in zip(phases, phases[1:]):
        if cur.start < prev.end:
            logger.info(
                "Phases '%s' [%s, %s] and '%s' [%s, %s] overlap or are out of order",
                prev.name, prev.start, prev.end, cur.name, cur.start, cur.end,
            )


def _warn_on_unknown_kinds(phases: tuple[Phase, ...], source: str) -> None:
    """One UnknownKindWarning per unrecognised type tag; those objects are skipped at draw time."""
    seen: set[str] = set()
    for phase in phases:
        for obj in phase.objects:
            if obj.kind is None and obj.type_tag not in seen:
                seen.add(obj.type_tag)
                warnings.warn(
                    f"{source}: unknown object type {obj.type_tag!r} in phase '{phase.name}' will be skipped",
                    UnknownKindWarning,
                    stacklevel=3,
                )
