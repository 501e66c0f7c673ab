"""
Parameter access for scene-supplied object params. Missing required values raise KeyError,
wrong types raise ValueError/TypeError; the frame loop turns both into a skipped item.
"""
from typing import Any

_REQUIRED = object()


def number(params: dict[str, Any], key: str, default: Any = _REQUIRED) -> float:
    """Float param; required unless a default is given."""
    value = params.get(key)
    if value is None:
        if default is _REQUIRED:
            raise KeyError(f"missing param '{key}'")
        return default
    if isinstance(value, bool):
        raise TypeError(f"param '{key}' must be a number, got bool")
    return float(value)


def flag(params: dict[str, Any], key: str, default: bool) -> bool:
    value = params.get(key)
    if value is None:
        return default
    return bool(value)


def text(params: dict[str, Any], key: str, default: str = "") -> str:
    value = params.get(key)
    return default if value is None else str(value)


def xy(value: Any) -> tuple[float, float]:
    """A point given as {"x":..,"y":..} or [x, y]."""
    if isinstance(value, dict):
        return float(value["x"]), float(value["y"])
    if isinstance(value, (list, tuple)) and len(value) >= 2:
        return float(value[0]), float(value[1])
    raise TypeError(f"expected a point, got {value!r}")


def points(params: dict[str, Any], key: str = "points") -> list[tuple[float, float]]:
    raw = params.get(key) or []
    if not isinstance(raw, (list, tuple)):
        raise TypeError(f"param '{key}' must be a list of points")
    return [xy(p) for p in raw]
