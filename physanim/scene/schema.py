"""
Scene schema: phases and their render items.
Parsed once at engine start, immutable afterwards.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ObjectKind(str, Enum):
    """Closed catalog of object kinds. Unrecognised tags map to None (see from_tag)."""
    # Primitive shapes
    LINE = "line"
    ARROW = "arrow"
    CIRCLE = "circle"
    POLYGON = "polygon"
    RECTANGLE = "rectangle"
    ARC = "arc"
    BEZIER = "bezier"
    TEXT_BOX = "text_box"
    POINT = "point"
    # Physics objects
    PROJECTILE = "projectile"
    CIRCULAR = "circular"
    SHM = "shm"
    PENDULUM = "pendulum"
    SPRING_MASS = "spring-mass"
    WAVE = "wave"
    DECELERATION = "deceleration"
    COULOMB = "coulomb"
    COLLISION = "collision"
    RADIOACTIVE_DECAY = "radioactive-decay"
    IDEAL_GAS = "ideal-gas"
    REFRACTION = "refraction"
    LENS = "lens"
    FBD = "fbd"
    GRAVITATION = "gravitation"
    COORDINATE_SYSTEM = "coordinate_system"
    INCLINED_PLANE = "inclined-plane"
    ELECTRIC_FIELD = "electric-field"
    DOPPLER = "doppler"
    ELECTRIC_POTENTIAL = "electric-potential"
    MAGNETIC_FORCE = "magnetic-force"
    VECTOR = "vector"
    GRAPH = "graph"

    @classmethod
    def from_tag(cls, tag: Any) -> "ObjectKind | None":
        """Catalog member for a type tag, or None for anything unrecognised."""
        if not isinstance(tag, str):
            return None
        try:
            return cls(tag.strip())
        except ValueError:
            return None


class Category(str, Enum):
    """Render category; fixes the z-order within a phase (text < math < objects)."""
    TEXT = "text"
    MATH = "math"
    OBJECT = "object"


@dataclass(frozen=True)
class FadeSpec:
    """Fade ramp in seconds relative to phase start. None fields fall back to defaults."""
    start: float | None = None
    duration: float | None = None


@dataclass(frozen=True)
class RenderItem:
    """
    One drawable. For objects, params are the object's "params" mapping and kind is the
    catalog member (None when unknown). For text and math, params are the item's own fields.
    """
    category: Category
    params: dict[str, Any] = field(default_factory=dict)
    kind: ObjectKind | None = None
    type_tag: str = ""
    fade_in: FadeSpec | None = None
    fade_out: FadeSpec | None = None


@dataclass(frozen=True)
class Phase:
    """Time-bounded segment of the scene with its own drawables."""
    name: str
    start: float
    end: float
    text: tuple[RenderItem, ...] = ()
    math: tuple[RenderItem, ...] = ()
    objects: tuple[RenderItem, ...] = ()
    voiceover: str | None = None

    @property
    def duration(self) -> float:
        return self.end - self.start

    def contains(self, t: float) -> bool:
        return self.start <= t <= self.end

    def items_in_draw_order(self) -> list[RenderItem]:
        """Text, then math, then objects. Fixed z-order."""
        return [*self.text, *self.math, *self.objects]


@dataclass(frozen=True)
class Scene:
    """Ordered sequence of phases."""
    phases: tuple[Phase, ...] = ()

    @property
    def end_time(self) -> float:
        return max((p.end for p in self.phases), default=0.0)

    def math_items(self) -> list[RenderItem]:
        return [m for p in self.phases for m in p.math]
