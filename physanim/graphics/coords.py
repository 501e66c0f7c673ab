"""
World → pixel coordinates. World origin sits at the canvas centre, world y points up.
"""
from dataclasses import dataclass, field


@dataclass(frozen=True)
class CoordinateMapper:
    """Uniform world-to-pixel mapping; the same scale on both axes keeps shapes undistorted."""
    width: int
    height: int
    world_width: float
    world_height: float
    px_per_unit: float = field(init=False)

    def __post_init__(self) -> None:
        scale = min(self.width / self.world_width, self.height / self.world_height)
        object.__setattr__(self, "px_per_unit", scale)

    def to_px_x(self, x: float) -> float:
        return self.width / 2 + x * self.px_per_unit

    def to_px_y(self, y: float) -> float:
        return self.height / 2 - y * self.px_per_unit

    def to_px(self, x: float, y: float) -> tuple[float, float]:
        return self.to_px_x(x), self.to_px_y(y)

    def length(self, units: float) -> float:
        """World length → pixel length."""
        return units * self.px_per_unit
