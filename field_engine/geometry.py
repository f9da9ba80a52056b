"""Plain value types shared by the engine (no Qt types)."""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Dict


@dataclass(frozen=True)
class Point:
    x: float
    y: float

    def __sub__(self, other: "Point") -> "Point":
        return Point(self.x - other.x, self.y - other.y)

    def __add__(self, other: "Point") -> "Point":
        return Point(self.x + other.x, self.y + other.y)

    def __iter__(self):
        return iter((self.x, self.y))


@dataclass(frozen=True)
class Size:
    width: float
    height: float

    def is_valid(self) -> bool:
        return (
            math.isfinite(self.width)
            and math.isfinite(self.height)
            and self.width > 0.0
            and self.height > 0.0
        )

    def clamped(self, minimum: "Size") -> "Size":
        """Return a copy grown per axis to at least ``minimum``."""

        return Size(max(minimum.width, self.width), max(minimum.height, self.height))


@dataclass(frozen=True)
class Rect:
    """Axis-aligned rectangle; origin semantics depend on the coordinate space."""

    x: float = 0.0
    y: float = 0.0
    width: float = 0.0
    height: float = 0.0

    @classmethod
    def from_parts(cls, origin: Point, size: Size) -> "Rect":
        return cls(origin.x, origin.y, size.width, size.height)

    @property
    def origin(self) -> Point:
        return Point(self.x, self.y)

    @property
    def size(self) -> Size:
        return Size(self.width, self.height)

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    def contains(self, point: Point) -> bool:
        return self.x <= point.x <= self.right and self.y <= point.y <= self.bottom

    def as_dict(self) -> Dict[str, float]:
        return {"x": self.x, "y": self.y, "width": self.width, "height": self.height}


ZERO_RECT = Rect()
