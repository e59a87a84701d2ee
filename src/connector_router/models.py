"""
Core value types for orthogonal connector routing.

Provides the small, immutable geometry vocabulary the router works in:
points, shapes (centre-based, rotated and scaled rectangles), cardinal
directions and axis-aligned boxes.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class Direction(Enum):
    """Cardinal side of a shape a connector leaves from (screen Y points down)."""
    UP = "up"
    DOWN = "down"
    LEFT = "left"
    RIGHT = "right"

    @property
    def is_vertical(self) -> bool:
        return self in (Direction.UP, Direction.DOWN)

    @property
    def opposite(self) -> Direction:
        return _OPPOSITES[self]


_OPPOSITES = {
    Direction.UP: Direction.DOWN,
    Direction.DOWN: Direction.UP,
    Direction.LEFT: Direction.RIGHT,
    Direction.RIGHT: Direction.LEFT,
}


# ---------------------------------------------------------------------------
# Data classes
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Point:
    """A 2-D coordinate."""
    x: float
    y: float

    def isclose(self, other: Point, eps: float = 1e-6) -> bool:
        """Tolerant equality, absolute within *eps*."""
        return abs(self.x - other.x) <= eps and abs(self.y - other.y) <= eps

    def to_dict(self) -> dict[str, float]:
        return {"x": self.x, "y": self.y}


@dataclass(frozen=True)
class GridPoint:
    """A candidate waypoint; *score* only matters while picking the best path."""
    x: float
    y: float
    score: float = 0.0

    @property
    def point(self) -> Point:
        return Point(self.x, self.y)


@dataclass(frozen=True)
class Shape:
    """Centre-based rectangle with rotation (degrees) and independent scale.

    Routing only reads shapes; they describe the two endpoint obstacles.
    """
    x: float
    y: float
    width: float
    height: float
    rotation: float = 0
    scale_x: float = 1
    scale_y: float = 1

    @property
    def center(self) -> Point:
        return Point(self.x, self.y)

    @classmethod
    def from_dict(cls, data: dict) -> Shape:
        return cls(
            x=data["x"],
            y=data["y"],
            width=data["width"],
            height=data["height"],
            rotation=data.get("rotation", 0),
            scale_x=data.get("scale_x", 1),
            scale_y=data.get("scale_y", 1),
        )


@dataclass(frozen=True)
class RectangleVertices:
    """Transformed corners of a shape plus the midpoints of its edges."""
    top_left: Point
    top_right: Point
    bottom_left: Point
    bottom_right: Point
    top_center: Point
    left_center: Point
    right_center: Point
    bottom_center: Point

    @property
    def corners(self) -> tuple[Point, Point, Point, Point]:
        return (self.top_left, self.top_right, self.bottom_right, self.bottom_left)


@dataclass(frozen=True)
class BoxGeometry:
    """Axis-aligned bounding box used as a routing obstacle.

    Bounds given in the wrong order are swapped so ``right >= left`` and
    ``bottom >= top`` always hold; a zero-size box degenerates to a point.
    """
    top: float
    left: float
    right: float
    bottom: float

    def __post_init__(self) -> None:
        if self.right < self.left:
            left, right = self.right, self.left
            object.__setattr__(self, "left", left)
            object.__setattr__(self, "right", right)
        if self.bottom < self.top:
            top, bottom = self.bottom, self.top
            object.__setattr__(self, "top", top)
            object.__setattr__(self, "bottom", bottom)

    @property
    def width(self) -> float:
        return self.right - self.left

    @property
    def height(self) -> float:
        return self.bottom - self.top

    @property
    def center(self) -> Point:
        return Point((self.left + self.right) / 2, (self.top + self.bottom) / 2)

    @property
    def top_left(self) -> Point:
        return Point(self.left, self.top)

    @property
    def top_right(self) -> Point:
        return Point(self.right, self.top)

    @property
    def bottom_left(self) -> Point:
        return Point(self.left, self.bottom)

    @property
    def bottom_right(self) -> Point:
        return Point(self.right, self.bottom)

    def side(self, direction: Direction) -> float:
        """Coordinate of the side facing *direction* (y for UP/DOWN, x otherwise)."""
        return {
            Direction.UP: self.top,
            Direction.DOWN: self.bottom,
            Direction.LEFT: self.left,
            Direction.RIGHT: self.right,
        }[direction]

    def cross_bounds(self, direction: Direction) -> tuple[float, float]:
        """Low/high bounds on the axis perpendicular to *direction*."""
        if direction.is_vertical:
            return self.left, self.right
        return self.top, self.bottom

    def edge(self, direction: Direction) -> tuple[Point, Point]:
        """The side facing *direction* as a segment."""
        return {
            Direction.UP: (self.top_left, self.top_right),
            Direction.DOWN: (self.bottom_left, self.bottom_right),
            Direction.LEFT: (self.top_left, self.bottom_left),
            Direction.RIGHT: (self.top_right, self.bottom_right),
        }[direction]


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def along(direction: Direction, main: float, cross: float) -> Point:
    """Build a point from coordinates on *direction*'s axis and the other one."""
    if direction.is_vertical:
        return Point(cross, main)
    return Point(main, cross)


def main_coord(direction: Direction, point: Point) -> float:
    return point.y if direction.is_vertical else point.x


def cross_coord(direction: Direction, point: Point) -> float:
    return point.x if direction.is_vertical else point.y


def distance(a: Point, b: Point) -> float:
    return math.hypot(b.x - a.x, b.y - a.y)


def manhattan_distance(a: Point, b: Point) -> float:
    return abs(b.x - a.x) + abs(b.y - a.y)
