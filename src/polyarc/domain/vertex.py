"""Core value types for polyline geometry.

This module defines the immutable building blocks used throughout polyarc:
- Point: A 2D position
- Vertex: A polyline vertex with the bulge of the segment that leaves it
- AABB: An axis-aligned bounding box
"""

import math
from dataclasses import dataclass
from typing import Any

# Bulge magnitudes below this are treated as straight segments
BULGE_ZERO_EPS = 1e-8


@dataclass(frozen=True, slots=True)
class Point:
    """A point in 2D space.

    Immutable and hashable for use in sets/dicts.

    Attributes:
        x: X coordinate
        y: Y coordinate
    """

    x: float
    y: float

    def to_tuple(self) -> tuple[float, float]:
        """Convert to simple (x, y) tuple."""
        return (self.x, self.y)

    def distance_to(self, other: "Point") -> float:
        """Euclidean distance to another point."""
        return math.hypot(other.x - self.x, other.y - self.y)

    def almost_equal(self, other: "Point", eps: float = 1e-5) -> bool:
        """Check whether two points coincide within eps (per axis).

        Args:
            other: Point to compare against
            eps: Absolute position tolerance

        Returns:
            True if both coordinates differ by less than eps
        """
        return abs(self.x - other.x) < eps and abs(self.y - other.y) < eps


@dataclass(frozen=True, slots=True)
class Vertex:
    """A polyline vertex.

    The bulge describes the segment from this vertex to the next one:
    zero for a straight line, otherwise tan(sweep / 4) of a circular arc
    with positive values sweeping counter-clockwise.

    Attributes:
        x: X coordinate
        y: Y coordinate
        bulge: Bulge of the outgoing segment
    """

    x: float
    y: float
    bulge: float = 0.0

    @property
    def pos(self) -> Point:
        """Position of the vertex."""
        return Point(self.x, self.y)

    @property
    def is_line(self) -> bool:
        """True when the outgoing segment is straight."""
        return abs(self.bulge) < BULGE_ZERO_EPS

    @property
    def is_arc(self) -> bool:
        """True when the outgoing segment is a circular arc."""
        return not self.is_line

    @property
    def is_ccw_arc(self) -> bool:
        return self.is_arc and self.bulge > 0.0

    def with_bulge(self, bulge: float) -> "Vertex":
        """Return a copy of this vertex with a different bulge."""
        return Vertex(self.x, self.y, bulge)

    def with_position(self, x: float, y: float) -> "Vertex":
        """Return a copy of this vertex moved to (x, y)."""
        return Vertex(x, y, self.bulge)

    def distance_to(self, other: "Vertex | Point") -> float:
        return math.hypot(other.x - self.x, other.y - self.y)

    def almost_equal(self, other: "Vertex", eps: float = 1e-5) -> bool:
        """Fuzzy comparison of position and bulge."""
        return (
            abs(self.x - other.x) < eps
            and abs(self.y - other.y) < eps
            and abs(self.bulge - other.bulge) < eps
        )

    def to_tuple(self) -> tuple[float, float, float]:
        """Convert to an (x, y, bulge) triple."""
        return (self.x, self.y, self.bulge)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary for IPC."""
        return {"x": self.x, "y": self.y, "bulge": self.bulge}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Vertex":
        """Deserialize from dictionary.

        Args:
            data: Dictionary with x, y and optional bulge fields

        Returns:
            Vertex instance
        """
        return cls(
            x=float(data["x"]),
            y=float(data["y"]),
            bulge=float(data.get("bulge", 0.0)),
        )


@dataclass(frozen=True, slots=True)
class AABB:
    """An axis-aligned bounding box.

    An index with no segments reports an empty box whose corners are NaN.

    Attributes:
        min_x: Minimum X coordinate
        min_y: Minimum Y coordinate
        max_x: Maximum X coordinate
        max_y: Maximum Y coordinate
    """

    min_x: float
    min_y: float
    max_x: float
    max_y: float

    @classmethod
    def empty(cls) -> "AABB":
        """Return the NaN-cornered empty box."""
        nan = math.nan
        return cls(nan, nan, nan, nan)

    @classmethod
    def from_points(cls, points: "list[Point]") -> "AABB":
        """Smallest box containing all points."""
        xs = [p.x for p in points]
        ys = [p.y for p in points]
        return cls(min(xs), min(ys), max(xs), max(ys))

    @property
    def is_empty(self) -> bool:
        return math.isnan(self.min_x)

    @property
    def width(self) -> float:
        return self.max_x - self.min_x

    @property
    def height(self) -> float:
        return self.max_y - self.min_y

    @property
    def center(self) -> Point:
        return Point((self.min_x + self.max_x) / 2.0, (self.min_y + self.max_y) / 2.0)

    def union(self, other: "AABB") -> "AABB":
        """Smallest box containing both boxes."""
        if self.is_empty:
            return other
        if other.is_empty:
            return self
        return AABB(
            min(self.min_x, other.min_x),
            min(self.min_y, other.min_y),
            max(self.max_x, other.max_x),
            max(self.max_y, other.max_y),
        )

    def expanded(self, amount: float) -> "AABB":
        """Grow the box by amount on every side."""
        return AABB(
            self.min_x - amount,
            self.min_y - amount,
            self.max_x + amount,
            self.max_y + amount,
        )

    def intersects(self, other: "AABB") -> bool:
        """True if the boxes overlap or touch.

        Empty boxes never intersect anything (NaN comparisons are false).
        """
        return (
            self.min_x <= other.max_x
            and self.max_x >= other.min_x
            and self.min_y <= other.max_y
            and self.max_y >= other.min_y
        )

    def contains_point(self, x: float, y: float) -> bool:
        return self.min_x <= x <= self.max_x and self.min_y <= y <= self.max_y

    def almost_equal(self, other: "AABB", eps: float = 1e-5) -> bool:
        """Fuzzy comparison of all four corners."""
        return (
            abs(self.min_x - other.min_x) < eps
            and abs(self.min_y - other.min_y) < eps
            and abs(self.max_x - other.max_x) < eps
            and abs(self.max_y - other.max_y) < eps
        )

    def to_tuple(self) -> tuple[float, float, float, float]:
        """Convert to (min_x, min_y, max_x, max_y) tuple."""
        return (self.min_x, self.min_y, self.max_x, self.max_y)
