"""Polyline model built from line and arc segments.

This module defines the Polyline value type and its geometric queries:
- Polyline: Ordered bulge vertices with a closed flag and a userdata tag
- Orientation: Enum for the winding of a closed polyline
- require_polyline: Guard used by operations that take polyline arguments
"""

import math
from collections.abc import Iterable, Iterator
from enum import Enum, auto
from typing import Any

from polyarc.domain.segment import (
    angle_of,
    arc_radius_and_center,
    bulge_from_sweep,
    bulge_sweep,
    seg_bounding_box,
    seg_closest_point,
    seg_length,
)
from polyarc.domain.spatial_index import AabbIndex
from polyarc.domain.vertex import AABB, Point, Vertex
from polyarc.exceptions import (
    InsufficientVerticesError,
    InvalidHandleError,
    UserdataValueError,
    VertexIndexError,
)

USERDATA_MAX = 2**64 - 1


class Orientation(Enum):
    """Winding of a polyline.

    - COUNTER_CLOCKWISE: closed with positive signed area (island)
    - CLOCKWISE: closed with negative signed area (hole)
    - OPEN: not closed, or closed with zero area
    """

    COUNTER_CLOCKWISE = auto()
    CLOCKWISE = auto()
    OPEN = auto()


def require_polyline(value: object, argument: str = "pline") -> "Polyline":
    """Return value if it is a Polyline, otherwise raise InvalidHandleError."""
    if not isinstance(value, Polyline):
        raise InvalidHandleError(argument, "Polyline", value)
    return value


def _validate_userdata(value: object) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise UserdataValueError(value)
    if value < 0 or value > USERDATA_MAX:
        raise UserdataValueError(value)
    return value


def _as_vertex(item: "Vertex | Iterable[float]") -> Vertex:
    if isinstance(item, Vertex):
        return item
    values = tuple(item)
    if len(values) == 2:
        return Vertex(float(values[0]), float(values[1]))
    x, y, bulge = values
    return Vertex(float(x), float(y), float(bulge))


class Polyline:
    """An ordered sequence of bulge vertices.

    Segment i runs from vertex i to vertex i + 1; a closed polyline adds an
    implicit segment from the last vertex back to the first. The polyline
    exclusively owns its vertex list; ``vertices`` returns an immutable
    snapshot and every operation that produces geometry returns new objects.

    Attributes:
        closed: Whether the final vertex connects back to the first
        userdata: Opaque caller tag (unsigned 64-bit), preserved by clone
            and in-place transformations

    Example:
        pline = Polyline(closed=True)
        pline.add_vertex(0, 0)
        pline.add_vertex(10, 0, 1.0)
        pline.add_vertex(10, 10)
        area = pline.area()
    """

    __slots__ = ("_vertices", "closed", "_userdata")

    def __init__(
        self,
        vertices: Iterable["Vertex | Iterable[float]"] = (),
        closed: bool = False,
        userdata: int = 0,
    ) -> None:
        self._vertices: list[Vertex] = [_as_vertex(v) for v in vertices]
        self.closed = closed
        self._userdata = _validate_userdata(userdata)

    @classmethod
    def from_points(
        cls, points: Iterable[tuple[float, float]], closed: bool = False
    ) -> "Polyline":
        """Build a polyline of straight segments from (x, y) pairs."""
        return cls((Vertex(float(x), float(y)) for x, y in points), closed=closed)

    # ------------------------------------------------------------------
    # Vertex access and mutation

    @property
    def userdata(self) -> int:
        return self._userdata

    @userdata.setter
    def userdata(self, value: int) -> None:
        self._userdata = _validate_userdata(value)

    @property
    def vertices(self) -> tuple[Vertex, ...]:
        """Read-only snapshot of the vertices."""
        return tuple(self._vertices)

    @property
    def vertex_count(self) -> int:
        return len(self._vertices)

    @property
    def segment_count(self) -> int:
        """Number of segments, including the closing one when closed."""
        n = len(self._vertices)
        if n < 2:
            return 0
        return n if self.closed else n - 1

    def __len__(self) -> int:
        return len(self._vertices)

    def __iter__(self) -> Iterator[Vertex]:
        # Pull by index so the iterator is restartable and always sees
        # the current vertex list.
        index = 0
        while index < len(self._vertices):
            yield self._vertices[index]
            index += 1

    def __getitem__(self, index: int) -> Vertex:
        return self.get_vertex(index)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Polyline):
            return NotImplemented
        return (
            self._vertices == other._vertices
            and self.closed == other.closed
            and self._userdata == other._userdata
        )

    def __repr__(self) -> str:
        return (
            f"Polyline(vertices={len(self._vertices)}, closed={self.closed}, "
            f"userdata={self._userdata})"
        )

    def _check_index(self, index: int) -> None:
        if not 0 <= index < len(self._vertices):
            raise VertexIndexError(index, len(self._vertices))

    def get_vertex(self, index: int) -> Vertex:
        """Get vertex at index.

        Raises:
            VertexIndexError: If index is outside [0, vertex_count)
        """
        self._check_index(index)
        return self._vertices[index]

    def set_vertex(self, index: int, vertex: "Vertex | Iterable[float]") -> None:
        """Replace vertex at index.

        Raises:
            VertexIndexError: If index is outside [0, vertex_count)
        """
        self._check_index(index)
        self._vertices[index] = _as_vertex(vertex)

    def remove_vertex(self, index: int) -> Vertex:
        """Remove and return vertex at index.

        Raises:
            VertexIndexError: If index is outside [0, vertex_count)
        """
        self._check_index(index)
        return self._vertices.pop(index)

    def add_vertex(self, x: float, y: float, bulge: float = 0.0) -> None:
        """Append a vertex."""
        self._vertices.append(Vertex(x, y, bulge))

    def append(self, vertex: Vertex) -> None:
        self._vertices.append(vertex)

    def add_or_replace_vertex(self, vertex: Vertex, eps: float = 1e-5) -> None:
        """Append vertex, or overwrite the last bulge if positions coincide.

        Used when building polylines piecewise so that joins never produce
        zero-length segments.
        """
        if self._vertices and self._vertices[-1].pos.almost_equal(vertex.pos, eps):
            last = self._vertices[-1]
            self._vertices[-1] = Vertex(last.x, last.y, vertex.bulge)
            return
        self._vertices.append(vertex)

    def extend(self, vertices: Iterable["Vertex | Iterable[float]"]) -> None:
        self._vertices.extend(_as_vertex(v) for v in vertices)

    def set_vertices(self, vertices: Iterable["Vertex | Iterable[float]"]) -> None:
        """Replace the whole vertex sequence."""
        self._vertices = [_as_vertex(v) for v in vertices]

    def clear(self) -> None:
        self._vertices.clear()

    def reserve(self, capacity: int) -> None:
        """Capacity hint; Python lists grow on demand so this is a no-op."""
        if capacity < 0:
            raise ValueError("capacity must be non-negative")

    def clone(self) -> "Polyline":
        """Deep copy including closed flag and userdata."""
        copy = Polyline(closed=self.closed, userdata=self._userdata)
        copy._vertices = list(self._vertices)
        return copy

    def segments(self) -> Iterator[tuple[Vertex, Vertex]]:
        """Yield (start, end) vertex pairs for every segment."""
        n = len(self._vertices)
        if n < 2:
            return
        for i in range(n - 1):
            yield self._vertices[i], self._vertices[i + 1]
        if self.closed:
            yield self._vertices[-1], self._vertices[0]

    def segment(self, index: int) -> tuple[Vertex, Vertex]:
        """Return the (start, end) vertices of segment index."""
        if not 0 <= index < self.segment_count:
            raise VertexIndexError(index, self.segment_count)
        n = len(self._vertices)
        return self._vertices[index], self._vertices[(index + 1) % n]

    # ------------------------------------------------------------------
    # Geometric queries

    def path_length(self) -> float:
        """Sum of segment lengths (0 for fewer than 2 vertices)."""
        return sum(seg_length(v1, v2) for v1, v2 in self.segments())

    def area(self) -> float:
        """Signed enclosed area.

        Shoelace sum over the chords plus a signed circular segment term per
        arc. Positive for counter-clockwise polylines. On an open polyline
        the closing chord is counted as a straight edge.

        Returns:
            Signed area, 0.0 for fewer than 2 vertices
        """
        n = len(self._vertices)
        if n < 2:
            return 0.0

        # shoelace about the first vertex
        ox = self._vertices[0].x
        oy = self._vertices[0].y
        double_area = 0.0
        for i in range(n):
            v1 = self._vertices[i]
            v2 = self._vertices[(i + 1) % n]
            double_area += (v1.x - ox) * (v2.y - oy) - (v2.x - ox) * (v1.y - oy)

        arc_area = 0.0
        for v1, v2 in self.segments():
            if v1.is_line or (v1.x == v2.x and v1.y == v2.y):
                continue
            radius, _ = arc_radius_and_center(v1, v2)
            sweep = bulge_sweep(v1.bulge)
            # circular segment: sector minus triangle, signed by sweep
            arc_area += 0.5 * radius * radius * (sweep - math.sin(sweep))

        return double_area / 2.0 + arc_area

    def orientation(self) -> Orientation:
        if not self.closed:
            return Orientation.OPEN
        area = self.area()
        if area > 0.0:
            return Orientation.COUNTER_CLOCKWISE
        if area < 0.0:
            return Orientation.CLOCKWISE
        return Orientation.OPEN

    def winding_number(self, x: float, y: float) -> int:
        """Winding number of the closed polyline around (x, y).

        Casts a ray towards +X and counts signed crossings. Arcs are split
        at their top and bottom extremes into pieces that are monotonic in
        Y, so every piece follows the same half-open crossing rule as a
        line. Open polylines and polylines with fewer than 2 vertices
        always return 0.

        Args:
            x: Query X coordinate
            y: Query Y coordinate

        Returns:
            Signed wrap count, positive for counter-clockwise polylines
        """
        if not self.closed or len(self._vertices) < 2:
            return 0

        winding = 0
        for v1, v2 in self.segments():
            if v1.is_line or (v1.x == v2.x and v1.y == v2.y):
                winding += _ray_crossing(v1.pos, v2.pos, x, y)
                continue
            radius, center = arc_radius_and_center(v1, v2)
            for start, end, right_half in _monotonic_arc_pieces(v1, v2, radius, center):
                span = math.sqrt(max(radius * radius - (y - center.y) ** 2, 0.0))
                crossing_x = center.x + span if right_half else center.x - span
                winding += _ray_crossing(start, end, x, y, crossing_x)

        return winding

    def closest_point(self, x: float, y: float) -> tuple[Point, float, int]:
        """Closest point on the polyline path.

        Returns:
            Tuple of (point, distance, segment index)

        Raises:
            InsufficientVerticesError: If the polyline has no vertices
        """
        if not self._vertices:
            raise InsufficientVerticesError("closest_point", 1, 0)
        query = Point(x, y)
        if len(self._vertices) == 1:
            v = self._vertices[0]
            return v.pos, v.pos.distance_to(query), 0

        best = self._vertices[0].pos
        best_dist = math.inf
        best_index = 0
        for i, (v1, v2) in enumerate(self.segments()):
            candidate = seg_closest_point(v1, v2, query)
            dist = candidate.distance_to(query)
            if dist < best_dist:
                best, best_dist, best_index = candidate, dist, i
        return best, best_dist, best_index

    def contains_point(self, x: float, y: float, pos_equal_eps: float = 1e-5) -> bool:
        """True if the point is enclosed or lies on the boundary within eps."""
        if self.winding_number(x, y) != 0:
            return True
        if len(self._vertices) < 2:
            return False
        _, dist, _ = self.closest_point(x, y)
        return dist < pos_equal_eps

    def extents(self) -> AABB:
        """Exact bounding box including arc bulges.

        Raises:
            InsufficientVerticesError: If fewer than 2 vertices
        """
        if len(self._vertices) < 2:
            raise InsufficientVerticesError("extents", 2, len(self._vertices))
        box = AABB.empty()
        for v1, v2 in self.segments():
            box = box.union(seg_bounding_box(v1, v2))
        return box

    # ------------------------------------------------------------------
    # In-place transformations

    def invert_direction(self) -> None:
        """Reverse travel direction in place.

        Each bulge moves to the new predecessor vertex and flips sign, so
        applying this twice restores the original sequence exactly.
        """
        n = len(self._vertices)
        if n < 2:
            return
        reversed_vertices = self._vertices[::-1]
        first_bulge = reversed_vertices[0].bulge
        inverted = [
            Vertex(reversed_vertices[i].x, reversed_vertices[i].y, -reversed_vertices[i + 1].bulge)
            for i in range(n - 1)
        ]
        last = reversed_vertices[-1]
        inverted.append(Vertex(last.x, last.y, -first_bulge))
        self._vertices = inverted

    def scale(self, factor: float) -> None:
        """Scale all coordinates about the origin; bulges are unchanged."""
        self._vertices = [Vertex(v.x * factor, v.y * factor, v.bulge) for v in self._vertices]

    def translate(self, dx: float, dy: float) -> None:
        self._vertices = [Vertex(v.x + dx, v.y + dy, v.bulge) for v in self._vertices]

    def remove_repeat_positions(self, eps: float = 1e-5) -> None:
        """Collapse consecutive vertices closer than eps.

        The first vertex of each coincident run is kept with its bulge. On a
        closed polyline a final vertex coinciding with the first is removed.
        """
        if len(self._vertices) < 2:
            return
        result = [self._vertices[0]]
        for v in self._vertices[1:]:
            if result[-1].distance_to(v) < eps:
                continue
            result.append(v)
        if self.closed and len(result) > 1 and result[-1].distance_to(result[0]) < eps:
            result.pop()
        self._vertices = result

    def remove_redundant(self, eps: float = 1e-5) -> None:
        """Remove geometrically unnecessary vertices.

        Drops zero-length segments, vertices in the middle of straight
        collinear runs, and vertices joining two arcs of the same circle
        and direction (merged while the combined sweep stays within a half
        circle).
        """
        if len(self._vertices) < 2:
            return

        deduped: list[Vertex] = [self._vertices[0]]
        for v in self._vertices[1:]:
            last = deduped[-1]
            if last.distance_to(v) < eps:
                # zero-length segment: keep the bulge of the segment that follows
                deduped[-1] = Vertex(last.x, last.y, v.bulge)
                continue
            deduped.append(v)
        if self.closed and len(deduped) > 1 and deduped[-1].distance_to(deduped[0]) < eps:
            deduped.pop()

        if len(deduped) < 3:
            self._vertices = deduped
            return

        result: list[Vertex] = [deduped[0]]
        for v in deduped[1:]:
            while len(result) >= 2:
                merged = _merged_bulge(result[-2], result[-1], v, eps)
                if merged is None:
                    break
                result.pop()
                result[-1] = result[-1].with_bulge(merged)
            result.append(v)

        if self.closed:
            changed = True
            while changed and len(result) >= 3:
                changed = False
                merged = _merged_bulge(result[-2], result[-1], result[0], eps)
                if merged is not None:
                    result.pop()
                    result[-1] = result[-1].with_bulge(merged)
                    changed = True
                    continue
                merged = _merged_bulge(result[-1], result[0], result[1], eps)
                if merged is not None:
                    result.pop(0)
                    result[-1] = result[-1].with_bulge(merged)
                    changed = True

        self._vertices = result

    # ------------------------------------------------------------------
    # Index and conversion helpers

    def create_aabb_index(self) -> AabbIndex:
        """Build an exact spatial index over this polyline's segments."""
        return AabbIndex.from_polyline(self, exact=True)

    def create_approx_aabb_index(self) -> AabbIndex:
        """Build a spatial index using conservative arc boxes."""
        return AabbIndex.from_polyline(self, exact=False)

    def has_self_intersects(self, pos_equal_eps: float = 1e-5) -> bool:
        """True if any two non-adjacent segments touch or cross."""
        from polyarc.config import SelfIntersectOptions
        from polyarc.core.intersect import find_self_intersects

        options = SelfIntersectOptions(pos_equal_eps=pos_equal_eps)
        return find_self_intersects(self, options).count > 0

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary for IPC."""
        return {
            "vertices": [list(v.to_tuple()) for v in self._vertices],
            "closed": self.closed,
            "userdata": self._userdata,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Polyline":
        """Deserialize from dictionary.

        Args:
            data: Dictionary with vertices ([x, y, bulge] lists), closed and
                optional userdata fields

        Returns:
            Polyline instance
        """
        return cls(
            vertices=data["vertices"],
            closed=bool(data.get("closed", False)),
            userdata=int(data.get("userdata", 0)),
        )


def _ray_crossing(
    start: Point, end: Point, x: float, y: float, crossing_x: float | None = None
) -> int:
    """Signed crossing of the +X ray from (x, y) with a piece monotonic in Y.

    Upward pieces count +1 and downward pieces -1. The lower end of a piece
    is included and the upper end excluded, so shared vertices count once.
    Straight pieces test the side of the line; arc pieces pass the X of
    their crossing.
    """
    if start.y <= y < end.y:
        direction = 1
    elif end.y <= y < start.y:
        direction = -1
    else:
        return 0
    if crossing_x is None:
        is_left = (end.x - start.x) * (y - start.y) - (x - start.x) * (end.y - start.y)
        return direction if is_left * direction > 0.0 else 0
    return direction if crossing_x > x else 0


def _monotonic_arc_pieces(
    v1: Vertex, v2: Vertex, radius: float, center: Point
) -> list[tuple[Point, Point, bool]]:
    """Split an arc at its top and bottom into (start, end, right_half) pieces."""
    sweep = bulge_sweep(v1.bulge)
    direction = 1.0 if sweep > 0.0 else -1.0
    magnitude = abs(sweep)
    start_angle = angle_of(center, v1.pos)

    offsets = [0.0]
    for extreme in (0.5 * math.pi, -0.5 * math.pi):
        offset = (direction * (extreme - start_angle)) % (2.0 * math.pi)
        if 0.0 < offset < magnitude:
            offsets.append(offset)
    offsets.sort()
    offsets.append(magnitude)

    points = [v1.pos]
    for offset in offsets[1:-1]:
        angle = start_angle + direction * offset
        points.append(Point(center.x + radius * math.cos(angle), center.y + radius * math.sin(angle)))
    points.append(v2.pos)

    pieces = []
    for i in range(len(offsets) - 1):
        mid_angle = start_angle + direction * 0.5 * (offsets[i] + offsets[i + 1])
        pieces.append((points[i], points[i + 1], math.cos(mid_angle) >= 0.0))
    return pieces


def _merged_bulge(prev: Vertex, mid: Vertex, nxt: Vertex, eps: float) -> float | None:
    """Bulge for prev if mid can be dropped, else None."""
    if prev.is_line and mid.is_line:
        ux = mid.x - prev.x
        uy = mid.y - prev.y
        wx = nxt.x - prev.x
        wy = nxt.y - prev.y
        chord = math.hypot(wx, wy)
        if chord < eps:
            return None
        # perpendicular distance of mid from the chord prev -> nxt
        if abs(ux * wy - uy * wx) / chord >= eps:
            return None
        if ux * (nxt.x - mid.x) + uy * (nxt.y - mid.y) <= 0.0:
            return None
        return 0.0

    if prev.is_arc and mid.is_arc and (prev.bulge > 0.0) == (mid.bulge > 0.0):
        r1, c1 = arc_radius_and_center(prev, mid)
        r2, c2 = arc_radius_and_center(mid, nxt)
        if abs(r1 - r2) >= eps or c1.distance_to(c2) >= eps:
            return None
        sweep = bulge_sweep(prev.bulge) + bulge_sweep(mid.bulge)
        if abs(sweep) > math.pi + 1e-9:
            return None
        return bulge_from_sweep(sweep)

    return None
