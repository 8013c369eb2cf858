"""Segment intersection resolver.

Pairwise intersection of line and arc segments plus the polyline-level scans
built on top of it. Every comparison against zero or against a segment end
uses the caller's absolute ``pos_equal_eps``; parametric tolerances are that
epsilon divided by the segment length (or radius for angles).

Key classes:
- IntersectKind: Classification of a segment pair result
- SegmentIntersection: Result of intersecting two segments
- BasicIntersect / OverlappingIntersect: Point and interval hits between
  polyline segments
- PlineIntersects: Collected hits of a polyline scan

Key functions:
- intersect_segments: Intersect two bulge segments
- find_intersects: All hits between two polylines
- find_self_intersects: All hits of a polyline with itself
"""

import logging
import math
from dataclasses import dataclass, field
from enum import Enum, auto

from polyarc.config import SelfIntersectOptions
from polyarc.domain import AabbIndex, Point, Polyline, Vertex, require_polyline
from polyarc.domain.segment import (
    TAU,
    angle_of,
    angle_within_sweep,
    arc_radius_and_center,
    bulge_sweep,
    normalize_radians,
    seg_approx_bounding_box,
    seg_param,
)

logger = logging.getLogger(__name__)


class IntersectKind(Enum):
    """Classification of a segment/segment intersection.

    - NONE: No intersection
    - TANGENT: Segments touch at a single tangent point
    - ONE: One crossing point
    - TWO: Two crossing points (line/arc or arc/arc)
    - OVERLAPPING_LINES: Collinear lines share an interval
    - OVERLAPPING_ARCS: Co-circular arcs share an interval
    """

    NONE = auto()
    TANGENT = auto()
    ONE = auto()
    TWO = auto()
    OVERLAPPING_LINES = auto()
    OVERLAPPING_ARCS = auto()


@dataclass(frozen=True, slots=True)
class SegmentIntersection:
    """Result of intersecting two segments.

    Points are ordered along the first segment. Overlaps report the
    interval end points in point1/point2.

    Attributes:
        kind: Intersection classification
        point1: First intersection point (None when kind is NONE)
        point2: Second point for TWO and overlap kinds
    """

    kind: IntersectKind
    point1: Point | None = None
    point2: Point | None = None

    @property
    def is_overlap(self) -> bool:
        return self.kind in (IntersectKind.OVERLAPPING_LINES, IntersectKind.OVERLAPPING_ARCS)

    @property
    def points(self) -> list[Point]:
        return [p for p in (self.point1, self.point2) if p is not None]


_NO_INTERSECT = SegmentIntersection(IntersectKind.NONE)


def _cross(ax: float, ay: float, bx: float, by: float) -> float:
    return ax * by - ay * bx


def _lerp(p0: Point, p1: Point, t: float) -> Point:
    return Point(p0.x + (p1.x - p0.x) * t, p0.y + (p1.y - p0.y) * t)


def _point_on_line_segment(p0: Point, p1: Point, point: Point, eps: float) -> bool:
    dx = p1.x - p0.x
    dy = p1.y - p0.y
    length_sq = dx * dx + dy * dy
    if length_sq == 0.0:
        return p0.distance_to(point) < eps
    t = ((point.x - p0.x) * dx + (point.y - p0.y) * dy) / length_sq
    t = max(0.0, min(1.0, t))
    return _lerp(p0, p1, t).distance_to(point) < eps


def intersect_line_line(p0: Point, p1: Point, q0: Point, q1: Point, eps: float) -> SegmentIntersection:
    """Intersect line segments p0->p1 and q0->q1.

    Uses the determinant parametric solve. Near-parallel segments are tested
    for collinearity and, if collinear, for an overlapping interval.

    Args:
        p0: First segment start
        p1: First segment end
        q0: Second segment start
        q1: Second segment end
        eps: Absolute position tolerance

    Returns:
        SegmentIntersection with kind NONE, ONE or OVERLAPPING_LINES
    """
    ux = p1.x - p0.x
    uy = p1.y - p0.y
    vx = q1.x - q0.x
    vy = q1.y - q0.y
    len_u = math.hypot(ux, uy)
    len_v = math.hypot(vx, vy)

    # degenerate (point) segments
    if len_u < eps or len_v < eps:
        if len_u < eps and len_v < eps:
            if p0.distance_to(q0) < eps:
                return SegmentIntersection(IntersectKind.ONE, p0)
            return _NO_INTERSECT
        if len_u < eps:
            if _point_on_line_segment(q0, q1, p0, eps):
                return SegmentIntersection(IntersectKind.ONE, p0)
            return _NO_INTERSECT
        if _point_on_line_segment(p0, p1, q0, eps):
            return SegmentIntersection(IntersectKind.ONE, q0)
        return _NO_INTERSECT

    wx = q0.x - p0.x
    wy = q0.y - p0.y
    denom = _cross(ux, uy, vx, vy)

    if abs(denom) / max(len_u, len_v) < eps:
        # parallel: collinear only if q0 lies on the line through p
        if abs(_cross(ux, uy, wx, wy)) / len_u >= eps:
            return _NO_INTERSECT
        len_u_sq = len_u * len_u
        t0 = (wx * ux + wy * uy) / len_u_sq
        t1 = ((q1.x - p0.x) * ux + (q1.y - p0.y) * uy) / len_u_sq
        if t0 > t1:
            t0, t1 = t1, t0
        tol = eps / len_u
        lo = max(0.0, t0)
        hi = min(1.0, t1)
        if lo > hi + tol:
            return _NO_INTERSECT
        if hi - lo <= tol:
            return SegmentIntersection(IntersectKind.ONE, _lerp(p0, p1, min(max(lo, 0.0), 1.0)))
        return SegmentIntersection(
            IntersectKind.OVERLAPPING_LINES, _lerp(p0, p1, lo), _lerp(p0, p1, hi)
        )

    s = _cross(wx, wy, vx, vy) / denom
    t = _cross(wx, wy, ux, uy) / denom
    tol_u = eps / len_u
    tol_v = eps / len_v
    if -tol_u <= s <= 1.0 + tol_u and -tol_v <= t <= 1.0 + tol_v:
        return SegmentIntersection(IntersectKind.ONE, _lerp(p0, p1, min(max(s, 0.0), 1.0)))
    return _NO_INTERSECT


def intersect_line_circle(
    p0: Point, p1: Point, center: Point, radius: float, eps: float
) -> list[tuple[float, Point]]:
    """Intersect the infinite line through p0 and p1 with a circle.

    Returns:
        List of (t, point) pairs, t being the line parameter (p0 at 0, p1 at
        1). A single entry means the line is tangent within eps.
    """
    dx = p1.x - p0.x
    dy = p1.y - p0.y
    length_sq = dx * dx + dy * dy
    if length_sq == 0.0:
        if abs(p0.distance_to(center) - radius) < eps:
            return [(0.0, p0)]
        return []

    t_close = ((center.x - p0.x) * dx + (center.y - p0.y) * dy) / length_sq
    closest = Point(p0.x + t_close * dx, p0.y + t_close * dy)
    h = closest.distance_to(center)
    if h > radius + eps:
        return []
    if abs(h - radius) <= eps:
        return [(t_close, closest)]

    half = math.sqrt(max(radius * radius - h * h, 0.0) / length_sq)
    return [
        (t_close - half, Point(p0.x + (t_close - half) * dx, p0.y + (t_close - half) * dy)),
        (t_close + half, Point(p0.x + (t_close + half) * dx, p0.y + (t_close + half) * dy)),
    ]


def intersect_circle_circle(
    c1: Point, r1: float, c2: Point, r2: float, eps: float
) -> list[Point] | None:
    """Intersect two circles.

    Returns:
        None when the circles coincide, otherwise a list of zero, one
        (tangent) or two points
    """
    d = c1.distance_to(c2)
    if d < eps:
        if abs(r1 - r2) < eps:
            return None
        return []
    if d > r1 + r2 + eps or d < abs(r1 - r2) - eps:
        return []

    a = (r1 * r1 - r2 * r2 + d * d) / (2.0 * d)
    h = math.sqrt(max(r1 * r1 - a * a, 0.0))
    ux = (c2.x - c1.x) / d
    uy = (c2.y - c1.y) / d
    mid = Point(c1.x + a * ux, c1.y + a * uy)
    if h < eps:
        return [mid]
    return [
        Point(mid.x - h * uy, mid.y + h * ux),
        Point(mid.x + h * uy, mid.y - h * ux),
    ]


def _within_arc(v1: Vertex, v2: Vertex, center: Point, radius: float, point: Point, eps: float) -> bool:
    if v1.pos.distance_to(point) < eps or v2.pos.distance_to(point) < eps:
        return True
    return angle_within_sweep(
        angle_of(center, v1.pos),
        bulge_sweep(v1.bulge),
        angle_of(center, point),
        eps / radius,
    )


def _ordered(v1: Vertex, v2: Vertex, points: list[Point]) -> list[Point]:
    return sorted(points, key=lambda p: seg_param(v1, v2, p))


def _line_arc_hits(
    p0: Point,
    p1: Point,
    a1: Vertex,
    a2: Vertex,
    circle_hits: list[tuple[float, Point]],
    center: Point,
    radius: float,
    eps: float,
) -> list[Point]:
    """Circle hits that lie on both the line segment and the arc."""
    length = p0.distance_to(p1)
    tol = eps / length if length > 0.0 else 0.0
    return [
        point
        for t, point in circle_hits
        if -tol <= t <= 1.0 + tol and _within_arc(a1, a2, center, radius, point, eps)
    ]


def _dedupe(points: list[Point], eps: float) -> list[Point]:
    result: list[Point] = []
    for point in points:
        if not any(point.almost_equal(p, eps) for p in result):
            result.append(point)
    return result


def _ccw_interval(center: Point, v1: Vertex, v2: Vertex) -> tuple[float, float]:
    """Arc as a counter-clockwise angular interval (start, length)."""
    sweep = bulge_sweep(v1.bulge)
    if sweep >= 0.0:
        return normalize_radians(angle_of(center, v1.pos)), sweep
    return normalize_radians(angle_of(center, v2.pos)), -sweep


def _co_circular_overlap(
    v1: Vertex, v2: Vertex, u1: Vertex, u2: Vertex, center: Point, radius: float, eps: float
) -> SegmentIntersection:
    start1, len1 = _ccw_interval(center, v1, v2)
    start2, len2 = _ccw_interval(center, u1, u2)
    tol = eps / radius

    pieces: list[tuple[float, float]] = []
    for shift in (-TAU, 0.0, TAU):
        lo = max(start1, start2 + shift)
        hi = min(start1 + len1, start2 + len2 + shift)
        if hi >= lo - tol:
            pieces.append((lo, max(lo, hi)))

    def at(angle: float) -> Point:
        return Point(center.x + radius * math.cos(angle), center.y + radius * math.sin(angle))

    spans = [piece for piece in pieces if piece[1] - piece[0] > tol]
    if spans:
        lo, hi = max(spans, key=lambda piece: piece[1] - piece[0])
        start_pt, end_pt = at(lo), at(hi)
        if v1.bulge < 0.0:
            start_pt, end_pt = end_pt, start_pt
        return SegmentIntersection(IntersectKind.OVERLAPPING_ARCS, start_pt, end_pt)

    touches = _ordered(v1, v2, _dedupe([at(lo) for lo, _ in pieces], eps))
    if len(touches) == 1:
        return SegmentIntersection(IntersectKind.ONE, touches[0])
    if len(touches) >= 2:
        return SegmentIntersection(IntersectKind.TWO, touches[0], touches[1])
    return _NO_INTERSECT


def intersect_segments(v1: Vertex, v2: Vertex, u1: Vertex, u2: Vertex, eps: float = 1e-5) -> SegmentIntersection:
    """Intersect segment v1->v2 with segment u1->u2.

    Handles line-line, line-arc, arc-line and arc-arc pairs. Overlapping
    collinear lines or co-circular arcs are reported as an interval.

    Args:
        v1: First segment start (its bulge defines the first segment)
        v2: First segment end
        u1: Second segment start
        u2: Second segment end
        eps: Absolute position tolerance

    Returns:
        SegmentIntersection with points ordered along the first segment
    """
    v_line = v1.is_line or v1.pos.almost_equal(v2.pos, eps)
    u_line = u1.is_line or u1.pos.almost_equal(u2.pos, eps)

    if v_line and u_line:
        return intersect_line_line(v1.pos, v2.pos, u1.pos, u2.pos, eps)

    if v_line or u_line:
        if v_line:
            line_start, line_end, arc_start, arc_end = v1.pos, v2.pos, u1, u2
        else:
            line_start, line_end, arc_start, arc_end = u1.pos, u2.pos, v1, v2
        radius, center = arc_radius_and_center(arc_start, arc_end)
        circle_hits = intersect_line_circle(line_start, line_end, center, radius, eps)
        hits = _line_arc_hits(
            line_start, line_end, arc_start, arc_end, circle_hits, center, radius, eps
        )
        hits = _ordered(v1, v2, _dedupe(hits, eps))
        if not hits:
            return _NO_INTERSECT
        if len(hits) == 1:
            kind = IntersectKind.TANGENT if len(circle_hits) == 1 else IntersectKind.ONE
            return SegmentIntersection(kind, hits[0])
        return SegmentIntersection(IntersectKind.TWO, hits[0], hits[1])

    r1, c1 = arc_radius_and_center(v1, v2)
    r2, c2 = arc_radius_and_center(u1, u2)
    circle_hits = intersect_circle_circle(c1, r1, c2, r2, eps)
    if circle_hits is None:
        return _co_circular_overlap(v1, v2, u1, u2, c1, r1, eps)

    hits = [
        p
        for p in circle_hits
        if _within_arc(v1, v2, c1, r1, p, eps) and _within_arc(u1, u2, c2, r2, p, eps)
    ]
    hits = _ordered(v1, v2, _dedupe(hits, eps))
    if not hits:
        return _NO_INTERSECT
    if len(hits) == 1:
        kind = IntersectKind.TANGENT if len(circle_hits) == 1 else IntersectKind.ONE
        return SegmentIntersection(kind, hits[0])
    return SegmentIntersection(IntersectKind.TWO, hits[0], hits[1])


# ----------------------------------------------------------------------
# Polyline-level scans


@dataclass(frozen=True, slots=True)
class BasicIntersect:
    """A point where segment start_index1 of one polyline meets segment
    start_index2 of another (or the same) polyline."""

    start_index1: int
    start_index2: int
    point: Point


@dataclass(frozen=True, slots=True)
class OverlappingIntersect:
    """An interval shared by two coincident segments, ordered along the
    first polyline's segment."""

    start_index1: int
    start_index2: int
    point1: Point
    point2: Point


@dataclass
class PlineIntersects:
    """Intersections collected by a polyline scan."""

    basic: list[BasicIntersect] = field(default_factory=list)
    overlapping: list[OverlappingIntersect] = field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.basic) + len(self.overlapping)

    def __bool__(self) -> bool:
        return self.count > 0


def _is_segment_end(pline: Polyline, seg_index: int, point: Point, eps: float) -> bool:
    """True if point sits on the end vertex of a segment that has a successor."""
    if not pline.closed and seg_index == pline.segment_count - 1:
        return False
    _, end = pline.segment(seg_index)
    return end.pos.almost_equal(point, eps)


def find_intersects(
    pline1: Polyline,
    pline2: Polyline,
    pline1_index: AabbIndex | None = None,
    pos_equal_eps: float = 1e-5,
) -> PlineIntersects:
    """Find all intersections between two polylines.

    A point landing on the end vertex of a segment is reported only by the
    following segment, so each crossing appears once.

    Args:
        pline1: First polyline
        pline2: Second polyline
        pline1_index: Spatial index of pline1 (built if None)
        pos_equal_eps: Absolute position tolerance

    Returns:
        PlineIntersects with start_index1 referring to pline1 segments
    """
    require_polyline(pline1, "pline1")
    require_polyline(pline2, "pline2")
    result = PlineIntersects()
    if pline1.segment_count == 0 or pline2.segment_count == 0:
        return result

    if pline1_index is None:
        logger.debug("Building spatial index for intersect scan")
        pline1_index = AabbIndex.from_polyline(pline1, exact=False)

    for j, (u1, u2) in enumerate(pline2.segments()):
        query_box = seg_approx_bounding_box(u1, u2).expanded(pos_equal_eps)
        for i in sorted(pline1_index.iter_query(query_box)):
            v1, v2 = pline1.segment(i)
            hit = intersect_segments(v1, v2, u1, u2, pos_equal_eps)
            if hit.kind is IntersectKind.NONE:
                continue
            if hit.is_overlap:
                result.overlapping.append(OverlappingIntersect(i, j, hit.point1, hit.point2))
                continue
            for point in hit.points:
                if _is_segment_end(pline1, i, point, pos_equal_eps):
                    continue
                if _is_segment_end(pline2, j, point, pos_equal_eps):
                    continue
                result.basic.append(BasicIntersect(i, j, point))

    logger.debug(
        "Polyline intersect scan: %d basic, %d overlapping",
        len(result.basic),
        len(result.overlapping),
    )
    return result


def _adjacent(pline: Polyline, i: int, j: int) -> bool:
    if j == i + 1:
        return True
    return pline.closed and i == 0 and j == pline.segment_count - 1


def find_self_intersects(
    pline: Polyline, options: SelfIntersectOptions | None = None
) -> PlineIntersects:
    """Find all places where a polyline touches or crosses itself.

    Adjacent segments meeting at their shared vertex are not reported.

    Args:
        pline: Polyline to scan
        options: Scan options (index, tolerance), defaults when None

    Returns:
        PlineIntersects with start_index1 < start_index2
    """
    require_polyline(pline)
    if options is None:
        options = SelfIntersectOptions()
    eps = options.pos_equal_eps
    result = PlineIntersects()
    seg_count = pline.segment_count
    if seg_count < 2:
        return result

    index = options.aabb_index
    if index is None:
        logger.debug("Building spatial index for self-intersect scan")
        index = AabbIndex.from_polyline(pline, exact=False)

    for i, (v1, v2) in enumerate(pline.segments()):
        query_box = seg_approx_bounding_box(v1, v2).expanded(eps)
        for j in sorted(index.iter_query(query_box)):
            if j <= i:
                continue
            u1, u2 = pline.segment(j)
            hit = intersect_segments(v1, v2, u1, u2, eps)
            if hit.kind is IntersectKind.NONE:
                continue
            adjacent = _adjacent(pline, i, j)
            if hit.is_overlap:
                result.overlapping.append(OverlappingIntersect(i, j, hit.point1, hit.point2))
                continue
            wraps = pline.closed and i == 0 and j == seg_count - 1
            for point in hit.points:
                # adjacent segments always meet at their shared vertex
                if adjacent and v2.pos.almost_equal(point, eps):
                    continue
                if wraps and v1.pos.almost_equal(point, eps):
                    continue
                if _is_segment_end(pline, i, point, eps) or _is_segment_end(pline, j, point, eps):
                    continue
                result.basic.append(BasicIntersect(i, j, point))

    logger.debug(
        "Self-intersect scan: %d basic, %d overlapping",
        len(result.basic),
        len(result.overlapping),
    )
    return result
