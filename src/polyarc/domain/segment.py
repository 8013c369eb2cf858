"""Pure query functions for line and arc segments.

A segment is described by two vertices: the start vertex carries the bulge,
the end vertex only contributes its position. All trigonometric derivations
(radius, center, sweep, bounding boxes, split points) live here so they can
be tested independently of any polyline.

Key functions:
- arc_radius_and_center: Recover radius and center from bulge and chord
- seg_length: Line length or arc length
- seg_bounding_box / seg_approx_bounding_box: Exact and conservative boxes
- seg_midpoint: Point halfway along the segment
- seg_closest_point: Closest point on the segment to a query point
- seg_split_at_point: Split a segment into two vertices at a point
- seg_tangent: Direction of travel at a point on the segment
- delta_angle / delta_angle_signed: Angle differences respecting direction
"""

import math

from polyarc.domain.vertex import AABB, Point, Vertex

TAU = 2.0 * math.pi


def normalize_radians(angle: float) -> float:
    """Normalize an angle to [0, 2*pi)."""
    result = math.fmod(angle, TAU)
    if result < 0.0:
        result += TAU
    return result


def delta_angle(angle1: float, angle2: float) -> float:
    """Shortest signed angle from angle1 to angle2, in (-pi, pi]."""
    diff = normalize_radians(angle2 - angle1)
    if diff > math.pi:
        diff -= TAU
    return diff


def delta_angle_signed(angle1: float, angle2: float, negative: bool) -> float:
    """Angle from angle1 to angle2 travelling in a fixed direction.

    Args:
        angle1: Start angle in radians
        angle2: End angle in radians
        negative: True to travel clockwise (result <= 0)

    Returns:
        Signed sweep in [-2*pi, 2*pi] with the sign of the travel direction
    """
    diff = delta_angle(angle1, angle2)
    if negative and diff > 0.0:
        diff -= TAU
    elif not negative and diff < 0.0:
        diff += TAU
    return diff


def angle_of(origin: Point, point: Point) -> float:
    """Angle of the vector origin -> point."""
    return math.atan2(point.y - origin.y, point.x - origin.x)


def bulge_sweep(bulge: float) -> float:
    """Signed included angle of an arc with the given bulge."""
    return 4.0 * math.atan(bulge)


def bulge_from_sweep(sweep: float) -> float:
    return math.tan(sweep / 4.0)


def arc_radius(v1: Vertex, v2: Vertex) -> float:
    """Radius of the arc from v1 to v2 with v1's bulge."""
    b = abs(v1.bulge)
    chord = math.hypot(v2.x - v1.x, v2.y - v1.y)
    return chord * (b * b + 1.0) / (4.0 * b)


def arc_radius_and_center(v1: Vertex, v2: Vertex) -> tuple[float, Point]:
    """Compute radius and center of an arc segment.

    The center sits on the perpendicular bisector of the chord, on the left
    of the travel direction for counter-clockwise arcs and on the right for
    clockwise arcs.

    Args:
        v1: Start vertex (with non-zero bulge)
        v2: End vertex

    Returns:
        Tuple of (radius, center)

    Examples:
        >>> arc_radius_and_center(Vertex(0, 0, 1.0), Vertex(2, 0))
        (1.0, Point(x=1.0, y=0.0))
    """
    b = abs(v1.bulge)
    dx = v2.x - v1.x
    dy = v2.y - v1.y
    chord = math.hypot(dx, dy)
    radius = chord * (b * b + 1.0) / (4.0 * b)

    sagitta = b * chord / 2.0
    m = radius - sagitta
    offs_x = -m * dy / chord
    offs_y = m * dx / chord
    if v1.bulge < 0.0:
        offs_x = -offs_x
        offs_y = -offs_y

    center = Point((v1.x + v2.x) / 2.0 + offs_x, (v1.y + v2.y) / 2.0 + offs_y)
    return radius, center


def angle_within_sweep(start_angle: float, sweep: float, test_angle: float, tol: float = 0.0) -> bool:
    """Check whether test_angle lies on the arc starting at start_angle.

    Args:
        start_angle: Angle of the arc start about its center
        sweep: Signed arc sweep
        test_angle: Angle to test
        tol: Angular tolerance at both ends

    Returns:
        True if test_angle is within the swept range (inclusive of tol)
    """
    if sweep >= 0.0:
        rel = normalize_radians(test_angle - start_angle)
        span = sweep
    else:
        rel = normalize_radians(start_angle - test_angle)
        span = -sweep
    return rel <= span + tol or rel >= TAU - tol


def point_within_arc_sweep(v1: Vertex, v2: Vertex, point: Point, eps: float = 1e-5) -> bool:
    """True if point's angle about the arc center lies within the arc sweep."""
    radius, center = arc_radius_and_center(v1, v2)
    tol = eps / radius if radius > 0.0 else 0.0
    return angle_within_sweep(
        angle_of(center, v1.pos), bulge_sweep(v1.bulge), angle_of(center, point), tol
    )


def seg_length(v1: Vertex, v2: Vertex) -> float:
    """Length of a segment (Euclidean for lines, r * |sweep| for arcs)."""
    if v1.is_line:
        return math.hypot(v2.x - v1.x, v2.y - v1.y)
    if v1.x == v2.x and v1.y == v2.y:
        return 0.0
    return arc_radius(v1, v2) * abs(bulge_sweep(v1.bulge))


def seg_midpoint(v1: Vertex, v2: Vertex) -> Point:
    """Point halfway along the segment.

    For arcs this is the chord midpoint pushed out by the sagitta, which
    lies to the right of the travel direction for positive bulge.
    """
    mid_x = (v1.x + v2.x) / 2.0
    mid_y = (v1.y + v2.y) / 2.0
    if v1.is_line:
        return Point(mid_x, mid_y)
    dx = v2.x - v1.x
    dy = v2.y - v1.y
    half = v1.bulge / 2.0
    return Point(mid_x + half * dy, mid_y - half * dx)


def seg_bounding_box(v1: Vertex, v2: Vertex) -> AABB:
    """Exact bounding box of a segment.

    Arc boxes include every axis extreme (0, 90, 180, 270 degrees) that the
    arc actually sweeps through.
    """
    min_x = min(v1.x, v2.x)
    min_y = min(v1.y, v2.y)
    max_x = max(v1.x, v2.x)
    max_y = max(v1.y, v2.y)
    if v1.is_line or (v1.x == v2.x and v1.y == v2.y):
        return AABB(min_x, min_y, max_x, max_y)

    radius, center = arc_radius_and_center(v1, v2)
    start = angle_of(center, v1.pos)
    sweep = bulge_sweep(v1.bulge)
    if angle_within_sweep(start, sweep, 0.0):
        max_x = center.x + radius
    if angle_within_sweep(start, sweep, math.pi / 2.0):
        max_y = center.y + radius
    if angle_within_sweep(start, sweep, math.pi):
        min_x = center.x - radius
    if angle_within_sweep(start, sweep, 3.0 * math.pi / 2.0):
        min_y = center.y - radius
    return AABB(min_x, min_y, max_x, max_y)


def seg_approx_bounding_box(v1: Vertex, v2: Vertex) -> AABB:
    """Conservative bounding box of a segment.

    For arcs up to a half circle the box spans the chord endpoints and the
    chord shifted by the sagitta; larger arcs use the full circle box.
    """
    if v1.is_line or (v1.x == v2.x and v1.y == v2.y):
        return AABB(min(v1.x, v2.x), min(v1.y, v2.y), max(v1.x, v2.x), max(v1.y, v2.y))

    if abs(v1.bulge) > 1.0:
        radius, center = arc_radius_and_center(v1, v2)
        return AABB(
            center.x - radius, center.y - radius, center.x + radius, center.y + radius
        )

    half = v1.bulge / 2.0
    offs_x = half * (v2.y - v1.y)
    offs_y = -half * (v2.x - v1.x)
    xs = (v1.x, v2.x, v1.x + offs_x, v2.x + offs_x)
    ys = (v1.y, v2.y, v1.y + offs_y, v2.y + offs_y)
    return AABB(min(xs), min(ys), max(xs), max(ys))


def _closest_point_on_line(p0: Point, p1: Point, point: Point) -> Point:
    dx = p1.x - p0.x
    dy = p1.y - p0.y
    length_sq = dx * dx + dy * dy
    if length_sq == 0.0:
        return p0
    t = ((point.x - p0.x) * dx + (point.y - p0.y) * dy) / length_sq
    t = max(0.0, min(1.0, t))
    return Point(p0.x + t * dx, p0.y + t * dy)


def seg_closest_point(v1: Vertex, v2: Vertex, point: Point) -> Point:
    """Closest point on the segment to the given point.

    Args:
        v1: Start vertex
        v2: End vertex
        point: Query point

    Returns:
        Closest point lying on the segment
    """
    if v1.is_line or (v1.x == v2.x and v1.y == v2.y):
        return _closest_point_on_line(v1.pos, v2.pos, point)

    radius, center = arc_radius_and_center(v1, v2)
    dist = center.distance_to(point)
    if dist == 0.0:
        return v1.pos

    if point_within_arc_sweep(v1, v2, point, eps=0.0):
        scale = radius / dist
        return Point(
            center.x + (point.x - center.x) * scale,
            center.y + (point.y - center.y) * scale,
        )

    if v1.pos.distance_to(point) <= v2.pos.distance_to(point):
        return v1.pos
    return v2.pos


def seg_tangent(v1: Vertex, v2: Vertex, point: Point) -> Point:
    """Unit direction of travel along the segment at point."""
    if v1.is_line:
        dx = v2.x - v1.x
        dy = v2.y - v1.y
    else:
        _, center = arc_radius_and_center(v1, v2)
        dx = -(point.y - center.y)
        dy = point.x - center.x
        if v1.bulge < 0.0:
            dx, dy = -dx, -dy
    length = math.hypot(dx, dy)
    if length == 0.0:
        return Point(0.0, 0.0)
    return Point(dx / length, dy / length)


def seg_param(v1: Vertex, v2: Vertex, point: Point) -> float:
    """Monotonic position of a point along the segment.

    Lines use the projection parameter; arcs use the absolute angle swept
    from the start vertex. Only meaningful for ordering points that lie on
    the same segment.
    """
    if v1.is_line or (v1.x == v2.x and v1.y == v2.y):
        dx = v2.x - v1.x
        dy = v2.y - v1.y
        length_sq = dx * dx + dy * dy
        if length_sq == 0.0:
            return 0.0
        return ((point.x - v1.x) * dx + (point.y - v1.y) * dy) / length_sq

    _, center = arc_radius_and_center(v1, v2)
    swept = delta_angle_signed(
        angle_of(center, v1.pos), angle_of(center, point), v1.bulge < 0.0
    )
    return abs(swept)


def seg_split_at_point(
    v1: Vertex, v2: Vertex, point: Point, eps: float = 1e-5
) -> tuple[Vertex, Vertex]:
    """Split a segment at a point lying on it.

    Args:
        v1: Start vertex
        v2: End vertex
        point: Split point (assumed to lie on the segment)
        eps: Position tolerance for snapping to the endpoints

    Returns:
        Tuple of (updated start vertex, split vertex). The updated start
        vertex carries the bulge from v1 to point; the split vertex carries
        the bulge from point to v2.
    """
    if v1.is_line:
        return Vertex(v1.x, v1.y, 0.0), Vertex(point.x, point.y, 0.0)

    if v1.pos.almost_equal(v2.pos, eps) or v1.pos.almost_equal(point, eps):
        return Vertex(point.x, point.y, 0.0), Vertex(point.x, point.y, v1.bulge)

    if v2.pos.almost_equal(point, eps):
        return v1, Vertex(v2.x, v2.y, 0.0)

    _, center = arc_radius_and_center(v1, v2)
    negative = v1.bulge < 0.0
    point_angle = angle_of(center, point)
    theta1 = delta_angle_signed(angle_of(center, v1.pos), point_angle, negative)
    theta2 = delta_angle_signed(point_angle, angle_of(center, v2.pos), negative)
    return (
        Vertex(v1.x, v1.y, bulge_from_sweep(theta1)),
        Vertex(point.x, point.y, bulge_from_sweep(theta2)),
    )
