"""Parallel offset of a single polyline.

The offset runs in three stages:
1. Raw offset: every segment is moved independently (lines along their
   right-hand normal, arcs by growing or shrinking their radius).
2. Joining: consecutive raw segments are trimmed at their intersection,
   bridged by an arc around the original vertex at convex corners, or
   connected by a straight line otherwise.
3. Trimming (optional): the raw offset curve is cut at its self
   intersections, slices that come closer to the input than the offset
   distance are discarded, and the rest is stitched back together.

A positive distance offsets to the right of the direction of travel, which
is outward for counter-clockwise closed polylines.

Key classes:
- RawOffsetSeg: One segment of the raw offset curve

Key functions:
- raw_offset_segments: Offset each segment independently
- raw_offset_polyline: Join raw segments into a (possibly self-crossing) polyline
- parallel_offset: Full offset with optional self-intersection handling
"""

import logging
import math
from collections.abc import Callable
from dataclasses import dataclass

from polyarc.config import OffsetOptions, SelfIntersectOptions
from polyarc.core.intersect import (
    IntersectKind,
    find_self_intersects,
    intersect_segments,
)
from polyarc.core.slicing import (
    PlineSlice,
    locate_points,
    slice_at_points,
    stitch_slices,
)
from polyarc.domain import AABB, AabbIndex, Point, Polyline, Vertex, require_polyline
from polyarc.domain.segment import (
    angle_of,
    arc_radius_and_center,
    bulge_from_sweep,
    bulge_sweep,
    delta_angle,
    delta_angle_signed,
    seg_approx_bounding_box,
    seg_closest_point,
    seg_midpoint,
    seg_tangent,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class RawOffsetSeg:
    """One independently offset segment.

    Attributes:
        v1: Start vertex (bulge of the offset segment)
        v2: End vertex (bulge unused)
        orig_v2: Original vertex the segment ends at (corner join center)
        collapsed_arc: True when an arc shrank past zero radius and was
            replaced by a line
    """

    v1: Vertex
    v2: Vertex
    orig_v2: Point
    collapsed_arc: bool = False


def _dedupe_vertices(pline: Polyline, eps: float) -> Polyline:
    """Copy of pline without zero-length segments.

    A repeated position keeps the bulge of the later vertex so the segment
    that follows the duplicate survives.
    """
    result = Polyline(closed=pline.closed, userdata=pline.userdata)
    for vertex in pline:
        result.add_or_replace_vertex(vertex, eps)
    if result.closed and result.vertex_count > 1:
        last = result[result.vertex_count - 1]
        if last.pos.almost_equal(result[0].pos, eps):
            result.remove_vertex(result.vertex_count - 1)
    return result


def raw_offset_segments(pline: Polyline, offset: float, eps: float = 1e-5) -> list[RawOffsetSeg]:
    """Offset each segment of pline independently.

    Arcs shrinking to a radius below eps become lines through the points
    where the shrunken circle would place their endpoints.

    Args:
        pline: Input polyline (no zero-length segments)
        offset: Signed distance, positive to the right of travel
        eps: Position tolerance

    Returns:
        One RawOffsetSeg per non-degenerate segment
    """
    result: list[RawOffsetSeg] = []
    for v1, v2 in pline.segments():
        if v1.pos.almost_equal(v2.pos, eps):
            continue
        if v1.is_line:
            dx = v2.x - v1.x
            dy = v2.y - v1.y
            length = math.hypot(dx, dy)
            nx = dy / length * offset
            ny = -dx / length * offset
            result.append(
                RawOffsetSeg(
                    Vertex(v1.x + nx, v1.y + ny, 0.0),
                    Vertex(v2.x + nx, v2.y + ny, 0.0),
                    v2.pos,
                )
            )
            continue

        radius, center = arc_radius_and_center(v1, v2)
        new_radius = radius + offset if v1.bulge > 0.0 else radius - offset
        scale = new_radius / radius
        x1 = center.x + (v1.x - center.x) * scale
        y1 = center.y + (v1.y - center.y) * scale
        x2 = center.x + (v2.x - center.x) * scale
        y2 = center.y + (v2.y - center.y) * scale
        if new_radius < eps:
            result.append(
                RawOffsetSeg(Vertex(x1, y1, 0.0), Vertex(x2, y2, 0.0), v2.pos, collapsed_arc=True)
            )
        else:
            result.append(RawOffsetSeg(Vertex(x1, y1, v1.bulge), Vertex(x2, y2, 0.0), v2.pos))
    return result


def _sub_arc_bulge(start: Vertex, end_pos: Point, from_pt: Point, to_pt: Point) -> float:
    """Bulge of the piece from from_pt to to_pt on the arc start -> end_pos.

    Falls back to the short way around when the directed sweep would exceed
    the arc's own sweep (intersection points slightly off the arc).
    """
    if start.is_line:
        return 0.0
    _, center = arc_radius_and_center(start, Vertex(end_pos.x, end_pos.y))
    a1 = angle_of(center, from_pt)
    a2 = angle_of(center, to_pt)
    sweep = delta_angle_signed(a1, a2, start.bulge < 0.0)
    if abs(sweep) > abs(bulge_sweep(start.bulge)) + 1e-9:
        sweep = delta_angle(a1, a2)
    return bulge_from_sweep(sweep)


def _join(
    out: Polyline,
    s1: RawOffsetSeg,
    s2: RawOffsetSeg,
    offset: float,
    orig_tangents: tuple[Point, Point],
    eps: float,
) -> None:
    """Append the join between s1 (whose start is out's last vertex) and s2."""
    start1 = out[out.vertex_count - 1]
    end1 = s1.v2.pos
    start2 = s2.v1.pos
    corner = s1.orig_v2

    if end1.almost_equal(start2, eps):
        out.add_or_replace_vertex(s2.v1, eps)
        return

    hit = intersect_segments(start1, Vertex(end1.x, end1.y), s2.v1, s2.v2, eps)
    if hit.kind is not IntersectKind.NONE:
        point = min(hit.points, key=lambda p: p.distance_to(corner))
        trimmed = _sub_arc_bulge(start1, end1, start1.pos, point)
        out.set_vertex(out.vertex_count - 1, start1.with_bulge(trimmed))
        bulge2 = _sub_arc_bulge(s2.v1, s2.v2.pos, point, s2.v2.pos)
        out.add_or_replace_vertex(Vertex(point.x, point.y, bulge2), eps)
        return

    t1, t2 = orig_tangents
    turn = t1.x * t2.y - t1.y * t2.x
    if turn * offset > 0.0:
        # convex corner: arc around the original vertex
        sweep = delta_angle(angle_of(corner, end1), angle_of(corner, start2))
        out.add_or_replace_vertex(Vertex(end1.x, end1.y, bulge_from_sweep(sweep)), eps)
    else:
        out.add_or_replace_vertex(Vertex(end1.x, end1.y, 0.0), eps)
    out.add_or_replace_vertex(s2.v1, eps)


def raw_offset_polyline(pline: Polyline, offset: float, eps: float = 1e-5) -> Polyline:
    """Join independently offset segments into the raw offset polyline.

    The result may self-intersect at concave regions; parallel_offset trims
    those when asked to.

    Args:
        pline: Input polyline
        offset: Signed distance, positive to the right of travel
        eps: Position tolerance

    Returns:
        Raw offset polyline with the input's closed flag and userdata
    """
    source = _dedupe_vertices(pline, eps)
    raw = raw_offset_segments(source, offset, eps)
    result = Polyline(closed=source.closed, userdata=source.userdata)
    if not raw:
        return result

    segments = [seg for seg in source.segments() if not seg[0].pos.almost_equal(seg[1].pos, eps)]

    def tangents(k: int) -> tuple[Point, Point]:
        a1, a2 = segments[k]
        b1, b2 = segments[(k + 1) % len(segments)]
        return seg_tangent(a1, a2, a2.pos), seg_tangent(b1, b2, b1.pos)

    result.append(raw[0].v1)
    for k in range(len(raw) - 1):
        _join(result, raw[k], raw[k + 1], offset, tangents(k), eps)

    if not source.closed:
        last = raw[-1].v2
        result.add_or_replace_vertex(Vertex(last.x, last.y, 0.0), eps)
        return result

    _join(result, raw[-1], raw[0], offset, tangents(len(raw) - 1), eps)
    # the wrap join re-emits the start of raw[0]; fold it into vertex 0
    wrap = result.remove_vertex(result.vertex_count - 1)
    first = result[0]
    if not wrap.pos.almost_equal(first.pos, eps):
        if result.vertex_count > 1:
            next_pos = result[1].pos
            bulge = _sub_arc_bulge(first, next_pos, wrap.pos, next_pos) if first.is_arc else 0.0
        else:
            bulge = wrap.bulge
        result.set_vertex(0, Vertex(wrap.x, wrap.y, bulge))
    return result


def _min_distance(pline: Polyline, index: AabbIndex, point: Point, radius: float) -> float:
    """Distance from point to pline, or inf if farther than radius."""
    box = AABB(point.x - radius, point.y - radius, point.x + radius, point.y + radius)
    best = math.inf
    for seg_index in index.iter_query(box):
        v1, v2 = pline.segment(seg_index)
        best = min(best, seg_closest_point(v1, v2, point).distance_to(point))
    return best


def slice_is_valid(
    candidate: Polyline,
    originals: list[tuple[Polyline, AabbIndex]],
    offset: float,
    dist_eps: float,
    pos_eps: float,
) -> bool:
    """Check that a raw offset slice keeps its distance from the inputs.

    A slice is valid when every segment midpoint and every interior vertex is
    at least |offset| - dist_eps away from all input polylines, and no slice
    segment crosses any input polyline.
    """
    distance = abs(offset)
    min_allowed = distance - dist_eps
    search_radius = distance + pos_eps

    samples = [seg_midpoint(v1, v2) for v1, v2 in candidate.segments()]
    last = candidate.vertex_count - (0 if candidate.closed else 1)
    first = 0 if candidate.closed else 1
    samples.extend(candidate[i].pos for i in range(first, last))

    for original, index in originals:
        for sample in samples:
            if _min_distance(original, index, sample, search_radius) < min_allowed:
                return False
        for v1, v2 in candidate.segments():
            box = seg_approx_bounding_box(v1, v2).expanded(pos_eps)
            for seg_index in index.iter_query(box):
                u1, u2 = original.segment(seg_index)
                if intersect_segments(v1, v2, u1, u2, pos_eps).kind is not IntersectKind.NONE:
                    return False
    return True


def _circle_hits(raw: Polyline, center: Point, radius: float, eps: float) -> list[tuple[int, Point]]:
    """Points where raw crosses the circle around an open input's end point."""
    left = Vertex(center.x - radius, center.y, 1.0)
    right = Vertex(center.x + radius, center.y, 1.0)
    halves = ((left, right), (right, left))
    start = raw[0].pos
    end = raw[raw.vertex_count - 1].pos
    hits: list[tuple[int, Point]] = []
    for seg_index, (v1, v2) in enumerate(raw.segments()):
        for h1, h2 in halves:
            for point in intersect_segments(v1, v2, h1, h2, eps).points:
                if point.almost_equal(start, eps) or point.almost_equal(end, eps):
                    continue
                hits.append((seg_index, point))
    return hits


def forward_order(count: int) -> Callable[[PlineSlice, PlineSlice], float]:
    """Preference key choosing the slice that follows most closely along the source."""

    def key(current: PlineSlice, candidate: PlineSlice) -> float:
        return (candidate.order - current.order) % count

    return key


def parallel_offset(
    pline: Polyline, offset: float, options: OffsetOptions | None = None
) -> list[Polyline]:
    """Offset a polyline by a signed distance.

    Args:
        pline: Input polyline (open or closed)
        offset: Signed distance, positive to the right of travel (outward for
            counter-clockwise closed polylines)
        options: Tolerances, optional prebuilt index of pline and whether to
            trim self-intersections

    Returns:
        Offset polylines mirroring the input's closed state; empty when the
        offset eliminates the whole polyline. All results carry the input's
        userdata tag.

    Raises:
        InvalidHandleError: If pline is not a Polyline
    """
    require_polyline(pline)
    if options is None:
        options = OffsetOptions()
    eps = options.pos_equal_eps

    if pline.vertex_count < 2:
        return []
    if abs(offset) < eps:
        return [_dedupe_vertices(pline, eps)]

    raw = raw_offset_polyline(pline, offset, eps)
    if raw.vertex_count < 2:
        return []
    if not options.handle_self_intersects:
        return [raw]

    index = options.aabb_index
    if index is None:
        logger.debug("Building spatial index for offset input")
        index = AabbIndex.from_polyline(pline, exact=False)
    originals = [(pline, index)]

    raw_index = AabbIndex.from_polyline(raw, exact=False)
    self_hits = find_self_intersects(raw, SelfIntersectOptions(aabb_index=raw_index, pos_equal_eps=eps))
    hits = [(h.start_index1, h.point) for h in self_hits.basic]
    hits += [(h.start_index2, h.point) for h in self_hits.basic]
    for overlap in self_hits.overlapping:
        for seg_index in (overlap.start_index1, overlap.start_index2):
            hits.append((seg_index, overlap.point1))
            hits.append((seg_index, overlap.point2))

    if not pline.closed:
        radius = abs(offset)
        hits += _circle_hits(raw, pline[0].pos, radius, eps)
        hits += _circle_hits(raw, pline[pline.vertex_count - 1].pos, radius, eps)

    if not hits:
        if slice_is_valid(raw, originals, offset, options.offset_dist_eps, eps):
            return [raw]
        logger.debug("Raw offset rejected as a whole")
        return []

    points = locate_points(raw, hits, eps)
    pieces = slice_at_points(raw, points, eps)
    valid = [
        PlineSlice(piece, order=order)
        for order, piece in enumerate(pieces)
        if slice_is_valid(piece, originals, offset, options.offset_dist_eps, eps)
    ]
    logger.debug("Offset slices: %d total, %d valid", len(pieces), len(valid))

    stitched = stitch_slices(
        valid,
        options.slice_join_eps,
        closed_only=pline.closed,
        order_key=forward_order(len(pieces)),
    )
    results = []
    for result, _ in stitched:
        if result.closed != pline.closed:
            continue
        result.userdata = pline.userdata
        results.append(result)
    return results
