"""Slicing polylines at intersection points and stitching slices back.

Both the boolean engine and the offset engines cut polylines at intersection
points, keep a subset of the resulting open pieces, and join the survivors
end to start into new polylines. This module holds that shared machinery.

Key classes:
- SlicePoint: An intersection point located on a segment
- PlineSlice: An open piece of a source polyline

Key functions:
- slice_at_points: Cut a polyline into open slices
- stitch_slices: Join slices end to start into polylines
"""

import logging
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass, field

from polyarc.domain import Point, Polyline, Vertex
from polyarc.domain.segment import seg_length, seg_midpoint, seg_param, seg_split_at_point

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class SlicePoint:
    """Point on segment seg_index at monotonic parameter param."""

    seg_index: int
    param: float
    point: Point


@dataclass
class PlineSlice:
    """An open piece of a source polyline.

    Attributes:
        pline: Open polyline holding the slice vertices
        source: Caller-defined key of the polyline the slice came from
        order: Position of the slice along its source polyline
        userdata: Userdata values inherited by stitched results
    """

    pline: Polyline
    source: int = 0
    order: int = 0
    userdata: list[int] = field(default_factory=list)

    @property
    def start(self) -> Point:
        return self.pline[0].pos

    @property
    def end(self) -> Point:
        return self.pline[self.pline.vertex_count - 1].pos

    def reversed(self) -> "PlineSlice":
        """Copy of the slice traversed in the opposite direction."""
        pline = self.pline.clone()
        pline.invert_direction()
        return PlineSlice(pline, self.source, self.order, list(self.userdata))


def locate_points(
    pline: Polyline, hits: Iterable[tuple[int, Point]], eps: float
) -> list[SlicePoint]:
    """Sort and dedupe points by position along the polyline.

    A point on the end vertex of a segment is moved to the start of the
    following segment. Consecutive points closer than eps collapse.
    """
    n = pline.vertex_count
    located: list[SlicePoint] = []
    for seg_index, point in hits:
        v1, v2 = pline.segment(seg_index)
        if v2.pos.almost_equal(point, eps) and (pline.closed or seg_index < pline.segment_count - 1):
            seg_index = (seg_index + 1) % n
            v1, v2 = pline.segment(seg_index)
            point = v1.pos
        located.append(SlicePoint(seg_index, seg_param(v1, v2, point), point))

    located.sort(key=lambda sp: (sp.seg_index, sp.param))
    result: list[SlicePoint] = []
    for sp in located:
        if result and result[-1].point.almost_equal(sp.point, eps):
            continue
        result.append(sp)
    if pline.closed and len(result) > 1 and result[-1].point.almost_equal(result[0].point, eps):
        result.pop()
    return result


def _slice_between(
    pline: Polyline, start: SlicePoint, end: SlicePoint, eps: float
) -> Polyline:
    """Open polyline following pline from start to end."""
    n = pline.vertex_count
    result = Polyline()

    v1, v2 = pline.segment(start.seg_index)
    if start.seg_index == end.seg_index and end.param > start.param:
        _, split_start = seg_split_at_point(v1, v2, start.point, eps)
        first, _ = seg_split_at_point(split_start, v2, end.point, eps)
        result.add_or_replace_vertex(Vertex(start.point.x, start.point.y, first.bulge), eps)
        result.add_or_replace_vertex(Vertex(end.point.x, end.point.y), eps)
        return result

    _, split_start = seg_split_at_point(v1, v2, start.point, eps)
    result.append(split_start)
    index = (start.seg_index + 1) % n
    while index != end.seg_index:
        result.add_or_replace_vertex(pline[index], eps)
        index = (index + 1) % n

    e1, e2 = pline.segment(end.seg_index)
    head, _ = seg_split_at_point(e1, e2, end.point, eps)
    result.add_or_replace_vertex(head, eps)
    result.add_or_replace_vertex(Vertex(end.point.x, end.point.y), eps)
    return result


def slice_at_points(
    pline: Polyline, points: Sequence[SlicePoint], eps: float
) -> list[Polyline]:
    """Cut a polyline at located points into open slices.

    For a closed polyline slice k runs from point k to point k + 1 (wrapping
    around). For an open polyline the pieces before the first and after the
    last point are included too. Slices shorter than eps are dropped.

    Args:
        pline: Source polyline
        points: Points from locate_points
        eps: Position tolerance

    Returns:
        Open polylines in order along the source
    """
    if not points:
        return []

    bounds = list(points)
    if not pline.closed:
        last_seg = pline.segment_count - 1
        first_v, _ = pline.segment(0)
        end_a, end_b = pline.segment(last_seg)
        head = SlicePoint(0, 0.0, first_v.pos)
        tail = SlicePoint(last_seg, seg_param(end_a, end_b, end_b.pos), end_b.pos)
        if not bounds[0].point.almost_equal(head.point, eps):
            bounds.insert(0, head)
        if not bounds[-1].point.almost_equal(tail.point, eps):
            bounds.append(tail)
        pairs = zip(bounds, bounds[1:])
    else:
        pairs = zip(bounds, bounds[1:] + bounds[:1])

    slices: list[Polyline] = []
    for start, end in pairs:
        piece = _slice_between(pline, start, end, eps)
        if piece.vertex_count < 2 or piece.path_length() < eps:
            continue
        piece.userdata = pline.userdata
        slices.append(piece)
    return slices


def longest_segment_midpoint(pline: Polyline) -> tuple[Point, int]:
    """Midpoint of the longest segment and that segment's index."""
    best_index = 0
    best_length = -1.0
    for i, (v1, v2) in enumerate(pline.segments()):
        length = seg_length(v1, v2)
        if length > best_length:
            best_index, best_length = i, length
    v1, v2 = pline.segment(best_index)
    return seg_midpoint(v1, v2), best_index


def stitch_slices(
    slices: Sequence[PlineSlice],
    join_eps: float,
    closed_only: bool = True,
    order_key: Callable[[PlineSlice, PlineSlice], float] | None = None,
) -> list[tuple[Polyline, PlineSlice]]:
    """Join slices end to start into polylines.

    A chain is closed as soon as its end returns to its start. Otherwise the
    next slice is chosen among those starting at the chain end, preferring
    the smallest order_key(current, candidate) when several qualify.

    Args:
        slices: Slices to join
        join_eps: Tolerance for matching end and start points
        closed_only: Discard chains that do not close into a loop; when
            False, open chains are returned as open polylines
        order_key: Preference among candidate continuations

    Returns:
        List of (polyline, first slice of the chain) pairs
    """
    remaining = list(range(len(slices)))
    used = [False] * len(slices)
    results: list[tuple[Polyline, PlineSlice]] = []

    if not closed_only:
        # begin open chains at slices nothing else leads into
        def has_predecessor(k: int) -> bool:
            return any(
                j != k and slices[j].end.almost_equal(slices[k].start, join_eps)
                for j in range(len(slices))
            )

        remaining.sort(key=lambda k: (has_predecessor(k), k))

    for first in remaining:
        if used[first]:
            continue
        used[first] = True
        head = slices[first]
        chain = head.pline.clone()
        current = head
        closed = False

        while True:
            end = chain[chain.vertex_count - 1].pos
            if chain.vertex_count > 2 and end.almost_equal(chain[0].pos, join_eps):
                closed = True
                break
            candidates = [
                k for k in range(len(slices))
                if not used[k] and slices[k].start.almost_equal(end, join_eps)
            ]
            if not candidates:
                break
            if order_key is not None:
                candidates.sort(key=lambda k: order_key(current, slices[k]))
            nxt = candidates[0]
            used[nxt] = True
            current = slices[nxt]
            for vertex in current.pline.vertices:
                chain.add_or_replace_vertex(vertex, join_eps)

        if closed:
            chain.remove_vertex(chain.vertex_count - 1)
            chain.closed = True
        elif closed_only:
            logger.debug("Discarding unclosed chain starting at slice %d", first)
            continue

        chain.userdata = head.pline.userdata
        results.append((chain, head))

    logger.debug("Stitched %d slices into %d polylines", len(slices), len(results))
    return results
