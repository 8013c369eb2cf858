"""Parallel offset of a whole shape.

Islands and holes are offset together so that growing islands and shrinking
holes which run into each other merge correctly:

1. Every contour gets a closed raw offset with the same signed distance
   (islands grow and holes shrink for positive distances).
2. Each raw loop is intersected with itself and with every other raw loop.
3. Loops are cut at those points; slices that come closer than the offset
   distance to any input contour are discarded.
4. Surviving slices are stitched across loops into closed results and
   re-classified by orientation.

Key functions:
- shape_parallel_offset: Offset a Shape and return a new Shape
"""

import logging
from dataclasses import dataclass

from polyarc.config import SelfIntersectOptions, ShapeOffsetOptions
from polyarc.core.intersect import find_intersects, find_self_intersects
from polyarc.core.offset import raw_offset_polyline, slice_is_valid
from polyarc.core.slicing import PlineSlice, locate_points, slice_at_points, stitch_slices
from polyarc.domain import AabbIndex, Point, Polyline, Shape, require_shape

logger = logging.getLogger(__name__)


@dataclass
class _OffsetLoop:
    """Raw offset of one input contour."""

    source: int
    raw: Polyline
    index: AabbIndex
    userdata: list[int]


def _collect_hits(loops: list[_OffsetLoop], eps: float) -> list[list[tuple[int, Point]]]:
    hits: list[list[tuple[int, Point]]] = [[] for _ in loops]

    for k, loop in enumerate(loops):
        self_hits = find_self_intersects(
            loop.raw, SelfIntersectOptions(aabb_index=loop.index, pos_equal_eps=eps)
        )
        for hit in self_hits.basic:
            hits[k].append((hit.start_index1, hit.point))
            hits[k].append((hit.start_index2, hit.point))
        for overlap in self_hits.overlapping:
            for seg_index in (overlap.start_index1, overlap.start_index2):
                hits[k].append((seg_index, overlap.point1))
                hits[k].append((seg_index, overlap.point2))

    for i in range(len(loops)):
        for j in range(i + 1, len(loops)):
            if not loops[i].index.extents().expanded(eps).intersects(loops[j].index.extents()):
                continue
            pair_hits = find_intersects(loops[i].raw, loops[j].raw, loops[i].index, eps)
            for hit in pair_hits.basic:
                hits[i].append((hit.start_index1, hit.point))
                hits[j].append((hit.start_index2, hit.point))
            for overlap in pair_hits.overlapping:
                for point in (overlap.point1, overlap.point2):
                    hits[i].append((overlap.start_index1, point))
                    hits[j].append((overlap.start_index2, point))

    return hits


def shape_parallel_offset(
    shape: Shape, offset: float, options: ShapeOffsetOptions | None = None
) -> Shape:
    """Offset every contour of a shape and re-classify the results.

    Each result contour inherits the userdata values of the input contour
    its first slice came from.

    Args:
        shape: Input shape
        offset: Signed distance (positive grows islands and shrinks holes)
        options: Tolerances, defaults when None

    Returns:
        New Shape with CCW islands and CW holes

    Raises:
        InvalidHandleError: If shape is not a Shape
    """
    require_shape(shape)
    if options is None:
        options = ShapeOffsetOptions()
    eps = options.pos_equal_eps

    originals: list[tuple[Polyline, AabbIndex]] = []
    loops: list[_OffsetLoop] = []
    for _, _, pline, userdata in shape.contours():
        if pline.vertex_count < 2:
            continue
        originals.append((pline, AabbIndex.from_polyline(pline, exact=False)))
        raw = raw_offset_polyline(pline, offset, eps)
        if raw.vertex_count < 2:
            continue
        raw.closed = True
        loops.append(
            _OffsetLoop(len(loops), raw, AabbIndex.from_polyline(raw, exact=False), list(userdata))
        )

    if not loops:
        return Shape()

    hits = _collect_hits(loops, eps)
    whole: list[tuple[Polyline, list[int]]] = []
    slices: list[PlineSlice] = []
    for loop, loop_hits in zip(loops, hits):
        if not loop_hits:
            if slice_is_valid(loop.raw, originals, offset, options.offset_dist_eps, eps):
                whole.append((loop.raw, loop.userdata))
            continue
        points = locate_points(loop.raw, loop_hits, eps)
        for order, piece in enumerate(slice_at_points(loop.raw, points, eps)):
            if slice_is_valid(piece, originals, offset, options.offset_dist_eps, eps):
                slices.append(PlineSlice(piece, loop.source, order, loop.userdata))

    logger.debug(
        "Shape offset: %d loops, %d whole, %d valid slices", len(loops), len(whole), len(slices)
    )

    results: list[tuple[Polyline, list[int]]] = list(whole)
    for pline, head in stitch_slices(slices, options.slice_join_eps, closed_only=True):
        results.append((pline, head.userdata))

    ccw: list[Polyline] = []
    cw: list[Polyline] = []
    ccw_userdata: list[list[int]] = []
    cw_userdata: list[list[int]] = []
    for pline, userdata in results:
        area = pline.area()
        if abs(area) < eps:
            continue
        if area > 0.0:
            ccw.append(pline)
            ccw_userdata.append(list(userdata))
        else:
            cw.append(pline)
            cw_userdata.append(list(userdata))

    return Shape(ccw, cw, ccw_userdata, cw_userdata)
