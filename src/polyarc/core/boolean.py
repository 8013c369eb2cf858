"""Boolean set operations on closed line/arc polylines.

Both operands are cut at every intersection point, each resulting slice is
classified against the other operand (inside, outside, or coincident with
its boundary in the same or opposite direction), the slices an operation
keeps are selected, and the survivors are stitched back into closed loops.

Results are normalized: positive polylines wind counter-clockwise and
negative polylines (holes) wind clockwise.

Key classes:
- BooleanOp: Union (OR), intersection (AND), difference (NOT), XOR
- BooleanResultInfo: How the operands related to each other
- BooleanResult: Positive and negative result polylines

Key functions:
- boolean: Combine two polylines with a boolean operation
"""

import logging
from dataclasses import dataclass, field
from enum import Enum, auto

from polyarc.config import BooleanOptions
from polyarc.core.intersect import PlineIntersects, find_intersects
from polyarc.core.slicing import (
    PlineSlice,
    locate_points,
    longest_segment_midpoint,
    slice_at_points,
    stitch_slices,
)
from polyarc.domain import AABB, AabbIndex, Point, Polyline, require_polyline
from polyarc.domain.segment import seg_closest_point, seg_tangent
from polyarc.exceptions import OpenPolylineError, UnknownOperationError

logger = logging.getLogger(__name__)


class BooleanOp(Enum):
    """Boolean operation to apply to two polylines.

    - OR: Union
    - AND: Intersection
    - NOT: Difference (first operand minus second)
    - XOR: Symmetric difference
    """

    OR = 0
    AND = 1
    NOT = 2
    XOR = 3

    @classmethod
    def parse(cls, value: "BooleanOp | str | int") -> "BooleanOp":
        """Coerce an operation name, value or member to a BooleanOp.

        Raises:
            UnknownOperationError: If value names no operation
        """
        if isinstance(value, BooleanOp):
            return value
        if isinstance(value, str):
            key = value.strip().upper()
            aliases = {
                "UNION": "OR",
                "INTERSECTION": "AND",
                "DIFFERENCE": "NOT",
                "EXCLUDE": "NOT",
            }
            key = aliases.get(key, key)
            if key in cls.__members__:
                return cls[key]
            raise UnknownOperationError(value)
        if isinstance(value, int) and not isinstance(value, bool):
            try:
                return cls(value)
            except ValueError:
                raise UnknownOperationError(value) from None
        raise UnknownOperationError(value)


class BooleanResultInfo(Enum):
    """How the two operands related.

    - INTERSECTED: Boundaries cross
    - OVERLAPPING: Boundaries only share coincident stretches
    - DISJOINT: No intersections and no containment
    - PLINE1_INSIDE_PLINE2: First operand fully enclosed by the second
    - PLINE2_INSIDE_PLINE1: Second operand fully enclosed by the first
    - EMPTY_OPERAND: At least one operand has fewer than 2 vertices
    """

    INTERSECTED = auto()
    OVERLAPPING = auto()
    DISJOINT = auto()
    PLINE1_INSIDE_PLINE2 = auto()
    PLINE2_INSIDE_PLINE1 = auto()
    EMPTY_OPERAND = auto()


@dataclass
class BooleanResult:
    """Result of a boolean operation.

    Attributes:
        positive: Counter-clockwise result loops (area contributing)
        negative: Clockwise result loops (holes)
        info: How the operands related
    """

    positive: list[Polyline] = field(default_factory=list)
    negative: list[Polyline] = field(default_factory=list)
    info: BooleanResultInfo = BooleanResultInfo.INTERSECTED

    @property
    def area(self) -> float:
        """Net area (positive loops plus negative loops' signed area)."""
        return sum(p.area() for p in self.positive) + sum(p.area() for p in self.negative)

    @property
    def is_empty(self) -> bool:
        return not self.positive and not self.negative


class _SliceClass(Enum):
    INSIDE = auto()
    OUTSIDE = auto()
    OVERLAP_SAME = auto()
    OVERLAP_OPPOSITE = auto()


@dataclass
class _Operand:
    """An input polyline with the data needed to classify slices against it."""

    pline: Polyline
    index: AabbIndex
    reversed: bool

    def boundary_tangent(self, point: Point, eps: float) -> Point | None:
        """Counter-clockwise tangent at the boundary point within eps, if any."""
        box = AABB(point.x - eps, point.y - eps, point.x + eps, point.y + eps)
        for seg_index in self.index.iter_query(box):
            v1, v2 = self.pline.segment(seg_index)
            closest = seg_closest_point(v1, v2, point)
            if closest.distance_to(point) < eps:
                tangent = seg_tangent(v1, v2, closest)
                if self.reversed:
                    return Point(-tangent.x, -tangent.y)
                return tangent
        return None

    def encloses(self, point: Point) -> bool:
        return self.pline.winding_number(point.x, point.y) != 0


def _ccw_copy(pline: Polyline) -> Polyline:
    copy = pline.clone()
    if copy.area() < 0.0:
        copy.invert_direction()
    return copy


def _cw_copy(pline: Polyline) -> Polyline:
    copy = pline.clone()
    if copy.area() > 0.0:
        copy.invert_direction()
    return copy


def _empty_operand_result(
    pline1: Polyline, pline2: Polyline, op: BooleanOp, empty1: bool, empty2: bool
) -> BooleanResult:
    info = BooleanResultInfo.EMPTY_OPERAND
    if empty1 and empty2:
        return BooleanResult(info=info)
    if op is BooleanOp.AND:
        return BooleanResult(info=info)
    if op is BooleanOp.NOT:
        if empty2:
            return BooleanResult([_ccw_copy(pline1)], info=info)
        return BooleanResult(info=info)
    # OR / XOR with an empty operand yield the other operand
    other = pline2 if empty1 else pline1
    return BooleanResult([_ccw_copy(other)], info=info)


def _no_intersect_result(pline1: Polyline, pline2: Polyline, op: BooleanOp) -> BooleanResult:
    first1 = pline1[0]
    first2 = pline2[0]
    a_in_b = pline2.winding_number(first1.x, first1.y) != 0
    b_in_a = not a_in_b and pline1.winding_number(first2.x, first2.y) != 0

    if a_in_b:
        info = BooleanResultInfo.PLINE1_INSIDE_PLINE2
    elif b_in_a:
        info = BooleanResultInfo.PLINE2_INSIDE_PLINE1
    else:
        info = BooleanResultInfo.DISJOINT

    if op is BooleanOp.OR:
        if a_in_b:
            return BooleanResult([_ccw_copy(pline2)], info=info)
        if b_in_a:
            return BooleanResult([_ccw_copy(pline1)], info=info)
        return BooleanResult([_ccw_copy(pline1), _ccw_copy(pline2)], info=info)

    if op is BooleanOp.AND:
        if a_in_b:
            return BooleanResult([_ccw_copy(pline1)], info=info)
        if b_in_a:
            return BooleanResult([_ccw_copy(pline2)], info=info)
        return BooleanResult(info=info)

    if op is BooleanOp.NOT:
        if a_in_b:
            return BooleanResult(info=info)
        if b_in_a:
            return BooleanResult([_ccw_copy(pline1)], [_cw_copy(pline2)], info=info)
        return BooleanResult([_ccw_copy(pline1)], info=info)

    # XOR
    if a_in_b:
        return BooleanResult([_ccw_copy(pline2)], [_cw_copy(pline1)], info=info)
    if b_in_a:
        return BooleanResult([_ccw_copy(pline1)], [_cw_copy(pline2)], info=info)
    return BooleanResult([_ccw_copy(pline1), _ccw_copy(pline2)], info=info)


def _oriented_slices(
    operand: _Operand, hits: list[tuple[int, Point]], source: int, eps: float
) -> list[PlineSlice]:
    """Slice an operand and orient every slice counter-clockwise."""
    points = locate_points(operand.pline, hits, eps)
    slices = []
    for order, piece in enumerate(slice_at_points(operand.pline, points, eps)):
        pline_slice = PlineSlice(piece, source=source, order=order)
        if operand.reversed:
            pline_slice = pline_slice.reversed()
        slices.append(pline_slice)
    return slices


def _classify(pline_slice: PlineSlice, other: _Operand, eps: float) -> _SliceClass:
    midpoint, seg_index = longest_segment_midpoint(pline_slice.pline)
    other_tangent = other.boundary_tangent(midpoint, eps)
    if other_tangent is not None:
        v1, v2 = pline_slice.pline.segment(seg_index)
        tangent = seg_tangent(v1, v2, midpoint)
        dot = tangent.x * other_tangent.x + tangent.y * other_tangent.y
        return _SliceClass.OVERLAP_SAME if dot > 0.0 else _SliceClass.OVERLAP_OPPOSITE
    return _SliceClass.INSIDE if other.encloses(midpoint) else _SliceClass.OUTSIDE


def _hit_points(hits: PlineIntersects, first: bool) -> list[tuple[int, Point]]:
    points: list[tuple[int, Point]] = []
    for hit in hits.basic:
        points.append((hit.start_index1 if first else hit.start_index2, hit.point))
    for overlap in hits.overlapping:
        seg_index = overlap.start_index1 if first else overlap.start_index2
        points.append((seg_index, overlap.point1))
        points.append((seg_index, overlap.point2))
    return points


def _stitch(slices: list[PlineSlice], options: BooleanOptions) -> list[Polyline]:
    stitched = stitch_slices(slices, options.pos_equal_eps, closed_only=True)
    return [
        pline for pline, _ in stitched if abs(pline.area()) >= options.collapsed_area_eps
    ]


def boolean(
    pline1: Polyline,
    pline2: Polyline,
    op: "BooleanOp | str | int",
    options: BooleanOptions | None = None,
) -> BooleanResult:
    """Combine two closed polylines with a boolean operation.

    Operands with fewer than 2 vertices are empty: OR/XOR with an empty
    operand return the other operand, AND returns nothing, NOT returns the
    first operand unless it is the empty one. Results inherit the userdata
    tag of the operand they come from (stitched loops take the tag of their
    first slice).

    Args:
        pline1: First operand (closed)
        pline2: Second operand (closed)
        op: Operation (member, name such as "xor", or value 0-3)
        options: Tolerances and optional prebuilt index of pline1

    Returns:
        BooleanResult with CCW positive and CW negative polylines

    Raises:
        InvalidHandleError: If an operand is not a Polyline
        OpenPolylineError: If an operand with 2+ vertices is not closed
        UnknownOperationError: If op names no operation
    """
    require_polyline(pline1, "pline1")
    require_polyline(pline2, "pline2")
    op = BooleanOp.parse(op)
    if options is None:
        options = BooleanOptions()
    eps = options.pos_equal_eps

    empty1 = pline1.vertex_count < 2
    empty2 = pline2.vertex_count < 2
    if not empty1 and not pline1.closed:
        raise OpenPolylineError("pline1")
    if not empty2 and not pline2.closed:
        raise OpenPolylineError("pline2")
    if empty1 or empty2:
        logger.debug("Boolean %s with empty operand", op.name)
        return _empty_operand_result(pline1, pline2, op, empty1, empty2)

    index1 = options.pline1_aabb_index
    if index1 is None:
        logger.debug("Building spatial index for first boolean operand")
        index1 = AabbIndex.from_polyline(pline1, exact=False)

    hits = find_intersects(pline1, pline2, index1, eps)
    if not hits:
        result = _no_intersect_result(pline1, pline2, op)
        logger.debug("Boolean %s without intersections: %s", op.name, result.info.name)
        return result

    operand1 = _Operand(pline1, index1, pline1.area() < 0.0)
    operand2 = _Operand(pline2, AabbIndex.from_polyline(pline2, exact=False), pline2.area() < 0.0)

    groups: dict[tuple[int, _SliceClass], list[PlineSlice]] = {
        (source, cls): [] for source in (0, 1) for cls in _SliceClass
    }
    for pline_slice in _oriented_slices(operand1, _hit_points(hits, True), 0, eps):
        groups[(0, _classify(pline_slice, operand2, eps))].append(pline_slice)
    for pline_slice in _oriented_slices(operand2, _hit_points(hits, False), 1, eps):
        cls = _classify(pline_slice, operand1, eps)
        # coincident stretches are taken from the first operand only
        if cls in (_SliceClass.INSIDE, _SliceClass.OUTSIDE):
            groups[(1, cls)].append(pline_slice)

    a_in = groups[(0, _SliceClass.INSIDE)]
    a_out = groups[(0, _SliceClass.OUTSIDE)]
    a_same = groups[(0, _SliceClass.OVERLAP_SAME)]
    a_opposite = groups[(0, _SliceClass.OVERLAP_OPPOSITE)]
    b_in = groups[(1, _SliceClass.INSIDE)]
    b_out = groups[(1, _SliceClass.OUTSIDE)]

    logger.debug(
        "Boolean %s slices: A in=%d out=%d same=%d opposite=%d, B in=%d out=%d",
        op.name,
        len(a_in),
        len(a_out),
        len(a_same),
        len(a_opposite),
        len(b_in),
        len(b_out),
    )

    if op is BooleanOp.OR:
        loops = _stitch(a_out + b_out + a_same, options)
    elif op is BooleanOp.AND:
        loops = _stitch(a_in + b_in + a_same, options)
    elif op is BooleanOp.NOT:
        loops = _stitch(a_out + [s.reversed() for s in b_in] + a_opposite, options)
    else:
        loops = _stitch(a_out + [s.reversed() for s in b_in] + a_opposite, options)
        loops += _stitch(
            b_out + [s.reversed() for s in a_in] + [s.reversed() for s in a_opposite],
            options,
        )

    info = BooleanResultInfo.INTERSECTED if hits.basic else BooleanResultInfo.OVERLAPPING
    result = BooleanResult(
        positive=[p for p in loops if p.area() > 0.0],
        negative=[p for p in loops if p.area() < 0.0],
        info=info,
    )
    logger.debug(
        "Boolean %s produced %d positive, %d negative",
        op.name,
        len(result.positive),
        len(result.negative),
    )
    return result
