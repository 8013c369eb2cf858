"""Core geometry algorithms for polyarc.

This module contains the algorithms built on the domain models:

- Segment intersection (line/line, line/arc, arc/arc, overlaps)
- Polyline intersection and self-intersection scans
- Boolean operations (union, intersection, difference, xor)
- Parallel offsets of polylines and whole shapes
- Batch offsetting across worker processes

All operations are:
- Synchronous and single-threaded
- Pure (inputs are never modified, results are new objects)

Key functions:
- intersect_segments: Intersect two bulge segments
- find_intersects: All intersections between two polylines
- find_self_intersects: All self-intersections of a polyline
- boolean: Combine two closed polylines
- parallel_offset: Offset a polyline
- shape_parallel_offset: Offset a shape of islands and holes
- offset_polyline_task: Picklable single-polyline offset for worker processes

Key classes:
- BooleanOp / BooleanResult: Boolean operation selector and result
- BatchOffsetProcessor: Parallel batch orchestration
"""

from polyarc.core.boolean import BooleanOp, BooleanResult, BooleanResultInfo, boolean
from polyarc.core.intersect import (
    BasicIntersect,
    IntersectKind,
    OverlappingIntersect,
    PlineIntersects,
    SegmentIntersection,
    find_intersects,
    find_self_intersects,
    intersect_segments,
)
from polyarc.core.offset import parallel_offset, raw_offset_polyline
from polyarc.core.processor import BatchOffsetProcessor, offset_polyline_task
from polyarc.core.shape_offset import shape_parallel_offset

__all__ = [
    # Intersection types
    "BasicIntersect",
    "IntersectKind",
    "OverlappingIntersect",
    "PlineIntersects",
    "SegmentIntersection",
    # Boolean types
    "BooleanOp",
    "BooleanResult",
    "BooleanResultInfo",
    # Processor classes
    "BatchOffsetProcessor",
    # Functions
    "boolean",
    "find_intersects",
    "find_self_intersects",
    "intersect_segments",
    "offset_polyline_task",
    "parallel_offset",
    "raw_offset_polyline",
    "shape_parallel_offset",
]
