"""Packed axis-aligned bounding box index over polyline segments.

The index is bulk-loaded once: leaves are ordered with a sort-tile-recursive
pass (slices by center X, then center Y inside each slice) and grouped into
fixed-size nodes level by level. Everything is stored in flat arrays, so the
index is immutable and safe to share between readers.

Key classes:
- AabbIndex: Segment bounding box hierarchy with extents and box queries
"""

import math
from collections.abc import Iterable, Sequence
from typing import TYPE_CHECKING

from polyarc.domain.segment import seg_approx_bounding_box, seg_bounding_box
from polyarc.domain.vertex import AABB

if TYPE_CHECKING:
    from polyarc.domain.polyline import Polyline


class AabbIndex:
    """Immutable packed R-tree of segment bounding boxes.

    Leaf i corresponds to segment i of the polyline the index was built
    from. Mutating that polyline afterwards leaves the index stale; build a
    fresh one instead.

    Example:
        index = AabbIndex.from_polyline(pline)
        for seg_index in index.query(AABB(0, 0, 5, 5)):
            ...
    """

    NODE_SIZE = 16

    __slots__ = ("_boxes", "_indices", "_level_bounds", "_item_count", "_node_size", "exact")

    def __init__(self, boxes: Sequence[AABB], node_size: int = NODE_SIZE, exact: bool = True) -> None:
        """Bulk-load the index.

        Args:
            boxes: One bounding box per item, item i is reported as index i
            node_size: Maximum number of children per node
            exact: Whether boxes are exact (informational)
        """
        if node_size < 2:
            raise ValueError("node_size must be at least 2")

        self._node_size = node_size
        self._item_count = len(boxes)
        self.exact = exact
        self._boxes: list[AABB] = []
        self._indices: list[int] = []
        self._level_bounds: list[int] = []

        if self._item_count == 0:
            return

        order = self._sort_tile_order(boxes)
        self._boxes = [boxes[i] for i in order]
        self._indices = list(order)
        self._level_bounds.append(len(self._boxes))

        level_start = 0
        level_end = len(self._boxes)
        while level_end - level_start > 1:
            for pos in range(level_start, level_end, node_size):
                child_end = min(pos + node_size, level_end)
                node_box = self._boxes[pos]
                for child in range(pos + 1, child_end):
                    node_box = node_box.union(self._boxes[child])
                self._boxes.append(node_box)
                self._indices.append(pos)
            level_start = level_end
            level_end = len(self._boxes)
            self._level_bounds.append(level_end)

    def _sort_tile_order(self, boxes: Sequence[AABB]) -> list[int]:
        count = len(boxes)
        node_count = math.ceil(count / self._node_size)
        slice_count = max(1, math.ceil(math.sqrt(node_count)))
        slice_size = slice_count * self._node_size

        centers = [box.center for box in boxes]
        by_x = sorted(range(count), key=lambda i: centers[i].x)
        order: list[int] = []
        for start in range(0, count, slice_size):
            chunk = by_x[start : start + slice_size]
            chunk.sort(key=lambda i: centers[i].y)
            order.extend(chunk)
        return order

    @classmethod
    def from_polyline(cls, pline: "Polyline", exact: bool = True) -> "AabbIndex":
        """Build an index with one leaf per polyline segment.

        Args:
            pline: Source polyline (snapshot of its current vertices)
            exact: Use exact arc extents; otherwise a cheaper conservative box

        Returns:
            New AabbIndex
        """
        box_fn = seg_bounding_box if exact else seg_approx_bounding_box
        boxes = [box_fn(v1, v2) for v1, v2 in pline.segments()]
        return cls(boxes, exact=exact)

    @property
    def item_count(self) -> int:
        """Number of leaves (segments) in the index."""
        return self._item_count

    def __len__(self) -> int:
        return self._item_count

    def extents(self) -> AABB:
        """Bounding box of the whole index, NaN corners when empty."""
        if not self._boxes:
            return AABB.empty()
        return self._boxes[-1]

    def item_box(self, item: int) -> AABB:
        """Bounding box stored for a leaf."""
        for pos in range(self._item_count):
            if self._indices[pos] == item:
                return self._boxes[pos]
        raise IndexError(f"Item {item} not in index of {self._item_count} items")

    def query(self, box: AABB) -> list[int]:
        """Return indices of all items whose box intersects the query box.

        Args:
            box: Query box (touching counts as intersecting)

        Returns:
            List of item indices in no particular order
        """
        return list(self.iter_query(box))

    def iter_query(self, box: AABB) -> Iterable[int]:
        """Lazily yield indices of items whose box intersects the query box."""
        if not self._boxes:
            return
        top_level = len(self._level_bounds) - 1
        stack = [(len(self._boxes) - 1, top_level)]
        while stack:
            pos, level = stack.pop()
            if not self._boxes[pos].intersects(box):
                continue
            if level == 0:
                yield self._indices[pos]
                continue
            first_child = self._indices[pos]
            child_end = min(first_child + self._node_size, self._level_bounds[level - 1])
            for child in range(first_child, child_end):
                stack.append((child, level - 1))

    def __repr__(self) -> str:
        return f"AabbIndex(items={self._item_count}, exact={self.exact})"
