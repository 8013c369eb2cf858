"""Unit tests for the packed AABB index."""

import random

import pytest

from polyarc.domain import AABB, AabbIndex, Polyline


def _grid_boxes(size: int = 10) -> list[AABB]:
    return [AABB(i, j, i + 1, j + 1) for i in range(size) for j in range(size)]


def _brute_force(boxes: list[AABB], query: AABB) -> set[int]:
    return {i for i, box in enumerate(boxes) if box.intersects(query)}


class TestConstruction:
    """Tests for building an index."""

    def test_empty_index(self) -> None:
        """Test an empty index has NaN extents and no hits."""
        index = AabbIndex([])
        assert len(index) == 0
        assert index.extents().is_empty
        assert index.query(AABB(-1e9, -1e9, 1e9, 1e9)) == []

    def test_single_item(self) -> None:
        """Test a single leaf is its own root."""
        index = AabbIndex([AABB(1, 2, 3, 4)])
        assert index.extents() == AABB(1, 2, 3, 4)
        assert index.query(AABB(0, 0, 1, 2)) == [0]

    def test_invalid_node_size(self) -> None:
        """Test node sizes below two are rejected."""
        with pytest.raises(ValueError, match="node_size"):
            AabbIndex([AABB(0, 0, 1, 1)], node_size=1)

    def test_extents_cover_all_items(self) -> None:
        """Test the root box is the union of every leaf."""
        index = AabbIndex(_grid_boxes())
        assert index.item_count == 100
        assert index.extents() == AABB(0, 0, 10, 10)

    def test_item_box(self) -> None:
        """Test leaf boxes are reported under their input index."""
        boxes = _grid_boxes()
        index = AabbIndex(boxes)
        assert index.item_box(37) == boxes[37]
        with pytest.raises(IndexError):
            index.item_box(100)

    def test_repr(self) -> None:
        """Test the debug representation."""
        assert repr(AabbIndex(_grid_boxes(2), exact=False)) == "AabbIndex(items=4, exact=False)"


class TestQuery:
    """Tests for box queries."""

    def test_interior_query(self) -> None:
        """Test a query box overlapping four grid cells."""
        index = AabbIndex(_grid_boxes())
        assert sorted(index.query(AABB(2.5, 2.5, 3.5, 3.5))) == [22, 23, 32, 33]

    def test_touching_counts(self) -> None:
        """Test a degenerate query on a shared corner hits all four cells."""
        index = AabbIndex(_grid_boxes())
        assert sorted(index.query(AABB(3, 3, 3, 3))) == [22, 23, 32, 33]

    def test_miss(self) -> None:
        """Test a query outside the extents returns nothing."""
        index = AabbIndex(_grid_boxes())
        assert index.query(AABB(20, 20, 30, 30)) == []

    def test_iter_query_is_lazy(self) -> None:
        """Test the iterator yields the same items as query."""
        index = AabbIndex(_grid_boxes())
        query = AABB(0, 0, 1.5, 1.5)
        assert sorted(index.iter_query(query)) == sorted(index.query(query))

    @pytest.mark.parametrize("node_size", [2, 4, 16])
    def test_matches_brute_force(self, node_size: int) -> None:
        """Test random queries against a linear scan for several fan-outs."""
        rng = random.Random(1234)
        boxes = []
        for _ in range(300):
            x = rng.uniform(-100, 100)
            y = rng.uniform(-100, 100)
            boxes.append(AABB(x, y, x + rng.uniform(0, 10), y + rng.uniform(0, 10)))
        index = AabbIndex(boxes, node_size=node_size)

        for _ in range(50):
            x = rng.uniform(-110, 110)
            y = rng.uniform(-110, 110)
            query = AABB(x, y, x + rng.uniform(0, 40), y + rng.uniform(0, 40))
            assert set(index.query(query)) == _brute_force(boxes, query)


class TestFromPolyline:
    """Tests for indexes built from polylines."""

    def test_one_leaf_per_segment(self) -> None:
        """Test a closed square yields four leaves."""
        square = Polyline.from_points([(0, 0), (10, 0), (10, 10), (0, 10)], closed=True)
        index = square.create_aabb_index()
        assert index.item_count == 4
        assert index.query(AABB(4, -1, 6, 1)) == [0]

    def test_open_polyline_has_no_closing_leaf(self) -> None:
        """Test an open polyline indexes only its real segments."""
        pline = Polyline.from_points([(0, 0), (10, 0), (10, 10), (0, 10)])
        assert pline.create_aabb_index().item_count == 3

    def test_too_few_vertices(self) -> None:
        """Test a single vertex polyline gives an empty index."""
        assert Polyline([(1, 1)]).create_aabb_index().extents().is_empty

    def test_approx_index_contains_exact(self) -> None:
        """Test the approximate index is never smaller than the exact one."""
        pline = Polyline([(0, 0, 2.0), (2, 0), (2, 3, -0.4), (0, 3)], closed=True)
        exact = pline.create_aabb_index()
        approx = pline.create_approx_aabb_index()
        assert exact.exact and not approx.exact
        outer = approx.extents().expanded(1e-9)
        inner = exact.extents()
        assert outer.min_x <= inner.min_x and outer.min_y <= inner.min_y
        assert outer.max_x >= inner.max_x and outer.max_y >= inner.max_y

    def test_exact_index_of_arc(self) -> None:
        """Test exact leaf boxes include arc extremes."""
        pline = Polyline([(0, 0, 1.0), (2, 0)])
        assert pline.create_aabb_index().extents().almost_equal(AABB(0, -1, 2, 0))
