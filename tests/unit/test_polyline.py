"""Unit tests for polyline geometric queries and transformations."""

import math

import pytest

from polyarc.domain import AABB, Point, Polyline, Vertex
from polyarc.exceptions import InsufficientVerticesError

QUARTER_BULGE = math.tan(math.pi / 8.0)


@pytest.fixture
def square() -> Polyline:
    """Counter-clockwise 10x10 square."""
    return Polyline.from_points([(0, 0), (10, 0), (10, 10), (0, 10)], closed=True)


@pytest.fixture
def circle() -> Polyline:
    """Unit circle centered at (1, 0) built from two half arcs."""
    return Polyline([(0, 0, 1.0), (2, 0, 1.0)], closed=True)


class TestArea:
    """Tests for signed area."""

    def test_square_area(self, square: Polyline) -> None:
        """Test a CCW square has positive area."""
        assert square.area() == pytest.approx(100.0)

    def test_inverted_square_area(self, square: Polyline) -> None:
        """Test reversing direction flips the sign."""
        square.invert_direction()
        assert square.area() == pytest.approx(-100.0)

    def test_circle_area(self, circle: Polyline) -> None:
        """Test two half arcs enclose a full unit circle."""
        assert circle.area() == pytest.approx(math.pi)

    def test_mixed_line_arc_area(self) -> None:
        """Test a square with one edge bulged outward by a half circle."""
        # bottom edge bulges down (right of travel) by a half circle of radius 5
        pline = Polyline([(0, 0, 1.0), (10, 0), (10, 10), (0, 10)], closed=True)
        assert pline.area() == pytest.approx(100.0 + math.pi * 25.0 / 2.0)

    def test_too_few_vertices(self) -> None:
        """Test empty and single vertex polylines have zero area."""
        assert Polyline().area() == 0.0
        assert Polyline([(1, 1)], closed=True).area() == 0.0


class TestPathLength:
    """Tests for path length."""

    def test_open_and_closed(self) -> None:
        """Test the closing segment only counts when closed."""
        pline = Polyline.from_points([(0, 0), (10, 0), (10, 10)])
        assert pline.path_length() == pytest.approx(20.0)
        pline.closed = True
        assert pline.path_length() == pytest.approx(20.0 + math.sqrt(200.0))

    def test_circle_length(self, circle: Polyline) -> None:
        """Test the circumference of a unit circle."""
        assert circle.path_length() == pytest.approx(2.0 * math.pi)


class TestWindingNumber:
    """Tests for winding number and containment."""

    def test_inside_and_outside_square(self, square: Polyline) -> None:
        """Test points inside wind once, points outside not at all."""
        assert square.winding_number(5, 5) == 1
        assert square.winding_number(15, 5) == 0
        assert square.winding_number(-1, -1) == 0

    def test_clockwise_square(self, square: Polyline) -> None:
        """Test a CW polyline winds negatively."""
        square.invert_direction()
        assert square.winding_number(5, 5) == -1

    def test_circle_arc_regions(self, circle: Polyline) -> None:
        """Test points inside the arc bulges are counted."""
        assert circle.winding_number(1.0, 0.5) == 1
        assert circle.winding_number(1.0, -0.5) == 1
        assert circle.winding_number(3.0, 0.0) == 0
        assert circle.winding_number(1.0, 1.5) == 0

    def test_circle_center(self, circle: Polyline) -> None:
        """Test the center of a two arc circle, which lies on both chords."""
        assert circle.winding_number(1.0, 0.0) == 1
        circle.invert_direction()
        assert circle.winding_number(1.0, 0.0) == -1

    def test_point_on_chord_of_outward_arc(self) -> None:
        """Test a point on the chord of an edge bulging outward is inside."""
        pline = Polyline([(0, 0), (10, 0, 1.0), (10, 10), (0, 10)], closed=True)
        assert pline.winding_number(10, 5) == 1
        assert pline.winding_number(14, 5) == 1
        assert pline.winding_number(16, 5) == 0

    def test_point_on_chord_of_inward_arc(self) -> None:
        """Test a point on the chord of an edge bulging inward is outside."""
        pline = Polyline([(0, 0), (10, 0, -1.0), (10, 10), (0, 10)], closed=True)
        assert pline.winding_number(10, 5) == 0
        assert pline.winding_number(7, 5) == 0
        assert pline.winding_number(4, 5) == 1

    def test_open_polyline_is_zero(self) -> None:
        """Test open polylines never wind."""
        pline = Polyline.from_points([(0, 0), (10, 0), (10, 10), (0, 10)])
        assert pline.winding_number(5, 5) == 0

    def test_contains_boundary_point(self, square: Polyline) -> None:
        """Test boundary points count as contained."""
        assert square.contains_point(10, 5)
        assert square.contains_point(5, 5)
        assert not square.contains_point(20, 20)


class TestClosestPointAndExtents:
    """Tests for closest point and extents."""

    def test_closest_point_on_edge(self, square: Polyline) -> None:
        """Test projection onto the nearest edge."""
        point, dist, seg_index = square.closest_point(5, -3)
        assert point == Point(5, 0)
        assert dist == pytest.approx(3.0)
        assert seg_index == 0

        point, dist, seg_index = square.closest_point(12, 5)
        assert point == Point(10, 5)
        assert dist == pytest.approx(2.0)
        assert seg_index == 1

    def test_closest_point_single_vertex(self) -> None:
        """Test a single vertex polyline reports that vertex."""
        point, dist, seg_index = Polyline([(3, 4)]).closest_point(0, 0)
        assert point == Point(3, 4)
        assert dist == pytest.approx(5.0)
        assert seg_index == 0

    def test_closest_point_empty_raises(self) -> None:
        """Test closest point on an empty polyline is an error."""
        with pytest.raises(InsufficientVerticesError):
            Polyline().closest_point(0, 0)

    def test_square_extents(self, square: Polyline) -> None:
        """Test extents of a straight polyline."""
        assert square.extents().to_tuple() == (0, 0, 10, 10)

    def test_circle_extents(self, circle: Polyline) -> None:
        """Test extents include the arc extremes."""
        assert circle.extents().almost_equal(AABB(0, -1, 2, 1))

    def test_extents_need_two_vertices(self) -> None:
        """Test extents of a single vertex raise."""
        with pytest.raises(InsufficientVerticesError):
            Polyline([(1, 1)]).extents()


class TestInvertDirection:
    """Tests for direction inversion."""

    def test_bulges_shift_and_flip(self) -> None:
        """Test each bulge moves to the new predecessor and changes sign."""
        pline = Polyline([(0, 0, 0.5), (2, 0, 0.0), (1, 2, -0.3)], closed=True)
        pline.invert_direction()
        assert [v.pos for v in pline] == [Point(1, 2), Point(2, 0), Point(0, 0)]
        assert [v.bulge for v in pline] == [0.0, -0.5, 0.3]

    def test_involution(self) -> None:
        """Test inverting twice restores the original."""
        original = Polyline([(0, 0, 0.5), (2, 0, 0.0), (1, 2, -0.3)], closed=True, userdata=9)
        pline = original.clone()
        pline.invert_direction()
        pline.invert_direction()
        assert pline == original

    def test_open_polyline_path_preserved(self) -> None:
        """Test an open arc polyline traces the same path backwards."""
        pline = Polyline([(0, 0, 1.0), (2, 0), (2, 5)])
        length = pline.path_length()
        pline.invert_direction()
        assert pline[0].pos == Point(2, 5)
        assert pline.path_length() == pytest.approx(length)
        assert pline.extents().almost_equal(AABB(0, -1, 2, 5))


class TestTransforms:
    """Tests for scale and translate."""

    def test_scale(self, square: Polyline) -> None:
        """Test scaling multiplies area by the square of the factor."""
        square.scale(2.0)
        assert square.area() == pytest.approx(400.0)

    def test_scale_keeps_bulges(self, circle: Polyline) -> None:
        """Test scaling an arc polyline keeps it circular."""
        circle.scale(3.0)
        assert [v.bulge for v in circle] == [1.0, 1.0]
        assert circle.area() == pytest.approx(9.0 * math.pi)

    def test_translate(self, square: Polyline) -> None:
        """Test translation moves extents and keeps area."""
        square.translate(5, -5)
        assert square.extents().to_tuple() == (5, -5, 15, 5)
        assert square.area() == pytest.approx(100.0)


class TestCleanup:
    """Tests for repeat and redundant vertex removal."""

    def test_remove_repeat_positions_keeps_first(self) -> None:
        """Test the first vertex of a coincident run survives with its bulge."""
        pline = Polyline([(0, 0, 0.5), (0, 0, 0.2), (5, 0), (5, 5)])
        pline.remove_repeat_positions()
        assert pline.vertices == (Vertex(0, 0, 0.5), Vertex(5, 0), Vertex(5, 5))

    def test_remove_repeat_closing_vertex(self) -> None:
        """Test a closed polyline drops a last vertex equal to the first."""
        pline = Polyline([(0, 0), (10, 0), (10, 10), (0, 1e-7)], closed=True)
        pline.remove_repeat_positions()
        assert pline.vertex_count == 3

    def test_remove_redundant_collinear(self) -> None:
        """Test collinear middle vertices are dropped."""
        pline = Polyline.from_points([(0, 0), (5, 0), (10, 0), (10, 10)])
        pline.remove_redundant()
        assert [v.pos for v in pline] == [Point(0, 0), Point(10, 0), Point(10, 10)]

    def test_remove_redundant_closed_square(self) -> None:
        """Test midpoints on every edge, including the closing one, are removed."""
        pline = Polyline.from_points(
            [(0, 0), (5, 0), (10, 0), (10, 5), (10, 10), (5, 10), (0, 10), (0, 5)],
            closed=True,
        )
        pline.remove_redundant()
        assert pline.vertex_count == 4
        assert pline.area() == pytest.approx(100.0)

    def test_remove_redundant_keeps_reversal(self) -> None:
        """Test a path that doubles back is not merged."""
        pline = Polyline.from_points([(0, 0), (10, 0), (5, 0)])
        pline.remove_redundant()
        assert pline.vertex_count == 3

    def test_remove_redundant_merges_arcs(self) -> None:
        """Test four quarter arcs collapse into two half circles."""
        pline = Polyline(
            [
                (1, 0, QUARTER_BULGE),
                (0, 1, QUARTER_BULGE),
                (-1, 0, QUARTER_BULGE),
                (0, -1, QUARTER_BULGE),
            ],
            closed=True,
        )
        pline.remove_redundant()
        assert pline.vertex_count == 2
        assert [v.bulge for v in pline] == pytest.approx([1.0, 1.0])
        assert pline.area() == pytest.approx(math.pi)

    def test_remove_redundant_zero_length_segment(self) -> None:
        """Test duplicate positions are collapsed first."""
        pline = Polyline.from_points([(0, 0), (0, 0), (10, 0), (10, 10)])
        pline.remove_redundant()
        assert pline.vertex_count == 3


class TestSelfIntersects:
    """Tests for the self-intersection shortcut."""

    def test_square_is_simple(self, square: Polyline) -> None:
        """Test a square has no self-intersections."""
        assert not square.has_self_intersects()

    def test_figure_eight(self) -> None:
        """Test a bow tie crosses itself."""
        pline = Polyline.from_points([(0, 0), (10, 10), (10, 0), (0, 10)], closed=True)
        assert pline.has_self_intersects()
