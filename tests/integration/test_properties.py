"""Integration tests for relationships that hold across operations."""

import math
import random
from pathlib import Path

import pytest

from polyarc.core import BooleanOp, boolean, parallel_offset, shape_parallel_offset
from polyarc.domain import AABB, AabbIndex, Polyline, Shape
from polyarc.domain.segment import seg_bounding_box
from polyarc.io import PolylineReader, PolylineWriter


def _square(x0: float, y0: float, size: float) -> Polyline:
    return Polyline(
        [(x0, y0), (x0 + size, y0), (x0 + size, y0 + size), (x0, y0 + size)],
        closed=True,
    )


def _circle(cx: float, cy: float, r: float) -> Polyline:
    return Polyline([(cx - r, cy, 1.0), (cx + r, cy, 1.0)], closed=True)


# Radius 3 circle centered one unit left of the square's right edge
CIRCLE_SEGMENT_AREA = 9.0 * math.acos(1.0 / 3.0) - math.sqrt(8.0)
CROSSING_AND_AREA = 9.0 * math.pi - CIRCLE_SEGMENT_AREA

OPERAND_PAIRS = {
    "shifted squares": (_square(0, 0, 10), _square(5, 5, 10)),
    "square and circle": (_square(0, 0, 10), _circle(9, 4, 3)),
    "nested circle": (_square(0, 0, 10), _circle(5, 5, 2)),
    "crossing circles": (_circle(0, 0, 2), _circle(2, 1, 2)),
}


@pytest.fixture(params=list(OPERAND_PAIRS), ids=list(OPERAND_PAIRS))
def operands(request) -> tuple[Polyline, Polyline]:
    """Pairs of closed counter-clockwise operands."""
    first, second = OPERAND_PAIRS[request.param]
    return first.clone(), second.clone()


class TestBooleanAreaIdentities:
    """Area relationships between the four boolean operations."""

    def test_union(self, operands: tuple[Polyline, Polyline]) -> None:
        """Test area(A or B) = area(A) + area(B) - area(A and B)."""
        a, b = operands
        union = boolean(a, b, BooleanOp.OR).area
        both = boolean(a, b, BooleanOp.AND).area
        assert union == pytest.approx(a.area() + b.area() - both, abs=1e-6)

    def test_difference(self, operands: tuple[Polyline, Polyline]) -> None:
        """Test area(A not B) = area(A) - area(A and B)."""
        a, b = operands
        difference = boolean(a, b, BooleanOp.NOT).area
        both = boolean(a, b, BooleanOp.AND).area
        assert difference == pytest.approx(a.area() - both, abs=1e-6)

    def test_exclusive_or(self, operands: tuple[Polyline, Polyline]) -> None:
        """Test area(A xor B) = area(A or B) - area(A and B)."""
        a, b = operands
        exclusive = boolean(a, b, BooleanOp.XOR).area
        union = boolean(a, b, BooleanOp.OR).area
        both = boolean(a, b, BooleanOp.AND).area
        assert exclusive == pytest.approx(union - both, abs=1e-6)

    @pytest.mark.parametrize("op", [BooleanOp.OR, BooleanOp.AND, BooleanOp.XOR])
    def test_symmetric_operations(
        self, operands: tuple[Polyline, Polyline], op: BooleanOp
    ) -> None:
        """Test symmetric operations give the same area in either order."""
        a, b = operands
        assert boolean(a, b, op).area == pytest.approx(boolean(b, a, op).area, abs=1e-6)

    def test_operands_untouched(self, operands: tuple[Polyline, Polyline]) -> None:
        """Test no operation modifies its inputs."""
        a, b = operands
        before = (a.clone(), b.clone())
        for op in BooleanOp:
            boolean(a, b, op)
        assert (a, b) == before

    def test_square_and_circle_overlap(self) -> None:
        """Test the overlap of a square and a circle crossing one edge."""
        result = boolean(_square(0, 0, 10), _circle(9, 4, 3), BooleanOp.AND)
        assert len(result.positive) == 1
        assert result.area == pytest.approx(CROSSING_AND_AREA, abs=1e-6)


class TestOffsetProperties:
    """Offset relationships for convex outlines."""

    @pytest.mark.parametrize("distance", [0.25, 1.0, 3.0])
    def test_grown_square_area(self, distance: float) -> None:
        """Test a grown square gains a border strip and rounded corners."""
        (grown,) = parallel_offset(_square(0, 0, 10), distance)
        expected = 100.0 + 40.0 * distance + math.pi * distance**2
        assert grown.area() == pytest.approx(expected)

    @pytest.mark.parametrize("distance", [0.25, 1.0, 3.0, 4.5])
    def test_shrunk_square_area(self, distance: float) -> None:
        """Test a shrunk square stays square."""
        (shrunk,) = parallel_offset(_square(0, 0, 10), -distance)
        assert shrunk.area() == pytest.approx((10.0 - 2.0 * distance) ** 2)

    def test_circle_round_trip(self) -> None:
        """Test growing then shrinking a circle restores its area."""
        (grown,) = parallel_offset(_circle(0, 0, 1), 1.0)
        assert grown.area() == pytest.approx(4.0 * math.pi)
        (restored,) = parallel_offset(grown, -1.0)
        assert restored.area() == pytest.approx(math.pi)

    def test_direction_flips_offset_side(self) -> None:
        """Test inverting a polyline moves its offset to the other side."""
        square = _square(0, 0, 10)
        inverted = square.clone()
        inverted.invert_direction()
        (outward,) = parallel_offset(square, 1.0)
        (flipped,) = parallel_offset(inverted, -1.0)
        assert flipped.area() == pytest.approx(-outward.area())

    def test_shape_matches_single_polyline(self) -> None:
        """Test a one-island shape offsets like its polyline."""
        square = _square(0, 0, 10)
        result = shape_parallel_offset(Shape.from_plines([square]), 2.0)
        (single,) = parallel_offset(square, 2.0)
        assert result.ccw_count == 1
        assert result.area() == pytest.approx(single.area())


class TestPolylineProperties:
    """Relationships between polyline queries."""

    def test_invert_is_involution(self) -> None:
        """Test inverting twice restores the original vertices."""
        pline = Polyline([(0, 0, 0.3), (10, 0), (10, 5, -0.6), (4, 8)], closed=True)
        twice = pline.clone()
        twice.invert_direction()
        assert twice.area() == pytest.approx(-pline.area())
        assert twice.path_length() == pytest.approx(pline.path_length())
        twice.invert_direction()
        assert twice == pline

    def test_winding_sign_follows_direction(self) -> None:
        """Test an interior point winds once, with the polyline's direction."""
        circle = _circle(0, 0, 5)
        assert circle.winding_number(1.0, 1.0) == 1
        circle.invert_direction()
        assert circle.winding_number(1.0, 1.0) == -1

    @pytest.mark.parametrize("node_size", [2, 8, 16])
    def test_index_matches_brute_force(self, node_size: int) -> None:
        """Test index queries agree with testing every segment box."""
        rng = random.Random(99)
        points = [(rng.uniform(0, 100), rng.uniform(0, 100), rng.uniform(-1, 1)) for _ in range(60)]
        pline = Polyline(points, closed=True)
        boxes = [seg_bounding_box(v1, v2) for v1, v2 in pline.segments()]
        index = AabbIndex(boxes, node_size=node_size)

        for _ in range(25):
            x, y = rng.uniform(0, 100), rng.uniform(0, 100)
            query = AABB(x, y, x + rng.uniform(0, 20), y + rng.uniform(0, 20))
            expected = sorted(i for i, box in enumerate(boxes) if box.intersects(query))
            assert sorted(index.query(query)) == expected


class TestDocumentRoundTrip:
    """Results written to a document read back unchanged."""

    def test_boolean_result(self, tmp_path: Path) -> None:
        """Test a boolean result with a hole survives a save and load."""
        result = boolean(_square(0, 0, 10), _circle(5, 5, 2), BooleanOp.NOT)
        path = tmp_path / "difference.json"
        writer = PolylineWriter(path)
        writer.add_polylines(result.positive, group="ccw")
        writer.add_polylines(result.negative, group="cw")
        writer.save()

        reader = PolylineReader(path)
        reader.load()
        loaded = reader.polylines()
        assert loaded == result.positive + result.negative
        assert sum(p.area() for p in loaded) == pytest.approx(100.0 - 4.0 * math.pi)

    def test_offset_shape(self, tmp_path: Path) -> None:
        """Test a shape offset survives a save and load."""
        hole = _square(3, 3, 4)
        hole.invert_direction()
        result = shape_parallel_offset(Shape.from_plines([_square(0, 0, 10), hole]), 1.0)
        path = tmp_path / "shape.json"
        writer = PolylineWriter(path)
        writer.add_shape(result)
        writer.save()

        reader = PolylineReader(path)
        reader.load()
        reloaded = Shape.from_plines(reader.polylines())
        assert reloaded.ccw_count == result.ccw_count
        assert reloaded.cw_count == result.cw_count
        assert reloaded.area() == pytest.approx(result.area())
