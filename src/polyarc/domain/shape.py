"""Multi-contour shape: polylines partitioned into islands and holes.

Key classes:
- Shape: CCW (island) and CW (hole) polylines with per-contour userdata
"""

from collections.abc import Iterable, Sequence
from typing import TYPE_CHECKING

from polyarc.domain.polyline import Polyline, _validate_userdata, require_polyline
from polyarc.domain.vertex import Vertex
from polyarc.exceptions import ContourIndexError, InvalidHandleError

if TYPE_CHECKING:
    from polyarc.config import ShapeOffsetOptions

CCW = "ccw"
CW = "cw"


def require_shape(value: object, argument: str = "shape") -> "Shape":
    """Return value if it is a Shape, otherwise raise InvalidHandleError."""
    if not isinstance(value, Shape):
        raise InvalidHandleError(argument, "Shape", value)
    return value


class Shape:
    """A classified collection of closed polylines.

    Counter-clockwise polylines are islands, clockwise polylines are holes.
    The shape owns copies of its member polylines; accessors either return
    copies (``get_*_polyline``) or read-only tuples of the owned polylines
    (``ccw_plines`` / ``cw_plines``), which callers must not mutate.

    Each contour carries a list of unsigned 64-bit userdata values. They are
    initialised from the polyline's own tag (``[tag]`` when non-zero) and
    survive shape offsets.

    Example:
        shape = Shape.from_plines([outer, hole])
        grown = shape.parallel_offset(1.0)
        print(grown.ccw_count, grown.cw_count)
    """

    def __init__(
        self,
        ccw_plines: Iterable[Polyline] = (),
        cw_plines: Iterable[Polyline] = (),
        ccw_userdata: Sequence[Sequence[int]] | None = None,
        cw_userdata: Sequence[Sequence[int]] | None = None,
    ) -> None:
        self._plines: dict[str, list[Polyline]] = {
            CCW: [require_polyline(p, "ccw_plines").clone() for p in ccw_plines],
            CW: [require_polyline(p, "cw_plines").clone() for p in cw_plines],
        }
        self._userdata: dict[str, list[list[int]]] = {
            CCW: self._initial_userdata(self._plines[CCW], ccw_userdata),
            CW: self._initial_userdata(self._plines[CW], cw_userdata),
        }

    @staticmethod
    def _initial_userdata(
        plines: list[Polyline], values: Sequence[Sequence[int]] | None
    ) -> list[list[int]]:
        if values is None:
            return [[p.userdata] if p.userdata else [] for p in plines]
        if len(values) != len(plines):
            raise ValueError(
                f"Expected {len(plines)} userdata entries, got {len(values)}"
            )
        return [[_validate_userdata(v) for v in entry] for entry in values]

    @classmethod
    def from_plines(cls, plines: Iterable[Polyline]) -> "Shape":
        """Classify polylines by signed area into islands and holes.

        Open and zero-area polylines are dropped.

        Args:
            plines: Closed polylines to classify

        Returns:
            New Shape owning copies of the polylines
        """
        ccw: list[Polyline] = []
        cw: list[Polyline] = []
        for pline in plines:
            if not require_polyline(pline, "plines").closed:
                continue
            area = pline.area()
            if area > 0.0:
                ccw.append(pline)
            elif area < 0.0:
                cw.append(pline)
        return cls(ccw, cw)

    def _group(self, group: str, index: int) -> Polyline:
        plines = self._plines[group]
        if not 0 <= index < len(plines):
            raise ContourIndexError(group.upper(), index, len(plines))
        return plines[index]

    @property
    def ccw_count(self) -> int:
        return len(self._plines[CCW])

    @property
    def cw_count(self) -> int:
        return len(self._plines[CW])

    @property
    def ccw_plines(self) -> tuple[Polyline, ...]:
        """Non-owning view of the island polylines."""
        return tuple(self._plines[CCW])

    @property
    def cw_plines(self) -> tuple[Polyline, ...]:
        """Non-owning view of the hole polylines."""
        return tuple(self._plines[CW])

    def get_ccw_polyline(self, index: int) -> Polyline:
        """Copy of island polyline at index."""
        return self._group(CCW, index).clone()

    def get_cw_polyline(self, index: int) -> Polyline:
        """Copy of hole polyline at index."""
        return self._group(CW, index).clone()

    def get_ccw_polyline_vertex_count(self, index: int) -> int:
        return self._group(CCW, index).vertex_count

    def get_cw_polyline_vertex_count(self, index: int) -> int:
        return self._group(CW, index).vertex_count

    def get_ccw_polyline_is_closed(self, index: int) -> bool:
        return self._group(CCW, index).closed

    def get_cw_polyline_is_closed(self, index: int) -> bool:
        return self._group(CW, index).closed

    def get_ccw_polyline_vertices(self, index: int) -> tuple[Vertex, ...]:
        return self._group(CCW, index).vertices

    def get_cw_polyline_vertices(self, index: int) -> tuple[Vertex, ...]:
        return self._group(CW, index).vertices

    def get_ccw_userdata(self, index: int) -> list[int]:
        """Copy of the userdata values of island contour index."""
        self._group(CCW, index)
        return list(self._userdata[CCW][index])

    def get_cw_userdata(self, index: int) -> list[int]:
        """Copy of the userdata values of hole contour index."""
        self._group(CW, index)
        return list(self._userdata[CW][index])

    def get_ccw_userdata_count(self, index: int) -> int:
        self._group(CCW, index)
        return len(self._userdata[CCW][index])

    def get_cw_userdata_count(self, index: int) -> int:
        self._group(CW, index)
        return len(self._userdata[CW][index])

    def set_ccw_userdata(self, index: int, values: Iterable[int]) -> None:
        """Replace the userdata values of island contour index.

        Raises:
            ContourIndexError: If index is out of range
            UserdataValueError: If a value is outside the unsigned 64-bit range
        """
        self._group(CCW, index)
        self._userdata[CCW][index] = [_validate_userdata(v) for v in values]

    def set_cw_userdata(self, index: int, values: Iterable[int]) -> None:
        """Replace the userdata values of hole contour index.

        Raises:
            ContourIndexError: If index is out of range
            UserdataValueError: If a value is outside the unsigned 64-bit range
        """
        self._group(CW, index)
        self._userdata[CW][index] = [_validate_userdata(v) for v in values]

    def contours(self) -> list[tuple[str, int, Polyline, list[int]]]:
        """All contours as (group, index, polyline, userdata) tuples."""
        return [
            (group, i, pline, self._userdata[group][i])
            for group in (CCW, CW)
            for i, pline in enumerate(self._plines[group])
        ]

    def area(self) -> float:
        """Net enclosed area (islands minus holes)."""
        return sum(p.area() for p in self._plines[CCW]) + sum(
            p.area() for p in self._plines[CW]
        )

    def parallel_offset(
        self, offset: float, options: "ShapeOffsetOptions | None" = None
    ) -> "Shape":
        """Offset every contour and re-classify the result.

        Args:
            offset: Signed offset distance (positive grows islands)
            options: Tolerances, defaults when None

        Returns:
            New Shape
        """
        from polyarc.core.shape_offset import shape_parallel_offset

        return shape_parallel_offset(self, offset, options)

    def __repr__(self) -> str:
        return f"Shape(ccw={self.ccw_count}, cw={self.cw_count})"
