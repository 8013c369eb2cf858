"""Polyarc - 2D polyline geometry kernel for line and arc segments.

Polyarc operates on polylines whose segments are straight lines or circular
arcs (bulge encoded). It provides boolean set operations, parallel offsets,
self-intersection scans and a packed AABB spatial index to accelerate them.

Example:
    >>> from polyarc.domain import Polyline
    >>> from polyarc.core import BooleanOp, boolean
    >>> a = Polyline.from_points([(0, 0), (10, 0), (10, 10), (0, 10)], closed=True)
    >>> b = a.clone()
    >>> b.translate(5, 5)
    >>> result = boolean(a, b, BooleanOp.AND)
    >>> round(result.positive[0].area(), 6)
    25.0
"""

__version__ = "0.1.0"
__author__ = "Dimosthenis Kaponis"

__all__ = ["__author__", "__version__"]
