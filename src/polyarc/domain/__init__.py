"""Domain models for polyarc.

This module contains the value types of the geometry kernel. All models are
designed to be:

- Immutable where possible (frozen dataclasses for points and vertices)
- Serializable for inter-process communication (batch processing)
- Independent of the algorithms that consume them

Key classes:
- Point: A 2D position
- Vertex: A polyline vertex carrying the bulge of its outgoing segment
- AABB: Axis-aligned bounding box
- Polyline: Line/arc polyline with closed flag and userdata tag
- AabbIndex: Packed spatial index over polyline segments
- Shape: Polylines partitioned into islands (CCW) and holes (CW)
"""

from polyarc.domain.polyline import Orientation, Polyline, require_polyline
from polyarc.domain.shape import Shape, require_shape
from polyarc.domain.spatial_index import AabbIndex
from polyarc.domain.vertex import AABB, Point, Vertex

__all__: list[str] = [
    # Enums
    "Orientation",
    # Core types
    "Point",
    "Vertex",
    "AABB",
    "Polyline",
    "AabbIndex",
    "Shape",
    # Guards
    "require_polyline",
    "require_shape",
]
