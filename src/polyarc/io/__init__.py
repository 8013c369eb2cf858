"""Polyline file I/O for polyarc.

This module reads and writes the JSON interchange format used by the command
line front end. Documents are validated with pydantic before any domain
object is built from them.

Document layout:
    {"polylines": [{"vertices": [[x, y, bulge], ...],
                    "closed": true, "userdata": 0}, ...]}

Key classes:
- PolylineReader: Load and validate polylines from a JSON file
- PolylineWriter: Save polylines (optionally grouped) to a JSON file
"""

from polyarc.io.reader import PolylineDocument, PolylineReader, PolylineRecord
from polyarc.io.writer import PolylineWriter

__all__ = [
    "PolylineDocument",
    "PolylineReader",
    "PolylineRecord",
    "PolylineWriter",
]
