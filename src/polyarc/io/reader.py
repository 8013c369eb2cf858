"""Polyline reader for JSON documents.

This module provides the PolylineReader class and the pydantic models that
validate polyline documents before they are turned into domain objects.
"""

from collections.abc import Iterator
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, ValidationError, field_validator

from polyarc.domain import Polyline
from polyarc.domain.polyline import USERDATA_MAX
from polyarc.exceptions import InputFormatError


class PolylineRecord(BaseModel):
    """One polyline in a document.

    Vertices are ``[x, y]`` or ``[x, y, bulge]`` lists.
    """

    vertices: list[list[float]] = Field(default_factory=list)
    closed: bool = False
    userdata: int = Field(default=0, ge=0, le=USERDATA_MAX)
    group: Literal["ccw", "cw"] | None = Field(
        default=None,
        description="Shape group the polyline was written from (informational)",
    )

    @field_validator("vertices")
    @classmethod
    def _check_vertex_arity(cls, vertices: list[list[float]]) -> list[list[float]]:
        for i, vertex in enumerate(vertices):
            if len(vertex) not in (2, 3):
                raise ValueError(f"vertex {i} must have 2 or 3 values, got {len(vertex)}")
        return vertices

    def to_polyline(self) -> Polyline:
        """Build the domain polyline."""
        return Polyline(vertices=self.vertices, closed=self.closed, userdata=self.userdata)

    @classmethod
    def from_polyline(cls, pline: Polyline, group: str | None = None) -> "PolylineRecord":
        """Build a record from a domain polyline."""
        return cls(
            vertices=[list(v.to_tuple()) for v in pline.vertices],
            closed=pline.closed,
            userdata=pline.userdata,
            group=group,
        )


class PolylineDocument(BaseModel):
    """Top level of a polyline JSON document."""

    polylines: list[PolylineRecord] = Field(default_factory=list)


class PolylineReader:
    """Loads polylines from a JSON document.

    Example:
        reader = PolylineReader(Path("shapes.json"))
        reader.load()
        for pline in reader.iter_polylines():
            print(pline.area())
    """

    def __init__(self, path: Path) -> None:
        """Initialize the reader.

        Args:
            path: Path to the JSON document
        """
        self._path = path
        self._document: PolylineDocument | None = None

    def load(self) -> None:
        """Read and validate the document.

        Raises:
            FileNotFoundError: If the file does not exist
            InputFormatError: If the file is not a valid polyline document
        """
        if not self._path.exists():
            raise FileNotFoundError(f"Polyline file not found: {self._path}")

        try:
            text = self._path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise InputFormatError(str(self._path), str(e)) from e

        try:
            self._document = PolylineDocument.model_validate_json(text)
        except ValidationError as e:
            raise InputFormatError(str(self._path), _first_error(e)) from e

    @property
    def path(self) -> Path:
        return self._path

    @property
    def polyline_count(self) -> int:
        """Number of polylines in the loaded document.

        Raises:
            RuntimeError: If the document has not been loaded yet
        """
        return len(self._require_document().polylines)

    def iter_polylines(self) -> Iterator[Polyline]:
        """Iterate over the document's polylines as domain objects.

        Raises:
            RuntimeError: If the document has not been loaded yet
        """
        for record in self._require_document().polylines:
            yield record.to_polyline()

    def polylines(self) -> list[Polyline]:
        """All polylines in document order."""
        return list(self.iter_polylines())

    def _require_document(self) -> PolylineDocument:
        if self._document is None:
            raise RuntimeError("Document not loaded. Call load() first.")
        return self._document


def _first_error(error: ValidationError) -> str:
    """Condense a pydantic validation error to one readable line."""
    details = error.errors()
    if not details:
        return str(error)
    first = details[0]
    location = ".".join(str(part) for part in first.get("loc", ()))
    message = first.get("msg", "invalid value")
    suffix = f" (and {len(details) - 1} more)" if len(details) > 1 else ""
    return f"{location}: {message}{suffix}" if location else f"{message}{suffix}"
