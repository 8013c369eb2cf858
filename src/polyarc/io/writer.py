"""Polyline writer for JSON documents."""

from pathlib import Path

from polyarc.domain import Polyline, Shape
from polyarc.exceptions import OutputWriteError
from polyarc.io.reader import PolylineDocument, PolylineRecord


class PolylineWriter:
    """Collects polylines and saves them as a JSON document.

    Example:
        writer = PolylineWriter(Path("result.json"))
        writer.add_polylines(result.positive)
        writer.save()
    """

    def __init__(self, output_path: Path) -> None:
        """Initialize the writer.

        Args:
            output_path: Path where the document will be saved
        """
        self._output_path = output_path
        self._records: list[PolylineRecord] = []

    @property
    def record_count(self) -> int:
        return len(self._records)

    def add_polyline(self, pline: Polyline, group: str | None = None) -> None:
        """Queue one polyline for writing."""
        self._records.append(PolylineRecord.from_polyline(pline, group))

    def add_polylines(self, plines: list[Polyline], group: str | None = None) -> None:
        for pline in plines:
            self.add_polyline(pline, group)

    def add_shape(self, shape: Shape) -> None:
        """Queue every contour of a shape, tagged with its group.

        A contour's first userdata value becomes the record's userdata.
        """
        for group, _, pline, userdata in shape.contours():
            record = PolylineRecord.from_polyline(pline, group)
            if userdata:
                record.userdata = userdata[0]
            self._records.append(record)

    def save(self) -> None:
        """Write the queued polylines.

        Raises:
            OutputWriteError: If the file cannot be written
        """
        document = PolylineDocument(polylines=self._records)
        try:
            self._output_path.write_text(
                document.model_dump_json(indent=2, exclude_none=True), encoding="utf-8"
            )
        except OSError as e:
            raise OutputWriteError(str(self._output_path), str(e)) from e

    @staticmethod
    def get_result_path(input_path: Path, suffix: str) -> Path:
        """Derive an output path next to the input.

        Converts: shapes.json -> shapes-offset.json (suffix "offset")

        Args:
            input_path: Original document path
            suffix: Tag appended to the stem

        Returns:
            Path with -suffix before the extension
        """
        return input_path.parent / f"{input_path.stem}-{suffix}{input_path.suffix}"
