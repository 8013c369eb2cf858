"""Tests for the command line interface."""

import json
import math
from pathlib import Path
from unittest.mock import Mock, patch

import pytest
from typer.testing import CliRunner

from polyarc import __version__
from polyarc.cli.app import app
from polyarc.config import BooleanOptions, KernelSettings, ShapeOffsetOptions
from polyarc.core import boolean
from polyarc.domain import Shape
from polyarc.io import PolylineReader

runner = CliRunner()

SQUARE = [[0, 0], [10, 0], [10, 10], [0, 10]]
HOLE = [[3, 3], [3, 7], [7, 7], [7, 3]]


def _write_document(path: Path, *polylines: dict) -> Path:
    path.write_text(json.dumps({"polylines": list(polylines)}), encoding="utf-8")
    return path


@pytest.fixture
def square_path(tmp_path: Path) -> Path:
    """Document holding a single 10x10 square."""
    return _write_document(tmp_path / "square.json", {"vertices": SQUARE, "closed": True})


@pytest.fixture
def shifted_path(tmp_path: Path) -> Path:
    """Document holding the square moved by (5, 5)."""
    shifted = [[x + 5, y + 5] for x, y in SQUARE]
    return _write_document(tmp_path / "shifted.json", {"vertices": shifted, "closed": True})


@pytest.fixture
def no_logging():
    """Keep batch runs from installing log handlers."""
    with patch("polyarc.core.processor.configure_logging", return_value=Mock()) as mock:
        yield mock


class TestVersion:
    """Tests for the version flag."""

    def test_version(self) -> None:
        """Test --version prints the version and exits cleanly."""
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert f"Polyarc v{__version__}" in result.output


class TestInfo:
    """Tests for the info command."""

    def test_summarizes(self, tmp_path: Path) -> None:
        """Test the polyline count is reported."""
        path = _write_document(
            tmp_path / "two.json",
            {"vertices": SQUARE, "closed": True},
            {"vertices": [[0, 0], [5, 0]]},
        )
        result = runner.invoke(app, ["info", str(path)])
        assert result.exit_code == 0
        assert "2 polylines" in result.output

    def test_missing_file(self, tmp_path: Path) -> None:
        """Test a missing input exits with an error."""
        result = runner.invoke(app, ["info", str(tmp_path / "missing.json")])
        assert result.exit_code == 1
        assert "Input file not found" in result.output

    def test_directory_input(self, tmp_path: Path) -> None:
        """Test a directory is not accepted as input."""
        result = runner.invoke(app, ["info", str(tmp_path)])
        assert result.exit_code == 1
        assert "Input path is not a file" in result.output

    def test_invalid_document(self, tmp_path: Path) -> None:
        """Test malformed documents are reported."""
        path = tmp_path / "broken.json"
        path.write_text("[1, 2", encoding="utf-8")
        result = runner.invoke(app, ["info", str(path)])
        assert result.exit_code == 1
        assert "Could not read polylines" in result.output


class TestBooleanCommand:
    """Tests for the boolean command."""

    def test_intersection(self, square_path: Path, shifted_path: Path, tmp_path: Path) -> None:
        """Test intersecting two squares writes their overlap."""
        output = tmp_path / "and.json"
        result = runner.invoke(
            app, ["boolean", str(square_path), str(shifted_path), "--op", "and", "-o", str(output)]
        )
        assert result.exit_code == 0
        assert "Saved" in result.output

        reader = PolylineReader(output)
        reader.load()
        (overlap,) = reader.polylines()
        assert overlap.area() == pytest.approx(25.0)

    def test_union_quiet(self, square_path: Path, shifted_path: Path, tmp_path: Path) -> None:
        """Test quiet mode prints nothing on success."""
        output = tmp_path / "or.json"
        result = runner.invoke(
            app, ["boolean", str(square_path), str(shifted_path), "-o", str(output), "-q"]
        )
        assert result.exit_code == 0
        assert result.output.strip() == ""
        data = json.loads(output.read_text(encoding="utf-8"))
        assert len(data["polylines"]) == 1
        assert data["polylines"][0]["group"] == "ccw"

    def test_unknown_operation(self, square_path: Path, shifted_path: Path) -> None:
        """Test an unknown operation name is reported."""
        result = runner.invoke(
            app, ["boolean", str(square_path), str(shifted_path), "--op", "bogus"]
        )
        assert result.exit_code == 1
        assert "Error" in result.output

    def test_empty_operand_document(self, square_path: Path, tmp_path: Path) -> None:
        """Test a document without polylines cannot be an operand."""
        empty = _write_document(tmp_path / "empty.json")
        result = runner.invoke(app, ["boolean", str(square_path), str(empty)])
        assert result.exit_code == 1
        assert "No polylines" in result.output

    def test_uses_boolean_settings(self, square_path: Path, shifted_path: Path) -> None:
        """Test the configured boolean options reach the operation."""
        settings = KernelSettings(boolean=BooleanOptions(pos_equal_eps=1e-6))
        with (
            patch("polyarc.cli.app.get_default_settings", return_value=settings),
            patch("polyarc.cli.app.boolean", wraps=boolean) as mock_boolean,
        ):
            result = runner.invoke(
                app, ["boolean", str(square_path), str(shifted_path), "--op", "and", "-q"]
            )
        assert result.exit_code == 0
        assert mock_boolean.call_args.args[3] is settings.boolean


class TestOffsetCommand:
    """Tests for the offset command."""

    def test_default_output_path(self, square_path: Path, no_logging: Mock) -> None:
        """Test results land next to the input by default."""
        result = runner.invoke(app, ["offset", str(square_path), "-d", "1.0", "-j", "1"])
        assert result.exit_code == 0
        assert "Complete" in result.output

        reader = PolylineReader(square_path.with_name("square-offset.json"))
        reader.load()
        (grown,) = reader.polylines()
        assert grown.area() == pytest.approx(140.0 + math.pi)
        no_logging.assert_called_once()

    def test_negative_distance(
        self, square_path: Path, tmp_path: Path, no_logging: Mock
    ) -> None:
        """Test a negative distance shrinks the input."""
        output = tmp_path / "shrunk.json"
        result = runner.invoke(
            app,
            ["offset", str(square_path), "--distance=-1.0", "-j", "1", "-o", str(output), "-q"],
        )
        assert result.exit_code == 0

        reader = PolylineReader(output)
        reader.load()
        (shrunk,) = reader.polylines()
        assert shrunk.area() == pytest.approx(64.0)

    def test_empty_document(self, tmp_path: Path, no_logging: Mock) -> None:
        """Test an empty document is a no-op."""
        path = _write_document(tmp_path / "empty.json")
        result = runner.invoke(app, ["offset", str(path), "-d", "1.0"])
        assert result.exit_code == 0
        assert "No polylines found" in result.output
        assert not (tmp_path / "empty-offset.json").exists()

    def test_distance_required(self, square_path: Path) -> None:
        """Test the distance option is mandatory."""
        result = runner.invoke(app, ["offset", str(square_path)])
        assert result.exit_code != 0


class TestShapeOffsetCommand:
    """Tests for the shape-offset command."""

    def test_islands_and_holes(self, tmp_path: Path) -> None:
        """Test a framed square is written back as one island and one hole."""
        path = _write_document(
            tmp_path / "frame.json",
            {"vertices": SQUARE, "closed": True, "userdata": 1},
            {"vertices": HOLE, "closed": True, "userdata": 2},
        )
        result = runner.invoke(app, ["shape-offset", str(path), "-d", "1.0"])
        assert result.exit_code == 0
        assert "1 islands" in result.output

        data = json.loads((tmp_path / "frame-shape-offset.json").read_text(encoding="utf-8"))
        groups = [(record["group"], record["userdata"]) for record in data["polylines"]]
        assert groups == [("ccw", 1), ("cw", 2)]

    def test_uses_shape_offset_settings(self, tmp_path: Path) -> None:
        """Test the configured shape offset options reach the offset."""
        path = _write_document(tmp_path / "square.json", {"vertices": SQUARE, "closed": True})
        settings = KernelSettings(shape_offset=ShapeOffsetOptions(offset_dist_eps=1e-5))
        with (
            patch("polyarc.cli.app.get_default_settings", return_value=settings),
            patch.object(
                Shape, "parallel_offset", autospec=True, side_effect=Shape.parallel_offset
            ) as mock_offset,
        ):
            result = runner.invoke(app, ["shape-offset", str(path), "-d", "1.0", "-q"])
        assert result.exit_code == 0
        assert mock_offset.call_args.args[1:] == (1.0, settings.shape_offset)

    def test_open_polylines_ignored(self, tmp_path: Path) -> None:
        """Test open polylines in the document do not become islands or holes."""
        path = _write_document(
            tmp_path / "mixed.json",
            {"vertices": SQUARE, "closed": True},
            {"vertices": [[20, 0], [30, 0], [30, 10]], "closed": False},
        )
        result = runner.invoke(app, ["shape-offset", str(path), "-d", "1.0"])
        assert result.exit_code == 0
        assert "1 islands" in result.output
        assert "0 holes" in result.output


class TestSelfIntersectsCommand:
    """Tests for the self-intersects command."""

    def test_reports_crossings(self, tmp_path: Path) -> None:
        """Test a bow tie reports a single crossing."""
        path = _write_document(
            tmp_path / "bowtie.json",
            {"vertices": [[0, 0], [10, 10], [10, 0], [0, 10]], "closed": True},
            {"vertices": SQUARE, "closed": True},
        )
        result = runner.invoke(app, ["self-intersects", str(path), "-v"])
        assert result.exit_code == 0
        assert "(5, 5)" in result.output
        assert "1 total" in result.output
