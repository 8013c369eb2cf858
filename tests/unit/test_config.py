"""Tests for configuration models."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from polyarc.config import (
    BooleanOptions,
    KernelSettings,
    LoggingConfig,
    OffsetOptions,
    SelfIntersectOptions,
    ShapeOffsetOptions,
    get_default_settings,
)
from polyarc.domain import Polyline


class TestOptionDefaults:
    """Tests for default option values."""

    def test_boolean_defaults(self) -> None:
        """Test boolean options default to building their own index."""
        options = BooleanOptions()
        assert options.pline1_aabb_index is None
        assert options.pos_equal_eps == 1e-5
        assert options.collapsed_area_eps == 1e-5

    def test_offset_defaults(self) -> None:
        """Test offsets trim self-intersections by default."""
        options = OffsetOptions()
        assert options.aabb_index is None
        assert options.handle_self_intersects is True
        assert options.pos_equal_eps == 1e-5
        assert options.slice_join_eps == 1e-5
        assert options.offset_dist_eps == 1e-5

    def test_shape_offset_defaults(self) -> None:
        """Test shape offset tolerances."""
        options = ShapeOffsetOptions()
        assert options.pos_equal_eps == 1e-5
        assert options.offset_dist_eps == 1e-5

    def test_kernel_settings(self) -> None:
        """Test the nested settings tree."""
        settings = get_default_settings()
        assert isinstance(settings, KernelSettings)
        assert settings.processing.max_workers is None
        assert settings.logging.log_file is None
        assert settings.logging.log_level == "WARNING"
        assert settings.logging.file_log_level == "DEBUG"


class TestOptionValidation:
    """Tests for option validation."""

    @pytest.mark.parametrize("eps", [0.0, -1e-5])
    def test_pos_equal_eps_must_be_positive(self, eps: float) -> None:
        """Test non-positive tolerances are rejected."""
        with pytest.raises(ValidationError):
            BooleanOptions(pos_equal_eps=eps)
        with pytest.raises(ValidationError):
            OffsetOptions(pos_equal_eps=eps)
        with pytest.raises(ValidationError):
            SelfIntersectOptions(pos_equal_eps=eps)

    def test_collapsed_area_eps_may_be_zero(self) -> None:
        """Test zero keeps every non-degenerate result loop."""
        assert BooleanOptions(collapsed_area_eps=0.0).collapsed_area_eps == 0.0

    def test_accepts_index(self) -> None:
        """Test a prebuilt spatial index can be attached."""
        pline = Polyline.from_points([(0, 0), (1, 0), (1, 1)], closed=True)
        index = pline.create_aabb_index()
        assert OffsetOptions(aabb_index=index).aabb_index is index
        assert SelfIntersectOptions(aabb_index=index).aabb_index is index

    def test_rejects_foreign_index(self) -> None:
        """Test only AabbIndex objects are accepted as indexes."""
        with pytest.raises(ValidationError):
            BooleanOptions(pline1_aabb_index=[1, 2, 3])

    def test_dump_without_index(self) -> None:
        """Test options serialize for worker processes without the index."""
        dumped = OffsetOptions(handle_self_intersects=False).model_dump(exclude={"aabb_index"})
        assert "aabb_index" not in dumped
        assert OffsetOptions(**dumped).handle_self_intersects is False

    def test_logging_path(self, tmp_path: Path) -> None:
        """Test log file paths are coerced to Path."""
        config = LoggingConfig(log_file=str(tmp_path / "run.log"))
        assert config.log_file == tmp_path / "run.log"
