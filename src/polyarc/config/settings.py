"""Configuration settings for Polyarc."""

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

from polyarc.domain.spatial_index import AabbIndex


class BooleanOptions(BaseModel):
    """Options for boolean operations.

    When ``pline1_aabb_index`` is None the engine builds an index for the
    first operand itself. A provided index must have been built from the
    current vertices of that operand.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    pline1_aabb_index: AabbIndex | None = Field(
        default=None,
        description="Prebuilt spatial index of the first operand (None = build internally)",
    )
    pos_equal_eps: float = Field(
        default=1e-5,
        gt=0.0,
        description="Tolerance for treating two positions as equal",
    )
    collapsed_area_eps: float = Field(
        default=1e-5,
        ge=0.0,
        description="Result loops with smaller absolute area are discarded",
    )


class OffsetOptions(BaseModel):
    """Options for parallel offset of a single polyline."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    aabb_index: AabbIndex | None = Field(
        default=None,
        description="Prebuilt spatial index of the input polyline (None = build internally)",
    )
    pos_equal_eps: float = Field(
        default=1e-5,
        gt=0.0,
        description="Tolerance for treating two positions as equal",
    )
    slice_join_eps: float = Field(
        default=1e-5,
        gt=0.0,
        description="Tolerance for joining slice end points when stitching",
    )
    offset_dist_eps: float = Field(
        default=1e-5,
        gt=0.0,
        description="Allowed shortfall of a slice's distance from the input",
    )
    handle_self_intersects: bool = Field(
        default=True,
        description="Trim self-intersections of the raw offset curve",
    )


class ShapeOffsetOptions(BaseModel):
    """Options for parallel offset of a whole shape."""

    pos_equal_eps: float = Field(
        default=1e-5,
        gt=0.0,
        description="Tolerance for treating two positions as equal",
    )
    slice_join_eps: float = Field(
        default=1e-5,
        gt=0.0,
        description="Tolerance for joining slice end points when stitching",
    )
    offset_dist_eps: float = Field(
        default=1e-5,
        gt=0.0,
        description="Allowed shortfall of a slice's distance from the input",
    )


class SelfIntersectOptions(BaseModel):
    """Options for self-intersection scans."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    aabb_index: AabbIndex | None = Field(
        default=None,
        description="Prebuilt spatial index of the polyline (None = build internally)",
    )
    pos_equal_eps: float = Field(
        default=1e-5,
        gt=0.0,
        description="Tolerance for treating two positions as equal",
    )


class ProcessingConfig(BaseModel):
    """Configuration for batch processing."""

    max_workers: int | None = Field(
        default=None,
        description="Max worker processes (None = auto)",
    )


class LoggingConfig(BaseModel):
    """Logging configuration."""

    log_file: Path | None = Field(
        default=None,
        description="Path to log file (None = no file output)",
    )
    log_level: str = Field(
        default="WARNING",
        description="Console log level",
    )
    file_log_level: str = Field(
        default="DEBUG",
        description="File log level (more verbose)",
    )


class KernelSettings(BaseModel):
    """Main application settings."""

    boolean: BooleanOptions = Field(default_factory=BooleanOptions)
    offset: OffsetOptions = Field(default_factory=OffsetOptions)
    shape_offset: ShapeOffsetOptions = Field(default_factory=ShapeOffsetOptions)
    processing: ProcessingConfig = Field(default_factory=ProcessingConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


def get_default_settings() -> KernelSettings:
    """Get default application settings."""
    return KernelSettings()
