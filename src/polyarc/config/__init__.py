"""Configuration management for polyarc.

This module provides configuration management using Pydantic models.
Configuration can be provided via CLI arguments or defaults.

Key classes:
- BooleanOptions: Boolean operation tolerances and optional index
- OffsetOptions: Parallel offset tolerances and self-intersection handling
- ShapeOffsetOptions: Tolerances for whole-shape offsets
- SelfIntersectOptions: Self-intersection scan settings
- ProcessingConfig: Batch processing settings
- LoggingConfig: Logging settings
- KernelSettings: Main application settings
"""

from polyarc.config.settings import (
    BooleanOptions,
    KernelSettings,
    LoggingConfig,
    OffsetOptions,
    ProcessingConfig,
    SelfIntersectOptions,
    ShapeOffsetOptions,
    get_default_settings,
)

__all__ = [
    "BooleanOptions",
    "KernelSettings",
    "LoggingConfig",
    "OffsetOptions",
    "ProcessingConfig",
    "SelfIntersectOptions",
    "ShapeOffsetOptions",
    "get_default_settings",
]
