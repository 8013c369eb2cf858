"""Utility functions for polyarc.

This module provides utility functions including:

- Logging setup and configuration
- Batch operation statistics
"""

from polyarc.utils.logging import (
    OperationLogger,
    OperationStats,
    configure_logging,
)

__all__ = [
    "OperationLogger",
    "OperationStats",
    "configure_logging",
]
