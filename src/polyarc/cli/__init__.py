"""Command-line interface for polyarc.

This module provides the CLI using Typer with rich output for
readable tables and progress reporting.

Key features:
- Polyline file inspection
- Boolean operations between two files
- Batch parallel offsets with progress bars
- Whole-shape offsets and self-intersection reports
"""

from polyarc.cli.app import cli, main

__all__ = ["cli", "main"]
