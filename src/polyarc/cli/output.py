"""Rich console output helpers for the CLI.

This module provides user-friendly console output using Rich library
with progress bars, tables, and formatted messages.
"""

from collections.abc import Sequence

from rich.console import Console
from rich.progress import (
    BarColumn,
    Progress,
    TaskProgressColumn,
    TextColumn,
    TimeElapsedColumn,
)
from rich.table import Table
from rich.text import Text

from polyarc.core import PlineIntersects
from polyarc.domain import Orientation, Polyline

console = Console()

# Unicode symbols for consistent visual language
SYM_STEP = "▸"  # Step indicator
SYM_OK = "✓"  # Success
SYM_ERR = "✗"  # Error
SYM_DOT = "·"  # Separator/secondary info

_ORIENTATION_LABELS = {
    Orientation.COUNTER_CLOCKWISE: "ccw",
    Orientation.CLOCKWISE: "cw",
    Orientation.OPEN: "open",
}


def create_progress() -> Progress:
    """Create a rich progress bar for batch processing.

    Returns:
        Configured Progress instance with bar and time elapsed.
    """
    return Progress(
        TextColumn("  "),
        BarColumn(bar_width=40, complete_style="green", finished_style="green"),
        TaskProgressColumn(),
        TimeElapsedColumn(),
        console=console,
        transient=False,
    )


def print_header(version: str) -> None:
    """Print application header.

    Args:
        version: Application version string
    """
    console.print(f"\n[bold]Polyarc[/bold] v{version}")
    console.print("─" * 44)


def print_step(message: str) -> None:
    """Print a processing step indicator.

    Args:
        message: Step description message
    """
    console.print(f"\n{SYM_STEP} {message}")


def print_file_info(path: str, polyline_count: int) -> None:
    """Print input file information.

    Args:
        path: Path to the polyline document
        polyline_count: Number of polylines in the document
    """
    # Use Text to safely handle paths with special characters
    line = Text("  ")
    line.append(path)
    console.print(line)
    plural = "polyline" if polyline_count == 1 else "polylines"
    console.print(f"  {polyline_count:,} {plural}")


def polyline_table(plines: Sequence[Polyline], title: str | None = None) -> Table:
    """Build a summary table with one row per polyline."""
    table = Table(title=title, show_edge=False, header_style="bold")
    table.add_column("#", justify="right")
    table.add_column("Vertices", justify="right")
    table.add_column("Closed")
    table.add_column("Orientation")
    table.add_column("Area", justify="right")
    table.add_column("Length", justify="right")
    table.add_column("Userdata", justify="right")

    for i, pline in enumerate(plines):
        area = pline.area()
        table.add_row(
            str(i),
            str(pline.vertex_count),
            "yes" if pline.closed else "no",
            _ORIENTATION_LABELS[pline.orientation()],
            f"{area:.4f}",
            f"{pline.path_length():.4f}",
            str(pline.userdata),
        )
    return table


def print_polylines(plines: Sequence[Polyline], title: str | None = None) -> None:
    """Print a polyline summary table, or a note when there is nothing to show."""
    if not plines:
        console.print(f"  {SYM_DOT} no polylines")
        return
    console.print(polyline_table(plines, title))


def print_intersects(item: int, hits: PlineIntersects, verbose: bool) -> None:
    """Print the self-intersections found on one polyline.

    Args:
        item: Index of the polyline in its document
        hits: Scan result
        verbose: Whether to list every point
    """
    style = "yellow" if hits.count else "green"
    console.print(
        f"  #{item}: [{style}]{len(hits.basic)} points[/{style}] {SYM_DOT} "
        f"{len(hits.overlapping)} overlaps"
    )
    if not verbose:
        return
    for hit in hits.basic:
        console.print(
            f"    ({hit.point.x:.6g}, {hit.point.y:.6g}) "
            f"segments {hit.start_index1}/{hit.start_index2}"
        )
    for overlap in hits.overlapping:
        console.print(
            f"    ({overlap.point1.x:.6g}, {overlap.point1.y:.6g}) to "
            f"({overlap.point2.x:.6g}, {overlap.point2.y:.6g}) "
            f"segments {overlap.start_index1}/{overlap.start_index2}"
        )


def _format_time(seconds: float) -> str:
    """Format seconds into human-readable time string."""
    if seconds < 1:
        return f"{seconds * 1000:.0f}ms"
    elif seconds < 60:
        return f"{seconds:.1f}s"
    else:
        mins = int(seconds // 60)
        secs = seconds % 60
        return f"{mins}m {secs:.1f}s"


def print_processing_info(workers: int, is_auto: bool = False) -> None:
    """Print processing configuration.

    Args:
        workers: Number of parallel workers
        is_auto: Whether the count was auto-detected
    """
    auto_suffix = " (auto)" if is_auto else ""
    console.print(f"  {workers} workers{auto_suffix} {SYM_DOT} Ctrl+C to cancel")


def print_success(
    output_path: str,
    file_size: str,
    total_time_s: float,
    processed: int,
    results: int,
    errors: int,
    avg_time_ms: float | None = None,
) -> None:
    """Print success message with summary.

    Args:
        output_path: Path to output file
        file_size: Human-readable file size string
        total_time_s: Total processing time in seconds
        processed: Number of input polylines processed
        results: Number of result polylines written
        errors: Number of errors encountered
        avg_time_ms: Average processing time per polyline in milliseconds
    """
    time_str = _format_time(total_time_s)

    console.print(f"\n[bold green]{SYM_OK} Complete[/bold green] in {time_str}")

    line = Text("  ")
    line.append(output_path, style="bold")
    line.append(f" ({file_size})")
    console.print(line)

    error_style = "red" if errors > 0 else "green"
    console.print(
        f"  {processed} inputs {SYM_DOT} {results} results {SYM_DOT} "
        f"[{error_style}]{errors} errors[/{error_style}]"
    )

    if avg_time_ms is not None:
        console.print(f"  {avg_time_ms:.1f}ms avg")


def print_error(message: str, details: str | None = None) -> None:
    """Print error message.

    Args:
        message: Main error message
        details: Optional detailed error information
    """
    console.print(f"\n[bold red]{SYM_ERR} Error:[/bold red] {message}")
    if details:
        console.print(f"  {details}")


def print_cancellation_notice() -> None:
    """Print cancellation acknowledgment."""
    console.print(f"\n{SYM_DOT} Cancelled, no output file created")
