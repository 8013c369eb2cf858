"""CLI application entry point for polyarc.

This module provides the main CLI interface using Typer.
"""

import os
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Annotated

import typer

from polyarc import __version__
from polyarc.cli.output import (
    SYM_DOT,
    SYM_OK,
    console,
    create_progress,
    print_cancellation_notice,
    print_error,
    print_file_info,
    print_header,
    print_intersects,
    print_polylines,
    print_processing_info,
    print_step,
    print_success,
)
from polyarc.config import (
    KernelSettings,
    LoggingConfig,
    OffsetOptions,
    ProcessingConfig,
    SelfIntersectOptions,
    get_default_settings,
)
from polyarc.core import BatchOffsetProcessor, boolean, find_self_intersects
from polyarc.domain import Polyline, Shape
from polyarc.exceptions import InputFormatError, OutputWriteError, PolyarcError
from polyarc.io import PolylineReader, PolylineWriter

# Create the Typer app
app = typer.Typer(
    name="polyarc",
    help="Boolean operations and parallel offsets for line/arc polylines.",
    add_completion=False,
    no_args_is_help=True,
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"[bold blue]Polyarc[/bold blue] v{__version__}")
        raise typer.Exit()


@app.callback()
def main_options(
    _version: Annotated[  # noqa: ARG001
        bool | None,
        typer.Option(
            "--version",
            "-V",
            help="Show version and exit",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
) -> None:
    """Boolean operations and parallel offsets for line/arc polylines.

    Input files are JSON documents of the form
    {"polylines": [{"vertices": [[x, y, bulge], ...], "closed": true}]}.
    """


@contextmanager
def _handle_errors() -> Iterator[None]:
    """Turn library errors into a printed message and exit code 1."""
    try:
        yield
    except InputFormatError as e:
        print_error(f"Could not read polylines: {e.reason}", details=e.path)
        raise typer.Exit(code=1) from None
    except OutputWriteError as e:
        print_error(f"Could not write polylines: {e.reason}", details=e.path)
        raise typer.Exit(code=1) from None
    except PolyarcError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from None
    except typer.Exit:
        # Re-raise typer.Exit to allow clean exits
        raise
    except KeyboardInterrupt:
        print_cancellation_notice()
        raise typer.Exit(code=130) from None  # Standard Unix SIGINT exit code
    except Exception as e:
        print_error(f"Unexpected error: {e}")
        raise typer.Exit(code=1) from None


def _load_polylines(path: Path, quiet: bool) -> list[Polyline]:
    """Validate the input path and read its polylines.

    Raises:
        typer.Exit: If the path does not name a file
        InputFormatError: If the document is invalid
    """
    if not path.exists():
        print_error(
            f"Input file not found: {path}",
            details=f"The file '{path}' does not exist or is not accessible.",
        )
        raise typer.Exit(code=1)

    if not path.is_file():
        print_error(
            f"Input path is not a file: {path}",
            details="Please provide a path to a JSON polyline document.",
        )
        raise typer.Exit(code=1)

    if not quiet:
        print_step("Loading polylines")

    reader = PolylineReader(path)
    reader.load()
    plines = reader.polylines()

    if not quiet:
        print_file_info(str(path), len(plines))
    return plines


def _first_polyline(path: Path, quiet: bool) -> Polyline:
    plines = _load_polylines(path, quiet)
    if not plines:
        print_error(f"No polylines in {path}")
        raise typer.Exit(code=1)
    return plines[0]


@app.command()
def info(
    input_file: Annotated[
        Path,
        typer.Argument(
            help="Path to a JSON polyline document",
            show_default=False,
        ),
    ],
) -> None:
    """Summarize the polylines in a document.

    Example:
        polyarc info shapes.json
    """
    print_header(__version__)
    with _handle_errors():
        plines = _load_polylines(input_file, quiet=False)
        print_step("Polylines")
        print_polylines(plines)


@app.command("boolean")
def boolean_command(
    first: Annotated[
        Path,
        typer.Argument(
            help="Document whose first polyline is the first operand",
            show_default=False,
        ),
    ],
    second: Annotated[
        Path,
        typer.Argument(
            help="Document whose first polyline is the second operand",
            show_default=False,
        ),
    ],
    op: Annotated[
        str,
        typer.Option(
            "--op",
            help="Operation (or|and|not|xor)",
        ),
    ] = "or",
    output: Annotated[
        Path | None,
        typer.Option(
            "--output",
            "-o",
            help="Write results to this JSON file",
        ),
    ] = None,
    quiet: Annotated[
        bool,
        typer.Option(
            "--quiet",
            "-q",
            help="Minimal console output",
        ),
    ] = False,
) -> None:
    """Combine two closed polylines.

    Example:
        polyarc boolean a.json b.json --op and -o result.json
    """
    if not quiet:
        print_header(__version__)

    with _handle_errors():
        pline1 = _first_polyline(first, quiet)
        pline2 = _first_polyline(second, quiet)

        settings = get_default_settings()
        result = boolean(pline1, pline2, op, settings.boolean)

        if not quiet:
            print_step(f"Result {SYM_DOT} {result.info.name.lower()}")
            print_polylines(result.positive, title="Positive")
            if result.negative:
                print_polylines(result.negative, title="Negative")

        if output is not None:
            writer = PolylineWriter(output)
            writer.add_polylines(result.positive, group="ccw")
            writer.add_polylines(result.negative, group="cw")
            writer.save()
            if not quiet:
                console.print(f"\n[bold green]{SYM_OK} Saved[/bold green] {output}")


@app.command()
def offset(
    input_file: Annotated[
        Path,
        typer.Argument(
            help="Path to a JSON polyline document",
            show_default=False,
        ),
    ],
    distance: Annotated[
        float,
        typer.Option(
            "--distance",
            "-d",
            help="Signed offset distance (positive = right of travel)",
        ),
    ],
    no_self_intersects: Annotated[
        bool,
        typer.Option(
            "--no-self-intersects",
            help="Keep the raw offset without trimming self-intersections",
        ),
    ] = False,
    workers: Annotated[
        int | None,
        typer.Option(
            "--workers",
            "-j",
            help="Number of parallel workers (default: auto)",
            min=1,
        ),
    ] = None,
    output: Annotated[
        Path | None,
        typer.Option(
            "--output",
            "-o",
            help="Write results to this JSON file",
        ),
    ] = None,
    log_file: Annotated[
        Path | None,
        typer.Option(
            "--log-file",
            help="Write detailed logs to file",
        ),
    ] = None,
    log_level: Annotated[
        str,
        typer.Option(
            "--log-level",
            help="Logging level (DEBUG|INFO|WARNING|ERROR)",
        ),
    ] = "WARNING",
    quiet: Annotated[
        bool,
        typer.Option(
            "--quiet",
            "-q",
            help="Minimal console output",
        ),
    ] = False,
) -> None:
    """Offset every polyline of a document in parallel.

    Example:
        polyarc offset shapes.json --distance 2.5

    This will create shapes-offset.json with the offset results.
    """
    if not quiet:
        print_header(__version__)

    settings = KernelSettings(
        offset=OffsetOptions(handle_self_intersects=not no_self_intersects),
        processing=ProcessingConfig(max_workers=workers),
        logging=LoggingConfig(
            log_file=log_file,
            log_level=log_level if not quiet else "WARNING",
        ),
    )

    with _handle_errors():
        plines = _load_polylines(input_file, quiet)
        if not plines:
            if not quiet:
                console.print("\nNo polylines found. Nothing to process.")
            raise typer.Exit(code=0)

        output_path = output or PolylineWriter.get_result_path(input_file, "offset")

        if not quiet:
            print_step("Offsetting")
            print_processing_info(workers or os.cpu_count() or 1, is_auto=(workers is None))

        processor = BatchOffsetProcessor(settings)
        if not quiet:
            with create_progress() as progress:
                task_id = progress.add_task(
                    f"Offsetting {len(plines)} polylines", total=len(plines)
                )

                def update_progress(completed: int, *_: object) -> None:
                    progress.update(task_id, completed=completed)

                results, stats = processor.process(
                    plines, distance, max_workers=workers, progress_callback=update_progress
                )
        else:
            results, stats = processor.process(plines, distance, max_workers=workers)

        writer = PolylineWriter(output_path)
        for result in results:
            writer.add_polylines(result)
        writer.save()

        if not quiet:
            print_success(
                output_path=str(output_path),
                file_size=_format_file_size(output_path),
                total_time_s=stats.duration_seconds,
                processed=stats.processed_count,
                results=stats.result_count,
                errors=stats.error_count,
                avg_time_ms=stats.avg_time_ms,
            )


@app.command("shape-offset")
def shape_offset(
    input_file: Annotated[
        Path,
        typer.Argument(
            help="Path to a JSON document of closed islands and holes",
            show_default=False,
        ),
    ],
    distance: Annotated[
        float,
        typer.Option(
            "--distance",
            "-d",
            help="Signed offset distance (positive grows islands and shrinks holes)",
        ),
    ],
    output: Annotated[
        Path | None,
        typer.Option(
            "--output",
            "-o",
            help="Write results to this JSON file",
        ),
    ] = None,
    quiet: Annotated[
        bool,
        typer.Option(
            "--quiet",
            "-q",
            help="Minimal console output",
        ),
    ] = False,
) -> None:
    """Offset all closed polylines of a document together as one shape.

    Counter-clockwise polylines are islands and clockwise polylines holes.

    Example:
        polyarc shape-offset letter.json -d 1.5
    """
    if not quiet:
        print_header(__version__)

    with _handle_errors():
        plines = _load_polylines(input_file, quiet)
        settings = get_default_settings()
        shape = Shape.from_plines(plines)
        result = shape.parallel_offset(distance, settings.shape_offset)

        if not quiet:
            print_step(
                f"Result {SYM_DOT} {result.ccw_count} islands {SYM_DOT} {result.cw_count} holes"
            )
            print_polylines(result.ccw_plines, title="Islands")
            if result.cw_count:
                print_polylines(result.cw_plines, title="Holes")

        output_path = output or PolylineWriter.get_result_path(input_file, "shape-offset")
        writer = PolylineWriter(output_path)
        writer.add_shape(result)
        writer.save()

        if not quiet:
            console.print(f"\n[bold green]{SYM_OK} Saved[/bold green] {output_path}")


@app.command("self-intersects")
def self_intersects(
    input_file: Annotated[
        Path,
        typer.Argument(
            help="Path to a JSON polyline document",
            show_default=False,
        ),
    ],
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="List every intersection point",
        ),
    ] = False,
) -> None:
    """Report self-intersections of every polyline in a document.

    Example:
        polyarc self-intersects shapes.json -v
    """
    print_header(__version__)

    with _handle_errors():
        plines = _load_polylines(input_file, quiet=False)
        print_step("Self-intersections")
        options = SelfIntersectOptions()
        total = 0
        for item, pline in enumerate(plines):
            hits = find_self_intersects(pline, options)
            total += hits.count
            print_intersects(item, hits, verbose)
        console.print(f"\n  {total} total")


def _format_file_size(path: Path) -> str:
    """Format file size in human-readable form.

    Args:
        path: Path to file

    Returns:
        Human-readable file size (e.g., "12 KB")
    """
    try:
        size_bytes = path.stat().st_size
    except OSError:
        return "unknown"
    if size_bytes < 1024:
        return f"{size_bytes} B"
    elif size_bytes < 1024 * 1024:
        return f"{size_bytes / 1024:.0f} KB"
    else:
        return f"{size_bytes / (1024 * 1024):.1f} MB"


def cli() -> None:
    """Entry point for the CLI application."""
    app()


def main() -> None:
    """Entry point for the CLI application (alias for cli)."""
    cli()


if __name__ == "__main__":
    cli()
