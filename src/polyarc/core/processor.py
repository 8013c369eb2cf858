"""Parallel batch offsetting of independent polylines.

Each kernel operation is single-threaded; throughput on many inputs comes
from running independent offsets in worker processes.

Key components:
- offset_polyline_task: Top-level picklable function for parallel execution
- BatchOffsetProcessor: Orchestrates a batch across a process pool
"""

import time
import traceback
from collections.abc import Callable, Sequence
from concurrent.futures import Future, ProcessPoolExecutor, as_completed
from typing import Any

import structlog

from polyarc.config import KernelSettings, OffsetOptions
from polyarc.core.offset import parallel_offset
from polyarc.domain import Polyline
from polyarc.utils import OperationLogger, OperationStats, configure_logging


def offset_polyline_task(
    pline_dict: dict[str, Any],
    offset: float,
    options_dict: dict[str, Any],
) -> dict[str, Any]:
    """Offset a single polyline.

    Top-level function designed to be picklable for use with ProcessPoolExecutor.
    Deserializes the polyline, offsets it, and returns the serialized result.

    Args:
        pline_dict: Serialized polyline (from Polyline.to_dict())
        offset: Signed offset distance
        options_dict: Serialized OffsetOptions without the spatial index

    Returns:
        Dictionary containing either:
        - Success: {"plines": [pline_dict, ...], "duration_ms": float}
        - Error: {"error": str, "traceback": str, "duration_ms": float}
    """
    start_time = time.time()

    try:
        pline = Polyline.from_dict(pline_dict)
        options = OffsetOptions(**options_dict)
        results = parallel_offset(pline, offset, options)

        duration_ms = (time.time() - start_time) * 1000
        return {
            "plines": [result.to_dict() for result in results],
            "duration_ms": duration_ms,
        }

    except Exception as e:
        # Capture full traceback for debugging
        duration_ms = (time.time() - start_time) * 1000
        return {
            "error": str(e),
            "traceback": traceback.format_exc(),
            "duration_ms": duration_ms,
        }


class BatchOffsetProcessor:
    """Offsets many polylines in parallel worker processes.

    Results are returned in input order; inputs that fail are reported in the
    statistics and yield an empty result list.

    Example:
        processor = BatchOffsetProcessor(KernelSettings())
        results, stats = processor.process(plines, offset=2.0, max_workers=4)
    """

    def __init__(self, config: KernelSettings, configure_logs: bool = True) -> None:
        """Initialize the batch processor.

        Args:
            config: Kernel settings (offset options, worker count, logging)
            configure_logs: Install structlog handlers from config.logging
        """
        self.config = config
        if configure_logs:
            self.logger = configure_logging(
                log_file=config.logging.log_file,
                console_level=config.logging.log_level,
                file_level=config.logging.file_log_level,
                quiet=False,
            )
        else:
            self.logger = structlog.get_logger("polyarc")
        self.operation_logger = OperationLogger(self.logger)

    def process(
        self,
        plines: Sequence[Polyline],
        offset: float,
        max_workers: int | None = None,
        progress_callback: Callable[[int, int, int, bool], None] | None = None,
    ) -> tuple[list[list[Polyline]], OperationStats]:
        """Offset every polyline.

        Args:
            plines: Input polylines
            offset: Signed offset distance applied to every input
            max_workers: Maximum worker processes (None = config, then auto)
            progress_callback: Optional callback(completed, total, item, success)

        Returns:
            Tuple of (results per input in input order, statistics)
        """
        self.operation_logger = OperationLogger(self.logger)
        stats = self.operation_logger.stats
        stats.start_time = time.time()

        if max_workers is None:
            max_workers = self.config.processing.max_workers

        # the spatial index is per input and cannot be shared across inputs
        options_dict = self.config.offset.model_dump(exclude={"aabb_index"})
        results: list[list[Polyline]] = [[] for _ in plines]

        self.logger.info(
            "Starting batch offset",
            count=len(plines),
            offset=offset,
            max_workers=max_workers,
        )

        total = len(plines)
        completed = 0
        pending: dict[Future, int] = {}

        with ProcessPoolExecutor(max_workers=max_workers) as executor:
            for item, pline in enumerate(plines):
                self.operation_logger.log_item_start(item, pline.vertex_count)
                future = executor.submit(offset_polyline_task, pline.to_dict(), offset, options_dict)
                pending[future] = item

            try:
                for future in as_completed(pending):
                    item = pending.pop(future)
                    success = False

                    try:
                        result = future.result()

                        if "error" in result:
                            self.operation_logger.log_item_error(
                                item=item,
                                error=Exception(result["error"]),
                                traceback=result.get("traceback"),
                            )
                        else:
                            success = True
                            results[item] = [Polyline.from_dict(d) for d in result["plines"]]
                            self.operation_logger.log_item_complete(
                                item=item,
                                result_count=len(results[item]),
                                duration_ms=result.get("duration_ms", 0.0),
                            )

                    except Exception as e:
                        # Executor-level error
                        self.operation_logger.log_item_error(
                            item=item,
                            error=e,
                            traceback=traceback.format_exc(),
                        )

                    completed += 1
                    if progress_callback is not None:
                        progress_callback(completed, total, item, success)

            except KeyboardInterrupt:
                self.logger.info("Cancellation requested by user")
                executor.shutdown(wait=True, cancel_futures=True)
                raise

        stats.end_time = time.time()
        self.logger.info(
            "Batch offset complete",
            processed=stats.processed_count,
            errors=stats.error_count,
            results=stats.result_count,
            duration_seconds=round(stats.duration_seconds, 2),
        )
        return results, stats
