"""Statistics and formatting helpers for workflow latency reporting.

This module provides utilities for:
- Reducing run durations to min, max, mean, median and nearest-rank P90.
- Aggregating a batch of terminal runs into a ``BenchmarkResult``.
- Building a human-readable report with durations in seconds.
"""

from __future__ import annotations

import math
from typing import List, Sequence

from .errors import DataValidationError
from .models import BenchmarkResult, ExecutionStatistics, WorkflowRun


def calculate_median(sorted_values: Sequence[float]) -> float:
    """Return the middle value, or the mean of the two middle values for even sizes.

    The input sequence is expected to already be sorted in ascending order.
    """
    size = len(sorted_values)
    middle = size // 2
    if size % 2 == 0:
        return (sorted_values[middle - 1] + sorted_values[middle]) / 2
    return sorted_values[middle]


def calculate_p90(sorted_values: Sequence[float]) -> float:
    """Return the nearest-rank 90th percentile without interpolation.

    Selects index ``floor(n * 0.9)`` of the ascending sample, which for a
    single value is that value.
    """
    return sorted_values[math.floor(len(sorted_values) * 0.9)]


def compute_execution_statistics(durations: Sequence[float]) -> ExecutionStatistics:
    """Compute min, max, mean, median and P90 for duration samples.

    Samples are sorted into a private copy; the caller's sequence is left as is.

    Args:
        durations: Non-negative durations in milliseconds.

    Raises:
        DataValidationError: If ``durations`` is empty or holds negative or NaN values.
    """
    if not durations:
        raise DataValidationError("Cannot compute execution statistics for an empty sample.")

    if any(math.isnan(value) or value < 0 for value in durations):
        raise DataValidationError(
            f"Execution durations must be non-negative numbers: {list(durations)}"
        )

    sorted_values: List[float] = sorted(durations)

    return ExecutionStatistics(
        min=sorted_values[0],
        max=sorted_values[-1],
        mean=sum(sorted_values) / len(sorted_values),
        median=calculate_median(sorted_values),
        p90=calculate_p90(sorted_values),
    )


def summarize_runs(runs: Sequence[WorkflowRun], concurrent_executions: int) -> BenchmarkResult:
    """Reduce terminal runs to per-run statistics and the overall batch window.

    The batch window spans from the earliest ``created_at`` to the latest
    ``updated_at`` across all runs; ``total_duration`` is that span in seconds.
    """
    if not runs:
        raise DataValidationError("Cannot summarize a benchmark without completed runs.")

    statistics = compute_execution_statistics([run.duration_ms for run in runs])
    overall_start_time = min(run.created_at for run in runs)
    overall_end_time = max(run.updated_at for run in runs)

    return BenchmarkResult(
        statistics=statistics,
        overall_start_time=overall_start_time,
        overall_end_time=overall_end_time,
        total_duration=(overall_end_time - overall_start_time).total_seconds(),
        concurrent_executions=concurrent_executions,
        run_count=len(runs),
        failed_count=sum(1 for run in runs if not run.succeeded),
    )


def _format_number(value: float) -> str:
    """Render a value with millisecond precision, dropping trailing zeros."""
    text = f"{value:.3f}".rstrip("0").rstrip(".")
    return text or "0"


def format_seconds(milliseconds: float) -> str:
    """Format a millisecond duration as seconds, e.g. ``"12.5 seconds"``."""
    return f"{_format_number(milliseconds / 1000)} seconds"


def generate_report(result: BenchmarkResult) -> str:
    """Generate a human-readable latency report for one benchmark invocation."""
    stats = result.statistics

    lines = [
        f"Concurrent executions: {result.concurrent_executions}",
        f"Completed runs: {result.run_count} (failed: {result.failed_count})",
        f"Min execution time: {format_seconds(stats.min)}",
        f"Max execution time: {format_seconds(stats.max)}",
        f"Median execution time: {format_seconds(stats.median)}",
        f"Mean execution time: {format_seconds(stats.mean)}",
        f"P90 execution time: {format_seconds(stats.p90)}",
        f"Overall start time: {result.overall_start_time.isoformat()}",
        f"Overall end time: {result.overall_end_time.isoformat()}",
        f"Total duration: {_format_number(result.total_duration)} seconds",
    ]

    return "\n".join(lines)
