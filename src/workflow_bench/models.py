"""Domain models for workflow run benchmarking.

These dataclasses intentionally model only the subset of GitHub API payload
fields that are required to correlate runs and compute latency statistics.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


class RunStatus:
    """Workflow run status values reported by GitHub."""

    QUEUED = "queued"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


@dataclass(frozen=True)
class RepositoryIdentity:
    """Owner/name pair of the repository hosting the benchmarked workflow."""

    owner: str
    name: str

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.name}"


@dataclass(slots=True)
class WorkflowRun:
    """Represents the minimal workflow run data required for latency calculations."""

    id: int
    path: str
    status: str
    conclusion: Optional[str]
    created_at: datetime
    updated_at: datetime

    @property
    def is_terminal(self) -> bool:
        """A run is terminal once GitHub reports it completed, whatever its conclusion."""
        return self.status == RunStatus.COMPLETED

    @property
    def succeeded(self) -> bool:
        return self.is_terminal and self.conclusion == "success"

    @property
    def duration_ms(self) -> float:
        return (self.updated_at - self.created_at).total_seconds() * 1000.0


@dataclass(frozen=True)
class ExecutionStatistics:
    """Latency summary over run durations, in milliseconds."""

    min: float
    max: float
    mean: float
    median: float
    p90: float


@dataclass(frozen=True)
class BenchmarkResult:
    """Aggregated outcome of one benchmark invocation."""

    statistics: ExecutionStatistics
    overall_start_time: datetime
    overall_end_time: datetime
    total_duration: float
    concurrent_executions: int
    run_count: int
    failed_count: int
