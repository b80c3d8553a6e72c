"""Trigger, monitor and summarize one concurrent workflow benchmark."""

from __future__ import annotations

import enum
import logging
from datetime import datetime, timezone
from typing import Mapping, Optional

from .config import Config
from .github_client import GitHubClient
from .models import BenchmarkResult, RepositoryIdentity
from .runs import trigger_workflow_runs
from .stats import summarize_runs
from .tracker import AccumulatingCompletionTracker, SnapshotCompletionTracker, wait_for_completion

logger = logging.getLogger(__name__)


class BenchmarkPhase(enum.Enum):
    TRIGGERING = "triggering"
    POLLING = "polling"
    DONE = "done"


def run_benchmark(
    client: GitHubClient,
    identity: RepositoryIdentity,
    workflow_file_name: str,
    concurrent_executions: int,
    ref: str,
    config: Config,
    inputs: Optional[Mapping[str, str]] = None,
    track_run_ids: bool = False,
) -> BenchmarkResult:
    """Dispatch ``concurrent_executions`` runs and wait for them to finish.

    The trigger time is recorded before the first dispatch and is the lower
    bound of the poll window. Errors from any phase propagate unchanged.
    """
    phase = BenchmarkPhase.TRIGGERING
    logger.info(
        "Starting benchmark",
        extra={
            "phase": phase.value,
            "repo": identity.full_name,
            "workflow": workflow_file_name,
            "ref": ref,
            "concurrent_executions": concurrent_executions,
        },
    )

    trigger_time = datetime.now(timezone.utc)
    trigger_workflow_runs(
        client,
        identity,
        workflow_file_name,
        ref,
        concurrent_executions,
        inputs=inputs,
    )

    phase = BenchmarkPhase.POLLING
    logger.info(
        "Waiting for workflow runs to complete",
        extra={
            "phase": phase.value,
            "trigger_time": trigger_time.isoformat(),
            "track_run_ids": track_run_ids,
        },
    )
    if track_run_ids:
        tracker = AccumulatingCompletionTracker(concurrent_executions)
    else:
        tracker = SnapshotCompletionTracker(concurrent_executions)

    terminal_runs = wait_for_completion(
        client,
        identity,
        tracker,
        ref=ref,
        workflow_file_name=workflow_file_name,
        after_time=trigger_time,
        poll_interval_seconds=config.poll_interval_seconds,
        max_wait_seconds=config.max_wait_seconds,
    )

    phase = BenchmarkPhase.DONE
    result = summarize_runs(terminal_runs, concurrent_executions)
    logger.info(
        "Benchmark finished",
        extra={
            "phase": phase.value,
            "run_count": result.run_count,
            "failed_count": result.failed_count,
            "total_duration": result.total_duration,
        },
    )
    if result.failed_count:
        logger.warning("%d of %d completed runs did not succeed", result.failed_count, result.run_count)

    return result
