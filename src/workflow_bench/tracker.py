"""Completion tracking for a batch of dispatched workflow runs.

Two strategies decide when a batch is finished:

- ``SnapshotCompletionTracker`` looks at the latest poll only and is done once
  that single snapshot holds enough terminal runs. Runs are counted, not
  identified, so the terminal set is always the one from the latest poll.
- ``AccumulatingCompletionTracker`` remembers every run id seen in the trigger
  window, looks up known runs that drop out of a listing individually, and is
  done once enough of the known runs are terminal.
"""

from __future__ import annotations

import logging
import time
from datetime import datetime
from typing import Dict, List, Optional, Union

from .errors import CompletionTimeoutError
from .github_client import GitHubClient
from .models import RepositoryIdentity, WorkflowRun
from .runs import poll_workflow_runs

logger = logging.getLogger(__name__)


class SnapshotCompletionTracker:
    """Count terminal runs in the most recent poll snapshot."""

    def __init__(self, required_count: int) -> None:
        if required_count <= 0:
            raise ValueError("required_count must be greater than 0")
        self.required_count = required_count
        self._terminal_runs: List[WorkflowRun] = []

    @property
    def terminal_runs(self) -> List[WorkflowRun]:
        return list(self._terminal_runs)

    @property
    def is_done(self) -> bool:
        return len(self._terminal_runs) >= self.required_count

    def missing_run_ids(self, snapshot: List[WorkflowRun]) -> List[int]:
        """Snapshot tracking never looks up individual runs."""
        return []

    def observe(self, snapshot: List[WorkflowRun]) -> bool:
        """Replace the terminal set with the snapshot's terminal runs and report completion."""
        self._terminal_runs = [run for run in snapshot if run.is_terminal]
        return self.is_done


class AccumulatingCompletionTracker:
    """Track a growing set of known run ids and their latest state."""

    def __init__(self, required_count: int) -> None:
        if required_count <= 0:
            raise ValueError("required_count must be greater than 0")
        self.required_count = required_count
        self._known: Dict[int, WorkflowRun] = {}

    @property
    def terminal_runs(self) -> List[WorkflowRun]:
        return [run for run in self._known.values() if run.is_terminal]

    @property
    def is_done(self) -> bool:
        return len(self.terminal_runs) >= self.required_count

    def missing_run_ids(self, snapshot: List[WorkflowRun]) -> List[int]:
        """Return known, unfinished run ids that the snapshot did not include."""
        seen = {run.id for run in snapshot}
        return [
            run_id
            for run_id, run in self._known.items()
            if run_id not in seen and not run.is_terminal
        ]

    def observe(self, snapshot: List[WorkflowRun]) -> bool:
        """Merge the snapshot into the known set and report completion."""
        for run in snapshot:
            previous = self._known.get(run.id)
            # a terminal run never goes back to an active status
            if previous is not None and previous.is_terminal and not run.is_terminal:
                continue
            self._known[run.id] = run
        return self.is_done


def wait_for_completion(
    client: GitHubClient,
    identity: RepositoryIdentity,
    tracker: Union[SnapshotCompletionTracker, AccumulatingCompletionTracker],
    ref: str,
    workflow_file_name: str,
    after_time: datetime,
    poll_interval_seconds: int = 10,
    max_wait_seconds: Optional[int] = None,
) -> List[WorkflowRun]:
    """Poll on a fixed interval until ``tracker`` reports enough terminal runs.

    Each iteration sleeps ``poll_interval_seconds`` before querying, so the
    effective period is the interval plus the query latency. Without
    ``max_wait_seconds`` the loop only ends when the batch completes or the
    process is interrupted.

    Returns:
        The terminal runs held by the tracker when it reported completion.

    Raises:
        CompletionTimeoutError: If ``max_wait_seconds`` elapses first.
    """
    started = time.monotonic()
    iteration = 0

    while True:
        time.sleep(poll_interval_seconds)
        iteration += 1
        logger.info("Polling for completed workflow runs...")

        snapshot = poll_workflow_runs(client, identity, ref, workflow_file_name, after_time)
        for run_id in tracker.missing_run_ids(snapshot):
            snapshot.append(client.get_workflow_run(identity.owner, identity.name, run_id))

        done = tracker.observe(snapshot)
        observed = len(tracker.terminal_runs)
        logger.debug(
            "Completion check",
            extra={
                "iteration": iteration,
                "snapshot_runs": len(snapshot),
                "terminal_runs": observed,
                "required": tracker.required_count,
            },
        )

        if done:
            logger.info(
                "Observed %d completed workflow runs after %d polls", observed, iteration
            )
            return tracker.terminal_runs

        elapsed = time.monotonic() - started
        if max_wait_seconds is not None and elapsed >= max_wait_seconds:
            raise CompletionTimeoutError(
                f"Only {observed} of {tracker.required_count} workflow runs completed "
                f"within {max_wait_seconds} seconds.",
                observed=observed,
                required=tracker.required_count,
            )
