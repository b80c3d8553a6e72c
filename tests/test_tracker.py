"""Tests for completion tracking and the polling loop."""

import itertools
import sys
from datetime import datetime, timezone
from pathlib import Path
from unittest.mock import Mock, patch

import pytest

# Add src directory to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from workflow_bench.errors import CompletionTimeoutError
from workflow_bench.models import RepositoryIdentity, WorkflowRun
from workflow_bench.tracker import (
    AccumulatingCompletionTracker,
    SnapshotCompletionTracker,
    wait_for_completion,
)

_IDENTITY = RepositoryIdentity(owner="acme", name="widgets")
_TIME = datetime(2026, 1, 1, tzinfo=timezone.utc)
_PATH = ".github/workflows/bench.yml"


def _run(run_id: int, status: str = "completed", conclusion: str = "success") -> WorkflowRun:
    return WorkflowRun(
        id=run_id,
        path=_PATH,
        status=status,
        conclusion=conclusion if status == "completed" else None,
        created_at=_TIME,
        updated_at=_TIME,
    )


def test_snapshot_tracker_not_done_with_partial_completion():
    """Verify two completed plus one in-progress run does not satisfy three required."""
    tracker = SnapshotCompletionTracker(3)

    assert tracker.observe([_run(1), _run(2), _run(3, status="in_progress")]) is False
    assert len(tracker.terminal_runs) == 2


def test_snapshot_tracker_done_on_snapshot_with_enough_completed_runs():
    """Verify the tracker completes on the snapshot that first holds three completed runs."""
    tracker = SnapshotCompletionTracker(3)
    tracker.observe([_run(1), _run(2), _run(3, status="in_progress")])

    assert tracker.observe([_run(1), _run(2), _run(3)]) is True
    assert [run.id for run in tracker.terminal_runs] == [1, 2, 3]


def test_snapshot_tracker_uses_latest_snapshot_only():
    """Verify the terminal set is replaced, not accumulated, between polls."""
    tracker = SnapshotCompletionTracker(2)
    tracker.observe([_run(1)])

    assert tracker.observe([_run(2)]) is False
    assert [run.id for run in tracker.terminal_runs] == [2]


def test_snapshot_tracker_counts_failed_runs_as_terminal():
    """Verify completed runs count toward completion regardless of conclusion."""
    tracker = SnapshotCompletionTracker(2)

    assert tracker.observe([_run(1), _run(2, conclusion="failure")]) is True


def test_tracker_requires_positive_count():
    """Verify trackers reject non-positive required counts."""
    with pytest.raises(ValueError):
        SnapshotCompletionTracker(0)
    with pytest.raises(ValueError):
        AccumulatingCompletionTracker(0)


def test_accumulating_tracker_keeps_runs_missing_from_later_snapshots():
    """Verify run ids seen once stay tracked when a later listing omits them."""
    tracker = AccumulatingCompletionTracker(2)
    tracker.observe([_run(1)])

    assert tracker.observe([_run(2)]) is True
    assert sorted(run.id for run in tracker.terminal_runs) == [1, 2]


def test_accumulating_tracker_reports_unfinished_missing_ids():
    """Verify unfinished known runs absent from a snapshot are flagged for lookup."""
    tracker = AccumulatingCompletionTracker(2)
    tracker.observe([_run(1), _run(2, status="in_progress")])

    assert tracker.missing_run_ids([_run(1)]) == [2]
    assert tracker.missing_run_ids([_run(1), _run(2, status="in_progress")]) == []


def test_accumulating_tracker_never_regresses_terminal_runs():
    """Verify a stale non-terminal record does not overwrite a completed run."""
    tracker = AccumulatingCompletionTracker(1)
    tracker.observe([_run(1)])

    assert tracker.observe([_run(1, status="in_progress")]) is True


@patch("workflow_bench.tracker.time.sleep")
def test_wait_for_completion_polls_until_snapshot_is_complete(sleep_mock):
    """Verify the loop sleeps before each poll and stops on the completing iteration."""
    client = Mock()
    client.list_workflow_runs.side_effect = [
        [_run(1), _run(2), _run(3, status="in_progress")],
        [_run(1), _run(2), _run(3)],
        [_run(4)],
    ]

    runs = wait_for_completion(
        client,
        _IDENTITY,
        SnapshotCompletionTracker(3),
        ref="main",
        workflow_file_name="bench.yml",
        after_time=_TIME,
        poll_interval_seconds=10,
    )

    assert [run.id for run in runs] == [1, 2, 3]
    assert client.list_workflow_runs.call_count == 2
    assert sleep_mock.call_count == 2
    sleep_mock.assert_called_with(10)
    client.get_workflow_run.assert_not_called()


@patch("workflow_bench.tracker.time.sleep")
def test_wait_for_completion_refines_missing_runs_individually(sleep_mock):
    """Verify the accumulating strategy looks up known runs dropped from a listing."""
    client = Mock()
    client.list_workflow_runs.side_effect = [
        [_run(1), _run(2, status="in_progress")],
        [_run(1)],
    ]
    client.get_workflow_run.return_value = _run(2)

    runs = wait_for_completion(
        client,
        _IDENTITY,
        AccumulatingCompletionTracker(2),
        ref="main",
        workflow_file_name="bench.yml",
        after_time=_TIME,
    )

    assert sorted(run.id for run in runs) == [1, 2]
    client.get_workflow_run.assert_called_once_with("acme", "widgets", 2)


@patch("workflow_bench.tracker.time.monotonic", side_effect=itertools.count(0.0, 10.0))
@patch("workflow_bench.tracker.time.sleep")
def test_wait_for_completion_raises_after_max_wait(sleep_mock, monotonic_mock):
    """Verify the optional wait limit ends the loop with a timeout error."""
    client = Mock()
    client.list_workflow_runs.return_value = [_run(1), _run(2, status="queued")]

    with pytest.raises(CompletionTimeoutError) as exc_info:
        wait_for_completion(
            client,
            _IDENTITY,
            SnapshotCompletionTracker(2),
            ref="main",
            workflow_file_name="bench.yml",
            after_time=_TIME,
            max_wait_seconds=25,
        )

    assert exc_info.value.observed == 1
    assert exc_info.value.required == 2
    assert client.list_workflow_runs.call_count == 3
