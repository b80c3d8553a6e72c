"""End-to-end tests for a benchmark run against a mocked GitHub client."""

import logging
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path
from unittest.mock import Mock, patch

import pytest

# Add src directory to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from workflow_bench.benchmark import run_benchmark
from workflow_bench.config import Config
from workflow_bench.errors import ApiError
from workflow_bench.models import RepositoryIdentity, WorkflowRun

_IDENTITY = RepositoryIdentity(owner="acme", name="widgets")
_START = datetime(2026, 3, 2, 9, 0, 0, tzinfo=timezone.utc)


def _run(run_id: int, status: str, start_offset_ms: int, duration_ms: int, path: str = ".github/workflows/bench.yml"):
    created_at = _START + timedelta(milliseconds=start_offset_ms)
    return WorkflowRun(
        id=run_id,
        path=path,
        status=status,
        conclusion="success" if status == "completed" else None,
        created_at=created_at,
        updated_at=created_at + timedelta(milliseconds=duration_ms),
    )


@patch("workflow_bench.tracker.time.sleep")
def test_run_benchmark_two_runs_end_to_end(sleep_mock):
    """Verify dispatch, two poll iterations and the batch window for two runs."""
    client = Mock()
    client.list_workflow_runs.side_effect = [
        [
            _run(11, "in_progress", 0, 500),
            _run(12, "queued", 200, 500),
            _run(99, "completed", 0, 100, path=".github/workflows/other.yml"),
        ],
        [
            _run(11, "completed", 0, 1000),
            _run(12, "completed", 200, 3000),
            _run(99, "completed", 0, 100, path=".github/workflows/other.yml"),
        ],
    ]

    result = run_benchmark(
        client,
        _IDENTITY,
        workflow_file_name="bench.yml",
        concurrent_executions=2,
        ref="main",
        config=Config(token="gh-token"),
    )

    assert client.create_workflow_dispatch.call_count == 2
    assert client.list_workflow_runs.call_count == 2
    sleep_mock.assert_called_with(10)

    assert result.overall_start_time == _START
    assert result.overall_end_time == _START + timedelta(milliseconds=3200)
    assert result.total_duration == 3.2
    assert result.statistics.min == 1000.0
    assert result.statistics.max == 3000.0
    assert result.statistics.mean == 2000.0
    assert result.statistics.median == 2000.0
    assert result.statistics.p90 == 3000.0
    assert result.concurrent_executions == 2
    assert result.failed_count == 0


@patch("workflow_bench.tracker.time.sleep")
def test_run_benchmark_records_trigger_time_before_first_dispatch(sleep_mock):
    """Verify the poll window starts no later than the first dispatch."""
    dispatch_times = []
    client = Mock()
    client.create_workflow_dispatch.side_effect = lambda **kwargs: dispatch_times.append(
        datetime.now(timezone.utc)
    )
    client.list_workflow_runs.return_value = [_run(1, "completed", 0, 1000)]

    run_benchmark(
        client,
        _IDENTITY,
        workflow_file_name="bench.yml",
        concurrent_executions=1,
        ref="release",
        config=Config(token="gh-token", poll_interval_seconds=1),
    )

    created_after = client.list_workflow_runs.call_args.kwargs["created_after"]
    assert created_after <= dispatch_times[0]
    assert client.list_workflow_runs.call_args.kwargs["branch"] == "release"
    sleep_mock.assert_called_once_with(1)


@patch("workflow_bench.tracker.time.sleep")
def test_run_benchmark_dispatch_failure_skips_polling(sleep_mock):
    """Verify a dispatch error aborts the batch before any polling."""
    client = Mock()
    client.create_workflow_dispatch.side_effect = ApiError("forbidden")

    with pytest.raises(ApiError):
        run_benchmark(
            client,
            _IDENTITY,
            workflow_file_name="bench.yml",
            concurrent_executions=3,
            ref="main",
            config=Config(token="gh-token"),
        )

    client.list_workflow_runs.assert_not_called()
    sleep_mock.assert_not_called()


@patch("workflow_bench.tracker.time.sleep")
def test_run_benchmark_track_run_ids_uses_accumulated_runs(sleep_mock):
    """Verify run-id tracking counts runs completed across different polls."""
    client = Mock()
    client.list_workflow_runs.side_effect = [
        [_run(1, "completed", 0, 1000), _run(2, "in_progress", 0, 100)],
        [_run(2, "completed", 0, 2000)],
    ]

    result = run_benchmark(
        client,
        _IDENTITY,
        workflow_file_name="bench.yml",
        concurrent_executions=2,
        ref="main",
        config=Config(token="gh-token"),
        track_run_ids=True,
    )

    assert result.run_count == 2
    assert result.statistics.max == 2000.0
    client.get_workflow_run.assert_not_called()


@patch("workflow_bench.tracker.time.sleep")
def test_run_benchmark_logs_each_phase_transition(sleep_mock, caplog):
    """Verify the triggering, polling and done phases are each logged."""
    caplog.set_level(logging.INFO, logger="workflow_bench.benchmark")
    client = Mock()
    client.list_workflow_runs.return_value = [_run(1, "completed", 0, 1000)]

    run_benchmark(
        client,
        _IDENTITY,
        workflow_file_name="bench.yml",
        concurrent_executions=1,
        ref="main",
        config=Config(token="gh-token"),
    )

    phases = [
        record.phase
        for record in caplog.records
        if record.name == "workflow_bench.benchmark" and hasattr(record, "phase")
    ]
    assert phases == ["triggering", "polling", "done"]
