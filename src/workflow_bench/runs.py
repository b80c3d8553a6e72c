"""Workflow dispatch and run polling.

Dispatches carry no run identifier, so runs belonging to a benchmark batch are
identified by time window, branch, event type and workflow file path.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Iterable, List, Mapping, Optional

import requests

from .github_client import GitHubClient
from .models import RepositoryIdentity, WorkflowRun

logger = logging.getLogger(__name__)


def trigger_workflow(
    client: GitHubClient,
    identity: RepositoryIdentity,
    workflow_file_name: str,
    ref: str,
    inputs: Optional[Mapping[str, str]] = None,
) -> requests.Response:
    """Issue exactly one dispatch request and return GitHub's acknowledgement."""
    return client.create_workflow_dispatch(
        owner=identity.owner,
        repo=identity.name,
        workflow_file_name=workflow_file_name,
        ref=ref,
        inputs=inputs,
    )


def trigger_workflow_runs(
    client: GitHubClient,
    identity: RepositoryIdentity,
    workflow_file_name: str,
    ref: str,
    count: int,
    inputs: Optional[Mapping[str, str]] = None,
) -> List[requests.Response]:
    """Dispatch ``count`` runs one after another.

    Each dispatch completes before the next one starts. A failing dispatch
    propagates and aborts the remaining ones.
    """
    acknowledgements: List[requests.Response] = []
    for index in range(1, count + 1):
        acknowledgements.append(
            trigger_workflow(client, identity, workflow_file_name, ref, inputs=inputs)
        )
        logger.info("Triggered workflow run #%d", index)
    return acknowledgements


def filter_runs_by_workflow(runs: Iterable[WorkflowRun], workflow_file_name: str) -> List[WorkflowRun]:
    """Keep only runs of the given workflow file.

    The ``workflow_dispatch`` event filter alone cannot tell apart different
    workflow files dispatched on the same branch.
    """
    suffix = f"/{workflow_file_name}"
    return [run for run in runs if run.path.endswith(suffix)]


def poll_workflow_runs(
    client: GitHubClient,
    identity: RepositoryIdentity,
    ref: str,
    workflow_file_name: str,
    after_time: datetime,
) -> List[WorkflowRun]:
    """Return a snapshot of dispatched runs of the workflow created at or after ``after_time``."""
    runs = client.list_workflow_runs(
        owner=identity.owner,
        repo=identity.name,
        branch=ref,
        created_after=after_time,
        workflow_file_name=workflow_file_name,
    )
    matching = filter_runs_by_workflow(runs, workflow_file_name)
    logger.debug(
        "Polled workflow runs",
        extra={"returned": len(runs), "matching": len(matching), "workflow": workflow_file_name},
    )
    return matching
