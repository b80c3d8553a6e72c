"""GitHub REST API client for workflow dispatch and run retrieval."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional

import requests

from .config import Config
from .errors import ApiError, AuthenticationError
from .models import WorkflowRun

logger = logging.getLogger(__name__)


class GitHubClient:
    """Small, typed client for the GitHub Actions workflow APIs.

    Requests are issued once; failures surface as ``ApiError`` (or
    ``AuthenticationError`` for HTTP 401) without retrying.
    """

    _API_VERSION = "2022-11-28"
    _RUN_PAGE_SIZE = 500

    def __init__(self, config: Config) -> None:
        """Initialize an authenticated GitHub API client.

        Args:
            config: Validated runtime configuration including the API token.
        """
        self._config = config
        self._timeout_seconds = config.timeout_seconds
        self._base_url = config.api_url

        self._session = requests.Session()
        self._session.headers.update(
            {
                "Accept": "application/vnd.github+json",
                "Authorization": f"Bearer {config.token}",
                "X-GitHub-Api-Version": self._API_VERSION,
            }
        )

    def _build_url(self, path: str) -> str:
        """Build a fully qualified API URL from a path below the API root."""
        return f"{self._base_url}/{path.lstrip('/')}"

    def _format_datetime(self, value: datetime) -> str:
        """Format a datetime as UTC ISO8601 suitable for GitHub search qualifiers."""
        utc_value = value.astimezone(timezone.utc).replace(microsecond=0)
        return utc_value.isoformat().replace("+00:00", "Z")

    def _parse_datetime(self, value: Optional[str]) -> Optional[datetime]:
        """Parse GitHub ISO8601 timestamps into timezone-aware datetimes."""
        if not value:
            return None

        normalized = value[:-1] + "+00:00" if value.endswith("Z") else value
        parsed = datetime.fromisoformat(normalized)
        if parsed.tzinfo is None:
            return parsed.replace(tzinfo=timezone.utc)
        return parsed

    def _request(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        json: Optional[Dict[str, Any]] = None,
    ) -> requests.Response:
        """Execute a single HTTP request and map failures to benchmark errors.

        Raises:
            AuthenticationError: If GitHub rejects the token (HTTP 401).
            ApiError: If the transport fails or GitHub returns HTTP >= 400.
        """
        url = self._build_url(path)

        try:
            response = self._session.request(
                method,
                url,
                params=params,
                json=json,
                timeout=self._timeout_seconds,
            )
        except requests.RequestException as exc:
            raise ApiError(f"GitHub request failed: {method} {url}") from exc

        status_code = response.status_code
        if status_code == 401:
            raise AuthenticationError(
                f"GitHub rejected the configured token: {method} {url} returned 401"
            )

        if status_code >= 400:
            raise ApiError(
                "GitHub API request failed: "
                f"{method} {url} returned {status_code} - {response.text}"
            )

        return response

    def _get_json(self, path: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """Execute a GET request and return the decoded JSON object.

        Raises:
            ApiError: If the request fails or does not return a JSON object.
        """
        response = self._request("GET", path, params=params)
        url = self._build_url(path)

        try:
            payload = response.json()
        except ValueError as exc:
            raise ApiError(f"GitHub API returned invalid JSON: GET {url}") from exc

        if not isinstance(payload, dict):
            raise ApiError(f"GitHub API returned unexpected payload shape: GET {url}")

        return payload

    def _parse_run(self, item: Dict[str, Any]) -> WorkflowRun:
        run_id = item.get("id")
        path = item.get("path")
        status = item.get("status")
        created_at = self._parse_datetime(item.get("created_at"))
        updated_at = self._parse_datetime(item.get("updated_at"))

        if run_id is None or not path or not status or created_at is None or updated_at is None:
            raise ApiError(f"GitHub workflow run payload is missing required fields: payload={item}")

        conclusion = item.get("conclusion")
        return WorkflowRun(
            id=int(run_id),
            path=str(path),
            status=str(status),
            conclusion=str(conclusion) if conclusion else None,
            created_at=created_at,
            updated_at=updated_at,
        )

    def create_workflow_dispatch(
        self,
        owner: str,
        repo: str,
        workflow_file_name: str,
        ref: str,
        inputs: Optional[Mapping[str, str]] = None,
    ) -> requests.Response:
        """Request one new run of a workflow.

        GitHub acknowledges dispatches with ``204 No Content`` and does not
        return the identifier of the run it creates.
        """
        body: Dict[str, Any] = {"ref": ref}
        if inputs:
            body["inputs"] = dict(inputs)

        response = self._request(
            "POST",
            f"repos/{owner}/{repo}/actions/workflows/{workflow_file_name}/dispatches",
            json=body,
        )
        logger.debug(
            "Dispatched workflow",
            extra={"repo": f"{owner}/{repo}", "workflow": workflow_file_name, "ref": ref},
        )
        return response

    def list_workflow_runs(
        self,
        owner: str,
        repo: str,
        branch: str,
        created_after: datetime,
        event: str = "workflow_dispatch",
        workflow_file_name: Optional[str] = None,
    ) -> List[WorkflowRun]:
        """List repository workflow runs on ``branch`` created at or after ``created_after``.

        Only the first page of up to ``_RUN_PAGE_SIZE`` runs is requested;
        anything beyond it is not returned. When ``workflow_file_name`` is
        given, items of other workflow files are dropped before parsing, so a
        malformed payload from an unrelated workflow is never validated.
        """
        params: Dict[str, Any] = {
            "branch": branch,
            "event": event,
            "per_page": self._RUN_PAGE_SIZE,
            "created": f">={self._format_datetime(created_after)}",
        }
        payload = self._get_json(f"repos/{owner}/{repo}/actions/runs", params=params)

        items = payload.get("workflow_runs", [])
        if workflow_file_name:
            suffix = f"/{workflow_file_name}"
            items = [item for item in items if str(item.get("path") or "").endswith(suffix)]

        return [self._parse_run(item) for item in items]

    def get_workflow_run(self, owner: str, repo: str, run_id: int) -> WorkflowRun:
        """Fetch the current state of a single workflow run."""
        payload = self._get_json(f"repos/{owner}/{repo}/actions/runs/{run_id}")
        return self._parse_run(payload)
