"""Configuration parsing and validation for the workflow benchmark."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

from .errors import AuthenticationError, ConfigurationError

DEFAULT_API_URL = "https://api.github.com"
DEFAULT_POLL_INTERVAL_SECONDS = 10


@dataclass(frozen=True)
class Config:
    """Validated runtime settings shared by the GitHub client and benchmark loop."""

    token: str
    api_url: str = DEFAULT_API_URL
    poll_interval_seconds: int = DEFAULT_POLL_INTERVAL_SECONDS
    max_wait_seconds: Optional[int] = None
    timeout_seconds: int = 30


def load_config(
    poll_interval_seconds: int = DEFAULT_POLL_INTERVAL_SECONDS,
    max_wait_seconds: Optional[int] = None,
) -> Config:
    """Build and validate application configuration.

    Args:
        poll_interval_seconds: Fixed delay between run listing polls.
        max_wait_seconds: Optional upper bound on the polling phase. ``None``
            polls until enough runs complete.

    Returns:
        A validated ``Config`` instance.

    Raises:
        ConfigurationError: If the poll interval or wait limit is not positive.
        AuthenticationError: If ``GITHUB_TOKEN`` is not configured.
    """
    if poll_interval_seconds <= 0:
        raise ConfigurationError(
            "Invalid value for 'poll_interval_seconds': expected an integer greater than 0."
        )

    if max_wait_seconds is not None and max_wait_seconds <= 0:
        raise ConfigurationError(
            "Invalid value for 'max_wait_seconds': expected an integer greater than 0."
        )

    token: str = os.getenv("GITHUB_TOKEN", "").strip()
    if not token:
        raise AuthenticationError(
            "Missing required GitHub token. "
            "Set the 'GITHUB_TOKEN' environment variable before running the benchmark."
        )

    api_url = os.getenv("GITHUB_API_URL", "").strip() or DEFAULT_API_URL

    return Config(
        token=token,
        api_url=api_url.rstrip("/"),
        poll_interval_seconds=poll_interval_seconds,
        max_wait_seconds=max_wait_seconds,
    )
