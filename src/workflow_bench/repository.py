"""Resolve the GitHub repository identity from local git remote configuration."""

from __future__ import annotations

import logging
import re
import subprocess
from pathlib import Path
from typing import Optional, Union

from .errors import NoOriginRemoteError, UnparsableRemoteUrlError
from .models import RepositoryIdentity

logger = logging.getLogger(__name__)

# git@github.com:owner/repo.git, ssh://git@github.com/owner/repo, https://github.com/owner/repo.git
_GITHUB_REMOTE_PATTERN = re.compile(r"github\.com[:/]([^/\s]+)/([^/\s]+?)(?:\.git)?/?$")
_OWNER_NAME_PATTERN = re.compile(r"^([^/\s]+)/([^/\s]+)$")


def get_origin_url(cwd: Optional[Union[str, Path]] = None) -> str:
    """Return the URL configured for the ``origin`` remote.

    Raises:
        NoOriginRemoteError: If git is unavailable, ``cwd`` is not a repository,
            or no ``origin`` remote is configured.
    """
    try:
        result = subprocess.run(
            ["git", "remote", "get-url", "origin"],
            cwd=cwd,
            capture_output=True,
            text=True,
            timeout=30,
        )
    except (OSError, subprocess.TimeoutExpired) as exc:
        raise NoOriginRemoteError(f"Unable to read git remotes: {exc}") from exc

    url = result.stdout.strip()
    if result.returncode != 0 or not url:
        raise NoOriginRemoteError(
            "No origin remote found. "
            'Make sure this is a Git repository with a remote named "origin".'
        )

    return url


def parse_remote_url(url: str) -> RepositoryIdentity:
    """Extract owner and repository name from a github.com remote URL.

    Raises:
        UnparsableRemoteUrlError: If ``url`` does not reference a github.com repository.
    """
    match = _GITHUB_REMOTE_PATTERN.search(url.strip())
    if not match:
        raise UnparsableRemoteUrlError(
            f"Could not parse GitHub repository information from the origin URL '{url}'."
        )

    return RepositoryIdentity(owner=match.group(1), name=match.group(2))


def parse_repository_slug(slug: str) -> RepositoryIdentity:
    """Parse an explicit ``owner/name`` repository slug."""
    match = _OWNER_NAME_PATTERN.match(slug.strip())
    if not match:
        raise UnparsableRemoteUrlError(
            f"Invalid repository '{slug}': expected the form 'owner/name'."
        )

    name = match.group(2)
    if name.endswith(".git"):
        name = name[: -len(".git")]
    return RepositoryIdentity(owner=match.group(1), name=name)


def resolve_repository_identity(cwd: Optional[Union[str, Path]] = None) -> RepositoryIdentity:
    """Derive the target repository from the ``origin`` remote of ``cwd``."""
    identity = parse_remote_url(get_origin_url(cwd))
    logger.debug("Resolved repository identity", extra={"repo": identity.full_name})
    return identity
