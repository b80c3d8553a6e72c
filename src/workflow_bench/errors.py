"""Custom exception types for the workflow benchmark."""


class WorkflowBenchError(Exception):
    """Base exception for all workflow benchmark errors."""


class ConfigurationError(WorkflowBenchError):
    """Raised when runtime configuration values are missing or invalid."""


class AuthenticationError(WorkflowBenchError):
    """Raised when GitHub credentials are unavailable or rejected."""


class ApiError(WorkflowBenchError):
    """Raised when a GitHub API request fails or returns an unexpected response."""


class DataValidationError(WorkflowBenchError):
    """Raised when run payloads or duration samples do not meet expected constraints."""


class RepositoryIdentityError(WorkflowBenchError):
    """Raised when the target repository cannot be derived from local git metadata."""


class NoOriginRemoteError(RepositoryIdentityError):
    """Raised when the local repository has no remote named ``origin``."""


class UnparsableRemoteUrlError(RepositoryIdentityError):
    """Raised when the origin URL does not point at a github.com repository."""


class CompletionTimeoutError(WorkflowBenchError):
    """Raised when the required number of runs did not finish within the wait limit."""

    def __init__(self, message: str, observed: int, required: int) -> None:
        super().__init__(message)
        self.observed = observed
        self.required = required
