"""Entry point wiring CLI arguments, configuration and the benchmark run."""

from __future__ import annotations

import logging
from typing import Optional, Sequence

from .benchmark import run_benchmark
from .cli import inputs_to_mapping, parse_args
from .config import load_config
from .errors import (
    ApiError,
    AuthenticationError,
    CompletionTimeoutError,
    ConfigurationError,
    RepositoryIdentityError,
)
from .github_client import GitHubClient
from .repository import parse_repository_slug, resolve_repository_identity
from .stats import generate_report

logger = logging.getLogger(__name__)

EXIT_SUCCESS = 0
EXIT_UNEXPECTED_ERROR = 1
EXIT_CONFIGURATION_ERROR = 2
EXIT_AUTHENTICATION_ERROR = 3
EXIT_API_ERROR = 4
EXIT_REPOSITORY_ERROR = 5
EXIT_TIMEOUT = 6
EXIT_INTERRUPTED = 130


def configure_logging(verbose: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def orchestrate_benchmark(argv: Optional[Sequence[str]] = None) -> int:
    """Run one benchmark end to end and map failures to exit codes.

    Returns:
        ``0`` on success, otherwise a non-zero code identifying the error class.
    """
    try:
        args = parse_args(argv)
        configure_logging(args.verbose)

        config = load_config(
            poll_interval_seconds=args.poll_interval,
            max_wait_seconds=args.max_wait,
        )
        client = GitHubClient(config=config)

        if args.repo:
            identity = parse_repository_slug(args.repo)
        else:
            identity = resolve_repository_identity()

        result = run_benchmark(
            client,
            identity,
            workflow_file_name=args.workflow,
            concurrent_executions=args.concurrent,
            ref=args.ref,
            config=config,
            inputs=inputs_to_mapping(args.inputs),
            track_run_ids=args.track_run_ids,
        )
    except ConfigurationError as exc:
        logger.error("Configuration error: %s", exc)
        return EXIT_CONFIGURATION_ERROR
    except AuthenticationError as exc:
        logger.error("Authentication error: %s", exc)
        return EXIT_AUTHENTICATION_ERROR
    except ApiError as exc:
        logger.error("GitHub API error: %s", exc)
        return EXIT_API_ERROR
    except RepositoryIdentityError as exc:
        logger.error("Repository error: %s", exc)
        return EXIT_REPOSITORY_ERROR
    except CompletionTimeoutError as exc:
        logger.error("Timed out waiting for workflow runs: %s", exc)
        return EXIT_TIMEOUT
    except KeyboardInterrupt:
        logger.error("Interrupted before all workflow runs completed.")
        return EXIT_INTERRUPTED
    except Exception:
        logger.exception("Unexpected error while running the benchmark")
        return EXIT_UNEXPECTED_ERROR

    print(generate_report(result))
    return EXIT_SUCCESS


def main() -> None:
    raise SystemExit(orchestrate_benchmark())


if __name__ == "__main__":
    main()
