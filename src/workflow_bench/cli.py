"""Command-line argument parsing for the workflow benchmark."""

from __future__ import annotations

import argparse
from typing import Dict, List, Optional, Sequence

from . import __version__


def _positive_int(value: str) -> int:
    """Parse and validate a positive integer CLI value.

    Args:
        value: Raw command-line argument value.

    Returns:
        The validated positive integer.

    Raises:
        argparse.ArgumentTypeError: If value is not a positive integer.
    """
    try:
        parsed = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError("must be an integer") from exc

    if parsed <= 0:
        raise argparse.ArgumentTypeError("must be greater than 0")

    return parsed


def _workflow_input(value: str) -> str:
    key, separator, _ = value.partition("=")
    if not separator or not key.strip():
        raise argparse.ArgumentTypeError("must have the form KEY=VALUE with a non-empty KEY")
    return value


def inputs_to_mapping(pairs: List[str]) -> Dict[str, str]:
    """Turn repeated ``KEY=VALUE`` flags into a dispatch inputs mapping."""
    inputs: Dict[str, str] = {}
    for pair in pairs:
        key, _, value = pair.partition("=")
        inputs[key.strip()] = value
    return inputs


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments for a benchmark invocation.

    Returns:
        Parsed CLI arguments containing the workflow file, concurrency count,
        git reference and polling options.
    """
    parser = argparse.ArgumentParser(
        prog="workflow-bench",
        description=(
            "Dispatch a GitHub Actions workflow several times at once and report "
            "execution latency statistics once the runs complete."
        ),
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "-w",
        "--workflow",
        required=True,
        help="Workflow file name, e.g. bench.yml.",
    )
    parser.add_argument(
        "-c",
        "--concurrent",
        required=True,
        type=_positive_int,
        help="Number of concurrent executions to trigger.",
    )
    parser.add_argument(
        "-r",
        "--ref",
        default="main",
        help="Git reference to use for triggering workflows (default: main).",
    )
    parser.add_argument(
        "--repo",
        default=None,
        help="Repository as OWNER/NAME (default: derived from the origin remote).",
    )
    parser.add_argument(
        "--input",
        dest="inputs",
        action="append",
        type=_workflow_input,
        default=[],
        metavar="KEY=VALUE",
        help="Workflow dispatch input (repeatable).",
    )
    parser.add_argument(
        "--poll-interval",
        type=_positive_int,
        default=10,
        help="Seconds to wait between polls for completed runs (default: 10).",
    )
    parser.add_argument(
        "--max-wait",
        type=_positive_int,
        default=None,
        help="Give up after this many seconds of polling (default: wait indefinitely).",
    )
    parser.add_argument(
        "--track-run-ids",
        action="store_true",
        help="Accumulate observed run ids across polls instead of counting the latest snapshot.",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable debug logging.",
    )

    return parser.parse_args(argv)
