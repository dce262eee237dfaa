"""Command-line argument parsing for the GitHub PR metrics reporter."""

from __future__ import annotations

import argparse
from datetime import datetime, timezone
from typing import Optional, Sequence

from .config import DEFAULT_END_DATE, DEFAULT_START_DATE, WINDOW_FIXED, WINDOW_STRATEGIES


def _positive_int(value: str) -> int:
    """Parse and validate a positive integer CLI value.

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


def _utc_datetime(value: str) -> datetime:
    """Parse an ISO8601 date or datetime CLI value as a UTC-aware datetime.

    Values without an offset are interpreted as UTC; ``Z`` suffixes are
    accepted.

    Raises:
        argparse.ArgumentTypeError: If value is not an ISO8601 date/datetime.
    """
    normalized = value[:-1] + "+00:00" if value.endswith("Z") else value
    try:
        parsed = datetime.fromisoformat(normalized)
    except ValueError as exc:
        raise argparse.ArgumentTypeError("must be an ISO8601 date such as 2024-01-31") from exc

    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments for the metrics report.

    Returns:
        Parsed CLI arguments containing the owner, repositories, window
        strategy and dates, and pipeline switches.
    """
    parser = argparse.ArgumentParser(
        prog="github-pr-metrics",
        description=(
            "Report average GitHub pull-request review and merge times per repository "
            "(time to first review, time to merge, review cycle time). "
            "Reads the API token from the GITHUB_TOKEN environment variable."
        ),
    )

    parser.add_argument(
        "--owner",
        required=True,
        help="GitHub user or organization that owns the repositories.",
    )
    parser.add_argument(
        "--repo",
        dest="repositories",
        action="append",
        required=True,
        help="Repository name to analyze (repeatable).",
    )
    parser.add_argument(
        "--window",
        choices=WINDOW_STRATEGIES,
        default=WINDOW_FIXED,
        help=(
            "Creation-date window: 'fixed' uses --start-date/--end-date for all repositories, "
            "'repository-lifetime' spans from each repository's creation to now (default: fixed)."
        ),
    )
    parser.add_argument(
        "--start-date",
        type=_utc_datetime,
        default=DEFAULT_START_DATE,
        help=(
            "Inclusive window start for the fixed window (default: 2024-01-01). "
            "A date without a time means midnight UTC."
        ),
    )
    parser.add_argument(
        "--end-date",
        type=_utc_datetime,
        default=DEFAULT_END_DATE,
        help=(
            "Inclusive window end for the fixed window (default: 2025-02-01). "
            "A date without a time means midnight UTC, so PRs created later that day are excluded."
        ),
    )
    parser.add_argument(
        "--no-cycle-time",
        dest="include_cycle_time",
        action="store_false",
        help="Do not compute the review cycle time (first review to merge).",
    )
    parser.add_argument(
        "--fail-on-missing-repo",
        dest="tolerate_missing_repository",
        action="store_false",
        help="Abort the run when a repository returns 404 instead of skipping it.",
    )
    parser.add_argument(
        "--timeout",
        type=_positive_int,
        default=30,
        help="Per-request timeout in seconds (default: 30).",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable debug logging, including per-PR durations.",
    )

    return parser.parse_args(argv)
