"""Configuration parsing and validation for the GitHub PR metrics reporter."""

from __future__ import annotations

import os
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional, Sequence, Tuple

from .errors import AuthenticationError, ConfigurationError

WINDOW_FIXED = "fixed"
WINDOW_REPOSITORY_LIFETIME = "repository-lifetime"
WINDOW_STRATEGIES = (WINDOW_FIXED, WINDOW_REPOSITORY_LIFETIME)

DEFAULT_START_DATE = datetime(2024, 1, 1, tzinfo=timezone.utc)
DEFAULT_END_DATE = datetime(2025, 2, 1, tzinfo=timezone.utc)


@dataclass(frozen=True)
class Config:
    """Validated runtime settings used by the metrics pipeline."""

    owner: str
    repositories: Tuple[str, ...]
    token: str
    window_strategy: str = WINDOW_FIXED
    start_date: Optional[datetime] = DEFAULT_START_DATE
    end_date: Optional[datetime] = DEFAULT_END_DATE
    include_cycle_time: bool = True
    tolerate_missing_repository: bool = True
    timeout_seconds: int = 30


def load_config(
    owner: str,
    repositories: Sequence[str],
    window_strategy: str = WINDOW_FIXED,
    start_date: Optional[datetime] = DEFAULT_START_DATE,
    end_date: Optional[datetime] = DEFAULT_END_DATE,
    include_cycle_time: bool = True,
    tolerate_missing_repository: bool = True,
    timeout_seconds: int = 30,
) -> Config:
    """Build and validate application configuration.

    Args:
        owner: GitHub user or organization owning the repositories.
        repositories: Repository names to analyze, in processing order.
        window_strategy: ``"fixed"`` for one global date window or
            ``"repository-lifetime"`` for a per-repository window.
        start_date: Inclusive window start, required for the fixed strategy.
        end_date: Inclusive window end, required for the fixed strategy.
        include_cycle_time: Whether review-cycle samples are collected.
        tolerate_missing_repository: Whether a 404 on a repository listing
            is skipped instead of aborting the run.
        timeout_seconds: Per-request timeout in seconds.

    Returns:
        A validated ``Config`` instance.

    Raises:
        ConfigurationError: If owner, repositories or the window are invalid.
        AuthenticationError: If ``GITHUB_TOKEN`` is not configured.
    """
    owner = owner.strip()
    if not owner:
        raise ConfigurationError("Missing repository owner: pass a GitHub user or organization name.")

    names = tuple(name.strip() for name in repositories if name.strip())
    if not names:
        raise ConfigurationError("No repositories configured: pass at least one repository name.")

    if window_strategy not in WINDOW_STRATEGIES:
        raise ConfigurationError(
            f"Invalid window strategy '{window_strategy}': expected one of {', '.join(WINDOW_STRATEGIES)}."
        )

    if window_strategy == WINDOW_FIXED:
        if start_date is None or end_date is None:
            raise ConfigurationError("The fixed window strategy requires both a start and an end date.")
        if start_date > end_date:
            raise ConfigurationError("Invalid date window: start date is after end date.")

    if timeout_seconds <= 0:
        raise ConfigurationError("Invalid value for 'timeout': expected an integer greater than 0.")

    token: str = os.getenv("GITHUB_TOKEN", "").strip()
    if not token:
        raise AuthenticationError(
            "Missing required GitHub token. "
            "Set the 'GITHUB_TOKEN' environment variable before running the metrics report."
        )

    return Config(
        owner=owner,
        repositories=names,
        token=token,
        window_strategy=window_strategy,
        start_date=start_date,
        end_date=end_date,
        include_cycle_time=include_cycle_time,
        tolerate_missing_repository=tolerate_missing_repository,
        timeout_seconds=timeout_seconds,
    )
