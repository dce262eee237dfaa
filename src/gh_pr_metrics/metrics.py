"""Metric extraction logic for GitHub pull request review metrics.

This module computes PR-level duration samples in seconds for three metrics:
- time to first review (creation to first submitted review)
- time to merge (creation to merge)
- review cycle time (first submitted review to merge)
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Iterable, List, Optional

from .config import WINDOW_FIXED, WINDOW_REPOSITORY_LIFETIME, Config
from .errors import ConfigurationError
from .github_client import GitHubClient
from .models import DateWindow, MetricSet, PullRequest, PullRequestMetrics, Review

logger = logging.getLogger(__name__)


def _duration(start: datetime, end: datetime, pr_number: int, metric: str) -> Optional[float]:
    """Return ``end - start`` in seconds, or ``None`` for a negative duration."""
    duration_seconds = (end - start).total_seconds()
    if duration_seconds < 0:
        logger.warning(
            "Discarding negative %s for PR #%s (%.0f seconds)",
            metric,
            pr_number,
            duration_seconds,
            extra={"pr_number": pr_number, "duration_seconds": duration_seconds},
        )
        return None
    return duration_seconds


def _log_pr_metrics(details: PullRequestMetrics) -> None:
    logger.debug(
        "PR #%s: review=%s merge=%s review_cycle=%s (seconds)",
        details.number,
        details.review_time,
        details.merge_time,
        details.review_cycle_time,
        extra={"pr_metrics": details},
    )


def compute_merge_time(pr: PullRequest) -> Optional[float]:
    """Compute PR merge time (creation to merge) in seconds.

    Returns ``None`` for PRs closed without merging.
    """
    if pr.merged_at is None:
        return None
    return _duration(pr.created_at, pr.merged_at, pr.number, "merge time")


def find_first_review(reviews: Iterable[Review]) -> Optional[Review]:
    """Return the earliest submitted review.

    The upstream ordering is not relied upon: reviews are sorted by
    ``submitted_at`` and those without a submission time are ignored.
    """
    submitted = sorted(
        (review for review in reviews if review.submitted_at is not None),
        key=lambda review: review.submitted_at,
    )
    return submitted[0] if submitted else None


def resolve_window(
    github_client: GitHubClient,
    config: Config,
    repo_name: str,
    now: Optional[datetime] = None,
) -> DateWindow:
    """Select the creation-date window for a repository.

    ``fixed`` uses the configured start and end dates for every repository.
    ``repository-lifetime`` spans from the repository creation to ``now``,
    which costs one repository metadata request.
    """
    if config.window_strategy == WINDOW_FIXED:
        if config.start_date is None or config.end_date is None:
            raise ConfigurationError("The fixed window strategy requires both a start and an end date.")
        return DateWindow(start=config.start_date, end=config.end_date)

    if config.window_strategy == WINDOW_REPOSITORY_LIFETIME:
        repository = github_client.get_repository(repo_name)
        return DateWindow(start=repository.created_at, end=now or datetime.now(timezone.utc))

    raise ConfigurationError(f"Unknown window strategy '{config.window_strategy}'.")


def collect_metrics(
    github_client: GitHubClient,
    prs: List[PullRequest],
    window: DateWindow,
    include_cycle_time: bool = True,
) -> MetricSet:
    """Collect per-PR samples for PRs created inside ``window``.

    Business logic:
    - PRs created outside the window are ignored entirely.
    - A merge sample is recorded whenever ``merged_at`` is present.
    - PRs without a source repository name get no review lookup.
    - A 404 from the reviews endpoint skips that PR's review metrics only.
    - Review-cycle samples need both a first review and a merge.

    Any other API failure propagates as ``ApiError`` and aborts collection.
    """
    metric_set = MetricSet()
    prs_in_window = 0
    prs_without_source_repo = 0
    prs_without_reviews = 0

    for pr in prs:
        if not window.contains(pr.created_at):
            continue
        prs_in_window += 1

        details = PullRequestMetrics(number=pr.number)

        merge_time = compute_merge_time(pr)
        if merge_time is not None:
            metric_set.merge_times.append(merge_time)
            details.merge_time = merge_time

        if not pr.source_repo_name:
            prs_without_source_repo += 1
            logger.warning(
                "Repo name not found for PR #%s. Skipping reviews.",
                pr.number,
                extra={"pr_number": pr.number},
            )
            _log_pr_metrics(details)
            continue

        reviews = github_client.list_reviews(pr.source_repo_name, pr.number)
        if reviews is None:
            logger.warning(
                "Reviews not found for PR #%s in %s",
                pr.number,
                pr.source_repo_name,
                extra={"pr_number": pr.number, "repo_name": pr.source_repo_name},
            )
            _log_pr_metrics(details)
            continue

        first_review = find_first_review(reviews)
        if first_review is None or first_review.submitted_at is None:
            prs_without_reviews += 1
            _log_pr_metrics(details)
            continue

        review_time = _duration(pr.created_at, first_review.submitted_at, pr.number, "review time")
        if review_time is not None:
            metric_set.review_times.append(review_time)
            details.review_time = review_time

        if include_cycle_time and pr.merged_at is not None:
            cycle_time = _duration(first_review.submitted_at, pr.merged_at, pr.number, "review cycle time")
            if cycle_time is not None:
                metric_set.review_cycle_times.append(cycle_time)
                details.review_cycle_time = cycle_time

        _log_pr_metrics(details)

    logger.info(
        "Collected PR metric samples: %s of %s PRs in window, "
        "review=%s merge=%s review_cycle=%s, without source repo=%s, without reviews=%s",
        prs_in_window,
        len(prs),
        len(metric_set.review_times),
        len(metric_set.merge_times),
        len(metric_set.review_cycle_times),
        prs_without_source_repo,
        prs_without_reviews,
        extra={
            "prs_total": len(prs),
            "prs_in_window": prs_in_window,
            "review_samples": len(metric_set.review_times),
            "merge_samples": len(metric_set.merge_times),
            "review_cycle_samples": len(metric_set.review_cycle_times),
            "prs_without_source_repo": prs_without_source_repo,
            "prs_without_reviews": prs_without_reviews,
        },
    )

    return metric_set


def collect_repository_metrics(
    github_client: GitHubClient,
    config: Config,
    repo_name: str,
    now: Optional[datetime] = None,
) -> MetricSet:
    """Run the full pipeline for one repository: pagination, window, extraction.

    The window is only resolved when the repository has closed PRs, so a
    repository skipped as missing never triggers a metadata request.
    """
    prs = github_client.list_closed_pull_requests(repo_name)
    logger.info("Fetched %s closed pull requests for %s", len(prs), repo_name, extra={"repo_name": repo_name})
    if not prs:
        return MetricSet()

    window = resolve_window(github_client, config, repo_name, now=now)
    logger.debug(
        "Using creation window for %s: %s .. %s",
        repo_name,
        window.start.isoformat(),
        window.end.isoformat(),
        extra={"repo_name": repo_name, "window_start": window.start, "window_end": window.end},
    )
    metric_set = collect_metrics(
        github_client=github_client,
        prs=prs,
        window=window,
        include_cycle_time=config.include_cycle_time,
    )
    metric_set.pull_requests_fetched = len(prs)
    return metric_set
