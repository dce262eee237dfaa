"""Domain models for GitHub pull request metrics.

These dataclasses intentionally model only the subset of API payload fields that
are required for the review and merge time calculations.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional


@dataclass(slots=True)
class Repository:
    """Represents the repository metadata needed for lifetime windows."""

    name: str
    created_at: datetime


@dataclass(slots=True)
class PullRequest:
    """Represents the minimal closed pull request data required for metrics.

    ``source_repo_name`` is ``None`` when the head repository (fork or branch)
    has been deleted.
    """

    number: int
    created_at: datetime
    merged_at: Optional[datetime]
    source_repo_name: Optional[str]


@dataclass(slots=True)
class Review:
    """Represents a submitted pull request review."""

    submitted_at: Optional[datetime]


@dataclass(frozen=True, slots=True)
class DateWindow:
    """Closed date range used to select pull requests by creation time."""

    start: datetime
    end: datetime

    def contains(self, value: datetime) -> bool:
        return self.start <= value <= self.end


@dataclass(slots=True)
class PullRequestMetrics:
    """Per-PR durations in seconds, kept only for diagnostics."""

    number: int
    review_time: Optional[float] = None
    merge_time: Optional[float] = None
    review_cycle_time: Optional[float] = None


@dataclass(slots=True)
class MetricSet:
    """Duration samples in seconds collected for one or more repositories.

    ``pull_requests_fetched`` counts the closed PRs listed, in or out of the
    window.
    """

    review_times: List[float] = field(default_factory=list)
    merge_times: List[float] = field(default_factory=list)
    review_cycle_times: List[float] = field(default_factory=list)
    pull_requests_fetched: int = 0

    def merge(self, other: MetricSet) -> MetricSet:
        """Return a new set holding the samples of both sets."""
        return MetricSet(
            review_times=self.review_times + other.review_times,
            merge_times=self.merge_times + other.merge_times,
            review_cycle_times=self.review_cycle_times + other.review_cycle_times,
            pull_requests_fetched=self.pull_requests_fetched + other.pull_requests_fetched,
        )
