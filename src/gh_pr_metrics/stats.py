"""Aggregation and formatting helpers for PR metrics reporting.

This module provides utilities for:
- Reducing duration samples to an arithmetic mean.
- Converting second-based durations to hours.
- Building a human-readable report of average review and merge times.
"""

from __future__ import annotations

from typing import List, Sequence

from .models import MetricSet

SECONDS_PER_HOUR = 3600


def calculate_average_time(samples: Sequence[float]) -> float:
    """Calculate the arithmetic mean of duration samples.

    An empty sequence yields ``0`` rather than an error so that reports can
    always format a numeric value.

    Args:
        samples: Duration samples in seconds.

    Returns:
        Mean duration in seconds, or ``0.0`` when ``samples`` is empty.
    """
    if not samples:
        return 0.0

    return sum(samples) / len(samples)


def seconds_to_hours(seconds: float) -> float:
    """Convert a duration in seconds to hours."""
    return seconds / SECONDS_PER_HOUR


def generate_report(repo_name: str, metric_set: MetricSet, include_cycle_time: bool = True) -> str:
    """Generate a human-readable average-time report for a repository.

    Each metric line reports the cumulative average in hours followed by the
    number of samples it was computed from.

    Args:
        repo_name: Repository display name.
        metric_set: Collected duration samples in seconds.
        include_cycle_time: Whether to add the review cycle line.

    Returns:
        Formatted multi-line text report.
    """
    rows = [
        ("pr first review", metric_set.review_times),
        ("pr merge", metric_set.merge_times),
    ]
    if include_cycle_time:
        rows.append(("pr review cycle", metric_set.review_cycle_times))

    lines: List[str] = [""]
    for label, samples in rows:
        average_hours = seconds_to_hours(calculate_average_time(samples))
        lines.append(
            f"Cumulative average time for {repo_name} {label}: {average_hours} hours "
            f"(samples: {len(samples)})"
        )

    return "\n".join(lines)
