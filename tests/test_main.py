"""Tests for application orchestration in the main module."""

import sys
from argparse import Namespace
from pathlib import Path
from unittest.mock import Mock, patch

import pytest

# Add src directory to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from gh_pr_metrics.config import Config
from gh_pr_metrics.errors import ApiError, AuthenticationError
from gh_pr_metrics.main import orchestrate_metrics_report
from gh_pr_metrics.models import MetricSet


def _args(repositories=("repo",), **overrides) -> Namespace:
    values = {
        "owner": "octo",
        "repositories": list(repositories),
        "window": "fixed",
        "start_date": None,
        "end_date": None,
        "include_cycle_time": True,
        "tolerate_missing_repository": True,
        "timeout": 30,
        "verbose": False,
    }
    values.update(overrides)
    return Namespace(**values)


def _config(repositories=("repo",)) -> Config:
    return Config(owner="octo", repositories=tuple(repositories), token="secret")


def test_orchestrate_metrics_report_success(capsys):
    """Verify orchestration returns 0 and wires components correctly on success."""
    args = _args()
    config = _config()
    github_client = Mock()
    metric_set = MetricSet(
        review_times=[86400.0],
        merge_times=[172800.0],
        review_cycle_times=[86400.0],
        pull_requests_fetched=2,
    )

    with patch("gh_pr_metrics.main.parse_args", return_value=args) as parse_args_mock, patch(
        "gh_pr_metrics.main.load_config", return_value=config
    ) as load_config_mock, patch(
        "gh_pr_metrics.main.GitHubClient", return_value=github_client
    ) as client_ctor_mock, patch(
        "gh_pr_metrics.main.collect_repository_metrics", return_value=metric_set
    ) as collect_mock:
        exit_code = orchestrate_metrics_report()

    assert exit_code == 0
    parse_args_mock.assert_called_once_with(None)
    load_config_mock.assert_called_once_with(
        owner="octo",
        repositories=["repo"],
        window_strategy="fixed",
        start_date=None,
        end_date=None,
        include_cycle_time=True,
        tolerate_missing_repository=True,
        timeout_seconds=30,
    )
    client_ctor_mock.assert_called_once_with(config=config)
    collect_mock.assert_called_once_with(github_client=github_client, config=config, repo_name="repo")

    output = capsys.readouterr().out
    assert "Cumulative average time for repo pr first review: 24.0 hours" in output
    assert "Cumulative average time for repo pr merge: 48.0 hours" in output
    assert "Cumulative average time for repo pr review cycle: 24.0 hours" in output
    assert "all repositories" not in output


def test_orchestrate_metrics_report_multiple_repositories_prints_combined_summary(capsys):
    """Verify repositories are processed in order and summarized together."""
    config = _config(repositories=("one", "two"))
    first = MetricSet(merge_times=[3600.0], pull_requests_fetched=1)
    second = MetricSet(merge_times=[10800.0], pull_requests_fetched=1)

    with patch("gh_pr_metrics.main.parse_args", return_value=_args(("one", "two"))), patch(
        "gh_pr_metrics.main.load_config", return_value=config
    ), patch("gh_pr_metrics.main.GitHubClient", return_value=Mock()), patch(
        "gh_pr_metrics.main.collect_repository_metrics", side_effect=[first, second]
    ) as collect_mock:
        exit_code = orchestrate_metrics_report()

    assert exit_code == 0
    assert [call.kwargs["repo_name"] for call in collect_mock.call_args_list] == ["one", "two"]
    output = capsys.readouterr().out
    assert output.index("for one pr merge") < output.index("for two pr merge")
    assert "Cumulative average time for all repositories pr merge: 2.0 hours (samples: 2)" in output


def test_orchestrate_metrics_report_without_any_pull_requests_prints_notice(capsys):
    """Verify a run where no repository returned closed PRs prints a notice instead of reports."""
    config = _config(repositories=("one", "two"))

    with patch("gh_pr_metrics.main.parse_args", return_value=_args(("one", "two"))), patch(
        "gh_pr_metrics.main.load_config", return_value=config
    ), patch("gh_pr_metrics.main.GitHubClient", return_value=Mock()), patch(
        "gh_pr_metrics.main.collect_repository_metrics", side_effect=[MetricSet(), MetricSet()]
    ) as collect_mock:
        exit_code = orchestrate_metrics_report()

    assert exit_code == 0
    assert collect_mock.call_count == 2
    output = capsys.readouterr().out
    assert "No pull requests found. Exiting." in output
    assert "Cumulative average time" not in output


def test_orchestrate_metrics_report_missing_token_returns_exit_code_one():
    """Verify a missing GITHUB_TOKEN stops the run before any client is created."""
    with patch("gh_pr_metrics.main.parse_args", return_value=_args()), patch(
        "gh_pr_metrics.main.load_config",
        side_effect=AuthenticationError("Missing required GitHub token."),
    ), patch("gh_pr_metrics.main.GitHubClient") as client_ctor_mock:
        exit_code = orchestrate_metrics_report()

    assert exit_code == 1
    client_ctor_mock.assert_not_called()


def test_orchestrate_metrics_report_missing_token_from_environment(monkeypatch):
    """Verify the real configuration path maps a missing token to exit code 1."""
    monkeypatch.delenv("GITHUB_TOKEN", raising=False)

    with patch("gh_pr_metrics.main.GitHubClient") as client_ctor_mock:
        exit_code = orchestrate_metrics_report(["--owner", "octo", "--repo", "repo"])

    assert exit_code == 1
    client_ctor_mock.assert_not_called()


def test_orchestrate_metrics_report_api_error_returns_api_exit_code(caplog):
    """Verify fatal GitHub API failures abort the run with the API error exit code."""
    config = _config(repositories=("one", "two"))

    with patch("gh_pr_metrics.main.parse_args", return_value=_args(("one", "two"))), patch(
        "gh_pr_metrics.main.load_config", return_value=config
    ), patch("gh_pr_metrics.main.GitHubClient", return_value=Mock()), patch(
        "gh_pr_metrics.main.collect_repository_metrics",
        side_effect=ApiError("GitHub API request failed", status_code=502),
    ) as collect_mock:
        exit_code = orchestrate_metrics_report()

    assert exit_code == 3
    assert collect_mock.call_count == 1
    assert "GitHub API request failed" in caplog.text


def test_orchestrate_metrics_report_unexpected_error_returns_generic_exit_code():
    """Verify unexpected exceptions are mapped to the generic non-zero exit code."""
    with patch("gh_pr_metrics.main.parse_args", side_effect=RuntimeError("boom")):
        exit_code = orchestrate_metrics_report()

    assert exit_code == 1


def test_orchestrate_metrics_report_usage_error_exits():
    """Verify argparse usage errors are not swallowed."""
    with pytest.raises(SystemExit):
        orchestrate_metrics_report(["--owner", "octo"])
