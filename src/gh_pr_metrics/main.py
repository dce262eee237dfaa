"""Entry point for the GitHub PR review metrics reporter."""

from __future__ import annotations

import logging
import sys
from typing import List, Optional, Sequence, Tuple

from .cli import parse_args
from .config import load_config
from .errors import ApiError, ConfigurationError
from .github_client import GitHubClient
from .metrics import collect_repository_metrics
from .models import MetricSet
from .stats import generate_report

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_API_ERROR = 3


def configure_logging(verbose: bool = False) -> None:
    """Send log records to stderr, keeping stdout for the report."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def orchestrate_metrics_report(argv: Optional[Sequence[str]] = None) -> int:
    """Run the metrics pipeline for every configured repository.

    Repositories are processed one at a time, in the configured order, and
    the reports are printed once every repository has been collected. When
    no repository returned any closed PR only a notice is printed. A fatal
    API error aborts the remaining repositories and exits with ``3``; the
    earlier script logged such errors and still exited with ``0``.

    Returns:
        Process exit code: ``0`` on success, ``1`` for configuration errors
        (including a missing ``GITHUB_TOKEN``) and unexpected failures, ``3``
        for fatal GitHub API errors.
    """
    try:
        args = parse_args(argv)
        configure_logging(verbose=args.verbose)

        config = load_config(
            owner=args.owner,
            repositories=args.repositories,
            window_strategy=args.window,
            start_date=args.start_date,
            end_date=args.end_date,
            include_cycle_time=args.include_cycle_time,
            tolerate_missing_repository=args.tolerate_missing_repository,
            timeout_seconds=args.timeout,
        )

        github_client = GitHubClient(config=config)
        results: List[Tuple[str, MetricSet]] = []
        combined = MetricSet()

        for repo_name in config.repositories:
            print(f"Fetching closed PRs for repository '{config.owner}/{repo_name}'...")
            metric_set = collect_repository_metrics(github_client=github_client, config=config, repo_name=repo_name)
            results.append((repo_name, metric_set))
            combined = combined.merge(metric_set)

        if combined.pull_requests_fetched == 0:
            print("No pull requests found. Exiting.")
            return EXIT_OK

        for repo_name, metric_set in results:
            print(
                generate_report(
                    repo_name=repo_name,
                    metric_set=metric_set,
                    include_cycle_time=config.include_cycle_time,
                )
            )

        if len(config.repositories) > 1:
            print(
                generate_report(
                    repo_name="all repositories",
                    metric_set=combined,
                    include_cycle_time=config.include_cycle_time,
                )
            )

        return EXIT_OK
    except ConfigurationError as exc:
        logger.error("Error: %s", exc)
        return EXIT_FAILURE
    except ApiError as exc:
        logger.error("An error occurred: %s", exc, extra={"status_code": exc.status_code})
        return EXIT_API_ERROR
    except Exception:
        logger.exception("Unexpected error while generating the PR metrics report")
        return EXIT_FAILURE


def main() -> None:
    sys.exit(orchestrate_metrics_report())


if __name__ == "__main__":
    main()
