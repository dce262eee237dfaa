"""GitHub REST API client for pull request metrics retrieval."""

from __future__ import annotations

import logging
import re
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import requests

from .config import Config
from .errors import ApiError
from .models import PullRequest, Repository, Review

logger = logging.getLogger(__name__)

_NEXT_LINK_PATTERN = re.compile(r'<([^>]+)>; rel="next"')


def parse_next_link(link_header: Optional[str]) -> Optional[str]:
    """Return the ``rel="next"`` URL from a ``Link`` header, if any.

    A header that mentions ``rel="next"`` without a matching ``<URL>`` part
    yields ``None``, which ends pagination.
    """
    if not link_header or 'rel="next"' not in link_header:
        return None

    match = _NEXT_LINK_PATTERN.search(link_header)
    return match.group(1) if match else None


class GitHubClient:
    """Small, typed client for the GitHub pull request and review APIs.

    Requests are issued strictly one after another. There is no retry and no
    rate-limit pacing; any failure surfaces as :class:`ApiError`.
    """

    _API_VERSION = "2022-11-28"
    _BASE_URL = "https://api.github.com"
    _PULL_REQUEST_PAGE_SIZE = 100

    def __init__(self, config: Config) -> None:
        """Initialize an authenticated GitHub API client.

        Args:
            config: Validated runtime configuration including owner and token.
        """
        self._config = config
        self._timeout_seconds = config.timeout_seconds

        self._session = requests.Session()
        self._session.headers.update(
            {
                "Authorization": f"token {config.token}",
                "Accept": "application/vnd.github+json",
                "X-GitHub-Api-Version": self._API_VERSION,
            }
        )

    def _build_url(self, path: str) -> str:
        """Build a fully qualified API URL from a path below the API root."""
        return f"{self._BASE_URL}/{path.lstrip('/')}"

    def _parse_datetime(self, value: Optional[str]) -> Optional[datetime]:
        """Parse GitHub ISO8601 timestamps into timezone-aware datetimes."""
        if not value:
            return None

        normalized = value[:-1] + "+00:00" if value.endswith("Z") else value
        parsed = datetime.fromisoformat(normalized)
        if parsed.tzinfo is None:
            return parsed.replace(tzinfo=timezone.utc)
        return parsed

    def _get(self, url: str) -> requests.Response:
        """Execute a single GET request without retries.

        Returns the raw response for any status code so callers can decide how
        to treat 404s.

        Raises:
            ApiError: If the request cannot be sent or no response is received.
        """
        try:
            response = self._session.get(url, timeout=self._timeout_seconds)
        except requests.RequestException as exc:
            raise ApiError(f"GitHub request failed: GET {url}") from exc

        remaining = response.headers.get("X-RateLimit-Remaining")
        if remaining is not None:
            logger.debug("GitHub rate limit remaining", extra={"url": url, "remaining": remaining})

        return response

    def _raise_for_status(self, url: str, response: requests.Response) -> None:
        status_code = response.status_code
        if not 200 <= status_code < 300:
            raise ApiError(
                f"GitHub API request failed: GET {url} returned {status_code} - {response.text}",
                status_code=status_code,
            )

    def _decode(self, url: str, response: requests.Response) -> Any:
        try:
            return response.json()
        except ValueError as exc:
            raise ApiError(f"GitHub API returned invalid JSON: GET {url}") from exc

    def _decode_list(self, url: str, response: requests.Response) -> List[Dict[str, Any]]:
        payload = self._decode(url, response)
        if not isinstance(payload, list):
            raise ApiError(f"GitHub API returned unexpected payload shape: GET {url}")
        return payload

    def paginate(self, url: str, tolerate_not_found: bool = False) -> List[Dict[str, Any]]:
        """Collect every record of a paginated listing endpoint.

        Follows ``Link: <URL>; rel="next"`` continuation links until a page
        carries none. When ``tolerate_not_found`` is set, a 404 ends pagination
        and returns whatever was accumulated so far.

        Raises:
            ApiError: On any other non-success status or a malformed payload.
        """
        records: List[Dict[str, Any]] = []
        next_url: Optional[str] = url

        while next_url:
            response = self._get(next_url)

            if response.status_code == 404 and tolerate_not_found:
                logger.warning("Repository not found: %s", next_url, extra={"url": next_url})
                break

            self._raise_for_status(next_url, response)
            records.extend(self._decode_list(next_url, response))
            next_url = parse_next_link(response.headers.get("Link"))

        return records

    def list_closed_pull_requests(self, repo_name: str) -> List[PullRequest]:
        """List all closed pull requests of a repository owned by the configured owner."""
        url = self._build_url(
            f"repos/{self._config.owner}/{repo_name}/pulls"
            f"?state=closed&per_page={self._PULL_REQUEST_PAGE_SIZE}"
        )
        items = self.paginate(url, tolerate_not_found=self._config.tolerate_missing_repository)

        pull_requests: List[PullRequest] = []
        for item in items:
            number = item.get("number")
            created_at = self._parse_datetime(item.get("created_at"))

            if number is None or created_at is None:
                raise ApiError(
                    "GitHub pull request payload is missing required fields: "
                    f"repo={repo_name}, payload={item}"
                )

            head_repo = (item.get("head") or {}).get("repo") or {}
            pull_requests.append(
                PullRequest(
                    number=int(number),
                    created_at=created_at,
                    merged_at=self._parse_datetime(item.get("merged_at")),
                    source_repo_name=head_repo.get("name") or None,
                )
            )

        return pull_requests

    def list_reviews(self, repo_name: str, pr_number: int) -> Optional[List[Review]]:
        """List reviews for a pull request.

        Returns ``None`` when the reviews endpoint answers 404.

        Raises:
            ApiError: On any other non-success status.
        """
        url = self._build_url(f"repos/{self._config.owner}/{repo_name}/pulls/{pr_number}/reviews")
        response = self._get(url)

        if response.status_code == 404:
            return None

        self._raise_for_status(url, response)
        return [
            Review(submitted_at=self._parse_datetime(item.get("submitted_at")))
            for item in self._decode_list(url, response)
        ]

    def get_repository(self, repo_name: str) -> Repository:
        """Fetch repository metadata, including its creation timestamp."""
        url = self._build_url(f"repos/{self._config.owner}/{repo_name}")
        response = self._get(url)
        self._raise_for_status(url, response)

        payload = self._decode(url, response)
        if not isinstance(payload, dict):
            raise ApiError(f"GitHub API returned unexpected payload shape: GET {url}")

        created_at = self._parse_datetime(payload.get("created_at"))
        if created_at is None:
            raise ApiError(f"GitHub repository payload is missing 'created_at': repo={repo_name}")

        return Repository(name=str(payload.get("name") or repo_name), created_at=created_at)
