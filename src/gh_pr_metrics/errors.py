"""Custom exception types for the GitHub PR metrics reporter."""

from __future__ import annotations

from typing import Optional


class PRMetricsError(Exception):
    """Base exception for all PR metrics reporter errors."""


class ConfigurationError(PRMetricsError):
    """Raised when runtime configuration values are missing or invalid."""


class AuthenticationError(ConfigurationError):
    """Raised when the GitHub token is not available in the environment."""


class ApiError(PRMetricsError):
    """Raised when a GitHub API request fails or returns an unexpected response.

    ``status_code`` holds the HTTP status when the failure came from a response,
    and is ``None`` for transport errors or malformed payloads.
    """

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code
