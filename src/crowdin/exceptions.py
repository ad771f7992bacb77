"""Exceptions for Crowdin API client."""

from typing import Optional


class CrowdinAPIError(Exception):
    """Base exception for Crowdin API errors."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        """Initialize API error.

        Args:
            message: Human-readable error message
            status_code: HTTP status code if applicable
        """
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class CrowdinAuthenticationError(CrowdinAPIError):
    """
    Authentication failure with Crowdin API (HTTP 401).

    The stored token has already been discarded when this is raised;
    the user needs to sign in again.
    """

    pass


class CrowdinResponseError(CrowdinAPIError):
    """Response body is not JSON or lacks a required field."""

    pass
