"""
OAuth exception classes for Crowdin integration.

This module defines the exception hierarchy for OAuth and credential
storage errors. Callback validation failures are deliberately not part
of this hierarchy: a rejected callback is dropped, never raised.
"""


class CrowdinOAuthError(Exception):
    """Base exception for all Crowdin OAuth errors."""

    pass


class ConfigurationError(CrowdinOAuthError):
    """OAuth configuration error (missing or invalid configuration)."""

    pass


class AuthorizationError(CrowdinOAuthError):
    """OAuth authorization flow error."""

    pass


class TokenStorageError(CrowdinOAuthError):
    """Credential store operation failed (keyring backend error)."""

    pass
