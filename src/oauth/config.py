"""
OAuth configuration for Crowdin integration.

This module provides configuration management for the OAuth 2.0
implicit-grant flow used to sign in to Crowdin. Configuration can be
loaded from environment variables or provided programmatically.
"""

import os
from dataclasses import dataclass

from .exceptions import ConfigurationError


@dataclass
class CrowdinOAuthConfig:
    """
    Configuration for Crowdin OAuth 2.0 (implicit grant).

    The token is delivered straight to the application on a custom URI
    scheme, so no client secret or callback server is involved.

    Attributes:
        client_id: Crowdin OAuth application client ID
        scope: Requested OAuth scope
        redirect_uri: Registered custom-scheme callback prefix; must match
            the "Authorization Callback URL" of the Crowdin OAuth app exactly
        accounts_url: Crowdin accounts host serving /oauth/authorize
        service_host: Host the per-tenant API domain is derived from
        keyring_service: Credential store service name
        keyring_account: Credential store account name
        timeout: HTTP timeout in seconds for API calls
    """

    # Required - from the Crowdin OAuth application settings
    client_id: str

    scope: str = "project"
    redirect_uri: str = "crowdinsync://auth/crowdin/"

    # Crowdin endpoints
    accounts_url: str = "https://accounts.crowdin.com"
    service_host: str = "crowdin.com"

    # Credential store keys
    keyring_service: str = "Crowdin"
    keyring_account: str = "oauth-token"

    timeout: float = 30.0

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        if not self.client_id:
            raise ConfigurationError("client_id cannot be empty")

        if "://" not in self.redirect_uri:
            raise ConfigurationError(
                f"redirect_uri must be an absolute URI, got {self.redirect_uri!r}"
            )

        if not self.service_host:
            raise ConfigurationError("service_host cannot be empty")

        if not self.keyring_service:
            raise ConfigurationError("keyring_service cannot be empty")

        if self.timeout <= 0:
            raise ConfigurationError(f"timeout must be positive, got {self.timeout}")

    @property
    def authorize_url(self) -> str:
        """Crowdin OAuth authorization endpoint (without query string)."""
        return f"{self.accounts_url.rstrip('/')}/oauth/authorize"

    @classmethod
    def from_env(cls) -> "CrowdinOAuthConfig":
        """
        Load configuration from environment variables.

        Required environment variables:
            CROWDIN_CLIENT_ID: Crowdin OAuth application client ID

        Optional environment variables:
            CROWDIN_REDIRECT_URI: Custom-scheme callback (default: crowdinsync://auth/crowdin/)
            CROWDIN_ACCOUNTS_URL: Accounts host (default: https://accounts.crowdin.com)
            CROWDIN_SERVICE_HOST: API host (default: crowdin.com)
            CROWDIN_KEYRING_SERVICE: Keyring service name (default: Crowdin)
            CROWDIN_KEYRING_ACCOUNT: Keyring account name (default: oauth-token)
            CROWDIN_TIMEOUT: HTTP timeout in seconds (default: 30)

        Returns:
            CrowdinOAuthConfig instance

        Raises:
            ConfigurationError: If required environment variables are missing
                or a value cannot be parsed
        """
        client_id = os.environ.get("CROWDIN_CLIENT_ID")

        if not client_id:
            raise ConfigurationError(
                "Missing Crowdin OAuth client ID. Set environment variable:\n"
                "  CROWDIN_CLIENT_ID=your_client_id\n"
                "\n"
                "Create an OAuth app at: https://crowdin.com/settings#api-oauth"
            )

        try:
            timeout = float(os.environ.get("CROWDIN_TIMEOUT", "30"))
        except ValueError as e:
            raise ConfigurationError(f"CROWDIN_TIMEOUT must be a number: {e}") from e

        return cls(
            client_id=client_id,
            redirect_uri=os.environ.get(
                "CROWDIN_REDIRECT_URI", "crowdinsync://auth/crowdin/"
            ),
            accounts_url=os.environ.get(
                "CROWDIN_ACCOUNTS_URL", "https://accounts.crowdin.com"
            ),
            service_host=os.environ.get("CROWDIN_SERVICE_HOST", "crowdin.com"),
            keyring_service=os.environ.get("CROWDIN_KEYRING_SERVICE", "Crowdin"),
            keyring_account=os.environ.get("CROWDIN_KEYRING_ACCOUNT", "oauth-token"),
            timeout=timeout,
        )
