"""
Token manager for Crowdin OAuth integration.

This module manages the bearer token lifecycle:
- Deriving the tenant API endpoint from the token payload
- Binding the shared API transport to the current token
- Persisting and deleting the token in the credential store
- Silent sign-in from a previously stored token
"""

import base64
import binascii
import json
import logging
from typing import TYPE_CHECKING, Optional

from .config import CrowdinOAuthConfig
from .exceptions import TokenStorageError
from .token_storage import TokenStorage

if TYPE_CHECKING:
    from src.crowdin.transport import CrowdinTransport

logger = logging.getLogger(__name__)


def decode_token_domain(token: str) -> str:
    """
    Extract the organization domain from a signed three-part token.

    Crowdin Enterprise tokens carry a "domain" claim in their payload
    segment; crowdin.com tokens do not.

    Args:
        token: Bearer token (header.payload.signature)

    Returns:
        Domain name, or empty string if the token carries none or cannot
        be decoded
    """
    payload = token.partition(".")[2].partition(".")[0]
    if not payload:
        return ""

    try:
        raw = base64.urlsafe_b64decode(payload + "=" * (-len(payload) % 4))
        claims = json.loads(raw.decode("utf-8"))
    except (binascii.Error, UnicodeDecodeError, ValueError) as e:
        logger.debug(f"Token payload is not decodable JSON: {e}")
        return ""

    domain = claims.get("domain") if isinstance(claims, dict) else None
    return domain if isinstance(domain, str) else ""


class TokenManager:
    """
    Manages the Crowdin bearer token.

    Responsibilities:
    - Keep the API transport pointed at the right tenant with the token attached
    - Persist the token so the next process start signs in silently
    - Clear credentials on sign-out (explicit or after a 401 response)
    """

    def __init__(
        self,
        config: CrowdinOAuthConfig,
        transport: "CrowdinTransport",
        storage: Optional[TokenStorage] = None,
    ):
        """
        Initialize token manager and sign in from a stored token if present.

        Args:
            config: OAuth configuration
            transport: Shared API transport rebound on every token change
            storage: Token storage (creates keyring storage if not provided)
        """
        self.config = config
        self.transport = transport
        self.storage = storage or TokenStorage(
            config.keyring_service, config.keyring_account
        )
        self._sign_in_if_authorized()

    @property
    def api_base_url(self) -> str:
        """Base URL the transport is currently bound to."""
        return self.transport.base_url

    def build_api_base_url(self, domain: str = "") -> str:
        """
        Build the API v2 base URL for a tenant domain.

        Args:
            domain: Organization domain (empty for crowdin.com)

        Returns:
            e.g. https://acme.crowdin.com/api/v2 or https://crowdin.com/api/v2
        """
        host = f"{domain}.{self.config.service_host}" if domain else self.config.service_host
        return f"https://{host}/api/v2"

    def set_token(self, token: str) -> None:
        """
        Bind the transport to the token's tenant endpoint with the token attached.

        Empty tokens are ignored.

        Args:
            token: Bearer token
        """
        if not token:
            return

        domain = decode_token_domain(token)
        base_url = self.build_api_base_url(domain)
        self.transport.rebind(base_url, token)
        logger.info(f"Authorized against {base_url}")

    def save_and_set_token(self, token: str) -> None:
        """
        Apply the token and persist it in the credential store.

        Args:
            token: Bearer token

        Raises:
            TokenStorageError: If the token cannot be persisted
        """
        self.set_token(token)
        self.storage.save(token)

    def sign_out(self) -> None:
        """
        Drop the token from the transport and the credential store.

        Requests started before this call may still complete with the old
        token or fail with an authorization error.
        """
        self.transport.clear_authorization()
        try:
            self.storage.delete()
        except TokenStorageError as e:
            logger.error(f"Signed out, but stored token could not be removed: {e}")
            raise
        logger.info("Signed out of Crowdin")

    def is_signed_in(self) -> bool:
        """
        Check whether a token is stored.

        Returns:
            True if the credential store holds a token, False otherwise
            (including when the store cannot be read)
        """
        try:
            return self.storage.exists()
        except TokenStorageError as e:
            logger.warning(f"Could not check stored token: {e}")
            return False

    def _sign_in_if_authorized(self) -> None:
        """Apply a previously stored token; store failures are not fatal."""
        try:
            token = self.storage.load()
        except TokenStorageError as e:
            logger.warning(f"Proceeding without stored token: {e}")
            return

        if token:
            self.set_token(token)
