"""
Credential storage for Crowdin OAuth integration.

This module persists the Crowdin bearer token in the operating system's
secure credential store (macOS Keychain, Windows Credential Locker or
Linux Secret Service) through the keyring library. Exactly one token is
stored per (service, account) pair.
"""

import logging
from typing import Optional

import keyring
from keyring.errors import KeyringError, PasswordDeleteError

from .exceptions import TokenStorageError

logger = logging.getLogger(__name__)


class TokenStorage:
    """
    Keyring-backed token storage.

    Provides get/set/delete-by-key semantics over a fixed service and
    account name. Backend failures are wrapped in TokenStorageError so
    callers can decide whether they are fatal.
    """

    def __init__(self, service: str, account: str):
        """
        Initialize token storage.

        Args:
            service: Keyring service name (e.g., "Crowdin")
            account: Keyring account name under that service
        """
        self.service = service
        self.account = account

    def save(self, token: str) -> None:
        """
        Save token to the credential store, replacing any previous value.

        Args:
            token: Bearer token to persist

        Raises:
            TokenStorageError: If the keyring backend fails
        """
        try:
            keyring.set_password(self.service, self.account, token)
            logger.info(f"Token saved to keyring (service={self.service})")
        except KeyringError as e:
            logger.error(f"Failed to save token: {e}")
            raise TokenStorageError(f"Failed to save token: {e}") from e

    def load(self) -> Optional[str]:
        """
        Load token from the credential store.

        Returns:
            Stored token, or None if nothing is stored

        Raises:
            TokenStorageError: If the keyring backend fails
        """
        try:
            token = keyring.get_password(self.service, self.account)
        except KeyringError as e:
            logger.warning(f"Could not read token from keyring: {e}")
            raise TokenStorageError(f"Failed to load token: {e}") from e

        if token is None:
            logger.debug(f"No token stored for service {self.service}")
        return token

    def delete(self) -> bool:
        """
        Delete stored token.

        Returns:
            True if a token was deleted, False if none was stored

        Raises:
            TokenStorageError: If the keyring backend fails
        """
        try:
            keyring.delete_password(self.service, self.account)
        except PasswordDeleteError:
            logger.debug(f"No token to delete for service {self.service}")
            return False
        except KeyringError as e:
            logger.error(f"Failed to delete token: {e}")
            raise TokenStorageError(f"Failed to delete token: {e}") from e

        logger.info(f"Token deleted from keyring (service={self.service})")
        return True

    def exists(self) -> bool:
        """
        Check if a token is stored.

        Returns:
            True if a token is stored, False otherwise
        """
        return self.load() is not None
