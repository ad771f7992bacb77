"""
OAuth 2.0 module for Crowdin integration.

This module implements the OAuth 2.0 implicit-grant flow used to sign in
to Crowdin from a desktop application:
- The authorization page opens in the user's browser
- Crowdin redirects to a custom URI scheme with the access token
- The token is stored in the OS keyring and applied on the next start

Public API:
    CrowdinOAuthConfig: OAuth configuration management
    TokenStorage: Keyring-backed token persistence
    TokenManager: Token lifecycle and API endpoint routing
    OAuthCoordinator: Authorization handshake

Exceptions:
    CrowdinOAuthError: Base exception
    ConfigurationError: Configuration error
    AuthorizationError: Authorization flow error
    TokenStorageError: Storage operation failed
"""

from .config import CrowdinOAuthConfig
from .coordinator import OAuthCoordinator
from .exceptions import (
    AuthorizationError,
    ConfigurationError,
    CrowdinOAuthError,
    TokenStorageError,
)
from .token_manager import TokenManager, decode_token_domain
from .token_storage import TokenStorage

__all__ = [
    # Configuration
    "CrowdinOAuthConfig",
    # Token Storage
    "TokenStorage",
    # Token Manager
    "TokenManager",
    "decode_token_domain",
    # Coordinator
    "OAuthCoordinator",
    # Exceptions
    "CrowdinOAuthError",
    "ConfigurationError",
    "AuthorizationError",
    "TokenStorageError",
]
