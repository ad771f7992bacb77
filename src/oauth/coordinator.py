"""
OAuth coordinator for the Crowdin implicit-grant flow.

The flow has two states. ``authenticate()`` opens the Crowdin
authorization page in the user's browser and parks a future in the
single pending slot (AwaitingCallback). Crowdin then redirects to the
application's custom URI scheme with the token in the URI; the host
routes that URI to ``handle_oauth_callback()``, which validates it,
stores the token and resolves the future (back to Idle).

Callbacks that do not match the pending request are dropped silently so
that a forged or stale redirect cannot be told apart from noise.
"""

import asyncio
import logging
import re
import secrets
import webbrowser
from typing import Optional
from urllib.parse import urlencode

from .config import CrowdinOAuthConfig
from .exceptions import TokenStorageError
from .token_manager import TokenManager

logger = logging.getLogger(__name__)

# Parameters arrive URL-encoded in the query or the fragment, so they are
# matched on the raw string rather than parsed as a structured URI.
_STATE_RE = re.compile(r"state=([^&#]+)")
_ACCESS_TOKEN_RE = re.compile(r"access_token=([^&#]+)")


class OAuthCoordinator:
    """
    Drives the implicit-grant handshake.

    Example:
        coordinator = OAuthCoordinator(config, token_manager)
        pending = coordinator.authenticate()
        ...  # host later calls coordinator.handle_oauth_callback(uri)
        await pending
    """

    def __init__(self, config: CrowdinOAuthConfig, token_manager: TokenManager):
        """
        Initialize OAuth coordinator.

        Args:
            config: OAuth configuration
            token_manager: Receives the token once a callback is accepted
        """
        self.config = config
        self.token_manager = token_manager
        self.authorization_url: Optional[str] = None
        self._pending: Optional["asyncio.Future[None]"] = None
        self._state: Optional[str] = None

    @property
    def is_awaiting_callback(self) -> bool:
        """True while an authentication request is pending."""
        return self._pending is not None

    def generate_authorization_url(self, state: str) -> str:
        """
        Generate the Crowdin authorization URL.

        Args:
            state: Anti-forgery nonce echoed back in the callback

        Returns:
            Complete authorization URL with query parameters
        """
        params = {
            "response_type": "token",
            "scope": self.config.scope,
            "client_id": self.config.client_id,
            "state": state,
            "redirect_uri": self.config.redirect_uri,
        }
        return f"{self.config.authorize_url}?{urlencode(params)}"

    def authenticate(self) -> "asyncio.Future[None]":
        """
        Start the authorization flow in the user's browser.

        Any request still pending is discarded (its future is cancelled).
        Must be called from a running event loop.

        Returns:
            Future resolved when a matching callback has been handled
        """
        if self._pending is not None:
            logger.info("Discarding previous pending authentication request")
            self._pending.cancel()

        self._state = secrets.token_hex(16)
        self._pending = asyncio.get_running_loop().create_future()
        self.authorization_url = self.generate_authorization_url(self._state)

        logger.info("Opening browser for Crowdin authorization")
        if not webbrowser.open(self.authorization_url):
            logger.warning("Could not open browser automatically")

        return self._pending

    def is_oauth_callback(self, uri: str) -> bool:
        """
        Check whether a URI is addressed to this flow.

        Args:
            uri: URI delivered to the application

        Returns:
            True if it starts with the registered redirect URI
        """
        return uri.startswith(self.config.redirect_uri)

    def handle_oauth_callback(self, uri: str) -> None:
        """
        Complete the pending authentication from a callback URI.

        Does nothing unless a request is pending, the ``state`` parameter
        matches the one issued by ``authenticate()`` and an
        ``access_token`` parameter is present.

        A token that cannot be persisted fails the pending future with
        TokenStorageError instead of raising to the caller.

        Args:
            uri: Callback URI
        """
        if self._pending is None:
            logger.debug("Ignoring OAuth callback: no pending request")
            return

        state = _STATE_RE.search(uri)
        token = _ACCESS_TOKEN_RE.search(uri)
        if not state or state.group(1) != self._state or not token:
            logger.debug("Ignoring OAuth callback that does not match the pending request")
            return

        pending = self._pending
        self._pending = None
        self._state = None

        try:
            self.token_manager.save_and_set_token(token.group(1))
        except TokenStorageError as e:
            logger.error(f"Authorization succeeded but token was not saved: {e}")
            if not pending.done():
                pending.set_exception(e)
            return

        if not pending.done():
            pending.set_result(None)
        logger.info("Crowdin authorization complete")
