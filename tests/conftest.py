"""Shared fixtures for OAuth and Crowdin client tests."""

import base64
import json
from typing import Callable, List, Optional

import pytest

from src.oauth.config import CrowdinOAuthConfig
from src.oauth.token_storage import TokenStorage


class MemoryTokenStorage(TokenStorage):
    """In-memory stand-in for the keyring-backed storage."""

    def __init__(self, token: Optional[str] = None):
        super().__init__("Crowdin", "test-account")
        self.token = token
        self.saved: List[str] = []
        self.deleted = 0

    def save(self, token: str) -> None:
        self.token = token
        self.saved.append(token)

    def load(self) -> Optional[str]:
        return self.token

    def delete(self) -> bool:
        self.deleted += 1
        existed = self.token is not None
        self.token = None
        return existed


def _encode_segment(data: dict) -> str:
    raw = json.dumps(data).encode("utf-8")
    return base64.urlsafe_b64encode(raw).decode("ascii").rstrip("=")


@pytest.fixture
def config() -> CrowdinOAuthConfig:
    """Create test OAuth config."""
    return CrowdinOAuthConfig(client_id="test_client_id")


@pytest.fixture
def storage() -> MemoryTokenStorage:
    """Create empty in-memory token storage."""
    return MemoryTokenStorage()


@pytest.fixture
def make_token() -> Callable[..., str]:
    """Build signed-token-shaped strings with the given payload claims."""

    def _make(**claims) -> str:
        header = _encode_segment({"alg": "RS256", "typ": "JWT"})
        return f"{header}.{_encode_segment(claims)}.signature"

    return _make


@pytest.fixture
def storage_factory() -> Callable[..., MemoryTokenStorage]:
    """Create in-memory token storage, optionally pre-populated."""
    return MemoryTokenStorage
