"""Tests for keyring-backed token storage."""

from unittest import mock

import pytest
from keyring.errors import KeyringError, PasswordDeleteError

from src.oauth.exceptions import TokenStorageError
from src.oauth.token_storage import TokenStorage


class TestTokenStorage:
    """Tests for TokenStorage class."""

    @pytest.fixture
    def storage(self):
        """Create token storage for a test service."""
        return TokenStorage("Crowdin", "oauth-token")

    @mock.patch("src.oauth.token_storage.keyring.set_password")
    def test_save_writes_to_keyring(self, mock_set, storage):
        """save stores the token under the service and account."""
        storage.save("token-123")

        mock_set.assert_called_once_with("Crowdin", "oauth-token", "token-123")

    @mock.patch(
        "src.oauth.token_storage.keyring.set_password",
        side_effect=KeyringError("locked"),
    )
    def test_save_wraps_keyring_errors(self, mock_set, storage):
        """save raises TokenStorageError when the backend fails."""
        with pytest.raises(TokenStorageError, match="Failed to save token"):
            storage.save("token-123")

    @mock.patch("src.oauth.token_storage.keyring.get_password", return_value="token-123")
    def test_load_returns_stored_token(self, mock_get, storage):
        """load returns the stored token."""
        assert storage.load() == "token-123"
        mock_get.assert_called_once_with("Crowdin", "oauth-token")

    @mock.patch("src.oauth.token_storage.keyring.get_password", return_value=None)
    def test_load_returns_none_when_missing(self, mock_get, storage):
        """load returns None when nothing is stored."""
        assert storage.load() is None
        assert storage.exists() is False

    @mock.patch(
        "src.oauth.token_storage.keyring.get_password",
        side_effect=KeyringError("no backend"),
    )
    def test_load_wraps_keyring_errors(self, mock_get, storage):
        """load raises TokenStorageError when the backend fails."""
        with pytest.raises(TokenStorageError, match="Failed to load token"):
            storage.load()

    @mock.patch("src.oauth.token_storage.keyring.delete_password")
    def test_delete_removes_token(self, mock_delete, storage):
        """delete returns True after removing a stored token."""
        assert storage.delete() is True
        mock_delete.assert_called_once_with("Crowdin", "oauth-token")

    @mock.patch(
        "src.oauth.token_storage.keyring.delete_password",
        side_effect=PasswordDeleteError("not found"),
    )
    def test_delete_missing_token_is_not_an_error(self, mock_delete, storage):
        """delete returns False when nothing was stored."""
        assert storage.delete() is False

    @mock.patch(
        "src.oauth.token_storage.keyring.delete_password",
        side_effect=KeyringError("locked"),
    )
    def test_delete_wraps_keyring_errors(self, mock_delete, storage):
        """delete raises TokenStorageError for other backend failures."""
        with pytest.raises(TokenStorageError, match="Failed to delete token"):
            storage.delete()
