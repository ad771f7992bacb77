"""Tests for OAuth exceptions."""

import pytest

from src.oauth.exceptions import (
    AuthorizationError,
    ConfigurationError,
    CrowdinOAuthError,
    TokenStorageError,
)


class TestOAuthExceptions:
    """Tests for OAuth exception hierarchy."""

    def test_crowdin_oauth_error_is_base_exception(self):
        """CrowdinOAuthError is base for all OAuth errors."""
        error = CrowdinOAuthError("test error")
        assert isinstance(error, Exception)
        assert str(error) == "test error"

    @pytest.mark.parametrize(
        "exc_class", [ConfigurationError, AuthorizationError, TokenStorageError]
    )
    def test_subclasses_inherit_from_base(self, exc_class):
        """Every OAuth error can be caught as CrowdinOAuthError."""
        with pytest.raises(CrowdinOAuthError, match="boom"):
            raise exc_class("boom")
