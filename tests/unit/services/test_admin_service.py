"""Unit tests for admin_service."""
from unittest.mock import patch

import pytest

from navaspurthi.services.admin_service import (
    authenticate_admin,
    is_admin_authenticated,
    login_admin,
    logout_admin,
    verify_api_token,
)
from navaspurthi.utils.exceptions import AuthenticationError


class TestAuthenticateAdmin:
    """Test authenticate_admin function."""

    def test_authenticate_with_correct_credentials(self, monkeypatch):
        """Test authentication succeeds with correct credentials."""
        monkeypatch.setenv("ADMIN_USERNAME", "testadmin")
        monkeypatch.setenv("ADMIN_PASSWORD", "testpass")

        assert authenticate_admin("testadmin", "testpass") is True

    def test_authenticate_with_wrong_password(self, monkeypatch):
        monkeypatch.setenv("ADMIN_USERNAME", "testadmin")
        monkeypatch.setenv("ADMIN_PASSWORD", "testpass")

        assert authenticate_admin("testadmin", "wrongpass") is False

    def test_authenticate_with_empty_credentials(self, monkeypatch):
        monkeypatch.setenv("ADMIN_USERNAME", "testadmin")
        monkeypatch.setenv("ADMIN_PASSWORD", "testpass")

        assert authenticate_admin("", "") is False

    def test_authenticate_uses_default_username(self, monkeypatch):
        """Test authentication uses default username if not set."""
        monkeypatch.delenv("ADMIN_USERNAME", raising=False)
        monkeypatch.setenv("ADMIN_PASSWORD", "testpass")

        assert authenticate_admin("admin", "testpass") is True

    def test_unset_password_disables_login(self, monkeypatch):
        """An empty ADMIN_PASSWORD never authenticates."""
        monkeypatch.delenv("ADMIN_USERNAME", raising=False)
        monkeypatch.setenv("ADMIN_PASSWORD", "")

        assert authenticate_admin("admin", "") is False


class TestVerifyApiToken:
    """Test verify_api_token function."""

    def test_valid_token(self, monkeypatch):
        monkeypatch.setenv("ADMIN_API_TOKEN", "s3cret")

        verify_api_token("s3cret")

    def test_wrong_token_raises(self, monkeypatch):
        monkeypatch.setenv("ADMIN_API_TOKEN", "s3cret")

        with pytest.raises(AuthenticationError, match="Invalid admin token"):
            verify_api_token("guess")

    def test_missing_token_raises(self, monkeypatch):
        monkeypatch.setenv("ADMIN_API_TOKEN", "s3cret")

        with pytest.raises(AuthenticationError):
            verify_api_token(None)

    def test_unconfigured_token_disables_api(self, monkeypatch):
        monkeypatch.setenv("ADMIN_API_TOKEN", "")

        with pytest.raises(AuthenticationError, match="disabled"):
            verify_api_token("anything")


class TestIsAdminAuthenticated:
    """Test is_admin_authenticated function."""

    @patch('navaspurthi.services.admin_service.st')
    def test_returns_true_when_authenticated(self, mock_st):
        mock_st.session_state.get.return_value = True

        assert is_admin_authenticated() is True
        mock_st.session_state.get.assert_called_once_with("admin_authenticated", False)

    @patch('navaspurthi.services.admin_service.st')
    def test_returns_false_when_not_authenticated(self, mock_st):
        mock_st.session_state.get.return_value = False

        assert is_admin_authenticated() is False


class TestLoginAdmin:
    """Test login_admin and logout_admin functions."""

    @patch('navaspurthi.services.admin_service.authenticate_admin')
    @patch('navaspurthi.services.admin_service.st')
    def test_login_success(self, mock_st, mock_auth):
        mock_auth.return_value = True
        mock_st.session_state = {}

        success, message = login_admin("testadmin", "testpass")

        assert success is True
        assert message == "Login successful"
        assert mock_st.session_state["admin_authenticated"] is True

    @patch('navaspurthi.services.admin_service.authenticate_admin')
    @patch('navaspurthi.services.admin_service.st')
    def test_login_failure(self, mock_st, mock_auth):
        mock_auth.return_value = False
        mock_st.session_state = {}

        success, message = login_admin("wronguser", "wrongpass")

        assert success is False
        assert message == "Invalid username or password"
        assert "admin_authenticated" not in mock_st.session_state

    @patch('navaspurthi.services.admin_service.st')
    def test_logout_clears_session_state(self, mock_st):
        mock_st.session_state = {"admin_authenticated": True}

        logout_admin()

        assert "admin_authenticated" not in mock_st.session_state

    @patch('navaspurthi.services.admin_service.st')
    def test_logout_when_not_authenticated(self, mock_st):
        mock_st.session_state = {}

        logout_admin()

        assert "admin_authenticated" not in mock_st.session_state
