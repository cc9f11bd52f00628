"""Tests for the login state machine."""

from unittest.mock import MagicMock, patch

import pytest

from conftest import EXPIRED_URL, HOME_URL, make_response, redirect
from itaulink_uy.auth import (
    ERROR_CODES,
    UNKNOWN_ERROR,
    AuthState,
    Authenticator,
    reason_for_code,
)
from itaulink_uy.credentials import Credentials
from itaulink_uy.errors import AuthError, DecodeError, TransportError
from itaulink_uy.session import PortalSession

LOGIN_ERROR_URL = "https://www.itaulink.com.uy/trx/login?message_code={code}"


class TestReasonForCode:
    """Tests for reason_for_code function."""

    @pytest.mark.parametrize("code", sorted(ERROR_CODES))
    def test_known_codes(self, code: str) -> None:
        """Test mapped codes return their table entry."""
        assert reason_for_code(code) == ERROR_CODES[code]

    @pytest.mark.parametrize("code", ["99999", "", "abc", None])
    def test_unknown_codes(self, code: str | None) -> None:
        """Test anything else gets the generic reason."""
        assert reason_for_code(code) == UNKNOWN_ERROR


class TestLogin:
    """Tests for Authenticator.login."""

    def test_initial_state(self, mock_session: MagicMock, credentials: Credentials) -> None:
        """Test a new authenticator is logged out."""
        auth = Authenticator(mock_session, credentials)
        assert auth.state is AuthState.LOGGED_OUT
        assert auth.is_logged_in is False

    def test_successful_login(self, mock_session: MagicMock, credentials: Credentials) -> None:
        """Test a redirect to the home path logs in."""
        mock_session.post.return_value = redirect(HOME_URL)

        auth = Authenticator(mock_session, credentials)
        auth.login()

        assert auth.state is AuthState.LOGGED_IN
        assert auth.is_logged_in is True
        assert auth.failure_reason is None

    def test_login_form(self, mock_session: MagicMock, credentials: Credentials) -> None:
        """Test the decoded credentials are posted as a form."""
        mock_session.post.return_value = redirect(HOME_URL)

        Authenticator(mock_session, credentials).login()

        mock_session.post.assert_called_once_with(
            "doLogin",
            data={
                "tipo_documento": 1,
                "tipo_usuario": "R",
                "nro_documento": "12345678",
                "pass": "secret",
            },
        )

    @pytest.mark.parametrize("code", sorted(ERROR_CODES))
    def test_known_error_code(
        self, mock_session: MagicMock, credentials: Credentials, code: str
    ) -> None:
        """Test a known message_code fails with its mapped reason."""
        mock_session.post.return_value = redirect(LOGIN_ERROR_URL.format(code=code))

        auth = Authenticator(mock_session, credentials)
        with pytest.raises(AuthError) as exc_info:
            auth.login()

        assert exc_info.value.reason == ERROR_CODES[code]
        assert exc_info.value.code == code
        assert auth.state is AuthState.FAILED
        assert auth.failure_reason == ERROR_CODES[code]

    def test_unknown_error_code(self, mock_session: MagicMock, credentials: Credentials) -> None:
        """Test an unmapped message_code fails with the generic reason."""
        mock_session.post.return_value = redirect(LOGIN_ERROR_URL.format(code="31337"))

        auth = Authenticator(mock_session, credentials)
        with pytest.raises(AuthError, match="Unknown error") as exc_info:
            auth.login()

        assert exc_info.value.reason == UNKNOWN_ERROR
        assert exc_info.value.code == "31337"
        assert auth.state is AuthState.FAILED

    def test_redirect_without_code(self, mock_session: MagicMock, credentials: Credentials) -> None:
        """Test a redirect elsewhere without a code is an unknown error."""
        mock_session.post.return_value = redirect("https://www.itaulink.com.uy/trx/login")

        with pytest.raises(AuthError) as exc_info:
            Authenticator(mock_session, credentials).login()

        assert exc_info.value.reason == UNKNOWN_ERROR
        assert exc_info.value.code is None

    def test_no_redirect(self, mock_session: MagicMock, credentials: Credentials) -> None:
        """Test a 200 answer to the login is an unknown error."""
        mock_session.post.return_value = make_response(200, text="<html>login</html>")

        auth = Authenticator(mock_session, credentials)
        with pytest.raises(AuthError):
            auth.login()

        assert auth.state is AuthState.FAILED

    def test_transport_error_propagates(
        self, mock_session: MagicMock, credentials: Credentials
    ) -> None:
        """Test network errors are not wrapped in AuthError."""
        mock_session.post.side_effect = TransportError("boom")

        auth = Authenticator(mock_session, credentials)
        with pytest.raises(TransportError):
            auth.login()

        assert auth.state is AuthState.LOGGED_OUT

    def test_bad_encoded_password(self, mock_session: MagicMock) -> None:
        """Test a malformed password fails before any request."""
        auth = Authenticator(mock_session, Credentials(id="1", encoded_password="%%%"))

        with pytest.raises(DecodeError):
            auth.login()

        assert auth.state is AuthState.FAILED
        mock_session.post.assert_not_called()

    def test_login_again_after_failure(
        self, mock_session: MagicMock, credentials: Credentials
    ) -> None:
        """Test a failed authenticator can log in on a later attempt."""
        mock_session.post.side_effect = [
            redirect(LOGIN_ERROR_URL.format(code="10020")),
            redirect(HOME_URL),
        ]

        auth = Authenticator(mock_session, credentials)
        with pytest.raises(AuthError):
            auth.login()
        auth.login()

        assert auth.state is AuthState.LOGGED_IN
        assert auth.failure_reason is None


class TestExpiry:
    """Tests for expiry detection."""

    def test_expired_redirect(self, mock_session: MagicMock, credentials: Credentials) -> None:
        """Test a redirect to the expiry page is detected."""
        auth = Authenticator(mock_session, credentials)
        assert auth.is_expired(redirect(EXPIRED_URL)) is True

    def test_data_response_not_expired(
        self, mock_session: MagicMock, credentials: Credentials
    ) -> None:
        """Test a 200 with data is not an expiry."""
        auth = Authenticator(mock_session, credentials)
        assert auth.is_expired(make_response(200, json_body={"itaulink_msg": {}})) is False

    def test_other_redirect_not_expired(
        self, mock_session: MagicMock, credentials: Credentials
    ) -> None:
        """Test redirects elsewhere are not an expiry."""
        auth = Authenticator(mock_session, credentials)
        assert auth.is_expired(redirect(HOME_URL)) is False

    def test_custom_markers(self, mock_session: MagicMock, credentials: Credentials) -> None:
        """Test the expiry markers can be overridden."""
        auth = Authenticator(mock_session, credentials, expiry_markers=("timeout",))
        assert auth.is_expired(redirect("https://www.itaulink.com.uy/trx/Timeout.html")) is True
        assert auth.is_expired(redirect(EXPIRED_URL)) is False

    def test_invalidate(self, mock_session: MagicMock, credentials: Credentials) -> None:
        """Test invalidate moves a logged in session back to logged out."""
        mock_session.post.return_value = redirect(HOME_URL)
        auth = Authenticator(mock_session, credentials)
        auth.login()

        auth.invalidate()

        assert auth.state is AuthState.LOGGED_OUT
        mock_session.clear_cookies.assert_called_once_with()

    def test_relogin_starts_without_stale_cookies(self, credentials: Credentials) -> None:
        """Test the login after an expiry does not send the dead session's cookies."""
        session = PortalSession()
        session._session.cookies.set("JSESSIONID", "stale")
        sent_cookies: list[dict[str, str]] = []

        def record_request(*args: object, **kwargs: object) -> object:
            sent_cookies.append(session._session.cookies.get_dict())
            return redirect(HOME_URL)

        auth = Authenticator(session, credentials)
        with patch.object(session._session, "request", side_effect=record_request):
            auth.invalidate()
            auth.login()

        assert sent_cookies == [{}]
        assert auth.is_logged_in is True
