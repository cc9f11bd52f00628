"""Login state machine and session-expiry detection."""

import logging
from enum import Enum
from urllib.parse import parse_qs

import requests

from itaulink_uy.credentials import Credentials
from itaulink_uy.errors import AuthError, DecodeError, TransportError
from itaulink_uy.session import PortalSession, redirect_target

logger = logging.getLogger(__name__)

LOGIN_PATH = "doLogin"

# message_code values seen on failed logins
ERROR_CODES: dict[str, str] = {
    "10010": "Bad login",
    "10020": "Bad password",
}
UNKNOWN_ERROR = "Unknown error"

# Redirect targets that mean the server dropped the session
EXPIRY_MARKERS: tuple[str, ...] = ("sesionexpirada", "sessionexpired", "expired")


class AuthState(Enum):
    """Login state of a portal session."""

    LOGGED_OUT = "logged_out"
    AUTHENTICATING = "authenticating"
    LOGGED_IN = "logged_in"
    FAILED = "failed"


def reason_for_code(code: str | None) -> str:
    """Map a portal message_code to a human readable reason."""
    if code is None:
        return UNKNOWN_ERROR
    return ERROR_CODES.get(code.strip(), UNKNOWN_ERROR)


class Authenticator:
    """
    Drives the login flow for one portal session.

    States:
        LOGGED_OUT -> AUTHENTICATING on login()
        AUTHENTICATING -> LOGGED_IN when /doLogin redirects to the home path
        AUTHENTICATING -> FAILED when it redirects anywhere else
        LOGGED_IN -> LOGGED_OUT on invalidate(), after an expiry redirect
    """

    def __init__(
        self,
        session: PortalSession,
        credentials: Credentials,
        expiry_markers: tuple[str, ...] = EXPIRY_MARKERS,
    ) -> None:
        """Initialize in the LOGGED_OUT state."""
        self.session = session
        self.credentials = credentials
        self.expiry_markers = tuple(marker.lower() for marker in expiry_markers)
        self.state = AuthState.LOGGED_OUT
        self.failure_reason: str | None = None

    @property
    def is_logged_in(self) -> bool:
        """Return True once a login succeeded and no expiry was seen since."""
        return self.state is AuthState.LOGGED_IN

    def _login_form(self) -> dict[str, str | int]:
        return {
            "tipo_documento": 1,
            "tipo_usuario": "R",
            "nro_documento": self.credentials.id,
            "pass": self.credentials.password,
        }

    def login(self) -> None:
        """
        Send the credentials and interpret the redirect.

        Raises:
            AuthError: If the portal redirects anywhere but the home page
            DecodeError: If the stored password cannot be decoded
            TransportError: If the request fails
        """
        logger.info("Logging in as %s", self.credentials.id)
        self.state = AuthState.AUTHENTICATING
        self.failure_reason = None

        try:
            form = self._login_form()
        except DecodeError:
            self._fail("Invalid encoded password")
            raise

        try:
            response = self.session.post(LOGIN_PATH, data=form)
        except TransportError:
            self.state = AuthState.LOGGED_OUT
            raise

        target = redirect_target(response)
        logger.debug("Login redirected to %s", target.geturl() if target else None)

        if target is not None and target.path == self.session.home_path:
            self.state = AuthState.LOGGED_IN
            logger.info("Logged in")
            return

        code = None
        if target is not None:
            code = parse_qs(target.query).get("message_code", [None])[0]
        reason = reason_for_code(code)
        self._fail(reason)
        logger.warning("Login failed: %s (code %s)", reason, code)
        raise AuthError(reason, code)

    def _fail(self, reason: str) -> None:
        self.state = AuthState.FAILED
        self.failure_reason = reason

    def is_expired(self, response: requests.Response) -> bool:
        """Return True if the response redirects to a session-expired page."""
        target = redirect_target(response)
        if target is None:
            return False

        path = target.path.lower()
        return any(marker in path for marker in self.expiry_markers)

    def invalidate(self) -> None:
        """Mark the session as logged out and drop the expired cookies."""
        if self.state is AuthState.LOGGED_IN:
            logger.info("Session expired")
        self.session.clear_cookies()
        self.state = AuthState.LOGGED_OUT
