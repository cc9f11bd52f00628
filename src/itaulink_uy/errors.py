"""Exceptions raised by the itaulink client."""


class ItauError(Exception):
    """Base class for every error raised by this package."""


class DecodeError(ItauError, ValueError):
    """The encoded password is not valid base64 text."""


class TransportError(ItauError):
    """A request to the portal failed at the network level."""


class AuthError(ItauError):
    """The portal rejected the login."""

    def __init__(self, reason: str, code: str | None = None) -> None:
        self.reason = reason
        self.code = code
        message = f"Login failed: {reason}"
        if code:
            message += f" (code {code})"
        super().__init__(message)


class ParseError(ItauError):
    """A portal response no longer matches the expected structure."""


class InvalidRange(ItauError, ValueError):
    """The requested month is out of range or in the future."""


class SessionExpiredError(ItauError):
    """The session expired again right after logging back in."""
