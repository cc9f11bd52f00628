"""Credential storage and password encoding."""

import base64
import binascii
from dataclasses import dataclass, field

from itaulink_uy.errors import DecodeError


def encode_password(password: str) -> str:
    """Encode a plaintext password the way it is stored in config.json."""
    return base64.b64encode(password.encode("utf-8")).decode("ascii")


def decode_password(encoded: str) -> str:
    """
    Decode a base64 encoded password.

    Args:
        encoded: Password as stored in config or passed on the command line

    Returns:
        The plaintext password

    Raises:
        DecodeError: If the value is empty, not base64 or not UTF-8
    """
    if not encoded or not encoded.strip():
        raise DecodeError("Encoded password is empty")

    try:
        raw = base64.b64decode(encoded.strip(), validate=True)
        return raw.decode("utf-8")
    except (binascii.Error, UnicodeDecodeError):
        # Not chained, the binascii message may echo part of the secret
        raise DecodeError("Encoded password is not valid base64 text") from None


@dataclass(frozen=True)
class Credentials:
    """Document number plus base64 encoded password."""

    id: str
    encoded_password: str = field(repr=False)

    @property
    def password(self) -> str:
        """Plaintext password, decoded on every access."""
        return decode_password(self.encoded_password)

    @classmethod
    def from_plaintext(cls, id: str, password: str) -> "Credentials":
        """Build credentials from a plaintext password."""
        return cls(id=id, encoded_password=encode_password(password))
