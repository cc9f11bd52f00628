"""itaulink-uy - Unofficial client for the Itaú Uruguay web portal."""

from itaulink_uy.client import ItauClient
from itaulink_uy.credentials import Credentials
from itaulink_uy.errors import (
    AuthError,
    DecodeError,
    InvalidRange,
    ItauError,
    ParseError,
    SessionExpiredError,
    TransportError,
)
from itaulink_uy.models import Account, MonthSelector, Transaction, TransactionKind

__version__ = "0.1.0"
__all__ = [
    "Account",
    "AuthError",
    "Credentials",
    "DecodeError",
    "InvalidRange",
    "ItauClient",
    "ItauError",
    "MonthSelector",
    "ParseError",
    "SessionExpiredError",
    "Transaction",
    "TransactionKind",
    "TransportError",
]
