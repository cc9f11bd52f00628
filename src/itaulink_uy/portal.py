"""Account extraction from the portal landing page.

The landing page carries the user's data as a JSON string handed to
``JSON.parse`` inside an inline script::

    var mensajeUsuario = JSON.parse('{"cuentas": {...}}');

Everything that depends on that page layout lives in this module.
"""

import json
import logging
import re
from typing import Any

from itaulink_uy.errors import ParseError
from itaulink_uy.models import Account
from itaulink_uy.utils import clean_description, parse_amount

logger = logging.getLogger(__name__)

USER_DATA_MARKER = "var mensajeUsuario = JSON.parse"
JSON_LITERAL_RE = re.compile(r"""JSON\.parse\((['"])(.*)\1\)""")
JS_ESCAPE_RE = re.compile(r'\\.|"', re.DOTALL)

# Account buckets in the order they are listed
ACCOUNT_BUCKETS = (
    "caja_de_ahorro",
    "cuenta_corriente",
    "cuenta_recaudadora",
    "cuenta_de_ahorro_junior",
)


def find_user_data_line(html: str) -> str:
    """Return the script line that assigns the user data blob."""
    for line in html.splitlines():
        if USER_DATA_MARKER in line:
            return line
    raise ParseError("User data not found in landing page")


def _unescape_js_string(literal: str) -> str:
    """Turn the body of a JS string literal into the text it denotes."""

    def repl(match: re.Match[str]) -> str:
        token = match.group(0)
        if token == "\\'":
            return "'"
        if token == '"':
            return '\\"'
        return token

    # A JS string body is a JSON string body once bare quotes are escaped
    return json.loads('"' + JS_ESCAPE_RE.sub(repl, literal) + '"')  # type: ignore[no-any-return]


def extract_user_data(html: str) -> dict[str, Any]:
    """
    Extract and decode the embedded user data blob.

    Args:
        html: Landing page HTML

    Returns:
        Decoded user data

    Raises:
        ParseError: If the blob is missing or is not valid JSON
    """
    line = find_user_data_line(html)

    match = JSON_LITERAL_RE.search(line)
    if match is None:
        raise ParseError("User data line has no quoted JSON literal")

    literal = match.group(2)
    try:
        data = json.loads(_unescape_js_string(literal))
    except ValueError:
        try:
            data = json.loads(literal)
        except ValueError as e:
            raise ParseError(f"User data is not valid JSON: {e}") from e

    if not isinstance(data, dict):
        raise ParseError("User data is not a JSON object")
    return data


def _text(value: Any) -> str:
    return "" if value is None else str(value)


def to_account(raw: dict[str, Any]) -> Account:
    """Project a raw account record onto the Account model."""
    balance = parse_amount(raw.get("saldo"))
    if balance is None:
        raise ParseError(f"Account {raw.get('idCuenta')!r} has no usable balance")

    return Account(
        type=_text(raw.get("tipoCuenta")),
        id=_text(raw.get("idCuenta")),
        owner_name=clean_description(raw.get("nombreTitular")),
        currency=_text(raw.get("moneda")),
        balance=balance,
        account_hash=_text(raw.get("hash")),
        customer_hash=_text(raw.get("hashCustomer")),
        customer_id=_text(raw.get("customer")),
    )


def parse_accounts(html: str) -> list[Account]:
    """
    Parse every account listed on the landing page.

    Accounts are returned bucket by bucket (savings, checking, collector,
    junior savings), keeping the order of each bucket.

    Raises:
        ParseError: If the page no longer has the expected structure
    """
    data = extract_user_data(html)

    buckets = data.get("cuentas")
    if not isinstance(buckets, dict):
        raise ParseError("User data has no 'cuentas' object")

    raw_accounts: list[dict[str, Any]] = []
    for bucket in ACCOUNT_BUCKETS:
        entries = buckets.get(bucket) or []
        if not isinstance(entries, list):
            raise ParseError(f"Account bucket {bucket!r} is not a list")
        for raw in entries:
            if not isinstance(raw, dict):
                raise ParseError(f"Account entry in {bucket!r} is not an object: {raw!r}")
            raw_accounts.append(raw)

    accounts = [to_account(raw) for raw in raw_accounts]
    logger.info("Parsed %d accounts", len(accounts))
    return accounts
