"""Parsing utilities for portal JSON values."""

import re
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any
from zoneinfo import ZoneInfo

# The portal runs on Uruguay time for both month boundaries and movement dates
PORTAL_TIMEZONE = ZoneInfo("America/Montevideo")


def portal_today() -> date:
    """Return the current date on the portal's clock."""
    return datetime.now(PORTAL_TIMEZONE).date()


def parse_amount(value: Any) -> Decimal | None:
    """
    Parse a portal amount to Decimal.

    Handles:
    - JSON numbers (int and float)
    - Strings with thousands separators (1,234.56)
    - Negative values (both -123 and (123))
    - Quoted values

    Args:
        value: Amount as found in the JSON payload

    Returns:
        Decimal if successful, None otherwise
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, (int, float)):
        # str() first so 0.1 stays 0.1 instead of its binary expansion
        return Decimal(str(value))

    amount_str = str(value).strip().strip('"').strip()
    if not amount_str:
        return None

    # Check for parentheses (negative)
    is_negative = False
    if amount_str.startswith("(") and amount_str.endswith(")"):
        is_negative = True
        amount_str = amount_str[1:-1]

    # Remove currency symbols and whitespace
    amount_str = re.sub(r"[A-Z$\s]", "", amount_str)

    # Handle thousands separator (comma)
    amount_str = amount_str.replace(",", "")

    if amount_str.startswith("-"):
        is_negative = True
        amount_str = amount_str[1:]

    try:
        amount = Decimal(amount_str)
        return -amount if is_negative else amount
    except InvalidOperation:
        return None


def millis_to_date(value: Any) -> date | None:
    """
    Convert an epoch-milliseconds timestamp to a calendar date.

    The portal sends dates either as ``{"millis": 1706659200000}`` or as the
    bare number. Dates are read in the portal's timezone.

    Args:
        value: Timestamp dict or number

    Returns:
        date object if successful, None otherwise
    """
    if isinstance(value, dict):
        value = value.get("millis")

    if value is None or isinstance(value, bool):
        return None

    try:
        millis = int(value)
    except (TypeError, ValueError, OverflowError):
        return None

    try:
        return datetime.fromtimestamp(millis / 1000, tz=PORTAL_TIMEZONE).date()
    except (OverflowError, OSError, ValueError):
        return None


def clean_description(desc: str | None) -> str:
    """
    Clean up transaction description.

    Collapses runs of whitespace and newlines into single spaces.

    Args:
        desc: Raw description string

    Returns:
        Cleaned description
    """
    if not desc:
        return ""
    return " ".join(str(desc).split())
