"""Utility functions for itaulink-uy."""

from itaulink_uy.utils.parsing import (
    clean_description,
    millis_to_date,
    parse_amount,
    portal_today,
)

__all__ = ["millis_to_date", "parse_amount", "clean_description", "portal_today"]
