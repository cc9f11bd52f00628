"""Data models for accounts and transactions."""

import functools
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Any

from itaulink_uy.errors import InvalidRange


class TransactionKind(str, Enum):
    """Direction of a transaction."""

    INCOME = "income"
    EXPENSE = "expense"


@dataclass(frozen=True)
class Account:
    """An account listed on the portal landing page."""

    type: str
    id: str
    owner_name: str
    currency: str
    balance: Decimal
    account_hash: str
    customer_hash: str
    customer_id: str

    def to_dict(self) -> dict[str, str]:
        """Convert to dictionary for display."""
        return {
            "type": self.type,
            "id": self.id,
            "owner_name": self.owner_name,
            "currency": self.currency,
            "balance": str(self.balance),
            "account_hash": self.account_hash,
            "customer_hash": self.customer_hash,
            "customer_id": self.customer_id,
        }


@dataclass(frozen=True)
class Transaction:
    """Represents a normalized account movement."""

    kind: TransactionKind
    description: str
    extra_description: str
    amount: Decimal
    end_balance: Decimal
    date: date
    raw_data: dict[str, Any] = field(default_factory=dict, compare=False, repr=False)

    def __post_init__(self) -> None:
        """Keep the amount sign in line with the kind."""
        magnitude = abs(self.amount)
        signed = -magnitude if self.kind is TransactionKind.EXPENSE else magnitude
        object.__setattr__(self, "amount", signed)

    @property
    def is_expense(self) -> bool:
        """Return True if this is an expense (negative amount)."""
        return self.kind is TransactionKind.EXPENSE

    @property
    def is_income(self) -> bool:
        """Return True if this is income (positive amount)."""
        return self.kind is TransactionKind.INCOME

    def to_dict(self) -> dict[str, str]:
        """Convert to dictionary for CSV output."""
        return {
            "date": self.date.isoformat(),
            "kind": self.kind.value,
            "description": self.description,
            "extra_description": self.extra_description,
            "amount": str(self.amount),
            "end_balance": str(self.end_balance),
        }


@functools.total_ordering
@dataclass(frozen=True)
class MonthSelector:
    """A calendar month, with the year counted from 2000 (2024 -> 24)."""

    month: int
    year: int

    def __post_init__(self) -> None:
        """Validate month and year."""
        if not 1 <= self.month <= 12:
            raise InvalidRange(f"Month must be between 1 and 12, got {self.month}")
        if not 0 <= self.year <= 99:
            raise InvalidRange(f"Year must be a two-digit offset from 2000, got {self.year}")

    @classmethod
    def from_date(cls, value: date) -> "MonthSelector":
        """Selector for the month containing the given date."""
        return cls(month=value.month, year=value.year - 2000)

    @property
    def full_year(self) -> int:
        """Four-digit year."""
        return 2000 + self.year

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, MonthSelector):
            return NotImplemented
        return (self.year, self.month) < (other.year, other.month)

    def __str__(self) -> str:
        return f"{self.month:02d}/{self.full_year}"
