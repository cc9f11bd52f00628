"""Source selection and normalization of account movements."""

import csv
import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import Any

from itaulink_uy.errors import InvalidRange, ParseError
from itaulink_uy.models import MonthSelector, Transaction, TransactionKind
from itaulink_uy.utils import clean_description, millis_to_date, parse_amount, portal_today

logger = logging.getLogger(__name__)

CURRENT_MONTH_DATA_PATH = ("itaulink_msg", "data", "movimientosMesActual", "movimientos")
HISTORICAL_DATA_PATH = (
    "itaulink_msg",
    "data",
    "mapaHistoricos",
    "movimientosHistoricos",
    "movimientos",
)

MOVEMENT_KINDS = {
    "D": TransactionKind.EXPENSE,
    "C": TransactionKind.INCOME,
}


@dataclass(frozen=True)
class MovementSource:
    """Endpoint to POST to and where the movement list sits in its response."""

    path: str
    data_path: tuple[str, ...]
    historical: bool


class TransactionNormalizer:
    """
    Maps raw portal movements to Transaction objects.

    Usage:
        normalizer = TransactionNormalizer()
        source = normalizer.select_source(MonthSelector(3, 24), account_hash)
        transactions = normalizer.normalize_all(
            normalizer.extract_movements(payload, source)
        )
    """

    def __init__(self, today: Callable[[], date] = portal_today) -> None:
        """
        Initialize normalizer.

        Args:
            today: Returns the portal's current date, used to tell the current month
                from historical ones
        """
        self._today = today

    def current_month(self) -> MonthSelector:
        """Selector for the current month."""
        return MonthSelector.from_date(self._today())

    def select_source(self, selector: MonthSelector, account_hash: str) -> MovementSource:
        """
        Choose the endpoint that serves the requested month.

        Raises:
            InvalidRange: If the month is after the current one
        """
        current = self.current_month()

        if selector > current:
            raise InvalidRange(f"{selector} is in the future (current month is {current})")

        if selector == current:
            logger.debug("Using current month endpoint for %s", selector)
            return MovementSource(
                path=f"cuentas/1/{account_hash}/mesActual",
                data_path=CURRENT_MONTH_DATA_PATH,
                historical=False,
            )

        logger.debug("Using historical endpoint for %s", selector)
        return MovementSource(
            path=f"cuentas/1/{account_hash}/{selector.month}/{selector.year}/consultaHistorica",
            data_path=HISTORICAL_DATA_PATH,
            historical=True,
        )

    @staticmethod
    def extract_movements(payload: Any, source: MovementSource) -> list[dict[str, Any]]:
        """
        Walk the response payload down to the movement list.

        Raises:
            ParseError: If any key along the path is missing
        """
        node = payload
        for key in source.data_path:
            if not isinstance(node, dict) or key not in node:
                raise ParseError(f"Movements not found in response: missing {key!r}")
            node = node[key]

        if node is None:
            return []
        if not isinstance(node, list):
            raise ParseError("Movements are not a list")
        return node

    @staticmethod
    def normalize(record: dict[str, Any]) -> Transaction:
        """
        Normalize one raw movement.

        Raises:
            ParseError: If the type, amount, balance or date is unusable
        """
        kind = MOVEMENT_KINDS.get(str(record.get("tipo", "")).strip().upper())
        if kind is None:
            raise ParseError(f"Unknown movement type: {record.get('tipo')!r}")

        amount = parse_amount(record.get("importe"))
        if amount is None:
            raise ParseError(f"Invalid movement amount: {record.get('importe')!r}")

        end_balance = parse_amount(record.get("saldo"))
        if end_balance is None:
            raise ParseError(f"Invalid movement balance: {record.get('saldo')!r}")

        tx_date = millis_to_date(record.get("fecha"))
        if tx_date is None:
            raise ParseError(f"Invalid movement date: {record.get('fecha')!r}")

        # Transaction applies the sign from the kind
        return Transaction(
            kind=kind,
            description=clean_description(record.get("descripcion")),
            extra_description=clean_description(record.get("descripcionAdicional")),
            amount=amount,
            end_balance=end_balance,
            date=tx_date,
            raw_data=record,
        )

    def normalize_all(self, records: Iterable[dict[str, Any]]) -> list[Transaction]:
        """Normalize movements, keeping the order the portal returned them in."""
        return [self.normalize(record) for record in records]

    @staticmethod
    def write_csv(
        transactions: list[Transaction],
        output_path: Path,
        delimiter: str = ",",
    ) -> None:
        """
        Write transactions to CSV file.

        Args:
            transactions: List of transactions
            output_path: Output file path
            delimiter: CSV delimiter (default comma)
        """
        with open(output_path, "w", newline="", encoding="utf-8") as f:
            writer = csv.writer(f, delimiter=delimiter)
            writer.writerow(["Date", "Description", "Amount", "Balance"])
            for tx in transactions:
                writer.writerow([
                    tx.date.isoformat(),
                    tx.description,
                    str(tx.amount),
                    str(tx.end_balance),
                ])

    @staticmethod
    def write_full_csv(
        transactions: list[Transaction],
        output_path: Path,
        delimiter: str = ",",
    ) -> None:
        """Write transactions to CSV with all fields."""
        with open(output_path, "w", newline="", encoding="utf-8") as f:
            writer = csv.DictWriter(
                f,
                fieldnames=[
                    "date",
                    "kind",
                    "description",
                    "extra_description",
                    "amount",
                    "end_balance",
                ],
                delimiter=delimiter,
            )
            writer.writeheader()
            for tx in transactions:
                writer.writerow(tx.to_dict())
