"""Itaú portal client."""

import logging
import threading
from collections.abc import Callable
from datetime import date

import requests

from itaulink_uy.auth import Authenticator
from itaulink_uy.credentials import Credentials
from itaulink_uy.errors import ParseError, SessionExpiredError
from itaulink_uy.models import Account, MonthSelector, Transaction
from itaulink_uy.normalizer import TransactionNormalizer
from itaulink_uy.portal import parse_accounts
from itaulink_uy.session import BASE_URL, DEFAULT_TIMEOUT, PortalSession
from itaulink_uy.utils import portal_today

logger = logging.getLogger(__name__)


class ItauClient:
    """
    Client for one Itaú portal login.

    Usage:
        client = ItauClient(Credentials("12345678", "c2VjcmV0"))
        client.login()
        for account in client.accounts:
            transactions = client.get_month(account.account_hash, 3, 24)

    Public operations are serialized, so a client may be shared between
    threads. Use one client per login to work on several logins in parallel.
    """

    def __init__(
        self,
        credentials: Credentials,
        base_url: str = BASE_URL,
        timeout: float = DEFAULT_TIMEOUT,
        session: PortalSession | None = None,
        today: Callable[[], date] = portal_today,
    ) -> None:
        """Initialize client with an empty session and no accounts."""
        self.session = session or PortalSession(base_url=base_url, timeout=timeout)
        self.auth = Authenticator(self.session, credentials)
        self.normalizer = TransactionNormalizer(today=today)
        self.accounts: list[Account] = []
        self._lock = threading.RLock()

    @property
    def is_logged_in(self) -> bool:
        """Return True if the last login succeeded and has not expired."""
        return self.auth.is_logged_in

    def login(self) -> list[Account]:
        """
        Log in and download the account list.

        Returns:
            The accounts found on the landing page

        Raises:
            AuthError: If the portal rejects the credentials
            ParseError: If the landing page cannot be parsed
            SessionExpiredError: If the landing page redirects to the expiry page
        """
        with self._lock:
            self.auth.login()
            response = self.session.get("")
            if self.auth.is_expired(response):
                self.auth.invalidate()
                raise SessionExpiredError("Session expired before the landing page loaded")
            return self._store_accounts(response)

    def refresh_accounts(self) -> list[Account]:
        """Download the landing page again and replace the account list."""
        with self._lock:
            response = self._fetch(lambda: self.session.get(""))
            return self._store_accounts(response)

    def _store_accounts(self, response: requests.Response) -> list[Account]:
        # Parse before assigning so a failure keeps the previous snapshot
        accounts = parse_accounts(response.text)
        self.accounts = accounts
        return accounts

    def get_account(self, account_hash: str) -> Account | None:
        """Look up an account from the last downloaded list by its hash."""
        for account in self.accounts:
            if account.account_hash == account_hash:
                return account
        return None

    def get_month(self, account_hash: str, month: int, year: int) -> list[Transaction]:
        """
        Get the movements of an account for one month.

        Args:
            account_hash: Account hash from the account list
            month: Month number, 1 to 12
            year: Year counted from 2000 (24 for 2024)

        Returns:
            Transactions in the order the portal lists them

        Raises:
            InvalidRange: If the month is invalid or in the future
            ParseError: If the response is not the expected JSON
            SessionExpiredError: If the session expires twice in a row
        """
        selector = MonthSelector(month=month, year=year)

        with self._lock:
            source = self.normalizer.select_source(selector, account_hash)
            logger.info(
                "Requesting %s movements for %s",
                "historical" if source.historical else "current month",
                selector,
            )

            response = self._fetch(lambda: self.session.post(source.path))
            try:
                payload = response.json()
            except ValueError as e:
                raise ParseError(f"Movements response is not JSON: {e}") from e

            movements = self.normalizer.extract_movements(payload, source)
            transactions = self.normalizer.normalize_all(movements)
            logger.info("Found %d movements for %s", len(transactions), selector)
            return transactions

    def _fetch(self, request: Callable[[], requests.Response]) -> requests.Response:
        """
        Run an authenticated request, logging back in once if the session expired.

        Raises:
            SessionExpiredError: If the retried request also hits an expiry redirect
        """
        if not self.auth.is_logged_in:
            self.login()

        response = request()
        if not self.auth.is_expired(response):
            return response

        logger.info("Session expired, logging in again")
        self.auth.invalidate()
        self.login()

        response = request()
        if self.auth.is_expired(response):
            self.auth.invalidate()
            raise SessionExpiredError("Session expired again right after logging in")
        return response

    def close(self) -> None:
        """Close the underlying HTTP session."""
        self.session.close()

    def __enter__(self) -> "ItauClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
