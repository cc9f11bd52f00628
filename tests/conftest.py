"""Pytest configuration and fixtures."""

import json
from datetime import date
from pathlib import Path
from typing import Any
from unittest.mock import MagicMock

import pytest
import requests
from requests.structures import CaseInsensitiveDict

from itaulink_uy.credentials import Credentials
from itaulink_uy.session import BASE_URL, PortalSession

HOME_URL = BASE_URL
EXPIRED_URL = "https://www.itaulink.com.uy/trx/sesionExpirada"

# "c2VjcmV0" is base64 for "secret"
TEST_CREDENTIALS = Credentials(id="12345678", encoded_password="c2VjcmV0")

# Server clock used by the client tests: March 2024
TODAY = date(2024, 3, 15)


def make_response(
    status_code: int = 200,
    text: str = "",
    location: str | None = None,
    json_body: Any = None,
    url: str = BASE_URL,
) -> requests.Response:
    """Build a real requests.Response without touching the network."""
    response = requests.Response()
    response.status_code = status_code
    response.url = url
    response.encoding = "utf-8"
    response.headers = CaseInsensitiveDict()
    if location is not None:
        response.headers["Location"] = location
    if json_body is not None:
        text = json.dumps(json_body)
        response.headers["Content-Type"] = "application/json"
    response._content = text.encode("utf-8")
    return response


def redirect(location: str) -> requests.Response:
    """A 302 response pointing at the given location."""
    return make_response(status_code=302, location=location)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep real credentials in the environment out of the tests."""
    monkeypatch.delenv("ITAU_ID", raising=False)
    monkeypatch.delenv("ITAU_PASSWORD", raising=False)


@pytest.fixture
def fixtures_dir() -> Path:
    """Return path to test fixtures directory."""
    return Path(__file__).parent / "fixtures"


@pytest.fixture
def landing_html(fixtures_dir: Path) -> str:
    """Landing page with four accounts."""
    return (fixtures_dir / "landing.html").read_text(encoding="utf-8")


@pytest.fixture
def current_month_payload(fixtures_dir: Path) -> dict[str, Any]:
    """mesActual response for March 2024."""
    return json.loads((fixtures_dir / "mes_actual.json").read_text(encoding="utf-8"))


@pytest.fixture
def historical_payload(fixtures_dir: Path) -> dict[str, Any]:
    """consultaHistorica response for January 2024."""
    return json.loads((fixtures_dir / "historico.json").read_text(encoding="utf-8"))


@pytest.fixture
def credentials() -> Credentials:
    """Credentials for document 12345678 with password 'secret'."""
    return TEST_CREDENTIALS


@pytest.fixture
def mock_session() -> MagicMock:
    """PortalSession stand-in with scripted get/post responses."""
    session = MagicMock(spec=PortalSession)
    session.home_path = "/trx/"
    return session
