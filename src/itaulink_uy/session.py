"""HTTP session for the Itaú portal."""

import logging
import threading
from typing import Any
from urllib.parse import ParseResult, urljoin, urlparse

import requests

from itaulink_uy.errors import TransportError

logger = logging.getLogger(__name__)

BASE_URL = "https://www.itaulink.com.uy/trx/"
DEFAULT_TIMEOUT = 30.0
DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)

REDIRECT_STATUSES = frozenset({301, 302, 303, 307, 308})


def redirect_target(response: requests.Response) -> ParseResult | None:
    """Return the parsed absolute Location of a redirect response, or None."""
    if response.status_code not in REDIRECT_STATUSES:
        return None

    location = response.headers.get("Location")
    if not location:
        return None

    return urlparse(urljoin(response.url or "", location))


class PortalSession:
    """
    Cookie session bound to the portal base URL.

    Redirects are never followed: callers inspect the Location header
    themselves. Only one request runs at a time per session.
    """

    def __init__(
        self,
        base_url: str = BASE_URL,
        timeout: float = DEFAULT_TIMEOUT,
        user_agent: str = DEFAULT_USER_AGENT,
    ) -> None:
        """Initialize session with an empty cookie jar."""
        self.base_url = base_url.rstrip("/") + "/"
        self.timeout = timeout
        self._lock = threading.Lock()
        self._session = requests.Session()
        self._session.headers.update({"User-Agent": user_agent})

    @property
    def home_path(self) -> str:
        """Path of the authenticated landing page, e.g. ``/trx/``."""
        return urlparse(self.base_url).path

    def url_for(self, path: str) -> str:
        """Build an absolute URL for a path relative to the base URL."""
        return urljoin(self.base_url, path.lstrip("/"))

    def _request(self, method: str, path: str, **kwargs: Any) -> requests.Response:
        """Send a request without following redirects."""
        url = self.url_for(path)
        logger.debug("%s %s", method, url)

        with self._lock:
            try:
                response = self._session.request(
                    method,
                    url,
                    allow_redirects=False,
                    timeout=self.timeout,
                    **kwargs,
                )
            except requests.RequestException as e:
                raise TransportError(f"{method} {url} failed: {e}") from e

        logger.debug("%s %s -> %s", method, url, response.status_code)
        return response

    def get(self, path: str) -> requests.Response:
        """GET a path relative to the base URL."""
        return self._request("GET", path)

    def post(
        self,
        path: str,
        data: dict[str, Any] | None = None,
        json: dict[str, Any] | None = None,
    ) -> requests.Response:
        """POST a form (``data``) or a JSON body (``json``) to a relative path."""
        return self._request("POST", path, data=data, json=json)

    def clear_cookies(self) -> None:
        """Forget every cookie of the current session."""
        with self._lock:
            self._session.cookies.clear()

    def close(self) -> None:
        """Close the underlying connection pool."""
        self._session.close()

    def __enter__(self) -> "PortalSession":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
