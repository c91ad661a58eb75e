"""Authenticated, rate-limited access to the Discogs API."""
import logging
from typing import Any, Callable, Dict, List, Optional, Protocol, TypeVar

import requests

from .exceptions import DecodeError, ProtocolError, TransportError
from .models import Page
from .rate_limiter import RateLimiter


logger = logging.getLogger(__name__)

T = TypeVar("T")


class HttpSession(Protocol):
    """Protocol for HTTP sessions (allows for easier testing)."""

    def send(self, request: requests.PreparedRequest, **kwargs) -> requests.Response:
        """Send a prepared request."""
        ...


class DiscogsClient:
    """Issues authorized GET requests against the Discogs API."""

    def __init__(
        self,
        token: str,
        rate_limiter: RateLimiter,
        user_agent: str,
        timeout: int = 20,
        session: Optional[HttpSession] = None
    ):
        """Initialize the client.

        Args:
            token: Discogs personal access token
            rate_limiter: Limiter shared by every request of this process
            user_agent: User agent string for HTTP requests
            timeout: Request timeout in seconds
            session: HTTP session to use (defaults to a new requests.Session)
        """
        self.token = token
        self.rate_limiter = rate_limiter
        self.user_agent = user_agent
        self.timeout = timeout
        self.session = session or requests.Session()

    def _prepare(
        self,
        url: str,
        params: Optional[Dict[str, str]] = None,
        authorize: bool = True
    ) -> requests.PreparedRequest:
        headers = {"User-Agent": self.user_agent}
        if authorize:
            headers["Authorization"] = f"Discogs token={self.token}"

        try:
            return requests.Request("GET", url, params=params, headers=headers).prepare()
        except (requests.RequestException, ValueError) as exc:
            raise TransportError(f"invalid request for {url}: {exc}") from exc

    def _send(self, request: requests.PreparedRequest) -> requests.Response:
        # Only requests that are actually sent consume a rate limit slot
        self.rate_limiter.acquire()
        try:
            resp = self.session.send(request, timeout=self.timeout)
            resp.raise_for_status()
        except requests.RequestException as exc:
            raise TransportError(f"GET {request.url} failed: {exc}") from exc
        return resp

    def fetch(self, url: str, params: Optional[Dict[str, str]] = None) -> Any:
        """Fetch a URL and decode its JSON body.

        Args:
            url: API URL to fetch
            params: Optional query parameters

        Returns:
            Decoded JSON payload

        Raises:
            TransportError: On connection, timeout or HTTP status failures
            DecodeError: If the body is not valid JSON
        """
        resp = self._send(self._prepare(url, params))
        try:
            return resp.json()
        except ValueError as exc:
            raise DecodeError(f"invalid JSON from {url}: {exc}") from exc

    def fetch_document(self, url: str) -> str:
        """Fetch an HTML page from the Discogs website.

        Args:
            url: Page URL

        Returns:
            HTML content as string

        Raises:
            TransportError: On connection, timeout or HTTP status failures
        """
        resp = self._send(self._prepare(url, authorize=False))
        return resp.text


def walk_all(
    fetch: Callable[[str], Any],
    start_url: str,
    decode: Callable[[Any], Page[T]]
) -> List[T]:
    """Collect the items of every page of a paginated resource.

    Args:
        fetch: Function returning the decoded payload of a URL
        start_url: URL of the first page
        decode: Function turning a payload into a Page

    Returns:
        Items of all pages, in page order

    Raises:
        ProtocolError: If a page links back to an already fetched URL
    """
    items: List[T] = []
    visited = set()
    url: Optional[str] = start_url

    while url:
        visited.add(url)
        page = decode(fetch(url))
        items.extend(page.items)
        logger.debug("Fetched %d items from %s", len(page.items), url)

        if page.next_url in visited:
            raise ProtocolError(
                f"pagination does not progress: {url} links to {page.next_url}"
            )
        url = page.next_url

    return items
