"""Shared pytest fixtures."""
import json
from typing import Any, Dict, List

import pytest
import requests

from discogs_notifier.client import DiscogsClient
from discogs_notifier.models import ListItem, MarketSnapshot


TOKEN = "MY_TOKEN"


def make_response(payload: Any = None, status: int = 200, url: str = "", text: str | None = None) -> requests.Response:
    """Build a requests.Response without touching the network."""
    resp = requests.Response()
    resp.status_code = status
    resp.url = url
    if text is None:
        text = json.dumps(payload)
        resp.headers["Content-Type"] = "application/json"
    resp._content = text.encode("utf-8")
    resp.encoding = "utf-8"
    return resp


class FakeSession:
    """Session answering prepared requests from a URL -> response table."""

    def __init__(self, routes: Dict[str, Any] | None = None):
        self.routes = routes or {}
        self.sent: List[requests.PreparedRequest] = []

    def send(self, request: requests.PreparedRequest, **kwargs) -> requests.Response:
        self.sent.append(request)
        route = self.routes.get(request.url)
        if isinstance(route, Exception):
            raise route
        if isinstance(route, requests.Response):
            route.url = request.url
            return route
        if route is None:
            return make_response({"message": "not found"}, status=404, url=request.url)
        return make_response(route, url=request.url)


class CountingLimiter:
    """Rate limiter stand-in that only counts acquisitions."""

    def __init__(self):
        self.acquired = 0

    def acquire(self) -> float:
        self.acquired += 1
        return 0.0


@pytest.fixture
def limiter() -> CountingLimiter:
    return CountingLimiter()


@pytest.fixture
def session() -> FakeSession:
    return FakeSession()


@pytest.fixture
def client(session, limiter) -> DiscogsClient:
    return DiscogsClient(
        token=TOKEN,
        rate_limiter=limiter,
        user_agent="test-agent",
        timeout=5,
        session=session,
    )


@pytest.fixture
def list_item() -> ListItem:
    return ListItem(
        id=1,
        title="Test Item 1",
        url="https://discogs.com/item1",
        comment="35",
        resource_url="https://api.discogs.com/item1",
    )


def snapshot(item_id: int = 1, num_for_sale: int = 10, minimum_price: float = 0.0,
             lowest_price: float = 30.0) -> MarketSnapshot:
    return MarketSnapshot(
        id=item_id,
        num_for_sale=num_for_sale,
        minimum_price=minimum_price,
        lowest_price=lowest_price,
        currency="AUD",
        name=f"Item {item_id}",
        url=f"https://discogs.com/item{item_id}",
    )
