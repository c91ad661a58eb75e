"""Listing extraction from Discogs marketplace sell pages."""
import logging
import re
from typing import List, Optional, Protocol, Tuple, Union

from bs4 import BeautifulSoup, Tag

from .exceptions import ParseError
from .models import ListedItem


logger = logging.getLogger(__name__)

SELL_RELEASE_URL = "https://www.discogs.com/sell/release/"

# Longest label first so "Good Plus" is never ranked as "Good"
CONDITION_RANKS: Tuple[Tuple[str, int], ...] = tuple(sorted(
    (
        ("Mint", 9),
        ("Near Mint", 8),
        ("Very Good Plus", 7),
        ("Very Good", 6),
        ("Good Plus", 5),
        ("Good", 4),
        ("Fair", 3),
        ("Poor", 2),
        ("Generic", 1),
    ),
    key=lambda pair: len(pair[0]),
    reverse=True,
))

_PRICE_RE = re.compile(r"[0-9]+(\.[0-9][0-9]?)?")


class DocumentFetcher(Protocol):
    """Protocol for fetching HTML documents (allows for easier testing)."""

    def fetch_document(self, url: str) -> str:
        """Fetch a page and return its HTML."""
        ...


def condition_of(text: Optional[str]) -> int:
    """Rank a condition label; 0 when no known label is present."""
    if not text:
        return 0
    for label, rank in CONDITION_RANKS:
        if label in text:
            return rank
    return 0


def price_of(text: Optional[str]) -> int:
    """Extract the first price in a text as an integer with the decimal point removed.

    "€12.50" yields 1250 and "5" yields 5.

    Raises:
        ParseError: If the text holds no number
    """
    match = _PRICE_RE.search(text or "")
    if not match:
        raise ParseError(f"no price in {text!r}")
    return int(match.group(0).replace(".", ""))


def reconstructed_price(raw_price: int, shipping_price: int, converted_price: int) -> int:
    """Share of the converted total that belongs to the item itself.

    The converted price covers item plus shipping; scaling it by the raw
    item share recovers the item price in the converted currency.

    Raises:
        ParseError: If raw and shipping prices sum to zero
    """
    total = raw_price + shipping_price
    if total == 0:
        raise ParseError("raw and shipping prices are both zero")
    return int(raw_price / total * converted_price)


def price_from_entry(entry: Tag) -> int:
    """Reconstruct the item price of a listing entry.

    Raises:
        ParseError: If any of the price fields is missing or not numeric
    """
    fields = []
    for selector in (".price", ".item_shipping", ".converted_price"):
        node = entry.select_one(selector)
        if node is None:
            raise ParseError(f"missing {selector} field")
        fields.append(price_of(node.get_text()))
    return reconstructed_price(*fields)


class ScraperService:
    """Service for scraping marketplace listings of a release."""

    def __init__(
        self,
        fetcher: DocumentFetcher,
        sell_url: str = SELL_RELEASE_URL
    ):
        """Initialize the scraper service.

        Args:
            fetcher: Object fetching HTML pages (usually a DiscogsClient)
            sell_url: URL prefix of release sell pages
        """
        self.fetcher = fetcher
        self.sell_url = sell_url

    def scrape_listed_items(self, release_id: Union[int, str]) -> List[ListedItem]:
        """Fetch the sell page of a release and extract its listings.

        Raises:
            TransportError: If the page cannot be fetched
        """
        html = self.fetcher.fetch_document(f"{self.sell_url}{release_id}")
        return self.extract_listings(html)

    def extract_listings(self, document: Union[str, BeautifulSoup]) -> List[ListedItem]:
        """Parse available listings from a sell page.

        Args:
            document: HTML content or an already parsed document

        Returns:
            Listings in document order; unparseable entries are skipped
        """
        soup = document
        if isinstance(document, str):
            soup = BeautifulSoup(document, "html.parser")

        items = []
        for entry in soup.select(".shortcut_navigable:not(.unavailable)"):
            item = self._parse_entry(entry)
            if item:
                items.append(item)

        logger.debug("Extracted %d listings", len(items))
        return items

    def _parse_entry(self, entry: Tag) -> Optional[ListedItem]:
        """Parse a single listing entry.

        Returns:
            ListedItem or None if the entry cannot be parsed
        """
        link = entry.select_one(".item_description_title")
        href = link.get("href") if link else None
        if not href:
            logger.warning("Skipping listing without item link")
            return None

        item_id = href.replace("/sell/item/", "")

        try:
            price = price_from_entry(entry)
        except ParseError as exc:
            logger.warning("Skipping listing %s: %s", item_id, exc)
            return None

        return ListedItem(
            id=item_id,
            seller=self._text(entry, ".seller_info li:nth-child(1) strong"),
            location=self._text(entry, ".seller_info li:nth-child(3)")
            .replace("Ships From:", "")
            .strip(),
            price=price,
            media_condition=condition_of(
                self._text(entry, ".item_condition span:nth-child(3)")
            ),
            sleeve_condition=condition_of(
                self._text(entry, ".item_condition span:nth-child(7)")
            ),
        )

    @staticmethod
    def _text(entry: Tag, selector: str) -> str:
        node = entry.select_one(selector)
        return node.get_text(strip=True) if node else ""
