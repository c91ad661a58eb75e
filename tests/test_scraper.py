"""Tests for listing price and condition reconstruction."""
from unittest.mock import MagicMock

import pytest
from bs4 import BeautifulSoup

from discogs_notifier.exceptions import ParseError
from discogs_notifier.models import ListedItem
from discogs_notifier.scraper import (
    CONDITION_RANKS,
    ScraperService,
    condition_of,
    price_from_entry,
    price_of,
    reconstructed_price,
)


class TestConditionOf:

    @pytest.mark.parametrize("text, rank", [
        ("Mint (M)", 9),
        ("Near Mint (NM or M-)", 8),
        ("Very Good Plus (VG+)", 7),
        ("Very Good (VG)", 6),
        ("Good Plus (G+)", 5),
        ("Good (G)", 4),
        ("Fair (F)", 3),
        ("Poor (P)", 2),
        ("Generic", 1),
    ])
    def test_known_labels(self, text, rank):
        assert condition_of(text) == rank

    @pytest.mark.parametrize("text", ["", None, "Not Graded", "No Cover"])
    def test_unknown_labels_rank_zero(self, text):
        assert condition_of(text) == 0

    def test_labels_are_checked_longest_first(self):
        labels = [label for label, _ in CONDITION_RANKS]

        assert labels.index("Very Good Plus") < labels.index("Very Good")
        assert labels.index("Good Plus") < labels.index("Good")
        assert labels.index("Near Mint") < labels.index("Mint")


class TestPriceOf:

    @pytest.mark.parametrize("text, expected", [
        ("€12.50", 1250),
        ("$5", 5),
        ("+A$7.5 shipping", 75),
        ("about 20.00 total", 2000),
        ("1,299.00", 1),
    ])
    def test_first_number_without_decimal_point(self, text, expected):
        assert price_of(text) == expected

    @pytest.mark.parametrize("text", ["", None, "free shipping"])
    def test_missing_number(self, text):
        with pytest.raises(ParseError):
            price_of(text)


class TestReconstructedPrice:

    def test_item_share_of_converted_total(self):
        # 20.00 item + 5.00 shipping, shown as A$40.00 in total
        assert reconstructed_price(2000, 500, 4000) == 3200

    def test_truncates_towards_zero(self):
        assert reconstructed_price(1, 2, 10) == 3

    def test_no_shipping(self):
        assert reconstructed_price(1500, 0, 2400) == 2400

    def test_zero_total(self):
        with pytest.raises(ParseError):
            reconstructed_price(0, 0, 100)


def _entry(item_id="123-abc", price="€20.00", shipping="+€5.00 shipping",
           converted="about A$40.00 total", media="Very Good Plus (VG+)",
           sleeve="Good Plus (G+)", unavailable=False, with_link=True):
    classes = "shortcut_navigable unavailable" if unavailable else "shortcut_navigable"
    link = (
        f'<a class="item_description_title" href="/sell/item/{item_id}">Artist - Title</a>'
        if with_link else '<span class="item_description_title">Artist - Title</span>'
    )
    price_html = f'<span class="price">{price}</span>' if price is not None else ""
    return f"""
    <tr class="{classes}">
      <td class="item_description">
        {link}
        <p class="item_condition">
          <span>Media:</span>
          <span></span>
          <span>{media}</span>
          <span></span>
          <span>Sleeve:</span>
          <span></span>
          <span>{sleeve}</span>
        </p>
      </td>
      <td class="seller_info">
        <ul>
          <li><strong>record_shop</strong></li>
          <li>100.0%</li>
          <li><span>Ships From:</span> Germany</li>
        </ul>
      </td>
      <td class="item_price">
        {price_html}
        <span class="item_shipping">{shipping}</span>
        <span class="converted_price">{converted}</span>
      </td>
    </tr>
    """


def _document(*entries):
    return "<html><body><table>" + "".join(entries) + "</table></body></html>"


@pytest.fixture
def scraper():
    return ScraperService(MagicMock())


class TestExtractListings:

    def test_parses_listing(self, scraper):
        items = scraper.extract_listings(_document(_entry()))

        assert items == [ListedItem(
            id="123-abc",
            seller="record_shop",
            location="Germany",
            price=3200,
            media_condition=7,
            sleeve_condition=5,
        )]

    def test_keeps_document_order(self, scraper):
        doc = _document(_entry("1"), _entry("2"), _entry("3"))

        assert [i.id for i in scraper.extract_listings(doc)] == ["1", "2", "3"]

    def test_skips_unavailable_entries(self, scraper):
        doc = _document(_entry("1", unavailable=True), _entry("2"))

        assert [i.id for i in scraper.extract_listings(doc)] == ["2"]

    def test_skips_entry_without_link(self, scraper, caplog):
        doc = _document(_entry("1", with_link=False), _entry("2"))

        assert [i.id for i in scraper.extract_listings(doc)] == ["2"]
        assert "without item link" in caplog.text

    def test_skips_entry_with_bad_price(self, scraper, caplog):
        doc = _document(_entry("1", shipping="free"), _entry("2", price=None), _entry("3"))

        assert [i.id for i in scraper.extract_listings(doc)] == ["3"]
        assert "Skipping listing 1" in caplog.text

    def test_accepts_parsed_document(self, scraper):
        soup = BeautifulSoup(_document(_entry()), "html.parser")

        assert len(scraper.extract_listings(soup)) == 1

    def test_empty_document(self, scraper):
        assert scraper.extract_listings("<html></html>") == []


def test_price_from_entry_missing_field():
    soup = BeautifulSoup(_entry(price=None), "html.parser")

    with pytest.raises(ParseError):
        price_from_entry(soup.select_one(".shortcut_navigable"))


def test_scrape_listed_items_fetches_sell_page():
    fetcher = MagicMock()
    fetcher.fetch_document.return_value = _document(_entry("42"))

    items = ScraperService(fetcher).scrape_listed_items(1234)

    fetcher.fetch_document.assert_called_once_with("https://www.discogs.com/sell/release/1234")
    assert [i.id for i in items] == ["42"]
