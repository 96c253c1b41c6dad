"""Shared test fixtures."""

import random
from datetime import datetime, timezone
from typing import Dict, List, Optional, Set

import pytest
from bs4 import BeautifulSoup

from catalog_crawler.crawl import CrawlSettings, PageFetcher, RenderedPage
from catalog_crawler.errors import NavigationError
from catalog_crawler.extraction import RecordExtractor
from catalog_crawler.models import ProductRecord
from catalog_crawler.storage import ProductStore

FIXED_NOW = datetime(2026, 3, 1, 12, 0, 0, tzinfo=timezone.utc)
CATEGORY_URL = "https://shop.example.com/sa/ar/category/wall_art_and_mirrors"


def _card_html(
    product_id: Optional[str] = "123",
    title: str = "Chair",
    specs: str = "أسود | 60 x 90 سم",
    price: str = "120.00 ر.س",
    stock: str = "متوفر",
    image: str = "https://cdn.example.com/img/123.png",
) -> str:
    href = f"/sa/ar/products/{product_id}" if product_id else "/sa/ar/category/offers"
    return f"""
    <div class="impression">
      <a href="{href}">
        <img src="{image}">
        <div class="text-[16px] font-bold">{title}</div>
      </a>
      <div class="text-gray-dark text-sm">{specs}</div>
      <div class="price"><span>{price}</span></div>
      <div data-stock-value="1">{stock}</div>
    </div>
    """


def _listing_html(cards: List[str], page_labels: Optional[List[str]] = None, active: Optional[str] = None) -> str:
    pagination = ""
    if page_labels is not None:
        items = []
        for label in page_labels:
            css = "page-index active" if label == active else "page-index"
            items.append(f'<div class="{css}"><h6>{label}</h6></div>')
        pagination = f'<nav class="pagination">{"".join(items)}</nav>'
    return f"<html><body><main>{''.join(cards)}</main>{pagination}</body></html>"


@pytest.fixture
def make_card_html():
    """Build the HTML of one product card."""
    return _card_html


@pytest.fixture
def make_listing_html():
    """Build a listing page from card HTML plus optional pagination labels."""
    return _listing_html


@pytest.fixture
def make_soup():
    return lambda html: BeautifulSoup(html, "lxml")


@pytest.fixture
def fixed_now():
    return FIXED_NOW


@pytest.fixture
def field_defaults() -> Dict[str, object]:
    """Small set of catalog constants."""
    return {
        "categories1": "أثاث وغرف",
        "categories": "Home Decor/Wall Art & Mirrors",
        "style": "عصري",
        "supplier": "TAY",
        "mgs_brand": "Abyat",
        "vendor_score": "2",
    }


@pytest.fixture
def extractor(field_defaults):
    return RecordExtractor(
        field_defaults=field_defaults,
        cdn_base="https://cdn.example.com/products",
        sku_prefix="TAY",
        clock=lambda: FIXED_NOW,
        rng=random.Random(42),
    )


@pytest.fixture
def make_record():
    """Create a valid ProductRecord; keyword arguments override fields."""
    def _make(sku: str = "TAY-1", name: str = "Chair", **overrides) -> ProductRecord:
        values = {
            "sku": sku,
            "name": name,
            "url_key": f"{sku}-{name.lower()}",
            "price": "100",
            "categories1": "أثاث وغرف",
        }
        values.update(overrides)
        return ProductRecord(**values)
    return _make


@pytest.fixture
def store(tmp_path):
    product_store = ProductStore(str(tmp_path / "products.db"))
    yield product_store
    product_store.close()


@pytest.fixture
def crawl_settings():
    return CrawlSettings(base_url=CATEGORY_URL, page_delay=0, navigation_timeout=5, marker_timeout=5)


class FakePageFetcher(PageFetcher):
    """
    In-memory fetcher serving canned HTML per URL.

    Records open/close and the URLs loaded; pages listed in fail_urls raise
    NavigationError on load.
    """

    def __init__(self, pages: Dict[str, str], fail_urls: Optional[Set[str]] = None):
        self.pages = pages
        self.fail_urls = fail_urls or set()
        self.loaded: List[str] = []
        self.opened = False
        self.closed = False

    def open(self) -> None:
        self.opened = True

    def close(self) -> None:
        self.closed = True

    def load(self, url: str, timeout: float) -> RenderedPage:
        self.loaded.append(url)
        if url in self.fail_urls or url not in self.pages:
            raise NavigationError(f"Failed to load {url}", url=url)
        return RenderedPage(url=url, html=self.pages[url])

    def wait_for_marker(self, page: RenderedPage, selector: str, timeout: float) -> None:
        if BeautifulSoup(page.html, "lxml").select_one(selector) is None:
            raise NavigationError(f"Marker {selector!r} missing on {page.url}", url=page.url)


@pytest.fixture
def fake_fetcher_class():
    return FakePageFetcher
