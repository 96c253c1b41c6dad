"""
Catalog Record Extractor

Turns raw catalog cards into candidate product records and decides
whether the listing has another page.

Field rules:
- product id: path segment after "products/" in the card link
- name: trimmed title, "Untitled Product" when empty
- dimensions: first "W x H" pair in the color/dimension line
- price: digits and dots only, "0" when nothing is left
- qty: "تبقى N" (N remaining) -> N; "متوفر" (available) -> 100; else 0
- sku: "<prefix>-<product id>", or a time + random fallback
- url_key: "<sku>-<slug of name>"
"""

from __future__ import annotations

import logging
import random
import re
import string
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, List, Optional

from bs4 import BeautifulSoup

from ..common.config_loader import load_catalog_defaults
from ..common.numerals import convert_arabic_numerals, parse_int
from ..common.text_utils import clean_price, slugify
from ..errors import ConfigError
from ..models import PRODUCT_FIELDNAMES, UNTITLED_PRODUCT, ProductRecord
from .card_parser import CardSelectors, CatalogCard, PaginationInfo, parse_cards, parse_pagination

logger = logging.getLogger(__name__)

DIMENSIONS_RE = re.compile(r'([0-9]+(?:\.[0-9]+)?)\s*x\s*([0-9]+(?:\.[0-9]+)?)')
# "تبقى ٥" = "5 left"; digits may be ASCII or Arabic-Indic
REMAINING_STOCK_RE = re.compile(r'تبقى ([0-9٠-٩]+)')
AVAILABLE_TOKEN = 'متوفر'
AVAILABLE_QTY = 100

ADDITIONAL_IMAGE_COUNT = 4
NEWS_WINDOW_DAYS = 60
_FALLBACK_SUFFIX_CHARS = string.ascii_lowercase + string.digits


@dataclass
class PageExtraction:
    """Candidate records of one listing page plus the continuation signal."""
    records: List[ProductRecord] = field(default_factory=list)
    has_next_page: bool = False


def extract_product_id(link_url: str) -> str:
    """Return the path segment following 'products/' in a link, or ''."""
    if not link_url or 'products/' not in link_url:
        return ''
    tail = link_url.split('products/', 1)[1]
    return re.split(r'[/?#]', tail, maxsplit=1)[0]


def parse_dimensions(text: str) -> tuple[str, str]:
    """Return (width, height) from text like '60 x 90 سم'; ('', '') on no match."""
    match = DIMENSIONS_RE.search(text or '')
    if not match:
        return '', ''
    return match.group(1), match.group(2)


def parse_stock_quantity(stock_text: str) -> int:
    """Derive an integer quantity from the stock status line."""
    stock_text = stock_text or ''
    match = REMAINING_STOCK_RE.search(stock_text)
    if match:
        return int(convert_arabic_numerals(match.group(1)))
    if AVAILABLE_TOKEN in stock_text:
        return AVAILABLE_QTY
    return 0


def has_next_page(pagination: PaginationInfo) -> bool:
    """
    Decide whether the listing continues past the active page.

    Missing active indicator, no numeric labels or an unreadable active
    label all mean "no more pages".
    """
    if pagination.active_label is None:
        return False

    page_numbers = [n for n in (parse_int(label) for label in pagination.page_labels) if n is not None]
    if not page_numbers:
        return False

    current_page = parse_int(pagination.active_label)
    if current_page is None:
        return False

    return current_page < max(page_numbers)


class RecordExtractor:
    """
    Builds candidate ProductRecords from catalog cards.

    Usage:
        extractor = RecordExtractor(cdn_base="https://cdn.example.com/products")
        extraction = extractor.extract_page(soup, page_url)
        extraction.records, extraction.has_next_page
    """

    def __init__(
        self,
        field_defaults: Optional[Dict[str, Any]] = None,
        cdn_base: str = "https://cdn.abyat.com/products",
        sku_prefix: str = "TAY",
        selectors: Optional[CardSelectors] = None,
        clock: Callable[[], datetime] | None = None,
        rng: random.Random | None = None,
    ):
        """
        Initialize the extractor.

        Args:
            field_defaults: Fixed field values for the catalog segment
                (loaded from config/catalog_defaults.yaml if None)
            cdn_base: Base URL of the product image CDN
            sku_prefix: Prefix of generated SKUs
            selectors: Listing page selectors
            clock: Returns the current UTC time (for news dates and fallback SKUs)
            rng: Random source for fallback SKU suffixes
        """
        if field_defaults is None:
            field_defaults = load_catalog_defaults()

        unknown = set(field_defaults) - set(PRODUCT_FIELDNAMES)
        if unknown:
            raise ConfigError(f"Unknown product fields in catalog defaults: {sorted(unknown)}")

        self.field_defaults = dict(field_defaults)
        self.cdn_base = cdn_base.rstrip('/')
        self.sku_prefix = sku_prefix
        self.selectors = selectors or CardSelectors()
        self.clock = clock or (lambda: datetime.now(timezone.utc))
        self.rng = rng or random.Random()

    def extract_page(self, soup: BeautifulSoup, page_url: str = "") -> PageExtraction:
        """Extract every card on the page and the next-page signal."""
        cards = parse_cards(soup, self.selectors, page_url=page_url)
        logger.debug("Found %d product cards on %s", len(cards), page_url or "page")

        now = self.clock()
        records = [self.extract_card(card, now=now) for card in cards]

        return PageExtraction(
            records=records,
            has_next_page=has_next_page(parse_pagination(soup, self.selectors)),
        )

    def extract_card(self, card: CatalogCard, now: Optional[datetime] = None) -> ProductRecord:
        """Apply the field rules to a single card."""
        now = now or self.clock()

        product_id = extract_product_id(card.link_url)
        name = (card.title or '').strip() or UNTITLED_PRODUCT
        width, height = parse_dimensions(card.color_dimensions)
        price = clean_price(convert_arabic_numerals(card.price)) or '0'
        qty = parse_stock_quantity(card.stock)
        sku = self._build_sku(product_id, now)

        values = dict(self.field_defaults)
        values.update(
            sku=sku,
            barcode=product_id,
            link_url=card.link_url,
            name=name,
            meta_title=name,
            url_key=f"{sku}-{slugify(name)}",
            description=name,
            short_description=name,
            color=(card.color_dimensions or '').split('|')[0].strip(),
            ts_dimensions_height=height or '0',
            ts_dimensions_width=width or '0',
            price=price,
            news_from_date=now.isoformat(),
            news_to_date=(now + timedelta(days=NEWS_WINDOW_DAYS)).isoformat(),
            base_image=card.image_url,
            small_image=card.image_url,
            swatch_image=card.image_url,
            thumbnail_image=card.image_url,
            additional_images=self._additional_images(product_id),
            qty=qty,
            max_cart_qty=qty,
            is_in_stock=1 if qty > 0 else 0,
        )
        return ProductRecord(**values)

    def _build_sku(self, product_id: str, now: datetime) -> str:
        if product_id:
            return f"{self.sku_prefix}-{product_id}"
        # No stable id on the card: time + random keeps fallback SKUs apart
        suffix = ''.join(self.rng.choices(_FALLBACK_SUFFIX_CHARS, k=9))
        return f"{self.sku_prefix}-{int(now.timestamp() * 1000)}-{suffix}"

    def _additional_images(self, product_id: str) -> str:
        if not product_id:
            return ''
        return ','.join(
            f"{self.cdn_base}/{product_id}/{product_id}_PI_{n}.png"
            for n in range(1, ADDITIONAL_IMAGE_COUNT + 1)
        )
