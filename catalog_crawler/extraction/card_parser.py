"""
Catalog Card Parser

Reads product cards and pagination labels out of a rendered category page.

This is the only module that knows the page structure (CSS selectors).
It returns raw text values; the field rules that turn them into records
live in record_extractor.
"""

from dataclasses import dataclass, field, fields
from typing import Any, Dict, List, Optional
from urllib.parse import urljoin

from bs4 import BeautifulSoup, Tag


@dataclass
class CardSelectors:
    """CSS selectors for the category listing page."""
    product_card: str = ".impression"
    title: str = r".text-\[16px\]"
    color_dimensions: str = 'div[class*="text-gray-dark"]'
    price: str = ".price span"
    stock: str = "[data-stock-value]"
    image: str = "img"
    link: str = "a"
    page_labels: str = ".page-index h6"
    active_page: str = ".page-index.active"

    @classmethod
    def from_config(cls, config: Optional[Dict[str, Any]]) -> "CardSelectors":
        """Build selectors from the 'selectors' config section; unknown keys are ignored."""
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in (config or {}).items() if k in known})


@dataclass
class CatalogCard:
    """Raw text values of one product card."""
    title: str = ""
    color_dimensions: str = ""
    price: str = ""
    stock: str = ""
    image_url: str = ""
    link_url: str = ""


@dataclass
class PaginationInfo:
    """Raw pagination labels of a listing page."""
    page_labels: List[str] = field(default_factory=list)
    active_label: Optional[str] = None


def _text(card: Tag, selector: str) -> str:
    element = card.select_one(selector)
    return element.get_text() if element else ""


def _attr(card: Tag, selector: str, attribute: str) -> str:
    element = card.select_one(selector)
    if element is None:
        return ""
    value = element.get(attribute)
    return value.strip() if isinstance(value, str) else ""


def parse_cards(
    soup: BeautifulSoup,
    selectors: Optional[CardSelectors] = None,
    page_url: str = "",
) -> List[CatalogCard]:
    """
    Extract the raw card values from a listing page.

    Args:
        soup: Parsed page
        selectors: Page selectors (defaults to the storefront's layout)
        page_url: URL of the page, used to absolutize links and image sources

    Returns:
        One CatalogCard per product card, in page order
    """
    selectors = selectors or CardSelectors()
    cards = []

    for element in soup.select(selectors.product_card):
        link = _attr(element, selectors.link, "href")
        image = _attr(element, selectors.image, "src")
        cards.append(CatalogCard(
            title=_text(element, selectors.title),
            color_dimensions=_text(element, selectors.color_dimensions),
            price=_text(element, selectors.price),
            stock=_text(element, selectors.stock),
            image_url=urljoin(page_url, image) if image and page_url else image,
            link_url=urljoin(page_url, link) if link and page_url else link,
        ))

    return cards


def parse_pagination(soup: BeautifulSoup, selectors: Optional[CardSelectors] = None) -> PaginationInfo:
    """Collect the non-blank page index labels and the active page label."""
    selectors = selectors or CardSelectors()

    labels = [
        element.get_text()
        for element in soup.select(selectors.page_labels)
        if element.get_text().strip()
    ]
    active = soup.select_one(selectors.active_page)

    return PaginationInfo(
        page_labels=labels,
        active_label=active.get_text() if active is not None else None,
    )
