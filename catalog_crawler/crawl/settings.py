"""
Crawl settings built from config/crawler.yaml.
"""

import os
from dataclasses import dataclass, field
from typing import Any, Dict, Optional
from urllib.parse import urlencode

from ..common.config_loader import load_crawler_config
from ..errors import ConfigError
from ..extraction.card_parser import CardSelectors

DB_PATH_ENV = "CATALOG_DB_PATH"


@dataclass
class CrawlSettings:
    """Typed view of the crawler configuration."""

    base_url: str
    page_param: str = "page"
    cdn_base: str = "https://cdn.abyat.com/products"
    sku_prefix: str = "TAY"
    navigation_timeout: float = 300.0   # seconds
    marker_timeout: float = 300.0       # seconds
    page_delay: float = 2.0             # seconds
    headless: bool = True
    viewport_width: int = 1920
    viewport_height: int = 1080
    user_agent: str = ""
    accept_language: str = ""
    selectors: CardSelectors = field(default_factory=CardSelectors)
    database_path: str = "data/products.db"

    def page_url(self, page_index: int) -> str:
        """URL of a 1-based listing page."""
        separator = "&" if "?" in self.base_url else "?"
        return f"{self.base_url}{separator}{urlencode({self.page_param: page_index})}"

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> "CrawlSettings":
        """
        Build settings from a parsed crawler.yaml mapping.

        Raises:
            ConfigError: If catalog.base_url is missing
        """
        catalog = config.get("catalog") or {}
        crawl = config.get("crawl") or {}
        storage = config.get("storage") or {}
        viewport = crawl.get("viewport") or {}

        base_url = catalog.get("base_url")
        if not base_url:
            raise ConfigError("catalog.base_url is required in crawler.yaml")

        return cls(
            base_url=base_url,
            page_param=catalog.get("page_param", "page"),
            cdn_base=catalog.get("cdn_base", cls.cdn_base),
            sku_prefix=catalog.get("sku_prefix", cls.sku_prefix),
            navigation_timeout=float(crawl.get("navigation_timeout_seconds", 300)),
            marker_timeout=float(crawl.get("marker_timeout_seconds", 300)),
            page_delay=float(crawl.get("page_delay_seconds", 2)),
            headless=bool(crawl.get("headless", True)),
            viewport_width=int(viewport.get("width", 1920)),
            viewport_height=int(viewport.get("height", 1080)),
            user_agent=crawl.get("user_agent", ""),
            accept_language=crawl.get("accept_language", ""),
            selectors=CardSelectors.from_config(config.get("selectors")),
            database_path=os.getenv(DB_PATH_ENV) or storage.get("database_path", "data/products.db"),
        )

    @classmethod
    def load(cls, overrides: Optional[Dict[str, Any]] = None) -> "CrawlSettings":
        """Load settings from config/crawler.yaml, then apply attribute overrides."""
        settings = cls.from_config(load_crawler_config())
        for name, value in (overrides or {}).items():
            if value is None:
                continue
            if not hasattr(settings, name):
                raise ConfigError(f"Unknown crawl setting: {name}")
            setattr(settings, name, value)
        return settings
