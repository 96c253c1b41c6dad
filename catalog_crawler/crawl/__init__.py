"""
Catalog crawling.

Modules:
    settings - CrawlSettings built from config/crawler.yaml
    fetchers - Page fetchers (Playwright browser, plain HTTP)
    controller - CrawlController (single-flight page traversal)
"""

from .controller import CrawlController, CrawlState, CrawlSummary, make_fetcher_factory
from .fetchers import BrowserPageFetcher, HttpPageFetcher, PageFetcher, RenderedPage
from .settings import CrawlSettings

__all__ = [
    'CrawlController',
    'CrawlState',
    'CrawlSummary',
    'make_fetcher_factory',
    'PageFetcher',
    'BrowserPageFetcher',
    'HttpPageFetcher',
    'RenderedPage',
    'CrawlSettings',
]
