"""
Page Fetchers

Load a listing page, wait until its product marker is present, and run
extraction against the rendered HTML.

Implementations:
    BrowserPageFetcher - headless Chromium via Playwright (JavaScript-rendered pages)
    HttpPageFetcher    - plain HTTP via requests, re-fetching until the marker appears

Both are context managers; the crawl controller opens one around the whole
crawl so the browser/session is released on every exit path.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, TypeVar

import requests
from bs4 import BeautifulSoup
from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import sync_playwright

from ..errors import BrowserLaunchError, NavigationError

logger = logging.getLogger(__name__)

T = TypeVar("T")
ExtractFn = Callable[[BeautifulSoup, str], T]


@dataclass
class RenderedPage:
    """Handle to a loaded page."""
    url: str
    html: str = ""
    handle: Any = None  # Playwright Page for browser-rendered pages


class PageFetcher:
    """Base class for page fetchers."""

    def open(self) -> None:
        """Acquire the session/browser. No-op by default."""

    def close(self) -> None:
        """Release the session/browser. No-op by default."""

    def __enter__(self):
        self.open()
        return self

    def __exit__(self, *args):
        self.close()

    def load(self, url: str, timeout: float) -> RenderedPage:
        raise NotImplementedError

    def wait_for_marker(self, page: RenderedPage, selector: str, timeout: float) -> None:
        raise NotImplementedError

    def content(self, page: RenderedPage) -> str:
        return page.html

    def extract(self, page: RenderedPage, extract_fn: ExtractFn) -> T:
        """Run extract_fn(soup, page_url) against the current page content."""
        soup = BeautifulSoup(self.content(page), "lxml")
        return extract_fn(soup, page.url)


class HttpPageFetcher(PageFetcher):
    """
    Fetches pages over plain HTTP.

    Suitable when the listing is server-rendered. If the marker is missing
    the page is re-fetched every poll_interval seconds until the timeout.
    """

    def __init__(
        self,
        headers: Optional[Dict[str, str]] = None,
        poll_interval: float = 5.0,
        session: Optional[requests.Session] = None,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.headers = headers or {
            "User-Agent": "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36",
            "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
        }
        self.poll_interval = poll_interval
        self.session = session
        self._owns_session = session is None
        self._sleep = sleep
        self._clock = clock

    def open(self) -> None:
        if self.session is None:
            self.session = requests.Session()
            self._owns_session = True
        self.session.headers.update(self.headers)

    def close(self) -> None:
        if self.session is not None and self._owns_session:
            self.session.close()
            self.session = None

    def _get(self, url: str, timeout: float) -> str:
        if self.session is None:
            self.open()
        try:
            response = self.session.get(url, timeout=timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            raise NavigationError(f"Failed to load {url}: {e}", url=url) from e
        return response.text

    def load(self, url: str, timeout: float) -> RenderedPage:
        logger.debug("GET %s", url)
        return RenderedPage(url=url, html=self._get(url, timeout))

    def wait_for_marker(self, page: RenderedPage, selector: str, timeout: float) -> None:
        deadline = self._clock() + timeout
        while True:
            if BeautifulSoup(page.html, "lxml").select_one(selector) is not None:
                return
            remaining = deadline - self._clock()
            if remaining <= 0:
                raise NavigationError(
                    f"Marker {selector!r} did not appear on {page.url} within {timeout:.0f}s",
                    url=page.url,
                )
            self._sleep(min(self.poll_interval, remaining))
            page.html = self._get(page.url, timeout)


class BrowserPageFetcher(PageFetcher):
    """
    Renders pages in headless Chromium through Playwright.

    Usage:
        with BrowserPageFetcher() as fetcher:
            page = fetcher.load(url, timeout=300)
            fetcher.wait_for_marker(page, ".impression", timeout=300)
            result = fetcher.extract(page, extractor.extract_page)
    """

    def __init__(
        self,
        headless: bool = True,
        viewport: Optional[Dict[str, int]] = None,
        user_agent: str = "",
        locale_header: str = "",
    ):
        self.headless = headless
        self.viewport = viewport or {"width": 1920, "height": 1080}
        self.user_agent = user_agent
        self.locale_header = locale_header
        self._playwright = None
        self._browser = None
        self._context = None
        self._page = None

    def open(self) -> None:
        try:
            self._playwright = sync_playwright().start()
            self._browser = self._playwright.chromium.launch(headless=self.headless)
            context_args: Dict[str, Any] = {"viewport": self.viewport}
            if self.user_agent:
                context_args["user_agent"] = self.user_agent
            if self.locale_header:
                context_args["extra_http_headers"] = {"Accept-Language": self.locale_header}
            self._context = self._browser.new_context(**context_args)
            self._page = self._context.new_page()
        except PlaywrightError as e:
            self.close()
            raise BrowserLaunchError(f"Could not start browser: {e}") from e
        logger.debug("Browser started (headless=%s)", self.headless)

    def close(self) -> None:
        try:
            try:
                if self._context is not None:
                    self._context.close()
            finally:
                if self._browser is not None:
                    self._browser.close()
        finally:
            if self._playwright is not None:
                self._playwright.stop()
            self._playwright = self._browser = self._context = self._page = None

    def load(self, url: str, timeout: float) -> RenderedPage:
        if self._page is None:
            raise BrowserLaunchError("Browser is not open; use the fetcher as a context manager")
        logger.debug("Navigating to %s", url)
        try:
            self._page.goto(url, wait_until="domcontentloaded", timeout=timeout * 1000)
        except PlaywrightError as e:
            raise NavigationError(f"Failed to load {url}: {e}", url=url) from e
        return RenderedPage(url=url, handle=self._page)

    def wait_for_marker(self, page: RenderedPage, selector: str, timeout: float) -> None:
        try:
            page.handle.wait_for_selector(selector, timeout=timeout * 1000)
        except PlaywrightError as e:
            raise NavigationError(
                f"Marker {selector!r} did not appear on {page.url}: {e}", url=page.url
            ) from e

    def content(self, page: RenderedPage) -> str:
        page.html = page.handle.content()
        return page.html
