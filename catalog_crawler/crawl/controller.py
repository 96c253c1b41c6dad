"""
Crawl Controller

Drives the page-by-page traversal of the catalog:

    load page -> wait for product marker -> extract -> filter -> dedup -> ingest
    -> next page (after a fixed delay) or stop

At most one crawl runs at a time per controller. A crawl first clears the
store (full refresh). Per-record ingestion failures are absorbed into the
batch summaries; a page that fails to load or never shows its product
marker ends the crawl. The page fetcher is held open for the whole crawl
and released on every exit path, and the running flag is always reset.
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional

from ..extraction import RecordExtractor, assign_unique_url_keys, filter_accepted
from ..ingestion import BulkIngestor
from ..storage import ProductStore
from .fetchers import BrowserPageFetcher, HttpPageFetcher, PageFetcher
from .settings import CrawlSettings

logger = logging.getLogger(__name__)

FetcherFactory = Callable[[], PageFetcher]


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass
class CrawlState:
    """Progress of the current (or last) crawl."""
    running: bool = False
    current_page: int = 0
    total_successful: int = 0
    total_duplicates: int = 0
    total_errors: int = 0
    total_rejected: int = 0
    pages_processed: int = 0
    last_error: Optional[str] = None
    started_at: Optional[str] = None
    finished_at: Optional[str] = None


@dataclass
class CrawlSummary:
    """Totals of a finished crawl."""
    pages_processed: int
    last_page: int
    total_successful: int
    total_duplicates: int
    total_errors: int
    total_rejected: int
    stopped_early: bool = False


def make_fetcher_factory(settings: CrawlSettings, kind: str = "browser") -> FetcherFactory:
    """
    Return a factory building a fresh fetcher per crawl.

    Args:
        settings: Crawl settings (browser options, headers)
        kind: "browser" (Playwright) or "http" (requests)
    """
    if kind == "browser":
        return lambda: BrowserPageFetcher(
            headless=settings.headless,
            viewport={"width": settings.viewport_width, "height": settings.viewport_height},
            user_agent=settings.user_agent,
            locale_header=settings.accept_language,
        )
    if kind == "http":
        headers = {"Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8"}
        if settings.user_agent:
            headers["User-Agent"] = settings.user_agent
        if settings.accept_language:
            headers["Accept-Language"] = settings.accept_language
        return lambda: HttpPageFetcher(headers=headers)
    raise ValueError(f"Unknown fetcher kind: {kind!r} (expected 'browser' or 'http')")


class CrawlController:
    """
    Single-flight crawl of the paginated catalog into a ProductStore.

    Usage:
        controller = CrawlController(store, make_fetcher_factory(settings), settings)
        controller.start()          # background thread, returns immediately
        controller.status()
        controller.run(start_page=1)  # or synchronously in the caller's thread
    """

    def __init__(
        self,
        store: ProductStore,
        fetcher_factory: FetcherFactory,
        settings: CrawlSettings,
        extractor: Optional[RecordExtractor] = None,
        ingestor: Optional[BulkIngestor] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.store = store
        self.fetcher_factory = fetcher_factory
        self.settings = settings
        self.extractor = extractor or RecordExtractor(
            cdn_base=settings.cdn_base,
            sku_prefix=settings.sku_prefix,
            selectors=settings.selectors,
        )
        self.ingestor = ingestor or BulkIngestor(store)
        self._sleep = sleep

        self.state = CrawlState()
        self._state_lock = threading.Lock()
        self._stop_requested = threading.Event()
        self._worker: Optional[threading.Thread] = None

    # ── Public API ────────────────────────────────────────────────────────────

    def start(self, start_page: int = 1) -> Dict[str, str]:
        """
        Start a crawl in a background thread and return immediately.

        A request while a crawl is running is a no-op.
        """
        if not self._try_begin(start_page):
            logger.info("Crawl already in progress")
            return {"message": "Crawl already in progress", "status": "already_running"}

        self._worker = threading.Thread(
            target=self._run_in_background,
            args=(start_page,),
            name="catalog-crawl",
            daemon=True,
        )
        self._worker.start()
        return {"message": "Crawl started", "status": "running"}

    def run(self, start_page: int = 1) -> Optional[CrawlSummary]:
        """
        Crawl synchronously in the caller's thread.

        Returns:
            CrawlSummary, or None if another crawl is already running

        Raises:
            NavigationError: A page failed to load or never showed products
            BrowserLaunchError: The fetcher could not be started
            StoreUnavailableError: The store failed at the batch level
        """
        if not self._try_begin(start_page):
            logger.info("Crawl already in progress")
            return None
        return self._crawl(start_page)

    def request_stop(self) -> None:
        """Stop after the page currently being processed."""
        self._stop_requested.set()

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Wait for a background crawl to finish. Returns False on timeout."""
        worker = self._worker
        if worker is None:
            return True
        worker.join(timeout)
        return not worker.is_alive()

    @property
    def is_running(self) -> bool:
        with self._state_lock:
            return self.state.running

    def status(self) -> Dict[str, Any]:
        """Coarse crawl status plus the current stored record count."""
        with self._state_lock:
            state = replace(self.state)

        if state.running:
            status = "running"
        elif state.last_error:
            status = "failed"
        elif state.finished_at:
            status = "completed"
        else:
            status = "idle"

        return {
            "total_products": self.store.count(),
            "status": status,
            "current_page": state.current_page,
            "total_successful": state.total_successful,
            "last_error": state.last_error,
            "last_updated": _now_iso(),
        }

    # ── State transitions ─────────────────────────────────────────────────────

    def _try_begin(self, start_page: int) -> bool:
        with self._state_lock:
            if self.state.running:
                return False
            self.state = CrawlState(running=True, current_page=start_page, started_at=_now_iso())
            self._stop_requested.clear()
            return True

    def _finish(self, error: Optional[BaseException] = None) -> None:
        with self._state_lock:
            self.state.running = False
            self.state.finished_at = _now_iso()
            if error is not None:
                self.state.last_error = f"{type(error).__name__}: {error}"

    # ── Crawl loop ────────────────────────────────────────────────────────────

    def _run_in_background(self, start_page: int) -> None:
        try:
            self._crawl(start_page)
        except Exception:
            # Already recorded in state.last_error; nobody is waiting on this thread
            logger.exception("Crawl failed")

    def _crawl(self, start_page: int) -> CrawlSummary:
        try:
            with self.fetcher_factory() as fetcher:
                cleared = self.store.clear_all()
                logger.info("Starting crawl at page %d (cleared %d stored products)", start_page, cleared)
                summary = self._traverse(fetcher, start_page)
        except Exception as e:
            self._finish(error=e)
            raise
        except BaseException:
            self._finish()
            raise

        self._finish()
        logger.info(
            "Crawl complete: %d pages, %d saved, %d duplicates, %d errors, %d rejected",
            summary.pages_processed, summary.total_successful, summary.total_duplicates,
            summary.total_errors, summary.total_rejected,
        )
        return summary

    def _traverse(self, fetcher: PageFetcher, start_page: int) -> CrawlSummary:
        page_index = start_page
        stopped_early = False

        while True:
            with self._state_lock:
                self.state.current_page = page_index

            has_next = self._process_page(fetcher, page_index)

            if not has_next:
                break
            if self._stop_requested.is_set():
                logger.info("Stop requested; ending crawl after page %d", page_index)
                stopped_early = True
                break

            page_index += 1
            self._sleep(self.settings.page_delay)

        with self._state_lock:
            state = replace(self.state)

        return CrawlSummary(
            pages_processed=state.pages_processed,
            last_page=page_index,
            total_successful=state.total_successful,
            total_duplicates=state.total_duplicates,
            total_errors=state.total_errors,
            total_rejected=state.total_rejected,
            stopped_early=stopped_early,
        )

    def _process_page(self, fetcher: PageFetcher, page_index: int) -> bool:
        """Run one fetch/extract/ingest cycle. Returns the next-page signal."""
        url = self.settings.page_url(page_index)
        logger.info("Crawling page %d: %s", page_index, url)

        page = fetcher.load(url, self.settings.navigation_timeout)
        fetcher.wait_for_marker(page, self.settings.selectors.product_card, self.settings.marker_timeout)
        extraction = fetcher.extract(page, self.extractor.extract_page)

        accepted = filter_accepted(extraction.records)
        rejected = len(extraction.records) - len(accepted)
        batch = assign_unique_url_keys(accepted)

        successful = duplicates = errors = 0
        if batch:
            result = self.ingestor.ingest(batch)
            summary = result.summary
            successful = summary["successful_count"]
            duplicates = summary["duplicate_count"]
            errors = summary["error_count"]
            logger.info(
                "Page %d: processed=%d saved=%d duplicates=%d errors=%d",
                page_index, summary["total_processed"], successful, duplicates, errors,
            )
            for entry in result.duplicates:
                logger.debug("Duplicate %s on %s", entry.record.sku, entry.key_value)
            for entry in result.errors:
                logger.warning("Record %s not saved: %s", entry.record.sku, entry.message)
        else:
            logger.info("Page %d: no valid products", page_index)

        with self._state_lock:
            self.state.total_successful += successful
            self.state.total_duplicates += duplicates
            self.state.total_errors += errors
            self.state.total_rejected += rejected
            self.state.pages_processed += 1

        return extraction.has_next_page
