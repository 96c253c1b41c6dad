#!/usr/bin/env python3
"""
Catalog Crawl Script

Crawls the configured catalog category page by page and stores the
extracted products in the SQLite product store. Existing products are
cleared first (full refresh).

Usage:
    python3 scripts/crawl_catalog.py
    python3 scripts/crawl_catalog.py --start-page 3 --fetcher http
    python3 scripts/crawl_catalog.py --db data/products.db --log-dir logs --verbose

Environment:
    CATALOG_DB_PATH  Overrides storage.database_path (also read from .env)
"""

import argparse
import logging
import os
import sys
from pathlib import Path

from dotenv import load_dotenv

# Add project root to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from catalog_crawler.common.log_config import setup_logging
from catalog_crawler.crawl import CrawlController, CrawlSettings, make_fetcher_factory
from catalog_crawler.errors import CatalogCrawlerError
from catalog_crawler.storage import ProductStore

load_dotenv(Path(__file__).parent.parent / ".env")

logger = logging.getLogger("catalog_crawler.scripts.crawl_catalog")


def main():
    parser = argparse.ArgumentParser(
        description="Crawl the catalog into the product store (full refresh)"
    )
    parser.add_argument(
        "--start-page", "-p",
        type=int,
        default=1,
        help="Listing page to start from (default: 1)"
    )
    parser.add_argument(
        "--fetcher",
        choices=["browser", "http"],
        default="browser",
        help="Page fetcher: headless browser or plain HTTP (default: browser)"
    )
    parser.add_argument(
        "--db",
        help="SQLite database path (default: from config/crawler.yaml or CATALOG_DB_PATH)"
    )
    parser.add_argument(
        "--delay", "-d",
        type=float,
        help="Delay between pages in seconds (default: from config)"
    )
    parser.add_argument(
        "--headful",
        action="store_true",
        help="Show the browser window"
    )
    parser.add_argument(
        "--log-dir",
        help="Also write JSON-lines logs to this directory"
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable verbose (debug) logging"
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress info messages, show only warnings and errors"
    )

    args = parser.parse_args()
    setup_logging(verbose=args.verbose, quiet=args.quiet, log_dir=args.log_dir)

    if args.start_page < 1:
        parser.error("--start-page must be 1 or greater")

    settings = CrawlSettings.load({
        "database_path": args.db,
        "page_delay": args.delay,
        "headless": False if args.headful else None,
    })

    print("=" * 60)
    print("Catalog Crawl")
    print("=" * 60)
    print(f"  Catalog:          {settings.base_url}")
    print(f"  Start page:       {args.start_page}")
    print(f"  Fetcher:          {args.fetcher}")
    print(f"  Database:         {settings.database_path}")
    print(f"  Page delay:       {settings.page_delay}s")

    try:
        with ProductStore(settings.database_path) as store:
            controller = CrawlController(store, make_fetcher_factory(settings, args.fetcher), settings)
            summary = controller.run(start_page=args.start_page)
            total_stored = store.count()
    except CatalogCrawlerError as e:
        logger.error("Crawl failed: %s", e)
        print(f"\n❌ Crawl failed: {e}")
        sys.exit(1)
    except KeyboardInterrupt:
        print("\nInterrupted.")
        sys.exit(130)

    print("\n" + "=" * 60)
    print("Crawl Summary")
    print("=" * 60)
    print(f"  Pages processed:  {summary.pages_processed} (last page {summary.last_page})")
    print(f"  Saved:            {summary.total_successful}")
    print(f"  Duplicates:       {summary.total_duplicates}")
    print(f"  Errors:           {summary.total_errors}")
    print(f"  Rejected:         {summary.total_rejected}")
    print(f"  Stored products:  {total_stored}")
    print("=" * 60)


if __name__ == "__main__":
    main()
