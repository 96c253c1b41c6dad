#!/usr/bin/env python3
"""
Export stored products to CSV.

Usage:
    python3 scripts/export_csv.py
    python3 scripts/export_csv.py --db data/products.db --output output/products.csv
    python3 scripts/export_csv.py --excel   # UTF-8 with BOM for spreadsheet apps
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
from catalog_crawler.crawl import CrawlSettings
from catalog_crawler.export import ProductCSVExporter
from catalog_crawler.storage import ProductStore

load_dotenv(Path(__file__).parent.parent / ".env")

logger = logging.getLogger("catalog_crawler.scripts.export_csv")


def main():
    parser = argparse.ArgumentParser(description="Export stored products to CSV")
    parser.add_argument(
        "--db",
        help="SQLite database path (default: from config/crawler.yaml or CATALOG_DB_PATH)"
    )
    parser.add_argument(
        "--output", "-o",
        default="output/products-export.csv",
        help="Output CSV file (default: output/products-export.csv)"
    )
    parser.add_argument(
        "--excel",
        action="store_true",
        help="Write UTF-8 with BOM so spreadsheet apps detect Arabic text"
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable verbose (debug) logging"
    )

    args = parser.parse_args()
    setup_logging(verbose=args.verbose)

    settings = CrawlSettings.load({"database_path": args.db})

    with ProductStore(settings.database_path) as store:
        if store.count() == 0:
            logger.error("No products found in %s", settings.database_path)
            sys.exit(1)

        output_dir = os.path.dirname(args.output)
        if output_dir:
            os.makedirs(output_dir, exist_ok=True)

        exporter = ProductCSVExporter(encoding="utf-8-sig" if args.excel else "utf-8")
        count = exporter.export(store.iter_products(), args.output)

    print(f"Exported {count} products to {args.output}")


if __name__ == "__main__":
    main()
