#!/usr/bin/env python3
"""
Show the product store status: record count, stock split, average price
and categories.

Usage:
    python3 scripts/crawl_status.py
    python3 scripts/crawl_status.py --db data/products.db --json
"""

import argparse
import json
import os
import sys
from datetime import datetime
from pathlib import Path

from dotenv import load_dotenv

# Add project root to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from catalog_crawler.crawl import CrawlSettings
from catalog_crawler.storage import ProductStore

load_dotenv(Path(__file__).parent.parent / ".env")


def main():
    parser = argparse.ArgumentParser(description="Show product store status")
    parser.add_argument(
        "--db",
        help="SQLite database path (default: from config/crawler.yaml or CATALOG_DB_PATH)"
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print machine-readable JSON"
    )
    args = parser.parse_args()

    settings = CrawlSettings.load({"database_path": args.db})

    with ProductStore(settings.database_path) as store:
        stats = store.stats()
        categories = store.categories()

    report = {
        "total_products": stats["total_products"],
        "in_stock": stats["in_stock"],
        "out_of_stock": stats["out_of_stock"],
        "average_price": round(stats["average_price"], 2),
        "categories": categories,
        "last_updated": datetime.now().isoformat(),
    }

    if args.json:
        print(json.dumps(report, ensure_ascii=False, indent=2))
        return

    print("=" * 60)
    print("Product Store Status")
    print("=" * 60)
    print(f"  Database:         {settings.database_path}")
    print(f"  Total products:   {report['total_products']}")
    print(f"  In stock:         {report['in_stock']}")
    print(f"  Out of stock:     {report['out_of_stock']}")
    print(f"  Average price:    {report['average_price']}")
    print(f"  Categories:       {', '.join(categories) if categories else '-'}")
    print("=" * 60)


if __name__ == "__main__":
    main()
