"""
Catalog Crawler

Crawls a paginated product catalog, extracts product records from the
rendered listing pages and ingests them into a SQLite product store.

Modules:
    models      - Data models (ProductRecord, BulkOperationResult)
    common      - Shared utilities (config loader, numerals, logging, CSV utils)
    extraction  - Card parsing, field rules, filtering and url_key dedup
    storage     - SQLite product store
    ingestion   - Bulk ingestion with duplicate/error partitioning
    crawl       - Page fetchers and the crawl controller
    export      - CSV export of stored products
"""
