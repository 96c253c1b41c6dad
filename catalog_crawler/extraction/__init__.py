"""
Product extraction modules for the catalog listing pages.

Modules:
    card_parser - Page structure lookups (cards, pagination labels)
    record_extractor - Field rules that turn cards into ProductRecords
    record_filter - Required-field filter for candidate records
    dedup - Batch-scoped url_key deduplication
"""

from .card_parser import CardSelectors, CatalogCard, PaginationInfo, parse_cards, parse_pagination
from .dedup import assign_unique_url_keys, next_free_key
from .record_extractor import PageExtraction, RecordExtractor, has_next_page
from .record_filter import filter_accepted, is_accepted

__all__ = [
    # Page structure
    'CardSelectors',
    'CatalogCard',
    'PaginationInfo',
    'parse_cards',
    'parse_pagination',
    # Field rules
    'RecordExtractor',
    'PageExtraction',
    'has_next_page',
    # Filtering and dedup
    'filter_accepted',
    'is_accepted',
    'assign_unique_url_keys',
    'next_free_key',
]
