"""
Data models for catalog records.

This module contains pure data classes with no business logic.
"""

from .bulk_result import BulkOperationResult, DuplicateEntry, ErrorEntry
from .product import INTEGER_FIELDS, PRODUCT_FIELDNAMES, UNTITLED_PRODUCT, ProductRecord

__all__ = [
    'ProductRecord',
    'PRODUCT_FIELDNAMES',
    'INTEGER_FIELDS',
    'UNTITLED_PRODUCT',
    'BulkOperationResult',
    'DuplicateEntry',
    'ErrorEntry',
]
