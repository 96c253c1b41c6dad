"""
Persistence for crawled products.

Modules:
    product_store - SQLite ProductStore (bulk insert, clear, query API)
"""

from .product_store import ProductStore

__all__ = ['ProductStore']
