"""
Record Filter

Drops candidate records that lack the required identity fields.
"""

from typing import Iterable, List

from ..models import UNTITLED_PRODUCT, ProductRecord


def is_accepted(record: ProductRecord) -> bool:
    """A record needs a real name and a SKU to be ingested."""
    return bool(record.name) and bool(record.sku) and record.name != UNTITLED_PRODUCT


def filter_accepted(records: Iterable[ProductRecord]) -> List[ProductRecord]:
    """Return the accepted records in their original order."""
    return [record for record in records if is_accepted(record)]
