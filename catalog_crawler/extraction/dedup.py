"""
URL Key Deduplication

Makes url_keys unique within one ingestion batch by suffixing a counter.

Only the batch is considered. A key that is free here may still collide
with a stored record; the store reports that as a duplicate and the key is
not renamed a second time.
"""

from dataclasses import replace
from typing import Iterable, List, Set

from ..models import ProductRecord


def next_free_key(base_key: str, taken: Set[str]) -> str:
    """
    Return base_key, or base_key-1, base_key-2, ... whichever is free first.

    Example:
        >>> next_free_key("TAY-123-chair", {"TAY-123-chair"})
        'TAY-123-chair-1'
    """
    key = base_key
    counter = 1
    while key in taken:
        key = f"{base_key}-{counter}"
        counter += 1
    return key


def assign_unique_url_keys(records: Iterable[ProductRecord]) -> List[ProductRecord]:
    """
    Assign batch-unique url_keys in input order.

    The first record with a given key keeps it; later ones get -1, -2, ...
    Input records are not modified; copies carrying the final key are returned.
    """
    taken: Set[str] = set()
    result = []

    for record in records:
        key = next_free_key(record.url_key, taken)
        taken.add(key)
        result.append(record if key == record.url_key else replace(record, url_key=key))

    return result
