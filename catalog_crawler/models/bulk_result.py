"""
Bulk operation result model.

Three-way partition of an ingestion batch. Ephemeral: one per batch,
summarized and then discarded.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Tuple

from .product import ProductRecord


@dataclass
class DuplicateEntry:
    """Record rejected by a uniqueness constraint."""
    record: ProductRecord
    message: str
    key_fields: Tuple[str, ...] = ()
    key_value: Dict[str, Any] = field(default_factory=dict)


@dataclass
class ErrorEntry:
    """Record rejected for any other reason."""
    record: ProductRecord
    message: str
    kind: str = ""


@dataclass
class BulkOperationResult:
    """Outcome of one bulk ingestion, partitioned in input order."""

    successful: List[ProductRecord] = field(default_factory=list)
    duplicates: List[DuplicateEntry] = field(default_factory=list)
    errors: List[ErrorEntry] = field(default_factory=list)

    def add_success(self, record: ProductRecord) -> None:
        self.successful.append(record)

    def add_duplicate(
        self,
        record: ProductRecord,
        message: str,
        key_fields: Tuple[str, ...] = (),
        key_value: Dict[str, Any] | None = None,
    ) -> None:
        self.duplicates.append(DuplicateEntry(
            record=record,
            message=message,
            key_fields=tuple(key_fields),
            key_value=dict(key_value or {}),
        ))

    def add_error(self, record: ProductRecord, message: str, kind: str = "") -> None:
        self.errors.append(ErrorEntry(record=record, message=message, kind=kind))

    @property
    def summary(self) -> Dict[str, int]:
        return {
            'total_processed': len(self.successful) + len(self.duplicates) + len(self.errors),
            'successful_count': len(self.successful),
            'duplicate_count': len(self.duplicates),
            'error_count': len(self.errors),
        }
