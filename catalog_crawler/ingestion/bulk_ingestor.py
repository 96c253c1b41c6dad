"""
Bulk Ingestor

Persists a batch of records and partitions it into successful, duplicate
and errored records.

Per-record failures never escape as exceptions: they are returned as data
in a BulkOperationResult. Only infrastructure failures of the store
(StoreUnavailableError) propagate.
"""

from __future__ import annotations

from typing import Iterable, List, Protocol

from ..errors import BulkWriteError, WriteError
from ..models import BulkOperationResult, ProductRecord

UNCONFIRMED = "unconfirmed"


class BatchStore(Protocol):
    """Persistence contract used by the ingestor."""

    def insert_batch(self, records: List[ProductRecord]) -> int:
        ...


class BulkIngestor:
    """
    Unordered bulk ingestion with three-way result partitioning.

    Usage:
        ingestor = BulkIngestor(store)
        result = ingestor.ingest(records)
        result.summary  # {'total_processed': ..., 'successful_count': ...}
    """

    def __init__(self, store: BatchStore):
        self.store = store

    def ingest(self, records: Iterable[ProductRecord]) -> BulkOperationResult:
        """
        Insert the batch and classify every record exactly once.

        Args:
            records: Records to persist (already url_key-deduplicated)

        Returns:
            BulkOperationResult with partitions in input order

        Raises:
            StoreUnavailableError: If the store fails at the batch level
        """
        records = list(records)
        result = BulkOperationResult()
        if not records:
            return result

        try:
            self.store.insert_batch(records)
        except BulkWriteError as e:
            self._fold_mixed_result(records, e, result)
        else:
            for record in records:
                result.add_success(record)

        return result

    @staticmethod
    def _fold_mixed_result(
        records: List[ProductRecord],
        error: BulkWriteError,
        result: BulkOperationResult,
    ) -> None:
        """Recover committed records and classify the failed ones."""
        failures = {}
        for write_error in error.write_errors:
            # First report wins if the store lists a row twice
            failures.setdefault(write_error.index, write_error)
        committed = set(error.inserted_indices) - set(failures)

        for index, record in enumerate(records):
            write_error: WriteError | None = failures.get(index)
            if write_error is not None:
                if write_error.is_duplicate:
                    result.add_duplicate(
                        record,
                        write_error.message,
                        key_fields=write_error.key_fields,
                        key_value=write_error.key_value,
                    )
                else:
                    result.add_error(record, write_error.message, kind=write_error.kind)
            elif index in committed:
                result.add_success(record)
            else:
                result.add_error(record, "Store did not confirm the insert", kind=UNCONFIRMED)
