"""
Exception hierarchy for the crawler.

Per-record persistence failures are reported as data (see BulkWriteError and
BulkOperationResult); only page-level and infrastructure-level failures are
meant to escape a crawl run.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, List, Tuple

if TYPE_CHECKING:
    from .models import ProductRecord


class CatalogCrawlerError(Exception):
    """Base class for all crawler errors."""


class ConfigError(CatalogCrawlerError):
    """Configuration is missing or invalid."""


class BrowserLaunchError(CatalogCrawlerError):
    """The page fetcher (browser session) could not be started."""


class NavigationError(CatalogCrawlerError):
    """A catalog page failed to load or its product marker never appeared."""

    def __init__(self, message: str, url: str = ""):
        super().__init__(message)
        self.url = url


class StoreError(CatalogCrawlerError):
    """Base class for persistence errors."""


class StoreUnavailableError(StoreError):
    """The store could not be reached or failed at the batch level."""


class WriteError:
    """A single failed row of a bulk insert."""

    DUPLICATE_KEY = "duplicate_key"
    VALIDATION = "validation"

    def __init__(
        self,
        index: int,
        record: "ProductRecord",
        kind: str,
        message: str,
        key_fields: Tuple[str, ...] = (),
        key_value: Dict[str, Any] | None = None,
    ):
        self.index = index
        self.record = record
        self.kind = kind
        self.message = message
        self.key_fields = key_fields
        self.key_value = key_value or {}

    @property
    def is_duplicate(self) -> bool:
        return self.kind == self.DUPLICATE_KEY

    def __repr__(self) -> str:
        return f"WriteError(index={self.index}, kind={self.kind!r}, message={self.message!r})"


class BulkWriteError(StoreError):
    """
    Raised by an unordered bulk insert when at least one row failed.

    Attributes:
        write_errors: Failed rows, one WriteError each
        inserted_indices: Batch positions of the records that were committed
            despite the failures
    """

    def __init__(self, write_errors: List[WriteError], inserted_indices: List[int]):
        super().__init__(
            f"Bulk insert finished with {len(write_errors)} failed "
            f"and {len(inserted_indices)} inserted records"
        )
        self.write_errors = write_errors
        self.inserted_indices = inserted_indices
