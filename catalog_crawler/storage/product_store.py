"""
Product Store

SQLite persistence for crawled product records.

Uniqueness is enforced by the schema: sku, url_key and the (sku, store)
pair each carry a UNIQUE constraint. Bulk inserts are unordered: a failing
row does not stop the rest of the batch, and the failures are reported
together through BulkWriteError.
"""

import logging
import os
import re
import sqlite3
import threading
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Dict, Generator, Iterable, Iterator, List, Optional, Tuple

from ..errors import BulkWriteError, StoreError, StoreUnavailableError, WriteError
from ..models import INTEGER_FIELDS, PRODUCT_FIELDNAMES, ProductRecord

logger = logging.getLogger(__name__)

TABLE = "products"
REQUIRED_TEXT_FIELDS = ("sku", "name", "url_key")
TIMESTAMP_FIELDS = ("created_at", "updated_at")
SORTABLE_FIELDS = frozenset(PRODUCT_FIELDNAMES) | frozenset(TIMESTAMP_FIELDS)

_UNIQUE_FAILED_RE = re.compile(r"UNIQUE constraint failed: (.+)")


def _column_definition(name: str) -> str:
    if name in INTEGER_FIELDS:
        if name == "max_cart_qty":
            return f"{name} INTEGER CHECK ({name} IS NULL OR typeof({name}) = 'integer')"
        return f"{name} INTEGER NOT NULL CHECK (typeof({name}) = 'integer')"
    if name in REQUIRED_TEXT_FIELDS:
        return f"{name} TEXT NOT NULL CHECK ({name} <> '')"
    return f"{name} TEXT"


_COLUMNS_SQL = ",\n  ".join(_column_definition(name) for name in PRODUCT_FIELDNAMES)

SCHEMA = f"""
CREATE TABLE IF NOT EXISTS {TABLE} (
  id INTEGER PRIMARY KEY AUTOINCREMENT,
  {_COLUMNS_SQL},
  created_at TEXT NOT NULL,
  updated_at TEXT NOT NULL,
  UNIQUE (sku),
  UNIQUE (url_key),
  UNIQUE (sku, store)
);

CREATE INDEX IF NOT EXISTS idx_products_categories1 ON {TABLE}(categories1);
CREATE INDEX IF NOT EXISTS idx_products_created_at ON {TABLE}(created_at);
"""

_INSERT_COLUMNS = PRODUCT_FIELDNAMES + list(TIMESTAMP_FIELDS)
INSERT_SQL = (
    f"INSERT INTO {TABLE} ({', '.join(_INSERT_COLUMNS)}) "
    f"VALUES ({', '.join(':' + name for name in _INSERT_COLUMNS)})"
)


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _classify_integrity_error(index: int, record: ProductRecord, error: sqlite3.IntegrityError) -> WriteError:
    """Map a row-level constraint failure to a duplicate or validation WriteError."""
    message = str(error)
    match = _UNIQUE_FAILED_RE.search(message)
    if not match:
        return WriteError(index, record, WriteError.VALIDATION, message)

    key_fields = tuple(part.strip().split(".")[-1] for part in match.group(1).split(","))
    row = record.to_row()
    return WriteError(
        index,
        record,
        WriteError.DUPLICATE_KEY,
        message,
        key_fields=key_fields,
        key_value={field: row.get(field) for field in key_fields},
    )


class ProductStore:
    """
    SQLite-backed product store.

    A single connection is shared behind a lock so the crawl worker thread
    and status/query callers can use the same store.

    Usage:
        store = ProductStore("data/products.db")
        store.clear_all()
        store.insert_batch(records)
        store.count()
    """

    def __init__(self, db_path: str = "data/products.db", timeout: float = 30.0):
        """
        Open (and create if needed) the store.

        Args:
            db_path: SQLite database file, or ":memory:"
            timeout: Seconds to wait for a locked database

        Raises:
            StoreUnavailableError: If the database cannot be opened
        """
        self.db_path = db_path
        self.timeout = timeout
        self._lock = threading.RLock()
        self._conn: Optional[sqlite3.Connection] = None
        self.ensure_schema()

    # ── Connection management ────────────────────────────────────────────────

    def _connect(self) -> sqlite3.Connection:
        if self.db_path != ":memory:":
            directory = os.path.dirname(self.db_path)
            if directory:
                os.makedirs(directory, exist_ok=True)
        try:
            conn = sqlite3.connect(self.db_path, timeout=self.timeout, check_same_thread=False)
            if self.db_path != ":memory:":
                conn.execute("PRAGMA journal_mode=WAL;")
                conn.execute("PRAGMA synchronous=NORMAL;")
        except sqlite3.OperationalError as e:
            raise StoreUnavailableError(f"Cannot open product store {self.db_path}: {e}") from e
        conn.row_factory = sqlite3.Row
        return conn

    @contextmanager
    def get_connection(self) -> Generator[sqlite3.Connection, None, None]:
        """
        Yield the shared connection inside a transaction.

        Commits on success, rolls back on any exception. SQLite operational
        failures (locked, unreadable, disk errors) surface as
        StoreUnavailableError.
        """
        with self._lock:
            if self._conn is None:
                self._conn = self._connect()
            try:
                yield self._conn
                self._conn.commit()
            except sqlite3.OperationalError as e:
                self._conn.rollback()
                raise StoreUnavailableError(f"Product store failure: {e}") from e
            except Exception:
                self._conn.rollback()
                raise

    def close(self) -> None:
        """Close the database connection."""
        with self._lock:
            if self._conn is not None:
                self._conn.close()
                self._conn = None

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()

    def ensure_schema(self) -> None:
        with self.get_connection() as conn:
            conn.executescript(SCHEMA)

    # ── Ingestion API ────────────────────────────────────────────────────────

    def clear_all(self) -> int:
        """Delete every stored record. Returns the number of deleted rows."""
        with self.get_connection() as conn:
            cursor = conn.execute(f"DELETE FROM {TABLE}")
            deleted = cursor.rowcount
        logger.info("Cleared %d stored products", deleted)
        return deleted

    def insert_batch(self, records: Iterable[ProductRecord]) -> int:
        """
        Insert records, continuing past failing rows.

        Returns:
            Number of inserted records when every row succeeded

        Raises:
            BulkWriteError: If at least one row failed; committed rows stay
                committed and are listed in inserted_indices
            StoreUnavailableError: On infrastructure failure (nothing is
                guaranteed committed)
        """
        records = list(records)
        if not records:
            return 0

        now = _now_iso()
        write_errors: List[WriteError] = []
        inserted: List[int] = []

        with self.get_connection() as conn:
            for index, record in enumerate(records):
                try:
                    row = record.to_row()
                    row["created_at"] = now
                    row["updated_at"] = now
                    conn.execute(INSERT_SQL, row)
                except sqlite3.IntegrityError as e:
                    write_errors.append(_classify_integrity_error(index, record, e))
                except (
                    sqlite3.InterfaceError, sqlite3.ProgrammingError, OverflowError, AttributeError, TypeError
                ) as e:
                    # Unbindable values (e.g. integers beyond 64 bits) or a non-record object
                    write_errors.append(WriteError(
                        index, record, WriteError.VALIDATION, f"{type(e).__name__}: {e}"
                    ))
                else:
                    inserted.append(index)

        if write_errors:
            raise BulkWriteError(write_errors, inserted)
        return len(inserted)

    # ── Query API ────────────────────────────────────────────────────────────

    def count(self) -> int:
        with self.get_connection() as conn:
            return conn.execute(f"SELECT COUNT(*) FROM {TABLE}").fetchone()[0]

    def find_by_sku(self, sku: str) -> Optional[ProductRecord]:
        with self.get_connection() as conn:
            row = conn.execute(f"SELECT * FROM {TABLE} WHERE sku = ?", (sku,)).fetchone()
        return ProductRecord.from_row(dict(row)) if row else None

    def iter_products(self) -> Iterator[ProductRecord]:
        """Yield every stored record in insertion order."""
        with self.get_connection() as conn:
            rows = conn.execute(f"SELECT * FROM {TABLE} ORDER BY id").fetchall()
        for row in rows:
            yield ProductRecord.from_row(dict(row))

    def query_products(
        self,
        category: Optional[str] = None,
        price_min: Optional[float] = None,
        price_max: Optional[float] = None,
        in_stock: Optional[bool] = None,
        search: Optional[str] = None,
        sort_by: str = "created_at",
        sort_order: str = "desc",
        page: int = 1,
        limit: int = 10,
    ) -> Tuple[List[ProductRecord], int]:
        """
        Filter, sort and paginate stored records.

        Args:
            category: Exact match on categories1
            price_min: Minimum numeric price (inclusive)
            price_max: Maximum numeric price (inclusive)
            in_stock: True for in-stock only, False for out-of-stock only
            search: Case-insensitive substring of name, sku or description
            sort_by: Record column or created_at/updated_at
            sort_order: "asc" or "desc"
            page: 1-based page number
            limit: Page size

        Returns:
            (records on the requested page, total matching records)
        """
        if sort_by not in SORTABLE_FIELDS:
            raise ValueError(f"Cannot sort by {sort_by!r}")
        if sort_order not in ("asc", "desc"):
            raise ValueError(f"sort_order must be 'asc' or 'desc', got {sort_order!r}")
        page = max(1, int(page))
        limit = max(1, int(limit))

        clauses: List[str] = []
        params: List[Any] = []

        if category:
            clauses.append("categories1 = ?")
            params.append(category)
        if price_min is not None:
            clauses.append("CAST(price AS REAL) >= ?")
            params.append(float(price_min))
        if price_max is not None:
            clauses.append("CAST(price AS REAL) <= ?")
            params.append(float(price_max))
        if in_stock is not None:
            clauses.append("is_in_stock = ?")
            params.append(1 if in_stock else 0)
        if search:
            pattern = f"%{search.lower()}%"
            clauses.append("(lower(name) LIKE ? OR lower(sku) LIKE ? OR lower(description) LIKE ?)")
            params.extend([pattern, pattern, pattern])

        where = f" WHERE {' AND '.join(clauses)}" if clauses else ""

        with self.get_connection() as conn:
            total = conn.execute(f"SELECT COUNT(*) FROM {TABLE}{where}", params).fetchone()[0]
            rows = conn.execute(
                f"SELECT * FROM {TABLE}{where} ORDER BY {sort_by} {sort_order.upper()}, id "
                f"LIMIT ? OFFSET ?",
                params + [limit, (page - 1) * limit],
            ).fetchall()

        return [ProductRecord.from_row(dict(row)) for row in rows], total

    def update_product(self, sku: str, changes: Dict[str, Any]) -> Optional[ProductRecord]:
        """
        Update fields of a stored record.

        Returns:
            The updated record, or None if no record has this SKU

        Raises:
            ValueError: If changes name unknown fields
            StoreError: If the update violates a constraint
        """
        unknown = set(changes) - set(PRODUCT_FIELDNAMES)
        if unknown:
            raise ValueError(f"Unknown product fields: {sorted(unknown)}")
        if not changes:
            return self.find_by_sku(sku)

        assignments = ", ".join(f"{name} = :{name}" for name in changes)
        params = dict(changes)
        params["updated_at"] = _now_iso()
        params["_match_sku"] = sku

        try:
            with self.get_connection() as conn:
                cursor = conn.execute(
                    f"UPDATE {TABLE} SET {assignments}, updated_at = :updated_at WHERE sku = :_match_sku",
                    params,
                )
                updated = cursor.rowcount
        except sqlite3.IntegrityError as e:
            raise StoreError(f"Update of {sku} rejected: {e}") from e

        if not updated:
            return None
        return self.find_by_sku(changes.get("sku", sku))

    def delete_product(self, sku: str) -> bool:
        """Delete a record by SKU. Returns True if a record was deleted."""
        with self.get_connection() as conn:
            cursor = conn.execute(f"DELETE FROM {TABLE} WHERE sku = ?", (sku,))
            return cursor.rowcount > 0

    def categories(self) -> List[str]:
        """Distinct top-level categories."""
        with self.get_connection() as conn:
            rows = conn.execute(
                f"SELECT DISTINCT categories1 FROM {TABLE} "
                f"WHERE categories1 IS NOT NULL AND categories1 <> '' ORDER BY categories1"
            ).fetchall()
        return [row[0] for row in rows]

    def stats(self) -> Dict[str, Any]:
        """Aggregate counts and average price over stored records."""
        with self.get_connection() as conn:
            row = conn.execute(
                f"""
                SELECT COUNT(*) AS total_products,
                       AVG(CAST(price AS REAL)) AS average_price,
                       COALESCE(SUM(CASE WHEN is_in_stock = 1 THEN 1 ELSE 0 END), 0) AS in_stock,
                       COALESCE(SUM(CASE WHEN is_in_stock = 0 THEN 1 ELSE 0 END), 0) AS out_of_stock
                FROM {TABLE}
                """
            ).fetchone()
        return {
            "total_products": row["total_products"],
            "average_price": row["average_price"] or 0,
            "in_stock": row["in_stock"],
            "out_of_stock": row["out_of_stock"],
        }
