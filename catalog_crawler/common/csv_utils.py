"""
CSV Utilities

Common functions for reading and writing CSV files with proper configuration.
Product descriptions and image lists can be long, so the field size limit
is raised on import.
"""

import csv
import itertools
from pathlib import Path
from typing import Dict, Iterable, Iterator, List, Optional


def configure_csv(field_size_limit: int = 10 * 1024 * 1024) -> None:
    """
    Configure CSV module for large fields.

    Args:
        field_size_limit: Maximum field size in bytes (default: 10MB)
    """
    csv.field_size_limit(field_size_limit)


def read_csv(file_path: str | Path, encoding: str = 'utf-8') -> Iterator[Dict[str, str]]:
    """
    Read CSV file and yield rows as dictionaries.

    Args:
        file_path: Path to CSV file
        encoding: File encoding (default: utf-8)

    Yields:
        Dictionary for each row with column names as keys
    """
    with open(file_path, 'r', encoding=encoding, newline='') as f:
        reader = csv.DictReader(f)
        for row in reader:
            yield row


def write_csv(
    file_path: str | Path,
    rows: Iterable[Dict[str, object]],
    fieldnames: Optional[List[str]] = None,
    encoding: str = 'utf-8'
) -> int:
    """
    Write rows to CSV file.

    Args:
        file_path: Path to output CSV file
        rows: Dictionaries to write (consumed lazily)
        fieldnames: Column names (if None, uses keys from first row)
        encoding: File encoding (default: utf-8). Use 'utf-8-sig' for
            spreadsheet apps that need a BOM to detect Arabic text.

    Returns:
        Number of rows written
    """
    rows = iter(rows)
    if fieldnames is None:
        first = next(rows, None)
        if first is None:
            return 0
        fieldnames = list(first.keys())
        rows = itertools.chain([first], rows)

    count = 0
    with open(file_path, 'w', encoding=encoding, newline='') as f:
        writer = csv.DictWriter(f, fieldnames=fieldnames, extrasaction='ignore')
        writer.writeheader()
        for row in rows:
            writer.writerow(row)
            count += 1

    return count


# Initialize CSV configuration on module import
configure_csv()
