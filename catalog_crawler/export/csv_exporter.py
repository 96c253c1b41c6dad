"""
Product CSV Exporter

Exports stored product records to a flat CSV, one row per product,
columns in record field order.
"""

import logging
from typing import Dict, Iterable, List

from ..common.csv_utils import write_csv
from ..models import PRODUCT_FIELDNAMES, ProductRecord

logger = logging.getLogger(__name__)


class ProductCSVExporter:
    """
    Exports products to CSV.

    Usage:
        exporter = ProductCSVExporter()
        exporter.export(store.iter_products(), "output/products.csv")
    """

    def __init__(self, fieldnames: List[str] | None = None, encoding: str = "utf-8"):
        """
        Initialize the exporter.

        Args:
            fieldnames: Columns to write (defaults to every record field)
            encoding: Output encoding; 'utf-8-sig' adds a BOM for spreadsheet apps
        """
        self.fieldnames = list(fieldnames or PRODUCT_FIELDNAMES)
        unknown = set(self.fieldnames) - set(PRODUCT_FIELDNAMES)
        if unknown:
            raise ValueError(f"Unknown export columns: {sorted(unknown)}")
        self.encoding = encoding

    def product_to_row(self, product: ProductRecord) -> Dict[str, str]:
        """
        Convert a product to a CSV row.

        Missing values (None) are written as empty cells.
        """
        row = product.to_row()
        return {name: '' if row[name] is None else row[name] for name in self.fieldnames}

    def export(self, products: Iterable[ProductRecord], output_path: str) -> int:
        """
        Write products to a CSV file (header included even when empty).

        Returns:
            Number of product rows written
        """
        rows = (self.product_to_row(product) for product in products)
        count = write_csv(output_path, rows, fieldnames=self.fieldnames, encoding=self.encoding)
        logger.info("Exported %d products to %s", count, output_path)
        return count
