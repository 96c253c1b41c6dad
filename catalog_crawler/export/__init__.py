"""
Export of stored products.

Modules:
    csv_exporter - Flat CSV export of ProductRecords
"""

from .csv_exporter import ProductCSVExporter

__all__ = ['ProductCSVExporter']
