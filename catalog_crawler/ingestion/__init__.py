"""
Ingestion of extracted records into the product store.

Modules:
    bulk_ingestor - BulkIngestor (successful / duplicate / error partitioning)
"""

from .bulk_ingestor import BulkIngestor

__all__ = ['BulkIngestor']
