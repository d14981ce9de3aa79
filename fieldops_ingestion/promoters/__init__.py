"""Natural-key upsert strategies for bulk ingestion."""

from fieldops_ingestion.promoters.base import KeyStrategy, ingest
from fieldops_ingestion.promoters.client import ClientKeyStrategy
from fieldops_ingestion.promoters.inventory import InventoryKeyStrategy

__all__ = [
    "ClientKeyStrategy",
    "InventoryKeyStrategy",
    "KeyStrategy",
    "ingest",
]
