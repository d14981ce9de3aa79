"""
fieldops_services -- store-backed orchestration.

Services own the read-compute-write cycle against a ``StoreAdapter``;
the engines and ingestion pipeline they call stay pure.
"""

from fieldops_services.client_service import ClientService
from fieldops_services.inventory_service import InventoryService, lifecycle_texts

__all__ = ["ClientService", "InventoryService", "lifecycle_texts"]
