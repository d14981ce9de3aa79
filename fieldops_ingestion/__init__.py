"""
fieldops_ingestion -- bulk CSV ingestion for inventory and clients.

Pipeline: adapters (delimited text -> rows) -> mapping (rows -> candidates)
-> domain validators -> promoters (natural-key upsert) -> ``IngestResult``.
No store access; callers persist the returned collection.
"""

from fieldops_ingestion.domain.types import (
    ClientCandidate,
    IngestResult,
    InventoryCandidate,
    RecordOutcome,
    RecordOutcomeStatus,
)
from fieldops_ingestion.promoters import ClientKeyStrategy, InventoryKeyStrategy, ingest
from fieldops_ingestion.services import ImportService

__all__ = [
    "ClientCandidate",
    "ClientKeyStrategy",
    "ImportService",
    "IngestResult",
    "InventoryCandidate",
    "InventoryKeyStrategy",
    "RecordOutcome",
    "RecordOutcomeStatus",
    "ingest",
]
