"""Pure ingestion domain: candidate types, outcomes and validators."""

from fieldops_ingestion.domain.types import (
    ClientCandidate,
    IngestResult,
    InventoryCandidate,
    RecordOutcome,
    RecordOutcomeStatus,
)
from fieldops_ingestion.domain.validators import (
    find_batch_duplicates,
    validate_client_candidate,
    validate_inventory_candidate,
)

__all__ = [
    "ClientCandidate",
    "IngestResult",
    "InventoryCandidate",
    "RecordOutcome",
    "RecordOutcomeStatus",
    "find_batch_duplicates",
    "validate_client_candidate",
    "validate_inventory_candidate",
]
