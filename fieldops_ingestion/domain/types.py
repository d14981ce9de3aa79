"""
fieldops_ingestion.domain.types -- Pure frozen dataclasses for bulk ingestion.

ZERO I/O. Imports only from fieldops_kernel.domain.

Candidates are what one raw row maps to: every field optional, ``None``
meaning "absent in the source" (an empty cell is absent too).
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

from fieldops_kernel.domain.dtos import ValidationError


class RecordOutcomeStatus(str, Enum):
    """What happened to one raw row."""

    CREATED = "created"
    UPDATED = "updated"
    SKIPPED = "skipped"  # Natural key already present (inventory)
    DROPPED = "dropped"  # Malformed; never reached key matching


@dataclass(frozen=True)
class InventoryCandidate:
    """One inventory row after mapping."""

    row_number: int
    name: str | None = None
    description: str | None = None
    serial_number: str | None = None
    image_url: str | None = None


@dataclass(frozen=True)
class ClientCandidate:
    """One client row after mapping."""

    row_number: int
    name: str | None = None
    tax_id: str | None = None
    contact_name: str | None = None
    email: str | None = None
    phone: str | None = None
    address: str | None = None
    photo_url: str | None = None

    def present_fields(self) -> dict[str, str]:
        """Client attribute name -> value for every field the row supplied."""
        values = {
            "name": self.name,
            "tax_id": self.tax_id,
            "contact_name": self.contact_name,
            "email": self.email,
            "phone": self.phone,
            "address": self.address,
            "photo_url": self.photo_url,
        }
        return {k: v for k, v in values.items() if v is not None}


@dataclass(frozen=True)
class RecordOutcome:
    """Per-row result of an ingestion run."""

    row_number: int
    status: RecordOutcomeStatus
    entity_id: str | None = None
    errors: tuple[ValidationError, ...] = ()


@dataclass(frozen=True)
class IngestResult:
    """
    Counters plus the new collection produced by one ingestion run.

    ``dropped`` rows are reported separately and are counted neither as
    created, updated nor skipped.
    """

    created: int
    updated: int
    skipped: int
    dropped: int
    collection: tuple[Any, ...]
    outcomes: tuple[RecordOutcome, ...] = ()

    def summary(self) -> dict[str, int]:
        return {
            "created": self.created,
            "updated": self.updated,
            "skipped": self.skipped,
            "dropped": self.dropped,
        }
