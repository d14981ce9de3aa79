"""
Inventory key strategy: natural key = serial number, case-insensitive.

First write wins.  A candidate whose serial matches an existing item is
skipped and never overwrites it.  Candidates without a serial take the
configured placeholder serial and match on it like any other serial, so
re-ingesting the same file creates nothing.
"""

from __future__ import annotations

from collections.abc import Sequence

from fieldops_ingestion.domain.types import InventoryCandidate
from fieldops_ingestion.domain.validators import validate_inventory_candidate
from fieldops_kernel.domain.clock import Clock
from fieldops_kernel.domain.dtos import ValidationError
from fieldops_kernel.domain.identity import IdAllocator, allocate_unique
from fieldops_kernel.domain.inventory import InventoryItem, new_inventory_item
from fieldops_kernel.db.store import INVENTORY_COLLECTION


class InventoryKeyStrategy:
    """Creates AVAILABLE items seeded with a bulk-load status entry."""

    collection_name: str = INVENTORY_COLLECTION

    def __init__(
        self,
        clock: Clock,
        id_allocator: IdAllocator,
        *,
        actor: str = "Bulk Import",
        reason: str = "initial bulk load",
        placeholder_image_url: str = "",
        placeholder_serial: str = "SN-GENERICO",
    ):
        self._clock = clock
        self._ids = id_allocator
        self._actor = actor
        self._reason = reason
        self._placeholder_image_url = placeholder_image_url
        self._placeholder_serial = placeholder_serial

    def _serial(self, candidate: InventoryCandidate) -> str:
        return candidate.serial_number or self._placeholder_serial

    def validate(self, candidate: InventoryCandidate) -> list[ValidationError]:
        return validate_inventory_candidate(candidate)

    def find_match(
        self,
        collection: Sequence[InventoryItem],
        candidate: InventoryCandidate,
    ) -> int | None:
        key = self._serial(candidate).strip().lower()
        for index, item in enumerate(collection):
            if item.serial_key() == key:
                return index
        return None

    def on_match(self, existing: InventoryItem, candidate: InventoryCandidate) -> None:
        return None

    def create(
        self,
        collection: Sequence[InventoryItem],
        candidate: InventoryCandidate,
    ) -> InventoryItem:
        item_id = allocate_unique(self._ids, {item.id for item in collection})
        serial = self._serial(candidate)
        log_entry_id = allocate_unique(self._ids, {item_id})
        return new_inventory_item(
            item_id=item_id,
            name=candidate.name or "",
            serial_number=serial,
            description=candidate.description or "",
            image_url=candidate.image_url or self._placeholder_image_url,
            log_entry_id=log_entry_id,
            now=self._clock.now(),
            actor=self._actor,
            reason=self._reason,
        )

    def entity_id(self, entity: InventoryItem) -> str:
        return entity.id
