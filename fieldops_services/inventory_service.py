"""
fieldops_services.inventory_service -- Store-backed inventory operations.

Responsibility:
    The read-compute-write boundary for the inventory collection: load the
    whole collection from a ``StoreAdapter``, apply a pure engine
    (lifecycle, history, ingestion) and write the whole collection back.

Architecture position:
    Services -- stateful orchestration over engines + kernel.
    Receives store, clock, id allocator and configuration via constructor
    injection.

Invariants enforced:
    - Whole-collection writes only; no partial record updates.
    - A rejected transition writes nothing.
    - Serial numbers are unique, case-insensitive, across the collection.

Failure modes:
    - ItemNotFoundError for an unknown item id.
    - DuplicateKeyError when a manual add repeats an existing serial.
    - MalformedRecordError when a manual add has no name or no serial.

Audit relevance:
    Every write is logged with the item id, and transitions run inside a
    ``LogContext`` carrying actor and item id so engine trace records are
    attributable.
"""

from __future__ import annotations

from pathlib import Path

from fieldops_config import FieldOpsConfig, get_active_config
from fieldops_engines.history import (
    HistoryRow,
    TimelineRow,
    history_for,
    status_timeline,
)
from fieldops_engines.lifecycle import (
    Action,
    LifecycleTexts,
    TransitionResult,
    transition,
)
from fieldops_ingestion.domain.types import IngestResult
from fieldops_ingestion.promoters.inventory import InventoryKeyStrategy
from fieldops_ingestion.services.import_service import ImportService
from fieldops_kernel.db.store import INVENTORY_COLLECTION, StoreAdapter
from fieldops_kernel.domain.clock import Clock
from fieldops_kernel.domain.dtos import ValidationError
from fieldops_kernel.domain.identity import IdAllocator, allocate_unique
from fieldops_kernel.domain.inventory import (
    InventoryItem,
    check_item_invariants,
    new_inventory_item,
)
from fieldops_kernel.exceptions import (
    DuplicateKeyError,
    ItemNotFoundError,
    MalformedRecordError,
)
from fieldops_kernel.logging_config import LogContext, get_logger

logger = get_logger("services.inventory")


def lifecycle_texts(config: FieldOpsConfig) -> LifecycleTexts:
    """Engine texts drawn from configuration."""
    texts = config.texts
    return LifecycleTexts(
        assign_reason=texts.assign_reason,
        maintenance_reason=texts.maintenance_reason,
        release_reason=texts.release_reason,
        retire_reason=texts.retire_reason,
        signature_prefix=texts.signature_prefix,
    )


class InventoryService:
    """
    Inventory operations over a whole-collection store.

    Contract:
        Every method reads the full collection and, when it changes
        anything, writes the full collection back.  Not safe for
        concurrent writers (last write wins).
    """

    def __init__(
        self,
        store: StoreAdapter,
        clock: Clock,
        id_allocator: IdAllocator,
        config: FieldOpsConfig | None = None,
        import_service: ImportService | None = None,
    ):
        self._store = store
        self._clock = clock
        self._ids = id_allocator
        self._config = config or get_active_config()
        self._texts = lifecycle_texts(self._config)
        self._importer = import_service or ImportService()

    # -- persistence -------------------------------------------------------

    def _load(self) -> list[InventoryItem]:
        return [InventoryItem.from_dict(d) for d in self._store.get_all(INVENTORY_COLLECTION)]

    def _save(self, items: list[InventoryItem]) -> None:
        self._store.set_all(INVENTORY_COLLECTION, [item.to_dict() for item in items])

    @staticmethod
    def _index_of(items: list[InventoryItem], item_id: str) -> int:
        for index, item in enumerate(items):
            if item.id == item_id:
                return index
        raise ItemNotFoundError(item_id)

    # -- queries -----------------------------------------------------------

    def list_items(self) -> list[InventoryItem]:
        return self._load()

    def get_item(self, item_id: str) -> InventoryItem:
        items = self._load()
        return items[self._index_of(items, item_id)]

    def timeline(self, item_id: str) -> list[TimelineRow]:
        return status_timeline(self.get_item(item_id), self._config.date_format)

    def history_for_client(self, client_id: str, client_service) -> list[HistoryRow]:
        """Assignment history of every item at the client, newest first."""
        client = client_service.get_client(client_id)
        return history_for(
            subject_id=client.id,
            subject_label_fallback=client.name,
            inventory=self._load(),
            today=self._clock.now(),
            date_format=self._config.date_format,
        )

    def integrity_report(self) -> dict[str, list[ValidationError]]:
        """Item id -> invariant violations, for items that have any."""
        report: dict[str, list[ValidationError]] = {}
        for item in self._load():
            errors = check_item_invariants(item, self._config.date_format)
            if errors:
                report[item.id] = errors
        return report

    # -- commands ----------------------------------------------------------

    def add_item(
        self,
        name: str,
        serial_number: str,
        *,
        description: str = "",
        image_url: str = "",
        actor: str | None = None,
    ) -> InventoryItem:
        """Create one AVAILABLE item with an intake status entry."""
        if not name or not name.strip():
            raise MalformedRecordError("name")
        serial = (serial_number or "").strip()
        if not serial:
            raise MalformedRecordError("serial_number")
        items = self._load()

        key = serial.lower()
        for existing in items:
            if existing.serial_key() == key:
                raise DuplicateKeyError("serial_number", serial, existing.id)
        item_id = allocate_unique(self._ids, {item.id for item in items})

        item = new_inventory_item(
            item_id=item_id,
            name=name.strip(),
            serial_number=serial,
            description=description,
            image_url=image_url or self._config.ingestion.placeholder_image_url,
            log_entry_id=allocate_unique(self._ids, {item_id}),
            now=self._clock.now(),
            actor=actor or self._config.texts.default_actor,
            reason=self._config.texts.intake_reason,
        )
        items.append(item)
        self._save(items)
        logger.info("inventory_item_added", extra={"item_id": item.id, "serial_number": serial})
        return item

    def delete_item(self, item_id: str) -> None:
        """Remove the item together with all of its embedded records."""
        items = self._load()
        del items[self._index_of(items, item_id)]
        self._save(items)
        logger.info("inventory_item_deleted", extra={"item_id": item_id})

    def apply(
        self,
        item_id: str,
        action: Action,
        actor: str,
        *,
        is_privileged: bool = False,
    ) -> TransitionResult:
        """
        Run one lifecycle action and persist the result on success.

        Rejections come back in ``TransitionResult.error``; the store is
        left untouched.
        """
        items = self._load()
        index = self._index_of(items, item_id)
        with LogContext.bind(actor=actor, item_id=item_id):
            result = transition(
                item=items[index],
                action=action,
                actor_name=actor,
                now=self._clock.now(),
                id_allocator=self._ids,
                is_privileged=is_privileged,
                date_format=self._config.date_format,
                texts=self._texts,
            )
            if result.error is None:
                items[index] = result.item
                self._save(items)
        return result

    def import_csv(self, text: str | Path) -> IngestResult:
        """Bulk-load inventory rows; existing serials are skipped."""
        strategy = InventoryKeyStrategy(
            self._clock,
            self._ids,
            actor=self._config.texts.bulk_import_actor,
            reason=self._config.texts.bulk_import_reason,
            placeholder_image_url=self._config.ingestion.placeholder_image_url,
            placeholder_serial=self._config.ingestion.placeholder_serial,
        )
        result = self._importer.import_text(text, strategy, self._load())
        if result.created:
            self._save(list(result.collection))
        return result
