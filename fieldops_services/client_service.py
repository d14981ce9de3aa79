"""
fieldops_services.client_service -- Store-backed client operations.

Same whole-collection contract as ``InventoryService``.  A client's system
id never changes once assigned: ``update_client`` locates the stored
record by id and only the other fields are replaced.
"""

from __future__ import annotations

from dataclasses import replace
from pathlib import Path

from fieldops_config import FieldOpsConfig, get_active_config
from fieldops_ingestion.domain.types import IngestResult
from fieldops_ingestion.promoters.client import ClientKeyStrategy
from fieldops_ingestion.services.import_service import ImportService
from fieldops_kernel.db.store import CLIENT_COLLECTION, StoreAdapter
from fieldops_kernel.domain.client import Client, compute_initials, next_client_id
from fieldops_kernel.domain.identity import RandomSource, SystemRandomSource
from fieldops_kernel.exceptions import ClientNotFoundError
from fieldops_kernel.logging_config import get_logger

logger = get_logger("services.client")


class ClientService:
    """Client operations over a whole-collection store."""

    def __init__(
        self,
        store: StoreAdapter,
        random_source: RandomSource | None = None,
        config: FieldOpsConfig | None = None,
        import_service: ImportService | None = None,
    ):
        self._store = store
        self._random = random_source or SystemRandomSource()
        self._config = config or get_active_config()
        self._importer = import_service or ImportService()

    def _load(self) -> list[Client]:
        return [Client.from_dict(d) for d in self._store.get_all(CLIENT_COLLECTION)]

    def _save(self, clients: list[Client]) -> None:
        self._store.set_all(CLIENT_COLLECTION, [c.to_dict() for c in clients])

    @staticmethod
    def _index_of(clients: list[Client], client_id: str) -> int:
        for index, client in enumerate(clients):
            if client.id == client_id:
                return index
        raise ClientNotFoundError(client_id)

    def _next_id(self, clients: list[Client]) -> str:
        return next_client_id(
            (c.id for c in clients),
            prefix=self._config.client_ids.prefix,
            width=self._config.client_ids.width,
        )

    def list_clients(self) -> list[Client]:
        return self._load()

    def get_client(self, client_id: str) -> Client:
        clients = self._load()
        return clients[self._index_of(clients, client_id)]

    def add_client(self, client: Client) -> Client:
        """
        Store a new client.

        A missing or already-taken id is replaced by the next sequential id;
        missing initials and colour are filled in.
        """
        clients = self._load()
        taken = {c.id for c in clients}
        client_id = client.id if client.id and client.id not in taken else self._next_id(clients)
        stored = replace(
            client,
            id=client_id,
            initials=client.initials or compute_initials(client.name),
            color_class=client.color_class or self._random.choice(self._config.client_palette),
        )
        clients.append(stored)
        self._save(clients)
        logger.info("client_added", extra={"client_id": client_id})
        return stored

    def update_client(self, client: Client) -> Client:
        clients = self._load()
        clients[self._index_of(clients, client.id)] = client
        self._save(clients)
        logger.info("client_updated", extra={"client_id": client.id})
        return client

    def delete_client(self, client_id: str) -> None:
        clients = self._load()
        del clients[self._index_of(clients, client_id)]
        self._save(clients)
        logger.info("client_deleted", extra={"client_id": client_id})

    def import_csv(self, text: str | Path) -> IngestResult:
        """Bulk-upsert client rows keyed by tax id, then email."""
        strategy = ClientKeyStrategy(
            self._random,
            self._config.client_palette,
            id_prefix=self._config.client_ids.prefix,
            id_width=self._config.client_ids.width,
            unnamed_client=self._config.ingestion.unnamed_client,
            last_visit_placeholder=self._config.ingestion.last_visit_placeholder,
        )
        result = self._importer.import_text(text, strategy, self._load())
        if result.created or result.updated:
            self._save(list(result.collection))
        return result
