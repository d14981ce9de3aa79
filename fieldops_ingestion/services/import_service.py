"""
Import service: parse -> map -> validate -> promote.

Orchestrates the text adapter, the mapping engine, the domain validators
and a key strategy.  Pure with respect to storage: it receives the
existing collection and returns the new one inside an ``IngestResult``;
the caller decides whether to write it back.

Uses structured logging (LogContext, get_logger("ingestion.*")).
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from pathlib import Path
from typing import Any
from uuid import uuid4

from fieldops_ingestion.adapters.csv_adapter import CsvTextAdapter, ParsedTable
from fieldops_ingestion.domain.types import IngestResult
from fieldops_ingestion.domain.validators import find_batch_duplicates
from fieldops_ingestion.mapping.engine import map_client_rows, map_inventory_rows
from fieldops_ingestion.promoters.base import KeyStrategy, ingest
from fieldops_kernel.db.store import CLIENT_COLLECTION, INVENTORY_COLLECTION
from fieldops_kernel.logging_config import LogContext, get_logger

logger = get_logger("ingestion.import_service")

Mapper = Callable[[ParsedTable], Sequence[Any]]

_MAPPERS: dict[str, Mapper] = {
    INVENTORY_COLLECTION: map_inventory_rows,
    CLIENT_COLLECTION: map_client_rows,
}

_BATCH_KEYS: dict[str, Callable[[Any], str | None]] = {
    INVENTORY_COLLECTION: lambda c: c.serial_number.strip().lower() if c.serial_number else None,
    CLIENT_COLLECTION: lambda c: c.tax_id or c.email,
}


class ImportService:
    """Runs one delimited text through mapping and a key strategy."""

    def __init__(
        self,
        adapter: CsvTextAdapter | None = None,
        mappers: dict[str, Mapper] | None = None,
    ):
        self._adapter = adapter or CsvTextAdapter()
        self._mappers = dict(_MAPPERS if mappers is None else mappers)

    def import_text(
        self,
        text: str | Path,
        strategy: KeyStrategy[Any],
        existing: Sequence[Any],
    ) -> IngestResult:
        """
        Ingest delimited text (or a file) into ``existing``.

        Raises:
            KeyError: if no mapper is registered for the strategy's collection.
        """
        collection = strategy.collection_name
        mapper = self._mappers[collection]
        batch_id = uuid4().hex

        with LogContext.bind(batch_id=batch_id, collection=collection):
            table = self._adapter.parse(text)
            candidates = mapper(table)
            logger.info(
                "import_batch_started",
                extra={
                    "row_count": len(candidates),
                    "delimiter": table.delimiter,
                    "columns": list(table.header),
                },
            )

            key_fn = _BATCH_KEYS.get(collection)
            if key_fn is not None:
                for duplicate in find_batch_duplicates(candidates, key_fn):
                    logger.warning(
                        "import_batch_duplicate_key",
                        extra={
                            "error_code": duplicate.code,
                            "key": duplicate.details["key"] if duplicate.details else None,
                            "rows": duplicate.details["rows"] if duplicate.details else None,
                        },
                    )

            result = ingest(existing, candidates, strategy)
            logger.info("import_batch_completed", extra={"counts": result.summary()})
        return result
