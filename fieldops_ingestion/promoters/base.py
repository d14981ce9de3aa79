"""
KeyStrategy protocol and the generic upsert loop.

A key strategy decides, for one entity type, how a candidate is validated,
which existing entity it matches, what a match does (update or skip) and
how a new entity is created.  ``ingest`` runs candidates in order against
the progressively updated collection, so a key repeated inside one batch
resolves against its first occurrence.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any, Protocol, TypeVar

from fieldops_ingestion.domain.types import IngestResult, RecordOutcome, RecordOutcomeStatus
from fieldops_kernel.domain.dtos import ValidationError
from fieldops_kernel.logging_config import get_logger

logger = get_logger("ingestion.promoters")

E = TypeVar("E")
C = TypeVar("C", contravariant=True)


class KeyStrategy(Protocol[C]):
    """Protocol for one entity type's natural-key upsert rules."""

    @property
    def collection_name(self) -> str:
        """Store collection this strategy writes (e.g. 'inventory')."""
        ...

    def validate(self, candidate: C) -> list[ValidationError]:
        """Errors that drop the candidate before key matching."""
        ...

    def find_match(self, collection: Sequence[Any], candidate: C) -> int | None:
        """Index of the existing entity the candidate refers to, if any."""
        ...

    def on_match(self, existing: Any, candidate: C) -> Any | None:
        """Updated entity, or None to leave the existing one untouched (skip)."""
        ...

    def create(self, collection: Sequence[Any], candidate: C) -> Any:
        """A new entity for an unmatched candidate."""
        ...

    def entity_id(self, entity: Any) -> str:
        ...


class _Counters:
    def __init__(self) -> None:
        self.created = 0
        self.updated = 0
        self.skipped = 0
        self.dropped = 0
        self.outcomes: list[RecordOutcome] = []


def ingest(
    existing: Sequence[E],
    candidates: Sequence[Any],
    strategy: KeyStrategy[Any],
) -> IngestResult:
    """
    Upsert ``candidates`` into a copy of ``existing``.

    New entities are appended in candidate order; updated entities keep
    their position.  ``existing`` itself is never modified.
    """
    collection: list[E] = list(existing)
    counts = _Counters()

    for candidate in candidates:
        row_number = getattr(candidate, "row_number", 0)
        errors = strategy.validate(candidate)
        if errors:
            counts.dropped += 1
            counts.outcomes.append(RecordOutcome(
                row_number=row_number,
                status=RecordOutcomeStatus.DROPPED,
                errors=tuple(errors),
            ))
            logger.debug(
                "candidate_dropped",
                extra={"row_number": row_number, "error_codes": [e.code for e in errors]},
            )
            continue

        index = strategy.find_match(collection, candidate)
        if index is None:
            entity = strategy.create(collection, candidate)
            collection.append(entity)
            counts.created += 1
            status = RecordOutcomeStatus.CREATED
        else:
            updated = strategy.on_match(collection[index], candidate)
            if updated is None:
                entity = collection[index]
                counts.skipped += 1
                status = RecordOutcomeStatus.SKIPPED
            else:
                entity = updated
                collection[index] = updated
                counts.updated += 1
                status = RecordOutcomeStatus.UPDATED

        counts.outcomes.append(RecordOutcome(
            row_number=row_number,
            status=status,
            entity_id=strategy.entity_id(entity),
        ))

    return IngestResult(
        created=counts.created,
        updated=counts.updated,
        skipped=counts.skipped,
        dropped=counts.dropped,
        collection=tuple(collection),
        outcomes=tuple(counts.outcomes),
    )
