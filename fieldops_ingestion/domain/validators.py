"""
Pure validators for mapped candidates. ZERO I/O.

Validators return ``ValidationError`` values; they never raise.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Callable, Sequence
from typing import TypeVar

from fieldops_ingestion.domain.types import ClientCandidate, InventoryCandidate
from fieldops_kernel.domain.dtos import ValidationError
from fieldops_kernel.exceptions import DuplicateKeyError, MalformedRecordError

C = TypeVar("C")


def validate_inventory_candidate(candidate: InventoryCandidate) -> list[ValidationError]:
    """An inventory row needs a name."""
    if not candidate.name:
        return [ValidationError(
            code=MalformedRecordError.code,
            message=f"Row {candidate.row_number}: missing equipment name",
            field="name",
            details={"row_number": candidate.row_number},
        )]
    return []


def validate_client_candidate(candidate: ClientCandidate) -> list[ValidationError]:
    """A client row needs something to key or display: name, tax id or email."""
    if not (candidate.name or candidate.tax_id or candidate.email):
        return [ValidationError(
            code=MalformedRecordError.code,
            message=f"Row {candidate.row_number}: no name, tax id or email",
            field="name",
            details={"row_number": candidate.row_number},
        )]
    return []


def find_batch_duplicates(
    candidates: Sequence[C],
    key: Callable[[C], str | None],
) -> list[ValidationError]:
    """
    One ``DUPLICATE_KEY`` error per natural key that occurs more than once.

    Candidates whose key is None or empty are ignored.  The errors are
    informational; promoters resolve duplicates against the first
    occurrence.
    """
    rows_by_key: dict[str, list[int]] = defaultdict(list)
    for index, candidate in enumerate(candidates):
        value = key(candidate)
        if value:
            rows_by_key[value].append(getattr(candidate, "row_number", index))

    errors: list[ValidationError] = []
    for value, rows in rows_by_key.items():
        if len(rows) > 1:
            errors.append(ValidationError(
                code=DuplicateKeyError.code,
                message=f"Key {value!r} appears {len(rows)} times in the batch",
                details={"key": value, "rows": rows},
            ))
    return errors
