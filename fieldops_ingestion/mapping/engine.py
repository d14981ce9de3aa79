"""
Mapping engine: pure transformation from a parsed table to typed candidates.

ZERO I/O.

Columns are positional.  The header row only drives delimiter detection;
its text is never used to locate fields, so a file with renamed or
translated headers maps exactly like the template.

Cells are already cleaned by the adapter; an empty cell or a missing
trailing cell is absent.
"""

from __future__ import annotations

from typing import Iterator

from fieldops_ingestion.adapters.csv_adapter import ParsedTable
from fieldops_ingestion.domain.types import ClientCandidate, InventoryCandidate

# Field order of the bulk-load templates.
INVENTORY_COLUMNS: tuple[str, ...] = (
    "name",
    "brand",
    "description",
    "serial_number",
    "image_url",
)

CLIENT_COLUMNS: tuple[str, ...] = (
    "name",
    "tax_id",
    "contact_name",
    "email",
    "phone",
    "address",
    "photo_url",
)


def _fields(row: tuple[str, ...], layout: tuple[str, ...]) -> dict[str, str | None]:
    return {
        target: (row[index] or None) if index < len(row) else None
        for index, target in enumerate(layout)
    }


def _rows(table: ParsedTable) -> Iterator[tuple[int, tuple[str, ...]]]:
    # Row numbers are 1-based over data rows; the header is row 0.
    for offset, row in enumerate(table.rows, start=1):
        yield offset, row


def map_inventory_rows(table: ParsedTable) -> list[InventoryCandidate]:
    """
    Inventory candidates, one per data row.

    Description is ``"<brand> - <description>"`` when a brand is present.
    """
    candidates: list[InventoryCandidate] = []
    for row_number, row in _rows(table):
        fields = _fields(row, INVENTORY_COLUMNS)
        brand = fields["brand"]
        description = fields["description"]
        if brand:
            description = f"{brand} - {description or ''}"
        candidates.append(InventoryCandidate(
            row_number=row_number,
            name=fields["name"],
            description=description,
            serial_number=fields["serial_number"],
            image_url=fields["image_url"],
        ))
    return candidates


def map_client_rows(table: ParsedTable) -> list[ClientCandidate]:
    """Client candidates, one per data row."""
    return [
        ClientCandidate(row_number=row_number, **_fields(row, CLIENT_COLUMNS))
        for row_number, row in _rows(table)
    ]
