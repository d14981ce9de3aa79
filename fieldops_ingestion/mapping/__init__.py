"""Positional row-to-candidate mapping."""

from fieldops_ingestion.mapping.engine import (
    CLIENT_COLUMNS,
    INVENTORY_COLUMNS,
    map_client_rows,
    map_inventory_rows,
)

__all__ = [
    "CLIENT_COLUMNS",
    "INVENTORY_COLUMNS",
    "map_client_rows",
    "map_inventory_rows",
]
