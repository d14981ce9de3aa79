"""
FieldOpsConfig schema.

The typed, frozen view of the YAML configuration consumed by the ledger
services and the ingestion promoters.  Every key has a packaged default
(``defaults.yaml``); override files may set any subset.
"""

from __future__ import annotations

from dataclasses import dataclass, fields

DEFAULT_PALETTE: tuple[str, ...] = (
    "bg-blue-50 dark:bg-blue-900/20 text-blue-600 dark:text-blue-400 border-blue-100 dark:border-blue-900/50",
    "bg-purple-50 dark:bg-purple-900/20 text-purple-600 dark:text-purple-400 border-purple-100 dark:border-purple-900/50",
    "bg-emerald-50 dark:bg-emerald-900/20 text-emerald-600 dark:text-emerald-400 border-emerald-100 dark:border-emerald-900/50",
    "bg-orange-50 dark:bg-orange-900/20 text-orange-600 dark:text-orange-400 border-orange-100 dark:border-orange-900/50",
)


@dataclass(frozen=True)
class ClientIdPolicy:
    """Sequential client id format: ``{prefix}{n:0{width}d}``."""

    prefix: str = "CL-"
    width: int = 3


@dataclass(frozen=True)
class LedgerTexts:
    """Actor names and status-log reasons written by the core."""

    intake_reason: str = "initial intake"
    bulk_import_actor: str = "Bulk Import"
    bulk_import_reason: str = "initial bulk load"
    assign_reason: str = "Assigned to {receiver} at {subject}"
    maintenance_reason: str = "Workshop: {reason} ({workshop})"
    release_reason: str = "release / return to pool"
    retire_reason: str = "administrative retirement"
    default_actor: str = "System"
    signature_prefix: str = "SIGNED_BY_"


@dataclass(frozen=True)
class IngestionDefaults:
    """Placeholders applied to imported records with missing fields."""

    placeholder_image_url: str = "https://via.placeholder.com/300?text=No+Image"
    placeholder_serial: str = "SN-GENERICO"
    unnamed_client: str = "Sin Nombre"
    last_visit_placeholder: str = "-"


@dataclass(frozen=True)
class FieldOpsConfig:
    """Root configuration object."""

    date_format: str = "%d/%m/%Y"
    client_ids: ClientIdPolicy = ClientIdPolicy()
    client_palette: tuple[str, ...] = DEFAULT_PALETTE
    texts: LedgerTexts = LedgerTexts()
    ingestion: IngestionDefaults = IngestionDefaults()

    def __post_init__(self) -> None:
        if not self.client_palette:
            raise ValueError("client_palette must contain at least one colour class")
        if self.client_ids.width < 1:
            raise ValueError("client_ids.width must be positive")


SECTION_TYPES: dict[str, type] = {
    "client_ids": ClientIdPolicy,
    "texts": LedgerTexts,
    "ingestion": IngestionDefaults,
}


def field_names(cls: type) -> frozenset[str]:
    return frozenset(f.name for f in fields(cls))
