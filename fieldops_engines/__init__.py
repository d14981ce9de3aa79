"""
Module: fieldops_engines
Responsibility:
    Package entrypoint re-exporting the pure ledger engines: the inventory
    lifecycle state machine and history reconciliation.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import fieldops_kernel.  MUST NOT import fieldops_services,
    fieldops_ingestion or fieldops_config.

Invariants enforced:
    - Purity: engines never read the wall clock; ``now``/``today`` are
      explicit parameters supplied by services.
    - Determinism: identical inputs always produce identical outputs.

Audit relevance:
    Every engine invocation is traced via ``@traced_engine`` (see
    ``fieldops_engines.tracer``), emitting FIELDOPS_ENGINE_TRACE records.
"""

from fieldops_engines.history import (
    DATE_PARSE_FAILURE,
    HISTORY_TABLE_HEADERS,
    HistoryRow,
    TimelineRow,
    TimelineSource,
    history_for,
    history_table,
    status_timeline,
)
from fieldops_engines.lifecycle import (
    INVENTORY_WORKFLOW,
    PRIVILEGED_GUARD,
    Action,
    Assign,
    LifecycleTexts,
    Release,
    Retire,
    SendToMaintenance,
    TransitionResult,
    transition,
)

__all__ = [
    "DATE_PARSE_FAILURE",
    "HISTORY_TABLE_HEADERS",
    "INVENTORY_WORKFLOW",
    "PRIVILEGED_GUARD",
    "Action",
    "Assign",
    "HistoryRow",
    "LifecycleTexts",
    "Release",
    "Retire",
    "SendToMaintenance",
    "TimelineRow",
    "TimelineSource",
    "TransitionResult",
    "history_for",
    "history_table",
    "status_timeline",
    "transition",
]
