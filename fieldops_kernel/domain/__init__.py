"""
Pure domain layer.

Data types and domain logic with NO dependencies on:
- SQLAlchemy or any store
- Wall-clock time (see ``clock``)
- I/O

All domain objects are immutable and deterministic.
"""

from fieldops_kernel.domain.client import (
    Client,
    ClientStatus,
    compute_initials,
    next_client_id,
)
from fieldops_kernel.domain.clock import (
    Clock,
    DeterministicClock,
    SequentialClock,
    SystemClock,
)
from fieldops_kernel.domain.dtos import ValidationError
from fieldops_kernel.domain.identity import (
    FixedRandomSource,
    IdAllocator,
    RandomSource,
    SeededRandomSource,
    SequentialIdAllocator,
    SystemRandomSource,
    UuidIdAllocator,
    allocate_unique,
)
from fieldops_kernel.domain.inventory import (
    InventoryItem,
    check_item_invariants,
    new_inventory_item,
    open_assignments,
)
from fieldops_kernel.domain.ledger import (
    AssignmentRecord,
    InventoryStatus,
    MaintenanceRecord,
    StatusLogEntry,
)
from fieldops_kernel.domain.workflow import Guard, Transition, Workflow

__all__ = [
    "AssignmentRecord",
    "Client",
    "ClientStatus",
    "Clock",
    "DeterministicClock",
    "FixedRandomSource",
    "Guard",
    "IdAllocator",
    "InventoryItem",
    "InventoryStatus",
    "MaintenanceRecord",
    "RandomSource",
    "SeededRandomSource",
    "SequentialClock",
    "SequentialIdAllocator",
    "StatusLogEntry",
    "SystemClock",
    "SystemRandomSource",
    "Transition",
    "UuidIdAllocator",
    "ValidationError",
    "Workflow",
    "allocate_unique",
    "check_item_invariants",
    "compute_initials",
    "new_inventory_item",
    "next_client_id",
    "open_assignments",
]
