"""
Inventory item aggregate.

Responsibility:
    The ``InventoryItem`` aggregate root: current status, the optional
    active assignment, and the three most-recent-first ledgers it owns.
    Provides creation with a seeded intake entry, invariant checking, and
    store (de)serialisation.  State changes happen only through
    ``fieldops_engines.lifecycle``.

Architecture position:
    Kernel > Domain -- pure, zero I/O.

Invariants enforced (see ``check_item_invariants``):
    - ``status_log[0].new_status == status`` whenever the log is non-empty.
    - ``active_assignment`` is present iff ``status`` is ASSIGNED.
    - At most one open entry in ``assignment_history``; when ASSIGNED it is
      identity-equal to ``active_assignment``.
    - Every closed assignment ends on or after its start.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any

from fieldops_kernel.domain.dates import DEFAULT_DATE_FORMAT, is_on_or_after
from fieldops_kernel.domain.dtos import ValidationError
from fieldops_kernel.domain.ledger import (
    AssignmentRecord,
    InventoryStatus,
    MaintenanceRecord,
    StatusLogEntry,
)


@dataclass(frozen=True)
class InventoryItem:
    """One physical, trackable equipment unit."""

    id: str
    name: str
    serial_number: str
    status: InventoryStatus = InventoryStatus.AVAILABLE
    description: str = ""
    image_url: str = ""
    active_assignment: AssignmentRecord | None = None
    assignment_history: tuple[AssignmentRecord, ...] = ()
    maintenance_log: tuple[MaintenanceRecord, ...] = ()
    status_log: tuple[StatusLogEntry, ...] = ()

    @property
    def latest_status_entry(self) -> StatusLogEntry | None:
        return self.status_log[0] if self.status_log else None

    @property
    def open_record(self) -> AssignmentRecord | None:
        """The active assignment, but only while the item is ASSIGNED."""
        if self.status is InventoryStatus.ASSIGNED:
            return self.active_assignment
        return None

    def serial_key(self) -> str:
        """Natural key used for case-insensitive serial matching."""
        return self.serial_number.strip().lower()

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "serialNumber": self.serial_number,
            "imageUrl": self.image_url,
            "status": self.status.value,
            "assignmentHistory": [r.to_dict() for r in self.assignment_history],
            "maintenanceLog": [r.to_dict() for r in self.maintenance_log],
            "statusLog": [e.to_dict() for e in self.status_log],
        }
        if self.active_assignment is not None:
            data["activeAssignment"] = self.active_assignment.to_dict()
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "InventoryItem":
        active = data.get("activeAssignment", data.get("assignment"))
        history = data.get("assignmentHistory", data.get("history")) or []
        status_log = data.get("statusLog", data.get("statusLogs")) or []
        return cls(
            id=str(data["id"]),
            name=str(data.get("name") or ""),
            description=str(data.get("description") or ""),
            serial_number=str(data.get("serialNumber") or ""),
            image_url=str(data.get("imageUrl") or ""),
            status=InventoryStatus.parse(data.get("status") or InventoryStatus.AVAILABLE),
            active_assignment=AssignmentRecord.from_dict(active) if active else None,
            assignment_history=tuple(AssignmentRecord.from_dict(r) for r in history),
            maintenance_log=tuple(
                MaintenanceRecord.from_dict(r) for r in data.get("maintenanceLog") or []
            ),
            status_log=tuple(StatusLogEntry.from_dict(e) for e in status_log),
        )


def new_inventory_item(
    *,
    item_id: str,
    name: str,
    serial_number: str,
    log_entry_id: str,
    now: datetime,
    actor: str,
    reason: str,
    description: str = "",
    image_url: str = "",
) -> InventoryItem:
    """
    Create an AVAILABLE item whose status log holds one synthetic intake entry.

    The intake entry records AVAILABLE -> AVAILABLE so the log head matches
    the status from the first moment the item exists.
    """
    intake = StatusLogEntry(
        id=log_entry_id,
        timestamp=now.isoformat(),
        previous_status=InventoryStatus.AVAILABLE,
        new_status=InventoryStatus.AVAILABLE,
        actor=actor,
        reason=reason,
    )
    return InventoryItem(
        id=item_id,
        name=name,
        description=description,
        serial_number=serial_number,
        image_url=image_url,
        status=InventoryStatus.AVAILABLE,
        status_log=(intake,),
    )


def open_assignments(item: InventoryItem) -> list[AssignmentRecord]:
    """All history entries without an end date."""
    return [record for record in item.assignment_history if record.is_open]


def check_item_invariants(
    item: InventoryItem,
    date_format: str = DEFAULT_DATE_FORMAT,
) -> list[ValidationError]:
    """Return every invariant the item violates; empty when consistent."""
    errors: list[ValidationError] = []

    head = item.latest_status_entry
    if head is not None and head.new_status is not item.status:
        errors.append(ValidationError(
            code="STATUS_LOG_DRIFT",
            message=(
                f"Latest status log entry says {head.new_status.value}, "
                f"item says {item.status.value}"
            ),
            field="status",
        ))

    is_assigned = item.status is InventoryStatus.ASSIGNED
    if is_assigned != (item.active_assignment is not None):
        errors.append(ValidationError(
            code="ACTIVE_ASSIGNMENT_MISMATCH",
            message="Active assignment must be present exactly when status is Assigned",
            field="active_assignment",
        ))

    open_records = open_assignments(item)
    if len(open_records) > 1:
        errors.append(ValidationError(
            code="MULTIPLE_OPEN_ASSIGNMENTS",
            message=f"{len(open_records)} open assignments in history",
            field="assignment_history",
        ))
    if is_assigned and item.active_assignment is not None:
        if not any(r.same_assignment(item.active_assignment) for r in open_records):
            errors.append(ValidationError(
                code="ACTIVE_ASSIGNMENT_NOT_IN_HISTORY",
                message="Active assignment has no matching open history entry",
                field="assignment_history",
            ))

    for record in item.assignment_history:
        if record.is_open:
            continue
        if not is_on_or_after(record.end_date, record.start_date, date_format):
            errors.append(ValidationError(
                code="ASSIGNMENT_ENDS_BEFORE_START",
                message=f"Assignment {record.identity_key} ends {record.end_date}",
                field="assignment_history",
            ))

    return errors
