"""
Ledger entry model: the records embedded in an inventory item.

Responsibility:
    Frozen value types for the three kinds of ledger facts an item carries
    (assignment intervals, workshop dispatches, status transitions) plus the
    status enum, with conversion to and from the plain dicts the store
    persists.

Architecture position:
    Kernel > Domain -- pure, zero I/O, no dependencies beyond ``dates``.

Invariants enforced:
    - ``AssignmentRecord.end_date`` is on or after ``start_date`` when both
      parse (checked by ``check_item_invariants`` and honoured by ``close``).
    - ``StatusLogEntry`` instances are never modified once created; the
      aggregate only ever prepends new ones.

Compatibility:
    ``from_dict`` readers accept the key names and Spanish status labels
    written by the earlier browser-local application so that old
    collections load without migration.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Any

from fieldops_kernel.domain.dates import DEFAULT_DATE_FORMAT, is_on_or_after


class InventoryStatus(str, Enum):
    """Operational status of an equipment unit."""

    AVAILABLE = "Available"
    ASSIGNED = "Assigned"
    IN_MAINTENANCE = "InMaintenance"
    RETIRED = "Retired"

    @classmethod
    def parse(cls, value: "str | InventoryStatus") -> "InventoryStatus":
        """Parse a canonical value or a legacy label."""
        if isinstance(value, InventoryStatus):
            return value
        text = str(value).strip()
        try:
            return cls(text)
        except ValueError:
            pass
        legacy = _LEGACY_STATUS_LABELS.get(text.lower())
        if legacy is None:
            raise ValueError(f"Unknown inventory status: {value!r}")
        return legacy


_LEGACY_STATUS_LABELS: dict[str, InventoryStatus] = {
    "disponible": InventoryStatus.AVAILABLE,
    "asignado": InventoryStatus.ASSIGNED,
    "en taller": InventoryStatus.IN_MAINTENANCE,
    "inactivo": InventoryStatus.RETIRED,
    "available": InventoryStatus.AVAILABLE,
    "assigned": InventoryStatus.ASSIGNED,
    "in_maintenance": InventoryStatus.IN_MAINTENANCE,
    "inmaintenance": InventoryStatus.IN_MAINTENANCE,
    "retired": InventoryStatus.RETIRED,
}


def _opt(data: dict[str, Any], *keys: str) -> str | None:
    """First non-empty value among ``keys``, as str, else None."""
    for key in keys:
        value = data.get(key)
        if value is not None and value != "":
            return str(value)
    return None


def _req(data: dict[str, Any], *keys: str, default: str = "") -> str:
    value = _opt(data, *keys)
    return value if value is not None else default


def _prune(data: dict[str, Any]) -> dict[str, Any]:
    return {k: v for k, v in data.items() if v is not None}


@dataclass(frozen=True)
class AssignmentRecord:
    """One occupancy interval of an item at a subject (client or post)."""

    subject_label: str
    receiving_party_name: str
    issuing_supervisor_name: str
    start_date: str
    subject_id: str | None = None
    end_date: str | None = None
    observations: str | None = None
    supervisor_signature: str | None = None
    receiver_signature: str | None = None

    @property
    def is_open(self) -> bool:
        """An assignment without an end date is the item's current one."""
        return self.end_date is None

    @property
    def identity_key(self) -> tuple[str, str, str]:
        """(start_date, receiving_party_name, subject_label) identity triple."""
        return (self.start_date, self.receiving_party_name, self.subject_label)

    def same_assignment(self, other: "AssignmentRecord | None") -> bool:
        return other is not None and self.identity_key == other.identity_key

    def close(self, end_date: str, date_format: str = DEFAULT_DATE_FORMAT) -> "AssignmentRecord":
        """
        Return a closed copy ending on ``end_date``.

        An end date earlier than the start (clock skew) is clamped to the
        start date.  Both are read in ``date_format``.
        """
        if not is_on_or_after(end_date, self.start_date, date_format):
            end_date = self.start_date
        return replace(self, end_date=end_date)

    def to_dict(self) -> dict[str, Any]:
        return _prune({
            "subjectId": self.subject_id,
            "subjectLabel": self.subject_label,
            "receivingPartyName": self.receiving_party_name,
            "issuingSupervisorName": self.issuing_supervisor_name,
            "startDate": self.start_date,
            "endDate": self.end_date,
            "observations": self.observations,
            "supervisorSignature": self.supervisor_signature,
            "receiverSignature": self.receiver_signature,
        })

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "AssignmentRecord":
        return cls(
            subject_id=_opt(data, "subjectId", "clientId"),
            subject_label=_req(data, "subjectLabel", "post"),
            receiving_party_name=_req(data, "receivingPartyName", "operatorName"),
            issuing_supervisor_name=_req(data, "issuingSupervisorName", "supervisorName"),
            start_date=_req(data, "startDate", "date"),
            end_date=_opt(data, "endDate"),
            observations=_opt(data, "observations"),
            supervisor_signature=_opt(data, "supervisorSignature"),
            receiver_signature=_opt(data, "receiverSignature", "operatorSignature"),
        )


@dataclass(frozen=True)
class MaintenanceRecord:
    """One workshop dispatch event."""

    id: str
    timestamp: str
    workshop_name: str
    receiver_name: str
    reason: str
    observations: str | None = None
    photo_url: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return _prune({
            "id": self.id,
            "timestamp": self.timestamp,
            "workshopName": self.workshop_name,
            "receiverName": self.receiver_name,
            "reason": self.reason,
            "observations": self.observations,
            "photoUrl": self.photo_url,
        })

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "MaintenanceRecord":
        return cls(
            id=_req(data, "id"),
            timestamp=_req(data, "timestamp", "date"),
            workshop_name=_req(data, "workshopName"),
            receiver_name=_req(data, "receiverName"),
            reason=_req(data, "reason"),
            observations=_opt(data, "observations"),
            photo_url=_opt(data, "photoUrl"),
        )


@dataclass(frozen=True)
class StatusLogEntry:
    """One immutable audit fact about a status change."""

    id: str
    timestamp: str
    previous_status: InventoryStatus
    new_status: InventoryStatus
    actor: str
    reason: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "timestamp": self.timestamp,
            "previousStatus": self.previous_status.value,
            "newStatus": self.new_status.value,
            "actor": self.actor,
            "reason": self.reason,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "StatusLogEntry":
        return cls(
            id=_req(data, "id"),
            timestamp=_req(data, "timestamp", "date"),
            previous_status=InventoryStatus.parse(_req(data, "previousStatus")),
            new_status=InventoryStatus.parse(_req(data, "newStatus")),
            actor=_req(data, "actor", "changedBy"),
            reason=_req(data, "reason"),
        )
