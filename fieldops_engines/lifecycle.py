"""
Module: fieldops_engines.lifecycle
Responsibility:
    The single authority for inventory status changes.  ``transition``
    applies one action (Assign, SendToMaintenance, Release, Retire) to an
    ``InventoryItem`` and returns the updated item together with an
    optional error value.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import fieldops_kernel (domain types and exceptions).

Invariants enforced:
    - Total function: every (status, action) pair yields either a new item
      or an ``InvalidTransitionError`` value.  Expected rejections are
      returned, never raised.
    - No partial writes: on error the input item is returned unchanged.
    - Every success prepends exactly one ``StatusLogEntry`` whose
      ``new_status`` equals the resulting status, and performs at most one
      assignment close plus one assignment open.
    - At most one open assignment remains in history after any success.
    - Purity: ``now`` and ids are supplied by the caller; the engine never
      reads the wall clock.

Failure modes:
    - ``InvalidTransitionError`` (returned) -- the action is not declared
      from the current status in ``INVENTORY_WORKFLOW``.
    - ``ForbiddenTransitionError`` (returned) -- a privileged action was
      requested with ``is_privileged=False``.
    - ``RuntimeError`` (raised) -- the injected id allocator keeps
      producing ids that already exist on the item.

Audit relevance:
    The status log is the ledger's audit trail.  Each invocation is traced
    via ``@traced_engine`` and accepted/rejected transitions are logged with
    the item id, action and resulting status.

Usage:
    from fieldops_engines.lifecycle import Assign, transition

    result = transition(
        item=item,
        action=Assign("CL-001", "Site A", "Ana", "Luis"),
        actor_name="Luis",
        now=clock.now(),
        id_allocator=ids,
    )
    if result.error is None:
        item = result.item
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from typing import Any, ClassVar

from fieldops_engines.tracer import traced_engine
from fieldops_kernel.domain.dates import DEFAULT_DATE_FORMAT, format_calendar_date
from fieldops_kernel.domain.identity import IdAllocator, allocate_unique
from fieldops_kernel.domain.inventory import InventoryItem
from fieldops_kernel.domain.ledger import (
    AssignmentRecord,
    InventoryStatus,
    MaintenanceRecord,
    StatusLogEntry,
)
from fieldops_kernel.domain.workflow import Guard, Transition, Workflow
from fieldops_kernel.exceptions import (
    ForbiddenTransitionError,
    InvalidTransitionError,
)
from fieldops_kernel.logging_config import get_logger

logger = get_logger("engines.lifecycle")


# ---------------------------------------------------------------------------
# Actions
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Assign:
    """Hand the item to a receiving party at a subject (client or post)."""

    name: ClassVar[str] = "assign"

    subject_id: str | None
    subject_label: str
    receiving_party_name: str
    issuing_supervisor_name: str
    observations: str | None = None


@dataclass(frozen=True)
class SendToMaintenance:
    """Dispatch the item to a workshop."""

    name: ClassVar[str] = "send_to_maintenance"

    workshop_name: str
    receiver_name: str
    reason: str
    observations: str | None = None
    photo_url: str | None = None


@dataclass(frozen=True)
class Release:
    """Return the item to the available pool."""

    name: ClassVar[str] = "release"


@dataclass(frozen=True)
class Retire:
    """Take the item out of service. Requires privilege."""

    name: ClassVar[str] = "retire"


Action = Assign | SendToMaintenance | Release | Retire


# ---------------------------------------------------------------------------
# Workflow table
# ---------------------------------------------------------------------------

PRIVILEGED_GUARD = Guard(
    name="privileged_actor",
    description="Actor holds elevated (administrative) privilege",
)

_ALL_STATES = tuple(s.value for s in InventoryStatus)

INVENTORY_WORKFLOW = Workflow(
    name="inventory_item",
    description="Operational lifecycle of an equipment unit",
    initial_state=InventoryStatus.AVAILABLE.value,
    states=_ALL_STATES,
    transitions=(
        *(
            Transition(state, InventoryStatus.ASSIGNED.value, Assign.name)
            for state in _ALL_STATES
        ),
        *(
            Transition(state, InventoryStatus.IN_MAINTENANCE.value, SendToMaintenance.name)
            for state in _ALL_STATES
        ),
        Transition(InventoryStatus.ASSIGNED.value, InventoryStatus.AVAILABLE.value, Release.name),
        Transition(
            InventoryStatus.IN_MAINTENANCE.value, InventoryStatus.AVAILABLE.value, Release.name
        ),
        *(
            Transition(
                state, InventoryStatus.RETIRED.value, Retire.name, guard=PRIVILEGED_GUARD
            )
            for state in _ALL_STATES
        ),
    ),
)


# ---------------------------------------------------------------------------
# Texts and result
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class LifecycleTexts:
    """Status-log reasons and signature placeholder written by the engine."""

    assign_reason: str = "Assigned to {receiver} at {subject}"
    maintenance_reason: str = "Workshop: {reason} ({workshop})"
    release_reason: str = "release / return to pool"
    retire_reason: str = "administrative retirement"
    signature_prefix: str = "SIGNED_BY_"

    def signature_for(self, name: str) -> str:
        return f"{self.signature_prefix}{name}"


DEFAULT_TEXTS = LifecycleTexts()


@dataclass(frozen=True)
class TransitionResult:
    """
    Outcome of one ``transition`` call.

    ``error`` is None on success.  On failure ``item`` is the caller's
    item, unchanged.
    """

    item: InventoryItem
    error: InvalidTransitionError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


# ---------------------------------------------------------------------------
# Engine
# ---------------------------------------------------------------------------


def _close_first_open(
    history: tuple[AssignmentRecord, ...],
    end_date: str,
    date_format: str,
) -> tuple[tuple[AssignmentRecord, ...], AssignmentRecord | None]:
    """Close the first open record; returns (history, closed record or None)."""
    for index, record in enumerate(history):
        if record.is_open:
            closed = record.close(end_date, date_format)
            return history[:index] + (closed,) + history[index + 1:], closed
    return history, None


def _assign_changes(
    item: InventoryItem,
    action: Assign,
    history: tuple[AssignmentRecord, ...],
    today: str,
    texts: LifecycleTexts,
) -> tuple[dict[str, Any], str]:
    record = AssignmentRecord(
        subject_id=action.subject_id,
        subject_label=action.subject_label,
        receiving_party_name=action.receiving_party_name,
        issuing_supervisor_name=action.issuing_supervisor_name,
        start_date=today,
        observations=action.observations,
        supervisor_signature=texts.signature_for(action.issuing_supervisor_name),
        receiver_signature=texts.signature_for(action.receiving_party_name),
    )
    reason = texts.assign_reason.format(
        receiver=action.receiving_party_name,
        subject=action.subject_label,
    )
    changes = {
        "active_assignment": record,
        "assignment_history": (record,) + history,
    }
    return changes, reason


def _maintenance_changes(
    item: InventoryItem,
    action: SendToMaintenance,
    history: tuple[AssignmentRecord, ...],
    timestamp: str,
    maintenance_id: str,
    texts: LifecycleTexts,
) -> tuple[dict[str, Any], str]:
    record = MaintenanceRecord(
        id=maintenance_id,
        timestamp=timestamp,
        workshop_name=action.workshop_name,
        receiver_name=action.receiver_name,
        reason=action.reason,
        observations=action.observations,
        photo_url=action.photo_url,
    )
    reason = texts.maintenance_reason.format(
        reason=action.reason,
        workshop=action.workshop_name,
    )
    changes = {
        "active_assignment": None,
        "assignment_history": history,
        "maintenance_log": (record,) + item.maintenance_log,
    }
    return changes, reason


def _reject(item: InventoryItem, action: Action, error: InvalidTransitionError) -> TransitionResult:
    logger.warning(
        "transition_rejected",
        extra={
            "item_id": item.id,
            "action": action.name,
            "current_status": item.status.value,
            "error_code": error.code,
        },
    )
    return TransitionResult(item=item, error=error)


@traced_engine("lifecycle", "1.0", fingerprint_fields=("actor_name", "is_privileged"))
def transition(
    item: InventoryItem,
    action: Action,
    actor_name: str,
    now: datetime,
    *,
    id_allocator: IdAllocator,
    is_privileged: bool = False,
    date_format: str = DEFAULT_DATE_FORMAT,
    texts: LifecycleTexts = DEFAULT_TEXTS,
) -> TransitionResult:
    """
    Apply ``action`` to ``item`` at moment ``now``.

    Assignment start/end dates are written as calendar dates in
    ``date_format``; status-log and maintenance timestamps as ISO-8601.
    """
    rule = INVENTORY_WORKFLOW.find(item.status.value, action.name)
    if rule is None:
        allowed = ", ".join(INVENTORY_WORKFLOW.sources_for(action.name))
        return _reject(item, action, InvalidTransitionError(
            item.id,
            item.status.value,
            action.name,
            detail=f"allowed only from {allowed}",
        ))
    if rule.guard is PRIVILEGED_GUARD and not is_privileged:
        return _reject(item, action, ForbiddenTransitionError(
            item.id, item.status.value, action.name, actor_name,
        ))

    today = format_calendar_date(now, date_format)
    timestamp = now.isoformat()
    history, closed = _close_first_open(item.assignment_history, today, date_format)

    if isinstance(action, Assign):
        changes, reason = _assign_changes(item, action, history, today, texts)
    elif isinstance(action, SendToMaintenance):
        maintenance_id = allocate_unique(id_allocator, {m.id for m in item.maintenance_log})
        changes, reason = _maintenance_changes(
            item, action, history, timestamp, maintenance_id, texts,
        )
    elif isinstance(action, Release):
        changes = {"active_assignment": None, "assignment_history": history}
        reason = texts.release_reason
    else:
        changes = {"active_assignment": None, "assignment_history": history}
        reason = texts.retire_reason

    new_status = InventoryStatus(rule.to_state)
    entry = StatusLogEntry(
        id=allocate_unique(id_allocator, {e.id for e in item.status_log}),
        timestamp=timestamp,
        previous_status=item.status,
        new_status=new_status,
        actor=actor_name,
        reason=reason,
    )
    updated = replace(
        item,
        status=new_status,
        status_log=(entry,) + item.status_log,
        **changes,
    )

    logger.info(
        "transition_applied",
        extra={
            "item_id": item.id,
            "action": action.name,
            "previous_status": item.status.value,
            "new_status": new_status.value,
            "closed_assignment": closed is not None,
        },
    )
    return TransitionResult(item=updated)
