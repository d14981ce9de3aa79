"""
Module: fieldops_engines.history
Responsibility:
    Reconstruct the assignment history of one subject (client or post)
    across the whole inventory, merging each item's open assignment with its
    closed history without double-counting, and project an item's status
    timeline.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import fieldops_kernel.

Invariants enforced:
    - An open assignment appears at most once per item: history records
      identity-equal to the open record by (start_date,
      receiving_party_name, subject_label) are skipped before matching.
    - Records with a ``subject_id`` match by id only; records without one
      (legacy) match by their denormalised label.
    - Rows are ordered by parsed start date, most recent first.  A row whose
      start date does not parse sorts as if it started at ``today``.
    - Nothing raises on malformed dates and no row is dropped.

Failure modes:
    None raised.  Unparseable dates set ``start_date_valid=False`` and the
    ``DATE_PARSE_FAILURE`` flag; duration falls back to ``today`` for the
    unparseable bound.

Audit relevance:
    ``history_for`` backs the per-client equipment report; ``history_table``
    is the tabular projection handed to CSV/PDF exporters.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Iterable, Sequence

from fieldops_engines.tracer import traced_engine
from fieldops_kernel.domain.dates import (
    DEFAULT_DATE_FORMAT,
    as_naive,
    parse_calendar_date,
    whole_days_between,
)
from fieldops_kernel.domain.inventory import InventoryItem
from fieldops_kernel.domain.ledger import AssignmentRecord, InventoryStatus
from fieldops_kernel.logging_config import get_logger

logger = get_logger("engines.history")

DATE_PARSE_FAILURE = "DATE_PARSE_FAILURE"
IN_PROGRESS_LABEL = "in progress"


@dataclass(frozen=True)
class HistoryRow:
    """One assignment of one item at the queried subject."""

    item_id: str
    item_name: str
    serial_number: str
    record: AssignmentRecord
    is_current: bool
    duration_days: int | None
    duration_label: str
    start_date_valid: bool
    flags: tuple[str, ...] = ()

    @property
    def start_date(self) -> str:
        return self.record.start_date

    @property
    def end_date(self) -> str | None:
        return self.record.end_date


def _matches_subject(
    record: AssignmentRecord,
    subject_id: str | None,
    subject_label_fallback: str | None,
) -> bool:
    if record.subject_id is not None:
        return subject_id is not None and record.subject_id == subject_id
    return bool(subject_label_fallback) and record.subject_label == subject_label_fallback


def _duration(record: AssignmentRecord, today: datetime, fmt: str) -> tuple[int | None, str]:
    if record.end_date is None:
        return None, IN_PROGRESS_LABEL
    start = parse_calendar_date(record.start_date, fmt) or today
    end = parse_calendar_date(record.end_date, fmt) or today
    days = whole_days_between(start, end)
    return days, f"{days} days"


def _row(
    item: InventoryItem,
    record: AssignmentRecord,
    is_current: bool,
    today: datetime,
    fmt: str,
) -> HistoryRow:
    days, label = _duration(record, today, fmt)
    start_valid = parse_calendar_date(record.start_date, fmt) is not None
    end_valid = record.end_date is None or parse_calendar_date(record.end_date, fmt) is not None
    flags = () if start_valid and end_valid else (DATE_PARSE_FAILURE,)
    return HistoryRow(
        item_id=item.id,
        item_name=item.name,
        serial_number=item.serial_number,
        record=record,
        is_current=is_current,
        duration_days=days,
        duration_label=label,
        start_date_valid=start_valid,
        flags=flags,
    )


@traced_engine("history", "1.0", fingerprint_fields=("subject_id", "subject_label_fallback"))
def history_for(
    subject_id: str | None,
    subject_label_fallback: str | None,
    inventory: Iterable[InventoryItem],
    today: datetime,
    date_format: str = DEFAULT_DATE_FORMAT,
) -> list[HistoryRow]:
    """
    Every assignment (current and past) of any item at the given subject.

    Args:
        subject_id: The subject's system id.
        subject_label_fallback: The subject's current display name, used to
            match legacy records that carry no subject id.
        inventory: The full inventory collection.
        today: Query moment; substitutes for unparseable dates in
            both sorting and durations.
        date_format: Format the assignment dates were written in.
    """
    today = as_naive(today)
    rows: list[HistoryRow] = []

    for item in inventory:
        open_record = item.open_record
        for record in item.assignment_history:
            if record.same_assignment(open_record):
                continue
            if _matches_subject(record, subject_id, subject_label_fallback):
                rows.append(_row(item, record, is_current=False, today=today, fmt=date_format))
        if open_record is not None and _matches_subject(
            open_record, subject_id, subject_label_fallback
        ):
            rows.append(_row(item, open_record, is_current=True, today=today, fmt=date_format))

    undated = sum(1 for r in rows if not r.start_date_valid)
    if undated:
        logger.warning(
            "history_unparseable_dates",
            extra={"subject_id": subject_id, "row_count": undated},
        )
    rows.sort(
        key=lambda r: parse_calendar_date(r.start_date, date_format) or today,
        reverse=True,
    )
    return rows


# ---------------------------------------------------------------------------
# Export projection
# ---------------------------------------------------------------------------

HISTORY_TABLE_HEADERS: tuple[str, ...] = (
    "Item",
    "Serial",
    "State",
    "Delivered",
    "Returned",
    "Days",
    "Supervisor",
    "Receiver",
    "Observations",
)


def history_table(rows: Sequence[HistoryRow]) -> list[tuple[str, ...]]:
    """Header row followed by one string tuple per history row."""
    table: list[tuple[str, ...]] = [HISTORY_TABLE_HEADERS]
    for row in rows:
        table.append((
            row.item_name,
            row.serial_number,
            "ACTIVE" if row.is_current else "RETURNED",
            row.record.start_date,
            row.record.end_date or "-",
            row.duration_label,
            row.record.issuing_supervisor_name,
            row.record.receiving_party_name,
            row.record.observations or "",
        ))
    return table


# ---------------------------------------------------------------------------
# Status timeline
# ---------------------------------------------------------------------------


class TimelineSource(str, Enum):
    STATUS_LOG = "status_log"
    LEGACY_ASSIGNMENT = "legacy_assignment"
    LEGACY_MAINTENANCE = "legacy_maintenance"


@dataclass(frozen=True)
class TimelineRow:
    """One step of an item's status timeline, most recent first."""

    source: TimelineSource
    timestamp: str
    status: InventoryStatus
    actor: str
    detail: str
    previous_status: InventoryStatus | None = None


def status_timeline(
    item: InventoryItem,
    date_format: str = DEFAULT_DATE_FORMAT,
) -> list[TimelineRow]:
    """
    The item's status timeline.

    The status log is authoritative.  Items written before the log existed
    have only assignment history and a maintenance log; for those each
    assignment becomes an ASSIGNED step (plus an AVAILABLE step for its
    return) and each workshop visit an IN_MAINTENANCE step, merged most
    recent first.  Steps whose date does not parse go last.
    """
    if item.status_log:
        return [
            TimelineRow(
                source=TimelineSource.STATUS_LOG,
                timestamp=entry.timestamp,
                status=entry.new_status,
                actor=entry.actor,
                detail=entry.reason,
                previous_status=entry.previous_status,
            )
            for entry in item.status_log
        ]

    rows: list[TimelineRow] = []
    for record in item.assignment_history:
        if record.end_date is not None:
            rows.append(TimelineRow(
                source=TimelineSource.LEGACY_ASSIGNMENT,
                timestamp=record.end_date,
                status=InventoryStatus.AVAILABLE,
                actor=record.issuing_supervisor_name,
                detail=f"returned from {record.subject_label}",
                previous_status=InventoryStatus.ASSIGNED,
            ))
        rows.append(TimelineRow(
            source=TimelineSource.LEGACY_ASSIGNMENT,
            timestamp=record.start_date,
            status=InventoryStatus.ASSIGNED,
            actor=record.issuing_supervisor_name,
            detail=f"{record.receiving_party_name} at {record.subject_label}",
        ))
    for visit in item.maintenance_log:
        rows.append(TimelineRow(
            source=TimelineSource.LEGACY_MAINTENANCE,
            timestamp=visit.timestamp,
            status=InventoryStatus.IN_MAINTENANCE,
            actor=visit.receiver_name,
            detail=f"{visit.workshop_name}: {visit.reason}",
        ))

    rows.sort(
        key=lambda row: parse_calendar_date(row.timestamp, date_format) or datetime.min,
        reverse=True,
    )
    return rows
