"""Tests for the inventory item aggregate and its invariant checks."""

from dataclasses import replace

from fieldops_kernel.domain.inventory import (
    InventoryItem,
    check_item_invariants,
    open_assignments,
)
from fieldops_kernel.domain.ledger import AssignmentRecord, InventoryStatus

OPEN = AssignmentRecord(
    subject_id="CL-1",
    subject_label="Acme",
    receiving_party_name="Bob",
    issuing_supervisor_name="Alice",
    start_date="10/01/2024",
)


class TestNewItem:

    def test_new_item_is_available_with_intake_entry(self, make_item):
        item = make_item()

        assert item.status is InventoryStatus.AVAILABLE
        assert len(item.status_log) == 1
        intake = item.status_log[0]
        assert intake.previous_status is InventoryStatus.AVAILABLE
        assert intake.new_status is InventoryStatus.AVAILABLE
        assert intake.timestamp == "2024-03-15T10:30:00"
        assert item.assignment_history == ()
        assert item.active_assignment is None

    def test_new_item_satisfies_invariants(self, make_item):
        assert check_item_invariants(make_item()) == []

    def test_serial_key_is_case_insensitive(self, make_item):
        assert make_item(serial="  Ab-12 ").serial_key() == "ab-12"


class TestOpenRecord:

    def test_open_record_only_when_assigned(self, make_item):
        item = replace(make_item(), active_assignment=OPEN)
        assert item.open_record is None
        assert replace(item, status=InventoryStatus.ASSIGNED).open_record == OPEN


class TestInvariants:

    def _codes(self, item):
        return {e.code for e in check_item_invariants(item)}

    def test_status_log_drift_detected(self, make_item):
        item = replace(make_item(), status=InventoryStatus.RETIRED)
        assert "STATUS_LOG_DRIFT" in self._codes(item)

    def test_assigned_without_active_assignment(self, make_item):
        item = replace(make_item(), status=InventoryStatus.ASSIGNED)
        assert "ACTIVE_ASSIGNMENT_MISMATCH" in self._codes(item)

    def test_multiple_open_assignments(self, make_item):
        second = replace(OPEN, receiving_party_name="Carl")
        item = replace(make_item(), assignment_history=(OPEN, second))
        assert "MULTIPLE_OPEN_ASSIGNMENTS" in self._codes(item)
        assert len(open_assignments(item)) == 2

    def test_active_assignment_missing_from_history(self, assign_item, make_item):
        item = assign_item(make_item())
        broken = replace(item, assignment_history=())
        assert "ACTIVE_ASSIGNMENT_NOT_IN_HISTORY" in self._codes(broken)

    def test_assignment_ending_before_start(self, make_item):
        backwards = replace(OPEN, end_date="01/01/2024")
        item = replace(make_item(), assignment_history=(backwards,))
        assert self._codes(item) == {"ASSIGNMENT_ENDS_BEFORE_START"}


class TestStoreShape:

    def test_round_trip_of_assigned_item(self, assign_item, make_item):
        item = assign_item(make_item())
        assert InventoryItem.from_dict(item.to_dict()) == item

    def test_from_dict_reads_legacy_document(self):
        item = InventoryItem.from_dict({
            "id": "1700000000-0",
            "name": "Radio",
            "serialNumber": "R-1",
            "status": "Asignado",
            "assignment": {
                "post": "Acme", "operatorName": "Bob",
                "supervisorName": "Alice", "date": "10/01/2024",
            },
            "history": [{
                "post": "Acme", "operatorName": "Bob",
                "supervisorName": "Alice", "date": "10/01/2024",
            }],
            "statusLogs": [{
                "id": "log-1", "date": "2024-01-10T00:00:00Z",
                "previousStatus": "Disponible", "newStatus": "Asignado",
                "changedBy": "Alice", "reason": "x",
            }],
        })

        assert item.status is InventoryStatus.ASSIGNED
        assert item.active_assignment.subject_id is None
        assert len(item.assignment_history) == 1
        assert check_item_invariants(item) == []
