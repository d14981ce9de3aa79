"""
Tests for the natural-key upsert strategies.

Covers:
- Inventory: serial matching, first-write-wins, dropped rows, placeholders
- Clients: tax id then email matching, preserved fields, sequential ids
- In-batch duplicates resolved against the first occurrence
"""

from fieldops_ingestion.domain.types import (
    ClientCandidate,
    InventoryCandidate,
    RecordOutcomeStatus,
)
from fieldops_ingestion.domain.validators import find_batch_duplicates
from fieldops_ingestion.promoters import ClientKeyStrategy, InventoryKeyStrategy, ingest
from fieldops_kernel.domain.client import Client
from fieldops_kernel.domain.identity import FixedRandomSource, SequentialIdAllocator
from fieldops_kernel.domain.ledger import InventoryStatus

PALETTE = ("blue", "purple", "emerald", "orange")


def _inv(row, name="Drill", serial="SN-1", description=None):
    return InventoryCandidate(row_number=row, name=name, serial_number=serial, description=description)


class TestInventoryStrategy:

    def setup_method(self):
        self.ids = SequentialIdAllocator(prefix="it-")

    def _strategy(self, clock):
        return InventoryKeyStrategy(
            clock, self.ids, placeholder_image_url="placeholder.png",
        )

    def test_creates_available_items_with_bulk_entry(self, deterministic_clock):
        result = ingest([], [_inv(1)], self._strategy(deterministic_clock))

        assert (result.created, result.skipped, result.dropped) == (1, 0, 0)
        (item,) = result.collection
        assert item.status is InventoryStatus.AVAILABLE
        assert item.image_url == "placeholder.png"
        entry = item.status_log[0]
        assert (entry.actor, entry.reason) == ("Bulk Import", "initial bulk load")

    def test_existing_serial_skipped_case_insensitive(self, deterministic_clock, make_item):
        existing = make_item(serial="SN-1")
        result = ingest([existing], [_inv(1, name="Other", serial="sn-1")], self._strategy(deterministic_clock))

        assert (result.created, result.skipped) == (0, 1)
        assert result.collection == (existing,)
        assert result.outcomes[0].entity_id == existing.id

    def test_missing_name_dropped_and_uncounted(self, deterministic_clock):
        result = ingest([], [_inv(1, name=None)], self._strategy(deterministic_clock))

        assert (result.created, result.skipped, result.dropped) == (0, 0, 1)
        assert result.collection == ()
        assert result.outcomes[0].status is RecordOutcomeStatus.DROPPED
        assert result.outcomes[0].errors[0].code == "MALFORMED_RECORD"

    def test_in_batch_duplicate_serial(self, deterministic_clock):
        result = ingest([], [_inv(1, serial="X"), _inv(2, serial="x")], self._strategy(deterministic_clock))
        assert (result.created, result.skipped) == (1, 1)

    def test_missing_serial_takes_shared_placeholder(self, deterministic_clock):
        result = ingest([], [_inv(1, serial=None), _inv(2, name="Radio", serial=None)], self._strategy(deterministic_clock))

        assert (result.created, result.skipped) == (1, 1)
        (item,) = result.collection
        assert item.serial_number == "SN-GENERICO"
        assert result.outcomes[1].entity_id == item.id

    def test_placeholder_serial_matches_existing_item(self, deterministic_clock, make_item):
        existing = make_item(serial="sn-generico")
        result = ingest([existing], [_inv(1, serial=None)], self._strategy(deterministic_clock))

        assert (result.created, result.skipped) == (0, 1)
        assert result.collection == (existing,)

    def test_configured_placeholder_serial(self, deterministic_clock):
        strategy = InventoryKeyStrategy(deterministic_clock, self.ids, placeholder_serial="S/N")
        result = ingest([], [_inv(1, serial=None)], strategy)
        assert result.collection[0].serial_number == "S/N"

    def test_new_ids_avoid_existing_ones(self, deterministic_clock, make_item):
        existing = make_item(item_id="it-1", serial="OLD")
        result = ingest([existing], [_inv(1, serial="A"), _inv(2, serial="B")], self._strategy(deterministic_clock))

        ids = [item.id for item in result.collection]
        assert len(set(ids)) == 3

    def test_existing_collection_not_mutated(self, deterministic_clock):
        existing: list = []
        ingest(existing, [_inv(1)], self._strategy(deterministic_clock))
        assert existing == []


class TestClientStrategy:

    def setup_method(self):
        self.strategy = ClientKeyStrategy(FixedRandomSource(2), PALETTE)
        self.acme = Client(
            id="CL-004", name="Acme", tax_id="900.1", email="info@acme.co",
            total_visits=12, last_visit_date="01/03/2024", color_class="purple",
            initials="AC",
        )

    def test_create_new_client(self):
        candidate = ClientCandidate(row_number=1, name="Globex Corp", email="g@x.co")
        result = ingest([self.acme], [candidate], self.strategy)

        assert (result.created, result.updated) == (1, 0)
        new = result.collection[-1]
        assert new.id == "CL-005"
        assert new.initials == "GC"
        assert new.color_class == "emerald"
        assert (new.total_visits, new.last_visit_date) == (0, "-")

    def test_unnamed_client_gets_default_name(self):
        result = ingest([], [ClientCandidate(row_number=1, tax_id="1")], self.strategy)
        new = result.collection[0]
        assert (new.id, new.name, new.initials) == ("CL-001", "Sin Nombre", "XX")

    def test_update_by_tax_id_preserves_system_fields(self):
        candidate = ClientCandidate(row_number=1, name="Acme Holdings", tax_id="900.1", phone="555")
        result = ingest([self.acme], [candidate], self.strategy)

        assert (result.created, result.updated) == (0, 1)
        updated = result.collection[0]
        assert updated.id == "CL-004"
        assert updated.name == "Acme Holdings"
        assert updated.initials == "AH"
        assert updated.phone == "555"
        assert updated.email == "info@acme.co"
        assert (updated.total_visits, updated.last_visit_date, updated.color_class) == (
            12, "01/03/2024", "purple",
        )

    def test_update_without_name_keeps_initials(self):
        candidate = ClientCandidate(row_number=1, email="info@acme.co", address="Calle 9")
        updated = ingest([self.acme], [candidate], self.strategy).collection[0]
        assert updated.initials == "AC"
        assert updated.address == "Calle 9"

    def test_missing_colour_replaced_by_first_palette_entry(self):
        plain = Client(id="CL-001", name="A", tax_id="1")
        updated = ingest([plain], [ClientCandidate(row_number=1, tax_id="1")], self.strategy).collection[0]
        assert updated.color_class == "blue"

    def test_tax_id_takes_precedence_over_email(self):
        other = Client(id="CL-005", name="Other", email="shared@x.co")
        candidate = ClientCandidate(row_number=1, tax_id="900.1", email="shared@x.co", name="Acme 2")
        result = ingest([other, self.acme], [candidate], self.strategy)
        assert result.collection[1].name == "Acme 2"
        assert result.collection[0].name == "Other"

    def test_ambiguous_key_matches_first_and_warns(self, captured_logs):
        twin = Client(id="CL-009", name="Twin", tax_id="900.1")
        result = ingest([self.acme, twin], [ClientCandidate(row_number=1, tax_id="900.1", name="X")], self.strategy)

        assert result.collection[0].name == "X"
        assert result.collection[1].name == "Twin"
        assert any(r["message"] == "ambiguous_client_key" for r in captured_logs())

    def test_in_batch_repeat_updates_first_creation(self):
        rows = [
            ClientCandidate(row_number=1, name="New", email="n@x.co"),
            ClientCandidate(row_number=2, email="n@x.co", phone="777"),
        ]
        result = ingest([], rows, self.strategy)

        assert (result.created, result.updated) == (1, 1)
        assert len(result.collection) == 1
        assert result.collection[0].phone == "777"

    def test_row_without_key_or_name_dropped(self):
        result = ingest([], [ClientCandidate(row_number=1, phone="1")], self.strategy)
        assert (result.created, result.dropped) == (0, 1)


class TestBatchDuplicates:

    def test_reports_repeated_keys(self):
        candidates = [_inv(1, serial="a"), _inv(2, serial="b"), _inv(3, serial="a"), _inv(4, serial=None)]
        errors = find_batch_duplicates(candidates, lambda c: c.serial_number)

        assert len(errors) == 1
        assert errors[0].code == "DUPLICATE_KEY"
        assert errors[0].details == {"key": "a", "rows": [1, 3]}
