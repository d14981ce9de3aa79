"""Tests for the import service pipeline (parse -> map -> validate -> promote)."""

from fieldops_ingestion.promoters import ClientKeyStrategy, InventoryKeyStrategy
from fieldops_ingestion.services import ImportService
from fieldops_kernel.domain.identity import FixedRandomSource, SequentialIdAllocator
from fieldops_kernel.domain.ledger import InventoryStatus

TEMPLATE_CSV = 'Nombre,Marca,Descripción,Serie,URL Foto\n"Taladro","DeWalt","Modelo X","DW-1",""\n'


class TestInventoryImport:

    def setup_method(self):
        self.service = ImportService()

    def _strategy(self, clock):
        return InventoryKeyStrategy(clock, SequentialIdAllocator(prefix="it-"))

    def test_template_row_creates_one_item(self, deterministic_clock):
        result = self.service.import_text(TEMPLATE_CSV, self._strategy(deterministic_clock), [])

        assert result.created == 1
        (item,) = result.collection
        assert item.name == "Taladro"
        assert item.description == "DeWalt - Modelo X"
        assert item.status is InventoryStatus.AVAILABLE

    def test_reimport_is_skipped(self, deterministic_clock):
        first = self.service.import_text(TEMPLATE_CSV, self._strategy(deterministic_clock), [])
        second = self.service.import_text(TEMPLATE_CSV, self._strategy(deterministic_clock), first.collection)

        assert (second.created, second.skipped) == (0, 1)
        assert second.collection == first.collection

    def test_rows_without_serial_are_idempotent(self, deterministic_clock):
        text = "Nombre,Marca,Descripción,Serie,URL Foto\nRadio,Motorola,VHF,,\nLinterna,,LED,,\n"
        first = self.service.import_text(text, self._strategy(deterministic_clock), [])
        second = self.service.import_text(text, self._strategy(deterministic_clock), first.collection)

        assert (first.created, first.skipped) == (1, 1)
        assert first.collection[0].serial_number == "SN-GENERICO"
        assert (second.created, second.skipped) == (0, 2)
        assert second.collection == first.collection

    def test_unrecognised_headers_map_by_position(self, deterministic_clock):
        text = "Equipo,Marca,Modelo,Serie,Foto\nTaladro,DeWalt,Modelo X,DW-1,\n"
        first = self.service.import_text(text, self._strategy(deterministic_clock), [])
        second = self.service.import_text(text, self._strategy(deterministic_clock), first.collection)

        (item,) = first.collection
        assert item.description == "DeWalt - Modelo X"
        assert item.serial_number == "DW-1"
        assert (second.created, second.skipped) == (0, 1)

    def test_header_only_file(self, deterministic_clock):
        result = self.service.import_text("Nombre,Serie\n", self._strategy(deterministic_clock), [])
        assert result.summary() == {"created": 0, "updated": 0, "skipped": 0, "dropped": 0}

    def test_batch_logging(self, deterministic_clock, captured_logs):
        text = "Nombre;Marca;Desc;Serie\nA;;;1\nB;;;1\n;;;2\n"
        self.service.import_text(text, self._strategy(deterministic_clock), [])
        logs = captured_logs()

        completed = next(r for r in logs if r["message"] == "import_batch_completed")
        counts = completed["counts"]
        assert (counts["created"], counts["skipped"], counts["dropped"]) == (1, 1, 1)
        assert completed["collection"] == "inventory"
        assert "batch_id" in completed
        assert any(r["message"] == "import_batch_duplicate_key" for r in logs)


class TestClientImport:

    def test_semicolon_client_file(self):
        text = "Nombre;NIT;Contacto;Email\nAcme;900.1;Ana;ana@acme.co\nGlobex;;Gus;g@globex.co\n"
        strategy = ClientKeyStrategy(FixedRandomSource(0), ("blue",))

        result = ImportService().import_text(text, strategy, [])

        assert result.created == 2
        assert [c.id for c in result.collection] == ["CL-001", "CL-002"]
        assert result.collection[1].tax_id == ""
