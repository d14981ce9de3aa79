"""Tests for ClientService over the in-memory store."""

import pytest

from fieldops_kernel.db.store import CLIENT_COLLECTION
from fieldops_kernel.domain.client import Client
from fieldops_kernel.exceptions import ClientNotFoundError
from fieldops_services import ClientService


class TestClientService:

    @pytest.fixture(autouse=True)
    def _service(self, memory_store, random_source, config):
        self.store = memory_store
        self.config = config
        self.service = ClientService(memory_store, random_source, config)

    def test_add_client_allocates_sequential_id(self):
        first = self.service.add_client(Client(id="", name="Acme Corp"))
        second = self.service.add_client(Client(id="CL-001", name="Globex"))

        assert first.id == "CL-001"
        assert second.id == "CL-002"
        assert first.initials == "AC"
        assert first.color_class == self.config.client_palette[0]

    def test_add_client_keeps_free_id(self):
        assert self.service.add_client(Client(id="CL-050", name="A")).id == "CL-050"

    def test_update_and_delete(self):
        client = self.service.add_client(Client(id="", name="Acme"))
        self.service.update_client(Client(id=client.id, name="Acme 2"))

        assert self.service.get_client(client.id).name == "Acme 2"

        self.service.delete_client(client.id)
        assert self.store.get_all(CLIENT_COLLECTION) == []

    def test_unknown_client(self):
        with pytest.raises(ClientNotFoundError):
            self.service.get_client("CL-404")
        with pytest.raises(ClientNotFoundError):
            self.service.update_client(Client(id="CL-404", name="x"))

    def test_import_csv_upserts(self):
        self.service.add_client(Client(id="", name="Acme", tax_id="900.1", total_visits=3))
        text = "Nombre,NIT,Contacto,Email\nAcme SAS,900.1,,\nGlobex,,Gus,g@globex.co\n"

        result = self.service.import_csv(text)

        assert (result.created, result.updated) == (1, 1)
        acme, globex = self.service.list_clients()
        assert (acme.name, acme.total_visits, acme.id) == ("Acme SAS", 3, "CL-001")
        assert globex.id == "CL-002"
