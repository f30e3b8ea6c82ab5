import json
from datetime import date
from decimal import Decimal

import pytest

from backend.app.schemas.offline import ClientRecord, FreelancerInfo, InvoiceItemRecord, InvoiceRecord
from backend.app.storage.local import STORAGE_KEYS, JsonFileStorage, LocalStorage


@pytest.fixture
def storage(tmp_path):
    return LocalStorage(JsonFileStorage(tmp_path))


FREELANCER = FreelancerInfo(id="f1", name="Ada", email="ada@example.com", address="1 Engine Way")
CLIENT = ClientRecord(id="c1", company_name="Acme", email="ap@acme.com")


def _invoice():
    return InvoiceRecord(
        id="i1",
        invoice_number="INV-0001",
        date_issued=date(2025, 1, 15),
        due_date=date(2025, 2, 14),
        freelancer=FREELANCER,
        client=CLIENT,
        items=[InvoiceItemRecord(id="it1", description="Work", quantity=Decimal("1"), rate=Decimal("10"), amount=Decimal("10.00"))],
        subtotal=Decimal("10.00"),
        tax_rate=Decimal("0"),
        tax_amount=Decimal("0.00"),
        total=Decimal("10.00"),
    )


def test_empty_storage_defaults(storage):
    assert storage.get_freelancer() is None
    assert storage.get_clients() == []
    assert storage.get_invoices() == []
    assert storage.get_invoice_counter() == 1


def test_records_are_stored_with_camel_case_keys(storage, tmp_path):
    storage.save_clients([CLIENT])
    raw = json.loads((tmp_path / f"{STORAGE_KEYS['clients']}.json").read_text())
    assert raw[0]["companyName"] == "Acme"
    assert storage.get_clients()[0].company_name == "Acme"


def test_corrupt_blob_reads_as_empty(storage, tmp_path):
    (tmp_path / f"{STORAGE_KEYS['invoices']}.json").write_text("{not json")
    (tmp_path / f"{STORAGE_KEYS['counter']}.json").write_text("seven")
    assert storage.get_invoices() == []
    assert storage.get_invoice_counter() == 1


def test_export_then_import_into_fresh_storage(storage, tmp_path):
    storage.save_freelancer(FREELANCER)
    storage.save_clients([CLIENT])
    storage.save_invoices([_invoice()])
    storage.save_invoice_counter(2)
    exported = storage.export_data()
    assert set(json.loads(exported)) == {"freelancer", "clients", "invoices", "counter"}

    other = LocalStorage(JsonFileStorage(tmp_path / "other"))
    assert other.import_data(exported) is True
    assert other.get_freelancer() == FREELANCER
    assert other.get_invoices()[0].total == Decimal("10.00")
    assert other.get_invoice_counter() == 2


def test_import_leaves_missing_keys_untouched(storage):
    storage.save_clients([CLIENT])
    assert storage.import_data(json.dumps({"counter": 9})) is True
    assert storage.get_clients() == [CLIENT]
    assert storage.get_invoice_counter() == 9


def test_bad_import_changes_nothing(storage):
    storage.save_clients([CLIENT])
    assert storage.import_data("{broken") is False
    assert storage.import_data(json.dumps({"counter": 5, "clients": [{"id": "x"}]})) is False
    assert storage.import_data(json.dumps(["not", "an", "object"])) is False
    assert storage.get_clients() == [CLIENT]
    assert storage.get_invoice_counter() == 1


def test_clear_all(storage):
    storage.save_freelancer(FREELANCER)
    storage.save_invoice_counter(4)
    storage.clear_all()
    assert storage.get_freelancer() is None
    assert storage.get_invoice_counter() == 1


def test_get_local_storage_uses_configured_directory(monkeypatch, tmp_path):
    from backend.app.core import settings as settings_module
    from backend.app.storage.local import get_local_storage

    monkeypatch.setattr(settings_module.get_settings(), "storage_dir", str(tmp_path / "configured"))
    local = get_local_storage()
    local.save_invoice_counter(3)
    assert (tmp_path / "configured" / f"{STORAGE_KEYS['counter']}.json").read_text() == "3"
    assert get_local_storage(tmp_path / "explicit").get_invoice_counter() == 1
