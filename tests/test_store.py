import os
import sys
from pathlib import Path

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

os.environ.setdefault("DATA_DIR", str(ROOT / "data"))

from landedcost.db.session import Base
from landedcost.db.store import SqlRecordStore, StoreError

# Ensure models are registered so metadata tables are created
from landedcost import models  # noqa: F401


@pytest.fixture()
def db_session():
    engine = create_engine("sqlite://", connect_args={"check_same_thread": False})
    TestingSessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


def _shipment(**overrides):
    data = {
        "id_expedition": "EXP-2025-001",
        "reference": "MSCU1234567",
        "fournisseur": "Ningbo Trading",
        "date_depart": "2025-01-10",
        "cout_total_douane": 40.0,
        "cout_total_transport": 35.5,
        "cout_total_assurance": 4.5,
        "cout_total_manutention": 20.0,
    }
    data.update(overrides)
    return data


def test_insert_computes_shipment_total(db_session):
    store = SqlRecordStore(db_session)
    row = store.insert("shipments", _shipment())
    assert row["cout_total"] == pytest.approx(100.0)
    assert row["statut"] == "Préparation"
    assert row["devise"] == "EUR"
    assert row["created_at"].endswith("Z")


def test_update_recomputes_shipment_total(db_session):
    store = SqlRecordStore(db_session)
    store.insert("shipments", _shipment())
    store.update("shipments", "id_expedition", "EXP-2025-001", {"cout_total_transport": 0, "cout_total": 999})
    (row,) = store.select("shipments", filters={"id_expedition": "EXP-2025-001"})
    assert row["cout_total"] == pytest.approx(64.5)


def test_select_orders_filters_and_limits(db_session):
    store = SqlRecordStore(db_session)
    store.insert("shipments", _shipment(id_expedition="A", date_depart="2025-01-01", statut="En transit"))
    store.insert("shipments", _shipment(id_expedition="B", date_depart="2025-03-01", statut="En transit"))
    store.insert("shipments", _shipment(id_expedition="C", date_depart="2025-02-01", statut="Clôturée"))

    ordered = store.select("shipments", order_by="date_depart", descending=True)
    assert [row["id_expedition"] for row in ordered] == ["B", "C", "A"]

    in_transit = store.select("shipments", filters={"statut": "En transit"}, order_by="date_depart", limit=1)
    assert [row["id_expedition"] for row in in_transit] == ["A"]


def test_product_gets_generated_id_and_embedded_costs(db_session):
    store = SqlRecordStore(db_session)
    row = store.insert(
        "products",
        {"sku": "CH-001", "barcode": "123", "nom": "Chaise", "couts": {"transport": 2.0, "total_revient": 2.0}, "bogus": 1},
    )
    assert row["id"]
    assert row["couts"]["total_revient"] == 2.0
    assert "bogus" not in row


def test_missing_key_update_and_delete_are_noops(db_session):
    store = SqlRecordStore(db_session)
    store.update("physical_lots", "id_lot", "nope", {"quantite": 3})
    store.delete("physical_lots", "id_lot", "nope")
    assert store.select("physical_lots") == []


def test_delete_removes_row(db_session):
    store = SqlRecordStore(db_session)
    store.insert("shipments", _shipment())
    store.delete("shipments", "id_expedition", "EXP-2025-001")
    assert store.select("shipments") == []


def test_unknown_table_and_column_raise_store_error(db_session):
    store = SqlRecordStore(db_session)
    with pytest.raises(StoreError) as excinfo:
        store.select("suppliers")
    assert excinfo.value.table == "suppliers"
    with pytest.raises(StoreError):
        store.select("products", order_by="price")


def test_integrity_failure_is_wrapped(db_session):
    store = SqlRecordStore(db_session)
    store.insert("shipments", _shipment())
    with pytest.raises(StoreError) as excinfo:
        store.insert("shipments", _shipment())
    assert excinfo.value.operation == "insert"
    # The session is usable again after the rollback.
    assert len(store.select("shipments")) == 1
