import os
import sys
from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

os.environ.setdefault("DATA_DIR", str(ROOT / "data"))

from landedcost import app
from landedcost.core.security import issue_token_pair
from landedcost.db.session import Base, get_db
from landedcost.db.store import StoreError
from landedcost.deps.store import get_store


@pytest.fixture()
def client():
    engine = create_engine("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)
    TestingSessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)
    Base.metadata.create_all(bind=engine)

    def override_get_db():
        db = TestingSessionLocal()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    try:
        with TestClient(app) as test_client:
            yield test_client
    finally:
        app.dependency_overrides.clear()


def bearer(role: str) -> dict[str, str]:
    pair = issue_token_pair(subject=f"{role}@example.com", scope=role)
    return {"Authorization": f"Bearer {pair.access_token}"}


PRODUCT = {
    "sku": "CH-001",
    "barcode": "3700000000011",
    "nom": "Chaise Oslo",
    "couts": {"achat_fournisseur": 10, "transport": 2, "assurance": 1, "douane_taxes": 0.5},
}


def test_health_and_metrics(client):
    assert client.get("/health").json() == {"ok": True}
    assert client.get("/metrics").status_code == 200


def test_product_crud(client):
    response = client.post("/api/v1/products", json=PRODUCT)
    assert response.status_code == 201
    created = response.json()
    assert created["couts"]["total_revient"] == pytest.approx(13.5)
    product_id = created["id"]

    assert client.get(f"/api/v1/products/{product_id}").json()["nom"] == "Chaise Oslo"

    response = client.put(f"/api/v1/products/{product_id}", json={"statut": "Inactif", "couts": {"stockage": 1.5}})
    assert response.status_code == 200
    updated = response.json()
    assert updated["statut"] == "Inactif"
    assert updated["sku"] == "CH-001"
    assert updated["couts"]["total_revient"] == pytest.approx(15.0)

    listing = client.get("/api/v1/products", params={"q": "oslo"}).json()
    assert [row["id"] for row in listing] == [product_id]
    assert client.get("/api/v1/products", params={"q": "table"}).json() == []

    assert client.delete(f"/api/v1/products/{product_id}").json() == {"status": "deleted"}
    missing = client.get(f"/api/v1/products/{product_id}")
    assert missing.status_code == 404
    assert missing.json()["code"] == "http_error"
    # Deleting again is still acknowledged.
    assert client.delete(f"/api/v1/products/{product_id}").status_code == 200


def test_validation_errors_use_envelope(client):
    response = client.post("/api/v1/shipments", json={"reference": "R", "date_depart": "pas une date"})
    assert response.status_code == 422
    body = response.json()
    assert body["code"] == "validation_error"
    assert body["details"]["fields"]["id_expedition"] == "ID expédition requis"
    assert body["details"]["fields"]["date_depart"] == "Date invalide"


def test_non_finite_cost_is_a_validation_error(client):
    response = client.post(
        "/api/v1/products",
        json={"sku": "X-1", "barcode": "123", "nom": "Lampe", "achat_fournisseur": "inf", "transport": 2},
    )
    assert response.status_code == 422
    assert response.json()["details"]["fields"]["achat_fournisseur"] == "Nombre invalide"
    listing = client.get("/api/v1/products")
    assert listing.status_code == 200
    assert listing.json() == []


def test_shipment_total_is_computed_by_store(client):
    response = client.post(
        "/api/v1/shipments",
        json={
            "id_expedition": "EXP-2025-001",
            "reference": "MSCU1",
            "fournisseur": "Acme",
            "date_depart": "2025-01-10",
            "cout_total_douane": 70,
            "cout_total_transport": 30,
            "cout_total": 1,
        },
    )
    assert response.status_code == 201
    assert response.json()["cout_total"] == pytest.approx(100.0)


def test_unknown_resource_is_404(client):
    assert client.get("/api/v1/suppliers").status_code == 404


def test_cost_types_require_admin_role(client):
    assert client.get("/api/v1/cost-types").status_code == 403
    assert client.get("/api/v1/cost-types", headers=bearer("finance")).status_code == 403
    response = client.get("/api/v1/cost-types", headers=bearer("admin"))
    assert response.status_code == 200
    assert response.json() == []

    created = client.post("/api/v1/cost-types", json={"nom": "Fret", "code": "FRT"}, headers=bearer("admin"))
    assert created.status_code == 201
    assert created.json()["actif"] is True


def test_invalid_bearer_token_is_rejected(client):
    response = client.get("/api/v1/products", headers={"Authorization": "Bearer not-a-token"})
    assert response.status_code == 401
    assert response.json()["code"] == "http_error"


class BrokenStore:
    def select(self, table, **kwargs):
        raise StoreError("down", table=table, operation="select")


def test_store_failures_map_to_502(client):
    app.dependency_overrides[get_store] = lambda: BrokenStore()
    response = client.get("/api/v1/products/abc")
    assert response.status_code == 502
    assert response.json()["code"] == "store_error"

    response = client.get("/api/v1/lots")
    assert response.status_code == 502
    assert response.json()["message"] == "Impossible de charger les lots"
