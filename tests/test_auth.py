import os
import sys
from pathlib import Path

import bcrypt
import pytest
from fastapi.testclient import TestClient

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

os.environ.setdefault("DATA_DIR", str(ROOT / "data"))

from landedcost import app
from landedcost.core.config import settings
from landedcost.core.security import decode_token, find_user, issue_token_pair, verify_password


@pytest.fixture()
def client():
    with TestClient(app) as test_client:
        yield test_client


def test_verify_password_accepts_bcrypt_and_plain():
    hashed = bcrypt.hashpw(b"s3cret", bcrypt.gensalt()).decode()
    assert verify_password("s3cret", hashed)
    assert not verify_password("wrong", hashed)
    assert verify_password("plain", "plain")
    assert not verify_password("", "")


def test_find_user_is_case_insensitive_on_email():
    user = find_user(" Finance@Example.com ", "finance123")
    assert user is not None
    assert user["role"] == "finance"
    assert find_user("finance@example.com", "nope") is None


def test_token_carries_role_scope():
    pair = issue_token_pair("admin@example.com", scope="admin")
    payload = decode_token(pair.access_token, verify_type="access")
    assert payload.sub == "admin@example.com"
    assert payload.scopes == ["admin"]
    with pytest.raises(ValueError):
        decode_token(pair.refresh_token, verify_type="access")


def test_token_exchange_with_credentials_and_refresh(client):
    response = client.post("/api/v1/auth/token", json={"email": "product@example.com", "password": "product123"})
    assert response.status_code == 200
    tokens = response.json()
    assert decode_token(tokens["access_token"]).scopes == ["product"]

    refreshed = client.post("/api/v1/auth/refresh", json={"refresh_token": tokens["refresh_token"]})
    assert refreshed.status_code == 200
    assert decode_token(refreshed.json()["access_token"]).scopes == ["product"]

    rejected = client.post("/api/v1/auth/refresh", json={"refresh_token": tokens["access_token"]})
    assert rejected.status_code == 401


def test_token_exchange_rejects_bad_credentials(client):
    response = client.post("/api/v1/auth/token", json={"email": "product@example.com", "password": "x"})
    assert response.status_code == 401


def test_api_key_exchange(client, monkeypatch):
    monkeypatch.setattr(settings, "API_KEY", "")
    assert client.post("/api/v1/auth/token", json={"apiKey": "k"}).status_code == 400

    monkeypatch.setattr(settings, "API_KEY", "service-key")
    response = client.post("/api/v1/auth/token", headers={"X-API-Key": "service-key"}, json={})
    assert response.status_code == 200
    assert decode_token(response.json()["access_token"]).scopes == ["admin"]
    assert client.post("/api/v1/auth/token", json={"apiKey": "wrong"}).status_code == 401


def test_api_key_header_authorizes_requests(client, monkeypatch):
    monkeypatch.setattr(settings, "API_KEY", "service-key")
    assert client.get("/api/v1/cost-types").status_code == 401
    assert client.get("/api/v1/cost-types", headers={"X-API-Key": "wrong"}).status_code == 401
    assert client.get("/api/v1/cost-types", headers={"X-API-Key": "service-key"}).status_code == 200
