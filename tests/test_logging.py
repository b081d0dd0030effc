import json
import logging
import os
import sys
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

os.environ.setdefault("DATA_DIR", str(ROOT / "data"))

from landedcost import app
from landedcost.core.logging import JsonLogFormatter
from landedcost.core.security import issue_token_pair
from landedcost.middlewares import principal_ctx_var, request_id_ctx_var, resource_segment, role_ctx_var


@pytest.mark.parametrize(
    "path,expected",
    [
        ("/api/v1/lots/LOT-1", "lots"),
        ("/ui/products/total", "products"),
        ("/shipments", "shipments"),
        ("/", None),
    ],
)
def test_resource_segment(path, expected):
    assert resource_segment(path) == expected


def test_formatter_adds_request_context_and_extra_data():
    record = logging.LogRecord("landedcost.records", logging.INFO, __file__, 1, "records.saved", None, None)
    record.extra_data = {"resource": "lots", "message": "ignored", "key": "LOT-1"}
    tokens = (request_id_ctx_var.set("req-1"), principal_ctx_var.set("ui:admin@example.com"), role_ctx_var.set("admin"))
    try:
        line = JsonLogFormatter().format(record)
    finally:
        role_ctx_var.reset(tokens[2])
        principal_ctx_var.reset(tokens[1])
        request_id_ctx_var.reset(tokens[0])

    payload = json.loads(line)
    assert payload["message"] == "records.saved"
    assert payload["request_id"] == "req-1"
    assert payload["principal"] == "ui:admin@example.com"
    assert payload["role"] == "admin"
    assert payload["resource"] == "lots"
    assert payload["key"] == "LOT-1"
    assert payload["timestamp"].endswith("Z")


def test_completion_log_names_caller_role_and_resource(caplog):
    pair = issue_token_pair(subject="finance@example.com", scope="finance")
    headers = {"Authorization": f"Bearer {pair.access_token}", "X-Request-ID": "req-42"}
    with caplog.at_level(logging.INFO, logger="landedcost.request"):
        with TestClient(app) as client:
            response = client.get("/api/v1/cost-types", headers=headers)

    assert response.status_code == 403
    assert response.headers["X-Request-ID"] == "req-42"
    (completed,) = [r for r in caplog.records if r.name == "landedcost.request"]
    data = completed.extra_data
    assert data["request_id"] == "req-42"
    assert data["status"] == 403
    assert data["resource"] == "cost-types"
    assert data["principal"] == "jwt:finance@example.com"
    assert data["role"] == "finance"
