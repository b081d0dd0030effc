import os
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

os.environ.setdefault("DATA_DIR", str(ROOT / "data"))

from landedcost.services.records import filter_records, get_path
from landedcost.services.resources import LOTS, PRODUCTS

PRODUCT_ROWS = [
    {"id": "1", "nom": "Chaise Oslo", "sku": "CH-001", "categorie": "Mobilier", "barcode": "3700000000011"},
    {"id": "2", "nom": "Table Bergen", "sku": "TB-002", "categorie": None, "barcode": "3700000000028"},
    {"id": "3", "nom": "Lampe", "sku": "LP-003", "categorie": "Luminaire", "barcode": 42},
]


def test_blank_query_returns_copy_in_order():
    result = filter_records(PRODUCT_ROWS, "   ", PRODUCTS.search_fields)
    assert result == PRODUCT_ROWS
    assert result is not PRODUCT_ROWS


def test_matches_are_case_insensitive_subset():
    result = filter_records(PRODUCT_ROWS, "  OSLO ", PRODUCTS.search_fields)
    assert [row["id"] for row in result] == ["1"]
    for row in filter_records(PRODUCT_ROWS, "o", PRODUCTS.search_fields):
        assert row in PRODUCT_ROWS
        fields = [get_path(row, name) for name in PRODUCTS.search_fields]
        assert any(isinstance(value, str) and "o" in value.lower() for value in fields)


def test_non_string_values_never_match():
    assert filter_records(PRODUCT_ROWS, "42", PRODUCTS.search_fields) == []


def test_input_is_not_mutated():
    rows = [dict(row) for row in PRODUCT_ROWS]
    filter_records(rows, "table", PRODUCTS.search_fields)
    assert rows == PRODUCT_ROWS


def test_lot_search_reaches_related_product_name():
    lots = [
        {"id_lot": "LOT-1", "sku_physique": "SKU-A", "id_expedition": "EXP-1", "statut": "En stock", "product": {"nom": "Fauteuil Velours"}},
        {"id_lot": "LOT-2", "sku_physique": "SKU-B", "id_expedition": "EXP-1", "statut": "En stock", "product": None},
    ]
    result = filter_records(lots, "velours", LOTS.search_fields)
    assert [row["id_lot"] for row in result] == ["LOT-1"]
