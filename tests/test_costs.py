import os
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

os.environ.setdefault("DATA_DIR", str(ROOT / "data"))

from landedcost.services.costs import (
    PRODUCT_COST_FIELDS,
    SHIPMENT_COST_FIELDS,
    as_amount,
    product_total,
    shipment_total,
    sum_costs,
)


def test_product_total_sums_six_components():
    couts = {
        "achat_fournisseur": 10,
        "transport": 2,
        "assurance": 1,
        "douane_taxes": 0.5,
        "stockage": 0,
        "autres_indirects": 0,
    }
    assert product_total(couts) == pytest.approx(13.5)


def test_missing_and_junk_components_count_as_zero():
    values = {"achat_fournisseur": "12,5", "transport": "", "assurance": None, "douane_taxes": "abc", "stockage": True}
    assert product_total(values) == pytest.approx(12.5)
    assert product_total(None) == 0.0
    assert sum_costs({}, PRODUCT_COST_FIELDS) == 0.0


def test_fractional_values_keep_full_precision():
    values = {"cout_total_douane": 0.125, "cout_total_transport": "0.375", "cout_total_assurance": 1, "cout_total_manutention": 0}
    assert shipment_total(values) == pytest.approx(1.5)
    assert len(SHIPMENT_COST_FIELDS) == 4


@pytest.mark.parametrize(
    "value,expected",
    [(None, 0.0), (False, 0.0), ("  3.25 ", 3.25), ("nan", 0.0), ("inf", 0.0), ("sNaN", 0.0), ("-Infinity", 0.0), (7, 7.0), ([1], 0.0)],
)
def test_as_amount_coercion(value, expected):
    assert as_amount(value) == expected
