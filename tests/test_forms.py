import os
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

os.environ.setdefault("DATA_DIR", str(ROOT / "data"))

from landedcost.core.jinja import _fmt_date, _fmt_money, _fmt_percent
from landedcost.schemas.cost_type import CostTypeForm
from landedcost.schemas.forms import field_specs, parse_form
from landedcost.schemas.lot import LotForm


def test_field_specs_describe_widgets_and_choices():
    specs = {spec.name: spec for spec in field_specs(LotForm)}
    assert specs["statut"].widget == "select"
    assert specs["statut"].choices == ("En stock", "Épuisé", "Supprimé")
    assert specs["id_produit"].widget == "reference"
    assert specs["quantite"].widget == "number"
    assert specs["date_peremption"].widget == "date"
    assert specs["date_peremption"].group == "details"
    assert specs["id_lot"].required is True
    assert specs["poids_total_kg"].required is False


def test_parse_form_reads_checkbox_presence():
    assert parse_form(CostTypeForm, {"nom": "Fret", "actif": "on", "unknown": "x"}) == {"nom": "Fret", "actif": True}
    assert parse_form(CostTypeForm, {"nom": "Fret"})["actif"] is False


def test_money_formatting():
    assert _fmt_money(100) == "100.00 €"
    assert _fmt_money(12.346, "USD") == "12.35 $"
    assert _fmt_money(3, "GBP") == "3.00 £"
    assert _fmt_money(3, "CHF") == "3.00 CHF"
    assert _fmt_money(None) == "-"


def test_date_and_percent_formatting():
    assert _fmt_date("2025-01-10") == "10/01/2025"
    assert _fmt_date(None) == "-"
    assert _fmt_date("not a date") == "-"
    assert _fmt_percent(12.5) == "12.5 %"
    assert _fmt_percent(None) == "-"
