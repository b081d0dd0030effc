"""Cost aggregation helpers.

WHAT: Sums named cost components into a landed-cost total.
WHEN: Used live while a product or shipment form is being edited, at submit
time for the product ``total_revient``, and by the store when it writes a
shipment ``cout_total``.
HOW: Every component is read from a mapping; anything that is not a finite
number counts as zero. No rounding happens here; templates format to two
decimals.
"""

from __future__ import annotations

import math
from decimal import Decimal, InvalidOperation
from typing import Any, Iterable, Mapping

PRODUCT_COST_FIELDS: tuple[str, ...] = (
    "achat_fournisseur",
    "transport",
    "assurance",
    "douane_taxes",
    "stockage",
    "autres_indirects",
)

SHIPMENT_COST_FIELDS: tuple[str, ...] = (
    "cout_total_douane",
    "cout_total_transport",
    "cout_total_assurance",
    "cout_total_manutention",
)


def as_amount(value: Any) -> float:
    """Coerce a form or store value to a float, treating junk as zero."""

    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float, Decimal)):
        number = float(value)
    elif isinstance(value, str):
        cleaned = value.strip().replace(",", ".")
        if not cleaned:
            return 0.0
        try:
            number = float(Decimal(cleaned))
        except (InvalidOperation, ValueError):
            return 0.0
    else:
        return 0.0
    return number if math.isfinite(number) else 0.0


def sum_costs(values: Mapping[str, Any] | None, fields: Iterable[str]) -> float:
    """Return the sum of ``fields`` read from ``values`` (missing → 0)."""

    source = values or {}
    return sum((as_amount(source.get(name)) for name in fields), 0.0)


def product_total(values: Mapping[str, Any] | None) -> float:
    return sum_costs(values, PRODUCT_COST_FIELDS)


def shipment_total(values: Mapping[str, Any] | None) -> float:
    return sum_costs(values, SHIPMENT_COST_FIELDS)
