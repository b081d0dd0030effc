"""Overview statistics, alerts and per-screen summary cards."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Any, Iterable

from ..core.config import settings
from ..db.store import RecordStore, StoreError
from .costs import as_amount
from .effects import Notify

logger = logging.getLogger("landedcost.dashboard")

LOAD_FAILED = "Impossible de charger les données du tableau de bord"


@dataclass(frozen=True)
class SummaryCard:
    label: str
    value: float | int
    hint: str = ""
    kind: str = "number"


@dataclass(frozen=True)
class Alert:
    id: str
    type: str
    title: str
    description: str


@dataclass
class Overview:
    total_products: int = 0
    active_products: int = 0
    total_shipments: int = 0
    shipments_in_transit: int = 0
    total_lots: int = 0
    lots_in_stock: int = 0
    total_stock_value: float = 0.0
    average_cost: float = 0.0


def _plural(count: int, singular: str, plural: str) -> str:
    return singular if count <= 1 else plural


def _in_stock(lots: Iterable[dict[str, Any]]) -> list[dict[str, Any]]:
    return [lot for lot in lots if lot.get("statut") == "En stock"]


def stock_value(lots: Iterable[dict[str, Any]]) -> float:
    return sum(as_amount(lot.get("prix_achat_unitaire")) * as_amount(lot.get("quantite")) for lot in _in_stock(lots))


def _total_revient(product: dict[str, Any]) -> float:
    return as_amount((product.get("couts") or {}).get("total_revient"))


def product_summary(records: list[dict[str, Any]]) -> list[SummaryCard]:
    active = [p for p in records if p.get("statut") == "Actif"]
    average = sum(_total_revient(p) for p in active) / len(active) if active else 0.0
    return [
        SummaryCard("Total produits", len(records)),
        SummaryCard("Produits actifs", len(active), hint=f"sur {len(records)} total"),
        SummaryCard("Coût moyen", average, hint="coût de revient moyen", kind="money"),
    ]


def shipment_summary(records: list[dict[str, Any]]) -> list[SummaryCard]:
    in_transit = sum(1 for s in records if s.get("statut") == "En transit")
    received = sum(1 for s in records if s.get("statut") == "Réceptionnée")
    # The stored total is authoritative; the store keeps it equal to the four components.
    total_cost = sum(as_amount(s.get("cout_total")) for s in records)
    return [
        SummaryCard("Total expéditions", len(records)),
        SummaryCard("En transit", in_transit),
        SummaryCard("Réceptionnées", received),
        SummaryCard("Coût total", total_cost, kind="money"),
    ]


def lot_summary(records: list[dict[str, Any]]) -> list[SummaryCard]:
    in_stock = _in_stock(records)
    units = sum(int(as_amount(lot.get("quantite"))) for lot in in_stock)
    return [
        SummaryCard("Total lots", len(records)),
        SummaryCard("Lots en stock", len(in_stock)),
        SummaryCard("Unités en stock", units),
        SummaryCard("Valeur du stock", stock_value(records), kind="money"),
    ]


def cost_type_summary(records: list[dict[str, Any]]) -> list[SummaryCard]:
    active = sum(1 for c in records if c.get("actif"))
    return [
        SummaryCard("Types de coûts", len(records)),
        SummaryCard("Actifs", active, hint=f"sur {len(records)} total"),
    ]


def overview(store: RecordStore) -> tuple[Overview, list[Notify]]:
    try:
        products = store.select("products")
        shipments = store.select("shipments")
        lots = store.select("physical_lots")
    except StoreError:
        logger.exception("dashboard.overview_failed")
        return Overview(), [Notify("error", LOAD_FAILED)]

    active = [p for p in products if p.get("statut") == "Actif"]
    in_stock = _in_stock(lots)
    return (
        Overview(
            total_products=len(products),
            active_products=len(active),
            total_shipments=len(shipments),
            shipments_in_transit=sum(1 for s in shipments if s.get("statut") == "En transit"),
            total_lots=len(lots),
            lots_in_stock=len(in_stock),
            total_stock_value=stock_value(lots),
            average_cost=(sum(_total_revient(p) for p in active) / len(active)) if active else 0.0,
        ),
        [],
    )


def _parse_date(value: Any) -> date | None:
    if not value:
        return None
    try:
        return date.fromisoformat(str(value)[:10])
    except ValueError:
        return None


def alerts(
    store: RecordStore,
    *,
    today: date | None = None,
    low_stock_threshold: int | None = None,
    expiry_window_days: int | None = None,
) -> tuple[list[Alert], list[Notify]]:
    today = today or date.today()
    threshold = settings.LOW_STOCK_THRESHOLD if low_stock_threshold is None else low_stock_threshold
    window = settings.EXPIRY_WINDOW_DAYS if expiry_window_days is None else expiry_window_days
    try:
        lots = store.select("physical_lots", filters={"statut": "En stock"})
        received = store.select(
            "shipments",
            filters={"statut": "Réceptionnée"},
            order_by="date_reception",
            descending=True,
            limit=5,
        )
        inactive = store.select("products", filters={"statut": "Inactif"})
    except StoreError:
        logger.exception("dashboard.alerts_failed")
        return [], [Notify("error", LOAD_FAILED)]

    found: list[Alert] = []
    low = sum(1 for lot in lots if as_amount(lot.get("quantite")) < threshold)
    if low:
        found.append(
            Alert(
                "low-stock",
                "warning",
                "Stock faible",
                f"{low} {_plural(low, 'lot', 'lots')} avec quantité faible",
            )
        )

    horizon = today + timedelta(days=window)
    expiring = 0
    for lot in lots:
        expiry = _parse_date(lot.get("date_peremption"))
        if expiry and today < expiry <= horizon:
            expiring += 1
    if expiring:
        found.append(
            Alert(
                "expiring",
                "error",
                "Péremption proche",
                f"{expiring} {_plural(expiring, 'lot expire', 'lots expirent')} dans {window} jours",
            )
        )

    for index, shipment in enumerate(received):
        found.append(
            Alert(
                f"recent-shipment-{shipment.get('id_expedition') or index}",
                "info",
                "Expédition reçue",
                f"{shipment.get('reference')} réceptionnée",
            )
        )

    if inactive:
        count = len(inactive)
        found.append(
            Alert(
                "inactive-products",
                "info",
                "Produits inactifs",
                f"{count} {_plural(count, 'produit inactif', 'produits inactifs')}",
            )
        )
    return found, []


def top_cost_products(store: RecordStore, limit: int = 5) -> tuple[list[dict[str, Any]], list[Notify]]:
    """Active products with the highest ``total_revient``.

    Ordering happens here because the embedded cost object cannot be sorted
    through the store's plain column ordering.
    """

    try:
        products = store.select("products", filters={"statut": "Actif"})
    except StoreError:
        logger.exception("dashboard.top_cost_failed")
        return [], [Notify("error", LOAD_FAILED)]
    ranked = sorted(products, key=_total_revient, reverse=True)
    return ranked[:limit], []
