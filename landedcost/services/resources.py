"""Per-entity configuration for the generic record screens.

Products, shipments, lots and cost types all follow the same list → filter
→ edit → delete cycle. Everything that differs between them (table, key,
searchable fields, form schema, ordering, related lookups, columns and UI
copy) is declared here as data; :mod:`landedcost.services.records` holds the
single implementation.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable

from ..schemas.cost_type import CostTypeForm
from ..schemas.forms import FormSchema
from ..schemas.lot import LotForm
from ..schemas.product import ProductForm
from ..schemas.shipment import ShipmentForm
from .costs import PRODUCT_COST_FIELDS, SHIPMENT_COST_FIELDS, product_total, shipment_total
from .dashboard import SummaryCard, cost_type_summary, lot_summary, product_summary, shipment_summary


@dataclass(frozen=True)
class Lookup:
    """Attach the related row whose ``remote_key`` equals the row's ``local_key``."""

    attr: str
    table: str
    local_key: str
    remote_key: str


@dataclass(frozen=True)
class OptionSource:
    """Choices for a reference field in the form."""

    field: str
    table: str
    value: str
    label: str
    order_by: str
    descending: bool = False


@dataclass(frozen=True)
class Dependent:
    """Rows in another table that point at this record (never cascaded)."""

    table: str
    field: str
    label: str


@dataclass(frozen=True)
class ColumnSpec:
    label: str
    path: str
    kind: str = "text"
    currency_path: str | None = None


@dataclass(frozen=True)
class Copy:
    title: str
    description: str
    add_label: str
    singular: str
    plural: str
    shown_singular: str
    shown_plural: str
    empty_title: str
    empty_search_title: str
    empty_hint: str
    search_placeholder: str
    load_failed: str
    created: str
    updated: str
    save_failed: str
    deleted: str
    delete_failed: str
    delete_title: str
    create_title: str
    edit_title: str
    delete_warning: str


def _identity(values: dict[str, Any]) -> dict[str, Any]:
    return dict(values)


@dataclass(frozen=True)
class Resource:
    slug: str
    table: str
    primary_key: str
    form: type[FormSchema]
    search_fields: tuple[str, ...]
    columns: tuple[ColumnSpec, ...]
    identity_fields: tuple[str, ...]
    copy: Copy
    order_by: str | None = None
    descending: bool = False
    # True when the store generates the key; otherwise it is a form field.
    generated_key: bool = False
    lookups: tuple[Lookup, ...] = ()
    options: tuple[OptionSource, ...] = ()
    dependents: tuple[Dependent, ...] = ()
    cost_fields: tuple[str, ...] = ()
    admin_only: bool = False
    to_payload: Callable[[dict[str, Any]], dict[str, Any]] = _identity
    to_form: Callable[[dict[str, Any]], dict[str, Any]] = _identity
    summary: Callable[[list[dict[str, Any]]], list[SummaryCard]] | None = None
    groups: tuple[tuple[str, str], ...] = field(default=(("general", "Général"),))

    @property
    def url(self) -> str:
        return f"/{self.slug}"

    def key_of(self, record: dict[str, Any]) -> Any:
        return record.get(self.primary_key)

    def shown_label(self, count: int) -> str:
        return self.copy.shown_singular if count <= 1 else self.copy.shown_plural

    def noun(self, count: int) -> str:
        return self.copy.singular if count <= 1 else self.copy.plural


def _product_payload(values: dict[str, Any]) -> dict[str, Any]:
    payload = {key: value for key, value in values.items() if key not in PRODUCT_COST_FIELDS}
    couts = {name: values.get(name, 0.0) for name in PRODUCT_COST_FIELDS}
    couts["total_revient"] = product_total(couts)
    payload["couts"] = couts
    return payload


def _product_form(record: dict[str, Any]) -> dict[str, Any]:
    values = {key: value for key, value in record.items() if key != "couts"}
    couts = record.get("couts") or {}
    for name in PRODUCT_COST_FIELDS:
        values[name] = couts.get(name, 0.0)
    return values


def _shipment_payload(values: dict[str, Any]) -> dict[str, Any]:
    return {**values, "cout_total": shipment_total(values)}


PRODUCTS = Resource(
    slug="products",
    table="products",
    primary_key="id",
    generated_key=True,
    form=ProductForm,
    search_fields=("nom", "sku", "categorie", "barcode"),
    order_by="created_at",
    descending=True,
    columns=(
        ColumnSpec("SKU", "sku", "code"),
        ColumnSpec("Nom", "nom"),
        ColumnSpec("Catégorie", "categorie", "badge"),
        ColumnSpec("Marque", "marque"),
        ColumnSpec("Statut", "statut", "badge"),
        ColumnSpec("Coût de revient", "couts.total_revient", "money", currency_path="devise"),
    ),
    identity_fields=("nom", "sku"),
    dependents=(Dependent("physical_lots", "id_produit", "lot"),),
    cost_fields=PRODUCT_COST_FIELDS,
    to_payload=_product_payload,
    to_form=_product_form,
    summary=product_summary,
    groups=(("general", "Général"), ("details", "Détails"), ("costs", "Coûts")),
    copy=Copy(
        title="Produits",
        description="Gérez votre catalogue produits et leurs coûts de revient",
        add_label="Ajouter un produit",
        singular="produit",
        plural="produits",
        shown_singular="produit affiché",
        shown_plural="produits affichés",
        empty_title="Aucun produit",
        empty_search_title="Aucun produit trouvé",
        empty_hint="Commencez par ajouter votre premier produit au catalogue",
        search_placeholder="Rechercher par nom, SKU, catégorie ou code-barres...",
        load_failed="Impossible de charger les produits",
        created="Le produit a été ajouté avec succès",
        updated="Le produit a été modifié avec succès",
        save_failed="Impossible de sauvegarder le produit",
        deleted="Le produit a été supprimé avec succès",
        delete_failed="Impossible de supprimer le produit",
        delete_title="Supprimer le produit",
        create_title="Nouveau produit",
        edit_title="Modifier le produit",
        delete_warning="Toutes les données de ce produit seront définitivement supprimées.",
    ),
)

SHIPMENTS = Resource(
    slug="shipments",
    table="shipments",
    primary_key="id_expedition",
    form=ShipmentForm,
    search_fields=("id_expedition", "reference", "fournisseur", "statut"),
    order_by="date_depart",
    descending=True,
    columns=(
        ColumnSpec("Référence", "reference", "code"),
        ColumnSpec("Fournisseur", "fournisseur"),
        ColumnSpec("Date départ", "date_depart", "date"),
        ColumnSpec("Date réception", "date_reception", "date"),
        ColumnSpec("Statut", "statut", "badge"),
        ColumnSpec("Coût total", "cout_total", "money", currency_path="devise"),
    ),
    identity_fields=("reference", "id_expedition"),
    dependents=(Dependent("physical_lots", "id_expedition", "lot"),),
    cost_fields=SHIPMENT_COST_FIELDS,
    to_payload=_shipment_payload,
    summary=shipment_summary,
    groups=(("general", "Général"), ("costs", "Coûts")),
    copy=Copy(
        title="Expéditions",
        description="Gérez vos expéditions et leurs coûts associés",
        add_label="Nouvelle expédition",
        singular="expédition",
        plural="expéditions",
        shown_singular="expédition affichée",
        shown_plural="expéditions affichées",
        empty_title="Aucune expédition",
        empty_search_title="Aucune expédition trouvée",
        empty_hint="Commencez par créer votre première expédition",
        search_placeholder="Rechercher par ID, conteneur, fournisseur ou statut...",
        load_failed="Impossible de charger les expéditions",
        created="L'expédition a été créée avec succès",
        updated="L'expédition a été modifiée avec succès",
        save_failed="Impossible de sauvegarder l'expédition",
        deleted="L'expédition a été supprimée avec succès",
        delete_failed="Impossible de supprimer l'expédition",
        delete_title="Supprimer l'expédition",
        create_title="Nouvelle expédition",
        edit_title="Modifier l'expédition",
        delete_warning="L'expédition sera définitivement supprimée.",
    ),
)

LOTS = Resource(
    slug="lots",
    table="physical_lots",
    primary_key="id_lot",
    form=LotForm,
    search_fields=("id_lot", "sku_physique", "id_expedition", "product.nom", "statut"),
    order_by="id_lot",
    descending=True,
    lookups=(
        Lookup("product", "products", "id_produit", "id"),
        Lookup("shipment", "shipments", "id_expedition", "id_expedition"),
    ),
    options=(
        OptionSource("id_produit", "products", "id", "nom", order_by="nom"),
        OptionSource("id_expedition", "shipments", "id_expedition", "reference", order_by="date_depart", descending=True),
    ),
    columns=(
        ColumnSpec("Numéro du lot", "id_lot", "code"),
        ColumnSpec("SKU physique", "sku_physique"),
        ColumnSpec("Produit", "product.nom"),
        ColumnSpec("Expédition", "shipment.reference"),
        ColumnSpec("Quantité", "quantite", "number"),
        ColumnSpec("Prix unitaire", "prix_achat_unitaire", "money", currency_path="product.devise"),
        ColumnSpec("Statut", "statut", "badge"),
    ),
    identity_fields=("id_lot", "sku_physique"),
    summary=lot_summary,
    groups=(("general", "Général"), ("details", "Détails")),
    copy=Copy(
        title="Lots physiques",
        description="Suivez vos lots physiques et leurs coûts alloués",
        add_label="Nouveau lot",
        singular="lot",
        plural="lots",
        shown_singular="lot affiché",
        shown_plural="lots affichés",
        empty_title="Aucun lot",
        empty_search_title="Aucun lot trouvé",
        empty_hint="Commencez par créer votre premier lot",
        search_placeholder="Rechercher par ID lot, SKU, expédition ou produit...",
        load_failed="Impossible de charger les lots",
        created="Le lot a été créé avec succès",
        updated="Le lot a été modifié avec succès",
        save_failed="Impossible de sauvegarder le lot",
        deleted="Le lot a été supprimé avec succès",
        delete_failed="Impossible de supprimer le lot",
        delete_title="Supprimer le lot",
        create_title="Nouveau lot",
        edit_title="Modifier le lot",
        delete_warning="Le lot sera définitivement supprimé.",
    ),
)

COST_TYPES = Resource(
    slug="cost-types",
    table="cost_types",
    primary_key="id",
    generated_key=True,
    form=CostTypeForm,
    search_fields=("nom", "code", "categorie"),
    order_by="created_at",
    descending=True,
    columns=(
        ColumnSpec("Code", "code", "code"),
        ColumnSpec("Nom", "nom"),
        ColumnSpec("Catégorie", "categorie", "badge"),
        ColumnSpec("Unité", "unite_calcul"),
        ColumnSpec("Taux par défaut", "taux_defaut", "percent"),
        ColumnSpec("Actif", "actif", "bool"),
    ),
    identity_fields=("nom", "code"),
    admin_only=True,
    summary=cost_type_summary,
    copy=Copy(
        title="Types de coûts",
        description="Gérez la taxonomie des coûts utilisée pour la classification",
        add_label="Nouveau type de coût",
        singular="type de coût",
        plural="types de coûts",
        shown_singular="type de coût affiché",
        shown_plural="types de coûts affichés",
        empty_title="Aucun type de coût",
        empty_search_title="Aucun type de coût trouvé",
        empty_hint="Commencez par créer votre premier type de coût",
        search_placeholder="Rechercher par nom, code ou catégorie...",
        load_failed="Impossible de charger les types de coûts",
        created="Le type de coût a été créé avec succès",
        updated="Le type de coût a été modifié avec succès",
        save_failed="Impossible de sauvegarder le type de coût",
        deleted="Le type de coût a été supprimé avec succès",
        delete_failed="Impossible de supprimer le type de coût",
        delete_title="Supprimer le type de coût",
        create_title="Nouveau type de coût",
        edit_title="Modifier le type de coût",
        delete_warning="Le type de coût sera définitivement supprimé.",
    ),
)

RESOURCES: dict[str, Resource] = {r.slug: r for r in (PRODUCTS, SHIPMENTS, LOTS, COST_TYPES)}

STATUS_VARIANTS = {
    "Actif": "default",
    "Inactif": "secondary",
    "Archivé": "outline",
    "Préparation": "secondary",
    "En transit": "default",
    "Réceptionnée": "outline",
    "Clôturée": "outline",
    "En stock": "default",
    "Épuisé": "secondary",
    "Supprimé": "outline",
    "Direct": "default",
    "Indirect": "secondary",
    "Fixe": "outline",
    "Variable": "outline",
}


def get_resource(slug: str) -> Resource:
    """Return the resource registered under ``slug`` (``KeyError`` if unknown)."""

    return RESOURCES[slug]
