from __future__ import annotations

from typing import Any, Literal, Optional

from pydantic import model_validator

from ..services.costs import PRODUCT_COST_FIELDS
from .forms import FormSchema, form_field

ProductStatus = Literal["Actif", "Inactif", "Archivé"]


def _cost(label: str) -> Any:
    return form_field(0.0, label=label, group="costs", ge=0, placeholder="0.00")


class ProductForm(FormSchema):
    sku: str = form_field(label="SKU", min_length=1, required_message="SKU requis", placeholder="PRD-001")
    barcode: str = form_field(label="Code-barres", min_length=1, required_message="Code-barres requis")
    nom: str = form_field(label="Nom", min_length=1, required_message="Nom requis")
    description: Optional[str] = form_field(None, label="Description", widget="textarea")
    categorie: Optional[str] = form_field(None, label="Catégorie")
    marque: Optional[str] = form_field(None, label="Marque")
    origine: Optional[str] = form_field(None, label="Origine", placeholder="France")
    unite_mesure: str = form_field(
        "pièce", label="Unité de mesure", group="details", min_length=1, required_message="Unité de mesure requise"
    )
    quantite_par_unite: Optional[float] = form_field(None, label="Quantité par unité", group="details", ge=0)
    couleur: Optional[str] = form_field(None, label="Couleur", group="details")
    taille: Optional[str] = form_field(None, label="Taille", group="details")
    modele: Optional[str] = form_field(None, label="Modèle", group="details")
    version: Optional[str] = form_field(None, label="Version", group="details")
    statut: ProductStatus = form_field("Actif", label="Statut")
    devise: str = form_field("EUR", label="Devise", group="costs", min_length=1, required_message="Devise requise")
    achat_fournisseur: float = _cost("Achat fournisseur")
    transport: float = _cost("Transport")
    assurance: float = _cost("Assurance")
    douane_taxes: float = _cost("Douane & Taxes")
    stockage: float = _cost("Stockage")
    autres_indirects: float = _cost("Autres coûts indirects")

    @model_validator(mode="before")
    @classmethod
    def lift_nested_costs(cls, data: Any) -> Any:
        """Accept store-shaped payloads that nest the components under ``couts``."""

        if isinstance(data, dict) and isinstance(data.get("couts"), dict):
            lifted = dict(data)
            for name in PRODUCT_COST_FIELDS:
                if name in data["couts"]:
                    lifted.setdefault(name, data["couts"][name])
            return lifted
        return data
