from __future__ import annotations

from typing import Literal, Optional

from pydantic import field_validator

from .forms import FormSchema, form_field, validate_iso_date

LotStatus = Literal["En stock", "Épuisé", "Supprimé"]


class LotForm(FormSchema):
    id_lot: str = form_field(label="ID lot", min_length=1, required_message="ID lot requis", placeholder="LOT-2025-001")
    id_produit: str = form_field(label="Produit", widget="reference", min_length=1, required_message="Produit requis")
    id_expedition: str = form_field(
        label="Expédition", widget="reference", min_length=1, required_message="Expédition requise"
    )
    sku_physique: str = form_field(label="SKU physique", min_length=1, required_message="SKU physique requis")
    prix_achat_unitaire: float = form_field(0.0, label="Prix d'achat unitaire", ge=0)
    quantite: int = form_field(1, label="Quantité", ge=1, range_message="Quantité requise")
    poids_total_kg: Optional[float] = form_field(None, label="Poids total (kg)", group="details", ge=0)
    volume_total_m3: Optional[float] = form_field(None, label="Volume total (m³)", group="details", ge=0)
    date_peremption: Optional[str] = form_field(None, label="Date de péremption", widget="date", group="details")
    statut: LotStatus = form_field("En stock", label="Statut")

    @field_validator("date_peremption")
    @classmethod
    def check_expiry(cls, value: Optional[str]) -> Optional[str]:
        return validate_iso_date(value)
