from __future__ import annotations

from typing import Literal, Optional

from pydantic import field_validator

from .forms import FormSchema, form_field, validate_iso_date

ShipmentStatus = Literal["Préparation", "En transit", "Réceptionnée", "Clôturée"]


class ShipmentForm(FormSchema):
    id_expedition: str = form_field(
        label="ID expédition", min_length=1, required_message="ID expédition requis", placeholder="EXP-2025-001"
    )
    reference: str = form_field(
        label="Référence conteneur", min_length=1, required_message="Référence conteneur requise"
    )
    fournisseur: str = form_field(label="Fournisseur", min_length=1, required_message="Fournisseur requis")
    date_depart: str = form_field(
        label="Date de départ", widget="date", min_length=1, required_message="Date de départ requise"
    )
    date_reception: Optional[str] = form_field(None, label="Date de réception", widget="date")
    statut: ShipmentStatus = form_field("Préparation", label="Statut")
    devise: str = form_field("EUR", label="Devise", group="costs", min_length=1, required_message="Devise requise")
    cout_total_douane: float = form_field(0.0, label="Douane", group="costs", ge=0)
    cout_total_transport: float = form_field(0.0, label="Transport", group="costs", ge=0)
    cout_total_assurance: float = form_field(0.0, label="Assurance", group="costs", ge=0)
    cout_total_manutention: float = form_field(0.0, label="Manutention", group="costs", ge=0)

    @field_validator("date_depart", "date_reception")
    @classmethod
    def check_dates(cls, value: Optional[str]) -> Optional[str]:
        return validate_iso_date(value)
