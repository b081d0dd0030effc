from __future__ import annotations

from typing import Literal, Optional

from .forms import FormSchema, form_field

CostCategory = Literal["Direct", "Indirect", "Fixe", "Variable"]


class CostTypeForm(FormSchema):
    nom: str = form_field(label="Nom", min_length=1, required_message="Nom requis")
    code: str = form_field(label="Code", min_length=1, required_message="Code requis", placeholder="TRANS")
    description: Optional[str] = form_field(None, label="Description", widget="textarea")
    categorie: CostCategory = form_field("Direct", label="Catégorie")
    unite_calcul: Optional[str] = form_field(None, label="Unité de calcul", placeholder="%")
    taux_defaut: Optional[float] = form_field(
        None, label="Taux par défaut (%)", ge=0, le=100, range_message="Taux entre 0 et 100"
    )
    actif: bool = form_field(True, label="Actif")
