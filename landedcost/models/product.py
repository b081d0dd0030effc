from __future__ import annotations

from sqlalchemy import JSON, Column, Float, Text

from ..db.session import Base
from ._common import new_id, utcnow_iso


class Product(Base):
    """Catalog entry with its embedded cost breakdown.

    ``couts`` holds the six cost components plus ``total_revient``; the
    total is written by the product form and never entered by hand.
    """

    __tablename__ = "products"

    id = Column(Text, primary_key=True, default=new_id)
    sku = Column(Text, nullable=False, index=True)
    barcode = Column(Text, nullable=False, index=True)
    nom = Column(Text, nullable=False)
    description = Column(Text, nullable=True)
    categorie = Column(Text, nullable=True)
    marque = Column(Text, nullable=True)
    origine = Column(Text, nullable=True)
    unite_mesure = Column(Text, nullable=False, default="pièce")
    quantite_par_unite = Column(Float, nullable=True)
    couleur = Column(Text, nullable=True)
    taille = Column(Text, nullable=True)
    modele = Column(Text, nullable=True)
    version = Column(Text, nullable=True)
    statut = Column(Text, nullable=False, default="Actif")
    devise = Column(Text, nullable=False, default="EUR")
    couts = Column(JSON, nullable=False, default=dict)
    created_at = Column(Text, nullable=False, default=utcnow_iso)
    updated_at = Column(Text, nullable=False, default=utcnow_iso, onupdate=utcnow_iso)
