from __future__ import annotations

from sqlalchemy import Column, Float, Integer, Text

from ..db.session import Base
from ._common import utcnow_iso


class Lot(Base):
    """Physical batch of a product received in a shipment.

    ``id_produit`` and ``id_expedition`` are plain references: the store
    does not cascade deletes from products or shipments to their lots.
    """

    __tablename__ = "physical_lots"

    id_lot = Column(Text, primary_key=True)
    id_produit = Column(Text, nullable=False, index=True)
    id_expedition = Column(Text, nullable=False, index=True)
    sku_physique = Column(Text, nullable=False)
    prix_achat_unitaire = Column(Float, nullable=False, default=0.0)
    quantite = Column(Integer, nullable=False, default=1)
    poids_total_kg = Column(Float, nullable=True)
    volume_total_m3 = Column(Float, nullable=True)
    date_peremption = Column(Text, nullable=True)
    statut = Column(Text, nullable=False, default="En stock")
    created_at = Column(Text, nullable=False, default=utcnow_iso)
    updated_at = Column(Text, nullable=False, default=utcnow_iso, onupdate=utcnow_iso)
