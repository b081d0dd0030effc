from __future__ import annotations

from sqlalchemy import Column, Float, Text, event

from ..db.session import Base
from ..services.costs import shipment_total
from ._common import utcnow_iso


class Shipment(Base):
    __tablename__ = "shipments"

    id_expedition = Column(Text, primary_key=True)
    reference = Column(Text, nullable=False, index=True)
    fournisseur = Column(Text, nullable=False)
    date_depart = Column(Text, nullable=False)
    date_reception = Column(Text, nullable=True)
    cout_total_douane = Column(Float, nullable=False, default=0.0)
    cout_total_transport = Column(Float, nullable=False, default=0.0)
    cout_total_assurance = Column(Float, nullable=False, default=0.0)
    cout_total_manutention = Column(Float, nullable=False, default=0.0)
    # Maintained by the store on every write; see _refresh_total.
    cout_total = Column(Float, nullable=False, default=0.0)
    devise = Column(Text, nullable=False, default="EUR")
    statut = Column(Text, nullable=False, default="Préparation")
    created_at = Column(Text, nullable=False, default=utcnow_iso)
    updated_at = Column(Text, nullable=False, default=utcnow_iso, onupdate=utcnow_iso)


@event.listens_for(Shipment, "before_insert")
@event.listens_for(Shipment, "before_update")
def _refresh_total(mapper, connection, target: Shipment) -> None:
    target.cout_total = shipment_total(
        {
            "cout_total_douane": target.cout_total_douane,
            "cout_total_transport": target.cout_total_transport,
            "cout_total_assurance": target.cout_total_assurance,
            "cout_total_manutention": target.cout_total_manutention,
        }
    )
