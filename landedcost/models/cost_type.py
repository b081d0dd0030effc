from __future__ import annotations

from sqlalchemy import Boolean, Column, Float, Text

from ..db.session import Base
from ._common import new_id, utcnow_iso


class CostType(Base):
    __tablename__ = "cost_types"

    id = Column(Text, primary_key=True, default=new_id)
    nom = Column(Text, nullable=False)
    code = Column(Text, nullable=False, index=True)
    description = Column(Text, nullable=True)
    categorie = Column(Text, nullable=False, default="Direct")
    unite_calcul = Column(Text, nullable=True)
    taux_defaut = Column(Float, nullable=True)
    actif = Column(Boolean, nullable=False, default=True)
    created_at = Column(Text, nullable=False, default=utcnow_iso)
    updated_at = Column(Text, nullable=False, default=utcnow_iso, onupdate=utcnow_iso)
