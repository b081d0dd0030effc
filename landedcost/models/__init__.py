"""ORM models for the four record tables.

Importing this package registers every table with ``Base.metadata``.
"""

from .cost_type import CostType
from .lot import Lot
from .product import Product
from .shipment import Shipment

# Table name → model, as addressed by the record store.
TABLES = {
    Product.__tablename__: Product,
    Shipment.__tablename__: Shipment,
    Lot.__tablename__: Lot,
    CostType.__tablename__: CostType,
}

__all__ = ["CostType", "Lot", "Product", "Shipment", "TABLES"]
