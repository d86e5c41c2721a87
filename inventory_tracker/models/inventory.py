# inventory_tracker/models/inventory.py

from sqlalchemy import CheckConstraint, Column, Date, DateTime, Double, Index, Integer, String
from sqlalchemy.sql import func

from inventory_tracker.database import Base

STATUS_VALUES = ("new", "checked", "updated", "not yet")
DEFAULT_STATUS = "not yet"


class InventoryItem(Base):
    __tablename__ = "inventory_items"

    id = Column(Integer, primary_key=True, index=True)
    item_name = Column(String, nullable=False)
    selling_price = Column(Double, nullable=False, default=0)
    current_quantity = Column(Integer, nullable=False, default=0)
    unit_type = Column(String, nullable=True)
    expiry_date = Column(Date, nullable=True)
    status = Column(String, nullable=False, default=DEFAULT_STATUS, server_default=DEFAULT_STATUS)

    created_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )
    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )

    __table_args__ = (
        Index("ix_inventory_items_item_name", "item_name"),
        CheckConstraint("selling_price >= 0", name="ck_inventory_items_price_non_negative"),
        CheckConstraint("current_quantity >= 0", name="ck_inventory_items_quantity_non_negative"),
    )

    def __repr__(self):
        return f"<InventoryItem id={self.id} item_name={self.item_name!r}>"
