# inventory_tracker/services/item_store.py
#
# Persistence for inventory items. Routers and the spreadsheet importer
# go through ItemStore instead of querying the session directly.

import logging

from sqlalchemy import func
from sqlalchemy.orm import Session

from inventory_tracker.core.errors import ItemNotFound
from inventory_tracker.models.inventory import DEFAULT_STATUS, InventoryItem

logger = logging.getLogger("inventory")

# API sort key -> model column
SORTABLE_COLUMNS = {
    "id": InventoryItem.id,
    "itemName": InventoryItem.item_name,
    "sellingPrice": InventoryItem.selling_price,
    "currentQuantity": InventoryItem.current_quantity,
    "unitType": InventoryItem.unit_type,
    "expiryDate": InventoryItem.expiry_date,
    "status": InventoryItem.status,
    "createdAt": InventoryItem.created_at,
    "updatedAt": InventoryItem.updated_at,
}

WRITABLE_FIELDS = {
    "item_name",
    "selling_price",
    "current_quantity",
    "unit_type",
    "expiry_date",
    "status",
}


def _normalize_fields(fields: dict) -> dict:
    unknown = set(fields) - WRITABLE_FIELDS
    if unknown:
        raise ValueError(f"Unknown inventory fields: {', '.join(sorted(unknown))}")

    data = dict(fields)

    if "selling_price" in data:
        data["selling_price"] = max(float(data["selling_price"] or 0), 0.0)

    if "current_quantity" in data:
        data["current_quantity"] = max(int(data["current_quantity"] or 0), 0)

    if "status" in data:
        data["status"] = str(data["status"] if data["status"] is not None else DEFAULT_STATUS).lower()

    return data


class ItemStore:
    def __init__(self, db: Session):
        self.db = db

    def rollback(self) -> None:
        self.db.rollback()

    def get(self, item_id: int) -> InventoryItem:
        item = self.db.get(InventoryItem, item_id)
        if item is None:
            raise ItemNotFound(item_id)
        return item

    def find_by_name(self, name: str) -> InventoryItem | None:
        # Duplicate names resolve to the oldest record
        return (
            self.db.query(InventoryItem)
            .filter(InventoryItem.item_name == name)
            .order_by(InventoryItem.id.asc())
            .first()
        )

    def create(self, fields: dict) -> InventoryItem:
        data = _normalize_fields(fields)
        data.setdefault("status", DEFAULT_STATUS)
        data.setdefault("unit_type", "")

        item = InventoryItem(**data)

        self.db.add(item)
        self.db.commit()
        self.db.refresh(item)

        return item

    def update(self, item_id: int, fields: dict) -> InventoryItem:
        item = self.get(item_id)

        for key, value in _normalize_fields(fields).items():
            setattr(item, key, value)

        self.db.commit()
        self.db.refresh(item)

        return item

    def delete(self, item_id: int) -> None:
        item = self.get(item_id)

        self.db.delete(item)
        self.db.commit()

    def delete_many(self, ids: list[int]) -> int:
        count = (
            self.db.query(InventoryItem)
            .filter(InventoryItem.id.in_(ids))
            .delete(synchronize_session=False)
        )
        self.db.commit()

        logger.info(f"Bulk deleted {count} inventory items")
        return count

    def set_status(self, ids: list[int], status: str) -> int:
        count = (
            self.db.query(InventoryItem)
            .filter(InventoryItem.id.in_(ids))
            .update(
                {
                    InventoryItem.status: status.lower(),
                    InventoryItem.updated_at: func.now(),
                },
                synchronize_session=False,
            )
        )
        self.db.commit()

        logger.info(f"Bulk status '{status.lower()}' applied to {count} inventory items")
        return count

    def list_all(
        self,
        search: str | None = None,
        status: str | None = None,
        sort_by: str | None = None,
        direction: str = "asc",
        page: int | None = None,
        per_page: int | None = None,
    ) -> list[InventoryItem]:
        query = self.db.query(InventoryItem)

        if search:
            query = query.filter(InventoryItem.item_name.contains(search))

        if status and status.lower() != "all":
            query = query.filter(func.lower(InventoryItem.status) == status.lower())

        if sort_by:
            column = SORTABLE_COLUMNS[sort_by]
            ordered = column.desc() if direction == "desc" else column.asc()
            # Nulls sort last in both directions
            query = query.order_by(column.is_(None), ordered, InventoryItem.id.asc())
        else:
            query = query.order_by(InventoryItem.id.asc())

        if page is not None and per_page is not None:
            query = query.offset((page - 1) * per_page).limit(per_page)

        return query.all()
