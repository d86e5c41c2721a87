from datetime import date, datetime

from pydantic import BaseModel, Field, field_validator
from pydantic.alias_generators import to_camel

from inventory_tracker.models.inventory import DEFAULT_STATUS, STATUS_VALUES


def _check_status(value: str) -> str:
    normalized = value.strip().lower()
    if normalized not in STATUS_VALUES:
        raise ValueError(f"status must be one of: {', '.join(STATUS_VALUES)}")
    return normalized


class CamelModel(BaseModel):
    class Config:
        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True


class InventoryItemCreate(CamelModel):
    item_name: str = Field(..., min_length=1)
    selling_price: float = Field(..., ge=0)
    current_quantity: int = Field(..., ge=0)
    unit_type: str = ""
    expiry_date: date | None = None
    status: str = DEFAULT_STATUS

    @field_validator("status")
    @classmethod
    def validate_status(cls, value):
        return _check_status(value)


class InventoryItemUpdate(InventoryItemCreate):
    pass


class InventoryItemPatch(CamelModel):
    item_name: str | None = Field(None, min_length=1)
    selling_price: float | None = Field(None, ge=0)
    current_quantity: int | None = Field(None, ge=0)
    unit_type: str | None = None
    expiry_date: date | None = None
    status: str | None = None

    @field_validator("status")
    @classmethod
    def validate_status(cls, value):
        if value is None:
            return value
        return _check_status(value)


class InventoryItemResponse(CamelModel):
    id: int
    item_name: str
    selling_price: float
    current_quantity: int
    unit_type: str | None
    expiry_date: date | None
    status: str
    created_at: datetime
    updated_at: datetime


class BulkDeleteRequest(CamelModel):
    ids: list[int]


class BulkStatusRequest(CamelModel):
    ids: list[int]
    status: str

    @field_validator("status")
    @classmethod
    def validate_status(cls, value):
        return _check_status(value)


class BulkActionResponse(BaseModel):
    message: str
    count: int


class ImportResponse(BaseModel):
    message: str
    count: int
    created: int
    updated: int
    skipped: int
