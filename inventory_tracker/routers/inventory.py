# inventory_tracker/routers/inventory.py

import logging
from datetime import datetime, timezone
from io import BytesIO
from typing import Literal

from fastapi import APIRouter, Depends, File, HTTPException, Query, Request, UploadFile, status
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session

from inventory_tracker.core.config import settings
from inventory_tracker.core.errors import ItemNotFound, NoFileProvided, UnparsableWorkbook
from inventory_tracker.core.rate_limiter import limiter
from inventory_tracker.database import get_db
from inventory_tracker.schemas.inventory import (
    BulkActionResponse,
    BulkDeleteRequest,
    BulkStatusRequest,
    ImportResponse,
    InventoryItemCreate,
    InventoryItemPatch,
    InventoryItemResponse,
    InventoryItemUpdate,
)
from inventory_tracker.services.exporter import XLSX_MEDIA_TYPE, build_export_workbook, export_filename
from inventory_tracker.services.importer import import_workbook
from inventory_tracker.services.item_store import SORTABLE_COLUMNS, ItemStore

logger = logging.getLogger("inventory")

router = APIRouter(
    prefix="/inventory",
    tags=["Inventory"],
)

SortKey = Literal[tuple(SORTABLE_COLUMNS)]


def get_store(db: Session = Depends(get_db)) -> ItemStore:
    return ItemStore(db)


def _not_found(item_id: int):
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=f"Inventory item {item_id} not found",
    )


def _require_ids(ids: list[int]):
    if not ids:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid or empty IDs array",
        )


# =========================================================
# LISTING
# =========================================================
@router.get("", response_model=list[InventoryItemResponse])
def list_inventory(
    search: str | None = None,
    status_filter: str | None = Query(None, alias="status"),
    sort_by: SortKey | None = Query(None, alias="sortBy"),
    direction: Literal["asc", "desc"] = "asc",
    page: int | None = Query(None, ge=1),
    per_page: int | None = Query(None, alias="perPage", ge=1, le=500),
    store: ItemStore = Depends(get_store),
):
    return store.list_all(
        search=search,
        status=status_filter,
        sort_by=sort_by,
        direction=direction,
        page=page,
        per_page=per_page,
    )


# =========================================================
# EXPORT
# =========================================================
@router.get("/export")
@limiter.limit(settings.EXPORT_RATE_LIMIT)
def export_inventory(
    request: Request,
    search: str | None = None,
    status_filter: str | None = Query(None, alias="status"),
    sort_by: SortKey | None = Query(None, alias="sortBy"),
    direction: Literal["asc", "desc"] = "asc",
    store: ItemStore = Depends(get_store),
):
    items = store.list_all(
        search=search,
        status=status_filter,
        sort_by=sort_by,
        direction=direction,
    )

    filename = export_filename(datetime.now(timezone.utc).date())
    logger.info(f"Exporting {len(items)} inventory items to {filename}")

    return StreamingResponse(
        BytesIO(build_export_workbook(items)),
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


# =========================================================
# IMPORT
# =========================================================
@router.post("/import", response_model=ImportResponse)
@limiter.limit(settings.IMPORT_RATE_LIMIT)
def import_inventory(
    request: Request,
    file: UploadFile | None = File(None),
    store: ItemStore = Depends(get_store),
):
    if file is None:
        raise NoFileProvided()

    data = file.file.read()

    if len(data) > settings.IMPORT_MAX_UPLOAD_BYTES:
        raise UnparsableWorkbook(
            f"File exceeds the {settings.IMPORT_MAX_UPLOAD_BYTES} byte upload limit"
        )

    logger.info(f"Importing inventory from {file.filename} ({len(data)} bytes)")

    result = import_workbook(data, store)

    return {
        "message": result.message,
        "count": result.count,
        "created": result.created,
        "updated": result.updated,
        "skipped": result.skipped,
    }


# =========================================================
# BULK OPERATIONS
# =========================================================
@router.delete("", response_model=BulkActionResponse)
def bulk_delete_inventory(
    payload: BulkDeleteRequest,
    store: ItemStore = Depends(get_store),
):
    _require_ids(payload.ids)

    count = store.delete_many(payload.ids)

    return {"message": f"{count} items deleted successfully", "count": count}


@router.post("/bulk-status", response_model=BulkActionResponse)
def bulk_update_status(
    payload: BulkStatusRequest,
    store: ItemStore = Depends(get_store),
):
    _require_ids(payload.ids)

    count = store.set_status(payload.ids, payload.status)

    return {"message": f"{count} items updated to '{payload.status}'", "count": count}


# =========================================================
# SINGLE ITEM CRUD
# =========================================================
@router.post(
    "",
    response_model=InventoryItemResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_item(
    item_data: InventoryItemCreate,
    store: ItemStore = Depends(get_store),
):
    item = store.create(item_data.model_dump())

    logger.info(f"Created inventory item {item.id} ({item.item_name})")
    return item


@router.put("/{item_id}", response_model=InventoryItemResponse)
def update_item(
    item_id: int,
    item_data: InventoryItemUpdate,
    store: ItemStore = Depends(get_store),
):
    try:
        return store.update(item_id, item_data.model_dump())
    except ItemNotFound:
        raise _not_found(item_id)


@router.patch("/{item_id}", response_model=InventoryItemResponse)
def quick_edit_item(
    item_id: int,
    item_data: InventoryItemPatch,
    store: ItemStore = Depends(get_store),
):
    changes = item_data.model_dump(exclude_unset=True)

    # Only expiryDate may be cleared with an explicit null
    changes = {
        key: value
        for key, value in changes.items()
        if value is not None or key == "expiry_date"
    }

    try:
        return store.update(item_id, changes)
    except ItemNotFound:
        raise _not_found(item_id)


@router.delete("/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_item(
    item_id: int,
    store: ItemStore = Depends(get_store),
):
    try:
        store.delete(item_id)
    except ItemNotFound:
        raise _not_found(item_id)

    return None
