# inventory_tracker/services/exporter.py

from datetime import date
from io import BytesIO

from openpyxl import Workbook

EXPORT_HEADERS = [
    "Item Name",
    "Selling Price",
    "Current Quantity",
    "Unit Type",
    "Expiry Date",
    "Status",
]

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def format_expiry(expiry_date: date | None) -> str:
    if expiry_date is None:
        return ""
    return f"{expiry_date.month}/{expiry_date.day}/{expiry_date.year}"


def export_filename(today: date) -> str:
    return f"Inventory_export_{today.strftime('%Y%m%d')}.xlsx"


def build_export_workbook(items) -> bytes:
    workbook = Workbook()

    sheet = workbook.active
    sheet.title = "Inventory"

    sheet.append(EXPORT_HEADERS)

    for item in items:
        sheet.append([
            item.item_name,
            float(item.selling_price),
            item.current_quantity,
            item.unit_type or "",
            format_expiry(item.expiry_date),
            item.status,
        ])

    output = BytesIO()
    workbook.save(output)

    return output.getvalue()
