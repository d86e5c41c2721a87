# inventory_tracker/services/importer.py
#
# Spreadsheet import: reads the first sheet of an uploaded workbook, maps
# its headers onto inventory fields and merges every row into the store,
# matching existing items by exact item name.

import logging
import math
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from enum import Enum
from io import BytesIO
from typing import Any, Iterator

from openpyxl import load_workbook
from sqlalchemy.exc import OperationalError

from inventory_tracker.core.errors import RowProcessingFailure, StoreUnavailable, UnparsableWorkbook
from inventory_tracker.models.inventory import DEFAULT_STATUS, InventoryItem
from inventory_tracker.services.item_store import ItemStore

logger = logging.getLogger("inventory")

# Days between the spreadsheet date-serial epoch and 1970-01-01
SERIAL_EPOCH_OFFSET = 25569
SECONDS_PER_DAY = 86400
UNIX_EPOCH = datetime(1970, 1, 1)

# Largest value the 32-bit current_quantity column holds
MAX_QUANTITY = 2**31 - 1

TEXT_DATE_FORMATS = (
    "%m/%d/%Y",
    "%Y/%m/%d",
    "%d %b %Y",
    "%d %B %Y",
    "%b %d, %Y",
    "%B %d, %Y",
    "%b %d %Y",
)


# =========================================================
# COLUMN RESOLUTION
# =========================================================
class Field(Enum):
    """Inventory fields an import can fill, with their accepted headers in priority order."""

    ITEM_NAME = ("item name", "itemname")
    SELLING_PRICE = ("selling price", "price")
    CURRENT_QUANTITY = ("current quantity", "current qty", "quantity")
    UNIT_TYPE = ("unit type", "unit")
    EXPIRY_DATE = ("expiry date", "expiry")
    STATUS = ("status",)

    @property
    def aliases(self) -> tuple[str, ...]:
        return self.value


def normalize_header(header: Any) -> str:
    return str(header).strip().lower()


class HeaderIndex:
    """
    Lookup of a sheet's headers by their normalized form.

    Built once from the header row. When two headers normalize to the same
    text the leftmost one is kept.
    """

    def __init__(self, headers):
        self._headers: dict[str, str] = {}

        for header in headers:
            if header is None:
                continue
            self._headers.setdefault(normalize_header(header), header)

    def resolve(self, target: Field) -> str | None:
        for alias in target.aliases:
            header = self._headers.get(alias)
            if header is not None:
                return header
        return None

    def column_map(self) -> dict[Field, str | None]:
        return {target: self.resolve(target) for target in Field}


# =========================================================
# SHEET PARSING
# =========================================================
@dataclass
class ImportRow:
    row_number: int
    values: dict[str, Any]

    def get(self, header: str | None) -> Any:
        if header is None:
            return None
        return self.values.get(header)


@dataclass
class ParsedSheet:
    header_index: HeaderIndex
    rows: Iterator[ImportRow]


def _header_label(value: Any) -> str | None:
    if value is None:
        return None
    label = str(value)
    return label if label.strip() else None


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def read_sheet(data: bytes) -> ParsedSheet:
    """
    Open the first worksheet of an xlsx workbook.

    The header row is read immediately; data rows are produced lazily and
    the workbook is closed once they are exhausted (or the iterator is
    discarded). Fully blank rows are dropped.
    """
    if not data:
        raise UnparsableWorkbook("Uploaded file is empty")

    try:
        workbook = load_workbook(BytesIO(data), read_only=True, data_only=True)
    except Exception as exc:
        raise UnparsableWorkbook(f"Could not read workbook: {exc}") from exc

    try:
        if not workbook.worksheets:
            raise UnparsableWorkbook("Workbook contains no worksheets")

        rows = workbook.worksheets[0].iter_rows(values_only=True)
        header_row = next(rows, None)
    except UnparsableWorkbook:
        workbook.close()
        raise
    except Exception as exc:
        workbook.close()
        raise UnparsableWorkbook(f"Could not read workbook: {exc}") from exc

    headers = [_header_label(value) for value in (header_row or ())]

    return ParsedSheet(
        header_index=HeaderIndex(headers),
        rows=_iter_import_rows(workbook, rows, headers),
    )


def _iter_import_rows(workbook, rows, headers) -> Iterator[ImportRow]:
    try:
        # Row 1 is the header row
        for row_number, cells in enumerate(rows, start=2):
            if all(_is_blank(value) for value in cells):
                continue

            values = {}
            for header, value in zip(headers, cells):
                if header is None or value is None or header in values:
                    continue
                values[header] = value

            yield ImportRow(row_number=row_number, values=values)
    except Exception as exc:
        raise UnparsableWorkbook(f"Could not read sheet rows: {exc}") from exc
    finally:
        workbook.close()


# =========================================================
# FIELD COERCION
# =========================================================
class FieldState(Enum):
    PROVIDED = "provided"
    ABSENT = "absent"
    INVALID = "invalid"


@dataclass(frozen=True)
class FieldValue:
    state: FieldState
    value: Any = None

    @classmethod
    def provided(cls, value):
        return cls(FieldState.PROVIDED, value)

    @classmethod
    def absent(cls):
        return cls(FieldState.ABSENT)

    @classmethod
    def invalid(cls):
        return cls(FieldState.INVALID)

    @property
    def is_provided(self) -> bool:
        return self.state is FieldState.PROVIDED

    def or_default(self, default):
        return self.value if self.is_provided else default


def coerce_text(raw: Any) -> FieldValue:
    if raw is None:
        return FieldValue.absent()

    if isinstance(raw, float) and raw.is_integer():
        return FieldValue.provided(str(int(raw)))

    return FieldValue.provided(str(raw))


def coerce_price(raw: Any) -> FieldValue:
    if raw is None:
        return FieldValue.absent()

    if isinstance(raw, bool):
        return FieldValue.invalid()

    try:
        value = float(raw.strip() if isinstance(raw, str) else raw)
    except (TypeError, ValueError):
        return FieldValue.invalid()

    if not math.isfinite(value) or value < 0:
        return FieldValue.invalid()

    return FieldValue.provided(value)


def coerce_quantity(raw: Any) -> FieldValue:
    if raw is None:
        return FieldValue.absent()

    if isinstance(raw, bool):
        return FieldValue.invalid()

    if isinstance(raw, int):
        value = raw
    else:
        text = raw.strip() if isinstance(raw, str) else raw
        try:
            value = int(text)
        except (TypeError, ValueError, OverflowError):
            # "3.7" truncates to 3
            try:
                number = float(text)
            except (TypeError, ValueError):
                return FieldValue.invalid()
            if not math.isfinite(number):
                return FieldValue.invalid()
            value = int(number)

    if value < 0 or value > MAX_QUANTITY:
        return FieldValue.invalid()

    return FieldValue.provided(value)


def serial_to_date(serial: float) -> date:
    seconds = round((serial - SERIAL_EPOCH_OFFSET) * SECONDS_PER_DAY)
    return (UNIX_EPOCH + timedelta(seconds=seconds)).date()


def parse_date_text(text: str) -> date | None:
    try:
        return datetime.fromisoformat(text).date()
    except ValueError:
        pass

    for date_format in TEXT_DATE_FORMATS:
        try:
            return datetime.strptime(text, date_format).date()
        except ValueError:
            continue

    return None


def coerce_date(raw: Any) -> FieldValue:
    if _is_blank(raw):
        return FieldValue.absent()

    # openpyxl already converts date-formatted cells
    if isinstance(raw, datetime):
        return FieldValue.provided(raw.date())

    if isinstance(raw, date):
        return FieldValue.provided(raw)

    if isinstance(raw, bool):
        return FieldValue.invalid()

    if isinstance(raw, (int, float)):
        # A zero serial is an empty expiry, not 1899-12-30
        if raw == 0:
            return FieldValue.absent()
        if not math.isfinite(raw):
            return FieldValue.invalid()
        try:
            return FieldValue.provided(serial_to_date(raw))
        except OverflowError:
            return FieldValue.invalid()

    parsed = parse_date_text(str(raw).strip())
    if parsed is None:
        return FieldValue.invalid()

    return FieldValue.provided(parsed)


@dataclass
class RowValues:
    item_name: str
    selling_price: FieldValue
    current_quantity: FieldValue
    unit_type: FieldValue
    expiry_date: FieldValue
    status: FieldValue


def extract_row(row: ImportRow, columns: dict[Field, str | None]) -> RowValues | None:
    """Coerce one sheet row, or return None when it has no item name."""
    name = coerce_text(row.get(columns[Field.ITEM_NAME]))
    if not name.is_provided or not name.value.strip():
        return None

    return RowValues(
        item_name=name.value,
        selling_price=coerce_price(row.get(columns[Field.SELLING_PRICE])),
        current_quantity=coerce_quantity(row.get(columns[Field.CURRENT_QUANTITY])),
        unit_type=coerce_text(row.get(columns[Field.UNIT_TYPE])),
        expiry_date=coerce_date(row.get(columns[Field.EXPIRY_DATE])),
        status=coerce_text(row.get(columns[Field.STATUS])),
    )


# =========================================================
# MERGE RULES
# =========================================================
def fields_for_new_item(values: RowValues) -> dict:
    status = values.status.or_default("") or DEFAULT_STATUS

    return {
        "item_name": values.item_name,
        "selling_price": values.selling_price.or_default(0.0),
        "current_quantity": values.current_quantity.or_default(0),
        "unit_type": values.unit_type.or_default(""),
        "expiry_date": values.expiry_date.or_default(None),
        "status": status.lower(),
    }


def fields_for_existing_item(existing: InventoryItem, values: RowValues) -> dict:
    """
    Fields to write onto an item that already exists.

    Price is always replaced. A zero or missing quantity keeps the stock on
    hand. Unit type and expiry date only change when the sheet gives a usable
    value. Status changes whenever the sheet has a status cell for the row.
    """
    fields = {
        "selling_price": values.selling_price.or_default(0.0),
    }

    quantity = values.current_quantity.or_default(0)
    if quantity != 0:
        fields["current_quantity"] = quantity

    unit_type = values.unit_type.or_default("")
    fields["unit_type"] = unit_type if unit_type else (existing.unit_type or "")

    if values.expiry_date.is_provided:
        fields["expiry_date"] = values.expiry_date.value

    if values.status.is_provided:
        fields["status"] = values.status.value.lower()

    return fields


# =========================================================
# IMPORT RUN
# =========================================================
@dataclass
class ImportResult:
    count: int = 0
    created: int = 0
    updated: int = 0
    skipped: int = 0

    @property
    def message(self) -> str:
        return f"Processed {self.count} items successfully"


class InventoryImporter:
    def __init__(self, store: ItemStore):
        self.store = store

    def run(self, data: bytes) -> ImportResult:
        sheet = read_sheet(data)
        columns = sheet.header_index.column_map()

        if columns[Field.ITEM_NAME] is None:
            logger.warning("Import sheet has no item name column; every row will be skipped")

        result = ImportResult()

        for row in sheet.rows:
            try:
                values = extract_row(row, columns)
                if values is None:
                    result.skipped += 1
                    continue

                self._reconcile(values, result)

            except OperationalError as exc:
                self.store.rollback()
                logger.error(f"Import aborted at row {row.row_number}: database unavailable")
                raise StoreUnavailable(
                    f"Database unavailable while importing row {row.row_number}",
                    count=result.count,
                ) from exc

            except Exception as exc:
                self.store.rollback()
                logger.error(
                    f"Import aborted at row {row.row_number} after {result.count} rows: {exc}"
                )
                raise RowProcessingFailure(row.row_number, str(exc), result.count) from exc

            result.count += 1

        logger.info(
            f"Import finished: {result.count} processed "
            f"({result.created} created, {result.updated} updated, {result.skipped} skipped)"
        )

        return result

    def _reconcile(self, values: RowValues, result: ImportResult) -> None:
        existing = self.store.find_by_name(values.item_name)

        if existing is None:
            item = self.store.create(fields_for_new_item(values))
            result.created += 1
            logger.debug(f"Import created item {item.id} ({values.item_name!r})")
        else:
            item = self.store.update(existing.id, fields_for_existing_item(existing, values))
            result.updated += 1
            logger.debug(f"Import updated item {item.id} ({values.item_name!r})")


def import_workbook(data: bytes, store: ItemStore) -> ImportResult:
    return InventoryImporter(store).run(data)
