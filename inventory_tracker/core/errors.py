# inventory_tracker/core/errors.py
#
# Errors raised by the spreadsheet import. Each one knows the HTTP status
# it maps to; main.py renders them as {"error": ..., "count": ...}.

from fastapi import status


class InventoryImportError(Exception):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, count: int = 0):
        super().__init__(message)
        self.message = message
        # Rows committed before the import stopped
        self.count = count


class NoFileProvided(InventoryImportError):
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self):
        super().__init__("No file uploaded")


class UnparsableWorkbook(InventoryImportError):
    status_code = status.HTTP_400_BAD_REQUEST


class RowProcessingFailure(InventoryImportError):
    def __init__(self, row_number: int, reason: str, count: int):
        super().__init__(f"Row {row_number}: {reason}", count=count)
        self.row_number = row_number


class StoreUnavailable(InventoryImportError):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE


class ItemNotFound(Exception):
    def __init__(self, item_id: int):
        super().__init__(f"Inventory item {item_id} not found")
        self.item_id = item_id
