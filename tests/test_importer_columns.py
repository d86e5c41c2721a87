import pytest

from inventory_tracker.services.importer import Field, HeaderIndex, normalize_header


@pytest.mark.parametrize(
    "header",
    [" Item Name ", "ITEMNAME", "item name", "Item name\t", "ItemName"],
)
def test_item_name_header_variants_resolve(header):
    index = HeaderIndex([header, "Price"])

    assert index.resolve(Field.ITEM_NAME) == header


def test_resolved_header_keeps_original_spelling():
    index = HeaderIndex(["  Selling PRICE", "Qty"])

    assert index.resolve(Field.SELLING_PRICE) == "  Selling PRICE"


def test_first_alias_in_priority_order_wins():
    # "quantity" appears first in the sheet but "current qty" is the higher priority alias
    index = HeaderIndex(["Quantity", "Current Qty", "Item Name"])

    assert index.resolve(Field.CURRENT_QUANTITY) == "Current Qty"


def test_price_falls_back_to_short_alias():
    index = HeaderIndex(["item name", "price"])

    assert index.resolve(Field.SELLING_PRICE) == "price"


def test_unmatched_field_is_absent():
    index = HeaderIndex(["Item Name", "Notes"])

    assert index.resolve(Field.EXPIRY_DATE) is None
    assert index.resolve(Field.STATUS) is None


def test_inner_whitespace_is_not_collapsed():
    index = HeaderIndex(["Item  Name"])

    assert index.resolve(Field.ITEM_NAME) is None


def test_duplicate_normalized_headers_keep_leftmost():
    index = HeaderIndex(["Status", " STATUS "])

    assert index.resolve(Field.STATUS) == "Status"


def test_blank_headers_are_ignored():
    index = HeaderIndex([None, "Unit"])

    assert index.column_map()[Field.UNIT_TYPE] == "Unit"


def test_column_map_covers_every_field():
    index = HeaderIndex(["Item Name", "Selling Price", "Current Quantity", "Unit Type", "Expiry Date", "Status"])

    assert index.column_map() == {
        Field.ITEM_NAME: "Item Name",
        Field.SELLING_PRICE: "Selling Price",
        Field.CURRENT_QUANTITY: "Current Quantity",
        Field.UNIT_TYPE: "Unit Type",
        Field.EXPIRY_DATE: "Expiry Date",
        Field.STATUS: "Status",
    }


def test_normalize_header_handles_non_text_headers():
    assert normalize_header(2024) == "2024"
    assert normalize_header("  Expiry ") == "expiry"
