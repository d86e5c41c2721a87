from datetime import date, datetime, timedelta

import pytest

from inventory_tracker.services.importer import (
    MAX_QUANTITY,
    FieldState,
    FieldValue,
    RowValues,
    coerce_date,
    coerce_price,
    coerce_quantity,
    coerce_text,
    fields_for_existing_item,
    fields_for_new_item,
    serial_to_date,
)
from inventory_tracker.models.inventory import InventoryItem


def _values(**overrides):
    data = {
        "item_name": "Rice",
        "selling_price": FieldValue.absent(),
        "current_quantity": FieldValue.absent(),
        "unit_type": FieldValue.absent(),
        "expiry_date": FieldValue.absent(),
        "status": FieldValue.absent(),
    }
    data.update(overrides)
    return RowValues(**data)


def _existing(**overrides):
    data = {
        "id": 1,
        "item_name": "Rice",
        "selling_price": 5.0,
        "current_quantity": 50,
        "unit_type": "bag",
        "expiry_date": date(2025, 1, 1),
        "status": "checked",
    }
    data.update(overrides)
    return InventoryItem(**data)


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("19.99", 19.99),
        (" 4 ", 4.0),
        (12, 12.0),
        (3.5, 3.5),
    ],
)
def test_price_parses_numbers(raw, expected):
    assert coerce_price(raw) == FieldValue.provided(expected)


@pytest.mark.parametrize("raw", ["abc", "", "nan", "inf", -2, True])
def test_price_rejects_unusable_input(raw):
    assert coerce_price(raw).state is FieldState.INVALID


def test_missing_price_is_absent():
    assert coerce_price(None).state is FieldState.ABSENT


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("3", 3),
        (" 12 ", 12),
        (7, 7),
        (7.0, 7),
        ("3.7", 3),
        (0, 0),
    ],
)
def test_quantity_parses_integers(raw, expected):
    assert coerce_quantity(raw) == FieldValue.provided(expected)


@pytest.mark.parametrize("raw", ["a dozen", "", -1, "-4", False])
def test_quantity_rejects_unusable_input(raw):
    assert coerce_quantity(raw).state is FieldState.INVALID


def test_quantity_beyond_integer_column_is_invalid():
    assert coerce_quantity("1e20").state is FieldState.INVALID
    assert coerce_quantity(MAX_QUANTITY + 1).state is FieldState.INVALID
    assert coerce_quantity(MAX_QUANTITY) == FieldValue.provided(MAX_QUANTITY)


def test_serial_date_uses_unix_epoch_offset():
    assert serial_to_date(45000) == date(1970, 1, 1) + timedelta(days=45000 - 25569)
    assert serial_to_date(45658) == date(2025, 1, 1)


def test_numeric_expiry_is_a_date_serial():
    assert coerce_date(45000) == FieldValue.provided(date(2023, 3, 15))


def test_fractional_serial_keeps_the_calendar_day():
    assert coerce_date(45658.75) == FieldValue.provided(date(2025, 1, 1))


def test_date_cells_pass_through():
    assert coerce_date(datetime(2026, 5, 4, 13, 0)) == FieldValue.provided(date(2026, 5, 4))
    assert coerce_date(date(2026, 5, 4)) == FieldValue.provided(date(2026, 5, 4))


@pytest.mark.parametrize(
    "text, expected",
    [
        ("2025-03-01", date(2025, 3, 1)),
        ("2025-03-01T08:30:00", date(2025, 3, 1)),
        ("3/1/2025", date(2025, 3, 1)),
        ("2025/03/01", date(2025, 3, 1)),
        ("1 Mar 2025", date(2025, 3, 1)),
        ("March 1, 2025", date(2025, 3, 1)),
    ],
)
def test_text_expiry_formats(text, expected):
    assert coerce_date(text) == FieldValue.provided(expected)


def test_unparsable_expiry_is_invalid():
    assert coerce_date("next tuesday").state is FieldState.INVALID
    assert coerce_date("2025-02-30").state is FieldState.INVALID


def test_blank_expiry_is_absent():
    assert coerce_date(None).state is FieldState.ABSENT
    assert coerce_date(0).state is FieldState.ABSENT
    assert coerce_date(0.0).state is FieldState.ABSENT
    assert coerce_date("   ").state is FieldState.ABSENT


def test_text_coercion_drops_float_noise():
    assert coerce_text(12.0) == FieldValue.provided("12")
    assert coerce_text("kg") == FieldValue.provided("kg")
    assert coerce_text(None).state is FieldState.ABSENT


def test_new_item_defaults():
    fields = fields_for_new_item(_values())

    assert fields == {
        "item_name": "Rice",
        "selling_price": 0.0,
        "current_quantity": 0,
        "unit_type": "",
        "expiry_date": None,
        "status": "not yet",
    }


def test_new_item_lowercases_status():
    fields = fields_for_new_item(_values(status=FieldValue.provided("Checked")))

    assert fields["status"] == "checked"


def test_new_item_with_blank_status_cell_gets_default():
    fields = fields_for_new_item(_values(status=FieldValue.provided("")))

    assert fields["status"] == "not yet"


def test_existing_item_price_is_always_overwritten():
    fields = fields_for_existing_item(_existing(), _values(selling_price=FieldValue.invalid()))

    assert fields["selling_price"] == 0.0


def test_existing_item_zero_quantity_keeps_stock():
    fields = fields_for_existing_item(_existing(), _values(current_quantity=FieldValue.provided(0)))

    assert "current_quantity" not in fields


def test_existing_item_unit_type_falls_back_to_stored_value():
    assert fields_for_existing_item(_existing(), _values())["unit_type"] == "bag"
    assert fields_for_existing_item(_existing(unit_type=None), _values())["unit_type"] == ""
    assert fields_for_existing_item(
        _existing(), _values(unit_type=FieldValue.provided("kg"))
    )["unit_type"] == "kg"


def test_existing_item_expiry_only_changes_for_valid_dates():
    fields = fields_for_existing_item(_existing(), _values(expiry_date=FieldValue.invalid()))
    assert "expiry_date" not in fields

    fields = fields_for_existing_item(_existing(), _values(expiry_date=FieldValue.provided(date(2027, 1, 1))))
    assert fields["expiry_date"] == date(2027, 1, 1)


def test_existing_item_status_follows_any_present_status_cell():
    assert "status" not in fields_for_existing_item(_existing(), _values())
    assert fields_for_existing_item(
        _existing(), _values(status=FieldValue.provided("UPDATED"))
    )["status"] == "updated"
    assert fields_for_existing_item(
        _existing(), _values(status=FieldValue.provided(""))
    )["status"] == ""
