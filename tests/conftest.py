import os
from datetime import date
from io import BytesIO

import pytest
from fastapi.testclient import TestClient
from openpyxl import Workbook
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["RATE_LIMIT_ENABLED"] = "false"

from inventory_tracker.database import Base, get_db  # noqa: E402
from inventory_tracker.main import app  # noqa: E402
from inventory_tracker.services.item_store import ItemStore  # noqa: E402

@pytest.fixture()
def db_session():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)

    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSession()

    try:
        yield session
    finally:
        session.close()
        engine.dispose()

@pytest.fixture()
def store(db_session):
    return ItemStore(db_session)

@pytest.fixture()
def client(db_session):
    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()

@pytest.fixture()
def make_workbook():
    """Build an xlsx file in memory from a header row and data rows."""

    def _make(headers, rows, extra_sheets=()):
        workbook = Workbook()
        sheet = workbook.active
        sheet.title = "Stock"
        sheet.append(headers)
        for row in rows:
            sheet.append(row)

        for title in extra_sheets:
            other = workbook.create_sheet(title=title)
            other.append(["Item Name", "Selling Price"])
            other.append(["From another sheet", 1])

        output = BytesIO()
        workbook.save(output)
        return output.getvalue()

    return _make

@pytest.fixture()
def add_item(store):
    def _add(name, **fields):
        data = {
            "item_name": name,
            "selling_price": 10.0,
            "current_quantity": 50,
            "unit_type": "box",
            "expiry_date": date(2025, 1, 1),
            "status": "checked",
        }
        data.update(fields)
        return store.create(data)

    return _add
