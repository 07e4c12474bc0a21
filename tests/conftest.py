"""
Pytest configuration and shared fixtures for the fleet service test suite.
"""
import os
import shutil
import tempfile
import threading
from decimal import Decimal
from typing import Generator

import pytest

# Point the service at a throwaway SQLite database before anything imports settings
_DB_DIR = tempfile.mkdtemp(prefix="fleet_test_")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_DB_DIR, 'fleet.db')}"
os.environ["JWT_SECRET"] = "test-secret"
os.environ["RESTOCK_ON_CANCEL"] = "false"

from fastapi.testclient import TestClient  # noqa: E402

from shared.core.auth import validate_current_token  # noqa: E402
from shared.core.database import Base, FleetSessionLocal, fleet_engine  # noqa: E402
from shared.core.schemas import UserToken  # noqa: E402
from fleet_service.app.core.errors import EngineError  # noqa: E402
from fleet_service.app.main import app  # noqa: E402
from fleet_service.app.crud.inventory.inventory_items_crud import create_inventory_item  # noqa: E402
from fleet_service.app.enum.inventory_enum import InventoryCategory, InventoryUnit  # noqa: E402
from fleet_service.app.enum.maintenance_enum import Terminal  # noqa: E402
from fleet_service.app.schemas.inventory.inventory_items_schemas import InventoryItemCreate  # noqa: E402


TEST_USER = UserToken(user_id="user-1", name="Test Mechanic", role="manager",
                      terminal=Terminal.kigali.value)


@pytest.fixture(autouse=True)
def clean_database() -> Generator[None, None, None]:
    """Give every test an empty schema."""
    Base.metadata.drop_all(bind=fleet_engine)
    Base.metadata.create_all(bind=fleet_engine)
    yield


@pytest.fixture
def db():
    session = FleetSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def current_user() -> UserToken:
    return TEST_USER


@pytest.fixture
def oil_item(db):
    """OIL-5L, 10 in stock at 20 each."""
    return create_inventory_item(db, InventoryItemCreate(
        sku="oil-5l",
        name="Engine Oil 5L",
        category=InventoryCategory.lubricants,
        unit=InventoryUnit.liters,
        terminal=Terminal.kigali,
        quantity=10,
        min_quantity=2,
        reorder_point=20,
        unit_cost=Decimal("20"),
    ))


@pytest.fixture
def filter_item(db):
    """FLT-01, 5 in stock at 8 each."""
    return create_inventory_item(db, InventoryItemCreate(
        sku="FLT-01",
        name="Oil Filter",
        category=InventoryCategory.filters,
        quantity=5,
        unit_cost=Decimal("8"),
    ))


@pytest.fixture
def run_concurrently():
    """Run ``work(session)`` on several threads released at the same moment.

    Each thread gets its own session. Returns one outcome per thread: "ok",
    or the EngineError it raised.
    """
    def run(work, count=4):
        barrier = threading.Barrier(count)
        outcomes = []
        guard = threading.Lock()

        def worker():
            session = FleetSessionLocal()
            try:
                barrier.wait()
                work(session)
                outcome = "ok"
            except EngineError as exc:
                outcome = exc
            finally:
                session.close()
            with guard:
                outcomes.append(outcome)

        threads = [threading.Thread(target=worker) for _ in range(count)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()
        return outcomes

    return run


@pytest.fixture
def client() -> Generator[TestClient, None, None]:
    """API client with the bearer token check replaced by a fixed user."""
    app.dependency_overrides[validate_current_token] = lambda: TEST_USER
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def pytest_sessionfinish(session, exitstatus):
    fleet_engine.dispose()
    shutil.rmtree(_DB_DIR, ignore_errors=True)


# Configure pytest markers
def pytest_configure(config):
    """Configure custom pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: Integration tests")
