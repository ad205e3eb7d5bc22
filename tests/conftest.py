import os
import tempfile

# Set environment variables BEFORE any imports that might use settings
_test_db_dir = tempfile.mkdtemp()
_test_db_path = os.path.join(_test_db_dir, "test_leasing.db")
os.environ["DATABASE_URL"] = f"sqlite:///{_test_db_path}"
os.environ["GEMINI_API_KEY"] = ""

from datetime import date

import pytest
from alembic import command
from alembic.config import Config
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker

from app.main import app
from app.schemas.building import Building, Unit
from app.schemas.project import ProjectData
from app.schemas.tenant import Tenant


@pytest.fixture(scope="function")
def db_session():
    """Create a fresh database for each test and run migrations."""
    temp_db_dir = tempfile.mkdtemp()
    test_db_path = os.path.join(temp_db_dir, "test.db")
    test_db_url = f"sqlite:///{test_db_path}"

    test_engine = create_engine(
        test_db_url,
        connect_args={"check_same_thread": False},
        poolclass=None,
    )

    @event.listens_for(test_engine, "connect")
    def set_sqlite_pragma(dbapi_conn, connection_record):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    TestingSessionLocal = sessionmaker(
        autocommit=False, autoflush=False, bind=test_engine
    )

    alembic_cfg = Config("alembic.ini")
    alembic_cfg.set_main_option("sqlalchemy.url", test_db_url)
    command.upgrade(alembic_cfg, "head")

    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        test_engine.dispose()

        for suffix in ["", "-wal", "-shm"]:
            path = f"{test_db_path}{suffix}"
            if os.path.exists(path):
                os.remove(path)
        if os.path.exists(temp_db_dir):
            os.rmdir(temp_db_dir)


@pytest.fixture(scope="function")
def client(db_session):
    """Create a test client with database dependency override."""

    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    from app.api.deps import get_db

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture(scope="function")
def db(db_session):
    """Alias for db_session to match test naming conventions."""
    return db_session


# ============================================================================
# DOCUMENT FIXTURES
# ============================================================================


def make_tenant(**overrides) -> Tenant:
    """A quarterly 9000/month lease for 2024 billed from 2023-12-01."""
    fields = {
        "id": "t1",
        "name": "Acme Ltd",
        "building_id": "b1",
        "unit_ids": ["u1"],
        "total_area": 100,
        "lease_start": date(2024, 1, 1),
        "lease_end": date(2024, 12, 31),
        "monthly_rent": 9000,
        "payment_cycle": "Quarterly",
        "first_payment_date": date(2023, 12, 1),
        "status": "Active",
    }
    fields.update(overrides)
    return Tenant(**fields)


def make_buildings(self_use: bool = False) -> list[Building]:
    return [
        Building(
            id="b1",
            name="Tower A",
            units=[
                Unit(id="u1", name="101", floor=1, area=100, status="Occupied"),
                Unit(id="u2", name="102", floor=1, area=200, status="Vacant"),
                Unit(id="u3", name="103", floor=1, area=50, status="Vacant", is_self_use=self_use),
            ],
        )
    ]


@pytest.fixture(scope="function")
def tenant() -> Tenant:
    return make_tenant()


@pytest.fixture(scope="function")
def document(tenant: Tenant) -> ProjectData:
    return ProjectData(buildings=make_buildings(self_use=True), tenants=[tenant])


@pytest.fixture(scope="function")
def project(client: TestClient, document: ProjectData) -> dict:
    """A stored project seeded with the sample document."""
    response = client.post(
        "/api/v1/projects",
        json={"name": "Tower A", "data": document.model_dump(mode="json", by_alias=True)},
    )
    assert response.status_code == 201
    return response.json()
