import os
import tempfile

# Settings and the module-level engine are built on import; point them at sqlite first
_TMP_DIR = tempfile.mkdtemp(prefix="relief-tests-")
os.environ.setdefault("DATABASE_URL", f"sqlite:///{os.path.join(_TMP_DIR, 'app.db')}")
os.environ.setdefault("RUN_MIGRATIONS", "false")
os.environ.setdefault("JWT_SECRET", "test-secret")
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import select

from relief_inventory.api.deps import create_access_token
from relief_inventory.application.actor import ADMIN_ROLE, Actor
from relief_inventory.application.catalog import clear_lookup_cache
from relief_inventory.application.schemas import InventoryEntryCreate
from relief_inventory.application.service import CoordinationService
from relief_inventory.domain.models import Base, ItemType
from relief_inventory.infrastructure.db import build_engine, build_sessionmaker, get_db
from relief_inventory.infrastructure.locking import EntryLockRegistry
from relief_inventory.main import app
from seed.seed import read_rows, seed_item_types, seed_locations

PROVIDER = "provider-1"
REQUESTER = "ngo-1"
COORDINATOR = "coordinator-1"
DONOR = "donor-1"

@pytest.fixture(autouse=True)
def _fresh_lookup_cache():
    clear_lookup_cache()
    yield
    clear_lookup_cache()

@pytest.fixture
def engine(tmp_path):
    engine = build_engine(f"sqlite:///{tmp_path / 'relief.db'}")
    Base.metadata.create_all(engine)
    factory = build_sessionmaker(engine)
    with factory() as db:
        seed_item_types(db, read_rows("item_types.csv"))
        seed_locations(db, read_rows("locations.csv"))
        db.commit()
    yield engine
    engine.dispose()

@pytest.fixture
def session_factory(engine):
    return build_sessionmaker(engine)

@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()

@pytest.fixture
def locks():
    return EntryLockRegistry()

@pytest.fixture
def service(db, locks):
    return CoordinationService(db, locks=locks)

@pytest.fixture
def item_type_id(db):
    def lookup(name: str = "Blankets") -> int:
        return db.scalars(select(ItemType.id).where(ItemType.name == name)).one()
    return lookup

@pytest.fixture
def provider():
    return Actor(PROVIDER)

@pytest.fixture
def requester():
    return Actor(REQUESTER)

@pytest.fixture
def coordinator():
    return Actor(COORDINATOR, (ADMIN_ROLE,))

@pytest.fixture
def donor():
    return Actor(DONOR)

@pytest.fixture
def make_entry(service, provider, item_type_id):
    """Create an entry in Ludhiana East through the façade."""
    def create(quantity_total=100, quantity_available=None, **overrides):
        payload = {
            "item_type_id": item_type_id(overrides.pop("item_name", "Blankets")),
            "district_code": "LDH",
            "tehsil_code": "LDH001",
            "quantity_total": quantity_total,
            "quantity_available": quantity_available,
        }
        payload.update(overrides)
        return service.create_entry(provider, InventoryEntryCreate(**payload))
    return create

@pytest.fixture
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()

@pytest.fixture
def auth():
    def headers(user_id: str, *roles: str) -> dict:
        return {"Authorization": f"Bearer {create_access_token(user_id, roles)}"}
    return headers
