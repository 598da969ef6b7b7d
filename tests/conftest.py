from typing import Generator, Optional

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from clinicsupply import config
from clinicsupply.auth import create_access_token, hash_password
from clinicsupply.db import Base
from clinicsupply.deps import get_store
from clinicsupply.main import app
from clinicsupply.repositories import Repositories
from clinicsupply.schemas import Role, User
from clinicsupply.storage import MemoryStore, SqlStore

CLINIC_A = "11111111-1111-4111-8111-111111111111"
CLINIC_B = "22222222-2222-4222-8222-222222222222"
PASSWORD = "secret-pass"


def make_user(repos: Repositories, email: str, role: Role, clinic_id: Optional[str], active: bool = True) -> User:
    return repos.users.create({
        "email": email,
        "name": email.split("@")[0].title(),
        "role": role.value,
        "clinicId": clinic_id,
        "isActive": active,
        "passwordHash": hash_password(PASSWORD),
    })


def auth_headers(user: User) -> dict:
    token = create_access_token(user.id, user.email, user.role.value)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture(scope="function")
def db_session() -> Generator:
    # Use in-memory SQLite with a single connection
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine, future=True)
    Base.metadata.create_all(bind=engine)

    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def memory_store():
    return MemoryStore()


@pytest.fixture
def sql_store(db_session):
    return SqlStore(db_session)


@pytest.fixture(params=["memory", "sql"])
def store(request):
    """Runs the test once against each store implementation."""
    return request.getfixturevalue(f"{request.param}_store")


@pytest.fixture
def repos(store):
    return Repositories.from_store(store)


@pytest.fixture
def api_repos(memory_store):
    """Repositories over the store the test client serves."""
    return Repositories.from_store(memory_store)


@pytest.fixture(scope="function")
def client(memory_store):
    previous = config.get_settings()
    config.configure(storage_backend="memory", auth_mode="token")
    app.dependency_overrides[get_store] = lambda: memory_store
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
    config.configure(**previous._asdict())


@pytest.fixture
def clinics(api_repos):
    north = api_repos.clinics.create({"id": CLINIC_A, "name": "North Clinic", "address": "1 North St", "phone": "555-0100"})
    south = api_repos.clinics.create({"id": CLINIC_B, "name": "South Clinic", "address": "2 South St", "phone": "555-0200"})
    return north, south


@pytest.fixture
def admin(api_repos):
    return make_user(api_repos, "admin@clinicsupply.org", Role.ADMIN, None)


@pytest.fixture
def manager(api_repos):
    return make_user(api_repos, "manager@north.org", Role.MANAGER, CLINIC_A)


@pytest.fixture
def staff(api_repos):
    return make_user(api_repos, "staff@north.org", Role.STAFF, CLINIC_A)


@pytest.fixture
def outsider(api_repos):
    # staff member of the other clinic
    return make_user(api_repos, "staff@south.org", Role.STAFF, CLINIC_B)


@pytest.fixture
def gloves(api_repos):
    return api_repos.products.create({
        "id": "aaaaaaaa-0000-4000-8000-000000000001",
        "name": "Nitrile Gloves",
        "description": "Box of 100",
        "category": "PPE",
        "sku": "PPE-001",
        "price": 12.5,
        "unit": "box",
        "minStock": 20,
        "quantity": 150,
    })


@pytest.fixture
def syringes(api_repos):
    return api_repos.products.create({
        "id": "aaaaaaaa-0000-4000-8000-000000000002",
        "name": "Syringe 5ml",
        "description": "Sterile, single use",
        "category": "Injection",
        "sku": "INJ-005",
        "price": 0.35,
        "unit": "each",
        "minStock": 100,
        "quantity": 50,
    })
