"""Pytest configuration and fixtures."""

import os

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from vegan_aisle.database import Base, get_db
from vegan_aisle.main import app
from vegan_aisle.models import Product, Store, StoreChain, User
from vegan_aisle.services.chains import slugify


class AuthHeaders(dict):
    """Dict subclass that also stores user_id and email."""

    def __init__(self, *args, user_id: int | None = None, email: str | None = None, **kwargs):
        super().__init__(*args, **kwargs)
        self.user_id = user_id
        self.email = email


# Use test database - PostgreSQL in Docker, SQLite locally
if os.getenv("DATABASE_URL"):
    # Running in Docker - use PostgreSQL test database
    SQLALCHEMY_DATABASE_URL = os.getenv("DATABASE_URL").replace("/vegan_aisle", "/vegan_aisle_test")
else:
    # Running locally - use SQLite
    SQLALCHEMY_DATABASE_URL = "sqlite:///./test.db"

connect_args = {"check_same_thread": False} if "sqlite" in SQLALCHEMY_DATABASE_URL else {}
engine = create_engine(SQLALCHEMY_DATABASE_URL, connect_args=connect_args)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

TEST_PASSWORD = "testpass123"  # noqa: S105


@pytest.fixture(scope="session", autouse=True)
def setup_test_database():
    """Create test database schema once at the start of the test session."""
    if "postgresql" in SQLALCHEMY_DATABASE_URL:
        # For PostgreSQL, create the test database
        from sqlalchemy_utils import create_database, database_exists

        # Create test database if it doesn't exist
        if not database_exists(SQLALCHEMY_DATABASE_URL):
            create_database(SQLALCHEMY_DATABASE_URL)

    Base.metadata.create_all(bind=engine)
    yield
    # Don't drop database - just leave it for next run (each test cleans up after itself)


@pytest.fixture(scope="function", autouse=True)
def db():
    """Create a fresh database session for each test with cleanup."""
    session = TestingSessionLocal()

    yield session

    # Clean up all data after test
    session.rollback()
    for table in reversed(Base.metadata.sorted_tables):
        session.execute(table.delete())
    session.commit()
    session.close()


@pytest.fixture(scope="function")
def client(db):
    """Create a test client with database override."""

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def signup(client, email: str, display_name: str = "Test User") -> AuthHeaders:
    """Sign up through the API and return auth headers for the new user."""
    response = client.post(
        "/api/auth/signup",
        json={"email": email, "password": TEST_PASSWORD, "display_name": display_name},
    )
    assert response.status_code == 201
    data = response.json()
    return AuthHeaders(
        {"Authorization": f"Bearer {data['access_token']}"},
        user_id=data["user"]["id"],
        email=email,
    )


def _update_user(db, user_id: int, **fields) -> None:
    user = db.query(User).filter(User.id == user_id).first()
    for key, value in fields.items():
        setattr(user, key, value)
    db.commit()


@pytest.fixture
def auth_headers(client):
    """Create a regular user and return auth headers with user info."""
    return signup(client, "test@example.com")


@pytest.fixture
def other_headers(client):
    """A second regular user."""
    return signup(client, "other@example.com", "Other User")


@pytest.fixture
def trusted_headers(client, db):
    """A trusted contributor."""
    headers = signup(client, "trusted@example.com", "Trusted User")
    _update_user(db, headers.user_id, trusted_contributor=True)
    return headers


@pytest.fixture
def moderator_headers(client, db):
    headers = signup(client, "moderator@example.com", "Moderator")
    _update_user(db, headers.user_id, role="moderator")
    return headers


@pytest.fixture
def admin_headers(client, db):
    """An admin user."""
    headers = signup(client, "admin@example.com", "Admin")
    _update_user(db, headers.user_id, role="admin")
    return headers


@pytest.fixture
def make_product(db):
    """Factory for curated products."""

    def _make(name: str = "Oat Milk", brand: str = "Oatly", **fields) -> Product:
        fields.setdefault("categories", ["en:plant-based-milks"])
        fields.setdefault("tags", ["vegan"])
        product = Product(name=name, brand=brand, **fields)
        db.add(product)
        db.commit()
        db.refresh(product)
        return product

    return _make


@pytest.fixture
def make_chain(db):
    """Factory for store chains."""

    def _make(name: str = "Whole Foods Market", **fields) -> StoreChain:
        chain = StoreChain(name=name, slug=slugify(name), **fields)
        db.add(chain)
        db.commit()
        db.refresh(chain)
        return chain

    return _make


@pytest.fixture
def make_store(db):
    """Factory for confirmed stores."""

    def _make(name: str = "Whole Foods", chain: StoreChain | None = None, **fields) -> Store:
        fields.setdefault("type", "brick_and_mortar")
        store = Store(name=name, chain_id=chain.id if chain else None, **fields)
        db.add(store)
        db.commit()
        if chain is not None:
            chain.location_count = db.query(Store).filter(Store.chain_id == chain.id).count()
            db.commit()
        db.refresh(store)
        return store

    return _make


@pytest.fixture
def make_user(client):
    """Factory for extra regular users, signed up through the API."""

    def _make(email: str, display_name: str = "Test User") -> AuthHeaders:
        return signup(client, email, display_name)

    return _make
