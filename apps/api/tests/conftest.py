"""
Test configuration and fixtures.

Provides:
- Database session with savepoint (rollback after each test)
- Factories for humans, organizations and actors
- HTTPX AsyncClient wired to the test session
"""
import os
import uuid
from typing import AsyncGenerator, Callable, Generator

import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy.orm import Session

# Configure the app for tests before anything imports settings
os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///:memory:")
os.environ["TESTING"] = "1"
os.environ["INTERNAL_SECRET"] = ""

from actor_engine.main import app
from actor_engine.core.deps import get_db
from actor_engine.db.base import Base
from actor_engine.db.models import Actor, Human, Organization
from actor_engine.db.session import engine, SessionLocal
from actor_engine.services import actor_service


# =============================================================================
# Database Fixtures (Savepoint pattern)
# =============================================================================

@pytest.fixture(scope="session", autouse=True)
def create_schema() -> Generator[None, None, None]:
    """Create all tables once per test session."""
    Base.metadata.create_all(engine)
    yield
    Base.metadata.drop_all(engine)


@pytest.fixture(scope="function")
def db() -> Generator[Session, None, None]:
    """
    Creates a database session with savepoint for test isolation.

    App code can call commit() and rollback(); both only affect a savepoint
    inside the outer transaction, which is rolled back at the end.
    """
    connection = engine.connect()
    # Begin outer transaction that we'll rollback at end
    transaction = connection.begin()

    session = SessionLocal(bind=connection, join_transaction_mode="create_savepoint")

    yield session

    session.close()
    # Rollback outer transaction - undoes all test changes
    transaction.rollback()
    connection.close()


# =============================================================================
# Factories
# =============================================================================

@pytest.fixture(scope="function")
def make_human(db: Session) -> Callable[..., Human]:
    """Register a human with a unique username."""
    def _make(username: str | None = None, display_name: str | None = None) -> Human:
        return actor_service.register_human(
            db,
            username or f"user-{uuid.uuid4().hex[:8]}",
            display_name,
        )

    return _make


@pytest.fixture(scope="function")
def make_actor(db: Session, make_human) -> Callable[..., Actor]:
    """Register a human and return their actor."""
    def _make(username: str | None = None) -> Actor:
        human = make_human(username)
        return actor_service.resolve_actor_for_human(db, human.id)

    return _make


@pytest.fixture(scope="function")
def make_org(db: Session, make_human) -> Callable[..., Organization]:
    """Register an organization; a fresh owner is created unless given."""
    def _make(owner: Human | None = None, name: str | None = None) -> Organization:
        owner = owner or make_human()
        return actor_service.register_organization(
            db,
            owner_human_id=owner.id,
            name=name or f"Org {uuid.uuid4().hex[:8]}",
        )

    return _make


# =============================================================================
# Client Fixtures
# =============================================================================

@pytest.fixture(scope="function")
async def client(db: Session) -> AsyncGenerator[AsyncClient, None]:
    """AsyncClient sharing the test session."""
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()
