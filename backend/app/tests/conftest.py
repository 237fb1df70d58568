"""
Shared test fixtures: in-memory SQLite database and an authenticated client.
"""
import os

os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest
from decimal import Decimal
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app import models  # noqa: F401  registers all tables
from app.db.base import Base
from app.db.session import get_db
from app.core.security import get_password_hash
from app.main import app
from app.models import User, Trip, TripMember, MemberRole, TripStatus


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def register(client, name: str, email: str, password: str = "secret123") -> dict:
    """Register a user through the API and return auth headers."""
    response = client.post(
        "/api/auth/register",
        json={"name": name, "email": email, "password": password}
    )
    assert response.status_code == 201, response.text
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


def seed_trip(db) -> dict:
    """
    A trip owned by Alice with members Alice (admin), Bob and the guest Cici.
    Returns a dict of the created rows.
    """
    alice = User(name="Alice", email="alice@example.com", hashed_password=get_password_hash("secret123"))
    bob = User(name="Bob", email="bob@example.com", hashed_password=get_password_hash("secret123"))
    db.add_all([alice, bob])
    db.flush()

    trip = Trip(owner_id=alice.id, name="Bali", currency_code="IDR", status=TripStatus.PLANNING)
    db.add(trip)
    db.flush()

    m_alice = TripMember(trip_id=trip.id, user_id=alice.id, role=MemberRole.ADMIN, balance=Decimal(0))
    m_bob = TripMember(trip_id=trip.id, user_id=bob.id, role=MemberRole.MEMBER, balance=Decimal(0))
    m_cici = TripMember(trip_id=trip.id, guest_name="Cici", role=MemberRole.MEMBER, balance=Decimal(0))
    db.add_all([m_alice, m_bob, m_cici])
    db.commit()

    return {
        "trip": trip,
        "alice": alice,
        "bob": bob,
        "a": m_alice,
        "b": m_bob,
        "c": m_cici,
    }


@pytest.fixture
def trip_setup(db):
    return seed_trip(db)


@pytest.fixture
def shared_trip(tmp_path):
    """
    The same trip on a file-backed database, for tests that need two sessions
    on separate connections. Yields (session_factory, trip_id).
    """
    engine = create_engine(f"sqlite:///{tmp_path / 'ledger.db'}")
    Base.metadata.create_all(bind=engine)
    factory = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    setup_session = factory()
    trip_id = seed_trip(setup_session)["trip"].id
    setup_session.close()

    yield factory, trip_id

    engine.dispose()
