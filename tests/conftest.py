"""
tests/conftest.py -- Shared test fixtures for CV registry tests.

This module provides:
  - make_engine(): isolated named shared-memory SQLite engine
  - seed(): inserts the fixture user profiles and CV records
  - _patch_lifespan(): wires test stores into app.state, bypassing real startup
  - api_client: TestClient plus a token for the seeded "alice" profile
  - engine / user_store / record_store: per-test stores for unit tests

Design: Named shared-memory SQLite URIs (not plain :memory:) are required
because TestClient runs sync route handlers in a thread pool. Plain :memory:
DBs are per-connection and would present a blank schema to each worker thread.

JWT_SECRET and DATABASE_URL are mandatory settings, so they must be in the
environment before any api/auth/core import calls get_settings().
"""

from __future__ import annotations

import itertools
import os
from collections.abc import Generator
from contextlib import asynccontextmanager
from datetime import datetime

# CRITICAL: set mandatory settings before any app import.
os.environ.setdefault("JWT_SECRET", "test-secret-key-with-at-least-32-characters")
os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.engine import Engine

from api.main import app
from auth.models import UserIdentity
from auth.store import UserStore, user_profiles
from auth.tokens import issue_token
from core.database import create_store_engine
from records.store import RecordStore, cv_records

_db_counter = itertools.count()

# ---------------------------------------------------------------------------
# Fixture data
# ---------------------------------------------------------------------------

USERS = [
    {
        "id": 1,
        "username": "admin",
        "email": "admin@example.com",
        "password": "admin1",
        "role": "Admin",
        "first_name": "System",
        "last_name": "Administrator",
        "department": "ICT",
        "position": "System Admin",
        "phone_number": "011 234 5678",
        "is_active": True,
    },
    {
        "id": 2,
        "username": "alice",
        "email": "alice@example.com",
        "password": "alice-pass",
        "role": "MANAGER",
        "first_name": "Alice",
        "last_name": "Johnson",
        "department": "HR",
        "position": "HR Manager",
        "phone_number": "011 234 5679",
        "is_active": True,
    },
    {
        "id": 3,
        "username": "user",
        "email": "user@example.com",
        "password": "user1",
        "role": "user",
        "first_name": "John",
        "last_name": "Doe",
        "department": "SAP",
        "position": "SAP Developer",
        "phone_number": "083 123 4567",
        "is_active": False,
    },
]

CV_RECORDS = [
    {
        "id": 1,
        "name": "Michael",
        "surname": "Chen",
        "id_passport": "8901015009088",
        "email": "michael.chen@example.com",
        "phone": "082 555 1234",
        "department": "SAP",
        "position": "SAP Technical Consultant",
        "role_title": "SAP ABAP Developer",
        "sap_k_level": "K4",
        "experience": 7,
        "experience_similar_role": 5,
        "experience_itsm_tools": 3,
        "qualifications": "BTech Computer Science",
        "institute_name": "University of Pretoria",
        "year_completed": "2016",
        "languages": "English, Mandarin",
        "work_experiences": '[{"company": "Tech Solutions SA", "position": "Senior SAP Developer"}]',
        "certificate_types": '[{"department": "SAP", "certificate": "SAP Certified Development Associate"}]',
        "status": "active",
        "cv_file": "michael_chen_cv.pdf",
        "submitted_at": datetime(2024, 12, 15, 10, 30),
    },
    {
        "id": 2,
        "name": "Sarah",
        "surname": "Williams",
        "id_passport": "9205120045088",
        "email": "sarah.williams@example.com",
        "phone": "083 444 5678",
        "department": "PROJECT MANAGEMENT",
        "position": "Project Manager",
        "role_title": "Senior Project Manager",
        "sap_k_level": "",
        "experience": 8,
        "experience_similar_role": 6,
        "experience_itsm_tools": 4,
        "qualifications": "MBA",
        "institute_name": "Wits Business School",
        "year_completed": "2015",
        "languages": "English, Spanish",
        "work_experiences": "[]",
        "certificate_types": "[]",
        "status": "pending",
        "cv_file": "sarah_williams_cv.pdf",
        "submitted_at": datetime(2025, 1, 10, 14, 20),
    },
    {
        "id": 3,
        "name": "David",
        "surname": "Brown",
        "id_passport": "8707085012088",
        "email": "david.brown@example.com",
        "phone": "084 333 9876",
        "department": "ICT",
        "position": "Network Administrator",
        "role_title": "Senior Network Admin",
        "sap_k_level": "",
        "experience": 12,
        "experience_similar_role": 10,
        "experience_itsm_tools": 8,
        "qualifications": "BSc Information Technology",
        "institute_name": "University of Johannesburg",
        "year_completed": "2012",
        "languages": "English, Afrikaans",
        "work_experiences": "[]",
        "certificate_types": "[]",
        "status": "archived",
        "cv_file": "david_brown_cv.pdf",
        "submitted_at": datetime(2024, 11, 22, 9, 15),
    },
]

# ---------------------------------------------------------------------------
# Store helpers
# ---------------------------------------------------------------------------


def make_engine(db_suffix: str) -> Engine:
    """Create an isolated named shared-memory SQLite engine.

    Args:
        db_suffix: Unique string appended to the DB name so test modules
                   and tests don't share state.
    """
    return create_store_engine(f"sqlite:///file:test_cv_{db_suffix}?mode=memory&cache=shared&uri=true")


def seed(engine: Engine) -> None:
    """Insert the fixture users and CV records. Tables must already exist."""
    with engine.connect() as conn:
        conn.execute(user_profiles.insert(), USERS)
        conn.execute(cv_records.insert(), CV_RECORDS)
        conn.commit()


def token_for(username: str) -> str:
    """Issue a session token for one of the fixture users."""
    row = next(u for u in USERS if u["username"] == username)
    identity = UserIdentity(id=row["id"], username=row["username"], role=row["role"], email=row["email"])
    return issue_token(identity)


def _patch_lifespan(engine: Engine, user_store: UserStore, record_store: RecordStore):
    """Return an async context manager that replaces the real lifespan.

    Wires pre-created test stores into app.state so TestClient routes see
    isolated test DBs rather than the configured DATABASE_URL.
    """

    @asynccontextmanager
    async def test_lifespan(app):
        app.state.engine = engine
        app.state.user_store = user_store
        app.state.record_store = record_store
        yield

    return test_lifespan


# ---------------------------------------------------------------------------
# Module-scoped fixtures -- one TestClient per test module for speed
# ---------------------------------------------------------------------------


@pytest.fixture(scope="module")
def api_client() -> Generator[tuple[TestClient, str, Engine], None, None]:
    """Yield (client, token, engine) for API integration tests.

    The TestClient uses the real FastAPI app with a patched lifespan so
    tests hit real route handlers but use an isolated in-memory store.
    token is a valid bearer token for "alice" (id=2). engine is exposed so
    tests can change rows underneath the API (e.g. delete a profile).
    """
    engine = make_engine(f"api_{next(_db_counter)}")
    user_store = UserStore(engine)
    record_store = RecordStore(engine)
    seed(engine)

    app.router.lifespan_context = _patch_lifespan(engine, user_store, record_store)

    with TestClient(app, raise_server_exceptions=True) as client:
        yield client, token_for("alice"), engine

    engine.dispose()


# ---------------------------------------------------------------------------
# Function-scoped store fixtures -- unit tests
# ---------------------------------------------------------------------------


@pytest.fixture
def engine() -> Generator[Engine, None, None]:
    """Fresh seeded engine per test."""
    eng = make_engine(f"unit_{next(_db_counter)}")
    UserStore(eng)
    RecordStore(eng)
    seed(eng)
    yield eng
    eng.dispose()


@pytest.fixture
def user_store(engine: Engine) -> UserStore:
    return UserStore(engine)


@pytest.fixture
def record_store(engine: Engine) -> RecordStore:
    return RecordStore(engine)
