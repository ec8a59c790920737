"""
tests/test_session_guard.py -- Unit tests for auth/dependencies.authenticate().

authenticate() takes any header mapping, so these tests use plain dicts and
never build a request or touch a store.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from auth.dependencies import authenticate
from auth.models import UserIdentity
from auth.tokens import issue_token


@pytest.fixture
def token() -> str:
    return issue_token(UserIdentity(id=2, username="alice", role="Manager", email="alice@example.com"))


@pytest.mark.parametrize("header_name", ["Authorization", "authorization", "AUTHORIZATION"])
def test_header_name_is_case_insensitive(token: str, header_name: str) -> None:
    claims = authenticate({header_name: f"Bearer {token}"})
    assert claims is not None
    assert claims.id == 2
    assert claims.role == "manager"


def test_missing_header_rejected() -> None:
    assert authenticate({}) is None
    assert authenticate({"Content-Type": "application/json"}) is None


@pytest.mark.parametrize("scheme", ["", "bearer ", "Token ", "Basic ", "Bearer"])
def test_header_without_exact_bearer_prefix_rejected(token: str, scheme: str) -> None:
    assert authenticate({"Authorization": f"{scheme}{token}"}) is None


def test_empty_bearer_value_rejected() -> None:
    assert authenticate({"Authorization": "Bearer "}) is None


def test_invalid_token_rejected() -> None:
    assert authenticate({"Authorization": "Bearer not.a.token"}) is None


def test_expired_token_rejected() -> None:
    stale = issue_token(
        UserIdentity(id=2, username="alice", role="manager"),
        issued_at=datetime.now(timezone.utc) - timedelta(days=2),
    )
    assert authenticate({"Authorization": f"Bearer {stale}"}) is None
