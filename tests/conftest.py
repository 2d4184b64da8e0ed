"""
Fixtures compartidas: Supabase en memoria, usuarios por rol y TestClient
con dependency_overrides.
"""

from typing import Callable, Optional

import pytest
from fastapi.testclient import TestClient

from designaciones.cache import profile_cache, query_cache
from designaciones.deps import get_current_user, get_db
from designaciones.main import app
from designaciones.models import CurrentUser, DelegateContext
from designaciones.roles import Role
from tests.fakes import FakeSupabase

DEL_A = "del_a"
DEL_B = "del_b"


@pytest.fixture(autouse=True)
def clear_caches():
    query_cache.clear()
    profile_cache.clear()
    yield
    query_cache.clear()
    profile_cache.clear()


@pytest.fixture
def db() -> FakeSupabase:
    fake = FakeSupabase()
    fake.seed(
        "delegates",
        {"id": DEL_A, "name": "Delegación Norte", "order": 1},
        {"id": DEL_B, "name": "Delegación Sur", "order": 2, "is_active": True},
        {"id": "del_old", "name": "Delegación Antigua", "is_active": False},
    )
    return fake


def make_user(role: Optional[Role], delegate_id: Optional[str] = None, user_id: str = "u1") -> CurrentUser:
    return CurrentUser(user_id=user_id, email=f"{user_id}@example.com", role=role, delegate_id=delegate_id)


def make_ctx(role: Role, effective: Optional[str] = None, own: Optional[str] = None) -> DelegateContext:
    return DelegateContext(uid="u1", role=role, user_delegate_id=own, effective_delegate_id=effective)


@pytest.fixture
def client_for(db) -> Callable[..., TestClient]:
    """client_for(Role.DELEGADO, "del_a") -> TestClient autenticado con ese usuario."""

    def _factory(role: Optional[Role], delegate_id: Optional[str] = None, user_id: str = "u1") -> TestClient:
        user = make_user(role, delegate_id, user_id)
        app.dependency_overrides[get_db] = lambda: db
        app.dependency_overrides[get_current_user] = lambda: user
        return TestClient(app)

    yield _factory
    app.dependency_overrides.clear()


@pytest.fixture
def delegado_a(client_for) -> TestClient:
    return client_for(Role.DELEGADO, DEL_A)


@pytest.fixture
def superuser(client_for) -> TestClient:
    return client_for(Role.SUPERUSUARIO, None, user_id="root")
