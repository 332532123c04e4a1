"""역할 조회/캐시 및 권한 계층 테스트.

Role resolution tests — TTL cache, fast path and table fallback, and the
role gates on the API.
"""

import uuid
from unittest.mock import AsyncMock, MagicMock

import pytest
from httpx import AsyncClient
from sqlalchemy.exc import DBAPIError

from app.repositories.role_repository import role_repository
from app.services.role_service import RoleCache, RoleResolver, role_satisfies
from tests.conftest import auth_header


class FakeClock:
    def __init__(self) -> None:
        self.now: float = 1000.0

    def __call__(self) -> float:
        return self.now


def fake_session(dialect: str) -> MagicMock:
    session = MagicMock()
    session.get_bind.return_value.dialect.name = dialect
    return session


class TestRoleCache:
    """역할 캐시 테스트."""

    def test_entry_expires_after_ttl(self):
        clock = FakeClock()
        cache = RoleCache(300, clock=clock)
        user_id = uuid.uuid4()
        cache.set(user_id, "gestor")

        clock.now += 299
        assert cache.get(user_id) == "gestor"
        clock.now += 1
        assert cache.get(user_id) is None
        assert len(cache) == 0

    def test_invalidate(self):
        cache = RoleCache(300, clock=FakeClock())
        user_id = uuid.uuid4()
        cache.set(user_id, "motorista")
        cache.invalidate(user_id)
        assert cache.get(user_id) is None


class TestRoleHierarchy:
    """역할 계층 테스트."""

    @pytest.mark.parametrize("role,level,expected", [
        ("administrador", 1, True),
        ("gestor", 1, False),
        ("gestor", 2, True),
        ("administrador", 2, True),
        ("motorista", 2, False),
        ("motorista", 3, True),
        (None, 3, False),
        ("visitante", 3, False),
    ])
    def test_role_satisfies(self, role, level, expected):
        assert role_satisfies(role, level) is expected


class TestRoleResolver:
    """역할 조회 경로 테스트."""

    async def test_fast_path_on_postgresql(self, monkeypatch):
        """PostgreSQL에서는 SQL 함수로 조회, 결과 캐시."""
        fast = AsyncMock(return_value="gestor")
        table = AsyncMock(return_value="motorista")
        monkeypatch.setattr(role_repository, "call_role_function", fast)
        monkeypatch.setattr(role_repository, "get_role_name", table)

        resolver = RoleResolver(RoleCache(300, clock=FakeClock()))
        user_id = uuid.uuid4()
        session = fake_session("postgresql")

        assert await resolver.resolve_role(session, user_id) == "gestor"
        assert await resolver.resolve_role(session, user_id) == "gestor"
        fast.assert_awaited_once()
        table.assert_not_awaited()

    async def test_falls_back_when_function_fails(self, monkeypatch):
        """SQL 함수 실패 → 테이블 직접 조회."""
        fast = AsyncMock(side_effect=DBAPIError("SELECT get_current_user_role(...)", {}, Exception("missing")))
        table = AsyncMock(return_value="motorista")
        monkeypatch.setattr(role_repository, "call_role_function", fast)
        monkeypatch.setattr(role_repository, "get_role_name", table)

        resolver = RoleResolver(RoleCache(300, clock=FakeClock()))
        assert await resolver.resolve_role(fake_session("postgresql"), uuid.uuid4()) == "motorista"
        table.assert_awaited_once()

    async def test_table_read_on_other_databases(self, monkeypatch):
        fast = AsyncMock(return_value="gestor")
        monkeypatch.setattr(role_repository, "call_role_function", fast)
        monkeypatch.setattr(role_repository, "get_role_name", AsyncMock(return_value="administrador"))

        resolver = RoleResolver(RoleCache(300, clock=FakeClock()))
        assert await resolver.resolve_role(fake_session("sqlite"), uuid.uuid4()) == "administrador"
        fast.assert_not_awaited()

    async def test_missing_role_not_cached(self, monkeypatch):
        """역할 없음은 캐시하지 않음."""
        table = AsyncMock(return_value=None)
        monkeypatch.setattr(role_repository, "get_role_name", table)

        cache = RoleCache(300, clock=FakeClock())
        resolver = RoleResolver(cache)
        user_id = uuid.uuid4()
        assert await resolver.resolve_role(fake_session("sqlite"), user_id) is None
        assert await resolver.resolve_role(fake_session("sqlite"), user_id) is None
        assert len(cache) == 0
        assert table.await_count == 2

    async def test_stale_role_until_expiry(self, monkeypatch):
        """TTL 내에서는 캐시된 역할, 만료 후 재조회."""
        table = AsyncMock(side_effect=["motorista", "gestor"])
        monkeypatch.setattr(role_repository, "get_role_name", table)

        clock = FakeClock()
        resolver = RoleResolver(RoleCache(300, clock=clock))
        user_id = uuid.uuid4()
        session = fake_session("sqlite")

        assert await resolver.resolve_role(session, user_id) == "motorista"
        clock.now += 100
        assert await resolver.resolve_role(session, user_id) == "motorista"
        clock.now += 300
        assert await resolver.resolve_role(session, user_id) == "gestor"

    async def test_sign_in_drops_cache(self, monkeypatch):
        table = AsyncMock(side_effect=["motorista", "administrador"])
        monkeypatch.setattr(role_repository, "get_role_name", table)

        resolver = RoleResolver(RoleCache(300, clock=FakeClock()))
        user_id = uuid.uuid4()
        session = fake_session("sqlite")
        assert await resolver.resolve_role(session, user_id) == "motorista"
        resolver.on_sign_in(user_id)
        assert await resolver.resolve_role(session, user_id) == "administrador"


class TestRoleGates:
    """API 권한 계층 테스트."""

    async def test_roleless_user_denied(self, client: AsyncClient, roleless_token):
        res = await client.get("/api/v1/app/vehicles/", headers=auth_header(roleless_token))
        assert res.status_code == 403

    async def test_driver_allowed_on_field_routes(self, client: AsyncClient, driver_token):
        res = await client.get("/api/v1/app/vehicles/", headers=auth_header(driver_token))
        assert res.status_code == 200

    async def test_driver_denied_manager_routes(self, client: AsyncClient, driver_token):
        res = await client.post(
            "/api/v1/admin/vehicles/",
            json={"plate": "XYZ9A87", "model": "Gol", "year": 2020},
            headers=auth_header(driver_token),
        )
        assert res.status_code == 403

    async def test_manager_denied_admin_routes(self, client: AsyncClient, manager_token):
        res = await client.get("/api/v1/admin/users/", headers=auth_header(manager_token))
        assert res.status_code == 403

    async def test_manager_allowed_manager_routes(self, client: AsyncClient, manager_token):
        res = await client.post(
            "/api/v1/admin/vehicles/",
            json={"plate": "XYZ9A87", "model": "Gol", "year": 2020},
            headers=auth_header(manager_token),
        )
        assert res.status_code == 201

    async def test_admin_inherits_everything(self, client: AsyncClient, admin_token):
        res = await client.get("/api/v1/admin/users/", headers=auth_header(admin_token))
        assert res.status_code == 200

    async def test_invalid_token(self, client: AsyncClient):
        res = await client.get("/api/v1/app/vehicles/", headers=auth_header("garbage"))
        assert res.status_code == 401
