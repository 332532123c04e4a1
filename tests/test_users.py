"""사용자 관리 API 테스트 (관리자 전용).

User management API tests — Creation of account + profile + role with
compensation on failure, listing, role change and promotion.
"""

from httpx import AsyncClient
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError

from app.models import Profile, User
from app.repositories.role_repository import role_repository
from app.services.role_service import role_cache
from tests.conftest import auth_header, make_token

URL = "/api/v1/admin/users"


def new_user(**overrides) -> dict:
    payload = {
        "email": "Novo@Frota.com",
        "password": "senha123",
        "full_name": "Nina Nova",
        "role": "motorista",
    }
    payload.update(overrides)
    return payload


class TestUserCreate:
    """사용자 생성 테스트."""

    async def test_create_user(self, client: AsyncClient, admin_token):
        res = await client.post(f"{URL}/", json=new_user(phone="+55 11 99999-0000"), headers=auth_header(admin_token))
        assert res.status_code == 201
        data = res.json()
        assert data["email"] == "novo@frota.com"
        assert data["full_name"] == "Nina Nova"
        assert data["role"] == "motorista"
        assert data["phone"] == "+55 11 99999-0000"

    async def test_created_user_can_log_in(self, client: AsyncClient, admin_token):
        await client.post(f"{URL}/", json=new_user(role="gestor"), headers=auth_header(admin_token))
        res = await client.post("/api/v1/auth/login", json={"email": "novo@frota.com", "password": "senha123"})
        assert res.status_code == 200

        me = await client.get("/api/v1/auth/me", headers=auth_header(res.json()["access_token"]))
        assert me.json()["role"] == "gestor"

    async def test_duplicate_email(self, client: AsyncClient, admin_token, driver_user):
        res = await client.post(
            f"{URL}/", json=new_user(email="MOTORISTA@frota.com"), headers=auth_header(admin_token)
        )
        assert res.status_code == 409

    async def test_invalid_role(self, client: AsyncClient, admin_token):
        res = await client.post(f"{URL}/", json=new_user(role="dono"), headers=auth_header(admin_token))
        assert res.status_code == 422

    async def test_role_failure_undoes_account_and_profile(
        self, client: AsyncClient, db, admin_token, monkeypatch
    ):
        """역할 저장 실패 → 계정/프로필 삭제, 타입 오류 반환."""
        async def failing_set_role(session, user_id, role):
            raise SQLAlchemyError("boom")

        monkeypatch.setattr(role_repository, "set_role", failing_set_role)
        res = await client.post(f"{URL}/", json=new_user(), headers=auth_header(admin_token))
        assert res.status_code == 500
        assert res.json() == {"detail": "Erro ao criar usuário", "kind": "unknown"}

        users = (await db.execute(
            select(func.count()).select_from(User).where(User.email == "novo@frota.com")
        )).scalar()
        profiles = (await db.execute(
            select(func.count()).select_from(Profile).where(Profile.full_name == "Nina Nova")
        )).scalar()
        assert users == 0
        assert profiles == 0

    async def test_manager_cannot_create(self, client: AsyncClient, manager_token):
        res = await client.post(f"{URL}/", json=new_user(), headers=auth_header(manager_token))
        assert res.status_code == 403


class TestUserRoles:
    """사용자 역할 변경 테스트."""

    async def test_list_users(self, client: AsyncClient, admin_token, driver_user, roleless_user):
        res = await client.get(f"{URL}/", headers=auth_header(admin_token))
        assert res.status_code == 200
        roles = {u["email"]: u["role"] for u in res.json()}
        assert roles["motorista@frota.com"] == "motorista"
        assert roles["admin@frota.com"] == "administrador"
        # 역할 행이 없으면 motorista로 표시 — Users without a role row list as motorista
        assert roles["semrole@frota.com"] == "motorista"

    async def test_change_role_invalidates_cache(self, client: AsyncClient, admin_token, driver_user):
        """역할 변경 즉시 반영 (캐시 무효화)."""
        driver_id = str(driver_user.id)
        driver_token = make_token(driver_user)
        res = await client.get("/api/v1/app/vehicles/", headers=auth_header(driver_token))
        assert res.status_code == 200
        assert role_cache.get(driver_user.id) == "motorista"

        res = await client.patch(
            f"{URL}/{driver_id}/role", json={"role": "gestor"}, headers=auth_header(admin_token)
        )
        assert res.status_code == 200
        assert res.json()["role"] == "gestor"

        res = await client.get("/api/v1/app/reports/veiculos", headers=auth_header(driver_token))
        assert res.status_code == 200

    async def test_assign_role_to_roleless_user(self, client: AsyncClient, admin_token, roleless_user):
        res = await client.patch(
            f"{URL}/{roleless_user.id}/role", json={"role": "gestor"}, headers=auth_header(admin_token)
        )
        assert res.status_code == 200
        assert res.json()["role"] == "gestor"

    async def test_promote_driver(self, client: AsyncClient, admin_token, driver_user):
        res = await client.post(f"{URL}/{driver_user.id}/promote", headers=auth_header(admin_token))
        assert res.status_code == 200
        assert res.json()["role"] == "gestor"

    async def test_promote_manager_rejected(self, client: AsyncClient, admin_token, manager_user):
        res = await client.post(f"{URL}/{manager_user.id}/promote", headers=auth_header(admin_token))
        assert res.status_code == 400

    async def test_unknown_user(self, client: AsyncClient, admin_token):
        res = await client.patch(
            f"{URL}/00000000-0000-0000-0000-000000000000/role",
            json={"role": "gestor"},
            headers=auth_header(admin_token),
        )
        assert res.status_code == 404
        assert res.json()["kind"] == "user_not_found"
