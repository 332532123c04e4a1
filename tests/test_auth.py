"""인증 API 테스트.

Auth API tests — Login, refresh rotation, logout and /me.
"""

from httpx import AsyncClient

from app.services.role_service import role_cache
from tests.conftest import auth_header

URL = "/api/v1/auth"


async def login(client: AsyncClient, email: str, password: str = "senha123"):
    return await client.post(f"{URL}/login", json={"email": email, "password": password})


class TestLogin:
    """로그인 테스트."""

    async def test_login_success(self, client: AsyncClient, driver_user):
        res = await login(client, "motorista@frota.com")
        assert res.status_code == 200
        data = res.json()
        assert data["token_type"] == "bearer"
        assert data["access_token"]
        assert data["refresh_token"]

    async def test_login_wrong_password(self, client: AsyncClient, driver_user):
        """잘못된 비밀번호 → 401 + 종류별 메시지."""
        res = await login(client, "motorista@frota.com", "errada")
        assert res.status_code == 401
        assert res.json() == {"detail": "Email ou senha incorretos.", "kind": "invalid_credentials"}

    async def test_login_unknown_email(self, client: AsyncClient):
        res = await login(client, "ninguem@frota.com")
        assert res.status_code == 401
        assert res.json()["kind"] == "invalid_credentials"

    async def test_login_invalidates_cached_role(self, client: AsyncClient, driver_user):
        """로그인 시 캐시된 역할 제거."""
        role_cache.set(driver_user.id, "administrador")
        await login(client, "motorista@frota.com")
        assert role_cache.get(driver_user.id) is None


class TestRefreshAndLogout:
    """토큰 갱신/로그아웃 테스트."""

    async def test_refresh_rotates_token(self, client: AsyncClient, driver_user):
        tokens = (await login(client, "motorista@frota.com")).json()
        res = await client.post(f"{URL}/refresh", json={"refresh_token": tokens["refresh_token"]})
        assert res.status_code == 200
        assert res.json()["refresh_token"] != tokens["refresh_token"]

        # 이전 토큰은 재사용 불가 — The old refresh token is revoked
        again = await client.post(f"{URL}/refresh", json={"refresh_token": tokens["refresh_token"]})
        assert again.status_code == 401

    async def test_refresh_invalid(self, client: AsyncClient):
        res = await client.post(f"{URL}/refresh", json={"refresh_token": "not-a-token"})
        assert res.status_code == 401

    async def test_logout_revokes_and_invalidates(self, client: AsyncClient, driver_user):
        tokens = (await login(client, "motorista@frota.com")).json()
        role_cache.set(driver_user.id, "motorista")

        res = await client.post(f"{URL}/logout", json={"refresh_token": tokens["refresh_token"]})
        assert res.status_code == 204
        assert role_cache.get(driver_user.id) is None

        res = await client.post(f"{URL}/refresh", json={"refresh_token": tokens["refresh_token"]})
        assert res.status_code == 401


class TestMe:
    """내 정보 조회 테스트."""

    async def test_me_with_role(self, client: AsyncClient, manager_token):
        res = await client.get(f"{URL}/me", headers=auth_header(manager_token))
        assert res.status_code == 200
        data = res.json()
        assert data["email"] == "gestor@frota.com"
        assert data["full_name"] == "Gabriel Gestor"
        assert data["role"] == "gestor"

    async def test_me_without_role(self, client: AsyncClient, roleless_token):
        """역할 없음 → role None (403 아님)."""
        res = await client.get(f"{URL}/me", headers=auth_header(roleless_token))
        assert res.status_code == 200
        assert res.json()["role"] is None

    async def test_me_rejects_refresh_token(self, client: AsyncClient, driver_user):
        tokens = (await login(client, "motorista@frota.com")).json()
        res = await client.get(f"{URL}/me", headers=auth_header(tokens["refresh_token"]))
        assert res.status_code == 401

    async def test_me_requires_token(self, client: AsyncClient):
        res = await client.get(f"{URL}/me")
        assert res.status_code in (401, 403)
