"""결함 API 테스트 — 등록, 조회, 상태 변경.

Defect API tests — Registration with an optional photo, filtering and
the resolve / reopen transitions.
"""

import pytest_asyncio
from httpx import AsyncClient
from sqlalchemy.exc import SQLAlchemyError

from app.repositories.defect_repository import defect_repository
from tests.conftest import auth_header, photo, stored_files

URL = "/api/v1/app/defects/"
ADMIN = "/api/v1/admin/defects"


@pytest_asyncio.fixture
async def defect(client: AsyncClient, driver_token, vehicle) -> dict:
    res = await client.post(URL, data={
        "vehicle_id": str(vehicle.id),
        "description": "Farol esquerdo queimado",
        "severity": "moderado",
    }, headers=auth_header(driver_token))
    assert res.status_code == 201
    return res.json()


class TestDefectCreate:
    """결함 등록 테스트."""

    async def test_create_defaults(self, client: AsyncClient, driver_token, vehicle):
        res = await client.post(URL, data={
            "vehicle_id": str(vehicle.id),
            "description": "Retrovisor solto",
        }, headers=auth_header(driver_token))
        assert res.status_code == 201
        data = res.json()
        assert data["severity"] == "leve"
        assert data["status"] == "aberto"
        assert data["vehicle_plate"] == "ABC1D23"
        assert data["photo_url"] is None
        assert data["resolved_at"] is None

    async def test_create_with_photo(self, client: AsyncClient, driver_token, vehicle, uploads):
        res = await client.post(
            URL,
            data={"vehicle_id": str(vehicle.id), "description": "Pneu careca", "severity": "critico"},
            files=[photo("photo")],
            headers=auth_header(driver_token),
        )
        assert res.status_code == 201
        assert res.json()["photo_url"].startswith("http")
        assert len(stored_files(uploads)) == 1

    async def test_missing_description(self, client: AsyncClient, driver_token, vehicle):
        res = await client.post(URL, data={"vehicle_id": str(vehicle.id)}, headers=auth_header(driver_token))
        assert res.status_code == 400

    async def test_invalid_severity(self, client: AsyncClient, driver_token, vehicle):
        res = await client.post(URL, data={
            "vehicle_id": str(vehicle.id), "description": "x", "severity": "gravissimo",
        }, headers=auth_header(driver_token))
        assert res.status_code == 400
        assert res.json()["detail"] == "Gravidade inválida: gravissimo"

    async def test_unknown_checklist(self, client: AsyncClient, driver_token, vehicle):
        res = await client.post(URL, data={
            "vehicle_id": str(vehicle.id),
            "description": "x",
            "checklist_id": "00000000-0000-0000-0000-000000000000",
        }, headers=auth_header(driver_token))
        assert res.status_code == 404

    async def test_failed_insert_removes_photo(
        self, client: AsyncClient, driver_token, vehicle, uploads, monkeypatch
    ):
        """레코드 생성 실패 → 사진 삭제."""
        vehicle_id = str(vehicle.id)

        async def failing_create(session, data):
            raise SQLAlchemyError("boom")

        monkeypatch.setattr(defect_repository, "create", failing_create)
        res = await client.post(
            URL,
            data={"vehicle_id": vehicle_id, "description": "Pneu careca"},
            files=[photo("photo")],
            headers=auth_header(driver_token),
        )
        assert res.status_code == 500
        assert res.json()["detail"] == "Erro ao registrar defeito"
        assert stored_files(uploads) == []


class TestDefectListing:
    """결함 목록 테스트."""

    async def test_filters(self, client: AsyncClient, driver_token, defect, vehicle):
        await client.post(URL, data={
            "vehicle_id": str(vehicle.id), "description": "Buzina falhando", "severity": "leve",
        }, headers=auth_header(driver_token))

        res = await client.get(URL, headers=auth_header(driver_token))
        assert len(res.json()) == 2

        res = await client.get(URL, params={"severity": "moderado"}, headers=auth_header(driver_token))
        assert [d["id"] for d in res.json()] == [defect["id"]]

    async def test_detail(self, client: AsyncClient, driver_token, defect):
        res = await client.get(f"{URL}{defect['id']}", headers=auth_header(driver_token))
        assert res.status_code == 200
        assert res.json()["description"] == "Farol esquerdo queimado"

    async def test_open_defect_on_vehicle_detail(self, client: AsyncClient, driver_token, defect):
        res = await client.get(f"/api/v1/app/vehicles/{defect['vehicle_id']}", headers=auth_header(driver_token))
        assert [d["id"] for d in res.json()["open_defects"]] == [defect["id"]]


class TestDefectUpdate:
    """결함 상태 변경 테스트."""

    async def test_resolve_stamps_and_reopen_clears(self, client: AsyncClient, manager_token, manager_user, defect):
        manager_id = str(manager_user.id)
        res = await client.patch(
            f"{ADMIN}/{defect['id']}", json={"status": "resolvido"}, headers=auth_header(manager_token)
        )
        assert res.status_code == 200
        data = res.json()
        assert data["status"] == "resolvido"
        assert data["resolved_at"] is not None
        assert data["resolved_by"] == manager_id

        res = await client.patch(
            f"{ADMIN}/{defect['id']}", json={"status": "aberto"}, headers=auth_header(manager_token)
        )
        data = res.json()
        assert data["status"] == "aberto"
        assert data["resolved_at"] is None
        assert data["resolved_by"] is None

    async def test_change_severity(self, client: AsyncClient, manager_token, defect):
        res = await client.patch(
            f"{ADMIN}/{defect['id']}", json={"severity": "critico"}, headers=auth_header(manager_token)
        )
        assert res.json()["severity"] == "critico"
        assert res.json()["status"] == "aberto"

    async def test_invalid_status(self, client: AsyncClient, manager_token, defect):
        res = await client.patch(
            f"{ADMIN}/{defect['id']}", json={"status": "fechado"}, headers=auth_header(manager_token)
        )
        assert res.status_code == 422

    async def test_driver_cannot_update(self, client: AsyncClient, driver_token, defect):
        res = await client.patch(
            f"{ADMIN}/{defect['id']}", json={"status": "resolvido"}, headers=auth_header(driver_token)
        )
        assert res.status_code == 403

    async def test_resolved_hidden_from_vehicle_detail(self, client: AsyncClient, manager_token, driver_token, defect):
        await client.patch(f"{ADMIN}/{defect['id']}", json={"status": "resolvido"}, headers=auth_header(manager_token))
        res = await client.get(f"/api/v1/app/vehicles/{defect['vehicle_id']}", headers=auth_header(driver_token))
        assert res.json()["open_defects"] == []
