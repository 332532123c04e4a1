"""차량 API 테스트 — 등록, 조회, 수정, 삭제, 사진, 서류.

Vehicle API tests — Registration, listing, detail, update, deletion,
vehicle photo and documents.
"""

import json

from httpx import AsyncClient

from app.config import settings
from tests.conftest import auth_header, photo, stored_files, template_item_ids

ADMIN = "/api/v1/admin/vehicles"
APP = "/api/v1/app/vehicles"


class TestVehicleCRUD:
    """차량 CRUD 테스트."""

    async def test_create_uppercases_plate(self, client: AsyncClient, manager_token):
        res = await client.post(f"{ADMIN}/", json={
            "plate": " bra2e19 ",
            "model": "VW Saveiro",
            "year": 2021,
            "current_mileage": 1200,
        }, headers=auth_header(manager_token))
        assert res.status_code == 201
        data = res.json()
        assert data["plate"] == "BRA2E19"
        assert data["current_mileage"] == 1200

    async def test_duplicate_plate(self, client: AsyncClient, manager_token, vehicle):
        """같은 번호판 (대소문자 무관) → 409."""
        res = await client.post(f"{ADMIN}/", json={
            "plate": "abc1d23", "model": "Outro", "year": 2020,
        }, headers=auth_header(manager_token))
        assert res.status_code == 409

    async def test_invalid_year(self, client: AsyncClient, manager_token):
        res = await client.post(f"{ADMIN}/", json={
            "plate": "AAA0A00", "model": "Gol", "year": 1800,
        }, headers=auth_header(manager_token))
        assert res.status_code == 422

    async def test_list_and_search(self, client: AsyncClient, manager_token, driver_token, vehicle):
        await client.post(f"{ADMIN}/", json={
            "plate": "QWE4R56", "model": "Chevrolet S10", "year": 2019,
        }, headers=auth_header(manager_token))

        res = await client.get(f"{APP}/", headers=auth_header(driver_token))
        assert res.status_code == 200
        assert [v["model"] for v in res.json()] == ["Chevrolet S10", "Fiat Strada"]

        res = await client.get(f"{APP}/", params={"search": "strada"}, headers=auth_header(driver_token))
        assert [v["plate"] for v in res.json()] == ["ABC1D23"]

    async def test_detail(self, client: AsyncClient, driver_token, vehicle):
        res = await client.get(f"{APP}/{vehicle.id}", headers=auth_header(driver_token))
        assert res.status_code == 200
        data = res.json()
        assert data["plate"] == "ABC1D23"
        assert data["recent_checklists"] == []
        assert data["open_defects"] == []
        assert data["documents"] == []

    async def test_detail_not_found(self, client: AsyncClient, driver_token):
        res = await client.get(f"{APP}/00000000-0000-0000-0000-000000000000", headers=auth_header(driver_token))
        assert res.status_code == 404

    async def test_update(self, client: AsyncClient, manager_token, vehicle):
        res = await client.put(f"{ADMIN}/{vehicle.id}", json={
            "model": "Fiat Strada Freedom", "current_mileage": 46000,
        }, headers=auth_header(manager_token))
        assert res.status_code == 200
        assert res.json()["model"] == "Fiat Strada Freedom"
        assert res.json()["current_mileage"] == 46000
        assert res.json()["plate"] == "ABC1D23"

    async def test_update_to_taken_plate(self, client: AsyncClient, manager_token, vehicle):
        other = await client.post(f"{ADMIN}/", json={
            "plate": "ZZZ1Z11", "model": "Gol", "year": 2018,
        }, headers=auth_header(manager_token))
        res = await client.put(
            f"{ADMIN}/{other.json()['id']}", json={"plate": "abc1d23"}, headers=auth_header(manager_token)
        )
        assert res.status_code == 409

    async def test_delete(self, client: AsyncClient, manager_token, driver_token, vehicle):
        vehicle_id = str(vehicle.id)
        res = await client.delete(f"{ADMIN}/{vehicle_id}", headers=auth_header(manager_token))
        assert res.status_code == 200
        assert res.json()["message"] == "Veículo excluído"

        res = await client.get(f"{APP}/{vehicle_id}", headers=auth_header(driver_token))
        assert res.status_code == 404


class TestVehicleFiles:
    """차량 사진/서류 테스트."""

    async def test_set_photo_replaces_previous(self, client: AsyncClient, manager_token, vehicle, uploads):
        url = f"{ADMIN}/{vehicle.id}/photo"
        first = await client.put(url, files=[photo("photo", "a.jpg")], headers=auth_header(manager_token))
        assert first.status_code == 200
        second = await client.put(url, files=[photo("photo", "b.jpg")], headers=auth_header(manager_token))
        assert second.status_code == 200
        assert second.json()["photo_url"] != first.json()["photo_url"]
        assert len(stored_files(uploads)) == 1

    async def test_add_and_list_documents(self, client: AsyncClient, manager_token, vehicle, uploads):
        res = await client.post(
            f"{ADMIN}/{vehicle.id}/documents",
            data={"doc_type": "CRLV", "expires_on": "2027-03-31"},
            files=[("file", ("crlv.pdf", b"%PDF-1.4 fake", "application/pdf"))],
            headers=auth_header(manager_token),
        )
        assert res.status_code == 201
        data = res.json()
        assert data["doc_type"] == "CRLV"
        assert data["expires_on"] == "2027-03-31"
        assert data["file_url"].endswith(".pdf")
        assert len(stored_files(uploads)) == 1

        listing = await client.get(f"{ADMIN}/{vehicle.id}/documents", headers=auth_header(manager_token))
        assert [d["id"] for d in listing.json()] == [data["id"]]

    async def test_delete_document_removes_file(self, client: AsyncClient, manager_token, vehicle, uploads):
        created = await client.post(
            f"{ADMIN}/{vehicle.id}/documents",
            data={"doc_type": "Seguro"},
            files=[("file", ("seguro.pdf", b"%PDF-1.4 fake", "application/pdf"))],
            headers=auth_header(manager_token),
        )
        res = await client.delete(
            f"{ADMIN}/{vehicle.id}/documents/{created.json()['id']}", headers=auth_header(manager_token)
        )
        assert res.status_code == 200
        assert stored_files(uploads) == []

    async def test_document_too_large(self, client: AsyncClient, manager_token, vehicle, uploads, monkeypatch):
        """최대 크기 초과 → 413, 저장 없음."""
        vehicle_id = str(vehicle.id)
        monkeypatch.setattr(settings, "MAX_UPLOAD_BYTES", 8)
        res = await client.post(
            f"{ADMIN}/{vehicle_id}/documents",
            data={"doc_type": "CRLV"},
            files=[("file", ("crlv.pdf", b"0123456789", "application/pdf"))],
            headers=auth_header(manager_token),
        )
        assert res.status_code == 413
        assert res.json()["kind"] == "file_too_large"
        assert stored_files(uploads) == []

    async def test_delete_vehicle_removes_files(self, client: AsyncClient, manager_token, vehicle, uploads):
        vehicle_id = str(vehicle.id)
        await client.put(f"{ADMIN}/{vehicle_id}/photo", files=[photo("photo")], headers=auth_header(manager_token))
        await client.post(
            f"{ADMIN}/{vehicle_id}/documents",
            data={"doc_type": "CRLV"},
            files=[("file", ("crlv.pdf", b"%PDF", "application/pdf"))],
            headers=auth_header(manager_token),
        )
        assert len(stored_files(uploads)) == 2

        res = await client.delete(f"{ADMIN}/{vehicle_id}", headers=auth_header(manager_token))
        assert res.status_code == 200
        assert stored_files(uploads) == []

    async def test_delete_vehicle_removes_inspection_photos(
        self, client: AsyncClient, db, manager_token, driver_token, vehicle, template, uploads
    ):
        """체크리스트 구역/항목 사진과 결함 사진도 함께 삭제."""
        vehicle_id = str(vehicle.id)
        token = auth_header(driver_token)
        await client.post("/api/v1/app/checklists/", data={
            "vehicle_id": vehicle_id,
            "odometer_start": "45100",
            "operator_name": "Marcos",
            "operator_badge": "M-1",
            "sections": json.dumps({"frente": {"status": "ok"}}),
        }, files=[photo("photos_frente")], headers=token)
        items = await client.post("/api/v1/app/checklists/", data={
            "vehicle_id": vehicle_id,
            "odometer_start": "45100",
            "operator_name": "Marcos",
            "operator_badge": "M-1",
            "template_id": str(template.id),
            "inspection_mode": "items",
        }, headers=token)
        item_ids = await template_item_ids(db, template)
        await client.post(
            f"/api/v1/app/checklists/{items.json()['id']}/responses",
            data={"item_id": item_ids[0], "is_conforming": "false"},
            files=[photo("photos")],
            headers=token,
        )
        await client.post(
            "/api/v1/app/defects/",
            data={"vehicle_id": vehicle_id, "description": "Pneu careca"},
            files=[photo("photo")],
            headers=token,
        )
        assert len(stored_files(uploads)) == 3

        res = await client.delete(f"{ADMIN}/{vehicle_id}", headers=auth_header(manager_token))
        assert res.status_code == 200
        assert stored_files(uploads) == []
