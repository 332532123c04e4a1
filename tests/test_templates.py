"""체크리스트 템플릿 API 테스트.

Checklist template API tests — Default template, CRUD, items and reorder.
"""

import json

from httpx import AsyncClient

from tests.conftest import auth_header, template_item_ids

ADMIN = "/api/v1/admin/checklist-templates"
APP = "/api/v1/app/checklist-templates"
CHECKLISTS = "/api/v1/app/checklists/"


class TestTemplateRead:
    """템플릿 조회 테스트."""

    async def test_default_template(self, client: AsyncClient, driver_token, template):
        res = await client.get(f"{APP}/default", headers=auth_header(driver_token))
        assert res.status_code == 200
        data = res.json()
        assert data["id"] == str(template.id)
        assert data["item_count"] == 3
        assert [i["name"] for i in data["items"]] == ["Pneus", "Freios", "Faróis"]

    async def test_default_falls_back_to_first_by_name(self, client: AsyncClient, manager_token, driver_token):
        await client.post(f"{ADMIN}/", json={"name": "Van"}, headers=auth_header(manager_token))
        await client.post(f"{ADMIN}/", json={"name": "Caminhão"}, headers=auth_header(manager_token))
        res = await client.get(f"{APP}/default", headers=auth_header(driver_token))
        assert res.json()["name"] == "Caminhão"

    async def test_no_template(self, client: AsyncClient, driver_token):
        res = await client.get(f"{APP}/default", headers=auth_header(driver_token))
        assert res.status_code == 404

    async def test_list(self, client: AsyncClient, driver_token, template):
        res = await client.get(f"{APP}/", headers=auth_header(driver_token))
        assert res.status_code == 200
        assert [t["name"] for t in res.json()] == [template.name]


class TestTemplateCRUD:
    """템플릿 CRUD 테스트."""

    async def test_create_with_items(self, client: AsyncClient, manager_token):
        res = await client.post(f"{ADMIN}/", json={
            "name": "Inspeção de Moto",
            "items": [{"name": "Corrente"}, {"name": "Capacete", "description": "Viseira e cinta"}],
        }, headers=auth_header(manager_token))
        assert res.status_code == 201
        data = res.json()
        assert data["item_count"] == 2
        assert [(i["name"], i["sort_order"]) for i in data["items"]] == [("Corrente", 0), ("Capacete", 1)]

    async def test_duplicate_name(self, client: AsyncClient, manager_token, template):
        res = await client.post(f"{ADMIN}/", json={"name": template.name}, headers=auth_header(manager_token))
        assert res.status_code == 409

    async def test_update(self, client: AsyncClient, manager_token, template):
        res = await client.put(
            f"{ADMIN}/{template.id}", json={"description": "Atualizado"}, headers=auth_header(manager_token)
        )
        assert res.status_code == 200
        assert res.json()["description"] == "Atualizado"

    async def test_delete_unused(self, client: AsyncClient, manager_token, driver_token, template):
        template_id = str(template.id)
        res = await client.delete(f"{ADMIN}/{template_id}", headers=auth_header(manager_token))
        assert res.status_code == 200
        res = await client.get(f"{APP}/{template_id}", headers=auth_header(driver_token))
        assert res.status_code == 404

    async def test_delete_in_use(self, client: AsyncClient, manager_token, driver_token, template, vehicle):
        """체크리스트가 사용 중인 템플릿은 삭제 불가."""
        await client.post("/api/v1/app/checklists/", data={
            "vehicle_id": str(vehicle.id),
            "odometer_start": "100",
            "operator_name": "Marcos",
            "operator_badge": "M-1",
            "sections": json.dumps({}),
        }, headers=auth_header(driver_token))
        res = await client.delete(f"{ADMIN}/{template.id}", headers=auth_header(manager_token))
        assert res.status_code == 400

    async def test_driver_cannot_create(self, client: AsyncClient, driver_token):
        res = await client.post(f"{ADMIN}/", json={"name": "X"}, headers=auth_header(driver_token))
        assert res.status_code == 403


class TestTemplateItems:
    """템플릿 항목 테스트."""

    async def test_add_item_appends(self, client: AsyncClient, manager_token, template):
        res = await client.post(
            f"{ADMIN}/{template.id}/items", json={"name": "Extintor"}, headers=auth_header(manager_token)
        )
        assert res.status_code == 201
        assert res.json()["sort_order"] == 3

    async def test_update_item(self, client: AsyncClient, db, manager_token, template):
        item_ids = await template_item_ids(db, template)
        res = await client.put(
            f"{ADMIN}/{template.id}/items/{item_ids[0]}",
            json={"name": "Pneus e estepe"},
            headers=auth_header(manager_token),
        )
        assert res.status_code == 200
        assert res.json()["name"] == "Pneus e estepe"

    async def test_delete_item(self, client: AsyncClient, db, manager_token, driver_token, template):
        item_ids = await template_item_ids(db, template)
        res = await client.delete(f"{ADMIN}/{template.id}/items/{item_ids[1]}", headers=auth_header(manager_token))
        assert res.status_code == 200
        detail = await client.get(f"{APP}/{template.id}", headers=auth_header(driver_token))
        assert [i["name"] for i in detail.json()["items"]] == ["Pneus", "Faróis"]

    async def test_reorder(self, client: AsyncClient, db, manager_token, template):
        item_ids = await template_item_ids(db, template)
        res = await client.put(
            f"{ADMIN}/{template.id}/items/reorder",
            json={"item_ids": list(reversed(item_ids))},
            headers=auth_header(manager_token),
        )
        assert res.status_code == 200
        assert [i["name"] for i in res.json()["items"]] == ["Faróis", "Freios", "Pneus"]

    async def test_reorder_requires_every_item(self, client: AsyncClient, db, manager_token, template):
        item_ids = await template_item_ids(db, template)
        res = await client.put(
            f"{ADMIN}/{template.id}/items/reorder",
            json={"item_ids": item_ids[:2]},
            headers=auth_header(manager_token),
        )
        assert res.status_code == 400


class TestItemChangesOnOpenChecklists:
    """사용 중인 템플릿의 항목 변경 → 체크리스트 상태 재계산."""

    async def _answered_checklist(self, client: AsyncClient, db, token, vehicle, template, answers) -> str:
        res = await client.post(CHECKLISTS, data={
            "vehicle_id": str(vehicle.id),
            "odometer_start": "45100",
            "operator_name": "Marcos",
            "operator_badge": "M-1",
            "template_id": str(template.id),
            "inspection_mode": "items",
        }, headers=auth_header(token))
        checklist_id = res.json()["id"]
        item_ids = await template_item_ids(db, template)
        for item_id, conforming in zip(item_ids, answers):
            await client.post(
                f"{CHECKLISTS}{checklist_id}/responses",
                data={"item_id": item_id, "is_conforming": conforming},
                headers=auth_header(token),
            )
        return checklist_id

    async def test_added_item_reopens_completed_answers(
        self, client: AsyncClient, db, manager_token, driver_token, vehicle, template
    ):
        """모두 적합(ok) 후 항목 추가 → pendente, 새 항목이 다음 순서."""
        checklist_id = await self._answered_checklist(
            client, db, driver_token, vehicle, template, ("true", "true", "true")
        )
        res = await client.post(
            f"{ADMIN}/{template.id}/items", json={"name": "Extintor"}, headers=auth_header(manager_token)
        )
        assert res.status_code == 201

        fill = (await client.get(f"{CHECKLISTS}{checklist_id}/fill", headers=auth_header(driver_token))).json()
        assert fill["status"] == "pendente"
        assert fill["total"] == 4
        assert fill["current"]["label"] == "Extintor"

    async def test_answered_item_cannot_be_deleted(
        self, client: AsyncClient, db, manager_token, driver_token, vehicle, template
    ):
        """응답이 있는 항목 삭제 → 400, 응답 유지."""
        checklist_id = await self._answered_checklist(
            client, db, driver_token, vehicle, template, ("true", "true", "false")
        )
        item_ids = await template_item_ids(db, template)
        res = await client.delete(f"{ADMIN}/{template.id}/items/{item_ids[2]}", headers=auth_header(manager_token))
        assert res.status_code == 400
        assert res.json()["detail"] == "Item já respondido em checklists existentes"

        detail = (await client.get(f"{CHECKLISTS}{checklist_id}", headers=auth_header(driver_token))).json()
        assert detail["status"] == "com_defeito"
        assert [r["is_conforming"] for r in detail["responses"]] == [True, True, False]

    async def test_deleting_last_pending_item_settles_status(
        self, client: AsyncClient, db, manager_token, driver_token, vehicle, template
    ):
        """미응답 항목만 삭제 → 나머지가 모두 적합이면 ok."""
        checklist_id = await self._answered_checklist(
            client, db, driver_token, vehicle, template, ("true", "true")
        )
        item_ids = await template_item_ids(db, template)
        res = await client.delete(f"{ADMIN}/{template.id}/items/{item_ids[2]}", headers=auth_header(manager_token))
        assert res.status_code == 200

        detail = (await client.get(f"{CHECKLISTS}{checklist_id}", headers=auth_header(driver_token))).json()
        assert detail["status"] == "ok"
