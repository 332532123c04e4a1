"""체크리스트 템플릿 서비스 — 템플릿/항목 CRUD 비즈니스 로직.

Checklist Template Service — Business logic for template and item management,
default-template resolution and item reordering.
"""

from typing import Sequence
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.models.checklist import Checklist, ChecklistTemplate, ChecklistTemplateItem
from app.repositories.checklist_repository import checklist_repository
from app.repositories.template_repository import template_repository
from app.schemas.checklist import (
    TemplateCreate,
    TemplateItemCreate,
    TemplateItemResponse,
    TemplateItemUpdate,
    TemplateResponse,
    TemplateUpdate,
)
from app.services.checklist_state import MODE_ITEMS, STATUS_COMPLETED, build_fill_state, item_entries
from app.utils.errors import to_data_layer_error
from app.utils.exceptions import BadRequestError, DuplicateError, NotFoundError


class TemplateService:
    """체크리스트 템플릿 서비스.

    Checklist template service providing template and item business logic.
    """

    def _item_response(self, item: ChecklistTemplateItem) -> TemplateItemResponse:
        return TemplateItemResponse(
            id=str(item.id),
            name=item.name,
            description=item.description,
            sort_order=item.sort_order,
        )

    def _to_response(self, template: ChecklistTemplate) -> TemplateResponse:
        """템플릿 모델을 응답으로 변환 — items가 로드되어 있어야 합니다."""
        items: list[ChecklistTemplateItem] = sorted(template.items, key=lambda i: i.sort_order)
        return TemplateResponse(
            id=str(template.id),
            name=template.name,
            description=template.description,
            item_count=len(items),
            items=[self._item_response(i) for i in items],
        )

    async def _get_or_raise(self, db: AsyncSession, template_id: UUID) -> ChecklistTemplate:
        template: ChecklistTemplate | None = await template_repository.get_with_items(db, template_id)
        if template is None:
            raise NotFoundError("Template de checklist não encontrado")
        return template

    async def list_templates(self, db: AsyncSession) -> list[TemplateResponse]:
        """이름 순 템플릿 목록 — Templates ordered by name."""
        templates: Sequence[ChecklistTemplate] = await template_repository.list_with_items(db)
        return [self._to_response(t) for t in templates]

    async def get_template(self, db: AsyncSession, template_id: UUID) -> TemplateResponse:
        return self._to_response(await self._get_or_raise(db, template_id))

    async def get_default_template(self, db: AsyncSession) -> TemplateResponse:
        """기본 템플릿 조회 — 지정 이름 우선, 없으면 이름 순 첫 번째.

        Resolve the default template: the one named DEFAULT_TEMPLATE_NAME,
        else the first template by name.

        Raises:
            NotFoundError: 템플릿이 하나도 없을 때 (No template exists)
        """
        template = await template_repository.get_default(db, settings.DEFAULT_TEMPLATE_NAME)
        if template is None:
            raise NotFoundError("Nenhum template de checklist cadastrado")
        return self._to_response(template)

    async def create_template(self, db: AsyncSession, data: TemplateCreate) -> TemplateResponse:
        """템플릿을 생성합니다 — 항목이 주어지면 순서대로 함께 생성.

        Create a template, with its items in the given order.

        Raises:
            DuplicateError: 같은 이름의 템플릿이 존재할 때 (Name already used)
        """
        name: str = data.name.strip()
        if await template_repository.name_taken(db, name):
            raise DuplicateError("Já existe um template com este nome.")
        try:
            template: ChecklistTemplate = await template_repository.create(
                db, {"name": name, "description": data.description}
            )
            for index, item in enumerate(data.items):
                await template_repository.create_item(db, {
                    "template_id": template.id,
                    "name": item.name.strip(),
                    "description": item.description,
                    "sort_order": item.sort_order if item.sort_order is not None else index,
                })
        except SQLAlchemyError as exc:
            raise to_data_layer_error(exc, "Erro ao criar template") from exc
        return await self.get_template_fresh(db, template.id)

    async def get_template_fresh(self, db: AsyncSession, template_id: UUID) -> TemplateResponse:
        """변경 직후 재조회 — Re-read after a write so the item collection is current."""
        template: ChecklistTemplate | None = await template_repository.get_with_items(db, template_id)
        if template is None:
            raise NotFoundError("Template de checklist não encontrado")
        await db.refresh(template, attribute_names=["items"])
        return self._to_response(template)

    async def update_template(
        self,
        db: AsyncSession,
        template_id: UUID,
        data: TemplateUpdate,
    ) -> TemplateResponse:
        template: ChecklistTemplate = await self._get_or_raise(db, template_id)
        update_data: dict = data.model_dump(exclude_unset=True, exclude_none=True)
        if "name" in update_data:
            update_data["name"] = update_data["name"].strip()
            if await template_repository.name_taken(db, update_data["name"], exclude_id=template.id):
                raise DuplicateError("Já existe um template com este nome.")
        await template_repository.update(db, template_id, update_data)
        return await self.get_template_fresh(db, template_id)

    async def delete_template(self, db: AsyncSession, template_id: UUID) -> None:
        """템플릿을 삭제합니다 — 체크리스트가 사용 중이면 거부.

        Delete a template. Rejected while any checklist references it.
        """
        await self._get_or_raise(db, template_id)
        in_use: int = await checklist_repository.count(db, Checklist.template_id == template_id)
        if in_use > 0:
            raise BadRequestError("Template em uso por checklists existentes")
        await template_repository.delete(db, template_id)

    # --- 항목 (Items) ---

    async def _refresh_open_checklists(self, db: AsyncSession, template_id: UUID) -> None:
        """항목 변경 후 미승인 항목 방식 체크리스트의 종합 상태 재계산.

        Recompute the aggregate status of every unapproved item-mode
        checklist on this template after its item set changed.
        """
        checklists: Sequence[Checklist] = await checklist_repository.list_open_for_template(
            db, template_id, MODE_ITEMS, STATUS_COMPLETED
        )
        for checklist in checklists:
            checklist.status = build_fill_state(item_entries(checklist.template.items, checklist.responses)).status
        await db.flush()

    async def add_item(
        self,
        db: AsyncSession,
        template_id: UUID,
        data: TemplateItemCreate,
    ) -> TemplateItemResponse:
        """항목 추가 — sort_order 미지정 시 마지막에 추가 (Appended when no order is given)."""
        await self._get_or_raise(db, template_id)
        sort_order: int = (
            data.sort_order if data.sort_order is not None
            else await template_repository.next_sort_order(db, template_id)
        )
        item: ChecklistTemplateItem = await template_repository.create_item(db, {
            "template_id": template_id,
            "name": data.name.strip(),
            "description": data.description,
            "sort_order": sort_order,
        })
        await self._refresh_open_checklists(db, template_id)
        return self._item_response(item)

    async def update_item(
        self,
        db: AsyncSession,
        template_id: UUID,
        item_id: UUID,
        data: TemplateItemUpdate,
    ) -> TemplateItemResponse:
        item: ChecklistTemplateItem | None = await template_repository.get_item(db, template_id, item_id)
        if item is None:
            raise NotFoundError("Item do template não encontrado")
        updated = await template_repository.update_item(db, item, data.model_dump(exclude_unset=True))
        return self._item_response(updated)

    async def delete_item(self, db: AsyncSession, template_id: UUID, item_id: UUID) -> None:
        """항목 삭제 — 이미 응답이 기록된 항목은 거부.

        Delete an item. Rejected once any checklist has answered it, so
        recorded inspections keep their responses.
        """
        item: ChecklistTemplateItem | None = await template_repository.get_item(db, template_id, item_id)
        if item is None:
            raise NotFoundError("Item do template não encontrado")
        if await checklist_repository.count_item_responses(db, item_id) > 0:
            raise BadRequestError("Item já respondido em checklists existentes")
        await template_repository.delete_item(db, item)
        await self._refresh_open_checklists(db, template_id)

    async def reorder_items(
        self,
        db: AsyncSession,
        template_id: UUID,
        item_ids: list[str],
    ) -> TemplateResponse:
        """항목 순서 재배치 — 템플릿의 모든 항목이 정확히 한 번씩 있어야 합니다.

        Reorder items; the list must contain every item of the template once.
        """
        template: ChecklistTemplate = await self._get_or_raise(db, template_id)
        try:
            ordered: list[UUID] = [UUID(value) for value in item_ids]
        except ValueError:
            raise BadRequestError("ID de item inválido")
        if sorted(ordered) != sorted(item.id for item in template.items):
            raise BadRequestError("A lista deve conter todos os itens do template")
        await template_repository.reorder_items(db, template_id, ordered)
        return await self.get_template_fresh(db, template_id)


# 싱글턴 인스턴스 — Singleton instance
template_service: TemplateService = TemplateService()
