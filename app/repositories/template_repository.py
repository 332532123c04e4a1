"""체크리스트 템플릿 레포지토리 — 템플릿/항목 DB 쿼리 담당.

Checklist Template Repository — Handles template and template item queries,
including default-template resolution and item reordering.
"""

from typing import Sequence
from uuid import UUID

from sqlalchemy import Select, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.models.checklist import ChecklistTemplate, ChecklistTemplateItem
from app.repositories.base import BaseRepository


class TemplateRepository(BaseRepository[ChecklistTemplate]):
    """체크리스트 템플릿 레포지토리.

    Checklist template repository with item management operations.
    """

    def __init__(self) -> None:
        super().__init__(ChecklistTemplate)

    async def list_with_items(self, db: AsyncSession) -> Sequence[ChecklistTemplate]:
        """이름 순 템플릿 목록 (항목 포함) — Templates ordered by name, items loaded."""
        query: Select = (
            select(ChecklistTemplate)
            .options(selectinload(ChecklistTemplate.items))
            .order_by(ChecklistTemplate.name)
        )
        result = await db.execute(query)
        return result.scalars().all()

    async def get_with_items(
        self,
        db: AsyncSession,
        template_id: UUID,
    ) -> ChecklistTemplate | None:
        """템플릿을 항목과 함께 조회합니다 (eager loading).

        Retrieve a template with its items eagerly loaded.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            template_id: 템플릿 UUID (Template UUID)

        Returns:
            ChecklistTemplate | None: 항목 포함 템플릿 또는 None
                                       (Template with items or None)
        """
        query: Select = (
            select(ChecklistTemplate)
            .where(ChecklistTemplate.id == template_id)
            .options(selectinload(ChecklistTemplate.items))
            .execution_options(populate_existing=True)
        )
        result = await db.execute(query)
        return result.scalar_one_or_none()

    async def get_default(self, db: AsyncSession, preferred_name: str) -> ChecklistTemplate | None:
        """기본 템플릿 조회 — 지정 이름이 있으면 그것, 없으면 이름 순 첫 번째.

        Default template: the one named ``preferred_name``, else the first by name.
        """
        result = await db.execute(
            select(ChecklistTemplate)
            .options(selectinload(ChecklistTemplate.items))
            .where(ChecklistTemplate.name == preferred_name)
        )
        template: ChecklistTemplate | None = result.scalar_one_or_none()
        if template is not None:
            return template

        result = await db.execute(
            select(ChecklistTemplate)
            .options(selectinload(ChecklistTemplate.items))
            .order_by(ChecklistTemplate.name)
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def name_taken(self, db: AsyncSession, name: str, exclude_id: UUID | None = None) -> bool:
        """같은 이름의 템플릿 존재 여부 (Whether another template already uses this name)."""
        query: Select = select(func.count()).select_from(ChecklistTemplate).where(ChecklistTemplate.name == name)
        if exclude_id is not None:
            query = query.where(ChecklistTemplate.id != exclude_id)
        count: int = (await db.execute(query)).scalar() or 0
        return count > 0

    # --- 템플릿 항목 CRUD (Template item CRUD) ---

    async def next_sort_order(self, db: AsyncSession, template_id: UUID) -> int:
        """다음 정렬 순서 값 (max + 1, 0 for an empty template)."""
        result = await db.execute(
            select(func.max(ChecklistTemplateItem.sort_order)).where(
                ChecklistTemplateItem.template_id == template_id
            )
        )
        current: int | None = result.scalar()
        return 0 if current is None else current + 1

    async def create_item(
        self,
        db: AsyncSession,
        item_data: dict,
    ) -> ChecklistTemplateItem:
        """새 템플릿 항목을 생성합니다 (Create a template item)."""
        item: ChecklistTemplateItem = ChecklistTemplateItem(**item_data)
        db.add(item)
        await db.flush()
        await db.refresh(item)
        return item

    async def get_item(
        self,
        db: AsyncSession,
        template_id: UUID,
        item_id: UUID,
    ) -> ChecklistTemplateItem | None:
        """템플릿 소속 항목 조회 — Item by id, scoped to its template."""
        query: Select = select(ChecklistTemplateItem).where(
            ChecklistTemplateItem.id == item_id,
            ChecklistTemplateItem.template_id == template_id,
        )
        result = await db.execute(query)
        return result.scalar_one_or_none()

    async def update_item(
        self,
        db: AsyncSession,
        item: ChecklistTemplateItem,
        update_data: dict,
    ) -> ChecklistTemplateItem:
        """템플릿 항목을 업데이트합니다 (None values are ignored)."""
        for field, value in update_data.items():
            if value is not None and hasattr(item, field):
                setattr(item, field, value)

        await db.flush()
        await db.refresh(item)
        return item

    async def delete_item(
        self,
        db: AsyncSession,
        item: ChecklistTemplateItem,
    ) -> None:
        await db.delete(item)
        await db.flush()

    async def reorder_items(
        self,
        db: AsyncSession,
        template_id: UUID,
        item_ids: list[UUID],
    ) -> None:
        """항목의 정렬 순서를 재배치합니다.

        Reorder template items by updating sort_order based on the provided ID list.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            template_id: 템플릿 UUID (Template UUID)
            item_ids: 새 순서대로 정렬된 항목 UUID 목록
                      (List of item UUIDs in the desired order)
        """
        for index, item_id in enumerate(item_ids):
            await db.execute(
                update(ChecklistTemplateItem)
                .where(
                    ChecklistTemplateItem.id == item_id,
                    ChecklistTemplateItem.template_id == template_id,
                )
                .values(sort_order=index)
            )
        await db.flush()


# 싱글턴 인스턴스 — Singleton instance
template_repository: TemplateRepository = TemplateRepository()
