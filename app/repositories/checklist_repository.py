"""체크리스트 레포지토리 — 점검 인스턴스 및 항목 응답 쿼리.

Checklist Repository — Queries for inspection instances (checklists) and
their per-item responses.
"""

from datetime import datetime
from typing import Sequence
from uuid import UUID

from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.models.checklist import Checklist, ChecklistResponse, ChecklistTemplate, ChecklistTemplateItem
from app.repositories.base import BaseRepository


class ChecklistRepository(BaseRepository[Checklist]):
    """체크리스트 레포지토리.

    Checklist repository with response management operations.

    Extends:
        BaseRepository[Checklist]
    """

    def __init__(self) -> None:
        super().__init__(Checklist)

    def filtered_query(
        self,
        status: str | None = None,
        vehicle_id: UUID | None = None,
        operator_id: UUID | None = None,
        created_from: datetime | None = None,
    ) -> Select:
        """필터가 적용된 목록 쿼리 (최신순) — Filtered listing query, newest first.

        Args:
            status: 종합 상태 필터 (Aggregate status filter)
            vehicle_id: 차량 UUID 필터 (Vehicle filter)
            operator_id: 점검자 UUID 필터 (Operator filter)
            created_from: 생성일 하한 (Lower bound on creation time)
        """
        query: Select = select(Checklist).options(
            selectinload(Checklist.vehicle),
            selectinload(Checklist.template),
        )
        if status is not None:
            query = query.where(Checklist.status == status)
        if vehicle_id is not None:
            query = query.where(Checklist.vehicle_id == vehicle_id)
        if operator_id is not None:
            query = query.where(Checklist.operator_id == operator_id)
        if created_from is not None:
            query = query.where(Checklist.created_at >= created_from)
        return query.order_by(Checklist.created_at.desc())

    async def list_filtered(self, db: AsyncSession, **filters) -> Sequence[Checklist]:
        result = await db.execute(self.filtered_query(**filters))
        return result.scalars().all()

    async def get_detail(self, db: AsyncSession, checklist_id: UUID) -> Checklist | None:
        """체크리스트 상세 — vehicle, template(items), responses 포함.

        Checklist with vehicle, template items and responses eagerly loaded.
        """
        query: Select = (
            select(Checklist)
            .where(Checklist.id == checklist_id)
            .options(
                selectinload(Checklist.vehicle),
                selectinload(Checklist.template).selectinload(ChecklistTemplate.items),
                selectinload(Checklist.responses).selectinload(ChecklistResponse.item),
            )
            .execution_options(populate_existing=True)
        )
        result = await db.execute(query)
        return result.scalar_one_or_none()

    async def list_with_responses(self, db: AsyncSession, vehicle_id: UUID) -> Sequence[Checklist]:
        """차량의 체크리스트 전체 (응답 포함) — Every checklist of a vehicle with its responses."""
        query: Select = (
            select(Checklist)
            .where(Checklist.vehicle_id == vehicle_id)
            .options(selectinload(Checklist.responses))
        )
        result = await db.execute(query)
        return result.scalars().all()

    async def count_by_status(self, db: AsyncSession, created_from: datetime | None = None) -> dict[str, int]:
        """상태별 체크리스트 수 — Checklist counts grouped by status."""
        query: Select = select(Checklist.status, func.count()).group_by(Checklist.status)
        if created_from is not None:
            query = query.where(Checklist.created_at >= created_from)
        result = await db.execute(query)
        return {status: count for status, count in result.all()}

    # --- 항목 응답 (Item responses) ---

    async def get_responses(self, db: AsyncSession, checklist_id: UUID) -> Sequence[ChecklistResponse]:
        """체크리스트 응답 목록 (항목 순) — Responses ordered by item sort order."""
        query: Select = (
            select(ChecklistResponse)
            .join(ChecklistTemplateItem, ChecklistResponse.item_id == ChecklistTemplateItem.id)
            .where(ChecklistResponse.checklist_id == checklist_id)
            .options(selectinload(ChecklistResponse.item))
            .order_by(ChecklistTemplateItem.sort_order)
        )
        result = await db.execute(query)
        return result.scalars().all()

    async def get_response(self, db: AsyncSession, checklist_id: UUID, response_id: UUID) -> ChecklistResponse | None:
        result = await db.execute(
            select(ChecklistResponse).where(
                ChecklistResponse.id == response_id,
                ChecklistResponse.checklist_id == checklist_id,
            )
        )
        return result.scalar_one_or_none()

    async def get_response_for_item(self, db: AsyncSession, checklist_id: UUID, item_id: UUID) -> ChecklistResponse | None:
        result = await db.execute(
            select(ChecklistResponse).where(
                ChecklistResponse.checklist_id == checklist_id,
                ChecklistResponse.item_id == item_id,
            )
        )
        return result.scalar_one_or_none()

    async def count_item_responses(self, db: AsyncSession, item_id: UUID) -> int:
        """템플릿 항목에 기록된 응답 수 (Responses recorded against one template item)."""
        result = await db.execute(
            select(func.count()).select_from(ChecklistResponse).where(ChecklistResponse.item_id == item_id)
        )
        return result.scalar() or 0

    async def list_open_for_template(
        self,
        db: AsyncSession,
        template_id: UUID,
        inspection_mode: str,
        closed_status: str,
    ) -> Sequence[Checklist]:
        """템플릿을 사용하는 미승인 체크리스트 — items and responses reloaded."""
        query: Select = (
            select(Checklist)
            .where(
                Checklist.template_id == template_id,
                Checklist.inspection_mode == inspection_mode,
                Checklist.status != closed_status,
            )
            .options(
                selectinload(Checklist.template).selectinload(ChecklistTemplate.items),
                selectinload(Checklist.responses),
            )
            .execution_options(populate_existing=True)
        )
        result = await db.execute(query)
        return result.scalars().all()

    async def create_response(self, db: AsyncSession, data: dict) -> ChecklistResponse:
        """응답 행을 생성합니다 (Insert a response row, flushed)."""
        response: ChecklistResponse = ChecklistResponse(**data)
        db.add(response)
        await db.flush()
        await db.refresh(response)
        return response


# 싱글턴 인스턴스 — Singleton instance
checklist_repository: ChecklistRepository = ChecklistRepository()
