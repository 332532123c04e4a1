"""결함 레포지토리 — 결함 목록/상세 쿼리.

Defect Repository — Listing and detail queries for defects, with the
vehicle eager-loaded for display.
"""

from datetime import datetime
from typing import Sequence
from uuid import UUID

from sqlalchemy import Select, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.models.fleet import Defect
from app.repositories.base import BaseRepository


class DefectRepository(BaseRepository[Defect]):
    """결함 테이블에 대한 데이터베이스 쿼리를 담당하는 레포지토리.

    Repository handling database queries for the defects table.
    """

    def __init__(self) -> None:
        super().__init__(Defect)

    def _base_query(self) -> Select:
        return select(Defect).options(selectinload(Defect.vehicle))

    async def list_filtered(
        self,
        db: AsyncSession,
        status: str | None = None,
        severity: str | None = None,
        vehicle_id: UUID | None = None,
        created_from: datetime | None = None,
        limit: int | None = None,
    ) -> Sequence[Defect]:
        """필터 조건에 맞는 결함 목록 (최신순).

        Defects matching the filters, newest first.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            status: 상태 필터 (aberto / em_analise / resolvido)
            severity: 심각도 필터 (leve / moderado / critico)
            vehicle_id: 차량 필터 (Vehicle UUID)
            created_from: 생성일 하한 (Lower bound on creation time)
            limit: 최대 개수 (Row limit)
        """
        query: Select = self._base_query()
        if status is not None:
            query = query.where(Defect.status == status)
        if severity is not None:
            query = query.where(Defect.severity == severity)
        if vehicle_id is not None:
            query = query.where(Defect.vehicle_id == vehicle_id)
        if created_from is not None:
            query = query.where(Defect.created_at >= created_from)
        query = query.order_by(Defect.created_at.desc())
        if limit is not None:
            query = query.limit(limit)
        result = await db.execute(query)
        return result.scalars().all()

    async def get_detail(self, db: AsyncSession, defect_id: UUID) -> Defect | None:
        query: Select = self._base_query().where(Defect.id == defect_id).execution_options(populate_existing=True)
        result = await db.execute(query)
        return result.scalar_one_or_none()


# 싱글턴 인스턴스 — Singleton instance
defect_repository: DefectRepository = DefectRepository()
