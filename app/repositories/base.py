"""공통 레포지토리 — 모델 하나에 대한 조회/생성/수정/삭제.

Shared repository for a single mapped model. Writes are flushed, never
committed: the router (or a Saga step) owns the transaction boundary.
"""

from typing import Any, Generic, TypeVar
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import Base

ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """모델별 기본 쿼리 (Per-model primary-key queries).

    Attributes:
        model: 대상 ORM 모델 (Mapped model class)
    """

    def __init__(self, model: type[ModelType]) -> None:
        self.model: type[ModelType] = model

    async def get_by_id(self, db: AsyncSession, record_id: UUID) -> ModelType | None:
        return await db.get(self.model, record_id)

    async def count(self, db: AsyncSession, *conditions: Any) -> int:
        """조건에 맞는 행 수 (Row count under optional WHERE conditions)."""
        result = await db.execute(select(func.count()).select_from(self.model).where(*conditions))
        return result.scalar() or 0

    async def create(self, db: AsyncSession, obj_data: dict[str, Any]) -> ModelType:
        """행 추가 후 flush/refresh — server defaults are loaded back."""
        row: ModelType = self.model(**obj_data)
        db.add(row)
        await db.flush()
        await db.refresh(row)
        return row

    async def update(self, db: AsyncSession, record_id: UUID, update_data: dict[str, Any]) -> ModelType | None:
        """전달된 필드만 갱신 (None도 값으로 기록). None if the row does not exist.

        Callers pass ``model_dump(exclude_unset=True)`` so explicit nulls
        clear a column while omitted fields stay untouched.
        """
        row: ModelType | None = await self.get_by_id(db, record_id)
        if row is None:
            return None
        for column, value in update_data.items():
            if hasattr(row, column):
                setattr(row, column, value)
        await db.flush()
        await db.refresh(row)
        return row

    async def delete(self, db: AsyncSession, record_id: UUID) -> bool:
        row: ModelType | None = await self.get_by_id(db, record_id)
        if row is None:
            return False
        await db.delete(row)
        await db.flush()
        return True
