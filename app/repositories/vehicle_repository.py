"""차량 레포지토리 — 차량 및 차량 서류 쿼리.

Vehicle Repository — Queries for vehicles and their documents.
"""

from typing import Sequence
from uuid import UUID

from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.fleet import Vehicle, VehicleDocument
from app.repositories.base import BaseRepository


class VehicleRepository(BaseRepository[Vehicle]):
    """차량 테이블에 대한 데이터베이스 쿼리를 담당하는 레포지토리.

    Repository handling database queries for the vehicles table.
    """

    def __init__(self) -> None:
        super().__init__(Vehicle)

    async def list_ordered(self, db: AsyncSession, search: str | None = None) -> Sequence[Vehicle]:
        """모델명 순 차량 목록 — Vehicles ordered by model, optionally filtered by plate/model."""
        query: Select = select(Vehicle)
        if search:
            pattern: str = f"%{search.strip().lower()}%"
            query = query.where(
                func.lower(Vehicle.plate).like(pattern) | func.lower(Vehicle.model).like(pattern)
            )
        result = await db.execute(query.order_by(Vehicle.model, Vehicle.plate))
        return result.scalars().all()

    async def get_by_plate(self, db: AsyncSession, plate: str) -> Vehicle | None:
        result = await db.execute(select(Vehicle).where(Vehicle.plate == plate.strip().upper()))
        return result.scalar_one_or_none()

    async def list_documents(self, db: AsyncSession, vehicle_id: UUID) -> Sequence[VehicleDocument]:
        """차량 서류 목록 (만료일 순) — Documents of a vehicle, soonest expiry first."""
        query: Select = (
            select(VehicleDocument)
            .where(VehicleDocument.vehicle_id == vehicle_id)
            .order_by(VehicleDocument.expires_on.is_(None), VehicleDocument.expires_on, VehicleDocument.created_at)
        )
        result = await db.execute(query)
        return result.scalars().all()

    async def get_document(self, db: AsyncSession, vehicle_id: UUID, document_id: UUID) -> VehicleDocument | None:
        result = await db.execute(
            select(VehicleDocument).where(
                VehicleDocument.id == document_id,
                VehicleDocument.vehicle_id == vehicle_id,
            )
        )
        return result.scalar_one_or_none()

    async def create_document(self, db: AsyncSession, data: dict) -> VehicleDocument:
        document: VehicleDocument = VehicleDocument(**data)
        db.add(document)
        await db.flush()
        await db.refresh(document)
        return document


# 싱글턴 인스턴스 — Singleton instance
vehicle_repository: VehicleRepository = VehicleRepository()
