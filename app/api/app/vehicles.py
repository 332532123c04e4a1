"""앱 차량 라우터 — 차량 목록 및 상세.

App Vehicle Router — Vehicle listing and detail for any signed-in role.
"""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import require_any_role
from app.database import get_db
from app.models.user import User
from app.schemas.fleet import VehicleDetailResponse, VehicleResponse
from app.services.vehicle_service import vehicle_service

router: APIRouter = APIRouter()


@router.get("/", response_model=list[VehicleResponse])
async def list_vehicles(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_any_role)],
    search: Annotated[str | None, Query(description="번호판/모델 검색")] = None,
) -> list[VehicleResponse]:
    """차량 목록 (모델명 순) — Vehicles ordered by model."""
    return await vehicle_service.list_vehicles(db, search)


@router.get("/{vehicle_id}", response_model=VehicleDetailResponse)
async def get_vehicle(
    vehicle_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_any_role)],
) -> VehicleDetailResponse:
    """차량 상세 — 최근 체크리스트, 미해결 결함, 서류 포함.

    Vehicle detail with recent checklists, open defects and documents.
    """
    return await vehicle_service.get_vehicle(db, vehicle_id)
