"""앱 결함 라우터 — 결함 등록 및 조회.

App Defect Router — Defect reporting (multipart) and listing.
"""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import require_any_role
from app.database import get_db
from app.models.user import User
from app.schemas.fleet import DefectResponse
from app.services.defect_service import defect_service

router: APIRouter = APIRouter()


@router.get("/", response_model=list[DefectResponse])
async def list_defects(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_any_role)],
    status: Annotated[str | None, Query(description="상태 필터 (aberto/em_analise/resolvido)")] = None,
    severity: Annotated[str | None, Query(description="심각도 필터 (leve/moderado/critico)")] = None,
    vehicle_id: Annotated[UUID | None, Query(description="차량 필터")] = None,
) -> list[DefectResponse]:
    """결함 목록 (최신순) — Defects newest first."""
    return await defect_service.list_defects(db, status=status, severity=severity, vehicle_id=vehicle_id)


@router.post("/", response_model=DefectResponse, status_code=201)
async def create_defect(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_any_role)],
    vehicle_id: UUID = Form(...),
    description: str = Form(""),
    severity: str = Form("leve"),
    checklist_id: UUID | None = Form(None),
    photo: UploadFile | None = File(None),
) -> DefectResponse:
    """결함 등록 (multipart) — 사진 1장 선택, 상태는 aberto.

    Report a defect with an optional photo; the status starts as ``aberto``.
    """
    return await defect_service.create_defect(
        db, vehicle_id, description, severity=severity, checklist_id=checklist_id, photo=photo
    )


@router.get("/{defect_id}", response_model=DefectResponse)
async def get_defect(
    defect_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_any_role)],
) -> DefectResponse:
    return await defect_service.get_defect(db, defect_id)
