"""관리자 결함 라우터 — 결함 상태/심각도 변경.

Admin Defect Router — Status and severity updates (manager-or-above).
"""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import require_manager
from app.database import get_db
from app.models.user import User
from app.schemas.fleet import DefectResponse, DefectUpdate
from app.services.defect_service import defect_service

router: APIRouter = APIRouter()


@router.patch("/{defect_id}", response_model=DefectResponse)
async def update_defect(
    defect_id: UUID,
    data: DefectUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_manager)],
) -> DefectResponse:
    """결함 갱신 — resolvido로 전환 시 해결 시각과 해결자를 기록.

    Update a defect; moving to ``resolvido`` stamps resolved_at/resolved_by.
    """
    result: DefectResponse = await defect_service.update_defect(db, defect_id, data, current_user)
    await db.commit()
    return result
