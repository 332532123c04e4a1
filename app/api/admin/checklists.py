"""관리자 체크리스트 라우터 — 체크리스트 승인.

Admin Checklist Router — Manager approval of pending checklists.
"""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import require_manager
from app.database import get_db
from app.models.user import User
from app.schemas.checklist import ApproveRequest, ChecklistDetail
from app.services.checklist_service import checklist_service

router: APIRouter = APIRouter()


@router.post("/{checklist_id}/approve", response_model=ChecklistDetail)
async def approve_checklist(
    checklist_id: UUID,
    data: ApproveRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_manager)],
) -> ChecklistDetail:
    """체크리스트 승인 — pendente → concluido (명시적 확인 필요).

    Approve a pending checklist. The body must carry ``confirm: true``.
    """
    result: ChecklistDetail = await checklist_service.approve(db, checklist_id, data.confirm)
    await db.commit()
    return result
