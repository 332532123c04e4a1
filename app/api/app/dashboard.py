"""앱 대시보드 라우터 — 차량 관리 대시보드 집계.

App Dashboard Router — Fleet counters and recent open defects.
"""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import require_any_role
from app.database import get_db
from app.models.user import User
from app.services.dashboard_service import dashboard_service

router: APIRouter = APIRouter()


@router.get("/")
async def get_dashboard(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_any_role)],
) -> dict:
    """대시보드 집계 조회 — 차량, 점검, 미해결 결함, 오늘 OK 점검 수."""
    return await dashboard_service.get_dashboard(db)
