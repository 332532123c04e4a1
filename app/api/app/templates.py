"""앱 체크리스트 템플릿 라우터 — 템플릿 조회.

App Checklist Template Router — Template listing, default template and detail.
"""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import require_any_role
from app.database import get_db
from app.models.user import User
from app.schemas.checklist import TemplateResponse
from app.services.template_service import template_service

router: APIRouter = APIRouter()


@router.get("/", response_model=list[TemplateResponse])
async def list_templates(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_any_role)],
) -> list[TemplateResponse]:
    return await template_service.list_templates(db)


# /default는 /{template_id}보다 먼저 등록 — Registered before the id route
@router.get("/default", response_model=TemplateResponse)
async def get_default_template(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_any_role)],
) -> TemplateResponse:
    """기본 템플릿 조회 — Resolve the default inspection template."""
    return await template_service.get_default_template(db)


@router.get("/{template_id}", response_model=TemplateResponse)
async def get_template(
    template_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_any_role)],
) -> TemplateResponse:
    return await template_service.get_template(db, template_id)
