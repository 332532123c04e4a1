"""관리자 체크리스트 템플릿 라우터 — 템플릿 및 항목 관리 API.

Admin Checklist Template Router — CRUD for templates and their items,
including reordering. Manager-or-above only.
"""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import require_manager
from app.database import get_db
from app.models.user import User
from app.schemas.checklist import (
    ReorderRequest,
    TemplateCreate,
    TemplateItemCreate,
    TemplateItemResponse,
    TemplateItemUpdate,
    TemplateResponse,
    TemplateUpdate,
)
from app.schemas.common import MessageResponse
from app.services.template_service import template_service

router: APIRouter = APIRouter()


# === 템플릿 엔드포인트 (Template Endpoints) ===


@router.post("/", response_model=TemplateResponse, status_code=201)
async def create_template(
    data: TemplateCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_manager)],
) -> TemplateResponse:
    """템플릿 생성 — 항목을 함께 전달할 수 있습니다.

    Create a template, optionally with its items.
    """
    result: TemplateResponse = await template_service.create_template(db, data)
    await db.commit()
    return result


@router.put("/{template_id}", response_model=TemplateResponse)
async def update_template(
    template_id: UUID,
    data: TemplateUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_manager)],
) -> TemplateResponse:
    result: TemplateResponse = await template_service.update_template(db, template_id, data)
    await db.commit()
    return result


@router.delete("/{template_id}", response_model=MessageResponse)
async def delete_template(
    template_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_manager)],
) -> MessageResponse:
    """템플릿 삭제 — 사용 중인 템플릿은 거부됩니다.

    Delete a template; rejected while checklists reference it.
    """
    await template_service.delete_template(db, template_id)
    await db.commit()
    return MessageResponse(message="Template excluído")


# === 항목 엔드포인트 (Item Endpoints) ===


@router.post("/{template_id}/items", response_model=TemplateItemResponse, status_code=201)
async def add_item(
    template_id: UUID,
    data: TemplateItemCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_manager)],
) -> TemplateItemResponse:
    result: TemplateItemResponse = await template_service.add_item(db, template_id, data)
    await db.commit()
    return result


# reorder는 /{item_id}보다 먼저 등록 — Registered before the item routes
@router.put("/{template_id}/items/reorder", response_model=TemplateResponse)
async def reorder_items(
    template_id: UUID,
    data: ReorderRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_manager)],
) -> TemplateResponse:
    """항목 순서 재배치 — Reorder the template items."""
    result: TemplateResponse = await template_service.reorder_items(db, template_id, data.item_ids)
    await db.commit()
    return result


@router.put("/{template_id}/items/{item_id}", response_model=TemplateItemResponse)
async def update_item(
    template_id: UUID,
    item_id: UUID,
    data: TemplateItemUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_manager)],
) -> TemplateItemResponse:
    result: TemplateItemResponse = await template_service.update_item(db, template_id, item_id, data)
    await db.commit()
    return result


@router.delete("/{template_id}/items/{item_id}", response_model=MessageResponse)
async def delete_item(
    template_id: UUID,
    item_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_manager)],
) -> MessageResponse:
    await template_service.delete_item(db, template_id, item_id)
    await db.commit()
    return MessageResponse(message="Item excluído")
