"""관리자 사용자 라우터 — 사용자 생성, 목록, 역할 변경.

Admin User Router — Privileged user creation, listing and role changes.
All endpoints require the administrador role.
"""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import require_admin
from app.database import get_db
from app.models.user import User
from app.schemas.user import RoleUpdate, UserCreate, UserResponse
from app.services.role_service import RoleResolver, get_role_resolver
from app.services.user_service import user_service

router: APIRouter = APIRouter()


@router.get("/", response_model=list[UserResponse])
async def list_users(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_admin)],
) -> list[UserResponse]:
    """사용자 목록 — 프로필, 역할, 이메일 결합.

    List users joined with their profile, role and email.
    """
    return await user_service.list_users(db)


@router.post("/", response_model=UserResponse, status_code=201)
async def create_user(
    data: UserCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_admin)],
) -> UserResponse:
    """새 사용자를 생성합니다 (계정 + 프로필 + 역할).

    Create the account, profile and role row; all or nothing.
    """
    return await user_service.create_user(db, data)


@router.patch("/{user_id}/role", response_model=UserResponse)
async def change_role(
    user_id: UUID,
    data: RoleUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_admin)],
    resolver: Annotated[RoleResolver, Depends(get_role_resolver)],
) -> UserResponse:
    """사용자 역할 변경 — Change a user's role."""
    result: UserResponse = await user_service.change_role(db, user_id, data.role, resolver)
    await db.commit()
    return result


@router.post("/{user_id}/promote", response_model=UserResponse)
async def promote_user(
    user_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_admin)],
    resolver: Annotated[RoleResolver, Depends(get_role_resolver)],
) -> UserResponse:
    """motorista → gestor 승격 (Promote a driver to manager)."""
    result: UserResponse = await user_service.promote_to_manager(db, user_id, resolver)
    await db.commit()
    return result
