"""인증 라우터 — /api/v1/auth.

Auth Router — Sign-in, refresh rotation, sign-out and the current user.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_user
from app.database import get_db
from app.models.user import User
from app.schemas.auth import LoginRequest, RefreshRequest, TokenResponse, UserMeResponse
from app.services.auth_service import auth_service
from app.services.role_service import RoleResolver, get_role_resolver

router: APIRouter = APIRouter()

DbSession = Annotated[AsyncSession, Depends(get_db)]
Resolver = Annotated[RoleResolver, Depends(get_role_resolver)]


@router.post("/login", response_model=TokenResponse)
async def login(data: LoginRequest, db: DbSession, resolver: Resolver) -> TokenResponse:
    """이메일/비밀번호로 로그인합니다 (Sign in; returns a token pair)."""
    tokens: TokenResponse = await auth_service.login(db, data, resolver)
    await db.commit()
    return tokens


@router.post("/refresh", response_model=TokenResponse)
async def refresh(data: RefreshRequest, db: DbSession) -> TokenResponse:
    """리프레시 토큰 회전 (Rotate a refresh token)."""
    tokens: TokenResponse = await auth_service.rotate(db, data.refresh_token)
    await db.commit()
    return tokens


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
async def logout(data: RefreshRequest, db: DbSession, resolver: Resolver) -> None:
    await auth_service.logout(db, data.refresh_token, resolver)
    await db.commit()


@router.get("/me", response_model=UserMeResponse)
async def me(
    db: DbSession,
    current_user: Annotated[User, Depends(get_current_user)],
    resolver: Resolver,
) -> UserMeResponse:
    """내 정보 — 프로필과 현재 역할.

    Profile of the signed-in user with the role resolved right now.
    """
    return await auth_service.get_me(db, current_user, resolver)
