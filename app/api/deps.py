"""FastAPI 의존성 — 인증 사용자와 역할 게이트.

FastAPI dependencies: the authenticated user and the role gates.

Access rules:
    - 토큰이 없거나 유효하지 않으면 401 (Missing, invalid or expired access token)
    - 역할을 조회할 수 없으면 항상 403 (No resolvable role is always 403)
    - 레벨이 낮을수록 권한이 높음: administrador 1, gestor 2, motorista 3
"""

from typing import Annotated, Awaitable, Callable
from uuid import UUID

import jwt
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.models.user import User
from app.repositories.user_repository import user_repository
from app.services.role_service import (
    LEVEL_ADMIN,
    LEVEL_DRIVER,
    LEVEL_MANAGER,
    RoleResolver,
    get_role_resolver,
    role_satisfies,
)
from app.utils.exceptions import ForbiddenError, UnauthorizedError
from app.utils.jwt import ACCESS, read_token

bearer: HTTPBearer = HTTPBearer()


async def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials, Depends(bearer)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> User:
    """Bearer 액세스 토큰의 사용자 (User behind the bearer access token).

    Raises:
        UnauthorizedError: 토큰 오류, 리프레시 토큰, 없는/비활성 사용자
    """
    try:
        user_id: UUID = read_token(credentials.credentials, ACCESS)
    except jwt.InvalidTokenError:
        raise UnauthorizedError("Token inválido ou expirado")

    user: User | None = await user_repository.get_detail(db, user_id)
    if user is None or not user.is_active:
        raise UnauthorizedError("Usuário não encontrado ou inativo")
    return user


async def get_current_role(
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
    resolver: Annotated[RoleResolver, Depends(get_role_resolver)],
) -> str | None:
    return await resolver.resolve_role(db, current_user.id)


def require_level(max_level: int) -> Callable[..., Awaitable[User]]:
    """역할 레벨 게이트 팩토리 — 레벨 ``max_level`` 이하만 통과.

    Build a dependency admitting users whose role level is at most
    ``max_level``; everyone else gets 403.
    """
    async def gate(
        current_user: Annotated[User, Depends(get_current_user)],
        role: Annotated[str | None, Depends(get_current_role)],
    ) -> User:
        if not role_satisfies(role, max_level):
            raise ForbiddenError()
        return current_user
    return gate


require_admin = require_level(LEVEL_ADMIN)
require_manager = require_level(LEVEL_MANAGER)
require_any_role = require_level(LEVEL_DRIVER)
