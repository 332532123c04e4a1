"""인증 서비스 — 로그인, 토큰 회전, 로그아웃, 내 정보.

Auth Service — Sign-in, refresh-token rotation, sign-out and the current
user's profile. Sign-in and sign-out are the transitions that drop the
user's cached role, so the next request re-reads it.
"""

import logging
from datetime import datetime, timezone
from uuid import UUID

import jwt
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.user import User
from app.repositories.auth_repository import auth_repository
from app.repositories.user_repository import user_repository
from app.schemas.auth import LoginRequest, TokenResponse, UserMeResponse
from app.services.role_service import RoleResolver
from app.utils.errors import AuthError, ErrorKind
from app.utils.exceptions import UnauthorizedError
from app.utils.jwt import ACCESS, REFRESH, issue_token, read_token, token_lifetime
from app.utils.password import verify_password

logger = logging.getLogger(__name__)

INVALID_REFRESH: str = "Token de atualização inválido"


def _is_expired(expires_at: datetime) -> bool:
    # SQLite는 naive datetime 반환 (SQLite returns naive UTC values)
    if expires_at.tzinfo is None:
        expires_at = expires_at.replace(tzinfo=timezone.utc)
    return expires_at < datetime.now(timezone.utc)


class AuthService:
    """인증 서비스 (Authentication service)."""

    async def _open_session(self, db: AsyncSession, user: User) -> TokenResponse:
        """새 토큰 쌍 발급 — 이전 리프레시 토큰은 모두 폐기.

        Issue a fresh pair; older refresh tokens of the user are revoked.
        """
        await auth_repository.revoke_user_sessions(db, user.id)
        refresh: str = issue_token(user.id, user.email, REFRESH)
        await auth_repository.store_refresh_token(
            db,
            user_id=user.id,
            token=refresh,
            expires_at=datetime.now(timezone.utc) + token_lifetime(REFRESH),
        )
        return TokenResponse(access_token=issue_token(user.id, user.email, ACCESS), refresh_token=refresh)

    async def login(self, db: AsyncSession, data: LoginRequest, resolver: RoleResolver) -> TokenResponse:
        """이메일/비밀번호 로그인.

        Email + password sign-in.

        Raises:
            AuthError: 잘못된 인증 정보 또는 비활성 계정 (kind=INVALID_CREDENTIALS)
        """
        user: User | None = await auth_repository.find_by_email(db, data.email)
        if user is None or not verify_password(data.password, user.password_hash) or not user.is_active:
            logger.info("rejected sign-in for %s", data.email)
            raise AuthError(ErrorKind.INVALID_CREDENTIALS, detail=data.email)

        resolver.on_sign_in(user.id)
        return await self._open_session(db, user)

    async def rotate(self, db: AsyncSession, refresh_token: str) -> TokenResponse:
        """리프레시 토큰 회전 — 사용한 토큰은 즉시 폐기됩니다.

        Exchange a refresh token for a new pair and revoke the presented one.

        Raises:
            UnauthorizedError: 알 수 없거나 만료/위조된 토큰, 비활성 사용자
        """
        stored = await auth_repository.find_refresh_token(db, refresh_token)
        if stored is None:
            raise UnauthorizedError(INVALID_REFRESH)
        expires_at: datetime = stored.expires_at
        await auth_repository.revoke_refresh_token(db, refresh_token)

        if _is_expired(expires_at):
            raise UnauthorizedError("Token de atualização expirado")
        try:
            user_id: UUID = read_token(refresh_token, REFRESH)
        except jwt.InvalidTokenError:
            raise UnauthorizedError(INVALID_REFRESH)

        user: User | None = await user_repository.get_by_id(db, user_id)
        if user is None or not user.is_active:
            raise UnauthorizedError("Usuário não encontrado ou inativo")
        return await self._open_session(db, user)

    async def logout(self, db: AsyncSession, refresh_token: str, resolver: RoleResolver) -> None:
        owner: UUID | None = await auth_repository.revoke_refresh_token(db, refresh_token)
        if owner is not None:
            resolver.on_sign_out(owner)

    async def get_me(self, db: AsyncSession, user: User, resolver: RoleResolver) -> UserMeResponse:
        """현재 사용자 — 프로필과 조회된 역할 (role은 없으면 None)."""
        profile = user.profile
        return UserMeResponse(
            id=str(user.id),
            email=user.email,
            full_name=profile.full_name if profile is not None else "",
            phone=profile.phone if profile is not None else None,
            role=await resolver.resolve_role(db, user.id),
            is_active=user.is_active,
        )


# 싱글턴 인스턴스 — Singleton instance
auth_service: AuthService = AuthService()
