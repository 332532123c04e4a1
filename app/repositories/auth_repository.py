"""인증 레포지토리 — 로그인 사용자 조회, 리프레시 토큰 보관.

Auth Repository — Login lookups and the refresh-token store. A refresh
token is valid only while its row exists; revoking means deleting it.
"""

from datetime import datetime
from uuid import UUID

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.models.token import RefreshToken
from app.models.user import User


class AuthRepository:
    """로그인/세션 쿼리 (Sign-in and session queries)."""

    async def find_by_email(self, db: AsyncSession, email: str) -> User | None:
        """이메일로 사용자 조회 — 대소문자 무시, 프로필 포함.

        Case-insensitive lookup by email with the profile loaded.
        """
        result = await db.execute(
            select(User)
            .options(selectinload(User.profile))
            .where(func.lower(User.email) == email.strip().lower())
        )
        return result.scalar_one_or_none()

    async def store_refresh_token(
        self,
        db: AsyncSession,
        user_id: UUID,
        token: str,
        expires_at: datetime,
    ) -> RefreshToken:
        row: RefreshToken = RefreshToken(user_id=user_id, token=token, expires_at=expires_at)
        db.add(row)
        await db.flush()
        return row

    async def find_refresh_token(self, db: AsyncSession, token: str) -> RefreshToken | None:
        result = await db.execute(select(RefreshToken).where(RefreshToken.token == token))
        return result.scalar_one_or_none()

    async def revoke_refresh_token(self, db: AsyncSession, token: str) -> UUID | None:
        """토큰 행 삭제 — Delete one refresh token, returning its owner (None if unknown)."""
        row: RefreshToken | None = await self.find_refresh_token(db, token)
        if row is None:
            return None
        owner: UUID = row.user_id
        await db.delete(row)
        await db.flush()
        return owner

    async def revoke_user_sessions(self, db: AsyncSession, user_id: UUID) -> None:
        """사용자의 모든 리프레시 토큰 삭제 (One live session per user)."""
        await db.execute(delete(RefreshToken).where(RefreshToken.user_id == user_id))
        await db.flush()


# 싱글턴 인스턴스 — Singleton instance
auth_repository: AuthRepository = AuthRepository()
