"""사용자 레포지토리 — 사용자/프로필 CRUD 쿼리.

User Repository — CRUD queries for users and their profiles.
Extends BaseRepository with eager loading of profile and role rows.
"""

from typing import Any
from uuid import UUID

from sqlalchemy import Select, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.models.user import Profile, User
from app.repositories.base import BaseRepository


class UserRepository(BaseRepository[User]):
    """사용자 테이블에 대한 데이터베이스 쿼리를 담당하는 레포지토리.

    Repository handling database queries for the users and profiles tables.
    """

    def __init__(self) -> None:
        super().__init__(User)

    def _with_relations(self) -> Select:
        return select(User).options(
            selectinload(User.profile),
            selectinload(User.role_assignment),
        )

    async def list_with_profiles(self, db: AsyncSession) -> list[User]:
        """프로필/역할과 함께 전체 사용자 목록을 조회합니다.

        List every user with profile and role loaded, newest first.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)

        Returns:
            list[User]: 사용자 목록 (List of users)
        """
        query: Select = self._with_relations().order_by(User.created_at.desc())
        result = await db.execute(query)
        return list(result.scalars().all())

    async def get_detail(self, db: AsyncSession, user_id: UUID) -> User | None:
        """프로필/역할과 함께 사용자를 조회합니다 (User with profile and role)."""
        query: Select = self._with_relations().where(User.id == user_id).execution_options(populate_existing=True)
        result = await db.execute(query)
        return result.scalar_one_or_none()

    async def create_profile(self, db: AsyncSession, data: dict[str, Any]) -> Profile:
        """프로필 행을 생성합니다 (Insert a profile row)."""
        profile: Profile = Profile(**data)
        db.add(profile)
        await db.flush()
        await db.refresh(profile)
        return profile


# 싱글턴 인스턴스 — Singleton instance
user_repository: UserRepository = UserRepository()
