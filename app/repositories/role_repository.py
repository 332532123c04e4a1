"""역할 레포지토리 — user_roles 테이블 조회/변경.

Role Repository — Queries on the user_roles table.
Also hosts the privileged fast-path lookup through the
``get_current_user_role`` SQL function installed by the migrations.
"""

from uuid import UUID

from sqlalchemy import Select, select, text
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.user import UserRole
from app.repositories.base import BaseRepository


class RoleRepository(BaseRepository[UserRole]):
    """user_roles 테이블에 대한 데이터베이스 쿼리를 담당하는 레포지토리.

    Repository handling database queries for the user_roles table.
    """

    def __init__(self) -> None:
        super().__init__(UserRole)

    async def get_by_user(self, db: AsyncSession, user_id: UUID) -> UserRole | None:
        """사용자의 역할 행을 조회합니다 (Role row for a user, or None)."""
        query: Select = select(UserRole).where(UserRole.user_id == user_id)
        result = await db.execute(query)
        return result.scalar_one_or_none()

    async def get_role_name(self, db: AsyncSession, user_id: UUID) -> str | None:
        """테이블 직접 조회 — Direct table read of the role name."""
        result = await db.execute(select(UserRole.role).where(UserRole.user_id == user_id))
        return result.scalar_one_or_none()

    async def call_role_function(self, db: AsyncSession, user_id: UUID) -> str | None:
        """SQL 함수로 역할 조회 — Privileged lookup via get_current_user_role(uuid).

        Runs inside a SAVEPOINT so a missing function does not poison the
        request transaction.

        Raises:
            sqlalchemy.exc.DBAPIError: 함수가 없거나 실패한 경우 (Function missing or failing)
        """
        async with db.begin_nested():
            result = await db.execute(
                text("SELECT get_current_user_role(:user_id)"),
                {"user_id": user_id},
            )
            return result.scalar()

    async def set_role(self, db: AsyncSession, user_id: UUID, role: str) -> UserRole:
        """역할을 생성하거나 변경합니다 (Insert or update the user's role row)."""
        existing: UserRole | None = await self.get_by_user(db, user_id)
        if existing is None:
            return await self.create(db, {"user_id": user_id, "role": role})
        existing.role = role
        await db.flush()
        await db.refresh(existing)
        return existing


# 싱글턴 인스턴스 — Singleton instance
role_repository: RoleRepository = RoleRepository()
