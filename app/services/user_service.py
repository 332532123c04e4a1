"""사용자 서비스 — 관리자용 사용자 생성/조회/역할 변경 비즈니스 로직.

User Service — Administrator-only user management.
User creation writes three rows (auth account, profile, role) in separate
committed steps tracked by a Saga: if any step fails, the rows already
written are deleted and a typed error is returned.
"""

import logging
from uuid import UUID

from sqlalchemy import delete
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.user import Profile, User, UserRole
from app.repositories.auth_repository import auth_repository
from app.repositories.role_repository import role_repository
from app.repositories.user_repository import user_repository
from app.schemas.user import UserCreate, UserResponse
from app.services.role_service import ROLE_ADMIN, ROLE_DRIVER, ROLE_MANAGER, RoleResolver
from app.utils.errors import DataLayerError, ErrorKind, to_data_layer_error
from app.utils.exceptions import BadRequestError, DuplicateError
from app.utils.password import hash_password
from app.utils.saga import Saga

logger = logging.getLogger(__name__)


class UserService:
    """사용자 관리 서비스 (User management service)."""

    def _to_response(self, user: User) -> UserResponse:
        """사용자 모델을 응답으로 변환 — 역할 행이 없으면 motorista."""
        profile = user.profile
        return UserResponse(
            id=str(user.id),
            email=user.email,
            full_name=profile.full_name if profile is not None else "",
            phone=profile.phone if profile is not None else None,
            role=user.role_assignment.role if user.role_assignment is not None else ROLE_DRIVER,
            is_active=user.is_active,
            created_at=user.created_at,
        )

    async def _delete_rows(self, db: AsyncSession, model, condition) -> None:
        await db.execute(delete(model).where(condition))
        await db.commit()

    async def create_user(self, db: AsyncSession, data: UserCreate) -> UserResponse:
        """사용자를 생성합니다 — 계정, 프로필, 역할.

        Create the auth account, profile and role row. Each step is committed
        and registers a compensation; a failure at any step deletes what was
        already written.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            data: 생성 요청 (Email, password, full name, role, phone)

        Returns:
            UserResponse: 생성된 사용자 (Created user)

        Raises:
            DuplicateError: 이메일 중복 (Email already registered)
            DataLayerError: DB 쓰기 실패 (Typed data-layer failure, all writes undone)
        """
        if await auth_repository.find_by_email(db, data.email) is not None:
            raise DuplicateError("Este email já está cadastrado.")

        async with Saga("create_user", db) as saga:
            try:
                user: User = await user_repository.create(db, {
                    "email": data.email,
                    "password_hash": hash_password(data.password),
                })
                user_id: UUID = user.id
                await db.commit()
                saga.add_compensation(
                    f"delete user {user_id}",
                    lambda: self._delete_rows(db, User, User.id == user_id),
                )

                await user_repository.create_profile(db, {
                    "id": user_id,
                    "full_name": data.full_name,
                    "phone": data.phone,
                })
                await db.commit()
                saga.add_compensation(
                    f"delete profile {user_id}",
                    lambda: self._delete_rows(db, Profile, Profile.id == user_id),
                )

                await role_repository.set_role(db, user_id, data.role)
                await db.commit()
                saga.add_compensation(
                    f"delete role {user_id}",
                    lambda: self._delete_rows(db, UserRole, UserRole.user_id == user_id),
                )
            except SQLAlchemyError as exc:
                logger.error("user creation for %s failed: %s", data.email, exc)
                raise to_data_layer_error(exc, "Erro ao criar usuário") from exc

        created: User | None = await user_repository.get_detail(db, user_id)
        if created is None:
            raise DataLayerError(ErrorKind.USER_NOT_FOUND, detail=str(user_id))
        return self._to_response(created)

    async def list_users(self, db: AsyncSession) -> list[UserResponse]:
        """프로필/역할/이메일이 결합된 사용자 목록 — Users joined with profile and role."""
        users: list[User] = await user_repository.list_with_profiles(db)
        return [self._to_response(user) for user in users]

    async def _get_or_raise(self, db: AsyncSession, user_id: UUID) -> User:
        user: User | None = await user_repository.get_detail(db, user_id)
        if user is None:
            raise DataLayerError(ErrorKind.USER_NOT_FOUND, detail=str(user_id))
        return user

    async def change_role(
        self,
        db: AsyncSession,
        user_id: UUID,
        role: str,
        resolver: RoleResolver,
    ) -> UserResponse:
        """사용자 역할을 변경하고 캐시를 무효화합니다.

        Change a user's role and drop their cached role entry.
        """
        await self._get_or_raise(db, user_id)
        await role_repository.set_role(db, user_id, role)
        resolver.cache.invalidate(user_id)
        return self._to_response(await self._get_or_raise(db, user_id))

    async def promote_to_manager(
        self,
        db: AsyncSession,
        user_id: UUID,
        resolver: RoleResolver,
    ) -> UserResponse:
        """motorista를 gestor로 승격합니다 (Promote a driver to manager).

        Raises:
            BadRequestError: 이미 gestor 또는 administrador인 경우
        """
        user: User = await self._get_or_raise(db, user_id)
        current: str = user.role_assignment.role if user.role_assignment is not None else ROLE_DRIVER
        if current in (ROLE_MANAGER, ROLE_ADMIN):
            raise BadRequestError("Usuário já é gestor ou administrador.")
        return await self.change_role(db, user_id, ROLE_MANAGER, resolver)


# 싱글턴 인스턴스 — Singleton instance
user_service: UserService = UserService()
