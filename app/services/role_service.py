"""역할 서비스 — 역할 조회(캐시 포함) 및 권한 계층.

Role Service — Role resolution with a TTL cache, and the role hierarchy.

Resolution order:
    1. RoleCache (사용자별 역할 + 만료 시각, per-user role with expiry)
    2. 빠른 경로: get_current_user_role() SQL 함수 (fast path, PostgreSQL)
    3. 대체 경로: user_roles 테이블 직접 조회 (fallback table read)

Hierarchy (lower level = higher authority):
    administrador (1) ⊇ gestor (2) ⊇ motorista (3)

An unresolvable role is never cached and never satisfies any requirement.
"""

import logging
import time
from typing import Callable
from uuid import UUID

from sqlalchemy.exc import DBAPIError
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.repositories.role_repository import role_repository

logger = logging.getLogger(__name__)

ROLE_ADMIN: str = "administrador"
ROLE_MANAGER: str = "gestor"
ROLE_DRIVER: str = "motorista"

# 역할 레벨 — Role levels (1=highest authority)
LEVEL_ADMIN: int = 1
LEVEL_MANAGER: int = 2
LEVEL_DRIVER: int = 3

ROLE_LEVELS: dict[str, int] = {
    ROLE_ADMIN: LEVEL_ADMIN,
    ROLE_MANAGER: LEVEL_MANAGER,
    ROLE_DRIVER: LEVEL_DRIVER,
}


def role_satisfies(role: str | None, max_level: int) -> bool:
    """역할이 요구 레벨을 만족하는지 확인 — None/unknown roles never satisfy."""
    if role is None or role not in ROLE_LEVELS:
        return False
    return ROLE_LEVELS[role] <= max_level


class RoleCache:
    """역할 캐시 — 사용자 ID → (역할, 만료 시각).

    Per-user memoized role with a fixed TTL and explicit invalidation.

    Args:
        ttl_seconds: 캐시 유효 시간 (Entry lifetime in seconds)
        clock: 단조 시계 (Monotonic clock, injectable for tests)
    """

    def __init__(self, ttl_seconds: float, clock: Callable[[], float] = time.monotonic) -> None:
        self.ttl_seconds: float = ttl_seconds
        self._clock: Callable[[], float] = clock
        self._entries: dict[UUID, tuple[str, float]] = {}

    def get(self, user_id: UUID) -> str | None:
        entry = self._entries.get(user_id)
        if entry is None:
            return None
        role, expires_at = entry
        if self._clock() >= expires_at:
            del self._entries[user_id]
            return None
        return role

    def set(self, user_id: UUID, role: str) -> None:
        self._entries[user_id] = (role, self._clock() + self.ttl_seconds)

    def invalidate(self, user_id: UUID) -> None:
        self._entries.pop(user_id, None)

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)


class RoleResolver:
    """역할 조회기 — 캐시 → SQL 함수 → 테이블 순서로 역할을 찾습니다.

    Resolves a user's role: cache first, then the privileged SQL function,
    then a direct table read when the function is unavailable.
    """

    def __init__(self, cache: RoleCache) -> None:
        self.cache: RoleCache = cache

    async def _lookup_fast(self, db: AsyncSession, user_id: UUID) -> str | None:
        """SQL 함수 경로 — PostgreSQL 전용, 실패 시 DBAPIError."""
        if db.get_bind().dialect.name != "postgresql":
            raise LookupError("get_current_user_role is only installed on PostgreSQL")
        return await role_repository.call_role_function(db, user_id)

    async def _lookup_table(self, db: AsyncSession, user_id: UUID) -> str | None:
        return await role_repository.get_role_name(db, user_id)

    async def resolve_role(self, db: AsyncSession, user_id: UUID) -> str | None:
        """사용자의 역할을 조회합니다.

        Resolve the durable role assignment for a user.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            user_id: 사용자 ID (User UUID)

        Returns:
            str | None: 역할 이름, 조회 불가 시 None (Role name, None when unresolvable)
        """
        cached: str | None = self.cache.get(user_id)
        if cached is not None:
            return cached

        try:
            role: str | None = await self._lookup_fast(db, user_id)
        except (DBAPIError, LookupError) as exc:
            logger.debug("role fast path unavailable, reading user_roles: %s", exc)
            role = await self._lookup_table(db, user_id)

        if role is not None:
            self.cache.set(user_id, role)
        return role

    def on_sign_in(self, user_id: UUID) -> None:
        """로그인 시 캐시 무효화 — Drop the cached role on sign-in."""
        self.cache.invalidate(user_id)

    def on_sign_out(self, user_id: UUID) -> None:
        """로그아웃 시 캐시 무효화 — Drop the cached role on sign-out."""
        self.cache.invalidate(user_id)


# 인증 계층 소유 싱글턴 — Auth-layer owned instances, injected via get_role_resolver
role_cache: RoleCache = RoleCache(settings.ROLE_CACHE_TTL_SECONDS)
role_resolver: RoleResolver = RoleResolver(role_cache)


def get_role_resolver() -> RoleResolver:
    """FastAPI 의존성 — Dependency returning the role resolver (overridable in tests)."""
    return role_resolver
