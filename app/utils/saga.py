"""보상 트랜잭션(사가) 헬퍼 모듈.

Compensating-action (saga) helper.
Each operation attempt records the side effects it has committed
(uploaded objects, committed rows). When the attempt raises, the open
database transaction is rolled back and the recorded compensations run in
reverse order before the original error propagates.

Usage:
    async with Saga("create_checklist", db) as saga:
        urls = await photo_upload_service.upload(files, prefix, saga)
        await checklist_repository.create(db, {...})
        await db.commit()
"""

import inspect
import logging
from typing import Any, Callable

from sqlalchemy.ext.asyncio import AsyncSession

logger = logging.getLogger(__name__)

Compensation = Callable[[], Any]


class Saga:
    """작업 시도 단위의 보상 목록.

    Per-attempt list of compensations, run in reverse order on failure.

    Args:
        name: 작업 이름, 로그용 (Operation name for logs)
        db: 실패 시 롤백할 세션 (Session rolled back before compensating, optional)
    """

    def __init__(self, name: str, db: AsyncSession | None = None) -> None:
        self.name: str = name
        self._db: AsyncSession | None = db
        self._compensations: list[tuple[str, Compensation]] = []

    def add_compensation(self, description: str, action: Compensation) -> None:
        """완료된 부수 효과의 보상 작업을 등록합니다.

        Register the compensation for a side effect that has just succeeded.
        """
        self._compensations.append((description, action))

    @property
    def pending(self) -> int:
        return len(self._compensations)

    async def compensate(self) -> None:
        """등록된 보상을 역순으로 실행합니다.

        Run recorded compensations in reverse order. A failing compensation
        is logged and the remaining ones still run.
        """
        while self._compensations:
            description, action = self._compensations.pop()
            try:
                result = action()
                if inspect.isawaitable(result):
                    await result
                logger.info("saga %s: compensated %s", self.name, description)
            except Exception:
                logger.exception("saga %s: compensation failed for %s", self.name, description)

    async def __aenter__(self) -> "Saga":
        return self

    async def __aexit__(self, exc_type: Any, exc: BaseException | None, tb: Any) -> bool:
        if exc is None:
            self._compensations.clear()
            return False

        logger.warning("saga %s failed (%s), rolling back %d step(s)", self.name, exc_type.__name__, self.pending)
        if self._db is not None:
            await self._db.rollback()
        await self.compensate()
        return False
