"""대시보드 서비스 — 대시보드 집계 비즈니스 로직.

Dashboard Service — Aggregation logic for the fleet dashboard:
vehicle and checklist counts, open defects, checklists passed today and
the most recent open defects.
"""

from datetime import datetime, timezone

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.checklist import Checklist
from app.models.fleet import Defect, Vehicle
from app.repositories.checklist_repository import checklist_repository
from app.repositories.defect_repository import defect_repository
from app.services.checklist_state import STATUS_OK
from app.services.defect_service import STATUS_OPEN, to_defect_response

# 최근 결함 표시 수 — Number of recent open defects on the dashboard
RECENT_DEFECTS: int = 5


def start_of_today() -> datetime:
    """오늘 0시 (UTC) — Start of the current UTC day."""
    now: datetime = datetime.now(timezone.utc)
    return now.replace(hour=0, minute=0, second=0, microsecond=0)


class DashboardService:
    """대시보드 서비스.

    Dashboard aggregation service.
    """

    async def get_counts(self, db: AsyncSession) -> dict[str, int]:
        """대시보드 집계 수치.

        Headline counters.

        Returns:
            dict: vehicles, checklists, open_defects, ok_today
        """
        vehicles: int = (await db.execute(select(func.count()).select_from(Vehicle))).scalar() or 0
        checklists: int = await checklist_repository.count(db)
        open_defects: int = (
            await db.execute(select(func.count()).select_from(Defect).where(Defect.status == STATUS_OPEN))
        ).scalar() or 0
        ok_today: int = await checklist_repository.count(
            db,
            Checklist.status == STATUS_OK,
            Checklist.created_at >= start_of_today(),
        )
        return {
            "vehicles": vehicles,
            "checklists": checklists,
            "open_defects": open_defects,
            "ok_today": ok_today,
        }

    async def get_dashboard(self, db: AsyncSession) -> dict:
        """대시보드 응답 — 집계 수치와 최근 미해결 결함.

        Dashboard payload: counters plus the most recent open defects.
        """
        counts: dict[str, int] = await self.get_counts(db)
        recent = await defect_repository.list_filtered(db, status=STATUS_OPEN, limit=RECENT_DEFECTS)
        return {
            **counts,
            "checklists_by_status": await checklist_repository.count_by_status(db),
            "recent_defects": [to_defect_response(d).model_dump(mode="json") for d in recent],
        }


# 싱글턴 인스턴스 — Singleton instance
dashboard_service: DashboardService = DashboardService()
