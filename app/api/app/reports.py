"""앱 보고서 라우터 — CSV/PDF/XLSX 보고서 다운로드.

App Report Router — Report downloads for managers.
"""

from io import BytesIO
from typing import Annotated

from fastapi import APIRouter, Depends, Query
from fastapi.responses import StreamingResponse
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import require_manager
from app.database import get_db
from app.models.user import User
from app.services.report_service import report_service

router: APIRouter = APIRouter()


@router.get("/{kind}")
async def download_report(
    kind: str,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_manager)],
    format: Annotated[str, Query(description="csv / pdf / xlsx")] = "csv",
) -> StreamingResponse:
    """보고서를 파일로 내려받습니다.

    Download a report (checklists, defeitos, veiculos, dashboard) as
    CSV, PDF or XLSX.
    """
    content, media_type, filename = await report_service.generate(db, kind, format)
    return StreamingResponse(
        BytesIO(content),
        media_type=media_type,
        headers={"Content-Disposition": f"attachment; filename={filename}"},
    )
