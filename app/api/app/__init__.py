"""앱 API 라우터 패키지 — 모든 앱(운전자/현장용) 엔드포인트 통합.

App API Router package — Aggregates all field-facing endpoints
into a single router for inclusion in the FastAPI application.

Included routers:
    - vehicles: 차량 조회 (Vehicle listing and detail)
    - templates: 체크리스트 템플릿 조회 (Checklist templates)
    - checklists: 점검 작성/서명 (Inspection fill-out and sign-off)
    - defects: 결함 등록/조회 (Defect reporting)
    - dashboard: 대시보드 집계 (Dashboard counters)
    - reports: 보고서 다운로드 (Report downloads)
"""

from fastapi import APIRouter

from app.api.app.checklists import router as checklists_router
from app.api.app.dashboard import router as dashboard_router
from app.api.app.defects import router as defects_router
from app.api.app.reports import router as reports_router
from app.api.app.templates import router as templates_router
from app.api.app.vehicles import router as vehicles_router

app_router: APIRouter = APIRouter()

app_router.include_router(vehicles_router, prefix="/vehicles", tags=["Vehicles"])
app_router.include_router(templates_router, prefix="/checklist-templates", tags=["Checklist Templates"])
app_router.include_router(checklists_router, prefix="/checklists", tags=["Checklists"])
app_router.include_router(defects_router, prefix="/defects", tags=["Defects"])
app_router.include_router(dashboard_router, prefix="/dashboard", tags=["Dashboard"])
app_router.include_router(reports_router, prefix="/reports", tags=["Reports"])
