"""관리자 API 라우터 패키지 — 모든 관리자 엔드포인트 통합.

Admin API Router package — Aggregates all manager/administrator endpoints
into a single router for inclusion in the FastAPI application.

Included routers:
    - users: 사용자 생성/역할 관리 (User creation and roles, administrador)
    - vehicles: 차량/사진/서류 관리 (Vehicles, photo and documents)
    - templates: 체크리스트 템플릿/항목 관리 (Checklist templates and items)
    - checklists: 체크리스트 승인 (Checklist approval)
    - defects: 결함 상태 관리 (Defect status updates)
"""

from fastapi import APIRouter

from app.api.admin.checklists import router as checklists_router
from app.api.admin.defects import router as defects_router
from app.api.admin.templates import router as templates_router
from app.api.admin.users import router as users_router
from app.api.admin.vehicles import router as vehicles_router

admin_router: APIRouter = APIRouter()

admin_router.include_router(users_router, prefix="/users", tags=["Users"])
admin_router.include_router(vehicles_router, prefix="/vehicles", tags=["Admin Vehicles"])
admin_router.include_router(templates_router, prefix="/checklist-templates", tags=["Admin Checklist Templates"])
admin_router.include_router(checklists_router, prefix="/checklists", tags=["Admin Checklists"])
admin_router.include_router(defects_router, prefix="/defects", tags=["Admin Defects"])
