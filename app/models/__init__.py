"""SQLAlchemy ORM 모델 패키지 — 모든 도메인 모델의 중앙 임포트 지점.

SQLAlchemy ORM models package — Central import point for all domain models.
Importing from this package ensures all models are registered with the
SQLAlchemy metadata, which is required for Alembic migrations and
relationship resolution.

Modules:
    user: 사용자, 프로필, 역할 (User, Profile, UserRole)
    token: 리프레시 토큰 (Refresh tokens)
    fleet: 차량, 차량 서류, 결함 (Vehicle, VehicleDocument, Defect)
    checklist: 템플릿, 항목, 체크리스트, 응답 (Templates, items, checklists, responses)
"""

from app.models.user import User, Profile, UserRole
from app.models.token import RefreshToken
from app.models.fleet import Vehicle, VehicleDocument, Defect
from app.models.checklist import ChecklistTemplate, ChecklistTemplateItem, Checklist, ChecklistResponse

__all__ = [
    "User", "Profile", "UserRole",
    "RefreshToken",
    "Vehicle", "VehicleDocument", "Defect",
    "ChecklistTemplate", "ChecklistTemplateItem", "Checklist", "ChecklistResponse",
]
