"""차량, 차량 서류, 결함 관련 Pydantic 스키마 정의.

Vehicle, vehicle document and defect Pydantic request/response schemas.
"""

from datetime import date, datetime
from typing import Literal

from pydantic import BaseModel, Field, field_validator

Severity = Literal["leve", "moderado", "critico"]
DefectStatus = Literal["aberto", "em_analise", "resolvido"]


# === 차량 (Vehicle) 스키마 ===

class VehicleCreate(BaseModel):
    """차량 등록 요청 스키마.

    Vehicle registration request. The plate is stored upper-cased.

    Attributes:
        plate: 번호판 (License plate)
        model: 모델명 (Model name)
        year: 연식 (Model year)
        chassis: 차대번호 (Chassis number, optional)
        current_mileage: 현재 주행거리 (Current odometer, default 0)
    """

    plate: str = Field(..., min_length=1, max_length=20)
    model: str = Field(..., min_length=1)
    year: int = Field(..., ge=1900, le=2100)
    chassis: str | None = None
    current_mileage: int = Field(0, ge=0)

    @field_validator("plate")
    @classmethod
    def _upper_plate(cls, value: str) -> str:
        return value.strip().upper()


class VehicleUpdate(BaseModel):
    """차량 수정 요청 스키마 (부분 업데이트) — Partial vehicle update."""

    plate: str | None = Field(None, min_length=1, max_length=20)
    model: str | None = None
    year: int | None = Field(None, ge=1900, le=2100)
    chassis: str | None = None
    current_mileage: int | None = Field(None, ge=0)
    photo_url: str | None = None

    @field_validator("plate")
    @classmethod
    def _upper_plate(cls, value: str | None) -> str | None:
        return value.strip().upper() if value is not None else None


class VehicleResponse(BaseModel):
    """차량 응답 스키마 (Vehicle response)."""

    id: str
    plate: str
    model: str
    year: int
    chassis: str | None
    current_mileage: int
    photo_url: str | None
    created_at: datetime


class VehicleDocumentResponse(BaseModel):
    """차량 서류 응답 스키마 (Vehicle document response)."""

    id: str
    vehicle_id: str
    doc_type: str
    file_url: str
    expires_on: date | None
    created_at: datetime


# === 결함 (Defect) 스키마 ===

class DefectUpdate(BaseModel):
    """결함 상태/심각도 변경 요청 스키마 (관리자용).

    Defect status/severity update. Moving to ``resolvido`` stamps
    resolved_at and resolved_by on the server.
    """

    status: DefectStatus | None = None
    severity: Severity | None = None
    description: str | None = None


class DefectResponse(BaseModel):
    """결함 응답 스키마 — 차량 번호판/모델 포함.

    Defect response with the vehicle plate and model resolved for display.
    """

    id: str
    vehicle_id: str
    vehicle_plate: str | None = None
    vehicle_model: str | None = None
    checklist_id: str | None
    description: str
    severity: str
    status: str
    photo_url: str | None
    resolved_at: datetime | None
    resolved_by: str | None
    created_at: datetime


class VehicleDetailResponse(VehicleResponse):
    """차량 상세 응답 — 최근 체크리스트와 미해결 결함 포함.

    Vehicle detail with its most recent checklists and open defects.
    """

    recent_checklists: list[dict] = []
    open_defects: list[DefectResponse] = []
    documents: list[VehicleDocumentResponse] = []
