"""체크리스트 관련 Pydantic 요청/응답 스키마 정의.

Checklist Pydantic request/response schema definitions.
Covers templates and their items, inspection checklists, section records,
item responses, fill-out state, sign-off and approval.
"""

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, Field

SectionStatus = Literal["ok", "com_defeito", "pendente"]


# === 템플릿 (Template) 스키마 ===

class TemplateItemCreate(BaseModel):
    """템플릿 항목 생성 요청 스키마.

    Template item creation request. ``sort_order`` defaults to the end of the list.

    Attributes:
        name: 항목 이름 (Inspection point name)
        description: 상세 설명 (Detailed instructions, optional)
        sort_order: 정렬 순서 (Display order, optional)
    """

    name: str = Field(..., min_length=1)
    description: str | None = None
    sort_order: int | None = None


class TemplateItemUpdate(BaseModel):
    """템플릿 항목 수정 요청 스키마 (부분 업데이트)."""

    name: str | None = Field(None, min_length=1)
    description: str | None = None
    sort_order: int | None = None


class TemplateItemResponse(BaseModel):
    id: str
    name: str
    description: str | None
    sort_order: int


class TemplateCreate(BaseModel):
    """템플릿 생성 요청 스키마 — 항목을 함께 생성할 수 있습니다.

    Template creation request; items may be created in the same call.
    """

    name: str = Field(..., min_length=1)
    description: str | None = None
    items: list[TemplateItemCreate] = []


class TemplateUpdate(BaseModel):
    name: str | None = Field(None, min_length=1)
    description: str | None = None


class TemplateResponse(BaseModel):
    """템플릿 응답 스키마 — 정렬된 항목 포함 (Template with ordered items)."""

    id: str
    name: str
    description: str | None
    item_count: int = 0
    items: list[TemplateItemResponse] = []


class ReorderRequest(BaseModel):
    """항목 재정렬 요청 스키마 — item_ids 순서가 새 sort_order."""

    item_ids: list[str] = Field(..., min_length=1)


# === 체크리스트 (Checklist) 스키마 ===

class SectionInput(BaseModel):
    """구역 입력 — Section data submitted by the operator.

    Photos arrive as multipart files; stored URLs are appended by the server.
    """

    status: SectionStatus = "pendente"
    observation: str = ""


class ItemResponseResponse(BaseModel):
    """항목 응답 스키마 (Recorded answer to one template item)."""

    id: str
    item_id: str
    item_name: str | None = None
    sort_order: int | None = None
    is_conforming: bool
    note: str | None
    photo_urls: list[str] = []
    created_at: datetime


class ChecklistSummary(BaseModel):
    """체크리스트 목록 응답 스키마 (Checklist list entry)."""

    id: str
    vehicle_id: str
    vehicle_plate: str | None = None
    vehicle_model: str | None = None
    template_id: str
    template_name: str | None = None
    operator_id: str
    operator_name: str | None
    status: str
    inspection_mode: str
    odometer_start: int
    odometer_end: int | None
    signed: bool
    created_at: datetime


class ChecklistDetail(ChecklistSummary):
    """체크리스트 상세 응답 — 구역 기록과 항목 응답 포함.

    Checklist detail with section records and responses ordered by item order.
    """

    operator_function: str | None
    operator_badge: str | None
    operator_contract: str | None
    comments: str | None
    photo_urls: list[str] = []
    sections: dict[str, dict[str, Any]] = {}
    responses: list[ItemResponseResponse] = []
    signed_at: datetime | None
    latitude: float | None
    longitude: float | None
    updated_at: datetime


class FillEntryResponse(BaseModel):
    """진행 항목 응답 — One section or item in fill-out order."""

    key: str
    label: str
    status: str
    addressed: bool
    data: dict[str, Any] = {}


class FillStateResponse(BaseModel):
    """체크리스트 진행 상태 응답 스키마.

    Fill-out state: progress, resume point and completion flags.

    Attributes:
        mode: 점검 방식 (sections / items)
        entries: 순서대로 정렬된 구역 또는 항목 (Ordered sections or items)
        completed / total / progress: 진행률 (Progress counters and percentage)
        can_save: 저장 가능 여부 (progress > 0)
        current: 첫 번째 미완료 항목 (First incomplete entry, resume point)
        is_complete: 모두 완료 여부 (Everything addressed, show summary)
    """

    checklist_id: str
    mode: str
    status: str
    entries: list[FillEntryResponse]
    completed: int
    total: int
    progress: float
    can_save: bool
    current: FillEntryResponse | None
    is_complete: bool


class SectionSaveResponse(BaseModel):
    """구역 저장 응답 — 갱신된 체크리스트와 다음 미완료 구역."""

    checklist: ChecklistDetail
    next_section: str | None


class ItemAnswerResponse(BaseModel):
    """항목 응답 저장 결과 — 저장된 응답과 다음 미응답 항목."""

    response: ItemResponseResponse
    status: str
    next_item: FillEntryResponse | None
    is_complete: bool


class SignRequest(BaseModel):
    """서명 요청 스키마.

    Sign-off request. A final odometer above the vehicle's current mileage
    raises the vehicle's mileage.
    """

    odometer_end: int | None = Field(None, ge=0)
    comments: str | None = None


class ApproveRequest(BaseModel):
    """승인 요청 스키마 — 명시적 확인 필요 (Explicit confirmation required)."""

    confirm: bool = False


class ChecklistCreate(BaseModel):
    """체크리스트 생성 폼 데이터 (multipart 필드에서 구성).

    Checklist creation form, assembled from multipart fields by the router.
    Fields stay loosely typed here; mandatory fields and formats are checked
    by the service so that a missing field is reported before any upload.
    """

    vehicle_id: str | None = None
    template_id: str | None = None
    odometer_start: str | None = None
    operator_name: str | None = None
    operator_badge: str | None = None
    operator_function: str | None = None
    operator_contract: str | None = None
    latitude: float | None = None
    longitude: float | None = None
    inspection_mode: str = "sections"
