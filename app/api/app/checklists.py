"""앱 체크리스트 라우터 — 점검 생성, 구역/항목 기록, 사진, 서명.

App Checklist Router — Inspection creation, section saves, item answers,
photos, fill state and sign-off.

Multipart conventions:
    - ``sections``: JSON object ``{section_id: {"status", "observation"}}``
    - ``photos_<section_id>``: 구역 사진 파일 (Section photo files)
    - ``photos``: 차량 사진 파일 (Vehicle photo files)

Drivers (motorista) only list their own checklists; editing is limited to
the operator or a manager-or-above.
"""

import json
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, File, Form, Query, Request, UploadFile
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.datastructures import UploadFile as StarletteUploadFile

from app.api.deps import get_current_role, require_any_role
from app.database import get_db
from app.models.user import User
from app.schemas.checklist import (
    ChecklistCreate,
    ChecklistDetail,
    ChecklistSummary,
    FillStateResponse,
    ItemAnswerResponse,
    ItemResponseResponse,
    SectionInput,
    SectionSaveResponse,
    SignRequest,
)
from app.services.checklist_service import checklist_service
from app.services.role_service import ROLE_DRIVER
from app.utils.exceptions import BadRequestError

router: APIRouter = APIRouter()

SECTION_PHOTO_FIELD: str = "photos_"


def parse_sections(raw: str | None) -> dict[str, SectionInput]:
    """구역 JSON 파싱 — Parse the ``sections`` form field.

    Raises:
        BadRequestError: JSON 형식 또는 구역 값이 잘못된 경우
    """
    if raw is None or not raw.strip():
        return {}
    try:
        payload = json.loads(raw)
    except json.JSONDecodeError:
        raise BadRequestError("Dados das seções inválidos")
    if not isinstance(payload, dict):
        raise BadRequestError("Dados das seções inválidos")
    try:
        return {key: SectionInput.model_validate(value or {}) for key, value in payload.items()}
    except ValidationError:
        raise BadRequestError("Status de seção inválido")


async def section_photos(request: Request) -> dict[str, list[UploadFile]]:
    """``photos_<section>`` 필드에서 구역별 파일 수집.

    Collect per-section files from the ``photos_<section_id>`` fields.
    """
    form = await request.form()
    photos: dict[str, list[UploadFile]] = {}
    for key, value in form.multi_items():
        if not key.startswith(SECTION_PHOTO_FIELD) or not isinstance(value, StarletteUploadFile):
            continue
        photos.setdefault(key[len(SECTION_PHOTO_FIELD):], []).append(value)
    return photos


@router.get("/", response_model=list[ChecklistSummary])
async def list_checklists(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_any_role)],
    role: Annotated[str | None, Depends(get_current_role)],
    status: Annotated[str | None, Query(description="상태 필터 (ok/com_defeito/pendente/concluido)")] = None,
    vehicle_id: Annotated[UUID | None, Query(description="차량 필터")] = None,
) -> list[ChecklistSummary]:
    """체크리스트 목록 (최신순) — motorista는 본인 점검만 조회.

    Checklists newest first; drivers only see their own.
    """
    operator_id: UUID | None = current_user.id if role == ROLE_DRIVER else None
    return await checklist_service.list_checklists(
        db, status=status, vehicle_id=vehicle_id, operator_id=operator_id
    )


@router.post("/", response_model=ChecklistDetail, status_code=201)
async def create_checklist(
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_any_role)],
    vehicle_id: str | None = Form(None),
    template_id: str | None = Form(None),
    odometer_start: str | None = Form(None),
    operator_name: str | None = Form(None),
    operator_badge: str | None = Form(None),
    operator_function: str | None = Form(None),
    operator_contract: str | None = Form(None),
    latitude: float | None = Form(None),
    longitude: float | None = Form(None),
    inspection_mode: str = Form("sections"),
    sections: str | None = Form(None),
    photos: list[UploadFile] | None = File(None),
) -> ChecklistDetail:
    """체크리스트 생성 (multipart).

    Start an inspection. Mandatory fields are checked before any upload;
    section and vehicle photos are uploaded before the insert and deleted
    again if the insert fails.
    """
    data = ChecklistCreate(
        vehicle_id=vehicle_id,
        template_id=template_id,
        odometer_start=odometer_start,
        operator_name=operator_name,
        operator_badge=operator_badge,
        operator_function=operator_function,
        operator_contract=operator_contract,
        latitude=latitude,
        longitude=longitude,
        inspection_mode=inspection_mode,
    )
    return await checklist_service.create_checklist(
        db,
        current_user,
        data,
        sections=parse_sections(sections),
        section_photos=await section_photos(request),
        vehicle_photos=photos or [],
    )


@router.get("/{checklist_id}", response_model=ChecklistDetail)
async def get_checklist(
    checklist_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_any_role)],
    role: Annotated[str | None, Depends(get_current_role)],
) -> ChecklistDetail:
    """체크리스트 상세 — 응답은 항목 순서대로 정렬."""
    return await checklist_service.get_checklist(db, checklist_id, current_user, role)


@router.get("/{checklist_id}/fill", response_model=FillStateResponse)
async def get_fill_state(
    checklist_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_any_role)],
    role: Annotated[str | None, Depends(get_current_role)],
) -> FillStateResponse:
    """작성 진행 상태 — 재개 지점, 진행률, 완료 여부.

    Fill-out state: resume point, progress and completion.
    """
    return await checklist_service.get_fill_state(db, checklist_id, current_user, role)


# --- 구역 방식 (Sections mode) ---


@router.put("/{checklist_id}/sections", response_model=ChecklistDetail)
async def save_sections(
    checklist_id: UUID,
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_any_role)],
    role: Annotated[str | None, Depends(get_current_role)],
    sections: str | None = Form(None),
) -> ChecklistDetail:
    """구역 데이터 재저장 — 사진은 누적되고 상태는 재계산됩니다."""
    return await checklist_service.save_sections(
        db, checklist_id, current_user, role, parse_sections(sections), await section_photos(request)
    )


@router.put("/{checklist_id}/sections/{section_id}", response_model=SectionSaveResponse)
async def mark_section(
    checklist_id: UUID,
    section_id: str,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_any_role)],
    role: Annotated[str | None, Depends(get_current_role)],
    status: str = Form("pendente"),
    observation: str = Form(""),
    photos: list[UploadFile] | None = File(None),
) -> SectionSaveResponse:
    """구역 하나 저장 — 다음 미완료 구역을 반환.

    Persist one section and return the next incomplete one.
    """
    try:
        update = SectionInput(status=status, observation=observation)
    except ValidationError:
        raise BadRequestError("Status de seção inválido")
    return await checklist_service.mark_section(
        db, checklist_id, section_id, current_user, role, update, photos or []
    )


# --- 항목 방식 (Items mode) ---


@router.post("/{checklist_id}/responses", response_model=ItemAnswerResponse, status_code=201)
async def respond_to_item(
    checklist_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_any_role)],
    role: Annotated[str | None, Depends(get_current_role)],
    item_id: UUID = Form(...),
    is_conforming: bool = Form(...),
    note: str | None = Form(None),
    photos: list[UploadFile] | None = File(None),
) -> ItemAnswerResponse:
    """항목 응답 (multipart) — 사진 최대 3장, 항목당 1회.

    Answer one template item; returns the next unanswered item.
    """
    return await checklist_service.respond_to_item(
        db, checklist_id, current_user, role, item_id, is_conforming, note, photos or []
    )


@router.post(
    "/{checklist_id}/responses/{response_id}/photos",
    response_model=ItemResponseResponse,
)
async def add_response_photos(
    checklist_id: UUID,
    response_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_any_role)],
    role: Annotated[str | None, Depends(get_current_role)],
    photos: list[UploadFile] = File(...),
) -> ItemResponseResponse:
    """응답에 사진 추가 — 기존 사진 포함 최대 3장.

    Attach photos to an existing response; the cap counts photos already attached.
    """
    return await checklist_service.add_response_photos(
        db, checklist_id, response_id, current_user, role, photos
    )


# --- 차량 사진, 서명 (Vehicle photos, sign-off) ---


@router.post("/{checklist_id}/photos", response_model=ChecklistDetail)
async def add_vehicle_photos(
    checklist_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_any_role)],
    role: Annotated[str | None, Depends(get_current_role)],
    photos: list[UploadFile] = File(...),
) -> ChecklistDetail:
    """차량 사진 추가 (1회 최대 5장) — Add vehicle photos, at most 5 per call."""
    return await checklist_service.add_vehicle_photos(db, checklist_id, current_user, role, photos)


@router.post("/{checklist_id}/sign", response_model=ChecklistDetail)
async def sign_checklist(
    checklist_id: UUID,
    data: SignRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_any_role)],
    role: Annotated[str | None, Depends(get_current_role)],
) -> ChecklistDetail:
    """체크리스트 서명 — 최종 주행거리와 의견 저장.

    Sign the checklist, storing the final odometer and comments.
    """
    result: ChecklistDetail = await checklist_service.sign(db, checklist_id, current_user, role, data)
    await db.commit()
    return result
