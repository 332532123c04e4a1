"""체크리스트 서비스 — 점검 생성, 구역/항목 기록, 서명, 승인 비즈니스 로직.

Checklist Service — Inspection lifecycle.

States:
    collecting-info → (create) → pendente | ok | com_defeito → (approve) → concluido

Every save recomputes the aggregate status from the section records
(``sections`` mode) or from the item responses (``items`` mode). Each
operation that uploads photos runs inside a Saga: the uploads register
delete compensations, so a failed record write leaves no orphaned object.
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Sequence
from uuid import UUID

from fastapi import UploadFile
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.models.checklist import Checklist, ChecklistResponse, ChecklistTemplate
from app.models.user import User
from app.repositories.checklist_repository import checklist_repository
from app.repositories.template_repository import template_repository
from app.repositories.vehicle_repository import vehicle_repository
from app.schemas.checklist import (
    ChecklistCreate,
    ChecklistDetail,
    ChecklistSummary,
    FillEntryResponse,
    FillStateResponse,
    ItemAnswerResponse,
    ItemResponseResponse,
    SectionInput,
    SectionSaveResponse,
    SignRequest,
)
from app.services.checklist_state import (
    MODE_ITEMS,
    MODE_SECTIONS,
    SECTION_IDS,
    STATUS_COMPLETED,
    STATUS_PENDING,
    FillEntry,
    FillState,
    build_fill_state,
    compile_observations,
    empty_sections,
    item_entries,
    section_entries,
)
from app.services.photo_upload_service import non_empty, photo_upload_service
from app.services.role_service import LEVEL_MANAGER, role_satisfies
from app.utils.errors import to_data_layer_error
from app.utils.exceptions import BadRequestError, DuplicateError, ForbiddenError, NotFoundError
from app.utils.saga import Saga

logger = logging.getLogger(__name__)

# 목록 화면 경로 — Listing route returned as redirect hint on load failures
LISTING_PATH: str = "/checklists"


def _parse_uuid(value: str, label: str) -> UUID:
    try:
        return UUID(value)
    except ValueError:
        raise BadRequestError(f"{label} inválido")


def to_response_response(response: ChecklistResponse) -> ItemResponseResponse:
    item = response.item
    return ItemResponseResponse(
        id=str(response.id),
        item_id=str(response.item_id),
        item_name=item.name if item is not None else None,
        sort_order=item.sort_order if item is not None else None,
        is_conforming=response.is_conforming,
        note=response.note,
        photo_urls=list(response.photo_urls or []),
        created_at=response.created_at,
    )


def _summary_fields(checklist: Checklist) -> dict[str, Any]:
    vehicle = checklist.vehicle
    template = checklist.template
    return {
        "id": str(checklist.id),
        "vehicle_id": str(checklist.vehicle_id),
        "vehicle_plate": vehicle.plate if vehicle is not None else None,
        "vehicle_model": vehicle.model if vehicle is not None else None,
        "template_id": str(checklist.template_id),
        "template_name": template.name if template is not None else None,
        "operator_id": str(checklist.operator_id),
        "operator_name": checklist.operator_name,
        "status": checklist.status,
        "inspection_mode": checklist.inspection_mode,
        "odometer_start": checklist.odometer_start,
        "odometer_end": checklist.odometer_end,
        "signed": checklist.signed,
        "created_at": checklist.created_at,
    }


def to_checklist_summary(checklist: Checklist) -> ChecklistSummary:
    """목록용 변환 — vehicle/template 관계가 로드되어 있어야 합니다."""
    return ChecklistSummary(**_summary_fields(checklist))


def to_checklist_detail(checklist: Checklist) -> ChecklistDetail:
    """상세 변환 — 응답은 항목 순서대로 정렬 (Responses ordered by item order)."""
    responses = sorted(
        checklist.responses,
        key=lambda r: r.item.sort_order if r.item is not None else 0,
    )
    return ChecklistDetail(
        **_summary_fields(checklist),
        operator_function=checklist.operator_function,
        operator_badge=checklist.operator_badge,
        operator_contract=checklist.operator_contract,
        comments=checklist.comments,
        photo_urls=list(checklist.photo_urls or []),
        sections=dict(checklist.sections or {}),
        responses=[to_response_response(r) for r in responses],
        signed_at=checklist.signed_at,
        latitude=checklist.latitude,
        longitude=checklist.longitude,
        updated_at=checklist.updated_at,
    )


def _entry_response(entry: FillEntry | None) -> FillEntryResponse | None:
    if entry is None:
        return None
    return FillEntryResponse(
        key=entry.key,
        label=entry.label,
        status=entry.status,
        addressed=entry.addressed,
        data=entry.data,
    )


class ChecklistService:
    """체크리스트 생명주기 서비스.

    Checklist lifecycle service: creation, section and item recording,
    photo collection, fill-out state, sign-off and approval.
    """

    # --- 조회 및 상태 계산 (Loading and state) ---

    async def _load(self, db: AsyncSession, checklist_id: UUID) -> Checklist:
        checklist: Checklist | None = await checklist_repository.get_detail(db, checklist_id)
        if checklist is None:
            raise NotFoundError("Checklist não encontrado")
        return checklist

    def fill_state(self, checklist: Checklist) -> FillState:
        """현재 진행 상태 계산 — Fill-out state for either inspection mode."""
        if checklist.inspection_mode == MODE_ITEMS:
            items = checklist.template.items if checklist.template is not None else []
            return build_fill_state(item_entries(items, checklist.responses))
        return build_fill_state(section_entries(checklist.sections))

    def _ensure_can_view(self, checklist: Checklist, user: User, role: str | None) -> None:
        """점검자 본인 또는 gestor 이상만 접근 (Operator or manager-or-above)."""
        if checklist.operator_id != user.id and not role_satisfies(role, LEVEL_MANAGER):
            raise ForbiddenError()

    def _ensure_can_edit(self, checklist: Checklist, user: User, role: str | None) -> None:
        """편집 권한 및 상태 확인 — never after approval."""
        self._ensure_can_view(checklist, user, role)
        if checklist.status == STATUS_COMPLETED:
            raise BadRequestError("Checklist já concluído não pode ser alterado")

    def _ensure_mode(self, checklist: Checklist, mode: str) -> None:
        if checklist.inspection_mode != mode:
            if mode == MODE_SECTIONS:
                raise BadRequestError("Este checklist não usa inspeção por seções")
            raise BadRequestError("Este checklist não usa inspeção por itens")

    # --- 생성 (Creation) ---

    def _validate_create(self, data: ChecklistCreate) -> tuple[UUID, int]:
        """필수 필드 검증 — 업로드 전에 실행 (Runs before any upload).

        Raises:
            BadRequestError: 필수 필드 누락 또는 형식 오류
        """
        missing: list[str] = []
        if not (data.vehicle_id or "").strip():
            missing.append("veículo")
        if not (data.odometer_start or "").strip():
            missing.append("quilometragem inicial")
        if not (data.operator_name or "").strip():
            missing.append("nome do operador")
        if not (data.operator_badge or "").strip():
            missing.append("matrícula")
        if missing:
            raise BadRequestError(f"Preencha os campos obrigatórios: {', '.join(missing)}")

        if data.inspection_mode not in (MODE_SECTIONS, MODE_ITEMS):
            raise BadRequestError(f"Modo de inspeção inválido: {data.inspection_mode}")

        vehicle_id: UUID = _parse_uuid(data.vehicle_id.strip(), "Veículo")
        try:
            odometer: int = int(data.odometer_start.strip())
        except ValueError:
            raise BadRequestError("Quilometragem inicial inválida")
        if odometer < 0:
            raise BadRequestError("Quilometragem inicial inválida")
        return vehicle_id, odometer

    def _validate_sections(self, sections: dict[str, SectionInput]) -> None:
        unknown: list[str] = [key for key in sections if key not in SECTION_IDS]
        if unknown:
            raise BadRequestError(f"Seção inválida: {', '.join(unknown)}")

    def _validate_section_photos(self, photos: dict[str, list[UploadFile]]) -> None:
        unknown: list[str] = [key for key in photos if key not in SECTION_IDS]
        if unknown:
            raise BadRequestError(f"Seção inválida: {', '.join(unknown)}")

    async def _resolve_template(self, db: AsyncSession, template_id: str | None) -> ChecklistTemplate:
        if template_id:
            template = await template_repository.get_with_items(db, _parse_uuid(template_id, "Template"))
        else:
            template = await template_repository.get_default(db, settings.DEFAULT_TEMPLATE_NAME)
        if template is None:
            raise NotFoundError("Template de checklist não encontrado")
        return template

    async def _upload_sections(
        self,
        checklist_id: UUID,
        current: dict[str, dict[str, Any]],
        updates: dict[str, SectionInput],
        photos: dict[str, list[UploadFile]],
        saga: Saga,
    ) -> tuple[dict[str, dict[str, Any]], list[str]]:
        """구역 업로드 및 병합 — Upload section photos and merge section updates.

        Photos accumulate; they are never replaced. Returns the new section
        record and the URLs uploaded during this call.
        """
        merged: dict[str, dict[str, Any]] = {key: dict(value) for key, value in current.items()}
        uploaded: list[str] = []
        for section_id in SECTION_IDS:
            section: dict[str, Any] = {**empty_sections()[section_id], **merged.get(section_id, {})}
            update: SectionInput | None = updates.get(section_id)
            if update is not None:
                section["status"] = update.status
                section["observation"] = update.observation
            urls: list[str] = await photo_upload_service.upload(
                photos.get(section_id), f"checklists/{checklist_id}/{section_id}", saga
            )
            section["photo_urls"] = [*section.get("photo_urls", []), *urls]
            uploaded.extend(urls)
            merged[section_id] = section
        return merged, uploaded

    async def create_checklist(
        self,
        db: AsyncSession,
        operator: User,
        data: ChecklistCreate,
        sections: dict[str, SectionInput] | None = None,
        section_photos: dict[str, list[UploadFile]] | None = None,
        vehicle_photos: list[UploadFile] | None = None,
    ) -> ChecklistDetail:
        """체크리스트를 생성합니다.

        Create a checklist. Validation runs first; then section and vehicle
        photos are uploaded; then the record is inserted with the status
        derived from the initial section data. If the insert fails, every
        object uploaded during this attempt is deleted.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            operator: 점검자 (Authenticated operator)
            data: 생성 폼 (Vehicle, template, odometer and operator identity)
            sections: 초기 구역 데이터 (Initial section data, sections mode)
            section_photos: 구역별 사진 (Photos per section)
            vehicle_photos: 차량 사진, 최대 5개 (Whole-vehicle photos, ≤5)

        Returns:
            ChecklistDetail: 생성된 체크리스트 (Created checklist)

        Raises:
            BadRequestError: 필수 필드 누락, 잘못된 구역, 사진 개수 초과
            NotFoundError: 차량 또는 템플릿 없음 (Unknown vehicle or template)
            DataLayerError: 레코드 생성 실패 — 업로드는 모두 삭제됨
        """
        sections = sections or {}
        section_photos = section_photos or {}
        vehicle_id, odometer = self._validate_create(data)
        self._validate_sections(sections)
        self._validate_section_photos(section_photos)
        if data.inspection_mode == MODE_ITEMS and (sections or any(section_photos.values())):
            raise BadRequestError("Checklists por itens não aceitam dados de seções")
        photo_upload_service.check_count(
            len(non_empty(vehicle_photos)), settings.MAX_PHOTOS_PER_CHECKLIST, "checklist"
        )

        if await vehicle_repository.get_by_id(db, vehicle_id) is None:
            raise NotFoundError("Veículo não encontrado")
        template: ChecklistTemplate = await self._resolve_template(db, data.template_id)

        checklist_id: UUID = uuid.uuid4()
        async with Saga("create_checklist", db) as saga:
            record: dict[str, dict[str, Any]] = {}
            section_urls: list[str] = []
            if data.inspection_mode == MODE_SECTIONS:
                record, section_urls = await self._upload_sections(
                    checklist_id, empty_sections(), sections, section_photos, saga
                )
                status: str = build_fill_state(section_entries(record)).status
            else:
                status = build_fill_state(item_entries(template.items, [])).status
            photo_urls: list[str] = await photo_upload_service.upload(
                vehicle_photos, f"checklists/{checklist_id}/veiculo", saga,
                max_count=settings.MAX_PHOTOS_PER_CHECKLIST, scope="checklist",
            )

            try:
                await checklist_repository.create(db, {
                    "id": checklist_id,
                    "vehicle_id": vehicle_id,
                    "template_id": template.id,
                    "operator_id": operator.id,
                    "operator_name": data.operator_name.strip(),
                    "operator_badge": data.operator_badge.strip(),
                    "operator_function": (data.operator_function or "").strip() or None,
                    "operator_contract": (data.operator_contract or "").strip() or None,
                    "odometer_start": odometer,
                    "status": status,
                    "inspection_mode": data.inspection_mode,
                    "comments": compile_observations(record) if record else None,
                    "sections": record,
                    "photo_urls": [*section_urls, *photo_urls],
                    "latitude": data.latitude,
                    "longitude": data.longitude,
                })
                await db.commit()
            except SQLAlchemyError as exc:
                raise to_data_layer_error(exc, "Erro ao criar checklist") from exc

        logger.info("checklist %s created for vehicle %s (%s)", checklist_id, vehicle_id, status)
        return to_checklist_detail(await self._load(db, checklist_id))

    # --- 구역 방식 (Sections mode) ---

    async def _save_sections(
        self,
        db: AsyncSession,
        checklist: Checklist,
        updates: dict[str, SectionInput],
        photos: dict[str, list[UploadFile]],
        operation: str,
    ) -> Checklist:
        async with Saga(operation, db) as saga:
            record, uploaded = await self._upload_sections(
                checklist.id, dict(checklist.sections or {}), updates, photos, saga
            )
            try:
                # JSON 컬럼은 새 객체로 교체 — JSON columns are replaced, never mutated in place
                checklist.sections = record
                checklist.photo_urls = [*(checklist.photo_urls or []), *uploaded]
                checklist.status = build_fill_state(section_entries(record)).status
                checklist.comments = compile_observations(record)
                await db.commit()
            except SQLAlchemyError as exc:
                raise to_data_layer_error(exc, "Erro ao salvar checklist") from exc
        return await self._load(db, checklist.id)

    async def save_sections(
        self,
        db: AsyncSession,
        checklist_id: UUID,
        user: User,
        role: str | None,
        updates: dict[str, SectionInput],
        photos: dict[str, list[UploadFile]],
    ) -> ChecklistDetail:
        """구역 데이터를 다시 저장합니다.

        Re-save section data with new photos (accumulated), recompute the
        aggregate status and compile observations into the comments.
        """
        checklist: Checklist = await self._load(db, checklist_id)
        self._ensure_can_edit(checklist, user, role)
        self._ensure_mode(checklist, MODE_SECTIONS)
        self._validate_sections(updates)
        self._validate_section_photos(photos)
        saved: Checklist = await self._save_sections(db, checklist, updates, photos, "save_sections")
        return to_checklist_detail(saved)

    async def mark_section(
        self,
        db: AsyncSession,
        checklist_id: UUID,
        section_id: str,
        user: User,
        role: str | None,
        update: SectionInput,
        photos: list[UploadFile] | None = None,
    ) -> SectionSaveResponse:
        """구역 하나를 저장하고 다음 미완료 구역을 반환합니다.

        Persist one section and return the next incomplete section.
        """
        if section_id not in SECTION_IDS:
            raise NotFoundError(f"Seção não encontrada: {section_id}")
        checklist: Checklist = await self._load(db, checklist_id)
        self._ensure_can_edit(checklist, user, role)
        self._ensure_mode(checklist, MODE_SECTIONS)

        saved: Checklist = await self._save_sections(
            db, checklist, {section_id: update}, {section_id: photos or []}, "mark_section"
        )
        state: FillState = self.fill_state(saved)
        return SectionSaveResponse(
            checklist=to_checklist_detail(saved),
            next_section=state.current.key if state.current is not None else None,
        )

    # --- 항목 방식 (Items mode) ---

    async def respond_to_item(
        self,
        db: AsyncSession,
        checklist_id: UUID,
        user: User,
        role: str | None,
        item_id: UUID,
        is_conforming: bool,
        note: str | None = None,
        photos: Sequence[UploadFile] | None = None,
    ) -> ItemAnswerResponse:
        """템플릿 항목에 응답합니다.

        Record the answer to one template item (≤3 photos). A second answer
        for the same item is rejected before any upload. The aggregate status
        is recomputed and the next unanswered item is returned.

        Raises:
            NotFoundError: 체크리스트 또는 항목 없음
            DuplicateError: 이미 응답한 항목 (Item already answered)
            BadRequestError: 사진 개수 초과 (More than 3 photos)
        """
        checklist: Checklist = await self._load(db, checklist_id)
        self._ensure_can_edit(checklist, user, role)
        self._ensure_mode(checklist, MODE_ITEMS)

        item = await template_repository.get_item(db, checklist.template_id, item_id)
        if item is None:
            raise NotFoundError("Item do checklist não encontrado")
        if await checklist_repository.get_response_for_item(db, checklist.id, item_id) is not None:
            raise DuplicateError("Este item já foi respondido")
        photo_upload_service.check_count(len(non_empty(photos)), settings.MAX_PHOTOS_PER_ITEM, "item")

        async with Saga("respond_to_item", db) as saga:
            urls: list[str] = await photo_upload_service.upload(
                photos, f"checklists/{checklist.id}/items/{item_id}", saga,
                max_count=settings.MAX_PHOTOS_PER_ITEM,
            )
            try:
                response: ChecklistResponse = await checklist_repository.create_response(db, {
                    "checklist_id": checklist.id,
                    "item_id": item_id,
                    "is_conforming": is_conforming,
                    "note": (note or "").strip() or None,
                    "photo_urls": urls,
                })
                response_id: UUID = response.id
                responses = await checklist_repository.get_responses(db, checklist.id)
                state: FillState = build_fill_state(item_entries(checklist.template.items, responses))
                checklist.status = state.status
                await db.commit()
            except SQLAlchemyError as exc:
                raise to_data_layer_error(exc, "Erro ao salvar resposta") from exc

        saved: Checklist = await self._load(db, checklist.id)
        state = self.fill_state(saved)
        recorded = next(r for r in saved.responses if r.id == response_id)
        return ItemAnswerResponse(
            response=to_response_response(recorded),
            status=saved.status,
            next_item=_entry_response(state.current),
            is_complete=state.is_complete,
        )

    async def add_response_photos(
        self,
        db: AsyncSession,
        checklist_id: UUID,
        response_id: UUID,
        user: User,
        role: str | None,
        photos: Sequence[UploadFile],
    ) -> ItemResponseResponse:
        """기존 응답에 사진을 추가합니다.

        Attach more photos to a response. The 3-photo cap counts the photos
        already attached; an excess batch is rejected with nothing uploaded.
        """
        checklist: Checklist = await self._load(db, checklist_id)
        self._ensure_can_edit(checklist, user, role)

        response: ChecklistResponse | None = await checklist_repository.get_response(
            db, checklist.id, response_id
        )
        if response is None:
            raise NotFoundError("Resposta não encontrada")

        existing: list[str] = list(response.photo_urls or [])
        photo_upload_service.check_count(
            len(existing) + len(non_empty(photos)), settings.MAX_PHOTOS_PER_ITEM, "item"
        )

        async with Saga("add_response_photos", db) as saga:
            urls: list[str] = await photo_upload_service.upload(
                photos, f"checklists/{checklist.id}/items/{response.item_id}", saga
            )
            try:
                response.photo_urls = [*existing, *urls]
                await db.commit()
            except SQLAlchemyError as exc:
                raise to_data_layer_error(exc, "Erro ao salvar fotos") from exc

        saved: Checklist = await self._load(db, checklist.id)
        return to_response_response(next(r for r in saved.responses if r.id == response_id))

    # --- 차량 사진, 서명, 승인 (Vehicle photos, sign-off, approval) ---

    async def add_vehicle_photos(
        self,
        db: AsyncSession,
        checklist_id: UUID,
        user: User,
        role: str | None,
        photos: Sequence[UploadFile],
    ) -> ChecklistDetail:
        """체크리스트에 차량 사진을 추가합니다 (≤5 per call)."""
        checklist: Checklist = await self._load(db, checklist_id)
        self._ensure_can_edit(checklist, user, role)

        async with Saga("add_vehicle_photos", db) as saga:
            urls: list[str] = await photo_upload_service.upload(
                photos, f"checklists/{checklist.id}/veiculo", saga,
                max_count=settings.MAX_PHOTOS_PER_CHECKLIST, scope="checklist",
            )
            try:
                checklist.photo_urls = [*(checklist.photo_urls or []), *urls]
                await db.commit()
            except SQLAlchemyError as exc:
                raise to_data_layer_error(exc, "Erro ao salvar fotos") from exc
        return to_checklist_detail(await self._load(db, checklist.id))

    async def get_fill_state(
        self,
        db: AsyncSession,
        checklist_id: UUID,
        user: User,
        role: str | None,
    ) -> FillStateResponse:
        """진행 상태 조회 — 재개 지점 포함.

        Fill-out state for a resumed session. A missing checklist or template
        returns 404 with a redirect hint to the listing.
        """
        checklist: Checklist | None = await checklist_repository.get_detail(db, checklist_id)
        if checklist is None:
            raise NotFoundError({"message": "Checklist não encontrado", "redirect": LISTING_PATH})
        if checklist.template is None:
            raise NotFoundError({"message": "Template do checklist não encontrado", "redirect": LISTING_PATH})
        self._ensure_can_view(checklist, user, role)

        state: FillState = self.fill_state(checklist)
        return FillStateResponse(
            checklist_id=str(checklist.id),
            mode=checklist.inspection_mode,
            status=checklist.status,
            entries=[_entry_response(entry) for entry in state.entries],
            completed=state.completed,
            total=state.total,
            progress=state.progress,
            can_save=state.can_save,
            current=_entry_response(state.current),
            is_complete=state.is_complete,
        )

    async def sign(
        self,
        db: AsyncSession,
        checklist_id: UUID,
        user: User,
        role: str | None,
        data: SignRequest,
    ) -> ChecklistDetail:
        """체크리스트에 서명합니다.

        Sign the checklist: set the signed flag and timestamp, store the
        final odometer and comments when given, and raise the vehicle's
        mileage when the final odometer is higher.

        Raises:
            BadRequestError: 최종 주행거리가 시작값보다 작을 때
        """
        checklist: Checklist = await self._load(db, checklist_id)
        self._ensure_can_edit(checklist, user, role)

        if data.odometer_end is not None:
            if data.odometer_end < checklist.odometer_start:
                raise BadRequestError("Quilometragem final menor que a inicial")
            checklist.odometer_end = data.odometer_end
            vehicle = checklist.vehicle
            if vehicle is not None and data.odometer_end > vehicle.current_mileage:
                vehicle.current_mileage = data.odometer_end
        if data.comments is not None and data.comments.strip():
            checklist.comments = data.comments.strip()

        checklist.signed = True
        checklist.signed_at = datetime.now(timezone.utc)
        await db.flush()
        return to_checklist_detail(await self._load(db, checklist.id))

    async def approve(self, db: AsyncSession, checklist_id: UUID, confirm: bool) -> ChecklistDetail:
        """관리자 승인 — pendente 상태이고 기록이 하나 이상일 때만 concluido로 전환.

        Manager approval. Only a ``pendente`` checklist with at least one
        recorded section or response moves to ``concluido``; the request
        must carry an explicit confirmation.

        Raises:
            BadRequestError: 확인 누락, 상태 불일치, 기록 없음
        """
        if not confirm:
            raise BadRequestError("Confirmação necessária para aprovar o checklist")
        checklist: Checklist = await self._load(db, checklist_id)
        if checklist.status != STATUS_PENDING:
            raise BadRequestError("Apenas checklists pendentes podem ser aprovados")
        if self.fill_state(checklist).completed < 1:
            raise BadRequestError("O checklist não possui respostas registradas")

        checklist.status = STATUS_COMPLETED
        await db.flush()
        return to_checklist_detail(await self._load(db, checklist.id))

    # --- 목록/상세 (Listing and detail) ---

    async def list_checklists(
        self,
        db: AsyncSession,
        status: str | None = None,
        vehicle_id: UUID | None = None,
        operator_id: UUID | None = None,
    ) -> list[ChecklistSummary]:
        checklists = await checklist_repository.list_filtered(
            db, status=status, vehicle_id=vehicle_id, operator_id=operator_id
        )
        return [to_checklist_summary(c) for c in checklists]

    async def get_checklist(self, db: AsyncSession, checklist_id: UUID, user: User, role: str | None) -> ChecklistDetail:
        checklist: Checklist = await self._load(db, checklist_id)
        self._ensure_can_view(checklist, user, role)
        return to_checklist_detail(checklist)


# 싱글턴 인스턴스 — Singleton instance
checklist_service: ChecklistService = ChecklistService()
