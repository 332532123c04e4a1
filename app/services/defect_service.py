"""결함 서비스 — 결함 등록/조회/상태 변경 비즈니스 로직.

Defect Service — Business logic for vehicle defects.
Defects are tracked independently of checklists; a defect may reference
the checklist it was found in. Registration uploads an optional photo
first and compensates it when the insert fails.
"""

from datetime import datetime, timezone
from typing import Sequence
from uuid import UUID

from fastapi import UploadFile
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.fleet import Defect
from app.models.user import User
from app.repositories.checklist_repository import checklist_repository
from app.repositories.defect_repository import defect_repository
from app.repositories.vehicle_repository import vehicle_repository
from app.schemas.fleet import DefectResponse, DefectUpdate
from app.services.photo_upload_service import photo_upload_service
from app.utils.errors import to_data_layer_error
from app.utils.exceptions import BadRequestError, NotFoundError
from app.utils.saga import Saga

SEVERITIES: tuple[str, ...] = ("leve", "moderado", "critico")
DEFECT_STATUSES: tuple[str, ...] = ("aberto", "em_analise", "resolvido")
STATUS_OPEN: str = "aberto"
STATUS_RESOLVED: str = "resolvido"


def to_defect_response(defect: Defect) -> DefectResponse:
    """결함 모델을 응답으로 변환 — vehicle 관계가 로드되어 있어야 합니다."""
    vehicle = defect.vehicle
    return DefectResponse(
        id=str(defect.id),
        vehicle_id=str(defect.vehicle_id),
        vehicle_plate=vehicle.plate if vehicle is not None else None,
        vehicle_model=vehicle.model if vehicle is not None else None,
        checklist_id=str(defect.checklist_id) if defect.checklist_id else None,
        description=defect.description,
        severity=defect.severity,
        status=defect.status,
        photo_url=defect.photo_url,
        resolved_at=defect.resolved_at,
        resolved_by=str(defect.resolved_by) if defect.resolved_by else None,
        created_at=defect.created_at,
    )


class DefectService:
    """결함 관련 비즈니스 로직을 처리하는 서비스."""

    async def create_defect(
        self,
        db: AsyncSession,
        vehicle_id: UUID,
        description: str,
        severity: str = "leve",
        checklist_id: UUID | None = None,
        photo: UploadFile | None = None,
    ) -> DefectResponse:
        """결함을 등록합니다 — 사진 업로드 후 레코드 생성.

        Register a defect. The optional photo (≤5 MiB) is uploaded first;
        if the insert then fails the uploaded object is deleted.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            vehicle_id: 차량 UUID (Vehicle UUID)
            description: 결함 설명 (Description, required)
            severity: 심각도 (leve / moderado / critico, default leve)
            checklist_id: 발견된 체크리스트 (Originating checklist, optional)
            photo: 사진 파일 (Optional single photo)

        Returns:
            DefectResponse: 생성된 결함 (status=aberto)

        Raises:
            BadRequestError: 설명 누락 또는 잘못된 심각도 (Missing description or bad severity)
            NotFoundError: 차량 또는 체크리스트 없음 (Unknown vehicle or checklist)
        """
        if not description or not description.strip():
            raise BadRequestError("Descrição do defeito é obrigatória")
        if severity not in SEVERITIES:
            raise BadRequestError(f"Gravidade inválida: {severity}")
        if await vehicle_repository.get_by_id(db, vehicle_id) is None:
            raise NotFoundError("Veículo não encontrado")
        if checklist_id is not None and await checklist_repository.get_by_id(db, checklist_id) is None:
            raise NotFoundError("Checklist não encontrado")

        async with Saga("create_defect", db) as saga:
            urls: list[str] = await photo_upload_service.upload(
                [photo] if photo is not None else [],
                f"defects/{vehicle_id}",
                saga,
                max_count=1,
                scope="defeito",
            )
            try:
                defect: Defect = await defect_repository.create(db, {
                    "vehicle_id": vehicle_id,
                    "checklist_id": checklist_id,
                    "description": description.strip(),
                    "severity": severity,
                    "status": STATUS_OPEN,
                    "photo_url": urls[0] if urls else None,
                })
                await db.commit()
            except SQLAlchemyError as exc:
                raise to_data_layer_error(exc, "Erro ao registrar defeito") from exc

        return await self.get_defect(db, defect.id)

    async def list_defects(
        self,
        db: AsyncSession,
        status: str | None = None,
        severity: str | None = None,
        vehicle_id: UUID | None = None,
    ) -> list[DefectResponse]:
        """결함 목록 (최신순) — Defects newest first, optionally filtered."""
        defects: Sequence[Defect] = await defect_repository.list_filtered(
            db, status=status, severity=severity, vehicle_id=vehicle_id
        )
        return [to_defect_response(d) for d in defects]

    async def get_defect(self, db: AsyncSession, defect_id: UUID) -> DefectResponse:
        defect: Defect | None = await defect_repository.get_detail(db, defect_id)
        if defect is None:
            raise NotFoundError("Defeito não encontrado")
        return to_defect_response(defect)

    async def update_defect(
        self,
        db: AsyncSession,
        defect_id: UUID,
        data: DefectUpdate,
        current_user: User,
    ) -> DefectResponse:
        """결함 상태/심각도를 변경합니다.

        Update status/severity. Moving to ``resolvido`` stamps resolved_at
        and resolved_by; moving away from it clears both.
        """
        defect: Defect | None = await defect_repository.get_detail(db, defect_id)
        if defect is None:
            raise NotFoundError("Defeito não encontrado")

        update_data: dict = data.model_dump(exclude_unset=True, exclude_none=True)
        new_status: str | None = update_data.get("status")
        if new_status is not None and new_status != defect.status:
            if new_status == STATUS_RESOLVED:
                update_data["resolved_at"] = datetime.now(timezone.utc)
                update_data["resolved_by"] = current_user.id
            elif defect.status == STATUS_RESOLVED:
                update_data["resolved_at"] = None
                update_data["resolved_by"] = None

        await defect_repository.update(db, defect_id, update_data)
        refreshed: Defect | None = await defect_repository.get_detail(db, defect_id)
        return to_defect_response(refreshed)


# 싱글턴 인스턴스 — Singleton instance
defect_service: DefectService = DefectService()
