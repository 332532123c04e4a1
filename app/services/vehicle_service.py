"""차량 서비스 — 차량 CRUD, 차량 사진, 차량 서류 비즈니스 로직.

Vehicle Service — Business logic for vehicles, their photo and documents.
Plates are stored upper-cased and must be unique. Files go through the
photo upload pipeline inside a Saga, so a failed insert removes them.
"""

import logging
from datetime import date
from typing import Sequence
from uuid import UUID

from fastapi import UploadFile
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.fleet import Vehicle, VehicleDocument
from app.repositories.checklist_repository import checklist_repository
from app.repositories.defect_repository import defect_repository
from app.repositories.vehicle_repository import vehicle_repository
from app.schemas.fleet import (
    VehicleCreate,
    VehicleDetailResponse,
    VehicleDocumentResponse,
    VehicleResponse,
    VehicleUpdate,
)
from app.services.checklist_service import to_checklist_summary
from app.services.defect_service import STATUS_RESOLVED, to_defect_response
from app.services.photo_upload_service import photo_upload_service
from app.services.storage_service import storage_service
from app.utils.errors import to_data_layer_error
from app.utils.exceptions import BadRequestError, DuplicateError, NotFoundError
from app.utils.saga import Saga

logger = logging.getLogger(__name__)

# 상세 화면의 최근 체크리스트 수 — Recent checklists shown on the detail view
RECENT_CHECKLISTS: int = 5


class VehicleService:
    """차량 관련 비즈니스 로직을 처리하는 서비스.

    Service handling vehicle business logic.
    """

    def _to_response(self, vehicle: Vehicle) -> VehicleResponse:
        return VehicleResponse(
            id=str(vehicle.id),
            plate=vehicle.plate,
            model=vehicle.model,
            year=vehicle.year,
            chassis=vehicle.chassis,
            current_mileage=vehicle.current_mileage,
            photo_url=vehicle.photo_url,
            created_at=vehicle.created_at,
        )

    def _to_document_response(self, document: VehicleDocument) -> VehicleDocumentResponse:
        return VehicleDocumentResponse(
            id=str(document.id),
            vehicle_id=str(document.vehicle_id),
            doc_type=document.doc_type,
            file_url=document.file_url,
            expires_on=document.expires_on,
            created_at=document.created_at,
        )

    async def _get_or_raise(self, db: AsyncSession, vehicle_id: UUID) -> Vehicle:
        vehicle: Vehicle | None = await vehicle_repository.get_by_id(db, vehicle_id)
        if vehicle is None:
            raise NotFoundError("Veículo não encontrado")
        return vehicle

    async def list_vehicles(self, db: AsyncSession, search: str | None = None) -> list[VehicleResponse]:
        """모델명 순 차량 목록 — Vehicles ordered by model."""
        vehicles: Sequence[Vehicle] = await vehicle_repository.list_ordered(db, search)
        return [self._to_response(v) for v in vehicles]

    async def get_vehicle(self, db: AsyncSession, vehicle_id: UUID) -> VehicleDetailResponse:
        """차량 상세 — 최근 체크리스트, 미해결 결함, 서류 포함.

        Vehicle detail with its recent checklists, unresolved defects and documents.
        """
        vehicle: Vehicle = await self._get_or_raise(db, vehicle_id)

        query = checklist_repository.filtered_query(vehicle_id=vehicle_id).limit(RECENT_CHECKLISTS)
        checklists = (await db.execute(query)).scalars().all()
        defects = await defect_repository.list_filtered(db, vehicle_id=vehicle_id)
        documents = await vehicle_repository.list_documents(db, vehicle_id)

        return VehicleDetailResponse(
            **self._to_response(vehicle).model_dump(),
            recent_checklists=[to_checklist_summary(c).model_dump() for c in checklists],
            open_defects=[to_defect_response(d) for d in defects if d.status != STATUS_RESOLVED],
            documents=[self._to_document_response(d) for d in documents],
        )

    async def create_vehicle(self, db: AsyncSession, data: VehicleCreate) -> VehicleResponse:
        """차량을 등록합니다.

        Register a vehicle; the plate is upper-cased by the schema.

        Raises:
            DuplicateError: 같은 번호판이 이미 존재할 때 (Plate already registered)
        """
        if await vehicle_repository.get_by_plate(db, data.plate) is not None:
            raise DuplicateError("Já existe um veículo com esta placa.")
        try:
            vehicle: Vehicle = await vehicle_repository.create(db, data.model_dump())
        except SQLAlchemyError as exc:
            raise to_data_layer_error(exc, "Erro ao cadastrar veículo") from exc
        return self._to_response(vehicle)

    async def update_vehicle(
        self,
        db: AsyncSession,
        vehicle_id: UUID,
        data: VehicleUpdate,
    ) -> VehicleResponse:
        """차량 정보를 수정합니다 (Partial update; plate stays unique)."""
        vehicle: Vehicle = await self._get_or_raise(db, vehicle_id)
        update_data: dict = data.model_dump(exclude_unset=True)
        plate: str | None = update_data.get("plate")
        if plate is not None and plate != vehicle.plate:
            if await vehicle_repository.get_by_plate(db, plate) is not None:
                raise DuplicateError("Já existe um veículo com esta placa.")
        if "current_mileage" in update_data and update_data["current_mileage"] is None:
            del update_data["current_mileage"]
        try:
            updated: Vehicle | None = await vehicle_repository.update(db, vehicle_id, update_data)
        except SQLAlchemyError as exc:
            raise to_data_layer_error(exc, "Erro ao atualizar veículo") from exc
        return self._to_response(updated)

    async def _stored_files(self, db: AsyncSession, vehicle: Vehicle) -> list[str]:
        """차량에 연결된 모든 파일 URL — vehicle photo, documents, checklist,
        section, response and defect photos (each URL once)."""
        urls: list[str] = [vehicle.photo_url] if vehicle.photo_url else []
        urls.extend(d.file_url for d in await vehicle_repository.list_documents(db, vehicle.id))
        for checklist in await checklist_repository.list_with_responses(db, vehicle.id):
            urls.extend(checklist.photo_urls or [])
            for section in (checklist.sections or {}).values():
                urls.extend(section.get("photo_urls", []))
            for response in checklist.responses:
                urls.extend(response.photo_urls or [])
        urls.extend(d.photo_url for d in await defect_repository.list_filtered(db, vehicle_id=vehicle.id) if d.photo_url)
        return list(dict.fromkeys(urls))

    async def delete_vehicle(self, db: AsyncSession, vehicle_id: UUID) -> None:
        """차량을 삭제하고 저장된 파일을 정리합니다.

        Delete a vehicle (checklists, defects and documents cascade), then
        remove its stored files. File cleanup runs only after the commit.
        """
        vehicle: Vehicle = await self._get_or_raise(db, vehicle_id)
        file_urls: list[str] = await self._stored_files(db, vehicle)

        try:
            await vehicle_repository.delete(db, vehicle_id)
            await db.commit()
        except SQLAlchemyError as exc:
            await db.rollback()
            raise to_data_layer_error(exc, "Erro ao excluir veículo") from exc
        deleted: int = storage_service.delete_objects(file_urls)
        logger.info("vehicle %s deleted, %d file(s) removed", vehicle_id, deleted)

    async def set_photo(self, db: AsyncSession, vehicle_id: UUID, photo: UploadFile) -> VehicleResponse:
        """차량 사진을 교체합니다 (Replace the vehicle photo; the old file is removed)."""
        vehicle: Vehicle = await self._get_or_raise(db, vehicle_id)
        previous: str | None = vehicle.photo_url

        async with Saga("set_vehicle_photo", db) as saga:
            urls: list[str] = await photo_upload_service.upload(
                [photo], f"vehicles/{vehicle_id}", saga, max_count=1, scope="veículo"
            )
            if not urls:
                raise BadRequestError("Não foi possível enviar a foto")
            try:
                vehicle.photo_url = urls[0]
                await db.commit()
            except SQLAlchemyError as exc:
                raise to_data_layer_error(exc, "Erro ao salvar foto") from exc

        if previous:
            storage_service.delete_objects([previous])
        return self._to_response(await self._get_or_raise(db, vehicle_id))

    # --- 차량 서류 (Vehicle documents) ---

    async def list_documents(self, db: AsyncSession, vehicle_id: UUID) -> list[VehicleDocumentResponse]:
        await self._get_or_raise(db, vehicle_id)
        documents = await vehicle_repository.list_documents(db, vehicle_id)
        return [self._to_document_response(d) for d in documents]

    async def add_document(
        self,
        db: AsyncSession,
        vehicle_id: UUID,
        doc_type: str,
        file: UploadFile,
        expires_on: date | None = None,
    ) -> VehicleDocumentResponse:
        """차량 서류를 등록합니다 — 파일 업로드 후 레코드 생성.

        Register a vehicle document. The file is uploaded first and deleted
        again when the insert fails.

        Raises:
            BadRequestError: 종류 누락 또는 업로드 실패
            NotFoundError: 차량 없음
        """
        if not doc_type or not doc_type.strip():
            raise BadRequestError("Tipo de documento é obrigatório")
        await self._get_or_raise(db, vehicle_id)

        async with Saga("add_vehicle_document", db) as saga:
            urls: list[str] = await photo_upload_service.upload(
                [file], f"vehicles/{vehicle_id}/documents", saga, max_count=1, scope="documento"
            )
            if not urls:
                raise BadRequestError("Não foi possível enviar o documento")
            try:
                document: VehicleDocument = await vehicle_repository.create_document(db, {
                    "vehicle_id": vehicle_id,
                    "doc_type": doc_type.strip(),
                    "file_url": urls[0],
                    "expires_on": expires_on,
                })
                await db.commit()
            except SQLAlchemyError as exc:
                raise to_data_layer_error(exc, "Erro ao salvar documento") from exc

        return self._to_document_response(document)

    async def delete_document(self, db: AsyncSession, vehicle_id: UUID, document_id: UUID) -> None:
        """차량 서류와 파일을 삭제합니다 (Row first, then the stored file)."""
        document: VehicleDocument | None = await vehicle_repository.get_document(db, vehicle_id, document_id)
        if document is None:
            raise NotFoundError("Documento não encontrado")
        file_url: str = document.file_url
        await db.delete(document)
        await db.commit()
        storage_service.delete_objects([file_url])


# 싱글턴 인스턴스 — Singleton instance
vehicle_service: VehicleService = VehicleService()
