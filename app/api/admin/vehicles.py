"""관리자 차량 라우터 — 차량 등록/수정/삭제, 차량 사진, 차량 서류.

Admin Vehicle Router — Vehicle registration, update, deletion, photo and
documents. Manager-or-above only.
"""

from datetime import date
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, File, Form, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import require_manager
from app.database import get_db
from app.models.user import User
from app.schemas.common import MessageResponse
from app.schemas.fleet import VehicleCreate, VehicleDocumentResponse, VehicleResponse, VehicleUpdate
from app.services.vehicle_service import vehicle_service

router: APIRouter = APIRouter()


@router.post("/", response_model=VehicleResponse, status_code=201)
async def create_vehicle(
    data: VehicleCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_manager)],
) -> VehicleResponse:
    """차량을 등록합니다 — 번호판은 대문자로 저장.

    Register a vehicle; the plate is stored upper-cased and must be unique.
    """
    result: VehicleResponse = await vehicle_service.create_vehicle(db, data)
    await db.commit()
    return result


@router.put("/{vehicle_id}", response_model=VehicleResponse)
async def update_vehicle(
    vehicle_id: UUID,
    data: VehicleUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_manager)],
) -> VehicleResponse:
    result: VehicleResponse = await vehicle_service.update_vehicle(db, vehicle_id, data)
    await db.commit()
    return result


@router.delete("/{vehicle_id}", response_model=MessageResponse)
async def delete_vehicle(
    vehicle_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_manager)],
) -> MessageResponse:
    """차량 삭제 — 점검, 결함, 서류도 함께 삭제됩니다.

    Delete a vehicle with its checklists, defects and documents.
    """
    await vehicle_service.delete_vehicle(db, vehicle_id)
    return MessageResponse(message="Veículo excluído")


@router.put("/{vehicle_id}/photo", response_model=VehicleResponse)
async def set_vehicle_photo(
    vehicle_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_manager)],
    photo: UploadFile = File(...),
) -> VehicleResponse:
    """차량 사진 교체 — Replace the vehicle photo."""
    return await vehicle_service.set_photo(db, vehicle_id, photo)


# --- 차량 서류 (Vehicle documents) ---


@router.get("/{vehicle_id}/documents", response_model=list[VehicleDocumentResponse])
async def list_documents(
    vehicle_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_manager)],
) -> list[VehicleDocumentResponse]:
    return await vehicle_service.list_documents(db, vehicle_id)


@router.post("/{vehicle_id}/documents", response_model=VehicleDocumentResponse, status_code=201)
async def add_document(
    vehicle_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_manager)],
    doc_type: str = Form(...),
    expires_on: date | None = Form(None),
    file: UploadFile = File(...),
) -> VehicleDocumentResponse:
    """차량 서류 등록 (multipart) — 파일 업로드 실패 시 레코드 없음.

    Register a vehicle document; the file goes through the upload pipeline.
    """
    return await vehicle_service.add_document(db, vehicle_id, doc_type, file, expires_on)


@router.delete("/{vehicle_id}/documents/{document_id}", response_model=MessageResponse)
async def delete_document(
    vehicle_id: UUID,
    document_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_manager)],
) -> MessageResponse:
    await vehicle_service.delete_document(db, vehicle_id, document_id)
    return MessageResponse(message="Documento excluído")
