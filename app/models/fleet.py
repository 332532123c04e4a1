"""차량 및 결함 관련 SQLAlchemy ORM 모델 정의.

Fleet SQLAlchemy ORM model definitions — vehicles, their documents,
and independently tracked defects.

Tables:
    - vehicles: 차량 (Vehicles, plate is unique and upper-cased)
    - vehicle_documents: 차량 서류 (Registration, insurance, etc. with expiry)
    - defects: 결함 (Vehicle defects, optionally linked to a checklist)
"""

import uuid
from datetime import date, datetime, timezone
from sqlalchemy import String, DateTime, Date, Integer, Text, ForeignKey, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base


class Vehicle(Base):
    """차량 모델.

    Vehicle model — One fleet vehicle.

    Attributes:
        id: 고유 식별자 UUID (Unique identifier)
        plate: 번호판 (License plate, unique, upper-case)
        model: 모델명 (Model name)
        year: 연식 (Model year)
        chassis: 차대번호 (Chassis number, optional)
        current_mileage: 현재 주행거리 (Current odometer reading)
        photo_url: 차량 사진 (Vehicle photo URL, optional)
    """

    __tablename__ = "vehicles"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    # 번호판 — License plate (대문자 저장, stored upper-case)
    plate: Mapped[str] = mapped_column(String(20), unique=True, nullable=False)
    model: Mapped[str] = mapped_column(String(255), nullable=False)
    year: Mapped[int] = mapped_column(Integer, nullable=False)
    chassis: Mapped[str | None] = mapped_column(String(50), nullable=True)
    # 현재 주행거리 — Current mileage (서명 시 최종 주행거리로 갱신, raised on sign-off)
    current_mileage: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    photo_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))

    # 관계 — Relationships
    documents = relationship("VehicleDocument", back_populates="vehicle", cascade="all, delete-orphan")
    checklists = relationship("Checklist", back_populates="vehicle", cascade="all, delete-orphan")
    defects = relationship("Defect", back_populates="vehicle", cascade="all, delete-orphan")


class VehicleDocument(Base):
    """차량 서류 모델 — 종류, 파일, 만료일.

    Vehicle document model — Type, stored file URL and expiry date.
    """

    __tablename__ = "vehicle_documents"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    vehicle_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("vehicles.id", ondelete="CASCADE"), nullable=False)
    # 서류 종류 — Document type (e.g. "CRLV", "Seguro")
    doc_type: Mapped[str] = mapped_column(String(100), nullable=False)
    file_url: Mapped[str] = mapped_column(Text, nullable=False)
    # 만료일 — Expiry date (optional)
    expires_on: Mapped[date | None] = mapped_column(Date, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))

    vehicle = relationship("Vehicle", back_populates="documents")


class Defect(Base):
    """결함 모델 — 차량 단위로 독립 추적되는 결함.

    Defect model — Vehicle issue tracked independently of checklists.

    Attributes:
        id: 고유 식별자 UUID (Unique identifier)
        vehicle_id: 차량 FK (Vehicle foreign key)
        checklist_id: 발견된 체크리스트 FK (Originating checklist, optional)
        description: 설명 (Description)
        severity: 심각도 (leve / moderado / critico)
        status: 상태 (aberto / em_analise / resolvido)
        photo_url: 사진 URL (Photo URL, optional)
        resolved_at: 해결 일시 (Resolution timestamp)
        resolved_by: 해결한 사용자 (User who resolved it)
    """

    __tablename__ = "defects"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    vehicle_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("vehicles.id", ondelete="CASCADE"), nullable=False)
    # 체크리스트 FK — 체크리스트 삭제 시 NULL (SET NULL on checklist deletion)
    checklist_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey("checklists.id", ondelete="SET NULL"), nullable=True)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    # 심각도 — Severity (기본값 leve, default minor)
    severity: Mapped[str] = mapped_column(String(20), nullable=False, default="leve")
    # 상태 — Status (생성 시 aberto, created open)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="aberto")
    photo_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    resolved_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    resolved_by: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))

    vehicle = relationship("Vehicle", back_populates="defects")
    checklist = relationship("Checklist", back_populates="defects")
