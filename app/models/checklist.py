"""체크리스트 관련 SQLAlchemy ORM 모델 정의.

Checklist SQLAlchemy ORM model definitions.
Defines reusable inspection templates with ordered items, inspection
instances (checklists) and per-item operator responses.

Tables:
    - checklist_templates: 점검 템플릿 (Reusable inspection templates)
    - checklist_template_items: 템플릿 항목 (Ordered inspection points)
    - checklists: 점검 인스턴스 (One vehicle inspection)
    - checklist_responses: 항목 응답 (One answer per template item per checklist)
"""

import uuid
from datetime import datetime, timezone
from sqlalchemy import Boolean, String, DateTime, Float, Integer, Text, ForeignKey, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base, JSONType


class ChecklistTemplate(Base):
    """체크리스트 템플릿 모델 — 재사용 가능한 점검 정의.

    Checklist template model — Named, reusable inspection definition.

    Attributes:
        id: 고유 식별자 UUID (Unique identifier)
        name: 템플릿 이름 (Template name, unique)
        description: 설명 (Description, optional)

    Relationships:
        items: 템플릿 항목 목록 (Template items, ordered by sort_order)
    """

    __tablename__ = "checklist_templates"

    # 템플릿 고유 식별자 — Template unique identifier (UUID v4, auto-generated)
    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    # 템플릿 이름 — Template name (기본 템플릿 조회 키, lookup key for the default template)
    name: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    # 생성 일시 — Record creation timestamp (UTC)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    # 수정 일시 — Last modification timestamp (UTC, auto-updated)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))

    # 관계 — Items sorted by sort_order for consistent display ordering
    items = relationship("ChecklistTemplateItem", back_populates="template", cascade="all, delete-orphan", order_by="ChecklistTemplateItem.sort_order")


class ChecklistTemplateItem(Base):
    """체크리스트 템플릿 항목 모델.

    Checklist template item model — One ordered inspection point.

    Attributes:
        id: 고유 식별자 UUID (Unique identifier)
        template_id: 소속 템플릿 FK (Parent template foreign key)
        name: 항목 이름 (Item name)
        description: 항목 설명 (Item description, optional)
        sort_order: 정렬 순서 (Display order)
    """

    __tablename__ = "checklist_template_items"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    # 소속 템플릿 FK — Parent template (CASCADE: 템플릿 삭제 시 항목도 삭제)
    template_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("checklist_templates.id", ondelete="CASCADE"), nullable=False)
    name: Mapped[str] = mapped_column(String(500), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    # 정렬 순서 — Display order (0부터 시작, 0-based)
    sort_order: Mapped[int] = mapped_column(Integer, default=0)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))

    template = relationship("ChecklistTemplate", back_populates="items")


class Checklist(Base):
    """체크리스트 모델 — 차량 점검 인스턴스.

    Checklist model — One vehicle inspection instance.
    Created when an operator starts an inspection, mutated as sections or
    items are filled and when a manager approves it. Never deleted in the
    normal flow.

    inspection_mode:
        - "sections": 6개 고정 구역 (six fixed vehicle areas, stored in ``sections`` JSON)
        - "items": 템플릿 항목별 응답 (one response row per template item)

    Attributes:
        id: 고유 식별자 UUID (Unique identifier)
        vehicle_id: 차량 FK (Vehicle foreign key)
        template_id: 템플릿 FK (Template foreign key)
        operator_id: 점검자 FK (Inspecting user)
        operator_name: 점검자 이름 (Operator-entered name)
        operator_function: 직무 (Operator function, optional)
        operator_badge: 사번 (Badge / registration number)
        operator_contract: 계약 번호 (Contract number, optional)
        odometer_start: 시작 주행거리 (Starting odometer)
        odometer_end: 종료 주행거리 (Ending odometer, optional)
        status: 종합 상태 (ok / com_defeito / pendente / concluido)
        comments: 최종 코멘트 (Free-text final comments)
        photo_urls: 수집된 사진 URL (Collected vehicle photo URLs)
        sections: 구역별 기록 (Per-section status, photos, observation)
        signed: 서명 여부 (Signed flag)
        signed_at: 서명 일시 (Signed timestamp)
        latitude / longitude: 위치 (Geolocation, optional)
    """

    __tablename__ = "checklists"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    vehicle_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("vehicles.id", ondelete="CASCADE"), nullable=False)
    template_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("checklist_templates.id"), nullable=False)
    operator_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("users.id"), nullable=False)
    # 점검자 입력 신원 정보 — Operator-entered identity fields
    operator_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    operator_function: Mapped[str | None] = mapped_column(String(255), nullable=True)
    operator_badge: Mapped[str | None] = mapped_column(String(100), nullable=True)
    operator_contract: Mapped[str | None] = mapped_column(String(100), nullable=True)
    odometer_start: Mapped[int] = mapped_column(Integer, nullable=False)
    odometer_end: Mapped[int | None] = mapped_column(Integer, nullable=True)
    # 종합 상태 — Aggregate status (저장 시마다 재계산, recomputed on every save)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="pendente")
    inspection_mode: Mapped[str] = mapped_column(String(20), nullable=False, default="sections")
    comments: Mapped[str | None] = mapped_column(Text, nullable=True)
    # 사진 URL 목록 — 업로드 성공한 객체만 참조 (Only successfully uploaded objects)
    photo_urls: Mapped[list] = mapped_column(JSONType, nullable=False, default=list)
    # 구역 기록 — {section_id: {"status", "observation", "photo_urls"}}
    sections: Mapped[dict] = mapped_column(JSONType, nullable=False, default=dict)
    signed: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    signed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    latitude: Mapped[float | None] = mapped_column(Float, nullable=True)
    longitude: Mapped[float | None] = mapped_column(Float, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))

    # 관계 — Relationships
    vehicle = relationship("Vehicle", back_populates="checklists")
    template = relationship("ChecklistTemplate")
    operator = relationship("User")
    responses = relationship("ChecklistResponse", back_populates="checklist", cascade="all, delete-orphan")
    defects = relationship("Defect", back_populates="checklist")


class ChecklistResponse(Base):
    """체크리스트 응답 모델 — 템플릿 항목 하나에 대한 점검자 답변.

    Checklist response model — One operator answer to one template item.
    At most one response per (checklist, item); append-only during fill-out.

    Attributes:
        id: 고유 식별자 UUID (Unique identifier)
        checklist_id: 체크리스트 FK (Parent checklist)
        item_id: 템플릿 항목 FK (Answered template item)
        is_conforming: 적합 여부 (Conformity flag)
        note: 메모 (Free-text note, optional)
        photo_urls: 사진 URL, 최대 3개 (Up to 3 photo URLs)

    Constraints:
        uq_response_checklist_item: 체크리스트+항목 조합 고유 (One answer per item)
    """

    __tablename__ = "checklist_responses"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    checklist_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("checklists.id", ondelete="CASCADE"), nullable=False)
    item_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("checklist_template_items.id", ondelete="CASCADE"), nullable=False)
    is_conforming: Mapped[bool] = mapped_column(Boolean, nullable=False)
    note: Mapped[str | None] = mapped_column(Text, nullable=True)
    photo_urls: Mapped[list] = mapped_column(JSONType, nullable=False, default=list)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))

    __table_args__ = (
        UniqueConstraint("checklist_id", "item_id", name="uq_response_checklist_item"),
    )

    checklist = relationship("Checklist", back_populates="responses")
    item = relationship("ChecklistTemplateItem")
