"""사용자, 프로필, 역할 관련 SQLAlchemy ORM 모델 정의.

User, Profile and UserRole SQLAlchemy ORM model definitions.
The auth account (users), the operator profile (profiles) and the single
role assignment (user_roles) are separate rows, created together by the
privileged user-creation flow.

Tables:
    - users: 인증 계정 (Auth accounts: email + bcrypt hash)
    - profiles: 사용자 프로필 (Display name and phone)
    - user_roles: 사용자 역할 (One role per user: motorista / gestor / administrador)
"""

import uuid
from datetime import datetime, timezone
from sqlalchemy import String, Boolean, DateTime, ForeignKey, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base


class User(Base):
    """사용자 모델 — 인증 계정 정보.

    User model — Authentication account.
    Email is globally unique and used as the login identifier.

    Attributes:
        id: 고유 식별자 UUID (Unique identifier)
        email: 로그인 이메일 (Login email, unique)
        password_hash: bcrypt 해시된 비밀번호 (bcrypt-hashed password)
        is_active: 활성 상태 (Active status)
        created_at: 생성 일시 UTC (Creation timestamp)
        updated_at: 수정 일시 UTC (Last update timestamp)

    Relationships:
        profile: 프로필 (One-to-one profile)
        role_assignment: 역할 배정 (One-to-one role row)
        refresh_tokens: 리프레시 토큰 목록 (Active refresh tokens, cascade delete)
    """

    __tablename__ = "users"

    # 사용자 고유 식별자 — User unique identifier (UUID v4, auto-generated)
    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    # 로그인 이메일 — Login email (전역 고유, globally unique)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    # 비밀번호 해시 — bcrypt hashed password (평문 저장 금지, never store plaintext)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    # 활성 상태 — Whether the user account is active
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    # 생성 일시 — Record creation timestamp (UTC)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    # 수정 일시 — Last modification timestamp (UTC, auto-updated)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))

    # 관계 — Relationships
    profile = relationship("Profile", back_populates="user", uselist=False, cascade="all, delete-orphan")
    role_assignment = relationship("UserRole", back_populates="user", uselist=False, cascade="all, delete-orphan")
    refresh_tokens = relationship("RefreshToken", back_populates="user", cascade="all, delete-orphan")


class Profile(Base):
    """프로필 모델 — 운전자/관리자 표시 정보.

    Profile model — Display information for a user. Shares its primary key
    with the owning user row.

    Attributes:
        id: 사용자 ID와 동일 (Same UUID as the owning user)
        full_name: 실명 (Full name)
        phone: 전화번호 (Phone number, optional)
    """

    __tablename__ = "profiles"

    # 사용자 FK 겸 PK — User FK doubling as primary key
    id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    # 실명 — Full display name
    full_name: Mapped[str] = mapped_column(String(255), nullable=False)
    # 전화번호 — Phone number
    phone: Mapped[str | None] = mapped_column(String(50), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))

    user = relationship("User", back_populates="profile")


class UserRole(Base):
    """사용자 역할 모델 — 사용자당 하나의 역할.

    User role model — Durable role assignment, one row per user.
    Role values: "motorista", "gestor", "administrador".

    Attributes:
        id: 고유 식별자 UUID (Unique identifier)
        user_id: 사용자 FK (User foreign key, unique)
        role: 역할 이름 (Role name)
    """

    __tablename__ = "user_roles"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    # 사용자 FK — 사용자당 한 행 (One row per user)
    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False)
    # 역할 — Role name (motorista / gestor / administrador)
    role: Mapped[str] = mapped_column(String(20), nullable=False, default="motorista")
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))

    user = relationship("User", back_populates="role_assignment")
