"""사용자 및 역할 관련 Pydantic 요청/응답 스키마 정의.

User and role Pydantic request/response schema definitions for the
administrator-only user management endpoints.
"""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field, field_validator

RoleName = Literal["motorista", "gestor", "administrador"]


class UserCreate(BaseModel):
    """사용자 생성 요청 스키마 (관리자용).

    Privileged user creation request: auth account + profile + role.

    Attributes:
        email: 로그인 이메일 (Login email, unique)
        password: 비밀번호 (Plain text, bcrypt-hashed on server)
        full_name: 실명 (Full display name)
        role: 역할 (motorista / gestor / administrador)
        phone: 전화번호 (Phone number, optional)
    """

    email: str = Field(..., min_length=3)
    password: str = Field(..., min_length=6)
    full_name: str = Field(..., min_length=1)
    role: RoleName
    phone: str | None = None

    @field_validator("email")
    @classmethod
    def _normalize_email(cls, value: str) -> str:
        value = value.strip().lower()
        if "@" not in value:
            raise ValueError("Email inválido")
        return value

    @field_validator("full_name")
    @classmethod
    def _strip_name(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Nome completo é obrigatório")
        return value.strip()


class RoleUpdate(BaseModel):
    """역할 변경 요청 스키마 (Role change request)."""

    role: RoleName


class UserResponse(BaseModel):
    """사용자 응답 스키마 — 프로필 + 역할 + 이메일.

    User listing entry: profile joined with role (defaults to motorista when
    no role row exists) and email.
    """

    id: str
    email: str
    full_name: str
    phone: str | None = None
    role: str
    is_active: bool
    created_at: datetime
