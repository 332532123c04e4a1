"""인증 스키마 — 로그인, 토큰 쌍, 내 정보.

Auth request/response schemas.
"""

from pydantic import BaseModel, Field


class LoginRequest(BaseModel):
    email: str = Field(..., min_length=3)  # 대소문자 무시 (Matched case-insensitively)
    password: str = Field(..., min_length=1)


class TokenResponse(BaseModel):
    """토큰 쌍 — 로그인/회전 결과 (Pair returned by sign-in and rotation)."""

    access_token: str
    refresh_token: str
    token_type: str = "bearer"


class RefreshRequest(BaseModel):
    """회전 또는 로그아웃할 리프레시 토큰 (Refresh token to rotate or revoke)."""

    refresh_token: str


class UserMeResponse(BaseModel):
    """GET /auth/me 응답.

    The signed-in user's profile. ``role`` is None when no role
    assignment can be resolved; such users pass no role gate.
    """

    id: str
    email: str
    full_name: str
    phone: str | None = None
    role: str | None = None
    is_active: bool
