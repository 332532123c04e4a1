"""JWT 발급/검증 유틸리티 — 세션 토큰 쌍.

Session token helpers built on PyJWT.
Every token carries ``sub`` (user UUID), ``email``, ``type`` (access or
refresh), ``exp`` and a random ``jti``. The role is never embedded: it is
resolved per request so a role change applies within the cache window.
"""

import uuid
from datetime import datetime, timedelta, timezone
from typing import Any

import jwt

from app.config import settings

ACCESS: str = "access"
REFRESH: str = "refresh"


def token_lifetime(token_type: str) -> timedelta:
    """토큰 유형별 유효 기간 — Lifetime for an access or refresh token."""
    if token_type == REFRESH:
        return timedelta(days=settings.JWT_REFRESH_TOKEN_EXPIRE_DAYS)
    return timedelta(minutes=settings.JWT_ACCESS_TOKEN_EXPIRE_MINUTES)


def issue_token(user_id: uuid.UUID | str, email: str, token_type: str = ACCESS) -> str:
    """서명된 토큰 발급 (Issue a signed token for a user)."""
    claims: dict[str, Any] = {
        "sub": str(user_id),
        "email": email,
        "type": token_type,
        "exp": datetime.now(timezone.utc) + token_lifetime(token_type),
        # 같은 초에 발급되어도 토큰이 달라지도록 (distinct even within one second)
        "jti": uuid.uuid4().hex,
    }
    return jwt.encode(claims, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def read_token(token: str, expected_type: str) -> uuid.UUID:
    """토큰을 검증하고 사용자 UUID를 반환합니다.

    Verify signature, expiry and type, and return the subject UUID.

    Raises:
        jwt.InvalidTokenError: 서명/만료/유형/sub 오류 (Any verification failure)
    """
    claims: dict[str, Any] = jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    if claims.get("type") != expected_type:
        raise jwt.InvalidTokenError(f"expected a {expected_type} token")
    try:
        return uuid.UUID(str(claims["sub"]))
    except (KeyError, ValueError) as exc:
        raise jwt.InvalidTokenError("malformed subject") from exc
