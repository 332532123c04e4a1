"""오류 종류 분류 모듈 — 데이터 계층/스토리지 오류를 타입으로 표현.

Typed error-kind module.
The data and storage layers raise ``AppError`` subclasses carrying an
``ErrorKind``; the HTTP layer maps each kind to a status code and a
localized (pt-BR) user message. Messages are looked up by kind, never by
parsing the raw driver text.

SQLSTATE mapping (PostgreSQL):
    23505 unique_violation      -> DUPLICATE
    23503 foreign_key_violation -> FOREIGN_KEY
    23502 not_null_violation    -> NOT_NULL
    42P01 undefined_table       -> MISSING_TABLE
    42501 insufficient_privilege -> PERMISSION_DENIED
"""

import enum
from typing import Any

from fastapi import status
from sqlalchemy.exc import DBAPIError, SQLAlchemyError


class ErrorKind(str, enum.Enum):
    """오류 종류 — Error kind taxonomy."""

    DUPLICATE = "duplicate"
    PERMISSION_DENIED = "permission_denied"
    MISSING_TABLE = "missing_table"
    FOREIGN_KEY = "foreign_key"
    NOT_NULL = "not_null"
    INVALID_CREDENTIALS = "invalid_credentials"
    USER_NOT_FOUND = "user_not_found"
    RATE_LIMITED = "rate_limited"
    STORAGE_NOT_FOUND = "storage_not_found"
    FILE_TOO_LARGE = "file_too_large"
    STORAGE = "storage"
    UNKNOWN = "unknown"


# 종류별 (HTTP 상태, 사용자 메시지) — (HTTP status, user message) per kind
ERROR_MESSAGES: dict[ErrorKind, tuple[int, str]] = {
    ErrorKind.MISSING_TABLE: (
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "Tabela não encontrada. Verifique se o banco de dados está configurado corretamente.",
    ),
    ErrorKind.PERMISSION_DENIED: (
        status.HTTP_403_FORBIDDEN,
        "Você não tem permissão para realizar esta ação.",
    ),
    ErrorKind.DUPLICATE: (
        status.HTTP_409_CONFLICT,
        "Este registro já existe no sistema.",
    ),
    ErrorKind.FOREIGN_KEY: (
        status.HTTP_400_BAD_REQUEST,
        "Dados inválidos. Verifique se os dados relacionados são válidos.",
    ),
    ErrorKind.NOT_NULL: (
        status.HTTP_400_BAD_REQUEST,
        "Todos os campos obrigatórios devem ser preenchidos.",
    ),
    ErrorKind.INVALID_CREDENTIALS: (
        status.HTTP_401_UNAUTHORIZED,
        "Email ou senha incorretos.",
    ),
    ErrorKind.USER_NOT_FOUND: (
        status.HTTP_404_NOT_FOUND,
        "Usuário não encontrado.",
    ),
    ErrorKind.RATE_LIMITED: (
        status.HTTP_429_TOO_MANY_REQUESTS,
        "Muitas tentativas. Tente novamente em alguns minutos.",
    ),
    ErrorKind.STORAGE_NOT_FOUND: (
        status.HTTP_404_NOT_FOUND,
        "Arquivo não encontrado no servidor.",
    ),
    ErrorKind.FILE_TOO_LARGE: (
        status.HTTP_413_CONTENT_TOO_LARGE,
        "Arquivo muito grande. Verifique o tamanho máximo permitido.",
    ),
    ErrorKind.STORAGE: (
        status.HTTP_502_BAD_GATEWAY,
        "Erro ao enviar arquivo para o armazenamento.",
    ),
}

DEFAULT_MESSAGE: str = "Ocorreu um erro"

_SQLSTATE_KINDS: dict[str, ErrorKind] = {
    "23505": ErrorKind.DUPLICATE,
    "23503": ErrorKind.FOREIGN_KEY,
    "23502": ErrorKind.NOT_NULL,
    "42P01": ErrorKind.MISSING_TABLE,
    "42501": ErrorKind.PERMISSION_DENIED,
}

# SQLite 드라이버 오류 접두사 — SQLite driver error prefixes (no SQLSTATE available)
_SQLITE_PREFIXES: tuple[tuple[str, ErrorKind], ...] = (
    ("UNIQUE constraint failed", ErrorKind.DUPLICATE),
    ("FOREIGN KEY constraint failed", ErrorKind.FOREIGN_KEY),
    ("NOT NULL constraint failed", ErrorKind.NOT_NULL),
    ("no such table", ErrorKind.MISSING_TABLE),
)


class AppError(Exception):
    """타입이 지정된 애플리케이션 오류 기본 클래스.

    Base class for typed application errors.

    Args:
        kind: 오류 종류 (Error kind)
        detail: 원본 오류 설명 (Raw detail, logged but only shown for UNKNOWN)
        default_message: 작업별 기본 메시지 (Per-operation fallback message)
    """

    def __init__(
        self,
        kind: ErrorKind,
        detail: str | None = None,
        default_message: str | None = None,
    ) -> None:
        super().__init__(detail or kind.value)
        self.kind: ErrorKind = kind
        self.detail: str | None = detail
        self.default_message: str | None = default_message

    @property
    def status_code(self) -> int:
        if self.kind in ERROR_MESSAGES:
            return ERROR_MESSAGES[self.kind][0]
        return status.HTTP_500_INTERNAL_SERVER_ERROR

    @property
    def user_message(self) -> str:
        """사용자 표시 메시지 — 종류별 조회, 없으면 작업 기본값.

        Localized message for this kind; unknown kinds fall back to the
        operation default, then the raw detail, then a generic message.
        """
        if self.kind in ERROR_MESSAGES:
            return ERROR_MESSAGES[self.kind][1]
        return self.default_message or self.detail or DEFAULT_MESSAGE

    def to_dict(self) -> dict[str, Any]:
        return {"detail": self.user_message, "kind": self.kind.value}


class DataLayerError(AppError):
    """데이터 계층 오류 — Raised by repositories/services on DB failures."""


class StorageError(AppError):
    """스토리지 오류 — Raised by the storage backend."""


class AuthError(AppError):
    """인증 오류 — Raised on credential failures."""


def _sqlstate(exc: DBAPIError) -> str | None:
    """드라이버 예외에서 SQLSTATE 추출 — Extract SQLSTATE from the driver exception chain."""
    candidates: list[Any] = [exc.orig, getattr(exc.orig, "__cause__", None)]
    for candidate in candidates:
        if candidate is None:
            continue
        code = getattr(candidate, "sqlstate", None) or getattr(candidate, "pgcode", None)
        if code:
            return str(code)
    return None


def classify_db_error(exc: SQLAlchemyError) -> ErrorKind:
    """SQLAlchemy 예외를 오류 종류로 분류합니다.

    Classify a SQLAlchemy exception into an ErrorKind using the SQLSTATE
    (PostgreSQL) or the SQLite constraint family.

    Args:
        exc: SQLAlchemy 예외 (SQLAlchemy exception)

    Returns:
        ErrorKind: 분류된 종류 (Classified kind, UNKNOWN when unmatched)
    """
    if not isinstance(exc, DBAPIError):
        return ErrorKind.UNKNOWN

    code: str | None = _sqlstate(exc)
    if code is not None and code in _SQLSTATE_KINDS:
        return _SQLSTATE_KINDS[code]

    raw: str = str(exc.orig)
    for prefix, kind in _SQLITE_PREFIXES:
        if raw.startswith(prefix):
            return kind
    return ErrorKind.UNKNOWN


def to_data_layer_error(exc: SQLAlchemyError, default_message: str | None = None) -> DataLayerError:
    """SQLAlchemy 예외를 DataLayerError로 변환 — Wrap a SQLAlchemy error as DataLayerError."""
    raw: str = str(exc.orig) if isinstance(exc, DBAPIError) else str(exc)
    return DataLayerError(classify_db_error(exc), detail=raw, default_message=default_message)
