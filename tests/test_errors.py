"""오류 분류 테스트 — SQLSTATE / SQLite 메시지 → ErrorKind, HTTP 매핑.

Error classification tests: driver errors to typed kinds, and the
``{"detail", "kind"}`` payload each kind produces.
"""

import pytest
from sqlalchemy.exc import IntegrityError, OperationalError, SQLAlchemyError

from app.utils.errors import (
    DEFAULT_MESSAGE,
    DataLayerError,
    ErrorKind,
    StorageError,
    classify_db_error,
    to_data_layer_error,
)


class PgError(Exception):
    """asyncpg 스타일 드라이버 오류 (sqlstate 속성)."""

    def __init__(self, sqlstate: str, message: str = "pg failure") -> None:
        super().__init__(message)
        self.sqlstate = sqlstate


class TestClassify:
    """드라이버 오류 분류 테스트."""

    @pytest.mark.parametrize("code,kind", [
        ("23505", ErrorKind.DUPLICATE),
        ("23503", ErrorKind.FOREIGN_KEY),
        ("23502", ErrorKind.NOT_NULL),
        ("42P01", ErrorKind.MISSING_TABLE),
        ("42501", ErrorKind.PERMISSION_DENIED),
        ("40001", ErrorKind.UNKNOWN),
    ])
    def test_sqlstate(self, code, kind):
        exc = IntegrityError("INSERT", {}, PgError(code))
        assert classify_db_error(exc) == kind

    @pytest.mark.parametrize("message,kind", [
        ("UNIQUE constraint failed: vehicles.plate", ErrorKind.DUPLICATE),
        ("FOREIGN KEY constraint failed", ErrorKind.FOREIGN_KEY),
        ("NOT NULL constraint failed: defects.description", ErrorKind.NOT_NULL),
        ("no such table: checklist_templates", ErrorKind.MISSING_TABLE),
        ("database is locked", ErrorKind.UNKNOWN),
    ])
    def test_sqlite_messages(self, message, kind):
        exc = OperationalError("SELECT", {}, Exception(message))
        assert classify_db_error(exc) == kind

    def test_non_driver_error_is_unknown(self):
        assert classify_db_error(SQLAlchemyError("boom")) == ErrorKind.UNKNOWN


class TestPayload:
    """오류 응답 본문 테스트."""

    def test_known_kind_uses_localized_message(self):
        exc = IntegrityError("INSERT", {}, Exception("UNIQUE constraint failed: vehicles.plate"))
        error = to_data_layer_error(exc, "Erro ao criar veículo")
        assert error.status_code == 409
        assert error.to_dict() == {"detail": "Este registro já existe no sistema.", "kind": "duplicate"}
        # 원본 메시지는 detail에 보관 (Raw driver text kept for logs)
        assert error.detail == "UNIQUE constraint failed: vehicles.plate"

    def test_unknown_kind_uses_operation_default(self):
        error = to_data_layer_error(SQLAlchemyError("boom"), "Erro ao criar checklist")
        assert error.status_code == 500
        assert error.to_dict() == {"detail": "Erro ao criar checklist", "kind": "unknown"}

    def test_unknown_kind_without_default_falls_back_to_detail(self):
        assert DataLayerError(ErrorKind.UNKNOWN, detail="falhou").user_message == "falhou"
        assert DataLayerError(ErrorKind.UNKNOWN).user_message == DEFAULT_MESSAGE

    @pytest.mark.parametrize("kind,status", [
        (ErrorKind.INVALID_CREDENTIALS, 401),
        (ErrorKind.USER_NOT_FOUND, 404),
        (ErrorKind.RATE_LIMITED, 429),
        (ErrorKind.STORAGE_NOT_FOUND, 404),
        (ErrorKind.FILE_TOO_LARGE, 413),
        (ErrorKind.STORAGE, 502),
    ])
    def test_status_codes(self, kind, status):
        assert StorageError(kind).status_code == status
