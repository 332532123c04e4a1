"""HTTP 예외 — 검증/권한/존재 오류.

HTTPException shortcuts for request-level failures (validation beyond
pydantic, missing rows, uniqueness, auth). Typed data-layer and storage
failures use ``app.utils.errors`` instead.

Usage:
    raise NotFoundError("Veículo não encontrado")
    raise BadRequestError("Máximo de 3 fotos por item")
"""

from typing import Any

from fastapi import HTTPException, status


class BadRequestError(HTTPException):
    """400 — 필수 입력 누락, 잘못된 상태 전이, 사진 개수 초과 등."""

    def __init__(self, detail: str = "Requisição inválida") -> None:
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


class UnauthorizedError(HTTPException):
    """401 — 토큰 없음/만료/위조 (Missing, expired or forged credentials)."""

    def __init__(self, detail: str = "Autenticação necessária") -> None:
        super().__init__(status_code=status.HTTP_401_UNAUTHORIZED, detail=detail)


class ForbiddenError(HTTPException):
    """403 — 역할 레벨 부족 또는 역할 없음."""

    def __init__(self, detail: str = "Você não tem permissão para realizar esta ação.") -> None:
        super().__init__(status_code=status.HTTP_403_FORBIDDEN, detail=detail)


class NotFoundError(HTTPException):
    """404 — 없는 차량/체크리스트/결함/템플릿.

    ``headers`` carries hints such as the listing page a client should go
    back to when a checklist cannot be loaded.
    """

    def __init__(self, detail: Any = "Registro não encontrado", headers: dict[str, str] | None = None) -> None:
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail, headers=headers)


class DuplicateError(HTTPException):
    """409 — 번호판/템플릿 이름/이메일 중복, 같은 항목의 두 번째 응답."""

    def __init__(self, detail: str = "Este registro já existe no sistema.") -> None:
        super().__init__(status_code=status.HTTP_409_CONFLICT, detail=detail)
