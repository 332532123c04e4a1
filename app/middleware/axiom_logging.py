"""Axiom API 로깅 미들웨어.

Axiom API logging middleware.
Sends one structured event per request: method, path, params, JSON body,
status code, duration and the error detail of failed responses.
Sensitive fields (password, token, secret) are masked; multipart bodies
(photo uploads) are summarized instead of read.
"""

import json
import logging
import re
import time
from typing import Any

from axiom_py import Client as AxiomClient
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from app.config import settings

logger = logging.getLogger(__name__)

# 마스킹 대상 필드 패턴 — Fields to mask in request bodies and params
_SENSITIVE_KEYS = re.compile(
    r"(password|passwd|secret|token|authorization|api_key|apikey|credential)",
    re.IGNORECASE,
)

# 로깅 제외 경로 — Paths excluded from logging
_SKIP_PATHS = {"/health", "/health/db", "/docs", "/redoc", "/openapi.json"}
_SKIP_PREFIXES = ("/uploads/",)

_MAX_BODY_CHARS = 2000
_MAX_ERROR_CHARS = 500


def _mask(data: Any, depth: int = 0) -> Any:
    """민감 필드 재귀 마스킹 — Recursively mask sensitive fields."""
    if depth > 5:
        return "..."
    if isinstance(data, dict):
        return {
            k: "***" if _SENSITIVE_KEYS.search(str(k)) else _mask(v, depth + 1)
            for k, v in data.items()
        }
    if isinstance(data, list):
        return [_mask(item, depth + 1) for item in data[:20]]
    if isinstance(data, str) and len(data) > _MAX_BODY_CHARS:
        return data[:_MAX_BODY_CHARS] + "...(truncated)"
    return data


def _should_skip(path: str) -> bool:
    return path in _SKIP_PATHS or path.startswith(_SKIP_PREFIXES)


class AxiomLoggingMiddleware(BaseHTTPMiddleware):
    """모든 API 요청/응답을 Axiom에 로깅하는 미들웨어.

    Middleware that logs API requests and responses to Axiom.
    Without AXIOM_API_TOKEN/AXIOM_DATASET it passes requests through untouched.
    """

    def __init__(self, app: Any) -> None:
        super().__init__(app)
        self._client: AxiomClient | None = None
        self._dataset: str = settings.AXIOM_DATASET

        if settings.AXIOM_API_TOKEN and settings.AXIOM_DATASET:
            self._client = AxiomClient(token=settings.AXIOM_API_TOKEN)

    async def _read_body(self, request: Request) -> Any:
        """요청 본문 요약 — JSON은 마스킹, multipart는 필드 수만 기록."""
        if request.method not in ("POST", "PUT", "PATCH"):
            return None
        content_type: str = request.headers.get("content-type", "")
        if content_type.startswith("multipart/"):
            return f"(multipart, {request.headers.get('content-length', '?')} bytes)"
        body_bytes: bytes = await request.body()
        if not body_bytes:
            return None
        try:
            return _mask(json.loads(body_bytes))
        except (json.JSONDecodeError, UnicodeDecodeError):
            return "(non-json body)"

    async def _capture_error(self, response: Response) -> tuple[Response, str]:
        """에러 응답 본문에서 사유 추출 후 응답 재구성.

        Read the error detail from a failed response and rebuild the response
        from the consumed body.
        """
        resp_body = b""
        async for chunk in response.body_iterator:
            resp_body += chunk if isinstance(chunk, bytes) else chunk.encode("utf-8")

        try:
            detail: Any = json.loads(resp_body).get("detail", "")
            error_detail = detail if isinstance(detail, str) else json.dumps(detail, ensure_ascii=False)
        except (json.JSONDecodeError, UnicodeDecodeError, AttributeError):
            error_detail = resp_body.decode("utf-8", errors="replace")

        rebuilt = Response(
            content=resp_body,
            status_code=response.status_code,
            headers=dict(response.headers),
            media_type=response.media_type,
        )
        return rebuilt, error_detail[:_MAX_ERROR_CHARS]

    def _emit(self, event: dict[str, Any]) -> None:
        try:
            self._client.ingest_events(self._dataset, [event])
        except Exception:
            # 로깅 실패는 요청에 영향 없음 — A logging failure never breaks the request
            logger.warning("axiom ingest failed for %s %s", event.get("method"), event.get("path"), exc_info=True)

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if self._client is None or _should_skip(request.url.path):
            return await call_next(request)

        start_time = time.perf_counter()
        event: dict[str, Any] = {"method": request.method, "path": request.url.path}
        if request.query_params:
            event["query_params"] = _mask(dict(request.query_params))
        request_body = await self._read_body(request)
        if request_body is not None:
            event["request_body"] = request_body

        status_code: int = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
            if status_code >= 400:
                response, event["error"] = await self._capture_error(response)
        except Exception as exc:
            event["error"] = f"{type(exc).__name__}: {str(exc)[:300]}"
            raise
        finally:
            event["status_code"] = status_code
            event["duration_ms"] = round((time.perf_counter() - start_time) * 1000, 2)
            if request.path_params:
                event["path_params"] = dict(request.path_params)
            self._emit(event)

        return response
