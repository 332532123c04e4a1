"""FastAPI 애플리케이션 엔트리포인트 — 미들웨어 및 라우터 등록.

FastAPI application entry point — Middleware and router registration.
Configures request logging, CORS, typed error handling, health checks,
local upload serving and the auth/admin/app routers.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from app.config import settings
from app.database import async_session
from app.middleware.axiom_logging import AxiomLoggingMiddleware
from app.services.storage_service import uploads_dir
from app.utils.errors import AppError, to_data_layer_error

logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger("app")

app: FastAPI = FastAPI(
    title=settings.APP_NAME,
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

# Axiom API 로깅 미들웨어 — Axiom API request/response logging
# CORS보다 먼저 등록하여 모든 요청을 캡처 (Registered before CORS to capture all requests)
app.add_middleware(AxiomLoggingMiddleware)

# CORS 미들웨어 — Cross-Origin Resource Sharing middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """타입 오류 → HTTP 응답 (종류별 상태 코드와 메시지).

    Render a typed error with the status code and message of its kind.
    """
    logger.warning("%s %s failed: %s (%s)", request.method, request.url.path, exc.kind.value, exc.detail)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.get("/health")
async def health_check() -> dict[str, str]:
    """서버 상태 확인 엔드포인트.

    Health check endpoint for load balancers and monitoring.
    """
    return {"status": "ok"}


@app.get("/health/db")
async def health_check_db() -> dict[str, str]:
    """DB 연결 확인 — checklist_templates 조회 프로브.

    Database probe: a one-row read from checklist_templates.
    """
    try:
        async with async_session() as session:
            await session.execute(text("SELECT id FROM checklist_templates LIMIT 1"))
    except SQLAlchemyError as exc:
        error = to_data_layer_error(exc)
        logger.error("database health probe failed: %s", exc)
        return {"status": "error", "kind": error.kind.value, "message": error.user_message}
    return {"status": "ok"}


# 로컬 업로드 파일 제공 — Local uploads (S3 미설정 시)
app.mount("/uploads", StaticFiles(directory=uploads_dir(), check_dir=False), name="uploads")

# ---------------------------------------------------------------------------
# 라우터 등록 — Router registration
# ---------------------------------------------------------------------------
# auth_router: 로그인/토큰/내 정보 (Login, tokens, me)
# admin_router: 관리자/gestor 전용 (Manager and administrator endpoints)
# app_router: 현장용 (Field endpoints: vehicles, checklists, defects, reports)
from app.api.auth import router as auth_router  # noqa: E402
from app.api.admin import admin_router  # noqa: E402
from app.api.app import app_router  # noqa: E402

app.include_router(auth_router, prefix="/api/v1/auth", tags=["Auth"])
app.include_router(admin_router, prefix="/api/v1/admin")
app.include_router(app_router, prefix="/api/v1/app")
