"""테스트 인프라 — 임시 DB, 세션, httpx 클라이언트, 역할별 사용자 픽스처.

Test infrastructure — Isolated database, session, httpx client and per-role
user fixtures. SQLite in-memory by default; set TEST_DATABASE_URL to run
against PostgreSQL. Local storage points at a temporary directory.
"""

import os
from collections.abc import AsyncGenerator
from pathlib import Path

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from app.config import settings
from app.database import Base, get_db
from app.main import app
from app.models import ChecklistTemplate, ChecklistTemplateItem, Profile, User, UserRole, Vehicle
from app.services.role_service import role_cache
from app.utils.jwt import issue_token
from app.utils.password import hash_password

# ---------------------------------------------------------------------------
# 테스트 DB 설정
# ---------------------------------------------------------------------------
TEST_DATABASE_URL: str = os.environ.get("TEST_DATABASE_URL", "sqlite+aiosqlite:///:memory:")

TEMPLATE_ITEMS: list[str] = ["Pneus", "Freios", "Faróis"]


def _engine_kwargs(url: str) -> dict:
    if url.startswith("sqlite"):
        # 단일 연결 공유 — in-memory DB lives on one shared connection
        return {"poolclass": StaticPool, "connect_args": {"check_same_thread": False}}
    return {"pool_pre_ping": True}


# ---------------------------------------------------------------------------
# Function-scoped: 엔진, 세션, 클라이언트
# ---------------------------------------------------------------------------
@pytest_asyncio.fixture
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    """테스트용 async 엔진 — 테스트마다 스키마를 새로 만듭니다."""
    eng = create_async_engine(TEST_DATABASE_URL, echo=False, **_engine_kwargs(TEST_DATABASE_URL))
    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)
    yield eng
    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await eng.dispose()


@pytest_asyncio.fixture
async def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db(session_factory: async_sessionmaker[AsyncSession]) -> AsyncGenerator[AsyncSession, None]:
    """각 테스트에 격리된 DB 세션을 제공합니다."""
    async with session_factory() as session:
        yield session


@pytest.fixture(autouse=True)
def uploads(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """로컬 스토리지를 임시 디렉토리로 — Local storage under tmp_path, S3 disabled."""
    directory: Path = tmp_path / "uploads"
    monkeypatch.setattr(settings, "LOCAL_UPLOADS_DIR", str(directory))
    monkeypatch.setattr(settings, "AWS_ACCESS_KEY_ID", "")
    monkeypatch.setattr(settings, "AWS_S3_BUCKET", "")
    return directory


@pytest.fixture(autouse=True)
def clear_role_cache():
    """역할 캐시 초기화 — Every test starts and ends with an empty role cache."""
    role_cache.clear()
    yield
    role_cache.clear()


@pytest_asyncio.fixture
async def client(db: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """FastAPI 테스트 클라이언트 — DB 세션을 오버라이드합니다."""
    async def _override_get_db() -> AsyncGenerator[AsyncSession, None]:
        yield db

    app.dependency_overrides[get_db] = _override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# 헬퍼 픽스처: 테스트용 데이터 생성
# ---------------------------------------------------------------------------
async def make_user(
    db: AsyncSession,
    email: str,
    full_name: str,
    role: str | None,
    password: str = "senha123",
) -> User:
    """사용자 + 프로필 (+ 역할) 생성 후 커밋 — role=None이면 역할 행 없음."""
    user = User(email=email, password_hash=hash_password(password), is_active=True)
    db.add(user)
    await db.flush()
    db.add(Profile(id=user.id, full_name=full_name))
    if role is not None:
        db.add(UserRole(user_id=user.id, role=role))
    await db.commit()
    return user


@pytest_asyncio.fixture
async def admin_user(db: AsyncSession) -> User:
    return await make_user(db, "admin@frota.com", "Ana Admin", "administrador")


@pytest_asyncio.fixture
async def manager_user(db: AsyncSession) -> User:
    return await make_user(db, "gestor@frota.com", "Gabriel Gestor", "gestor")


@pytest_asyncio.fixture
async def driver_user(db: AsyncSession) -> User:
    return await make_user(db, "motorista@frota.com", "Marcos Motorista", "motorista")


@pytest_asyncio.fixture
async def other_driver(db: AsyncSession) -> User:
    return await make_user(db, "outro@frota.com", "Otávio Outro", "motorista")


@pytest_asyncio.fixture
async def roleless_user(db: AsyncSession) -> User:
    return await make_user(db, "semrole@frota.com", "Sem Papel", None)


@pytest_asyncio.fixture
async def vehicle(db: AsyncSession) -> Vehicle:
    """테스트 차량 — V1, 주행거리 45000."""
    v = Vehicle(plate="ABC1D23", model="Fiat Strada", year=2022, chassis="9BD000000000001", current_mileage=45000)
    db.add(v)
    await db.commit()
    return v


@pytest_asyncio.fixture
async def template(db: AsyncSession) -> ChecklistTemplate:
    """기본 템플릿 — T1, 항목 3개."""
    t = ChecklistTemplate(name=settings.DEFAULT_TEMPLATE_NAME, description="Inspeção diária")
    db.add(t)
    await db.flush()
    for order, name in enumerate(TEMPLATE_ITEMS):
        db.add(ChecklistTemplateItem(template_id=t.id, name=name, sort_order=order))
    await db.commit()
    return t


async def template_item_ids(db: AsyncSession, template: ChecklistTemplate) -> list[str]:
    """항목 ID 목록 (순서대로) — Item ids in sort order."""
    from sqlalchemy import select

    result = await db.execute(
        select(ChecklistTemplateItem.id)
        .where(ChecklistTemplateItem.template_id == template.id)
        .order_by(ChecklistTemplateItem.sort_order)
    )
    return [str(item_id) for item_id in result.scalars().all()]


def make_token(user: User) -> str:
    """테스트용 JWT 액세스 토큰을 생성합니다."""
    return issue_token(user.id, user.email)


@pytest.fixture
def admin_token(admin_user: User) -> str:
    return make_token(admin_user)


@pytest.fixture
def manager_token(manager_user: User) -> str:
    return make_token(manager_user)


@pytest.fixture
def driver_token(driver_user: User) -> str:
    return make_token(driver_user)


@pytest.fixture
def roleless_token(roleless_user: User) -> str:
    return make_token(roleless_user)


def auth_header(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


def photo(field: str, name: str = "foto.jpg", content: bytes = b"\xff\xd8\xff fake jpeg") -> tuple:
    """multipart 파일 파트 — (field, (filename, bytes, content type))."""
    return (field, (name, content, "image/jpeg"))


def stored_files(directory: Path) -> list[Path]:
    """저장된 파일 목록 — Files currently stored under the uploads directory."""
    if not directory.exists():
        return []
    return [p for p in directory.rglob("*") if p.is_file()]
