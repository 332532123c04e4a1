"""초기 데이터 시드 스크립트 — 관리자 계정과 기본 점검 템플릿 생성.

Seed script — Creates the first administrator and the default inspection
template. Run this script once to bootstrap the database.

Usage:
    python -m app.seed

Creates:
    - 1개 관리자 계정: admin@fleetcheck.local / admin123 (administrador)
    - 1개 기본 템플릿: "Inspeção Geral de Veículo" + 항목 (default template with items)
"""

import asyncio

from sqlalchemy import select

from app.config import settings
from app.database import async_session, engine, Base
from app.models import ChecklistTemplate, ChecklistTemplateItem, Profile, User, UserRole
from app.utils.password import hash_password

ADMIN_EMAIL: str = "admin@fleetcheck.local"
ADMIN_PASSWORD: str = "admin123"

# 기본 템플릿 항목 (이름, 설명) — Default template items in order
DEFAULT_ITEMS: list[tuple[str, str]] = [
    ("Pneus", "Calibragem, desgaste e estepe"),
    ("Freios", "Pedal, freio de mão e fluido"),
    ("Faróis e lanternas", "Farol alto/baixo, setas, luz de freio e ré"),
    ("Retrovisores", "Fixação e visibilidade"),
    ("Para-brisa e limpadores", "Trincas, palhetas e esguicho"),
    ("Cintos de segurança", "Travamento e estado das fitas"),
    ("Nível de óleo", "Óleo do motor dentro do limite"),
    ("Líquido de arrefecimento", "Nível do reservatório"),
    ("Extintor", "Validade e lacre"),
    ("Documentação", "CRLV e documentos obrigatórios no veículo"),
]


async def seed() -> None:
    """데이터베이스를 초기 데이터로 시드합니다.

    Seed the database with initial data. Creates tables if they don't exist.

    Idempotent: 이미 존재하는 관리자/템플릿은 건너뜁니다 (Existing rows are skipped).
    """
    # 테이블 생성 — DDL 실행 (Create all tables from ORM metadata)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with async_session() as db:
        existing_admin = (await db.execute(select(User).where(User.email == ADMIN_EMAIL))).scalar_one_or_none()
        if existing_admin is None:
            admin: User = User(email=ADMIN_EMAIL, password_hash=hash_password(ADMIN_PASSWORD), is_active=True)
            db.add(admin)
            await db.flush()  # flush로 admin.id 생성 (Flush to generate admin.id)
            db.add(Profile(id=admin.id, full_name="Administrador do Sistema"))
            db.add(UserRole(user_id=admin.id, role="administrador"))
            print(f"Seeded admin user: {ADMIN_EMAIL}/{ADMIN_PASSWORD}")
        else:
            print("Admin user already exists. Skipping.")

        existing_template = (
            await db.execute(select(ChecklistTemplate).where(ChecklistTemplate.name == settings.DEFAULT_TEMPLATE_NAME))
        ).scalar_one_or_none()
        if existing_template is None:
            template: ChecklistTemplate = ChecklistTemplate(
                name=settings.DEFAULT_TEMPLATE_NAME,
                description="Checklist padrão de inspeção diária",
            )
            db.add(template)
            await db.flush()
            for order, (name, description) in enumerate(DEFAULT_ITEMS):
                db.add(ChecklistTemplateItem(
                    template_id=template.id, name=name, description=description, sort_order=order,
                ))
            print(f"Seeded template: {settings.DEFAULT_TEMPLATE_NAME} ({len(DEFAULT_ITEMS)} items)")
        else:
            print("Default template already exists. Skipping.")

        await db.commit()


if __name__ == "__main__":
    asyncio.run(seed())
