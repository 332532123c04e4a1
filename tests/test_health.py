"""헬스 체크 엔드포인트 테스트.

Health check tests: the liveness endpoint and the database probe, which
reports a typed kind instead of failing the request.
"""

from httpx import AsyncClient
from sqlalchemy.exc import OperationalError

import app.main


class BrokenSession:
    """execute가 항상 실패하는 세션 — Session whose every query fails."""

    async def __aenter__(self) -> "BrokenSession":
        return self

    async def __aexit__(self, *args) -> bool:
        return False

    async def execute(self, *args, **kwargs):
        raise OperationalError("SELECT", {}, Exception("no such table: checklist_templates"))


class TestHealth:
    """헬스 체크 테스트."""

    async def test_health(self, client: AsyncClient):
        res = await client.get("/health")
        assert res.status_code == 200
        assert res.json() == {"status": "ok"}

    async def test_db_probe_ok(self, client: AsyncClient, session_factory, monkeypatch):
        monkeypatch.setattr(app.main, "async_session", session_factory)
        res = await client.get("/health/db")
        assert res.json() == {"status": "ok"}

    async def test_db_probe_missing_table(self, client: AsyncClient, monkeypatch):
        monkeypatch.setattr(app.main, "async_session", BrokenSession)
        res = await client.get("/health/db")
        assert res.status_code == 200
        data = res.json()
        assert data["status"] == "error"
        assert data["kind"] == "missing_table"
        assert data["message"].startswith("Tabela não encontrada")
