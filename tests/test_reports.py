"""보고서 다운로드 테스트 — CSV / XLSX / PDF.

Report download tests: content types, file names, the CSV BOM and
access control.
"""

import csv
import io
from datetime import datetime, timezone

import pytest
from httpx import AsyncClient
from openpyxl import load_workbook

from app.services.report_service import REPORT_KINDS, report_filename
from tests.conftest import auth_header

URL = "/api/v1/app/reports"


class TestReportDownload:
    """보고서 다운로드 테스트."""

    @pytest.mark.parametrize("kind", REPORT_KINDS)
    async def test_csv(self, client: AsyncClient, manager_token, vehicle, kind):
        res = await client.get(f"{URL}/{kind}", params={"format": "csv"}, headers=auth_header(manager_token))
        assert res.status_code == 200
        assert res.headers["content-type"].startswith("text/csv")
        assert f"filename=relatorio_{kind}_" in res.headers["content-disposition"]
        assert res.headers["content-disposition"].endswith(".csv")
        # UTF-8 BOM
        assert res.content.startswith(b"\xef\xbb\xbf")

    async def test_vehicle_csv_rows(self, client: AsyncClient, manager_token, vehicle):
        res = await client.get(f"{URL}/veiculos", headers=auth_header(manager_token))
        rows = list(csv.reader(io.StringIO(res.content.decode("utf-8-sig"))))
        assert rows[0] == ["Relatório de Veículos"]
        assert rows[1][0].startswith("Gerado em: ")
        assert any(row and row[0] == "ABC1D23" for row in rows)

    async def test_xlsx(self, client: AsyncClient, manager_token, vehicle):
        res = await client.get(f"{URL}/veiculos", params={"format": "xlsx"}, headers=auth_header(manager_token))
        assert res.status_code == 200
        assert res.content[:2] == b"PK"
        wb = load_workbook(io.BytesIO(res.content))
        assert wb.sheetnames == ["Resumo", "Dados"]
        assert wb["Dados"]["A2"].value == "ABC1D23"

    async def test_pdf(self, client: AsyncClient, manager_token, vehicle):
        res = await client.get(f"{URL}/dashboard", params={"format": "pdf"}, headers=auth_header(manager_token))
        assert res.status_code == 200
        assert res.headers["content-type"] == "application/pdf"
        assert res.content.startswith(b"%PDF")

    async def test_unknown_kind(self, client: AsyncClient, manager_token):
        res = await client.get(f"{URL}/motoristas", headers=auth_header(manager_token))
        assert res.status_code == 400

    async def test_unknown_format(self, client: AsyncClient, manager_token):
        res = await client.get(f"{URL}/checklists", params={"format": "docx"}, headers=auth_header(manager_token))
        assert res.status_code == 400

    async def test_driver_forbidden(self, client: AsyncClient, driver_token):
        res = await client.get(f"{URL}/checklists", headers=auth_header(driver_token))
        assert res.status_code == 403

    def test_filename(self):
        now = datetime(2026, 3, 5, 14, 7, 9, tzinfo=timezone.utc)
        assert report_filename("defeitos", "pdf", now) == "relatorio_defeitos_20260305_140709.pdf"
