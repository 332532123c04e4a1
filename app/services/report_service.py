"""리포트 서비스 — 체크리스트/결함/차량/대시보드 보고서 생성.

Report Service — Builds checklist, defect, vehicle and dashboard reports
from persisted state and renders them as CSV, PDF or XLSX.

Pure read + format: idempotent and safe to call repeatedly.

Formats:
    - csv: UTF-8 BOM, comma-delimited, minimal quoting (doubled quotes)
    - pdf: reportlab — title, generated-at, summary block, striped table, paginated
    - xlsx: openpyxl — summary sheet + data sheet with a styled header
"""

import csv
import io
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable

from openpyxl import Workbook
from openpyxl.styles import Alignment, Font, PatternFill
from reportlab.lib import colors
from reportlab.lib.pagesizes import A4, landscape
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.fleet import Vehicle
from app.repositories.checklist_repository import checklist_repository
from app.repositories.defect_repository import defect_repository
from app.repositories.vehicle_repository import vehicle_repository
from app.services.checklist_state import CHECKLIST_STATUSES
from app.services.dashboard_service import dashboard_service
from app.services.defect_service import DEFECT_STATUSES, STATUS_RESOLVED
from app.utils.exceptions import BadRequestError

REPORT_KINDS: tuple[str, ...] = ("checklists", "defeitos", "veiculos", "dashboard")
REPORT_FORMATS: dict[str, str] = {
    "csv": "text/csv; charset=utf-8",
    "pdf": "application/pdf",
    "xlsx": "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
}

# 상태 표시 이름 — Display labels for wire status values
STATUS_LABELS: dict[str, str] = {
    "ok": "OK",
    "com_defeito": "Com defeito",
    "pendente": "Pendente",
    "concluido": "Concluído",
    "aberto": "Aberto",
    "em_analise": "Em análise",
    "resolvido": "Resolvido",
    "leve": "Leve",
    "moderado": "Moderado",
    "critico": "Crítico",
}

HEADER_COLOR: str = "1F4E79"


@dataclass
class ReportData:
    """보고서 데이터 — 제목, 요약, 표 (Title, summary block and table)."""

    kind: str
    title: str
    summary: list[tuple[str, Any]] = field(default_factory=list)
    headers: list[str] = field(default_factory=list)
    rows: list[list[Any]] = field(default_factory=list)


def _label(value: str | None) -> str:
    return STATUS_LABELS.get(value or "", value or "")


def _fmt_dt(value: datetime | None) -> str:
    return value.strftime("%d/%m/%Y %H:%M") if value is not None else ""


def report_filename(kind: str, fmt: str, now: datetime | None = None) -> str:
    """파일 이름 — ``relatorio_<kind>_<timestamp>.<ext>``."""
    now = now or datetime.now(timezone.utc)
    return f"relatorio_{kind}_{now.strftime('%Y%m%d_%H%M%S')}.{fmt}"


class ReportService:
    """보고서 생성 서비스 (Report builder and renderers)."""

    # --- 데이터 수집 (Data collection) ---

    async def _checklists(self, db: AsyncSession) -> ReportData:
        checklists = await checklist_repository.list_filtered(db)
        counts: dict[str, int] = {status: 0 for status in CHECKLIST_STATUSES}
        for checklist in checklists:
            counts[checklist.status] = counts.get(checklist.status, 0) + 1
        return ReportData(
            kind="checklists",
            title="Relatório de Checklists",
            summary=[("Total de checklists", len(checklists))]
            + [(_label(status), counts[status]) for status in CHECKLIST_STATUSES],
            headers=["Data", "Placa", "Modelo", "Operador", "Matrícula", "Km inicial", "Km final", "Status", "Assinado"],
            rows=[
                [
                    _fmt_dt(c.created_at),
                    c.vehicle.plate if c.vehicle else "",
                    c.vehicle.model if c.vehicle else "",
                    c.operator_name or "",
                    c.operator_badge or "",
                    c.odometer_start,
                    c.odometer_end if c.odometer_end is not None else "",
                    _label(c.status),
                    "Sim" if c.signed else "Não",
                ]
                for c in checklists
            ],
        )

    async def _defects(self, db: AsyncSession) -> ReportData:
        defects = await defect_repository.list_filtered(db)
        counts: dict[str, int] = {status: 0 for status in DEFECT_STATUSES}
        for defect in defects:
            counts[defect.status] = counts.get(defect.status, 0) + 1
        critical: int = sum(1 for d in defects if d.severity == "critico" and d.status != STATUS_RESOLVED)
        return ReportData(
            kind="defeitos",
            title="Relatório de Defeitos",
            summary=[("Total de defeitos", len(defects))]
            + [(_label(status), counts[status]) for status in DEFECT_STATUSES]
            + [("Críticos não resolvidos", critical)],
            headers=["Data", "Placa", "Descrição", "Gravidade", "Status", "Resolvido em"],
            rows=[
                [
                    _fmt_dt(d.created_at),
                    d.vehicle.plate if d.vehicle else "",
                    d.description,
                    _label(d.severity),
                    _label(d.status),
                    _fmt_dt(d.resolved_at),
                ]
                for d in defects
            ],
        )

    async def _vehicles(self, db: AsyncSession) -> ReportData:
        vehicles = await vehicle_repository.list_ordered(db)
        open_by_vehicle: dict[Any, int] = {}
        for defect in await defect_repository.list_filtered(db):
            if defect.status != STATUS_RESOLVED:
                open_by_vehicle[defect.vehicle_id] = open_by_vehicle.get(defect.vehicle_id, 0) + 1
        return ReportData(
            kind="veiculos",
            title="Relatório de Veículos",
            summary=[
                ("Total de veículos", len(vehicles)),
                ("Veículos com defeitos abertos", len(open_by_vehicle)),
            ],
            headers=["Placa", "Modelo", "Ano", "Chassi", "Km atual", "Defeitos abertos"],
            rows=[
                [v.plate, v.model, v.year, v.chassis or "", v.current_mileage, open_by_vehicle.get(v.id, 0)]
                for v in vehicles
            ],
        )

    async def _dashboard(self, db: AsyncSession) -> ReportData:
        counts: dict[str, int] = await dashboard_service.get_counts(db)
        by_status: dict[str, int] = await checklist_repository.count_by_status(db)
        return ReportData(
            kind="dashboard",
            title="Relatório Geral da Frota",
            summary=[
                ("Veículos", counts["vehicles"]),
                ("Checklists", counts["checklists"]),
                ("Defeitos abertos", counts["open_defects"]),
                ("Checklists OK hoje", counts["ok_today"]),
            ],
            headers=["Status do checklist", "Quantidade"],
            rows=[[_label(status), by_status.get(status, 0)] for status in CHECKLIST_STATUSES],
        )

    async def build(self, db: AsyncSession, kind: str) -> ReportData:
        """보고서 데이터 수집 — Collect the data for a report kind.

        Raises:
            BadRequestError: 알 수 없는 종류 (Unknown report kind)
        """
        builders: dict[str, Callable] = {
            "checklists": self._checklists,
            "defeitos": self._defects,
            "veiculos": self._vehicles,
            "dashboard": self._dashboard,
        }
        if kind not in builders:
            raise BadRequestError(f"Tipo de relatório inválido: {kind}")
        return await builders[kind](db)

    # --- 렌더링 (Rendering) ---

    def render_csv(self, report: ReportData, generated_at: datetime) -> bytes:
        """CSV 렌더링 — 제목, 생성 시각, 요약, 표 순서.

        Title line, generated-at line, summary block, then the table.
        """
        output = io.StringIO()
        writer = csv.writer(output, delimiter=",", quoting=csv.QUOTE_MINIMAL, lineterminator="\n")
        writer.writerow([report.title])
        writer.writerow([f"Gerado em: {_fmt_dt(generated_at)}"])
        writer.writerow([])
        writer.writerow(["Resumo"])
        for label, value in report.summary:
            writer.writerow([label, value])
        writer.writerow([])
        writer.writerow(report.headers)
        writer.writerows(report.rows)
        # BOM — 스프레드시트 호환 (Excel detects UTF-8 through the BOM)
        return ("\ufeff" + output.getvalue()).encode("utf-8")

    def render_xlsx(self, report: ReportData, generated_at: datetime) -> bytes:
        """XLSX 렌더링 — 요약 시트 + 데이터 시트."""
        wb = Workbook()
        header_font = Font(bold=True, color="FFFFFF", size=11)
        header_fill = PatternFill(start_color=HEADER_COLOR, end_color=HEADER_COLOR, fill_type="solid")

        summary_ws = wb.active
        summary_ws.title = "Resumo"
        summary_ws.append([report.title])
        summary_ws["A1"].font = Font(bold=True, size=14)
        summary_ws.append([f"Gerado em: {_fmt_dt(generated_at)}"])
        summary_ws.append([])
        for label, value in report.summary:
            summary_ws.append([label, value])
        summary_ws.column_dimensions["A"].width = 32
        summary_ws.column_dimensions["B"].width = 14

        data_ws = wb.create_sheet("Dados")
        for col_idx, header in enumerate(report.headers, 1):
            cell = data_ws.cell(row=1, column=col_idx, value=header)
            cell.font = header_font
            cell.fill = header_fill
            cell.alignment = Alignment(horizontal="center")
            data_ws.column_dimensions[cell.column_letter].width = max(14, len(header) + 4)
        for row in report.rows:
            data_ws.append(row)
        data_ws.freeze_panes = "A2"

        buf = io.BytesIO()
        wb.save(buf)
        return buf.getvalue()

    def render_pdf(self, report: ReportData, generated_at: datetime) -> bytes:
        """PDF 렌더링 — 제목, 생성 시각, 요약, 줄무늬 표 (자동 페이지 분할)."""
        buf = io.BytesIO()
        doc = SimpleDocTemplate(
            buf,
            pagesize=landscape(A4),
            leftMargin=15 * mm,
            rightMargin=15 * mm,
            topMargin=15 * mm,
            bottomMargin=15 * mm,
            title=report.title,
        )
        styles = getSampleStyleSheet()
        story: list = [
            Paragraph(report.title, styles["Title"]),
            Paragraph(f"Gerado em: {_fmt_dt(generated_at)}", styles["Normal"]),
            Spacer(1, 6 * mm),
            Paragraph("Resumo", styles["Heading2"]),
        ]
        summary_table = Table([[label, str(value)] for label, value in report.summary], hAlign="LEFT")
        summary_table.setStyle(TableStyle([
            ("FONTNAME", (0, 0), (0, -1), "Helvetica-Bold"),
            ("BOTTOMPADDING", (0, 0), (-1, -1), 3),
        ]))
        story += [summary_table, Spacer(1, 6 * mm)]

        data: list[list[str]] = [report.headers] + [[str(cell) for cell in row] for row in report.rows]
        # repeatRows=1 — 페이지마다 헤더 반복 (Header repeated on every page)
        table = Table(data, repeatRows=1)
        style: list[tuple] = [
            ("BACKGROUND", (0, 0), (-1, 0), colors.HexColor(f"#{HEADER_COLOR}")),
            ("TEXTCOLOR", (0, 0), (-1, 0), colors.white),
            ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
            ("FONTSIZE", (0, 0), (-1, -1), 8),
            ("GRID", (0, 0), (-1, -1), 0.25, colors.grey),
            ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
        ]
        for row_idx in range(1, len(data)):
            if row_idx % 2 == 0:
                style.append(("BACKGROUND", (0, row_idx), (-1, row_idx), colors.HexColor("#F2F2F2")))
        table.setStyle(TableStyle(style))
        story.append(table)

        doc.build(story)
        return buf.getvalue()

    async def generate(self, db: AsyncSession, kind: str, fmt: str) -> tuple[bytes, str, str]:
        """보고서를 생성합니다.

        Build and render a report.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            kind: 보고서 종류 (checklists / defeitos / veiculos / dashboard)
            fmt: 형식 (csv / pdf / xlsx)

        Returns:
            tuple[bytes, str, str]: (내용, media type, 파일 이름)

        Raises:
            BadRequestError: 알 수 없는 종류 또는 형식
        """
        if fmt not in REPORT_FORMATS:
            raise BadRequestError(f"Formato de relatório inválido: {fmt}")
        report: ReportData = await self.build(db, kind)
        generated_at: datetime = datetime.now(timezone.utc)
        renderers: dict[str, Callable[[ReportData, datetime], bytes]] = {
            "csv": self.render_csv,
            "pdf": self.render_pdf,
            "xlsx": self.render_xlsx,
        }
        content: bytes = renderers[fmt](report, generated_at)
        return content, REPORT_FORMATS[fmt], report_filename(kind, fmt, generated_at)


# 싱글턴 인스턴스 — Singleton instance
report_service: ReportService = ReportService()
