"""체크리스트 진행 상태 계산 — 순수 함수 모듈.

Checklist fill-out state computation — pure functions, no I/O.
Both inspection modes reduce to an ordered list of (key, status) entries:

    - sections 모드: 6개 고정 구역, 각 구역 상태 ok / com_defeito / pendente
      (six fixed vehicle areas, each ok / com_defeito / pendente)
    - items 모드: 템플릿 항목 순서대로, 응답 없음 = pendente
      (template items in order, unanswered = pendente)

Aggregate rule, applied on every save:
    any com_defeito           -> "com_defeito"
    else every entry addressed -> "ok"
    else                      -> "pendente"
"""

from dataclasses import dataclass, field
from typing import Any, Iterable, Sequence

# 점검 구역 — Inspection sections in fill-out order (id, label)
SECTIONS: tuple[tuple[str, str], ...] = (
    ("frente", "Frente"),
    ("traseira", "Traseira"),
    ("lateral_esquerda", "Lateral Esquerda"),
    ("lateral_direita", "Lateral Direita"),
    ("interior", "Interior"),
    ("motor", "Motor"),
)
SECTION_IDS: tuple[str, ...] = tuple(section_id for section_id, _ in SECTIONS)
SECTION_LABELS: dict[str, str] = dict(SECTIONS)

STATUS_OK: str = "ok"
STATUS_DEFECT: str = "com_defeito"
STATUS_PENDING: str = "pendente"
STATUS_COMPLETED: str = "concluido"

SECTION_STATUSES: tuple[str, ...] = (STATUS_OK, STATUS_DEFECT, STATUS_PENDING)
CHECKLIST_STATUSES: tuple[str, ...] = (STATUS_OK, STATUS_DEFECT, STATUS_PENDING, STATUS_COMPLETED)

MODE_SECTIONS: str = "sections"
MODE_ITEMS: str = "items"


@dataclass
class FillEntry:
    """진행 항목 하나 — One section or template item in fill-out order."""

    key: str
    label: str
    status: str
    data: dict[str, Any] = field(default_factory=dict)

    @property
    def addressed(self) -> bool:
        return self.status != STATUS_PENDING


@dataclass
class FillState:
    """체크리스트 진행 상태 요약 — Fill-out state summary."""

    entries: list[FillEntry]
    status: str
    completed: int
    total: int
    progress: float
    current: FillEntry | None

    @property
    def can_save(self) -> bool:
        # 진행률 0이면 저장 불가 — Save disabled at zero progress
        return self.progress > 0

    @property
    def is_complete(self) -> bool:
        return self.total > 0 and self.completed == self.total


def empty_section() -> dict[str, Any]:
    return {"status": STATUS_PENDING, "observation": "", "photo_urls": []}


def empty_sections() -> dict[str, dict[str, Any]]:
    """모든 구역이 pendente인 초기 구역 기록 — Initial record with every section pending."""
    return {section_id: empty_section() for section_id in SECTION_IDS}


def aggregate_status(statuses: Iterable[str]) -> str:
    """구역/항목 상태 목록에서 종합 상태를 계산합니다.

    Compute the aggregate checklist status from per-entry statuses.
    Non-conformity anywhere wins; "ok" needs at least one entry and every
    entry addressed; anything else stays pending.

    Args:
        statuses: 구역 또는 항목 상태 목록 (Per-section or per-item statuses)

    Returns:
        str: "com_defeito" | "ok" | "pendente"
    """
    values: list[str] = list(statuses)
    if any(value == STATUS_DEFECT for value in values):
        return STATUS_DEFECT
    if values and all(value != STATUS_PENDING for value in values):
        return STATUS_OK
    return STATUS_PENDING


def progress_percent(completed: int, total: int) -> float:
    """완료 비율(%) — completed / total as a percentage, 0 when total is 0."""
    if total <= 0:
        return 0.0
    return round(completed / total * 100, 1)


def compile_observations(sections: dict[str, dict[str, Any]]) -> str | None:
    """구역 관찰 내용을 하나의 코멘트로 합칩니다.

    Compile per-section observations into the checklist comments as
    ``**Label**: text`` blocks separated by a blank line, in section order.
    Returns None when no section has an observation.
    """
    blocks: list[str] = []
    for section_id, label in SECTIONS:
        observation: str = (sections.get(section_id) or {}).get("observation") or ""
        if observation.strip():
            blocks.append(f"**{label}**: {observation.strip()}")
    return "\n\n".join(blocks) or None


def section_entries(sections: dict[str, dict[str, Any]] | None) -> list[FillEntry]:
    """구역 기록을 순서대로 FillEntry로 변환 — Section record as ordered entries."""
    sections = sections or {}
    entries: list[FillEntry] = []
    for section_id, label in SECTIONS:
        data: dict[str, Any] = {**empty_section(), **(sections.get(section_id) or {})}
        entries.append(FillEntry(key=section_id, label=label, status=data["status"], data=data))
    return entries


def item_entries(items: Sequence[Any], responses: Sequence[Any]) -> list[FillEntry]:
    """템플릿 항목과 응답을 순서대로 FillEntry로 변환합니다.

    Build ordered entries from template items (by sort_order) and the
    responses already recorded. An item is addressed once it has a response.

    Args:
        items: 템플릿 항목 (Template items with id, name, sort_order)
        responses: 기존 응답 (Recorded responses with item_id, is_conforming)
    """
    by_item: dict[str, Any] = {str(response.item_id): response for response in responses}
    entries: list[FillEntry] = []
    for item in sorted(items, key=lambda i: i.sort_order):
        response = by_item.get(str(item.id))
        if response is None:
            status = STATUS_PENDING
            data: dict[str, Any] = {}
        else:
            status = STATUS_OK if response.is_conforming else STATUS_DEFECT
            data = {
                "response_id": str(response.id),
                "is_conforming": response.is_conforming,
                "note": response.note,
                "photo_urls": list(response.photo_urls or []),
            }
        entries.append(FillEntry(key=str(item.id), label=item.name, status=status, data=data))
    return entries


def first_incomplete(entries: Sequence[FillEntry]) -> FillEntry | None:
    """첫 번째 미완료 항목 — First entry still pending, in order (resume point)."""
    for entry in entries:
        if not entry.addressed:
            return entry
    return None


def build_fill_state(entries: list[FillEntry]) -> FillState:
    """진행 항목으로부터 전체 상태를 계산 — Summarize ordered entries into a FillState."""
    completed: int = sum(1 for entry in entries if entry.addressed)
    total: int = len(entries)
    return FillState(
        entries=entries,
        status=aggregate_status(entry.status for entry in entries),
        completed=completed,
        total=total,
        progress=progress_percent(completed, total),
        current=first_incomplete(entries),
    )
