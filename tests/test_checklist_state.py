"""체크리스트 진행 상태 계산 테스트 (순수 함수).

Fill-out state tests: aggregate status, progress, resume point and the
compiled observation text.
"""

from types import SimpleNamespace

import pytest

from app.services.checklist_state import (
    SECTION_IDS,
    aggregate_status,
    build_fill_state,
    compile_observations,
    empty_sections,
    item_entries,
    progress_percent,
    section_entries,
)


class TestAggregateStatus:
    """종합 상태 규칙 테스트."""

    @pytest.mark.parametrize("statuses,expected", [
        (["ok", "ok"], "ok"),
        (["ok", "com_defeito", "pendente"], "com_defeito"),
        (["ok", "pendente"], "pendente"),
        ([], "pendente"),
    ])
    def test_rules(self, statuses, expected):
        assert aggregate_status(statuses) == expected


class TestProgress:
    """진행률 테스트."""

    def test_percent(self):
        assert progress_percent(2, 6) == 33.3
        assert progress_percent(6, 6) == 100.0
        assert progress_percent(0, 0) == 0.0

    def test_sections_resume_point(self):
        sections = empty_sections()
        sections["frente"]["status"] = "ok"
        sections["traseira"]["status"] = "com_defeito"
        state = build_fill_state(section_entries(sections))
        assert state.total == len(SECTION_IDS)
        assert state.completed == 2
        assert state.progress == 33.3
        assert state.status == "com_defeito"
        assert state.current.key == "lateral_esquerda"
        assert state.can_save
        assert not state.is_complete

    def test_fresh_checklist_cannot_save(self):
        state = build_fill_state(section_entries(None))
        assert state.progress == 0.0
        assert not state.can_save
        assert state.current.key == "frente"

    def test_items_follow_sort_order(self):
        items = [
            SimpleNamespace(id="b", name="Freios", sort_order=1),
            SimpleNamespace(id="a", name="Pneus", sort_order=0),
        ]
        responses = [SimpleNamespace(id="r1", item_id="a", is_conforming=True, note=None, photo_urls=None)]
        state = build_fill_state(item_entries(items, responses))
        assert [entry.label for entry in state.entries] == ["Pneus", "Freios"]
        assert state.current.label == "Freios"
        assert state.status == "pendente"
        assert state.entries[0].data["photo_urls"] == []


class TestCompileObservations:
    """관찰 내용 결합 테스트."""

    def test_section_order_and_format(self):
        sections = {
            "motor": {"observation": "Vazamento de óleo"},
            "frente": {"observation": " Farol fraco "},
            "interior": {"observation": "   "},
        }
        assert compile_observations(sections) == "**Frente**: Farol fraco\n\n**Motor**: Vazamento de óleo"

    def test_none_when_empty(self):
        assert compile_observations(empty_sections()) is None
