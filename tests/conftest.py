from __future__ import annotations

from typing import Sequence

import pytest

from scribo.config import get_settings
from scribo.errors import AnalysisRequestError
from scribo.rules.models import (
    AnalysisResult,
    ChecklistAnalysisResult,
    ChecklistItem,
    Guideline,
    KindResult,
    Rule,
    RuleKind,
)
from scribo.storage.store import MemoryStore


@pytest.fixture(autouse=True)
def configure_env(tmp_path, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("SCRIBO_STATE_FILE", str(tmp_path / "state.json"))
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture()
def memory_store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture()
def guidelines() -> list[Guideline]:
    return [
        Guideline(id=1, title="Lead with the point", description="State the takeaway first."),
        Guideline(id=2, title="Prefer active voice", description="Avoid passive constructions."),
    ]


@pytest.fixture()
def checklist_items() -> list[ChecklistItem]:
    return [
        ChecklistItem(id=1, text="The title states what the reader will learn"),
        ChecklistItem(id=2, text="Images have alt text"),
    ]


@pytest.fixture()
def guideline_result() -> AnalysisResult:
    return AnalysisResult.model_validate({
        "violations": [
            {"guidelineId": 2, "textVerbatim": ["was written by me"], "reason": "Passive voice."},
            {"guidelineId": 1, "reason": "The takeaway only appears at the end."},
        ],
        "analyzedAt": "2026-10-19T09:30:00.000Z",
    })


@pytest.fixture()
def checklist_result() -> ChecklistAnalysisResult:
    return ChecklistAnalysisResult.model_validate({
        "results": [
            {"id": 1, "checked": True},
            {"id": 2, "checked": False, "reason": "The diagram has no alt text."},
        ],
        "analyzedAt": "2026-10-19T09:30:00.000Z",
    })


class FakeAnalyzer:
    """Stands in for the HTTP client; records calls and replays scripted outcomes."""

    def __init__(self) -> None:
        self.calls: list[tuple[RuleKind, str, list[Rule]]] = []
        self.outcomes: dict[RuleKind, KindResult | Exception] = {}
        self.hooks: dict[RuleKind, object] = {}

    async def analyze(self, kind: RuleKind, text: str, rules: Sequence[Rule]) -> KindResult:
        self.calls.append((kind, text, list(rules)))
        hook = self.hooks.get(kind)
        if hook is not None:
            await hook()
        outcome = self.outcomes.get(kind)
        if outcome is None:
            raise AnalysisRequestError("no scripted outcome")
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


@pytest.fixture()
def fake_analyzer() -> FakeAnalyzer:
    return FakeAnalyzer()
