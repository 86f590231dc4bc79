from __future__ import annotations

import json
from pathlib import Path

import pytest

from scribo.rules.models import ChecklistItem, Guideline, RuleKind
from scribo.storage.state import CONTENT_KEY, RESULT_KEYS, RULES_KEYS, ReviewStateStore
from scribo.storage.store import JsonFileStore, KeyValueStore, MemoryStore, ValidatedStore


@pytest.fixture()
def state_store(memory_store: MemoryStore) -> ReviewStateStore:
    return ReviewStateStore(ValidatedStore(memory_store))


def test_rules_round_trip(state_store, guidelines, checklist_items) -> None:
    state_store.save_rules(RuleKind.GUIDELINES, guidelines)
    state_store.save_rules(RuleKind.CHECKLIST, checklist_items)

    assert state_store.load_rules(RuleKind.GUIDELINES) == guidelines
    assert state_store.load_rules(RuleKind.CHECKLIST) == checklist_items


def test_missing_rules_are_distinguished_from_empty(state_store) -> None:
    assert state_store.load_rules(RuleKind.GUIDELINES) is None

    state_store.save_rules(RuleKind.GUIDELINES, [])

    assert state_store.load_rules(RuleKind.GUIDELINES) == []


def test_invalid_records_are_dropped_and_collection_rewritten(state_store, memory_store) -> None:
    memory_store.set(RULES_KEYS[RuleKind.CHECKLIST], [
        {"id": 1, "text": "keep me"},
        {"id": 2, "text": ""},
        {"id": 3, "text": "keep me too"},
    ])

    loaded = state_store.load_rules(RuleKind.CHECKLIST)

    assert loaded == [ChecklistItem(id=1, text="keep me"), ChecklistItem(id=3, text="keep me too")]
    assert memory_store.get(RULES_KEYS[RuleKind.CHECKLIST]) == [
        {"id": 1, "text": "keep me"},
        {"id": 3, "text": "keep me too"},
    ]


def test_non_list_collection_is_removed(state_store, memory_store) -> None:
    memory_store.set(RULES_KEYS[RuleKind.GUIDELINES], {"id": 1})

    assert state_store.load_rules(RuleKind.GUIDELINES) is None
    assert RULES_KEYS[RuleKind.GUIDELINES] not in memory_store


def test_result_save_load_and_clear(state_store, memory_store, guideline_result) -> None:
    state_store.save_result(RuleKind.GUIDELINES, guideline_result)
    assert state_store.load_result(RuleKind.GUIDELINES) == guideline_result

    state_store.save_result(RuleKind.GUIDELINES, None)
    assert RESULT_KEYS[RuleKind.GUIDELINES] not in memory_store
    assert state_store.load_result(RuleKind.GUIDELINES) is None


def test_corrupt_result_heals_itself(state_store, memory_store) -> None:
    memory_store.set(RESULT_KEYS[RuleKind.CHECKLIST], {"results": [{"id": 0, "checked": True}], "analyzedAt": "x"})

    assert state_store.load_result(RuleKind.CHECKLIST) is None
    assert RESULT_KEYS[RuleKind.CHECKLIST] not in memory_store


def test_content_round_trip(state_store, memory_store) -> None:
    assert state_store.load_content() == ""

    state_store.save_content("# Draft\n\nHello")

    assert state_store.load_content() == "# Draft\n\nHello"

    memory_store.set(CONTENT_KEY, 42)
    assert state_store.load_content() == ""
    assert CONTENT_KEY not in memory_store


class TestJsonFileStore:
    """File-backed store persists every change immediately."""

    def test_satisfies_protocol(self, tmp_path: Path):
        assert isinstance(JsonFileStore(tmp_path / "state.json"), KeyValueStore)
        assert isinstance(MemoryStore(), KeyValueStore)

    def test_values_survive_a_new_instance(self, tmp_path: Path):
        path = tmp_path / "nested" / "state.json"
        store = JsonFileStore(path)
        store.set("scribo-guidelines", [{"id": 1, "title": "t", "description": ""}])
        store.set("blog-post-content", "draft")

        reopened = JsonFileStore(path)

        assert reopened.get("scribo-guidelines") == [{"id": 1, "title": "t", "description": ""}]
        assert reopened.get("blog-post-content") == "draft"
        assert sorted(reopened.keys()) == ["blog-post-content", "scribo-guidelines"]

    def test_delete_is_persisted(self, tmp_path: Path):
        path = tmp_path / "state.json"
        store = JsonFileStore(path)
        store.set("a", 1)
        store.delete("a")
        store.delete("missing")

        assert json.loads(path.read_text(encoding="utf-8")) == {}

    def test_corrupt_file_starts_empty(self, tmp_path: Path):
        path = tmp_path / "state.json"
        path.write_text("{broken", encoding="utf-8")

        store = JsonFileStore(path)

        assert store.get("anything") is None
        store.set("a", "b")
        assert json.loads(path.read_text(encoding="utf-8")) == {"a": "b"}

    def test_validated_store_contains_serialization_errors(self, tmp_path: Path):
        validated = ValidatedStore(JsonFileStore(tmp_path / "state.json"))

        assert validated.set("bad", {"value": object()}) is False
        assert validated.get_raw("bad") is None


def test_guideline_collection_in_file_store(tmp_path: Path) -> None:
    state_store = ReviewStateStore(ValidatedStore(JsonFileStore(tmp_path / "state.json")))
    rules = [Guideline(id=2, title="Two", description="second")]

    state_store.save_rules(RuleKind.GUIDELINES, rules)

    reopened = ReviewStateStore(ValidatedStore(JsonFileStore(tmp_path / "state.json")))
    assert reopened.load_rules(RuleKind.GUIDELINES) == rules
