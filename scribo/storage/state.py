"""
Last-known review state: rule collections, latest results and the draft.

These live under fixed keys, separate from the content-addressed history in
``cache.py``. Collections are validated record by record on load so that a
single bad entry does not wipe the author's rules.
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence

from ..rules.models import RESULT_MODELS, RULE_MODELS, KindResult, Rule, RuleKind
from ..validation import validate_each
from .store import ValidatedStore

logger = logging.getLogger(__name__)

RULES_KEYS: dict[RuleKind, str] = {
    RuleKind.GUIDELINES: "scribo-guidelines",
    RuleKind.CHECKLIST: "scribo-checklist",
}

RESULT_KEYS: dict[RuleKind, str] = {
    RuleKind.GUIDELINES: "scribo-guidelines-analysis",
    RuleKind.CHECKLIST: "scribo-checklist-analysis",
}

CONTENT_KEY = "blog-post-content"


class ReviewStateStore:
    """Reads and writes the state restored when the editor starts."""

    def __init__(self, store: ValidatedStore) -> None:
        self._store = store

    def save_rules(self, kind: RuleKind, rules: Sequence[Rule]) -> None:
        self._store.set(RULES_KEYS[kind], [rule.model_dump(mode="json", by_alias=True) for rule in rules])

    def load_rules(self, kind: RuleKind) -> Optional[list[Rule]]:
        """Return the stored collection, or ``None`` if nothing was ever saved."""
        key = RULES_KEYS[kind]
        raw = self._store.get_raw(key)
        if raw is None:
            return None
        if not isinstance(raw, list):
            logger.warning(f"Stored {kind.value} collection is not a list, removing", extra={"storage_key": key})
            self._store.delete(key)
            return None

        rules = validate_each(RULE_MODELS[kind], raw, source=key)
        if len(rules) != len(raw):
            self.save_rules(kind, rules)
        return rules

    def save_result(self, kind: RuleKind, result: Optional[KindResult]) -> None:
        if result is None:
            self._store.delete(RESULT_KEYS[kind])
        else:
            self._store.set(RESULT_KEYS[kind], result.to_json_dict())

    def load_result(self, kind: RuleKind) -> Optional[KindResult]:
        return self._store.validated_get(RESULT_KEYS[kind], RESULT_MODELS[kind])

    def save_content(self, text: str) -> None:
        self._store.set(CONTENT_KEY, text)

    def load_content(self) -> str:
        raw = self._store.get_raw(CONTENT_KEY)
        if raw is None:
            return ""
        if not isinstance(raw, str):
            logger.warning("Stored document text is not a string, removing", extra={"storage_key": CONTENT_KEY})
            self._store.delete(CONTENT_KEY)
            return ""
        return raw
