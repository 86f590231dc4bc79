"""Analysis results cached by a hash of the analyzed text."""

from __future__ import annotations

import logging
import struct
from typing import Optional

from ..rules.models import RESULT_MODELS, KindResult, RuleKind
from ..validation import safe_parse
from .store import ValidatedStore

logger = logging.getLogger(__name__)

CACHE_PREFIXES: dict[RuleKind, str] = {
    RuleKind.GUIDELINES: "blog-analysis-",
    RuleKind.CHECKLIST: "blog-checklist-",
}

_BASE36_DIGITS = "0123456789abcdefghijklmnopqrstuvwxyz"


def _to_base36(value: int) -> str:
    if value == 0:
        return "0"
    digits = []
    while value:
        value, remainder = divmod(value, 36)
        digits.append(_BASE36_DIGITS[remainder])
    return "".join(reversed(digits))


def content_hash(text: str) -> str:
    """Fast, non-cryptographic 32-bit hash of ``text`` rendered in base 36.

    Runs over UTF-16 code units so that the same text hashes identically to
    keys written by the browser build of the editor.
    """
    encoded = text.encode("utf-16-le", "surrogatepass")
    h = 0
    for (unit,) in struct.iter_unpack("<H", encoded):
        h = (h * 31 + unit) & 0xFFFFFFFF
    if h >= 0x80000000:
        h -= 0x100000000
    return _to_base36(abs(h))


def cache_key(kind: RuleKind, text: str) -> str:
    return f"{CACHE_PREFIXES[kind]}{content_hash(text)}"


class AnalysisCache:
    """Per-kind history of analysis results keyed by document content."""

    def __init__(self, store: ValidatedStore) -> None:
        self._store = store

    def save(self, kind: RuleKind, text: str, result: KindResult) -> bool:
        """Store ``result`` for ``text``; invalid results are logged and not written."""
        schema = RESULT_MODELS[kind]
        payload = result.to_json_dict() if hasattr(result, "to_json_dict") else result
        validation = safe_parse(schema, payload)
        key = cache_key(kind, text)
        if not validation.success:
            logger.error(
                f"Cannot cache invalid {kind.value} analysis result: {validation.issues}",
                extra={"rule_kind": kind.value, "storage_key": key},
            )
            return False
        return self._store.set(key, validation.output.to_json_dict())

    def load(self, kind: RuleKind, text: str) -> Optional[KindResult]:
        return self._store.validated_get(cache_key(kind, text), RESULT_MODELS[kind])

    def clear(self, kind: RuleKind) -> int:
        removed = self._store.delete_prefix(CACHE_PREFIXES[kind])
        logger.info(f"Cleared {removed} cached {kind.value} analyses", extra={"rule_kind": kind.value})
        return removed
