"""Analysis calls combined with the content-addressed result cache."""

from __future__ import annotations

import logging
from typing import Optional, Protocol, Sequence

from ..rules.models import KindResult, Rule, RuleKind
from ..storage.cache import AnalysisCache, content_hash

logger = logging.getLogger(__name__)


class Analyzer(Protocol):
    async def analyze(self, kind: RuleKind, text: str, rules: Sequence[Rule]) -> KindResult:  # pragma: no cover - protocol definition
        ...


class AnalysisService:
    """Runs one analysis and records it in the cache before handing it back."""

    def __init__(self, analyzer: Analyzer, cache: AnalysisCache) -> None:
        self.analyzer = analyzer
        self.cache = cache

    async def analyze(self, kind: RuleKind, text: str, rules: Sequence[Rule]) -> KindResult:
        result = await self.analyzer.analyze(kind, text, rules)
        self.cache.save(kind, text, result)
        logger.info(
            f"Analyzed text against {len(rules)} {kind.value} rules",
            extra={"rule_kind": kind.value, "content_hash": content_hash(text)},
        )
        return result

    def cached(self, kind: RuleKind, text: str) -> Optional[KindResult]:
        return self.cache.load(kind, text)
