"""
Top-level review workflow: the draft text plus both rule-set sessions.

``analyze_all`` is the joint "Analyze" action. It runs the guideline and
checklist analyses concurrently; each session records its own outcome, so a
failure on one side leaves the other untouched.
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Optional

from ..config import Settings, get_settings
from ..logging import get_review_logger
from ..rules.models import RuleKind
from ..storage.cache import AnalysisCache, content_hash
from ..storage.state import ReviewStateStore
from ..storage.store import JsonFileStore, KeyValueStore, ValidatedStore
from .client import AnalyzerClient
from .service import Analyzer, AnalysisService
from .session import RuleSetSession

logger = get_review_logger('orchestrator')


class ReviewOrchestrator:
    """Owns the draft, both sessions and the shared cache."""

    def __init__(self, store: KeyValueStore, analyzer: Analyzer) -> None:
        validated = ValidatedStore(store)
        self.state_store = ReviewStateStore(validated)
        self.cache = AnalysisCache(validated)
        self.service = AnalysisService(analyzer, self.cache)
        self.analyzer = analyzer
        self.guidelines = RuleSetSession(RuleKind.GUIDELINES, self.state_store, self.service)
        self.checklist = RuleSetSession(RuleKind.CHECKLIST, self.state_store, self.service)
        self._content = ""

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "ReviewOrchestrator":
        settings = settings or get_settings()
        client = AnalyzerClient(
            settings.analyzer.base_url,
            timeout=settings.analyzer.request_timeout_seconds,
        )
        orchestrator = cls(JsonFileStore(settings.state_file), client)
        orchestrator.load()
        return orchestrator

    def session(self, kind: RuleKind) -> RuleSetSession:
        return self.guidelines if kind is RuleKind.GUIDELINES else self.checklist

    @property
    def sessions(self) -> tuple[RuleSetSession, RuleSetSession]:
        return self.guidelines, self.checklist

    def load(self) -> None:
        self._content = self.state_store.load_content()
        for session in self.sessions:
            session.load()
        logger.info(
            f"Restored {len(self.guidelines.rules)} guidelines and {len(self.checklist.rules)} checklist items"
        )

    @property
    def content(self) -> str:
        return self._content

    def set_content(self, text: str) -> None:
        """Replace the draft and show any cached analyses of the new text."""
        self._content = text
        self.state_store.save_content(text)
        for session in self.sessions:
            session.restore_cached(text)

    def is_current(self, dispatched_hash: str) -> bool:
        return dispatched_hash == content_hash(self._content)

    async def analyze(self, kind: RuleKind) -> None:
        await self.session(kind).analyze(self._content, is_current=self.is_current)

    async def analyze_all(self) -> None:
        text = self._content
        outcomes = await asyncio.gather(
            *(session.analyze(text, is_current=self.is_current) for session in self.sessions),
            return_exceptions=True,
        )
        # Remote failures are already recorded per session; anything left is a bug
        for outcome in outcomes:
            if isinstance(outcome, BaseException):
                raise outcome

    def clear_cache(self) -> None:
        for kind in RuleKind:
            self.cache.clear(kind)

    def export_all(self, directory: Path) -> list[Path]:
        return [session.export_to(directory) for session in self.sessions]

    async def aclose(self) -> None:
        aclose = getattr(self.analyzer, "aclose", None)
        if aclose is not None:
            await aclose()
