"""
Per-kind review state: the rule collection, its markdown edit buffer and
the outcome of the latest analysis.

A session owns its collection exclusively and replaces it wholesale on every
change, persisting the new collection straight away. Analysis state is an
immutable snapshot swapped on each transition, so a caller holding an old
snapshot never sees it change underneath them.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Callable, Optional, Sequence

from ..errors import ScriboError
from ..rules.codec import decode_checklist, decode_guidelines, encode_checklist, encode_guidelines
from ..rules.defaults import load_default_checklist, load_default_guidelines
from ..rules.models import RULE_MODELS, ChecklistItem, Guideline, KindResult, Rule, RuleKind, get_next_id
from ..storage.cache import content_hash
from ..storage.state import ReviewStateStore
from ..validation import safe_parse, validate_each
from .service import AnalysisService

logger = logging.getLogger(__name__)

ENCODERS: dict[RuleKind, Callable[[Sequence[Rule]], str]] = {
    RuleKind.GUIDELINES: encode_guidelines,
    RuleKind.CHECKLIST: encode_checklist,
}

DECODERS: dict[RuleKind, Callable[[str], list]] = {
    RuleKind.GUIDELINES: decode_guidelines,
    RuleKind.CHECKLIST: decode_checklist,
}

DEFAULTS: dict[RuleKind, Callable[[], list]] = {
    RuleKind.GUIDELINES: load_default_guidelines,
    RuleKind.CHECKLIST: load_default_checklist,
}

EXPORT_FILENAMES: dict[RuleKind, str] = {
    RuleKind.GUIDELINES: "guidelines.md",
    RuleKind.CHECKLIST: "checklist.md",
}

IsCurrent = Callable[[str], bool]


@dataclass(frozen=True, slots=True)
class AnalysisState:
    is_analyzing: bool = False
    result: Optional[KindResult] = None
    error: Optional[str] = None


def _draft(kind: RuleKind, rule_id: int) -> Rule:
    # Drafts start blank and only become valid once the author fills them in
    if kind is RuleKind.GUIDELINES:
        return Guideline.model_construct(id=rule_id, title="", description="")
    return ChecklistItem.model_construct(id=rule_id, text="")


class RuleSetSession:
    """Rules of one kind plus everything the editor shows about them."""

    def __init__(self, kind: RuleKind, state_store: ReviewStateStore, service: AnalysisService) -> None:
        self.kind = kind
        self._state_store = state_store
        self._service = service
        self._rules: tuple[Rule, ...] = ()
        self.state = AnalysisState()
        self.is_edit_mode = False
        self.markdown_content = ""

    @property
    def rules(self) -> tuple[Rule, ...]:
        return self._rules

    def load(self) -> None:
        """Restore the stored collection and result, seeding defaults on first run."""
        stored = self._state_store.load_rules(self.kind)
        if stored is None:
            logger.info(f"No stored {self.kind.value}, loading defaults", extra={"rule_kind": self.kind.value})
            self._set_rules(DEFAULTS[self.kind]())
        else:
            self._rules = tuple(stored)
        self.state = AnalysisState(result=self._state_store.load_result(self.kind))

    def _set_rules(self, rules: Sequence[Rule]) -> None:
        self._rules = tuple(rules)
        self._state_store.save_rules(self.kind, self._rules)

    # ---- editing ----

    def add(self) -> Rule:
        rule = _draft(self.kind, get_next_id(self._rules))
        self._set_rules((*self._rules, rule))
        return rule

    def update(self, rule_id: int, **changes: str) -> None:
        fields = RULE_MODELS[self.kind].model_fields
        unknown = [name for name in changes if name not in fields or name == "id"]
        if unknown:
            raise ValueError(f"Cannot update {self.kind.value} fields: {', '.join(unknown)}")
        self._set_rules(
            [rule.model_copy(update=changes) if rule.id == rule_id else rule for rule in self._rules]
        )

    def delete(self, rule_id: int) -> None:
        self._set_rules([rule for rule in self._rules if rule.id != rule_id])

    def replace(self, rules: Sequence[Rule]) -> None:
        """Replace the whole collection, keeping only records that validate."""
        self._set_rules(validate_each(RULE_MODELS[self.kind], rules, source=f"{self.kind.value} update"))

    def reset_to_defaults(self) -> None:
        self._set_rules(DEFAULTS[self.kind]())

    def enter_edit_mode(self) -> str:
        self.markdown_content = self.export_markdown()
        self.is_edit_mode = True
        return self.markdown_content

    def set_markdown_content(self, markdown: str) -> None:
        self.markdown_content = markdown

    def exit_edit_mode(self, save: bool) -> None:
        if save:
            self.import_markdown(self.markdown_content)
        self.is_edit_mode = False
        self.markdown_content = ""

    # ---- import / export ----

    def complete_rules(self) -> list[Rule]:
        """Rules that pass validation; blank drafts are left out."""
        model = RULE_MODELS[self.kind]
        return [rule for rule in self._rules if safe_parse(model, rule.model_dump(by_alias=True)).success]

    def export_markdown(self) -> str:
        return ENCODERS[self.kind](self.complete_rules())

    def export_to(self, directory: Path) -> Path:
        target = Path(directory) / EXPORT_FILENAMES[self.kind]
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(self.export_markdown(), encoding="utf-8")
        return target

    def import_markdown(self, markdown: str) -> None:
        self.replace(DECODERS[self.kind](markdown))

    def import_from(self, path: Path) -> None:
        self.import_markdown(Path(path).read_text(encoding="utf-8"))

    # ---- analysis ----

    def clear_analysis(self) -> None:
        self.state = AnalysisState()
        self._state_store.save_result(self.kind, None)

    def apply_result(self, result: KindResult) -> None:
        self.state = replace(self.state, result=result)
        self._state_store.save_result(self.kind, result)

    def restore_cached(self, text: str) -> bool:
        """Show the cached result for ``text`` if one exists."""
        if self.state.is_analyzing:
            return False
        cached = self._service.cached(self.kind, text)
        if cached is None:
            return False
        self.apply_result(cached)
        return True

    async def analyze(self, text: str, *, is_current: Optional[IsCurrent] = None) -> None:
        """Analyze ``text`` against the current rules.

        Does nothing for blank text or when no rule is complete enough to
        send. Errors end up in ``state.error``; the analyzing flag is always
        cleared. When ``is_current`` says the text changed while the call was
        in flight, the result is cached but not shown.
        """
        if not text.strip():
            return
        rules = validate_each(RULE_MODELS[self.kind], self._rules, source=f"{self.kind.value} analysis")
        if not rules:
            return

        dispatched_hash = content_hash(text)
        self.state = replace(self.state, is_analyzing=True, error=None)
        try:
            result = await self._service.analyze(self.kind, text, rules)
        except ScriboError as e:
            self.state = replace(self.state, error=e.message)
        else:
            if is_current is not None and not is_current(dispatched_hash):
                logger.info(
                    f"Discarding stale {self.kind.value} analysis",
                    extra={"rule_kind": self.kind.value, "content_hash": dispatched_hash},
                )
            else:
                self.apply_result(result)
        finally:
            self.state = replace(self.state, is_analyzing=False)
