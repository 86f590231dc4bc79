"""Helpers for presenting analysis results next to the rules and the text."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Optional

from ..rules.models import AnalysisResult, ChecklistAnalysisResult, ChecklistResult, GuidelineViolation


@dataclass(slots=True)
class ViolationSummary:
    counts: dict[int, int] = field(default_factory=dict)
    by_guideline: dict[int, list[GuidelineViolation]] = field(default_factory=dict)

    def count_for(self, guideline_id: int) -> int:
        return self.counts.get(guideline_id, 0)


def group_violations(violations: Iterable[GuidelineViolation]) -> ViolationSummary:
    summary = ViolationSummary()
    for violation in violations:
        gid = violation.guideline_id
        summary.counts[gid] = summary.counts.get(gid, 0) + 1
        summary.by_guideline.setdefault(gid, []).append(violation)
    return summary


def violations_for(result: Optional[AnalysisResult], guideline_id: int) -> list[GuidelineViolation]:
    if result is None:
        return []
    return [v for v in result.violations if v.guideline_id == guideline_id]


def checklist_result_for(result: Optional[ChecklistAnalysisResult], item_id: int) -> Optional[ChecklistResult]:
    if result is None:
        return None
    return next((r for r in result.results if r.id == item_id), None)


def highlight_spans(content: str, snippets: Iterable[str]) -> list[tuple[int, int]]:
    """Sorted, de-duplicated offsets of every occurrence of each snippet in ``content``.

    Occurrences of one snippet do not overlap each other, but spans from
    different snippets may.
    """
    spans: set[tuple[int, int]] = set()
    for snippet in snippets:
        if not snippet:
            continue
        start = content.find(snippet)
        while start != -1:
            end = start + len(snippet)
            spans.add((start, end))
            start = content.find(snippet, end)
    return sorted(spans)


def selected_highlights(content: str, result: Optional[AnalysisResult], guideline_id: Optional[int]) -> list[tuple[int, int]]:
    """Spans to highlight for one guideline, or for every violation when none is selected."""
    if result is None:
        return []
    violations = result.violations if guideline_id is None else violations_for(result, guideline_id)
    snippets = [text for v in violations for text in (v.text_verbatim or [])]
    return highlight_spans(content, snippets)


def truncate_to_lines(text: str, max_lines: int) -> str:
    lines = text.split("\n")
    if len(lines) <= max_lines:
        return text
    return "\n".join(lines[:max_lines]) + "..."
