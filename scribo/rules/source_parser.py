"""
One-way parsers for the bundled rule documents.

These accept a stricter grammar than the editing codec: guidelines must be
numbered list items with a bold title, checklist items must be unchecked
task-list entries. Everything else in the document is prose and ignored.
"""

from __future__ import annotations

import logging
import re

from ..validation import safe_parse
from .models import ChecklistItem, Guideline

logger = logging.getLogger(__name__)

_GUIDELINE_LINE = re.compile(r"^(\d+)\.\s+\*\*([^:*]+)\*\*:\s+(.+)")
_CHECKLIST_LINE = re.compile(r"^-\s*\[\s*\]\s+(.+)")

_LINK = re.compile(r"\[([^\]]+)\]\([^)]+\)")
_BOLD = re.compile(r"\*\*([^*]+)\*\*")
_ITALIC = re.compile(r"\*([^*]+)\*")


def strip_inline_markdown(text: str) -> str:
    """Reduce links to their label and drop bold/italic markers."""
    text = _LINK.sub(r"\1", text)
    text = _BOLD.sub(r"\1", text)
    return _ITALIC.sub(r"\1", text)


def parse_guidelines(markdown: str) -> list[Guideline]:
    guidelines: list[Guideline] = []

    for line in markdown.split("\n"):
        match = _GUIDELINE_LINE.match(line)
        if not match:
            continue

        rule_id = int(match.group(1))
        candidate = {
            "id": rule_id,
            "title": match.group(2).strip(),
            "description": strip_inline_markdown(match.group(3).strip()),
        }
        result = safe_parse(Guideline, candidate)
        if result.success:
            guidelines.append(result.output)
        else:
            logger.warning(f"Failed to parse guideline {rule_id}: {result.issues}")

    return guidelines


def parse_checklist(markdown: str) -> list[ChecklistItem]:
    items: list[ChecklistItem] = []
    next_id = 1

    for line in markdown.split("\n"):
        match = _CHECKLIST_LINE.match(line)
        if not match:
            continue

        candidate = {"id": next_id, "text": strip_inline_markdown(match.group(1).strip())}
        result = safe_parse(ChecklistItem, candidate)
        if result.success:
            items.append(result.output)
            next_id += 1
        else:
            logger.warning(f"Failed to parse checklist item {next_id}: {result.issues}")

    return items
