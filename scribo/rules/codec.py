"""
Markdown encoding of rule collections for editing and import/export.

Guidelines are written as level-2 headings followed by their description;
checklist items as unchecked task-list entries. Decoding is lenient: text
that does not fit the format is skipped, never reported as an error.
"""

from __future__ import annotations

import re
from typing import Iterable

from .models import ChecklistItem, Guideline

_SECTION_SPLIT = re.compile(r"^## ", re.MULTILINE)
_TITLE_WITH_ID = re.compile(r"^(\d+)\.\s+(.+)$")
_CHECKBOX_LINE = re.compile(r"^-\s+\[[ xX]\]\s+(.+)$")
_BULLET_LINE = re.compile(r"^-\s+(.+)$")


def encode_guidelines(guidelines: Iterable[Guideline]) -> str:
    return "\n".join(
        f"## {g.id}. {g.title}\n\n{g.description}\n" for g in guidelines
    )


def decode_guidelines(markdown: str) -> list[Guideline]:
    """Decode ``## <id>. <title>`` sections back into guidelines.

    A heading without a leading number gets the next free id among the
    guidelines decoded so far.
    """
    guidelines: list[Guideline] = []

    for section in _SECTION_SPLIT.split(markdown):
        if not section:
            continue
        lines = section.strip().split("\n")
        title_line = lines[0]
        description = "\n".join(lines[1:]).strip()

        match = _TITLE_WITH_ID.match(title_line)
        if match:
            rule_id = int(match.group(1))
            title = match.group(2).strip()
        else:
            title = title_line.strip()
            rule_id = max((g.id for g in guidelines), default=0) + 1

        # "0. Title" carries an id the model cannot hold
        if title and rule_id >= 1:
            guidelines.append(Guideline(id=rule_id, title=title, description=description))

    return guidelines


def encode_checklist(items: Iterable[ChecklistItem]) -> str:
    return "\n".join(f"- [ ] {item.text}" for item in items)


def decode_checklist(markdown: str) -> list[ChecklistItem]:
    """Decode task-list or plain bullet lines into checklist items.

    Ids are renumbered from 1 in line order; the markdown carries none.
    """
    items: list[ChecklistItem] = []

    for line in markdown.split("\n"):
        match = _CHECKBOX_LINE.match(line) or _BULLET_LINE.match(line)
        if not match:
            continue
        text = match.group(1).strip()
        if text:
            items.append(ChecklistItem(id=len(items) + 1, text=text))

    return items
