"""Built-in rule sets shipped with the package."""

from __future__ import annotations

from functools import lru_cache
from importlib import resources

from .models import ChecklistItem, Guideline
from .source_parser import parse_checklist, parse_guidelines

GUIDELINES_ASSET = "guidelines.md"
CHECKLIST_ASSET = "checklist.md"


def read_asset(name: str) -> str:
    return resources.files("scribo.rules").joinpath("data", name).read_text(encoding="utf-8")


@lru_cache(maxsize=1)
def _default_guidelines() -> tuple[Guideline, ...]:
    return tuple(parse_guidelines(read_asset(GUIDELINES_ASSET)))


@lru_cache(maxsize=1)
def _default_checklist() -> tuple[ChecklistItem, ...]:
    return tuple(parse_checklist(read_asset(CHECKLIST_ASSET)))


def load_default_guidelines() -> list[Guideline]:
    return list(_default_guidelines())


def load_default_checklist() -> list[ChecklistItem]:
    return list(_default_checklist())
