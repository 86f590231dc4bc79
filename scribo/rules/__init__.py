"""Rule models plus the markdown codec and source parser."""

from .codec import decode_checklist, decode_guidelines, encode_checklist, encode_guidelines
from .defaults import load_default_checklist, load_default_guidelines
from .models import (
    AnalysisResult,
    ChecklistAnalysisResult,
    ChecklistItem,
    ChecklistResult,
    Guideline,
    GuidelineViolation,
    RuleKind,
    get_next_id,
)
from .source_parser import parse_checklist, parse_guidelines, strip_inline_markdown

__all__ = [
    'encode_guidelines',
    'decode_guidelines',
    'encode_checklist',
    'decode_checklist',
    'parse_guidelines',
    'parse_checklist',
    'strip_inline_markdown',
    'load_default_guidelines',
    'load_default_checklist',
    'Guideline',
    'ChecklistItem',
    'GuidelineViolation',
    'ChecklistResult',
    'AnalysisResult',
    'ChecklistAnalysisResult',
    'RuleKind',
    'get_next_id',
]
