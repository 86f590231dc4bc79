"""
Pydantic models for rules and analysis results.

Field names on the wire and in storage are camelCase (``guidelineId``,
``textVerbatim``, ``analyzedAt``); Python attributes are snake_case. Ids,
booleans and strings are validated strictly so that stored or remote data
is never silently coerced into shape; the one allowance is that ids may
arrive as whole-number floats.
"""

from __future__ import annotations

import re
from enum import Enum
from typing import Annotated, Iterable, Optional, Protocol, Union

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, TypeAdapter, field_validator

# Matches the timestamps produced by ``datetime.isoformat()`` on aware values
# and by JavaScript's ``Date.toISOString()``.
ISO_TIMESTAMP_PATTERN = re.compile(
    r"^\d{4}-(?:0[1-9]|1[0-2])-(?:[12]\d|0[1-9]|3[01])[T ]"
    r"(?:[01]\d|2[0-3])(?::[0-5]\d){2}(?:[.,]\d{1,9})?"
    r"(?:Z|[+-](?:[01]\d|2[0-3])(?::?[0-5]\d)?)$"
)


def _whole_number(value):
    # JSON producers may send 3.0 for 3
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


RuleId = Annotated[int, Field(strict=True, ge=1), BeforeValidator(_whole_number)]
NonEmptyStr = Annotated[str, Field(strict=True, min_length=1)]
StrictStr = Annotated[str, Field(strict=True)]


class RuleKind(str, Enum):
    """The two independently maintained rule sets."""
    GUIDELINES = "guidelines"
    CHECKLIST = "checklist"


class _WireModel(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    def to_json_dict(self) -> dict:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class Guideline(_WireModel):
    """A free-form rule checked for violations."""
    id: RuleId
    title: NonEmptyStr
    description: StrictStr


class ChecklistItem(_WireModel):
    """A binary rule checked for presence in the text."""
    id: RuleId
    text: NonEmptyStr


class GuidelineViolation(_WireModel):
    """A reported guideline failure, optionally anchored to verbatim spans."""
    guideline_id: RuleId = Field(alias="guidelineId")
    text_verbatim: Optional[list[NonEmptyStr]] = Field(default=None, alias="textVerbatim")
    reason: StrictStr

    @property
    def applies_to_whole_document(self) -> bool:
        return self.text_verbatim is None


class ChecklistResult(_WireModel):
    id: RuleId
    checked: bool = Field(strict=True)
    reason: Optional[StrictStr] = None


class _TimestampedResult(_WireModel):
    analyzed_at: str = Field(alias="analyzedAt")

    @field_validator("analyzed_at", mode="before")
    @classmethod
    def validate_analyzed_at(cls, v):
        """Require an ISO-8601 timestamp with seconds and a zone designator."""
        if not isinstance(v, str) or not ISO_TIMESTAMP_PATTERN.match(v):
            raise ValueError("analyzedAt must be an ISO-8601 timestamp")
        return v


class AnalysisResult(_TimestampedResult):
    """Guideline analysis of one document."""
    violations: list[GuidelineViolation]


class ChecklistAnalysisResult(_TimestampedResult):
    """Checklist analysis of one document."""
    results: list[ChecklistResult]


Rule = Union[Guideline, ChecklistItem]
KindResult = Union[AnalysisResult, ChecklistAnalysisResult]

GuidelineList = TypeAdapter(list[Guideline])
ChecklistItemList = TypeAdapter(list[ChecklistItem])


class _HasId(Protocol):
    id: int


def get_next_id(items: Iterable[_HasId]) -> int:
    """Return one past the highest id in ``items``, or 1 when empty."""
    return max((item.id for item in items), default=0) + 1


RULE_MODELS: dict[RuleKind, type[BaseModel]] = {
    RuleKind.GUIDELINES: Guideline,
    RuleKind.CHECKLIST: ChecklistItem,
}

RESULT_MODELS: dict[RuleKind, type[BaseModel]] = {
    RuleKind.GUIDELINES: AnalysisResult,
    RuleKind.CHECKLIST: ChecklistAnalysisResult,
}
