from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from .rules.models import ChecklistItem, Guideline


class HealthResponse(BaseModel):
    status: str = "ok"
    version: str
    timestamp: datetime


class ErrorResponse(BaseModel):
    error: str
    issues: Optional[list[dict]] = None


class AnalyzeGuidelinesRequest(BaseModel):
    text: str = Field(..., min_length=1, description="Blog post text in markdown")
    guidelines: list[Guideline]


class AnalyzeChecklistRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    text: str = Field(..., min_length=1, description="Blog post text in markdown")
    checklist_items: list[ChecklistItem] = Field(..., alias="checklistItems")


# Shapes the model is asked to produce. These are looser than the result
# models; the final result is validated again after ``analyzedAt`` is added.

class ModelViolation(BaseModel):
    guidelineId: int
    textVerbatim: Optional[list[str]] = None
    reason: str


class ModelGuidelinesOutput(BaseModel):
    violations: list[ModelViolation]


class ModelChecklistResult(BaseModel):
    id: int
    checked: bool
    reason: Optional[str] = None


class ModelChecklistOutput(BaseModel):
    results: list[ModelChecklistResult]
