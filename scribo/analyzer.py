"""
Server-side analysis: prompt the model, check its output, stamp the result.

Each step is validated separately so the error that reaches the client says
whether the model's output or the assembled result was at fault.
"""

from __future__ import annotations

import json
import logging
from datetime import UTC, datetime
from typing import Any, Sequence

from pydantic import BaseModel

from .aws import AWSClient
from .config import AnalyzerSettings
from .errors import AnalyzerInvocationError
from .prompts import (
    CHECKLIST_SYSTEM_PROMPT,
    GUIDELINES_SYSTEM_PROMPT,
    checklist_user_prompt,
    guidelines_user_prompt,
)
from .rules.models import AnalysisResult, ChecklistAnalysisResult, ChecklistItem, Guideline
from .schemas import ModelChecklistOutput, ModelGuidelinesOutput
from .validation import safe_parse

logger = logging.getLogger(__name__)


def analyzed_at_now() -> str:
    return datetime.now(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def extract_json_object(reply: str) -> Any:
    """Parse the JSON object in a model reply, tolerating code fences or chatter around it."""
    start = reply.find("{")
    end = reply.rfind("}")
    if start == -1 or end < start:
        raise AnalyzerInvocationError("Invalid response format from model")
    try:
        return json.loads(reply[start:end + 1])
    except ValueError as exc:
        raise AnalyzerInvocationError("Invalid response format from model") from exc


class RuleAnalyzer:
    """Runs guideline and checklist reviews through a Bedrock model."""

    def __init__(self, aws_client: AWSClient, settings: AnalyzerSettings) -> None:
        self._aws = aws_client
        self._settings = settings

    def _ask(self, system: str, prompt: str) -> Any:
        reply = self._aws.invoke_bedrock_messages(
            self._settings.model_id,
            system=system,
            prompt=prompt,
            temperature=self._settings.temperature,
            max_tokens=self._settings.max_tokens,
        )
        if not reply:
            raise AnalyzerInvocationError("No response from model")
        return extract_json_object(reply)

    def _validated(self, schema: type[BaseModel], data: Any, message: str) -> Any:
        result = safe_parse(schema, data)
        if not result.success:
            logger.error(f"{message}: {result.issues}")
            raise AnalyzerInvocationError(message, issues=result.issues)
        return result.output

    def analyze_guidelines(self, text: str, guidelines: Sequence[Guideline]) -> AnalysisResult:
        raw = self._ask(GUIDELINES_SYSTEM_PROMPT, guidelines_user_prompt(text, guidelines))
        output = self._validated(ModelGuidelinesOutput, raw, "Invalid response format from model")
        logger.info(f"Model reported {len(output.violations)} guideline violations")
        return self._validated(
            AnalysisResult,
            {
                "violations": [v.model_dump(exclude_none=True) for v in output.violations],
                "analyzedAt": analyzed_at_now(),
            },
            "Failed to create valid analysis result",
        )

    def analyze_checklist(self, text: str, items: Sequence[ChecklistItem]) -> ChecklistAnalysisResult:
        raw = self._ask(CHECKLIST_SYSTEM_PROMPT, checklist_user_prompt(text, items))
        output = self._validated(ModelChecklistOutput, raw, "Invalid response format from model")
        logger.info(f"Model evaluated {len(output.results)} checklist items")
        return self._validated(
            ChecklistAnalysisResult,
            {
                "results": [r.model_dump(exclude_none=True) for r in output.results],
                "analyzedAt": analyzed_at_now(),
            },
            "Failed to create valid analysis result",
        )
