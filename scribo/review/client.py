"""HTTP client for the analyzer service."""

from __future__ import annotations

import logging
from typing import Any, Optional, Sequence

import httpx

from ..errors import AnalysisRequestError, InvalidAnalysisResponseError
from ..rules.models import RESULT_MODELS, KindResult, Rule, RuleKind
from ..validation import safe_parse

logger = logging.getLogger(__name__)

ANALYZE_PATHS: dict[RuleKind, str] = {
    RuleKind.GUIDELINES: "/api/analyze/guidelines",
    RuleKind.CHECKLIST: "/api/analyze/checklist",
}

RULES_FIELDS: dict[RuleKind, str] = {
    RuleKind.GUIDELINES: "guidelines",
    RuleKind.CHECKLIST: "checklistItems",
}

FAILURE_MESSAGES: dict[RuleKind, str] = {
    RuleKind.GUIDELINES: "Analysis failed",
    RuleKind.CHECKLIST: "Checklist analysis failed",
}

INVALID_DATA_MESSAGES: dict[RuleKind, str] = {
    RuleKind.GUIDELINES: "Received invalid data from analysis API",
    RuleKind.CHECKLIST: "Received invalid data from checklist analysis API",
}


def build_payload(kind: RuleKind, text: str, rules: Sequence[Rule]) -> dict[str, Any]:
    return {
        "text": text,
        RULES_FIELDS[kind]: [rule.model_dump(mode="json", by_alias=True) for rule in rules],
    }


def _error_message(response: httpx.Response, fallback: str) -> str:
    try:
        body = response.json()
    except ValueError:
        return fallback
    if isinstance(body, dict):
        message = body.get("error")
        if isinstance(message, str) and message:
            return message
    return fallback


class AnalyzerClient:
    """Posts documents to the analyzer and validates what comes back.

    The rule collection travels with every request so the analyzer always
    judges against the author's current rules.
    """

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 120.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(base_url=self.base_url, timeout=timeout, transport=transport)

    async def __aenter__(self) -> "AnalyzerClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def analyze(self, kind: RuleKind, text: str, rules: Sequence[Rule]) -> KindResult:
        fallback = FAILURE_MESSAGES[kind]
        try:
            response = await self._client.post(ANALYZE_PATHS[kind], json=build_payload(kind, text, rules))
        except httpx.HTTPError as e:
            logger.error(f"{kind.value} analysis request failed: {e}", extra={"rule_kind": kind.value})
            raise AnalysisRequestError(f"{fallback}: {e}") from e

        if not response.is_success:
            message = _error_message(response, fallback)
            logger.error(
                f"{kind.value} analysis returned {response.status_code}: {message}",
                extra={"rule_kind": kind.value},
            )
            raise AnalysisRequestError(message)

        try:
            data = response.json()
        except ValueError:
            data = None

        result = safe_parse(RESULT_MODELS[kind], data)
        if not result.success:
            logger.error(
                f"Invalid {kind.value} analysis result from API: {result.issues}",
                extra={"rule_kind": kind.value},
            )
            raise InvalidAnalysisResponseError(INVALID_DATA_MESSAGES[kind], issues=result.issues)

        return result.output
