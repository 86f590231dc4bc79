"""Error types shared by the analyzer service and the review client."""

from __future__ import annotations

from typing import Any


class ScriboError(Exception):
    """Base class for errors surfaced to the author as a single message."""

    status_code: int = 500

    def __init__(self, message: str, *, issues: list[dict[str, Any]] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.issues = issues

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"error": self.message}
        if self.issues:
            payload["issues"] = self.issues
        return payload


class AnalysisRequestError(ScriboError):
    """The analyzer answered with an error, or could not be reached."""


class InvalidAnalysisResponseError(AnalysisRequestError):
    """The analyzer answered successfully but not in the agreed shape."""


class AnalyzerConfigurationError(ScriboError):
    """The analyzer is missing the credentials it needs to call the model."""


class AnalyzerInvocationError(ScriboError):
    """The model call failed or produced unusable output."""
