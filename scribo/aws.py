from __future__ import annotations

import json
from typing import Any, Protocol, runtime_checkable

import boto3
from botocore.client import BaseClient
from botocore.exceptions import BotoCoreError, ClientError, NoCredentialsError

from .config import AWSSettings
from .errors import AnalyzerConfigurationError, AnalyzerInvocationError

ANTHROPIC_BEDROCK_VERSION = "bedrock-2023-05-31"


@runtime_checkable
class _SupportsRead(Protocol):
    def read(self, __n: int | None = ...) -> bytes:  # pragma: no cover - protocol definition
        ...


class AWSClient:
    """Thin wrapper around boto3 for Bedrock model calls.

    Uses the default credential/provider chain if explicit profile/region are not provided.
    """

    def __init__(self, settings: AWSSettings):
        self._session = boto3.Session(
            profile_name=settings.profile_name or None,
            region_name=settings.region_name or None,
        )

    def _client(self, service: str) -> BaseClient:
        return self._session.client(service)

    def has_credentials(self) -> bool:
        try:
            return self._session.get_credentials() is not None
        except BotoCoreError:
            return False

    def invoke_bedrock_messages(
        self,
        model_id: str,
        *,
        system: str,
        prompt: str,
        temperature: float,
        max_tokens: int,
    ) -> str | None:
        """Invoke a Bedrock chat model and return the text of its reply.

        The request uses the Anthropic messages body accepted by Bedrock. The
        reply is read from ``content[0].text``, falling back to the Titan-style
        ``outputText`` field. Returns ``None`` when the model produced no text.
        """
        if not self.has_credentials():
            raise AnalyzerConfigurationError("Bedrock credentials not configured")

        body = json.dumps({
            "anthropic_version": ANTHROPIC_BEDROCK_VERSION,
            "max_tokens": max_tokens,
            "temperature": temperature,
            "system": system,
            "messages": [{"role": "user", "content": [{"type": "text", "text": prompt}]}],
        })
        try:
            runtime = self._client("bedrock-runtime")
            resp: dict[str, Any] = runtime.invoke_model(
                modelId=model_id,
                body=body,
                accept="application/json",
                contentType="application/json",
            )
        except NoCredentialsError as exc:
            raise AnalyzerConfigurationError("Bedrock credentials not configured") from exc
        except (BotoCoreError, ClientError) as exc:
            raise AnalyzerInvocationError(f"Bedrock invocation failed: {exc}") from exc

        raw = resp.get("body")
        data_bytes: bytes
        if isinstance(raw, _SupportsRead):
            data_bytes = raw.read()
        elif isinstance(raw, (bytes, bytearray)):
            data_bytes = bytes(raw)
        elif isinstance(raw, str):
            data_bytes = raw.encode("utf-8")
        else:
            return None

        try:
            parsed = json.loads(data_bytes.decode("utf-8"))
        except ValueError as exc:
            raise AnalyzerInvocationError("Bedrock returned a non-JSON body") from exc

        if isinstance(parsed, dict):
            content = parsed.get("content")
            if isinstance(content, list) and content:
                first = content[0]
                if isinstance(first, dict):
                    text_value = first.get("text")
                    if isinstance(text_value, str) and text_value:
                        return text_value
            output_text = parsed.get("outputText")
            if isinstance(output_text, str) and output_text:
                return output_text
        return None
