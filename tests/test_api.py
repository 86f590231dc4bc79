from __future__ import annotations

import io
import json
from typing import Any

import pytest
from botocore.exceptions import EndpointConnectionError
from fastapi.testclient import TestClient

from scribo.config import get_settings
from scribo.main import app


@pytest.fixture(autouse=True)
def configure_bedrock(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("SCRIBO_AWS_USE_BEDROCK", "true")
    monkeypatch.setenv("SCRIBO_ANALYZER_MODEL_ID", "anthropic.test-model")
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture()
def api_client() -> TestClient:
    return TestClient(app)


class _FakeBedrockRuntime:
    def __init__(self, reply: Any, calls: list[dict[str, Any]]):
        self._reply = reply
        self._calls = calls

    def invoke_model(self, *, modelId: str, body: bytes | str, **kwargs: Any):
        data = json.loads(body)
        self._calls.append({"modelId": modelId, "body": data})
        if isinstance(self._reply, Exception):
            raise self._reply
        payload = json.dumps({"content": [{"type": "text", "text": self._reply}]}).encode("utf-8")
        return {"body": io.BytesIO(payload), "contentType": "application/json"}


class FakeBedrock:
    """Replaces ``boto3.Session`` inside ``scribo.aws``."""

    def __init__(self) -> None:
        self.reply: Any = '{"violations": []}'
        self.credentials: Any = object()
        self.calls: list[dict[str, Any]] = []

    def session_factory(self, *_, **__):
        fake = self

        class _FakeSession:
            region_name = "us-east-1"

            def get_credentials(self):
                return fake.credentials

            def client(self, service: str):
                if service == "bedrock-runtime":
                    return _FakeBedrockRuntime(fake.reply, fake.calls)
                raise ValueError(f"unexpected service {service}")

        return _FakeSession()


@pytest.fixture()
def bedrock(monkeypatch: pytest.MonkeyPatch) -> FakeBedrock:
    import scribo.aws as aws_mod

    fake = FakeBedrock()
    monkeypatch.setattr(aws_mod.boto3, "Session", fake.session_factory)
    return fake


GUIDELINES_BODY = {
    "text": "This post was written by me.",
    "guidelines": [{"id": 3, "title": "Prefer active voice", "description": "Avoid passive."}],
}

CHECKLIST_BODY = {
    "text": "This post was written by me.",
    "checklistItems": [{"id": 1, "text": "Has a title"}, {"id": 2, "text": "Has alt text"}],
}


def test_analyze_guidelines(api_client: TestClient, bedrock: FakeBedrock):
    bedrock.reply = json.dumps({
        "violations": [
            {"guidelineId": 3, "textVerbatim": ["was written by me"], "reason": "Passive voice."},
            {"guidelineId": 3, "reason": "Whole post is passive."},
        ]
    })

    resp = api_client.post("/api/analyze/guidelines", json=GUIDELINES_BODY)

    assert resp.status_code == 200
    data = resp.json()
    assert data["violations"][0] == {
        "guidelineId": 3,
        "textVerbatim": ["was written by me"],
        "reason": "Passive voice.",
    }
    assert "textVerbatim" not in data["violations"][1]
    assert data["analyzedAt"].endswith("Z")

    call = bedrock.calls[0]
    assert call["modelId"] == "anthropic.test-model"
    prompt = call["body"]["messages"][0]["content"][0]["text"]
    assert "3. Prefer active voice: Avoid passive." in prompt
    assert prompt.endswith("This post was written by me.")
    assert "blog post reviewer" in call["body"]["system"]


def test_analyze_checklist_tolerates_fenced_json(api_client: TestClient, bedrock: FakeBedrock):
    bedrock.reply = "```json\n" + json.dumps({
        "results": [
            {"id": 1, "checked": True},
            {"id": 2, "checked": False, "reason": "No images."},
        ]
    }) + "\n```"

    resp = api_client.post("/api/analyze/checklist", json=CHECKLIST_BODY)

    assert resp.status_code == 200
    data = resp.json()
    assert data["results"] == [
        {"id": 1, "checked": True},
        {"id": 2, "checked": False, "reason": "No images."},
    ]
    prompt = bedrock.calls[0]["body"]["messages"][0]["content"][0]["text"]
    assert "1. Has a title\n2. Has alt text" in prompt


@pytest.mark.parametrize(
    "body",
    [
        {"text": "", "guidelines": []},
        {"text": "post"},
        {"text": "post", "guidelines": [{"id": 0, "title": "t", "description": ""}]},
        {"text": "post", "guidelines": [{"id": "1", "title": "t", "description": ""}]},
    ],
)
def test_invalid_request_is_rejected_without_model_call(api_client: TestClient, bedrock: FakeBedrock, body):
    resp = api_client.post("/api/analyze/guidelines", json=body)

    assert resp.status_code == 400
    data = resp.json()
    assert data["error"] == "Invalid request data"
    assert data["issues"]
    assert bedrock.calls == []


def test_missing_credentials_is_a_configuration_error(api_client: TestClient, bedrock: FakeBedrock):
    bedrock.credentials = None

    resp = api_client.post("/api/analyze/checklist", json=CHECKLIST_BODY)

    assert resp.status_code == 500
    assert resp.json() == {"error": "Bedrock credentials not configured"}
    assert bedrock.calls == []


def test_bedrock_disabled(api_client: TestClient, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("SCRIBO_AWS_USE_BEDROCK", "false")
    get_settings.cache_clear()

    resp = api_client.post("/api/analyze/guidelines", json=GUIDELINES_BODY)

    assert resp.status_code == 500
    assert resp.json()["error"] == "Bedrock is disabled"


def test_model_output_in_wrong_shape(api_client: TestClient, bedrock: FakeBedrock):
    bedrock.reply = json.dumps({"violations": [{"guidelineId": "first"}]})

    resp = api_client.post("/api/analyze/guidelines", json=GUIDELINES_BODY)

    assert resp.status_code == 500
    data = resp.json()
    assert data["error"] == "Invalid response format from model"
    assert data["issues"]


def test_model_output_that_cannot_form_a_result(api_client: TestClient, bedrock: FakeBedrock):
    bedrock.reply = json.dumps({"violations": [{"guidelineId": 0, "reason": "bad id"}]})

    resp = api_client.post("/api/analyze/guidelines", json=GUIDELINES_BODY)

    assert resp.status_code == 500
    assert resp.json()["error"] == "Failed to create valid analysis result"


def test_model_reply_without_json(api_client: TestClient, bedrock: FakeBedrock):
    bedrock.reply = "I could not review this post."

    resp = api_client.post("/api/analyze/checklist", json=CHECKLIST_BODY)

    assert resp.status_code == 500
    assert resp.json()["error"] == "Invalid response format from model"


def test_bedrock_failure(api_client: TestClient, bedrock: FakeBedrock):
    bedrock.reply = EndpointConnectionError(endpoint_url="https://bedrock-runtime.invalid")

    resp = api_client.post("/api/analyze/checklist", json=CHECKLIST_BODY)

    assert resp.status_code == 500
    assert resp.json()["error"].startswith("Bedrock invocation failed")


def test_unknown_route_uses_error_body(api_client: TestClient):
    resp = api_client.get("/api/analyze/unknown")

    assert resp.status_code == 404
    assert resp.json() == {"error": "Not Found"}


def test_wrong_method_uses_error_body(api_client: TestClient):
    resp = api_client.get("/api/analyze/guidelines")

    assert resp.status_code == 405
    assert resp.json() == {"error": "Method Not Allowed"}
    assert "POST" in resp.headers["allow"]


def test_session_uses_configured_profile_and_region(monkeypatch: pytest.MonkeyPatch):
    import scribo.aws as aws_mod
    from scribo.aws import AWSClient
    from scribo.config import AWSSettings

    seen: dict[str, Any] = {}

    def fake_session(**kwargs: Any):
        seen.update(kwargs)
        return FakeBedrock().session_factory()

    monkeypatch.setattr(aws_mod.boto3, "Session", fake_session)

    client = AWSClient(AWSSettings(region_name="eu-west-1", profile_name=""))

    assert seen == {"profile_name": None, "region_name": "eu-west-1"}
    assert client.has_credentials()
