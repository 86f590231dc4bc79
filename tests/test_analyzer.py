import pytest

from scribo.analyzer import analyzed_at_now, extract_json_object
from scribo.errors import AnalyzerInvocationError
from scribo.prompts import checklist_user_prompt, guidelines_user_prompt
from scribo.rules.models import AnalysisResult, ISO_TIMESTAMP_PATTERN


def test_analyzed_at_is_accepted_by_result_models():
    stamp = analyzed_at_now()

    assert stamp.endswith("Z")
    assert ISO_TIMESTAMP_PATTERN.match(stamp)
    assert AnalysisResult.model_validate({"violations": [], "analyzedAt": stamp}).analyzed_at == stamp


@pytest.mark.parametrize(
    "reply",
    [
        '{"violations": []}',
        '```json\n{"violations": []}\n```',
        'Here is my review:\n{"violations": []}\nThanks!',
    ],
)
def test_extract_json_object_tolerates_surrounding_text(reply):
    assert extract_json_object(reply) == {"violations": []}


@pytest.mark.parametrize("reply", ["no json here", "} backwards {", '{"violations": [}'])
def test_extract_json_object_rejects_unusable_replies(reply):
    with pytest.raises(AnalyzerInvocationError) as exc_info:
        extract_json_object(reply)

    assert exc_info.value.message == "Invalid response format from model"


def test_user_prompts_list_rules_then_text(guidelines, checklist_items):
    prompt = guidelines_user_prompt("Body", guidelines)
    assert "1. Lead with the point: State the takeaway first.\n2. Prefer active voice" in prompt
    assert prompt.endswith("Text to analyze:\n\nBody")

    prompt = checklist_user_prompt("Body", checklist_items)
    assert "1. The title states what the reader will learn\n2. Images have alt text" in prompt
    assert prompt.endswith("Text to analyze:\n\nBody")
