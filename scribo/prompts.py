"""Reviewer prompts sent to the model for each rule kind."""

from __future__ import annotations

from typing import Sequence

from .rules.models import ChecklistItem, Guideline

JSON_ONLY_FOOTER = (
    "Respond with a single JSON object and nothing else: no markdown, no code fences, "
    "no commentary. Your first character must be '{' and your last character must be '}'."
)

GUIDELINES_SYSTEM_PROMPT = f"""You are a blog post reviewer. Analyze the provided text against the given guidelines and identify violations.

For each violation, provide:
- guidelineId: the ID number of the violated guideline
- textVerbatim: an array of exact text snippets from the content that violate the guideline. Include ONLY the exact text as it appears. If the violation applies to the entire content (not specific text parts), omit this field entirely.
- reason: a brief explanation of why this violates the guideline

Return your response as a JSON object with this structure:
{{
  "violations": [
    {{
      "guidelineId": number,
      "textVerbatim": [string, ...] (optional - omit if violation applies to entire content),
      "reason": string
    }}
  ]
}}

IMPORTANT:
- Use textVerbatim to highlight specific problematic text parts
- A single guideline violation can reference multiple text parts
- Omit textVerbatim entirely for violations that apply to the whole content (e.g., missing elements, overall structure issues)
- If there are no violations, return an empty violations array.

{JSON_ONLY_FOOTER}"""

CHECKLIST_SYSTEM_PROMPT = f"""You are a blog post reviewer. Evaluate if the provided text addresses each checklist item.

For each checklist item, provide:
- id: the ID number of the checklist item
- checked: true if the text adequately addresses this item, false otherwise
- reason: a brief explanation (only required if checked is false, explaining what's missing or inadequate)

Return your response as a JSON object with this structure:
{{
  "results": [
    {{
      "id": number,
      "checked": boolean,
      "reason": string (only if checked is false)
    }}
  ]
}}

IMPORTANT:
- The provided text is in markdown format: consider formatting such as bold, underline, etc.
- Include all checklist items in your response
- Set checked to true only if the text clearly addresses the requirement
- For unchecked items, provide a helpful reason explaining what's missing
- Omit the reason field entirely for checked items

{JSON_ONLY_FOOTER}"""


def guidelines_user_prompt(text: str, guidelines: Sequence[Guideline]) -> str:
    listing = "\n".join(f"{g.id}. {g.title}: {g.description}" for g in guidelines)
    return f"Guidelines to check against:\n\n{listing}\n\n---\n\nText to analyze:\n\n{text}"


def checklist_user_prompt(text: str, items: Sequence[ChecklistItem]) -> str:
    listing = "\n".join(f"{item.id}. {item.text}" for item in items)
    return f"Checklist items to evaluate:\n\n{listing}\n\n---\n\nText to analyze:\n\n{text}"
