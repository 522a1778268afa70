"""AI Output Parsing — raw model text to a JSON value.

Invariants:
    - Empty or whitespace-only text raises AIResponseFormatError("empty")
    - Undecodable text raises AIResponseFormatError("invalid_json")
    - A single surrounding Markdown code fence (```json ... ```) is tolerated

Design Decisions:
    - Fence stripping: models wrap JSON in fences even when told not to; the
      payload inside is still valid JSON, rejecting it would only burn a retry
"""

import json
import re

from mathtutor.core.domain_types import JsonValue
from mathtutor.core.errors import AIResponseFormatError, ErrorContext

_FENCE = re.compile(r"^```[a-zA-Z]*\s*\n(?P<body>.*)\n\s*```$", re.DOTALL)


def strip_code_fence(text: str) -> str:
    match = _FENCE.match(text)
    return match.group("body").strip() if match else text


def parse_ai_json(raw: str | None, context: ErrorContext | None = None) -> JsonValue:
    """Decode the model's JSON answer."""
    text = (raw or "").strip()
    if not text:
        raise AIResponseFormatError("empty", context)
    try:
        return json.loads(strip_code_fence(text))
    except json.JSONDecodeError:
        raise AIResponseFormatError("invalid_json", context)
