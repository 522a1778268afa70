"""Recursive Content Validation — normalizes every string leaf of a JSON-shaped value.

Invariants:
    - Output has the same shape as input: same list lengths and order, same dict keys and key order
    - Only str leaves reach normalize_math_delimiters; int/float/bool/None pass through untouched
    - All-or-nothing: the first SanitizationFailed propagates unchanged, no partial result
    - Pure: input is never mutated, no logging (callers log with request context)
"""

from mathtutor.core.domain_types import JsonValue
from mathtutor.core.math_delimiters import normalize_math_delimiters


def validate_math_content(value: JsonValue) -> JsonValue:
    """Return a copy of value with all math markup in the dollar dialect."""
    match value:
        case str():
            return normalize_math_delimiters(value)
        case list() | tuple():
            return [validate_math_content(item) for item in value]
        case dict():
            return {key: validate_math_content(item) for key, item in value.items()}
        case _:
            return value
