"""AI output parsing tests."""

import pytest

from mathtutor.core.errors import AIResponseFormatError
from mathtutor.core.parse_ai_json import parse_ai_json, strip_code_fence


def test_parses_plain_json_object():
    assert parse_ai_json('{"is_correct": true}') == {"is_correct": True}


def test_parses_fenced_json():
    raw = '```json\n{"steps": ["a"], "key_concepts": []}\n```'
    assert parse_ai_json(raw) == {"steps": ["a"], "key_concepts": []}


def test_strip_code_fence_without_language():
    assert strip_code_fence('```\n[1, 2]\n```') == "[1, 2]"


def test_strip_code_fence_leaves_unfenced_text():
    assert strip_code_fence('{"a": 1}') == '{"a": 1}'


@pytest.mark.parametrize("raw", [None, "", "   \n"])
def test_empty_response_raises(raw):
    with pytest.raises(AIResponseFormatError) as exc_info:
        parse_ai_json(raw)
    assert exc_info.value.reason == "empty"
    assert exc_info.value.http_status == 502


def test_invalid_json_raises():
    with pytest.raises(AIResponseFormatError) as exc_info:
        parse_ai_json("Voici la correction : {pas du json}")
    assert exc_info.value.reason == "invalid_json"


def test_backslashes_survive_decoding():
    # JSON "\\(" decodes to the two characters \(
    assert parse_ai_json('{"e": "\\\\(x\\\\)"}') == {"e": r"\(x\)"}
