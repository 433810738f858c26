"""
Tests for lenient JSON parsing of model output.
"""

import pytest

from cvbuilder.services.ai.parsing import (
    AIResponseParseError,
    extract_json_block,
    parse_ai_response,
    repair_json,
    strip_code_fences,
)


class TestStripCodeFences:
    def test_removes_fences_and_blank_lines(self):
        text = '```json\n{"a": 1}\n\n```'
        assert strip_code_fences(text).strip() == '{"a": 1}'


class TestExtractJsonBlock:
    def test_object(self):
        assert extract_json_block('Result: {"a": 1} done') == '{"a": 1}'

    def test_earliest_opener_wins(self):
        assert extract_json_block('see [1] and {"a": 2}') == "[1]"

    def test_no_block(self):
        assert extract_json_block("nothing here") is None


class TestRepairJson:
    def test_quotes_bare_keys_and_drops_trailing_commas(self):
        assert repair_json("{name: 'Jane', tags: ['a',],}") == '{"name": "Jane", "tags": ["a"]}'


class TestParseAIResponse:
    def test_plain_json(self):
        assert parse_ai_response('{"title": "Engineer"}') == {"title": "Engineer"}

    def test_fenced_json(self):
        assert parse_ai_response('```json\n{"title": "Engineer"}\n```') == {"title": "Engineer"}

    def test_array(self):
        assert parse_ai_response('[{"name": "Go"}]') == [{"name": "Go"}]

    def test_surrounding_prose_and_repairs(self):
        text = "Here is the result: {name: 'Jane', skills: ['Python',],} Hope it helps"
        assert parse_ai_response(text) == {"name": "Jane", "skills": ["Python"]}

    def test_line_comments_removed(self):
        text = '{\n  // the candidate\n  "name": "Jane"\n}'
        assert parse_ai_response(text) == {"name": "Jane"}

    def test_field_extraction_fallback(self):
        text = '{"title": "Engineer", "skills": ["Go", "Rust"], "bad": }'
        assert parse_ai_response(text) == {"title": "Engineer", "skills": ["Go", "Rust"]}

    def test_no_json_raises(self):
        with pytest.raises(AIResponseParseError):
            parse_ai_response("Sorry, I cannot help with that.")

    def test_unrecoverable_block_raises(self):
        with pytest.raises(AIResponseParseError, match="Invalid JSON format"):
            parse_ai_response("{ ??? }")
