"""Unit tests for JSON object recovery from free-form replies."""

import pytest

from termslens.analysis.errors import ExtractionError
from termslens.analysis.extractor import extract_json_object


class TestExtractJsonObject:
    def test_object_surrounded_by_prose(self):
        raw = 'Sure, here it is: {"title":"Privacy Policy","content":"X"} — hope that helps'
        assert extract_json_object(raw) == {"title": "Privacy Policy", "content": "X"}

    def test_bare_object(self):
        assert extract_json_object('{"summary": "ok"}') == {"summary": "ok"}

    def test_markdown_fence(self):
        raw = '```json\n{"risks": [{"severity": "low", "description": "d"}]}\n```'
        assert extract_json_object(raw)["risks"][0]["severity"] == "low"

    def test_nested_objects(self):
        raw = 'Result: {"a": {"b": {"c": 1}}, "d": 2} end'
        assert extract_json_object(raw) == {"a": {"b": {"c": 1}}, "d": 2}

    def test_braces_inside_strings(self):
        raw = 'Note {"content": "use } and { freely", "title": "T"} trailing }'
        assert extract_json_object(raw) == {"content": "use } and { freely", "title": "T"}

    def test_escaped_quotes_inside_strings(self):
        raw = '{"content": "he said \\"}\\" loudly"}'
        assert extract_json_object(raw) == {"content": 'he said "}" loudly'}

    def test_first_of_two_objects(self):
        raw = '{"summary": "first"} and also {"summary": "second"}'
        assert extract_json_object(raw) == {"summary": "first"}

    def test_stray_brace_before_object_raises(self):
        raw = 'Ignore this { then {"summary": "x"}'
        with pytest.raises(ExtractionError):
            extract_json_object(raw)

    def test_no_braces_raises(self):
        with pytest.raises(ExtractionError, match="No JSON object"):
            extract_json_object("I could not analyze this document.")

    def test_empty_string_raises(self):
        with pytest.raises(ExtractionError):
            extract_json_object("")

    def test_unterminated_object_raises(self):
        with pytest.raises(ExtractionError):
            extract_json_object('{"title": "Privacy Policy", "content": "cut off')

    def test_malformed_object_raises(self):
        with pytest.raises(ExtractionError):
            extract_json_object("{title: 'Privacy Policy'}")

    def test_array_only_raises(self):
        with pytest.raises(ExtractionError):
            extract_json_object('[1, 2, 3]')

    def test_non_string_raises(self):
        with pytest.raises(ExtractionError):
            extract_json_object(None)
