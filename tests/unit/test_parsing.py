"""Unit tests for engine output parsing."""

import pytest

from composer.utils.parsing import coerce_int, extract_json_object


class TestExtractJsonObject:
    """Test extract_json_object."""

    def test_plain_json(self):
        assert extract_json_object('{"text": "Hi", "formality_score": 7}') == {
            "text": "Hi", "formality_score": 7,
        }

    def test_markdown_block(self):
        assert extract_json_object('```json\n{"text": "Hi"}\n```') == {"text": "Hi"}

    def test_surrounding_text(self):
        assert extract_json_object('Here you go: {"text": "Hi"} Hope it helps') == {"text": "Hi"}

    def test_python_dict_syntax(self):
        assert extract_json_object("{'text': 'Hi', 'formality_score': 3}") == {
            "text": "Hi", "formality_score": 3,
        }

    @pytest.mark.parametrize("text", ["", "   ", "Just prose.", "[1, 2, 3]", "{not json at all"])
    def test_no_object(self, text):
        assert extract_json_object(text) is None


class TestCoerceInt:
    """Test coerce_int."""

    @pytest.mark.parametrize("value,expected", [
        (7, 7),
        (7.4, 7),
        (6.6, 7),
        ("8", 8),
        (" 9.0 ", 9),
        (12, 12),
    ])
    def test_numbers(self, value, expected):
        assert coerce_int(value) == expected

    @pytest.mark.parametrize("value", [None, True, "high", [], float("nan"), "inf"])
    def test_rejects_non_numbers(self, value):
        assert coerce_int(value) is None
