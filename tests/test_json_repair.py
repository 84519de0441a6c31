"""Tests for truncated JSON repair."""

import json

import pytest

from response2files.errors import InputTooLargeError
from response2files.repair.json_repair import parse_json_with_repair, repair_json


class TestRepairJson:
    """Test repair_json on common mid-stream cuts."""

    def test_nested_brackets_closed_in_order(self):
        result = repair_json('{"a": [1, 2, {"b": 3')
        assert result.json == '{"a": [1, 2, {"b": 3}]}'
        assert result.was_repaired

    def test_balanced_input_unchanged(self):
        result = repair_json('{"a": 1}')
        assert result.json == '{"a": 1}'
        assert not result.was_repaired
        assert result.repairs == []

    def test_unclosed_string(self):
        result = repair_json('{"name": "Jo')
        assert json.loads(result.json) == {"name": "Jo"}
        assert "Closed unclosed string" in result.repairs

    def test_trailing_comma(self):
        result = repair_json('{"a": 1,')
        assert result.json == '{"a": 1}'
        assert "Removed trailing comma" in result.repairs

    def test_trailing_comma_in_array(self):
        assert repair_json("[1, 2, ").json == "[1, 2]"

    def test_incomplete_key_value(self):
        result = repair_json('{"a": 1, "b":')
        assert result.json == '{"a": 1}'
        assert "Removed incomplete key-value" in result.repairs

    def test_partial_literal(self):
        result = repair_json('{"ok": tru')
        assert json.loads(result.json) == {}

    def test_partial_number_in_array(self):
        result = repair_json('{"a": [1, 2.')
        assert result.json == '{"a": [1]}'
        assert "Removed partial array element" in result.repairs

    def test_partial_literal_as_first_element(self):
        assert json.loads(repair_json("[tr").json) == []

    def test_dangling_object_key(self):
        result = repair_json('{"a": 1, "b')
        assert json.loads(result.json) == {"a": 1}
        assert "Removed dangling object key" in result.repairs

    def test_string_in_array_is_kept(self):
        assert json.loads(repair_json('["a", "b').json) == ["a", "b"]

    def test_brackets_inside_strings_ignored(self):
        result = repair_json('{"code": "function() { return [1"')
        assert json.loads(result.json) == {"code": "function() { return [1"}

    def test_appends_exact_closers(self):
        text = '{"a": [{"b": ['
        result = repair_json(text)
        assert result.json == text + "]}]}"

    @pytest.mark.parametrize(
        "text",
        ['{"a": [1, 2, {"b": 3', '{"name": "Jo', '{"a": 1,', '{"a": 1, "b":', '["x", {"y": [1, 2'],
    )
    def test_repair_is_idempotent(self, text):
        first = repair_json(text)
        assert not repair_json(first.json).was_repaired

    def test_too_large(self):
        with pytest.raises(InputTooLargeError, match="JSON too large"):
            repair_json("[" * 20, max_size=10)


class TestParseJsonWithRepair:
    def test_valid_json(self):
        assert parse_json_with_repair('{"a": 1}') == ({"a": 1}, False, None)

    def test_truncated_json(self):
        assert parse_json_with_repair('{"a": 1') == ({"a": 1}, True, None)

    def test_not_json(self):
        data, repaired, error = parse_json_with_repair("not json")
        assert data is None
        assert not repaired
        assert error
