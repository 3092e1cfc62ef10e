"""Tests for response field extraction."""

import pytest

from snow_change.response import extract_result_field


class TestExtractResultField:
    """Tests for extract_result_field."""

    def test_extracts_number(self):
        raw = '{"result": {"number": "CHG0012345", "state": "new"}}'
        assert extract_result_field(raw, 'number') == 'CHG0012345'

    def test_missing_field(self):
        assert extract_result_field('{"result": {}}', 'number') == ''

    @pytest.mark.parametrize('raw', [
        '{}',
        '{"error": {"message": "User Not Authenticated"}}',
        '{"result": null}',
        '{"result": "oops"}',
        '{"result": []}',
        '[]',
        '"text"',
        '',
        'not json',
        '<html>502 Bad Gateway</html>',
        '{"result": {"number": ',
    ])
    def test_malformed_or_missing_result_yields_empty(self, raw):
        """Absence and malformedness are treated alike."""
        assert extract_result_field(raw, 'number') == ''

    def test_null_and_false_yield_empty(self):
        assert extract_result_field('{"result": {"approval": null}}', 'approval') == ''
        assert extract_result_field('{"result": {"approval": false}}', 'approval') == ''

    def test_non_string_scalars_are_stringified(self):
        assert extract_result_field('{"result": {"state": -5}}', 'state') == '-5'
        assert extract_result_field('{"result": {"active": true}}', 'active') == 'true'

    def test_none_input(self):
        assert extract_result_field(None, 'number') == ''

    def test_deeply_nested_body_yields_empty(self):
        """Nesting beyond the decoder's recursion limit is treated as malformed."""
        assert extract_result_field('[' * 200000, 'number') == ''
        assert extract_result_field('{"result": ' * 200000, 'number') == ''
