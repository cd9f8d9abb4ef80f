"""Tests for shared utility functions."""

from datetime import time

from autobrilho.utils import format_hhmm, new_id, normalize_phone, truncate_to_minute


class TestNormalizePhone:
    def test_strips_spaces(self):
        assert normalize_phone("11 98765 4321") == "11987654321"

    def test_strips_dashes(self):
        assert normalize_phone("11-98765-4321") == "11987654321"

    def test_strips_parentheses(self):
        assert normalize_phone("(11) 98765-4321") == "11987654321"

    def test_preserves_leading_plus(self):
        assert normalize_phone("+55 11 98765 4321") == "+5511987654321"

    def test_clean_number_unchanged(self):
        assert normalize_phone("11987654321") == "11987654321"

    def test_strips_whitespace(self):
        assert normalize_phone("  11987654321  ") == "11987654321"


class TestTimeHelpers:
    def test_truncate_drops_seconds(self):
        assert truncate_to_minute(time(9, 15, 42, 10)) == time(9, 15)

    def test_format_hhmm(self):
        assert format_hhmm(time(8)) == "08:00"


class TestNewId:
    def test_unique(self):
        assert new_id() != new_id()
