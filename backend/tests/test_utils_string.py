"""
Tests for string utility functions.

Tests the normalize_null_strings function with various input types and edge cases.
Uses property-based testing to validate behavior across many inputs.
"""

import pytest
from hypothesis import given, strategies as st

from multiloader.utils.string_utils import normalize_null_strings


class TestNormalizeNullStrings:
    """Test normalize_null_strings function."""

    def test_placeholder_strings(self):
        """Test that placeholder strings are converted to None."""
        for value in ("null", "NULL", "Null", "None", "none", "", "   "):
            assert normalize_null_strings(value) is None

    def test_non_null_strings(self):
        """Test that real values are preserved (surrounding whitespace trimmed)."""
        assert normalize_null_strings("hello") == "hello"
        assert normalize_null_strings("  app.main  ") == "app.main"
        assert normalize_null_strings("null_value") == "null_value"
        assert normalize_null_strings("not null") == "not null"

    def test_nested_structures(self):
        """Test nested dictionary and list structures."""
        input_data = {
            "entry_point": "null",
            "files": ["a.py", "NULL", {"inner": "none"}],
        }
        expected = {
            "entry_point": None,
            "files": ["a.py", None, {"inner": None}],
        }
        assert normalize_null_strings(input_data) == expected

    def test_non_string_types(self):
        """Test that non-string types are preserved."""
        assert normalize_null_strings(42) == 42
        assert normalize_null_strings(True) is True
        assert normalize_null_strings(None) is None
        assert normalize_null_strings(b"null") == b"null"

    @given(st.text(alphabet="abcdefgh._:", min_size=1))
    def test_identifier_like_text_preserved(self, text):
        """Identifier-like text never collapses to None."""
        assert normalize_null_strings(text) == text

    @given(st.dictionaries(st.text(max_size=5), st.integers()))
    def test_dicts_without_strings_unchanged(self, data):
        assert normalize_null_strings(data) == data
