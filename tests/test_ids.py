"""Tests for prdsmith.transform.ids module."""

import pytest

from prdsmith.transform.ids import (
    STORY_ID_PATTERN,
    derive_description,
    generate_branch_name,
    is_valid_story_id,
    kebab_case,
    normalize_id,
)


class TestNormalizeId:
    """Tests for normalize_id()."""

    def test_canonical_id_unchanged(self):
        assert normalize_id("US-042", 7) == "US-042"

    @pytest.mark.parametrize("raw,expected", [
        ("FR-7", "US-007"),
        ("REQ-042", "US-042"),
        ("REQ-9", "US-009"),
        ("story 12b", "US-012"),
        ("US-1", "US-001"),
        ("US-0001", "US-001"),
    ])
    def test_first_digit_run_rerendered(self, raw, expected):
        assert normalize_id(raw, 0) == expected

    def test_no_digits_uses_position(self):
        assert normalize_id("login", 0) == "US-001"
        assert normalize_id("login", 4) == "US-005"

    def test_none_and_numbers(self):
        """Non-string ids are stringified before digit extraction."""
        assert normalize_id(None, 2) == "US-003"
        assert normalize_id(17, 0) == "US-017"

    def test_number_too_large_falls_back_to_position(self):
        assert normalize_id("FR-1234", 1) == "US-002"

    @pytest.mark.parametrize("index", [998, 999, 5000])
    def test_large_position_clamped(self, index):
        assert normalize_id("abc", index) == "US-999"

    @pytest.mark.parametrize("raw", ["", "x", "FR-0", "A-99-100", "١٢٣", "US-12a", None])
    def test_always_canonical(self, raw):
        """Output always matches US-NNN."""
        assert STORY_ID_PATTERN.fullmatch(normalize_id(raw, 3))


class TestIsValidStoryId:
    """Tests for is_valid_story_id()."""

    def test_valid(self):
        assert is_valid_story_id("US-001") is True

    @pytest.mark.parametrize("value", ["US-1", "US-0001", "us-001", "US-001 ", "FR-001", None, 1])
    def test_invalid(self, value):
        assert is_valid_story_id(value) is False


class TestGenerateBranchName:
    """Tests for generate_branch_name()."""

    def test_basic(self):
        assert generate_branch_name("Saved Searches") == "feature/saved-searches"

    def test_strips_punctuation_and_collapses(self):
        assert generate_branch_name("Login & SSO -- v2!") == "feature/login-sso-v2"

    def test_truncates_slug(self):
        branch = generate_branch_name("a" * 80)
        assert branch == "feature/" + "a" * 50


class TestDeriveDescription:
    """Tests for derive_description()."""

    def test_joins_name_and_problem(self):
        assert derive_description("Login", "Users cannot log in") == "Login - Users cannot log in"

    def test_problem_truncated(self):
        description = derive_description("Login", "x" * 150)
        assert description == "Login - " + "x" * 100


class TestKebabCase:
    def test_kebab_case(self):
        assert kebab_case("  Saved Searches v2 ") == "saved-searches-v2"
