"""
tests/unit/test_validators.py: Identifier classification and field rules.
"""

from __future__ import annotations

import pytest

from vidtube.app.validators import (
    IdentifierKind,
    classify_identifier,
    is_strong_password,
    is_valid_email,
    is_valid_username,
    normalize,
)
from vidtube.config import parse_lifetime


class TestClassifyIdentifier:

    @pytest.mark.parametrize("raw", ["jane@gmail.com", "  JANE@GMAIL.COM  ", "j4ne@gmail.com"])
    def test_email(self, raw):
        result = classify_identifier(raw)
        assert result.valid
        assert result.kind is IdentifierKind.EMAIL
        assert result.value == normalize(raw)

    @pytest.mark.parametrize("raw", ["jane", "Jane", " jane99 "])
    def test_username(self, raw):
        result = classify_identifier(raw)
        assert result.valid
        assert result.kind is IdentifierKind.USERNAME

    @pytest.mark.parametrize("raw", [
        "Jane_Doe",
        "jane.doe",
        "jane@yahoo.com",
        "jane.doe@gmail.com",
        "",
        "   ",
        None,
    ])
    def test_invalid(self, raw):
        result = classify_identifier(raw)
        assert not result.valid
        assert result.kind is None

    def test_patterns_are_mutually_exclusive(self):
        # An email never passes the username rule.
        assert not is_valid_username("jane@gmail.com")


class TestFieldRules:

    def test_username_length_cap(self):
        assert is_valid_username("a" * 50)
        assert not is_valid_username("a" * 51)

    def test_email_requires_allowed_domain(self):
        assert is_valid_email("jane@gmail.com")
        assert not is_valid_email("jane@example.com")
        assert not is_valid_email("jane@gmail.com.evil")


class TestPasswordPolicy:

    def test_lowercase_and_digits_only_fails(self):
        assert not is_strong_password("abc12345")
        assert not is_strong_password("abc12345!")
        assert not is_strong_password("Abc12345")

    def test_all_classes_passes(self):
        assert is_strong_password("Abc123!@")

    @pytest.mark.parametrize("password", [
        "Ab1!",          # too short
        "ABCDEFG1!",     # no lowercase
        "abcdefg1!",     # no uppercase
        "Abcdefgh!",     # no digit
        "Abcdefg12",     # no symbol
        "Abc123!@ x",    # space is not allowed
        "",
        None,
    ])
    def test_failures(self, password):
        assert not is_strong_password(password)

    def test_longer_than_bcrypt_limit_fails(self):
        assert is_strong_password("Aa1!" + "a" * 68)
        assert not is_strong_password("Aa1!" + "a" * 69)


class TestParseLifetime:

    @pytest.mark.parametrize("raw,expected", [
        ("900", 900),
        ("15m", 900),
        ("12h", 43200),
        ("7d", 604800),
        (" 30S ", 30),
    ])
    def test_valid(self, raw, expected):
        assert parse_lifetime(raw, default_seconds=1) == expected

    @pytest.mark.parametrize("raw", [None, "", "soon", "10w", "-5m"])
    def test_falls_back_to_default(self, raw):
        assert parse_lifetime(raw, default_seconds=123) == 123
