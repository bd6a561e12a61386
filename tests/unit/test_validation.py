"""
Unit tests for field validation rule chains.

Tests verify:
- One key per field, first failing rule wins
- Fields never short-circuit each other
- The uniqueness lookup only runs on well-formed addresses
"""

from unittest.mock import Mock

import pytest

from src.domain.validation import (
    EMAIL_RULES,
    PASSWORD_RULES,
    USERNAME_RULES,
    Rule,
    collect_errors,
    first_failure,
    is_email,
    registration_rules,
)


def validate(username, email, password, email_in_use=lambda _: False) -> dict[str, str]:
    rules = registration_rules(email_in_use)
    return collect_errors(
        [
            ("username", username, rules["username"]),
            ("email", email, rules["email"]),
            ("password", password, rules["password"]),
        ]
    )


class TestFieldRules:
    """Tests for individual field rule chains."""

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            (None, "username_null"),
            ("", "username_null"),
            ("usr", "username_size"),
            ("a" * 33, "username_size"),
            ("user", None),
            ("a" * 32, None),
        ],
    )
    def test_username(self, value, expected) -> None:
        """Username must be present and 4 to 32 characters long."""
        assert first_failure(value, USERNAME_RULES) == expected

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            (None, "email_null"),
            ("", "email_null"),
            ("mail.com", "email_invalid"),
            ("user@mail", "email_invalid"),
            ("user1@mail.com", None),
        ],
    )
    def test_email(self, value, expected) -> None:
        """Email must be present and syntactically valid."""
        assert first_failure(value, EMAIL_RULES) == expected

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            (None, "password_null"),
            ("", "password_null"),
            ("P4ssw", "password_size"),
            ("alllowercase", "password_pattern"),
            ("ALLUPPERCASE", "password_pattern"),
            ("121221", "password_pattern"),
            ("lowerUPPER", "password_pattern"),
            ("lowerand1212", "password_pattern"),
            ("UPPERAND132231", "password_pattern"),
            ("P4ssword", None),
            ("Aa1" + "x" * 69, None),
            ("Aa1" + "x" * 70, "password_max_size"),
            ("Aa1" + "\u017c" * 35, "password_max_size"),
        ],
    )
    def test_password(self, value, expected) -> None:
        """Password needs 6+ characters, at most 72 bytes, mixed case and a digit."""
        assert first_failure(value, PASSWORD_RULES) == expected

    def test_is_email_accepts_plain_address(self) -> None:
        assert is_email("someone@example.org")


class TestCollectErrors:
    """Tests for error accumulation across fields."""

    def test_valid_input_has_no_errors(self) -> None:
        assert validate("user1", "user1@mail.com", "P4ssword") == {}

    def test_all_fields_reported_together(self) -> None:
        """Every failing field is reported, not only the first one."""
        errors = validate(None, None, None)
        assert errors == {
            "username": "username_null",
            "email": "email_null",
            "password": "password_null",
        }

    def test_field_order_is_preserved(self) -> None:
        """Errors come back in field order: username, email, password."""
        errors = validate("usr", "taken@mail.com", "short", email_in_use=lambda _: True)
        assert list(errors) == ["username", "email", "password"]

    def test_only_first_failure_per_field(self) -> None:
        """A value failing several rules reports only the first one."""
        errors = collect_errors(
            [
                (
                    "field",
                    "x",
                    (Rule("first", lambda _: False), Rule("second", lambda _: False)),
                )
            ]
        )
        assert errors == {"field": "first"}


class TestEmailUniqueness:
    """Tests for the email in-use rule."""

    def test_email_in_use_reported(self) -> None:
        errors = validate("user1", "user1@mail.com", "P4ssword", email_in_use=lambda _: True)
        assert errors == {"email": "email_inuse"}

    def test_lookup_not_run_for_malformed_email(self) -> None:
        """The uniqueness lookup never runs on an invalid address."""
        lookup = Mock(return_value=True)
        errors = validate("user1", "mail.com", "P4ssword", email_in_use=lookup)

        assert errors == {"email": "email_invalid"}
        lookup.assert_not_called()

    def test_lookup_not_run_for_missing_email(self) -> None:
        lookup = Mock(return_value=True)
        validate("user1", None, "P4ssword", email_in_use=lookup)
        lookup.assert_not_called()

    def test_lookup_receives_email(self) -> None:
        lookup = Mock(return_value=False)
        validate("user1", "user1@mail.com", "P4ssword", email_in_use=lookup)
        lookup.assert_called_once_with("user1@mail.com")
