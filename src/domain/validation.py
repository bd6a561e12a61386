"""
Field validation - ordered rule chains with first-failure-per-field semantics.

Each field owns an ordered tuple of rules. Rules of one field run in
order and stop at the first failure, so a later rule (for example the
email uniqueness lookup) only runs on a value that passed every earlier
rule. Different fields never short-circuit each other: every field is
evaluated and the failures are collected into one ordered mapping.
"""

import re
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from typing import Any

from email_validator import EmailNotValidError, validate_email

USERNAME_MIN_LENGTH = 4
USERNAME_MAX_LENGTH = 32
PASSWORD_MIN_LENGTH = 6
# bcrypt only accepts secrets up to 72 bytes
PASSWORD_MAX_BYTES = 72

_PASSWORD_PATTERN = re.compile(r"(?=.*[a-z])(?=.*[A-Z])(?=.*\d)", re.DOTALL)


@dataclass(frozen=True)
class Rule:
    """A named check. ``check`` returns True when the value is acceptable."""

    key: str
    check: Callable[[Any], bool]


def is_present(value: Any) -> bool:
    return value is not None and value != ""


def has_length(minimum: int, maximum: int | None = None) -> Callable[[str], bool]:
    def check(value: str) -> bool:
        if len(value) < minimum:
            return False
        return maximum is None or len(value) <= maximum

    return check


def fits_in_bytes(maximum: int) -> Callable[[str], bool]:
    def check(value: str) -> bool:
        return len(value.encode("utf-8")) <= maximum

    return check


def is_email(value: str) -> bool:
    try:
        validate_email(value, check_deliverability=False)
    except EmailNotValidError:
        return False
    return True


def has_mixed_characters(value: str) -> bool:
    """At least one lowercase letter, one uppercase letter and one digit."""
    return _PASSWORD_PATTERN.match(value) is not None


USERNAME_RULES: tuple[Rule, ...] = (
    Rule("username_null", is_present),
    Rule("username_size", has_length(USERNAME_MIN_LENGTH, USERNAME_MAX_LENGTH)),
)

EMAIL_RULES: tuple[Rule, ...] = (
    Rule("email_null", is_present),
    Rule("email_invalid", is_email),
)

PASSWORD_RULES: tuple[Rule, ...] = (
    Rule("password_null", is_present),
    Rule("password_size", has_length(PASSWORD_MIN_LENGTH)),
    Rule("password_max_size", fits_in_bytes(PASSWORD_MAX_BYTES)),
    Rule("password_pattern", has_mixed_characters),
)


def first_failure(value: Any, rules: Iterable[Rule]) -> str | None:
    """Return the key of the first rule the value fails, or None."""
    for rule in rules:
        if not rule.check(value):
            return rule.key
    return None


def collect_errors(fields: Sequence[tuple[str, Any, Sequence[Rule]]]) -> dict[str, str]:
    """
    Run each field's rule chain and collect one error key per field.

    Args:
        fields: (field name, value, rules) triples, in reporting order

    Returns:
        Ordered mapping of failing field name to its first failing rule key
    """
    errors: dict[str, str] = {}
    for name, value, rules in fields:
        key = first_failure(value, rules)
        if key is not None:
            errors[name] = key
    return errors


def registration_rules(email_in_use: Callable[[str], bool]) -> dict[str, tuple[Rule, ...]]:
    """
    Build the registration rule chains.

    The uniqueness lookup is appended as the last email rule so it only
    runs once the address is present and well formed.
    """
    return {
        "username": USERNAME_RULES,
        "email": EMAIL_RULES + (Rule("email_inuse", lambda value: not email_in_use(value)),),
        "password": PASSWORD_RULES,
    }
