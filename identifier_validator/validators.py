"""
Validator combinators — small pure checks composed into fixed rule sets.

Each validator is a function:

    (value: str, field_name: str) -> ValidationIssue | None

None means "no problem". run_validators() runs EVERY validator in order
(no short-circuit) and collects all issues into one ValidationOutcome, so a
caller sees the complete failure picture from a single call.

Every combinator except not_blank() ignores blank input: a blank value yields
exactly one "Required" issue instead of a cascade of length/format noise.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Collection, Iterable
from decimal import Decimal, InvalidOperation

from .models import IssueCode, ValidationIssue, ValidationOutcome, make_issue

Validator = Callable[[str, str], "ValidationIssue | None"]


# ─── Orchestrator ────────────────────────────────────────────────────


def run_validators(
    validators: Iterable[Validator], value: str, field_name: str = ""
) -> ValidationOutcome:
    """Run ALL validators and collect their issues. Empty input list = success."""
    issues: list[ValidationIssue] = []
    for validator in validators:
        issue = validator(value, field_name)
        if issue is not None:
            issues.append(issue)
    return ValidationOutcome.of(issues)


def is_blank(value: str | None) -> bool:
    return value is None or not value.strip()


# ─── Combinators ─────────────────────────────────────────────────────


def not_blank(label: str) -> Validator:
    """Reject None, empty and whitespace-only values."""

    def check(value: str, field_name: str) -> ValidationIssue | None:
        if is_blank(value):
            return make_issue(f"{label} must be provided", field_name, IssueCode.REQUIRED)
        return None

    return check


def exact_length(length: int, label: str, code: IssueCode = IssueCode.INVALID_LENGTH) -> Validator:
    def check(value: str, field_name: str) -> ValidationIssue | None:
        if is_blank(value) or len(value) == length:
            return None
        return make_issue(
            f"{label} must be exactly {length} characters, but was {len(value)}",
            field_name,
            code,
        )

    return check


def length_range(
    min_length: int,
    max_length: int,
    label: str,
    code: IssueCode = IssueCode.INVALID_LENGTH,
) -> Validator:
    """Inclusive length bounds."""

    def check(value: str, field_name: str) -> ValidationIssue | None:
        if is_blank(value) or min_length <= len(value) <= max_length:
            return None
        return make_issue(
            f"{label} must be between {min_length} and {max_length} characters, "
            f"but was {len(value)}",
            field_name,
            code,
        )

    return check


def max_length(limit: int, label: str) -> Validator:
    def check(value: str, field_name: str) -> ValidationIssue | None:
        if is_blank(value) or len(value) <= limit:
            return None
        return make_issue(
            f"{label} must be at most {limit} characters", field_name, IssueCode.INVALID_LENGTH
        )

    return check


def matches(
    pattern: str | re.Pattern[str],
    message: str,
    code: IssueCode = IssueCode.INVALID_FORMAT,
) -> Validator:
    """Full-match a regular expression."""
    compiled = re.compile(pattern) if isinstance(pattern, str) else pattern

    def check(value: str, field_name: str) -> ValidationIssue | None:
        if is_blank(value) or compiled.fullmatch(value):
            return None
        return make_issue(message, field_name, code)

    return check


def allowed_characters(
    pattern: str, message: str, code: IssueCode = IssueCode.INVALID_FORMAT
) -> Validator:
    """Every character must match the single-character class ``pattern``."""
    return matches(re.compile(f"(?:{pattern})+"), message, code)


def numeric_range(
    low: int | Decimal,
    high: int | Decimal,
    label: str,
    inclusive: bool = True,
) -> Validator:
    """Value must parse as a number between the bounds (both ends inclusive, or both exclusive)."""

    def check(value: str, field_name: str) -> ValidationIssue | None:
        if is_blank(value):
            return None
        try:
            number = Decimal(value.strip())
        except InvalidOperation:
            number = None
        if number is None or not number.is_finite():
            return make_issue(f"{label} must be numeric", field_name, IssueCode.INVALID_FORMAT)

        if inclusive and low <= number <= high:
            return None
        if not inclusive and low < number < high:
            return None
        left, right = ("[", "]") if inclusive else ("(", ")")
        return make_issue(
            f"{label} must be in the range {left}{low}, {high}{right}",
            field_name,
            IssueCode.OUT_OF_RANGE,
        )

    return check


def one_of(allowed: Collection[str], label: str) -> Validator:
    """Set membership (exact, case-sensitive — normalize before validating)."""
    options = frozenset(allowed)

    def check(value: str, field_name: str) -> ValidationIssue | None:
        if is_blank(value) or value in options:
            return None
        return make_issue(
            f"{label} must be one of: {', '.join(sorted(options))}",
            field_name,
            IssueCode.NOT_ALLOWED,
        )

    return check


def predicate(
    test: Callable[[str], bool], message: str, code: IssueCode
) -> Validator:
    """Ad-hoc rule: ``test`` returns True when the value is acceptable."""

    def check(value: str, field_name: str) -> ValidationIssue | None:
        if is_blank(value) or test(value):
            return None
        return make_issue(message, field_name, code)

    return check
