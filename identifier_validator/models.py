"""
Result model for identifier validation — issues and outcomes.

Validation failures are DATA, not exceptions. Every check produces zero or
more ValidationIssue objects; a ValidationOutcome is simply the ordered list
of them. Outcomes merge by concatenation, so the order issues are reported in
is exactly the order the checks ran in.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict


# ─── Issue Codes ─────────────────────────────────────────────────────


class IssueCategory(str, Enum):
    """Broad failure category, for callers that branch on the kind of problem."""

    STRUCTURAL = "structural"  # Blank, wrong length, disallowed characters
    CHECKSUM = "checksum"  # Well-formed but fails Luhn / mod-97 / ABA
    APPLICABILITY = "applicability"  # Component required or forbidden by country
    CATALOG_MISS = "catalog_miss"  # No rule registered for the country


class IssueCode(str, Enum):
    """Machine-readable issue codes (stable, used for localization/automation)."""

    REQUIRED = "Required"
    INVALID_FORMAT = "InvalidFormat"
    INVALID_CHARACTERS = "InvalidCharacters"
    INVALID_LENGTH = "InvalidLength"
    INVALID_STRUCTURE = "InvalidStructure"
    OUT_OF_RANGE = "OutOfRange"
    NOT_ALLOWED = "NotAllowed"
    INVALID_COUNTRY_CODE = "InvalidCountryCode"
    INVALID_COUNTRY_FORMAT = "InvalidCountryFormat"
    INVALID_IBAN_STRUCTURE = "InvalidIbanStructure"
    INVALID_IBAN_COUNTRY_CODE = "InvalidIbanCountryCode"
    INVALID_IBAN_LENGTH = "InvalidIbanLength"
    INVALID_BBAN_LENGTH = "InvalidBbanLength"
    INVALID_BBAN_FORMAT = "InvalidBbanFormat"
    INVALID_FEDERAL_RESERVE_SYMBOL = "InvalidFederalReserveSymbol"
    IDENTICAL_DIGITS = "IdenticalDigits"
    TEST_CODE = "TestCode"
    INVALID_CHECKSUM = "InvalidChecksum"
    INVALID_IBAN_CHECKSUM = "InvalidIbanChecksum"
    NOT_APPLICABLE = "NotApplicable"
    COUNTRY_REQUIRED = "CountryRequired"
    COUNTRY_MISMATCH = "CountryMismatch"
    UNSUPPORTED_COUNTRY = "UnsupportedCountry"

    @property
    def category(self) -> IssueCategory:
        return _CATEGORY_BY_CODE.get(self, IssueCategory.STRUCTURAL)


_CATEGORY_BY_CODE: dict[IssueCode, IssueCategory] = {
    IssueCode.INVALID_CHECKSUM: IssueCategory.CHECKSUM,
    IssueCode.INVALID_IBAN_CHECKSUM: IssueCategory.CHECKSUM,
    IssueCode.NOT_APPLICABLE: IssueCategory.APPLICABILITY,
    IssueCode.COUNTRY_REQUIRED: IssueCategory.APPLICABILITY,
    IssueCode.COUNTRY_MISMATCH: IssueCategory.APPLICABILITY,
    IssueCode.UNSUPPORTED_COUNTRY: IssueCategory.CATALOG_MISS,
}


# ─── Validation Issue ────────────────────────────────────────────────


class ValidationIssue(BaseModel):
    """A single violation: human-readable message, field for UI binding, machine code."""

    model_config = ConfigDict(frozen=True)

    message: str
    field: str = ""
    code: str = ""

    @property
    def category(self) -> IssueCategory:
        """Category derived from the code; unknown codes count as structural."""
        try:
            return IssueCode(self.code).category
        except ValueError:
            return IssueCategory.STRUCTURAL

    def __str__(self) -> str:
        return f"{self.field}: {self.message}" if self.field else self.message


# ─── Validation Outcome ──────────────────────────────────────────────


class ValidationOutcome(BaseModel):
    """Ordered collection of issues. Valid iff there are none.

    Outcomes are immutable; merge() returns a new outcome with the other
    outcome's issues appended after this one's.
    """

    model_config = ConfigDict(frozen=True)

    issues: tuple[ValidationIssue, ...] = ()

    @classmethod
    def success(cls) -> ValidationOutcome:
        return cls()

    @classmethod
    def failure(
        cls, message: str, field: str = "", code: str | IssueCode = ""
    ) -> ValidationOutcome:
        return cls(issues=(_issue(message, field, code),))

    @classmethod
    def of(cls, issues: list[ValidationIssue] | tuple[ValidationIssue, ...]) -> ValidationOutcome:
        return cls(issues=tuple(issues))

    @property
    def is_valid(self) -> bool:
        return not self.issues

    @property
    def codes(self) -> list[str]:
        return [issue.code for issue in self.issues]

    def merge(self, other: ValidationOutcome | None) -> ValidationOutcome:
        if other is None or other.is_valid:
            return self
        return ValidationOutcome(issues=self.issues + other.issues)

    def to_grouped_map(self) -> dict[str, list[str]]:
        """Group messages by field name, for API-style error responses."""
        grouped: dict[str, list[str]] = {}
        for issue in self.issues:
            grouped.setdefault(issue.field, []).append(issue.message)
        return grouped

    def to_single_message(self, separator: str = "; ") -> str:
        return separator.join(str(issue) for issue in self.issues)

    def to_bullet_list(self) -> str:
        return "\n".join(f" - {issue}" for issue in self.issues)


def merge(*outcomes: ValidationOutcome) -> ValidationOutcome:
    """Concatenate any number of outcomes, preserving order."""
    issues: list[ValidationIssue] = []
    for outcome in outcomes:
        issues.extend(outcome.issues)
    return ValidationOutcome(issues=tuple(issues))


def _issue(message: str, field: str, code: str | IssueCode) -> ValidationIssue:
    return ValidationIssue(
        message=message,
        field=field,
        code=code.value if isinstance(code, IssueCode) else code,
    )


def make_issue(message: str, field: str = "", code: str | IssueCode = "") -> ValidationIssue:
    """Build an issue, accepting either an IssueCode or a plain string code."""
    return _issue(message, field, code)
