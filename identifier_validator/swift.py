"""
SwiftCode — ISO 9362 Business Identifier Code (BIC).

    AAAA BB CC [DDD]
    │    │  │   └─ branch (optional, "XXX" = primary office)
    │    │  └───── location (second char "0" marks a test BIC)
    │    └──────── ISO country code
    └───────────── institution
"""

from __future__ import annotations

import re
from typing import Any

from .base import IdentifierValue, resolve_country
from .config import get_settings
from .countries import CountryCode
from .models import IssueCode, ValidationIssue, ValidationOutcome, make_issue
from .validators import allowed_characters, matches, not_blank, predicate, run_validators

_WHITESPACE = re.compile(r"\s+")
_STRUCTURE = r"[A-Z]{4}[A-Z]{2}[A-Z0-9]{2}([A-Z0-9]{3})?"

PRIMARY_OFFICE_BRANCH = "XXX"


def normalize_swift_code(raw: str) -> str:
    return _WHITESPACE.sub("", raw).upper()


class SwiftCode(IdentifierValue):
    default_field_name = "SwiftCode"
    option_fields = ("allow_test_codes",)

    allow_test_codes: bool = False

    @classmethod
    def _resolve_options(cls, options: dict[str, Any]) -> dict[str, Any]:
        resolved = super()._resolve_options(options)
        if resolved.get("allow_test_codes") is None:
            resolved["allow_test_codes"] = get_settings().allow_test_swift_codes
        return resolved

    @classmethod
    def _check(cls, raw, country, field_name, allow_test_codes=False, **options):
        normalized = normalize_swift_code(raw)
        outcome = run_validators(
            (
                not_blank("SWIFT code"),
                allowed_characters(
                    "[A-Z0-9]",
                    "SWIFT code may only contain letters and digits",
                    IssueCode.INVALID_CHARACTERS,
                ),
                predicate(
                    lambda value: len(value) in (8, 11),
                    f"SWIFT code must be 8 or 11 characters, but was {len(normalized)}",
                    IssueCode.INVALID_LENGTH,
                ),
                matches(
                    _STRUCTURE,
                    "SWIFT code must be a 4-letter institution code, 2-letter country code, "
                    "2-character location code and optional 3-character branch code",
                    IssueCode.INVALID_STRUCTURE,
                ),
            ),
            normalized,
            field_name,
        )
        supplied = resolve_country(country)
        if not outcome.is_valid:
            return outcome, normalized, supplied

        code = normalized[4:6]
        issues: list[ValidationIssue] = []
        if not CountryCode.is_iso_code(code):
            issues.append(
                make_issue(
                    f"'{code}' is not a valid country code",
                    field_name,
                    IssueCode.INVALID_COUNTRY_CODE,
                )
            )
            return ValidationOutcome.of(issues), normalized, supplied

        if normalized[7] == "0" and not allow_test_codes:
            issues.append(
                make_issue(
                    "Test SWIFT codes are not accepted", field_name, IssueCode.TEST_CODE
                )
            )
        if not supplied.is_sentinel and supplied.value != code:
            issues.append(
                make_issue(
                    f"SWIFT code country {code} does not match {supplied.value}",
                    field_name,
                    IssueCode.COUNTRY_MISMATCH,
                )
            )
        return ValidationOutcome.of(issues), normalized, CountryCode(code)

    # ─── Accessors ───

    @property
    def institution_code(self) -> str:
        return self.normalized_value[0:4]

    @property
    def country_code(self) -> str:
        return self.normalized_value[4:6]

    @property
    def location_code(self) -> str:
        return self.normalized_value[6:8]

    @property
    def branch_code(self) -> str:
        return self.normalized_value[8:11] or PRIMARY_OFFICE_BRANCH

    @property
    def is_bic8(self) -> bool:
        return len(self.normalized_value) == 8

    @property
    def is_bic11(self) -> bool:
        return len(self.normalized_value) == 11

    @property
    def is_primary_office(self) -> bool:
        return self.branch_code == PRIMARY_OFFICE_BRANCH

    @property
    def is_test_code(self) -> bool:
        return self.location_code[1] == "0"

    def to_full_format(self) -> str:
        """Always 11 characters; BIC8 gets the primary-office branch."""
        return self.normalized_value[:8] + self.branch_code

    @property
    def components(self) -> dict[str, str]:
        return {
            "institution_code": self.institution_code,
            "country_code": self.country_code,
            "location_code": self.location_code,
            "branch_code": self.branch_code,
        }

    def _identity(self) -> tuple:
        # BIC8 and its BIC11 "XXX" form name the same office
        return (self.to_full_format(),)
