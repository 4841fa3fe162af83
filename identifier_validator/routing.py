"""
Domestic bank-branch identifiers: US ABA routing numbers and UK/IE sort codes.

Both are checked against the catalog's applicability flags. A routing number
is rejected with NotApplicable when a country is given whose rules do not
use routing numbers; a sort code ALWAYS needs a country.
"""

from __future__ import annotations

import re
from typing import Optional

from .base import CountryScopedValue, IdentifierValue, group_display, resolve_country
from .catalog import Requirement, get_catalog
from .checksums import aba_checksum, valid_federal_reserve_prefix
from .countries import CountryCode
from .models import IssueCode, ValidationOutcome
from .validators import (
    allowed_characters,
    exact_length,
    matches,
    not_blank,
    predicate,
    run_validators,
)

_SEPARATORS = re.compile(r"[\s\-]+")


def _digits(raw: str) -> str:
    return _SEPARATORS.sub("", raw)


def _not_applicable(label: str, country: CountryCode, field_name: str) -> ValidationOutcome:
    return ValidationOutcome.failure(
        f"{label} is not used in {country.value}", field_name, IssueCode.NOT_APPLICABLE
    )


# ─── ABA Routing Number ──────────────────────────────────────────────


class RoutingNumber(IdentifierValue):
    """Nine-digit ABA routing transit number."""

    default_field_name = "RoutingNumber"

    @classmethod
    def _check(cls, raw, country, field_name, **options):
        resolved = resolve_country(country)
        outcome = run_validators(
            (
                not_blank("Routing number"),
                allowed_characters(
                    r"[0-9\s\-]",
                    "Routing number may only contain digits, spaces and dashes",
                    IssueCode.INVALID_FORMAT,
                ),
            ),
            raw,
            field_name,
        )
        digits = _digits(raw)
        if outcome.is_valid:
            outcome = run_validators(
                (exact_length(9, "Routing number"),), digits, field_name
            )
        if outcome.is_valid:
            outcome = run_validators(
                (
                    predicate(
                        valid_federal_reserve_prefix,
                        f"'{digits[:2]}' is not a valid Federal Reserve routing symbol",
                        IssueCode.INVALID_FEDERAL_RESERVE_SYMBOL,
                    ),
                    predicate(
                        lambda value: aba_checksum(value).is_valid,
                        "Routing number checksum is invalid",
                        IssueCode.INVALID_CHECKSUM,
                    ),
                ),
                digits,
                field_name,
            )

        # Sentinels carry no applicability information
        if not resolved.is_sentinel:
            rules = get_catalog().lookup(resolved)
            if rules.routing_number == Requirement.NOT_APPLICABLE:
                outcome = outcome.merge(_not_applicable("Routing number", resolved, field_name))
        return outcome, digits, resolved

    @property
    def federal_reserve_symbol(self) -> str:
        return self.normalized_value[0:4]

    @property
    def institution_identifier(self) -> str:
        return self.normalized_value[4:8]

    @property
    def check_digit(self) -> str:
        return self.normalized_value[8]

    @property
    def federal_reserve_district(self) -> Optional[int]:
        """District 1-12. Thrift (21-32) and electronic (61-72) prefixes map back; 00/80 have none."""
        prefix = int(self.normalized_value[:2])
        if 1 <= prefix <= 12:
            return prefix
        if 21 <= prefix <= 32:
            return prefix - 20
        if 61 <= prefix <= 72:
            return prefix - 60
        return None

    @property
    def formatted(self) -> str:
        return f"{self.federal_reserve_symbol}-{self.institution_identifier}-{self.check_digit}"

    @property
    def components(self) -> dict[str, str]:
        return {
            "federal_reserve_symbol": self.federal_reserve_symbol,
            "institution_identifier": self.institution_identifier,
            "check_digit": self.check_digit,
        }


# ─── Sort Code ───────────────────────────────────────────────────────


class SortCode(CountryScopedValue):
    """Six-digit UK/Irish bank branch code."""

    default_field_name = "SortCode"

    @classmethod
    def _check(cls, raw, country, field_name, **options):
        value = raw.strip()
        digits = _digits(value)
        outcome = run_validators(
            (
                not_blank("Sort code"),
                allowed_characters(
                    r"[0-9 \-]",
                    "Sort code may only contain digits, spaces and dashes",
                    IssueCode.INVALID_CHARACTERS,
                ),
                predicate(
                    lambda _: len(digits) == 6,
                    f"Sort code must have 6 digits, but had {len(digits)}",
                    IssueCode.INVALID_LENGTH,
                ),
                matches(
                    r"\d{6}|\d{2}-\d{2}-\d{2}|\d{2} \d{2} \d{2}",
                    "Sort code must be written as XXXXXX, XX-XX-XX or XX XX XX",
                    IssueCode.INVALID_STRUCTURE,
                ),
            ),
            value,
            field_name,
        )

        if country is None:
            return (
                outcome.merge(cls.country_required("a sort code", field_name)),
                digits,
                CountryCode.UNKNOWN,
            )

        resolved = resolve_country(country)
        rules = get_catalog().lookup(resolved)
        if rules.sort_code == Requirement.NOT_APPLICABLE:
            outcome = outcome.merge(_not_applicable("Sort code", resolved, field_name))
        return outcome, digits, resolved

    @property
    def formatted(self) -> str:
        return group_display(self.normalized_value, (2, 2), "-")

    @property
    def components(self) -> dict[str, str]:
        return {"bank_branch": self.normalized_value}
