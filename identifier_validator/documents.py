"""
Identity document numbers — passports and driving licences.

Both need the issuing country and fail CLOSED: when the catalog has no
pattern for the country (including UNKNOWN and ALL) the number is rejected
with UnsupportedCountry instead of being accepted unchecked.
"""

from __future__ import annotations

import re
from typing import ClassVar, Optional

from .base import CountryScopedValue, group_display, resolve_country
from .catalog import DocumentRule, RegisteredRules, get_catalog
from .countries import CountryCode
from .models import IssueCode, ValidationOutcome
from .validators import allowed_characters, not_blank, predicate, run_validators

_SEPARATORS = re.compile(r"[\s\-]+")


def normalize_document_number(raw: str) -> str:
    return _SEPARATORS.sub("", raw).upper()


def document_rule(rule_name: str, country: CountryCode) -> Optional[DocumentRule]:
    rules = get_catalog().lookup(country)
    if not isinstance(rules, RegisteredRules):
        return None
    return getattr(rules, rule_name)


class DocumentNumber(CountryScopedValue):
    """Shared behaviour; subclasses pick the catalog rule and wording."""

    rule_name: ClassVar[str] = ""
    label: ClassVar[str] = ""

    @classmethod
    def _check(cls, raw, country, field_name, **options):
        normalized = normalize_document_number(raw)
        outcome = run_validators(
            (
                not_blank(cls.label),
                allowed_characters(
                    "[A-Z0-9]",
                    f"{cls.label} may only contain letters and digits",
                    IssueCode.INVALID_CHARACTERS,
                ),
            ),
            normalized,
            field_name,
        )
        if country is None:
            missing = cls.country_required(f"a {cls.label.lower()}", field_name)
            return outcome.merge(missing), normalized, CountryCode.UNKNOWN

        resolved = resolve_country(country)
        rule = document_rule(cls.rule_name, resolved)
        if rule is None:
            unsupported = ValidationOutcome.failure(
                f"No {cls.label.lower()} format is registered for {resolved.value}",
                field_name,
                IssueCode.UNSUPPORTED_COUNTRY,
            )
            return outcome.merge(unsupported), normalized, resolved
        if not outcome.is_valid:
            return outcome, normalized, resolved

        expected = f" ({rule.description})" if rule.description else ""
        country_outcome = run_validators(
            (
                predicate(
                    rule.matches,
                    f"{cls.label} is not valid for {resolved.value}{expected}",
                    IssueCode.INVALID_COUNTRY_FORMAT,
                ),
            ),
            normalized,
            field_name,
        )
        return country_outcome, normalized, resolved

    @property
    def formatted(self) -> str:
        rule = document_rule(self.rule_name, self.country)
        if rule is None or not rule.display_groups:
            return self.normalized_value
        return group_display(self.normalized_value, rule.display_groups, rule.display_separator)

    @property
    def components(self) -> dict[str, str]:
        return {"issuing_country": self.country.value}


class Passport(DocumentNumber):
    default_field_name = "Passport"
    rule_name = "passport"
    label = "Passport number"


class DrivingLicenseNumber(DocumentNumber):
    default_field_name = "DrivingLicenseNumber"
    rule_name = "driving_license"
    label = "Driving licence number"
