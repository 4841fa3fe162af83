"""
PostalCode — generic charset/length check, then the country's pattern.

UNKNOWN, ALL and countries without a registered pattern accept any value
that passes the generic check.
"""

from __future__ import annotations

from .base import IdentifierValue, resolve_country
from .catalog import RegisteredRules, get_catalog
from .models import IssueCode
from .validators import allowed_characters, length_range, not_blank, predicate, run_validators

POSTAL_MIN_LENGTH = 2
POSTAL_MAX_LENGTH = 10


def normalize_postal_code(raw: str) -> str:
    """Upper-case, trim, collapse inner whitespace to single spaces."""
    return " ".join(raw.split()).upper()


class PostalCode(IdentifierValue):
    default_field_name = "PostalCode"

    @classmethod
    def _check(cls, raw, country, field_name, **options):
        resolved = resolve_country(country)
        normalized = normalize_postal_code(raw)
        outcome = run_validators(
            (
                not_blank("Postal code"),
                allowed_characters(
                    r"[A-Z0-9 \-]",
                    "Postal code may only contain letters, digits, spaces and hyphens",
                    IssueCode.INVALID_CHARACTERS,
                ),
                length_range(POSTAL_MIN_LENGTH, POSTAL_MAX_LENGTH, "Postal code"),
            ),
            normalized,
            field_name,
        )
        rules = get_catalog().lookup(resolved)
        if not outcome.is_valid or not isinstance(rules, RegisteredRules) or rules.postal is None:
            return outcome, normalized, resolved

        rule = rules.postal
        example = f" (e.g. {rule.example})" if rule.example else ""
        country_outcome = run_validators(
            (
                predicate(
                    rule.matches,
                    f"Postal code is not valid for {resolved.value}{example}",
                    IssueCode.INVALID_COUNTRY_FORMAT,
                ),
            ),
            normalized,
            field_name,
        )
        return country_outcome, normalized, resolved

    @property
    def components(self) -> dict[str, str]:
        return {"country": self.country.value}
