"""
AccountNumber — IBAN or domestic BBAN, detected automatically.

Detection: after removing spaces/dashes and upper-casing, the text is an IBAN
when it starts with a country code that has a registered IBAN length,
followed by two digits. The IBAN prefix decides the country; a supplied real
country must agree with it (CountryMismatch otherwise). Anything else is
validated as a BBAN under the supplied country's rules.
"""

from __future__ import annotations

import re
from enum import Enum
from typing import Optional

from .base import IdentifierValue, blocks_of, resolve_country
from .catalog import CountryCatalog, RegisteredRules, get_catalog
from .checksums import iban_mod97
from .countries import CountryCode
from .models import IssueCode, ValidationOutcome
from .validators import (
    allowed_characters,
    length_range,
    matches,
    not_blank,
    predicate,
    run_validators,
)

_SEPARATORS = re.compile(r"[\s\-]+")
_IBAN_PREFIX = re.compile(r"[A-Z]{2}[0-9]{2}")

# Any BBAN, before country rules
BBAN_MIN_LENGTH = 4
BBAN_MAX_LENGTH = 34


class AccountNumberType(str, Enum):
    IBAN = "IBAN"
    BBAN = "BBAN"


def normalize_account_number(raw: str) -> str:
    return _SEPARATORS.sub("", raw).upper()


def looks_like_iban(normalized: str, catalog: CountryCatalog | None = None) -> bool:
    if catalog is None:
        catalog = get_catalog()
    return _IBAN_PREFIX.match(normalized) is not None and catalog.is_iban_country(normalized[:2])


# ─── Rule Sets ───────────────────────────────────────────────────────


def _iban_outcome(iban: str, field_name: str, catalog: CountryCatalog) -> ValidationOutcome:
    expected = catalog.iban_length(iban[:2])
    structural = run_validators(
        (
            allowed_characters(
                "[A-Z0-9]",
                "IBAN may only contain letters and digits",
                IssueCode.INVALID_CHARACTERS,
            ),
            predicate(
                lambda value: len(value) == expected,
                f"IBAN for {iban[:2]} must be {expected} characters, but was {len(iban)}",
                IssueCode.INVALID_IBAN_LENGTH,
            ),
            matches(
                r"[A-Z]{2}[0-9]{2}[A-Z0-9]{11,30}",
                "IBAN must be a country code, two check digits and the account identifier",
                IssueCode.INVALID_IBAN_STRUCTURE,
            ),
        ),
        iban,
        field_name,
    )
    if not structural.is_valid:
        return structural

    # mod-97 only makes sense on a structurally sound IBAN
    result = iban_mod97(iban)
    if not result.is_valid:
        return ValidationOutcome.failure(
            "IBAN check digits are invalid", field_name, IssueCode.INVALID_IBAN_CHECKSUM
        )
    return structural


def _bban_outcome(
    bban: str, country: CountryCode, field_name: str, catalog: CountryCatalog
) -> ValidationOutcome:
    generic = run_validators(
        (
            allowed_characters(
                "[A-Z0-9]",
                "Account number may only contain letters and digits",
                IssueCode.INVALID_BBAN_FORMAT,
            ),
            length_range(
                BBAN_MIN_LENGTH, BBAN_MAX_LENGTH, "Account number", IssueCode.INVALID_BBAN_LENGTH
            ),
        ),
        bban,
        field_name,
    )
    rules = catalog.lookup(country)
    if not generic.is_valid or not isinstance(rules, RegisteredRules) or rules.bban is None:
        return generic

    rule = rules.bban
    validators = [
        length_range(
            rule.min_length,
            rule.max_length,
            f"Account number for {country.value}",
            IssueCode.INVALID_BBAN_LENGTH,
        )
    ]
    if rule.digits_only:
        validators.append(
            matches(
                r"[0-9]+",
                f"Account number for {country.value} must contain digits only",
                IssueCode.INVALID_BBAN_FORMAT,
            )
        )
    return run_validators(validators, bban, field_name)


# ─── Value Object ────────────────────────────────────────────────────


class AccountNumber(IdentifierValue):
    """Bank account number: a full IBAN, or a BBAN checked against the country's rules."""

    default_field_name = "AccountNumber"

    account_type: AccountNumberType = AccountNumberType.BBAN

    @classmethod
    def _check(cls, raw, country, field_name, **options):
        blank = run_validators((not_blank("Account number"),), raw, field_name)
        if not blank.is_valid:
            return blank, "", resolve_country(country)

        catalog = get_catalog()
        normalized = normalize_account_number(raw)
        resolved = resolve_country(country)
        if looks_like_iban(normalized, catalog):
            prefix = normalized[:2]
            outcome = _iban_outcome(normalized, field_name, catalog)
            if not resolved.is_sentinel and resolved.value != prefix:
                outcome = outcome.merge(
                    ValidationOutcome.failure(
                        f"IBAN must start with {resolved.value} for this country",
                        field_name,
                        IssueCode.COUNTRY_MISMATCH,
                    )
                )
            return outcome, normalized, CountryCode(prefix)

        return _bban_outcome(normalized, resolved, field_name, catalog), normalized, resolved

    @classmethod
    def _derived_fields(cls, normalized, country):
        # Decided at construction; unaffected by later catalog reloads
        if looks_like_iban(normalized):
            return {"account_type": AccountNumberType.IBAN}
        return {"account_type": AccountNumberType.BBAN}

    # ─── Accessors ───

    @property
    def is_iban(self) -> bool:
        return self.account_type == AccountNumberType.IBAN

    @property
    def is_bban(self) -> bool:
        return self.account_type == AccountNumberType.BBAN

    @property
    def iban_country_code(self) -> Optional[str]:
        return self.normalized_value[:2] if self.is_iban else None

    @property
    def iban_check_digits(self) -> Optional[str]:
        return self.normalized_value[2:4] if self.is_iban else None

    @property
    def bban_part(self) -> str:
        return self.normalized_value[4:] if self.is_iban else self.normalized_value

    @property
    def formatted(self) -> str:
        """IBANs in the usual groups of four; BBANs unchanged."""
        if self.is_iban:
            return blocks_of(self.normalized_value, 4)
        return self.normalized_value

    @property
    def components(self) -> dict[str, str]:
        parts = {"account_type": self.account_type.value, "bban": self.bban_part}
        if self.is_iban:
            parts["country_code"] = self.normalized_value[:2]
            parts["check_digits"] = self.normalized_value[2:4]
        return parts
