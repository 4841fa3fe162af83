"""
CreditCardNumber — payment card PAN with Luhn verification.

Cards are not country-scoped; any country argument is carried along but not
checked.
"""

from __future__ import annotations

import re
from enum import Enum

from .base import IdentifierValue, blocks_of, resolve_country
from .checksums import ChecksumStatus, luhn_check
from .models import IssueCode, ValidationOutcome
from .validators import allowed_characters, length_range, not_blank, run_validators

_SEPARATORS = re.compile(r"[\s\-]+")

PAN_MIN_LENGTH = 13
PAN_MAX_LENGTH = 19


class CardBrand(str, Enum):
    VISA = "Visa"
    MASTERCARD = "Mastercard"
    AMERICAN_EXPRESS = "American Express"
    DISCOVER = "Discover"
    JCB = "JCB"
    OTHER = "Other"


def card_brand(digits: str) -> CardBrand:
    """Best-effort brand from the leading digits (IIN ranges)."""
    if digits.startswith("4"):
        return CardBrand.VISA
    if digits[:2] in {"51", "52", "53", "54", "55"} or (
        len(digits) >= 4 and 2221 <= int(digits[:4]) <= 2720
    ):
        return CardBrand.MASTERCARD
    if digits[:2] in {"34", "37"}:
        return CardBrand.AMERICAN_EXPRESS
    if digits.startswith(("6011", "65")) or digits[:3] in {"644", "645", "646", "647", "648", "649"}:
        return CardBrand.DISCOVER
    if digits.startswith("35"):
        return CardBrand.JCB
    return CardBrand.OTHER


class CreditCardNumber(IdentifierValue):
    default_field_name = "CreditCardNumber"

    @classmethod
    def _check(cls, raw, country, field_name, **options):
        resolved = resolve_country(country)
        digits = _SEPARATORS.sub("", raw.strip())
        outcome = run_validators(
            (
                not_blank("Card number"),
                allowed_characters(
                    "[0-9]",
                    "Card number may only contain digits, spaces and dashes",
                    IssueCode.INVALID_CHARACTERS,
                ),
                length_range(PAN_MIN_LENGTH, PAN_MAX_LENGTH, "Card number"),
            ),
            digits,
            field_name,
        )
        if not outcome.is_valid:
            return outcome, digits, resolved

        result = luhn_check(digits)
        if result.status == ChecksumStatus.DEGENERATE:
            outcome = ValidationOutcome.failure(
                "Card number cannot be a single repeated digit",
                field_name,
                IssueCode.IDENTICAL_DIGITS,
            )
        elif not result.is_valid:
            outcome = ValidationOutcome.failure(
                "Card number checksum is invalid", field_name, IssueCode.INVALID_CHECKSUM
            )
        return outcome, digits, resolved

    @property
    def brand(self) -> CardBrand:
        return card_brand(self.normalized_value)

    @property
    def formatted(self) -> str:
        return blocks_of(self.normalized_value, 4)

    @property
    def components(self) -> dict[str, str]:
        return {
            "brand": self.brand.value,
            "iin": self.normalized_value[:6],
            "last_four": self.normalized_value[-4:],
        }
