"""
Checksum algorithms — Luhn, IBAN mod-97 and ABA weighted mod-10.

All functions are pure and total: malformed input is reported as a
MALFORMED result before any arithmetic, never as an exception.
"""

from __future__ import annotations

import re
from enum import Enum

from pydantic import BaseModel, ConfigDict

_DIGITS = re.compile(r"[0-9]+")
_IBAN_CHARS = re.compile(r"[A-Z]{2}[0-9]{2}[A-Z0-9]+")

# ABA weights repeat 3-7-1 across the nine digits
_ABA_WEIGHTS = (3, 7, 1, 3, 7, 1, 3, 7, 1)


class ChecksumStatus(str, Enum):
    VALID = "valid"
    MISMATCH = "mismatch"  # Well-formed, arithmetic says no
    MALFORMED = "malformed"  # Wrong characters or length for the algorithm
    DEGENERATE = "degenerate"  # Passes the arithmetic but is a known junk value


class ChecksumResult(BaseModel):
    """Outcome of one checksum run, with the parts the algorithm looked at."""

    model_config = ConfigDict(frozen=True)

    status: ChecksumStatus
    reason: str = ""
    components: dict[str, str] = {}

    @property
    def is_valid(self) -> bool:
        return self.status == ChecksumStatus.VALID


def _malformed(reason: str) -> ChecksumResult:
    return ChecksumResult(status=ChecksumStatus.MALFORMED, reason=reason)


# ─── Luhn ────────────────────────────────────────────────────────────


def _luhn_total(digits: str) -> int:
    total = 0
    for position, char in enumerate(reversed(digits)):
        value = int(char)
        if position % 2 == 1:
            value *= 2
            if value > 9:
                value -= 9
        total += value
    return total


def luhn_check(digits: str) -> ChecksumResult:
    """Luhn (mod-10) check. The rightmost digit is the check digit.

    Strings made of one repeated digit are DEGENERATE even when the
    arithmetic passes ("0000000000000000", "4444444444444444").
    """
    if not digits or not _DIGITS.fullmatch(digits):
        return _malformed("Luhn input must contain digits only")
    if len(digits) < 2:
        return _malformed("Luhn input needs a payload and a check digit")

    components = {"payload": digits[:-1], "check_digit": digits[-1]}
    if len(set(digits)) == 1:
        return ChecksumResult(
            status=ChecksumStatus.DEGENERATE,
            reason="All digits are identical",
            components=components,
        )
    if _luhn_total(digits) % 10 != 0:
        return ChecksumResult(
            status=ChecksumStatus.MISMATCH,
            reason="Luhn checksum does not match",
            components=components,
        )
    return ChecksumResult(status=ChecksumStatus.VALID, components=components)


def luhn_check_digit(payload: str) -> str:
    """Digit that makes ``payload + digit`` Luhn-valid."""
    if not payload or not _DIGITS.fullmatch(payload):
        raise ValueError("Luhn payload must contain digits only")
    total = _luhn_total(payload + "0")
    return str((10 - total % 10) % 10)


# ─── IBAN mod-97 (ISO 13616) ─────────────────────────────────────────


def _mod97(text: str) -> int:
    """Remainder of the letter-expanded number, computed incrementally."""
    acc = 0
    for char in text:
        if char.isdigit():
            acc = (acc * 10 + int(char)) % 97
        else:
            # A=10 .. Z=35, always two digits
            acc = (acc * 100 + ord(char) - 55) % 97
    return acc


def iban_mod97(iban: str) -> ChecksumResult:
    """Full IBAN check: move the first four characters to the end, remainder must be 1."""
    if not iban or not _IBAN_CHARS.fullmatch(iban):
        return _malformed(
            "IBAN must be two letters, two digits and an alphanumeric BBAN (upper-case)"
        )

    components = {"country_code": iban[:2], "check_digits": iban[2:4], "bban": iban[4:]}
    if _mod97(iban[4:] + iban[:4]) != 1:
        return ChecksumResult(
            status=ChecksumStatus.MISMATCH,
            reason="IBAN check digits do not match (mod-97)",
            components=components,
        )
    return ChecksumResult(status=ChecksumStatus.VALID, components=components)


def iban_check_digits(country_code: str, bban: str) -> str:
    """The two check digits for ``country_code`` + ``bban``."""
    country_code = country_code.upper()
    bban = bban.upper()
    if not re.fullmatch(r"[A-Z]{2}", country_code) or not re.fullmatch(r"[A-Z0-9]+", bban):
        raise ValueError("Country code must be two letters and BBAN alphanumeric")
    return f"{98 - _mod97(bban + country_code + '00'):02d}"


# ─── ABA routing number ──────────────────────────────────────────────


def valid_federal_reserve_prefix(digits: str) -> bool:
    """First two digits in 00-12, 21-32 (thrift), 61-72 (electronic) or 80 (traveler's cheques)."""
    if len(digits) < 2 or not _DIGITS.fullmatch(digits[:2]):
        return False
    prefix = int(digits[:2])
    return prefix <= 12 or 21 <= prefix <= 32 or 61 <= prefix <= 72 or prefix == 80


def aba_checksum(digits: str) -> ChecksumResult:
    """3-7-1 weighted sum of the nine digits must be divisible by 10."""
    if not digits or not _DIGITS.fullmatch(digits) or len(digits) != 9:
        return _malformed("ABA routing number must be exactly 9 digits")

    components = {
        "federal_reserve_symbol": digits[:4],
        "institution_identifier": digits[4:8],
        "check_digit": digits[8],
    }
    total = sum(int(d) * w for d, w in zip(digits, _ABA_WEIGHTS))
    if total % 10 != 0:
        return ChecksumResult(
            status=ChecksumStatus.MISMATCH,
            reason="ABA checksum does not match",
            components=components,
        )
    return ChecksumResult(status=ChecksumStatus.VALID, components=components)


def aba_check_digit(first8: str) -> str:
    """Ninth digit completing an 8-digit routing prefix."""
    if len(first8) != 8 or not _DIGITS.fullmatch(first8):
        raise ValueError("ABA prefix must be exactly 8 digits")
    total = sum(int(d) * w for d, w in zip(first8, _ABA_WEIGHTS))
    return str((10 - total % 10) % 10)
