#!/usr/bin/env python3
"""
Identifier Validator — Entry Point
==================================

Validate one identifier from the command line, or run a demo over samples.

Usage:
    python main.py                                       # Demo over sample identifiers
    python main.py account-number "DE89 3704 0044 0532 0130 00"
    python main.py sort-code 12-34-56 --country GB
    python main.py swift-code DEUTDE00 --allow-test-codes
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Optional

from dotenv import load_dotenv

from identifier_validator import IDENTIFIER_KINDS
from identifier_validator.base import CountryScopedValue, IdentifierValue
from identifier_validator.config import get_settings
from identifier_validator.models import IssueCategory, ValidationOutcome

load_dotenv()


# ─── Sample Identifiers — Some Broken on Purpose ────────────────────

SAMPLES: list[tuple[str, str, Optional[str]]] = [
    ("account-number", "DE89 3704 0044 0532 0130 00", None),
    ("account-number", "GB82 WEST 1234 5698 7654 31", None),
    ("swift-code", "deutdeff", "DE"),
    ("swift-code", "DEUTDE00", None),
    ("routing-number", "021000021", "US"),
    ("routing-number", "131000021", None),
    ("sort-code", "12-34-56", "GB"),
    ("sort-code", "12-34-56", "US"),
    ("postal-code", "sw1a  1aa", "GB"),
    ("passport", "AB1234567", "GB"),
    ("passport", "123456789", "ZZ"),
    ("credit-card", "4111 1111 1111 1111", None),
    ("credit-card", "4444 4444 4444 4444", None),
]


# ─── ANSI Color Constants ───────────────────────────────────────────

_RED = "\033[91m"
_YELLOW = "\033[93m"
_GREEN = "\033[92m"
_CYAN = "\033[96m"
_DIM = "\033[2m"
_BOLD = "\033[1m"
_RESET = "\033[0m"
_WIDTH = 72

_CATEGORY_COLORS = {
    IssueCategory.STRUCTURAL: _RED,
    IssueCategory.CHECKSUM: _RED,
    IssueCategory.APPLICABILITY: _YELLOW,
    IssueCategory.CATALOG_MISS: _YELLOW,
}


# ─── Pretty Printer ─────────────────────────────────────────────────


def _print_value_details(value: IdentifierValue) -> None:
    print(f"  Normalized:  {_BOLD}{value.normalized}{_RESET}")
    print(f"  Formatted:   {value.formatted}")
    print(f"  Masked:      {value.masked()}")
    print(f"  Country:     {value.country.value}")
    for key, part in value.components.items():
        print(f"    {_DIM}{key}: {part}{_RESET}")


def _print_issues(outcome: ValidationOutcome) -> None:
    print(f"\n  {_RED}{_BOLD}ISSUES ({len(outcome.issues)}){_RESET}")
    for issue in outcome.issues:
        color = _CATEGORY_COLORS.get(issue.category, _RED)
        print(f"    {color}[{issue.code}]{_RESET} {_DIM}{issue.field}{_RESET}")
        print(f"    {issue.message}")
    print()


def print_report(
    kind: str, raw: str, outcome: ValidationOutcome, value: Optional[IdentifierValue]
) -> int:
    """Pretty-print one validation result.

    Returns:
        0 if the identifier was accepted, 1 if rejected.
    """
    print(f"\n{'=' * _WIDTH}")
    print(f"{_BOLD}{_CYAN}  {kind.upper()}{_RESET}  {_DIM}{raw!r}{_RESET}")
    print(f"{'─' * _WIDTH}")

    if value is not None:
        _print_value_details(value)
    else:
        _print_issues(outcome)

    if outcome.is_valid:
        print(f"  {_GREEN}{_BOLD}ACCEPTED{_RESET}")
    else:
        print(f"  {_RED}{_BOLD}REJECTED  --  {len(outcome.issues)} issue(s){_RESET}")
    print(f"{'=' * _WIDTH}")

    return 0 if outcome.is_valid else 1


# ─── Main ────────────────────────────────────────────────────────────


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Validate and normalize bank, postal and identity-document identifiers."
    )
    parser.add_argument("kind", nargs="?", choices=sorted(IDENTIFIER_KINDS))
    parser.add_argument("value", nargs="?")
    parser.add_argument("--country", help="ISO 3166-1 alpha-2 code, or ALL")
    parser.add_argument(
        "--allow-test-codes",
        action="store_true",
        default=None,
        help="SWIFT only: accept ISO 9362 test codes",
    )
    return parser


def run_demo() -> int:
    print("\n  Starting Identifier Validator demo...\n")
    for kind, raw, country in SAMPLES:
        value_type = IDENTIFIER_KINDS[kind]
        outcome, value = value_type.try_create(raw, country)
        print_report(kind, raw, outcome, value)
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(level=get_settings().log_level)

    if args.kind is None:
        return run_demo()
    if args.value is None:
        parser.error("VALUE is required when KIND is given")

    value_type = IDENTIFIER_KINDS[args.kind]
    if issubclass(value_type, CountryScopedValue) and not args.country:
        parser.error(f"{args.kind} needs --country")

    options = {}
    if args.kind == "swift-code" and args.allow_test_codes is not None:
        options["allow_test_codes"] = args.allow_test_codes

    outcome, value = value_type.try_create(args.value, args.country, **options)
    return print_report(args.kind, args.value, outcome, value)


if __name__ == "__main__":
    sys.exit(main())
