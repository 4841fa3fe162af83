"""
Banking details — an account plus the branch identifiers its country expects.

The catalog says, per country, whether a routing number or sort code is
required, optional or not applicable. check_banking_requirements() turns
that into issues; BankingDetails.try_create() combines it with the
individual identifier checks.
"""

from __future__ import annotations

import logging
from typing import Optional

from pydantic import BaseModel, ConfigDict

from .accounts import AccountNumber
from .base import resolve_country
from .catalog import Requirement, get_catalog
from .countries import CountryCode
from .models import IssueCode, ValidationIssue, ValidationOutcome, make_issue, merge
from .routing import RoutingNumber, SortCode
from .swift import SwiftCode
from .validators import is_blank

logger = logging.getLogger(__name__)

ROUTING_NUMBER_FIELD = "RoutingNumber"
SORT_CODE_FIELD = "SortCode"


def _requirement_issue(
    requirement: Requirement, supplied: bool, label: str, field_name: str, country: CountryCode
) -> ValidationIssue | None:
    if requirement == Requirement.REQUIRED and not supplied:
        return make_issue(
            f"{label} is required for {country.value}", field_name, IssueCode.REQUIRED
        )
    if requirement == Requirement.NOT_APPLICABLE and supplied:
        return make_issue(
            f"{label} is not used in {country.value}", field_name, IssueCode.NOT_APPLICABLE
        )
    return None


def check_banking_requirements(
    country: CountryCode | str | None,
    routing_number_supplied: bool,
    sort_code_supplied: bool,
) -> ValidationOutcome:
    """Applicability only: which branch identifiers must or must not be present."""
    resolved = resolve_country(country)
    rules = get_catalog().lookup(resolved)
    issues = [
        issue
        for issue in (
            _requirement_issue(
                rules.routing_number,
                routing_number_supplied,
                "Routing number",
                ROUTING_NUMBER_FIELD,
                resolved,
            ),
            _requirement_issue(
                rules.sort_code, sort_code_supplied, "Sort code", SORT_CODE_FIELD, resolved
            ),
        )
        if issue is not None
    ]
    return ValidationOutcome.of(issues)


class BankingDetails(BaseModel):
    """Validated account, optional SWIFT code and the country's branch identifier."""

    model_config = ConfigDict(frozen=True)

    country: CountryCode
    account_number: AccountNumber
    swift_code: Optional[SwiftCode] = None
    routing_number: Optional[RoutingNumber] = None
    sort_code: Optional[SortCode] = None

    @classmethod
    def try_create(
        cls,
        country: CountryCode | str | None,
        account_number: Optional[str],
        swift_code: Optional[str] = None,
        routing_number: Optional[str] = None,
        sort_code: Optional[str] = None,
    ) -> tuple[ValidationOutcome, Optional[BankingDetails]]:
        resolved = resolve_country(country)
        has_swift = not is_blank(swift_code)
        has_routing = not is_blank(routing_number)
        has_sort = not is_blank(sort_code)

        account_outcome, account = AccountNumber.try_create(account_number, resolved)

        swift_outcome, swift = ValidationOutcome.success(), None
        if has_swift:
            swift_outcome, swift = SwiftCode.try_create(swift_code, resolved)

        # Applicability is reported once, by check_banking_requirements()
        routing_outcome, routing = ValidationOutcome.success(), None
        if has_routing:
            routing_outcome, routing = RoutingNumber.try_create(routing_number)

        sort_outcome, sort = ValidationOutcome.success(), None
        if has_sort:
            sort_outcome, sort = SortCode.try_create(sort_code, CountryCode.ALL)

        requirements = check_banking_requirements(resolved, has_routing, has_sort)

        outcome = merge(account_outcome, swift_outcome, routing_outcome, sort_outcome, requirements)
        if not outcome.is_valid:
            logger.debug("BankingDetails rejected: %s", ", ".join(outcome.codes))
            return outcome, None

        details = cls(
            country=resolved,
            account_number=account,
            swift_code=swift,
            routing_number=routing,
            sort_code=sort,
        )
        return outcome, details
