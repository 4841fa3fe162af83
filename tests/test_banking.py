"""
Tests for banking-detail requirements and the combined BankingDetails check.

Run: pytest tests/ -v
"""

from __future__ import annotations

from identifier_validator.banking import BankingDetails, check_banking_requirements
from identifier_validator.countries import CountryCode

GB_IBAN = "GB82WEST12345698765432"


# ═══════════════════════════════════════════════════════════════════════
# REQUIREMENTS
# ═══════════════════════════════════════════════════════════════════════


class TestRequirements:
    def test_us_needs_routing_number(self):
        outcome = check_banking_requirements("US", False, False)
        assert outcome.codes == ["Required"]
        assert outcome.issues[0].field == "RoutingNumber"
        assert outcome.issues[0].message == "Routing number is required for US"

    def test_us_rejects_sort_code(self):
        outcome = check_banking_requirements(CountryCode.US, True, True)
        assert outcome.codes == ["NotApplicable"]
        assert outcome.issues[0].field == "SortCode"

    def test_gb_needs_sort_code(self):
        outcome = check_banking_requirements("GB", False, False)
        assert outcome.codes == ["Required"]
        assert outcome.issues[0].field == "SortCode"

    def test_germany_uses_neither(self):
        assert check_banking_requirements("DE", False, False).is_valid
        assert check_banking_requirements("DE", True, True).codes == [
            "NotApplicable",
            "NotApplicable",
        ]

    def test_unregistered_country_uses_neither(self):
        assert check_banking_requirements("AR", True, False).codes == ["NotApplicable"]

    def test_all_accepts_anything(self):
        for routing in (True, False):
            for sort in (True, False):
                assert check_banking_requirements(CountryCode.ALL, routing, sort).is_valid


# ═══════════════════════════════════════════════════════════════════════
# BANKING DETAILS
# ═══════════════════════════════════════════════════════════════════════


class TestBankingDetails:
    def test_us_account(self):
        outcome, details = BankingDetails.try_create(
            "US", "123456789", routing_number="021000021"
        )
        assert outcome.is_valid
        assert details.country == CountryCode.US
        assert details.routing_number.normalized == "021000021"
        assert details.sort_code is None
        assert details.swift_code is None

    def test_us_missing_routing(self):
        outcome, details = BankingDetails.try_create("US", "123456789")
        assert details is None
        assert outcome.codes == ["Required"]
        assert outcome.issues[0].field == "RoutingNumber"

    def test_us_with_sort_code(self):
        outcome, _ = BankingDetails.try_create(
            "US", "123456789", routing_number="021000021", sort_code="12-34-56"
        )
        assert outcome.codes == ["NotApplicable"]
        assert outcome.issues[0].field == "SortCode"

    def test_gb_iban_with_sort_code_and_swift(self):
        outcome, details = BankingDetails.try_create(
            "GB", GB_IBAN, swift_code="NWBKGB2L", sort_code="12-34-56"
        )
        assert outcome.is_valid, outcome.to_single_message()
        assert details.account_number.is_iban
        assert details.sort_code.formatted == "12-34-56"
        assert details.swift_code.country_code == "GB"

    def test_gb_missing_sort_code(self):
        outcome, _ = BankingDetails.try_create("GB", "12345678")
        assert outcome.codes == ["Required"]
        assert outcome.issues[0].field == "SortCode"

    def test_germany_with_routing_number(self):
        outcome, _ = BankingDetails.try_create(
            "DE", "DE89370400440532013000", routing_number="021000021"
        )
        assert outcome.codes == ["NotApplicable"]
        assert outcome.issues[0].field == "RoutingNumber"

    def test_foreign_iban_rejected(self):
        outcome, details = BankingDetails.try_create(
            "GB", "DE89370400440532013000", sort_code="12-34-56"
        )
        assert details is None
        assert outcome.codes == ["CountryMismatch"]
        assert outcome.issues[0].field == "AccountNumber"

    def test_swift_country_must_match(self):
        outcome, _ = BankingDetails.try_create(
            "DE", "DE89370400440532013000", swift_code="NWBKGB2L"
        )
        assert outcome.codes == ["CountryMismatch"]

    def test_all_country(self):
        outcome, details = BankingDetails.try_create(
            CountryCode.ALL, "12345678", routing_number="021000021", sort_code="123456"
        )
        assert outcome.is_valid
        assert details.routing_number is not None
        assert details.sort_code is not None

    def test_issues_in_order(self):
        outcome, _ = BankingDetails.try_create(
            "US", "", swift_code="DEUTZZFF", routing_number="021000022", sort_code="12-34-56"
        )
        assert outcome.codes == [
            "Required",
            "InvalidCountryCode",
            "InvalidChecksum",
            "NotApplicable",
        ]
        assert [issue.field for issue in outcome.issues] == [
            "AccountNumber",
            "SwiftCode",
            "RoutingNumber",
            "SortCode",
        ]

    def test_blank_branch_identifiers_count_as_missing(self):
        outcome, _ = BankingDetails.try_create("US", "123456789", routing_number="   ")
        assert outcome.codes == ["Required"]
