"""
Tests for AccountNumber (IBAN/BBAN auto-detection) and the shared value-object contract.

Run: pytest tests/ -v
"""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from identifier_validator.accounts import AccountNumber, AccountNumberType, looks_like_iban
from identifier_validator.base import blocks_of, group_display, mask
from identifier_validator.catalog import get_catalog
from identifier_validator.config import get_settings
from identifier_validator.countries import CountryCode
from identifier_validator.exceptions import IdentifierRejectedError

GERMAN_IBAN = "DE89370400440532013000"
BRITISH_IBAN = "GB82WEST12345698765432"


# ═══════════════════════════════════════════════════════════════════════
# IBAN
# ═══════════════════════════════════════════════════════════════════════


class TestIban:
    def test_valid_iban_with_spaces(self):
        outcome, value = AccountNumber.try_create("DE89 3704 0044 0532 0130 00")
        assert outcome.is_valid
        assert value is not None
        assert value.normalized == GERMAN_IBAN
        assert value.account_type == AccountNumberType.IBAN
        assert value.is_iban and not value.is_bban

    def test_lower_case_and_dashes(self):
        _, value = AccountNumber.try_create("gb82-west-1234-5698-7654-32")
        assert value is not None
        assert value.normalized == BRITISH_IBAN

    def test_country_comes_from_prefix(self):
        _, value = AccountNumber.try_create(GERMAN_IBAN)
        assert value.country == CountryCode.DE

    def test_matching_country(self):
        _, value = AccountNumber.try_create(GERMAN_IBAN, "de")
        assert value.country == CountryCode.DE

    def test_supplied_country_must_match_prefix(self):
        outcome, value = AccountNumber.try_create(GERMAN_IBAN, CountryCode.GB)
        assert value is None
        assert outcome.codes == ["CountryMismatch"]
        assert outcome.issues[0].field == "AccountNumber"
        assert outcome.issues[0].message == "IBAN must start with GB for this country"

    def test_mismatch_reported_with_checksum_failure(self):
        outcome, _ = AccountNumber.try_create("DE89370400440532013001", "US")
        assert outcome.codes == ["InvalidIbanChecksum", "CountryMismatch"]

    @pytest.mark.parametrize("country", [CountryCode.ALL, CountryCode.UNKNOWN, None, "ZZ"])
    def test_sentinels_accept_any_prefix(self, country):
        _, value = AccountNumber.try_create(GERMAN_IBAN, country)
        assert value.country == CountryCode.DE

    def test_accessors(self):
        value = AccountNumber.create(BRITISH_IBAN)
        assert value.iban_country_code == "GB"
        assert value.iban_check_digits == "82"
        assert value.bban_part == "WEST12345698765432"
        assert value.components == {
            "account_type": "IBAN",
            "bban": "WEST12345698765432",
            "country_code": "GB",
            "check_digits": "82",
        }

    def test_formatted_in_blocks_of_four(self):
        assert AccountNumber.create(GERMAN_IBAN).formatted == "DE89 3704 0044 0532 0130 00"

    def test_masked(self):
        assert AccountNumber.create(GERMAN_IBAN).masked() == "******************3000"

    def test_masked_custom_char(self):
        assert AccountNumber.create(GERMAN_IBAN).masked("#") == "#" * 18 + "3000"

    def test_masked_uses_settings(self, monkeypatch):
        monkeypatch.setenv("IDV_MASK_CHAR", "x")
        assert AccountNumber.create(GERMAN_IBAN).masked() == "x" * 18 + "3000"

    def test_bad_checksum(self):
        outcome, value = AccountNumber.try_create("DE89370400440532013001")
        assert value is None
        assert outcome.codes == ["InvalidIbanChecksum"]
        assert outcome.issues[0].field == "AccountNumber"

    def test_wrong_length_skips_checksum(self):
        outcome, _ = AccountNumber.try_create("DE8937040044053201300")
        assert outcome.codes == ["InvalidIbanLength"]

    def test_bad_characters(self):
        outcome, _ = AccountNumber.try_create("DE89370400440532013$00")
        assert "InvalidCharacters" in outcome.codes
        assert "InvalidIbanChecksum" not in outcome.codes

    def test_every_single_substitution_rejected(self):
        for position in range(4, len(GERMAN_IBAN)):
            digit = "1" if GERMAN_IBAN[position] != "1" else "2"
            mutated = GERMAN_IBAN[:position] + digit + GERMAN_IBAN[position + 1 :]
            outcome, value = AccountNumber.try_create(mutated)
            assert value is None, mutated
            assert outcome.codes == ["InvalidIbanChecksum"]

    def test_detection(self):
        assert looks_like_iban(GERMAN_IBAN)
        assert not looks_like_iban("US12345678")
        assert not looks_like_iban("DEXX1234")
        assert not looks_like_iban("12345678")


# ═══════════════════════════════════════════════════════════════════════
# BBAN
# ═══════════════════════════════════════════════════════════════════════


class TestBban:
    def test_uk_account(self):
        outcome, value = AccountNumber.try_create("1234 5678", CountryCode.GB)
        assert outcome.is_valid
        assert value.account_type == AccountNumberType.BBAN
        assert value.iban_country_code is None
        assert value.iban_check_digits is None
        assert value.bban_part == "12345678"
        assert value.formatted == "12345678"
        assert value.country == CountryCode.GB

    def test_uk_account_wrong_length(self):
        outcome, _ = AccountNumber.try_create("1234567", "GB")
        assert outcome.codes == ["InvalidBbanLength"]

    def test_uk_account_digits_only(self):
        outcome, _ = AccountNumber.try_create("1234ABCD", "GB")
        assert outcome.codes == ["InvalidBbanFormat"]

    def test_us_account_range(self):
        assert AccountNumber.try_create("1234", "US")[1] is not None
        assert AccountNumber.try_create("12345678901234567", "US")[1] is not None
        assert AccountNumber.try_create("123456789012345678", "US")[0].codes == [
            "InvalidBbanLength"
        ]

    def test_generic_rules_for_unregistered_country(self):
        assert AccountNumber.try_create("AB12CD34", "AR")[1] is not None
        assert AccountNumber.try_create("123", "AR")[0].codes == ["InvalidBbanLength"]

    def test_generic_charset(self):
        outcome, _ = AccountNumber.try_create("1234.5678", "AR")
        assert outcome.codes == ["InvalidBbanFormat"]

    def test_all_bypasses_country_rules(self):
        assert AccountNumber.try_create("1234ABCD", CountryCode.ALL)[1] is not None

    def test_blank_gives_single_required(self):
        outcome, value = AccountNumber.try_create("   ", "GB")
        assert value is None
        assert outcome.codes == ["Required"]

    def test_none_is_required(self):
        assert AccountNumber.try_create(None)[0].codes == ["Required"]


# ═══════════════════════════════════════════════════════════════════════
# VALUE OBJECT CONTRACT
# ═══════════════════════════════════════════════════════════════════════


class TestValueContract:
    def test_direct_construction_validates(self):
        value = AccountNumber(raw_input="de89 3704 0044 0532 0130 00")
        assert value.normalized_value == GERMAN_IBAN
        assert value.country == CountryCode.DE

    def test_direct_construction_rejects_invalid(self):
        with pytest.raises(ValidationError):
            AccountNumber(raw_input="DE89370400440532013001")

    def test_cannot_smuggle_normalized_value(self):
        value = AccountNumber(raw_input=GERMAN_IBAN, normalized_value="NOT-IT")
        assert value.normalized_value == GERMAN_IBAN

    def test_frozen(self):
        value = AccountNumber.create(GERMAN_IBAN)
        with pytest.raises(ValidationError):
            value.raw_input = "x"  # type: ignore[misc]

    def test_create_raises_on_failure(self):
        with pytest.raises(IdentifierRejectedError) as exc_info:
            AccountNumber.create("DE89370400440532013001")
        assert exc_info.value.outcome.codes == ["InvalidIbanChecksum"]

    def test_custom_field_name(self):
        outcome, _ = AccountNumber.try_create("", field_name="payee.account")
        assert outcome.issues[0].field == "payee.account"

    def test_equality_uses_normalized_value(self):
        a = AccountNumber.create("DE89 3704 0044 0532 0130 00")
        b = AccountNumber.create("de89370400440532013000")
        assert a == b
        assert len({a, b}) == 1
        assert a.raw_input != b.raw_input

    def test_with_value(self):
        original = AccountNumber.create("12345678", "GB")
        outcome, updated = original.with_value("87654321")
        assert outcome.is_valid
        assert updated.normalized == "87654321"
        assert updated.country == CountryCode.GB
        assert original.normalized == "12345678"

    def test_with_value_failure(self):
        outcome, updated = AccountNumber.create("12345678", "GB").with_value("123")
        assert updated is None
        assert not outcome.is_valid

    def test_idempotent(self):
        first = AccountNumber.create("gb82 west 1234 5698 7654 32")
        second = AccountNumber.create(first.normalized)
        assert second == first
        assert second.normalized == first.normalized

    def test_str(self):
        assert str(AccountNumber.create(GERMAN_IBAN)) == GERMAN_IBAN

    def test_rejection_logged_without_raw_value(self, caplog):
        with caplog.at_level("DEBUG", logger="identifier_validator.accounts"):
            AccountNumber.try_create("DE89370400440532013001")
        assert "InvalidIbanChecksum" in caplog.text
        assert "DE89370400440532013001" not in caplog.text

    def test_account_type_fixed_at_construction(self, tmp_path, monkeypatch):
        value = AccountNumber.create(GERMAN_IBAN)
        table = tmp_path / "rules.json"
        table.write_text('{"version": "test", "countries": {"GB": {"iban_length": 22}}}')
        monkeypatch.setenv("IDV_CATALOG_PATH", str(table))
        get_settings.cache_clear()
        get_catalog.cache_clear()

        assert not get_catalog().is_iban_country("DE")
        assert value.account_type == AccountNumberType.IBAN
        assert value.formatted == "DE89 3704 0044 0532 0130 00"
        assert value.components["check_digits"] == "89"

    def test_model_copy_revalidates(self):
        value = AccountNumber.create("12345678", "GB")
        copied = value.model_copy(update={"raw_input": "8765 4321"})
        assert copied.normalized == "87654321"
        assert copied.country == CountryCode.GB
        with pytest.raises(ValidationError):
            value.model_copy(update={"raw_input": "123"})

    @pytest.mark.parametrize(
        "update",
        [{"normalized_value": "DE00000000000000000000"}, {"account_type": AccountNumberType.BBAN}],
    )
    def test_model_copy_cannot_set_derived_fields(self, update):
        with pytest.raises(TypeError):
            AccountNumber.create(GERMAN_IBAN).model_copy(update=update)

    def test_model_copy_country_change_is_checked(self):
        with pytest.raises(ValidationError):
            AccountNumber.create(GERMAN_IBAN).model_copy(update={"country": CountryCode.GB})

    def test_plain_model_copy(self):
        value = AccountNumber.create(GERMAN_IBAN)
        assert value.model_copy() == value


# ═══════════════════════════════════════════════════════════════════════
# DISPLAY HELPERS
# ═══════════════════════════════════════════════════════════════════════


class TestDisplayHelpers:
    def test_mask_short_values_fully(self):
        assert mask("1234", "*") == "****"
        assert mask("12", "*") == "**"
        assert mask("12345", "*") == "*2345"

    def test_group_display(self):
        assert group_display("MORGA753116SM9IJ", (5, 6)) == "MORGA 753116 SM9IJ"
        assert group_display("12345678Z", (8,), "-") == "12345678-Z"
        assert group_display("AB", (5,)) == "AB"

    def test_blocks_of(self):
        assert blocks_of("DE8937", 4) == "DE89 37"
