"""
Tests for the country rule catalog — loading, lookups and consistency checks.

Run: pytest tests/ -v
"""

from __future__ import annotations

import json
from typing import Any

import pytest

from identifier_validator.catalog import (
    GenericRules,
    RegisteredRules,
    Requirement,
    UniversalRules,
    get_catalog,
    load_catalog,
    parse_catalog,
)
from identifier_validator.countries import CountryCode
from identifier_validator.exceptions import CatalogConsistencyError


def _table(**countries: Any) -> dict[str, Any]:
    return {"version": "test", "countries": countries}


# ═══════════════════════════════════════════════════════════════════════
# PACKAGED CATALOG
# ═══════════════════════════════════════════════════════════════════════


class TestPackagedCatalog:
    def test_loads_with_version(self):
        catalog = load_catalog()
        assert catalog.version
        assert len(catalog) >= 70

    def test_get_catalog_is_cached(self):
        assert get_catalog() is get_catalog()

    @pytest.mark.parametrize(
        "code,length",
        [("DE", 22), ("GB", 22), ("NO", 15), ("MT", 31), ("LC", 32), ("FR", 27), ("XK", 20)],
    )
    def test_iban_lengths(self, code, length):
        assert get_catalog().iban_length(code) == length

    def test_iban_country_detection(self):
        catalog = get_catalog()
        assert catalog.is_iban_country("DE")
        assert catalog.is_iban_country("de")
        assert not catalog.is_iban_country("US")
        assert not catalog.is_iban_country("ZZ")

    def test_us_requires_routing_number(self):
        rules = get_catalog().lookup(CountryCode.US)
        assert isinstance(rules, RegisteredRules)
        assert rules.routing_number == Requirement.REQUIRED
        assert rules.sort_code == Requirement.NOT_APPLICABLE

    @pytest.mark.parametrize("code", ["GB", "IE"])
    def test_sort_code_countries(self, code):
        rules = get_catalog().lookup(code)
        assert rules.sort_code == Requirement.REQUIRED
        assert rules.routing_number == Requirement.NOT_APPLICABLE

    def test_registered_rule_details(self):
        rules = get_catalog().lookup("CA")
        assert rules.postal is not None and rules.postal.matches("K1A 0B1")
        assert rules.bban.min_length == 7
        assert rules.bban.digits_only
        assert rules.passport.display_groups == (2,)

    def test_no_country_requires_both_branch_identifiers(self):
        catalog = get_catalog()
        for code in catalog.countries:
            rules = catalog.lookup(code)
            assert not (
                rules.routing_number == Requirement.REQUIRED
                and rules.sort_code == Requirement.REQUIRED
            )


# ═══════════════════════════════════════════════════════════════════════
# LOOKUP VARIANTS
# ═══════════════════════════════════════════════════════════════════════


class TestLookup:
    def test_unregistered_is_generic(self):
        rules = get_catalog().lookup(CountryCode.AR)
        assert isinstance(rules, GenericRules)
        assert rules.country == CountryCode.AR
        assert rules.routing_number == Requirement.NOT_APPLICABLE
        assert rules.sort_code == Requirement.NOT_APPLICABLE

    def test_unknown_is_generic(self):
        assert isinstance(get_catalog().lookup(CountryCode.UNKNOWN), GenericRules)
        assert isinstance(get_catalog().lookup(None), GenericRules)
        assert isinstance(get_catalog().lookup("not a country"), GenericRules)

    def test_all_is_universal(self):
        rules = get_catalog().lookup(CountryCode.ALL)
        assert isinstance(rules, UniversalRules)
        assert rules.routing_number == Requirement.OPTIONAL
        assert rules.sort_code == Requirement.OPTIONAL

    def test_string_lookup(self):
        assert get_catalog().lookup("gb").country == CountryCode.GB

    def test_contains(self):
        catalog = get_catalog()
        assert CountryCode.GB in catalog
        assert CountryCode.AR not in catalog


# ═══════════════════════════════════════════════════════════════════════
# CONSISTENCY CHECKS
# ═══════════════════════════════════════════════════════════════════════


class TestConsistency:
    def test_minimal_table(self):
        catalog = parse_catalog(_table(DE={"iban_length": 22}))
        assert catalog.version == "test"
        assert catalog.iban_length("DE") == 22

    @pytest.mark.parametrize("length", [14, 35])
    def test_iban_length_bounds(self, length):
        with pytest.raises(CatalogConsistencyError) as exc_info:
            parse_catalog(_table(DE={"iban_length": length}))
        assert exc_info.value.details["iban_length"] == length

    def test_both_branch_identifiers_required(self):
        with pytest.raises(CatalogConsistencyError, match="cannot both be required"):
            parse_catalog(_table(GB={"routing_number": "required", "sort_code": "required"}))

    def test_bban_bounds_inverted(self):
        with pytest.raises(CatalogConsistencyError, match="BBAN"):
            parse_catalog(_table(GB={"bban": {"min_length": 9, "max_length": 8}}))

    def test_pattern_must_compile(self):
        with pytest.raises(CatalogConsistencyError, match="does not compile"):
            parse_catalog(_table(US={"postal": {"pattern": "^\\d{5"}}))

    @pytest.mark.parametrize("key", ["ZZ", "gb", "ALL", "UNKNOWN", "GBR"])
    def test_keys_must_be_country_codes(self, key):
        with pytest.raises(CatalogConsistencyError):
            parse_catalog(_table(**{key: {}}))

    def test_malformed_entry(self):
        with pytest.raises(CatalogConsistencyError, match="malformed"):
            parse_catalog(_table(US={"routing_number": "sometimes"}))

    def test_version_required(self):
        with pytest.raises(CatalogConsistencyError):
            parse_catalog({"countries": {}})


# ═══════════════════════════════════════════════════════════════════════
# ALTERNATIVE TABLES
# ═══════════════════════════════════════════════════════════════════════


class TestAlternativeTable:
    def test_load_from_path(self, tmp_path):
        path = tmp_path / "rules.json"
        path.write_text(json.dumps(_table(GB={"iban_length": 22, "sort_code": "required"})))
        catalog = load_catalog(path)
        assert len(catalog) == 1
        assert catalog.lookup("GB").sort_code == Requirement.REQUIRED

    def test_catalog_path_setting(self, tmp_path, monkeypatch):
        path = tmp_path / "rules.json"
        path.write_text(json.dumps(_table(NO={"iban_length": 15})))
        monkeypatch.setenv("IDV_CATALOG_PATH", str(path))
        catalog = get_catalog()
        assert catalog.version == "test"
        assert catalog.countries == [CountryCode.NO]
