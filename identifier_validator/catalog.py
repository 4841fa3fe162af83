"""
Country rule catalog — which structural rules apply in which country.

The rules live in a versioned data table (country_rules.json) shipped inside
the package. It is loaded once, checked for internal consistency, and then
treated as read-only for the life of the process.

Every lookup returns one variant of a closed union:

  RegisteredRules  the country has an entry in the table
  GenericRules     no entry (or CountryCode.UNKNOWN): basic charset/length checks
                   only, routing number and sort code not applicable
  UniversalRules   CountryCode.ALL: skip country-specific structural checks

Countries without a confirmed rule simply stay generic; there is no attempt
to guess.
"""

from __future__ import annotations

import json
import logging
import re
from enum import Enum
from functools import lru_cache
from pathlib import Path
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .config import get_settings
from .countries import CountryCode
from .exceptions import CatalogConsistencyError

logger = logging.getLogger(__name__)

DEFAULT_CATALOG_PATH = Path(__file__).parent / "country_rules.json"

# ISO 13616 bounds on a full IBAN
IBAN_MIN_LENGTH = 15
IBAN_MAX_LENGTH = 34


# ─── Rule Models ─────────────────────────────────────────────────────


class Requirement(str, Enum):
    REQUIRED = "required"
    OPTIONAL = "optional"
    NOT_APPLICABLE = "not_applicable"


class PostalRule(BaseModel):
    model_config = ConfigDict(frozen=True)

    pattern: str
    example: str = ""

    def matches(self, value: str) -> bool:
        return re.fullmatch(self.pattern, value) is not None


class BbanRule(BaseModel):
    """Domestic account number bounds."""

    model_config = ConfigDict(frozen=True)

    min_length: int = Field(ge=1)
    max_length: int = Field(ge=1)
    digits_only: bool = False


class DocumentRule(BaseModel):
    """Passport / driving licence number pattern plus how to display it."""

    model_config = ConfigDict(frozen=True)

    pattern: str
    description: str = ""
    display_groups: tuple[int, ...] = ()  # Leading group sizes; the rest is one final group
    display_separator: str = " "

    def matches(self, value: str) -> bool:
        return re.fullmatch(self.pattern, value) is not None


class RegisteredRules(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["registered"] = "registered"
    country: CountryCode
    postal: Optional[PostalRule] = None
    iban_length: Optional[int] = None
    bban: Optional[BbanRule] = None
    routing_number: Requirement = Requirement.NOT_APPLICABLE
    sort_code: Requirement = Requirement.NOT_APPLICABLE
    passport: Optional[DocumentRule] = None
    driving_license: Optional[DocumentRule] = None


class GenericRules(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["generic"] = "generic"
    country: CountryCode = CountryCode.UNKNOWN
    routing_number: Literal[Requirement.NOT_APPLICABLE] = Requirement.NOT_APPLICABLE
    sort_code: Literal[Requirement.NOT_APPLICABLE] = Requirement.NOT_APPLICABLE


class UniversalRules(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["universal"] = "universal"
    country: Literal[CountryCode.ALL] = CountryCode.ALL
    routing_number: Literal[Requirement.OPTIONAL] = Requirement.OPTIONAL
    sort_code: Literal[Requirement.OPTIONAL] = Requirement.OPTIONAL


CountryRules = Annotated[
    Union[RegisteredRules, GenericRules, UniversalRules], Field(discriminator="kind")
]


# ─── Catalog ─────────────────────────────────────────────────────────


class CountryCatalog:
    """Immutable mapping of country code to rules. Lookups never fail."""

    def __init__(self, version: str, entries: dict[CountryCode, RegisteredRules]):
        _check_consistency(entries)
        self._version = version
        self._entries = dict(entries)
        self._iban_lengths = {
            code.value: rules.iban_length
            for code, rules in self._entries.items()
            if rules.iban_length is not None
        }
        self._universal = UniversalRules()

    @property
    def version(self) -> str:
        return self._version

    @property
    def countries(self) -> list[CountryCode]:
        return sorted(self._entries, key=lambda code: code.value)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, country: object) -> bool:
        return country in self._entries

    def lookup(self, country: CountryCode | str | None) -> CountryRules:
        code = country if isinstance(country, CountryCode) else CountryCode.parse(country)
        if code == CountryCode.ALL:
            return self._universal
        registered = self._entries.get(code)
        if registered is not None:
            return registered
        return GenericRules(country=code)

    def iban_length(self, country_code: str) -> int | None:
        return self._iban_lengths.get(country_code.upper())

    def is_iban_country(self, country_code: str) -> bool:
        return country_code.upper() in self._iban_lengths


def _check_consistency(entries: dict[CountryCode, RegisteredRules]) -> None:
    for code, rules in entries.items():
        if code.is_sentinel:
            raise CatalogConsistencyError(
                f"Sentinel '{code.value}' cannot carry country rules", {"country": code.value}
            )
        if rules.country != code:
            raise CatalogConsistencyError(
                f"Entry for {code.value} is labelled {rules.country.value}",
                {"country": code.value},
            )
        if rules.iban_length is not None and not (
            IBAN_MIN_LENGTH <= rules.iban_length <= IBAN_MAX_LENGTH
        ):
            raise CatalogConsistencyError(
                f"{code.value}: IBAN length {rules.iban_length} outside "
                f"{IBAN_MIN_LENGTH}..{IBAN_MAX_LENGTH}",
                {"country": code.value, "iban_length": rules.iban_length},
            )
        if (
            rules.routing_number == Requirement.REQUIRED
            and rules.sort_code == Requirement.REQUIRED
        ):
            raise CatalogConsistencyError(
                f"{code.value}: routing number and sort code cannot both be required",
                {"country": code.value},
            )
        if rules.bban is not None and rules.bban.min_length > rules.bban.max_length:
            raise CatalogConsistencyError(
                f"{code.value}: BBAN min length exceeds max length",
                {"country": code.value},
            )
        for name in ("postal", "passport", "driving_license"):
            rule = getattr(rules, name)
            if rule is None:
                continue
            try:
                re.compile(rule.pattern)
            except re.error as e:
                raise CatalogConsistencyError(
                    f"{code.value}: {name} pattern does not compile: {e}",
                    {"country": code.value, "rule": name},
                ) from e


# ─── Loading ─────────────────────────────────────────────────────────


def parse_catalog(data: dict[str, Any]) -> CountryCatalog:
    """Build a catalog from the decoded JSON table."""
    version = str(data.get("version", ""))
    if not version:
        raise CatalogConsistencyError("Catalog table has no version")

    entries: dict[CountryCode, RegisteredRules] = {}
    for key, raw in data.get("countries", {}).items():
        if not CountryCode.is_iso_code(key) or key != key.upper():
            raise CatalogConsistencyError(
                f"'{key}' is not a country code", {"country": key}
            )
        if not isinstance(raw, dict):
            raise CatalogConsistencyError(f"{key}: rule entry must be an object", {"country": key})
        code = CountryCode(key)
        try:
            entries[code] = RegisteredRules.model_validate({**raw, "country": code})
        except ValidationError as e:
            raise CatalogConsistencyError(
                f"{key}: malformed rule entry", {"country": key, "errors": e.errors()}
            ) from e
    return CountryCatalog(version, entries)


def load_catalog(path: str | Path | None = None) -> CountryCatalog:
    """Load and check a rule table. Defaults to the packaged country_rules.json."""
    resolved = DEFAULT_CATALOG_PATH if path is None else Path(path)

    with resolved.open(encoding="utf-8") as f:
        data: dict[str, Any] = json.load(f)

    catalog = parse_catalog(data)
    logger.info(
        "Loaded country catalog %s (%d countries) from %s",
        catalog.version,
        len(catalog),
        resolved.name,
    )
    return catalog


@lru_cache
def get_catalog() -> CountryCatalog:
    """Process-wide catalog, honouring IDV_CATALOG_PATH."""
    return load_catalog(get_settings().catalog_path)
