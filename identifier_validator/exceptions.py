"""
Custom exception hierarchy for the identifier validator.

Invalid identifiers are NOT exceptional — they come back as a
ValidationOutcome. These exceptions cover the few cases that are genuine
contract violations: a broken rule catalog, a boundary call that omits a
mandatory country, or a caller that explicitly asked to raise.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .models import ValidationOutcome


class IdentifierValidatorError(Exception):
    """Base exception for all identifier validator failures."""

    def __init__(self, code: str, message: str, details: dict | None = None):
        self.code = code
        self.details = details or {}
        super().__init__(message)


class CatalogConsistencyError(IdentifierValidatorError):
    """The country rule table contradicts itself (raised at load time)."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__("CATALOG_INCONSISTENT", message, details)


class CountryRequiredError(IdentifierValidatorError):
    """A country-scoped identifier was requested at the boundary without a country."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__("COUNTRY_REQUIRED", message, details)


class IdentifierRejectedError(IdentifierValidatorError):
    """Raised by the create() convenience when validation fails."""

    def __init__(self, identifier_type: str, outcome: ValidationOutcome):
        self.identifier_type = identifier_type
        self.outcome = outcome
        super().__init__(
            "IDENTIFIER_REJECTED",
            f"{identifier_type} rejected: {outcome.to_single_message()}",
            {"codes": outcome.codes},
        )
