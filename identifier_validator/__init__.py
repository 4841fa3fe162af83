"""
Identifier Validator — construct-and-validate value objects for bank, postal and ID numbers.

Architecture: Combinators + Checksums + Country catalog → Value objects → Outcome
Philosophy:  Invalid input is data. An invalid value object cannot exist.
"""

__version__ = "1.0.0"

from .accounts import AccountNumber, AccountNumberType
from .banking import BankingDetails, check_banking_requirements
from .cards import CardBrand, CreditCardNumber
from .countries import CountryCode
from .documents import DrivingLicenseNumber, Passport
from .models import IssueCategory, IssueCode, ValidationIssue, ValidationOutcome
from .postal import PostalCode
from .routing import RoutingNumber, SortCode
from .swift import SwiftCode

# URL/CLI name -> value type
IDENTIFIER_KINDS = {
    "account-number": AccountNumber,
    "swift-code": SwiftCode,
    "routing-number": RoutingNumber,
    "sort-code": SortCode,
    "postal-code": PostalCode,
    "passport": Passport,
    "driving-license": DrivingLicenseNumber,
    "credit-card": CreditCardNumber,
}

__all__ = [
    "IDENTIFIER_KINDS",
    "AccountNumber",
    "AccountNumberType",
    "BankingDetails",
    "CardBrand",
    "CountryCode",
    "CreditCardNumber",
    "DrivingLicenseNumber",
    "IssueCategory",
    "IssueCode",
    "Passport",
    "PostalCode",
    "RoutingNumber",
    "SortCode",
    "SwiftCode",
    "ValidationIssue",
    "ValidationOutcome",
    "check_banking_requirements",
]
