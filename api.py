"""
Identifier Validator — FastAPI Server
=====================================

RESTful API for validating bank, postal and identity-document identifiers.

Endpoints:
    POST /validate/banking-details   Account + SWIFT + branch identifier, with applicability
    POST /validate/{kind}            Validate one identifier (account-number, swift-code, ...)
    GET  /countries/{code}           Rules the catalog holds for a country
    GET  /health                     Health check / readiness probe

Run:
    uvicorn api:app --reload              # Dev (http://localhost:8000)
    uvicorn api:app --host 0.0.0.0        # Production

Docs:
    http://localhost:8000/docs             # Swagger UI (auto-generated)
    http://localhost:8000/redoc            # ReDoc (alternative)
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any, Optional

from dotenv import load_dotenv
from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from identifier_validator import IDENTIFIER_KINDS, __version__
from identifier_validator.banking import BankingDetails
from identifier_validator.base import CountryScopedValue, IdentifierValue
from identifier_validator.catalog import CountryCatalog, get_catalog
from identifier_validator.config import get_settings
from identifier_validator.countries import CountryCode
from identifier_validator.exceptions import CountryRequiredError
from identifier_validator.models import ValidationOutcome

load_dotenv()
logging.basicConfig(level=get_settings().log_level)
logger = logging.getLogger(__name__)


# ─── Application Lifespan (pre-warm catalog) ────────────────────────

_catalog: CountryCatalog | None = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Load and check country_rules.json once on startup."""
    global _catalog  # noqa: PLW0603
    _catalog = get_catalog()
    yield
    _catalog = None


# ─── FastAPI App ─────────────────────────────────────────────────────

app = FastAPI(
    title="Identifier Validator API",
    description=(
        "Construct-and-validate checks for IBAN/BBAN account numbers, SWIFT/BIC, "
        "ABA routing numbers, sort codes, postal codes, passports, driving licences "
        "and card numbers. Every violation is reported at once, never just the first."
    ),
    version=__version__,
    lifespan=lifespan,
)


@app.exception_handler(CountryRequiredError)
async def _country_required_handler(request: Request, exc: CountryRequiredError) -> JSONResponse:
    return JSONResponse(
        status_code=422,
        content={"code": exc.code, "detail": str(exc), **exc.details},
    )


# ─── Request / Response Schemas ─────────────────────────────────────


class ValidateRequest(BaseModel):
    """Request body for the /validate/{kind} endpoint."""

    value: str = Field(..., description="The identifier exactly as the user typed it.")
    country: Optional[str] = Field(
        default=None,
        description="ISO 3166-1 alpha-2 code, or ALL to skip country rules.",
    )
    field_name: Optional[str] = Field(
        default=None, description="Field name to report issues against."
    )
    allow_test_codes: Optional[bool] = Field(
        default=None, description="SWIFT only: accept ISO 9362 test codes."
    )

    model_config = {"json_schema_extra": {"example": {
        "value": "DE89 3704 0044 0532 0130 00",
        "country": "DE",
    }}}


class BankingDetailsRequest(BaseModel):
    country: str
    account_number: str
    swift_code: Optional[str] = None
    routing_number: Optional[str] = None
    sort_code: Optional[str] = None

    model_config = {"json_schema_extra": {"example": {
        "country": "US",
        "account_number": "123456789",
        "routing_number": "021000021",
    }}}


class IssueOut(BaseModel):
    message: str
    field: str
    code: str
    category: str


class IdentifierOut(BaseModel):
    """Views of a successfully constructed identifier."""

    normalized: str
    formatted: str
    masked: str
    country: str
    components: dict[str, Any]


class ValidateResponse(BaseModel):
    """Structured validation result returned by the API."""

    kind: str
    is_valid: bool
    issues: list[IssueOut]
    errors: dict[str, list[str]] = Field(description="Messages grouped by field name")
    identifier: Optional[IdentifierOut] = None

    model_config = {"json_schema_extra": {"example": {
        "kind": "routing-number",
        "is_valid": False,
        "issues": [
            {
                "message": "Routing number checksum is invalid",
                "field": "RoutingNumber",
                "code": "InvalidChecksum",
                "category": "checksum",
            }
        ],
        "errors": {"RoutingNumber": ["Routing number checksum is invalid"]},
        "identifier": None,
    }}}


class BankingDetailsResponse(BaseModel):
    is_valid: bool
    issues: list[IssueOut]
    errors: dict[str, list[str]]
    identifiers: dict[str, IdentifierOut] = {}


class CountryResponse(BaseModel):
    code: str
    kind: str
    rules: dict[str, Any]


class HealthResponse(BaseModel):
    status: str
    version: str
    catalog_version: str
    countries_loaded: int


# ─── Helpers ─────────────────────────────────────────────────────────


def _get_catalog() -> CountryCatalog:
    if _catalog is None:
        raise HTTPException(status_code=503, detail="Catalog not initialised")
    return _catalog


def _issues_out(outcome: ValidationOutcome) -> list[IssueOut]:
    return [
        IssueOut(
            message=issue.message,
            field=issue.field,
            code=issue.code,
            category=issue.category.value,
        )
        for issue in outcome.issues
    ]


def _identifier_out(value: IdentifierValue) -> IdentifierOut:
    return IdentifierOut(
        normalized=value.normalized,
        formatted=value.formatted,
        masked=value.masked(),
        country=value.country.value,
        components=value.components,
    )


# ─── Endpoints ───────────────────────────────────────────────────────


@app.post(
    "/validate/banking-details",
    summary="Validate an account together with its branch identifiers",
    tags=["Validation"],
    responses={503: {"description": "Catalog not yet initialised"}},
)
def validate_banking_details(request: BankingDetailsRequest) -> BankingDetailsResponse:
    """Checks every identifier and whether the country requires (or forbids)
    a routing number or sort code."""
    _get_catalog()
    outcome, details = BankingDetails.try_create(
        request.country,
        request.account_number,
        swift_code=request.swift_code,
        routing_number=request.routing_number,
        sort_code=request.sort_code,
    )
    identifiers: dict[str, IdentifierOut] = {}
    if details is not None:
        for name in ("account_number", "swift_code", "routing_number", "sort_code"):
            value = getattr(details, name)
            if value is not None:
                identifiers[name] = _identifier_out(value)

    return BankingDetailsResponse(
        is_valid=outcome.is_valid,
        issues=_issues_out(outcome),
        errors=outcome.to_grouped_map(),
        identifiers=identifiers,
    )


@app.post(
    "/validate/{kind}",
    summary="Validate a single identifier",
    tags=["Validation"],
    responses={
        404: {"description": "Unknown identifier kind"},
        422: {"description": "Country missing for a country-scoped identifier"},
        503: {"description": "Catalog not yet initialised"},
    },
)
def validate_identifier(kind: str, request: ValidateRequest) -> ValidateResponse:
    """Validate one identifier.

    Returns:
    - **is_valid**: `true` when every check passed
    - **issues**: every violation found, in the order the checks ran
    - **errors**: the same messages grouped by field name
    - **identifier**: normalized / formatted / masked views when valid
    """
    _get_catalog()
    value_type = IDENTIFIER_KINDS.get(kind)
    if value_type is None:
        raise HTTPException(
            status_code=404,
            detail=f"Unknown identifier kind '{kind}'. Known: {', '.join(IDENTIFIER_KINDS)}",
        )
    if issubclass(value_type, CountryScopedValue) and not request.country:
        raise CountryRequiredError(
            f"'{kind}' needs the issuing country", {"kind": kind}
        )

    options: dict[str, Any] = {}
    if kind == "swift-code" and request.allow_test_codes is not None:
        options["allow_test_codes"] = request.allow_test_codes

    outcome, value = value_type.try_create(
        request.value, request.country, request.field_name, **options
    )
    return ValidateResponse(
        kind=kind,
        is_valid=outcome.is_valid,
        issues=_issues_out(outcome),
        errors=outcome.to_grouped_map(),
        identifier=_identifier_out(value) if value is not None else None,
    )


@app.get(
    "/countries/{code}",
    summary="Country rules",
    tags=["Catalog"],
    responses={404: {"description": "Not a country code"}},
)
def get_country(code: str) -> CountryResponse:
    """Rules applied for a country. Unregistered countries come back as generic."""
    catalog = _get_catalog()
    country = CountryCode.parse(code)
    if country == CountryCode.UNKNOWN and code.strip().upper() != CountryCode.UNKNOWN.value:
        raise HTTPException(status_code=404, detail=f"'{code}' is not a country code")

    rules = catalog.lookup(country)
    return CountryResponse(
        code=country.value,
        kind=rules.kind,
        rules=rules.model_dump(mode="json", exclude={"kind", "country"}),
    )


@app.get(
    "/health",
    summary="Health check",
    tags=["System"],
    responses={503: {"description": "Catalog not yet initialised"}},
)
def health_check() -> HealthResponse:
    """Returns service status and catalog info."""
    catalog = _get_catalog()
    return HealthResponse(
        status="healthy",
        version=__version__,
        catalog_version=catalog.version,
        countries_loaded=len(catalog),
    )
