"""
IdentifierValue — the construct-and-validate contract shared by every type.

    outcome, value = Type.try_create(raw, country=None, field_name=None, **options)

`value` is not None iff `outcome.is_valid`. Validation failures come back as
data; nothing here raises for bad input.

Instances are frozen pydantic models. try_create() builds them with
model_construct() after the rules have passed; direct instantiation goes
through a "before" model validator that runs the very same rules and raises
pydantic.ValidationError on failure. Either way, an invalid instance cannot
exist.
"""

from __future__ import annotations

import logging
from typing import Any, ClassVar, Mapping, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, model_validator

from .config import get_settings
from .countries import CountryCode
from .exceptions import IdentifierRejectedError
from .models import IssueCode, ValidationOutcome

# Characters left visible by masked()
VISIBLE_TAIL = 4

T = TypeVar("T", bound="IdentifierValue")


# ─── Display Helpers ─────────────────────────────────────────────────


def mask(value: str, mask_char: str, visible: int = VISIBLE_TAIL) -> str:
    """Replace all but the last `visible` characters; short values are fully masked."""
    if len(value) <= visible:
        return mask_char * len(value)
    return mask_char * (len(value) - visible) + value[-visible:]


def group_display(value: str, sizes: tuple[int, ...] | list[int], separator: str = " ") -> str:
    """Split into leading groups of the given sizes; whatever remains is the last group.

    group_display("MORGA753116SM9IJ", (5, 6)) -> "MORGA 753116 SM9IJ"
    """
    parts: list[str] = []
    position = 0
    for size in sizes:
        if position >= len(value):
            break
        parts.append(value[position : position + size])
        position += size
    if position < len(value):
        parts.append(value[position:])
    return separator.join(parts)


def blocks_of(value: str, size: int, separator: str = " ") -> str:
    """Fixed-size blocks: blocks_of("DE8937", 4) -> "DE89 37"."""
    return separator.join(value[i : i + size] for i in range(0, len(value), size))


def resolve_country(country: CountryCode | str | None) -> CountryCode:
    if isinstance(country, CountryCode):
        return country
    return CountryCode.parse(country)


# ─── Base Value Object ───────────────────────────────────────────────


class IdentifierValue(BaseModel):
    """Base class for validated identifiers.

    Subclasses implement `_check()`, which validates the raw input and
    returns the outcome together with the normalized text and the resolved
    country. Extra per-type options (such as SwiftCode.allow_test_codes) are
    declared as model fields and listed in `option_fields`.
    """

    model_config = ConfigDict(frozen=True)

    default_field_name: ClassVar[str] = ""
    option_fields: ClassVar[tuple[str, ...]] = ()

    raw_input: str
    normalized_value: str = ""
    country: CountryCode = CountryCode.UNKNOWN

    # ─── Construction ───

    @classmethod
    def _check(
        cls,
        raw: str,
        country: CountryCode | str | None,
        field_name: str,
        **options: Any,
    ) -> tuple[ValidationOutcome, str, CountryCode]:
        raise NotImplementedError

    @classmethod
    def _resolve_options(cls, options: dict[str, Any]) -> dict[str, Any]:
        """Reject unknown options and fill in defaults. Override to read settings."""
        unknown = set(options) - set(cls.option_fields)
        if unknown:
            raise TypeError(f"{cls.__name__} got unexpected options: {sorted(unknown)}")
        return dict(options)

    @classmethod
    def _derived_fields(cls, normalized: str, country: CountryCode) -> dict[str, Any]:
        """Extra fields fixed at construction time, computed from the accepted value."""
        return {}

    @classmethod
    def try_create(
        cls: type[T],
        raw: Optional[str],
        country: CountryCode | str | None = None,
        field_name: Optional[str] = None,
        **options: Any,
    ) -> tuple[ValidationOutcome, T | None]:
        """Validate `raw` and return (outcome, instance-or-None)."""
        field = field_name or cls.default_field_name
        resolved_options = cls._resolve_options(options)
        raw_text = "" if raw is None else raw

        outcome, normalized, resolved_country = cls._check(
            raw_text, country, field, **resolved_options
        )
        if not outcome.is_valid:
            logging.getLogger(cls.__module__).debug(
                "%s rejected: %s", cls.__name__, ", ".join(outcome.codes)
            )
            return outcome, None

        value = cls.model_construct(
            raw_input=raw_text,
            normalized_value=normalized,
            country=resolved_country,
            **resolved_options,
            **cls._derived_fields(normalized, resolved_country),
        )
        return outcome, value

    @classmethod
    def create(
        cls: type[T],
        raw: Optional[str],
        country: CountryCode | str | None = None,
        field_name: Optional[str] = None,
        **options: Any,
    ) -> T:
        """Like try_create(), but raises IdentifierRejectedError instead of returning None."""
        outcome, value = cls.try_create(raw, country, field_name, **options)
        if value is None:
            raise IdentifierRejectedError(cls.__name__, outcome)
        return value

    @model_validator(mode="before")
    @classmethod
    def _enforce_rules(cls, data: Any) -> Any:
        if isinstance(data, str):
            data = {"raw_input": data}
        if not isinstance(data, dict):
            raise ValueError(f"{cls.__name__} expects the raw identifier text")

        raw = data.get("raw_input")
        if not isinstance(raw, str):
            raise ValueError("raw_input must be a string")
        options = cls._resolve_options(
            {name: data[name] for name in cls.option_fields if data.get(name) is not None}
        )
        outcome, normalized, country = cls._check(
            raw, data.get("country"), cls.default_field_name, **options
        )
        if not outcome.is_valid:
            raise ValueError(outcome.to_single_message())
        return {
            **data,
            **options,
            **cls._derived_fields(normalized, country),
            "normalized_value": normalized,
            "country": country,
        }

    def with_value(self: T, raw: Optional[str]) -> tuple[ValidationOutcome, T | None]:
        """Functional update: validate `raw` with this value's country and options."""
        options = {name: getattr(self, name) for name in self.option_fields}
        return type(self).try_create(raw, self.country, None, **options)

    def model_copy(self: T, *, update: Optional[Mapping[str, Any]] = None, deep: bool = False) -> T:
        """Copies with `update` are rebuilt from raw input, so the rules run again.

        Only raw_input, country and the option fields may be updated; derived
        fields such as normalized_value are recomputed, never taken from the caller.
        """
        if not update:
            return super().model_copy(deep=deep)
        editable = {"raw_input", "country", *self.option_fields}
        derived = set(update) - editable
        if derived:
            raise TypeError(
                f"{type(self).__name__} cannot update {sorted(derived)}; "
                "they are derived from raw_input"
            )
        data = {name: getattr(self, name) for name in editable}
        data.update(update)
        return type(self).model_validate(data)

    # ─── Views ───

    @property
    def normalized(self) -> str:
        return self.normalized_value

    @property
    def formatted(self) -> str:
        return self.normalized_value

    @property
    def components(self) -> dict[str, str]:
        return {}

    def masked(self, mask_char: Optional[str] = None) -> str:
        char = mask_char if mask_char is not None else get_settings().mask_char
        return mask(self.normalized_value, char)

    # ─── Identity ───

    def _identity(self) -> tuple:
        return (self.normalized_value, self.country)

    def __eq__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return self._identity() == other._identity()

    def __hash__(self) -> int:
        return hash((type(self).__name__, self._identity()))

    def __str__(self) -> str:
        return self.normalized_value


class CountryScopedValue(IdentifierValue):
    """An identifier that only means something together with its country.

    The country is a required positional argument; passing None is reported
    as a CountryRequired issue rather than silently treated as UNKNOWN.
    """

    @classmethod
    def try_create(
        cls: type[T],
        raw: Optional[str],
        country: CountryCode | str | None,
        field_name: Optional[str] = None,
        **options: Any,
    ) -> tuple[ValidationOutcome, T | None]:
        return super().try_create(raw, country, field_name, **options)

    @classmethod
    def create(
        cls: type[T],
        raw: Optional[str],
        country: CountryCode | str | None,
        field_name: Optional[str] = None,
        **options: Any,
    ) -> T:
        return super().create(raw, country, field_name, **options)

    @staticmethod
    def country_required(label: str, field_name: str) -> ValidationOutcome:
        return ValidationOutcome.failure(
            f"A country is required to validate {label}",
            field_name,
            IssueCode.COUNTRY_REQUIRED,
        )
