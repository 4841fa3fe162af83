"""
Runtime configuration loaded from environment variables.

Entry points (main.py, api.py) call load_dotenv() first, so a local .env file
works the same as real environment variables.

    IDV_MASK_CHAR               Character used by masked() views (default "*")
    IDV_ALLOW_TEST_SWIFT_CODES  Accept ISO 9362 test BICs by default (default false)
    IDV_CATALOG_PATH            Alternative country rule table (JSON)
    IDV_LOG_LEVEL               Root log level for the entry points (default INFO)
"""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, field_validator

_TRUTHY = {"1", "true", "yes", "on"}


class Settings(BaseModel):
    """Validated settings. Bad values fail at startup, not mid-request."""

    mask_char: str = Field(default="*", min_length=1, max_length=1)
    allow_test_swift_codes: bool = False
    catalog_path: Optional[Path] = None
    log_level: str = "INFO"

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        level = value.strip().upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level '{value}'")
        return level

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None) -> Settings:
        env = os.environ if environ is None else environ
        values: dict[str, object] = {}
        if "IDV_MASK_CHAR" in env:
            values["mask_char"] = env["IDV_MASK_CHAR"]
        if "IDV_ALLOW_TEST_SWIFT_CODES" in env:
            values["allow_test_swift_codes"] = (
                env["IDV_ALLOW_TEST_SWIFT_CODES"].strip().lower() in _TRUTHY
            )
        if env.get("IDV_CATALOG_PATH"):
            values["catalog_path"] = Path(env["IDV_CATALOG_PATH"])
        if "IDV_LOG_LEVEL" in env:
            values["log_level"] = env["IDV_LOG_LEVEL"]
        return cls(**values)


@lru_cache
def get_settings() -> Settings:
    """Settings are read once and cached; call get_settings.cache_clear() to reload."""
    return Settings.from_env()
