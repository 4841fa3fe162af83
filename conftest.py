"""Pytest configuration — ensures the project root is importable."""

import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent))

from identifier_validator.catalog import get_catalog  # noqa: E402
from identifier_validator.config import get_settings  # noqa: E402


@pytest.fixture(autouse=True)
def _fresh_settings_and_catalog():
    """Every test sees settings and catalog as loaded from its own environment."""
    get_settings.cache_clear()
    get_catalog.cache_clear()
    yield
    get_settings.cache_clear()
    get_catalog.cache_clear()
