# tests/conftest.py
"""
Pytest configuration and fixtures.
"""

import os

import pytest

# Set test environment
os.environ.setdefault("TESTING", "1")
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "llm: tests requiring LLM API calls (deselect with '-m \"not llm\"')")


@pytest.fixture(autouse=True)
def _reset_process_state():
    """Cached settings, seeded-org cache and the asset store singleton leak between tests otherwise."""
    from label_lifecycle.config import get_settings
    from label_lifecycle.services.label_catalog import invalidate_seed_cache
    from label_lifecycle.storage import reset_asset_store

    get_settings.cache_clear()
    invalidate_seed_cache()
    reset_asset_store()
    yield
    get_settings.cache_clear()
    invalidate_seed_cache()
    reset_asset_store()
