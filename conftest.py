"""Pytest configuration for softcascade."""

import pytest

from softcascade.config import set_config
from softcascade.soft_delete import get_hook_registry


def pytest_configure(config):
    """Configure pytest with custom settings."""
    config.addinivalue_line("markers", "cascade: test walks a relationship graph")


@pytest.fixture(autouse=True)
def reset_globals():
    """Drop global configuration and hooks registered by a test."""
    yield
    set_config(None)
    get_hook_registry().clear()
