"""Shared fixtures."""

import pytest
import structlog


@pytest.fixture(autouse=True)
def _reset_structlog():
    """CLI tests configure structlog; keep every test on the defaults."""
    structlog.reset_defaults()
    yield
    structlog.reset_defaults()
