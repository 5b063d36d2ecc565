"""Pytest configuration and shared fixtures."""

import pytest


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers."""
    config.addinivalue_line("markers", "integration: tests that run the full message pipeline")
    config.addinivalue_line("markers", "performance: timing checks for the validators")
