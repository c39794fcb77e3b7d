# backend/tests/conftest.py
"""
Pytest configuration and fixtures.

This module provides shared fixtures for all tests:
- Test environment settings (rate limiting off)
- Sample NAV / cash flow series
- FastAPI TestClient
"""

import os

# Must be set before twr_service.config is imported anywhere
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("APP_NAME", "Test TWR Service")

import logging
from datetime import date
from decimal import Decimal
from typing import Iterator

import pytest
from fastapi.testclient import TestClient


# =============================================================================
# SAMPLE SERIES
# =============================================================================

@pytest.fixture
def january_navs() -> dict[date, Decimal]:
    """NAV on Jan 1, 15 and 31 2023, matching a +10 contribution on Jan 15."""
    return {
        date(2023, 1, 1): Decimal("100"),
        date(2023, 1, 15): Decimal("105"),
        date(2023, 1, 31): Decimal("120"),
    }


@pytest.fixture
def january_flows() -> dict[date, Decimal]:
    """A single +10 contribution on Jan 15 2023."""
    return {date(2023, 1, 15): Decimal("10")}


@pytest.fixture
def navs_2018() -> dict[date, Decimal]:
    """Four NAV observations in January 2018."""
    return {
        date(2018, 1, 1): Decimal("1000"),
        date(2018, 1, 5): Decimal("1020"),
        date(2018, 1, 10): Decimal("1015"),
        date(2018, 1, 15): Decimal("1050"),
    }


@pytest.fixture
def flows_2018() -> dict[date, Decimal]:
    """A +50 contribution on Jan 5 2018."""
    return {date(2018, 1, 5): Decimal("50")}


# =============================================================================
# API CLIENT
# =============================================================================

@pytest.fixture
def client() -> Iterator[TestClient]:
    """TestClient bound to the FastAPI application."""
    from twr_service.main import app

    with TestClient(app) as test_client:
        yield test_client


# =============================================================================
# LOGGING
# =============================================================================

@pytest.fixture
def restore_root_logger() -> Iterator[logging.Logger]:
    """
    Let a test call setup_logging() without leaking its handler.

    Handlers added during the test are dropped afterwards; the application's
    own handler (installed when twr_service.main was imported) is put back.
    """
    from twr_service.utils.logging import CorrelationIdFilter

    root = logging.getLogger()
    app_handlers = [
        h for h in root.handlers
        if any(isinstance(f, CorrelationIdFilter) for f in h.filters)
    ]
    level = root.level

    yield root

    for handler in list(root.handlers):
        if any(isinstance(f, CorrelationIdFilter) for f in handler.filters):
            root.removeHandler(handler)
    for handler in app_handlers:
        root.addHandler(handler)
    root.setLevel(level)
