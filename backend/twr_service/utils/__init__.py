# backend/twr_service/utils/__init__.py
"""
Utility modules for the Time-Weighted Return service.

This package contains cross-cutting utilities:
- logging: Logging configuration with correlation ID support
- context: Request context (correlation ID)

Usage:
    from twr_service.utils import setup_logging
    from twr_service.utils import get_correlation_id, set_correlation_id
"""

from twr_service.utils.context import (
    get_correlation_id,
    set_correlation_id,
    reset_correlation_id,
)
from twr_service.utils.logging import setup_logging

__all__ = [
    # Logging
    "setup_logging",
    # Context
    "get_correlation_id",
    "set_correlation_id",
    "reset_correlation_id",
]
