# backend/twr_service/services/__init__.py
"""
Service layer for business logic.

This package contains the service layer which encapsulates business logic
separate from the API (router) layer. Services:
- Have NO knowledge of HTTP (no HTTPException, no status codes)
- Raise domain-specific exceptions
- Are pure and easily testable

Usage:
    from twr_service.services import TWRCalculator, calculate_twr
    from twr_service.services import ValidationError, TWRFailureReason

Architecture:
    services/
    ├── __init__.py                  # This file - main exports
    ├── exceptions.py                # Domain exceptions
    ├── constants.py                 # Business constants and limits
    └── twr/                         # Time-weighted return engine
        ├── calculator.py            # Orchestrator (calculate_twr)
        ├── types.py                 # TWR data types
        ├── window.py                # Window resolution
        ├── partition.py             # Sub-period partitioning
        └── compounder.py            # Linking and annualization
"""

# Exceptions
from twr_service.services.exceptions import (
    ServiceError,
    ValidationError,
    DuplicateDateError,
    TWRCalculationError,
    TWRFailureReason,
)
# TWR engine
from twr_service.services.twr import (
    TWRCalculator,
    TWRResult,
    calculate_twr,
    calculate_twr_detailed,
)

__all__ = [
    # Exceptions
    "ServiceError",
    "ValidationError",
    "DuplicateDateError",
    "TWRCalculationError",
    "TWRFailureReason",
    # TWR engine
    "TWRCalculator",
    "TWRResult",
    "calculate_twr",
    "calculate_twr_detailed",
]
