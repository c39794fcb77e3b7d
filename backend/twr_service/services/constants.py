# backend/twr_service/services/constants.py
"""
Centralized constants for the Time-Weighted Return service.

This module provides a single source of truth for the business constants
used across the application. Centralizing these values:

1. Prevents inconsistencies from duplicate definitions
2. Makes it easy to tune parameters in one place
3. Documents the meaning and units of each constant

Usage:
    from twr_service.services.constants import (
        DAYS_PER_YEAR,
        ZERO,
        RATE_LIMIT_TWR,
    )
"""

from decimal import Decimal


# =============================================================================
# FINANCIAL CALENDAR CONSTANTS
# =============================================================================

# Average calendar days per year including leap years
# Used for annualizing TWR over the requested evaluation window
DAYS_PER_YEAR: float = 365.25

# Seconds in a calendar day, for fractional day counts on datetime windows
SECONDS_PER_DAY: int = 86_400


# =============================================================================
# UTILITY CONSTANTS
# =============================================================================

# Type-safe zero and one for Decimal arithmetic
ZERO: Decimal = Decimal("0")
ONE: Decimal = Decimal("1")

# Annualized result when the whole portfolio value was lost (1 + r == 0)
TOTAL_LOSS: Decimal = Decimal("-1")


# =============================================================================
# RESOURCE LIMIT CONSTANTS
# =============================================================================

# Maximum number of points accepted per series in a single API request
# 25 years of daily observations is ~9,150 points; 50,000 leaves headroom
MAX_SERIES_POINTS: int = 50_000


# =============================================================================
# RATE LIMITING CONSTANTS
# =============================================================================
# Limits are expressed as "X per Y" where Y is the time window
# Format follows slowapi/limits syntax: "100/minute", "10/hour", etc.

# Default rate limit applied to every endpoint without an explicit limit
RATE_LIMIT_DEFAULT: str = "100/minute"

# Rate limit for TWR calculation endpoints
# Payloads can carry tens of thousands of points, moderate limit
RATE_LIMIT_TWR: str = "60/minute"

# Rate limit for health check endpoints
# Higher limit for monitoring tools that poll frequently
RATE_LIMIT_HEALTH: str = "300/minute"
