# backend/twr_service/schemas/__init__.py
"""
Pydantic schemas for API request/response validation.

Usage:
    from twr_service.schemas import TWRRequest, TWRResponse
"""

from twr_service.schemas.errors import ErrorDetail, ValidationErrorDetail
from twr_service.schemas.twr import (
    TimePointSchema,
    TWRRequest,
    WindowResponse,
    SubPeriodResponse,
    TWRResponse,
    TWRBreakdownResponse,
)

__all__ = [
    # Errors
    "ErrorDetail",
    "ValidationErrorDetail",
    # TWR
    "TimePointSchema",
    "TWRRequest",
    "WindowResponse",
    "SubPeriodResponse",
    "TWRResponse",
    "TWRBreakdownResponse",
]
