# backend/twr_service/schemas/twr.py
"""
Pydantic schemas for the TWR API.

These schemas define the request/response formats for time-weighted return
calculations.

Design decisions:
- Inputs accept numbers or numeric strings; both are parsed to Decimal
  (strings avoid any float round trip on the client side)
- All numeric OUTPUT values are serialized as STRINGS to preserve Decimal precision
- Returns are in decimal form (0.155 = 15.5%), clients format for display
- twr is null when the calculation has no result; failure_reason says why
"""

import datetime
from datetime import date
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from twr_service.services.constants import MAX_SERIES_POINTS
from twr_service.services.exceptions import TWRFailureReason


# =============================================================================
# REQUEST SCHEMAS
# =============================================================================

class TimePointSchema(BaseModel):
    """One observation: a NAV, or a signed cash flow."""

    date: datetime.date = Field(..., description="Observation date")
    value: Decimal = Field(
        ...,
        allow_inf_nan=False,
        description="NAV, or cash flow amount (positive = contribution, negative = withdrawal)",
    )


class TWRRequest(BaseModel):
    """
    Input for a TWR calculation.

    Neither evaluation bound has to fall on an observation date: each is
    moved back to the latest NAV at or before it.
    """

    navs: list[TimePointSchema] = Field(
        ...,
        max_length=MAX_SERIES_POINTS,
        description="Net Asset Value observations",
    )
    cash_flows: list[TimePointSchema] = Field(
        default_factory=list,
        max_length=MAX_SERIES_POINTS,
        description="External cash flows; each date should also carry a NAV",
    )
    evaluation_start: date = Field(..., description="Requested window start")
    evaluation_end: date = Field(..., description="Requested window end")
    annualize: bool = Field(
        False,
        description="Annualize over the requested window (365.25-day years)",
    )

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "navs": [
                    {"date": "2023-01-01", "value": "100"},
                    {"date": "2023-01-15", "value": "105"},
                    {"date": "2023-01-31", "value": "120"},
                ],
                "cash_flows": [{"date": "2023-01-15", "value": "10"}],
                "evaluation_start": "2023-01-01",
                "evaluation_end": "2023-01-31",
                "annualize": False,
            }
        }
    )


# =============================================================================
# RESPONSE SCHEMAS
# =============================================================================

class WindowResponse(BaseModel):
    """A date window."""

    start: date
    end: date


class SubPeriodResponse(BaseModel):
    """Return over one interval between adjacent breakpoints."""

    start: date = Field(..., description="Opening breakpoint")
    end: date = Field(..., description="Closing breakpoint")
    nav_start: str = Field(..., description="NAV at start")
    nav_end: str = Field(..., description="NAV at end")
    cash_flow: str = Field(..., description="Net cash flow dated in (start, end]")
    denominator: str = Field(..., description="nav_start + cash_flow")
    period_return: str = Field(..., description="(nav_end - denominator) / denominator")


class TWRResponse(BaseModel):
    """
    TWR calculation result.

    A missing result is a normal outcome (200 with twr = null), not an error.
    """

    twr: str | None = Field(
        None,
        description="Time-Weighted Return as decimal string (\"0.1\" = 10%), null if not computable"
    )
    cumulative_return: str | None = Field(
        None,
        description="Linked return before annualization"
    )
    annualized: bool = Field(..., description="Whether twr is annualized")
    evaluation_window: WindowResponse = Field(..., description="Window as requested")
    actual_window: WindowResponse | None = Field(
        None,
        description="Window anchored to NAV observations, null if it could not be resolved"
    )
    sub_period_count: int = Field(0, description="Number of linked sub-periods")

    has_sufficient_data: bool = Field(
        True,
        description="False if no TWR could be calculated"
    )
    failure_reason: TWRFailureReason | None = Field(
        None,
        description="Why no TWR was produced"
    )
    message: str | None = Field(None, description="Human-readable failure description")
    warnings: list[str] = Field(
        default_factory=list,
        description="Notes about window alignment"
    )


class TWRBreakdownResponse(TWRResponse):
    """TWR result with its per-sub-period breakdown."""

    sub_periods: list[SubPeriodResponse] = Field(default_factory=list)
