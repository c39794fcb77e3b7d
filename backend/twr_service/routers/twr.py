# backend/twr_service/routers/twr.py
"""
Time-Weighted Return endpoints.

- POST /twr              - TWR for a NAV series, cash flow series and window
- POST /twr/sub-periods  - Same, with the per-sub-period breakdown

"No result" (empty data, unresolvable window, missing NAV at a cash flow
date, zero denominator...) is returned as 200 with twr = null and a
failure_reason. Only malformed input is an HTTP error:
- 400: a series repeats a date
- 422: request body does not match the schema
"""

import logging
from decimal import Decimal

from fastapi import APIRouter, Depends, Request

from twr_service.dependencies import get_twr_calculator
from twr_service.middleware.rate_limit import RATE_LIMIT_TWR, limiter
from twr_service.schemas.twr import (
    SubPeriodResponse,
    TWRBreakdownResponse,
    TWRRequest,
    TWRResponse,
    WindowResponse,
)
from twr_service.services.twr import (
    SubPeriodReturn,
    TimePoint,
    TWRCalculator,
    TWRResult,
    series_from_points,
)

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/twr",
    tags=["TWR"],
)


# =============================================================================
# HELPER FUNCTIONS
# =============================================================================

def _decimal_to_str(value: Decimal | None) -> str | None:
    """Convert Decimal to string for JSON response, preserving precision."""
    if value is None:
        return None
    # Fixed-point: normalize() alone would render 100 as "1E+2"
    return format(value.normalize(), "f")


def _run_calculation(payload: TWRRequest, calculator: TWRCalculator) -> TWRResult:
    """
    Convert the request into series, run the detailed calculation and log
    a one-line summary.

    Raises:
        DuplicateDateError: If navs or cash_flows repeat a date
    """
    navs = series_from_points(
        (TimePoint(date=p.date, value=p.value) for p in payload.navs),
        label="navs",
    )
    cash_flows = series_from_points(
        (TimePoint(date=p.date, value=p.value) for p in payload.cash_flows),
        label="cash_flows",
    )

    result = calculator.calculate_detailed(
        cash_flows,
        navs,
        payload.evaluation_start,
        payload.evaluation_end,
        payload.annualize,
    )

    logger.info(
        f"TWR calculated: navs={len(navs)}, cash_flows={len(cash_flows)}, "
        f"twr={result.twr}, failure={result.failure_reason.value if result.failure_reason else None}"
    )

    return result


# =============================================================================
# MAPPER FUNCTIONS (Internal Types -> Pydantic Schemas)
# =============================================================================

def _map_result_fields(result: TWRResult) -> dict:
    """Fields shared by TWRResponse and TWRBreakdownResponse."""
    actual = result.actual_window
    return {
        "twr": _decimal_to_str(result.twr),
        "cumulative_return": _decimal_to_str(result.cumulative_return),
        "annualized": result.annualized,
        "evaluation_window": WindowResponse(
            start=result.evaluation_window.start,
            end=result.evaluation_window.end,
        ),
        "actual_window": WindowResponse(start=actual.start, end=actual.end) if actual else None,
        "sub_period_count": len(result.sub_periods),
        "has_sufficient_data": result.has_sufficient_data,
        "failure_reason": result.failure_reason,
        "message": result.failure_message,
        "warnings": result.warnings,
    }


def _map_sub_period(period: SubPeriodReturn) -> SubPeriodResponse:
    """Map internal SubPeriodReturn to Pydantic schema."""
    return SubPeriodResponse(
        start=period.start,
        end=period.end,
        nav_start=_decimal_to_str(period.nav_start),
        nav_end=_decimal_to_str(period.nav_end),
        cash_flow=_decimal_to_str(period.cash_flow),
        denominator=_decimal_to_str(period.denominator),
        period_return=_decimal_to_str(period.period_return),
    )


# =============================================================================
# ENDPOINTS
# =============================================================================

@router.post(
    "",
    response_model=TWRResponse,
    summary="Calculate time-weighted return",
)
@limiter.limit(RATE_LIMIT_TWR)
def calculate_twr_endpoint(
        request: Request,
        payload: TWRRequest,
        calculator: TWRCalculator = Depends(get_twr_calculator),
) -> TWRResponse:
    """
    Calculate the Time-Weighted Return of a portfolio.

    **Method:** the window is split at every NAV and cash flow date; each
    sub-period return is (NAV_end - (NAV_start + flows)) / (NAV_start + flows);
    sub-period returns are chain-linked.

    **Response:** twr as a decimal string ("0.1" = 10%), or null with a
    failure_reason when it cannot be computed.
    """
    result = _run_calculation(payload, calculator)

    return TWRResponse(**_map_result_fields(result))


@router.post(
    "/sub-periods",
    response_model=TWRBreakdownResponse,
    summary="Calculate time-weighted return with sub-period breakdown",
)
@limiter.limit(RATE_LIMIT_TWR)
def calculate_twr_breakdown_endpoint(
        request: Request,
        payload: TWRRequest,
        calculator: TWRCalculator = Depends(get_twr_calculator),
) -> TWRBreakdownResponse:
    """
    Calculate the Time-Weighted Return and list every linked sub-period.

    Useful to audit which NAV and cash flow produced each step of the
    chain-linked product.
    """
    result = _run_calculation(payload, calculator)

    return TWRBreakdownResponse(
        **_map_result_fields(result),
        sub_periods=[_map_sub_period(p) for p in result.sub_periods],
    )
