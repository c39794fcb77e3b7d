# backend/twr_service/services/twr/compounder.py
"""
Sub-period returns, geometric linking and annualization.

Formulas:
    denominator_i = NAV(start_i) + CF(start_i, end_i]
    r_i           = (NAV(end_i) - denominator_i) / denominator_i
    TWR           = ∏(1 + r_i) - 1

    Annualized    = (1 + TWR)^(1 / years) - 1
    years         = elapsed days of the requested window / 365.25

Cash flows are attributed to the sub-period they close: a flow dated exactly
on a sub-period's start belongs to the previous sub-period, a flow dated on
its end belongs to this one.

Precision Note (Decimal vs Float):
    Every monetary value and every sub-period return stays in Decimal.
    The only float step is the fractional power in annualization, because
    the exponent 1/years is itself a float (days / 365.25). The result is
    converted back with Decimal(str(x)), keeping ~15 significant digits,
    which is negligible for a return figure.
"""

import decimal
import logging
import math
from datetime import date
from decimal import Decimal

from twr_service.services.constants import DAYS_PER_YEAR, ONE, TOTAL_LOSS, ZERO
from twr_service.services.exceptions import (
    DegenerateSubPeriodError,
    MissingNavAtBreakpointError,
    NonAnnualizableReturnError,
    NumericOverflowError,
)
from twr_service.services.twr.types import (
    CashFlowSeries,
    EvaluationWindow,
    NavSeries,
    SubPeriodReturn,
)

logger = logging.getLogger(__name__)


# =============================================================================
# SUB-PERIOD RETURNS
# =============================================================================

def _nav_at(navs: NavSeries, breakpoint: date) -> Decimal:
    """Look up the NAV at a breakpoint, failing hard when absent."""
    try:
        return navs[breakpoint]
    except KeyError:
        raise MissingNavAtBreakpointError(breakpoint) from None


def compound_sub_periods(
        breakpoints: list[date],
        navs: NavSeries,
        cash_flows: CashFlowSeries,
) -> list[SubPeriodReturn]:
    """
    Calculate the return of every interval between adjacent breakpoints.

    Args:
        breakpoints: Ascending breakpoint dates from partition_sub_periods()
        navs: NAV series (date -> value)
        cash_flows: Cash flow series (date -> signed amount)

    Returns:
        One SubPeriodReturn per adjacent breakpoint pair, in date order

    Raises:
        MissingNavAtBreakpointError: If a breakpoint has no NAV observation
        DegenerateSubPeriodError: If opening NAV plus flows is exactly zero
        NumericOverflowError: If a flow sum or return leaves the Decimal range
    """
    flows = sorted(cash_flows.items())
    flow_index = 0

    sub_periods: list[SubPeriodReturn] = []

    for period_start, period_end in zip(breakpoints, breakpoints[1:]):
        nav_start = _nav_at(navs, period_start)
        nav_end = _nav_at(navs, period_end)

        # Flows are sorted and periods ascend, so one forward pass covers all
        # periods: skip flows up to period_start, sum those up to period_end.
        while flow_index < len(flows) and flows[flow_index][0] <= period_start:
            flow_index += 1

        try:
            flow_sum = ZERO
            while flow_index < len(flows) and flows[flow_index][0] <= period_end:
                flow_sum += flows[flow_index][1]
                flow_index += 1

            denominator = nav_start + flow_sum
            if denominator == ZERO:
                raise DegenerateSubPeriodError(period_start, period_end)

            period_return = (nav_end - denominator) / denominator
        except (decimal.Overflow, decimal.InvalidOperation):
            raise NumericOverflowError(period_start, period_end) from None

        sub_periods.append(
            SubPeriodReturn(
                start=period_start,
                end=period_end,
                nav_start=nav_start,
                nav_end=nav_end,
                cash_flow=flow_sum,
                denominator=denominator,
                period_return=period_return,
            )
        )

    return sub_periods


def link_returns(sub_periods: list[SubPeriodReturn]) -> Decimal:
    """
    Geometrically link sub-period returns.

    Formula: TWR = ∏(1 + r_i) - 1

    Args:
        sub_periods: Sub-period returns in any order (multiplication commutes)

    Returns:
        Cumulative return as decimal

    Raises:
        NumericOverflowError: If the running product leaves the Decimal range
    """
    cumulative_factor = ONE

    try:
        for period in sub_periods:
            cumulative_factor *= (ONE + period.period_return)

        return cumulative_factor - ONE
    except (decimal.Overflow, decimal.InvalidOperation):
        raise NumericOverflowError() from None


# =============================================================================
# ANNUALIZATION
# =============================================================================

def _annualization_power(base: Decimal, exponent: float) -> Decimal:
    """
    Raise base to a fractional power through float arithmetic.

    This is the single Decimal -> float -> Decimal boundary of the pipeline.
    """
    result = float(base) ** exponent
    if math.isinf(result):
        raise OverflowError("annualized factor exceeds float range")
    return Decimal(str(result))


def annualize_twr(total_return: Decimal, window: EvaluationWindow) -> Decimal:
    """
    Scale a cumulative return to an equivalent annual rate.

    The elapsed time is measured on the REQUESTED window, not on the actual
    window anchored to NAV dates.

    Formula: (1 + r)^(365.25 / days) - 1

    Args:
        total_return: Cumulative (linked) return as decimal
        window: Requested evaluation window

    Returns:
        Annualized return as decimal. Unchanged if the window has no
        positive length.

    Raises:
        NonAnnualizableReturnError: If 1 + r is negative (no real root) or
            the power overflows float range
    """
    days_in_period = window.elapsed_days
    if days_in_period <= 0:
        return total_return

    years_in_period = days_in_period / DAYS_PER_YEAR
    base = ONE + total_return

    if base < ZERO:
        raise NonAnnualizableReturnError(total_return, "1 + return is negative")

    if base == ZERO:
        return TOTAL_LOSS

    try:
        annualized = _annualization_power(base, 1 / years_in_period) - ONE
    except OverflowError:
        raise NonAnnualizableReturnError(
            total_return, f"overflow raising to 1/{years_in_period:.6f} years"
        ) from None

    logger.debug(
        f"Annualized {total_return} over {days_in_period} days -> {annualized}"
    )
    return annualized
