# backend/twr_service/services/twr/calculator.py
"""
Time-Weighted Return calculator.

TWR removes the impact of external cash flows, showing pure investment
performance. The evaluation window is split at every NAV observation and
every cash flow, each sub-period return is computed with its flows added to
the opening value, and the sub-period returns are chain-linked:

    1. resolve_window()        requested window -> NAV-anchored window
    2. partition_sub_periods() window -> breakpoint dates
    3. compound_sub_periods()  breakpoints -> sub-period returns
    4. link_returns()          TWR = ∏(1 + r_i) - 1
    5. annualize_twr()         optional, over the requested window

Every failure condition (empty data, bad window, missing NAV, zero
denominator...) yields "no result": calculate_twr() returns None and
calculate_twr_detailed() returns a TWRResult carrying the failure reason.
Nothing is retried and no partial result is returned.

The calculation is a pure function of its inputs. Input mappings are never
mutated and no reference to them is kept after the call, so it is safe to
call concurrently.
"""

import logging
from datetime import date
from decimal import Decimal

from twr_service.services.exceptions import TWRCalculationError
from twr_service.services.twr.compounder import (
    annualize_twr,
    compound_sub_periods,
    link_returns,
)
from twr_service.services.twr.partition import partition_sub_periods
from twr_service.services.twr.types import (
    CashFlowSeries,
    EvaluationWindow,
    NavSeries,
    TWRResult,
)
from twr_service.services.twr.window import resolve_window

logger = logging.getLogger(__name__)


def calculate_twr_detailed(
        cash_flows: CashFlowSeries,
        navs: NavSeries,
        evaluation_start: date,
        evaluation_end: date,
        annualize: bool = False,
) -> TWRResult:
    """
    Calculate TWR and report how it was obtained.

    Args:
        cash_flows: External flows by date (positive = contribution,
                    negative = withdrawal). May be empty.
        navs: Net Asset Values by date
        evaluation_start: Requested window start
        evaluation_end: Requested window end
        annualize: Scale the result to an annual rate over the requested window

    Returns:
        TWRResult. On success ``twr`` is set and ``sub_periods`` holds the
        breakdown; on failure ``twr`` is None and ``failure_reason`` says why.
    """
    window = EvaluationWindow(start=evaluation_start, end=evaluation_end)
    result = TWRResult(evaluation_window=window, annualized=annualize)

    try:
        actual_window = resolve_window(navs, evaluation_start, evaluation_end)
        result.actual_window = actual_window

        breakpoints = partition_sub_periods(navs, cash_flows, actual_window)
        sub_periods = compound_sub_periods(breakpoints, navs, cash_flows)
        result.sub_periods = sub_periods

        total_return = link_returns(sub_periods)
        result.cumulative_return = total_return

        if annualize:
            total_return = annualize_twr(total_return, window)

    except TWRCalculationError as e:
        logger.debug(f"TWR: no result ({e.reason.value}): {e}")
        result.twr = None
        result.failure_reason = e.reason
        result.failure_message = str(e)
        return result

    result.twr = total_return

    if actual_window.start != evaluation_start:
        result.warnings.append(
            f"Window start moved from {evaluation_start.isoformat()} to last NAV "
            f"observation {actual_window.start.isoformat()}"
        )
    if actual_window.end != evaluation_end:
        result.warnings.append(
            f"Window end moved from {evaluation_end.isoformat()} to last NAV "
            f"observation {actual_window.end.isoformat()}"
        )

    logger.debug(
        f"TWR: linked {len(sub_periods)} sub-periods "
        f"({actual_window.start.isoformat()} -> {actual_window.end.isoformat()}), "
        f"twr={total_return}"
    )
    return result


def calculate_twr(
        cash_flows: CashFlowSeries,
        navs: NavSeries,
        evaluation_start: date,
        evaluation_end: date,
        annualize: bool = False,
) -> Decimal | None:
    """
    Calculate Time-Weighted Return over an evaluation window.

    Formula:
        r_i = (NAV_end - (NAV_start + CF)) / (NAV_start + CF)
        TWR = ∏(1 + r_i) - 1

    Example:
        navs = {date(2023, 1, 1): Decimal("100"), date(2023, 1, 31): Decimal("110")}
        calculate_twr({}, navs, date(2023, 1, 1), date(2023, 1, 31))  # Decimal("0.1")

    Args:
        cash_flows: External flows by date (positive = contribution)
        navs: Net Asset Values by date
        evaluation_start: Requested window start
        evaluation_end: Requested window end
        annualize: Scale the result to an annual rate

    Returns:
        TWR as decimal (e.g., 0.10 = 10%), or None if it cannot be calculated
    """
    return calculate_twr_detailed(
        cash_flows, navs, evaluation_start, evaluation_end, annualize
    ).twr


class TWRCalculator:
    """
    Stateless calculator for time-weighted returns.

    Provides an object interface for dependency injection. Holds no state,
    so one instance can be shared across threads and requests.
    """

    @staticmethod
    def calculate(
            cash_flows: CashFlowSeries,
            navs: NavSeries,
            evaluation_start: date,
            evaluation_end: date,
            annualize: bool = False,
    ) -> Decimal | None:
        """Calculate TWR, None if it cannot be calculated."""
        return calculate_twr(cash_flows, navs, evaluation_start, evaluation_end, annualize)

    @staticmethod
    def calculate_detailed(
            cash_flows: CashFlowSeries,
            navs: NavSeries,
            evaluation_start: date,
            evaluation_end: date,
            annualize: bool = False,
    ) -> TWRResult:
        """Calculate TWR with sub-period breakdown and failure reason."""
        return calculate_twr_detailed(
            cash_flows, navs, evaluation_start, evaluation_end, annualize
        )
