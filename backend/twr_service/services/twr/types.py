# backend/twr_service/services/twr/types.py
"""
Data types for the TWR calculation.

This module defines the data structures used throughout the time-weighted
return pipeline. All monetary values and returns use Decimal for precision.

Architecture:
    - TimePoint: A single (date, value) observation
    - NavSeries / CashFlowSeries: Read-only date -> Decimal mappings
    - EvaluationWindow: The window requested by the caller
    - ActualWindow: The window anchored to real NAV observations
    - SubPeriodReturn: Return of one breakpoint-to-breakpoint interval
    - TWRResult: Combined diagnostic result of one calculation
"""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal

from twr_service.services.constants import SECONDS_PER_DAY
from twr_service.services.exceptions import DuplicateDateError, TWRFailureReason

# Caller-owned series. Keys need not be pre-sorted; the pipeline orders them.
NavSeries = Mapping[date, Decimal]
CashFlowSeries = Mapping[date, Decimal]


# =============================================================================
# INPUT TYPES
# =============================================================================

@dataclass(frozen=True)
class TimePoint:
    """
    A single observation in a time series.

    Attributes:
        date: Observation date (calendar date, time of day optional)
        value: NAV, or signed cash flow (positive = contribution)
    """
    date: date
    value: Decimal


@dataclass(frozen=True)
class EvaluationWindow:
    """
    The (start, end) window requested by the caller.

    Neither bound has to coincide with a series date.
    """
    start: date
    end: date

    @property
    def elapsed_days(self) -> float:
        """Calendar days between start and end, fractional for datetimes."""
        return (self.end - self.start).total_seconds() / SECONDS_PER_DAY


@dataclass(frozen=True)
class ActualWindow:
    """
    The window the calculation operates over, anchored to NAV observations.

    Attributes:
        start: Latest NAV date at or before the requested start
        end: Latest NAV date at or before the requested end
    """
    start: date
    end: date


# =============================================================================
# RESULT TYPES
# =============================================================================

@dataclass(frozen=True)
class SubPeriodReturn:
    """
    Return over one interval between adjacent breakpoints.

    Formula:
        denominator = nav_start + cash_flow
        period_return = (nav_end - denominator) / denominator

    Attributes:
        start: Opening breakpoint (exclusive for cash flows)
        end: Closing breakpoint (inclusive for cash flows)
        nav_start: NAV observed at start
        nav_end: NAV observed at end
        cash_flow: Net external flow dated in (start, end]
        denominator: Opening value with the flow added
        period_return: Simple return of the interval as decimal
    """
    start: date
    end: date
    nav_start: Decimal
    nav_end: Decimal
    cash_flow: Decimal
    denominator: Decimal
    period_return: Decimal


@dataclass
class TWRResult:
    """
    Full outcome of one TWR calculation.

    ``twr`` is identical to what calculate_twr() returns for the same inputs:
    the (optionally annualized) return, or None when a failure occurred.

    Attributes:
        twr: Final return as decimal (0.10 = 10%), None on failure
        cumulative_return: Linked return before annualization
        annualized: Whether annualization was requested
        evaluation_window: The window the caller asked for
        actual_window: The window anchored to NAV data (None if unresolved)
        sub_periods: Per-interval breakdown, in date order
        failure_reason: Why no TWR was produced (None on success)
        failure_message: Human-readable failure description
        warnings: Non-fatal notes about the calculation
    """
    evaluation_window: EvaluationWindow
    annualized: bool = False
    twr: Decimal | None = None
    cumulative_return: Decimal | None = None
    actual_window: ActualWindow | None = None
    sub_periods: list[SubPeriodReturn] = field(default_factory=list)

    failure_reason: TWRFailureReason | None = None
    failure_message: str | None = None
    warnings: list[str] = field(default_factory=list)

    @property
    def has_sufficient_data(self) -> bool:
        """True when a TWR figure was produced."""
        return self.failure_reason is None


# =============================================================================
# SERIES HELPERS
# =============================================================================

def series_from_points(points: Iterable[TimePoint], label: str) -> dict[date, Decimal]:
    """
    Build a date-ordered series from individual observations.

    Args:
        points: Observations in any order
        label: Series name used in error messages (e.g. "navs")

    Returns:
        Dict keyed by date, inserted in ascending date order

    Raises:
        DuplicateDateError: If two points share a date
    """
    series: dict[date, Decimal] = {}
    for point in sorted(points, key=lambda p: p.date):
        if point.date in series:
            raise DuplicateDateError(point.date, label)
        series[point.date] = point.value
    return series
