# backend/twr_service/services/exceptions.py
"""
Service layer exceptions.

These exceptions represent domain-specific errors and contain NO HTTP knowledge.
The router layer is responsible for mapping these to appropriate HTTP responses.

Exception Hierarchy:
    ServiceError (base)
    ├── ValidationError
    │   └── DuplicateDateError
    └── TWRCalculationError
        ├── EmptyNavSeriesError
        ├── InvalidEvaluationWindowError
        ├── UnresolvableWindowError
        ├── InsufficientBreakpointsError
        ├── DegenerateSubPeriodError
        ├── MissingNavAtBreakpointError
        ├── NonAnnualizableReturnError
        └── NumericOverflowError

TWRCalculationError subclasses never escape the public calculator entry
points: TWRCalculator converts them into a "no result" outcome. They exist so
each phase can stop the pipeline at the point of failure and so the detailed
result can report why no TWR was produced.
"""

from datetime import date
from decimal import Decimal
from enum import Enum


class TWRFailureReason(str, Enum):
    """
    Why a TWR calculation produced no result.

    Every value maps to exactly one TWRCalculationError subclass below.
    """
    EMPTY_INPUT = "empty_input"
    INVALID_WINDOW = "invalid_window"
    UNRESOLVABLE_WINDOW = "unresolvable_window"
    INSUFFICIENT_BREAKPOINTS = "insufficient_breakpoints"
    DEGENERATE_SUB_PERIOD = "degenerate_sub_period"
    MISSING_NAV_AT_BREAKPOINT = "missing_nav_at_breakpoint"
    NON_ANNUALIZABLE_RETURN = "non_annualizable_return"
    NUMERIC_OVERFLOW = "numeric_overflow"


class ServiceError(Exception):
    """
    Base exception for all service layer errors.

    Attributes:
        message: Human-readable error description
    """

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(self.message)

    def __str__(self) -> str:
        return self.message


# =============================================================================
# VALIDATION ERRORS
# =============================================================================


class ValidationError(ServiceError):
    """
    Raised when caller-supplied input is malformed.

    This is for programmatic validation errors (e.g. a series assembled with
    the same date twice), NOT for request shape validation which is handled
    by Pydantic.

    Attributes:
        field: The field that failed validation (optional)
    """

    def __init__(self, message: str, field: str | None = None) -> None:
        self.field = field
        super().__init__(message)


class DuplicateDateError(ValidationError):
    """
    Raised when a time series contains the same date more than once.

    Attributes:
        duplicate_date: The repeated date
    """

    def __init__(self, duplicate_date: date, field: str) -> None:
        self.duplicate_date = duplicate_date
        super().__init__(
            f"Duplicate date {duplicate_date.isoformat()} in {field}",
            field=field,
        )


# =============================================================================
# TWR CALCULATION ERRORS
# =============================================================================


class TWRCalculationError(ServiceError):
    """
    Base exception for conditions under which no TWR can be produced.

    Attributes:
        reason: Machine-readable failure category
    """

    reason: TWRFailureReason


class EmptyNavSeriesError(TWRCalculationError):
    """Raised when the NAV series has no observations."""

    reason = TWRFailureReason.EMPTY_INPUT

    def __init__(self) -> None:
        super().__init__("NAV series is empty")


class InvalidEvaluationWindowError(TWRCalculationError):
    """Raised when the requested window does not start before it ends."""

    reason = TWRFailureReason.INVALID_WINDOW

    def __init__(self, evaluation_start: date, evaluation_end: date) -> None:
        self.evaluation_start = evaluation_start
        self.evaluation_end = evaluation_end
        super().__init__(
            f"Evaluation start {evaluation_start.isoformat()} must be before "
            f"evaluation end {evaluation_end.isoformat()}"
        )


class UnresolvableWindowError(TWRCalculationError):
    """
    Raised when the requested window cannot be anchored to NAV observations.

    Covers a missing NAV at or before either bound, and windows where both
    bounds resolve to the same observation (single usable point).
    """

    reason = TWRFailureReason.UNRESOLVABLE_WINDOW


class InsufficientBreakpointsError(TWRCalculationError):
    """Raised when partitioning yields no sub-period."""

    reason = TWRFailureReason.INSUFFICIENT_BREAKPOINTS

    def __init__(self, breakpoint_count: int) -> None:
        self.breakpoint_count = breakpoint_count
        super().__init__(
            f"Need at least 2 breakpoints to form a sub-period, got {breakpoint_count}"
        )


class DegenerateSubPeriodError(TWRCalculationError):
    """
    Raised when a sub-period's opening NAV plus flows is exactly zero.

    Attributes:
        period_start: Opening breakpoint of the sub-period
        period_end: Closing breakpoint of the sub-period
    """

    reason = TWRFailureReason.DEGENERATE_SUB_PERIOD

    def __init__(self, period_start: date, period_end: date) -> None:
        self.period_start = period_start
        self.period_end = period_end
        super().__init__(
            f"Sub-period {period_start.isoformat()} -> {period_end.isoformat()} "
            "has a zero denominator (opening NAV plus cash flows)"
        )


class MissingNavAtBreakpointError(TWRCalculationError):
    """
    Raised when a breakpoint date has no NAV observation.

    This happens when a cash flow falls on a date absent from the NAV series.
    The sub-period return around that date cannot be computed.

    Attributes:
        breakpoint_date: The date lacking a NAV entry
    """

    reason = TWRFailureReason.MISSING_NAV_AT_BREAKPOINT

    def __init__(self, breakpoint_date: date) -> None:
        self.breakpoint_date = breakpoint_date
        super().__init__(f"No NAV observation at breakpoint {breakpoint_date.isoformat()}")


class NonAnnualizableReturnError(TWRCalculationError):
    """
    Raised when (1 + r)^(1/years) has no finite real value.

    Attributes:
        total_return: The non-annualized return that could not be scaled
    """

    reason = TWRFailureReason.NON_ANNUALIZABLE_RETURN

    def __init__(self, total_return: Decimal, detail: str) -> None:
        self.total_return = total_return
        super().__init__(f"Cannot annualize return {total_return}: {detail}")


class NumericOverflowError(TWRCalculationError):
    """
    Raised when a return or linked factor leaves the Decimal exponent range.

    Happens with extreme magnitudes, e.g. an opening NAV of 1E-999999
    followed by an ordinary closing NAV.

    Attributes:
        period_start: Opening breakpoint of the offending sub-period
                      (None when the overflow happened while linking)
        period_end: Closing breakpoint of the offending sub-period
    """

    reason = TWRFailureReason.NUMERIC_OVERFLOW

    def __init__(self, period_start: date | None = None, period_end: date | None = None) -> None:
        self.period_start = period_start
        self.period_end = period_end
        if period_start is not None and period_end is not None:
            where = f"sub-period {period_start.isoformat()} -> {period_end.isoformat()}"
        else:
            where = "linking sub-period returns"
        super().__init__(f"Decimal overflow in {where}")
