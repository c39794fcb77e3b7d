# backend/twr_service/services/twr/window.py
"""
Window resolution: anchor a requested evaluation window to NAV observations.

A caller may ask for any (start, end) pair. The calculation can only run
between dates where a NAV was actually observed, so each bound is moved back
to the latest NAV observation at or before it:

    NAV dates:        Jan 1      Jan 15      Jan 31
    Requested:           Jan 5 ─────────────────── Feb 3
    Actual:           Jan 1 ──────────────────── Jan 31
"""

from datetime import date

from twr_service.services.exceptions import (
    EmptyNavSeriesError,
    InvalidEvaluationWindowError,
    UnresolvableWindowError,
)
from twr_service.services.twr.types import ActualWindow, NavSeries


def _latest_on_or_before(sorted_dates: list[date], bound: date) -> date | None:
    """Return the last date in sorted_dates that is <= bound, or None."""
    latest = None
    for d in sorted_dates:
        if d > bound:
            break
        latest = d
    return latest


def resolve_window(
        navs: NavSeries,
        evaluation_start: date,
        evaluation_end: date,
) -> ActualWindow:
    """
    Resolve the requested window onto actual NAV observation dates.

    Args:
        navs: NAV series (date -> value)
        evaluation_start: Requested window start
        evaluation_end: Requested window end

    Returns:
        ActualWindow with both bounds on NAV dates, start strictly before end

    Raises:
        EmptyNavSeriesError: If navs is empty
        InvalidEvaluationWindowError: If evaluation_start >= evaluation_end
        UnresolvableWindowError: If either bound precedes all NAV data, or
            both bounds resolve to the same observation
    """
    if not navs:
        raise EmptyNavSeriesError()

    if evaluation_start >= evaluation_end:
        raise InvalidEvaluationWindowError(evaluation_start, evaluation_end)

    nav_dates = sorted(navs)

    actual_start = _latest_on_or_before(nav_dates, evaluation_start)
    if actual_start is None:
        raise UnresolvableWindowError(
            f"No NAV observation on or before evaluation start {evaluation_start.isoformat()}"
        )

    actual_end = _latest_on_or_before(nav_dates, evaluation_end)
    if actual_end is None:
        raise UnresolvableWindowError(
            f"No NAV observation on or before evaluation end {evaluation_end.isoformat()}"
        )

    if actual_end <= actual_start:
        raise UnresolvableWindowError(
            f"Window resolves to a single NAV observation ({actual_start.isoformat()}); "
            "need a later observation on or before the evaluation end"
        )

    return ActualWindow(start=actual_start, end=actual_end)
