# backend/twr_service/services/twr/partition.py
"""
Sub-period partitioning.

Every NAV observation and every external cash flow inside the actual window
closes a sub-period. The breakpoints are the actual start plus all such dates
in (actual_start, actual_end], sorted and de-duplicated:

    NAV dates:   Jan 1      Jan 15           Jan 31
    Flow dates:             Jan 15   Jan 20
    Breakpoints: Jan 1      Jan 15   Jan 20  Jan 31

A flow on a date without a NAV observation still becomes a breakpoint, and
the return around it cannot be computed. That is reported as a hard failure
rather than skipping or interpolating.
"""

from datetime import date

from twr_service.services.exceptions import (
    InsufficientBreakpointsError,
    MissingNavAtBreakpointError,
)
from twr_service.services.twr.types import ActualWindow, CashFlowSeries, NavSeries


def partition_sub_periods(
        navs: NavSeries,
        cash_flows: CashFlowSeries,
        window: ActualWindow,
) -> list[date]:
    """
    Build the ordered breakpoint sequence for a resolved window.

    Args:
        navs: NAV series (date -> value)
        cash_flows: Cash flow series (date -> signed amount), may be empty
        window: Window produced by resolve_window()

    Returns:
        Ascending, duplicate-free list of dates starting at window.start

    Raises:
        InsufficientBreakpointsError: If no date follows window.start
        MissingNavAtBreakpointError: If a breakpoint has no NAV observation
    """
    breakpoints = {window.start}
    breakpoints.update(d for d in navs if window.start < d <= window.end)
    breakpoints.update(d for d in cash_flows if window.start < d <= window.end)

    ordered = sorted(breakpoints)

    if len(ordered) < 2:
        raise InsufficientBreakpointsError(len(ordered))

    for d in ordered:
        if d not in navs:
            raise MissingNavAtBreakpointError(d)

    return ordered
