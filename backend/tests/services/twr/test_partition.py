# backend/tests/services/twr/test_partition.py
"""
Tests for sub-period partitioning.
"""

from datetime import date
from decimal import Decimal

import pytest

from twr_service.services.exceptions import (
    InsufficientBreakpointsError,
    MissingNavAtBreakpointError,
    TWRFailureReason,
)
from twr_service.services.twr import ActualWindow, partition_sub_periods


JANUARY = ActualWindow(start=date(2023, 1, 1), end=date(2023, 1, 31))


class TestPartitionSubPeriods:
    """Tests for partition_sub_periods()."""

    def test_nav_dates_only(self, january_navs):
        """Without flows, breakpoints are the NAV dates in the window."""
        breakpoints = partition_sub_periods(january_navs, {}, JANUARY)

        assert breakpoints == [date(2023, 1, 1), date(2023, 1, 15), date(2023, 1, 31)]

    def test_flow_on_nav_date_is_deduplicated(self, january_navs, january_flows):
        """A flow on a NAV date does not add a second breakpoint."""
        breakpoints = partition_sub_periods(january_navs, january_flows, JANUARY)

        assert breakpoints == [date(2023, 1, 1), date(2023, 1, 15), date(2023, 1, 31)]

    def test_dates_outside_window_excluded(self):
        """Observations before the start or after the end are ignored."""
        navs = {
            date(2022, 12, 15): Decimal("90"),
            date(2023, 1, 1): Decimal("100"),
            date(2023, 1, 31): Decimal("110"),
            date(2023, 2, 15): Decimal("120"),
        }
        flows = {
            date(2022, 12, 20): Decimal("5"),
            date(2023, 2, 10): Decimal("5"),
        }

        breakpoints = partition_sub_periods(navs, flows, JANUARY)

        assert breakpoints == [date(2023, 1, 1), date(2023, 1, 31)]

    def test_flow_on_start_not_a_new_breakpoint(self):
        """The start is always first and never repeated."""
        navs = {date(2023, 1, 1): Decimal("100"), date(2023, 1, 31): Decimal("110")}
        flows = {date(2023, 1, 1): Decimal("20")}

        breakpoints = partition_sub_periods(navs, flows, JANUARY)

        assert breakpoints == [date(2023, 1, 1), date(2023, 1, 31)]

    def test_breakpoints_sorted(self):
        """Breakpoints ascend whatever the mapping order."""
        navs = {
            date(2023, 1, 31): Decimal("110"),
            date(2023, 1, 20): Decimal("100"),
            date(2023, 1, 1): Decimal("100"),
            date(2023, 1, 10): Decimal("103"),
        }

        breakpoints = partition_sub_periods(navs, {}, JANUARY)

        assert breakpoints == sorted(breakpoints)
        assert breakpoints[0] == JANUARY.start
        assert len(breakpoints) == 4


class TestPartitionFailures:
    """Tests for partitions that cannot form sub-periods."""

    def test_flow_without_nav(self, january_navs):
        """A flow dated where no NAV exists is MISSING_NAV_AT_BREAKPOINT."""
        flows = {date(2023, 1, 20): Decimal("10")}

        with pytest.raises(MissingNavAtBreakpointError) as exc_info:
            partition_sub_periods(january_navs, flows, JANUARY)

        assert exc_info.value.reason == TWRFailureReason.MISSING_NAV_AT_BREAKPOINT
        assert exc_info.value.breakpoint_date == date(2023, 1, 20)

    def test_single_breakpoint(self, january_navs):
        """A window with nothing after its start has one breakpoint."""
        window = ActualWindow(start=date(2023, 1, 15), end=date(2023, 1, 15))

        with pytest.raises(InsufficientBreakpointsError) as exc_info:
            partition_sub_periods(january_navs, {}, window)

        assert exc_info.value.breakpoint_count == 1
        assert exc_info.value.reason == TWRFailureReason.INSUFFICIENT_BREAKPOINTS
