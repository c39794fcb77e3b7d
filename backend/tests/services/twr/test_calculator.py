# backend/tests/services/twr/test_calculator.py
"""
Tests for the TWR calculator.

Tests cover:
- Plain returns without cash flows
- Cash flow neutralisation
- Window alignment to NAV observations
- Annualization over the requested window
- Every "no result" condition and its failure reason
- Purity (idempotence, no input mutation) and performance on long series
"""

import random
import time
from datetime import date, timedelta
from decimal import Decimal
from types import MappingProxyType

import pytest

from twr_service.services.exceptions import TWRFailureReason
from twr_service.services.twr import (
    ActualWindow,
    TWRCalculator,
    calculate_twr,
    calculate_twr_detailed,
)


JAN_1 = date(2023, 1, 1)
JAN_31 = date(2023, 1, 31)


class TestTWRWithoutCashFlows:
    """Returns driven by NAV changes alone."""

    def test_gain(self):
        """100 -> 110 is +10%."""
        navs = {JAN_1: Decimal("100"), JAN_31: Decimal("110")}

        result = calculate_twr({}, navs, JAN_1, JAN_31)

        assert abs(result - Decimal("0.10")) < Decimal("0.0001")

    def test_loss(self):
        """100 -> 90 is -10%."""
        navs = {JAN_1: Decimal("100"), JAN_31: Decimal("90")}

        result = calculate_twr({}, navs, JAN_1, JAN_31)

        assert abs(result - Decimal("-0.10")) < Decimal("0.0001")

    def test_flat_is_exactly_zero(self):
        """Unchanged NAV gives exactly zero, not a rounding residue."""
        navs = {JAN_1: Decimal("100"), JAN_31: Decimal("100")}

        result = calculate_twr({}, navs, JAN_1, JAN_31)

        assert result == Decimal("0")

    def test_intermediate_observations_link(self):
        """100 -> 105 -> 100 -> 110 links to +10%."""
        navs = {
            JAN_1: Decimal("100"),
            date(2023, 1, 15): Decimal("105"),
            date(2023, 1, 20): Decimal("100"),
            JAN_31: Decimal("110"),
        }

        result = calculate_twr({}, navs, JAN_1, JAN_31)

        assert abs(result - Decimal("0.10")) < Decimal("0.0001")


class TestTWRWithCashFlows:
    """Cash flows must not count as performance."""

    def test_contribution(self, january_navs, january_flows):
        """(105 / 110) * (120 / 105) - 1"""
        result = calculate_twr(january_flows, january_navs, JAN_1, JAN_31)

        expected = (Decimal("105") / Decimal("110")) * (Decimal("120") / Decimal("105")) - 1
        assert abs(result - expected) < Decimal("0.0001")

    def test_flow_sized_nav_change_is_zero(self, navs_2018, flows_2018):
        """The Jan 2018 NAVs only move by the contribution: no performance."""
        result = calculate_twr(flows_2018, navs_2018, date(2018, 1, 1), date(2018, 1, 15))

        expected = (
            (Decimal("1020") / Decimal("1050"))
            * (Decimal("1015") / Decimal("1020"))
            * (Decimal("1050") / Decimal("1015"))
            - 1
        )
        assert abs(result - expected) < Decimal("1e-20")
        assert abs(result) < Decimal("1e-20")

    def test_flows_outside_window_ignored(self):
        """Flows before the actual start or after the actual end do nothing."""
        navs = {JAN_1: Decimal("100"), JAN_31: Decimal("110")}
        flows = {
            date(2022, 12, 1): Decimal("500"),
            JAN_1: Decimal("500"),
            date(2023, 2, 15): Decimal("500"),
        }

        result = calculate_twr(flows, navs, JAN_1, JAN_31)

        assert abs(result - Decimal("0.10")) < Decimal("0.0001")

    def test_flow_after_actual_end_inside_requested_window(self):
        """Only (actual_start, actual_end] matters, not the requested window."""
        navs = {JAN_1: Decimal("100"), JAN_31: Decimal("110")}
        flows = {date(2023, 2, 10): Decimal("50")}

        result = calculate_twr(flows, navs, JAN_1, date(2023, 2, 28))

        assert abs(result - Decimal("0.10")) < Decimal("0.0001")


class TestWindowAlignment:
    """Requested windows that do not fall on NAV dates."""

    def test_bounds_snap_back(self, january_navs):
        """Jan 5 -> Feb 3 is computed over Jan 1 -> Jan 31."""
        aligned = calculate_twr({}, january_navs, date(2023, 1, 5), date(2023, 2, 3))
        exact = calculate_twr({}, january_navs, JAN_1, JAN_31)

        assert aligned == exact

    def test_detailed_reports_actual_window(self, january_navs):
        """The detailed result exposes the anchored window and warns about it."""
        result = calculate_twr_detailed({}, january_navs, date(2023, 1, 5), date(2023, 2, 3))

        assert result.actual_window == ActualWindow(start=JAN_1, end=JAN_31)
        assert len(result.warnings) == 2
        assert "2023-01-05" in result.warnings[0]
        assert "2023-02-03" in result.warnings[1]

    def test_no_warnings_on_exact_bounds(self, january_navs):
        """Bounds on NAV dates produce no warnings."""
        result = calculate_twr_detailed({}, january_navs, JAN_1, JAN_31)

        assert result.warnings == []


class TestAnnualization:
    """Annualization uses the requested window's elapsed days."""

    def test_half_year(self):
        """Jan 1 -> Jul 1 2023, 100 -> 110."""
        navs = {JAN_1: Decimal("100"), date(2023, 7, 1): Decimal("110")}

        result = calculate_twr({}, navs, JAN_1, date(2023, 7, 1), annualize=True)

        expected = Decimal(str(1.1 ** (1 / (181 / 365.25)))) - 1
        assert abs(result - expected) < Decimal("1e-12")

    def test_uses_requested_not_actual_window(self):
        """NAV dates span 181 days but the requested window spans 200."""
        navs = {JAN_1: Decimal("100"), date(2023, 7, 1): Decimal("110")}
        requested_end = JAN_1 + timedelta(days=200)

        result = calculate_twr({}, navs, JAN_1, requested_end, annualize=True)

        expected = Decimal(str(1.1 ** (1 / (200 / 365.25)))) - 1
        assert abs(result - expected) < Decimal("1e-12")

    def test_detailed_keeps_cumulative(self):
        """cumulative_return holds the linked figure before annualization."""
        navs = {JAN_1: Decimal("100"), date(2023, 7, 1): Decimal("110")}

        result = calculate_twr_detailed({}, navs, JAN_1, date(2023, 7, 1), annualize=True)

        assert result.annualized is True
        assert result.cumulative_return == Decimal("0.1")
        assert result.twr != result.cumulative_return

    def test_total_loss(self):
        """Portfolio wiped out annualizes to -1."""
        navs = {JAN_1: Decimal("100"), JAN_31: Decimal("0")}

        result = calculate_twr({}, navs, JAN_1, JAN_31, annualize=True)

        assert result == Decimal("-1")

    def test_return_below_minus_one(self):
        """A loss beyond -100% has a TWR but no annual rate."""
        navs = {JAN_1: Decimal("100"), JAN_31: Decimal("-10")}

        assert calculate_twr({}, navs, JAN_1, JAN_31) == Decimal("-1.1")

        result = calculate_twr_detailed({}, navs, JAN_1, JAN_31, annualize=True)
        assert result.twr is None
        assert result.failure_reason == TWRFailureReason.NON_ANNUALIZABLE_RETURN


class TestNoResult:
    """Every failure condition yields None and names its reason."""

    @pytest.mark.parametrize(
        "navs, flows, start, end, reason",
        [
            ({}, {}, JAN_1, JAN_31, TWRFailureReason.EMPTY_INPUT),
            (
                {JAN_1: Decimal("100")},
                {},
                JAN_1,
                JAN_31,
                TWRFailureReason.UNRESOLVABLE_WINDOW,
            ),
            (
                {JAN_1: Decimal("100"), JAN_31: Decimal("110")},
                {},
                JAN_31,
                JAN_1,
                TWRFailureReason.INVALID_WINDOW,
            ),
            (
                {JAN_1: Decimal("100"), JAN_31: Decimal("110")},
                {},
                JAN_1,
                JAN_1,
                TWRFailureReason.INVALID_WINDOW,
            ),
            (
                {JAN_1: Decimal("100"), JAN_31: Decimal("110")},
                {},
                date(2022, 12, 1),
                JAN_31,
                TWRFailureReason.UNRESOLVABLE_WINDOW,
            ),
            (
                {JAN_1: Decimal("100"), JAN_31: Decimal("110")},
                {date(2023, 1, 10): Decimal("5")},
                JAN_1,
                JAN_31,
                TWRFailureReason.MISSING_NAV_AT_BREAKPOINT,
            ),
            (
                {JAN_1: Decimal("100"), date(2023, 1, 15): Decimal("50"), JAN_31: Decimal("60")},
                {date(2023, 1, 15): Decimal("-100")},
                JAN_1,
                JAN_31,
                TWRFailureReason.DEGENERATE_SUB_PERIOD,
            ),
            (
                {JAN_1: Decimal("1E-999999"), JAN_31: Decimal("100")},
                {},
                JAN_1,
                JAN_31,
                TWRFailureReason.NUMERIC_OVERFLOW,
            ),
        ],
        ids=[
            "empty-navs",
            "single-nav",
            "start-after-end",
            "start-equals-end",
            "start-before-data",
            "flow-without-nav",
            "zero-denominator",
            "decimal-overflow",
        ],
    )
    def test_failure(self, navs, flows, start, end, reason):
        """calculate_twr is None and the detailed result explains why."""
        assert calculate_twr(flows, navs, start, end) is None

        result = calculate_twr_detailed(flows, navs, start, end)

        assert result.twr is None
        assert result.failure_reason == reason
        assert result.failure_message
        assert result.has_sufficient_data is False

    def test_success_has_no_failure(self, january_navs):
        """A computed TWR carries no failure reason."""
        result = calculate_twr_detailed({}, january_navs, JAN_1, JAN_31)

        assert result.has_sufficient_data is True
        assert result.failure_reason is None
        assert result.failure_message is None
        assert len(result.sub_periods) == 2


class TestPurity:
    """The calculation is a pure function of its inputs."""

    def test_idempotent(self, january_navs, january_flows):
        """Same inputs, same output."""
        first = calculate_twr(january_flows, january_navs, JAN_1, JAN_31, annualize=True)
        second = calculate_twr(january_flows, january_navs, JAN_1, JAN_31, annualize=True)

        assert first == second

    def test_inputs_not_mutated(self, january_navs, january_flows):
        """Caller-owned mappings are left untouched."""
        navs_before = dict(january_navs)
        flows_before = dict(january_flows)

        calculate_twr(january_flows, january_navs, date(2023, 1, 5), date(2023, 2, 3))

        assert january_navs == navs_before
        assert list(january_navs) == list(navs_before)
        assert january_flows == flows_before

    def test_read_only_mappings(self, january_navs, january_flows):
        """Any Mapping is accepted, including read-only views."""
        result = calculate_twr(
            MappingProxyType(january_flows),
            MappingProxyType(january_navs),
            JAN_1,
            JAN_31,
        )

        assert result == calculate_twr(january_flows, january_navs, JAN_1, JAN_31)

    def test_insertion_order_irrelevant(self, january_navs, january_flows):
        """Reverse-inserted series give the same result."""
        reversed_navs = dict(reversed(list(january_navs.items())))

        assert calculate_twr(january_flows, reversed_navs, JAN_1, JAN_31) == calculate_twr(
            january_flows, january_navs, JAN_1, JAN_31
        )


class TestTWRCalculator:
    """The object interface delegates to the module functions."""

    def test_calculate(self, january_navs, january_flows):
        """calculate() matches calculate_twr()."""
        calculator = TWRCalculator()

        assert calculator.calculate(january_flows, january_navs, JAN_1, JAN_31) == calculate_twr(
            january_flows, january_navs, JAN_1, JAN_31
        )

    def test_calculate_detailed(self, january_navs, january_flows):
        """calculate_detailed() returns the breakdown."""
        result = TWRCalculator().calculate_detailed(january_flows, january_navs, JAN_1, JAN_31)

        assert [p.end for p in result.sub_periods] == [date(2023, 1, 15), JAN_31]
        assert result.sub_periods[0].cash_flow == Decimal("10")


class TestPerformance:
    """Long daily series stay fast."""

    def test_twenty_five_years_daily(self):
        """~9,000 daily NAVs with quarterly flows compute in well under a second."""
        rng = random.Random(42)
        start = date(1995, 1, 1)
        end = date(2020, 1, 1)

        navs: dict[date, Decimal] = {}
        flows: dict[date, Decimal] = {}
        nav = 1000.0
        current = start
        while current <= end:
            nav *= 1 + rng.uniform(-0.01, 0.0105)
            navs[current] = Decimal(str(round(nav, 2)))
            if current.timetuple().tm_yday % 90 == 0:
                flows[current] = Decimal(str(round(rng.uniform(-20, 50), 2)))
            current += timedelta(days=1)

        started = time.perf_counter()
        result = calculate_twr_detailed(flows, navs, start, end, annualize=True)
        elapsed = time.perf_counter() - started

        assert result.twr is not None
        assert len(result.sub_periods) == len(navs) - 1
        assert elapsed < 1.0
