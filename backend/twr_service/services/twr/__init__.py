# backend/twr_service/services/twr/__init__.py
"""
Time-Weighted Return package.

This package computes the TWR of a portfolio from an irregular NAV series
and an irregular external cash flow series.

Architecture:
    twr/
    ├── __init__.py              # This file - package exports
    ├── types.py                 # Data classes for inputs and results
    ├── window.py                # Window Resolver (requested -> actual window)
    ├── partition.py             # Sub-period Partitioner (breakpoints)
    ├── compounder.py            # Return Compounder (linking, annualization)
    └── calculator.py            # calculate_twr / TWRCalculator (orchestrator)

Usage:
    from twr_service.services.twr import calculate_twr

    twr = calculate_twr(
        cash_flows={date(2023, 1, 15): Decimal("10")},
        navs={
            date(2023, 1, 1): Decimal("100"),
            date(2023, 1, 15): Decimal("105"),
            date(2023, 1, 31): Decimal("120"),
        },
        evaluation_start=date(2023, 1, 1),
        evaluation_end=date(2023, 1, 31),
        annualize=False,
    )
    # (105 / 110) * (120 / 105) - 1

Data Flow:
    NAVs + cash flows + requested window
        ↓
    resolve_window()         → ActualWindow
        ↓
    partition_sub_periods()  → [breakpoint dates]
        ↓
    compound_sub_periods()   → [SubPeriodReturn]
        ↓
    link_returns() / annualize_twr()
        ↓
    Decimal | None
"""

from twr_service.services.twr.calculator import (
    TWRCalculator,
    calculate_twr,
    calculate_twr_detailed,
)
from twr_service.services.twr.compounder import (
    annualize_twr,
    compound_sub_periods,
    link_returns,
)
from twr_service.services.twr.partition import partition_sub_periods
from twr_service.services.twr.types import (
    ActualWindow,
    CashFlowSeries,
    EvaluationWindow,
    NavSeries,
    SubPeriodReturn,
    TimePoint,
    TWRResult,
    series_from_points,
)
from twr_service.services.twr.window import resolve_window

__all__ = [
    # Calculator
    "TWRCalculator",
    "calculate_twr",
    "calculate_twr_detailed",

    # Phases
    "resolve_window",
    "partition_sub_periods",
    "compound_sub_periods",
    "link_returns",
    "annualize_twr",

    # Types
    "ActualWindow",
    "CashFlowSeries",
    "EvaluationWindow",
    "NavSeries",
    "SubPeriodReturn",
    "TimePoint",
    "TWRResult",
    "series_from_points",
]
