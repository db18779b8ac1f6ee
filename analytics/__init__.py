# snapshot_signals_root/analytics/__init__.py
# PACKAGE API

"""
Initializes the analytics package, making the window aggregation, trend
classification and report orchestration functions available at the top level.
"""

# From windows.py
from .windows import (
    StepComparison,
    case_counts,
    trailing_average,
    step_averages,
    step_comparison,
    rolling_average_trace,
)

# From trends.py
from .trends import (
    RiskLevel,
    BedUsageChange,
    BedUsageComparison,
    BedCensus,
    DailyDelta,
    weekly_rate_per_100k,
    classify_transmission_risk,
    transmission_risk,
    compare_bed_usage,
    bed_census,
    day_over_day_delta,
    icu_percent_full,
)

# From weekday.py
from .weekday import WEEKDAY_NAMES, decompose_weekday_bias

# From age_groups.py
from .age_groups import cases_by_age_group, age_group_averages

# From chart_series.py
from .chart_series import ChartData, ChartSpec, build_chart_series

# From orchestrator.py
from .orchestrator import (
    JurisdictionReport,
    RisingJurisdiction,
    DailyReport,
    WeekdayReport,
    AgeReport,
    analyze_jurisdiction,
    find_rising_jurisdictions,
    count_case_delta,
    pcr_test_delta,
    load_observations,
    build_daily_report,
    build_weekday_report,
    build_age_report,
)

# --- Define the public API for the analytics package ---
__all__ = [
    # Window aggregation
    "StepComparison",
    "case_counts",
    "trailing_average",
    "step_averages",
    "step_comparison",
    "rolling_average_trace",

    # Trend classification
    "RiskLevel",
    "BedUsageChange",
    "BedUsageComparison",
    "BedCensus",
    "DailyDelta",
    "weekly_rate_per_100k",
    "classify_transmission_risk",
    "transmission_risk",
    "compare_bed_usage",
    "bed_census",
    "day_over_day_delta",
    "icu_percent_full",

    # Weekday decomposition
    "WEEKDAY_NAMES",
    "decompose_weekday_bias",

    # Age groups
    "cases_by_age_group",
    "age_group_averages",

    # Chart series
    "ChartData",
    "ChartSpec",
    "build_chart_series",

    # Orchestration
    "JurisdictionReport",
    "RisingJurisdiction",
    "DailyReport",
    "WeekdayReport",
    "AgeReport",
    "analyze_jurisdiction",
    "find_rising_jurisdictions",
    "count_case_delta",
    "pcr_test_delta",
    "load_observations",
    "build_daily_report",
    "build_weekday_report",
    "build_age_report",
]
