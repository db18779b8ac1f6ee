# snapshot_signals_root/analytics/trends.py
# TREND CLASSIFICATION: RISK LEVELS, BED USAGE & DAILY DELTAS

import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import Optional

import pandas as pd

from config import JurisdictionConfig, settings
from data_processing.errors import IncompleteObservation, InsufficientHistory

logger = logging.getLogger(__name__)

# --- Enums and Dataclasses ---
class RiskLevel(Enum):
    LOW = "Low"
    MODERATE = "Moderate"
    SUBSTANTIAL = "Substantial"
    HIGH = "High"

class BedUsageChange(Enum):
    GREATER = "Greater"
    EQUAL = "Equal"
    LESS = "Less"

    @property
    def phrase(self) -> str:
        return {"Greater": "more", "Equal": "same", "Less": "less"}[self.value]

@dataclass(frozen=True)
class BedUsageComparison:
    current: int
    previous: int
    change: BedUsageChange
    difference: int

@dataclass(frozen=True)
class BedCensus:
    beds_used: int
    vs_one_week: BedUsageComparison
    vs_two_weeks: BedUsageComparison

@dataclass(frozen=True)
class DailyDelta:
    latest: int
    previous: int

    @property
    def change(self) -> int:
        return self.latest - self.previous


# --- Transmission Risk ---
def weekly_rate_per_100k(avg_daily_cases: float, population: int) -> float:
    """Converts an average daily case count into weekly cases per 100,000 residents."""
    if population <= 0:
        raise ValueError(f"population must be positive, got {population}")
    return avg_daily_cases * 7 / (population / 100000)


def classify_transmission_risk(rate: float) -> RiskLevel:
    """
    Maps a weekly per-100k case rate to a risk level.

    Bands are left-closed: [0, 10) Low, [10, 50) Moderate, [50, 100) Substantial,
    [100, inf) High with the default edges.
    """
    if rate is None or math.isnan(rate) or rate < 0:
        raise ValueError(f"rate must be a non-negative number, got {rate}")
    cfg = settings.ANALYTICS
    if rate < cfg.risk_moderate_rate:
        return RiskLevel.LOW
    if rate < cfg.risk_substantial_rate:
        return RiskLevel.MODERATE
    if rate < cfg.risk_high_rate:
        return RiskLevel.SUBSTANTIAL
    return RiskLevel.HIGH


def transmission_risk(avg_daily_cases: float, population: Optional[int]) -> Optional[RiskLevel]:
    """Risk level for an average daily case count, or None when the population is unknown."""
    if population is None:
        return None
    return classify_transmission_risk(weekly_rate_per_100k(avg_daily_cases, population))


# --- Bed Usage ---
def compare_bed_usage(current: int, previous: int) -> BedUsageComparison:
    if current > previous:
        change = BedUsageChange.GREATER
    elif current == previous:
        change = BedUsageChange.EQUAL
    else:
        change = BedUsageChange.LESS
    return BedUsageComparison(current=current, previous=previous, change=change, difference=abs(current - previous))


def _beds_used(row: pd.Series, total_col: str, available_col: str) -> int:
    when = f"{row['date']:%Y-%m-%d}"
    for col in (total_col, available_col):
        if pd.isna(row[col]):
            raise IncompleteObservation(col, when)
    return int(row[total_col]) - int(row[available_col])


def bed_census(series: pd.DataFrame, total_col: str = 'med_surg_total', available_col: str = 'med_surg_available') -> BedCensus:
    """Beds in use on the latest day compared with one and two weeks earlier (by position)."""
    one_week, two_weeks = settings.ANALYTICS.census_lookback_steps
    required = two_weeks + 1
    if len(series) < required:
        raise InsufficientHistory(required, len(series), context="bed census")

    last = len(series) - 1
    used_today = _beds_used(series.iloc[last], total_col, available_col)
    used_one_week = _beds_used(series.iloc[last - one_week], total_col, available_col)
    used_two_weeks = _beds_used(series.iloc[last - two_weeks], total_col, available_col)
    return BedCensus(
        beds_used=used_today,
        vs_one_week=compare_bed_usage(used_today, used_one_week),
        vs_two_weeks=compare_bed_usage(used_today, used_two_weeks),
    )


# --- Hospital & ICU Deltas ---
def day_over_day_delta(series: pd.DataFrame, field: str) -> DailyDelta:
    """
    Latest value of ``field`` and its change from the prior day.

    If the prior day's value is missing, the value two days back is used
    instead. This is a single fallback, not a search.
    """
    if len(series) < 2:
        raise InsufficientHistory(2, len(series), context=f"{field} daily change")

    values = series[field]
    dates = series['date']
    latest = values.iloc[-1]
    if pd.isna(latest):
        raise IncompleteObservation(field, f"{dates.iloc[-1]:%Y-%m-%d}")

    previous = values.iloc[-2]
    if pd.isna(previous):
        if len(series) < 3:
            raise InsufficientHistory(3, len(series), context=f"{field} daily change")
        previous = values.iloc[-3]
        if pd.isna(previous):
            raise IncompleteObservation(field, f"{dates.iloc[-3]:%Y-%m-%d}")
    return DailyDelta(latest=int(latest), previous=int(previous))


def icu_percent_full(latest_covid_icu: int, jurisdiction: JurisdictionConfig) -> float:
    """Share of the baseline ICU capacity in use, counting today's COVID ICU patients on top of the baseline load."""
    total = jurisdiction.icu_baseline_total
    in_use = total - jurisdiction.icu_baseline_free + latest_covid_icu
    return in_use * 100 / total
