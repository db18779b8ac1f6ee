# snapshot_signals_root/analytics/orchestrator.py
# REPORT ORCHESTRATION PIPELINE

import logging
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import List, Optional, Tuple

import pandas as pd

from config import JurisdictionConfig, SnapshotPaths, settings
from data_processing import (
    ReadFailure,
    SignalsError,
    build_jurisdiction_series,
    count_cases,
    join_snapshots,
    list_jurisdictions,
    load_capacity_snapshot,
    load_cases_snapshot,
    load_pcr_tests_snapshot,
    load_test_records,
)
from .age_groups import age_group_averages, cases_by_age_group
from .chart_series import ChartSpec, build_chart_series
from .trends import (
    BedCensus,
    DailyDelta,
    RiskLevel,
    bed_census,
    day_over_day_delta,
    icu_percent_full,
    transmission_risk,
)
from .weekday import decompose_weekday_bias
from .windows import StepComparison, step_comparison

logger = logging.getLogger(__name__)


# --- Result Containers ---
@dataclass
class JurisdictionReport:
    name: str
    display_name: str
    observation_count: int = 0
    new_cases_reported: Optional[int] = None
    hospitalized: Optional[DailyDelta] = None
    icu: Optional[DailyDelta] = None
    icu_percent_full: Optional[float] = None
    steps: Optional[StepComparison] = None
    risk_level: Optional[RiskLevel] = None
    charts: List[ChartSpec] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)

@dataclass(frozen=True)
class RisingJurisdiction:
    name: str
    steps: StepComparison

@dataclass
class DailyReport:
    report_date: date
    jurisdictions: List[JurisdictionReport] = field(default_factory=list)
    pcr_new_tests: Optional[int] = None
    census_jurisdiction: str = ""
    census: Optional[BedCensus] = None
    rising: List[RisingJurisdiction] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)

@dataclass
class WeekdayReport:
    report_date: date
    jurisdiction: str
    weights: pd.Series

@dataclass
class AgeReport:
    report_date: date
    daily_counts: pd.DataFrame
    averages: pd.DataFrame


# --- Per-Jurisdiction Pipeline ---
class JurisdictionAnalyzer:
    """
    Runs every derived signal for one jurisdiction. Each step is isolated: a
    typed failure is recorded on the report and the remaining steps still run.
    """
    def __init__(self, observations: pd.DataFrame, jurisdiction: JurisdictionConfig,
                 new_cases_reported: Optional[int] = None, with_charts: bool = True):
        self.jurisdiction = jurisdiction
        self.series = build_jurisdiction_series(observations, jurisdiction.name)
        self.with_charts = with_charts
        self.report = JurisdictionReport(
            name=jurisdiction.name,
            display_name=jurisdiction.display_name,
            observation_count=len(self.series),
            new_cases_reported=new_cases_reported,
        )

    def _record_failure(self, step: str, error: SignalsError) -> None:
        msg = f"{step}: {error}"
        self.report.errors.append(msg)
        logger.warning(f"({self.jurisdiction.name}) {msg}")

    def _apply_hospital_delta(self) -> 'JurisdictionAnalyzer':
        try:
            self.report.hospitalized = day_over_day_delta(self.series, 'covid_hospitalized')
        except SignalsError as e:
            self._record_failure("Hospitalizations", e)
        return self

    def _apply_icu_status(self) -> 'JurisdictionAnalyzer':
        try:
            self.report.icu = day_over_day_delta(self.series, 'covid_icu')
            self.report.icu_percent_full = icu_percent_full(self.report.icu.latest, self.jurisdiction)
        except SignalsError as e:
            self._record_failure("ICU", e)
        return self

    def _apply_step_comparison(self) -> 'JurisdictionAnalyzer':
        try:
            self.report.steps = step_comparison(self.series)
            self.report.risk_level = transmission_risk(self.report.steps.highest_recent, self.jurisdiction.population)
        except SignalsError as e:
            self._record_failure("Case averages", e)
        return self

    def _apply_chart_series(self) -> 'JurisdictionAnalyzer':
        if not self.with_charts:
            return self
        name = self.jurisdiction.display_name
        lookback = settings.ANALYTICS.chart_lookback_days
        try:
            full = build_chart_series(self.series, title=name)
            self.report.charts = [
                ChartSpec(name, full),
                ChartSpec(f"{name}_{lookback}days", build_chart_series(self.series.tail(lookback), title=name), recent_days=lookback),
                ChartSpec(f"{name}_trunc", full, y_truncate=True),
            ]
        except SignalsError as e:
            self._record_failure("Charts", e)
        return self

    def run(self) -> JurisdictionReport:
        logger.info(f"({self.jurisdiction.name}) Analyzing {len(self.series)} observations.")
        (self
            ._apply_hospital_delta()
            ._apply_icu_status()
            ._apply_step_comparison()
            ._apply_chart_series()
        )
        return self.report


def analyze_jurisdiction(
    observations: pd.DataFrame,
    jurisdiction: JurisdictionConfig,
    new_cases_reported: Optional[int] = None,
    with_charts: bool = True,
) -> JurisdictionReport:
    """Public factory function for a single jurisdiction's report section."""
    return JurisdictionAnalyzer(observations, jurisdiction, new_cases_reported, with_charts).run()


def find_rising_jurisdictions(observations: pd.DataFrame) -> List[RisingJurisdiction]:
    """Jurisdictions whose 7-day average is above last week's, in first-appearance order."""
    rising = []
    for name in list_jurisdictions(observations):
        try:
            steps = step_comparison(build_jurisdiction_series(observations, name))
        except SignalsError as e:
            logger.info(f"({name}) Skipped in rising scan: {e}")
            continue
        if steps.is_rising:
            rising.append(RisingJurisdiction(name=name, steps=steps))
    return rising


def count_case_delta(today_cases: pd.DataFrame, earlier_cases: pd.DataFrame, jurisdiction: str) -> int:
    """Change in a jurisdiction's cumulative reported cases between two cases snapshots."""
    return count_cases(today_cases, jurisdiction) - count_cases(earlier_cases, jurisdiction)


def pcr_test_delta(paths: SnapshotPaths, today: date) -> int:
    """New PCR test results: today's PCR snapshot total minus yesterday's."""
    yesterday = today - timedelta(days=1)
    today_total = int(load_pcr_tests_snapshot(paths.pcr_tests_file(today))['new_tests'].sum())
    yesterday_total = int(load_pcr_tests_snapshot(paths.pcr_tests_file(yesterday))['new_tests'].sum())
    return today_total - yesterday_total


def load_observations(paths: SnapshotPaths, today: date) -> Tuple[pd.DataFrame, pd.DataFrame]:
    """
    Reads today's cases and capacity snapshots and joins them.

    Returns the joined observations and the raw cases snapshot. A ReadFailure
    here is fatal for the run.
    """
    cases_df = load_cases_snapshot(paths.cases_file(today))
    capacity_df = load_capacity_snapshot(paths.capacity_file(today))
    return join_snapshots(cases_df, capacity_df), cases_df


# --- Report Builders ---
def build_daily_report(today: date, paths: Optional[SnapshotPaths] = None, with_charts: bool = True) -> DailyReport:
    """
    Recomputes every derived signal for ``today`` from the raw snapshot files.

    Only missing or unreadable cases/capacity snapshots for ``today`` abort the
    run. Everything else is recorded on the report and skipped.
    """
    paths = paths or settings.SNAPSHOTS
    observations, today_cases = load_observations(paths, today)
    report = DailyReport(report_date=today, census_jurisdiction=settings.CENSUS_JURISDICTION)

    lookback = today - timedelta(days=settings.ANALYTICS.weekly_case_lookback_days)
    try:
        earlier_cases = load_cases_snapshot(paths.cases_file(lookback))
    except ReadFailure as e:
        report.errors.append(f"Weekly new cases: {e}")
        logger.warning(f"Weekly new-case counts unavailable: {e}")
        earlier_cases = None

    for jurisdiction in settings.JURISDICTIONS:
        new_cases = None if earlier_cases is None else count_case_delta(today_cases, earlier_cases, jurisdiction.name)
        report.jurisdictions.append(analyze_jurisdiction(observations, jurisdiction, new_cases, with_charts))

    try:
        report.pcr_new_tests = pcr_test_delta(paths, today)
    except ReadFailure as e:
        report.errors.append(f"PCR tests: {e}")
        logger.warning(f"PCR test count unavailable: {e}")

    try:
        report.census = bed_census(build_jurisdiction_series(observations, settings.CENSUS_JURISDICTION))
    except SignalsError as e:
        report.errors.append(f"Bed census: {e}")
        logger.warning(f"({settings.CENSUS_JURISDICTION}) Bed census unavailable: {e}")

    report.rising = find_rising_jurisdictions(observations)
    return report


def build_weekday_report(today: date, paths: Optional[SnapshotPaths] = None, jurisdiction: Optional[str] = None) -> WeekdayReport:
    """Weekday share of cases for the census jurisdiction over the configured number of weeks."""
    paths = paths or settings.SNAPSHOTS
    jurisdiction = jurisdiction or settings.CENSUS_JURISDICTION
    observations, _ = load_observations(paths, today)
    series = build_jurisdiction_series(observations, jurisdiction)
    return WeekdayReport(report_date=today, jurisdiction=jurisdiction, weights=decompose_weekday_bias(series))


def build_age_report(today: date, paths: Optional[SnapshotPaths] = None) -> AgeReport:
    """Daily and trailing-average case counts per age group from the test-records feed."""
    paths = paths or settings.SNAPSHOTS
    daily_counts = cases_by_age_group(load_test_records(paths.test_records_file(today)))
    return AgeReport(report_date=today, daily_counts=daily_counts, averages=age_group_averages(daily_counts))
