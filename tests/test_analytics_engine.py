# snapshot_signals_root/tests/test_analytics_engine.py
# ANALYTICS ENGINE TESTS

from datetime import timedelta

import numpy as np
import pandas as pd
import pytest
from pydantic import ValidationError

from analytics import (
    BedUsageChange,
    RiskLevel,
    analyze_jurisdiction,
    bed_census,
    build_age_report,
    build_chart_series,
    build_daily_report,
    build_weekday_report,
    age_group_averages,
    cases_by_age_group,
    classify_transmission_risk,
    compare_bed_usage,
    count_case_delta,
    day_over_day_delta,
    decompose_weekday_bias,
    find_rising_jurisdictions,
    icu_percent_full,
    rolling_average_trace,
    step_averages,
    step_comparison,
    trailing_average,
    transmission_risk,
    weekly_rate_per_100k,
)
from config import JurisdictionConfig, settings
from data_processing import (
    IncompleteObservation,
    InsufficientHistory,
    ReadFailure,
    load_cases_snapshot,
)
from reporting import render_daily_report

# Fixtures are sourced from conftest.py


# --- Window Aggregator Tests ---
def test_trailing_average_full_window():
    assert trailing_average([1, 2, 3, 4, 5, 6, 7], step=0) == 4.0


def test_trailing_average_constant_sequence():
    values = [6] * 14
    assert trailing_average(values, step=0) == 6.0
    assert trailing_average(values, step=7) == 6.0


def test_trailing_average_too_short_raises():
    with pytest.raises(InsufficientHistory) as exc_info:
        trailing_average([1, 2, 3, 4, 5, 6, 7], step=1)
    assert exc_info.value.required == 8


def test_step_comparison_requires_22_observations(make_series):
    # Eight daily counts from 10 to 20; the last is provisional.
    counts = [10, 11, 13, 14, 16, 17, 19, 20]
    with pytest.raises(InsufficientHistory) as exc_info:
        step_comparison(make_series(counts))
    assert exc_info.value.required == 22
    assert exc_info.value.available == 8


def test_step_comparison_drops_provisional_day(make_series):
    # Counts 1..22; after dropping 22 the windows are 15-21, 8-14 and 1-7.
    steps = step_comparison(make_series(list(range(1, 23))))
    assert steps.this_week == pytest.approx(18.0)
    assert steps.one_week_ago == pytest.approx(11.0)
    assert steps.two_weeks_ago == pytest.approx(4.0)
    assert steps.highest_recent == pytest.approx(18.0)
    assert steps.is_rising


def test_step_averages_count_missing_days_as_zero(make_series):
    counts = [7] * 21 + [100]
    counts[20] = None
    averages = step_averages(make_series(counts), steps=(0,))
    assert averages[0] == pytest.approx(6.0)


def test_highest_recent_guards_against_low_reporting_week(make_series):
    counts = [0] * 7 + [14] * 7 + [0] * 7 + [999]
    steps = step_comparison(make_series(counts))
    assert steps.this_week == 0.0
    assert steps.highest_recent == pytest.approx(14.0)


def test_rolling_average_trace_starts_at_first_full_window(make_series):
    trace = rolling_average_trace(make_series([1, 2, 3, 4, 5, 6, 7, 8, 9]))
    assert len(trace) == 2
    assert trace.iloc[0] == pytest.approx(4.0)
    assert trace.index[0] == pd.Timestamp("2020-10-07")
    assert trace.index[-1] == pd.Timestamp("2020-10-08")


def test_rolling_average_trace_rounds_half_away_from_zero(make_series):
    # A 2-day window over 1 and 2 averages 1.5.
    trace = rolling_average_trace(make_series([1, 2, 9]), window=2, rounded=True)
    assert trace.tolist() == [2]


# --- Trend Classifier Tests ---
@pytest.mark.parametrize("rate, expected", [
    (0.0, RiskLevel.LOW),
    (9.99, RiskLevel.LOW),
    (10.0, RiskLevel.MODERATE),
    (49.999, RiskLevel.MODERATE),
    (50.0, RiskLevel.SUBSTANTIAL),
    (100.0, RiskLevel.HIGH),
    (2500.0, RiskLevel.HIGH),
])
def test_risk_bands_are_left_closed(rate, expected):
    assert classify_transmission_risk(rate) is expected


def test_risk_rejects_invalid_rates():
    with pytest.raises(ValueError):
        classify_transmission_risk(-1.0)
    with pytest.raises(ValueError):
        classify_transmission_risk(float("nan"))


def test_weekly_rate_and_missing_population():
    assert weekly_rate_per_100k(10.0, 100_000) == pytest.approx(70.0)
    assert transmission_risk(10.0, 100_000) is RiskLevel.SUBSTANTIAL
    assert transmission_risk(10.0, None) is None


def test_compare_bed_usage():
    assert compare_bed_usage(120, 100).change is BedUsageChange.GREATER
    assert compare_bed_usage(100, 100).change is BedUsageChange.EQUAL
    less = compare_bed_usage(80, 100)
    assert less.change is BedUsageChange.LESS
    assert less.difference == 20
    assert less.change.phrase == "less"


def test_bed_census_compares_by_position(make_series):
    available = [800] * 15
    available[0] = 850   # two weeks back: 2150 used
    available[7] = 800   # one week back: 2200 used
    available[14] = 820  # today: 2180 used
    census = bed_census(make_series([1] * 15, med_surg_available=available))
    assert census.beds_used == 2180
    assert census.vs_one_week.change is BedUsageChange.LESS
    assert census.vs_one_week.difference == 20
    assert census.vs_two_weeks.change is BedUsageChange.GREATER
    assert census.vs_two_weeks.difference == 30


def test_bed_census_needs_15_observations(make_series):
    with pytest.raises(InsufficientHistory):
        bed_census(make_series([1] * 14))


def test_bed_census_missing_value_is_incomplete(make_series):
    totals = [3000] * 15
    totals[7] = None
    with pytest.raises(IncompleteObservation):
        bed_census(make_series([1] * 15, med_surg_total=totals))


def test_day_over_day_delta(make_series):
    delta = day_over_day_delta(make_series([1, 1, 1], covid_hospitalized=[90, 100, 97]), 'covid_hospitalized')
    assert (delta.latest, delta.previous, delta.change) == (97, 100, -3)


def test_day_over_day_delta_single_step_fallback(make_series):
    series = make_series([1, 1, 1], covid_icu=[20, None, 25])
    delta = day_over_day_delta(series, 'covid_icu')
    assert delta.previous == 20
    assert delta.change == 5

    with pytest.raises(IncompleteObservation):
        day_over_day_delta(make_series([1, 1, 1, 1], covid_icu=[20, None, None, 25]), 'covid_icu')


def test_day_over_day_delta_missing_latest(make_series):
    with pytest.raises(IncompleteObservation):
        day_over_day_delta(make_series([1, 1], covid_icu=[20, None]), 'covid_icu')


def test_icu_percent_full():
    county = JurisdictionConfig(name="Allegheny", display_name="Allegheny County", icu_baseline_total=560, icu_baseline_free=180)
    assert icu_percent_full(20, county) == pytest.approx(400 * 100 / 560)


@pytest.mark.parametrize("baseline", [{"icu_baseline_total": 0}, {"icu_baseline_total": -5}, {"icu_baseline_free": -1}])
def test_jurisdiction_config_rejects_unusable_icu_baseline(baseline):
    with pytest.raises(ValidationError):
        JurisdictionConfig(name="Allegheny", display_name="Allegheny County", **baseline)


# --- Weekday Decomposer Tests ---
def test_weekday_weights_uniform_for_constant_counts(make_series):
    weights = decompose_weekday_bias(make_series([5] * (16 * 7 + 1)))
    assert len(weights) == 7
    assert np.allclose(weights.to_numpy(), 1 / 7)
    assert weights.sum() == pytest.approx(1.0)


def test_weekday_weights_follow_reporting_pattern(make_series):
    # 2020-10-05 is a Monday; report 14 cases on Mondays and 1 otherwise for 4 weeks.
    counts = [14 if i % 7 == 0 else 1 for i in range(4 * 7)] + [0]
    weights = decompose_weekday_bias(make_series(counts, start="2020-10-05"), num_windows=4)
    assert weights[0] == pytest.approx(14 / 20)
    assert weights[6] == pytest.approx(1 / 20)


def test_weekday_skips_zero_total_weeks(make_series):
    counts = [0] * 7 + [3] * (15 * 7) + [3]
    weights = decompose_weekday_bias(make_series(counts))
    assert weights.sum() == pytest.approx(15 / 16)


def test_weekday_requires_full_windows(make_series):
    with pytest.raises(InsufficientHistory):
        decompose_weekday_bias(make_series([5] * (16 * 7)))


# --- Age Group Tests ---
def _test_records(rows):
    df = pd.DataFrame(rows, columns=['report_date', 'case_status', 'age_bucket'])
    df['report_date'] = pd.to_datetime(df['report_date'])
    return df


def test_cases_by_age_group_counts_cases_only():
    records = _test_records([
        ('2021-01-01', 'Confirmed', '20 to 29'),
        ('2021-01-01', 'Probable', '20 TO 29'),
        ('2021-01-01', 'Not a case', '20 to 29'),
        ('2021-01-03', 'Confirmed', 'martian'),
        ('2020-12-31', 'Confirmed', '70+'),
    ])
    counts = cases_by_age_group(records)
    assert counts.index.tolist() == list(pd.date_range('2021-01-01', '2021-01-03'))
    assert counts.loc['2021-01-01', '20 to 29'] == 2
    assert counts.loc['2021-01-03', 'unknown'] == 1
    assert counts.loc['2021-01-02'].sum() == 0
    assert counts['70+'].sum() == 0
    assert list(counts.columns) == settings.AGE_BUCKETS


def test_age_group_averages_round_half_away_from_zero():
    days = pd.date_range('2021-01-01', periods=8)
    daily = pd.DataFrame({'0 to 9': [1, 0, 0, 0, 0, 0, 2, 7]}, index=days)
    averages = age_group_averages(daily, window=2)
    assert averages.index[0] == days[1]
    assert averages['0 to 9'].tolist() == [1, 0, 0, 0, 0, 1, 5]


def test_age_group_averages_short_input_is_empty():
    daily = pd.DataFrame({'0 to 9': [1, 2]}, index=pd.date_range('2021-01-01', periods=2))
    assert age_group_averages(daily).empty


# --- Chart Series Tests ---
def test_build_chart_series_labels_and_current_level(make_series):
    series = make_series([7] * 10 + [500], covid_hospitalized=[10, None] + [12] * 9)
    chart = build_chart_series(series, title="Allegheny County")
    assert list(chart.traces) == ["Daily new cases", "7 day avg new cases", "Total hospitalized", "ICU beds used"]
    assert len(chart.traces["Daily new cases"]) == 10
    assert chart.traces["Total hospitalized"].iloc[1] == 11
    assert chart.current_level == 7


def test_build_chart_series_empty_raises(make_series):
    with pytest.raises(InsufficientHistory):
        build_chart_series(make_series([]), title="Nowhere")


# --- Orchestrator Tests ---
def test_analyze_jurisdiction_isolates_failures(observations_df):
    philly = settings.JURISDICTIONS_BY_NAME["Philadelphia"]
    report = analyze_jurisdiction(observations_df, philly, new_cases_reported=12, with_charts=False)
    assert report.hospitalized is not None
    assert report.steps is None and report.risk_level is None
    assert any("Case averages" in err for err in report.errors)
    assert report.new_cases_reported == 12


def test_analyze_jurisdiction_success_builds_three_charts(observations_df):
    county = settings.JURISDICTIONS_BY_NAME["Allegheny"]
    report = analyze_jurisdiction(observations_df, county)
    assert report.errors == []
    assert report.risk_level is RiskLevel.MODERATE
    assert [c.file_stem for c in report.charts] == [
        "Allegheny County", "Allegheny County_60days", "Allegheny County_trunc",
    ]
    assert report.charts[1].recent_days == 60
    assert report.charts[2].y_truncate


def test_find_rising_jurisdictions(observations_df):
    rising = find_rising_jurisdictions(observations_df)
    assert [r.name for r in rising] == ["Allegheny"]


def test_count_case_delta():
    today = pd.DataFrame({'jurisdiction': ['A', 'A', 'A'], 'new_cases': pd.array([1, 2, 3], dtype='Int64')})
    earlier = pd.DataFrame({'jurisdiction': ['A', 'A'], 'new_cases': pd.array([1, 2], dtype='Int64')})
    assert count_case_delta(today, earlier, 'A') == 3


def test_build_daily_report_from_snapshots(synthetic_snapshots, report_day):
    report = build_daily_report(report_day, paths=synthetic_snapshots, with_charts=False)
    assert [j.name for j in report.jurisdictions] == ["Allegheny", "Pennsylvania", "Philadelphia"]
    assert report.errors == []
    assert report.pcr_new_tests is not None
    assert report.census is not None

    today_cases = load_cases_snapshot(synthetic_snapshots.cases_file(report_day))
    allegheny = today_cases[today_cases['jurisdiction'] == 'Allegheny'].sort_values('date')
    expected_new = int(allegheny['new_cases'].iloc[-7:].sum())
    assert report.jurisdictions[0].new_cases_reported == expected_new
    for section in report.jurisdictions:
        assert section.steps is not None
        assert section.risk_level is not None


def test_build_daily_report_is_idempotent(synthetic_snapshots, report_day):
    first = build_daily_report(report_day, paths=synthetic_snapshots, with_charts=False)
    second = build_daily_report(report_day, paths=synthetic_snapshots, with_charts=False)
    assert first == second
    assert render_daily_report(first) == render_daily_report(second)


def test_build_daily_report_tolerates_missing_optional_snapshots(synthetic_snapshots, report_day):
    synthetic_snapshots.cases_file(report_day - timedelta(days=7)).unlink()
    synthetic_snapshots.pcr_tests_file(report_day - timedelta(days=1)).unlink()
    report = build_daily_report(report_day, paths=synthetic_snapshots, with_charts=False)
    assert all(j.new_cases_reported is None for j in report.jurisdictions)
    assert report.pcr_new_tests is None
    assert len(report.errors) == 2


def test_build_daily_report_missing_capacity_is_fatal(synthetic_snapshots, report_day):
    synthetic_snapshots.capacity_file(report_day).unlink()
    with pytest.raises(ReadFailure):
        build_daily_report(report_day, paths=synthetic_snapshots, with_charts=False)


def test_build_weekday_report(synthetic_snapshots, report_day):
    report = build_weekday_report(report_day, paths=synthetic_snapshots)
    assert report.jurisdiction == settings.CENSUS_JURISDICTION
    assert report.weights.sum() == pytest.approx(1.0)
    # The synthetic feed under-reports on weekends.
    assert report.weights[6] < report.weights[0]


def test_build_age_report(synthetic_snapshots, report_day):
    report = build_age_report(report_day, paths=synthetic_snapshots)
    assert list(report.daily_counts.columns) == settings.AGE_BUCKETS
    assert len(report.averages) == len(report.daily_counts) - 6
    assert (report.averages >= 0).all().all()
