# snapshot_signals_root/generate_data.py
# SYNTHETIC SNAPSHOT FEED GENERATOR

"""
Writes a deterministic set of snapshot CSVs shaped like the state feeds:
cases and hospital-capacity snapshots for today and a week earlier, PCR test
counts for today and yesterday, and an individual test-records file. Useful
for demos, manual runs of ``app.py`` and tests.
"""

import argparse
import logging
import sys
from datetime import date, datetime, timedelta
from pathlib import Path
from typing import Dict, Optional

import numpy as np
import pandas as pd

try:
    _project_root = Path(__file__).resolve().parent
    if str(_project_root) not in sys.path:
        sys.path.insert(0, str(_project_root))
    from config import JurisdictionConfig, SnapshotPaths, settings
except ImportError as e:
    print(f"FATAL ERROR in generate_data.py: configuration failed to import: {e}", file=sys.stderr)
    sys.exit(1)

logger = logging.getLogger(__name__)

# --- Configuration for Data Generation ---
DAYS_OF_DATA = 180
SEED = 20201001
STATE_DATE_FORMAT = "%m/%d/%Y"
RECORDS_DATE_FORMAT = "%Y-%m-%d"
CASE_STATUSES = ["Confirmed", "Probable", "Not a case"]
CASE_STATUS_WEIGHTS = [0.55, 0.15, 0.30]
AGE_BUCKET_WEIGHTS = [0.10, 0.14, 0.19, 0.15, 0.13, 0.12, 0.09, 0.07, 0.01]
# Weekend reporting dip, Monday first.
WEEKDAY_FACTORS = np.array([1.15, 1.10, 1.05, 1.0, 1.0, 0.75, 0.6])
DEFAULT_POPULATION = 1_000_000


def _daily_cases(rng: np.random.RandomState, dates: pd.DatetimeIndex, population: int) -> np.ndarray:
    """One wave over the period, weekday-modulated, Poisson noise."""
    t = np.linspace(0, np.pi, len(dates))
    base = population / 100_000 * (4 + 18 * np.sin(t) ** 2)
    expected = base * WEEKDAY_FACTORS[np.asarray(dates.weekday)]
    return rng.poisson(expected).astype(int)


def _capacity_rows(rng: np.random.RandomState, dates: pd.DatetimeIndex, jurisdiction: JurisdictionConfig,
                   cases: np.ndarray) -> pd.DataFrame:
    icu_total = jurisdiction.icu_baseline_total
    med_surg_total = icu_total * 6
    smoothed = pd.Series(cases).rolling(7, min_periods=1).mean().to_numpy()
    hospitalized = np.round(smoothed * 1.8 + rng.normal(0, 3, len(dates))).clip(0).astype(int)
    covid_icu = np.round(hospitalized * 0.2).astype(int)
    ventilator = np.round(covid_icu * 0.5).astype(int)
    icu_available = (jurisdiction.icu_baseline_free - covid_icu + rng.randint(-10, 10, len(dates))).clip(0)
    med_surg_available = (med_surg_total // 5 - hospitalized + rng.randint(-40, 40, len(dates))).clip(0)
    df = pd.DataFrame({
        'County': jurisdiction.name,
        'Date of data': dates.strftime(STATE_DATE_FORMAT),
        'Adult ICU Beds Available': icu_available,
        'Adult ICU Beds Total': icu_total,
        'Medical/Surgical Beds Available': med_surg_available,
        'Medical/Surgical Beds Total': med_surg_total,
        'COVID-19 Patients Hospitalized': hospitalized.astype(object),
        'COVID-19 Patients on Ventilators': ventilator,
        'COVID-ICU': covid_icu.astype(object),
    })
    # A few unreported days, as in the live feed.
    gaps = rng.choice(len(dates) - 2, size=max(1, len(dates) // 45), replace=False) + 1
    df.loc[gaps, 'COVID-19 Patients Hospitalized'] = ''
    df.loc[gaps, 'COVID-ICU'] = ''
    return df


def _test_records(rng: np.random.RandomState, dates: pd.DatetimeIndex, daily_cases: np.ndarray) -> pd.DataFrame:
    reports = np.repeat(dates.values, (daily_cases * 1.4).astype(int))
    n = len(reports)
    report_dates = pd.DatetimeIndex(reports)
    collection = report_dates - pd.to_timedelta(rng.randint(0, 4, n), unit='D')
    return pd.DataFrame({
        'indv_id': [f"ID{i:07d}" for i in range(n)],
        'collection_date': collection.strftime(RECORDS_DATE_FORMAT),
        'report_date': report_dates.strftime(RECORDS_DATE_FORMAT),
        'update_date': report_dates.strftime(RECORDS_DATE_FORMAT),
        'test_result': 'Positive',
        'case_status': rng.choice(CASE_STATUSES, size=n, p=CASE_STATUS_WEIGHTS),
        'hospital_flag': '', 'icu_flag': '', 'vent_flag': '',
        'age_bucket': rng.choice(settings.AGE_BUCKETS, size=n, p=AGE_BUCKET_WEIGHTS),
        'sex': rng.choice(['Male', 'Female'], size=n),
        'race': '', 'ethnicity': '',
    })


def build_synthetic_feeds(today: date, days: int = DAYS_OF_DATA, seed: int = SEED) -> Dict[str, pd.DataFrame]:
    """
    Full-history frames for every feed, in the raw CSV column layout.

    Output depends only on ``today``, ``days`` and ``seed``.
    """
    rng = np.random.RandomState(seed)
    dates = pd.date_range(end=pd.Timestamp(today), periods=days, freq='D')
    cases_frames, capacity_frames = [], []
    records = None
    for jurisdiction in settings.JURISDICTIONS:
        daily = _daily_cases(rng, dates, jurisdiction.population or DEFAULT_POPULATION)
        cases_frames.append(pd.DataFrame({
            'Jurisdiction': jurisdiction.name,
            'Date': dates.strftime(STATE_DATE_FORMAT),
            'New Cases': daily,
        }))
        capacity_frames.append(_capacity_rows(rng, dates, jurisdiction, daily))
        if records is None:
            records = _test_records(rng, dates, daily)

    pcr_days = pd.date_range(end=pd.Timestamp(today), periods=days, freq='D')
    pcr = pd.DataFrame({
        'Date': pcr_days.strftime(STATE_DATE_FORMAT),
        'New PCR Tests': rng.randint(15_000, 40_000, len(pcr_days)),
    })
    return {
        'cases': pd.concat(cases_frames, ignore_index=True),
        'capacity': pd.concat(capacity_frames, ignore_index=True),
        'pcr_tests': pcr,
        'test_records': records,
    }


def _as_of(df: pd.DataFrame, date_col: str, day: date, date_format: str = STATE_DATE_FORMAT) -> pd.DataFrame:
    parsed = pd.to_datetime(df[date_col], format=date_format)
    return df[parsed <= pd.Timestamp(day)]


def write_snapshots(today: date, paths: Optional[SnapshotPaths] = None, days: int = DAYS_OF_DATA, seed: int = SEED) -> SnapshotPaths:
    """Writes every snapshot file ``app.py`` reads for ``today``."""
    paths = paths or settings.SNAPSHOTS
    paths.data_dir.mkdir(parents=True, exist_ok=True)
    paths.tests_dir.mkdir(parents=True, exist_ok=True)
    feeds = build_synthetic_feeds(today, days=days, seed=seed)

    week_ago = today - timedelta(days=settings.ANALYTICS.weekly_case_lookback_days)
    yesterday = today - timedelta(days=1)
    for day in (today, week_ago):
        _as_of(feeds['cases'], 'Date', day).to_csv(paths.cases_file(day), index=False)
    _as_of(feeds['capacity'], 'Date of data', today).to_csv(paths.capacity_file(today), index=False)
    for day in (today, yesterday):
        _as_of(feeds['pcr_tests'], 'Date', day).to_csv(paths.pcr_tests_file(day), index=False)
    feeds['test_records'].to_csv(paths.test_records_file(today), index=False)

    logger.info(f"Wrote synthetic snapshots for {today:%Y-%m-%d} to {paths.data_dir.resolve()}")
    return paths


def main() -> None:
    parser = argparse.ArgumentParser(description="Write synthetic snapshot CSVs for a given day.")
    parser.add_argument("--date", default=None, help="Snapshot day (%%Y-%%m-%%d), defaults to today")
    parser.add_argument("--days", type=int, default=DAYS_OF_DATA, help="Days of history per jurisdiction")
    parser.add_argument("--seed", type=int, default=SEED)
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format=settings.LOG_FORMAT, datefmt=settings.LOG_DATE_FORMAT)
    today = datetime.strptime(args.date, "%Y-%m-%d").date() if args.date else date.today()
    paths = write_snapshots(today, days=args.days, seed=args.seed)
    print(f"Data saved to {paths.data_dir.resolve()}")
    print(f"Date range of generated snapshots: {today - timedelta(days=args.days - 1):%Y-%m-%d} to {today:%Y-%m-%d}")


if __name__ == "__main__":
    main()
