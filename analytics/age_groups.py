# snapshot_signals_root/analytics/age_groups.py
# CASES BY AGE GROUP FROM INDIVIDUAL TEST RECORDS

import logging
from datetime import date
from typing import List, Optional

import pandas as pd

from config import settings
from data_processing.helpers import round_half_away_from_zero

logger = logging.getLogger(__name__)

CASE_STATUSES = ('Probable', 'Confirmed')


def cases_by_age_group(
    test_records: pd.DataFrame,
    start_date: Optional[date] = None,
    buckets: Optional[List[str]] = None,
) -> pd.DataFrame:
    """
    Daily case counts per age bucket, by report date.

    Only records reported on or after ``start_date`` are considered. Every
    date between the first and last such report appears as a row; days with
    no cases in a bucket are 0. Buckets are matched case-insensitively and
    anything unrecognised is counted as "unknown".
    """
    buckets = buckets or settings.AGE_BUCKETS
    start = pd.Timestamp(start_date or settings.ANALYTICS.age_report_start_date)
    if not isinstance(test_records, pd.DataFrame) or test_records.empty:
        return pd.DataFrame(columns=buckets, dtype=int)

    recent = test_records[test_records['report_date'] >= start]
    if recent.empty:
        logger.info(f"No test records reported on or after {start:%Y-%m-%d}.")
        return pd.DataFrame(columns=buckets, dtype=int)

    cases = recent[recent['case_status'].isin(CASE_STATUSES)]
    all_days = pd.date_range(recent['report_date'].min(), recent['report_date'].max(), freq='D', name='report_date')
    if cases.empty:
        return pd.DataFrame(0, index=all_days, columns=pd.Index(buckets, name='age_bucket'))

    age_bucket = cases['age_bucket'].fillna('unknown').str.lower()
    age_bucket = age_bucket.where(age_bucket.isin(buckets), 'unknown')
    counts = (pd.crosstab(cases['report_date'], age_bucket)
              .reindex(index=all_days, columns=buckets, fill_value=0)
              .astype(int))
    counts.columns.name = 'age_bucket'
    logger.debug(f"Counted {len(cases)} cases over {len(all_days)} days.")
    return counts


def age_group_averages(daily_counts: pd.DataFrame, window: Optional[int] = None) -> pd.DataFrame:
    """Trailing-window average cases per age bucket, rounded half away from zero to whole cases."""
    window = window or settings.ANALYTICS.window_days
    if daily_counts.empty or len(daily_counts) < window:
        return daily_counts.iloc[0:0].astype(int)
    averages = (daily_counts.rolling(window).sum() / float(window)).iloc[window - 1:]
    return round_half_away_from_zero(averages).astype(int)
