# snapshot_signals_root/data_processing/joiner.py
# SNAPSHOT JOIN: CASES ONTO CAPACITY

import logging
from typing import Optional

import pandas as pd

from .loaders import CAPACITY_FIELDS

logger = logging.getLogger(__name__)

JOIN_KEY = ['jurisdiction', 'date']
OBSERVATION_COLUMNS = JOIN_KEY + CAPACITY_FIELDS + ['new_cases']


def empty_observations() -> pd.DataFrame:
    """Returns a zero-row observation frame with the joined schema."""
    return pd.DataFrame({
        'jurisdiction': pd.Series(dtype=object),
        'date': pd.Series(dtype='datetime64[ns]'),
        **{col: pd.Series(dtype='Int64') for col in CAPACITY_FIELDS + ['new_cases']},
    })


def join_snapshots(cases_df: Optional[pd.DataFrame], capacity_df: Optional[pd.DataFrame]) -> pd.DataFrame:
    """
    Attaches each capacity row's new-case count from the cases snapshot.

    The cases table is keyed on the composite (jurisdiction, date) key; when a
    key repeats, the last row read wins. Capacity rows with no matching case
    row keep ``new_cases`` as <NA>. Every capacity row survives the join,
    so the result has exactly one row per capacity row.
    """
    if not isinstance(capacity_df, pd.DataFrame) or capacity_df.empty:
        return empty_observations()

    observations = capacity_df.drop(columns=['new_cases'], errors='ignore').copy()
    for col in CAPACITY_FIELDS:
        if col not in observations.columns:
            observations[col] = pd.Series(pd.NA, index=observations.index, dtype='Int64')

    if not isinstance(cases_df, pd.DataFrame) or cases_df.empty:
        observations['new_cases'] = pd.Series(pd.NA, index=observations.index, dtype='Int64')
        return observations[OBSERVATION_COLUMNS]

    case_lookup = cases_df.drop_duplicates(subset=JOIN_KEY, keep='last')[JOIN_KEY + ['new_cases']]
    duplicates = len(cases_df) - len(case_lookup)
    if duplicates:
        logger.debug(f"Cases snapshot repeated {duplicates} (jurisdiction, date) keys; kept the last of each.")

    joined = observations.merge(case_lookup, on=JOIN_KEY, how='left', validate='many_to_one', sort=False)
    joined['new_cases'] = joined['new_cases'].astype('Int64')
    matched = int(joined['new_cases'].notna().sum())
    logger.info(f"Joined {len(joined)} capacity rows with case counts ({matched} matched).")
    return joined[OBSERVATION_COLUMNS]
