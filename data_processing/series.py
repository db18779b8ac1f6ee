# snapshot_signals_root/data_processing/series.py
# PER-JURISDICTION SERIES BUILDING & GAP FILLING

"""
Turns the joined observation set into ordered single-jurisdiction series and
provides the gap filler used for display traces.

These functions are pure: they never modify their inputs and depend only on
their arguments.
"""

import logging
from typing import Iterable, List, Optional, Sequence, Union

import numpy as np
import pandas as pd

from .joiner import empty_observations

logger = logging.getLogger(__name__)


def build_jurisdiction_series(observations: Optional[pd.DataFrame], jurisdiction: str) -> pd.DataFrame:
    """
    Selects one jurisdiction's observations and orders them by date.

    Matching is exact and case-sensitive. The sort is stable, so rows sharing a
    date keep their input order. An unknown jurisdiction yields a valid
    zero-row series; consumers that need history raise ``InsufficientHistory``.

    Args:
        observations (pd.DataFrame): The joined observation set.
        jurisdiction (str): The jurisdiction identifier to select.

    Returns:
        A new DataFrame with a fresh 0..n-1 index, ascending by date.
    """
    if not isinstance(observations, pd.DataFrame) or observations.empty:
        return empty_observations()

    selected = observations[observations['jurisdiction'] == jurisdiction]
    if selected.empty:
        logger.debug(f"({jurisdiction}) No observations match this jurisdiction.")
        return observations.iloc[0:0].reset_index(drop=True)

    return selected.sort_values('date', kind='stable').reset_index(drop=True)


def list_jurisdictions(observations: Optional[pd.DataFrame]) -> List[str]:
    """Distinct jurisdictions in order of first appearance."""
    if not isinstance(observations, pd.DataFrame) or observations.empty:
        return []
    return list(pd.unique(observations['jurisdiction']))


def fill_gaps(values: Union[pd.Series, Sequence[Optional[int]], Iterable[Optional[int]]]) -> pd.Series:
    """
    Replaces missing observations with a local interpolation.

    Present values pass through. A missing first or last value becomes 0. A
    missing interior value becomes floor((left + right) / 2) over the *raw*
    neighbours, where a missing neighbour counts as 0; filled values never
    feed into their neighbours.

    >>> fill_gaps([None, 4, None, None, 8, None]).tolist()
    [0, 4, 2, 4, 8, 0]
    """
    if isinstance(values, pd.Series):
        raw = values.astype('Int64')
    else:
        raw = pd.Series(list(values), dtype='Int64')

    if raw.empty:
        return pd.Series([], dtype='int64', index=raw.index)

    neighbours = raw.shift(1).fillna(0) + raw.shift(-1).fillna(0)
    interpolated = neighbours // 2
    is_edge = pd.Series(False, index=raw.index)
    is_edge.iloc[[0, -1]] = True

    filled = raw.where(raw.notna(), interpolated.where(~is_edge, 0))
    return filled.astype('int64')


def count_cases(cases_df: Optional[pd.DataFrame], jurisdiction: str) -> int:
    """Total new cases a snapshot reports for one jurisdiction (missing counts as 0)."""
    if not isinstance(cases_df, pd.DataFrame) or cases_df.empty:
        return 0
    selected = cases_df.loc[cases_df['jurisdiction'] == jurisdiction, 'new_cases']
    return int(selected.fillna(0).sum())
