# snapshot_signals_root/analytics/weekday.py
# WEEKDAY REPORTING-BIAS DECOMPOSITION

import calendar
import logging
from typing import Optional

import numpy as np
import pandas as pd

from config import settings
from data_processing.errors import InsufficientHistory
from data_processing.helpers import drop_provisional_tail
from .windows import case_counts

logger = logging.getLogger(__name__)

WEEKDAY_NAMES = list(calendar.day_name)


def decompose_weekday_bias(series: pd.DataFrame, num_windows: Optional[int] = None) -> pd.Series:
    """
    Attributes recent case totals to the day of the week they were reported on.

    The provisional day is dropped and the last ``num_windows`` full weeks are
    split into consecutive 7-day chunks. Each observation adds
    ``count / (chunk_total * num_windows)`` to its weekday. A chunk with zero
    cases contributes nothing, so the weights sum to 1.0 only when every chunk
    had cases.

    Returns:
        A Series of seven weights indexed Monday=0 .. Sunday=6.
    """
    num_windows = num_windows or settings.ANALYTICS.weekday_num_windows
    window = settings.ANALYTICS.window_days
    analysis_length = num_windows * window
    required = analysis_length + 1
    if len(series) < required:
        raise InsufficientHistory(required, len(series), context=f"weekday decomposition over {num_windows} weeks")

    recent = drop_provisional_tail(series).iloc[-analysis_length:]
    counts = case_counts(recent)
    weekdays = pd.Series(pd.DatetimeIndex(recent['date']).weekday, index=counts.index)
    chunk_ids = pd.Series(np.arange(analysis_length) // window, index=counts.index)

    chunk_totals = counts.groupby(chunk_ids).transform('sum')
    empty_chunks = sorted(set(chunk_ids[chunk_totals == 0]))
    if empty_chunks:
        logger.warning(f"Skipped {len(empty_chunks)} week(s) with no reported cases in the weekday decomposition.")

    usable = chunk_totals > 0
    shares = counts[usable] / (chunk_totals[usable] * num_windows)
    weights = shares.groupby(weekdays[usable]).sum().reindex(range(7), fill_value=0.0)
    weights.index.name = 'weekday'
    return weights.rename('share_of_cases').astype(float)
