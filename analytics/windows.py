# snapshot_signals_root/analytics/windows.py
# TRAILING WINDOW AGGREGATION

"""
Fixed-width trailing averages over a single-jurisdiction series.

Positions are counted back from the end of the sequence. ``step`` is an
offset in days: step 0 is the most recent complete window, step 7 the one a
week earlier, and so on. Every function checks its length requirement before
slicing and raises ``InsufficientHistory`` when the series is too short.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Optional, Sequence, Union

import numpy as np
import pandas as pd
from numpy.lib.stride_tricks import sliding_window_view

from config import settings
from data_processing.errors import InsufficientHistory
from data_processing.helpers import drop_provisional_tail, round_half_away_from_zero

logger = logging.getLogger(__name__)

NumericSequence = Union[pd.Series, Sequence[float], np.ndarray]


@dataclass(frozen=True)
class StepComparison:
    """Seven-day average new cases this week and one and two weeks earlier."""

    this_week: float
    one_week_ago: float
    two_weeks_ago: float

    @property
    def highest_recent(self) -> float:
        """The larger of the two most recent weeks (step 0 or step 7)."""
        return max(self.this_week, self.one_week_ago)

    @property
    def is_rising(self) -> bool:
        return self.this_week > self.one_week_ago


def case_counts(series: pd.DataFrame) -> pd.Series:
    """Daily new-case counts of a series as floats, with missing days counted as zero."""
    if series.empty:
        return pd.Series([], dtype=float)
    return series['new_cases'].astype('Float64').fillna(0).astype(float).reset_index(drop=True)


def trailing_average(values: NumericSequence, step: int = 0, window: Optional[int] = None) -> float:
    """
    Averages the ``window`` values that end ``step`` positions before the end.

    The sequence passed here has already had its provisional day removed, so
    for ``n`` values the window is ``values[n - window - step : n - step]``.
    The sum is divided by the window width with no rounding.
    """
    window = window or settings.ANALYTICS.window_days
    if step < 0:
        raise ValueError(f"step must be non-negative, got {step}")
    arr = np.asarray(values, dtype=float)
    required = window + step
    if len(arr) < required:
        raise InsufficientHistory(required, len(arr), context=f"{window}-day average at step {step}")
    end = len(arr) - step
    return float(arr[end - window:end].sum() / float(window))


def step_averages(series: pd.DataFrame, steps: Optional[Sequence[int]] = None, window: Optional[int] = None) -> Dict[int, float]:
    """
    Seven-day average new cases at each step offset.

    The series must hold ``window + max(steps) + 1`` observations: the extra
    one is the provisional most recent day, which is dropped before windowing.
    """
    window = window or settings.ANALYTICS.window_days
    steps = tuple(steps) if steps is not None else settings.ANALYTICS.step_offsets
    required = window + max(steps) + 1
    if len(series) < required:
        raise InsufficientHistory(required, len(series), context=f"{window}-day averages at steps {list(steps)}")

    counts = case_counts(drop_provisional_tail(series))
    return {step: trailing_average(counts, step, window) for step in steps}


def step_comparison(series: pd.DataFrame) -> StepComparison:
    """This-week vs. one- and two-weeks-ago averages for one jurisdiction's series."""
    this_week, one_week, two_weeks = settings.ANALYTICS.step_offsets
    averages = step_averages(series, (this_week, one_week, two_weeks))
    return StepComparison(
        this_week=averages[this_week],
        one_week_ago=averages[one_week],
        two_weeks_ago=averages[two_weeks],
    )


def rolling_average_trace(series: pd.DataFrame, window: Optional[int] = None, rounded: bool = False) -> pd.Series:
    """
    The full trailing-average trace for display.

    The provisional day is dropped, then every position with a complete window
    (from index ``window - 1`` on) gets the mean of the window ending there,
    labelled with that position's date. With ``rounded`` the values are rounded
    half away from zero to whole cases.
    """
    window = window or settings.ANALYTICS.window_days
    required = window + 1
    if len(series) < required:
        raise InsufficientHistory(required, len(series), context=f"{window}-day average trace")

    complete = drop_provisional_tail(series)
    counts = case_counts(complete).to_numpy()
    averages = sliding_window_view(counts, window).sum(axis=1) / float(window)
    dates = pd.DatetimeIndex(complete['date'].iloc[window - 1:], name='date')

    trace = pd.Series(averages, index=dates, name=f"{window} day avg new cases")
    if rounded:
        trace = round_half_away_from_zero(trace).astype(int)
    return trace
