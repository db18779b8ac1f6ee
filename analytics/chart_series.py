# snapshot_signals_root/analytics/chart_series.py
# LABELLED DATE-INDEXED SERIES FOR THE CHART RENDERER

import logging
from dataclasses import dataclass, field
from typing import Dict, Optional

import pandas as pd

from data_processing.errors import InsufficientHistory
from data_processing.helpers import drop_provisional_tail
from data_processing.series import fill_gaps
from .windows import rolling_average_trace

logger = logging.getLogger(__name__)

DAILY_CASES_LABEL = "Daily new cases"
AVG_CASES_LABEL = "7 day avg new cases"
HOSPITALIZED_LABEL = "Total hospitalized"
ICU_LABEL = "ICU beds used"
CURRENT_LEVEL_LABEL = "Current Cases Level"


@dataclass
class ChartData:
    """Everything the chart renderer needs for one jurisdiction."""
    title: str
    traces: Dict[str, pd.Series] = field(default_factory=dict)
    current_level: int = 0
    peak_cases: int = 0


def build_chart_series(series: pd.DataFrame, title: str) -> ChartData:
    """
    Builds the display traces for one jurisdiction's series.

    Daily cases drop the provisional day and count missing days as zero. The
    trailing average is rounded to whole cases. Hospital and ICU traces cover
    every day, with gaps filled locally. The peak count covers every record,
    provisional day included, and sets the chart's y-axis headroom.
    """
    if series.empty:
        raise InsufficientHistory(1, 0, context="chart series")

    dates = pd.DatetimeIndex(series['date'], name='date')
    complete = drop_provisional_tail(series)
    daily = pd.Series(
        complete['new_cases'].fillna(0).astype(int).to_numpy(),
        index=pd.DatetimeIndex(complete['date'], name='date'),
        name=DAILY_CASES_LABEL,
    )
    average = rolling_average_trace(series, rounded=True).rename(AVG_CASES_LABEL)
    hospitalized = pd.Series(fill_gaps(series['covid_hospitalized']).to_numpy(), index=dates, name=HOSPITALIZED_LABEL)
    icu = pd.Series(fill_gaps(series['covid_icu']).to_numpy(), index=dates, name=ICU_LABEL)

    return ChartData(
        title=title,
        traces={
            DAILY_CASES_LABEL: daily,
            AVG_CASES_LABEL: average,
            HOSPITALIZED_LABEL: hospitalized,
            ICU_LABEL: icu,
        },
        current_level=int(average.iloc[-1]),
        peak_cases=int(series['new_cases'].fillna(0).max()),
    )


@dataclass(frozen=True)
class ChartSpec:
    """One chart to export: its file stem, its data, and how to frame the axes."""
    file_stem: str
    data: ChartData
    recent_days: Optional[int] = None
    y_truncate: bool = False
