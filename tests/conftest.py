# snapshot_signals_root/tests/conftest.py
# PYTEST FIXTURES

import sys
from pathlib import Path

# --- Path Setup for Module Imports ---
_project_root = Path(__file__).resolve().parent.parent
if str(_project_root) not in sys.path:
    sys.path.insert(0, str(_project_root))

from datetime import date
from typing import Optional, Sequence

import pandas as pd
import pytest

from config import SnapshotPaths
from data_processing import CAPACITY_FIELDS, OBSERVATION_COLUMNS
from generate_data import write_snapshots

REPORT_DAY = date(2021, 3, 15)


# --- Observation Builders ---

@pytest.fixture
def make_series():
    """
    Returns a builder for a joined single-jurisdiction observation frame.

    Case counts are given per day starting at ``start``; capacity fields default
    to fixed plausible values unless overridden with a per-day sequence.
    """
    def _build(
        counts: Sequence[Optional[int]],
        jurisdiction: str = "Allegheny",
        start: str = "2020-10-01",
        **overrides: Sequence[Optional[int]],
    ) -> pd.DataFrame:
        n = len(counts)
        data = {
            'jurisdiction': [jurisdiction] * n,
            'date': pd.date_range(start, periods=n, freq='D'),
            'icu_beds_available': [180] * n,
            'icu_beds_total': [560] * n,
            'med_surg_available': [800] * n,
            'med_surg_total': [3000] * n,
            'covid_hospitalized': [100] * n,
            'covid_ventilator': [10] * n,
            'covid_icu': [20] * n,
            'new_cases': list(counts),
        }
        data.update({key: list(values) for key, values in overrides.items()})
        df = pd.DataFrame(data)
        for col in CAPACITY_FIELDS + ['new_cases']:
            df[col] = df[col].astype('Int64')
        return df[OBSERVATION_COLUMNS]
    return _build


@pytest.fixture
def observations_df(make_series) -> pd.DataFrame:
    """Three jurisdictions with 22 days each: one rising, one falling, one too short to compare."""
    rising = make_series(list(range(1, 23)), jurisdiction="Allegheny")
    falling = make_series(list(range(44, 0, -2)), jurisdiction="Pennsylvania")
    short = make_series([5] * 10, jurisdiction="Philadelphia")
    return pd.concat([rising, falling, short], ignore_index=True)


# --- Snapshot File Fixtures ---

@pytest.fixture
def snapshot_paths(tmp_path: Path) -> SnapshotPaths:
    return SnapshotPaths(data_dir=tmp_path / "data", tests_dir=tmp_path / "data" / "testday")


@pytest.fixture
def synthetic_snapshots(snapshot_paths: SnapshotPaths) -> SnapshotPaths:
    """A complete, deterministic set of snapshot CSVs for REPORT_DAY."""
    return write_snapshots(REPORT_DAY, paths=snapshot_paths, days=130, seed=7)


@pytest.fixture
def write_csv(tmp_path: Path):
    """Writes raw CSV text to a file under tmp_path and returns its path."""
    def _write(name: str, text: str) -> Path:
        path = tmp_path / name
        path.write_text(text)
        return path
    return _write


@pytest.fixture
def report_day() -> date:
    return REPORT_DAY
