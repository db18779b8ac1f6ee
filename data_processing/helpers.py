# snapshot_signals_root/data_processing/helpers.py
# FLUENT CLEANING PIPELINE & SHARED SERIES UTILITIES

"""
A collection of utility functions and a fluent DataPipeline class used to turn
raw snapshot CSV frames into typed record frames.
"""
import logging
import re
from collections import Counter
from typing import Any, Dict, List, Optional, Sequence, TypeVar, Union

import numpy as np
import pandas as pd

logger = logging.getLogger(__name__)

COUNT_PATTERN = r"\+?\d+"
SIGNED_COUNT_PATTERN = r"[+-]?\d+"
INT64_MIN, INT64_MAX = int(np.iinfo(np.int64).min), int(np.iinfo(np.int64).max)

SeqLike = TypeVar("SeqLike", pd.Series, pd.DataFrame, list, tuple, np.ndarray)

# --- Standalone Utility Functions ---

def drop_provisional_tail(values: SeqLike) -> SeqLike:
    """
    Drops the most recent observation, whose same-day count is provisional.

    Every smoothed trace, step window and weekday decomposition goes through
    this helper so the convention is applied identically everywhere.
    """
    if isinstance(values, (pd.Series, pd.DataFrame)):
        return values.iloc[:-1]
    return values[:-1]


def round_half_away_from_zero(values: Union[float, np.ndarray, pd.Series]) -> Union[float, np.ndarray, pd.Series]:
    """Rounds to the nearest integer, with .5 going away from zero (not banker's rounding)."""
    return np.sign(values) * np.floor(np.abs(values) + 0.5)


# --- Fluent Pipeline ---
class DataPipeline:
    """
    A fluent interface for applying a sequence of cleaning operations to a raw
    snapshot frame. Rows that fail to decode are flagged in ``malformed`` as the
    pipeline runs, so a caller can drop or reject them in one place.

    Usage:
        pipeline = (DataPipeline(raw_df)
                    .clean_column_names()
                    .rename_columns({'date_of_data': 'date'})
                    .convert_date_columns(['date'], date_format='%m/%d/%Y')
                    .parse_count_columns(['new_cases']))
        clean_df, bad_rows = pipeline.to_df(), pipeline.malformed
    """
    def __init__(self, df: pd.DataFrame):
        if not isinstance(df, pd.DataFrame):
            raise TypeError("DataPipeline must be initialized with a pandas DataFrame.")
        self.df = df.copy()
        self.malformed = pd.Series(False, index=self.df.index)
        self.reasons: Dict[Any, str] = {}

    def to_df(self) -> pd.DataFrame:
        """Returns the processed DataFrame."""
        return self.df

    def _flag(self, mask: pd.Series, reason: str) -> None:
        new_rows = mask & ~self.malformed
        for idx in self.df.index[new_rows]:
            self.reasons[idx] = reason
        self.malformed = self.malformed | mask

    def clean_column_names(self) -> 'DataPipeline':
        """
        Cleans DataFrame column names for consistency and usability.
        (Lowercase, underscore-separated, no duplicates).
        """
        if len(self.df.columns) == 0:
            return self

        new_cols = (self.df.columns.astype(str).str.lower()
                    .str.replace(r'[^0-9a-zA-Z_]+', '_', regex=True)
                    .str.replace(r'__+', '_', regex=True).str.strip('_'))
        new_cols = [f"unnamed_col_{i}" if not name else name for i, name in enumerate(new_cols)]

        counts = Counter(new_cols)
        if max(counts.values()) > 1:
            seen_counts: Counter = Counter()
            final_cols = []
            for name in new_cols:
                if counts[name] > 1:
                    seen_counts[name] += 1
                    final_cols.append(f"{name}_{seen_counts[name]-1}")
                else:
                    final_cols.append(name)
            self.df.columns = final_cols
        else:
            self.df.columns = new_cols
        return self

    def rename_columns(self, rename_map: Dict[str, str]) -> 'DataPipeline':
        if rename_map:
            self.df = self.df.rename(columns=rename_map)
        return self

    def ensure_columns(self, columns: Sequence[str]) -> 'DataPipeline':
        """Adds any absent optional column as all-missing."""
        for col in columns:
            if col not in self.df.columns:
                self.df[col] = pd.NA
        return self

    def strip_text_columns(self, columns: Sequence[str], required: bool = True) -> 'DataPipeline':
        for col in columns:
            if col in self.df.columns:
                self.df[col] = self.df[col].astype(object).map(lambda v: (v.strip() or None) if isinstance(v, str) else None)
                if required:
                    self._flag(self.df[col].isna(), f"'{col}' is empty")
        return self

    def convert_date_columns(self, date_columns: List[str], date_format: Optional[str] = None) -> 'DataPipeline':
        """Parses date columns (no time component); unparsable or missing dates mark the row malformed."""
        for col in date_columns:
            if col not in self.df.columns:
                continue
            parsed = pd.to_datetime(self.df[col], format=date_format, errors='coerce')
            self._flag(parsed.isna(), f"'{col}' is not a valid date")
            self.df[col] = parsed.dt.normalize()
        return self

    def parse_count_columns(self, count_columns: List[str], allow_negative: bool = False) -> 'DataPipeline':
        """
        Parses optional integer columns into pandas' nullable Int64.

        Blank cells become <NA>. A non-blank cell that is not written as a plain
        whole number (``1e3`` and ``4.0`` are rejected), is negative unless
        ``allow_negative``, or does not fit in Int64 marks the row malformed.
        """
        pattern = re.compile(SIGNED_COUNT_PATTERN if allow_negative else COUNT_PATTERN)
        for col in count_columns:
            if col not in self.df.columns:
                continue
            parsed, invalid = [], []
            for value in self.df[col].astype(object).tolist():
                text = value.strip() if isinstance(value, str) else ('' if pd.isna(value) else str(value))
                count = int(text) if pattern.fullmatch(text) else None
                bad = text != '' and (count is None or not INT64_MIN <= count <= INT64_MAX)
                parsed.append(None if bad else count)
                invalid.append(bad)
            self._flag(pd.Series(invalid, index=self.df.index, dtype=bool), f"'{col}' is not a valid count")
            self.df[col] = pd.Series(pd.array(parsed, dtype='Int64'), index=self.df.index)
        return self

    def require_values(self, columns: Sequence[str]) -> 'DataPipeline':
        """Marks rows malformed where a mandatory column ended up missing."""
        for col in columns:
            if col in self.df.columns:
                self._flag(self.df[col].isna(), f"'{col}' is required")
        return self
