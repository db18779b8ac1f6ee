# snapshot_signals_root/data_processing/loaders.py
# SNAPSHOT RECORD READERS

import logging
from pathlib import Path
from typing import Dict, List, Optional, Union

import pandas as pd
from pydantic import BaseModel, Field

from .errors import ReadFailure, UnparsableRow
from .helpers import DataPipeline

logger = logging.getLogger(__name__)

CAPACITY_FIELDS = [
    'icu_beds_available', 'icu_beds_total', 'med_surg_available', 'med_surg_total',
    'covid_hospitalized', 'covid_ventilator', 'covid_icu',
]

# --- Pydantic Models for Type-Safe Configuration ---

class CsvConfig(BaseModel):
    """Defines the schema for reading one snapshot feed into a typed frame."""
    rename_map: Dict[str, str] = Field(default_factory=dict)
    date_cols: List[str] = Field(default_factory=list)
    date_format: Optional[str] = None
    key_text_cols: List[str] = Field(default_factory=list)
    text_cols: List[str] = Field(default_factory=list)
    count_cols: List[str] = Field(default_factory=list)
    required_count_cols: List[str] = Field(default_factory=list)
    allow_negative_counts: bool = False
    required_cols: List[str] = Field(default_factory=list)

# --- Centralized Data Source Configuration ---

DATA_CONFIG: Dict[str, CsvConfig] = {
    'cases': CsvConfig(
        date_cols=['date'], date_format='%m/%d/%Y',
        key_text_cols=['jurisdiction'],
        count_cols=['new_cases'],
        required_cols=['jurisdiction', 'date'],
    ),
    'capacity': CsvConfig(
        rename_map={
            'county': 'jurisdiction', 'date_of_data': 'date',
            'adult_icu_beds_available': 'icu_beds_available', 'adult_icu_beds_total': 'icu_beds_total',
            'medical_surgical_beds_available': 'med_surg_available', 'medical_surgical_beds_total': 'med_surg_total',
            'covid_19_patients_hospitalized': 'covid_hospitalized', 'covid_19_patients_on_ventilators': 'covid_ventilator',
        },
        date_cols=['date'], date_format='%m/%d/%Y',
        key_text_cols=['jurisdiction'],
        count_cols=CAPACITY_FIELDS,
        required_cols=['jurisdiction', 'date'],
    ),
    'pcr_tests': CsvConfig(
        rename_map={'new_pcr_tests': 'new_tests'},
        text_cols=['date'],
        count_cols=['new_tests'], required_count_cols=['new_tests'], allow_negative_counts=True,
        required_cols=['new_tests'],
    ),
    'test_records': CsvConfig(
        date_cols=['collection_date', 'report_date', 'update_date'], date_format='%Y-%m-%d',
        text_cols=['indv_id', 'test_result', 'case_status', 'hospital_flag', 'icu_flag', 'vent_flag',
                   'age_bucket', 'sex', 'race', 'ethnicity'],
        required_cols=['collection_date', 'report_date', 'update_date', 'case_status', 'age_bucket'],
    ),
}

# --- Main Loading Functions ---

def _read_raw_csv(config_key: str, path: Path) -> pd.DataFrame:
    if not path.is_file():
        logger.error(f"({config_key}) CSV file not found at: {path}")
        raise ReadFailure(path, "file not found")
    try:
        return pd.read_csv(path, dtype=str, keep_default_na=False, na_values=[''])
    except pd.errors.EmptyDataError as e:
        raise ReadFailure(path, "file is empty") from e
    except (OSError, UnicodeDecodeError, pd.errors.ParserError) as e:
        logger.error(f"({config_key}) Failed to read CSV from {path}: {e}")
        raise ReadFailure(path, str(e)) from e


def _load_and_process_csv(config_key: str, path: Union[str, Path], strict: bool = False) -> pd.DataFrame:
    """
    Generic snapshot reader using the centralized configuration.

    Malformed rows are dropped and counted in the log; with ``strict`` the first
    one raises ``UnparsableRow`` instead. Row numbers refer to file lines
    (the header is line 1).
    """
    config = DATA_CONFIG[config_key]
    path = Path(path)
    raw_df = _read_raw_csv(config_key, path)

    pipeline = (DataPipeline(raw_df)
        .clean_column_names()
        .rename_columns(config.rename_map)
    )
    missing_cols = set(config.required_cols) - set(pipeline.df.columns)
    if missing_cols:
        logger.critical(f"({config_key}) Schema validation failed for {path}! Missing required columns: {sorted(missing_cols)}")
        raise ReadFailure(path, f"missing required columns {sorted(missing_cols)}")

    (pipeline
        .ensure_columns(config.count_cols + config.text_cols)
        .strip_text_columns(config.key_text_cols)
        .strip_text_columns(config.text_cols, required=False)
        .convert_date_columns(config.date_cols, date_format=config.date_format)
        .parse_count_columns(config.count_cols, allow_negative=config.allow_negative_counts)
        .require_values(config.required_count_cols)
    )

    if pipeline.malformed.any():
        first_bad = pipeline.df.index[pipeline.malformed][0]
        if strict:
            raise UnparsableRow(config_key, int(first_bad) + 2, pipeline.reasons[first_bad])
        logger.warning(f"({config_key}) Dropped {int(pipeline.malformed.sum())} malformed rows from {path}; first at line {int(first_bad) + 2}: {pipeline.reasons[first_bad]}")

    columns = config.key_text_cols + config.date_cols + config.text_cols + config.count_cols
    processed_df = pipeline.to_df().loc[~pipeline.malformed, list(dict.fromkeys(columns))].reset_index(drop=True)
    logger.info(f"({config_key}) Loaded {len(processed_df)} records from {path}.")
    return processed_df


def load_cases_snapshot(path: Union[str, Path], strict: bool = False) -> pd.DataFrame:
    """Reads a daily cases snapshot: jurisdiction, date, new_cases."""
    return _load_and_process_csv('cases', path, strict)


def load_capacity_snapshot(path: Union[str, Path], strict: bool = False) -> pd.DataFrame:
    """Reads a hospital capacity snapshot: jurisdiction, date and the capacity fields."""
    return _load_and_process_csv('capacity', path, strict)


def load_pcr_tests_snapshot(path: Union[str, Path], strict: bool = False) -> pd.DataFrame:
    return _load_and_process_csv('pcr_tests', path, strict)


def load_test_records(path: Union[str, Path], strict: bool = False) -> pd.DataFrame:
    """Reads the individual test-result feed used by the age-group report."""
    return _load_and_process_csv('test_records', path, strict)
