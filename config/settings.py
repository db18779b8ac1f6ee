# snapshot_signals_root/config/settings.py
# CENTRALIZED CONFIGURATION HUB

import logging
from datetime import date
from pathlib import Path
from typing import Dict, List, Literal, Optional, Tuple

from pydantic import BaseModel, Field, computed_field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

settings_logger = logging.getLogger(__name__)

# --- Nested Models for Structured Configuration ---
class SnapshotPaths(BaseModel):
    """Where the daily snapshot feeds live and how their file names are stamped."""
    data_dir: Path = Path("data_sources")
    tests_dir: Path = Path("data_sources/testday")
    cases_prefix: str = "daily"
    capacity_prefix: str = "today"
    pcr_prefix: str = "pcr_test_counts"
    stamp_format: str = "%Y%m%d"
    tests_stamp_format: str = "%m-%d-%Y"

    def _stamped(self, prefix: str, day: date) -> Path:
        return self.data_dir / f"{prefix}_{day.strftime(self.stamp_format)}.csv"

    def cases_file(self, day: date) -> Path:
        return self._stamped(self.cases_prefix, day)

    def capacity_file(self, day: date) -> Path:
        return self._stamped(self.capacity_prefix, day)

    def pcr_tests_file(self, day: date) -> Path:
        return self._stamped(self.pcr_prefix, day)

    def test_records_file(self, day: date) -> Path:
        return self.tests_dir / f"{day.strftime(self.tests_stamp_format)}.csv"


class AnalyticsConfig(BaseModel):
    window_days: int = 7
    step_offsets: Tuple[int, ...] = (0, 7, 14)
    risk_moderate_rate: float = 10.0; risk_substantial_rate: float = 50.0; risk_high_rate: float = 100.0
    weekday_num_windows: int = 16
    weekly_case_lookback_days: int = 7
    census_lookback_steps: Tuple[int, int] = (7, 14)
    chart_lookback_days: int = 60
    chart_start_date: date = date(2020, 10, 1)
    age_report_start_date: date = date(2021, 1, 1)

    @model_validator(mode='after')
    def check_ordering(self) -> 'AnalyticsConfig':
        steps = self.step_offsets
        if len(steps) != 3 or steps[0] != 0 or not (steps[0] < steps[1] < steps[2]):
            raise ValueError("step_offsets must be three increasing offsets starting at 0.")
        if not (0 < self.risk_moderate_rate < self.risk_substantial_rate < self.risk_high_rate):
            raise ValueError("Risk band edges must be positive and strictly increasing.")
        return self


class JurisdictionConfig(BaseModel):
    name: str
    display_name: str
    population: Optional[int] = Field(None, gt=0)
    icu_baseline_total: int = Field(560, gt=0)
    icu_baseline_free: int = Field(180, ge=0)


# --- Main Settings Class ---
class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix='SIGNALS_', case_sensitive=False, env_file='.env', env_file_encoding='utf-8', env_nested_delimiter='__', extra='ignore')

    PROJECT_ROOT_DIR: Path = Path(__file__).resolve().parent.parent
    APP_NAME: str = "Snapshot Signals"; APP_VERSION: str = "1.2.0"
    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "WARNING"
    LOG_FORMAT: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    LOG_DATE_FORMAT: str = "%Y-%m-%d %H:%M:%S"

    SNAPSHOTS: SnapshotPaths = SnapshotPaths()
    OUTPUT_DIR: Path = Path(".")

    @model_validator(mode='before')
    @classmethod
    def set_default_paths(cls, values):
        if isinstance(values, dict):
            root = Path(values.get('PROJECT_ROOT_DIR', Path(__file__).resolve().parent.parent))
            data = root / "data_sources"
            snapshots = values.get('SNAPSHOTS') or {}
            if isinstance(snapshots, dict):
                snapshots.setdefault('data_dir', data)
                snapshots.setdefault('tests_dir', data / "testday")
                values['SNAPSHOTS'] = snapshots
        return values

    ANALYTICS: AnalyticsConfig = AnalyticsConfig()

    JURISDICTIONS: List[JurisdictionConfig] = [
        JurisdictionConfig(name="Allegheny", display_name="Allegheny County", population=1213570),
        JurisdictionConfig(name="Pennsylvania", display_name="Pennsylvania", population=12964056, icu_baseline_total=4200, icu_baseline_free=1040),
        JurisdictionConfig(name="Philadelphia", display_name="Philadelphia County", population=1585480),
    ]
    CENSUS_JURISDICTION: str = "Pennsylvania"
    AGE_BUCKETS: List[str] = ["0 to 9", "10 to 19", "20 to 29", "30 to 39", "40 to 49", "50 to 59", "60 to 69", "70+", "unknown"]

    @computed_field
    @property
    def JURISDICTIONS_BY_NAME(self) -> Dict[str, JurisdictionConfig]: return {j.name: j for j in self.JURISDICTIONS}

    CHART_WIDTH_PX: int = 1024; CHART_HEIGHT_PX: int = 768
    COLOR_TEXT_PRIMARY: str = "#343A40"; COLOR_TEXT_HEADINGS: str = "#1A2557"; COLOR_TEXT_MUTED: str = "#6C757D"
    COLOR_BACKGROUND_CONTENT: str = "#FFFFFF"
    COLOR_DAILY_CASES: str = "#9BC4E2"; COLOR_AVG_CASES: str = "#1976D2"; COLOR_CURRENT_LEVEL: str = "#4D7BF3"
    COLOR_HOSPITALIZED: str = "#D32F2F"; COLOR_ICU: str = "#7B1FA2"
    PLOTLY_COLORWAY: List[str] = ["#1976D2", "#27AE60", "#FBC02D", "#D32F2F", "#546E7A", "#7B1FA2", "#00897B", "#F57C00"]

try:
    settings = Settings()
    settings_logger.info(f"Settings loaded successfully. App: {settings.APP_NAME} v{settings.APP_VERSION}")
except Exception as e:
    settings_logger.critical(f"FATAL: Could not initialize Pydantic settings. Error: {e}", exc_info=True)
    raise
