# snapshot_signals_root/data_processing/__init__.py
# EXPLICIT PACKAGE API

"""
Initializes the data_processing package, defining its public API.

This file explicitly exports all public-facing functions from its submodules,
providing a single, consistent import point for the rest of the application.
"""

# --- Typed failures from errors.py ---
from .errors import (
    SignalsError,
    ReadFailure,
    UnparsableRow,
    InsufficientHistory,
    IncompleteObservation,
)

# --- Pipeline & Utilities from helpers.py ---
from .helpers import (
    DataPipeline,
    drop_provisional_tail,
    round_half_away_from_zero,
)

# --- Snapshot readers from loaders.py ---
from .loaders import (
    CAPACITY_FIELDS,
    load_cases_snapshot,
    load_capacity_snapshot,
    load_pcr_tests_snapshot,
    load_test_records,
)

# --- Join from joiner.py ---
from .joiner import (
    OBSERVATION_COLUMNS,
    empty_observations,
    join_snapshots,
)

# --- Series building from series.py ---
from .series import (
    build_jurisdiction_series,
    list_jurisdictions,
    fill_gaps,
    count_cases,
)


# --- Define the canonical public API for the package ---
__all__ = [
    # errors.py
    "SignalsError",
    "ReadFailure",
    "UnparsableRow",
    "InsufficientHistory",
    "IncompleteObservation",

    # helpers.py
    "DataPipeline",
    "drop_provisional_tail",
    "round_half_away_from_zero",

    # loaders.py
    "CAPACITY_FIELDS",
    "load_cases_snapshot",
    "load_capacity_snapshot",
    "load_pcr_tests_snapshot",
    "load_test_records",

    # joiner.py
    "OBSERVATION_COLUMNS",
    "empty_observations",
    "join_snapshots",

    # series.py
    "build_jurisdiction_series",
    "list_jurisdictions",
    "fill_gaps",
    "count_cases",
]
