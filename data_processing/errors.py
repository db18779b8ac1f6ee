# snapshot_signals_root/data_processing/errors.py
# TYPED FAILURES FOR THE SNAPSHOT PIPELINE

"""
Error kinds raised by the loaders and the aggregation functions.

Loaders raise ``ReadFailure`` and (in strict mode) ``UnparsableRow``.
Aggregations check their preconditions up front and raise
``InsufficientHistory`` or ``IncompleteObservation`` instead of letting a
positional lookup fail.
"""

from pathlib import Path
from typing import Optional, Union


class SignalsError(Exception):
    """Base class for every failure the pipeline reports per jurisdiction."""


class ReadFailure(SignalsError):
    """A snapshot file is missing or cannot be read."""

    def __init__(self, path: Union[str, Path], reason: str):
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"Could not read snapshot '{self.path}': {reason}")


class UnparsableRow(SignalsError, ValueError):
    """A row does not decode into the expected shape."""

    def __init__(self, source: str, row_number: int, detail: str):
        self.source = source
        self.row_number = row_number
        self.detail = detail
        super().__init__(f"({source}) Row {row_number} is malformed: {detail}")


class InsufficientHistory(SignalsError, ValueError):
    """A series is shorter than the trailing window an aggregation needs."""

    def __init__(self, required: int, available: int, context: Optional[str] = None):
        self.required = required
        self.available = available
        self.context = context
        prefix = f"{context}: " if context else ""
        super().__init__(f"{prefix}needs at least {required} observations, got {available}")


class IncompleteObservation(SignalsError, ValueError):
    """A value required for a calculation is missing on a specific day."""

    def __init__(self, field: str, when: Optional[str] = None):
        self.field = field
        self.when = when
        suffix = f" on {when}" if when else ""
        super().__init__(f"Missing '{field}'{suffix}")
