"""Domain models for the heat timeline validation pipeline.

Row, operation, heat and error shapes flow through the pipeline as frozen
dataclasses; the unit table is static read-only data.
"""

from .config_models import PipelineConfig
from .heat import Heat, Operation
from .processing_result import FileStat, PipelineResult, RunResult, RunStats
from .raw_row import RawRow
from .units import UNIT_TABLE, UnitInfo, lookup_unit
from .validation_error import ErrorKind, ValidationError

__all__ = [
    # Configuration
    "PipelineConfig",
    # Pipeline shapes
    "RawRow",
    "Operation",
    "Heat",
    "ErrorKind",
    "ValidationError",
    # Results
    "PipelineResult",
    "FileStat",
    "RunResult",
    "RunStats",
    # Static tables
    "UNIT_TABLE",
    "UnitInfo",
    "lookup_unit",
]
