# Copyright (c) 2024 Aiven, Helsinki, Finland. https://aiven.io/
# See LICENSE for details
"""compmatrix"""

from .algos import Algorithm, AlgorithmRegistry, DEFAULT_REGISTRY
from .common.constants import IO_BLOCK_SIZE
from .common.models import AlgorithmId, ChunkingParams, ChunkingStrategy, Direction, IOKind, MatrixConfig
from .errors import (
    DoubleCloseError,
    InvalidConfigurationError,
    OutputMismatchError,
    UsedAfterCloseError,
)
from .factory import get_case_runner, get_notifier
from .impls import IOAdapterSet
from .input_stream import InputStream, one_to_six, one_to_six_stream
from .matrix import CaseRunner, FailureKind, MatrixReport, run_matrix, Scenario, ScenarioMatrix, ScenarioResult
from .notifier.interface import ResultNotifier
from .track_closed import AsyncTrackClosed, TrackClosed

__all__ = [
    "Algorithm",
    "AlgorithmId",
    "AlgorithmRegistry",
    "AsyncTrackClosed",
    "CaseRunner",
    "ChunkingParams",
    "ChunkingStrategy",
    "DEFAULT_REGISTRY",
    "Direction",
    "DoubleCloseError",
    "FailureKind",
    "get_case_runner",
    "get_notifier",
    "InputStream",
    "InvalidConfigurationError",
    "IO_BLOCK_SIZE",
    "IOAdapterSet",
    "IOKind",
    "MatrixConfig",
    "MatrixReport",
    "one_to_six",
    "one_to_six_stream",
    "OutputMismatchError",
    "ResultNotifier",
    "run_matrix",
    "Scenario",
    "ScenarioMatrix",
    "ScenarioResult",
    "TrackClosed",
    "UsedAfterCloseError",
]
