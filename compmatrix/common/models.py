# Copyright (c) 2024 Aiven, Helsinki, Finland. https://aiven.io/

from __future__ import annotations

from .constants import (
    DEFAULT_CONCURRENCY,
    DEFAULT_FIXED_BLOCK_SIZE,
    DEFAULT_MAX_FRAGMENT,
    DEFAULT_RANDOM_SEED,
    DEFAULT_READ_SIZE,
    DEFAULT_SCENARIO_TIMEOUT,
    SAMPLE_BYTES,
)
from .strenum import StrEnum
from typing import Dict, List

import pydantic


class AlgorithmId(StrEnum):
    identity = "identity"
    deflate = "deflate"
    gzip = "gzip"
    bz2 = "bz2"
    lzma = "lzma"
    zstd = "zstd"
    snappy = "snappy"


class IOKind(StrEnum):
    buffered_writer = "buffered-writer"
    buffered_reader = "buffered-reader"
    sink = "sink"
    stream = "stream"
    async_writer = "async-writer"
    async_reader = "async-reader"

    @property
    def is_async(self) -> bool:
        return self in (IOKind.async_writer, IOKind.async_reader)


class ChunkingStrategy(StrEnum):
    whole = "whole"
    byte_at_a_time = "byte-at-a-time"
    fixed_blocks = "fixed-blocks"
    seeded_random = "seeded-random"
    trailing_empty = "trailing-empty"


class Direction(StrEnum):
    encode = "encode"
    decode = "decode"


def default_payloads() -> Dict[str, bytes]:
    return {
        "empty": b"",
        "one-to-six": bytes([1, 2, 3, 4, 5, 6]),
        "sample-bytes": 100 * SAMPLE_BYTES,
    }


class HarnessModel(pydantic.BaseModel):
    # Extra values should be errors, as they are most likely typos
    model_config = pydantic.ConfigDict(extra="forbid", validate_default=True, frozen=True)


class ChunkingParams(HarnessModel):
    block_size: int = pydantic.Field(DEFAULT_FIXED_BLOCK_SIZE, ge=1)
    seed: int = DEFAULT_RANDOM_SEED
    max_fragment: int = pydantic.Field(DEFAULT_MAX_FRAGMENT, ge=1)


class MatrixConfig(HarnessModel):
    algorithms: List[AlgorithmId] = pydantic.Field(default_factory=lambda: list(AlgorithmId))
    io_kinds: List[IOKind] = pydantic.Field(default_factory=lambda: list(IOKind))
    strategies: List[ChunkingStrategy] = pydantic.Field(default_factory=lambda: list(ChunkingStrategy))
    directions: List[Direction] = pydantic.Field(default_factory=lambda: list(Direction))
    payloads: Dict[str, bytes] = pydantic.Field(default_factory=default_payloads)
    chunking: ChunkingParams = pydantic.Field(default_factory=ChunkingParams)
    include_malformed: bool = False
    # Skip algorithms whose optional library is not installed instead of failing their scenarios
    skip_unavailable: bool = True
    read_size: int = pydantic.Field(DEFAULT_READ_SIZE, ge=1)
    timeout: float = pydantic.Field(DEFAULT_SCENARIO_TIMEOUT, gt=0)
    max_concurrency: int = pydantic.Field(DEFAULT_CONCURRENCY, ge=1)
    double_finalize: bool = False
