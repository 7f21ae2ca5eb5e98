# Copyright (c) 2024 Aiven, Helsinki, Finland. https://aiven.io/
# See LICENSE for details
"""compmatrix - algorithm registry

Maps an algorithm id to its trusted single-shot transforms, a factory for the
streaming transformers exercised by the scenarios, and the edge parameters
that shape the scenarios built for it.
"""

from __future__ import annotations

from . import compressor
from .common.models import AlgorithmId, Direction
from .compressor import DEFAULT_LEVELS, GZIP_WBITS
from .errors import InvalidConfigurationError, MissingLibraryError
from .typing import Transformer
from dataclasses import dataclass
from typing import Callable, Iterable, List, Mapping, Optional

import bz2
import lzma
import zlib

Transform = Callable[[bytes], bytes]


@dataclass(frozen=True)
class Algorithm:
    name: AlgorithmId
    encode: Transform
    decode: Transform
    level: Optional[int] = None
    # Largest fragment size worth using for fixed-size chunking, if the format has a natural block size
    max_block_size: Optional[int] = None
    # Format ends with a trailer that is only written when the encoder is finished
    has_trailer: bool = True
    # Streaming output is byte-identical to the single-shot encoding regardless of chunking
    exact_framing: bool = False
    # Decoder reports a stream that ends before its end-of-stream marker
    detects_truncation: bool = False

    def new_transformer(self, direction: Direction) -> Transformer:
        return compressor.create_transformer(self.name, direction, self.level)

    def new_encoder(self) -> Transformer:
        return self.new_transformer(Direction.encode)

    def new_decoder(self) -> Transformer:
        return self.new_transformer(Direction.decode)

    @property
    def available(self) -> bool:
        return compressor.is_available(self.name)


def _zstd_encode(data: bytes) -> bytes:
    return compressor.zstd.ZstdCompressor(level=DEFAULT_LEVELS[AlgorithmId.zstd]).compress(data)


def _zstd_decode(data: bytes) -> bytes:
    # streamed frames carry no content size, which the one-shot decompress() requires
    return compressor.zstd.ZstdDecompressor().decompressobj().decompress(data)


def _snappy_encode(data: bytes) -> bytes:
    return bytes(compressor.cramjam.snappy.compress(data))


def _snappy_decode(data: bytes) -> bytes:
    return bytes(compressor.cramjam.snappy.decompress(data))


def _default_algorithms() -> List[Algorithm]:
    deflate_level = DEFAULT_LEVELS[AlgorithmId.deflate]
    gzip_level = DEFAULT_LEVELS[AlgorithmId.gzip]
    bz2_level = DEFAULT_LEVELS[AlgorithmId.bz2]
    lzma_level = DEFAULT_LEVELS[AlgorithmId.lzma]
    return [
        Algorithm(
            name=AlgorithmId.identity,
            encode=bytes,
            decode=bytes,
            has_trailer=False,
            exact_framing=True,
        ),
        Algorithm(
            name=AlgorithmId.deflate,
            encode=lambda data: zlib.compress(data, deflate_level),
            decode=zlib.decompress,
            level=deflate_level,
            exact_framing=True,
            detects_truncation=True,
        ),
        Algorithm(
            name=AlgorithmId.gzip,
            encode=lambda data: zlib.compress(data, gzip_level, wbits=GZIP_WBITS),
            decode=lambda data: zlib.decompress(data, wbits=GZIP_WBITS),
            level=gzip_level,
            exact_framing=True,
            detects_truncation=True,
        ),
        Algorithm(
            name=AlgorithmId.bz2,
            encode=lambda data: bz2.compress(data, bz2_level),
            decode=bz2.decompress,
            level=bz2_level,
            max_block_size=bz2_level * 100_000,
            exact_framing=True,
            detects_truncation=True,
        ),
        Algorithm(
            name=AlgorithmId.lzma,
            encode=lambda data: lzma.compress(data, format=lzma.FORMAT_XZ, preset=lzma_level),
            decode=lzma.decompress,
            level=lzma_level,
            detects_truncation=True,
        ),
        Algorithm(
            name=AlgorithmId.zstd,
            encode=_zstd_encode,
            decode=_zstd_decode,
            level=DEFAULT_LEVELS[AlgorithmId.zstd],
            max_block_size=128 * 1024,
        ),
        Algorithm(
            name=AlgorithmId.snappy,
            encode=_snappy_encode,
            decode=_snappy_decode,
            max_block_size=64 * 1024,
            has_trailer=False,
        ),
    ]


class AlgorithmRegistry:
    """Read-only lookup of algorithms; safe to share between concurrently running scenarios"""

    def __init__(self, algorithms: Optional[Iterable[Algorithm]] = None) -> None:
        entries = _default_algorithms() if algorithms is None else list(algorithms)
        self._algorithms: Mapping[AlgorithmId, Algorithm] = {algorithm.name: algorithm for algorithm in entries}

    def get(self, name: AlgorithmId | str) -> Algorithm:
        algorithm_id = AlgorithmId.of(name) if not isinstance(name, AlgorithmId) else name
        if algorithm_id is None or algorithm_id not in self._algorithms:
            raise InvalidConfigurationError(f"unknown compression algorithm: {repr(name)}")
        algorithm = self._algorithms[algorithm_id]
        if not algorithm.available:
            raise MissingLibraryError(f"compression library for {algorithm_id} is not available")
        return algorithm

    def available(self) -> List[AlgorithmId]:
        return [name for name, algorithm in self._algorithms.items() if algorithm.available]

    def __contains__(self, name: object) -> bool:
        return name in self._algorithms

    def __iter__(self):
        return iter(self._algorithms.values())


DEFAULT_REGISTRY = AlgorithmRegistry()
