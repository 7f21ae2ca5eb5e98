"""
compmatrix - streaming compressor interface

Every I/O abstraction in this module is built on top of a single `Transformer`:
an object that turns input chunks into output chunks and emits whatever it
still buffers when finished. Encoders and decoders of every algorithm share it.

Copyright (c) 2016 Ohmu Ltd
Copyright (c) 2024 Aiven, Helsinki, Finland. https://aiven.io/
See LICENSE for details
"""
from __future__ import annotations

from .common.constants import IO_BLOCK_SIZE
from .common.models import AlgorithmId, Direction
from .errors import InvalidConfigurationError, MissingLibraryError, TruncatedStreamError
from .filewrap import FileWrap, Sink, Stream
from .typing import AsyncReadable, AsyncWritable, BinaryData, Compressor, Decompressor, Readable, Transformer, Writable
from typing import Optional

import bz2
import lzma
import zlib

try:
    import cramjam

    # Cramjam streaming classes are lazy and diverge from Compressor and Decompressor interfaces.
    # The compressor keeps everything in its inner buffer until flushed.
    class CramjamStreamingCompressor(Compressor):
        def __init__(self) -> None:
            self._compressor = cramjam.snappy.Compressor()

        def compress(self, data: bytes) -> bytes:
            self._compressor.compress(data)
            return b""

        def flush(self) -> bytes:
            buf = self._compressor.flush()
            return buf.read()

    # The framed snappy decoder only accepts complete streams, so input is held until the end
    class CramjamStreamingDecompressor(Decompressor):
        def __init__(self) -> None:
            self._pending = bytearray()

        def decompress(self, data: bytes) -> bytes:
            self._pending += data
            return b""

        def flush(self) -> bytes:
            data, self._pending = bytes(self._pending), bytearray()
            return bytes(cramjam.snappy.decompress(data)) if data else b""

except ImportError:
    cramjam = None  # type: ignore

try:
    import zstandard as zstd
except ImportError:
    zstd = None  # type: ignore

GZIP_WBITS = 16 + zlib.MAX_WBITS

DEFAULT_LEVELS = {
    AlgorithmId.deflate: 6,
    AlgorithmId.gzip: 6,
    AlgorithmId.bz2: 9,
    AlgorithmId.lzma: 6,
    AlgorithmId.zstd: 3,
}


def is_available(algorithm: AlgorithmId) -> bool:
    match algorithm:
        case AlgorithmId.snappy:
            return cramjam is not None
        case AlgorithmId.zstd:
            return zstd is not None
        case _:
            return True


def _require(algorithm: AlgorithmId) -> None:
    if not is_available(algorithm):
        raise MissingLibraryError(f"compression library for {algorithm} is not available")


def create_streaming_compressor(algorithm: AlgorithmId, level: Optional[int] = None) -> Compressor:
    _require(algorithm)
    if level is None:
        level = DEFAULT_LEVELS.get(algorithm, 0)
    compressor: Compressor
    match algorithm:
        case AlgorithmId.deflate:
            compressor = zlib.compressobj(level)
        case AlgorithmId.gzip:
            compressor = zlib.compressobj(level, zlib.DEFLATED, GZIP_WBITS)
        case AlgorithmId.bz2:
            compressor = bz2.BZ2Compressor(level)
        case AlgorithmId.lzma:
            compressor = lzma.LZMACompressor(lzma.FORMAT_XZ, -1, level, None)
        case AlgorithmId.snappy:
            compressor = CramjamStreamingCompressor()
        case AlgorithmId.zstd:
            compressor = zstd.ZstdCompressor(level=level).compressobj()
        case _:
            raise InvalidConfigurationError(f"invalid compression algorithm: {repr(algorithm)}")
    return compressor


def create_streaming_decompressor(algorithm: AlgorithmId) -> Decompressor:
    _require(algorithm)
    decompressor: Decompressor
    match algorithm:
        case AlgorithmId.deflate:
            decompressor = zlib.decompressobj()
        case AlgorithmId.gzip:
            decompressor = zlib.decompressobj(GZIP_WBITS)
        case AlgorithmId.bz2:
            decompressor = bz2.BZ2Decompressor()
        case AlgorithmId.lzma:
            decompressor = lzma.LZMADecompressor()
        case AlgorithmId.snappy:
            decompressor = CramjamStreamingDecompressor()
        case AlgorithmId.zstd:
            decompressor = zstd.ZstdDecompressor().decompressobj()
        case _:
            raise InvalidConfigurationError(f"invalid compression algorithm: {repr(algorithm)}")
    return decompressor


class IdentityTransformer(Transformer):
    def __init__(self) -> None:
        self.finished = False

    def process(self, data: bytes) -> bytes:
        return bytes(data)

    def finish(self) -> bytes:
        self.finished = True
        return b""


class CompressTransformer(Transformer):
    def __init__(self, compressor: Compressor) -> None:
        self._compressor = compressor
        self.finished = False

    def process(self, data: bytes) -> bytes:
        if not data:
            return b""
        return self._compressor.compress(data)

    def finish(self) -> bytes:
        if self.finished:
            return b""
        self.finished = True
        return self._compressor.flush() or b""


class DecompressTransformer(Transformer):
    """Wraps a decompressor; `check_eof` makes a missing end-of-stream marker an error"""

    def __init__(self, decompressor: Decompressor, *, check_eof: bool = False) -> None:
        self._decompressor = decompressor
        self._check_eof = check_eof
        self.finished = False

    def process(self, data: bytes) -> bytes:
        # stdlib decompressors raise EOFError when fed anything after the end of the stream, even b""
        if not data:
            return b""
        return self._decompressor.decompress(data)

    def finish(self) -> bytes:
        if self.finished:
            return b""
        self.finished = True
        flush = getattr(self._decompressor, "flush", None)
        data = flush() if flush is not None else b""
        if self._check_eof and not getattr(self._decompressor, "eof", True):
            raise TruncatedStreamError("compressed stream ended before the end-of-stream marker")
        return data or b""


def create_transformer(algorithm: AlgorithmId, direction: Direction, level: Optional[int] = None) -> Transformer:
    if algorithm == AlgorithmId.identity:
        return IdentityTransformer()
    if direction == Direction.encode:
        return CompressTransformer(create_streaming_compressor(algorithm, level))
    if direction == Direction.decode:
        check_eof = algorithm in (AlgorithmId.deflate, AlgorithmId.gzip, AlgorithmId.bz2, AlgorithmId.lzma)
        return DecompressTransformer(create_streaming_decompressor(algorithm), check_eof=check_eof)
    raise InvalidConfigurationError(f"invalid direction: {repr(direction)}")


class TransformWriter(FileWrap):
    """Buffered writer: transforms written data into the next file object"""

    def __init__(self, next_fp: Writable, transformer: Transformer) -> None:
        super().__init__(next_fp)
        self.transformer = transformer

    def write(self, data: BinaryData) -> int:  # type: ignore[override]
        self._check_not_closed()
        data_as_bytes = bytes(data)
        transformed = self.transformer.process(data_as_bytes)
        if transformed:
            self.next_fp.write(transformed)  # type: ignore[union-attr]
        self.offset += len(data_as_bytes)
        return len(data_as_bytes)

    def flush(self) -> None:
        self._check_not_closed()
        self.next_fp.flush()  # type: ignore[union-attr]

    def finish(self) -> None:
        """Write the trailer and flush; calling this again is a no-op"""
        self._check_not_closed()
        if self.transformer.finished:
            return
        data = self.transformer.finish()
        if data:
            self.next_fp.write(data)  # type: ignore[union-attr]
        self.next_fp.flush()  # type: ignore[union-attr]

    def _finalize(self) -> None:
        self.finish()

    def writable(self) -> bool:
        return True


class TransformReader(FileWrap):
    """Buffered reader: transforms data pulled from the next file object"""

    def __init__(self, next_fp: Readable, transformer: Transformer, *, read_size: int = IO_BLOCK_SIZE) -> None:
        super().__init__(next_fp)
        self.transformer = transformer
        self.read_size = read_size
        self._buffer = bytearray()
        self._src_done = False

    def _fill(self, size: int) -> None:
        while not self._src_done and (size < 0 or len(self._buffer) < size):
            src_data = self.next_fp.read(self.read_size)  # type: ignore[union-attr]
            if not src_data:
                self._src_done = True
                self._buffer += self.transformer.finish()
            else:
                self._buffer += self.transformer.process(src_data)
            if size > 0 and self._buffer:
                # return short rather than block on more input
                break

    def read(self, size: Optional[int] = -1) -> bytes:
        self._check_not_closed()
        if size == 0:
            return b""
        if size is None:
            size = -1
        self._fill(size)
        if size < 0:
            data = bytes(self._buffer)
            self._buffer.clear()
        else:
            data = bytes(self._buffer[:size])
            del self._buffer[:size]
        self.offset += len(data)
        return data

    def readable(self) -> bool:
        return True


class TransformSink(Sink):
    """Push-style transformation into the next sink"""

    def __init__(self, next_sink: Writable, transformer: Transformer) -> None:
        super().__init__(next_sink)
        self.transformer = transformer

    def write(self, data: BinaryData) -> int:
        self._check_not_closed()
        data = bytes(data) if not isinstance(data, bytes) else data
        self._write_to_next_sink(self.transformer.process(data))
        return len(data)

    def _finalize(self) -> bytes:
        return self.transformer.finish()


class TransformStream(Stream):
    """Non-seekable stream of data that applies the transformation on top of given source stream"""

    def __init__(self, src_fp: Readable, transformer: Transformer, *, minimum_read_size: int = 32 * 1024) -> None:
        super().__init__(src_fp, minimum_read_size=minimum_read_size)
        self.transformer = transformer

    def _process_chunk(self, data: bytes) -> bytes:
        return self.transformer.process(data)

    def _finalize(self) -> bytes:
        return self.transformer.finish()


class AsyncTransformReader:
    """Asynchronous reader transforming data awaited from the source"""

    def __init__(self, src: AsyncReadable, transformer: Transformer, *, read_size: int = IO_BLOCK_SIZE) -> None:
        self._src = src
        self.transformer = transformer
        self.read_size = read_size
        self._buffer = bytearray()
        self._src_done = False
        self.offset = 0
        self.closed = False

    async def read(self, size: int = -1) -> bytes:
        if self.closed:
            raise ValueError("I/O operation on closed file")
        if size == 0:
            return b""
        while not self._src_done and (size < 0 or not self._buffer):
            src_data = await self._src.read(self.read_size)
            if not src_data:
                self._src_done = True
                self._buffer += self.transformer.finish()
            else:
                self._buffer += self.transformer.process(src_data)
        if size < 0:
            data = bytes(self._buffer)
            self._buffer.clear()
        else:
            data = bytes(self._buffer[:size])
            del self._buffer[:size]
        self.offset += len(data)
        return data

    async def aclose(self) -> None:
        if self.closed:
            return
        self.closed = True
        await self._src.aclose()


class AsyncTransformWriter:
    """Asynchronous writer transforming data into the destination"""

    def __init__(self, dst: AsyncWritable, transformer: Transformer) -> None:
        self._dst = dst
        self.transformer = transformer
        self.offset = 0
        self.closed = False

    def _check_not_closed(self) -> None:
        if self.closed:
            raise ValueError("I/O operation on closed file")

    async def write(self, data: BinaryData) -> int:
        self._check_not_closed()
        data_as_bytes = bytes(data)
        transformed = self.transformer.process(data_as_bytes)
        if transformed:
            await self._dst.write(transformed)
        self.offset += len(data_as_bytes)
        return len(data_as_bytes)

    async def flush(self) -> None:
        self._check_not_closed()
        await self._dst.flush()

    async def finish(self) -> None:
        self._check_not_closed()
        if self.transformer.finished:
            return
        data = self.transformer.finish()
        if data:
            await self._dst.write(data)
        await self._dst.flush()

    async def aclose(self) -> None:
        if self.closed:
            return
        try:
            await self.finish()
        finally:
            self.closed = True
            await self._dst.aclose()
