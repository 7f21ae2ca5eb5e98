# Copyright (c) 2024 Aiven, Helsinki, Finland. https://aiven.io/
# See LICENSE for details
"""compmatrix - I/O adapters

Each I/O abstraction of the codec layer is driven through the same small
interface: submit one fragment, finalize, close, collect the output. Writer and
sink kinds push every fragment through the codec as it is submitted. Reader and
stream kinds queue the fragments in their source and pull the codec dry on
finalize, probing with a zero-size read first.
"""

from __future__ import annotations

from .common.constants import DEFAULT_READ_SIZE
from .common.models import IOKind
from .compressor import (
    AsyncTransformReader,
    AsyncTransformWriter,
    TransformReader,
    TransformSink,
    TransformStream,
    TransformWriter,
)
from .errors import InvalidConfigurationError, OutputMismatchError
from .input_stream import AsyncFragmentReader, AsyncOutputCollector, FragmentReader, OutputCollector
from .track_closed import AsyncTrackClosed, TrackClosed
from .typing import Transformer
from abc import ABC, abstractmethod
from typing import Any, Dict, Tuple, Type, Union

import logging

LOG = logging.getLogger(__name__)

Tracker = Union[TrackClosed[Any], AsyncTrackClosed[Any]]


class IOAdapter(ABC):
    kind: IOKind

    def __init__(self, transformer: Transformer, read_size: int = DEFAULT_READ_SIZE) -> None:
        self.transformer = transformer
        self.read_size = read_size
        self.finalized = False

    @property
    @abstractmethod
    def tracker(self) -> Tracker:
        """The close tracker around the resource the codec owns"""

    @abstractmethod
    def submit(self, fragment: bytes) -> None:
        """Hand one fragment to the codec"""

    @abstractmethod
    def finalize(self) -> None:
        """Flush any trailer; a second call must not change the output"""

    @abstractmethod
    def close(self) -> None:
        """Close the codec, which in turn must close the tracked resource exactly once"""

    @abstractmethod
    def output(self) -> bytes:
        """Everything the codec produced so far"""


class AsyncIOAdapter(ABC):
    kind: IOKind

    def __init__(self, transformer: Transformer, read_size: int = DEFAULT_READ_SIZE) -> None:
        self.transformer = transformer
        self.read_size = read_size
        self.finalized = False

    @property
    @abstractmethod
    def tracker(self) -> Tracker:
        """The close tracker around the resource the codec owns"""

    @abstractmethod
    async def submit(self, fragment: bytes) -> None:
        """Hand one fragment to the codec"""

    @abstractmethod
    async def finalize(self) -> None:
        """Flush any trailer; a second call must not change the output"""

    @abstractmethod
    async def close(self) -> None:
        """Close the codec, which in turn must close the tracked resource exactly once"""

    @abstractmethod
    def output(self) -> bytes:
        """Everything the codec produced so far"""


def _check_zero_size_read(data: bytes, kind: IOKind) -> None:
    if data != b"":
        raise OutputMismatchError(f"{kind} returned {len(data)} bytes for a zero-size read", offset=0)


class BufferedWriterAdapter(IOAdapter):
    kind = IOKind.buffered_writer

    def __init__(self, transformer: Transformer, read_size: int = DEFAULT_READ_SIZE) -> None:
        super().__init__(transformer, read_size)
        self._tracker: TrackClosed[OutputCollector] = TrackClosed(OutputCollector())
        self._writer = TransformWriter(self._tracker, transformer)

    @property
    def tracker(self) -> TrackClosed[OutputCollector]:
        return self._tracker

    def submit(self, fragment: bytes) -> None:
        written = self._writer.write(fragment)
        if written != len(fragment):
            raise OutputMismatchError(f"short write: {written} of {len(fragment)} bytes accepted")

    def finalize(self) -> None:
        self._writer.finish()
        self.finalized = True

    def close(self) -> None:
        self._writer.close()

    def output(self) -> bytes:
        return self._tracker.get_ref().getvalue()


class SinkAdapter(IOAdapter):
    kind = IOKind.sink

    def __init__(self, transformer: Transformer, read_size: int = DEFAULT_READ_SIZE) -> None:
        super().__init__(transformer, read_size)
        self._tracker: TrackClosed[OutputCollector] = TrackClosed(OutputCollector())
        self._sink = TransformSink(self._tracker, transformer)

    @property
    def tracker(self) -> TrackClosed[OutputCollector]:
        return self._tracker

    def submit(self, fragment: bytes) -> None:
        self._sink.write(fragment)

    def finalize(self) -> None:
        self._sink.finish()
        self.finalized = True

    def close(self) -> None:
        self._sink.close()

    def output(self) -> bytes:
        return self._tracker.get_ref().getvalue()


class _PullAdapter(IOAdapter):
    """Shared logic of the adapters that read transformed data out of a queued source"""

    def __init__(self, transformer: Transformer, read_size: int = DEFAULT_READ_SIZE) -> None:
        super().__init__(transformer, read_size)
        self._source = FragmentReader()
        self._tracker: TrackClosed[FragmentReader] = TrackClosed(self._source)
        self._output = bytearray()

    @property
    def tracker(self) -> TrackClosed[FragmentReader]:
        return self._tracker

    @abstractmethod
    def _read(self, size: int) -> bytes:
        """Read transformed data from the codec under test"""

    def submit(self, fragment: bytes) -> None:
        self._source.push(fragment)

    def finalize(self) -> None:
        if self.finalized:
            return
        _check_zero_size_read(self._read(0), self.kind)
        while True:
            data = self._read(self.read_size)
            if not data:
                break
            self._output += data
        self.finalized = True

    def output(self) -> bytes:
        return bytes(self._output)


class BufferedReaderAdapter(_PullAdapter):
    kind = IOKind.buffered_reader

    def __init__(self, transformer: Transformer, read_size: int = DEFAULT_READ_SIZE) -> None:
        super().__init__(transformer, read_size)
        self._reader = TransformReader(self._tracker, transformer, read_size=read_size)

    def _read(self, size: int) -> bytes:
        return self._reader.read(size)

    def close(self) -> None:
        self._reader.close()


class StreamAdapter(_PullAdapter):
    kind = IOKind.stream

    def __init__(self, transformer: Transformer, read_size: int = DEFAULT_READ_SIZE) -> None:
        super().__init__(transformer, read_size)
        self._stream = TransformStream(self._tracker, transformer, minimum_read_size=1)

    def _read(self, size: int) -> bytes:
        return self._stream.read(size)

    def close(self) -> None:
        self._stream.close()


class AsyncWriterAdapter(AsyncIOAdapter):
    kind = IOKind.async_writer

    def __init__(self, transformer: Transformer, read_size: int = DEFAULT_READ_SIZE) -> None:
        super().__init__(transformer, read_size)
        self._tracker: AsyncTrackClosed[AsyncOutputCollector] = AsyncTrackClosed(AsyncOutputCollector())
        self._writer = AsyncTransformWriter(self._tracker, transformer)

    @property
    def tracker(self) -> AsyncTrackClosed[AsyncOutputCollector]:
        return self._tracker

    async def submit(self, fragment: bytes) -> None:
        written = await self._writer.write(fragment)
        if written != len(fragment):
            raise OutputMismatchError(f"short write: {written} of {len(fragment)} bytes accepted")

    async def finalize(self) -> None:
        await self._writer.finish()
        self.finalized = True

    async def close(self) -> None:
        await self._writer.aclose()

    def output(self) -> bytes:
        return self._tracker.get_ref().getvalue()


class AsyncReaderAdapter(AsyncIOAdapter):
    kind = IOKind.async_reader

    def __init__(self, transformer: Transformer, read_size: int = DEFAULT_READ_SIZE) -> None:
        super().__init__(transformer, read_size)
        self._source = AsyncFragmentReader()
        self._tracker: AsyncTrackClosed[AsyncFragmentReader] = AsyncTrackClosed(self._source)
        self._reader = AsyncTransformReader(self._tracker, transformer, read_size=read_size)
        self._output = bytearray()

    @property
    def tracker(self) -> AsyncTrackClosed[AsyncFragmentReader]:
        return self._tracker

    async def submit(self, fragment: bytes) -> None:
        self._source.push(fragment)

    async def finalize(self) -> None:
        if self.finalized:
            return
        _check_zero_size_read(await self._reader.read(0), self.kind)
        while True:
            data = await self._reader.read(self.read_size)
            if not data:
                break
            self._output += data
        self.finalized = True

    async def close(self) -> None:
        await self._reader.aclose()

    def output(self) -> bytes:
        return bytes(self._output)


AnyAdapter = Union[IOAdapter, AsyncIOAdapter]


class IOAdapterSet:
    """Read-only mapping of I/O kinds to adapter classes"""

    def __init__(self, adapters: Dict[IOKind, Type[AnyAdapter]] | None = None) -> None:
        self._adapters: Dict[IOKind, Type[AnyAdapter]] = dict(adapters) if adapters is not None else dict(ADAPTERS)

    def kinds(self) -> Tuple[IOKind, ...]:
        return tuple(self._adapters)

    def create(self, kind: IOKind | str, transformer: Transformer, read_size: int = DEFAULT_READ_SIZE) -> AnyAdapter:
        io_kind = kind if isinstance(kind, IOKind) else IOKind.parse(kind)
        adapter_class = self._adapters.get(io_kind)
        if adapter_class is None:
            raise InvalidConfigurationError(f"unsupported I/O kind {io_kind!r}")
        adapter = adapter_class(transformer, read_size)
        LOG.debug("Created %s adapter %r", io_kind, adapter)
        return adapter


ADAPTERS: Dict[IOKind, Type[AnyAdapter]] = {
    IOKind.buffered_writer: BufferedWriterAdapter,
    IOKind.buffered_reader: BufferedReaderAdapter,
    IOKind.sink: SinkAdapter,
    IOKind.stream: StreamAdapter,
    IOKind.async_writer: AsyncWriterAdapter,
    IOKind.async_reader: AsyncReaderAdapter,
}
