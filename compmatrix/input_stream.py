# Copyright (c) 2024 Aiven, Helsinki, Finland. https://aiven.io/
# See LICENSE for details
"""compmatrix - synthetic chunked input and in-memory output

An `InputStream` holds a fixed logical payload as an explicit partition into
fragments. The same partition can be replayed any number of times, which lets
one payload be delivered in many different shapes without changing what is
compared at the end.
"""

from __future__ import annotations

from .chunking import split
from .common.models import ChunkingStrategy
from .typing import BinaryData
from collections import deque
from typing import Any, Deque, Iterable, Iterator, Optional

import asyncio


class InputStream:
    """Immutable, restartable sequence of byte fragments"""

    def __init__(self, fragments: Iterable[BinaryData]) -> None:
        self._fragments = tuple(bytes(fragment) for fragment in fragments)

    @classmethod
    def from_payload(cls, payload: bytes, strategy: ChunkingStrategy, **params: Any) -> InputStream:
        return cls(split(payload, strategy, **params))

    def fragments(self) -> Iterator[bytes]:
        """Return a fresh iterator positioned at the first fragment"""
        return iter(self._fragments)

    def flattened(self) -> bytes:
        return b"".join(self._fragments)

    @property
    def total_size(self) -> int:
        return sum(len(fragment) for fragment in self._fragments)

    def __iter__(self) -> Iterator[bytes]:
        return self.fragments()

    def __len__(self) -> int:
        return len(self._fragments)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, InputStream):
            return NotImplemented
        return self._fragments == other._fragments

    def __hash__(self) -> int:
        return hash(self._fragments)

    def __repr__(self) -> str:
        sizes = ", ".join(str(len(fragment)) for fragment in self._fragments[:8])
        if len(self._fragments) > 8:
            sizes += ", ..."
        return f"InputStream(fragments={len(self._fragments)}, sizes=[{sizes}], total={self.total_size})"


def one_to_six_stream() -> InputStream:
    return InputStream([[1, 2, 3], [4, 5, 6]])  # type: ignore[list-item]


def one_to_six() -> bytes:
    return bytes([1, 2, 3, 4, 5, 6])


class FragmentReader:
    """Presents queued fragments through a file-like `read`.

    Each read returns data from at most one fragment, so the consumer sees the
    same boundaries a network transport would produce. Empty fragments are skipped
    since an empty read means end of file. Once the queue is exhausted every read
    returns b"".
    """

    def __init__(self, fragments: Optional[Iterable[bytes]] = None) -> None:
        self._queue: Deque[bytes] = deque(fragment for fragment in fragments or () if fragment)
        self._current = memoryview(b"")
        self.reads = 0
        self.bytes_read = 0
        self.closed = False

    def push(self, fragment: BinaryData) -> None:
        fragment = bytes(fragment)
        if fragment:
            self._queue.append(fragment)

    def _next_chunk(self, size: Optional[int]) -> bytes:
        if not self._current and self._queue:
            self._current = memoryview(self._queue.popleft())
        if size is None or size < 0:
            size = len(self._current)
        data = bytes(self._current[:size])
        self._current = self._current[size:]
        self.bytes_read += len(data)
        return data

    def read(self, size: Optional[int] = -1) -> bytes:
        self.reads += 1
        if size == 0:
            return b""
        return self._next_chunk(size)

    def readable(self) -> bool:
        return True

    def close(self) -> None:
        self.closed = True


class AsyncFragmentReader(FragmentReader):
    """Same as FragmentReader, but every read is a suspension point"""

    async def read(self, size: Optional[int] = -1) -> bytes:  # type: ignore[override]
        await asyncio.sleep(0)
        return super().read(size)

    async def aclose(self) -> None:
        await asyncio.sleep(0)
        self.close()


class OutputCollector:
    """In-memory write target whose contents stay available after close"""

    def __init__(self) -> None:
        self._buffer = bytearray()
        self.writes = 0
        self.flushes = 0
        self.closed = False

    def write(self, data: BinaryData) -> int:
        data = memoryview(data).cast("B")
        self._buffer += data
        self.writes += 1
        return len(data)

    def writable(self) -> bool:
        return True

    def flush(self) -> None:
        self.flushes += 1

    def close(self) -> None:
        self.closed = True

    def getvalue(self) -> bytes:
        return bytes(self._buffer)


class AsyncOutputCollector(OutputCollector):
    async def write(self, data: BinaryData) -> int:  # type: ignore[override]
        await asyncio.sleep(0)
        return super().write(data)

    async def flush(self) -> None:  # type: ignore[override]
        await asyncio.sleep(0)
        super().flush()

    async def aclose(self) -> None:
        await asyncio.sleep(0)
        self.close()
